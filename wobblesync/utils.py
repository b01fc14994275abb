#!/usr/bin/env python3

# Imports {{{
# builtins
import hashlib
import logging
from traceback import format_exception
from typing import Iterable, NamedTuple, Optional
from urllib.parse import urlparse

# 3rd party
from faker import Faker

# local modules
from wobblesync.constants import BROTLI_SUPPORTED

# }}}


log = logging.getLogger(__name__)
faker = Faker()


def hash_keys(*keys: str) -> str:
    """
    Run a simple md5 hash over the passed keys, joined by a ':' delimiter.

    Used to derive stable topic and post IDs, not as a security measure.
    """
    digest = hashlib.md5()
    digest.update(":".join(keys).encode("utf-8"))
    return digest.hexdigest()


def shorten(text: str, max_length: int) -> str:
    """
    Cut the text down to max_length characters, appending "..." if anything
    was cut off. Not word-boundary aware.
    """
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def list_items(
    items: Iterable[NamedTuple], found_msg: str, not_found_msg: str, line_fmt: str
):
    items = list(items)
    if not items:
        log.info(not_found_msg)
        return

    log.info(found_msg)
    for item in items:
        log.info(line_fmt.format(**item._asdict()))


class Reporter(object):
    def __init__(self, success: str, failure: str, pre: Optional[str] = None):
        self.pre = pre
        self.success = success
        self.failure = failure
        self.failed = False

    def __enter__(self):
        if self.pre is not None:
            log.info(self.pre)
        return self

    def __exit__(self, exception_cls, exception, traceback):
        if exception is None:
            log.info(self.success)
        else:
            self.failed = True
            log.error(self.failure.format(exception=exception))
            return True  # suppress traceback


def get_traceback(exception: Exception):
    msg = format_exception(type(exception), exception, exception.__traceback__)
    return "".join(msg).strip()


def generate_headers(url):
    """
    A set of headers needed by some sites to actually respond correctly.

    Typically needed to avoid being stopped by anti-scraping measures.
    """
    headers = {
        "User-Agent": faker.user_agent(),
        "Upgrade-Insecure-Requests": "1",
        "Accept": "application/rss+xml,application/atom+xml,application/xml;q=0.9,text/html;q=0.8,*/*;q=0.7",
        "Accept-Encoding": "gzip, deflate" + (", br" if BROTLI_SUPPORTED else ""),
        "Accept-Language": "en-US,en;q=0.9",
        "Connection": "keep-alive",
        "Referer": "http://www.google.com/",
        "Host": urlparse(url).hostname,
    }
    return headers
