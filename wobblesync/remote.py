#!/usr/bin/env python3

# Imports {{{
# builtins
import logging
import operator
from datetime import datetime
from email.utils import format_datetime
from typing import Optional, Union

# 3rd party
import requests
from atoma import parse_atom_bytes, parse_rss_bytes
from atoma.atom import AtomEntry, AtomFeed
from atoma.exceptions import FeedDocumentError, FeedParseError
from atoma.rss import RSSChannel, RSSItem

# local modules
from wobblesync.constants import DEFAULT_SETTINGS
from wobblesync.exceptions import FetchError
from wobblesync.structs import Channel, FeedItem
from wobblesync.utils import generate_headers

# }}}


log = logging.getLogger(__name__)


class RemoteFeed(object):
    """
    Simple interface to either an RSS or Atom feed.

    Some resources:
    https://validator.w3.org/feed/docs/rss2.html
    https://validator.w3.org/feed/docs/atom.html
    """

    def __init__(
        self,
        url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_SETTINGS["timeout"],
    ):
        self.url = url
        self.session = session
        self.timeout = timeout
        self._raw = None

    @property
    def _feed(self) -> Union[RSSChannel, AtomFeed]:
        if self._raw is None:
            raise RuntimeError(
                "You need to call the load() method first to actually fetch the feed."
            )
        return self._raw

    def load(self):
        self._raw = self.parse(self.fetch())

    def fetch(self) -> bytes:
        get = self.session.get if self.session is not None else requests.get
        resp = get(self.url, headers=generate_headers(self.url), timeout=self.timeout)
        resp.raise_for_status()
        return resp.content

    @staticmethod
    def parse(content: bytes) -> Union[RSSChannel, AtomFeed]:
        try:
            return parse_rss_bytes(content)
        except FeedParseError:
            log.debug("Not an RSS 2.0 document, trying Atom")
            return parse_atom_bytes(content)

    @property
    def type(self):
        return "atom" if isinstance(self._feed, AtomFeed) else "rss"

    @property
    def title(self) -> str:
        if isinstance(self._feed, AtomFeed):
            return _text(self._feed.title)
        return self._feed.title or ""

    @property
    def description(self) -> str:
        if isinstance(self._feed, AtomFeed):
            return _text(self._feed.subtitle)
        return self._feed.description or ""

    @property
    def link(self) -> str:
        if isinstance(self._feed, AtomFeed):
            return _alternate_link(self._feed.links) or self._feed.id_
        return self._feed.link or ""

    @property
    def items(self):
        raw = (
            self._feed.entries if isinstance(self._feed, AtomFeed) else self._feed.items
        )
        return [RemoteItem(self, entry) for entry in raw]

    def as_channel(self) -> Channel:
        return Channel(
            title=self.title,
            description=self.description,
            link=self.link,
            items=[item.as_item() for item in self.items],
        )

    def __repr__(self):
        return f"{self.__class__.__name__}(url={repr(self.url)})"


class RemoteItem(object):
    """
    Abstraction of an item / entry from a feed.
    """

    _mappings = {
        "guid": {AtomEntry: "id_", RSSItem: "guid"},
        "title": {AtomEntry: "title", RSSItem: "title"},
        "publish_date": {AtomEntry: "updated", RSSItem: "pub_date"},
    }

    def __init__(self, feed: RemoteFeed, entry: Union[AtomEntry, RSSItem]):
        self.feed = feed
        self.raw = entry

    def _get(self, name):
        getter = operator.attrgetter(self._mappings[name][self.raw.__class__])
        return getter(self.raw)

    @property
    def link(self) -> str:
        if isinstance(self.raw, AtomEntry):
            return _alternate_link(self.raw.links) or ""
        return self.raw.link or ""

    @property
    def guid(self) -> str:
        # items without a GUID are identified by their link
        return self._get("guid") or self.link

    @property
    def title(self) -> str:
        return _text(self._get("title"))

    @property
    def publish_date(self) -> str:
        date = self._get("publish_date")
        if isinstance(date, datetime):
            return format_datetime(date)
        return date or ""

    @property
    def description(self) -> str:
        if isinstance(self.raw, AtomEntry):
            return _text(self.raw.summary)
        return self.raw.description or ""

    @property
    def content(self) -> Optional[str]:
        if isinstance(self.raw, AtomEntry):
            return _text(self.raw.content) or None
        return getattr(self.raw, "content_encoded", None) or None

    def as_item(self) -> FeedItem:
        return FeedItem(
            guid=self.guid,
            title=self.title,
            link=self.link,
            pub_date=self.publish_date,
            description=self.description,
            content=self.content,
        )

    def __repr__(self):
        return f"{self.__class__.__name__}({repr(self.title)})"


def _text(value) -> str:
    """
    Atom text constructs carry their text in .value, RSS fields are plain str.
    """
    if value is None:
        return ""
    return getattr(value, "value", value) or ""


def _alternate_link(links) -> Optional[str]:
    links = links or []
    preferred = [link for link in links if link.rel in (None, "alternate")]
    found = next(iter(preferred or links), None)
    return found.href if found is not None else None


def fetch_channel(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_SETTINGS["timeout"],
) -> Channel:
    """
    Download and parse a feed, raising FetchError if either step fails.
    """
    feed = RemoteFeed(url, session, timeout)
    try:
        feed.load()
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e
    except (FeedParseError, FeedDocumentError) as e:
        raise FetchError(f"Failed to parse {url}: {e}") from e

    channel = feed.as_channel()
    log.debug(f"Fetched {feed.type} feed {url} with {len(channel.items)} items")
    return channel
