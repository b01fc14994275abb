#!/usr/bin/env python3

# Imports {{{
# builtins
import json
import logging
import pathlib
from typing import Any, Dict, List, NamedTuple

# local modules
from wobblesync.constants import DEFAULT_SETTINGS, MAX_CONFIG_SIZE
from wobblesync.exceptions import ConfigError
from wobblesync.structs import FeedSource

# }}}


log = logging.getLogger(__name__)


TEMPLATE = {
    "wobble": {
        "endpoint": "https://wobble.example.com/api/endpoint",
        "username": "me@example.com",
        "password": "secret",
    },
    "feeds": [
        {"name": "Example", "url": "https://example.com/feed.xml", "max-items": 10},
    ],
    "settings": dict(DEFAULT_SETTINGS),
}


class ServiceConfig(NamedTuple):
    endpoint: str
    username: str
    password: str


class Configuration(NamedTuple):
    wobble: ServiceConfig
    feeds: List[FeedSource]
    settings: Dict[str, Any]


def load_config(path: pathlib.Path) -> Configuration:
    """
    Read and validate a JSON configuration file.

    Anything larger than MAX_CONFIG_SIZE is rejected without being parsed.
    """
    try:
        with open(path, "rb") as file:
            data = file.read(MAX_CONFIG_SIZE + 1)
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    if len(data) > MAX_CONFIG_SIZE:
        raise ConfigError(f"Configuration file {path} is huge! Aborting parsing!")

    try:
        raw = json.loads(data)
    except ValueError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    config = parse_config(raw)
    log.debug(f"Loaded {len(config.feeds)} feeds from {path}")
    return config


def parse_config(raw: Any) -> Configuration:
    if not isinstance(raw, dict):
        raise ConfigError("Configuration must be a JSON object")

    wobble = raw.get("wobble")
    if not isinstance(wobble, dict):
        raise ConfigError('Missing "wobble" section')
    try:
        service = ServiceConfig(
            endpoint=_string(wobble, "endpoint"),
            username=_string(wobble, "username"),
            password=_string(wobble, "password"),
        )
    except KeyError as e:
        raise ConfigError(f'Missing "wobble.{e.args[0]}"') from e

    feeds = raw.get("feeds", [])
    if not isinstance(feeds, list):
        raise ConfigError('"feeds" must be a list')

    settings = raw.get("settings", {})
    if not isinstance(settings, dict):
        raise ConfigError('"settings" must be an object')
    unknown = set(settings) - set(DEFAULT_SETTINGS)
    if unknown:
        raise ConfigError(f"Unknown settings: {', '.join(sorted(unknown))}")
    for key, value in settings.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ConfigError(f'Setting "{key}" must be a non-negative number')

    return Configuration(
        wobble=service,
        feeds=[parse_feed(index, feed) for index, feed in enumerate(feeds)],
        settings={**DEFAULT_SETTINGS, **settings},
    )


def parse_feed(index: int, raw: Any) -> FeedSource:
    if not isinstance(raw, dict) or not isinstance(raw.get("url"), str):
        raise ConfigError(f'Feed #{index} needs a "url"')

    name = raw.get("name")
    if name is not None and not isinstance(name, str):
        raise ConfigError(f'Feed #{index}: "name" must be a string')

    max_items = raw.get("max-items")
    if max_items is not None and (
        isinstance(max_items, bool) or not isinstance(max_items, int) or max_items < 0
    ):
        raise ConfigError(f'Feed #{index}: "max-items" must be a non-negative integer')

    return FeedSource(url=raw["url"], name=name, max_items=max_items)


def _string(section: dict, key: str) -> str:
    value = section[key]
    if not isinstance(value, str):
        raise ConfigError(f'"{key}" must be a string')
    return value


def write_template(path: pathlib.Path, force: bool = False):
    if path.exists() and not force:
        raise FileExistsError(f"{path} already exists")

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as file:
        json.dump(TEMPLATE, file, indent=4)
