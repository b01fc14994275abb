#!/usr/bin/env python3

"""
Rendering of feed data into the markup shown inside Wobble posts.

The layout is fixed; any change to it makes every existing post look outdated
and triggers an edit on the next sync.
"""

# Imports {{{
# local modules
from wobblesync.constants import URL_DISPLAY_LENGTH
from wobblesync.structs import Channel, FeedItem, FeedSource
from wobblesync.utils import shorten

# }}}


# fixed entity spellings for the post layout, unlike html.escape
_ESCAPES = str.maketrans(
    {
        "\0": "\ufffd",
        '"': "&#34;",
        "'": "&#39;",
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
    }
)


def escape(text: str) -> str:
    return text.translate(_ESCAPES)


def compose_root_content(feed: FeedSource, channel: Channel) -> str:
    """
    Build the body of a topic's root post, which describes the feed itself.
    """
    title = feed.name if feed.name is not None else channel.title
    return (
        f"<div>[FEED] <b>{title}</b></div><br><br>"
        f"<p>{channel.description}</p>"
        f'<a href="{channel.link}">Homepage</a>'
    )


def compose_post_content(item: FeedItem) -> str:
    body = item.content if item.content else item.description
    return (
        f"<div>{escape(item.title)}</div>"
        "<p>"
        f"<b>Datum:</b> {item.pub_date}<br>"
        f'<b>URL:</b> <a href="{item.link}">{shorten(item.link, URL_DISPLAY_LENGTH)}</a>'
        "</p>"
        f"<br /><p>{body}</p>"
    )
