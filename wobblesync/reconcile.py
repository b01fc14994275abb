#!/usr/bin/env python3

"""
Diffing of a feed's items against the posts of its Wobble topic.

Each feed item maps onto the post whose ID is hash_keys(channel link, GUID).
From that mapping the reconciler derives which posts to delete, which to
create and which to rewrite. Nothing in here talks to the network.
"""

# Imports {{{
# builtins
import logging
from typing import Dict, List, Optional

# local modules
from wobblesync.compose import compose_post_content, compose_root_content
from wobblesync.constants import NEW_POST_REVISION, ROOT_POST_ID
from wobblesync.enums import ChangeEvent, OperationKind
from wobblesync.structs import (
    Change,
    Channel,
    FeedItem,
    FeedSource,
    Operation,
    SyncPlan,
    Topic,
)
from wobblesync.utils import hash_keys

# }}}


log = logging.getLogger(__name__)


def item_post_id(channel: Channel, item: FeedItem) -> str:
    return hash_keys(channel.link, item.guid)


def truncate_channel(channel: Channel, max_items: Optional[int]) -> Channel:
    """
    Keep only the first max_items items of the channel, if a limit is set.
    """
    if max_items is None or len(channel.items) <= max_items:
        return channel
    return channel._replace(items=channel.items[:max_items])


def index_items(channel: Channel) -> Dict[str, FeedItem]:
    """
    Map post IDs to feed items, in feed order. The first item wins when two
    items share a GUID.
    """
    index: Dict[str, FeedItem] = {}
    for item in channel.items:
        index.setdefault(item_post_id(channel, item), item)
    return index


def plan_root_update(feed: FeedSource, topic: Topic, channel: Channel) -> Optional[Change]:
    root = topic.root
    if root is None or root.content is None:
        return None

    content = compose_root_content(feed, channel)
    if root.content == content:
        return None

    edit = Operation(
        OperationKind.EDIT, topic.id, ROOT_POST_ID, content, root.revision_no
    )
    return Change(ChangeEvent.RootUpdated, ROOT_POST_ID, [edit])


def filter_outdated_posts(topic: Topic, items: Dict[str, FeedItem]) -> List[Change]:
    outdated = []
    for post in topic.posts:
        if (
            post.id == ROOT_POST_ID  # we always keep the root post
            or post.deleted  # no need to re-delete
            or post.unread  # skip if the user hasn't read it yet
        ):
            continue
        if post.id not in items:
            delete = Operation(OperationKind.DELETE, topic.id, post.id)
            outdated.append(Change(ChangeEvent.Outdated, post.id, [delete]))

    return outdated


def filter_new_items(topic: Topic, items: Dict[str, FeedItem]) -> List[Change]:
    existing = topic.index
    new = []
    for post_id, item in items.items():
        if post_id in existing:
            continue

        operations = [
            Operation(OperationKind.CREATE, topic.id, post_id, parent_id=ROOT_POST_ID),
            Operation(
                OperationKind.EDIT,
                topic.id,
                post_id,
                compose_post_content(item),
                NEW_POST_REVISION,
            ),
            Operation(OperationKind.MARK_UNREAD, topic.id, post_id),
        ]
        new.append(Change(ChangeEvent.New, post_id, operations, item))

    return new


def filter_changed_items(topic: Topic, items: Dict[str, FeedItem]) -> List[Change]:
    existing = topic.index
    changed = []
    for post_id, item in items.items():
        post = existing.get(post_id)
        # posts without any content are left to whoever created them
        if post is None or post.content is None:
            continue

        content = compose_post_content(item)
        if post.content == content:
            continue

        operations = [
            Operation(OperationKind.EDIT, topic.id, post_id, content, post.revision_no),
            Operation(OperationKind.MARK_UNREAD, topic.id, post_id),
        ]
        changed.append(Change(ChangeEvent.Changed, post_id, operations, item))

    return changed


def reconcile(feed: FeedSource, topic: Topic, channel: Channel) -> SyncPlan:
    """
    Compute everything that has to happen for the topic to mirror the channel.

    The channel should already be cut down to the feed's max_items; items past
    that limit count as gone, so their posts become candidates for deletion.
    """
    items = index_items(channel)
    plan = SyncPlan(
        topic_id=topic.id,
        root=plan_root_update(feed, topic, channel),
        deletions=filter_outdated_posts(topic, items),
        creations=filter_new_items(topic, items),
        updates=filter_changed_items(topic, items),
    )

    log.debug(
        f"Plan for {feed.label}: root update: {plan.root is not None}, "
        f"{len(plan.deletions)} deletions, {len(plan.creations)} creations, "
        f"{len(plan.updates)} updates"
    )
    return plan
