#!/usr/bin/env python3

# Imports {{{
# builtins
from typing import Dict, List, NamedTuple, Optional, Tuple

# local modules
from wobblesync.constants import ROOT_POST_ID
from wobblesync.enums import ChangeEvent, OperationKind

# }}}


class FeedSource(NamedTuple):
    """
    An RSS/Atom feed to mirror, as configured by the user.
    """

    url: str
    name: Optional[str] = None
    max_items: Optional[int] = None

    @property
    def label(self):
        return self.name if self.name is not None else self.url


class FeedItem(NamedTuple):
    guid: str
    title: str
    link: str
    pub_date: str
    description: str
    content: Optional[str] = None


class Channel(NamedTuple):
    title: str
    description: str
    link: str
    items: List[FeedItem]


class Post(NamedTuple):
    """
    A post inside a Wobble topic.

    `content` is None for posts that never had any content written.
    """

    id: str
    content: Optional[str] = None
    revision_no: int = 1
    unread: bool = False
    deleted: bool = False

    @classmethod
    def from_json(cls, data: dict):
        return cls(
            id=str(data["id"]),
            content=data.get("content"),
            revision_no=int(data.get("revision_no", 1)),
            unread=bool(data.get("unread", 0)),
            deleted=bool(data.get("deleted", 0)),
        )


class Topic(NamedTuple):
    id: str
    posts: List[Post]

    @property
    def root(self) -> Optional[Post]:
        return self.index.get(ROOT_POST_ID)

    @property
    def index(self) -> Dict[str, Post]:
        """
        Posts keyed by their ID. The first post wins on duplicate IDs.
        """
        index: Dict[str, Post] = {}
        for post in self.posts:
            index.setdefault(post.id, post)
        return index

    @classmethod
    def from_json(cls, topic_id: str, data: dict):
        return cls(
            id=str(data.get("id", topic_id)),
            posts=[Post.from_json(post) for post in data.get("posts") or []],
        )


class Operation(NamedTuple):
    """
    One mutating call against the Wobble service.
    """

    kind: OperationKind
    topic_id: str
    post_id: str
    content: Optional[str] = None
    revision_no: Optional[int] = None
    parent_id: Optional[str] = None

    def __str__(self):
        return f"{self.kind.value} t: {self.topic_id} p: {self.post_id}"


class Change(NamedTuple):
    """
    The operations needed to bring one post in line with the feed.

    Operations run in order. When creating a post fails, the rest of a New
    change is skipped; other changes carry on with their next operation.
    """

    event: ChangeEvent
    post_id: str
    operations: List[Operation]
    item: Optional[FeedItem] = None


class SyncPlan(NamedTuple):
    topic_id: str
    root: Optional[Change]
    deletions: List[Change]
    creations: List[Change]
    updates: List[Change]

    def __bool__(self):
        return any(self.changes)

    @property
    def changes(self) -> List[Change]:
        root = [self.root] if self.root is not None else []
        return [*root, *self.deletions, *self.creations, *self.updates]

    @property
    def operations(self) -> List[Operation]:
        return [operation for change in self.changes for operation in change.operations]


class SyncReport(NamedTuple):
    feed: FeedSource
    plan: SyncPlan
    applied: List[Operation]
    failed: List[Tuple[Operation, Exception]]

    def __bool__(self):
        return bool(self.plan)
