"""Tests for wobblesync.reconcile."""
from factories import FEED, make_channel, make_item, post_for, root_post
from wobblesync.compose import compose_post_content, compose_root_content
from wobblesync.enums import ChangeEvent, OperationKind
from wobblesync.reconcile import (
    index_items,
    item_post_id,
    reconcile,
    truncate_channel,
)
from wobblesync.structs import Post, Topic
from wobblesync.utils import hash_keys

TOPIC_ID = "topic"


def kinds(change):
    return [operation.kind for operation in change.operations]


class TestTruncateChannel:
    def test_keeps_first_items(self):
        items = [make_item(str(i)) for i in range(5)]
        channel = truncate_channel(make_channel(*items), 2)
        assert channel.items == items[:2]

    def test_no_limit(self):
        channel = make_channel(make_item("a"), make_item("b"))
        assert truncate_channel(channel, None) is channel

    def test_limit_above_item_count(self):
        channel = make_channel(make_item("a"))
        assert truncate_channel(channel, 10) is channel

    def test_zero_limit(self):
        channel = make_channel(make_item("a"))
        assert truncate_channel(channel, 0).items == []


class TestItemIndex:
    def test_post_id_is_hash_of_link_and_guid(self):
        channel = make_channel()
        item = make_item("guid-1")
        assert item_post_id(channel, item) == hash_keys(channel.link, "guid-1")

    def test_post_id_independent_of_order(self):
        a, b = make_item("a"), make_item("b")
        assert index_items(make_channel(a, b)).keys() == index_items(
            make_channel(b, a)
        ).keys()

    def test_duplicate_guid_first_wins(self):
        first = make_item("a", title="first")
        second = make_item("a", title="second")
        index = index_items(make_channel(first, second))
        assert list(index.values()) == [first]


class TestRootUpdate:
    def test_edits_root_when_content_differs(self):
        channel = make_channel()
        topic = Topic(TOPIC_ID, [root_post(content="old", revision_no=7)])

        plan = reconcile(FEED, topic, channel)

        assert plan.root.event is ChangeEvent.RootUpdated
        (edit,) = plan.root.operations
        assert edit.kind is OperationKind.EDIT
        assert edit.post_id == "1"
        assert edit.revision_no == 7
        assert edit.content == compose_root_content(FEED, channel)

    def test_no_edit_when_unchanged(self):
        channel = make_channel()
        topic = Topic(TOPIC_ID, [root_post(channel=channel)])
        assert reconcile(FEED, topic, channel).root is None

    def test_no_edit_without_root_content(self):
        topic = Topic(TOPIC_ID, [Post("1", content=None)])
        assert reconcile(FEED, topic, make_channel()).root is None

    def test_no_edit_without_root_post(self):
        assert reconcile(FEED, Topic(TOPIC_ID, []), make_channel()).root is None

    def test_idempotent_after_applying_root_edit(self):
        channel = make_channel()
        topic = Topic(TOPIC_ID, [root_post(content="old")])
        edit = reconcile(FEED, topic, channel).root.operations[0]

        updated = Topic(TOPIC_ID, [root_post(content=edit.content)])
        assert reconcile(FEED, updated, channel).root is None


class TestOutdatedPosts:
    def setup_method(self):
        self.gone = make_item("gone")
        self.channel = make_channel(make_item("a"))
        self.old_channel = make_channel(self.gone)

    def plan_with(self, post):
        topic = Topic(TOPIC_ID, [root_post(channel=self.channel), post])
        return reconcile(FEED, topic, self.channel)

    def test_read_post_of_vanished_item_is_deleted(self):
        post = post_for(self.old_channel, self.gone)
        plan = self.plan_with(post)

        (change,) = plan.deletions
        assert change.event is ChangeEvent.Outdated
        assert change.post_id == post.id
        assert kinds(change) == [OperationKind.DELETE]

    def test_unread_post_is_kept(self):
        post = post_for(self.old_channel, self.gone, unread=True)
        assert self.plan_with(post).deletions == []

    def test_deleted_post_is_not_deleted_again(self):
        post = post_for(self.old_channel, self.gone, deleted=True)
        assert self.plan_with(post).deletions == []

    def test_root_post_is_never_deleted(self):
        topic = Topic(TOPIC_ID, [root_post(channel=make_channel())])
        assert reconcile(FEED, topic, make_channel()).deletions == []

    def test_posts_of_current_items_are_kept(self):
        a = self.channel.items[0]
        assert self.plan_with(post_for(self.channel, a)).deletions == []


class TestNewItems:
    def test_creates_edits_and_marks_unread(self):
        item = make_item("c")
        channel = make_channel(item)
        topic = Topic(TOPIC_ID, [root_post(channel=channel)])

        plan = reconcile(FEED, topic, channel)

        (change,) = plan.creations
        post_id = item_post_id(channel, item)
        assert change.event is ChangeEvent.New
        assert change.item == item
        create, edit, mark = change.operations
        assert (create.kind, create.post_id, create.parent_id) == (
            OperationKind.CREATE,
            post_id,
            "1",
        )
        assert (edit.kind, edit.post_id, edit.revision_no) == (
            OperationKind.EDIT,
            post_id,
            1,
        )
        assert edit.content == compose_post_content(item)
        assert (mark.kind, mark.post_id) == (OperationKind.MARK_UNREAD, post_id)

    def test_creations_follow_feed_order(self):
        items = [make_item(guid) for guid in "xyz"]
        channel = make_channel(*items)
        plan = reconcile(FEED, Topic(TOPIC_ID, []), channel)
        assert [change.item for change in plan.creations] == items

    def test_existing_deleted_post_is_not_recreated(self):
        item = make_item("a")
        channel = make_channel(item)
        topic = Topic(TOPIC_ID, [post_for(channel, item, deleted=True, content=None)])
        assert reconcile(FEED, topic, channel).creations == []

    def test_duplicate_guids_create_one_post(self):
        channel = make_channel(make_item("a"), make_item("a", title="again"))
        plan = reconcile(FEED, Topic(TOPIC_ID, []), channel)
        assert len(plan.creations) == 1


class TestChangedItems:
    def test_unchanged_post_is_left_alone(self):
        item = make_item("a")
        channel = make_channel(item)
        topic = Topic(TOPIC_ID, [root_post(channel=channel), post_for(channel, item)])

        plan = reconcile(FEED, topic, channel)

        assert plan.updates == []
        assert not plan

    def test_changed_content_is_edited_then_marked_unread(self):
        item = make_item("a")
        channel = make_channel(item)
        post = post_for(channel, item, content="stale", revision_no=5)
        topic = Topic(TOPIC_ID, [root_post(channel=channel), post])

        plan = reconcile(FEED, topic, channel)

        (change,) = plan.updates
        assert change.event is ChangeEvent.Changed
        edit, mark = change.operations
        assert (edit.kind, edit.post_id, edit.revision_no) == (
            OperationKind.EDIT,
            post.id,
            5,
        )
        assert edit.content == compose_post_content(item)
        assert (mark.kind, mark.post_id) == (OperationKind.MARK_UNREAD, post.id)

    def test_post_without_content_is_skipped(self):
        item = make_item("a")
        channel = make_channel(item)
        topic = Topic(TOPIC_ID, [post_for(channel, item, content=None)])
        plan = reconcile(FEED, topic, channel)
        assert plan.updates == []
        assert plan.creations == []


class TestSyncPlan:
    def test_max_items_turns_dropped_items_into_deletions(self):
        items = [make_item(str(i)) for i in range(5)]
        full = make_channel(*items)
        posts = [post_for(full, item) for item in items]
        topic = Topic(TOPIC_ID, [root_post(channel=full), *posts])

        plan = reconcile(FEED, topic, truncate_channel(full, 2))

        assert [change.post_id for change in plan.deletions] == [
            post.id for post in posts[2:]
        ]
        assert plan.creations == []
        assert plan.updates == []

    def test_end_to_end_scenario(self):
        a, b, c = make_item("A"), make_item("B"), make_item("C")
        old = make_channel(a, b)
        new = make_channel(a, c)
        p_a, p_b = post_for(old, a), post_for(old, b)
        topic = Topic(TOPIC_ID, [root_post(content="old root"), p_a, p_b])

        plan = reconcile(FEED, topic, new)

        assert plan.root is not None
        assert [change.post_id for change in plan.deletions] == [p_b.id]
        assert [change.post_id for change in plan.creations] == [
            item_post_id(new, c)
        ]
        assert plan.updates == []
        assert p_a.id not in {operation.post_id for operation in plan.operations}

    def test_operations_are_ordered(self):
        a, b, c = make_item("A"), make_item("B"), make_item("C")
        old = make_channel(a, b)
        new = make_channel(a, c)
        topic = Topic(
            TOPIC_ID,
            [
                root_post(content="old root"),
                post_for(old, a, content="stale"),
                post_for(old, b),
            ],
        )

        plan = reconcile(FEED, topic, new)

        assert [change.event for change in plan.changes] == [
            ChangeEvent.RootUpdated,
            ChangeEvent.Outdated,
            ChangeEvent.New,
            ChangeEvent.Changed,
        ]
        assert [operation.kind for operation in plan.operations] == [
            OperationKind.EDIT,
            OperationKind.DELETE,
            OperationKind.CREATE,
            OperationKind.EDIT,
            OperationKind.MARK_UNREAD,
            OperationKind.EDIT,
            OperationKind.MARK_UNREAD,
        ]
        assert all(operation.topic_id == TOPIC_ID for operation in plan.operations)
