#!/usr/bin/env python3

"""
Drives the synchronization of feeds into Wobble topics.

For every feed the topic with ID hash_keys(feed url, username) is fetched
(or created), the feed is downloaded, the two are reconciled, and the
resulting plan is applied one step at a time. Each feed is independent: a
failure while syncing one feed never stops the others.
"""

# Imports {{{
# builtins
import logging
from typing import Callable, List, Optional

# local modules
from wobblesync.config import Configuration
from wobblesync.enums import ChangeEvent, OperationKind
from wobblesync.exceptions import (
    FetchError,
    NotFound,
    OperationError,
    ServiceError,
    TopicResolutionError,
)
from wobblesync.pacing import NullPacer, Pacer
from wobblesync.reconcile import reconcile, truncate_channel
from wobblesync.remote import fetch_channel
from wobblesync.structs import (
    Change,
    Channel,
    FeedSource,
    Operation,
    SyncPlan,
    SyncReport,
    Topic,
)
from wobblesync.utils import get_traceback, hash_keys
from wobblesync.wobble import WobbleClient

# }}}


log = logging.getLogger(__name__)


Fetcher = Callable[[str], Channel]


class FeedSynchronizer(object):
    def __init__(
        self,
        client: WobbleClient,
        username: str,
        pacer: Optional[Pacer] = None,
        fetch: Fetcher = fetch_channel,
        dry_run: bool = False,
    ):
        self.client = client
        self.username = username
        self.pacer = pacer if pacer is not None else Pacer()
        self.fetch = fetch
        self.dry_run = dry_run

    def topic_id(self, feed: FeedSource) -> str:
        return hash_keys(feed.url, self.username)

    def resolve_topic(self, feed: FeedSource) -> Topic:
        """
        Fetch the feed's topic, creating it first if it doesn't exist yet.
        """
        topic_id = self.topic_id(feed)
        try:
            return self.client.get_topic(topic_id)
        except NotFound:
            if self.dry_run:
                log.info(f"Topic {topic_id} does not exist yet, would create it.")
                return Topic(topic_id, [])
            log.info(f"Creating topic {topic_id} for {feed.label}")
        except ServiceError as e:
            raise TopicResolutionError(f"Failed to fetch topic {topic_id}: {e}") from e

        try:
            self.client.create_topic(topic_id)
            return self.client.get_topic(topic_id)
        except ServiceError as e:
            raise TopicResolutionError(f"Failed to create topic {topic_id}: {e}") from e

    def plan(self, feed: FeedSource) -> SyncPlan:
        topic = self.resolve_topic(feed)
        channel = truncate_channel(self.fetch(feed.url), feed.max_items)
        return reconcile(feed, topic, channel)

    def sync(self, feed: FeedSource) -> SyncReport:
        """
        Bring the feed's topic up to date.

        Raises TopicResolutionError or FetchError if the feed can't be synced
        at all. Failing operations are logged and reported, never raised.
        """
        plan = self.plan(feed)
        if not plan:
            log.info(f"{feed.label} is up to date.")
            return SyncReport(feed, plan, [], [])

        if self.dry_run:
            for change in plan.changes:
                log.info(f"Would apply {change.event.value} change to post {change.post_id}:")
                for operation in change.operations:
                    log.info(f"  {operation}")
            return SyncReport(feed, plan, [], [])

        applied: List[Operation] = []
        failed = []
        for change in plan.changes:
            self.pacer.wait()
            self.announce(change)
            for operation in change.operations:
                try:
                    self.execute(operation)
                except OperationError as e:
                    log.error(
                        f"Failed to {operation.kind.value} post. "
                        f"f: {feed.url} t: {operation.topic_id} p: {operation.post_id} - {e.cause}"
                    )
                    failed.append((operation, e.cause))
                    if change.event is ChangeEvent.New:
                        break  # nothing to edit without the created post
                    continue
                applied.append(operation)

        log.info(
            f"Synced {feed.label}: {len(applied)} operations applied, {len(failed)} failed."
        )
        return SyncReport(feed, plan, applied, failed)

    def announce(self, change: Change):
        if change.event is ChangeEvent.New:
            log.info(f"Creating new post for channel item {change.item.guid}")
        elif change.event is ChangeEvent.Changed:
            log.info(f"Updating post for changed channel item {change.item.guid}")
        elif change.event is ChangeEvent.Outdated:
            log.info(f"Deleting outdated post {change.post_id}")
        else:
            log.info("Updating root post")

    def execute(self, operation: Operation):
        """
        Send a single operation to the Wobble service.
        """
        try:
            if operation.kind is OperationKind.CREATE:
                self.client.create_post(
                    operation.topic_id, operation.post_id, operation.parent_id, True
                )
            elif operation.kind is OperationKind.EDIT:
                self.client.edit_post(
                    operation.topic_id,
                    operation.post_id,
                    operation.content,
                    operation.revision_no,
                )
            elif operation.kind is OperationKind.DELETE:
                self.client.delete_post(operation.topic_id, operation.post_id)
            elif operation.kind is OperationKind.MARK_UNREAD:
                self.client.change_post_read(
                    operation.topic_id, operation.post_id, False
                )
            else:
                raise ValueError(f"Unknown operation: {operation.kind}")
        except ServiceError as e:
            raise OperationError(operation, e) from e


def run(
    config: Configuration,
    client: WobbleClient,
    pacer: Optional[Pacer] = None,
    fetch: Fetcher = fetch_channel,
    dry_run: bool = False,
) -> List[SyncReport]:
    """
    Sync every configured feed, one after another, within a single login.

    Raises AuthError if the login fails; nothing is synced in that case.
    """
    if pacer is None:
        pacer = NullPacer() if dry_run else Pacer(config.settings["pacing_delay"])

    reports = []
    with client.session_for(config.wobble.username, config.wobble.password):
        synchronizer = FeedSynchronizer(
            client, config.wobble.username, pacer, fetch, dry_run
        )
        for feed in config.feeds:
            log.info(f"Syncing feed {feed.url}...")
            try:
                reports.append(synchronizer.sync(feed))
            except (TopicResolutionError, FetchError) as e:
                log.error(f"Skipping {feed.label}: {e}")
            except Exception as e:
                log.error(f"Encountered exception for {feed.label}:\n{get_traceback(e)}")

    return reports
