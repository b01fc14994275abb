"""Shared fixtures for the wobblesync tests."""
import pytest

from factories import FEED, USERNAME, FakeClient, make_channel, make_item
from wobblesync.pacing import NullPacer
from wobblesync.sync import FeedSynchronizer
from wobblesync.utils import hash_keys


@pytest.fixture()
def topic_id():
    return hash_keys(FEED.url, USERNAME)


@pytest.fixture()
def channel():
    return make_channel(make_item("a"), make_item("b"))


@pytest.fixture()
def client():
    return FakeClient()


@pytest.fixture()
def fetcher(channel):
    """A fetcher that always returns the `channel` fixture and records URLs."""
    urls = []

    def fetch(url):
        urls.append(url)
        return channel

    fetch.urls = urls
    return fetch


@pytest.fixture()
def synchronizer(client, fetcher):
    return FeedSynchronizer(client, USERNAME, NullPacer(), fetcher)

