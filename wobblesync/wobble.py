#!/usr/bin/env python3

# Imports {{{
# builtins
import itertools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Optional

# 3rd party
import requests

# local modules
from wobblesync.constants import (
    DEFAULT_SETTINGS,
    ROOT_POST_ID,
    RPC_CONFLICT,
    RPC_NOT_FOUND,
)
from wobblesync.exceptions import (
    AuthError,
    ConflictError,
    NotFound,
    ServiceError,
    TransportError,
)
from wobblesync.structs import Post, Topic

# }}}


log = logging.getLogger(__name__)


def _as_dict(result) -> dict:
    return result if isinstance(result, dict) else {}


def _parse(method: str, parser: Callable, *args):
    """
    Build a Topic or Post from a reply, turning malformed replies into
    TransportErrors.
    """
    try:
        return parser(*args)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise TransportError(f"{method}: malformed result: {e!r}") from e


class WobbleClient(object):
    """
    Minimal JSON-RPC client for the Wobble API.

    Logging in yields an API key that is attached to every further request.
    """

    _errors = {
        RPC_NOT_FOUND: NotFound,
        RPC_CONFLICT: ConflictError,
    }

    def __init__(
        self,
        endpoint: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_SETTINGS["timeout"],
    ):
        self.endpoint = endpoint
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.apikey: Optional[str] = None
        self._ids = itertools.count(1)

    def call(self, method: str, **params) -> Any:
        """
        Issue a single JSON-RPC call and return its result.

        Raises NotFound or ConflictError for the matching RPC error codes, and
        TransportError for everything else that goes wrong.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        query = {"apikey": self.apikey} if self.apikey is not None else None

        log.debug(f"RPC {method} {sorted(params)}")
        try:
            resp = self.session.post(
                self.endpoint, json=payload, params=query, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TransportError(f"{method}: {e}") from e

        if resp.status_code == 404:
            raise NotFound(f"{method}: endpoint returned 404", code=404)
        if not resp.ok:
            raise TransportError(
                f"{method}: HTTP {resp.status_code}", code=resp.status_code
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(f"{method}: invalid JSON response") from e

        if not isinstance(data, dict):
            raise TransportError(f"{method}: unexpected response {data!r}")

        error = data.get("error")
        if error and not isinstance(error, dict):
            raise TransportError(f"{method}: {error!r}")
        if error:
            code = error.get("code")
            message = f"{method}: {error.get('message', 'unknown error')}"
            raise self._errors.get(code, TransportError)(message, code=code)

        return data.get("result")

    def login(self, username: str, password: str):
        try:
            result = self.call("user_login", email=username, password=password)
        except ServiceError as e:
            raise AuthError(f"Failed to log in as {username}: {e}") from e

        if not result or "apikey" not in result:
            raise AuthError(f"Failed to log in as {username}: no API key returned")
        self.apikey = result["apikey"]
        log.debug(f"Logged in as {username}")

    def logout(self):
        try:
            self.call("user_signout")
        finally:
            self.apikey = None

    @contextmanager
    def session_for(self, username: str, password: str):
        """
        Log in for the duration of the block, always logging out afterwards.
        """
        self.login(username, password)
        try:
            yield self
        finally:
            try:
                self.logout()
            except ServiceError as e:
                log.warning(f"Failed to log out cleanly: {e}")

    def get_topic(self, topic_id: str) -> Topic:
        result = self.call("topic_get_details", id=topic_id)
        if result is None:
            raise NotFound(f"topic_get_details: topic {topic_id} not found", RPC_NOT_FOUND)
        return _parse("topic_get_details", Topic.from_json, topic_id, result)

    def create_topic(self, topic_id: str):
        self.call("topic_create", id=topic_id)

    def create_post(
        self,
        topic_id: str,
        post_id: str,
        parent_id: str = ROOT_POST_ID,
        intended_reply: bool = True,
    ) -> Post:
        result = self.call(
            "post_create",
            topic_id=topic_id,
            post_id=post_id,
            parent_id=parent_id,
            intended_reply=int(intended_reply),
        )
        return _parse("post_create", Post.from_json, {"id": post_id, **_as_dict(result)})

    def edit_post(
        self, topic_id: str, post_id: str, content: str, revision_no: int
    ) -> Post:
        result = self.call(
            "post_edit",
            topic_id=topic_id,
            post_id=post_id,
            content=content,
            revision_no=revision_no,
        )
        return _parse(
            "post_edit",
            Post.from_json,
            {"id": post_id, "content": content, **_as_dict(result)},
        )

    def delete_post(self, topic_id: str, post_id: str):
        self.call("post_delete", topic_id=topic_id, post_id=post_id)

    def change_post_read(self, topic_id: str, post_id: str, read: bool):
        self.call(
            "post_change_read", topic_id=topic_id, post_id=post_id, read=int(read)
        )
