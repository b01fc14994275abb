#!/usr/bin/env python3

# Imports {{{
from __future__ import annotations

# builtins
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    # local modules
    from wobblesync.structs import Operation

# }}}


class WobbleSyncError(Exception):
    """
    Base class for everything wobblesync raises on purpose.
    """


class ConfigError(WobbleSyncError):
    """
    The configuration file is missing, too big, or malformed.
    """


class AuthError(WobbleSyncError):
    """
    Logging in to the Wobble service failed.
    """


class TopicResolutionError(WobbleSyncError):
    """
    The topic for a feed could neither be fetched nor created.
    """


class FetchError(WobbleSyncError):
    """
    The feed could not be downloaded or parsed.
    """


class OperationError(WobbleSyncError):
    """
    A single mutating operation against the Wobble service failed.
    """

    def __init__(self, operation: Operation, cause: Exception):
        super().__init__(f"Failed to {operation.kind.value} post: {cause}")
        self.operation = operation
        self.cause = cause


class ServiceError(WobbleSyncError):
    """
    Base class for errors reported by the Wobble client.
    """

    def __init__(self, message: str, code: int = None):
        super().__init__(message)
        self.code = code


class NotFound(ServiceError):
    ...


class ConflictError(ServiceError):
    """
    The revision number sent with an edit is stale.
    """


class TransportError(ServiceError):
    ...
