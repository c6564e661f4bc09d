"""
Domain exceptions - Semantic error types for guild registration.

This module defines one closed set of errors per collaborator, so the
workflow can match on the failure kind instead of inspecting the
type of whatever the underlying client raised.
"""

from enum import Enum


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class MemberFetchFailure(Enum):
    """Why a member could not be resolved."""

    NOT_FOUND = "not_found"
    TRANSPORT = "transport"


class MemberFetchError(RegistrationError):
    """The submitted user is not a guild member, or the lookup failed."""

    def __init__(self, user_id: str, kind: MemberFetchFailure, detail: str = "") -> None:
        super().__init__(detail or f"Could not fetch member {user_id}")
        self.user_id = user_id
        self.kind = kind
        self.detail = detail


class AccessGrantFailure(Enum):
    """Why the verified role could not be granted."""

    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"


class AccessGrantError(RegistrationError):
    """Missing permissions, the role/member vanished, or the call failed."""

    def __init__(self, kind: AccessGrantFailure, detail: str = "") -> None:
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail


class StoreError(RegistrationError):
    """Base class for record store failures."""

    pass


class DuplicateKeyError(StoreError):
    """A record with the same identity key was persisted concurrently."""

    pass


class PersistenceError(StoreError):
    """The record store could not be reached or rejected the write."""

    pass


class DeliveryError(RegistrationError):
    """A notification could not be delivered."""

    pass
