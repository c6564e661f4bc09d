"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import Protocol

from .models import Embed, Member, RegistrationRecord, SourceMessage


class AckSignal(str, Enum):
    """
    Acknowledgment vocabulary for a processed registration.

    Every terminal workflow outcome maps to exactly one signal.
    Adapters decide how a signal is rendered (reactions, log lines).
    """

    SUCCESS = "success"
    ALREADY_DONE = "already_done"
    SOFT_ERROR = "soft_error"
    HARD_ERROR = "hard_error"
    SUSPICIOUS = "suspicious"


class MemberDirectory(Protocol):
    """Port interface for guild membership."""

    def fetch_member(self, user_id: str) -> Member:
        """
        Resolve a user identifier to a live guild member.

        Raises:
            MemberFetchError: NOT_FOUND if the user is not in the guild,
                TRANSPORT for any other lookup failure
        """
        ...

    def grant_access(self, member: Member, role_id: str) -> None:
        """
        Give the member the verified role.

        Raises:
            AccessGrantError: PERMISSION if the bot lacks the capability,
                NOT_FOUND if the role or member no longer exists
        """
        ...

    def has_access(self, member: Member, role_id: str) -> bool:
        """Whether the member already holds the verified role."""
        ...


class RecordStore(Protocol):
    """Port interface for registration persistence."""

    def find_candidates(
        self, gmail: str, discord_id: str, student_code: str
    ) -> list[RegistrationRecord]:
        """
        Find every record sharing at least one identifying field.

        Records are returned in insertion order.

        Raises:
            PersistenceError: If the store cannot be queried
        """
        ...

    def insert(self, record: RegistrationRecord) -> None:
        """
        Persist a new registration record.

        Raises:
            DuplicateKeyError: If the identity key already exists
            PersistenceError: For any other storage failure
        """
        ...


class Messenger(Protocol):
    """Port interface for notifications. Every method raises DeliveryError."""

    def send_channel_embed(self, channel_id: str, embed: Embed, greet: bool = False) -> None:
        """Post an embed; with greet, wave at the posted message."""
        ...

    def send_direct_message(self, user_id: str, text: str) -> None: ...

    def acknowledge(self, source: SourceMessage, signal: AckSignal) -> None: ...

    def greet(self, source: SourceMessage) -> None:
        """Wave at the source message, next to its acknowledgment."""
        ...

    def reply(
        self, source: SourceMessage, text: str | None, embeds: list[Embed] | None = None
    ) -> None: ...
