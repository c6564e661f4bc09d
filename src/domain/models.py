"""
Domain models - Value objects for guild registrations.

This module defines the immutable values the registration workflow passes
around: the submitted registration record, the guild member it refers to,
and the message content the workflow asks the messenger to deliver.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class RegistrationRecord:
    """
    One registration attempt, as submitted through the registration form.

    The triple (discord_id, student_code, gmail) is the identity key.
    Uniqueness of that triple is enforced by the record store.
    """

    discord_id: str
    student_code: str
    gmail: str
    full_name: str
    base: int
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        # Form submissions deliver the cohort as text
        object.__setattr__(self, "base", int(self.base))

    def same_identity_as(self, other: "RegistrationRecord") -> bool:
        """True when all three identifying fields are equal."""
        return (
            self.discord_id == other.discord_id
            and self.student_code == other.student_code
            and self.gmail == other.gmail
        )


@dataclass(frozen=True)
class Member:
    """A live member of the guild, as returned by the member directory."""

    id: str
    username: str
    avatar_url: str | None = None
    role_ids: frozenset[str] = frozenset()

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"


@dataclass(frozen=True)
class Embed:
    """Rich message content, modelled after a Discord embed."""

    description: str
    author_name: str | None = None
    author_icon_url: str | None = None
    thumbnail_url: str | None = None
    color: int | None = None
    footer: str | None = None


@dataclass(frozen=True)
class SourceMessage:
    """The inbound webhook message a registration was submitted through."""

    channel_id: str
    message_id: str


@dataclass(frozen=True)
class FieldMatch:
    """Which identifying fields a candidate shares with a new record."""

    same_gmail: bool
    same_discord_id: bool
    same_student_code: bool

    @classmethod
    def between(cls, new: RegistrationRecord, candidate: RegistrationRecord) -> "FieldMatch":
        return cls(
            same_gmail=new.gmail == candidate.gmail,
            same_discord_id=new.discord_id == candidate.discord_id,
            same_student_code=new.student_code == candidate.student_code,
        )

    def as_key(self) -> tuple[bool, bool, bool]:
        return (self.same_gmail, self.same_discord_id, self.same_student_code)


@dataclass(frozen=True)
class Notification:
    """Base class for notifications the workflow intends to send."""


@dataclass(frozen=True)
class ChannelEmbed(Notification):
    """Post an embed to a guild channel (welcome messages)."""

    channel_id: str
    embed: Embed
    greet: bool = False


@dataclass(frozen=True)
class DirectMessage(Notification):
    """Send a private message to a member."""

    user_id: str
    text: str
    recipient_tag: str | None = None


@dataclass(frozen=True)
class DeliveryReport:
    """What happened when the dispatcher executed a workflow's notifications."""

    delivered: list[Notification] = field(default_factory=list)
    failed: list[Notification] = field(default_factory=list)
