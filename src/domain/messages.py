"""
Message rendering - Embeds and texts shown to the guild.

Pure functions only; delivery is the messenger's job.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

from .classifier import CandidateConflict
from .models import Embed, Member

BLUE = 0x3498DB

NEW_MEMBER_ICON_URL = (
    "https://media.discordapp.net/attachments/744860318743920711/962177397262811136/9619_GhostWave.gif"
)
RETURNING_MEMBER_ICON_URL = (
    "https://static.wikia.nocookie.net/floppapedia-revamped/images/6/64/RREFCC.jpg"
)

GRANT_FAILURE_DM = (
    "The bot team ran into a problem (ours) while registering you.\n\n"
    "We are (_clearly_) fixing it, but in the meantime "
    "you can contact an administrator to register you manually."
)

FLAG = " 🚩"


def welcome_embed(member: Member, returning: bool) -> Embed:
    """Public welcome for a freshly verified or a returning member."""
    if returning:
        return Embed(
            description=f"{member.mention} has returned to the server!!",
            author_name=f"{member.username}... has... returned...",
            author_icon_url=RETURNING_MEMBER_ICON_URL,
            thumbnail_url=member.avatar_url,
            color=BLUE,
        )
    return Embed(
        description=f"{member.mention} passed all our checks and has appeared on the server!!",
        author_name="New member!!! 🎉",
        author_icon_url=NEW_MEMBER_ICON_URL,
        thumbnail_url=member.avatar_url,
        color=BLUE,
    )


def report_embed(conflict: CandidateConflict, timezone: ZoneInfo) -> Embed:
    """
    Moderator report for one conflicting record.

    Shows the existing record, flagging every identifying field it shares
    with the new submission, and when it was registered.
    """
    record = conflict.candidate
    matches = conflict.matches
    description = (
        f"**fullName**: `{record.full_name}`\n"
        f"**gmail**: `{record.gmail}{FLAG if matches.same_gmail else ''}`\n"
        f"**studentCode**: `{record.student_code}{FLAG if matches.same_student_code else ''}`\n"
        f"**base**: `{record.base}`\n"
        f"**discordId**: `{record.discord_id}{FLAG if matches.same_discord_id else ''}`"
    )
    if record.created_at is not None:
        description += f"\n\n{_registered_line(record.created_at, timezone)}"
    return Embed(description=description, footer=conflict.reason or " ")


def conflicts_summary(count: int) -> str:
    if count == 1:
        return "❗️ Found a record similar to this one"
    return f"❗️ Found {count} records similar to this one"


def _registered_line(created_at: datetime, timezone: ZoneInfo) -> str:
    epoch = int(created_at.timestamp())
    local = created_at.astimezone(timezone).strftime("%d/%m/%Y, %H:%M:%S")
    return f"_Registered_ <t:{epoch}:R> _({local})_"
