"""
Discord member directory adapter - Implements MemberDirectory protocol.

Resolves guild members and grants roles through the Discord REST API.
"""

import logging

import httpx

from src.domain.exceptions import (
    AccessGrantError,
    AccessGrantFailure,
    MemberFetchError,
    MemberFetchFailure,
)
from src.domain.models import Member

from .client import describe_error

logger = logging.getLogger(__name__)

CDN_URL = "https://cdn.discordapp.com"


class DiscordMemberDirectory:
    """
    Implements MemberDirectory protocol via the Discord REST API.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, client: httpx.Client, guild_id: str) -> None:
        self._client = client
        self._guild_id = guild_id

    def fetch_member(self, user_id: str) -> Member:
        """
        Fetch a guild member by user id.

        Raises:
            MemberFetchError: NOT_FOUND when Discord rejects the lookup (any 4xx,
                e.g. an unknown member or a malformed id), TRANSPORT on connection
                errors, 5xx responses and unreadable member objects
        """
        try:
            response = self._client.get(f"/guilds/{self._guild_id}/members/{user_id}")
        except httpx.HTTPError as e:
            raise MemberFetchError(user_id, MemberFetchFailure.TRANSPORT, str(e)) from e

        if response.is_client_error:
            raise MemberFetchError(user_id, MemberFetchFailure.NOT_FOUND, describe_error(response))
        if response.is_error:
            raise MemberFetchError(user_id, MemberFetchFailure.TRANSPORT, describe_error(response))

        try:
            return member_from_payload(response.json())
        except (KeyError, TypeError, ValueError) as e:
            raise MemberFetchError(
                user_id, MemberFetchFailure.TRANSPORT, f"Unexpected member object: {e!r}"
            ) from e

    def grant_access(self, member: Member, role_id: str) -> None:
        """
        Add a role to a guild member.

        Raises:
            AccessGrantError: PERMISSION on HTTP 403, NOT_FOUND on HTTP 404,
                TRANSPORT otherwise
        """
        url = f"/guilds/{self._guild_id}/members/{member.id}/roles/{role_id}"
        try:
            response = self._client.put(url)
        except httpx.HTTPError as e:
            raise AccessGrantError(AccessGrantFailure.TRANSPORT, str(e)) from e

        if response.status_code == httpx.codes.FORBIDDEN:
            raise AccessGrantError(AccessGrantFailure.PERMISSION, describe_error(response))
        if response.status_code == httpx.codes.NOT_FOUND:
            raise AccessGrantError(AccessGrantFailure.NOT_FOUND, describe_error(response))
        if response.is_error:
            raise AccessGrantError(AccessGrantFailure.TRANSPORT, describe_error(response))

        logger.info("Granted role %s to member %s", role_id, member.id)

    def has_access(self, member: Member, role_id: str) -> bool:
        return role_id in member.role_ids


def member_from_payload(payload: dict) -> Member:
    """Build a Member from a Discord guild member object."""
    user = payload["user"]
    avatar = user.get("avatar")
    avatar_url = f"{CDN_URL}/avatars/{user['id']}/{avatar}.png" if avatar else None
    return Member(
        id=user["id"],
        username=user.get("username", ""),
        avatar_url=avatar_url,
        role_ids=frozenset(payload.get("roles", [])),
    )
