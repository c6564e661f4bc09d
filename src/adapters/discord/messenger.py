"""
Discord messenger adapter - Implements Messenger protocol.

Posts embeds and replies, opens DM channels and reacts to the source
webhook message through the Discord REST API.
"""

from typing import Any
from urllib.parse import quote

import httpx

from src.domain.exceptions import DeliveryError
from src.domain.models import Embed, SourceMessage
from src.domain.ports import AckSignal

from .client import describe_error

GREETING = "👋"

REACTIONS: dict[AckSignal, str] = {
    AckSignal.SUCCESS: "👌",
    AckSignal.ALREADY_DONE: "🤔",
    AckSignal.SOFT_ERROR: "❌",
    AckSignal.HARD_ERROR: "⚠️",
    AckSignal.SUSPICIOUS: "🚨",
}


class DiscordMessenger:
    """
    Implements Messenger protocol via the Discord REST API.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Every failure surfaces as DeliveryError.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def send_channel_embed(self, channel_id: str, embed: Embed, greet: bool = False) -> None:
        response = self._request(
            "POST", f"/channels/{channel_id}/messages", {"embeds": [embed_payload(embed)]}
        )
        if greet:
            self._react(channel_id, _object_id(response), GREETING)

    def send_direct_message(self, user_id: str, text: str) -> None:
        response = self._request("POST", "/users/@me/channels", {"recipient_id": user_id})
        self._request("POST", f"/channels/{_object_id(response)}/messages", {"content": text})

    def acknowledge(self, source: SourceMessage, signal: AckSignal) -> None:
        self._react(source.channel_id, source.message_id, REACTIONS[signal])

    def greet(self, source: SourceMessage) -> None:
        self._react(source.channel_id, source.message_id, GREETING)

    def reply(
        self, source: SourceMessage, text: str | None, embeds: list[Embed] | None = None
    ) -> None:
        body: dict[str, Any] = {"message_reference": {"message_id": source.message_id}}
        if text:
            body["content"] = text
        if embeds:
            body["embeds"] = [embed_payload(embed) for embed in embeds]
        self._request("POST", f"/channels/{source.channel_id}/messages", body)

    def _react(self, channel_id: str, message_id: str, emoji: str) -> None:
        encoded = quote(emoji, safe="")
        self._request(
            "PUT", f"/channels/{channel_id}/messages/{message_id}/reactions/{encoded}/@me"
        )

    def _request(self, method: str, url: str, body: dict | None = None) -> httpx.Response:
        try:
            response = self._client.request(method, url, json=body)
        except httpx.HTTPError as e:
            raise DeliveryError(str(e)) from e
        if response.is_error:
            raise DeliveryError(describe_error(response))
        return response


def _object_id(response: httpx.Response) -> str:
    try:
        return response.json()["id"]
    except (KeyError, TypeError, ValueError) as e:
        raise DeliveryError(f"Unexpected Discord response: {response.text[:200]}") from e


def embed_payload(embed: Embed) -> dict[str, Any]:
    """Serialize an Embed to a Discord embed object."""
    payload: dict[str, Any] = {"description": embed.description}
    if embed.color is not None:
        payload["color"] = embed.color
    if embed.author_name:
        author = {"name": embed.author_name}
        if embed.author_icon_url:
            author["icon_url"] = embed.author_icon_url
        payload["author"] = author
    if embed.thumbnail_url:
        payload["thumbnail"] = {"url": embed.thumbnail_url}
    if embed.footer:
        payload["footer"] = {"text": embed.footer}
    return payload
