"""
Console messenger adapter - Implements Messenger protocol.

This module provides a console-based implementation of the domain's
messenger port, logging every notification to stdout for local runs.
"""

import logging

from src.domain.models import Embed, SourceMessage
from src.domain.ports import AckSignal

logger = logging.getLogger(__name__)


class ConsoleMessenger:
    """
    Implements Messenger protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For development purposes - nothing is sent to Discord.
    """

    def send_channel_embed(self, channel_id: str, embed: Embed, greet: bool = False) -> None:
        logger.info("[CHANNEL] Channel: %s Embed: %s", channel_id, embed.description)

    def send_direct_message(self, user_id: str, text: str) -> None:
        logger.info("[DM] User: %s Text: %s", user_id, text)

    def acknowledge(self, source: SourceMessage, signal: AckSignal) -> None:
        logger.info("[ACK] Message: %s Signal: %s", source.message_id, signal.value)

    def greet(self, source: SourceMessage) -> None:
        logger.info("[GREET] Message: %s", source.message_id)

    def reply(
        self, source: SourceMessage, text: str | None, embeds: list[Embed] | None = None
    ) -> None:
        logger.info(
            "[REPLY] Message: %s Text: %s Embeds: %d", source.message_id, text, len(embeds or [])
        )
