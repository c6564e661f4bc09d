"""Discord adapters - REST API implementations of the member and messenger ports."""

from .client import create_client
from .members import DiscordMemberDirectory
from .messenger import DiscordMessenger

__all__ = ["DiscordMemberDirectory", "DiscordMessenger", "create_client"]
