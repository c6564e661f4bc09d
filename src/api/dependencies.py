"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

import httpx
from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.console.messenger import ConsoleMessenger
from src.adapters.discord import DiscordMemberDirectory, DiscordMessenger
from src.adapters.repository.postgres import PostgresRecordStore
from src.config.settings import get_settings
from src.domain.dispatch import EffectDispatcher
from src.domain.feedback import FeedbackEmitter
from src.domain.ports import Messenger
from src.domain.registration import RegistrationWorkflow, WorkflowConfig

# Module-level singleton - ConsoleMessenger is stateless
_console_messenger = ConsoleMessenger()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_discord_client(request: Request) -> httpx.Client:
    """Get the Discord REST client created during app lifespan startup."""
    return request.app.state.discord_client


def get_record_store(request: Request) -> PostgresRecordStore:
    """Create record store with connection pool from app state."""
    return PostgresRecordStore(get_pool(request))


def get_member_directory(request: Request) -> DiscordMemberDirectory:
    settings = get_settings()
    return DiscordMemberDirectory(get_discord_client(request), settings.guild_id)


def get_messenger(request: Request) -> Messenger:
    """Get the messenger selected by the messenger_backend setting."""
    if get_settings().messenger_backend == "console":
        return _console_messenger
    return DiscordMessenger(get_discord_client(request))


def get_workflow_config() -> WorkflowConfig:
    settings = get_settings()
    return WorkflowConfig(
        verified_role_id=settings.verified_role_id,
        welcome_channel_id=settings.welcome_channel_id,
    )


def get_registration_workflow(request: Request) -> RegistrationWorkflow:
    """
    Create registration workflow with injected dependencies.

    Wires together the member directory, record store and guild
    configuration for the domain workflow.
    """
    return RegistrationWorkflow(
        directory=get_member_directory(request),
        store=get_record_store(request),
        config=get_workflow_config(),
    )


def get_effect_dispatcher(request: Request) -> EffectDispatcher:
    """Create the dispatcher delivering workflow notifications and feedback."""
    emitter = FeedbackEmitter(display_timezone=get_settings().display_timezone)
    return EffectDispatcher(messenger=get_messenger(request), emitter=emitter)
