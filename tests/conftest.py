"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Registration records and guild members
- In-memory fakes of the domain ports
- Workflow configuration
"""

from collections.abc import Callable

import pytest

from src.domain.models import Member, RegistrationRecord, SourceMessage
from src.domain.registration import RegistrationWorkflow, WorkflowConfig
from tests.fakes import FakeMemberDirectory, InMemoryRecordStore, RecordingMessenger

VERIFIED_ROLE_ID = "900"
WELCOME_CHANNEL_ID = "800"


def make_record(**overrides: object) -> RegistrationRecord:
    """Build a registration record for alice, overriding any field."""
    fields: dict[str, object] = {
        "discord_id": "111",
        "student_code": "20200001",
        "gmail": "alice@gmail.com",
        "full_name": "Alice Quispe",
        "base": 20,
    }
    fields.update(overrides)
    return RegistrationRecord(**fields)


@pytest.fixture
def record_factory() -> Callable[..., RegistrationRecord]:
    return make_record


@pytest.fixture
def record() -> RegistrationRecord:
    return make_record()


@pytest.fixture
def member() -> Member:
    return Member(id="111", username="alice", avatar_url="https://cdn.example/alice.png")


@pytest.fixture
def config() -> WorkflowConfig:
    return WorkflowConfig(verified_role_id=VERIFIED_ROLE_ID, welcome_channel_id=WELCOME_CHANNEL_ID)


@pytest.fixture
def call_log() -> list[tuple]:
    """Call log shared by all fakes of a test."""
    return []


@pytest.fixture
def directory(member: Member, call_log: list[tuple]) -> FakeMemberDirectory:
    return FakeMemberDirectory(members=[member], log=call_log)


@pytest.fixture
def store(call_log: list[tuple]) -> InMemoryRecordStore:
    return InMemoryRecordStore(log=call_log)


@pytest.fixture
def messenger() -> RecordingMessenger:
    return RecordingMessenger()


@pytest.fixture
def workflow(
    directory: FakeMemberDirectory, store: InMemoryRecordStore, config: WorkflowConfig
) -> RegistrationWorkflow:
    return RegistrationWorkflow(directory=directory, store=store, config=config)


@pytest.fixture
def source() -> SourceMessage:
    return SourceMessage(channel_id="700", message_id="555")
