"""
Adversarial tests for racing registration submissions.

Two submissions for the same identity arrive at the same time. Both
workflows read the store before either writes, so both see no candidates.
The store's uniqueness constraint lets exactly one insert succeed; the
other workflow must re-classify instead of reporting a generic failure.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.domain.models import Member, RegistrationRecord
from src.domain.registration import RegistrationWorkflow, WorkflowConfig, WorkflowOutcome
from tests.fakes import FakeMemberDirectory, InMemoryRecordStore

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial


class BarrierRecordStore(InMemoryRecordStore):
    """Holds the first lookup of every racer until all racers have looked up."""

    def __init__(self, parties: int) -> None:
        super().__init__()
        self._barrier = threading.Barrier(parties, timeout=5)
        self._first_lookups = threading.local()

    def find_candidates(
        self, gmail: str, discord_id: str, student_code: str
    ) -> list[RegistrationRecord]:
        candidates = super().find_candidates(gmail, discord_id, student_code)
        if not getattr(self._first_lookups, "done", False):
            self._first_lookups.done = True
            self._barrier.wait()
        return candidates


class TestConcurrentSubmissions:
    def test_duplicate_submissions_one_proceeds_one_welcomed_back(self) -> None:
        """
        Simulate the form webhook firing twice for the same registration.

        Expected: exactly one record is stored, one attempt PROCEEDED and the
        loser is re-classified as a returning user.
        """
        num_racers = 2
        record = RegistrationRecord(
            discord_id="111",
            student_code="20200001",
            gmail="alice@gmail.com",
            full_name="Alice Quispe",
            base=20,
        )
        store = BarrierRecordStore(parties=num_racers)
        directory = FakeMemberDirectory(members=[Member(id="111", username="alice")])
        config = WorkflowConfig(verified_role_id="900", welcome_channel_id="800")

        def submit() -> WorkflowOutcome:
            workflow = RegistrationWorkflow(directory=directory, store=store, config=config)
            return workflow.run(record).outcome

        with ThreadPoolExecutor(max_workers=num_racers) as executor:
            futures = [executor.submit(submit) for _ in range(num_racers)]
            outcomes = [f.result() for f in futures]

        assert sorted(outcomes) == sorted(
            [WorkflowOutcome.PROCEEDED, WorkflowOutcome.WELCOMED_BACK]
        )
        assert len(store.records) == 1

    def test_racing_impersonation_is_reported(self) -> None:
        """
        Two different people race with the same student code.

        Both inserts succeed (the identity keys differ), so neither workflow
        sees a conflict. The next submission for either identity is reported.
        """
        store = BarrierRecordStore(parties=2)
        directory = FakeMemberDirectory(
            members=[Member(id="111", username="alice"), Member(id="222", username="mallory")]
        )
        config = WorkflowConfig(verified_role_id="900", welcome_channel_id="800")
        alice = RegistrationRecord("111", "20200001", "alice@gmail.com", "Alice Quispe", 20)
        mallory = RegistrationRecord("222", "20200001", "mallory@gmail.com", "Alice Quispe", 20)

        def submit(record: RegistrationRecord) -> WorkflowOutcome:
            workflow = RegistrationWorkflow(directory=directory, store=store, config=config)
            return workflow.run(record).outcome

        with ThreadPoolExecutor(max_workers=2) as executor:
            outcomes = list(executor.map(submit, [alice, mallory]))

        assert outcomes == [WorkflowOutcome.PROCEEDED, WorkflowOutcome.PROCEEDED]
        assert len(store.records) == 2

        settled = InMemoryRecordStore(records=list(store.records))
        replay = RegistrationWorkflow(directory=directory, store=settled, config=config).run(mallory)
        assert replay.outcome is WorkflowOutcome.REPORTED_CONFLICTS
