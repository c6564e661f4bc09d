"""
Unit tests for the conflict classifier.

Tests verify:
- Every row of the decision table, including fallback rows
- Determinism of classify()
- The aggregate rule over candidate lists
"""

import itertools

import pytest

from src.domain.classifier import (
    DECISION_TABLE,
    REASONS,
    AggregateDecision,
    ConflictClassification,
    aggregate,
    classify,
)
from src.domain.models import FieldMatch, RegistrationRecord

NEW = RegistrationRecord(
    discord_id="111",
    student_code="20200001",
    gmail="alice@gmail.com",
    full_name="Alice Quispe",
    base=20,
)


def candidate_for(same_gmail: bool, same_discord_id: bool, same_student_code: bool) -> RegistrationRecord:
    """Existing record sharing exactly the requested fields with NEW."""
    return RegistrationRecord(
        discord_id=NEW.discord_id if same_discord_id else "999",
        student_code=NEW.student_code if same_student_code else "20199999",
        gmail=NEW.gmail if same_gmail else "mallory@gmail.com",
        full_name="Someone Else",
        base=19,
    )


class TestDecisionTable:
    """Tests for classify() over the full boolean space."""

    @pytest.mark.parametrize(
        ("same_gmail", "same_discord_id", "same_student_code", "expected"),
        [
            (True, True, True, ConflictClassification.SAME_IDENTITY),
            (True, False, True, ConflictClassification.MULTI_ACCOUNT),
            (True, False, False, ConflictClassification.MULTI_ACCOUNT_IMPERSONATION),
            (True, True, False, ConflictClassification.ALREADY_REGISTERED_IMPERSONATION),
            (False, False, True, ConflictClassification.CODE_IMPERSONATION),
            (False, True, True, ConflictClassification.SAME_IDENTITY),
            (False, True, False, ConflictClassification.ALREADY_REGISTERED_IMPERSONATION),
            (False, False, False, ConflictClassification.NO_MATCH),
        ],
    )
    def test_classification(
        self,
        same_gmail: bool,
        same_discord_id: bool,
        same_student_code: bool,
        expected: ConflictClassification,
    ) -> None:
        """Each field-equality combination maps to its documented label."""
        candidate = candidate_for(same_gmail, same_discord_id, same_student_code)
        assert classify(NEW, candidate) is expected

    def test_table_covers_all_combinations(self) -> None:
        """The decision table is total over the 2^3 space."""
        assert set(DECISION_TABLE) == set(itertools.product([True, False], repeat=3))

    def test_every_label_has_a_reason(self) -> None:
        """Every classification can be rendered."""
        assert set(REASONS) == set(ConflictClassification)

    def test_classify_is_deterministic(self) -> None:
        """Calling classify twice with the same inputs returns the same label."""
        candidate = candidate_for(True, False, True)
        assert classify(NEW, candidate) is classify(NEW, candidate)

    def test_full_name_and_base_are_ignored(self) -> None:
        """Only identifying fields take part in classification."""
        candidate = RegistrationRecord(
            discord_id=NEW.discord_id,
            student_code=NEW.student_code,
            gmail=NEW.gmail,
            full_name="Different Name",
            base=99,
        )
        assert classify(NEW, candidate) is ConflictClassification.SAME_IDENTITY


class TestAggregate:
    """Tests for the aggregate rule."""

    def test_empty_candidates_is_no_match(self) -> None:
        result = aggregate(NEW, [])
        assert result.decision is AggregateDecision.NO_MATCH
        assert result.conflicts == ()

    def test_single_same_identity_is_same_identity(self) -> None:
        """A single identical record means a returning user."""
        result = aggregate(NEW, [candidate_for(True, True, True)])
        assert result.decision is AggregateDecision.SAME_IDENTITY
        assert len(result.conflicts) == 1

    def test_single_conflict_is_reported(self) -> None:
        result = aggregate(NEW, [candidate_for(False, False, True)])
        assert result.decision is AggregateDecision.REPORTED_CONFLICTS
        assert result.conflicts[0].classification is ConflictClassification.CODE_IMPERSONATION

    def test_same_identity_among_several_is_reported(self) -> None:
        """An identical record alongside another overlap is still a conflict."""
        candidates = [candidate_for(True, True, True), candidate_for(False, False, True)]
        result = aggregate(NEW, candidates)

        assert result.decision is AggregateDecision.REPORTED_CONFLICTS
        assert [c.classification for c in result.conflicts] == [
            ConflictClassification.SAME_IDENTITY,
            ConflictClassification.CODE_IMPERSONATION,
        ]

    def test_one_entry_per_candidate_in_store_order(self) -> None:
        candidates = [
            candidate_for(True, False, True),
            candidate_for(True, True, False),
            candidate_for(False, False, True),
        ]
        result = aggregate(NEW, candidates)

        assert [c.candidate for c in result.conflicts] == candidates

    def test_each_conflict_carries_its_reason(self) -> None:
        result = aggregate(NEW, [candidate_for(True, False, True), candidate_for(True, False, False)])

        assert result.conflicts[0].reason == REASONS[ConflictClassification.MULTI_ACCOUNT]
        assert result.conflicts[1].reason == REASONS[
            ConflictClassification.MULTI_ACCOUNT_IMPERSONATION
        ]

    def test_conflict_records_field_matches(self) -> None:
        result = aggregate(NEW, [candidate_for(True, True, False)])
        assert result.conflicts[0].matches == FieldMatch(
            same_gmail=True, same_discord_id=True, same_student_code=False
        )
