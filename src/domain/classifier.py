"""
Conflict classifier - Decision table over identifying-field overlaps.

Each existing record that shares at least one identifying field with a new
submission is labelled from three equality signals:

    gmail  discordId  studentCode   classification
    -----  ---------  -----------   --------------------------------
      T        T           T        SAME_IDENTITY
      T        F           T        MULTI_ACCOUNT
      T        F           F        MULTI_ACCOUNT_IMPERSONATION
      T        T           F        ALREADY_REGISTERED_IMPERSONATION
      F        F           T        CODE_IMPERSONATION
      F        T           T        SAME_IDENTITY  (fallback)
      F        T           F        ALREADY_REGISTERED_IMPERSONATION  (fallback)
      F        F           F        NO_MATCH  (fallback)

The last three rows cannot be produced by the store's match predicate for
well-formed data; they still resolve to a label so classify() is total.
"""

from dataclasses import dataclass
from enum import Enum

from .models import FieldMatch, RegistrationRecord


class ConflictClassification(str, Enum):
    """Relationship between a new submission and one existing record."""

    NO_MATCH = "no_match"
    SAME_IDENTITY = "same_identity"
    MULTI_ACCOUNT = "multi_account"
    MULTI_ACCOUNT_IMPERSONATION = "multi_account_impersonation"
    ALREADY_REGISTERED_IMPERSONATION = "already_registered_impersonation"
    CODE_IMPERSONATION = "code_impersonation"


class AggregateDecision(str, Enum):
    """Decision over the whole candidate list."""

    NO_MATCH = "no_match"
    SAME_IDENTITY = "same_identity"
    REPORTED_CONFLICTS = "reported_conflicts"


# Keyed by (same_gmail, same_discord_id, same_student_code)
DECISION_TABLE: dict[tuple[bool, bool, bool], ConflictClassification] = {
    (True, True, True): ConflictClassification.SAME_IDENTITY,
    (True, False, True): ConflictClassification.MULTI_ACCOUNT,
    (True, False, False): ConflictClassification.MULTI_ACCOUNT_IMPERSONATION,
    (True, True, False): ConflictClassification.ALREADY_REGISTERED_IMPERSONATION,
    (False, False, True): ConflictClassification.CODE_IMPERSONATION,
    (False, True, True): ConflictClassification.SAME_IDENTITY,
    (False, True, False): ConflictClassification.ALREADY_REGISTERED_IMPERSONATION,
    (False, False, False): ConflictClassification.NO_MATCH,
}

REASONS: dict[ConflictClassification, str] = {
    ConflictClassification.NO_MATCH: "",
    ConflictClassification.SAME_IDENTITY: "✅ Same registration as this user ✅",
    ConflictClassification.MULTI_ACCOUNT: "👥 Possible multi-account of this user 👥",
    ConflictClassification.MULTI_ACCOUNT_IMPERSONATION: (
        "⚠️ Gmail already registered, possible impersonation with multiple accounts ⚠️"
    ),
    ConflictClassification.ALREADY_REGISTERED_IMPERSONATION: (
        "⚠️ Account already registered trying to change its student code ⚠️"
    ),
    ConflictClassification.CODE_IMPERSONATION: (
        "⚠️ Student code already registered, possible impersonation ⚠️"
    ),
}


@dataclass(frozen=True)
class CandidateConflict:
    """One existing record together with its classification."""

    candidate: RegistrationRecord
    matches: FieldMatch
    classification: ConflictClassification

    @property
    def reason(self) -> str:
        return REASONS[self.classification]


@dataclass(frozen=True)
class ClassificationResult:
    """Aggregate decision plus one entry per candidate, in store order."""

    decision: AggregateDecision
    conflicts: tuple[CandidateConflict, ...] = ()


def classify(new: RegistrationRecord, candidate: RegistrationRecord) -> ConflictClassification:
    """Label the relationship between a new record and one candidate."""
    return DECISION_TABLE[FieldMatch.between(new, candidate).as_key()]


def aggregate(
    new: RegistrationRecord, candidates: list[RegistrationRecord]
) -> ClassificationResult:
    """
    Reduce the per-candidate labels to one decision.

    - no candidates: NO_MATCH (fresh registration)
    - a single SAME_IDENTITY candidate: SAME_IDENTITY (returning user)
    - anything else: REPORTED_CONFLICTS, one entry per candidate
    """
    if not candidates:
        return ClassificationResult(decision=AggregateDecision.NO_MATCH)

    conflicts = tuple(
        CandidateConflict(
            candidate=candidate,
            matches=FieldMatch.between(new, candidate),
            classification=classify(new, candidate),
        )
        for candidate in candidates
    )

    if len(conflicts) == 1 and conflicts[0].classification is ConflictClassification.SAME_IDENTITY:
        return ClassificationResult(decision=AggregateDecision.SAME_IDENTITY, conflicts=conflicts)

    return ClassificationResult(decision=AggregateDecision.REPORTED_CONFLICTS, conflicts=conflicts)
