"""
Registration workflow - Verification state machine for guild registrations.

This module contains the core business logic that decides what happens to a
submitted registration: whether the member gets the verified role, whether
moderators are alerted about a conflicting record, and whether the record
is persisted.

Registration State Machine
==========================

States:
- FETCHING_MEMBER: resolve the submitted discord id to a guild member
- CLASSIFYING: look up records sharing an identifying field and classify them
- VERIFYING: grant the verified role (unless already held)
- REPORTING: conflicting records found, moderators are alerted
- WELCOMING: queue the public welcome message
- PERSISTING: insert the record (fresh registrations only)
- SUCCEEDED, CONFLICT_REPORTED, FAILED: terminal

Transitions:
    FETCHING_MEMBER -> CLASSIFYING | FAILED
    CLASSIFYING     -> VERIFYING | REPORTING
    REPORTING       -> CONFLICT_REPORTED
    VERIFYING       -> WELCOMING | SUCCEEDED (already verified) | FAILED
    WELCOMING       -> PERSISTING (fresh) | SUCCEEDED (returning)
    PERSISTING      -> SUCCEEDED | CONFLICT_REPORTED (lost race) | FAILED

The verified role is always granted before the record is persisted.
PERSISTENCE_FAILED results therefore leave a verified member without a
record, and are flagged as inconsistent for manual reconciliation.

Decision-bearing calls (member lookup, role grant, candidate query, insert)
run inline. Notifications are only queued on the result and delivered later
by the EffectDispatcher.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from .classifier import AggregateDecision, CandidateConflict, ClassificationResult, aggregate
from .exceptions import (
    AccessGrantError,
    AccessGrantFailure,
    DuplicateKeyError,
    MemberFetchError,
    MemberFetchFailure,
    PersistenceError,
)
from .messages import GRANT_FAILURE_DM, welcome_embed
from .models import ChannelEmbed, DirectMessage, Member, Notification, RegistrationRecord
from .ports import MemberDirectory, RecordStore

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    """States of a single registration attempt."""

    FETCHING_MEMBER = "fetching_member"
    CLASSIFYING = "classifying"
    VERIFYING = "verifying"
    REPORTING = "reporting"
    WELCOMING = "welcoming"
    PERSISTING = "persisting"
    SUCCEEDED = "succeeded"
    CONFLICT_REPORTED = "conflict_reported"
    FAILED = "failed"


TERMINAL_STATES = frozenset(
    {WorkflowState.SUCCEEDED, WorkflowState.CONFLICT_REPORTED, WorkflowState.FAILED}
)


class WorkflowOutcome(str, Enum):
    """Summary of a whole registration attempt."""

    PROCEEDED = "proceeded"
    WELCOMED_BACK = "welcomed_back"
    ALREADY_VERIFIED = "already_verified"
    REPORTED_CONFLICTS = "reported_conflicts"
    MEMBER_FETCH_FAILED = "member_fetch_failed"
    PERMISSION_FAILED = "permission_failed"
    PERSISTENCE_FAILED = "persistence_failed"


@dataclass(frozen=True)
class WorkflowConfig:
    """Guild-specific identifiers the workflow acts on."""

    verified_role_id: str
    welcome_channel_id: str


@dataclass
class WorkflowResult:
    """
    Everything a registration attempt decided.

    Attributes:
        record: The submitted registration
        outcome: Terminal outcome, None until the workflow finishes
        state: Current state; terminal once the workflow returns
        trace: Every state visited, in order
        member: The resolved guild member, if the lookup succeeded
        conflicts: Classified candidates shown to moderators
        notifications: Queued welcome messages and DMs
        diagnostic: Human-readable explanation for moderators
        access_granted: The verified role was granted during this attempt
        inconsistent: The member is verified but the record was not saved
    """

    record: RegistrationRecord
    outcome: WorkflowOutcome | None = None
    state: WorkflowState = WorkflowState.FETCHING_MEMBER
    trace: list[WorkflowState] = field(default_factory=lambda: [WorkflowState.FETCHING_MEMBER])
    member: Member | None = None
    conflicts: tuple[CandidateConflict, ...] = ()
    notifications: list[Notification] = field(default_factory=list)
    diagnostic: str | None = None
    access_granted: bool = False
    inconsistent: bool = False

    def advance(self, state: WorkflowState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Registration already finished in state {self.state.value}")
        logger.debug(
            "Registration %s: %s -> %s", self.record.discord_id, self.state.value, state.value
        )
        self.state = state
        self.trace.append(state)

    def finish(
        self, state: WorkflowState, outcome: WorkflowOutcome, diagnostic: str | None = None
    ) -> "WorkflowResult":
        self.advance(state)
        self.outcome = outcome
        self.diagnostic = diagnostic
        logger.info("Registration %s finished: %s", self.record.discord_id, outcome.value)
        return self


@dataclass
class RegistrationWorkflow:
    """
    Domain service driving one registration attempt to a terminal state.

    Collaborators are injected as ports; guild identifiers come from the
    WorkflowConfig rather than from the environment.
    """

    directory: MemberDirectory
    store: RecordStore
    config: WorkflowConfig

    def run(self, record: RegistrationRecord) -> WorkflowResult:
        """
        Process a submitted registration.

        Args:
            record: Validated registration record

        Returns:
            WorkflowResult in a terminal state

        Raises:
            PersistenceError: If the candidate query itself fails
        """
        result = WorkflowResult(record=record)

        member = self._fetch_member(result)
        if member is None:
            return result
        result.member = member

        result.advance(WorkflowState.CLASSIFYING)
        classification = self._classify(record)

        if classification.decision == AggregateDecision.REPORTED_CONFLICTS:
            return self._report(result, classification)
        returning = classification.decision == AggregateDecision.SAME_IDENTITY

        result.advance(WorkflowState.VERIFYING)
        if self.directory.has_access(member, self.config.verified_role_id):
            return result.finish(WorkflowState.SUCCEEDED, WorkflowOutcome.ALREADY_VERIFIED)
        if not self._grant_access(result, member):
            return result

        result.advance(WorkflowState.WELCOMING)
        self._queue_welcome(result, member, returning)
        if returning:
            return result.finish(WorkflowState.SUCCEEDED, WorkflowOutcome.WELCOMED_BACK)

        result.advance(WorkflowState.PERSISTING)
        return self._persist(result, member)

    def _fetch_member(self, result: WorkflowResult) -> Member | None:
        user_id = result.record.discord_id
        try:
            return self.directory.fetch_member(user_id)
        except MemberFetchError as e:
            if e.kind == MemberFetchFailure.NOT_FOUND:
                # The user is unreachable, so no DM is attempted
                diagnostic = f"Can't fetch user: {e}"
            elif e.kind == MemberFetchFailure.TRANSPORT:
                logger.error("Unknown error when registering %s: %s", user_id, e)
                diagnostic = (
                    f"Unknown error when registering: {e}. Could not send DM to `{user_id}`"
                )
            else:
                raise
            result.finish(WorkflowState.FAILED, WorkflowOutcome.MEMBER_FETCH_FAILED, diagnostic)
            return None

    def _classify(self, record: RegistrationRecord) -> ClassificationResult:
        candidates = self.store.find_candidates(
            record.gmail, record.discord_id, record.student_code
        )
        return aggregate(record, candidates)

    def _report(
        self, result: WorkflowResult, classification: ClassificationResult
    ) -> WorkflowResult:
        result.advance(WorkflowState.REPORTING)
        result.conflicts = classification.conflicts
        logger.warning(
            "Registration %s conflicts with %d existing record(s)",
            result.record.discord_id,
            len(classification.conflicts),
        )
        return result.finish(WorkflowState.CONFLICT_REPORTED, WorkflowOutcome.REPORTED_CONFLICTS)

    def _grant_access(self, result: WorkflowResult, member: Member) -> bool:
        try:
            self.directory.grant_access(member, self.config.verified_role_id)
        except AccessGrantError as e:
            if e.kind not in (
                AccessGrantFailure.PERMISSION,
                AccessGrantFailure.NOT_FOUND,
                AccessGrantFailure.TRANSPORT,
            ):
                raise
            logger.error("Could not grant verified role to %s (%s): %s", member.id, e.kind.value, e)
            result.notifications.append(
                DirectMessage(user_id=member.id, text=GRANT_FAILURE_DM, recipient_tag=member.username)
            )
            result.finish(
                WorkflowState.FAILED,
                WorkflowOutcome.PERMISSION_FAILED,
                f"API error when registering: {e}",
            )
            return False
        result.access_granted = True
        return True

    def _queue_welcome(self, result: WorkflowResult, member: Member, returning: bool) -> None:
        result.notifications = [
            n for n in result.notifications if not isinstance(n, ChannelEmbed)
        ]
        result.notifications.append(
            ChannelEmbed(
                channel_id=self.config.welcome_channel_id,
                embed=welcome_embed(member, returning),
                greet=True,
            )
        )

    def _persist(self, result: WorkflowResult, member: Member) -> WorkflowResult:
        try:
            self.store.insert(result.record)
        except DuplicateKeyError:
            logger.warning(
                "Registration %s lost an insert race, re-classifying", result.record.discord_id
            )
            return self._reclassify_after_race(result, member)
        except PersistenceError as e:
            return self._persistence_failed(result, e)
        return result.finish(WorkflowState.SUCCEEDED, WorkflowOutcome.PROCEEDED)

    def _reclassify_after_race(self, result: WorkflowResult, member: Member) -> WorkflowResult:
        try:
            classification = self._classify(result.record)
        except PersistenceError as e:
            return self._persistence_failed(result, e)

        if classification.decision == AggregateDecision.SAME_IDENTITY:
            self._queue_welcome(result, member, returning=True)
            return result.finish(WorkflowState.SUCCEEDED, WorkflowOutcome.WELCOMED_BACK)

        if classification.decision == AggregateDecision.REPORTED_CONFLICTS:
            result.notifications = [
                n for n in result.notifications if not isinstance(n, ChannelEmbed)
            ]
            result.conflicts = classification.conflicts
            return result.finish(
                WorkflowState.CONFLICT_REPORTED,
                WorkflowOutcome.REPORTED_CONFLICTS,
                f"{member.mention} was given the verified role before a concurrent "
                "registration became visible. Review the records below.",
            )

        return self._persistence_failed(
            result, PersistenceError("duplicate key reported but no conflicting record found")
        )

    def _persistence_failed(self, result: WorkflowResult, error: Exception) -> WorkflowResult:
        result.inconsistent = True
        logger.error(
            "Registration %s verified but not persisted, manual reconciliation required: %s",
            result.record.discord_id,
            error,
        )
        return result.finish(
            WorkflowState.FAILED,
            WorkflowOutcome.PERSISTENCE_FAILED,
            f"User registered, but could not be saved to DB: {error}. No DM sent.",
        )
