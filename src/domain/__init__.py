"""
Domain layer - Pure business logic with zero framework imports.

This package contains the registration reconciliation logic: the conflict
classifier, the registration workflow state machine and the feedback it
produces. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .classifier import (
    AggregateDecision,
    CandidateConflict,
    ClassificationResult,
    ConflictClassification,
    aggregate,
    classify,
)
from .dispatch import EffectDispatcher
from .exceptions import (
    AccessGrantError,
    AccessGrantFailure,
    DeliveryError,
    DuplicateKeyError,
    MemberFetchError,
    MemberFetchFailure,
    PersistenceError,
    RegistrationError,
    StoreError,
)
from .feedback import Feedback, FeedbackEmitter
from .models import Embed, Member, RegistrationRecord, SourceMessage
from .ports import AckSignal, MemberDirectory, Messenger, RecordStore
from .registration import (
    RegistrationWorkflow,
    WorkflowConfig,
    WorkflowOutcome,
    WorkflowResult,
    WorkflowState,
)

__all__ = [
    "AccessGrantError",
    "AccessGrantFailure",
    "AckSignal",
    "AggregateDecision",
    "CandidateConflict",
    "ClassificationResult",
    "ConflictClassification",
    "DeliveryError",
    "DuplicateKeyError",
    "EffectDispatcher",
    "Embed",
    "Feedback",
    "FeedbackEmitter",
    "Member",
    "MemberDirectory",
    "MemberFetchError",
    "MemberFetchFailure",
    "Messenger",
    "PersistenceError",
    "RecordStore",
    "RegistrationError",
    "RegistrationRecord",
    "RegistrationWorkflow",
    "SourceMessage",
    "StoreError",
    "WorkflowConfig",
    "WorkflowOutcome",
    "WorkflowResult",
    "WorkflowState",
    "aggregate",
    "classify",
]
