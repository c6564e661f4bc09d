"""
Feedback emitter - Maps workflow outcomes to acknowledgments.

Every terminal outcome maps to exactly one AckSignal, plus optional text and
embeds for the moderators who watch the registration channel.
"""

from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

from .messages import conflicts_summary, report_embed
from .models import DeliveryReport, DirectMessage, Embed
from .ports import AckSignal
from .registration import WorkflowOutcome, WorkflowResult

SIGNALS: dict[WorkflowOutcome, AckSignal] = {
    WorkflowOutcome.PROCEEDED: AckSignal.SUCCESS,
    WorkflowOutcome.WELCOMED_BACK: AckSignal.SUCCESS,
    WorkflowOutcome.ALREADY_VERIFIED: AckSignal.ALREADY_DONE,
    WorkflowOutcome.REPORTED_CONFLICTS: AckSignal.SUSPICIOUS,
    WorkflowOutcome.MEMBER_FETCH_FAILED: AckSignal.SOFT_ERROR,
    WorkflowOutcome.PERMISSION_FAILED: AckSignal.HARD_ERROR,
    WorkflowOutcome.PERSISTENCE_FAILED: AckSignal.HARD_ERROR,
}


@dataclass(frozen=True)
class Feedback:
    """Acknowledgment for the source message, with an optional reply."""

    signal: AckSignal
    text: str | None = None
    embeds: list[Embed] = field(default_factory=list)
    greet: bool = False


class FeedbackEmitter:
    """Builds the Feedback for a finished WorkflowResult."""

    def __init__(self, display_timezone: str = "America/Lima") -> None:
        self._timezone = ZoneInfo(display_timezone)

    def signal_for(self, outcome: WorkflowOutcome) -> AckSignal:
        return SIGNALS[outcome]

    def feedback(
        self, result: WorkflowResult, report: DeliveryReport | None = None
    ) -> Feedback:
        """
        Build the acknowledgment and moderator reply for a result.

        Args:
            result: A WorkflowResult in a terminal state
            report: Delivery report of the queued notifications, used to tell
                moderators whether the affected user was reached by DM

        Raises:
            ValueError: If the workflow has not finished
        """
        if result.outcome is None:
            raise ValueError("Cannot acknowledge an unfinished registration")

        signal = self.signal_for(result.outcome)

        if result.outcome == WorkflowOutcome.REPORTED_CONFLICTS:
            text = conflicts_summary(len(result.conflicts))
            if result.diagnostic:
                text = f"{text}\n{result.diagnostic}"
            embeds = [report_embed(conflict, self._timezone) for conflict in result.conflicts]
            return Feedback(signal=signal, text=text, embeds=embeds)

        if result.outcome == WorkflowOutcome.PERMISSION_FAILED:
            return Feedback(signal=signal, text=f"{result.diagnostic}{_dm_note(report)}")

        return Feedback(
            signal=signal,
            text=result.diagnostic,
            greet=result.outcome == WorkflowOutcome.WELCOMED_BACK,
        )


def _dm_note(report: DeliveryReport | None) -> str:
    if report is None:
        return ""
    for message in report.failed:
        if isinstance(message, DirectMessage):
            return f". Could not send DM to `{message.user_id}`"
    for message in report.delivered:
        if isinstance(message, DirectMessage):
            return f". DM feedback sent to `{message.recipient_tag or message.user_id}`"
    return ""
