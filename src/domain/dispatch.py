"""
Effect dispatcher - Delivers what a registration workflow queued.

Delivery is best-effort: a DeliveryError is logged and recorded in the
DeliveryReport, never turned into a workflow failure.
"""

import logging
from dataclasses import dataclass

from .exceptions import DeliveryError
from .feedback import Feedback, FeedbackEmitter
from .models import ChannelEmbed, DeliveryReport, DirectMessage, Notification, SourceMessage
from .ports import Messenger
from .registration import WorkflowResult

logger = logging.getLogger(__name__)


@dataclass
class EffectDispatcher:
    """Thin executor between a WorkflowResult and the messenger."""

    messenger: Messenger
    emitter: FeedbackEmitter

    def dispatch(self, source: SourceMessage, result: WorkflowResult) -> Feedback:
        """
        Deliver queued notifications, then acknowledge the source message.

        Returns:
            The Feedback that was (or was attempted to be) delivered
        """
        report = DeliveryReport()
        for notification in result.notifications:
            try:
                self._deliver(notification)
            except DeliveryError as e:
                logger.warning("Could not deliver %s: %s", type(notification).__name__, e)
                report.failed.append(notification)
            else:
                report.delivered.append(notification)

        feedback = self.emitter.feedback(result, report)

        try:
            self.messenger.acknowledge(source, feedback.signal)
        except DeliveryError as e:
            logger.warning("Could not acknowledge message %s: %s", source.message_id, e)

        if feedback.greet:
            try:
                self.messenger.greet(source)
            except DeliveryError as e:
                logger.warning("Could not greet on message %s: %s", source.message_id, e)

        if feedback.text or feedback.embeds:
            try:
                self.messenger.reply(source, feedback.text, feedback.embeds)
            except DeliveryError as e:
                logger.warning("Could not reply to message %s: %s", source.message_id, e)

        return feedback

    def _deliver(self, notification: Notification) -> None:
        if isinstance(notification, ChannelEmbed):
            self.messenger.send_channel_embed(
                notification.channel_id, notification.embed, greet=notification.greet
            )
        elif isinstance(notification, DirectMessage):
            self.messenger.send_direct_message(notification.user_id, notification.text)
        else:
            raise TypeError(f"Unknown notification: {notification!r}")
