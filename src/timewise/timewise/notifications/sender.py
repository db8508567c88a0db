from __future__ import annotations

import logging
from typing import Protocol, Sequence

from .model import EventSummary

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    def send(self, summary: EventSummary, addresses: Sequence[str]) -> None:
        raise NotImplementedError


class LoggingNotificationSender(NotificationSender):
    """Default sender: records the message instead of delivering email."""

    def send(self, summary: EventSummary, addresses: Sequence[str]) -> None:
        logger.info(
            "Notify %d recipient(s) about event %s: %s -> %s",
            len(addresses),
            summary.event_id,
            summary.subject,
            ", ".join(addresses),
        )
        logger.debug("Notification body:\n%s", summary.render_body())
