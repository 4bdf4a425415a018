from __future__ import annotations

import logging
from typing import Protocol


logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class LoggingNotificationSink:
    """Default sink: records that a message was handed off, not its body.

    Reset mails carry a live token, so only recipient and subject are logged.
    """

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Notification queued to=%s subject=%r (%d chars)", to, subject, len(body))
