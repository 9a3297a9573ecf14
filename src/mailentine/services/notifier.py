"""
Notification Service.

Runs the daily pipeline: day number, message lookup, delivery.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from mailentine.config import Settings
from mailentine.core.day_count import resolve_timezone
from mailentine.infrastructure.logging import get_logger, log_duration
from mailentine.infrastructure.smtp import SmtpMailer
from mailentine.infrastructure.storage import MessageRepository, StateRepository


logger = get_logger(__name__)


class NotificationStatus(str, Enum):
    """Outcome of one pipeline run."""
    SENT = "sent"
    NOTHING_DUE = "nothing_due"


@dataclass(frozen=True)
class NotificationResult:
    """Result of running the pipeline once."""
    day: int
    status: NotificationStatus

    @property
    def sent(self) -> bool:
        return self.status == NotificationStatus.SENT


class NotificationService:
    """
    Service for the scheduled notification pipeline.

    Responsible for:
    - Computing today's day number (bootstrapping the state file)
    - Looking up the message scheduled for that day
    - Handing it to the mailer

    Errors are not caught here. StateFileError and MailDeliveryError
    reach the caller unchanged, and a failed send never writes state.
    """

    def __init__(
        self,
        settings: Settings,
        state_repository: Optional[StateRepository] = None,
        message_repository: Optional[MessageRepository] = None,
        mailer: Optional[SmtpMailer] = None,
    ) -> None:
        tz = resolve_timezone(settings.schedule.timezone)
        self._state_repo = state_repository or StateRepository(
            settings.schedule.state_file,
            tz=tz,
        )
        self._message_repo = message_repository or MessageRepository(
            settings.schedule.messages_file,
        )
        self._mailer = mailer or SmtpMailer(settings.smtp, settings.email)

    @log_duration("send_daily_notification")
    def run(self, now: Optional[datetime] = None) -> NotificationResult:
        """
        Run the pipeline once.

        Args:
            now: Current moment (defaults to the wall clock).

        Returns:
            NotificationResult with the day number and outcome.

        Raises:
            StateFileError: If a schedule file is unreadable or invalid.
            ConfigurationError: If SMTP settings are incomplete.
            MailDeliveryError: If the SMTP exchange fails.
        """
        day = self._state_repo.compute_day(now)
        lookup = self._message_repo.find_message(day)

        if not lookup.found:
            logger.info(
                "No message for today, skipping email",
                extra={"extra_fields": {"day": day}}
            )
            return NotificationResult(day=day, status=NotificationStatus.NOTHING_DUE)

        self._mailer.send(day, lookup.text)
        return NotificationResult(day=day, status=NotificationStatus.SENT)
