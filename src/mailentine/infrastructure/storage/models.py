"""
Schedule Document Models.

Pydantic models for the JSON documents on disk, plus the
lookup result handed to the services layer.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, StrictInt, StrictStr, field_validator

from mailentine.core.day_count import parse_start_date


class ScheduledMessage(BaseModel):
    """One entry of the schedule: the text to send on a given day."""

    # Out-of-range days never match a lookup; wrong types reject the file
    day: StrictInt = Field(..., description="Day number the message is due on")
    text: StrictStr = Field(..., description="Plaintext email body")


class ScheduleDocument(BaseModel):
    """
    Shape shared by the start-date file and the messages file.

    The start-date file always carries `start_date`; a messages file
    authored by hand may omit it.
    """

    start_date: Optional[str] = Field(
        default=None,
        description="First day of the schedule, YYYY-MM-DD",
    )
    messages: List[ScheduledMessage] = Field(default_factory=list)

    @field_validator("start_date")
    @classmethod
    def validate_start_date(cls, v: Optional[str]) -> Optional[str]:
        """Reject anything that is not a YYYY-MM-DD date."""
        if v is None:
            return v
        try:
            parse_start_date(v)
        except ValueError:
            raise ValueError(f"start_date must be YYYY-MM-DD, got {v!r}")
        return v

    def get_start_date(self) -> Optional[date]:
        if self.start_date is None:
            return None
        return parse_start_date(self.start_date)

    def first_message_for(self, day: int) -> Optional[ScheduledMessage]:
        """Linear scan; the first entry for a day wins over later duplicates."""
        for message in self.messages:
            if message.day == day:
                return message
        return None


@dataclass(frozen=True)
class LookupResult:
    """Result of looking up the message for a day."""
    day: int
    text: str = ""
    found: bool = False
