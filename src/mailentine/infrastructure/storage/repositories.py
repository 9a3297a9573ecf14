"""
JSON File Repositories.

Repository pattern over the two flat JSON documents the service owns:
the start-date state file and the day-to-text messages file.
"""

import os
import tempfile
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from mailentine.core.day_count import (
    day_number,
    format_start_date,
    local_date,
    now_in,
)
from mailentine.core.exceptions import StateFileError
from mailentine.infrastructure.logging import get_logger
from mailentine.infrastructure.storage.models import (
    LookupResult,
    ScheduleDocument,
)


logger = get_logger(__name__)

PathLike = Union[str, Path]


class JsonDocumentStore:
    """Reads and writes one schedule document on local disk."""

    def __init__(self, path: PathLike) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> ScheduleDocument:
        """
        Load and validate the document.

        Raises:
            StateFileError: If the file is missing, unreadable or malformed.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StateFileError(str(self._path), f"cannot read file: {e}") from e

        try:
            return ScheduleDocument.model_validate_json(raw)
        except PydanticValidationError as e:
            raise StateFileError(
                str(self._path),
                f"invalid document: {e.error_count()} error(s), first: {e.errors()[0]['msg']}",
            ) from e

    def write(self, document: ScheduleDocument) -> None:
        """
        Write the document atomically (temporary file, then rename).

        Raises:
            StateFileError: If the file cannot be written.
        """
        directory = self._path.parent
        payload = document.model_dump_json(indent=2)

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=directory,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_path, self._path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StateFileError(str(self._path), f"cannot write file: {e}") from e


class StateRepository:
    """Repository for the start-date state file."""

    def __init__(
        self,
        path: PathLike,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self._store = JsonDocumentStore(path)
        self._tz = tz

    @property
    def path(self) -> Path:
        return self._store.path

    def compute_day(self, now: Optional[datetime] = None) -> int:
        """
        Get today's day number, bootstrapping the state file on first run.

        Args:
            now: Current moment (defaults to the wall clock).

        Returns:
            Day number, 1 on the first ever run.

        Raises:
            StateFileError: If the state file cannot be read or trusted.
        """
        now = now or now_in(self._tz)

        if not self._store.exists():
            today = format_start_date(local_date(now, self._tz))
            self._store.write(ScheduleDocument(start_date=today, messages=[]))
            logger.info(
                "First run, setting today as day 1",
                extra={"extra_fields": {
                    "state_file": str(self.path),
                    "start_date": today,
                }}
            )
            return 1

        document = self._store.load()
        start_date = document.get_start_date()
        if start_date is None:
            raise StateFileError(str(self.path), "start_date is missing")

        try:
            day = day_number(start_date, now, self._tz)
        except ValueError as e:
            raise StateFileError(str(self.path), str(e)) from e

        logger.info(
            f"Calculated day count: {day}",
            extra={"extra_fields": {
                "start_date": document.start_date,
                "day": day,
            }}
        )
        return day


class MessageRepository:
    """Repository for the static, externally authored messages file."""

    def __init__(self, path: PathLike) -> None:
        self._store = JsonDocumentStore(path)

    @property
    def path(self) -> Path:
        return self._store.path

    def find_message(self, day: int) -> LookupResult:
        """
        Find the text scheduled for a day.

        Args:
            day: Day number to look up.

        Returns:
            LookupResult; `found` is False when nothing is scheduled.

        Raises:
            StateFileError: If the messages file cannot be read or parsed.
        """
        document = self._store.load()
        message = document.first_message_for(day)

        if message is None:
            logger.info(
                f"No message found for day {day}",
                extra={"extra_fields": {"day": day}}
            )
            return LookupResult(day=day)

        logger.info(
            f"Found message for day {day}",
            extra={"extra_fields": {"day": day}}
        )
        return LookupResult(day=day, text=message.text, found=True)
