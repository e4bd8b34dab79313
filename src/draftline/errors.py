"""Exception taxonomy and the background error report."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


class DraftlineError(Exception):
    """Base error for the editing pipeline."""


class ValidationError(DraftlineError):
    """A required field was missing at save/publish/send time."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class PersistenceError(DraftlineError):
    """The record store call failed."""


class DeliveryError(DraftlineError):
    """The outbound email transport failed."""


@dataclass
class ReportedError:
    """One failure recorded without interrupting the user."""

    stage: str
    message: str
    source: str = ""
    error_type: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


@dataclass
class ErrorReport:
    """Collects failures that are reported silently (e.g. background autosave)."""

    errors: list[ReportedError] = field(default_factory=list)

    def add_error(
        self,
        stage: str,
        message: str,
        *,
        source: str = "",
        error_type: str = "",
    ) -> None:
        self.errors.append(
            ReportedError(stage=stage, message=message, source=source, error_type=error_type)
        )

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def clear(self) -> None:
        self.errors.clear()
