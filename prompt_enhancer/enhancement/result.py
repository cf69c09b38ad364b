"""Outcome of a single enhancement round trip."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .errors import EnhancementError, ErrorCategory


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    moment = moment or utc_now()
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class EnhancementResult(BaseModel):
    """Transient result handed back to the caller and then discarded."""

    success: bool
    original_text: Optional[str] = None
    enhanced_text: Optional[str] = None
    error_message: Optional[str] = None
    error_category: Optional[ErrorCategory] = None
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_outcome_fields(self):
        """Enhanced text is present iff success, error message iff failure."""
        if self.success and (self.enhanced_text is None or self.error_message is not None):
            raise ValueError("Successful result needs enhanced_text and no error_message")
        if not self.success and (self.error_message is None or self.enhanced_text is not None):
            raise ValueError("Failed result needs error_message and no enhanced_text")
        return self

    @property
    def duration_ms(self) -> float:
        return (self.completed_at - self.started_at).total_seconds() * 1000

    @classmethod
    def succeeded(cls, original: str, enhanced: str, started_at: datetime) -> "EnhancementResult":
        return cls(
            success=True,
            original_text=original,
            enhanced_text=enhanced,
            started_at=started_at,
        )

    @classmethod
    def failed(cls, original, error: EnhancementError, started_at: datetime) -> "EnhancementResult":
        return cls(
            success=False,
            original_text=original if isinstance(original, str) else None,
            error_message=error.message,
            error_category=error.category,
            started_at=started_at,
        )
