"""
Core Data Models for Expense Tracker

An ExpenseRecord is the only domain entity. Every field always has a value:
partial or malformed extractions are filled in with fallbacks before a record
is created, so the expense list never holds an undefined field.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class CaptureSource(str, Enum):
    """Where a submission came from."""
    MANUAL = "manual"
    TEXT = "text"
    VOICE = "voice"


class ExtractionErrorKind(str, Enum):
    """
    Closed set of extraction failure kinds.

    Provider-specific status codes are mapped onto these right after the
    network call; the UI only ever branches on this enum.
    """
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    MALFORMED = "malformed"
    UNKNOWN = "unknown"


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ExpenseRecord(BaseModel):
    """
    A normalized expense, as shown in the expense list.

    Records are immutable once appended.
    """
    model_config = ConfigDict(frozen=True)

    title: str = Field(
        ...,
        description="Short human-readable label"
    )
    description: str = Field(
        default="",
        description="Free text; the category when no description was given"
    )
    amount: float = Field(
        default=0.0,
        description="Amount spent"
    )
    date: str = Field(
        ...,
        description="Calendar date, normally YYYY-MM-DD"
    )


class ManualExpenseInput(BaseModel):
    """Fields typed into the manual entry form."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the expense was for"
    )
    description: str = Field(
        default="",
        max_length=500,
    )
    amount: float = Field(
        ...,
        ge=0,
        description="Amount spent"
    )
    expense_date: date = Field(
        default_factory=date.today,
        description="Day of the expense"
    )

    @field_validator('description', mode='before')
    @classmethod
    def none_description_is_empty(cls, v):
        return "" if v is None else v

    def to_record(self) -> ExpenseRecord:
        return ExpenseRecord(
            title=self.title,
            description=self.description,
            amount=self.amount,
            date=self.expense_date.isoformat(),
        )


class CaptureOutcome(BaseModel):
    """
    Result of one submission to the capture flow.

    Exactly one of these holds:
    - ``record`` is set: an expense was appended
    - ``ignored`` is True: nothing happened (blank input or busy)
    - ``error_kind`` is set: extraction failed, ``message`` is user-facing
    """

    record: Optional[ExpenseRecord] = None
    ignored: bool = False
    error_kind: Optional[ExtractionErrorKind] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.record is not None

    @classmethod
    def added(cls, record: ExpenseRecord) -> "CaptureOutcome":
        return cls(record=record)

    @classmethod
    def skipped(cls) -> "CaptureOutcome":
        return cls(ignored=True)

    @classmethod
    def failed(cls, kind: ExtractionErrorKind, message: str) -> "CaptureOutcome":
        return cls(error_kind=kind, message=message)
