"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
"""

from expense_tracker.models.expense import (
    CaptureOutcome,
    CaptureSource,
    ExpenseRecord,
    ExtractionErrorKind,
    ManualExpenseInput,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "CaptureOutcome",
    "CaptureSource",
    "ExpenseRecord",
    "ExtractionErrorKind",
    "ManualExpenseInput",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
