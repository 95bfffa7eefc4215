"""
Tests for Expense Tracker models

Test strategy:
1. Unit tests for individual components (models, normalization, state machine)
2. Flow tests with a fake Gemini model and a fake speech backend
3. No real API calls in tests
"""

import pytest
from datetime import date
from uuid import uuid4

from pydantic import ValidationError

from expense_tracker.ledger import ExpenseLedger
from expense_tracker.models.expense import (
    CaptureOutcome,
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


class TestExpenseModels:
    """Tests for expense-related Pydantic models."""

    def test_expense_record_creation(self):
        """Test ExpenseRecord model creation."""
        record = ExpenseRecord(
            title="Biryani",
            description="Lunch",
            amount=100.0,
            date="2024-12-15",
        )
        assert record.title == "Biryani"
        assert record.amount == 100.0

    def test_expense_record_is_immutable(self):
        """Records are never updated after being appended."""
        record = ExpenseRecord(title="Tea", amount=20, date="2024-12-15")
        with pytest.raises(ValidationError):
            record.title = "Coffee"

    def test_manual_input_strips_whitespace(self):
        """Test that whitespace is stripped from the title."""
        entry = ManualExpenseInput(title="  Groceries  ", amount=250)
        assert entry.title == "Groceries"

    def test_manual_input_rejects_blank_title(self):
        with pytest.raises(ValidationError):
            ManualExpenseInput(title="   ", amount=10)

    def test_manual_input_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            ManualExpenseInput(title="Refund", amount=-5)

    def test_manual_input_to_record(self):
        entry = ManualExpenseInput(
            title="Taxi",
            description=None,
            amount=300,
            expense_date=date(2024, 12, 1),
        )
        record = entry.to_record()
        assert record == ExpenseRecord(
            title="Taxi", description="", amount=300.0, date="2024-12-01"
        )

    def test_manual_input_defaults_to_today(self):
        entry = ManualExpenseInput(title="Milk", amount=30)
        assert entry.expense_date == date.today()


class TestCaptureOutcome:
    """Tests for CaptureOutcome constructors."""

    def test_added(self):
        record = ExpenseRecord(title="Tea", amount=20, date="2024-12-15")
        outcome = CaptureOutcome.added(record)
        assert outcome.succeeded is True
        assert outcome.ignored is False

    def test_skipped(self):
        outcome = CaptureOutcome.skipped()
        assert outcome.ignored is True
        assert outcome.succeeded is False
        assert outcome.message is None

    def test_failed(self):
        outcome = CaptureOutcome.failed(ExtractionErrorKind.MALFORMED, "bad json")
        assert outcome.succeeded is False
        assert outcome.error_kind == ExtractionErrorKind.MALFORMED
        assert outcome.message == "bad json"


class TestExpenseLedger:
    """Tests for the append-only session list."""

    def test_append_preserves_order(self):
        ledger = ExpenseLedger()
        first = ExpenseRecord(title="A", amount=1, date="2024-12-01")
        second = ExpenseRecord(title="B", amount=2, date="2024-12-02")
        ledger.append(first)
        ledger.append(second)
        assert list(ledger) == [first, second]
        assert len(ledger) == 2
        assert ledger.total == 3

    def test_records_is_a_copy(self):
        ledger = ExpenseLedger()
        ledger.append(ExpenseRecord(title="A", amount=1, date="2024-12-01"))
        ledger.records.clear()
        assert len(ledger) == 1

    def test_empty_ledger_is_falsy(self):
        assert not ExpenseLedger()


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.EXTRACTION_FAILED,
            description="Extraction failed",
            correlation_id=correlation_id,
            details={"kind": "rate_limited"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "extraction_failed"
        assert log_dict["correlation_id"] == str(correlation_id)
        assert log_dict["details"]["kind"] == "rate_limited"

    def test_builder_extraction_failed(self):
        """Test AuditEventBuilder.extraction_failed."""
        correlation_id = uuid4()
        event = AuditEventBuilder.extraction_failed(
            kind="unauthorized",
            error_message="401 bad key",
            correlation_id=correlation_id,
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_code == "unauthorized"
        assert event.correlation_id == correlation_id

    def test_builder_expense_added(self):
        """Test AuditEventBuilder.expense_added."""
        event = AuditEventBuilder.expense_added(
            title="Biryani",
            amount=100.0,
            source="voice",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.details["source"] == "voice"
        assert "Biryani" in event.description

    def test_builder_microphone_denied_is_user_action(self):
        event = AuditEventBuilder.microphone_denied("denied")
        assert event.event_type == AuditEventType.MICROPHONE_DENIED
        assert event.is_user_action is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
