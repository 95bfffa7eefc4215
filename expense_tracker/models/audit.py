"""
Audit Models for Expense Tracker

Every significant step of the capture pipeline produces an audit event.
Events are written to the structured local log only; there is no
persistence layer, so the trail lives as long as the log output does.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each stage of the capture pipeline has its own event type.
    """
    # Submissions
    SUBMISSION_IGNORED = "submission_ignored"

    # Extraction
    EXTRACTION_REQUESTED = "extraction_requested"
    EXTRACTION_SUCCEEDED = "extraction_succeeded"
    EXTRACTION_FAILED = "extraction_failed"

    # Expense list
    EXPENSE_ADDED = "expense_added"

    # Voice capture
    VOICE_STARTED = "voice_started"
    VOICE_STOPPED = "voice_stopped"
    VOICE_TRANSCRIPT = "voice_transcript"
    VOICE_ERROR = "voice_error"
    MICROPHONE_DENIED = "microphone_denied"
    SPEECH_UNAVAILABLE = "speech_unavailable"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Correlation - all events of one submission share this
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one AI submission)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.extraction_requested("text", 42, correlation_id)
        event = AuditEventBuilder.expense_added("Biryani", 100.0, "text", correlation_id)
    """

    @staticmethod
    def submission_ignored(
        source: str,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBMISSION_IGNORED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Submission ignored: {reason}",
            details={
                "source": source,
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def extraction_requested(
        source: str,
        text_length: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_REQUESTED,
            correlation_id=correlation_id,
            description=f"Extraction requested from {source} input",
            details={
                "source": source,
                "text_length": text_length,
            },
            is_user_action=True,
        )

    @staticmethod
    def extraction_succeeded(
        model_name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_SUCCEEDED,
            correlation_id=correlation_id,
            description=f"Extraction succeeded with {model_name}",
            details={
                "model_name": model_name,
            },
        )

    @staticmethod
    def extraction_failed(
        kind: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"Extraction failed: {kind}",
            error_code=kind,
            error_message=error_message,
            details={
                "kind": kind,
            },
        )

    @staticmethod
    def expense_added(
        title: str,
        amount: float,
        source: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            correlation_id=correlation_id,
            description=f"Expense added: {title[:200]} - {amount:g}",
            details={
                "title": title,
                "amount": amount,
                "source": source,
            },
        )

    @staticmethod
    def voice_started(language: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VOICE_STARTED,
            description="Voice capture started",
            details={
                "language": language,
            },
            is_user_action=True,
        )

    @staticmethod
    def voice_stopped(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VOICE_STOPPED,
            description=f"Voice capture stopped: {reason}",
            details={
                "reason": reason,
            },
        )

    @staticmethod
    def voice_transcript(transcript_length: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VOICE_TRANSCRIPT,
            description="Final transcript received",
            details={
                "transcript_length": transcript_length,
            },
        )

    @staticmethod
    def voice_error(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VOICE_ERROR,
            severity=AuditSeverity.ERROR,
            description="Speech recognition failed",
            error_message=error_message,
        )

    @staticmethod
    def microphone_denied(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MICROPHONE_DENIED,
            severity=AuditSeverity.WARNING,
            description="Microphone access denied",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def speech_unavailable(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPEECH_UNAVAILABLE,
            severity=AuditSeverity.WARNING,
            description="Speech recognition is not supported here",
            error_message=error_message,
            is_user_action=True,
        )
