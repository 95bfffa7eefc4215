"""
Audit Logger

Every significant action in the capture pipeline is logged as a structured
event. Logging is local only; a logging failure never crashes the app.

Correlation IDs tie together the events of one submission
(requested -> succeeded/failed -> expense added).
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(debug: bool = False) -> None:
    """Route stdlib logging (which structlog renders through) to stderr."""
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


class AuditLogger:
    """
    Central audit logging service.

    Writes AuditEvents to the structured local log at a level matching
    their severity.
    """

    def __init__(self):
        self._logger = structlog.get_logger("expense_tracker.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False

        return True

    def log_submission_ignored(
        self,
        source: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.submission_ignored(
            source=source,
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_extraction_requested(
        self,
        source: str,
        text_length: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.extraction_requested(
            source=source,
            text_length=text_length,
            correlation_id=correlation_id,
        ))

    def log_extraction_succeeded(
        self,
        model_name: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.extraction_succeeded(
            model_name=model_name,
            correlation_id=correlation_id,
        ))

    def log_extraction_failed(
        self,
        kind: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a classified extraction failure."""
        self.log(AuditEventBuilder.extraction_failed(
            kind=kind,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_expense_added(
        self,
        title: str,
        amount: float,
        source: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_added(
            title=title,
            amount=amount,
            source=source,
            correlation_id=correlation_id,
        ))

    def log_voice_started(self, language: str) -> None:
        self.log(AuditEventBuilder.voice_started(language=language))

    def log_voice_stopped(self, reason: str) -> None:
        self.log(AuditEventBuilder.voice_stopped(reason=reason))

    def log_voice_transcript(self, transcript_length: int) -> None:
        self.log(AuditEventBuilder.voice_transcript(transcript_length=transcript_length))

    def log_voice_error(self, error_message: str) -> None:
        self.log(AuditEventBuilder.voice_error(error_message=error_message))

    def log_microphone_denied(self, error_message: str) -> None:
        self.log(AuditEventBuilder.microphone_denied(error_message=error_message))

    def log_speech_unavailable(self, error_message: str) -> None:
        self.log(AuditEventBuilder.speech_unavailable(error_message=error_message))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new submission and pass it
    through all subsequent operations.
    """
    return uuid4()
