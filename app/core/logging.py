"""
Structured logging setup for the Dictation Engine
"""

import logging
import structlog
from datetime import datetime
from typing import Dict, Any, List, Optional
from app.config import settings, Environment


def setup_logging():
    """Configures structured logging"""

    # Timestamper for consistent timestamps
    timestamper = structlog.processors.TimeStamper(fmt="ISO")

    processors = [
        structlog.processors.add_log_level,
        timestamper,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.environment == Environment.DEVELOPMENT:
        # Development: colored console output
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=True)
        ])
    else:
        # Production: JSON output
        processors.extend([
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer()
        ])

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = None):
    """Returns a configured logger"""
    return structlog.get_logger(name or __name__)


class AuditLogger:
    """Logger for extraction and auto-fill audit events"""

    def __init__(self):
        self.logger = get_logger("audit")

    def _enabled(self) -> bool:
        return settings.audit_log_enabled

    def log_extraction_pass(
        self,
        workflow_type: str,
        transcript_length: int,
        fields_extracted: List[str],
        needs_review: List[str],
        request_id: Optional[str] = None,
        **kwargs
    ):
        """Logs one extraction pass over a transcript. Never logs transcript text."""
        if not self._enabled():
            return
        self.logger.info(
            "extraction_pass",
            request_id=request_id,
            workflow_type=workflow_type,
            transcript_length=transcript_length,
            fields_extracted=fields_extracted,
            needs_review=needs_review,
            timestamp=datetime.utcnow().isoformat(),
            **kwargs
        )

    def log_autofill(
        self,
        session_id: Optional[str],
        workflow_type: str,
        updated_fields: List[str],
        explicit_fields: List[str],
        **kwargs
    ):
        """Logs the set of fields an auto-fill pass emitted"""
        if not self._enabled():
            return
        self.logger.info(
            "autofill_applied",
            session_id=session_id,
            workflow_type=workflow_type,
            updated_fields=updated_fields,
            explicit_fields=explicit_fields,
            timestamp=datetime.utcnow().isoformat(),
            **kwargs
        )

    def log_session_reset(self, session_id: Optional[str], workflow_type: str, reason: str):
        if not self._enabled():
            return
        self.logger.info(
            "session_reset",
            session_id=session_id,
            workflow_type=workflow_type,
            reason=reason,
            timestamp=datetime.utcnow().isoformat(),
        )

    def log_error(
        self,
        request_id: str,
        error_type: str,
        error_message: str,
        stack_trace: str = None,
        **kwargs: Dict[str, Any]
    ):
        """Logs error events"""
        self.logger.error(
            "error_event",
            request_id=request_id,
            error_type=error_type,
            error_message=error_message,
            stack_trace=stack_trace,
            timestamp=datetime.utcnow().isoformat(),
            **kwargs
        )


# Global audit logger instance
audit_logger = AuditLogger()
