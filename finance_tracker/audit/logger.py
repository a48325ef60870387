"""
Audit Logger

DESIGN DECISION: Every state change in the tracker is logged.
This provides:
1. Complete traceability of mutations
2. Debugging capability when stored data had to be repaired
3. A recent-activity feed the UI can show

The audit logger:
- Is synchronous, like the stores that call it
- Keeps a bounded in-memory history of recent events
- Supports correlation IDs to trace one insight request end to end
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through stdlib logging at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory history (for the activity feed and tests)
    """

    def __init__(self, history_size: int = 200):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory.
        """
        self._logger = structlog.get_logger("finance_tracker.audit")
        self._history: deque[AuditEvent] = deque(maxlen=history_size)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and remember it."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._history)
        events.reverse()
        return events[:limit]

    def log_expense_added(self, expense_id: str, category: str, amount: str) -> None:
        self.log(AuditEventBuilder.expense_added(expense_id, category, amount))

    def log_expense_removed(self, expense_id: str) -> None:
        self.log(AuditEventBuilder.expense_removed(expense_id))

    def log_input_rejected(self, entity_type: str, field: str, error_message: str) -> None:
        """Log a mutation refused by validation."""
        self.log(AuditEventBuilder.input_rejected(entity_type, field, error_message))

    def log_budgets_initialized(self, categories: list[str]) -> None:
        self.log(AuditEventBuilder.budgets_initialized(categories))

    def log_budget_updated(self, category: str, old_limit: str, new_limit: str) -> None:
        self.log(AuditEventBuilder.budget_updated(category, old_limit, new_limit))

    def log_settings_updated(self, currency: str, language: str) -> None:
        self.log(AuditEventBuilder.settings_updated(currency, language))

    def log_user_logged_in(self, user_id: str) -> None:
        self.log(AuditEventBuilder.user_logged_in(user_id))

    def log_user_logged_out(self, user_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.user_logged_out(user_id))

    def log_state_loaded(self, authenticated: bool, expense_count: int, repaired: int) -> None:
        self.log(AuditEventBuilder.state_loaded(authenticated, expense_count, repaired))

    def log_state_saved(self, key: str, size: int) -> None:
        self.log(AuditEventBuilder.state_saved(key, size))

    def log_state_repaired(self, key: str, issue_type: str, message: str) -> None:
        """Log stored data that was replaced or dropped during load."""
        self.log(AuditEventBuilder.state_repaired(key, issue_type, message))

    def log_save_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.save_failed(key, error_message))

    def log_insight_requested(self, sequence: int, expense_count: int, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.insight_requested(sequence, expense_count, correlation_id))

    def log_insight_applied(self, sequence: int, score: float, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.insight_applied(sequence, score, correlation_id))

    def log_insight_discarded(self, sequence: int, latest_sequence: int, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.insight_discarded(sequence, latest_sequence, correlation_id))

    def log_insight_failed(self, sequence: int, error_message: str, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.insight_failed(sequence, error_message, correlation_id))

    def log_insight_invalidated(self, sequence: int) -> None:
        self.log(AuditEventBuilder.insight_invalidated(sequence))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., an insight refresh).
    """
    return uuid4()
