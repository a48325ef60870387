"""
Audit Models for Finance Tracker

Every state change in the tracker is recorded as an audit event.
This provides:
1. Traceability of every mutation to records, budgets and settings
2. Debugging information when stored data had to be repaired
3. A visible trail of insight requests, including discarded ones

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Records
    EXPENSE_ADDED = "expense_added"
    EXPENSE_REMOVED = "expense_removed"
    EXPENSE_REJECTED = "expense_rejected"

    # Budgets
    BUDGETS_INITIALIZED = "budgets_initialized"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_REJECTED = "budget_rejected"

    # Settings and session
    SETTINGS_UPDATED = "settings_updated"
    SETTINGS_REJECTED = "settings_rejected"
    USER_LOGGED_IN = "user_logged_in"
    USER_LOGGED_OUT = "user_logged_out"
    LOGIN_REJECTED = "login_rejected"

    # Persistence
    STATE_LOADED = "state_loaded"
    STATE_SAVED = "state_saved"
    STATE_REPAIRED = "state_repaired"
    SAVE_FAILED = "save_failed"

    # Insights
    INSIGHT_REQUESTED = "insight_requested"
    INSIGHT_APPLIED = "insight_applied"
    INSIGHT_DISCARDED = "insight_discarded"
    INSIGHT_FAILED = "insight_failed"
    INSIGHT_INVALIDATED = "insight_invalidated"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_REJECTION_TYPES = {
    "expense": AuditEventType.EXPENSE_REJECTED,
    "budget": AuditEventType.BUDGET_REJECTED,
    "settings": AuditEventType.SETTINGS_REJECTED,
    "user": AuditEventType.LOGIN_REJECTED,
}


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
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

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'budget', 'insight')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one insight request)"
    )

    description: str = Field(
        ...,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, "Food", "500")
        event = AuditEventBuilder.insight_discarded(sequence, latest, correlation_id)
    """

    @staticmethod
    def expense_added(
        expense_id: str,
        category: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense added: {category} {amount}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_removed(expense_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REMOVED,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense removed",
            is_user_action=True,
        )

    @staticmethod
    def input_rejected(
        entity_type: str,
        field: str,
        error_message: str,
    ) -> AuditEvent:
        event_type = _REJECTION_TYPES.get(entity_type, AuditEventType.EXPENSE_REJECTED)
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            description=f"Rejected {entity_type} input: invalid {field}",
            details={"field": field},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def budgets_initialized(categories: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGETS_INITIALIZED,
            entity_type="budget",
            description=f"Default budgets created for {len(categories)} categories",
            details={"categories": categories},
        )

    @staticmethod
    def budget_updated(
        category: str,
        old_limit: str,
        new_limit: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            entity_type="budget",
            entity_id=category,
            description=f"Budget for {category} changed from {old_limit} to {new_limit}",
            details={
                "old_limit": old_limit,
                "new_limit": new_limit,
            },
            is_user_action=True,
        )

    @staticmethod
    def settings_updated(currency: str, language: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            description=f"Settings changed: {currency} / {language}",
            details={
                "currency": currency,
                "language": language,
            },
            is_user_action=True,
        )

    @staticmethod
    def user_logged_in(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_IN,
            entity_type="user",
            entity_id=user_id,
            description="User signed in",
            is_user_action=True,
        )

    @staticmethod
    def user_logged_out(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_OUT,
            entity_type="user",
            entity_id=user_id,
            description="User signed out",
            is_user_action=True,
        )

    @staticmethod
    def state_loaded(
        authenticated: bool,
        expense_count: int,
        repaired: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            description=f"State loaded with {expense_count} expenses",
            details={
                "authenticated": authenticated,
                "expense_count": expense_count,
                "issues_repaired": repaired,
            },
        )

    @staticmethod
    def state_saved(key: str, size: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="storage_key",
            entity_id=key,
            description=f"Saved {key}",
            details={"bytes": size},
        )

    @staticmethod
    def state_repaired(
        key: str,
        issue_type: str,
        message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_REPAIRED,
            severity=AuditSeverity.WARNING,
            entity_type="storage_key",
            entity_id=key,
            description=f"Stored {key} repaired: {issue_type}",
            error_message=message,
        )

    @staticmethod
    def save_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage_key",
            entity_id=key,
            description=f"Failed to save {key}",
            error_message=error_message,
        )

    @staticmethod
    def insight_requested(
        sequence: int,
        expense_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_REQUESTED,
            entity_type="insight",
            entity_id=str(sequence),
            correlation_id=correlation_id,
            description=f"Insight requested for {expense_count} expenses",
            details={"expense_count": expense_count},
            is_user_action=True,
        )

    @staticmethod
    def insight_applied(
        sequence: int,
        score: float,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_APPLIED,
            entity_type="insight",
            entity_id=str(sequence),
            correlation_id=correlation_id,
            description=f"Insight applied with score {score:g}",
            details={"score": score},
        )

    @staticmethod
    def insight_discarded(
        sequence: int,
        latest_sequence: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_DISCARDED,
            severity=AuditSeverity.WARNING,
            entity_type="insight",
            entity_id=str(sequence),
            correlation_id=correlation_id,
            description="Stale insight response discarded",
            details={
                "sequence": sequence,
                "latest_sequence": latest_sequence,
            },
        )

    @staticmethod
    def insight_failed(
        sequence: int,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="insight",
            entity_id=str(sequence),
            correlation_id=correlation_id,
            description="Insight unavailable",
            error_message=error_message,
        )

    @staticmethod
    def insight_invalidated(sequence: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_INVALIDATED,
            severity=AuditSeverity.DEBUG,
            entity_type="insight",
            entity_id=str(sequence),
            description="Cached insight cleared after a data change",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
