"""
Main Orchestrator for Finance Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Mutations (validate → persist → commit → audit → invalidate insight)
2. Views (snapshot → aggregate)
3. Insights (snapshot → gateway → apply only if still current)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No financial operation without a signed-in user
- No mutation committed in memory before it reached storage
- No insight shown that was computed from an older snapshot
- Every step is audited

Logging out ends the session only. Records, budgets and settings stay
and are there again on the next login.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from finance_tracker.agents import (
    GatewayFailure,
    GatewayTimeout,
    GeminiInsightGateway,
    InsightGatewayInterface,
)
from finance_tracker.audit import AuditLogger, configure_logging, create_correlation_id
from finance_tracker.config import get_settings
from finance_tracker.models.audit import AuditEvent
from finance_tracker.models.expense import (
    AIInsight,
    Budget,
    DashboardSummary,
    Expense,
    MonthlyReport,
    ReportPeriod,
    User,
    UserSettings,
    ValidationIssue,
    initial_budgets,
)
from finance_tracker.models.translations import translate
from finance_tracker.queries import aggregation
from finance_tracker.queries.aggregation import PeriodLike
from finance_tracker.services.persistence import PersistenceSync
from finance_tracker.services.storage import (
    JsonFileStorage,
    KeyValueStorageInterface,
)
from finance_tracker.stores import (
    BudgetStore,
    RecordStore,
    SessionStore,
    SettingsStore,
)


class InsightState(BaseModel):
    """What the UI shows in the insight panel."""

    insight: Optional[AIInsight] = None
    is_loading: bool = False
    error: Optional[str] = None
    sequence: int = Field(default=0, ge=0, description="Latest request number")


class InsightFlow:
    """
    Orchestrates insight requests.

    Flow:
    1. Request → bump the sequence number, mark loading
    2. Call → await the gateway under a timeout
    3. Apply → only if no newer request or invalidation happened meanwhile

    Last request wins. A response for an older sequence number is dropped.
    Timeouts and gateway failures end in an explicit error, never in a
    panel that spins forever.
    """

    UNAVAILABLE_MESSAGE = "Insight unavailable, try again"
    NOT_CONFIGURED_MESSAGE = "Insights are not configured"

    def __init__(
        self,
        gateway: Optional[InsightGatewayInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        timeout_seconds: float = 30.0,
    ):
        self._gateway = gateway
        self._audit_logger = audit_logger or AuditLogger()
        self._timeout = timeout_seconds

        self._sequence = 0
        self._insight: Optional[AIInsight] = None
        self._is_loading = False
        self._error: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return self._gateway is not None

    @property
    def state(self) -> InsightState:
        return InsightState(
            insight=self._insight,
            is_loading=self._is_loading,
            error=self._error,
            sequence=self._sequence,
        )

    def invalidate(self) -> None:
        """
        Drop the cached insight after the data changed.

        Any request still in flight was computed from the old snapshot and
        will be discarded when it returns.
        """
        self._sequence += 1
        self._insight = None
        self._is_loading = False
        self._error = None
        self._audit_logger.log_insight_invalidated(self._sequence)

    async def refresh(self, expenses, budgets) -> InsightState:
        """
        Ask the gateway for a new insight on this snapshot.

        With no expenses there is nothing to assess and the gateway is not
        called.
        """
        expenses = tuple(expenses)
        budgets = tuple(budgets)
        if not expenses:
            return self.state
        if self._gateway is None:
            self._error = self.NOT_CONFIGURED_MESSAGE
            return self.state

        self._sequence += 1
        sequence = self._sequence
        correlation_id = create_correlation_id()
        self._is_loading = True
        self._error = None
        self._audit_logger.log_insight_requested(sequence, len(expenses), correlation_id)

        insight = None
        error: Optional[Exception] = None
        try:
            insight = await asyncio.wait_for(
                self._gateway.generate_insight(expenses, budgets),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            error = GatewayTimeout(f"No insight after {self._timeout:g} seconds")
        except GatewayFailure as e:
            error = e
        except Exception as e:
            # A gateway that breaks its contract still must not leave the panel loading
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            error = GatewayFailure(str(e))
        finally:
            # Cancellation included: the current request never leaves loading set
            if sequence == self._sequence:
                self._is_loading = False

        if sequence != self._sequence:
            self._audit_logger.log_insight_discarded(sequence, self._sequence, correlation_id)
            return self.state

        if error is not None:
            self._error = self.UNAVAILABLE_MESSAGE
            self._audit_logger.log_insight_failed(sequence, str(error), correlation_id)
        else:
            self._insight = insight
            self._audit_logger.log_insight_applied(sequence, insight.score, correlation_id)

        return self.state


class FinanceTracker:
    """
    Facade over the stores, persistence and insight flow.

    Construction rehydrates everything from storage, then writes back any
    document that had to be repaired or defaulted so storage and memory
    agree from the start.
    """

    def __init__(
        self,
        persistence: PersistenceSync,
        audit_logger: Optional[AuditLogger] = None,
        insight_flow: Optional[InsightFlow] = None,
        near_limit_threshold: float = aggregation.DEFAULT_NEAR_LIMIT_THRESHOLD,
        dashboard_goals: int = 3,
    ):
        self._audit_logger = audit_logger or AuditLogger()
        self._persistence = persistence
        self._near_limit_threshold = near_limit_threshold
        self._dashboard_goals = dashboard_goals

        state = persistence.load()
        persistence.write_back(state)
        self._load_issues = list(state.issues)

        self._records = RecordStore(state.expenses, persistence, self._audit_logger)
        self._budgets = BudgetStore(
            state.budgets,
            persistence,
            self._audit_logger,
            defaults=persistence.default_budgets,
        )
        self._settings = SettingsStore(state.settings, persistence, self._audit_logger)
        self._session = SessionStore(state.user, persistence, self._audit_logger)
        self._insights = insight_flow or InsightFlow(audit_logger=self._audit_logger)

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    @property
    def user(self) -> Optional[User]:
        return self._session.current_user

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    def login(self, email: str, name: str) -> User:
        return self._session.login(email, name)

    def logout(self) -> None:
        self._session.logout()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_expense(self, amount, category, description: str = "", date=None) -> Expense:
        """
        Record an expense for the signed-in user.

        Raises:
            NotAuthenticatedError: Nobody is signed in
            InvalidAmount, InvalidCategory, InvalidDate: Input rejected
            PersistenceWriteFailure: Nothing was recorded
        """
        self._session.require_user()
        expense = self._records.add(amount, category, description, date)
        self._insights.invalidate()
        return expense

    def remove_expense(self, expense_id: str) -> None:
        self._session.require_user()
        if self._records.get(expense_id) is None:
            return
        self._records.remove(expense_id)
        self._insights.invalidate()

    def set_budget_limit(self, category, limit) -> Budget:
        self._session.require_user()
        budget = self._budgets.set_limit(category, limit)
        self._insights.invalidate()
        return budget

    def reset_budgets(self) -> tuple[Budget, ...]:
        self._session.require_user()
        budgets = self._budgets.reset()
        self._insights.invalidate()
        return budgets

    def update_settings(self, currency_code=None, language=None) -> UserSettings:
        self._session.require_user()
        return self._settings.update(currency_code, language)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> UserSettings:
        """Readable without a session so the login screen can be localized."""
        return self._settings.current

    def expenses(self) -> tuple[Expense, ...]:
        self._session.require_user()
        return self._records.all()

    def budgets(self) -> tuple[Budget, ...]:
        self._session.require_user()
        return self._budgets.all()

    def total_spent(self) -> Decimal:
        return aggregation.total_spent(self.expenses())

    def spent_by_category(self, category) -> Decimal:
        return aggregation.spent_by_category(self.expenses(), category)

    def utilization(self, category) -> float:
        expenses = self.expenses()
        budget = self._budgets.get(category)
        return aggregation.utilization(expenses, budget)

    def dashboard(self) -> DashboardSummary:
        return aggregation.dashboard_summary(
            self.expenses(),
            self.budgets(),
            top=self._dashboard_goals,
            threshold=self._near_limit_threshold,
        )

    def monthly_report(self, period: Optional[PeriodLike] = None) -> MonthlyReport:
        """Report for a month. Defaults to the current month."""
        return aggregation.monthly_report(
            self.expenses(),
            self.budgets(),
            period if period is not None else date.today(),
            threshold=self._near_limit_threshold,
        )

    def available_periods(self) -> list[ReportPeriod]:
        return aggregation.available_periods(self.expenses())

    def format_amount(self, amount) -> str:
        """Render an amount in the chosen display currency."""
        return self._settings.current.currency.format(amount)

    def translate(self, key: str) -> str:
        """UI label in the chosen language. Works without a session."""
        return translate(self._settings.current.language, key)

    @property
    def load_issues(self) -> list[ValidationIssue]:
        """What had to be repaired when stored data was loaded."""
        return list(self._load_issues)

    def recent_activity(self, limit: int = 20) -> list[AuditEvent]:
        return self._audit_logger.recent_events(limit)

    # -------------------------------------------------------------------------
    # Insights
    # -------------------------------------------------------------------------

    @property
    def insight_state(self) -> InsightState:
        return self._insights.state

    async def refresh_insight(self) -> InsightState:
        """Request a fresh insight for the current records and budgets."""
        return await self._insights.refresh(self.expenses(), self.budgets())


def create_app_components(
    storage: Optional[KeyValueStorageInterface] = None,
    gateway: Optional[InsightGatewayInterface] = None,
    use_gemini: bool = True,
    key_prefix: Optional[str] = None,
) -> FinanceTracker:
    """
    Factory function to create the tracker with all its components.

    Args:
        storage: Durable medium. Defaults to JSON files in the configured
                 data directory.
        gateway: Insight generator. Defaults to Gemini when configured.
        use_gemini: Set to False to run without an insight generator.
        key_prefix: Overrides the configured storage key namespace.

    Returns:
        A loaded FinanceTracker
    """
    settings = get_settings()
    app_settings = settings.app
    storage_settings = settings.storage

    configure_logging(app_settings.effective_log_level)
    audit_logger = AuditLogger()

    if storage is None:
        storage = JsonFileStorage(storage_settings.data_dir, storage_settings.write_attempts)

    timeout_seconds = 30.0
    if gateway is None and use_gemini:
        try:
            gemini_settings = settings.gemini
            gateway = GeminiInsightGateway(gemini_settings)
            timeout_seconds = gemini_settings.timeout_seconds
        except Exception as e:
            # Gemini not configured - the tracker works without insights
            audit_logger.log_error(
                error_type="InsightGatewayUnavailable",
                error_message=str(e),
            )
            gateway = None

    persistence = PersistenceSync(
        storage,
        key_prefix=key_prefix if key_prefix is not None else storage_settings.key_prefix,
        audit_logger=audit_logger,
        default_budgets=initial_budgets(
            housing_limit=app_settings.housing_budget_default,
            standard_limit=app_settings.standard_budget_default,
        ),
    )

    insight_flow = InsightFlow(
        gateway=gateway,
        audit_logger=audit_logger,
        timeout_seconds=timeout_seconds,
    )

    return FinanceTracker(
        persistence,
        audit_logger=audit_logger,
        insight_flow=insight_flow,
        near_limit_threshold=app_settings.near_limit_threshold,
    )
