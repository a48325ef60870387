"""End-to-end tests through the FinanceTracker facade."""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from conftest import FakeGateway, FlakyStorage
from finance_tracker.audit import AuditLogger
from finance_tracker.models import Category
from finance_tracker.orchestrator import FinanceTracker, InsightFlow, create_app_components
from finance_tracker.services import InMemoryStorage, PersistenceSync, PersistenceWriteFailure
from finance_tracker.stores import NotAuthenticatedError
from finance_tracker.validation import InvalidAmount, InvalidSetting


def build_tracker(storage, gateway=None):
    audit_logger = AuditLogger()
    return FinanceTracker(
        PersistenceSync(storage, audit_logger=audit_logger),
        audit_logger=audit_logger,
        insight_flow=InsightFlow(gateway or FakeGateway(), audit_logger),
    )


@pytest.fixture
def tracker(storage):
    tracker = build_tracker(storage)
    tracker.login("ana@example.com", "Ana")
    return tracker


class TestSession:

    def test_starts_signed_out(self):
        tracker = build_tracker(InMemoryStorage())
        assert not tracker.is_authenticated
        assert tracker.user is None

    def test_financial_operations_need_a_session(self):
        tracker = build_tracker(InMemoryStorage())
        with pytest.raises(NotAuthenticatedError):
            tracker.add_expense(500, "Food")
        with pytest.raises(NotAuthenticatedError):
            tracker.set_budget_limit("Food", 100)
        with pytest.raises(NotAuthenticatedError):
            tracker.expenses()

    def test_settings_readable_without_session(self):
        assert build_tracker(InMemoryStorage()).settings.currency.code == "INR"

    def test_logout_then_login_keeps_data(self, storage, tracker):
        tracker.add_expense(500, "Food", "lunch", "2024-03-01")
        tracker.set_budget_limit("Food", 3000)
        tracker.logout()

        restarted = build_tracker(storage)
        assert not restarted.is_authenticated
        restarted.login("ana@example.com", "Ana")

        assert restarted.total_spent() == Decimal("500")
        assert restarted.budgets()[0].limit == Decimal("3000")

    def test_session_survives_restart(self, storage, tracker):
        user = tracker.user
        restarted = build_tracker(storage)
        assert restarted.user == user


class TestScenarios:

    def test_add_expense_updates_totals(self, tracker):
        tracker.add_expense(500, "Food", "lunch", "2024-03-01")
        assert tracker.total_spent() == Decimal("500")
        assert tracker.spent_by_category("Food") == Decimal("500")
        assert tracker.spent_by_category("Rent") == Decimal("0")

    def test_overspent_budget_caps_at_hundred(self, tracker):
        tracker.add_expense(2500, "Food", "", "2024-03-01")
        assert tracker.utilization("Food") == 100.0
        assert tracker.dashboard().goals[0].near_limit

    def test_remove_expense(self, tracker):
        expense = tracker.add_expense(10, "Books")
        tracker.remove_expense(expense.id)
        tracker.remove_expense(expense.id)
        assert tracker.expenses() == ()

    def test_rejected_expense_changes_nothing(self, tracker):
        with pytest.raises(InvalidAmount):
            tracker.add_expense(-1, "Food")
        assert tracker.expenses() == ()

    def test_monthly_report(self, tracker):
        tracker.add_expense(100, "Food", "", "2024-03-05")
        tracker.add_expense(50, "Food", "", "2024-04-05")
        report = tracker.monthly_report("2024-03")
        assert report.total == Decimal("100")
        assert [str(p) for p in tracker.available_periods()] == ["2024-04", "2024-03"]

    def test_monthly_report_defaults_to_current_month(self, tracker):
        tracker.add_expense(7, "Misc")
        assert tracker.monthly_report().total == Decimal("7")
        assert tracker.monthly_report().period.month == date.today().month

    def test_reset_budgets(self, tracker):
        tracker.set_budget_limit(Category.RENT, 1)
        tracker.reset_budgets()
        assert {b.category: b.limit for b in tracker.budgets()}[Category.RENT] == Decimal("15000")


class TestSettings:

    def test_format_amount_follows_currency(self, tracker):
        assert tracker.format_amount(Decimal("1234.5")) == "₹1,234.50"
        tracker.update_settings(currency_code="USD")
        assert tracker.format_amount(Decimal("1234.5")) == "$1,234.50"

    def test_invalid_setting(self, tracker):
        with pytest.raises(InvalidSetting):
            tracker.update_settings(language="xx")
        assert tracker.settings.language.value == "en"

    def test_settings_survive_restart(self, storage, tracker):
        tracker.update_settings(currency_code="BDT", language="bn")
        restarted = build_tracker(storage)
        assert restarted.settings.currency.symbol == "৳"
        assert restarted.settings.language.value == "bn"


    def test_labels_follow_language(self, tracker):
        assert tracker.translate("log_out") == "Log out"
        tracker.update_settings(language="fr")
        assert tracker.translate("log_out") == "Se déconnecter"
        assert tracker.translate("connection_status") == "Connection status"

    def test_labels_available_before_login(self, storage, tracker):
        tracker.update_settings(language="hi")
        tracker.logout()
        assert build_tracker(storage).translate("sign_in") == "साइन इन"

class TestPersistenceIntegration:

    def test_defaults_written_on_first_start(self):
        storage = InMemoryStorage()
        build_tracker(storage)
        assert storage.keys() == ["smarty_budgets", "smarty_expenses", "smarty_settings"]

    def test_corrupt_storage_is_repaired(self):
        storage = InMemoryStorage({"smarty_expenses": "{{{"})
        tracker = build_tracker(storage)
        assert [i.issue_type for i in tracker.load_issues] == ["unparsable"]
        assert storage.read("smarty_expenses") == "[]"

    def test_write_failure_rolls_back(self, storage, tracker):
        tracker.add_expense(1, "Food")
        storage.fail_writes = True
        with pytest.raises(PersistenceWriteFailure):
            tracker.add_expense(2, "Food")
        with pytest.raises(PersistenceWriteFailure):
            tracker.set_budget_limit("Food", 5)
        assert tracker.total_spent() == Decimal("1")
        assert tracker.budgets()[0].limit == Decimal("2000")

    def test_startup_survives_failing_storage(self):
        storage = FlakyStorage()
        storage.fail_writes = True
        tracker = build_tracker(storage)
        assert not tracker.is_authenticated

    def test_activity_is_recorded(self, tracker):
        tracker.add_expense(1, "Food")
        types = [e.event_type.value for e in tracker.recent_activity()]
        assert "expense_added" in types
        assert "user_logged_in" in types


class TestInsights:

    def test_refresh_and_invalidate_on_mutation(self, tracker):
        tracker.add_expense(500, "Food")
        state = asyncio.run(tracker.refresh_insight())
        assert state.insight is not None

        tracker.add_expense(20, "Books")
        assert tracker.insight_state.insight is None

    def test_refresh_without_expenses(self, storage):
        gateway = FakeGateway()
        tracker = build_tracker(storage, gateway)
        tracker.login("ana@example.com", "Ana")
        asyncio.run(tracker.refresh_insight())
        assert gateway.calls == []

    def test_settings_change_keeps_insight(self, tracker):
        tracker.add_expense(500, "Food")
        asyncio.run(tracker.refresh_insight())
        tracker.update_settings(currency_code="EUR")
        assert tracker.insight_state.insight is not None


def test_create_app_components_without_gemini():
    tracker = create_app_components(storage=InMemoryStorage(), use_gemini=False)
    tracker.login("ana@example.com", "Ana")
    tracker.add_expense(500, "Food")
    assert tracker.total_spent() == Decimal("500")
    state = asyncio.run(tracker.refresh_insight())
    assert state.error == InsightFlow.NOT_CONFIGURED_MESSAGE
