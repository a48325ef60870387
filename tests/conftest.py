"""
Shared fixtures for Finance Tracker tests.

No test touches the network: the insight gateway is always a fake and
storage is in memory or under tmp_path.
"""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from finance_tracker.agents import InsightGatewayInterface
from finance_tracker.audit import AuditLogger
from finance_tracker.models import AIInsight, Category, Expense
from finance_tracker.services import (
    InMemoryStorage,
    PersistenceSync,
    PersistenceWriteFailure,
)


class FlakyStorage(InMemoryStorage):
    """In-memory storage whose writes can be switched off."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_writes = False
        self.write_count = 0

    def write(self, key, value):
        if self.fail_writes:
            raise PersistenceWriteFailure(key, "disk full")
        self.write_count += 1
        super().write(key, value)

    def delete(self, key):
        if self.fail_writes:
            raise PersistenceWriteFailure(key, "disk full")
        return super().delete(key)


class FakeGateway(InsightGatewayInterface):
    """Returns canned insights and remembers what it was asked."""

    def __init__(self, insight=None, error=None):
        self.insight = insight or AIInsight(score=75, summary="Spending is on track", tips=["Cook at home"])
        self.error = error
        self.calls = []

    async def generate_insight(self, expenses, budgets):
        self.calls.append((tuple(expenses), tuple(budgets)))
        if self.error:
            raise self.error
        return self.insight


class BlockingGateway(InsightGatewayInterface):
    """The first call waits for `release`; later calls answer at once."""

    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    async def generate_insight(self, expenses, budgets):
        self.calls += 1
        call = self.calls
        if call == 1:
            self.started.set()
            await self.release.wait()
        return AIInsight(score=10 * call, summary=f"answer {call}", tips=[])


class SlowGateway(InsightGatewayInterface):
    async def generate_insight(self, expenses, budgets):
        await asyncio.sleep(10)
        return AIInsight(score=50, summary="too late")


def make_expense(amount="100", category=Category.FOOD, day=date(2024, 3, 1), description="", expense_id=None):
    """Build an Expense directly, bypassing the store."""
    kwargs = {
        "amount": Decimal(str(amount)),
        "category": category,
        "date": day,
        "description": description,
    }
    if expense_id:
        kwargs["id"] = expense_id
    return Expense(**kwargs)


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def storage():
    return FlakyStorage()


@pytest.fixture
def persistence(storage, audit_logger):
    return PersistenceSync(storage, audit_logger=audit_logger)


@pytest.fixture
def fake_gateway():
    return FakeGateway()

