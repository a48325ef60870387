"""
Tests for the insight flow and the Gemini response parser.

The flow is async; each test drives it with asyncio.run so no plugin is
needed. No test calls Gemini.
"""

import asyncio

import pytest

from conftest import BlockingGateway, FakeGateway, SlowGateway, make_expense
from finance_tracker.agents import GatewayFailure, GeminiInsightGateway
from finance_tracker.audit import AuditLogger
from finance_tracker.config import GeminiSettings
from finance_tracker.models import Category, initial_budgets
from finance_tracker.models.audit import AuditEventType
from finance_tracker.orchestrator import InsightFlow


EXPENSES = (make_expense("500", Category.FOOD),)
BUDGETS = initial_budgets()


def event_types(audit_logger):
    return [e.event_type for e in audit_logger.recent_events()]


class TestInsightFlow:

    def test_refresh_applies_insight(self):
        gateway = FakeGateway()
        flow = InsightFlow(gateway, AuditLogger())

        state = asyncio.run(flow.refresh(EXPENSES, BUDGETS))

        assert state.insight == gateway.insight
        assert not state.is_loading
        assert state.error is None
        assert gateway.calls == [(EXPENSES, BUDGETS)]

    def test_no_expenses_skips_gateway(self):
        gateway = FakeGateway()
        flow = InsightFlow(gateway, AuditLogger())

        state = asyncio.run(flow.refresh((), BUDGETS))

        assert gateway.calls == []
        assert state.insight is None
        assert state.sequence == 0

    def test_gateway_failure_becomes_error_state(self):
        audit_logger = AuditLogger()
        flow = InsightFlow(FakeGateway(error=GatewayFailure("bad json")), audit_logger)

        state = asyncio.run(flow.refresh(EXPENSES, BUDGETS))

        assert state.error == InsightFlow.UNAVAILABLE_MESSAGE
        assert not state.is_loading
        assert state.insight is None
        assert AuditEventType.INSIGHT_FAILED in event_types(audit_logger)

    def test_unexpected_gateway_error_still_clears_loading(self):
        flow = InsightFlow(FakeGateway(error=RuntimeError("boom")), AuditLogger())
        state = asyncio.run(flow.refresh(EXPENSES, BUDGETS))
        assert state.error == InsightFlow.UNAVAILABLE_MESSAGE
        assert not state.is_loading

    def test_timeout_becomes_error_state(self):
        flow = InsightFlow(SlowGateway(), AuditLogger(), timeout_seconds=0.01)
        state = asyncio.run(flow.refresh(EXPENSES, BUDGETS))
        assert state.error == InsightFlow.UNAVAILABLE_MESSAGE
        assert not state.is_loading

    def test_cancelled_refresh_clears_loading(self):
        async def scenario():
            flow = InsightFlow(SlowGateway(), AuditLogger())
            pending = asyncio.create_task(flow.refresh(EXPENSES, BUDGETS))
            await asyncio.sleep(0)
            assert flow.state.is_loading
            pending.cancel()
            with pytest.raises(asyncio.CancelledError):
                await pending
            return flow.state

        state = asyncio.run(scenario())

        assert not state.is_loading
        assert state.insight is None

    def test_error_cleared_by_next_success(self):
        gateway = FakeGateway(error=GatewayFailure("down"))
        flow = InsightFlow(gateway, AuditLogger())
        asyncio.run(flow.refresh(EXPENSES, BUDGETS))

        gateway.error = None
        state = asyncio.run(flow.refresh(EXPENSES, BUDGETS))

        assert state.error is None
        assert state.insight == gateway.insight

    def test_not_configured(self):
        state = asyncio.run(InsightFlow(None, AuditLogger()).refresh(EXPENSES, BUDGETS))
        assert state.error == InsightFlow.NOT_CONFIGURED_MESSAGE

    def test_invalidate_clears_insight(self):
        flow = InsightFlow(FakeGateway(), AuditLogger())
        asyncio.run(flow.refresh(EXPENSES, BUDGETS))
        flow.invalidate()
        assert flow.state.insight is None
        assert flow.state.sequence == 2

    def test_response_after_invalidation_is_discarded(self):
        audit_logger = AuditLogger()

        async def scenario():
            gateway = BlockingGateway()
            flow = InsightFlow(gateway, audit_logger)
            pending = asyncio.create_task(flow.refresh(EXPENSES, BUDGETS))
            await gateway.started.wait()
            assert flow.state.is_loading
            flow.invalidate()
            gateway.release.set()
            return await pending

        state = asyncio.run(scenario())

        assert state.insight is None
        assert not state.is_loading
        assert AuditEventType.INSIGHT_DISCARDED in event_types(audit_logger)

    def test_last_request_wins(self):
        """An older response arriving after a newer one does not overwrite it."""

        async def scenario():
            gateway = BlockingGateway()
            flow = InsightFlow(gateway, AuditLogger())
            first = asyncio.create_task(flow.refresh(EXPENSES, BUDGETS))
            await gateway.started.wait()
            second = await flow.refresh(EXPENSES, BUDGETS)
            gateway.release.set()
            await first
            return second, flow.state

        second, final = asyncio.run(scenario())

        assert second.insight.summary == "answer 2"
        assert final.insight.summary == "answer 2"
        assert not final.is_loading


class TestGeminiResponseParsing:

    def test_parses_plain_json(self):
        insight = GeminiInsightGateway.parse_response('{"score": 82, "summary": "Good", "tips": ["Keep going"]}')
        assert insight.score == 82
        assert insight.tips == ["Keep going"]

    def test_parses_fenced_json(self):
        text = '```json\n{"score": 40, "summary": "Rent is heavy", "tips": []}\n```'
        assert GeminiInsightGateway.parse_response(text).summary == "Rent is heavy"

    @pytest.mark.parametrize("text", [
        "",
        "no json here",
        '{"score": 150, "summary": "impossible"}',
        '{"score": 50}',
        '{"score": 50, "summary": "x",',
    ])
    def test_rejects_invalid(self, text):
        with pytest.raises(GatewayFailure):
            GeminiInsightGateway.parse_response(text)

    def test_prompt_contains_snapshot(self):
        gateway = GeminiInsightGateway(GeminiSettings(api_key="test-key"))
        prompt = gateway.build_prompt(EXPENSES, BUDGETS)
        assert "Total spent: 500" in prompt
        assert "- Food: spent 500 of limit 2000" in prompt
        assert "2024-03-01 | Food | 500" in prompt
