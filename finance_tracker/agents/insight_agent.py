"""
Insight Gateway

DESIGN DECISION: The LLM is an ADVISOR, not a BOOKKEEPER.
It receives a read-only snapshot of expenses and budgets and returns a
score, a summary and a few tips. It never sees the stores, never writes
anything, and its output is validated like any other untrusted input.

CRITICAL BOUNDARIES:
- CAN: Comment on spending patterns in the snapshot
- CANNOT: Change records, budgets or settings
- MUST: Answer with a JSON object that validates as AIInsight, or the
  request counts as failed

Callers depend on InsightGatewayInterface only, so tests and offline runs
swap the Gemini gateway for a fake.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Optional

import google.generativeai as genai
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.config import GeminiSettings, get_settings
from finance_tracker.models.expense import AIInsight, Budget, Expense
from finance_tracker.queries.aggregation import category_breakdown, total_spent


class InsightGatewayInterface(ABC):
    """
    Abstract interface for insight generators.

    Implementations take a snapshot and return an AIInsight. They raise
    GatewayFailure for anything that did not produce a valid insight.
    """

    @abstractmethod
    async def generate_insight(
        self,
        expenses: Sequence[Expense],
        budgets: Sequence[Budget],
    ) -> AIInsight:
        """
        Produce qualitative feedback on a snapshot.

        Args:
            expenses: Records at the time of the request
            budgets: Limits at the time of the request

        Returns:
            Validated AIInsight

        Raises:
            GatewayFailure: If no valid insight could be produced
        """
        pass


class GeminiInsightGateway(InsightGatewayInterface):
    """
    Insight generator backed by Gemini.

    RESPONSIBILITIES:
    - Summarize the snapshot into a compact prompt
    - Ask for a JSON answer and validate it
    - Retry transient failures a bounded number of times
    """

    # Only the most recent records go into the prompt
    MAX_PROMPT_EXPENSES = 50

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
                "response_mime_type": "application/json",
            }
        )

    async def generate_insight(
        self,
        expenses: Sequence[Expense],
        budgets: Sequence[Budget],
    ) -> AIInsight:
        prompt = self.build_prompt(expenses, budgets)

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=4),
            retry=retry_if_exception_type(GatewayFailure),
            reraise=True,
        ):
            with attempt:
                try:
                    response = await self._model.generate_content_async(prompt)
                    text = response.text
                except Exception as e:
                    raise GatewayFailure(f"Gemini request failed: {e}") from e
                return self.parse_response(text)

    def build_prompt(self, expenses: Sequence[Expense], budgets: Sequence[Budget]) -> str:
        """Render the snapshot as a prompt. Amounts stay in plain numbers."""
        breakdown = category_breakdown(expenses)

        budget_lines = [
            f"- {b.category.value}: spent {breakdown[b.category]} of limit {b.limit}"
            for b in budgets
        ]
        expense_lines = [
            f"- {e.date.isoformat()} | {e.category.value} | {e.amount} | {e.description or '-'}"
            for e in list(expenses)[:self.MAX_PROMPT_EXPENSES]
        ]

        return f"""You are a friendly financial coach for a student tracking personal expenses.

Total spent: {total_spent(expenses)}

Budgets (category: spent of limit):
{chr(10).join(budget_lines) or "- none"}

Recent expenses (date | category | amount | note):
{chr(10).join(expense_lines) or "- none"}

Assess how healthy this spending is against the budgets.

Respond with ONLY a JSON object in this exact format:
{{"score": 72, "summary": "one or two sentences", "tips": ["short actionable tip", "another tip"]}}

The score is 0 (very poor) to 100 (excellent). Give at most 3 tips.
Use ONLY the numbers above. Do NOT invent expenses."""

    @staticmethod
    def parse_response(text: str) -> AIInsight:
        """
        Extract and validate the JSON object in a model response.

        Raises:
            GatewayFailure: If there is no valid insight in the text
        """
        text = (text or "").strip()
        start = text.find("{")
        end = text.rfind("}") + 1
        if start < 0 or end <= start:
            raise GatewayFailure("Insight response contained no JSON object")

        try:
            data = json.loads(text[start:end])
            return AIInsight.model_validate(data)
        except (ValueError, ValidationError) as e:
            raise GatewayFailure(f"Insight response was not a valid insight: {e}") from e


class GatewayFailure(Exception):
    """The insight generator did not produce a valid insight."""
    pass


class GatewayTimeout(GatewayFailure):
    """The insight generator did not answer in time."""
    pass
