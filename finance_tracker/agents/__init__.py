"""
AI Agents Package

The insight gateway: an external collaborator consumed through an
interface, never trusted with state.
"""

from finance_tracker.agents.insight_agent import (
    GatewayFailure,
    GatewayTimeout,
    GeminiInsightGateway,
    InsightGatewayInterface,
)

__all__ = [
    "GatewayFailure",
    "GatewayTimeout",
    "GeminiInsightGateway",
    "InsightGatewayInterface",
]
