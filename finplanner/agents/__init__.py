"""AI Agents package."""

from finplanner.agents.ai_agents import (
    AdvisoryAgent,
    AdvisoryResponse,
    PeriodSummary,
    build_budget_summary,
)

__all__ = [
    "AdvisoryAgent",
    "AdvisoryResponse",
    "PeriodSummary",
    "build_budget_summary",
]
