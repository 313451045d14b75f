"""
AI Advisory Agent for finplanner

DESIGN DECISION: The generative model is an opaque text-in / text-out
collaborator. We build the prompt from numbers the calculation engines
already produced, and we show whatever text comes back without parsing
it.

CRITICAL BOUNDARIES:
- CAN: Comment on trends, suggest actions, draft micro-plans
- CANNOT: Change budget data (it never sees storage)
- CANNOT: Feed numbers back into calculations

Failures never propagate. Any error from the model maps to a fixed,
user-facing unavailability message; an empty answer maps to a fixed
fallback message.
"""

import json
from collections.abc import Sequence
from typing import Any, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field

from finplanner.calculations.periods import sort_history
from finplanner.calculations.totals import calculate_totals
from finplanner.config import GeminiSettings, get_settings
from finplanner.models.budget import BudgetPeriod
from finplanner.models.events import EventRecord, StrategyContext, StrategyType


logger = structlog.get_logger("finplanner.agents")


DEFAULT_HISTORY_PERIODS = 6

# Fixed messages shown instead of model output
BUDGET_ANALYSIS_UNAVAILABLE = (
    "AI Analysis is currently unavailable. Please check your connection or API key."
)
BUDGET_ANALYSIS_EMPTY = "Unable to generate analysis at this time."
EVENT_ADVICE_UNAVAILABLE = "Event AI is currently unavailable."
EVENT_ADVICE_EMPTY = "I couldn't process that request right now."
STRATEGY_PLAN_UNAVAILABLE = (
    "Could not generate a detailed plan. Proceeding with default values."
)
STRATEGY_PLAN_EMPTY = "Unable to generate plan."


class PeriodSummary(BaseModel):
    """Compact per-period figures sent to the model."""

    period: str
    income: float
    expenses: float
    savings: float
    debt_payment: float
    left_to_spend: float


class AdvisoryResponse(BaseModel):
    """
    Text returned to the user.

    `generated` is False when `text` is one of the fixed fallback
    messages rather than model output.
    """

    kind: str
    text: str
    generated: bool = Field(description="Whether the text came from the model")
    error: Optional[str] = None


def build_budget_summary(
    history: Sequence[BudgetPeriod],
    limit: int = DEFAULT_HISTORY_PERIODS,
) -> list[PeriodSummary]:
    """Summarize the most recent periods, oldest first."""
    summaries = []
    for period in sort_history(history)[-limit:] if limit > 0 else []:
        totals = calculate_totals(period)
        summaries.append(PeriodSummary(
            period=period.label,
            income=round(totals.total_income, 2),
            expenses=round(totals.total_expenses, 2),
            savings=round(totals.total_savings, 2),
            debt_payment=round(totals.total_debts, 2),
            left_to_spend=round(totals.left_to_spend, 2),
        ))
    return summaries


class AdvisoryAgent:
    """
    Generates advisory text with Gemini.

    RESPONSIBILITIES:
    - Budget trend analysis over recent periods
    - Answers about a planned event
    - Micro-plans for absorbing a life event's monthly cost

    BOUNDARIES:
    - NEVER raises to the caller
    - NEVER parses model output
    """

    def __init__(
        self,
        model: Optional[Any] = None,
        settings: Optional[GeminiSettings] = None,
        history_periods: int = DEFAULT_HISTORY_PERIODS,
    ):
        """
        Initialize the agent.

        Args:
            model: Anything with an async `generate_content_async(prompt)`;
                a Gemini model is created from settings when omitted
            settings: Gemini settings (loaded from the environment if omitted)
            history_periods: How many recent periods a budget analysis covers
        """
        self._history_periods = history_periods
        if model is not None:
            self._model = model
        else:
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
            }
        )

    async def _generate(
        self,
        kind: str,
        prompt: str,
        unavailable_message: str,
        empty_message: str,
    ) -> AdvisoryResponse:
        try:
            response = await self._model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            logger.warning("advisory_failed", kind=kind, error=str(e))
            return AdvisoryResponse(
                kind=kind,
                text=unavailable_message,
                generated=False,
                error=str(e),
            )

        if not text:
            logger.info("advisory_empty", kind=kind)
            return AdvisoryResponse(kind=kind, text=empty_message, generated=False)

        logger.info("advisory_generated", kind=kind, length=len(text))
        return AdvisoryResponse(kind=kind, text=text, generated=True)

    async def analyze_budget(
        self,
        history: Sequence[BudgetPeriod],
        currency_symbol: str = "$",
    ) -> AdvisoryResponse:
        """
        Analyze spending and saving trends over recent periods.

        Only the per-period summary is sent, never individual items.
        """
        summary = build_budget_summary(history, self._history_periods)
        context = json.dumps([s.model_dump() for s in summary])

        prompt = f"""You are an expert personal financial advisor.

Here is the financial summary for the last few periods ({currency_symbol}):
{context}

Please provide a concise analysis in the following format:
1. Trend Analysis: Are expenses going up or down? Is income stable?
2. Savings Health: Comment on the savings rate.
3. Prediction: Based on the trend, predict the financial outlook for next month.
4. Actionable Advice: Give 1 specific, hard-hitting tip to improve financial health immediately.

Keep the tone encouraging but professional, under 200 words.
Do not use markdown formatting like bold or headers, just plain text with line breaks."""

        return await self._generate(
            "budget_analysis",
            prompt,
            BUDGET_ANALYSIS_UNAVAILABLE,
            BUDGET_ANALYSIS_EMPTY,
        )

    async def analyze_event(
        self,
        event: EventRecord,
        query: str,
    ) -> AdvisoryResponse:
        """Answer a question about a planned event."""
        expenses = json.dumps([
            {"category": e.category, "amount": e.amount} for e in event.expenses
        ])
        context = (
            f"Event Name: {event.name}\n"
            f"Type: {event.type}\n"
            f"Total Budget: {event.currency_symbol}{event.total_budget:,.2f}\n"
            f"Date: {event.date or 'TBD'}\n"
            f"Location: {event.location or 'TBD'}\n"
            f"Current Expenses: {expenses}"
        )

        prompt = f"""You are a professional event planner.
Context:
{context}

User Query: "{query}"

Provide a helpful, specific, and creative response.
If asked for a budget breakdown, provide percentage estimates based on the event type.
If asked about vendors, suggest types of vendors needed.
Keep it concise (under 150 words)."""

        return await self._generate(
            "event_advice",
            prompt,
            EVENT_ADVICE_UNAVAILABLE,
            EVENT_ADVICE_EMPTY,
        )

    async def generate_strategy_plan(self, context: StrategyContext) -> AdvisoryResponse:
        """Draft a three-step plan to absorb a new monthly cost."""
        symbol = context.currency_symbol
        cost = f"{symbol}{context.monthly_cost:,.2f}"
        top_expenses = ", ".join(
            f"{e.name}: {symbol}{e.amount:,.2f}"
            for e in sorted(context.current_expenses, key=lambda e: e.amount, reverse=True)[:5]
        )

        if context.strategy == StrategyType.CUT:
            goal = (
                f"The goal is to reduce expenses to cover a new {context.event_type} "
                f"cost of {cost}/month. Identify specific cuts based on these top "
                f"expenses: {top_expenses or 'none recorded'}."
            )
        elif context.strategy == StrategyType.EARN:
            goal = (
                f"The goal is to earn an extra {cost}/month for a {context.event_type}. "
                f"Suggest realistic side hustles or income boosts."
            )
        else:
            goal = (
                f"The goal is to save {cost}/month in advance for a {context.event_type}. "
                f'Suggest behavioral changes to "practice" this payment now.'
            )

        prompt = f"""You are a tactical financial coach.
{goal}

Provide a 3-step micro-plan.
Step 1: Immediate Action.
Step 2: Short-term Adjustment.
Step 3: Mindset Shift.

Keep it extremely concise, bullet points only. No intro/outro."""

        return await self._generate(
            "strategy_plan",
            prompt,
            STRATEGY_PLAN_UNAVAILABLE,
            STRATEGY_PLAN_EMPTY,
        )
