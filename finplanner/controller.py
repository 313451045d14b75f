"""
Budget Controller for finplanner

This module ties together the calculation engines, storage, the audit
logger and the AI advisor. It defines the end-to-end flows for:
1. Load / edit / save (storage -> state -> storage)
2. Closing a period (rollover -> new period -> save)
3. Advice (history -> summary -> model -> text)
4. Life-event simulation (current period -> projection)

DESIGN DECISION: The controller enforces the boundaries:
- It is the only component that touches storage
- The engines only ever receive snapshots of the state
- Every state change is audited

This is the "glue" that ensures the system works correctly
even when individual collaborators fail.
"""

from datetime import date
from typing import Any, Optional
from uuid import UUID

import structlog

from finplanner.agents import AdvisoryAgent, AdvisoryResponse
from finplanner.agents.ai_agents import (
    BUDGET_ANALYSIS_UNAVAILABLE,
    EVENT_ADVICE_UNAVAILABLE,
    STRATEGY_PLAN_UNAVAILABLE,
)
from finplanner.audit import AuditLogger, create_correlation_id
from finplanner.calculations import (
    amortize_loan,
    calculate_rollover,
    calculate_totals,
    evaluate_notifications,
    simulate_life_event,
    start_new_period,
)
from finplanner.config import PlanningSettings, Settings, get_settings
from finplanner.models import (
    AppState,
    BudgetPeriod,
    BudgetTotals,
    EventImpact,
    EventRecord,
    LoanSchedule,
    Notification,
    PeriodType,
    ScenarioProjection,
    StrategyContext,
)
from finplanner.services.storage import (
    AuditStorageInterface,
    BudgetStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    LocalFileAuditStorage,
    LocalFileBudgetStorage,
    StorageError,
)


logger = structlog.get_logger("finplanner.controller")


class BudgetController:
    """
    Owns the application state and orchestrates every operation on it.

    Flow for closing a period:
    1. propose_rollover() -> amount left to spend
    2. User confirms (possibly editing the amount)
    3. start_new_period() -> archive current, create the next one, save
    """

    def __init__(
        self,
        budget_storage: Optional[BudgetStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        advisor: Optional[AdvisoryAgent] = None,
        planning: Optional[PlanningSettings] = None,
        state: Optional[AppState] = None,
    ):
        self._budget_storage = budget_storage or InMemoryBudgetStorage()
        self._audit_logger = audit_logger or AuditLogger()
        self._advisor = advisor
        self._planning = planning or PlanningSettings()
        self.state = state or AppState()

    # =========================================================================
    # Persistence
    # =========================================================================

    async def load(self, correlation_id: Optional[UUID] = None) -> AppState:
        """
        Load all periods from storage into the state.

        A storage failure is audited and leaves a fresh, empty state, so
        the app always starts.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            periods = await self._budget_storage.load_periods()
            current_id = await self._budget_storage.get_current_period_id()
        except StorageError as e:
            await self._audit_logger.log_storage_failed(
                operation="load",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            self.state = AppState()
            return self.state

        self.state = AppState.from_periods(periods, current_id)

        await self._audit_logger.log_periods_loaded(
            period_count=len(periods),
            current_period_id=self.state.current.id,
            correlation_id=correlation_id,
        )
        return self.state

    async def save(self, correlation_id: Optional[UUID] = None) -> bool:
        """
        Persist every period and the current period id.

        Raises:
            StorageError: After the failure has been audited
        """
        correlation_id = correlation_id or create_correlation_id()
        current = self.state.current

        try:
            await self._budget_storage.save_periods(self.state.all_periods())
            await self._budget_storage.set_current_period_id(current.id)
        except StorageError as e:
            await self._audit_logger.log_storage_failed(
                operation="save",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        await self._audit_logger.log_period_saved(
            period_id=current.id,
            label=current.label,
            correlation_id=correlation_id,
        )
        return True

    # =========================================================================
    # Editing the current period
    # =========================================================================

    async def replace_current(
        self,
        period: BudgetPeriod,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetTotals:
        """
        Replace the current period with an edited copy and save.

        Returns:
            Totals of the new current period
        """
        correlation_id = correlation_id or create_correlation_id()

        self.state.current = period
        totals = calculate_totals(period)

        await self._audit_logger.log_period_updated(
            period_id=period.id,
            label=period.label,
            left_to_spend=totals.left_to_spend,
            correlation_id=correlation_id,
        )
        await self.save(correlation_id=correlation_id)
        return totals

    async def delete_period(
        self,
        period_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete an archived period. Returns False if it is not in history."""
        correlation_id = correlation_id or create_correlation_id()
        period = next((p for p in self.state.history if p.id == period_id), None)
        if period is None or not self.state.delete_period(period_id):
            return False

        await self._audit_logger.log_period_deleted(
            period_id=period_id,
            label=period.label,
            correlation_id=correlation_id,
        )
        await self.save(correlation_id=correlation_id)
        return True

    async def duplicate_period(
        self,
        period_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[BudgetPeriod]:
        """Copy an archived period under a new id."""
        correlation_id = correlation_id or create_correlation_id()
        duplicate = self.state.duplicate_period(period_id)
        if duplicate is None:
            return None

        await self._audit_logger.log_period_duplicated(
            period_id=duplicate.id,
            source_period_id=period_id,
            label=duplicate.label,
            correlation_id=correlation_id,
        )
        await self.save(correlation_id=correlation_id)
        return duplicate

    # =========================================================================
    # Derived views
    # =========================================================================

    def totals(self) -> BudgetTotals:
        return calculate_totals(self.state.current)

    def notifications(self, today: Optional[date] = None) -> list[Notification]:
        """Alerts for the current period, using history for anomalies."""
        return evaluate_notifications(
            self.state.current,
            history=self.state.history,
            today=today,
            upcoming_window_days=self._planning.upcoming_due_window_days,
            warning_ratio=self._planning.budget_warning_ratio,
            anomaly_ratio=self._planning.anomaly_ratio,
            anomaly_lookback=self._planning.anomaly_lookback_periods,
            anomaly_min_samples=self._planning.anomaly_min_samples,
        )

    def amortize(
        self,
        principal: Any,
        annual_rate: Any,
        term_months: Any,
        extra_payment: Any = 0.0,
    ) -> LoanSchedule:
        """Amortize a loan with the configured iteration cap and tolerance."""
        return amortize_loan(
            principal,
            annual_rate,
            term_months,
            extra_payment,
            max_months=self._planning.amortization_max_months,
            tolerance=self._planning.payoff_tolerance,
        )

    # =========================================================================
    # Closing a period
    # =========================================================================

    def propose_rollover(self) -> float:
        """Amount that would carry into the next period."""
        return calculate_rollover(self.state.current)

    async def start_new_period(
        self,
        rollover: Optional[Any] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        period_type: Optional[PeriodType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetPeriod:
        """
        Archive the current period and start the next one.

        CRITICAL: Called only after the user confirmed the rollover.

        Args:
            rollover: Confirmed amount to carry; defaults to the proposal
        """
        correlation_id = correlation_id or create_correlation_id()
        previous = self.state.current

        new_period = start_new_period(
            previous,
            rollover=rollover,
            month=month,
            year=year,
            period_type=period_type,
            start_date=start_date,
            end_date=end_date,
        )

        await self._audit_logger.log_rollover_confirmed(
            previous_period_id=previous.id,
            amount=new_period.rollover,
            correlation_id=correlation_id,
        )

        self.state.archive_current(new_period)

        await self._audit_logger.log_period_created(
            period_id=new_period.id,
            label=new_period.label,
            previous_period_id=previous.id,
            correlation_id=correlation_id,
        )

        await self.save(correlation_id=correlation_id)
        return new_period

    # =========================================================================
    # Advice
    # =========================================================================

    async def _advise(
        self,
        kind: str,
        period_count: int,
        unavailable_message: str,
        call,
        correlation_id: Optional[UUID],
    ) -> AdvisoryResponse:
        correlation_id = correlation_id or create_correlation_id()

        await self._audit_logger.log_advisory_requested(
            kind=kind,
            period_count=period_count,
            correlation_id=correlation_id,
        )

        if self._advisor is None:
            response = AdvisoryResponse(
                kind=kind,
                text=unavailable_message,
                generated=False,
                error="Advisor not configured",
            )
        else:
            response = await call(self._advisor)
            if response.error:
                await self._audit_logger.log_external_service_error(
                    service="gemini",
                    error_message=response.error,
                    correlation_id=correlation_id,
                )

        if response.generated:
            await self._audit_logger.log_advisory_generated(
                kind=kind,
                response_length=len(response.text),
                correlation_id=correlation_id,
            )
        else:
            await self._audit_logger.log_advisory_failed(
                kind=kind,
                error_message=response.error or "Empty response",
                correlation_id=correlation_id,
            )
        return response

    async def request_advice(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> AdvisoryResponse:
        """Budget trend analysis over all periods, current included."""
        periods = self.state.all_periods()
        symbol = self.state.current.currency_symbol
        return await self._advise(
            "budget_analysis",
            len(periods),
            BUDGET_ANALYSIS_UNAVAILABLE,
            lambda advisor: advisor.analyze_budget(periods, symbol),
            correlation_id,
        )

    async def request_event_advice(
        self,
        event: EventRecord,
        query: str,
        correlation_id: Optional[UUID] = None,
    ) -> AdvisoryResponse:
        return await self._advise(
            "event_advice",
            0,
            EVENT_ADVICE_UNAVAILABLE,
            lambda advisor: advisor.analyze_event(event, query),
            correlation_id,
        )

    async def request_strategy_plan(
        self,
        context: StrategyContext,
        correlation_id: Optional[UUID] = None,
    ) -> AdvisoryResponse:
        return await self._advise(
            "strategy_plan",
            0,
            STRATEGY_PLAN_UNAVAILABLE,
            lambda advisor: advisor.generate_strategy_plan(context),
            correlation_id,
        )

    # =========================================================================
    # Scenarios
    # =========================================================================

    async def simulate(
        self,
        impact: EventImpact,
        horizon: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ScenarioProjection:
        """Project a life event against the current period."""
        correlation_id = correlation_id or create_correlation_id()
        if horizon is None:
            horizon = self._planning.projection_months

        projection = simulate_life_event(self.state.current, impact, horizon)

        await self._audit_logger.log_scenario_simulated(
            event_type=impact.event_type.value,
            period_id=self.state.current.id,
            final_baseline=projection.final_baseline,
            final_with_event=projection.final_with_event,
            correlation_id=correlation_id,
        )
        return projection


def _create_storage(
    settings: Settings,
) -> tuple[BudgetStorageInterface, Optional[AuditStorageInterface]]:
    backend = settings.app.storage_backend

    if backend == "google_sheets":
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            return (
                GoogleSheetsBudgetStorage(sheets_client),
                GoogleSheetsAuditStorage(sheets_client),
            )
        except Exception as e:
            # Storage not configured - continue with the local file
            logger.warning("google_sheets_unavailable", error=str(e))
            backend = "local"

    if backend == "local":
        data_path = settings.app.data_path
        return (
            LocalFileBudgetStorage(data_path),
            LocalFileAuditStorage(data_path.with_suffix(".audit.jsonl")),
        )

    return InMemoryBudgetStorage(), InMemoryAuditStorage()


def create_controller(settings: Optional[Settings] = None) -> BudgetController:
    """
    Factory function to create a fully wired controller.

    Storage follows `storage_backend`; the advisor is left out when the
    Gemini settings cannot be loaded (e.g. no API key).
    """
    settings = settings or get_settings()

    budget_storage, audit_storage = _create_storage(settings)
    audit_logger = AuditLogger(audit_storage)

    try:
        advisor = AdvisoryAgent(settings=settings.gemini)
    except Exception as e:
        logger.warning("advisor_unavailable", error=str(e))
        advisor = None

    return BudgetController(
        budget_storage=budget_storage,
        audit_logger=audit_logger,
        advisor=advisor,
        planning=settings.planning,
    )
