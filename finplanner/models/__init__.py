"""
Data Models Package

This package contains all Pydantic models used in finplanner.
All data flowing through the system must conform to these schemas.
"""

from finplanner.models.budget import (
    BillItem,
    BudgetPeriod,
    DebtItem,
    ExpenseItem,
    IncomeItem,
    InvestmentItem,
    PeriodType,
    SavingsItem,
    generate_id,
)
from finplanner.models.calculations import (
    AmortizationRow,
    BracketSlice,
    BudgetTotals,
    BusinessTaxResult,
    ContributionFrequency,
    CurrencyConversion,
    EventImpact,
    GrowthDataPoint,
    GrowthProjection,
    IncomeTaxResult,
    InvoiceLine,
    InvoiceLineResult,
    InvoiceSummary,
    LifeEventType,
    LoanSchedule,
    Notification,
    NotificationCategory,
    NotificationKind,
    NotificationSeverity,
    RetirementProjection,
    ScenarioProjection,
    TaxBracket,
    TaxJurisdiction,
    VatBreakdown,
)
from finplanner.models.events import (
    EventCategory,
    EventExpense,
    EventRecord,
    ExpenseSnapshot,
    StrategyContext,
    StrategyType,
)
from finplanner.models.state import AppState
from finplanner.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Budget models
    "BillItem",
    "BudgetPeriod",
    "DebtItem",
    "ExpenseItem",
    "IncomeItem",
    "InvestmentItem",
    "PeriodType",
    "SavingsItem",
    "generate_id",
    # Calculation results
    "AmortizationRow",
    "BracketSlice",
    "BudgetTotals",
    "BusinessTaxResult",
    "ContributionFrequency",
    "CurrencyConversion",
    "EventImpact",
    "GrowthDataPoint",
    "GrowthProjection",
    "IncomeTaxResult",
    "InvoiceLine",
    "InvoiceLineResult",
    "InvoiceSummary",
    "LifeEventType",
    "LoanSchedule",
    "Notification",
    "NotificationCategory",
    "NotificationKind",
    "NotificationSeverity",
    "RetirementProjection",
    "ScenarioProjection",
    "TaxBracket",
    "TaxJurisdiction",
    "VatBreakdown",
    # Event models
    "EventCategory",
    "EventExpense",
    "EventRecord",
    "ExpenseSnapshot",
    "StrategyContext",
    "StrategyType",
    # State
    "AppState",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
