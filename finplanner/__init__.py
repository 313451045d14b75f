"""
finplanner - Source Package

The calculation core of a personal budgeting assistant: budget totals,
alerts, loan and investment projections, tax estimates and life-event
scenarios.

DESIGN PRINCIPLES:
1. Calculations are pure functions of their inputs
2. Bad numbers degrade to zero, they never crash a calculation
3. Only the controller touches storage
4. Every state change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "finplanner Team"
