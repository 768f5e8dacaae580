"""
BudgetWise - Source Package

Domain logic for a personal-finance app: recurring obligation due dates
and savings goal projections.

DESIGN PRINCIPLES:
1. Engines are pure; flows own storage and auditing
2. Fail early, fail visibly (unknown frequencies, NaN amounts)
3. No silent corrections (negative contributions are not clamped)
4. Every state change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "BudgetWise Team"
