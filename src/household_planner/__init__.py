"""
Household financial projections.

Two deterministic calculators turn a bundle of assumptions into a time series
and a summary verdict: a month-by-month rent-vs-buy comparison and a
year-by-year retirement projection. Metro-level defaults for the rent-vs-buy
inputs can be seeded from American Community Survey (ACS) and HMDA data.
"""

from .schemas import (
    ExpenseCategory,
    MonthlyBudgetRow,
    RentVsBuyAnalysis,
    RentVsBuyAssumptions,
    RentVsBuyInputs,
    RentVsBuyPoint,
    RentVsBuySummary,
    RetirementAnalysis,
    RetirementAssumptions,
    RetirementInputs,
    RetirementPoint,
    RetirementSummary,
)
from .model import compute_rent_vs_buy
from .retirement import compute_retirement

__all__ = [
    "ExpenseCategory",
    "MonthlyBudgetRow",
    "RentVsBuyAnalysis",
    "RentVsBuyAssumptions",
    "RentVsBuyInputs",
    "RentVsBuyPoint",
    "RentVsBuySummary",
    "RetirementAnalysis",
    "RetirementAssumptions",
    "RetirementInputs",
    "RetirementPoint",
    "RetirementSummary",
    "compute_rent_vs_buy",
    "compute_retirement",
]
