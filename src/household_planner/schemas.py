from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class RentVsBuyInputs:
    """User assumptions for the rent-vs-buy comparison.

    Values are stored exactly as supplied; the engine clamps them to their
    domains before use.
    """

    years: float = 10
    monthly_rent: float = 2200
    rent_increase_pct: float = 3  # annual
    renters_insurance_monthly: float = 22
    home_price: float = 500_000
    down_payment_pct: float = 20
    mortgage_rate_pct: float = 6.5  # annual percentage, e.g., 6.5
    loan_term_years: float = 30
    property_tax_pct: float = 1.2  # of home value per year
    home_insurance_annual: float = 1800
    maintenance_pct: float = 1  # of home value per year
    hoa_monthly: float = 150
    closing_cost_pct: float = 3  # of purchase price
    selling_cost_pct: float = 6  # of home value at sale
    home_appreciation_pct: float = 3
    investment_return_pct: float = 5  # renter's invested savings
    annual_inflation_pct: float = 2  # insurance and HOA, not rent

    def replace(self, **changes: float) -> "RentVsBuyInputs":
        return replace(self, **changes)


@dataclass(frozen=True)
class RentVsBuyAssumptions:
    years: int
    monthly_mortgage_payment: float


@dataclass(frozen=True)
class RentVsBuyPoint:
    """End-of-year snapshot of both sides of the comparison."""

    year: int
    owner_net_cost: float
    renter_net_cost: float
    owner_outflow: float
    renter_outflow: float
    owner_equity: float
    renter_investment: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RentVsBuySummary:
    winner: str  # "buy", "rent" or "tie"
    break_even_year: Optional[float]
    cost_difference: float  # renter net cost minus owner net cost
    owner_net_cost: float
    renter_net_cost: float
    owner_outflow: float
    renter_outflow: float
    owner_equity: float
    renter_investment: float


@dataclass(frozen=True)
class RentVsBuyAnalysis:
    assumptions: RentVsBuyAssumptions
    timeline: Tuple[RentVsBuyPoint, ...]
    summary: RentVsBuySummary

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ExpenseCategory:
    label: str
    today: float  # monthly, in today's dollars


@dataclass(frozen=True)
class RetirementInputs:
    """User assumptions for the retirement projection."""

    current_age: float = 35
    retirement_age: float = 67
    life_expectancy: float = 92
    current_savings: float = 120_000
    annual_contribution: float = 18_000
    employer_match_annual: float = 5000
    contribution_growth_pct: float = 2
    pre_retirement_return_pct: float = 7
    post_retirement_return_pct: float = 5
    investment_drag_pct: float = 1  # fees / tax drag, subtracted from returns

    monthly_housing: float = 1800
    monthly_utilities: float = 350
    monthly_food: float = 700
    monthly_transportation: float = 450
    monthly_healthcare: float = 500
    monthly_lifestyle: float = 550
    monthly_travel: float = 300
    monthly_other: float = 300
    annual_non_monthly_expenses: float = 6000

    social_security_annual: float = 32_000
    pension_annual: float = 0
    benefit_increase_pct: float = 2  # COLA on social security + pension
    inflation_pct: float = 2.5
    retirement_income_tax_pct: float = 12
    safe_withdrawal_rate_pct: float = 4

    def replace(self, **changes: float) -> "RetirementInputs":
        return replace(self, **changes)

    def expense_rows(self) -> Tuple[ExpenseCategory, ...]:
        """Budget categories in display order, negative amounts floored at 0."""
        return tuple(
            ExpenseCategory(label=label, today=max(amount, 0.0))
            for label, amount in (
                ("Housing", self.monthly_housing),
                ("Utilities", self.monthly_utilities),
                ("Food & Groceries", self.monthly_food),
                ("Transportation", self.monthly_transportation),
                ("Healthcare", self.monthly_healthcare),
                ("Lifestyle", self.monthly_lifestyle),
                ("Travel", self.monthly_travel),
                ("Other", self.monthly_other),
                (
                    "Non-Monthly Costs (Avg)",
                    max(self.annual_non_monthly_expenses, 0.0) / 12,
                ),
            )
        )


@dataclass(frozen=True)
class RetirementAssumptions:
    current_age: int
    retirement_age: int
    life_expectancy: int
    years_to_retirement: int
    safe_withdrawal_rate: float  # fraction, e.g., 0.04


@dataclass(frozen=True)
class RetirementPoint:
    age: int
    is_retired: bool
    balance: float  # end of year
    contribution: float
    withdrawal: float
    retirement_income: float
    retirement_spending: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyBudgetRow:
    label: str
    today: float
    at_retirement: float


@dataclass(frozen=True)
class RetirementSummary:
    balance_at_retirement: float
    required_nest_egg: float
    final_balance: float
    target_gap: float
    retire_ready: bool
    run_out_age: Optional[int]
    cumulative_contributions: float
    cumulative_withdrawals: float
    monthly_gap_at_retirement: float
    first_year_gap: float
    planned_monthly_spend_today: float
    planned_monthly_spend_at_retirement: float
    sustainable_monthly_spend: float
    sustainable_annual_spend: float
    monthly_budget_delta: float
    monthly_budget_rows: Tuple[MonthlyBudgetRow, ...]
    annual_spending_today: float


@dataclass(frozen=True)
class RetirementAnalysis:
    assumptions: RetirementAssumptions
    timeline: Tuple[RetirementPoint, ...]
    summary: RetirementSummary

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
