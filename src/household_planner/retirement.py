from __future__ import annotations

import logging
from typing import List, Optional

from .model import annual_rate_multiplier, clamp, clamp_whole
from .schemas import (
    MonthlyBudgetRow,
    RetirementAnalysis,
    RetirementAssumptions,
    RetirementInputs,
    RetirementPoint,
    RetirementSummary,
)

logger = logging.getLogger(__name__)

# Smallest after-tax fraction used when grossing up a withdrawal.
MIN_AFTER_TAX_FRACTION = 0.01


def compute_retirement(inputs: RetirementInputs) -> RetirementAnalysis:
    """
    Project a retirement portfolio year by year from the current age to life
    expectancy.

    Before retirement the balance grows by the pre-retirement return net of
    drag and receives contributions plus employer match. From the retirement
    age on, spending grows with inflation, guaranteed income grows with the
    COLA, and any shortfall is withdrawn grossed up for tax. A surplus of
    income over spending is reinvested.
    """
    current_age = clamp_whole(inputs.current_age, 18, 90)
    retirement_age = max(clamp_whole(inputs.retirement_age, 40, 95), current_age + 1)
    life_expectancy = max(
        clamp_whole(inputs.life_expectancy, 55, 110), retirement_age + 1
    )

    current_savings = max(inputs.current_savings, 0.0)
    investment_drag_pct = max(inputs.investment_drag_pct, 0.0)
    social_security_start = max(inputs.social_security_annual, 0.0)
    pension_start = max(inputs.pension_annual, 0.0)
    tax_rate = clamp(inputs.retirement_income_tax_pct, 0, 95) / 100
    safe_withdrawal_rate = clamp(inputs.safe_withdrawal_rate_pct, 0.5, 15) / 100
    after_tax_fraction = max(1 - tax_rate, MIN_AFTER_TAX_FRACTION)

    years_to_retirement = retirement_age - current_age

    contribution_growth = annual_rate_multiplier(inputs.contribution_growth_pct)
    inflation_growth = annual_rate_multiplier(inputs.inflation_pct)
    benefits_growth = annual_rate_multiplier(inputs.benefit_increase_pct)
    # Repeated multiplication saturates at inf instead of raising.
    inflation_to_retirement = 1.0
    for _ in range(years_to_retirement):
        inflation_to_retirement *= inflation_growth

    expense_rows = inputs.expense_rows()
    planned_monthly_spend_today = sum(row.today for row in expense_rows)
    annual_spending_today = planned_monthly_spend_today * 12
    first_year_spending = annual_spending_today * inflation_to_retirement

    first_year_gap = max(first_year_spending - social_security_start - pension_start, 0.0)
    required_nest_egg = first_year_gap / after_tax_fraction / safe_withdrawal_rate

    balance = current_savings
    balance_at_retirement = current_savings
    annual_contribution = max(inputs.annual_contribution, 0.0)
    annual_match = max(inputs.employer_match_annual, 0.0)
    social_security = social_security_start
    pension = pension_start
    spending = first_year_spending

    cumulative_contributions = 0.0
    cumulative_withdrawals = 0.0
    run_out_age: Optional[int] = None
    timeline: List[RetirementPoint] = []

    for age in range(current_age, life_expectancy + 1):
        is_retired = age >= retirement_age
        gross_return_pct = (
            inputs.post_retirement_return_pct
            if is_retired
            else inputs.pre_retirement_return_pct
        )
        balance *= annual_rate_multiplier(gross_return_pct - investment_drag_pct)

        contribution = 0.0
        withdrawal = 0.0
        income = 0.0
        spending_this_year = 0.0

        if not is_retired:
            contribution = annual_contribution + annual_match
            balance += contribution
            cumulative_contributions += contribution

            if age + 1 == retirement_age:
                balance_at_retirement = balance

            annual_contribution *= contribution_growth
            annual_match *= contribution_growth
        else:
            spending_this_year = spending
            income = social_security + pension

            shortfall = spending_this_year - income
            if shortfall > 0:
                withdrawal = shortfall / after_tax_fraction
                balance -= withdrawal
                cumulative_withdrawals += withdrawal
            elif shortfall < 0:
                # Surplus income is reinvested untaxed and counted as a contribution.
                contribution = -shortfall
                balance += contribution
                cumulative_contributions += contribution

            spending *= inflation_growth
            social_security *= benefits_growth
            pension *= benefits_growth

            if run_out_age is None and balance <= 0:
                run_out_age = age

        timeline.append(
            RetirementPoint(
                age=age,
                is_retired=is_retired,
                balance=balance,
                contribution=contribution,
                withdrawal=withdrawal,
                retirement_income=income,
                retirement_spending=spending_this_year,
            )
        )

    final_balance = timeline[-1].balance if timeline else 0.0
    target_gap = required_nest_egg - balance_at_retirement

    planned_monthly_spend_at_retirement = first_year_spending / 12
    sustainable_net_portfolio_spend = (
        balance_at_retirement * safe_withdrawal_rate * (1 - tax_rate)
    )
    sustainable_annual_spend = (
        social_security_start + pension_start + sustainable_net_portfolio_spend
    )
    sustainable_monthly_spend = sustainable_annual_spend / 12

    budget_rows = tuple(
        MonthlyBudgetRow(
            label=row.label,
            today=row.today,
            at_retirement=row.today * inflation_to_retirement,
        )
        for row in expense_rows
    )

    logger.debug(
        "retirement: ages %d-%d-%d, at retirement %.2f, target %.2f, runs out %s",
        current_age,
        retirement_age,
        life_expectancy,
        balance_at_retirement,
        required_nest_egg,
        run_out_age,
    )

    return RetirementAnalysis(
        assumptions=RetirementAssumptions(
            current_age=current_age,
            retirement_age=retirement_age,
            life_expectancy=life_expectancy,
            years_to_retirement=years_to_retirement,
            safe_withdrawal_rate=safe_withdrawal_rate,
        ),
        timeline=tuple(timeline),
        summary=RetirementSummary(
            balance_at_retirement=balance_at_retirement,
            required_nest_egg=required_nest_egg,
            final_balance=final_balance,
            target_gap=target_gap,
            retire_ready=target_gap <= 0,
            run_out_age=run_out_age,
            cumulative_contributions=cumulative_contributions,
            cumulative_withdrawals=cumulative_withdrawals,
            monthly_gap_at_retirement=first_year_gap / 12,
            first_year_gap=first_year_gap,
            planned_monthly_spend_today=planned_monthly_spend_today,
            planned_monthly_spend_at_retirement=planned_monthly_spend_at_retirement,
            sustainable_monthly_spend=sustainable_monthly_spend,
            sustainable_annual_spend=sustainable_annual_spend,
            monthly_budget_delta=sustainable_monthly_spend
            - planned_monthly_spend_at_retirement,
            monthly_budget_rows=budget_rows,
            annual_spending_today=annual_spending_today,
        ),
    )
