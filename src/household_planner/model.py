from __future__ import annotations

import logging
import math
from typing import List, Optional

from .schemas import (
    RentVsBuyAnalysis,
    RentVsBuyAssumptions,
    RentVsBuyInputs,
    RentVsBuyPoint,
    RentVsBuySummary,
)

logger = logging.getLogger(__name__)

# Balances at or below a cent are treated as paid off.
PAID_OFF_THRESHOLD = 0.01


def compute_rent_vs_buy(inputs: RentVsBuyInputs) -> RentVsBuyAnalysis:
    """
    Simulate owning and renting month by month and compare net costs.

    The renter starts with the down payment and closing costs invested, and
    each month the difference between the owner's and renter's costs is added
    to (or drawn from) that account. Net cost on either side is cumulative
    outflow minus the asset held at the time.
    """
    years = clamp_whole(inputs.years, 1, 50)
    monthly_rent_start = max(inputs.monthly_rent, 0.0)
    renters_insurance_start = max(inputs.renters_insurance_monthly, 0.0)
    home_price = max(inputs.home_price, 0.0)
    down_payment_rate = clamp(inputs.down_payment_pct, 0, 100) / 100
    mortgage_rate_pct = max(inputs.mortgage_rate_pct, 0.0)
    loan_term_years = clamp_whole(inputs.loan_term_years, 1, 40)
    property_tax_rate = max(inputs.property_tax_pct, 0.0) / 100
    home_insurance_annual_start = max(inputs.home_insurance_annual, 0.0)
    maintenance_rate = max(inputs.maintenance_pct, 0.0) / 100
    hoa_start = max(inputs.hoa_monthly, 0.0)
    closing_cost_rate = max(inputs.closing_cost_pct, 0.0) / 100
    selling_cost_rate = clamp(inputs.selling_cost_pct, 0, 100) / 100

    down_payment = home_price * down_payment_rate
    closing_costs = home_price * closing_cost_rate
    loan_amount = home_price - down_payment
    payment = mortgage_payment(loan_amount, mortgage_rate_pct, loan_term_years)
    mortgage_months = loan_term_years * 12
    mortgage_rate_monthly = mortgage_rate_pct / 100 / 12

    rent_growth_monthly = annual_to_monthly_rate(inputs.rent_increase_pct)
    appreciation_monthly = annual_to_monthly_rate(inputs.home_appreciation_pct)
    investment_monthly = annual_to_monthly_rate(inputs.investment_return_pct)
    inflation_monthly = annual_to_monthly_rate(inputs.annual_inflation_pct)

    rent = monthly_rent_start
    renters_insurance = renters_insurance_start
    home_insurance = home_insurance_annual_start / 12
    hoa = hoa_start
    home_value = home_price
    balance = loan_amount

    owner_outflow = down_payment + closing_costs
    renter_outflow = 0.0
    renter_investment = down_payment + closing_costs

    break_even: Optional[float] = None
    timeline: List[RentVsBuyPoint] = []

    for month in range(1, years * 12 + 1):
        if month > 1:
            rent *= 1 + rent_growth_monthly
            renters_insurance *= 1 + inflation_monthly
            home_insurance *= 1 + inflation_monthly
            hoa *= 1 + inflation_monthly
            home_value *= 1 + appreciation_monthly

        renter_investment *= 1 + investment_monthly

        mortgage_this_month = 0.0
        if month <= mortgage_months and balance > PAID_OFF_THRESHOLD:
            interest_payment = balance * mortgage_rate_monthly
            principal_payment = min(max(payment - interest_payment, 0.0), balance)
            mortgage_this_month = interest_payment + principal_payment
            balance -= principal_payment

        property_tax = home_value * property_tax_rate / 12
        maintenance = home_value * maintenance_rate / 12

        owner_monthly_cost = (
            mortgage_this_month + property_tax + maintenance + home_insurance + hoa
        )
        renter_monthly_cost = rent + renters_insurance

        owner_outflow += owner_monthly_cost
        renter_outflow += renter_monthly_cost

        # Whichever side is cheaper invests the savings; negative when renting costs more.
        renter_investment += owner_monthly_cost - renter_monthly_cost

        owner_equity = home_value * (1 - selling_cost_rate) - balance
        owner_net_cost = owner_outflow - owner_equity
        renter_net_cost = renter_outflow - renter_investment

        if break_even is None and owner_net_cost <= renter_net_cost:
            break_even = month / 12

        if month % 12 == 0:
            timeline.append(
                RentVsBuyPoint(
                    year=month // 12,
                    owner_net_cost=owner_net_cost,
                    renter_net_cost=renter_net_cost,
                    owner_outflow=owner_outflow,
                    renter_outflow=renter_outflow,
                    owner_equity=owner_equity,
                    renter_investment=renter_investment,
                )
            )

    final = timeline[-1] if timeline else RentVsBuyPoint(years, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    cost_difference = final.renter_net_cost - final.owner_net_cost
    logger.debug(
        "rent vs buy: %d years, payment %.2f, difference %.2f, break-even %s",
        years,
        payment,
        cost_difference,
        break_even,
    )

    return RentVsBuyAnalysis(
        assumptions=RentVsBuyAssumptions(years=years, monthly_mortgage_payment=payment),
        timeline=tuple(timeline),
        summary=RentVsBuySummary(
            winner=_winner(cost_difference),
            break_even_year=break_even,
            cost_difference=cost_difference,
            owner_net_cost=final.owner_net_cost,
            renter_net_cost=final.renter_net_cost,
            owner_outflow=final.owner_outflow,
            renter_outflow=final.renter_outflow,
            owner_equity=final.owner_equity,
            renter_investment=final.renter_investment,
        ),
    )


def _winner(cost_difference: float) -> str:
    if cost_difference > 0:
        return "buy"
    if cost_difference < 0:
        return "rent"
    return "tie"


def mortgage_payment(
    principal: float, annual_rate_pct: float, term_years: int
) -> float:
    months = max(term_years * 12, 1)
    monthly_rate = annual_rate_pct / 100 / 12
    if principal <= 0:
        return 0.0
    if monthly_rate == 0:
        return principal / months
    return principal * monthly_rate / (1 - (1 + monthly_rate) ** (-months))


def annual_to_monthly_rate(annual_rate_pct: float) -> float:
    """Monthly rate that compounds to the annual percentage over twelve months."""
    annual_rate = clamp(annual_rate_pct, -99, 1000) / 100
    return (1 + annual_rate) ** (1 / 12.0) - 1


def annual_rate_multiplier(annual_rate_pct: float) -> float:
    return 1 + annual_rate_pct / 100


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(min(value, maximum), minimum)


def round_half_away(value: float) -> float:
    """Round to the nearest whole number, halves away from zero."""
    return math.copysign(math.floor(abs(value) + 0.5), value)


def clamp_whole(value: float, minimum: int, maximum: int) -> int:
    """Bound ``value`` first, then round it, so infinities land on a bound."""
    return int(round_half_away(clamp(value, minimum, maximum)))
