from __future__ import annotations

import json
import logging
import os
from typing import Optional

import typer

from .data_sources import (
    CensusACSClient,
    DataSourceError,
    HMDAClient,
    LocationDataAssembler,
)
from .model import compute_rent_vs_buy
from .retirement import compute_retirement
from .schemas import RentVsBuyInputs, RetirementInputs

app = typer.Typer(help="Project rent-vs-buy costs and retirement savings.")

_RENT = RentVsBuyInputs()
_RETIRE = RetirementInputs()


def _default_census_key() -> Optional[str]:
    return os.environ.get("CENSUS_API_KEY")


def _default_hmda_table() -> str:
    return os.environ.get("HMDA_TABLE", "bigquery-public-data.hmda.hmda_2023")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s"
        )


@app.command("rent-vs-buy")
def rent_vs_buy(
    years: float = typer.Option(_RENT.years, help="Comparison horizon in years (1-50)."),
    monthly_rent: float = typer.Option(_RENT.monthly_rent, help="Starting monthly rent."),
    rent_increase_pct: float = typer.Option(
        _RENT.rent_increase_pct, help="Annual rent increase, in percent."
    ),
    renters_insurance_monthly: float = typer.Option(
        _RENT.renters_insurance_monthly, help="Renter's insurance per month."
    ),
    home_price: float = typer.Option(_RENT.home_price, help="Home purchase price."),
    down_payment_pct: float = typer.Option(
        _RENT.down_payment_pct, help="Down payment as a percent of price."
    ),
    mortgage_rate_pct: float = typer.Option(
        _RENT.mortgage_rate_pct, help="Annual mortgage rate, in percent."
    ),
    loan_term_years: float = typer.Option(
        _RENT.loan_term_years, help="Mortgage term in years (1-40)."
    ),
    property_tax_pct: float = typer.Option(
        _RENT.property_tax_pct, help="Annual property tax as a percent of home value."
    ),
    home_insurance_annual: float = typer.Option(
        _RENT.home_insurance_annual, help="Annual home insurance premium."
    ),
    maintenance_pct: float = typer.Option(
        _RENT.maintenance_pct, help="Annual maintenance as a percent of home value."
    ),
    hoa_monthly: float = typer.Option(_RENT.hoa_monthly, help="Monthly HOA dues."),
    closing_cost_pct: float = typer.Option(
        _RENT.closing_cost_pct, help="Closing costs as a percent of price."
    ),
    selling_cost_pct: float = typer.Option(
        _RENT.selling_cost_pct, help="Selling costs as a percent of home value."
    ),
    home_appreciation_pct: float = typer.Option(
        _RENT.home_appreciation_pct, help="Annual home price appreciation, in percent."
    ),
    investment_return_pct: float = typer.Option(
        _RENT.investment_return_pct, help="Annual return on the renter's investments."
    ),
    annual_inflation_pct: float = typer.Option(
        _RENT.annual_inflation_pct, help="Inflation applied to insurance and HOA."
    ),
    cbsa: Optional[str] = typer.Option(
        None, help="Seed rent, price, rate and taxes from ACS + HMDA for this CBSA."
    ),
    acs_year: int = typer.Option(2023, help="ACS vintage to query."),
    hmda_year: int = typer.Option(2023, help="HMDA filing year to query."),
    census_api_key: Optional[str] = typer.Option(
        default_factory=_default_census_key,
        help="Census API key (env CENSUS_API_KEY if omitted).",
    ),
    hmda_table: str = typer.Option(
        default_factory=_default_hmda_table,
        help="Fully-qualified HMDA BigQuery table.",
    ),
    gcp_project: Optional[str] = typer.Option(
        None, help="GCP project for the BigQuery client (defaults to env)."
    ),
    show_timeline: bool = typer.Option(
        False, help="If set, dump the yearly timeline as JSON."
    ),
) -> None:
    """
    Compare the net cost of buying against renting and investing the difference.
    """
    inputs = RentVsBuyInputs(
        years=years,
        monthly_rent=monthly_rent,
        rent_increase_pct=rent_increase_pct,
        renters_insurance_monthly=renters_insurance_monthly,
        home_price=home_price,
        down_payment_pct=down_payment_pct,
        mortgage_rate_pct=mortgage_rate_pct,
        loan_term_years=loan_term_years,
        property_tax_pct=property_tax_pct,
        home_insurance_annual=home_insurance_annual,
        maintenance_pct=maintenance_pct,
        hoa_monthly=hoa_monthly,
        closing_cost_pct=closing_cost_pct,
        selling_cost_pct=selling_cost_pct,
        home_appreciation_pct=home_appreciation_pct,
        investment_return_pct=investment_return_pct,
        annual_inflation_pct=annual_inflation_pct,
    )

    if cbsa:
        assembler = LocationDataAssembler(
            acs_client=CensusACSClient(api_key=census_api_key),
            hmda_client=HMDAClient(table=hmda_table, project=gcp_project),
        )
        try:
            defaults = assembler.build_defaults(cbsa, acs_year=acs_year, hmda_year=hmda_year)
        except DataSourceError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1)
        inputs = defaults.to_rent_vs_buy_inputs(inputs)
        typer.echo(f"Location: {defaults.name} (CBSA {defaults.cbsa})")
        typer.echo(f"Median rent: ${inputs.monthly_rent:,.0f}")
        typer.echo(f"Median property value: ${inputs.home_price:,.0f}")
        typer.echo(f"Mortgage rate: {inputs.mortgage_rate_pct:.2f}%")
        typer.echo("")

    result = compute_rent_vs_buy(inputs)
    summary = result.summary

    typer.echo(f"Horizon: {result.assumptions.years} years")
    typer.echo(f"Monthly mortgage payment (P&I): ${result.assumptions.monthly_mortgage_payment:,.0f}")
    typer.echo("")
    typer.echo(f"Owner total outflow: ${summary.owner_outflow:,.0f}")
    typer.echo(f"Owner ending equity: ${summary.owner_equity:,.0f}")
    typer.echo(f"Owner net cost: ${summary.owner_net_cost:,.0f}")
    typer.echo(f"Renter total outflow: ${summary.renter_outflow:,.0f}")
    typer.echo(f"Renter ending investments: ${summary.renter_investment:,.0f}")
    typer.echo(f"Renter net cost: ${summary.renter_net_cost:,.0f}")
    typer.echo("")
    typer.echo(f"Better outcome: {summary.winner} (by ${abs(summary.cost_difference):,.0f})")
    if summary.break_even_year is not None:
        typer.echo(f"Break-even: ~{summary.break_even_year:.1f} years")
    else:
        typer.echo("Break-even: not reached within the horizon")

    if show_timeline:
        payload = [point.to_dict() for point in result.timeline]
        typer.echo(json.dumps(payload, indent=2))


@app.command()
def retirement(
    current_age: float = typer.Option(_RETIRE.current_age, help="Current age (18-90)."),
    retirement_age: float = typer.Option(_RETIRE.retirement_age, help="Retirement age (40-95)."),
    life_expectancy: float = typer.Option(
        _RETIRE.life_expectancy, help="Plan through this age (55-110)."
    ),
    current_savings: float = typer.Option(
        _RETIRE.current_savings, help="Current retirement savings."
    ),
    annual_contribution: float = typer.Option(
        _RETIRE.annual_contribution, help="Your contribution this year."
    ),
    employer_match_annual: float = typer.Option(
        _RETIRE.employer_match_annual, help="Employer match this year."
    ),
    contribution_growth_pct: float = typer.Option(
        _RETIRE.contribution_growth_pct, help="Annual growth of contributions, in percent."
    ),
    pre_retirement_return_pct: float = typer.Option(
        _RETIRE.pre_retirement_return_pct, help="Annual return before retirement."
    ),
    post_retirement_return_pct: float = typer.Option(
        _RETIRE.post_retirement_return_pct, help="Annual return during retirement."
    ),
    investment_drag_pct: float = typer.Option(
        _RETIRE.investment_drag_pct, help="Fees / tax drag subtracted from returns."
    ),
    monthly_housing: float = typer.Option(_RETIRE.monthly_housing, help="Housing per month."),
    monthly_utilities: float = typer.Option(
        _RETIRE.monthly_utilities, help="Utilities per month."
    ),
    monthly_food: float = typer.Option(_RETIRE.monthly_food, help="Food & groceries per month."),
    monthly_transportation: float = typer.Option(
        _RETIRE.monthly_transportation, help="Transportation per month."
    ),
    monthly_healthcare: float = typer.Option(
        _RETIRE.monthly_healthcare, help="Healthcare per month."
    ),
    monthly_lifestyle: float = typer.Option(
        _RETIRE.monthly_lifestyle, help="Lifestyle per month."
    ),
    monthly_travel: float = typer.Option(_RETIRE.monthly_travel, help="Travel per month."),
    monthly_other: float = typer.Option(_RETIRE.monthly_other, help="Other spending per month."),
    annual_non_monthly_expenses: float = typer.Option(
        _RETIRE.annual_non_monthly_expenses, help="Irregular costs per year."
    ),
    social_security_annual: float = typer.Option(
        _RETIRE.social_security_annual, help="Social Security at retirement, per year."
    ),
    pension_annual: float = typer.Option(
        _RETIRE.pension_annual, help="Pension at retirement, per year."
    ),
    benefit_increase_pct: float = typer.Option(
        _RETIRE.benefit_increase_pct, help="COLA on Social Security and pension."
    ),
    inflation_pct: float = typer.Option(_RETIRE.inflation_pct, help="Annual inflation."),
    retirement_income_tax_pct: float = typer.Option(
        _RETIRE.retirement_income_tax_pct, help="Effective tax rate on withdrawals."
    ),
    safe_withdrawal_rate_pct: float = typer.Option(
        _RETIRE.safe_withdrawal_rate_pct, help="Safe withdrawal rule (0.5-15)."
    ),
    show_budget: bool = typer.Option(
        False, help="If set, list each budget category today and at retirement."
    ),
    show_timeline: bool = typer.Option(
        False, help="If set, dump the yearly timeline as JSON."
    ),
) -> None:
    """
    Project savings to retirement and spending through life expectancy.
    """
    inputs = RetirementInputs(
        current_age=current_age,
        retirement_age=retirement_age,
        life_expectancy=life_expectancy,
        current_savings=current_savings,
        annual_contribution=annual_contribution,
        employer_match_annual=employer_match_annual,
        contribution_growth_pct=contribution_growth_pct,
        pre_retirement_return_pct=pre_retirement_return_pct,
        post_retirement_return_pct=post_retirement_return_pct,
        investment_drag_pct=investment_drag_pct,
        monthly_housing=monthly_housing,
        monthly_utilities=monthly_utilities,
        monthly_food=monthly_food,
        monthly_transportation=monthly_transportation,
        monthly_healthcare=monthly_healthcare,
        monthly_lifestyle=monthly_lifestyle,
        monthly_travel=monthly_travel,
        monthly_other=monthly_other,
        annual_non_monthly_expenses=annual_non_monthly_expenses,
        social_security_annual=social_security_annual,
        pension_annual=pension_annual,
        benefit_increase_pct=benefit_increase_pct,
        inflation_pct=inflation_pct,
        retirement_income_tax_pct=retirement_income_tax_pct,
        safe_withdrawal_rate_pct=safe_withdrawal_rate_pct,
    )
    result = compute_retirement(inputs)
    assumptions = result.assumptions
    summary = result.summary

    typer.echo(
        f"Ages: {assumptions.current_age} now, retire at {assumptions.retirement_age}, "
        f"plan to {assumptions.life_expectancy}"
    )
    typer.echo(f"Balance at retirement: ${summary.balance_at_retirement:,.0f}")
    typer.echo(
        f"Target nest egg ({assumptions.safe_withdrawal_rate:.1%} rule): "
        f"${summary.required_nest_egg:,.0f}"
    )
    if summary.retire_ready:
        typer.echo(f"On track: ahead of target by ${-summary.target_gap:,.0f}")
    else:
        typer.echo(f"Behind target by ${summary.target_gap:,.0f}")
    typer.echo(f"Final balance at {assumptions.life_expectancy}: ${summary.final_balance:,.0f}")
    if summary.run_out_age is not None:
        typer.echo(f"Savings run out at age {summary.run_out_age}")
    typer.echo("")
    typer.echo(f"Total contributions: ${summary.cumulative_contributions:,.0f}")
    typer.echo(f"Total withdrawals: ${summary.cumulative_withdrawals:,.0f}")
    typer.echo(f"Planned monthly spend today: ${summary.planned_monthly_spend_today:,.0f}")
    typer.echo(
        f"Planned monthly spend at retirement: ${summary.planned_monthly_spend_at_retirement:,.0f}"
    )
    typer.echo(f"Sustainable monthly spend: ${summary.sustainable_monthly_spend:,.0f}")
    typer.echo(f"Monthly budget delta: ${summary.monthly_budget_delta:,.0f}")

    if show_budget:
        typer.echo("")
        for row in summary.monthly_budget_rows:
            typer.echo(f"{row.label}: ${row.today:,.0f} today, ${row.at_retirement:,.0f} at retirement")

    if show_timeline:
        payload = [point.to_dict() for point in result.timeline]
        typer.echo(json.dumps(payload, indent=2))


if __name__ == "__main__":
    app()
