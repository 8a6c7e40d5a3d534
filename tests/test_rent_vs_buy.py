import dataclasses
import math

import pytest

from household_planner.model import compute_rent_vs_buy, mortgage_payment
from household_planner.schemas import RentVsBuyInputs


def test_default_scenario(rent_inputs):
    result = compute_rent_vs_buy(rent_inputs)

    assert result.assumptions.years == 10
    assert result.assumptions.monthly_mortgage_payment == pytest.approx(
        mortgage_payment(400_000, 6.5, 30)
    )
    assert [point.year for point in result.timeline] == list(range(1, 11))

    for previous, current in zip(result.timeline, result.timeline[1:]):
        assert current.owner_outflow > previous.owner_outflow
        assert current.renter_outflow > previous.renter_outflow


def test_summary_matches_final_point(rent_inputs):
    result = compute_rent_vs_buy(rent_inputs)
    final = result.timeline[-1]
    summary = result.summary

    assert summary.owner_net_cost == final.owner_net_cost
    assert summary.renter_net_cost == final.renter_net_cost
    assert summary.owner_outflow == final.owner_outflow
    assert summary.renter_outflow == final.renter_outflow
    assert summary.owner_equity == final.owner_equity
    assert summary.renter_investment == final.renter_investment
    assert summary.cost_difference == pytest.approx(
        final.renter_net_cost - final.owner_net_cost
    )
    expected = "buy" if summary.cost_difference > 0 else "rent"
    assert summary.winner == expected


def test_first_point_by_hand():
    inputs = RentVsBuyInputs(
        years=1,
        monthly_rent=1000,
        rent_increase_pct=0,
        renters_insurance_monthly=0,
        home_price=120_000,
        down_payment_pct=0,
        mortgage_rate_pct=0,
        loan_term_years=10,
        property_tax_pct=0,
        home_insurance_annual=0,
        maintenance_pct=0,
        hoa_monthly=0,
        closing_cost_pct=0,
        selling_cost_pct=0,
        home_appreciation_pct=0,
        investment_return_pct=0,
        annual_inflation_pct=0,
    )
    point = compute_rent_vs_buy(inputs).timeline[0]

    assert point.owner_outflow == pytest.approx(12_000)
    assert point.renter_outflow == pytest.approx(12_000)
    assert point.owner_equity == pytest.approx(12_000)
    assert point.renter_investment == pytest.approx(0)
    assert point.owner_net_cost == pytest.approx(0)
    assert point.renter_net_cost == pytest.approx(12_000)


@pytest.mark.parametrize(
    "years, expected",
    [(0, 1), (0.4, 1), (2.5, 3), (7, 7), (50, 50), (120, 50), (-3, 1)],
)
def test_horizon_is_rounded_and_clamped(years, expected):
    result = compute_rent_vs_buy(RentVsBuyInputs(years=years))
    assert result.assumptions.years == expected
    assert len(result.timeline) == expected


def test_loan_is_paid_off_within_term():
    inputs = RentVsBuyInputs(
        years=8,
        loan_term_years=5,
        home_appreciation_pct=0,
        selling_cost_pct=0,
    )
    result = compute_rent_vs_buy(inputs)
    equities = [point.owner_equity for point in result.timeline]

    # With a flat home value, equity only moves with principal paid.
    for previous, current in zip(equities, equities[1:]):
        assert current >= previous - 1e-9
    for equity in equities[4:]:
        assert equity == pytest.approx(500_000, abs=0.05)
        assert equity <= 500_000 + 1e-6


def test_no_home_means_no_equity():
    inputs = RentVsBuyInputs(home_price=0, annual_inflation_pct=0)
    result = compute_rent_vs_buy(inputs)

    assert result.assumptions.monthly_mortgage_payment == 0
    for point in result.timeline:
        assert point.owner_equity == 0
        # Only insurance and HOA remain on the owner side.
        assert point.owner_outflow == pytest.approx(point.year * 12 * (150 + 150))


def test_flat_rates_give_flat_rent():
    inputs = RentVsBuyInputs(
        rent_increase_pct=0, annual_inflation_pct=0, investment_return_pct=0
    )
    result = compute_rent_vs_buy(inputs)
    for point in result.timeline:
        assert point.renter_outflow == pytest.approx(point.year * 12 * (2200 + 22))


def test_break_even_is_latched_on_first_hit():
    # Owner starts cheaper, but costs climb while rent falls.
    inputs = RentVsBuyInputs(
        monthly_rent=320,
        rent_increase_pct=-20,
        renters_insurance_monthly=0,
        home_price=0,
        home_insurance_annual=1800,
        hoa_monthly=150,
        investment_return_pct=0,
        annual_inflation_pct=30,
    )
    result = compute_rent_vs_buy(inputs)

    assert result.summary.break_even_year == pytest.approx(1 / 12)
    assert result.summary.winner == "rent"
    assert result.timeline[-1].owner_net_cost > result.timeline[-1].renter_net_cost


def test_no_break_even_when_renting_always_cheaper():
    inputs = RentVsBuyInputs(monthly_rent=500, rent_increase_pct=0, home_appreciation_pct=0)
    result = compute_rent_vs_buy(inputs)

    assert result.summary.break_even_year is None
    assert result.summary.winner == "rent"


def test_tie_when_nothing_costs_anything():
    inputs = RentVsBuyInputs(
        monthly_rent=0,
        renters_insurance_monthly=0,
        home_price=0,
        home_insurance_annual=0,
        hoa_monthly=0,
    )
    result = compute_rent_vs_buy(inputs)

    assert result.summary.winner == "tie"
    assert result.summary.cost_difference == 0
    assert result.summary.break_even_year == pytest.approx(1 / 12)


def test_out_of_range_percentages_are_clamped():
    clamped = compute_rent_vs_buy(
        RentVsBuyInputs(down_payment_pct=100, selling_cost_pct=0)
    )
    extreme = compute_rent_vs_buy(
        RentVsBuyInputs(down_payment_pct=150, selling_cost_pct=-5)
    )

    assert extreme.assumptions.monthly_mortgage_payment == 0
    assert extreme.summary == clamped.summary


def test_negative_amounts_are_floored(rent_inputs):
    result = compute_rent_vs_buy(
        rent_inputs.replace(monthly_rent=-100, hoa_monthly=-50, mortgage_rate_pct=-3)
    )
    floored = compute_rent_vs_buy(
        rent_inputs.replace(monthly_rent=0, hoa_monthly=0, mortgage_rate_pct=0)
    )
    assert result.summary == floored.summary


def test_inputs_are_untouched(rent_inputs):
    before = dataclasses.replace(rent_inputs)
    compute_rent_vs_buy(rent_inputs)
    assert rent_inputs == before


def test_analysis_is_immutable(rent_inputs):
    result = compute_rent_vs_buy(rent_inputs)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.summary.winner = "tie"
    assert isinstance(result.timeline, tuple)


@pytest.mark.parametrize(
    "field, value, bound",
    [
        ("years", math.inf, 50),
        ("years", -math.inf, 1),
        ("loan_term_years", math.inf, 40),
        ("loan_term_years", -math.inf, 1),
    ],
)
def test_infinite_horizons_land_on_bounds(rent_inputs, field, value, bound):
    result = compute_rent_vs_buy(rent_inputs.replace(**{field: value}))
    expected = compute_rent_vs_buy(rent_inputs.replace(**{field: bound}))

    assert result.assumptions == expected.assumptions
    assert result.summary == expected.summary
    assert len(result.timeline) == len(expected.timeline)
