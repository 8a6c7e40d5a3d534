import pytest

from household_planner.model import (
    annual_rate_multiplier,
    annual_to_monthly_rate,
    clamp,
    mortgage_payment,
    round_half_away,
)


@pytest.mark.parametrize(
    "value, expected",
    [(-5, 0), (0, 0), (42, 42), (100, 100), (150, 100)],
)
def test_clamp(value, expected):
    assert clamp(value, 0, 100) == expected


def test_monthly_rate_compounds_to_annual():
    monthly = annual_to_monthly_rate(12)
    assert (1 + monthly) ** 12 == pytest.approx(1.12)


def test_monthly_rate_zero_is_flat():
    assert annual_to_monthly_rate(0) == 0


def test_monthly_rate_is_bounded():
    assert annual_to_monthly_rate(-500) == annual_to_monthly_rate(-99)
    assert annual_to_monthly_rate(5000) == annual_to_monthly_rate(1000)
    assert annual_to_monthly_rate(-500) > -1


def test_annual_rate_multiplier():
    assert annual_rate_multiplier(2.5) == pytest.approx(1.025)
    assert annual_rate_multiplier(-10) == pytest.approx(0.9)


def test_mortgage_payment_matches_formula():
    r = 6.5 / 100 / 12
    n = 360
    expected = 400_000 * r / (1 - (1 + r) ** -n)
    assert mortgage_payment(400_000, 6.5, 30) == pytest.approx(expected)
    assert mortgage_payment(400_000, 6.5, 30) == pytest.approx(2528.27, abs=0.01)


def test_mortgage_payment_zero_rate_is_straight_line():
    assert mortgage_payment(120_000, 0, 10) == pytest.approx(1000)


@pytest.mark.parametrize("principal", [0, -10_000])
def test_mortgage_payment_without_principal(principal):
    assert mortgage_payment(principal, 6.5, 30) == 0


def test_mortgage_payment_zero_term_uses_single_month():
    assert mortgage_payment(5000, 0, 0) == pytest.approx(5000)


@pytest.mark.parametrize(
    "value, expected",
    [(2.5, 3), (2.4, 2), (-2.5, -3), (0.49, 0), (10, 10)],
)
def test_round_half_away(value, expected):
    assert round_half_away(value) == expected
