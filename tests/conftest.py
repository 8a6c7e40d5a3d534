import pytest

from household_planner.schemas import RentVsBuyInputs, RetirementInputs


@pytest.fixture
def rent_inputs() -> RentVsBuyInputs:
    return RentVsBuyInputs()


@pytest.fixture
def retirement_inputs() -> RetirementInputs:
    return RetirementInputs()
