"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.config import Settings  # noqa: E402
from domain.financial.models import (  # noqa: E402
    GlobalParameters,
    InstallmentStyle,
    OtherCost,
    RateType,
    Scenario,
    ScenarioRole,
)


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# ============================================================================
# Shared Fixtures - Configuration
# ============================================================================


@pytest.fixture
def settings():
    """Settings with the standard 15-year horizon and 10% subsidy ratio."""
    return Settings(horizon_years=15, subsidy_grant_ratio=0.10, balance_payoff_threshold=1.0)


@pytest.fixture
def global_params():
    """10 kW installation, 1000 kWh/kW, 30% self-consumption."""
    return GlobalParameters(
        reference_rate=4.27,
        energy_price_buy=0.70,
        energy_price_sell=0.25,
        energy_inflation_rate=3.0,
        installed_capacity=10.0,
        yield_per_unit_capacity=1000.0,
        effective_self_consumption_percent=30.0,
    )


# ============================================================================
# Shared Fixtures - Scenarios
# ============================================================================


@pytest.fixture
def subsidized_scenario():
    return Scenario(
        id=1,
        name="Subsidized RES loan",
        role=ScenarioRole.SUBSIDIZED_LOAN,
        total_cost=120000.0,
        storage_cost=20000.0,
        period_months=120,
        rate_type=RateType.FIXED,
        fixed_rate=1.0,
        grant_value=12000.0,
    )


@pytest.fixture
def commercial_scenario():
    return Scenario(
        id=2,
        name="Commercial loan",
        total_cost=120000.0,
        storage_cost=20000.0,
        period_months=120,
        rate_type=RateType.INDEXED,
        margin=2.5,
        commission_percent=2.0,
        installment_style=InstallmentStyle.EQUAL_INSTALLMENT,
        other_costs=[OtherCost(id=1, label="Notary", amount=500.0)],
    )


@pytest.fixture
def cash_scenario():
    return Scenario(
        id=3,
        name="Own funds",
        role=ScenarioRole.CASH_PURCHASE,
        total_cost=120000.0,
        storage_cost=20000.0,
        own_contribution=120000.0,
        period_months=1,
    )
