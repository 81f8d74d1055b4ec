"""Domain models for PV financing analysis."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np

from .constants import DAYS_IN_MONTH, MONTH_NAMES, MONTHS_PER_YEAR


class RateType(Enum):
    FIXED = "fixed"
    INDEXED = "indexed"


class InstallmentStyle(Enum):
    EQUAL_INSTALLMENT = "equal_installment"
    EQUAL_PRINCIPAL = "equal_principal"


class GrantType(Enum):
    AMOUNT = "amount"
    PERCENT = "percent"


class ScenarioRole(Enum):
    STANDARD = "standard"
    CASH_PURCHASE = "cash_purchase"
    SUBSIDIZED_LOAN = "subsidized_loan"


class ConsumptionPeriod(Enum):
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def to_number(value: Any, default: float = 0.0) -> float:
    """Parse a numeric input, falling back to ``default`` for missing or bad values."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def to_whole_number(value: Any, default: int = 0) -> int:
    return int(to_number(value, float(default)))


# ============================================================================
# Consumption models
# ============================================================================


@dataclass(frozen=True)
class PercentConsumption:
    """Demand is a fixed share of the month's production."""

    percent: float

    def monthly_demand(self, production: np.ndarray) -> np.ndarray:
        return production * (to_number(self.percent) / 100)


@dataclass(frozen=True)
class FixedRateConsumption:
    """Constant demand declared per day, month or year."""

    amount: float
    period: ConsumptionPeriod = ConsumptionPeriod.DAILY

    def monthly_demand(self, production: np.ndarray) -> np.ndarray:
        amount = to_number(self.amount)
        if self.period == ConsumptionPeriod.DAILY:
            return amount * np.asarray(DAYS_IN_MONTH, dtype=float)
        if self.period == ConsumptionPeriod.MONTHLY:
            return np.full(MONTHS_PER_YEAR, amount, dtype=float)
        return np.full(MONTHS_PER_YEAR, amount / MONTHS_PER_YEAR, dtype=float)


@dataclass(frozen=True)
class MonthlyProfileConsumption:
    """Explicit demand for each calendar month."""

    values: Tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.values) != MONTHS_PER_YEAR:
            raise ValueError(
                f"Monthly consumption profile needs {MONTHS_PER_YEAR} values, got {len(self.values)}"
            )

    def monthly_demand(self, production: np.ndarray) -> np.ndarray:
        return np.asarray([to_number(value) for value in self.values], dtype=float)


ConsumptionModel = Union[PercentConsumption, FixedRateConsumption, MonthlyProfileConsumption]


# ============================================================================
# Inputs
# ============================================================================


@dataclass
class GlobalParameters:
    reference_rate: float
    energy_price_buy: float
    energy_price_sell: float
    energy_inflation_rate: float
    installed_capacity: float
    yield_per_unit_capacity: float
    effective_self_consumption_percent: float = 0.0


@dataclass
class OtherCost:
    id: int
    label: str = "Extra cost"
    amount: float = 0.0


@dataclass
class Scenario:
    id: int
    name: str
    role: ScenarioRole = ScenarioRole.STANDARD
    total_cost: float = 0.0
    storage_cost: float = 0.0
    own_contribution: float = 0.0
    period_months: int = 1
    grace_months: int = 0
    rate_type: RateType = RateType.FIXED
    fixed_rate: float = 0.0
    margin: float = 0.0
    commission_percent: float = 0.0
    installment_style: InstallmentStyle = InstallmentStyle.EQUAL_INSTALLMENT
    grant_type: GrantType = GrantType.AMOUNT
    grant_value: float = 0.0
    manual_annual_production: float = 0.0
    other_costs: List[OtherCost] = field(default_factory=list)

    @property
    def loan_amount(self) -> float:
        return max(0.0, to_number(self.total_cost) - to_number(self.own_contribution))

    @property
    def other_costs_total(self) -> float:
        return sum(to_number(item.amount) for item in self.other_costs)


# ============================================================================
# Outputs
# ============================================================================


@dataclass(frozen=True)
class MonthlyStats:
    month: int
    production: float
    demand: float
    consumed: float
    sold: float
    value_saved: float
    value_sold: float

    @property
    def total_value(self) -> float:
        return self.value_saved + self.value_sold

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month - 1]


@dataclass(frozen=True)
class ProductionStats:
    monthly: Tuple[MonthlyStats, ...]
    effective_self_consumption_percent: float
    annual_savings: float
    annual_revenue: float

    @property
    def annual_production(self) -> float:
        return sum(row.production for row in self.monthly)

    @property
    def annual_consumed(self) -> float:
        return sum(row.consumed for row in self.monthly)

    @property
    def annual_sold(self) -> float:
        return sum(row.sold for row in self.monthly)


@dataclass(frozen=True)
class YearlyCashFlow:
    year: int
    energy_value: float
    loan_payment: float
    net_cash_flow: float
    cumulative: float


@dataclass(frozen=True)
class ScenarioResult:
    scenario_id: int
    name: str
    role: ScenarioRole
    effective_rate: float
    loan_amount: float
    total_interest: float
    upfront_commission: float
    other_costs_total: float
    grant_amount: float
    opportunity_cost: float
    total_project_cost: float
    net_profit_at_horizon: float
    payback_year: Optional[int]
    annual_production: float
    self_consumed_energy: float
    sold_energy: float
    monthly_installments: Tuple[float, ...]
    yearly_cash_flow: Tuple[YearlyCashFlow, ...]

    @property
    def total_upfront_costs(self) -> float:
        return self.upfront_commission + self.other_costs_total


def normalise_pattern(pattern: Sequence[float]) -> np.ndarray:
    """Return the yield pattern as a float array, rejecting wrong-length input."""
    if len(pattern) != MONTHS_PER_YEAR:
        raise ValueError(f"Yield pattern needs {MONTHS_PER_YEAR} monthly weights, got {len(pattern)}")
    return np.asarray([max(0.0, to_number(weight)) for weight in pattern], dtype=float)


__all__ = [
    "ConsumptionModel",
    "ConsumptionPeriod",
    "FixedRateConsumption",
    "GlobalParameters",
    "GrantType",
    "InstallmentStyle",
    "MonthlyProfileConsumption",
    "MonthlyStats",
    "OtherCost",
    "PercentConsumption",
    "ProductionStats",
    "RateType",
    "Scenario",
    "ScenarioResult",
    "ScenarioRole",
    "YearlyCashFlow",
    "normalise_pattern",
    "to_number",
    "to_whole_number",
]
