"""Monthly production and self-consumption calculator."""
from __future__ import annotations

from typing import Sequence

import numpy as np

from .constants import DEFAULT_MONTHLY_YIELD_PATTERN
from .models import (
    ConsumptionModel,
    MonthlyStats,
    ProductionStats,
    normalise_pattern,
    to_number,
)


def compute_production_stats(
    capacity: float,
    pattern: Sequence[float],
    consumption_model: ConsumptionModel,
    price_buy: float,
    price_sell: float,
) -> ProductionStats:
    """Split each month's production into self-consumed and exported energy.

    Demand above production is simply unmet; it is never carried into the
    next month. The effective self-consumption percentage is the ratio of
    consumed to produced energy over the whole year, so any two consumption
    models that land on the same ratio drive identical scenario results.
    """
    capacity = max(0.0, to_number(capacity))
    price_buy = to_number(price_buy)
    price_sell = to_number(price_sell)

    production = capacity * normalise_pattern(pattern)
    demand = np.maximum(consumption_model.monthly_demand(production), 0.0)
    consumed = np.minimum(production, demand)
    sold = np.maximum(production - consumed, 0.0)

    value_saved = consumed * price_buy
    value_sold = sold * price_sell

    monthly = tuple(
        MonthlyStats(
            month=index + 1,
            production=float(production[index]),
            demand=float(demand[index]),
            consumed=float(consumed[index]),
            sold=float(sold[index]),
            value_saved=float(value_saved[index]),
            value_sold=float(value_sold[index]),
        )
        for index in range(len(production))
    )

    total_production = float(np.sum(production))
    total_consumed = float(np.sum(consumed))
    effective_percent = (total_consumed / total_production) * 100 if total_production > 0 else 0.0

    return ProductionStats(
        monthly=monthly,
        effective_self_consumption_percent=effective_percent,
        annual_savings=float(np.sum(value_saved)),
        annual_revenue=float(np.sum(value_sold)),
    )


def pattern_annual_production(capacity: float, pattern: Sequence[float] = DEFAULT_MONTHLY_YIELD_PATTERN) -> float:
    """Annual production implied by the monthly pattern."""
    return float(np.sum(max(0.0, to_number(capacity)) * normalise_pattern(pattern)))


def declared_annual_production(capacity: float, yield_per_unit_capacity: float) -> float:
    """Annual production implied by the declared kWh/kW figure."""
    return max(0.0, to_number(capacity)) * to_number(yield_per_unit_capacity)


__all__ = [
    "compute_production_stats",
    "declared_annual_production",
    "pattern_annual_production",
]
