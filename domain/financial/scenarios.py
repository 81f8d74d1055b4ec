"""Default financing scenarios and editing of the scenario list."""
from __future__ import annotations

import logging
from dataclasses import fields
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from core.config import Settings, get_settings

from .models import (
    GrantType,
    InstallmentStyle,
    OtherCost,
    RateType,
    Scenario,
    ScenarioRole,
    to_number,
    to_whole_number,
)
from .policies import MASTER_SHARED_FIELDS, apply_role_policies, is_master, locked_fields

logger = logging.getLogger(__name__)

_ENUM_FIELDS = {
    "role": ScenarioRole,
    "rate_type": RateType,
    "installment_style": InstallmentStyle,
    "grant_type": GrantType,
}
_INTEGER_FIELDS = {"period_months", "grace_months"}
_READ_ONLY_FIELDS = {"id", "other_costs"}
EDITABLE_FIELDS: FrozenSet[str] = frozenset(
    f.name for f in fields(Scenario) if f.name not in _READ_ONLY_FIELDS
)


def default_scenarios(settings: Optional[Settings] = None) -> List[Scenario]:
    """The three starting options: subsidized loan, commercial loan, own funds."""
    scenarios = [
        Scenario(
            id=1,
            name="Subsidized RES loan",
            role=ScenarioRole.SUBSIDIZED_LOAN,
            total_cost=120000.0,
            storage_cost=20000.0,
            period_months=120,
            rate_type=RateType.FIXED,
            fixed_rate=1.0,
        ),
        Scenario(
            id=2,
            name="Commercial loan",
            total_cost=120000.0,
            storage_cost=20000.0,
            period_months=120,
            rate_type=RateType.INDEXED,
            margin=2.5,
            commission_percent=2.0,
        ),
        Scenario(
            id=3,
            name="Own funds",
            role=ScenarioRole.CASH_PURCHASE,
            total_cost=120000.0,
            storage_cost=20000.0,
            own_contribution=120000.0,
            period_months=1,
        ),
    ]
    apply_role_policies(scenarios, settings)
    return scenarios


def _coerce_field(field_name: str, value: Any) -> Any:
    if field_name in _ENUM_FIELDS:
        enum_type = _ENUM_FIELDS[field_name]
        return value if isinstance(value, enum_type) else enum_type(value)
    if field_name in _INTEGER_FIELDS:
        return to_whole_number(value)
    if field_name == "name":
        return "" if value is None else str(value)
    return to_number(value)


class ScenarioPortfolio:
    """Caller-owned list of scenarios with the edit operations of the input form."""

    def __init__(
        self,
        scenarios: Optional[Iterable[Scenario]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        if scenarios is None:
            self.scenarios = default_scenarios(self.settings)
        else:
            self.scenarios = list(scenarios)
            apply_role_policies(self.scenarios, self.settings)
        if not self.scenarios:
            raise ValueError("A portfolio needs at least one scenario")

    def __len__(self) -> int:
        return len(self.scenarios)

    def __iter__(self):
        return iter(self.scenarios)

    def get(self, scenario_id: int) -> Scenario:
        for scenario in self.scenarios:
            if scenario.id == scenario_id:
                return scenario
        raise KeyError(f"Unknown scenario id: {scenario_id}")

    def add(self) -> Scenario:
        new_id = max((s.id for s in self.scenarios), default=0) + 1
        scenario = Scenario(
            id=new_id,
            name=f"Option #{new_id}",
            total_cost=self.scenarios[0].total_cost if self.scenarios else 120000.0,
            period_months=60,
            rate_type=RateType.INDEXED,
            fixed_rate=8.0,
            margin=2.0,
            commission_percent=1.0,
        )
        self.scenarios.append(scenario)
        logger.info("Added scenario %s", new_id)
        return scenario

    def remove(self, scenario_id: int) -> bool:
        """Drop a scenario; the last remaining one is never removed."""
        if len(self.scenarios) <= 1:
            return False
        remaining = [s for s in self.scenarios if s.id != scenario_id]
        if len(remaining) == len(self.scenarios):
            return False
        self.scenarios = remaining
        logger.info("Removed scenario %s", scenario_id)
        return True

    def update(self, scenario_id: int, field_name: str, value: Any) -> Scenario:
        if field_name not in EDITABLE_FIELDS:
            raise KeyError(f"Unknown scenario field: {field_name}")
        scenario = self.get(scenario_id)
        coerced = _coerce_field(field_name, value)

        setattr(scenario, field_name, coerced)
        if is_master(scenario) and field_name in MASTER_SHARED_FIELDS:
            for other in self.scenarios:
                setattr(other, field_name, coerced)

        apply_role_policies(self.scenarios, self.settings)
        return scenario

    def add_other_cost(self, scenario_id: int, label: str = "Extra cost", amount: float = 0.0) -> OtherCost:
        scenario = self.get(scenario_id)
        cost_id = max((c.id for c in scenario.other_costs), default=0) + 1
        cost = OtherCost(id=cost_id, label=label, amount=to_number(amount))
        scenario.other_costs.append(cost)
        return cost

    def update_other_cost(
        self,
        scenario_id: int,
        cost_id: int,
        label: Optional[str] = None,
        amount: Optional[Any] = None,
    ) -> OtherCost:
        scenario = self.get(scenario_id)
        for cost in scenario.other_costs:
            if cost.id == cost_id:
                if label is not None:
                    cost.label = label
                if amount is not None:
                    cost.amount = to_number(amount)
                return cost
        raise KeyError(f"Unknown cost id {cost_id} for scenario {scenario_id}")

    def remove_other_cost(self, scenario_id: int, cost_id: int) -> None:
        scenario = self.get(scenario_id)
        scenario.other_costs = [c for c in scenario.other_costs if c.id != cost_id]

    def locked_fields(self, scenario_id: int) -> FrozenSet[str]:
        return locked_fields(self.get(scenario_id))

    def editor_state(self) -> Dict[int, FrozenSet[str]]:
        return {scenario.id: locked_fields(scenario) for scenario in self.scenarios}


__all__ = ["EDITABLE_FIELDS", "ScenarioPortfolio", "default_scenarios"]
