"""Derived-field rules keyed on a scenario's role."""
from __future__ import annotations

from typing import Callable, Dict, FrozenSet, Iterable, Optional

from core.config import Settings, get_settings

from .models import GrantType, Scenario, ScenarioRole, to_number

PolicyRule = Callable[[Scenario, Settings], Scenario]

# Cost fields of a subsidized-loan scenario that every other scenario follows
MASTER_SHARED_FIELDS: FrozenSet[str] = frozenset({"total_cost", "storage_cost"})


def _standard(scenario: Scenario, settings: Settings) -> Scenario:
    return scenario


def _cash_purchase(scenario: Scenario, settings: Settings) -> Scenario:
    scenario.own_contribution = to_number(scenario.total_cost)
    return scenario


def _subsidized_loan(scenario: Scenario, settings: Settings) -> Scenario:
    """Storage spend unlocks forgiveness of part of the loan, capped at that spend."""
    storage_cost = to_number(scenario.storage_cost)
    if storage_cost > 0:
        grant = min(scenario.loan_amount * settings.subsidy_grant_ratio, storage_cost)
        scenario.grant_type = GrantType.AMOUNT
        scenario.grant_value = grant
    return scenario


POLICY_TABLE: Dict[ScenarioRole, PolicyRule] = {
    ScenarioRole.STANDARD: _standard,
    ScenarioRole.CASH_PURCHASE: _cash_purchase,
    ScenarioRole.SUBSIDIZED_LOAN: _subsidized_loan,
}

LOCKED_FIELDS: Dict[ScenarioRole, FrozenSet[str]] = {
    ScenarioRole.STANDARD: frozenset(),
    ScenarioRole.CASH_PURCHASE: frozenset({"own_contribution"}),
    ScenarioRole.SUBSIDIZED_LOAN: frozenset({"grant_type", "grant_value"}),
}


def apply_role_policy(scenario: Scenario, settings: Optional[Settings] = None) -> Scenario:
    """Apply the rule for ``scenario.role`` in place and return the scenario."""
    return POLICY_TABLE[scenario.role](scenario, settings or get_settings())


def apply_role_policies(scenarios: Iterable[Scenario], settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    for scenario in scenarios:
        apply_role_policy(scenario, settings)


def locked_fields(scenario: Scenario) -> FrozenSet[str]:
    """Fields an editor should not let the user change for this scenario."""
    locked = LOCKED_FIELDS[scenario.role]
    if scenario.role == ScenarioRole.SUBSIDIZED_LOAN and to_number(scenario.storage_cost) <= 0:
        return frozenset()
    return locked


def is_master(scenario: Scenario) -> bool:
    return scenario.role == ScenarioRole.SUBSIDIZED_LOAN


__all__ = [
    "LOCKED_FIELDS",
    "MASTER_SHARED_FIELDS",
    "POLICY_TABLE",
    "apply_role_policies",
    "apply_role_policy",
    "is_master",
    "locked_fields",
]
