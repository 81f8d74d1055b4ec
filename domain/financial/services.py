"""Service layer orchestrating PV financing comparisons."""
from __future__ import annotations

import logging
from typing import Annotated, Any, List, Literal, Optional, Sequence

from pydantic import BaseModel, BeforeValidator, Field

from core.config import Settings, get_settings

from .comparison import best_result_index
from .constants import DEFAULT_MONTHLY_YIELD_PATTERN, MONTHS_PER_YEAR
from .models import (
    ConsumptionModel,
    ConsumptionPeriod,
    FixedRateConsumption,
    GlobalParameters,
    GrantType,
    InstallmentStyle,
    MonthlyProfileConsumption,
    OtherCost,
    PercentConsumption,
    ProductionStats,
    RateType,
    Scenario,
    ScenarioResult,
    ScenarioRole,
    to_number,
    to_whole_number,
)
from .policies import apply_role_policies
from .production import (
    compute_production_stats,
    declared_annual_production,
    pattern_annual_production,
)
from .scenarios import default_scenarios
from .simulation import evaluate_scenario

logger = logging.getLogger(__name__)


def _lenient_float(value: Any) -> float:
    return to_number(value)


def _lenient_int(value: Any) -> int:
    return to_whole_number(value)


def _lenient_period(value: Any) -> int:
    period = to_whole_number(value, 1)
    return min(max(period, 1), get_settings().max_period_months)


LenientFloat = Annotated[float, BeforeValidator(_lenient_float)]
LenientInt = Annotated[int, BeforeValidator(_lenient_int)]
PeriodMonths = Annotated[int, BeforeValidator(_lenient_period)]


# ============================================================================
# Request models
# ============================================================================


class GlobalParametersPayload(BaseModel):
    reference_rate: LenientFloat = Field(default_factory=lambda: get_settings().default_reference_rate)
    energy_price_buy: LenientFloat = Field(default_factory=lambda: get_settings().default_energy_price_buy)
    energy_price_sell: LenientFloat = Field(default_factory=lambda: get_settings().default_energy_price_sell)
    energy_inflation_rate: LenientFloat = Field(
        default_factory=lambda: get_settings().default_energy_inflation_rate
    )
    installed_capacity: LenientFloat = Field(
        default_factory=lambda: get_settings().default_installed_capacity
    )
    yield_per_unit_capacity: LenientFloat = Field(
        default_factory=lambda: get_settings().default_yield_per_unit_capacity
    )
    effective_self_consumption_percent: LenientFloat = 0.0

    def to_domain(self, effective_self_consumption_percent: Optional[float] = None) -> GlobalParameters:
        effective = (
            self.effective_self_consumption_percent
            if effective_self_consumption_percent is None
            else effective_self_consumption_percent
        )
        return GlobalParameters(
            reference_rate=self.reference_rate,
            energy_price_buy=self.energy_price_buy,
            energy_price_sell=self.energy_price_sell,
            energy_inflation_rate=self.energy_inflation_rate,
            installed_capacity=self.installed_capacity,
            yield_per_unit_capacity=self.yield_per_unit_capacity,
            effective_self_consumption_percent=effective,
        )


class ConsumptionModelPayload(BaseModel):
    method: Literal["percent", "fixed", "monthly"] = "percent"
    percent: LenientFloat = Field(default_factory=lambda: get_settings().default_self_consumption_percent)
    fixed_amount: LenientFloat = 10.0
    fixed_period: ConsumptionPeriod = ConsumptionPeriod.DAILY
    monthly_profile: List[LenientFloat] = Field(
        default_factory=lambda: [200.0] * MONTHS_PER_YEAR,
        min_length=MONTHS_PER_YEAR,
        max_length=MONTHS_PER_YEAR,
    )

    def to_domain(self) -> ConsumptionModel:
        if self.method == "fixed":
            return FixedRateConsumption(amount=self.fixed_amount, period=self.fixed_period)
        if self.method == "monthly":
            return MonthlyProfileConsumption(values=tuple(self.monthly_profile))
        return PercentConsumption(percent=self.percent)


class OtherCostPayload(BaseModel):
    id: int = 0
    label: str = "Extra cost"
    amount: LenientFloat = 0.0


class ScenarioPayload(BaseModel):
    id: int
    name: str = ""
    role: ScenarioRole = ScenarioRole.STANDARD
    total_cost: LenientFloat = 0.0
    storage_cost: LenientFloat = 0.0
    own_contribution: LenientFloat = 0.0
    period_months: PeriodMonths = 1
    grace_months: LenientInt = 0
    rate_type: RateType = RateType.FIXED
    fixed_rate: LenientFloat = 0.0
    margin: LenientFloat = 0.0
    commission_percent: LenientFloat = 0.0
    installment_style: InstallmentStyle = InstallmentStyle.EQUAL_INSTALLMENT
    grant_type: GrantType = GrantType.AMOUNT
    grant_value: LenientFloat = 0.0
    manual_annual_production: LenientFloat = 0.0
    other_costs: List[OtherCostPayload] = Field(default_factory=list)

    def to_domain(self) -> Scenario:
        return Scenario(
            id=self.id,
            name=self.name,
            role=self.role,
            total_cost=self.total_cost,
            storage_cost=self.storage_cost,
            own_contribution=self.own_contribution,
            period_months=self.period_months,
            grace_months=self.grace_months,
            rate_type=self.rate_type,
            fixed_rate=self.fixed_rate,
            margin=self.margin,
            commission_percent=self.commission_percent,
            installment_style=self.installment_style,
            grant_type=self.grant_type,
            grant_value=self.grant_value,
            manual_annual_production=self.manual_annual_production,
            other_costs=[OtherCost(id=c.id, label=c.label, amount=c.amount) for c in self.other_costs],
        )

    @classmethod
    def from_domain(cls, scenario: Scenario) -> "ScenarioPayload":
        return cls(
            id=scenario.id,
            name=scenario.name,
            role=scenario.role,
            total_cost=scenario.total_cost,
            storage_cost=scenario.storage_cost,
            own_contribution=scenario.own_contribution,
            period_months=scenario.period_months,
            grace_months=scenario.grace_months,
            rate_type=scenario.rate_type,
            fixed_rate=scenario.fixed_rate,
            margin=scenario.margin,
            commission_percent=scenario.commission_percent,
            installment_style=scenario.installment_style,
            grant_type=scenario.grant_type,
            grant_value=scenario.grant_value,
            manual_annual_production=scenario.manual_annual_production,
            other_costs=[
                OtherCostPayload(id=c.id, label=c.label, amount=c.amount) for c in scenario.other_costs
            ],
        )


class ProductionStatsRequest(BaseModel):
    installed_capacity: LenientFloat = Field(
        default_factory=lambda: get_settings().default_installed_capacity
    )
    yield_pattern: List[LenientFloat] = Field(
        default_factory=lambda: list(DEFAULT_MONTHLY_YIELD_PATTERN),
        min_length=MONTHS_PER_YEAR,
        max_length=MONTHS_PER_YEAR,
    )
    consumption: ConsumptionModelPayload = Field(default_factory=ConsumptionModelPayload)
    energy_price_buy: LenientFloat = Field(default_factory=lambda: get_settings().default_energy_price_buy)
    energy_price_sell: LenientFloat = Field(default_factory=lambda: get_settings().default_energy_price_sell)


class EvaluateScenarioRequest(BaseModel):
    scenario: ScenarioPayload
    global_params: GlobalParametersPayload = Field(default_factory=GlobalParametersPayload)


class FinancingComparisonRequest(BaseModel):
    global_params: GlobalParametersPayload = Field(default_factory=GlobalParametersPayload)
    consumption: ConsumptionModelPayload = Field(default_factory=ConsumptionModelPayload)
    yield_pattern: List[LenientFloat] = Field(
        default_factory=lambda: list(DEFAULT_MONTHLY_YIELD_PATTERN),
        min_length=MONTHS_PER_YEAR,
        max_length=MONTHS_PER_YEAR,
    )
    scenarios: List[ScenarioPayload] = Field(
        default_factory=lambda: [ScenarioPayload.from_domain(s) for s in default_scenarios()],
        min_length=1,
    )
    apply_policies: bool = True


# ============================================================================
# Response models
# ============================================================================


class MonthlyStatsPayload(BaseModel):
    month: int
    month_name: str
    production: float
    demand: float
    consumed: float
    sold: float
    value_saved: float
    value_sold: float
    total_value: float


class ProductionStatsResponse(BaseModel):
    monthly: List[MonthlyStatsPayload]
    effective_self_consumption_percent: float
    annual_savings: float
    annual_revenue: float
    annual_production: float
    annual_consumed: float
    annual_sold: float

    @classmethod
    def from_domain(cls, stats: ProductionStats) -> "ProductionStatsResponse":
        return cls(
            monthly=[
                MonthlyStatsPayload(
                    month=row.month,
                    month_name=row.month_name,
                    production=row.production,
                    demand=row.demand,
                    consumed=row.consumed,
                    sold=row.sold,
                    value_saved=row.value_saved,
                    value_sold=row.value_sold,
                    total_value=row.total_value,
                )
                for row in stats.monthly
            ],
            effective_self_consumption_percent=stats.effective_self_consumption_percent,
            annual_savings=stats.annual_savings,
            annual_revenue=stats.annual_revenue,
            annual_production=stats.annual_production,
            annual_consumed=stats.annual_consumed,
            annual_sold=stats.annual_sold,
        )


class YearlyCashFlowPayload(BaseModel):
    year: int
    energy_value: float
    loan_payment: float
    net_cash_flow: float
    cumulative: float


class ScenarioResultPayload(BaseModel):
    scenario_id: int
    name: str
    role: ScenarioRole
    effective_rate: float
    loan_amount: float
    total_interest: float
    upfront_commission: float
    other_costs_total: float
    total_upfront_costs: float
    grant_amount: float
    opportunity_cost: float
    total_project_cost: float
    net_profit_at_horizon: float
    payback_year: Optional[int]
    annual_production: float
    self_consumed_energy: float
    sold_energy: float
    monthly_installments: List[float]
    yearly_cash_flow: List[YearlyCashFlowPayload]

    @classmethod
    def from_domain(cls, result: ScenarioResult) -> "ScenarioResultPayload":
        return cls(
            scenario_id=result.scenario_id,
            name=result.name,
            role=result.role,
            effective_rate=result.effective_rate,
            loan_amount=result.loan_amount,
            total_interest=result.total_interest,
            upfront_commission=result.upfront_commission,
            other_costs_total=result.other_costs_total,
            total_upfront_costs=result.total_upfront_costs,
            grant_amount=result.grant_amount,
            opportunity_cost=result.opportunity_cost,
            total_project_cost=result.total_project_cost,
            net_profit_at_horizon=result.net_profit_at_horizon,
            payback_year=result.payback_year,
            annual_production=result.annual_production,
            self_consumed_energy=result.self_consumed_energy,
            sold_energy=result.sold_energy,
            monthly_installments=list(result.monthly_installments),
            yearly_cash_flow=[
                YearlyCashFlowPayload(
                    year=row.year,
                    energy_value=row.energy_value,
                    loan_payment=row.loan_payment,
                    net_cash_flow=row.net_cash_flow,
                    cumulative=row.cumulative,
                )
                for row in result.yearly_cash_flow
            ],
        )


class FinancingComparisonResponse(BaseModel):
    production: ProductionStatsResponse
    pattern_annual_production: float
    declared_annual_production: float
    scenarios: List[ScenarioPayload]
    results: List[ScenarioResultPayload]
    best_scenario_id: Optional[int]
    best_index: Optional[int]
    success: bool
    message: str


# ============================================================================
# Operations
# ============================================================================


def recompute(
    global_params: GlobalParameters,
    scenarios: Sequence[Scenario],
    settings: Optional[Settings] = None,
) -> List[ScenarioResult]:
    """Evaluate every scenario from scratch against the same global parameters."""
    return [evaluate_scenario(scenario, global_params, settings) for scenario in scenarios]


def run_production_stats(request: ProductionStatsRequest) -> ProductionStatsResponse:
    stats = compute_production_stats(
        request.installed_capacity,
        request.yield_pattern,
        request.consumption.to_domain(),
        request.energy_price_buy,
        request.energy_price_sell,
    )
    return ProductionStatsResponse.from_domain(stats)


def run_scenario_evaluation(request: EvaluateScenarioRequest) -> ScenarioResultPayload:
    result = evaluate_scenario(request.scenario.to_domain(), request.global_params.to_domain())
    return ScenarioResultPayload.from_domain(result)


def run_financing_comparison(
    request: FinancingComparisonRequest,
    settings: Optional[Settings] = None,
) -> FinancingComparisonResponse:
    settings = settings or get_settings()
    params = request.global_params

    stats = compute_production_stats(
        params.installed_capacity,
        request.yield_pattern,
        request.consumption.to_domain(),
        params.energy_price_buy,
        params.energy_price_sell,
    )
    global_params = params.to_domain(stats.effective_self_consumption_percent)

    scenarios = [payload.to_domain() for payload in request.scenarios]
    if request.apply_policies:
        apply_role_policies(scenarios, settings)

    results = recompute(global_params, scenarios, settings)
    best_index = best_result_index(results)
    best_id = results[best_index].scenario_id if best_index is not None else None
    logger.info(
        "Compared %d scenarios at %.1f%% self-consumption; best: %s",
        len(results),
        stats.effective_self_consumption_percent,
        best_id,
    )

    return FinancingComparisonResponse(
        production=ProductionStatsResponse.from_domain(stats),
        pattern_annual_production=pattern_annual_production(params.installed_capacity, request.yield_pattern),
        declared_annual_production=declared_annual_production(
            params.installed_capacity, params.yield_per_unit_capacity
        ),
        scenarios=[ScenarioPayload.from_domain(s) for s in scenarios],
        results=[ScenarioResultPayload.from_domain(r) for r in results],
        best_scenario_id=best_id,
        best_index=best_index,
        success=True,
        message="Financing comparison calculated",
    )


def default_scenario_payloads() -> List[ScenarioPayload]:
    return [ScenarioPayload.from_domain(s) for s in default_scenarios()]


__all__ = [
    "ConsumptionModelPayload",
    "EvaluateScenarioRequest",
    "FinancingComparisonRequest",
    "FinancingComparisonResponse",
    "GlobalParametersPayload",
    "MonthlyStatsPayload",
    "OtherCostPayload",
    "ProductionStatsRequest",
    "ProductionStatsResponse",
    "ScenarioPayload",
    "ScenarioResultPayload",
    "YearlyCashFlowPayload",
    "default_scenario_payloads",
    "recompute",
    "run_financing_comparison",
    "run_production_stats",
    "run_scenario_evaluation",
]
