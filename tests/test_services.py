"""Tests for domain/financial/services.py."""

import pytest

from domain.financial.models import ConsumptionPeriod, GlobalParameters, ScenarioRole
from domain.financial.scenarios import default_scenarios
from domain.financial.services import (
    ConsumptionModelPayload,
    EvaluateScenarioRequest,
    FinancingComparisonRequest,
    GlobalParametersPayload,
    ProductionStatsRequest,
    ScenarioPayload,
    default_scenario_payloads,
    recompute,
    run_financing_comparison,
    run_production_stats,
    run_scenario_evaluation,
)


class TestPayloads:
    def test_lenient_numbers(self):
        payload = ScenarioPayload(id=1, total_cost="abc", own_contribution=None, period_months=0)

        assert payload.total_cost == 0.0
        assert payload.own_contribution == 0.0
        assert payload.period_months == 1

    def test_numeric_strings_parsed(self):
        payload = ScenarioPayload(id=1, total_cost="1500.5", grace_months="3")

        assert payload.total_cost == 1500.5
        assert payload.grace_months == 3

    def test_non_finite_numbers_become_zero(self):
        payload = ScenarioPayload(id=1, total_cost="1e400", margin="-inf", fixed_rate=float("nan"))

        assert payload.total_cost == 0.0
        assert payload.margin == 0.0
        assert payload.fixed_rate == 0.0

    def test_period_capped_at_maximum(self, settings):
        payload = ScenarioPayload(id=1, period_months=200000)

        assert payload.period_months == settings.max_period_months

    def test_enum_values(self):
        payload = ScenarioPayload(id=1, role="cash_purchase", rate_type="indexed")

        assert payload.role == ScenarioRole.CASH_PURCHASE
        assert payload.to_domain().role == ScenarioRole.CASH_PURCHASE

    def test_round_trip_keeps_other_costs(self):
        payload = ScenarioPayload(id=1, other_costs=[{"id": 1, "label": "Fee", "amount": "250"}])
        scenario = payload.to_domain()

        assert scenario.other_costs_total == 250.0
        assert ScenarioPayload.from_domain(scenario).other_costs[0].label == "Fee"

    def test_consumption_variants(self):
        fixed = ConsumptionModelPayload(method="fixed", fixed_amount=5, fixed_period="monthly").to_domain()
        profile = ConsumptionModelPayload(method="monthly", monthly_profile=[1] * 12).to_domain()

        assert fixed.period == ConsumptionPeriod.MONTHLY
        assert len(profile.values) == 12

    def test_global_defaults_from_settings(self):
        params = GlobalParametersPayload().to_domain(42.0)

        assert params.reference_rate == pytest.approx(4.27)
        assert params.installed_capacity == pytest.approx(45.0)
        assert params.effective_self_consumption_percent == 42.0


class TestRecompute:
    def test_fresh_result_per_scenario(self, global_params, settings):
        scenarios = default_scenarios(settings)
        results = recompute(global_params, scenarios, settings)

        assert [r.scenario_id for r in results] == [1, 2, 3]
        assert recompute(global_params, scenarios, settings) == results


class TestProductionStats:
    def test_defaults(self):
        response = run_production_stats(ProductionStatsRequest())

        assert len(response.monthly) == 12
        assert response.annual_production == pytest.approx(45.0 * 995.0)
        assert response.effective_self_consumption_percent == pytest.approx(30.0)


class TestScenarioEvaluation:
    def test_evaluates_single_scenario(self):
        request = EvaluateScenarioRequest(
            scenario={"id": 3, "name": "Own funds", "total_cost": 100000, "own_contribution": 100000},
            global_params={"effective_self_consumption_percent": 30},
        )
        result = run_scenario_evaluation(request)

        assert result.loan_amount == 0.0
        assert result.total_interest == 0.0
        assert len(result.yearly_cash_flow) == 16


class TestFinancingComparison:
    def test_default_comparison(self):
        response = run_financing_comparison(FinancingComparisonRequest())

        assert response.success is True
        assert len(response.results) == 3
        assert response.best_scenario_id == 1
        assert response.best_index == 0
        assert response.pattern_annual_production == pytest.approx(44775.0)
        assert response.declared_annual_production == pytest.approx(45000.0)

    def test_effective_ratio_feeds_scenarios(self):
        response = run_financing_comparison(FinancingComparisonRequest())

        first = response.results[0]
        assert first.self_consumed_energy == pytest.approx(45000.0 * 0.30)
        assert first.sold_energy == pytest.approx(45000.0 * 0.70)

    def test_same_ratio_same_results(self):
        capacity = 10.0
        pattern = [40, 50, 75, 95, 115, 125, 125, 115, 95, 70, 50, 40]
        half_profile = [capacity * weight * 0.5 for weight in pattern]
        params = {"installed_capacity": capacity}

        by_percent = run_financing_comparison(
            FinancingComparisonRequest(
                global_params=params, consumption={"method": "percent", "percent": 50}
            )
        )
        by_profile = run_financing_comparison(
            FinancingComparisonRequest(
                global_params=params,
                consumption={"method": "monthly", "monthly_profile": half_profile},
            )
        )

        assert by_profile.production.effective_self_consumption_percent == pytest.approx(50.0)
        for left, right in zip(by_percent.results, by_profile.results):
            assert left.total_project_cost == pytest.approx(right.total_project_cost)
            assert left.payback_year == right.payback_year

    def test_policies_applied_to_submitted_scenarios(self):
        request = FinancingComparisonRequest(
            scenarios=[
                {"id": 1, "name": "Cash", "role": "cash_purchase", "total_cost": 50000},
            ]
        )
        response = run_financing_comparison(request)

        assert response.scenarios[0].own_contribution == 50000.0
        assert response.results[0].loan_amount == 0.0

    def test_policies_can_be_skipped(self):
        request = FinancingComparisonRequest(
            scenarios=[
                {"id": 1, "name": "Cash", "role": "cash_purchase", "total_cost": 50000},
            ],
            apply_policies=False,
        )
        response = run_financing_comparison(request)

        assert response.results[0].loan_amount == 50000.0

    def test_default_payloads(self):
        payloads = default_scenario_payloads()

        assert [p.id for p in payloads] == [1, 2, 3]
        assert payloads[0].grant_value == pytest.approx(12000.0)
