"""Simulation engine for PV financing scenarios."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

import pandas as pd

from core.config import Settings, get_settings

from .amortization import build_amortization_schedule, yearly_loan_payments
from .models import (
    GlobalParameters,
    GrantType,
    RateType,
    Scenario,
    ScenarioResult,
    YearlyCashFlow,
    to_number,
)

logger = logging.getLogger(__name__)

CASHFLOW_COLUMNS = ["year", "energy_value", "loan_payment", "net_cash_flow", "cumulative"]


class ScenarioFinancialModel:
    """Loan amortization and horizon cash flow for one financing scenario."""

    def __init__(
        self,
        scenario: Scenario,
        global_params: GlobalParameters,
        settings: Optional[Settings] = None,
    ) -> None:
        self.scenario = scenario
        self.global_params = global_params
        self.settings = settings or get_settings()
        self.horizon_years = self.settings.horizon_years
        self.schedule_df: Optional[pd.DataFrame] = None
        self.cashflow_df: Optional[pd.DataFrame] = None
        self.result: Optional[ScenarioResult] = None

    # ------------------------------------------------------------------
    # Derived basics
    # ------------------------------------------------------------------

    @property
    def total_cost(self) -> float:
        return to_number(self.scenario.total_cost)

    @property
    def own_contribution(self) -> float:
        return to_number(self.scenario.own_contribution)

    def calculate_loan_amount(self) -> float:
        return max(0.0, self.total_cost - self.own_contribution)

    def calculate_annual_production(self) -> float:
        manual = to_number(self.scenario.manual_annual_production)
        if manual > 0:
            return manual
        return to_number(self.global_params.installed_capacity) * to_number(
            self.global_params.yield_per_unit_capacity
        )

    def calculate_energy_split(self) -> Dict[str, float]:
        production = self.calculate_annual_production()
        share = to_number(self.global_params.effective_self_consumption_percent) / 100
        self_consumed = max(0.0, production * share)
        return {
            "production": production,
            "self_consumed": self_consumed,
            "sold": max(0.0, production - self_consumed),
        }

    def calculate_interest_rate(self) -> float:
        if self.scenario.rate_type == RateType.FIXED:
            return to_number(self.scenario.fixed_rate)
        return to_number(self.scenario.margin) + to_number(self.global_params.reference_rate)

    def calculate_grant(self) -> float:
        value = to_number(self.scenario.grant_value)
        if self.scenario.grant_type == GrantType.PERCENT:
            return self.total_cost * (value / 100)
        return value

    def calculate_commission(self) -> float:
        return self.calculate_loan_amount() * (to_number(self.scenario.commission_percent) / 100)

    def calculate_other_costs(self) -> float:
        return self.scenario.other_costs_total

    def calculate_opportunity_cost(self) -> float:
        """Return foregone growth of the own contribution at the energy inflation rate."""
        growth = (1 + to_number(self.global_params.energy_inflation_rate) / 100) ** self.horizon_years
        return self.own_contribution * growth - self.own_contribution

    # ------------------------------------------------------------------
    # Schedules
    # ------------------------------------------------------------------

    def build_amortization_schedule(self) -> pd.DataFrame:
        self.schedule_df = build_amortization_schedule(
            loan_amount=self.calculate_loan_amount(),
            annual_rate_percent=self.calculate_interest_rate(),
            period_months=self.scenario.period_months,
            grace_months=self.scenario.grace_months,
            style=self.scenario.installment_style,
            payoff_threshold=self.settings.balance_payoff_threshold,
            max_period_months=self.settings.max_period_months,
        )
        return self.schedule_df

    def build_cashflow_model(self) -> pd.DataFrame:
        if self.schedule_df is None:
            self.build_amortization_schedule()

        energy = self.calculate_energy_split()
        inflation = to_number(self.global_params.energy_inflation_rate) / 100
        price_buy = to_number(self.global_params.energy_price_buy)
        price_sell = to_number(self.global_params.energy_price_sell)
        loan_payments = yearly_loan_payments(self.schedule_df, self.horizon_years)

        initial = (
            -(self.own_contribution + self.calculate_commission() + self.calculate_other_costs())
            + self.calculate_grant()
        )
        cumulative = initial
        cashflow_data: List[Dict[str, Union[int, float]]] = [
            {
                "year": 0,
                "energy_value": 0.0,
                "loan_payment": 0.0,
                "net_cash_flow": initial,
                "cumulative": cumulative,
            }
        ]

        for year in range(1, self.horizon_years + 1):
            escalation = (1 + inflation) ** (year - 1)
            energy_value = (
                energy["self_consumed"] * price_buy * escalation
                + energy["sold"] * price_sell * escalation
            )
            loan_payment = loan_payments[year - 1]
            net_flow = energy_value - loan_payment
            cumulative += net_flow
            cashflow_data.append(
                {
                    "year": year,
                    "energy_value": energy_value,
                    "loan_payment": loan_payment,
                    "net_cash_flow": net_flow,
                    "cumulative": cumulative,
                }
            )

        self.cashflow_df = pd.DataFrame(cashflow_data, columns=CASHFLOW_COLUMNS)
        return self.cashflow_df

    def calculate_payback_year(self) -> Optional[int]:
        """First year (from 1) whose cumulative cash flow is non-negative."""
        if self.cashflow_df is None:
            self.build_cashflow_model()

        operating_years = self.cashflow_df[self.cashflow_df["year"] >= 1]
        for year, cumulative in zip(operating_years["year"], operating_years["cumulative"]):
            if cumulative >= 0:
                return int(year)
        return None

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def run_analysis(self) -> ScenarioResult:
        self.build_amortization_schedule()
        self.build_cashflow_model()

        total_interest = float(self.schedule_df["interest"].sum())
        commission = self.calculate_commission()
        other_costs = self.calculate_other_costs()
        grant = self.calculate_grant()
        opportunity_cost = self.calculate_opportunity_cost()
        final_cumulative = float(self.cashflow_df["cumulative"].iloc[-1])
        energy = self.calculate_energy_split()

        self.result = ScenarioResult(
            scenario_id=self.scenario.id,
            name=self.scenario.name,
            role=self.scenario.role,
            effective_rate=self.calculate_interest_rate(),
            loan_amount=self.calculate_loan_amount(),
            total_interest=total_interest,
            upfront_commission=commission,
            other_costs_total=other_costs,
            grant_amount=grant,
            opportunity_cost=opportunity_cost,
            total_project_cost=(
                self.total_cost + total_interest + commission + other_costs + opportunity_cost - grant
            ),
            net_profit_at_horizon=final_cumulative - opportunity_cost,
            payback_year=self.calculate_payback_year(),
            annual_production=energy["production"],
            self_consumed_energy=energy["self_consumed"],
            sold_energy=energy["sold"],
            monthly_installments=tuple(float(v) for v in self.schedule_df["installment"]),
            yearly_cash_flow=tuple(
                YearlyCashFlow(
                    year=int(row.year),
                    energy_value=float(row.energy_value),
                    loan_payment=float(row.loan_payment),
                    net_cash_flow=float(row.net_cash_flow),
                    cumulative=float(row.cumulative),
                )
                for row in self.cashflow_df.itertuples(index=False)
            ),
        )
        logger.debug(
            "Scenario %s (%s): total cost %.2f, payback %s",
            self.scenario.id,
            self.scenario.name,
            self.result.total_project_cost,
            self.result.payback_year,
        )
        return self.result

    def export_results(self, format: str = "json") -> Union[str, pd.DataFrame]:
        from datetime import datetime

        if self.result is None:
            self.run_analysis()

        summary = {
            "scenario_id": self.result.scenario_id,
            "name": self.result.name,
            "role": self.result.role.value,
            "effective_rate": self.result.effective_rate,
            "loan_amount": self.result.loan_amount,
            "total_interest": self.result.total_interest,
            "total_upfront_costs": self.result.total_upfront_costs,
            "grant_amount": self.result.grant_amount,
            "opportunity_cost": self.result.opportunity_cost,
            "total_project_cost": self.result.total_project_cost,
            "net_profit_at_horizon": self.result.net_profit_at_horizon,
            "payback_year": self.result.payback_year,
        }

        if format == "json":
            import json

            export_data = {
                "summary": summary,
                "cashflow": self.cashflow_df.to_dict("records"),
                "timestamp": datetime.now().isoformat(),
                "horizon_years": self.horizon_years,
            }
            return json.dumps(export_data, indent=2, default=str)
        if format == "dataframe":
            return self.cashflow_df
        if format == "schedule":
            return self.schedule_df
        if format == "summary":
            return pd.DataFrame([summary])
        raise ValueError(f"Unsupported export format: {format}")


def evaluate_scenario(
    scenario: Scenario,
    global_params: GlobalParameters,
    settings: Optional[Settings] = None,
) -> ScenarioResult:
    """Turn one scenario plus the global parameters into a fresh result."""
    return ScenarioFinancialModel(scenario, global_params, settings).run_analysis()


__all__ = ["CASHFLOW_COLUMNS", "ScenarioFinancialModel", "evaluate_scenario"]
