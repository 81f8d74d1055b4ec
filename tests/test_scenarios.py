"""Tests for default scenarios and scenario list editing."""

import pytest

from domain.financial.models import GrantType, RateType, ScenarioRole
from domain.financial.scenarios import EDITABLE_FIELDS, ScenarioPortfolio, default_scenarios


@pytest.fixture
def portfolio(settings):
    return ScenarioPortfolio(settings=settings)


class TestDefaults:
    def test_three_default_options(self, settings):
        scenarios = default_scenarios(settings)

        assert [s.role for s in scenarios] == [
            ScenarioRole.SUBSIDIZED_LOAN,
            ScenarioRole.STANDARD,
            ScenarioRole.CASH_PURCHASE,
        ]

    def test_subsidy_precomputed(self, settings):
        subsidized = default_scenarios(settings)[0]

        assert subsidized.grant_type == GrantType.AMOUNT
        assert subsidized.grant_value == pytest.approx(12000.0)

    def test_own_funds_pinned(self, settings):
        own_funds = default_scenarios(settings)[2]

        assert own_funds.own_contribution == own_funds.total_cost

    def test_empty_portfolio_rejected(self, settings):
        with pytest.raises(ValueError):
            ScenarioPortfolio([], settings=settings)


class TestAddRemove:
    def test_add_uses_next_id_and_defaults(self, portfolio):
        scenario = portfolio.add()

        assert scenario.id == 4
        assert scenario.name == "Option #4"
        assert scenario.total_cost == 120000.0
        assert scenario.period_months == 60
        assert scenario.rate_type == RateType.INDEXED
        assert len(portfolio) == 4

    def test_remove(self, portfolio):
        assert portfolio.remove(2) is True
        assert [s.id for s in portfolio] == [1, 3]

    def test_remove_unknown_id(self, portfolio):
        assert portfolio.remove(99) is False
        assert len(portfolio) == 3

    def test_last_scenario_is_kept(self, portfolio):
        portfolio.remove(1)
        portfolio.remove(2)

        assert portfolio.remove(3) is False
        assert len(portfolio) == 1


class TestUpdate:
    def test_master_cost_shared_with_all(self, portfolio):
        portfolio.update(1, "total_cost", 150000)

        assert all(s.total_cost == 150000.0 for s in portfolio)
        assert portfolio.get(3).own_contribution == 150000.0
        assert portfolio.get(1).grant_value == pytest.approx(15000.0)

    def test_master_storage_shared_and_caps_grant(self, portfolio):
        portfolio.update(1, "storage_cost", 5000)

        assert all(s.storage_cost == 5000.0 for s in portfolio)
        assert portfolio.get(1).grant_value == 5000.0

    def test_non_master_cost_stays_local(self, portfolio):
        portfolio.update(2, "total_cost", 90000)

        assert portfolio.get(2).total_cost == 90000.0
        assert portfolio.get(1).total_cost == 120000.0

    def test_contribution_change_recomputes_grant(self, portfolio):
        portfolio.update(1, "own_contribution", 20000)

        assert portfolio.get(1).grant_value == pytest.approx(10000.0)

    def test_cash_contribution_cannot_be_edited(self, portfolio):
        portfolio.update(3, "own_contribution", 1000)

        assert portfolio.get(3).own_contribution == 120000.0
        assert "own_contribution" in portfolio.locked_fields(3)

    def test_role_change_applies_rule(self, portfolio):
        portfolio.update(2, "role", "cash_purchase")

        assert portfolio.get(2).role == ScenarioRole.CASH_PURCHASE
        assert portfolio.get(2).loan_amount == 0.0

    def test_unparseable_number_becomes_zero(self, portfolio):
        portfolio.update(2, "margin", "abc")
        portfolio.update(2, "period_months", "36")

        assert portfolio.get(2).margin == 0.0
        assert portfolio.get(2).period_months == 36

    def test_unknown_field(self, portfolio):
        with pytest.raises(KeyError):
            portfolio.update(1, "colour", "red")
        assert "id" not in EDITABLE_FIELDS

    def test_unknown_scenario(self, portfolio):
        with pytest.raises(KeyError):
            portfolio.update(42, "name", "x")

    def test_invalid_enum_value(self, portfolio):
        with pytest.raises(ValueError):
            portfolio.update(2, "rate_type", "floating")

    def test_editor_state(self, portfolio):
        state = portfolio.editor_state()

        assert state[2] == frozenset()
        assert "grant_value" in state[1]


class TestOtherCosts:
    def test_add_update_remove(self, portfolio):
        first = portfolio.add_other_cost(2, "Notary", 300)
        second = portfolio.add_other_cost(2)

        assert (first.id, second.id) == (1, 2)
        assert portfolio.get(2).other_costs_total == 300.0

        portfolio.update_other_cost(2, 2, amount="150")
        assert portfolio.get(2).other_costs_total == 450.0

        portfolio.remove_other_cost(2, 1)
        assert [c.id for c in portfolio.get(2).other_costs] == [2]

    def test_update_unknown_cost(self, portfolio):
        with pytest.raises(KeyError):
            portfolio.update_other_cost(2, 99, label="x")
