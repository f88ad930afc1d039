"""Tests for the net worth projection."""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.net_worth_calculator import project_net_worth, project_net_worth_by_year
from calc.time_value import (
    future_value,
    future_value_of_annuity,
    future_value_of_growing_annuity,
    loan_payment,
    remaining_loan_balance,
)
from model.ProjectionData import (
    Asset,
    AssetClass,
    InvestmentProperty,
    Liability,
    NetWorthInput,
    ProjectionAssumptions,
    DEFAULT_CASH_RETURN,
    DEFAULT_OTHER_ASSET_RETURN,
)
from model.errors import InvalidInputError


ASSUMPTIONS = ProjectionAssumptions(
    inflation_rate=0.02,
    salary_growth_rate=0.03,
    share_return=0.08,
    property_growth_rate=0.05,
    super_return=0.07,
    withdrawal_rate=0.04,
    rent_growth_rate=0.03,
    savings_rate=0.0,
)

ASSETS = (
    Asset('Super', 100000, AssetClass.SUPER),
    Asset('Shares', 50000, AssetClass.SHARES),
    Asset('Savings', 10000, AssetClass.CASH),
    Asset('Car', 5000, AssetClass.OTHER),
)


def make_input(**overrides):
    values = dict(
        current_age=60,
        retirement_age=65,
        annual_income=100000,
        monthly_expenses=4000,
        assets=ASSETS,
    )
    values.update(overrides)
    return NetWorthInput(**values)


class TestAssetGrowth:
    """Each asset class compounds at its own rate."""

    def test_default_rates_live_on_assumptions(self):
        assert ASSUMPTIONS.cash_return == DEFAULT_CASH_RETURN == 0.02
        assert ASSUMPTIONS.other_asset_return == DEFAULT_OTHER_ASSET_RETURN == 0.03

    def test_future_asset_values(self):
        result = project_net_worth(make_input(), ASSUMPTIONS)

        assert result.years_to_retirement == 5
        assert result.future_assets['shares'] == pytest.approx(73466.40, abs=0.01)
        assert result.future_assets['other'] == pytest.approx(5796.37, abs=0.01)
        assert result.future_assets['cash'] == pytest.approx(11040.81, abs=0.01)
        assert result.future_assets['property'] == 0

    def test_super_includes_employer_contributions(self):
        result = project_net_worth(make_input(), ASSUMPTIONS)

        expected = (future_value(100000, 0.07, 5)
                    + future_value_of_growing_annuity(12000, 0.07, 0.03, 5, 1))
        assert result.future_assets['super'] == pytest.approx(expected, abs=0.01)

    def test_super_guarantee_capped(self):
        result = project_net_worth(make_input(annual_income=300000), ASSUMPTIONS)

        expected = (future_value(100000, 0.07, 5)
                    + future_value_of_growing_annuity(30600, 0.07, 0.03, 5, 1))
        assert result.future_assets['super'] == pytest.approx(expected, abs=0.01)

    def test_savings_rate_adds_monthly_contributions_to_cash(self):
        assumptions = ProjectionAssumptions(savings_rate=0.12)
        result = project_net_worth(make_input(), assumptions)

        expected = future_value(10000, 0.02, 5) + future_value_of_annuity(1000, 0.02, 5, 12)
        assert result.future_assets['cash'] == pytest.approx(expected, abs=0.01)

    def test_lump_sum_excludes_property(self):
        result = project_net_worth(make_input(assets=ASSETS + (Asset('Block', 200000, AssetClass.PROPERTY),)),
                                   ASSUMPTIONS)
        f = result.future_assets

        assert f['property'] == pytest.approx(future_value(200000, 0.05, 5))
        assert result.retirement_lump_sum == pytest.approx(f['super'] + f['shares'] + f['cash'] + f['other'],
                                                           abs=0.01)
        assert result.net_worth_at_retirement == pytest.approx(sum(f.values()), abs=0.01)


class TestLiabilitiesAndProperties:
    """Debts run down on their schedules; properties grow and pay rent."""

    @pytest.fixture
    def scenario(self):
        return make_input(
            liabilities=(
                Liability('Car loan', 12000, 0.07, 3, 370, 'M'),
                Liability('Credit card', 2000, 0.20, None, 100, 'F'),
            ),
            investment_properties=(
                InvestmentProperty('Unit', 450000, 500000, 400000, 0.06, 30, 500, 5000),
            ),
        )

    def test_current_position(self, scenario):
        result = project_net_worth(scenario, ASSUMPTIONS)
        property_payment = loan_payment(400000, 0.06, 30)

        assert result.total_assets == 665000
        assert result.total_liabilities == 414000
        assert result.current_net_worth == 251000
        assert result.monthly_rental_income == pytest.approx(2166.67, abs=0.01)
        assert result.monthly_debt_payments == pytest.approx(370 + 100 * 26 / 12 + property_payment, abs=0.01)

    def test_remaining_liabilities(self, scenario):
        result = project_net_worth(scenario, ASSUMPTIONS)

        # Car loan is repaid within three years, the card has no term
        assert result.remaining_liabilities == 2000
        assert result.remaining_property_loans == remaining_loan_balance(400000, 0.06, 30, 5)
        assert result.future_investment_property_value == pytest.approx(future_value(500000, 0.05, 5))

    def test_passive_income(self, scenario):
        result = project_net_worth(scenario, ASSUMPTIONS)

        rental = future_value(26000, 0.03, 5)
        debt_service = 100 * 26 + loan_payment(400000, 0.06, 30) * 12
        assert result.annual_rental_income == pytest.approx(30141.13, abs=0.01)
        assert result.annual_debt_service == pytest.approx(debt_service, abs=0.01)
        assert result.projected_passive_income == pytest.approx(
            result.retirement_lump_sum * 0.04 + rental - debt_service, abs=0.02)

    def test_net_worth_at_retirement(self, scenario):
        result = project_net_worth(scenario, ASSUMPTIONS)

        assets = sum(result.future_assets.values()) + result.future_investment_property_value
        liabilities = result.remaining_liabilities + result.remaining_property_loans
        assert result.net_worth_at_retirement == pytest.approx(assets - liabilities, abs=0.01)

    def test_fractional_liability_term(self):
        inp = make_input(current_age=62, liabilities=(Liability('Car loan', 12000, 0.07, 2.5, 370, 'M'),))
        result = project_net_worth(inp, ASSUMPTIONS)
        years = project_net_worth_by_year(inp, ASSUMPTIONS)

        assert result.remaining_liabilities == 0
        assert [y.liabilities for y in years] == [
            12000,
            remaining_loan_balance(12000, 0.07, 2.5, 1),
            remaining_loan_balance(12000, 0.07, 2.5, 2),
            0,
        ]
        assert 0 < years[2].liabilities < years[1].liabilities < 12000


class TestIncomeTarget:
    """Comparison of passive income with the retirement income target."""

    def test_required_income_is_share_of_final_salary(self):
        result = project_net_worth(make_input(), ASSUMPTIONS)

        assert result.required_annual_income == pytest.approx(100000 * 1.03 ** 5 * 0.7, abs=0.01)
        assert result.annual_surplus_deficit == pytest.approx(
            result.projected_passive_income - result.required_annual_income, abs=0.01)
        assert result.percentage_of_target == pytest.approx(
            result.projected_passive_income / result.required_annual_income, abs=0.0001)

    def test_deficit_status(self):
        result = project_net_worth(make_input(assets=()), ASSUMPTIONS)

        assert result.status == 'deficit'
        assert result.annual_surplus_deficit < 0

    def test_surplus_status(self):
        rich = (Asset('Shares', 5000000, AssetClass.SHARES),)
        result = project_net_worth(make_input(assets=rich), ASSUMPTIONS)

        assert result.status == 'surplus'
        assert result.percentage_of_target > 1


class TestByYear:
    """Tests for project_net_worth_by_year."""

    def test_one_entry_per_age(self):
        years = project_net_worth_by_year(make_input(), ASSUMPTIONS)

        assert [y.age for y in years] == [60, 61, 62, 63, 64, 65]
        assert years[0].net_worth == 165000
        assert years[0].real_net_worth == years[0].net_worth

    def test_last_year_matches_aggregate(self):
        inp = make_input()
        years = project_net_worth_by_year(inp, ASSUMPTIONS)
        result = project_net_worth(inp, ASSUMPTIONS)

        assert years[-1].net_worth == pytest.approx(result.net_worth_at_retirement, abs=0.01)
        assert years[-1].real_net_worth == pytest.approx(years[-1].net_worth / 1.02 ** 5, abs=0.01)


class TestValidation:
    """Inputs reject values outside their ranges."""

    def test_assumption_rate_range(self):
        with pytest.raises(InvalidInputError) as exc:
            ProjectionAssumptions(share_return=0.6)
        assert exc.value.field == 'share_return'

        with pytest.raises(InvalidInputError):
            ProjectionAssumptions(inflation_rate=-0.01)

    def test_asset_class_from_string(self):
        assert Asset('ETF', 100, 'Shares').asset_class is AssetClass.SHARES
        with pytest.raises(InvalidInputError):
            Asset('Art', 100, 'collectibles')

    def test_liability_frequency(self):
        assert Liability('Loan', 1000, repayment_amount=100, frequency='W').monthly_repayment == pytest.approx(
            100 * 52 / 12)
        with pytest.raises(InvalidInputError):
            Liability('Loan', 1000, frequency='Q')

    def test_retirement_before_current_age(self):
        with pytest.raises(InvalidInputError):
            make_input(current_age=70, retirement_age=65)
