"""Tests for monthly surplus and loan serviceability."""

import math
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.serviceability_calculator import (
    assess_serviceability,
    investment_surplus,
    monthly_surplus,
    property_serviceability,
    retirement_investment_surplus,
)
from calc.time_value import loan_payment, max_borrowing_capacity
from model.ProjectionData import InvestmentProperty, Liability, LoanTerms, NetWorthInput
from model.errors import InvalidInputError
from tax.TaxRuleDetails import TaxRuleDetails


@pytest.fixture(scope="module")
def rules():
    return TaxRuleDetails().rules_for('2024-25')


def make_input(**overrides):
    values = dict(
        current_age=40,
        retirement_age=67,
        annual_income=120000,
        monthly_expenses=4000,
        liabilities=(Liability('Car loan', 10000, 0.07, 3, 500, 'M'),),
    )
    values.update(overrides)
    return NetWorthInput(**values)


class TestMonthlySurplus:
    """Income less living costs, tax and repayments."""

    def test_salary_and_car_loan(self, rules):
        result = monthly_surplus(make_input(), rules)

        # 26,788 income tax plus 2,400 levy
        assert result.total_income == 10000
        assert result.tax == pytest.approx(2432.33, abs=0.01)
        assert result.debt_repayment == 0
        assert result.loan_repayments == 500
        assert result.total_expenses == pytest.approx(6932.33, abs=0.01)
        assert result.surplus == pytest.approx(3067.67, abs=0.01)
        assert result.savings_rate == pytest.approx(0.3068)

    def test_study_debt_reported_separately(self, rules):
        result = monthly_surplus(make_input(), rules, outstanding_debt_balance=20000)

        # 5% band on 120,000
        assert result.debt_repayment == 500
        assert result.tax == pytest.approx(2432.33, abs=0.01)
        assert result.surplus == pytest.approx(2567.67, abs=0.01)

    def test_rental_property(self, rules):
        unit = InvestmentProperty('Unit', 450000, 500000, 400000, 0.06, 30, 500, 6000)
        result = monthly_surplus(make_input(investment_properties=(unit,)), rules)

        assert result.rental_income == pytest.approx(2166.67, abs=0.01)
        assert result.total_income == pytest.approx(12166.67, abs=0.01)
        assert result.property_expenses == 500
        assert result.loan_repayments == pytest.approx(500 + loan_payment(400000, 0.06, 30), abs=0.01)

    def test_other_income_sources(self, rules):
        result = monthly_surplus(make_input(), rules, investment_income=12000, other_income=6000)

        assert result.investment_income == 1000
        assert result.other_income == 500
        assert result.total_income == 11500

    def test_no_income(self, rules):
        result = monthly_surplus(make_input(annual_income=0, monthly_expenses=0, liabilities=()), rules)

        assert result.surplus == 0
        assert result.savings_rate == 0

    def test_negative_income_source_rejected(self, rules):
        with pytest.raises(InvalidInputError) as exc:
            monthly_surplus(make_input(), rules, other_income=-1)
        assert exc.value.field == 'other_income'


class TestAssessServiceability:
    """Ratio, buffer and stress test checks on a proposed loan."""

    def test_approved(self, rules):
        surplus = monthly_surplus(make_input(), rules)
        result = assess_serviceability(surplus, LoanTerms(300000, 0.045, 30))

        assert result.assessment == 'APPROVED'
        assert result.can_afford is True
        assert result.reasons == ()
        assert result.monthly_net_income == pytest.approx(7567.67, abs=0.01)
        assert result.monthly_repayment == pytest.approx(1520.06, abs=0.01)
        assert result.total_monthly_commitments == pytest.approx(2020.06, abs=0.01)
        assert result.serviceability_ratio == pytest.approx(0.2669)
        assert result.net_surplus_after_loan == pytest.approx(1547.61, abs=0.01)
        assert result.required_buffer == pytest.approx(756.77, abs=0.01)
        assert result.has_buffer is True

    def test_stress_test_reprices_three_points_higher(self, rules):
        surplus = monthly_surplus(make_input(), rules)
        result = assess_serviceability(surplus, LoanTerms(300000, 0.045, 30))

        assert result.stress_test_rate == 0.075
        assert result.stress_test_repayment == pytest.approx(2097.64, abs=0.01)
        assert result.passes_stress_test is True

    def test_declined(self, rules):
        surplus = monthly_surplus(make_input(), rules)
        result = assess_serviceability(surplus, LoanTerms(900000, 0.06, 30))

        assert result.assessment == 'DECLINED'
        assert result.can_afford is False
        assert result.has_buffer is True
        assert result.reasons == (
            "Serviceability ratio above 35%",
            "Failed stress test at higher interest rate",
            "Negative cash flow after loan",
        )

    def test_no_net_income(self, rules):
        surplus = monthly_surplus(make_input(annual_income=0, monthly_expenses=0, liabilities=()), rules)
        result = assess_serviceability(surplus, LoanTerms(100000, 0.05, 30))

        assert math.isinf(result.serviceability_ratio)
        assert result.reasons[0] == "Insufficient net income to calculate serviceability"
        assert result.assessment == 'DECLINED'

    def test_stress_rate_capped(self, rules):
        surplus = monthly_surplus(make_input(), rules)
        result = assess_serviceability(surplus, LoanTerms(1000, 0.99, 1))

        assert result.stress_test_rate == 1

    def test_fractional_loan_term(self, rules):
        surplus = monthly_surplus(make_input(), rules)
        result = assess_serviceability(surplus, LoanTerms(10000, 0.05, 2.5))

        assert result.monthly_repayment == loan_payment(10000, 0.05, 2.5)
        assert result.assessment == 'APPROVED'


class TestRetirementSurplus:

    def test_investment_surplus(self):
        result = investment_surplus(10000, 2000)

        assert result.projected_passive_income_monthly == 8000
        assert result.current_monthly_income == 10000
        assert result.is_deficit is False

    def test_investment_deficit(self):
        result = investment_surplus(5000, 6000)

        assert result.monthly_surplus == -1000
        assert result.is_deficit is True

    def test_retirement_investment_surplus(self):
        assert retirement_investment_surplus(9000, 10000) == 2000
        assert retirement_investment_surplus(5000, 10000) == 0
        assert retirement_investment_surplus(9000, 10000, retention=0.5) == 4000


class TestPropertyServiceability:
    """Property size supported by surplus retirement income."""

    def test_viable(self):
        result = property_serviceability(investment_surplus(10000, 2000))
        first_value = max_borrowing_capacity(1000, 0.06, 30) / 0.8

        assert result.is_viable is True
        assert result.reason is None
        assert result.surplus_income == 1000
        assert result.loan_to_value_ratio == 0.8
        assert result.monthly_rental_income == pytest.approx(first_value * 0.04 / 12, abs=0.01)
        assert result.total_monthly_expenses == pytest.approx(first_value * 0.02 / 12, abs=0.01)
        assert result.max_monthly_payment == pytest.approx(1000 + result.monthly_rental_income * 0.75, abs=0.01)
        assert result.max_property_value == pytest.approx(
            max_borrowing_capacity(result.max_monthly_payment, 0.06, 30) / 0.8, abs=0.01)
        assert result.max_property_value > first_value

    @pytest.mark.parametrize("income, expenses, reason", [
        (0, 0, "No current income"),
        (5000, 6000, "Retirement deficit"),
        (10000, 5000, "retaining 70% of current income"),
    ])
    def test_not_viable(self, income, expenses, reason):
        result = property_serviceability(investment_surplus(income, expenses))

        assert result.is_viable is False
        assert reason in result.reason
        assert result.max_property_value == 0

    def test_invalid_loan_to_value_ratio(self):
        with pytest.raises(InvalidInputError) as exc:
            property_serviceability(investment_surplus(10000, 2000), loan_to_value_ratio=0)
        assert exc.value.field == 'loan_to_value_ratio'

    def test_invalid_interest_rate(self):
        with pytest.raises(InvalidInputError) as exc:
            property_serviceability(investment_surplus(10000, 2000), interest_rate=1.5)
        assert exc.value.field == 'annual_rate'
