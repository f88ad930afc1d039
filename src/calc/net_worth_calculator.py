"""Net worth projection to retirement.

Each asset class compounds at its own rate, loans run down on their
schedules, and the result is compared with a retirement income target.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from calc.time_value import (
    future_value,
    future_value_of_annuity,
    future_value_of_growing_annuity,
    loan_payment,
    remaining_loan_balance,
)
from calc.property_calculator import annual_rent
from model.ProjectionData import (
    AssetClass,
    NetWorthInput,
    NetWorthResult,
    NetWorthYear,
    ProjectionAssumptions,
)
from model.money import round_money, round_rate

logger = logging.getLogger(__name__)


@dataclass
class _Valuation:
    """Asset and liability values at one horizon."""
    assets_by_class: Dict[str, float]
    investment_property_value: float
    liabilities: float
    property_loans: float

    @property
    def total_assets(self) -> float:
        return sum(self.assets_by_class.values()) + self.investment_property_value

    @property
    def total_liabilities(self) -> float:
        return self.liabilities + self.property_loans


def _annual_super_guarantee(annual_income: float, a: ProjectionAssumptions) -> float:
    return min(annual_income * a.super_guarantee_rate, a.max_super_guarantee)


def _value_at(inp: NetWorthInput, a: ProjectionAssumptions, years: int) -> _Valuation:
    """Value every asset and liability `years` from now."""
    super_balance = (
        future_value(inp.total_for(AssetClass.SUPER), a.super_return, years)
        + future_value_of_growing_annuity(_annual_super_guarantee(inp.annual_income, a),
                                          a.super_return, a.salary_growth_rate, years, 1)
    )
    monthly_saving = inp.annual_income * a.savings_rate / 12
    cash = (
        future_value(inp.total_for(AssetClass.CASH), a.cash_return, years)
        + future_value_of_annuity(monthly_saving, a.cash_return, years, 12)
    )

    assets_by_class = {
        AssetClass.SUPER.value: round_money(super_balance),
        AssetClass.SHARES.value: future_value(inp.total_for(AssetClass.SHARES), a.share_return, years),
        AssetClass.PROPERTY.value: future_value(inp.total_for(AssetClass.PROPERTY), a.property_growth_rate, years),
        AssetClass.CASH.value: round_money(cash),
        AssetClass.OTHER.value: future_value(inp.total_for(AssetClass.OTHER), a.other_asset_return, years),
    }

    property_value = sum(future_value(p.current_value, a.property_growth_rate, years)
                         for p in inp.investment_properties)
    property_loans = sum(remaining_loan_balance(p.loan_amount, p.interest_rate, p.loan_term, years)
                         for p in inp.investment_properties)

    liabilities = 0.0
    for liability in inp.liabilities:
        if liability.term_years is None:
            # No schedule to run down, carry the balance as is
            liabilities += liability.balance
        else:
            liabilities += remaining_loan_balance(
                liability.balance, liability.interest_rate, liability.term_years, years)

    return _Valuation(
        assets_by_class=assets_by_class,
        investment_property_value=round_money(property_value),
        liabilities=round_money(liabilities),
        property_loans=round_money(property_loans),
    )


def _annual_debt_service_at(inp: NetWorthInput, years: int) -> float:
    """Yearly repayments on debts that are still running `years` from now."""
    total = 0.0
    for liability in inp.liabilities:
        if liability.balance <= 0 or liability.repayment_amount <= 0:
            continue
        if liability.term_years is None or liability.term_years > years:
            total += liability.monthly_repayment * 12
    for p in inp.investment_properties:
        if p.loan_amount > 0 and p.loan_term > years:
            total += loan_payment(p.loan_amount, p.interest_rate, p.loan_term) * 12
    return round_money(total)


def monthly_debt_payments(inp: NetWorthInput) -> float:
    """Current monthly repayments on liabilities and investment property loans."""
    total = sum(liability.monthly_repayment for liability in inp.liabilities)
    total += sum(loan_payment(p.loan_amount, p.interest_rate, p.loan_term)
                 for p in inp.investment_properties)
    return round_money(total)


def project_net_worth(net_worth_input: NetWorthInput,
                      assumptions: ProjectionAssumptions) -> NetWorthResult:
    """Project the client's position at retirement.

    Args:
        net_worth_input: Ages, income, assets, liabilities and investment properties
        assumptions: Growth rates and retirement income target

    Returns:
        NetWorthResult with the current position, values at retirement and
        the retirement income analysis
    """
    inp = net_worth_input
    a = assumptions
    years = inp.years_to_retirement
    logger.debug("Projecting net worth over %d years", years)

    today = _value_at(inp, a, 0)
    at_retirement = _value_at(inp, a, years)

    monthly_debt = monthly_debt_payments(inp)
    monthly_rent = sum(annual_rent(p.weekly_rent) for p in inp.investment_properties) / 12
    monthly_cashflow = inp.annual_income / 12 + monthly_rent - inp.monthly_expenses - monthly_debt

    future = at_retirement.assets_by_class
    lump_sum = (future[AssetClass.SUPER.value] + future[AssetClass.SHARES.value]
                + future[AssetClass.CASH.value] + future[AssetClass.OTHER.value])
    net_worth_at_retirement = at_retirement.total_assets - at_retirement.total_liabilities

    rental_income = sum(future_value(annual_rent(p.weekly_rent), a.rent_growth_rate, years)
                        for p in inp.investment_properties)
    withdrawal = lump_sum * a.withdrawal_rate
    debt_service = _annual_debt_service_at(inp, years)
    passive_income = withdrawal + rental_income - debt_service

    final_salary = inp.annual_income * (1 + a.salary_growth_rate) ** years
    required_income = final_salary * a.retirement_income_target
    surplus_deficit = passive_income - required_income
    percentage_of_target = passive_income / required_income if required_income > 0 else 0.0

    return NetWorthResult(
        total_assets=round_money(today.total_assets),
        total_liabilities=round_money(today.total_liabilities),
        current_net_worth=round_money(today.total_assets - today.total_liabilities),
        monthly_debt_payments=monthly_debt,
        monthly_rental_income=round_money(monthly_rent),
        current_monthly_cashflow=round_money(monthly_cashflow),
        years_to_retirement=years,
        future_assets=dict(future),
        future_investment_property_value=at_retirement.investment_property_value,
        remaining_liabilities=at_retirement.liabilities,
        remaining_property_loans=at_retirement.property_loans,
        retirement_lump_sum=round_money(lump_sum),
        net_worth_at_retirement=round_money(net_worth_at_retirement),
        annual_rental_income=round_money(rental_income),
        annual_withdrawal=round_money(withdrawal),
        annual_debt_service=debt_service,
        projected_passive_income=round_money(passive_income),
        required_annual_income=round_money(required_income),
        annual_surplus_deficit=round_money(surplus_deficit),
        status='surplus' if surplus_deficit >= 0 else 'deficit',
        percentage_of_target=round_rate(percentage_of_target),
    )


def project_net_worth_by_year(net_worth_input: NetWorthInput,
                              assumptions: ProjectionAssumptions) -> List[NetWorthYear]:
    """Net worth at every age from now until retirement, in nominal and real terms."""
    inp = net_worth_input
    years = []
    for year in range(inp.years_to_retirement + 1):
        v = _value_at(inp, assumptions, year)
        net_worth = v.total_assets - v.total_liabilities
        years.append(NetWorthYear(
            age=inp.current_age + year,
            year=year,
            assets=round_money(v.total_assets),
            liabilities=round_money(v.total_liabilities),
            net_worth=round_money(net_worth),
            real_net_worth=round_money(net_worth / (1 + assumptions.inflation_rate) ** year),
        ))
    return years
