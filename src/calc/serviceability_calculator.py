"""Borrowing serviceability.

How much a client has left over each month, whether that surplus supports an
investment property in retirement, and whether a proposed loan passes the
lender-style checks: a commitments ratio, a cash buffer and a stress test at
a higher interest rate.
"""

import logging
import math

from calc.net_worth_calculator import monthly_debt_payments
from calc.property_calculator import annual_rent
from calc.tax_calculator import calculate_tax
from calc.time_value import loan_payment, max_borrowing_capacity
from model.ProjectionData import (
    LoanTerms,
    MonthlySurplus,
    NetWorthInput,
    PropertyServiceability,
    RetirementSurplus,
    ServiceabilityAssessment,
)
from model.TaxResult import TaxCalculationInput
from model.TaxRules import TaxRuleTable
from model.errors import InvalidInputError, require_non_negative, require_range
from model.money import round_money, round_rate

logger = logging.getLogger(__name__)

# Commitments may take at most this share of monthly net income
MAX_SERVICEABILITY_RATIO = 0.35
# Net income that must remain after all commitments
BUFFER_RATIO = 0.10
STRESS_TEST_MARGIN = 0.03

# Share of current income that retirement income must cover before any of it
# is considered free for investment
RETIREMENT_INCOME_RETENTION = 0.70
# Lenders count only part of expected rent towards repayments
RENT_SERVICEABILITY_SHARE = 0.75

APPROVED = 'APPROVED'
DECLINED = 'DECLINED'


def monthly_surplus(net_worth_input: NetWorthInput, rules: TaxRuleTable,
                    investment_income: float = 0.0, other_income: float = 0.0,
                    outstanding_debt_balance: float = 0.0) -> MonthlySurplus:
    """Monthly income less living costs, tax, study debt, property costs and loan repayments.

    Tax is assessed on all annual income, including rent. The study debt
    repayment is reported separately from income tax and levy.
    """
    inp = net_worth_input
    require_non_negative("investment_income", investment_income)
    require_non_negative("other_income", other_income)

    rent = sum(annual_rent(p.weekly_rent) for p in inp.investment_properties)
    annual_income = inp.annual_income + rent + investment_income + other_income
    tax = calculate_tax(TaxCalculationInput(gross_income=annual_income,
                                            outstanding_debt_balance=outstanding_debt_balance), rules)

    income = annual_income / 12
    income_tax = (tax.total_tax - tax.debt_repayment) / 12
    debt_repayment = tax.debt_repayment / 12
    property_expenses = sum(p.annual_expenses for p in inp.investment_properties) / 12
    loan_repayments = monthly_debt_payments(inp)

    expenses = inp.monthly_expenses + income_tax + debt_repayment + property_expenses + loan_repayments
    surplus = income - expenses

    return MonthlySurplus(
        employment_income=round_money(inp.annual_income / 12),
        rental_income=round_money(rent / 12),
        investment_income=round_money(investment_income / 12),
        other_income=round_money(other_income / 12),
        total_income=round_money(income),
        living_expenses=round_money(inp.monthly_expenses),
        tax=round_money(income_tax),
        debt_repayment=round_money(debt_repayment),
        property_expenses=round_money(property_expenses),
        loan_repayments=loan_repayments,
        total_expenses=round_money(expenses),
        surplus=round_money(surplus),
        savings_rate=round_rate(surplus / income) if income > 0 else 0.0,
    )


def investment_surplus(monthly_income: float, monthly_expenses: float) -> RetirementSurplus:
    """Monthly retirement income left after retirement expenses."""
    require_non_negative("monthly_income", monthly_income)
    require_non_negative("monthly_expenses", monthly_expenses)

    surplus = monthly_income - monthly_expenses
    return RetirementSurplus(
        projected_passive_income_monthly=round_money(surplus),
        current_monthly_income=round_money(monthly_income),
        monthly_surplus=round_money(surplus),
        is_deficit=surplus < 0,
    )


def retirement_investment_surplus(projected_passive_income: float, current_monthly_income: float,
                                  retention: float = RETIREMENT_INCOME_RETENTION) -> float:
    """Passive income above the retained share of current income. Never negative."""
    require_range("retention", retention, 0, 1)
    return round_money(max(0.0, projected_passive_income - current_monthly_income * retention))


def _not_viable(loan_to_value_ratio: float, reason: str) -> PropertyServiceability:
    logger.debug("Property not viable: %s", reason)
    return PropertyServiceability(
        max_property_value=0.0,
        max_monthly_payment=0.0,
        surplus_income=0.0,
        loan_to_value_ratio=loan_to_value_ratio,
        monthly_rental_income=0.0,
        total_monthly_expenses=0.0,
        is_viable=False,
        reason=reason,
    )


def property_serviceability(metrics: RetirementSurplus, interest_rate: float = 0.06,
                            loan_term_years: float = 30, loan_to_value_ratio: float = 0.8,
                            expected_rental_yield: float = 0.04,
                            property_expenses: float = 0.02) -> PropertyServiceability:
    """Largest investment property that surplus retirement income can support.

    The surplus above the retained share of current income services a loan.
    Three quarters of the rent the property would earn is then added to that
    surplus and the borrowing capacity is worked out again.

    Args:
        metrics: Retirement income and surplus from `investment_surplus`
        interest_rate: Annual loan rate
        loan_term_years: Loan term
        loan_to_value_ratio: Share of the property value that is borrowed
        expected_rental_yield: Gross yearly rent as a share of the property value
        property_expenses: Yearly running costs as a share of the property value

    Returns:
        PropertyServiceability, with a reason whenever the property is not viable
    """
    if not 0 < loan_to_value_ratio <= 1:
        raise InvalidInputError("loan_to_value_ratio", "must be greater than 0 and at most 1")
    require_range("expected_rental_yield", expected_rental_yield, 0, 1)
    require_range("property_expenses", property_expenses, 0, 1)

    if metrics.current_monthly_income <= 0:
        return _not_viable(loan_to_value_ratio, "No current income to assess against")
    if metrics.is_deficit:
        return _not_viable(loan_to_value_ratio,
                           "Retirement deficit must be addressed before considering investment properties")

    available = retirement_investment_surplus(metrics.projected_passive_income_monthly,
                                              metrics.current_monthly_income)
    if available <= 0:
        pct = int(RETIREMENT_INCOME_RETENTION * 100)
        return _not_viable(loan_to_value_ratio,
                           f"No surplus available after retaining {pct}% of current income in retirement")

    borrowing = max_borrowing_capacity(available, interest_rate, loan_term_years)
    property_value = borrowing / loan_to_value_ratio
    monthly_rent = property_value * expected_rental_yield / 12
    monthly_expenses = property_value * property_expenses / 12

    total_capacity = round_money(available + monthly_rent * RENT_SERVICEABILITY_SHARE)
    borrowing = max_borrowing_capacity(total_capacity, interest_rate, loan_term_years)

    return PropertyServiceability(
        max_property_value=round_money(borrowing / loan_to_value_ratio),
        max_monthly_payment=total_capacity,
        surplus_income=available,
        loan_to_value_ratio=loan_to_value_ratio,
        monthly_rental_income=round_money(monthly_rent),
        total_monthly_expenses=round_money(monthly_expenses),
        is_viable=True,
    )


def assess_serviceability(surplus: MonthlySurplus, loan: LoanTerms) -> ServiceabilityAssessment:
    """Check a proposed loan against the client's monthly position.

    The loan is approved only when every check passes:

    * existing and new repayments take at most 35% of monthly net income
    * at least 10% of net income remains after all repayments
    * the same holds with the new loan repriced 3 points higher
    * the monthly surplus still covers the new repayment

    Net income here is total income less income tax and levy.
    """
    net_income = surplus.total_income - surplus.tax
    existing = surplus.loan_repayments
    repayment = loan_payment(loan.principal, loan.annual_rate, loan.term_years)
    commitments = existing + repayment
    after_loan = surplus.surplus - repayment

    ratio = commitments / net_income if net_income > 0 else math.inf
    required_buffer = net_income * BUFFER_RATIO
    actual_buffer = net_income - commitments
    has_buffer = actual_buffer >= required_buffer

    stress_rate = min(loan.annual_rate + STRESS_TEST_MARGIN, 1.0)
    stress_repayment = loan_payment(loan.principal, stress_rate, loan.term_years)
    passes_stress = net_income - existing - stress_repayment > required_buffer

    reasons = []
    if math.isinf(ratio):
        reasons.append("Insufficient net income to calculate serviceability")
    elif ratio > MAX_SERVICEABILITY_RATIO:
        reasons.append(f"Serviceability ratio above {int(MAX_SERVICEABILITY_RATIO * 100)}%")
    if not has_buffer:
        reasons.append("Insufficient buffer remaining")
    if not passes_stress:
        reasons.append("Failed stress test at higher interest rate")
    if after_loan < 0:
        reasons.append("Negative cash flow after loan")

    can_afford = not reasons
    logger.info("Serviceability for %.2f at %.4f: %s", loan.principal, loan.annual_rate,
                APPROVED if can_afford else DECLINED)

    return ServiceabilityAssessment(
        loan=loan,
        monthly_net_income=round_money(net_income),
        existing_commitments=round_money(existing),
        monthly_repayment=repayment,
        total_monthly_commitments=round_money(commitments),
        net_surplus_after_loan=round_money(after_loan),
        serviceability_ratio=ratio if math.isinf(ratio) else round_rate(ratio),
        required_buffer=round_money(required_buffer),
        actual_buffer=round_money(actual_buffer),
        has_buffer=has_buffer,
        stress_test_rate=round_rate(stress_rate),
        stress_test_repayment=stress_repayment,
        passes_stress_test=passes_stress,
        can_afford=can_afford,
        assessment=APPROVED if can_afford else DECLINED,
        reasons=tuple(reasons),
    )
