"""Time-value-of-money functions.

Future values, annuities and fixed-rate loans. Every function validates its
arguments up front and raises `InvalidInputError` naming the bad field.
Money results are rounded to cents.
"""

import logging
from typing import Iterator, List

from model.ProjectionData import AmortizationEntry
from model.errors import require_non_negative, require_range
from model.money import round_money

logger = logging.getLogger(__name__)

MAX_YEARS = 100
MAX_LOAN_TERM = 50
MAX_PAYMENTS_PER_YEAR = 365


def _check_growth_args(rate: float, years: float):
    require_range("rate", rate, -1, 1)
    require_range("years", years, 0, MAX_YEARS)


def _check_loan_args(principal: float, annual_rate: float, years: float, principal_field: str = "principal"):
    require_non_negative(principal_field, principal)
    require_range("annual_rate", annual_rate, 0, 1)
    require_range("years", years, 1, MAX_LOAN_TERM)


def _months(years: float) -> int:
    """Whole monthly periods in a term. Fractional terms round to the nearest month."""
    return int(round(years * 12))


def future_value(present_value: float, rate: float, years: float) -> float:
    """Compound a lump sum annually: pv * (1 + rate) ** years."""
    require_non_negative("present_value", present_value)
    _check_growth_args(rate, years)
    return round_money(present_value * (1 + rate) ** years)


def future_value_of_annuity(payment: float, rate: float, years: float,
                            payments_per_year: int = 12) -> float:
    """Future value of a level payment made at the end of each period."""
    require_non_negative("payment", payment)
    _check_growth_args(rate, years)
    require_range("payments_per_year", payments_per_year, 1, MAX_PAYMENTS_PER_YEAR)

    periods = years * payments_per_year
    if rate == 0:
        return round_money(payment * periods)

    r = rate / payments_per_year
    return round_money(payment * ((1 + r) ** periods - 1) / r)


def future_value_of_growing_annuity(initial_payment: float, rate: float, growth_rate: float,
                                    years: float, payments_per_year: int = 12) -> float:
    """Future value of a payment stream that grows by `growth_rate` a year.

    Args:
        initial_payment: First payment
        rate: Annual return
        growth_rate: Annual growth of the payment
        years: Horizon in years
        payments_per_year: Payments (and compounding periods) per year

    Returns:
        The accumulated value at the end of the horizon
    """
    require_non_negative("initial_payment", initial_payment)
    _check_growth_args(rate, years)
    require_range("growth_rate", growth_rate, -1, 1)
    require_range("payments_per_year", payments_per_year, 1, MAX_PAYMENTS_PER_YEAR)

    n = years * payments_per_year
    r = rate / payments_per_year
    g = growth_rate / payments_per_year

    if abs(r - g) < 1e-12:
        return round_money(initial_payment * n * (1 + r) ** (n - 1))
    return round_money(initial_payment * ((1 + r) ** n - (1 + g) ** n) / (r - g))


def total_growth(initial_investment: float, monthly_contribution: float,
                 rate: float, years: float) -> float:
    """Lump sum growth plus monthly contributions over the same horizon."""
    return round_money(
        future_value(initial_investment, rate, years)
        + future_value_of_annuity(monthly_contribution, rate, years, 12)
    )


def loan_payment(principal: float, annual_rate: float, years: float) -> float:
    """Monthly repayment of a fixed-rate loan.

    PMT = P * r(1 + r)^n / ((1 + r)^n - 1) with monthly rate r and n months.
    """
    _check_loan_args(principal, annual_rate, years)
    periods = _months(years)
    if annual_rate == 0:
        return round_money(principal / periods)

    r = annual_rate / 12
    growth = (1 + r) ** periods
    return round_money(principal * r * growth / (growth - 1))


def max_borrowing_capacity(monthly_payment_capacity: float, annual_rate: float, years: float) -> float:
    """Largest principal that a monthly repayment can service over the term."""
    _check_loan_args(monthly_payment_capacity, annual_rate, years, "monthly_payment_capacity")
    periods = _months(years)
    if annual_rate == 0:
        return round_money(monthly_payment_capacity * periods)

    r = annual_rate / 12
    growth = (1 + r) ** periods
    return round_money(monthly_payment_capacity * (growth - 1) / (r * growth))


def _amortize(principal: float, annual_rate: float, years: float) -> Iterator[AmortizationEntry]:
    """Yield one cent-rounded entry per month until the loan is repaid.

    The final scheduled period retires whatever balance is left so rounding
    drift never leaves a residual.
    """
    payment = loan_payment(principal, annual_rate, years)
    monthly_rate = annual_rate / 12
    periods = _months(years)
    balance = round_money(principal)

    for number in range(1, periods + 1):
        interest = round_money(balance * monthly_rate)
        principal_paid = round_money(payment - interest)
        period_payment = payment

        if number == periods or principal_paid >= balance:
            principal_paid = balance
            period_payment = round_money(interest + principal_paid)
            balance = 0.0
        else:
            balance = round_money(max(0.0, balance - principal_paid))

        yield AmortizationEntry(
            payment_number=number,
            payment=period_payment,
            principal=principal_paid,
            interest=interest,
            remaining_balance=balance,
        )

        if balance <= 0:
            if number < periods:
                logger.debug("Loan repaid early at payment %d of %d", number, periods)
            return


def amortization_schedule(principal: float, annual_rate: float, years: float) -> List[AmortizationEntry]:
    """Full monthly repayment schedule. A zero principal has no schedule."""
    _check_loan_args(principal, annual_rate, years)
    if principal == 0:
        return []
    return list(_amortize(principal, annual_rate, years))


def remaining_loan_balance(principal: float, annual_rate: float, term_years: float,
                           years_elapsed: float) -> float:
    """Balance still owing after `years_elapsed` years of scheduled repayments."""
    _check_loan_args(principal, annual_rate, term_years)
    if years_elapsed <= 0:
        return round_money(principal)
    if years_elapsed >= term_years or principal == 0:
        return 0.0

    months = _months(years_elapsed)
    if months >= _months(term_years):
        return 0.0
    balance = round_money(principal)
    for entry in _amortize(principal, annual_rate, term_years):
        if entry.payment_number > months:
            break
        balance = entry.remaining_balance
    return balance
