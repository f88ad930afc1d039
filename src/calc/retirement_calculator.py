"""Retirement savings projection and drawdown."""

import logging
import math
from typing import Iterable, List, Optional

from model.ProjectionData import (
    DEFAULT_RETIREMENT_INCOME_TARGET,
    DEFAULT_WITHDRAWAL_RATE,
    RetirementGap,
    RetirementInput,
    RetirementWithdrawal,
    SavingsDepletion,
    YearlyProjection,
)
from model.TaxRules import TaxRuleTable
from model.errors import require_non_negative, require_range
from model.money import round_money

logger = logging.getLogger(__name__)


def project_retirement(projection_input: RetirementInput,
                       rules: Optional[TaxRuleTable] = None) -> List[YearlyProjection]:
    """Year-by-year savings balance from the current age to retirement age.

    Year 0 is the opening position: no contributions and no return. Every
    later year adds twelve monthly contributions and then applies the annual
    return to the balance including them.

    Args:
        projection_input: Ages, opening balance, contribution and rates
        rules: Tax rule table. When given and `taxed_contributions` is set,
               contributions are reduced by the super contributions tax.

    Returns:
        One YearlyProjection per year, retirement age inclusive
    """
    p = projection_input
    annual_contribution = p.monthly_contribution * 12
    if p.taxed_contributions and rules is not None:
        annual_contribution *= (1 - rules.super_contributions_tax_rate)

    logger.debug("Projecting %d years from age %d", p.years_to_retirement, p.current_age)

    projections = []
    balance = p.current_savings
    total_contributions = 0.0
    total_returns = 0.0

    for year in range(p.years_to_retirement + 1):
        beginning = balance
        contributions = 0.0
        investment_return = 0.0

        if year > 0:
            contributions = annual_contribution
            balance += contributions
            investment_return = balance * p.annual_return
            balance += investment_return
            total_contributions += contributions
            total_returns += investment_return

        projections.append(YearlyProjection(
            age=p.current_age + year,
            year=year,
            contributions=round_money(contributions),
            beginning_balance=round_money(beginning),
            investment_return=round_money(investment_return),
            ending_balance=round_money(balance),
            total_contributions=round_money(total_contributions),
            total_returns=round_money(total_returns),
            real_value=round_money(balance / (1 + p.inflation_rate) ** year),
        ))

    return projections


def safe_withdrawal(portfolio_value: float, withdrawal_rate: float = DEFAULT_WITHDRAWAL_RATE) -> float:
    require_non_negative("portfolio_value", portfolio_value)
    require_range("withdrawal_rate", withdrawal_rate, 0, 1)
    return round_money(portfolio_value * withdrawal_rate)


def retirement_income(savings: float, annual_withdrawal: float, annual_return: float,
                      inflation_rate: float, years: int) -> List[RetirementWithdrawal]:
    """Draw down savings over `years`.

    Each year the withdrawal is taken at the start, then the remaining
    balance earns the annual return. The withdrawal rises with inflation
    after the first year. The projection stops once the savings run out.
    """
    require_non_negative("savings", savings)
    require_non_negative("annual_withdrawal", annual_withdrawal)
    require_range("annual_return", annual_return, -1, 1)
    require_range("inflation_rate", inflation_rate, -1, 1)
    require_range("years", years, 0, 100)

    withdrawals = []
    balance = savings
    withdrawal = annual_withdrawal
    for year in range(int(years)):
        if year > 0:
            withdrawal = round_money(withdrawal * (1 + inflation_rate))
        balance = round_money(balance - withdrawal)
        if balance > 0:
            balance = round_money(balance * (1 + annual_return))

        withdrawals.append(RetirementWithdrawal(year=year, withdrawal=withdrawal, balance=max(0.0, balance)))
        if balance <= 0:
            logger.debug("Savings depleted in year %d", year)
            break

    return withdrawals


def retirement_gap(passive_income: float, debt_payments: float, current_gross_income: float,
                   target: float = DEFAULT_RETIREMENT_INCOME_TARGET) -> RetirementGap:
    """Monthly shortfall or surplus against a share of current gross income."""
    require_non_negative("current_gross_income", current_gross_income)
    require_non_negative("debt_payments", debt_payments)
    require_range("target", target, 0, 1)

    required = current_gross_income * target
    available = passive_income - debt_payments
    return RetirementGap(
        monthly_amount=round_money(abs(required - available) / 12),
        is_deficit=available < required,
        required_income=round_money(required),
        available_income=round_money(available),
    )


def savings_depletion(balances: Iterable[float], monthly_deficit: float) -> SavingsDepletion:
    """How long savings last when drawn down by a monthly deficit.

    Savings that are never drawn on last forever (`math.inf`).
    """
    balances = list(balances)
    for i, b in enumerate(balances):
        require_non_negative(f"balances[{i}]", b)
    total = sum(balances)

    if monthly_deficit <= 0 or total <= 0:
        return SavingsDepletion(years_to_depletion=math.inf, monthly_draw=0.0,
                                total_available=round_money(total))

    return SavingsDepletion(
        years_to_depletion=round(total / (monthly_deficit * 12), 2),
        monthly_draw=round_money(monthly_deficit),
        total_available=round_money(total),
    )
