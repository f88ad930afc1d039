"""Full personal income tax calculation and what-if optimization.

Combines deductions, negative gearing, franking credits and capital gains
with the progressive evaluator in `tax.ProgressiveTax`.
"""

import dataclasses
import logging
from collections import defaultdict
from typing import Iterable, List

from model.TaxRules import TaxRuleTable
from model.TaxResult import (
    Deduction,
    OptimizationResult,
    OptimizationStrategies,
    StrategySuggestion,
    TaxBreakdown,
    TaxCalculationInput,
    TaxCalculationResult,
    TaxProfile,
)
from model.errors import InvalidInputError
from model.money import round_money
from tax.ProgressiveTax import (
    calculate_average_rate,
    calculate_debt_repayment,
    calculate_income_tax,
    calculate_levy,
    calculate_marginal_rate,
)

logger = logging.getLogger(__name__)

# Targets used when suggesting strategies
CHARITABLE_DONATION_TARGET = 2000.0
WORK_EXPENSE_TARGET = 3000.0
SUPER_SUGGESTION_INCOME_FLOOR = 50000.0
SUPER_SUGGESTION_INCOME_SHARE = 0.15


def allowed_deductions(deductions: Iterable[Deduction], rules: TaxRuleTable) -> float:
    """Sum deductions, capping each category at its configured maximum."""
    by_category = defaultdict(float)
    for d in deductions:
        by_category[d.category] += d.amount

    total = 0.0
    for category, amount in by_category.items():
        meta = rules.deduction_categories.get(category)
        if meta is not None and meta.max_amount is not None and amount > meta.max_amount:
            logger.debug("Capping %s deductions %.2f at %.2f", category, amount, meta.max_amount)
            amount = meta.max_amount
        total += amount
    return total


def calculate_tax(tax_input: TaxCalculationInput, rules: TaxRuleTable) -> TaxCalculationResult:
    """Calculate income tax, levy and debt repayment for one client and year.

    Order of operations:
    1. Sum deductions
    2. Subtract them from gross income
    3. Subtract the negative gearing loss when the rules allow it
    4. Gross up franked dividends by their franking credits, and add the
       discounted share of capital gains
    5. Clamp taxable income at zero
    6. Evaluate income tax, levy and debt repayment
    7. Offset franking credits against income tax (never below zero)
    8-10. Total tax, after-tax income and average rate
    """
    if tax_input.gross_income < 0:
        raise InvalidInputError("gross_income", "cannot be negative")

    total_deductions = allowed_deductions(tax_input.deductions, rules)
    negative_gearing = tax_input.negative_gearing_loss if rules.negative_gearing_allowed else 0.0
    franking_credits = tax_input.franked_dividends * rules.franking_credit_rate
    taxable_capital_gains = tax_input.capital_gains * (1 - rules.capital_gains_discount)

    taxable_income = tax_input.gross_income - total_deductions - negative_gearing
    if tax_input.franked_dividends > 0:
        taxable_income += tax_input.franked_dividends + franking_credits
    taxable_income += taxable_capital_gains
    taxable_income = round_money(max(0.0, taxable_income))

    income_tax = calculate_income_tax(taxable_income, rules)
    levy = calculate_levy(taxable_income, rules, tax_input.levy_exempt)
    debt_repayment = calculate_debt_repayment(
        tax_input.gross_income, rules, tax_input.outstanding_debt_balance
    )

    # Franking credits offset tax owed but do not create a refund
    adjusted_income_tax = round_money(max(0.0, income_tax - franking_credits))

    total_tax = round_money(adjusted_income_tax + levy + debt_repayment)
    after_tax_income = round_money(tax_input.gross_income - total_tax)

    marginal_rate = calculate_marginal_rate(
        taxable_income, rules, include_debt_repayment=tax_input.outstanding_debt_balance > 0
    )
    average_rate = calculate_average_rate(total_tax, tax_input.gross_income)

    logger.debug("Tax %s: taxable %.2f, total tax %.2f", rules.tax_year, taxable_income, total_tax)

    return TaxCalculationResult(
        gross_income=round_money(tax_input.gross_income),
        taxable_income=taxable_income,
        income_tax=adjusted_income_tax,
        levy_amount=levy,
        debt_repayment=debt_repayment,
        total_tax=total_tax,
        after_tax_income=after_tax_income,
        marginal_rate=marginal_rate,
        average_rate=average_rate,
        breakdown=TaxBreakdown(
            deductions=round_money(total_deductions),
            negative_gearing=round_money(negative_gearing),
            franking_credits=round_money(franking_credits),
            taxable_capital_gains=round_money(taxable_capital_gains),
        ),
    )


def compare_optimization(base_input: TaxCalculationInput,
                         strategies: OptimizationStrategies,
                         rules: TaxRuleTable) -> OptimizationResult:
    """Compare the current tax position with one where the strategies are applied.

    The base input is never modified; the optimized scenario is a copy with
    an extra deduction, a larger negative gearing loss and gross income
    reduced by salary-sacrificed super contributions.
    """
    if strategies.super_contributions > base_input.gross_income:
        raise InvalidInputError("super_contributions", "cannot exceed gross income")

    current = calculate_tax(base_input, rules)

    deductions = list(base_input.deductions)
    if strategies.additional_deductions:
        deductions.append(Deduction(
            category='optimization',
            amount=strategies.additional_deductions,
            description='Additional tax deductions',
        ))

    optimized_input = dataclasses.replace(
        base_input,
        deductions=tuple(deductions),
        negative_gearing_loss=base_input.negative_gearing_loss + strategies.negative_gearing_opportunity,
        gross_income=base_input.gross_income - strategies.super_contributions,
    )
    optimized = calculate_tax(optimized_input, rules)

    applied = []
    if strategies.additional_deductions:
        applied.append(f"Claim additional deductions: ${strategies.additional_deductions:,.2f}")
    if strategies.negative_gearing_opportunity:
        applied.append(f"Negative gearing opportunity: ${strategies.negative_gearing_opportunity:,.2f}")
    if strategies.super_contributions:
        applied.append(f"Salary sacrifice to super: ${strategies.super_contributions:,.2f}")

    return OptimizationResult(
        current=current,
        optimized=optimized,
        savings=round_money(current.total_tax - optimized.total_tax),
        applied_strategies=applied,
    )


def suggest_strategies(profile: TaxProfile, current: TaxCalculationResult,
                       rules: TaxRuleTable) -> List[StrategySuggestion]:
    """Suggest tax strategies for a client, largest estimated saving first.

    Savings are estimates at the client's current marginal rate.
    """
    income = current.gross_income
    marginal = current.marginal_rate
    suggestions: List[StrategySuggestion] = []

    if profile.charity_donations < CHARITABLE_DONATION_TARGET:
        extra = CHARITABLE_DONATION_TARGET - profile.charity_donations
        suggestions.append(StrategySuggestion(
            strategy='Charitable Donations',
            description=(f"Increase charitable donations by ${extra:,.2f}. Donations are fully "
                         f"deductible at your marginal rate of {marginal:.1%}."),
            potential_saving=round_money(extra * marginal),
            difficulty='Easy',
            category='Deductions',
        ))

    cap = rules.concessional_contributions_cap
    if profile.super_contributions < cap and income > SUPER_SUGGESTION_INCOME_FLOOR:
        contribution = min(cap - profile.super_contributions, income * SUPER_SUGGESTION_INCOME_SHARE)
        rate_gap = max(0.0, marginal - rules.super_contributions_tax_rate)
        suggestions.append(StrategySuggestion(
            strategy='Superannuation Contribution',
            description=(f"Salary sacrifice ${contribution:,.2f} into super. It is taxed at "
                         f"{rules.super_contributions_tax_rate:.0%} instead of {marginal:.1%}."),
            potential_saving=round_money(contribution * rate_gap),
            difficulty='Medium',
            category='Super',
        ))

    rental_loss = max(0.0, profile.rental_expenses - profile.rental_income)
    if rental_loss > 0 and rules.negative_gearing_allowed:
        suggestions.append(StrategySuggestion(
            strategy='Rental Property Tax Optimization',
            description=(f"Your rental property runs at a loss of ${rental_loss:,.2f}. Claiming it "
                         f"against other income saves tax at {marginal:.1%}."),
            potential_saving=round_money(rental_loss * marginal),
            difficulty='Medium',
            category='Investments',
        ))

    unclaimed = max(0.0, WORK_EXPENSE_TARGET - profile.work_related_expenses)
    if unclaimed > 0:
        suggestions.append(StrategySuggestion(
            strategy='Work-Related Expenses',
            description=(f"Claim up to ${unclaimed:,.2f} more in work-related expenses such as "
                         f"home office, tools and professional development."),
            potential_saving=round_money(unclaimed * marginal),
            difficulty='Easy',
            category='Deductions',
        ))

    if profile.capital_gains > 0:
        suggestions.append(StrategySuggestion(
            strategy='Capital Gains Tax Planning',
            description="Hold assets for at least 12 months before selling to use the CGT discount.",
            potential_saving=round_money(profile.capital_gains * rules.capital_gains_discount * marginal),
            difficulty='Medium',
            category='Timing',
        ))

    return sorted(suggestions, key=lambda s: s.potential_saving, reverse=True)


class TaxCalculator:
    """Tax calculator bound to one rule table.

    Pass a hydrated `TaxRuleTable` into the constructor. This keeps file I/O
    in the caller (e.g., `Program.py`) and the calculation easy to test.
    """

    def __init__(self, rules: TaxRuleTable):
        self.rules = rules

    def calculate(self, tax_input: TaxCalculationInput) -> TaxCalculationResult:
        return calculate_tax(tax_input, self.rules)

    def optimize(self, tax_input: TaxCalculationInput,
                 strategies: OptimizationStrategies) -> OptimizationResult:
        return compare_optimization(tax_input, strategies, self.rules)

    def suggest(self, tax_input: TaxCalculationInput, profile: TaxProfile) -> List[StrategySuggestion]:
        return suggest_strategies(profile, self.calculate(tax_input), self.rules)
