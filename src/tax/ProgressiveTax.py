"""Progressive tax evaluator.

Pure functions over a `TaxRuleTable`: income tax, levy, study-debt
repayment and the stacked marginal rate. Money is rounded to cents and
ratios to four decimal places.
"""

from typing import Optional

from model.TaxRules import TaxBracket, DebtRepaymentBand, TaxRuleTable
from model.errors import InvalidInputError, require_non_negative
from model.money import round_money, round_rate


def find_bracket(taxable_income: float, rules: TaxRuleTable) -> TaxBracket:
	"""Return the single bracket that applies to the income.

	Brackets are contiguous, so an income sitting exactly on an edge matches
	the lower bracket first.
	"""
	for b in rules.brackets:
		if b.contains(taxable_income):
			return b
	# Contiguity is checked when the table is built
	raise InvalidInputError("taxable_income", "is not covered by any tax bracket")


def find_debt_band(income: float, rules: TaxRuleTable) -> Optional[DebtRepaymentBand]:
	for band in rules.debt_repayment_bands:
		if band.contains(income):
			return band
	return None


def calculate_income_tax(taxable_income: float, rules: TaxRuleTable) -> float:
	"""Income tax owed on taxable income.

	Uses the precomputed `base_amount` of the applying bracket plus the
	bracket rate on the amount above the bracket's lower edge, so the tax is
	continuous across bracket edges.
	"""
	require_non_negative("taxable_income", taxable_income)
	first = rules.brackets[0]
	if first.max is not None and taxable_income <= first.max:
		return 0.0
	b = find_bracket(taxable_income, rules)
	return round_money(b.base_amount + (taxable_income - b.min) * b.rate)


def calculate_levy(taxable_income: float, rules: TaxRuleTable, exempt: bool = False) -> float:
	"""Medicare-style levy: a flat rate on the whole income once above the threshold."""
	require_non_negative("taxable_income", taxable_income)
	if exempt or taxable_income <= rules.levy.threshold:
		return 0.0
	return round_money(taxable_income * rules.levy.rate)


def calculate_debt_repayment(gross_income: float, rules: TaxRuleTable, balance: float) -> float:
	"""Compulsory study-debt repayment for the year.

	The band rate applies to the whole gross income, and the repayment never
	exceeds what is still owed.
	"""
	require_non_negative("gross_income", gross_income)
	if balance <= 0:
		return 0.0
	band = find_debt_band(gross_income, rules)
	if band is None:
		return 0.0
	return round_money(min(gross_income * band.rate, balance))


def calculate_marginal_rate(taxable_income: float, rules: TaxRuleTable, include_debt_repayment: bool = True) -> float:
	"""Rate paid on the next dollar: bracket rate plus levy plus debt band rate."""
	require_non_negative("taxable_income", taxable_income)
	rate = find_bracket(taxable_income, rules).rate

	if taxable_income > rules.levy.threshold:
		rate += rules.levy.rate

	if include_debt_repayment:
		band = find_debt_band(taxable_income, rules)
		if band is not None:
			rate += band.rate

	return round_rate(rate)


def calculate_average_rate(total_tax: float, gross_income: float) -> float:
	if gross_income <= 0:
		return 0.0
	return round_rate(total_tax / gross_income)
