"""Inputs and results of a full personal income tax calculation."""

from dataclasses import dataclass, field
from typing import List, Tuple

from model.errors import InvalidInputError, require_non_negative


@dataclass(frozen=True)
class Deduction:
    category: str
    amount: float
    description: str = ""

    def __post_init__(self):
        require_non_negative(f"deductions[{self.category}].amount", self.amount)


@dataclass(frozen=True)
class TaxCalculationInput:
    """One client's income position for a tax year."""
    gross_income: float
    deductions: Tuple[Deduction, ...] = ()
    negative_gearing_loss: float = 0.0
    capital_gains: float = 0.0
    franked_dividends: float = 0.0
    outstanding_debt_balance: float = 0.0
    levy_exempt: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'deductions', tuple(self.deductions))
        for name in ('gross_income', 'negative_gearing_loss', 'capital_gains',
                     'franked_dividends', 'outstanding_debt_balance'):
            require_non_negative(name, getattr(self, name))


@dataclass(frozen=True)
class TaxBreakdown:
    deductions: float
    negative_gearing: float
    franking_credits: float
    taxable_capital_gains: float = 0.0


@dataclass(frozen=True)
class TaxCalculationResult:
    gross_income: float
    taxable_income: float
    income_tax: float
    levy_amount: float
    debt_repayment: float
    total_tax: float
    after_tax_income: float
    marginal_rate: float
    average_rate: float
    breakdown: TaxBreakdown


@dataclass(frozen=True)
class OptimizationStrategies:
    """What-if adjustments applied on top of a base tax position."""
    additional_deductions: float = 0.0
    negative_gearing_opportunity: float = 0.0
    super_contributions: float = 0.0

    def __post_init__(self):
        for name in ('additional_deductions', 'negative_gearing_opportunity', 'super_contributions'):
            require_non_negative(name, getattr(self, name))


@dataclass(frozen=True)
class OptimizationResult:
    current: TaxCalculationResult
    optimized: TaxCalculationResult
    savings: float
    applied_strategies: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class TaxProfile:
    """Extra facts about a client used to suggest tax strategies."""
    charity_donations: float = 0.0
    work_related_expenses: float = 0.0
    super_contributions: float = 0.0
    rental_income: float = 0.0
    rental_expenses: float = 0.0
    capital_gains: float = 0.0

    def __post_init__(self):
        for name in ('charity_donations', 'work_related_expenses', 'super_contributions',
                     'rental_income', 'rental_expenses', 'capital_gains'):
            require_non_negative(name, getattr(self, name))


DIFFICULTIES = ('Easy', 'Medium', 'Hard')


@dataclass(frozen=True)
class StrategySuggestion:
    strategy: str
    description: str
    potential_saving: float
    difficulty: str
    category: str

    def __post_init__(self):
        if self.difficulty not in DIFFICULTIES:
            raise InvalidInputError("difficulty", f"must be one of {DIFFICULTIES}")
