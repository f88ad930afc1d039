"""Records for loans, retirement and net worth projections.

Inputs validate themselves in `__post_init__`; results are plain frozen
dataclasses that `dataclasses.asdict` turns into JSON-ready dicts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from model.errors import InvalidInputError, require_non_negative, require_range

# Growth defaults used whenever a scenario does not override them
DEFAULT_CASH_RETURN = 0.02
DEFAULT_OTHER_ASSET_RETURN = 0.03
DEFAULT_RETIREMENT_INCOME_TARGET = 0.70
DEFAULT_SUPER_GUARANTEE_RATE = 0.12
DEFAULT_MAX_SUPER_GUARANTEE = 30600.0
DEFAULT_WITHDRAWAL_RATE = 0.04

MAX_ASSUMPTION_RATE = 0.5

# Repayments per year for each liability frequency code
PAYMENTS_PER_YEAR = {'W': 52, 'F': 26, 'M': 12}


@dataclass(frozen=True)
class LoanTerms:
    principal: float
    annual_rate: float
    term_years: float

    def __post_init__(self):
        require_non_negative("principal", self.principal)
        require_range("annual_rate", self.annual_rate, 0, 1)
        require_range("term_years", self.term_years, 1, 50)


@dataclass(frozen=True)
class AmortizationEntry:
    payment_number: int
    payment: float
    principal: float
    interest: float
    remaining_balance: float


@dataclass(frozen=True)
class RetirementInput:
    current_age: int
    retirement_age: int
    current_savings: float
    monthly_contribution: float
    annual_return: float
    inflation_rate: float
    taxed_contributions: bool = False

    def __post_init__(self):
        if self.current_age >= self.retirement_age:
            raise InvalidInputError("retirement_age", "must be greater than current_age")
        require_non_negative("current_savings", self.current_savings)
        require_non_negative("monthly_contribution", self.monthly_contribution)
        require_range("annual_return", self.annual_return, -1, 1)
        require_range("inflation_rate", self.inflation_rate, -1, 1)

    @property
    def years_to_retirement(self) -> int:
        return self.retirement_age - self.current_age


@dataclass(frozen=True)
class YearlyProjection:
    age: int
    year: int
    contributions: float
    beginning_balance: float
    investment_return: float
    ending_balance: float
    total_contributions: float
    total_returns: float
    real_value: float


@dataclass(frozen=True)
class RetirementWithdrawal:
    year: int
    withdrawal: float
    balance: float


@dataclass(frozen=True)
class RetirementGap:
    monthly_amount: float
    is_deficit: bool
    required_income: float
    available_income: float


@dataclass(frozen=True)
class SavingsDepletion:
    years_to_depletion: float
    monthly_draw: float
    total_available: float


class AssetClass(Enum):
    SUPER = 'super'
    SHARES = 'shares'
    PROPERTY = 'property'
    CASH = 'cash'
    OTHER = 'other'


@dataclass(frozen=True)
class Asset:
    name: str
    value: float
    asset_class: AssetClass = AssetClass.OTHER

    def __post_init__(self):
        if not isinstance(self.asset_class, AssetClass):
            try:
                object.__setattr__(self, 'asset_class', AssetClass(str(self.asset_class).lower()))
            except ValueError:
                raise InvalidInputError(
                    f"assets[{self.name}].asset_class",
                    f"must be one of {[c.value for c in AssetClass]}",
                ) from None
        require_non_negative(f"assets[{self.name}].value", self.value)


@dataclass(frozen=True)
class Liability:
    name: str
    balance: float
    interest_rate: float = 0.0
    term_years: Optional[float] = None
    repayment_amount: float = 0.0
    frequency: str = 'M'

    def __post_init__(self):
        require_non_negative(f"liabilities[{self.name}].balance", self.balance)
        require_range(f"liabilities[{self.name}].interest_rate", self.interest_rate, 0, 1)
        if self.term_years is not None:
            require_range(f"liabilities[{self.name}].term_years", self.term_years, 1, 50)
        require_non_negative(f"liabilities[{self.name}].repayment_amount", self.repayment_amount)
        if self.frequency not in PAYMENTS_PER_YEAR:
            raise InvalidInputError(f"liabilities[{self.name}].frequency",
                                    f"must be one of {sorted(PAYMENTS_PER_YEAR)}")

    @property
    def monthly_repayment(self) -> float:
        return self.repayment_amount * PAYMENTS_PER_YEAR[self.frequency] / 12


@dataclass(frozen=True)
class InvestmentProperty:
    name: str
    purchase_price: float
    current_value: float
    loan_amount: float = 0.0
    interest_rate: float = 0.0
    loan_term: float = 30
    weekly_rent: float = 0.0
    annual_expenses: float = 0.0

    def __post_init__(self):
        prefix = f"investment_properties[{self.name}]"
        for name in ('purchase_price', 'current_value', 'loan_amount', 'weekly_rent', 'annual_expenses'):
            require_non_negative(f"{prefix}.{name}", getattr(self, name))
        require_range(f"{prefix}.interest_rate", self.interest_rate, 0, 1)
        require_range(f"{prefix}.loan_term", self.loan_term, 1, 50)

    @property
    def equity(self) -> float:
        return self.current_value - self.loan_amount


@dataclass(frozen=True)
class ProjectionAssumptions:
    """Growth and income assumptions for a net worth projection.

    All ratios are decimals (0.065 = 6.5%).
    """
    inflation_rate: float = 0.025
    salary_growth_rate: float = 0.035
    share_return: float = 0.095
    property_growth_rate: float = 0.065
    super_return: float = 0.075
    withdrawal_rate: float = DEFAULT_WITHDRAWAL_RATE
    rent_growth_rate: float = 0.04
    savings_rate: float = 0.0
    cash_return: float = DEFAULT_CASH_RETURN
    other_asset_return: float = DEFAULT_OTHER_ASSET_RETURN
    retirement_income_target: float = DEFAULT_RETIREMENT_INCOME_TARGET
    super_guarantee_rate: float = DEFAULT_SUPER_GUARANTEE_RATE
    max_super_guarantee: float = DEFAULT_MAX_SUPER_GUARANTEE

    def __post_init__(self):
        for name in ('inflation_rate', 'salary_growth_rate', 'share_return', 'property_growth_rate',
                     'super_return', 'withdrawal_rate', 'rent_growth_rate', 'savings_rate',
                     'cash_return', 'other_asset_return', 'super_guarantee_rate'):
            require_range(name, getattr(self, name), 0, MAX_ASSUMPTION_RATE)
        require_range("retirement_income_target", self.retirement_income_target, 0, 1)
        require_non_negative("max_super_guarantee", self.max_super_guarantee)


@dataclass(frozen=True)
class NetWorthInput:
    current_age: int
    retirement_age: int
    annual_income: float
    monthly_expenses: float = 0.0
    assets: Tuple[Asset, ...] = ()
    liabilities: Tuple[Liability, ...] = ()
    investment_properties: Tuple[InvestmentProperty, ...] = ()

    def __post_init__(self):
        for name in ('assets', 'liabilities', 'investment_properties'):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        if self.current_age > self.retirement_age:
            raise InvalidInputError("retirement_age", "cannot be less than current_age")
        require_non_negative("annual_income", self.annual_income)
        require_non_negative("monthly_expenses", self.monthly_expenses)

    @property
    def years_to_retirement(self) -> int:
        return self.retirement_age - self.current_age

    def total_for(self, asset_class: AssetClass) -> float:
        return sum(a.value for a in self.assets if a.asset_class is asset_class)


@dataclass(frozen=True)
class NetWorthYear:
    age: int
    year: int
    assets: float
    liabilities: float
    net_worth: float
    real_net_worth: float


@dataclass(frozen=True)
class NetWorthResult:
    # Current position
    total_assets: float
    total_liabilities: float
    current_net_worth: float
    monthly_debt_payments: float
    monthly_rental_income: float
    current_monthly_cashflow: float

    # Values at retirement
    years_to_retirement: int
    future_assets: Dict[str, float] = field(hash=False)
    future_investment_property_value: float
    remaining_liabilities: float
    remaining_property_loans: float
    retirement_lump_sum: float
    net_worth_at_retirement: float

    # Retirement income
    annual_rental_income: float
    annual_withdrawal: float
    annual_debt_service: float
    projected_passive_income: float

    # Income target analysis
    required_annual_income: float
    annual_surplus_deficit: float
    status: str
    percentage_of_target: float


@dataclass(frozen=True)
class PropertyCashflow:
    monthly_rent: float
    monthly_loan_payment: float
    monthly_expenses: float
    monthly_maintenance: float
    monthly_management_fee: float
    net_monthly_cashflow: float


@dataclass(frozen=True)
class NegativeGearingResult:
    total_rental_income: float
    total_expenses: float
    net_loss: float
    tax_benefit: float


@dataclass(frozen=True)
class MonthlySurplus:
    """Monthly income, outgoings and what is left over."""
    employment_income: float
    rental_income: float
    investment_income: float
    other_income: float
    total_income: float
    living_expenses: float
    tax: float
    debt_repayment: float
    property_expenses: float
    loan_repayments: float
    total_expenses: float
    surplus: float
    savings_rate: float


@dataclass(frozen=True)
class RetirementSurplus:
    projected_passive_income_monthly: float
    current_monthly_income: float
    monthly_surplus: float
    is_deficit: bool


@dataclass(frozen=True)
class PropertyServiceability:
    max_property_value: float
    max_monthly_payment: float
    surplus_income: float
    loan_to_value_ratio: float
    monthly_rental_income: float
    total_monthly_expenses: float
    is_viable: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class ServiceabilityAssessment:
    loan: LoanTerms
    monthly_net_income: float
    existing_commitments: float
    monthly_repayment: float
    total_monthly_commitments: float
    net_surplus_after_loan: float
    serviceability_ratio: float
    required_buffer: float
    actual_buffer: float
    has_buffer: bool
    stress_test_rate: float
    stress_test_repayment: float
    passes_stress_test: bool
    can_afford: bool
    assessment: str
    reasons: Tuple[str, ...] = ()
