"""Immutable, versioned tax rule tables.

A `TaxRuleTable` is built once per tax year and handed to every tax
calculation. Nothing in the engine mutates it, so one instance can be shared
freely between concurrent calculations.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from model.errors import InvalidInputError


@dataclass(frozen=True)
class TaxBracket:
    min: float
    max: Optional[float]
    rate: float
    base_amount: float

    def contains(self, income: float) -> bool:
        return income >= self.min and (self.max is None or income <= self.max)


@dataclass(frozen=True)
class LevyRule:
    rate: float
    threshold: float


@dataclass(frozen=True)
class DebtRepaymentBand:
    min: float
    max: Optional[float]
    rate: float

    def contains(self, income: float) -> bool:
        return income >= self.min and (self.max is None or income <= self.max)


@dataclass(frozen=True)
class DeductionCategory:
    description: str
    requires_receipts: bool = True
    max_amount: Optional[float] = None


def _check_contiguous(name: str, rows) -> None:
    """Rows must start at 0, run in ascending order without gaps and end unbounded."""
    if not rows:
        raise InvalidInputError(name, "must contain at least one entry")
    if rows[0].min != 0:
        raise InvalidInputError(name, "must start at an income of 0")
    for i, row in enumerate(rows):
        if not 0 <= row.rate <= 1:
            raise InvalidInputError(f"{name}[{i}].rate", "must be between 0 and 1")
        if row.max is None:
            if i != len(rows) - 1:
                raise InvalidInputError(f"{name}[{i}].max", "may only be unbounded on the last entry")
            continue
        if row.max <= row.min:
            raise InvalidInputError(f"{name}[{i}].max", "must be greater than min")
        if i == len(rows) - 1:
            raise InvalidInputError(f"{name}[{i}].max", "must be unbounded on the last entry")
        if rows[i + 1].min != row.max:
            raise InvalidInputError(f"{name}[{i + 1}].min", f"must equal the previous max ({row.max})")


@dataclass(frozen=True)
class TaxRuleTable:
    """Progressive brackets, levy, debt repayment and policy flags for one tax year."""
    version: str
    effective_date: str
    tax_year: str
    brackets: Tuple[TaxBracket, ...]
    levy: LevyRule
    debt_repayment_bands: Tuple[DebtRepaymentBand, ...]
    negative_gearing_allowed: bool = True
    franking_credit_rate: float = 0.30
    capital_gains_discount: float = 0.50
    deduction_categories: Dict[str, DeductionCategory] = field(default_factory=dict, hash=False)
    concessional_contributions_cap: float = 27500.0
    super_contributions_tax_rate: float = 0.15

    def __post_init__(self):
        # Accept lists from callers but store tuples so the table stays immutable.
        object.__setattr__(self, 'brackets', tuple(self.brackets))
        object.__setattr__(self, 'debt_repayment_bands', tuple(self.debt_repayment_bands))
        _check_contiguous('brackets', self.brackets)
        _check_contiguous('debt_repayment_bands', self.debt_repayment_bands)

        # base_amount must be the tax owed at the bracket's lower edge under
        # the previous bracket, otherwise the schedule jumps at the edge.
        for i in range(1, len(self.brackets)):
            prev, cur = self.brackets[i - 1], self.brackets[i]
            expected = prev.base_amount + (prev.max - prev.min) * prev.rate
            if abs(expected - cur.base_amount) > 0.01:
                raise InvalidInputError(
                    f"brackets[{i}].base_amount",
                    f"must equal the tax at its lower edge ({expected:.2f})"
                )

        for name in ('franking_credit_rate', 'capital_gains_discount', 'super_contributions_tax_rate'):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise InvalidInputError(name, "must be between 0 and 1")
        if not 0 <= self.levy.rate <= 1:
            raise InvalidInputError('levy.rate', "must be between 0 and 1")
        if self.levy.threshold < 0:
            raise InvalidInputError('levy.threshold', "cannot be negative")
        if self.concessional_contributions_cap < 0:
            raise InvalidInputError('concessional_contributions_cap', "cannot be negative")

    @property
    def key(self) -> Tuple[str, str, str]:
        """The (version, effective_date, tax_year) triple identifying this table."""
        return (self.version, self.effective_date, self.tax_year)

    @classmethod
    def from_dict(cls, data: dict) -> 'TaxRuleTable':
        """Build a table from one entry of the `taxYears` reference array.

        Rates above 1 are treated as percentages (30 -> 0.30).
        """
        def rate(value):
            value = float(value)
            return value / 100.0 if value > 1 else value

        def bound(value):
            return None if value is None else float(value)

        try:
            brackets = [
                TaxBracket(
                    min=float(b["min"]),
                    max=bound(b.get("max")),
                    rate=rate(b["rate"]),
                    base_amount=float(b.get("baseAmount", 0)),
                )
                for b in data["incomeTaxBrackets"]
            ]
            bands = [
                DebtRepaymentBand(min=float(b["min"]), max=bound(b.get("max")), rate=rate(b["rate"]))
                for b in data.get("hecsThresholds", [])
            ]
            levy_data = data["medicareLevy"]
            levy = LevyRule(
                rate=rate(levy_data["rate"]),
                threshold=float(levy_data["threshold"]),
            )
        except KeyError as e:
            raise InvalidInputError(str(e.args[0]), "is required in the tax rule table") from e

        categories = {
            name: DeductionCategory(
                description=c.get("description", name),
                requires_receipts=bool(c.get("requiresReceipts", True)),
                max_amount=bound(c.get("maxAmount")),
            )
            for name, c in data.get("deductionCategories", {}).items()
        }
        superannuation = data.get("superannuation", {})

        return cls(
            version=str(data.get("version", data.get("taxYear", ""))),
            effective_date=str(data.get("effectiveDate", "")),
            tax_year=str(data.get("taxYear", "")),
            brackets=brackets,
            levy=levy,
            debt_repayment_bands=bands or [DebtRepaymentBand(0.0, None, 0.0)],
            negative_gearing_allowed=bool(data.get("negativeGearing", {}).get("allowed", True)),
            franking_credit_rate=rate(data.get("frankingCreditRate", 0.30)),
            capital_gains_discount=rate(data.get("capitalGainsTax", {}).get("discountRate", 0.50)),
            deduction_categories=categories,
            concessional_contributions_cap=float(superannuation.get("concessionalCap", 27500)),
            super_contributions_tax_rate=rate(superannuation.get("contributionsTaxRate", 0.15)),
        )
