"""Client scenario loaded from `input-parameters/<program>/spec.json`.

The JSON uses camelCase keys grouped by section. Every section is checked
against the keys it accepts so a typo fails loudly instead of silently
falling back to a default.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from model.ProjectionData import (
    Asset,
    InvestmentProperty,
    Liability,
    LoanTerms,
    NetWorthInput,
    ProjectionAssumptions,
    RetirementInput,
)
from model.TaxResult import Deduction, OptimizationStrategies, TaxCalculationInput, TaxProfile
from model.errors import InvalidInputError

INPUT_PARAMETERS_DIR = os.path.normpath(os.path.join(os.path.dirname(__file__), '../../input-parameters'))

TOP_LEVEL_KEYS = {
    'taxYear', 'client', 'tax', 'assets', 'liabilities', 'investmentProperties',
    'assumptions', 'retirementSavings', 'loan', 'optimization',
}

CLIENT_KEYS = {
    'name': 'name',
    'currentAge': 'current_age',
    'retirementAge': 'retirement_age',
    'annualIncome': 'annual_income',
    'monthlyExpenses': 'monthly_expenses',
}

# Keys under "tax" that feed the calculation itself
TAX_INPUT_KEYS = {
    'negativeGearingLoss': 'negative_gearing_loss',
    'capitalGains': 'capital_gains',
    'frankedDividends': 'franked_dividends',
    'studyDebtBalance': 'outstanding_debt_balance',
    'levyExempt': 'levy_exempt',
}

# Keys under "tax" only used to suggest strategies
TAX_PROFILE_KEYS = {
    'charityDonations': 'charity_donations',
    'workRelatedExpenses': 'work_related_expenses',
    'superContributions': 'super_contributions',
    'rentalIncome': 'rental_income',
    'rentalExpenses': 'rental_expenses',
}

DEDUCTION_KEYS = {'category': 'category', 'amount': 'amount', 'description': 'description'}

ASSET_KEYS = {'name': 'name', 'value': 'value', 'type': 'asset_class'}

LIABILITY_KEYS = {
    'name': 'name',
    'balance': 'balance',
    'interestRate': 'interest_rate',
    'termYears': 'term_years',
    'repaymentAmount': 'repayment_amount',
    'frequency': 'frequency',
}

PROPERTY_KEYS = {
    'name': 'name',
    'purchasePrice': 'purchase_price',
    'currentValue': 'current_value',
    'loanAmount': 'loan_amount',
    'interestRate': 'interest_rate',
    'loanTerm': 'loan_term',
    'weeklyRent': 'weekly_rent',
    'annualExpenses': 'annual_expenses',
}

ASSUMPTION_KEYS = {
    'inflationRate': 'inflation_rate',
    'salaryGrowthRate': 'salary_growth_rate',
    'shareReturn': 'share_return',
    'propertyGrowthRate': 'property_growth_rate',
    'superReturn': 'super_return',
    'withdrawalRate': 'withdrawal_rate',
    'rentGrowthRate': 'rent_growth_rate',
    'savingsRate': 'savings_rate',
    'cashReturn': 'cash_return',
    'otherAssetReturn': 'other_asset_return',
    'retirementIncomeTarget': 'retirement_income_target',
    'superGuaranteeRate': 'super_guarantee_rate',
    'maxSuperGuarantee': 'max_super_guarantee',
}

RETIREMENT_KEYS = {
    'currentSavings': 'current_savings',
    'monthlyContribution': 'monthly_contribution',
    'annualReturn': 'annual_return',
    'inflationRate': 'inflation_rate',
    'taxedContributions': 'taxed_contributions',
}

LOAN_KEYS = {'principal': 'principal', 'annualRate': 'annual_rate', 'termYears': 'term_years'}

OPTIMIZATION_KEYS = {
    'additionalDeductions': 'additional_deductions',
    'negativeGearingOpportunity': 'negative_gearing_opportunity',
    'superContributions': 'super_contributions',
}


def _check_keys(section: str, data: Any, allowed) -> None:
    if not isinstance(data, dict):
        raise InvalidInputError(section, "must be an object")
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise InvalidInputError(section, f"has unknown keys {unknown}")


def _convert(section: str, data: Dict[str, Any], key_map: Dict[str, str]) -> Dict[str, Any]:
    """Rename camelCase keys to keyword arguments, rejecting unknown keys."""
    _check_keys(section, data, key_map)
    return {key_map[k]: v for k, v in data.items()}


def _list(section: str, data: Any) -> list:
    if data is None:
        return []
    if not isinstance(data, list):
        raise InvalidInputError(section, "must be a list")
    return data


@dataclass
class ClientSpec:
    """A validated client scenario.

    Holds the raw sections and builds the typed inputs each calculator
    needs. Sections that are absent produce defaults where a calculation
    can still run, and an `InvalidInputError` where it cannot.
    """
    tax_year: Optional[str] = None
    client: Dict[str, Any] = field(default_factory=dict)
    tax: Dict[str, Any] = field(default_factory=dict)
    assets: tuple = ()
    liabilities: tuple = ()
    investment_properties: tuple = ()
    assumptions: ProjectionAssumptions = field(default_factory=ProjectionAssumptions)
    retirement_savings: Optional[Dict[str, Any]] = None
    loan: Optional[LoanTerms] = None
    optimization: OptimizationStrategies = field(default_factory=OptimizationStrategies)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClientSpec':
        _check_keys("spec", data, TOP_LEVEL_KEYS)

        client = _convert("client", data.get('client', {}), CLIENT_KEYS)

        tax_data = dict(data.get('tax', {}))
        deductions = _list("tax.deductions", tax_data.pop('deductions', None))
        tax = _convert("tax", tax_data, {**TAX_INPUT_KEYS, **TAX_PROFILE_KEYS})
        tax['deductions'] = tuple(
            Deduction(**_convert(f"tax.deductions[{i}]", d, DEDUCTION_KEYS))
            for i, d in enumerate(deductions)
        )

        assets = tuple(
            Asset(**_convert(f"assets[{i}]", a, ASSET_KEYS))
            for i, a in enumerate(_list("assets", data.get('assets')))
        )
        liabilities = tuple(
            Liability(**_convert(f"liabilities[{i}]", item, LIABILITY_KEYS))
            for i, item in enumerate(_list("liabilities", data.get('liabilities')))
        )
        properties = tuple(
            InvestmentProperty(**_convert(f"investmentProperties[{i}]", p, PROPERTY_KEYS))
            for i, p in enumerate(_list("investmentProperties", data.get('investmentProperties')))
        )

        assumptions = ProjectionAssumptions(
            **_convert("assumptions", data.get('assumptions', {}), ASSUMPTION_KEYS))

        retirement = None
        if 'retirementSavings' in data:
            retirement = _convert("retirementSavings", data['retirementSavings'], RETIREMENT_KEYS)

        loan = None
        if 'loan' in data:
            loan = LoanTerms(**_convert("loan", data['loan'], LOAN_KEYS))

        optimization = OptimizationStrategies(
            **_convert("optimization", data.get('optimization', {}), OPTIMIZATION_KEYS))

        return cls(
            tax_year=data.get('taxYear'),
            client=client,
            tax=tax,
            assets=assets,
            liabilities=liabilities,
            investment_properties=properties,
            assumptions=assumptions,
            retirement_savings=retirement,
            loan=loan,
            optimization=optimization,
        )

    @classmethod
    def load(cls, path: str) -> 'ClientSpec':
        with open(path, 'r') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidInputError(path, f"is not valid JSON ({e})") from e
        return cls.from_dict(data)

    @classmethod
    def load_program(cls, program_name: str, base_dir: Optional[str] = None) -> 'ClientSpec':
        """Load `<base_dir>/<program_name>/spec.json`."""
        spec_path = os.path.join(base_dir or INPUT_PARAMETERS_DIR, program_name, 'spec.json')
        if not os.path.exists(spec_path):
            raise InvalidInputError("program_name", f"has no spec file at {spec_path}")
        return cls.load(spec_path)

    @property
    def name(self) -> str:
        return self.client.get('name', '')

    def _client_value(self, key: str):
        if key not in self.client:
            raise InvalidInputError(f"client.{key}", "is required for this calculation")
        return self.client[key]

    def tax_input(self) -> TaxCalculationInput:
        kwargs = {k: v for k, v in self.tax.items() if k in TAX_INPUT_KEYS.values() or k == 'deductions'}
        return TaxCalculationInput(gross_income=self._client_value('annual_income'), **kwargs)

    def tax_profile(self) -> TaxProfile:
        kwargs = {k: v for k, v in self.tax.items() if k in TAX_PROFILE_KEYS.values()}
        if 'capital_gains' in self.tax:
            kwargs['capital_gains'] = self.tax['capital_gains']
        return TaxProfile(**kwargs)

    def retirement_input(self) -> RetirementInput:
        if self.retirement_savings is None:
            raise InvalidInputError("retirementSavings", "is required for a retirement projection")
        for key in ('current_savings', 'monthly_contribution', 'annual_return', 'inflation_rate'):
            if key not in self.retirement_savings:
                raise InvalidInputError(f"retirementSavings.{key}", "is required")
        return RetirementInput(
            current_age=self._client_value('current_age'),
            retirement_age=self._client_value('retirement_age'),
            **self.retirement_savings,
        )

    def net_worth_input(self) -> NetWorthInput:
        return NetWorthInput(
            current_age=self._client_value('current_age'),
            retirement_age=self._client_value('retirement_age'),
            annual_income=self._client_value('annual_income'),
            monthly_expenses=self.client.get('monthly_expenses', 0.0),
            assets=self.assets,
            liabilities=self.liabilities,
            investment_properties=self.investment_properties,
        )

    def loan_terms(self) -> LoanTerms:
        if self.loan is None:
            raise InvalidInputError("loan", "is required for an amortization schedule")
        return self.loan
