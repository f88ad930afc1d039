"""Renderer classes for displaying financial projection results.

This module contains renderer classes that handle the presentation logic
for the different calculator outputs. Each renderer prints a fixed-width
text report for one kind of result.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from model.ProjectionData import (
    AmortizationEntry,
    LoanTerms,
    MonthlySurplus,
    NetWorthResult,
    NetWorthYear,
    ServiceabilityAssessment,
    YearlyProjection,
)
from model.TaxResult import OptimizationResult, StrategySuggestion, TaxCalculationResult


def print_banner(title: str, width: int = 60) -> None:
    print()
    print("=" * width)
    print(f"{title:^{width}}")
    print("=" * width)


def print_section(title: str, width: int = 60) -> None:
    print()
    print("-" * width)
    print(title)
    print("-" * width)


def money_line(label: str, amount: float) -> str:
    return f"  {label:<40} ${amount:>14,.2f}"


def rate_line(label: str, rate: float) -> str:
    return f"  {label:<40} {rate:>15.2%}"


class BaseRenderer(ABC):
    """Abstract base class for all renderers."""

    @abstractmethod
    def render(self, data: Any) -> None:
        """Render the data to output.

        Args:
            data: The calculator result to display
        """
        pass


class TaxDetailsRenderer(BaseRenderer):
    """Renderer for a detailed tax breakdown."""

    def __init__(self, tax_year: str):
        """Initialize with the tax year to display.

        Args:
            tax_year: The tax year of the rule table used, e.g. '2024-25'
        """
        self.tax_year = tax_year

    def render(self, data: TaxCalculationResult) -> None:
        print_banner(f"TAX SUMMARY FOR {self.tax_year}")

        print_section("INCOME")
        print(money_line("Gross Income:", data.gross_income))
        print(money_line("Deductions:", -data.breakdown.deductions))
        if data.breakdown.negative_gearing > 0:
            print(money_line("Negative Gearing Loss:", -data.breakdown.negative_gearing))
        if data.breakdown.franking_credits > 0:
            print(money_line("Franking Credits (grossed up):", data.breakdown.franking_credits))
        if data.breakdown.taxable_capital_gains > 0:
            print(money_line("Taxable Capital Gains:", data.breakdown.taxable_capital_gains))
        print(f"  {'-' * 40}")
        print(money_line("Taxable Income:", data.taxable_income))

        print_section("TAX")
        print(money_line("Income Tax (after franking offset):", data.income_tax))
        print(money_line("Medicare Levy:", data.levy_amount))
        if data.debt_repayment > 0:
            print(money_line("Study Debt Repayment:", data.debt_repayment))
        print(f"  {'-' * 40}")
        print(money_line("Total Tax:", data.total_tax))
        print(rate_line("Marginal Rate:", data.marginal_rate))
        print(rate_line("Average Rate:", data.average_rate))

        print()
        print("=" * 60)
        print(f"{'AFTER-TAX INCOME:':^44} ${data.after_tax_income:>14,.2f}")
        print("=" * 60)
        print()


class OptimizationRenderer(BaseRenderer):
    """Renderer for a current vs optimized tax comparison."""

    def __init__(self, suggestions: Optional[Sequence[StrategySuggestion]] = None):
        self.suggestions = list(suggestions or [])

    def render(self, data: OptimizationResult) -> None:
        print_banner("TAX OPTIMIZATION", 72)
        print()
        print(f"  {'':<30} {'Current':>18} {'Optimized':>18}")
        print(f"  {'-' * 30} {'-' * 18} {'-' * 18}")
        rows = [
            ("Gross Income", data.current.gross_income, data.optimized.gross_income),
            ("Taxable Income", data.current.taxable_income, data.optimized.taxable_income),
            ("Income Tax", data.current.income_tax, data.optimized.income_tax),
            ("Medicare Levy", data.current.levy_amount, data.optimized.levy_amount),
            ("Study Debt Repayment", data.current.debt_repayment, data.optimized.debt_repayment),
            ("Total Tax", data.current.total_tax, data.optimized.total_tax),
        ]
        for label, current, optimized in rows:
            print(f"  {label:<30} ${current:>17,.2f} ${optimized:>17,.2f}")

        print()
        if data.applied_strategies:
            print("  Strategies applied:")
            for s in data.applied_strategies:
                print(f"    - {s}")
        else:
            print("  No strategies applied.")

        print()
        print("=" * 72)
        print(f"{'ESTIMATED TAX SAVING:':^52} ${data.savings:>17,.2f}")
        print("=" * 72)

        if self.suggestions:
            print_section("SUGGESTED STRATEGIES", 72)
            for s in self.suggestions:
                print(f"  {s.strategy:<40} {s.difficulty:<8} ${s.potential_saving:>14,.2f}")
                print(f"      {s.description}")
        print()


class RetirementRenderer(BaseRenderer):
    """Renderer for the year-by-year retirement savings table."""

    def render(self, data: List[YearlyProjection]) -> None:
        print_banner("RETIREMENT PROJECTION", 110)
        print()
        print(f"  {'Age':<5} {'Year':<5} {'Contributions':>15} {'Returns':>15} "
              f"{'Balance':>18} {'Total Contrib':>16} {'Real Value':>18}")
        print(f"  {'-' * 5} {'-' * 5} {'-' * 15} {'-' * 15} {'-' * 18} {'-' * 16} {'-' * 18}")
        for p in data:
            print(f"  {p.age:<5} {p.year:<5} ${p.contributions:>14,.2f} ${p.investment_return:>14,.2f} "
                  f"${p.ending_balance:>17,.2f} ${p.total_contributions:>15,.2f} ${p.real_value:>17,.2f}")

        if data:
            final = data[-1]
            print()
            print("=" * 110)
            print(money_line("Balance at Retirement:", final.ending_balance))
            print(money_line("In Today's Dollars:", final.real_value))
            print(money_line("Total Contributions:", final.total_contributions))
            print(money_line("Total Investment Returns:", final.total_returns))
            print("=" * 110)
        print()


class NetWorthRenderer(BaseRenderer):
    """Renderer for the net worth projection."""

    def __init__(self, yearly: Optional[Sequence[NetWorthYear]] = None):
        self.yearly = list(yearly or [])

    def render(self, data: NetWorthResult) -> None:
        print_banner("NET WORTH PROJECTION")

        print_section("CURRENT POSITION")
        print(money_line("Total Assets:", data.total_assets))
        print(money_line("Total Liabilities:", data.total_liabilities))
        print(money_line("Net Worth:", data.current_net_worth))
        print(money_line("Monthly Debt Payments:", data.monthly_debt_payments))
        print(money_line("Monthly Rental Income:", data.monthly_rental_income))
        print(money_line("Monthly Cashflow:", data.current_monthly_cashflow))

        print_section(f"AT RETIREMENT (IN {data.years_to_retirement} YEARS)")
        for asset_class, value in data.future_assets.items():
            print(money_line(f"{asset_class.title()}:", value))
        print(money_line("Investment Properties:", data.future_investment_property_value))
        print(money_line("Remaining Liabilities:", data.remaining_liabilities))
        print(money_line("Remaining Property Loans:", data.remaining_property_loans))
        print(f"  {'-' * 40}")
        print(money_line("Retirement Lump Sum:", data.retirement_lump_sum))
        print(money_line("Net Worth at Retirement:", data.net_worth_at_retirement))

        print_section("RETIREMENT INCOME")
        print(money_line("Annual Withdrawal:", data.annual_withdrawal))
        print(money_line("Annual Rental Income:", data.annual_rental_income))
        print(money_line("Annual Debt Service:", -data.annual_debt_service))
        print(money_line("Projected Passive Income:", data.projected_passive_income))
        print(money_line("Required Income:", data.required_annual_income))
        print(rate_line("Percentage of Target:", data.percentage_of_target))

        if self.yearly:
            print_section("BY YEAR")
            print(f"  {'Age':<5} {'Assets':>18} {'Liabilities':>18} {'Net Worth':>18} {'Real':>18}")
            for y in self.yearly:
                print(f"  {y.age:<5} ${y.assets:>17,.2f} ${y.liabilities:>17,.2f} "
                      f"${y.net_worth:>17,.2f} ${y.real_net_worth:>17,.2f}")

        print()
        print("=" * 60)
        label = 'ANNUAL SURPLUS:' if data.status == 'surplus' else 'ANNUAL DEFICIT:'
        print(f"{label:^44} ${abs(data.annual_surplus_deficit):>14,.2f}")
        print("=" * 60)
        print()


class AmortizationRenderer(BaseRenderer):
    """Renderer for a loan repayment schedule.

    Prints one row per year by default, or every payment with `monthly=True`.
    """

    def __init__(self, loan: Optional[LoanTerms] = None, monthly: bool = False):
        self.loan = loan
        self.monthly = monthly

    def render(self, data: List[AmortizationEntry]) -> None:
        print_banner("AMORTIZATION SCHEDULE", 80)
        if self.loan is not None:
            print(money_line("Principal:", self.loan.principal))
            print(rate_line("Annual Rate:", self.loan.annual_rate))
            print(f"  {'Term:':<40} {self.loan.term_years:>9} years")

        if not data:
            print()
            print("  Nothing to repay.")
            print()
            return

        period = 'Payment' if self.monthly else 'Year'
        print()
        print(f"  {period:<8} {'Paid':>16} {'Principal':>16} {'Interest':>16} {'Balance':>16}")
        print(f"  {'-' * 8} {'-' * 16} {'-' * 16} {'-' * 16} {'-' * 16}")

        if self.monthly:
            for e in data:
                print(f"  {e.payment_number:<8} ${e.payment:>15,.2f} ${e.principal:>15,.2f} "
                      f"${e.interest:>15,.2f} ${e.remaining_balance:>15,.2f}")
        else:
            for year, entries in self._by_year(data):
                paid = sum(e.payment for e in entries)
                principal = sum(e.principal for e in entries)
                interest = sum(e.interest for e in entries)
                print(f"  {year:<8} ${paid:>15,.2f} ${principal:>15,.2f} "
                      f"${interest:>15,.2f} ${entries[-1].remaining_balance:>15,.2f}")

        total_interest = sum(e.interest for e in data)
        print()
        print("=" * 80)
        print(money_line("Total Paid:", sum(e.payment for e in data)))
        print(money_line("Total Interest:", total_interest))
        print(f"  {'Payments:':<40} {len(data):>15}")
        print("=" * 80)
        print()

    @staticmethod
    def _by_year(data: List[AmortizationEntry]):
        for start in range(0, len(data), 12):
            yield start // 12 + 1, data[start:start + 12]


class ServiceabilityRenderer(BaseRenderer):
    """Renderer for a loan serviceability assessment, with the monthly position behind it."""

    def __init__(self, surplus: Optional[MonthlySurplus] = None):
        self.surplus = surplus

    def render(self, data: ServiceabilityAssessment) -> None:
        print_banner("SERVICEABILITY ASSESSMENT")

        if self.surplus is not None:
            s = self.surplus
            print_section("MONTHLY POSITION")
            print(money_line("Total Income:", s.total_income))
            print(money_line("Living Expenses:", -s.living_expenses))
            print(money_line("Tax:", -s.tax))
            if s.debt_repayment > 0:
                print(money_line("Study Debt Repayment:", -s.debt_repayment))
            if s.property_expenses > 0:
                print(money_line("Property Expenses:", -s.property_expenses))
            print(money_line("Loan Repayments:", -s.loan_repayments))
            print(f"  {'-' * 40}")
            print(money_line("Monthly Surplus:", s.surplus))
            print(rate_line("Savings Rate:", s.savings_rate))

        print_section("PROPOSED LOAN")
        print(money_line("Principal:", data.loan.principal))
        print(rate_line("Annual Rate:", data.loan.annual_rate))
        print(money_line("Monthly Repayment:", data.monthly_repayment))
        print(money_line("Total Monthly Commitments:", data.total_monthly_commitments))
        print(rate_line("Serviceability Ratio:", data.serviceability_ratio))
        print(money_line("Buffer Remaining:", data.actual_buffer))
        print(money_line(f"Repayment at {data.stress_test_rate:.2%}:", data.stress_test_repayment))
        print(money_line("Surplus After Loan:", data.net_surplus_after_loan))

        print()
        print("=" * 60)
        print(f"{'ASSESSMENT:':^44} {data.assessment:>15}")
        print("=" * 60)
        for reason in data.reasons:
            print(f"  - {reason}")
        print()


# Registry mapping mode names to renderer classes
RENDERER_REGISTRY = {
    'TaxDetails': TaxDetailsRenderer,
    'Optimization': OptimizationRenderer,
    'Retirement': RetirementRenderer,
    'NetWorth': NetWorthRenderer,
    'Amortization': AmortizationRenderer,
    'Serviceability': ServiceabilityRenderer,
}
