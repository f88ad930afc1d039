"""Financial Projection Tools for MCP Server.

This module provides the tool implementations that wrap the tax and
projection calculators and expose their results through MCP.
"""

import os
import sys
import logging
from dataclasses import asdict, replace
from typing import Dict, Optional

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tax.TaxRuleDetails import TaxRuleDetails
from model.ClientSpec import ClientSpec
from calc.tax_calculator import TaxCalculator
from calc.time_value import amortization_schedule, loan_payment
from calc.retirement_calculator import project_retirement
from calc.net_worth_calculator import project_net_worth, project_net_worth_by_year
from calc.serviceability_calculator import assess_serviceability, monthly_surplus
from model.ProjectionData import LoanTerms
from model.money import round_money

LOAN_FIELDS = ("principal", "annual_rate", "term_years")

logger = logging.getLogger(__name__)


class FinancialProjectionTools:
    """Tools that wrap the calculators for one client program."""

    def __init__(self, base_path: str, program_name: str, rule_details: Optional[TaxRuleDetails] = None):
        """Initialize with paths and load the client's scenario.

        Args:
            base_path: Path to the project root directory
            program_name: Name of the program folder in input-parameters
            rule_details: Loaded tax rule tables (read from base_path/reference when omitted)
        """
        self.base_path = base_path
        self.program_name = program_name
        self.spec = ClientSpec.load_program(program_name, os.path.join(base_path, 'input-parameters'))
        self.rule_details = rule_details or TaxRuleDetails(
            os.path.join(base_path, 'reference', 'tax-rules.json'))

    def _rules(self, tax_year: Optional[str] = None):
        return self.rule_details.rules_for(tax_year or self.spec.tax_year)

    def get_tax_summary(self, tax_year: Optional[str] = None) -> dict:
        """Tax breakdown for the client's income."""
        rules = self._rules(tax_year)
        result = TaxCalculator(rules).calculate(self.spec.tax_input())
        return {"tax_year": rules.tax_year, **asdict(result)}

    def compare_tax_optimization(self, tax_year: Optional[str] = None,
                                 overrides: Optional[dict] = None) -> dict:
        """Current vs optimized tax, plus suggested strategies.

        Args:
            tax_year: Tax year to use (defaults to the program's tax year)
            overrides: Optional strategy amounts replacing those in the program,
                       keyed by additional_deductions, negative_gearing_opportunity
                       or super_contributions
        """
        rules = self._rules(tax_year)
        calculator = TaxCalculator(rules)
        strategies = self.spec.optimization
        if overrides:
            strategies = replace(strategies, **overrides)

        tax_input = self.spec.tax_input()
        result = calculator.optimize(tax_input, strategies)
        suggestions = calculator.suggest(tax_input, self.spec.tax_profile())
        return {
            "tax_year": rules.tax_year,
            **asdict(result),
            "suggestions": [asdict(s) for s in suggestions],
        }

    def get_retirement_projection(self, age: Optional[int] = None) -> dict:
        """Year-by-year retirement savings, or a single age when given."""
        projections = project_retirement(self.spec.retirement_input(), self._rules())
        if age is not None:
            match = next((p for p in projections if p.age == age), None)
            if match is None:
                return {"error": f"Age {age} is outside the projection "
                                 f"({projections[0].age}-{projections[-1].age})"}
            return asdict(match)

        final = projections[-1]
        return {
            "retirement_age": final.age,
            "balance_at_retirement": final.ending_balance,
            "real_value_at_retirement": final.real_value,
            "total_contributions": final.total_contributions,
            "total_returns": final.total_returns,
            "years": [asdict(p) for p in projections],
        }

    def get_net_worth_projection(self, by_year: bool = False) -> dict:
        """Net worth at retirement, optionally with every year along the way."""
        net_worth_input = self.spec.net_worth_input()
        result = asdict(project_net_worth(net_worth_input, self.spec.assumptions))
        if by_year:
            result["by_year"] = [asdict(y) for y in
                                 project_net_worth_by_year(net_worth_input, self.spec.assumptions)]
        return result

    def get_amortization_schedule(self, summary_only: bool = False) -> dict:
        """Repayment schedule for the program's loan."""
        loan = self.spec.loan_terms()
        schedule = amortization_schedule(loan.principal, loan.annual_rate, loan.term_years)
        result = {
            "loan": asdict(loan),
            "monthly_payment": loan_payment(loan.principal, loan.annual_rate, loan.term_years),
            "number_of_payments": len(schedule),
            "total_paid": round_money(sum(e.payment for e in schedule)),
            "total_interest": round_money(sum(e.interest for e in schedule)),
        }
        if not summary_only:
            result["schedule"] = [asdict(e) for e in schedule]
        return result

    def assess_serviceability(self, tax_year: Optional[str] = None,
                              loan_overrides: Optional[dict] = None) -> dict:
        """Monthly surplus and a serviceability check on the program's loan.

        `loan_overrides` replaces principal, annual_rate or term_years of the
        program's loan, or supplies all three when the program has none.
        """
        rules = self._rules(tax_year)
        loan_overrides = loan_overrides or {}
        if self.spec.loan is None and set(LOAN_FIELDS) <= set(loan_overrides):
            loan = LoanTerms(**loan_overrides)
        else:
            loan = replace(self.spec.loan_terms(), **loan_overrides)

        tax_input = self.spec.tax_input()
        surplus = monthly_surplus(self.spec.net_worth_input(), rules,
                                  investment_income=tax_input.franked_dividends,
                                  outstanding_debt_balance=tax_input.outstanding_debt_balance)
        return {
            "tax_year": rules.tax_year,
            "monthly_surplus": asdict(surplus),
            **asdict(assess_serviceability(surplus, loan)),
        }


class MultiProgramTools:
    """Manager for multiple client programs.

    Discovers all available programs and caches their scenarios,
    allowing queries to specify which program to use.
    """

    def __init__(self, base_path: str, default_program: Optional[str] = None):
        """Initialize and discover all available programs.

        Args:
            base_path: Path to the project root directory
            default_program: Default program to use when none specified
        """
        self.base_path = base_path
        self.programs: Dict[str, FinancialProjectionTools] = {}
        self.default_program = default_program
        self.rule_details = TaxRuleDetails(os.path.join(base_path, 'reference', 'tax-rules.json'))
        self._discover_programs()

    def _discover_programs(self):
        """Discover and load all available programs."""
        input_params_path = os.path.join(self.base_path, 'input-parameters')

        if not os.path.exists(input_params_path):
            return

        for name in sorted(os.listdir(input_params_path)):
            program_dir = os.path.join(input_params_path, name)
            spec_path = os.path.join(program_dir, 'spec.json')

            if os.path.isdir(program_dir) and os.path.exists(spec_path):
                try:
                    self.programs[name] = FinancialProjectionTools(self.base_path, name, self.rule_details)
                except (ValueError, OSError) as e:
                    # Skip the broken program, keep serving the others
                    logger.warning("Failed to load program '%s': %s", name, e)

        # Set default if not specified
        if self.default_program is None and self.programs:
            self.default_program = list(self.programs.keys())[0]

    def _get_program(self, program: Optional[str] = None) -> FinancialProjectionTools:
        """Get the specified program or default."""
        program_name = program or self.default_program

        if program_name not in self.programs:
            available = list(self.programs.keys())
            raise ValueError(
                f"Program '{program_name}' not found. Available programs: {available}"
            )

        return self.programs[program_name]

    def list_programs(self) -> dict:
        """List all available programs."""
        programs_info = {}
        for name, tools in self.programs.items():
            programs_info[name] = {
                "client": tools.spec.name,
                "tax_year": tools.spec.tax_year,
                "current_age": tools.spec.client.get('current_age'),
                "retirement_age": tools.spec.client.get('retirement_age'),
                "annual_income": tools.spec.client.get('annual_income', 0),
            }

        return {
            "available_programs": list(self.programs.keys()),
            "default_program": self.default_program,
            "programs_info": programs_info
        }

    def reload_programs(self) -> dict:
        """Reload all programs from disk, refreshing the cache.

        Use this after adding, modifying, or removing program spec.json files
        to pick up changes without restarting the server.
        """
        old_programs = set(self.programs.keys())

        self.programs.clear()
        self.default_program = None
        self.rule_details = TaxRuleDetails(os.path.join(self.base_path, 'reference', 'tax-rules.json'))
        self._discover_programs()

        new_programs = set(self.programs.keys())

        return {
            "status": "success",
            "message": f"Reloaded {len(self.programs)} programs",
            "programs_loaded": list(self.programs.keys()),
            "default_program": self.default_program,
            "changes": {
                "added": sorted(new_programs - old_programs),
                "removed": sorted(old_programs - new_programs),
                "reloaded": sorted(old_programs & new_programs)
            }
        }

    def list_tax_years(self) -> dict:
        """Tax years that have a rule table."""
        latest = self.rule_details.latest()
        return {
            "tax_years": self.rule_details.tax_years(),
            "latest": latest.tax_year,
            "latest_version": latest.version,
            "effective_date": latest.effective_date,
        }

    def calculate_loan(self, principal: float, annual_rate: float, years: int) -> dict:
        """Repayment and totals for any loan, independent of a program."""
        schedule = amortization_schedule(principal, annual_rate, years)
        return {
            "principal": principal,
            "annual_rate": annual_rate,
            "years": years,
            "monthly_payment": loan_payment(principal, annual_rate, years),
            "number_of_payments": len(schedule),
            "total_paid": round_money(sum(e.payment for e in schedule)),
            "total_interest": round_money(sum(e.interest for e in schedule)),
        }

    def get_tax_summary(self, tax_year: Optional[str] = None, program: Optional[str] = None) -> dict:
        result = self._get_program(program).get_tax_summary(tax_year)
        result["program"] = program or self.default_program
        return result

    def compare_tax_optimization(self, tax_year: Optional[str] = None, overrides: Optional[dict] = None,
                                 program: Optional[str] = None) -> dict:
        result = self._get_program(program).compare_tax_optimization(tax_year, overrides)
        result["program"] = program or self.default_program
        return result

    def get_retirement_projection(self, age: Optional[int] = None, program: Optional[str] = None) -> dict:
        result = self._get_program(program).get_retirement_projection(age)
        result["program"] = program or self.default_program
        return result

    def get_net_worth_projection(self, by_year: bool = False, program: Optional[str] = None) -> dict:
        result = self._get_program(program).get_net_worth_projection(by_year)
        result["program"] = program or self.default_program
        return result

    def get_amortization_schedule(self, summary_only: bool = False, program: Optional[str] = None) -> dict:
        result = self._get_program(program).get_amortization_schedule(summary_only)
        result["program"] = program or self.default_program
        return result

    def assess_serviceability(self, tax_year: Optional[str] = None, loan_overrides: Optional[dict] = None,
                              program: Optional[str] = None) -> dict:
        result = self._get_program(program).assess_serviceability(tax_year, loan_overrides)
        result["program"] = program or self.default_program
        return result
