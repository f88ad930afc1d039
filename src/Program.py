import sys
import argparse
import logging
from tax.TaxRuleDetails import TaxRuleDetails
from model.ClientSpec import ClientSpec
from model.errors import InvalidInputError
from calc.tax_calculator import TaxCalculator
from calc.time_value import amortization_schedule
from calc.retirement_calculator import project_retirement
from calc.net_worth_calculator import project_net_worth, project_net_worth_by_year
from calc.serviceability_calculator import assess_serviceability, monthly_surplus
from render.renderers import (
    TaxDetailsRenderer,
    OptimizationRenderer,
    RetirementRenderer,
    NetWorthRenderer,
    AmortizationRenderer,
    ServiceabilityRenderer,
    RENDERER_REGISTRY,
)

logger = logging.getLogger(__name__)


def run_mode(mode: str, spec: ClientSpec, rule_details: TaxRuleDetails, tax_year: str = None) -> None:
    """Calculate and render one report for a client.

    Args:
        mode: Name of the report (a key of RENDERER_REGISTRY)
        spec: The client's scenario
        rule_details: Loaded tax rule tables
        tax_year: Tax year to use; defaults to the spec's taxYear, then the latest table
    """
    rules = rule_details.rules_for(tax_year or spec.tax_year)
    logger.debug("Running %s with %s rules", mode, rules.tax_year)

    if mode == 'TaxDetails':
        result = TaxCalculator(rules).calculate(spec.tax_input())
        TaxDetailsRenderer(rules.tax_year).render(result)
    elif mode == 'Optimization':
        calculator = TaxCalculator(rules)
        tax_input = spec.tax_input()
        result = calculator.optimize(tax_input, spec.optimization)
        suggestions = calculator.suggest(tax_input, spec.tax_profile())
        OptimizationRenderer(suggestions).render(result)
    elif mode == 'Retirement':
        RetirementRenderer().render(project_retirement(spec.retirement_input(), rules))
    elif mode == 'NetWorth':
        net_worth_input = spec.net_worth_input()
        yearly = project_net_worth_by_year(net_worth_input, spec.assumptions)
        NetWorthRenderer(yearly).render(project_net_worth(net_worth_input, spec.assumptions))
    elif mode == 'Amortization':
        loan = spec.loan_terms()
        schedule = amortization_schedule(loan.principal, loan.annual_rate, loan.term_years)
        AmortizationRenderer(loan).render(schedule)
    elif mode == 'Serviceability':
        tax_input = spec.tax_input()
        surplus = monthly_surplus(spec.net_worth_input(), rules,
                                  investment_income=tax_input.franked_dividends,
                                  outstanding_debt_balance=tax_input.outstanding_debt_balance)
        ServiceabilityRenderer(surplus).render(assess_serviceability(surplus, spec.loan_terms()))
    else:
        raise InvalidInputError("mode", f"must be one of {list(RENDERER_REGISTRY)}")


def main():
    parser = argparse.ArgumentParser(
        description='Australian tax and financial projection calculator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  TaxDetails     Print the tax breakdown for the client's income (default)
  Optimization   Compare current tax with the optimization strategies applied
  Retirement     Print the year-by-year retirement savings projection
  NetWorth       Print the net worth projection to retirement
  Amortization   Print the repayment schedule of the client's loan
  Serviceability Assess whether the client can service their loan

Examples:
  python src/Program.py example
  python src/Program.py example --mode Optimization
  python src/Program.py example --mode NetWorth --tax-year 2023-24
  python src/Program.py example --mode Amortization --verbose
  python src/Program.py example --mode Serviceability
        """
    )
    parser.add_argument('program_name', help='Name of the program (folder in input-parameters)')
    parser.add_argument('--mode', '-m',
                        choices=list(RENDERER_REGISTRY.keys()),
                        default='TaxDetails',
                        help='Output mode (default: TaxDetails)')
    parser.add_argument('--tax-year', '-t',
                        help='Tax year of the rule table to use, e.g. 2024-25')
    parser.add_argument('--verbose', '-v',
                        action='store_true',
                        help='Log calculation details to stderr')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        spec = ClientSpec.load_program(args.program_name)
        run_mode(args.mode, spec, TaxRuleDetails(), args.tax_year)
    except InvalidInputError as e:
        print(f"Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
