"""Investment property helpers: rent, yield, cashflow and negative gearing."""

from typing import Dict

from model.ProjectionData import NegativeGearingResult, PropertyCashflow
from model.errors import require_non_negative, require_range
from model.money import round_money, round_rate

WEEKS_PER_YEAR = 52


def annual_rent(weekly_rent: float) -> float:
    require_non_negative("weekly_rent", weekly_rent)
    return round_money(weekly_rent * WEEKS_PER_YEAR)


def rental_yield(annual_rent_amount: float, property_value: float) -> float:
    """Gross yield as a ratio (0.05 = 5%). Zero when the property has no value."""
    require_non_negative("annual_rent", annual_rent_amount)
    if property_value <= 0:
        return 0.0
    return round_rate(annual_rent_amount / property_value)


def property_cashflow(monthly_rent: float, monthly_loan_payment: float,
                      monthly_expenses: float = 0.0, maintenance_reserve: float = 0.01,
                      management_fee: float = 0.07, property_value: float = 0.0) -> PropertyCashflow:
    """Net monthly cashflow of a rental property.

    Maintenance is reserved as a yearly share of the property value and the
    management fee is a share of the rent.
    """
    for name, value in (('monthly_rent', monthly_rent), ('monthly_loan_payment', monthly_loan_payment),
                        ('monthly_expenses', monthly_expenses), ('property_value', property_value)):
        require_non_negative(name, value)
    require_range("maintenance_reserve", maintenance_reserve, 0, 1)
    require_range("management_fee", management_fee, 0, 1)

    maintenance = property_value * maintenance_reserve / 12
    fee = monthly_rent * management_fee
    net = monthly_rent - monthly_loan_payment - monthly_expenses - maintenance - fee

    return PropertyCashflow(
        monthly_rent=round_money(monthly_rent),
        monthly_loan_payment=round_money(monthly_loan_payment),
        monthly_expenses=round_money(monthly_expenses),
        monthly_maintenance=round_money(maintenance),
        monthly_management_fee=round_money(fee),
        net_monthly_cashflow=round_money(net),
    )


def negative_gearing(annual_rental_income: float, expenses: Dict[str, float],
                     marginal_rate: float) -> NegativeGearingResult:
    """Tax benefit of a loss-making rental property.

    `expenses` maps expense names (interest, repairs, depreciation, ...) to
    annual amounts. Only a net loss produces a benefit.
    """
    require_non_negative("annual_rental_income", annual_rental_income)
    require_range("marginal_rate", marginal_rate, 0, 1)
    for name, amount in expenses.items():
        require_non_negative(f"expenses[{name}]", amount)

    total_expenses = sum(expenses.values())
    net_loss = max(0.0, total_expenses - annual_rental_income)
    return NegativeGearingResult(
        total_rental_income=round_money(annual_rental_income),
        total_expenses=round_money(total_expenses),
        net_loss=round_money(net_loss),
        tax_benefit=round_money(net_loss * marginal_rate),
    )
