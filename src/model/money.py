"""Rounding helpers shared by every calculator.

Money is reported in cents and ratios to four decimal places (0.3200 = 32%).
"""


def round_money(amount: float) -> float:
    return round(amount, 2) + 0.0


def round_rate(rate: float) -> float:
    return round(rate, 4) + 0.0
