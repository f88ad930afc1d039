"""Tests for the time-value-of-money functions."""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.time_value import (
    future_value,
    future_value_of_annuity,
    future_value_of_growing_annuity,
    total_growth,
    loan_payment,
    max_borrowing_capacity,
    amortization_schedule,
    remaining_loan_balance,
)
from model.errors import InvalidInputError


class TestFutureValue:
    """Tests for lump sum and annuity growth."""

    def test_future_value(self):
        assert future_value(10000, 0.07, 10) == pytest.approx(19671.51, abs=0.01)

    def test_future_value_zero_years(self):
        assert future_value(10000, 0.07, 0) == 10000

    def test_future_value_negative_rate(self):
        assert future_value(10000, -0.1, 1) == pytest.approx(9000)

    def test_annuity(self):
        assert future_value_of_annuity(100, 0.06, 1, 12) == pytest.approx(1233.56, abs=0.01)

    def test_annuity_zero_rate(self):
        assert future_value_of_annuity(100, 0, 10, 12) == 12000

    def test_growing_annuity(self):
        assert future_value_of_growing_annuity(100, 0.05, 0.03, 10, 1) == pytest.approx(1424.89, abs=0.01)

    def test_growing_annuity_equal_rates(self):
        # P * n * (1 + r) ** (n - 1)
        assert future_value_of_growing_annuity(100, 0.05, 0.05, 10, 1) == pytest.approx(1551.33, abs=0.01)

    def test_growing_annuity_without_growth_matches_annuity(self):
        for rate, years, ppy in ((0.06, 5, 12), (0.08, 20, 1), (0.03, 12, 4)):
            assert future_value_of_growing_annuity(250, rate, 0, years, ppy) == pytest.approx(
                future_value_of_annuity(250, rate, years, ppy), abs=0.01)

    def test_total_growth(self):
        assert total_growth(10000, 500, 0.07, 20) == pytest.approx(299160.17, abs=0.01)

    @pytest.mark.parametrize("call, field", [
        (lambda: future_value(-1, 0.05, 10), 'present_value'),
        (lambda: future_value(100, 1.5, 10), 'rate'),
        (lambda: future_value(100, 0.05, 101), 'years'),
        (lambda: future_value_of_annuity(100, 0.05, 10, 0), 'payments_per_year'),
        (lambda: future_value_of_annuity(-5, 0.05, 10), 'payment'),
        (lambda: future_value_of_growing_annuity(100, 0.05, -2, 10), 'growth_rate'),
    ])
    def test_invalid_arguments_name_the_field(self, call, field):
        with pytest.raises(InvalidInputError) as exc:
            call()
        assert exc.value.field == field


class TestLoans:
    """Tests for loan repayments and borrowing capacity."""

    def test_loan_payment(self):
        assert loan_payment(300000, 0.045, 30) == pytest.approx(1520.06, abs=0.01)

    def test_loan_payment_zero_rate(self):
        assert loan_payment(100000, 0, 10) == pytest.approx(833.33, abs=0.01)

    def test_loan_payment_zero_principal(self):
        assert loan_payment(0, 0.05, 25) == 0

    def test_max_borrowing_capacity_inverts_payment(self):
        assert max_borrowing_capacity(1520.06, 0.045, 30) == pytest.approx(300000, abs=1)

    def test_max_borrowing_capacity_zero_rate(self):
        assert max_borrowing_capacity(1000, 0, 10) == 120000

    @pytest.mark.parametrize("args, field", [
        ((-1, 0.05, 30), 'principal'),
        ((100000, 1.5, 30), 'annual_rate'),
        ((100000, -0.01, 30), 'annual_rate'),
        ((100000, 0.05, 0), 'years'),
        ((100000, 0.05, 51), 'years'),
    ])
    def test_invalid_loan_arguments(self, args, field):
        with pytest.raises(InvalidInputError) as exc:
            loan_payment(*args)
        assert exc.value.field == field


class TestAmortization:
    """Tests for the amortization schedule and remaining balance."""

    def test_schedule_shape(self):
        schedule = amortization_schedule(100000, 0.06, 1)

        assert len(schedule) == 12
        assert [e.payment_number for e in schedule] == list(range(1, 13))
        assert schedule[0].interest == 500
        assert schedule[0].payment == pytest.approx(8606.64, abs=0.01)
        assert schedule[0].principal == pytest.approx(8106.64, abs=0.01)
        assert schedule[-1].remaining_balance == 0

    def test_schedule_repays_principal(self):
        schedule = amortization_schedule(250000, 0.055, 25)

        total_principal = sum(e.principal for e in schedule)
        total_interest = sum(e.interest for e in schedule)
        total_paid = sum(e.payment for e in schedule)
        assert total_principal == pytest.approx(250000, abs=0.01)
        assert total_paid == pytest.approx(250000 + total_interest, abs=0.01)
        assert len(schedule) * schedule[0].payment == pytest.approx(total_paid, rel=1e-4)
        assert all(e.remaining_balance >= 0 for e in schedule)
        assert schedule[-1].remaining_balance == 0

    def test_balance_decreases(self):
        schedule = amortization_schedule(50000, 0.08, 5)
        balances = [e.remaining_balance for e in schedule]
        assert balances == sorted(balances, reverse=True)

    def test_zero_rate_schedule(self):
        schedule = amortization_schedule(12000, 0, 1)

        assert len(schedule) == 12
        assert all(e.interest == 0 for e in schedule)
        assert all(e.payment == 1000 for e in schedule)
        assert schedule[-1].remaining_balance == 0

    def test_zero_principal_has_no_schedule(self):
        assert amortization_schedule(0, 0.05, 30) == []

    def test_remaining_balance_boundaries(self):
        assert remaining_loan_balance(300000, 0.045, 30, 0) == 300000
        assert remaining_loan_balance(300000, 0.045, 30, -2) == 300000
        assert remaining_loan_balance(300000, 0.045, 30, 30) == 0
        assert remaining_loan_balance(300000, 0.045, 30, 45) == 0

    def test_remaining_balance_matches_schedule(self):
        schedule = amortization_schedule(100000, 0.06, 1)
        assert remaining_loan_balance(100000, 0.06, 1, 0.5) == schedule[5].remaining_balance

    def test_remaining_balance_after_ten_years(self):
        remaining = remaining_loan_balance(300000, 0.045, 30, 10)
        schedule = amortization_schedule(300000, 0.045, 30)
        assert remaining == schedule[119].remaining_balance
        assert 0 < remaining < 300000

    def test_whole_number_float_term_matches_int_term(self):
        assert amortization_schedule(10000, 0.05, 3.0) == amortization_schedule(10000, 0.05, 3)
        assert loan_payment(10000, 0.05, 3.0) == loan_payment(10000, 0.05, 3)

    def test_fractional_term_schedule(self):
        schedule = amortization_schedule(10000, 0.05, 2.5)

        assert len(schedule) == 30
        assert schedule[-1].remaining_balance == 0
        assert sum(e.principal for e in schedule) == pytest.approx(10000, abs=0.01)

    def test_fractional_term_payment(self):
        r = 0.05 / 12
        growth = (1 + r) ** 30
        assert loan_payment(10000, 0.05, 2.5) == pytest.approx(10000 * r * growth / (growth - 1), abs=0.01)
        assert max_borrowing_capacity(loan_payment(10000, 0.05, 2.5), 0.05, 2.5) == pytest.approx(10000, abs=1)

    def test_fractional_term_remaining_balance(self):
        schedule = amortization_schedule(10000, 0.05, 2.5)

        assert remaining_loan_balance(10000, 0.05, 2.5, 1) == schedule[11].remaining_balance
        assert remaining_loan_balance(10000, 0.05, 3.0, 1) == remaining_loan_balance(10000, 0.05, 3, 1)
        # 2.49 years rounds to the final month
        assert remaining_loan_balance(10000, 0.05, 2.5, 2.49) == 0
