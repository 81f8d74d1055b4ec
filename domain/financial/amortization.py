"""Monthly loan amortization schedules."""
from __future__ import annotations

from typing import Dict, List, Tuple, Union

import pandas as pd

from .constants import MAX_PERIOD_MONTHS, MONTHS_PER_YEAR
from .models import InstallmentStyle, to_number, to_whole_number

SCHEDULE_COLUMNS = ["month", "installment", "interest", "principal", "balance"]


def monthly_rate(annual_rate_percent: float) -> float:
    return to_number(annual_rate_percent) / 100 / MONTHS_PER_YEAR


def annuity_payment(principal: float, rate: float, months: int) -> float:
    """Constant payment that repays ``principal`` over ``months`` at periodic ``rate``."""
    if months <= 0:
        return principal
    if rate == 0:
        return principal / months
    try:
        discount = (1 + rate) ** -months
        return principal * rate / (1 - discount)
    except ZeroDivisionError:
        return principal / months
    except OverflowError:
        return principal * rate


def normalise_term(
    period_months: object,
    grace_months: object,
    max_period_months: int = MAX_PERIOD_MONTHS,
) -> Tuple[int, int]:
    """Clamp the loan term into ``[1, max_period_months]`` and grace to ``[0, period - 1]``."""
    period = to_whole_number(period_months, 1)
    period = min(max(period, 1), max(1, max_period_months))
    grace = min(max(0, to_whole_number(grace_months)), period - 1)
    return period, grace


def build_amortization_schedule(
    loan_amount: float,
    annual_rate_percent: float,
    period_months: int,
    grace_months: int = 0,
    style: InstallmentStyle = InstallmentStyle.EQUAL_INSTALLMENT,
    payoff_threshold: float = 1.0,
    max_period_months: int = MAX_PERIOD_MONTHS,
) -> pd.DataFrame:
    """Build the month-by-month repayment table for one loan.

    Grace months carry interest only. Once the remaining balance would drop
    below ``payoff_threshold``, or on the final month, the whole balance is
    repaid so the table always ends at exactly zero. Terms longer than
    ``max_period_months`` are cut to that length.
    """
    period, grace = normalise_term(period_months, grace_months, max_period_months)
    loan = max(0.0, to_number(loan_amount))
    rate = monthly_rate(annual_rate_percent)
    repayment_months = period - grace

    rows: List[Dict[str, Union[int, float]]] = []
    if loan <= 0:
        for month in range(1, period + 1):
            rows.append(
                {"month": month, "installment": 0.0, "interest": 0.0, "principal": 0.0, "balance": 0.0}
            )
        return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)

    fixed_payment = annuity_payment(loan, rate, repayment_months)
    fixed_principal = loan / repayment_months
    balance = loan

    for month in range(1, period + 1):
        interest = balance * rate
        principal = 0.0

        if month <= grace:
            installment = interest
        elif style == InstallmentStyle.EQUAL_PRINCIPAL:
            principal = fixed_principal
            installment = principal + interest
        elif rate == 0:
            principal = balance / (period - (month - 1))
            installment = principal
        else:
            installment = fixed_payment
            principal = installment - interest

        if month > grace and (balance - principal < payoff_threshold or month == period):
            principal = balance
            installment = principal + interest

        balance = max(0.0, balance - principal)
        rows.append(
            {
                "month": month,
                "installment": installment,
                "interest": interest,
                "principal": principal,
                "balance": balance,
            }
        )

    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)


def yearly_loan_payments(schedule: pd.DataFrame, years: int) -> List[float]:
    """Sum installments per 12-month block; months past the loan term pay nothing."""
    payments = [0.0] * years
    if schedule.empty:
        return payments
    year_index = (schedule["month"] - 1) // MONTHS_PER_YEAR
    totals = schedule.groupby(year_index)["installment"].sum()
    for index, value in totals.items():
        if 0 <= index < years:
            payments[int(index)] = float(value)
    return payments


__all__ = [
    "SCHEDULE_COLUMNS",
    "annuity_payment",
    "build_amortization_schedule",
    "monthly_rate",
    "normalise_term",
    "yearly_loan_payments",
]
