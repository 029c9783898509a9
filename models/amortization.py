"""
amortization.py

Fixed-rate level-payment amortization.

This module is the single home of the annuity math used across the engine:
- monthly_rate(): annual percent -> monthly decimal rate
- level_payment(): P&I payment for a principal, rate and term
- annuity_factor(): principal carried by one dollar of monthly payment
  (affordability solves for the loan with it)
- principal_from_payment(): inverse of level_payment
- apply_payment(): one month's interest / principal split on a balance

AmortizationEngine builds the month-by-month schedule on top of these.
The final entry of a schedule pays off exactly the remaining balance, so
the principal portions always sum to the original principal and the last
remaining balance is exactly 0.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from models.errors import ComputationError
from models.types import LoanTerms, ResultMixin


# ----------------------------------------------------------
# Shared formulas
# ----------------------------------------------------------

def _check_inputs(principal: float, annual_rate_pct: float, term_months: int) -> None:
    if principal is None or principal <= 0:
        raise ComputationError(f"principal must be > 0 (got {principal})", field="principal")
    if term_months is None or term_months <= 0:
        raise ComputationError(f"term must be > 0 months (got {term_months})", field="term_months")
    if annual_rate_pct is None or annual_rate_pct < 0:
        raise ComputationError(
            f"annual rate must be >= 0 (got {annual_rate_pct})", field="annual_rate_pct"
        )


def monthly_rate(annual_rate_pct: float) -> float:
    return annual_rate_pct / 100.0 / 12.0


def level_payment(principal: float, annual_rate_pct: float, term_months: int) -> float:
    """
    Standard fixed-rate payment:
      M = P * i(1+i)^N / ((1+i)^N - 1),  i = r/100/12
    Zero rate degenerates to P / N.
    """
    _check_inputs(principal, annual_rate_pct, term_months)
    i = monthly_rate(annual_rate_pct)
    n = term_months

    if i == 0:
        return principal / n

    growth = (1 + i) ** n
    return principal * i * growth / (growth - 1)


def annuity_factor(annual_rate_pct: float, term_months: int) -> float:
    """
    Principal supported by one dollar of monthly payment:
      ((1+i)^N - 1) / (i(1+i)^N), or N when i = 0.
    """
    if term_months is None or term_months <= 0:
        raise ComputationError(f"term must be > 0 months (got {term_months})", field="term_months")
    if annual_rate_pct is None or annual_rate_pct < 0:
        raise ComputationError(
            f"annual rate must be >= 0 (got {annual_rate_pct})", field="annual_rate_pct"
        )

    i = monthly_rate(annual_rate_pct)
    if i == 0:
        return float(term_months)

    growth = (1 + i) ** term_months
    return (growth - 1) / (i * growth)


def principal_from_payment(payment: float, annual_rate_pct: float, term_months: int) -> float:
    """
    Inverse of level_payment: P = M * ((1+i)^N - 1) / (i(1+i)^N).
    """
    if payment is None or payment < 0:
        raise ComputationError(f"payment must be >= 0 (got {payment})", field="payment")
    return payment * annuity_factor(annual_rate_pct, term_months)


def apply_payment(
    balance: float,
    rate: float,
    payment: float,
    final: bool = False,
) -> Tuple[float, float, float]:
    """
    Split one payment into (interest, principal, new_balance).

    rate is the monthly decimal rate. On the final payment principal is the
    whole remaining balance, absorbing any floating-point drift.
    """
    interest = balance * rate
    principal = payment - interest

    if final:
        principal = balance
        return interest, principal, 0.0

    return interest, principal, balance - principal


# ----------------------------------------------------------
# Schedule
# ----------------------------------------------------------

@dataclass(frozen=True)
class AmortizationEntry(ResultMixin):
    payment_index: int
    payment: float
    interest_portion: float
    principal_portion: float
    remaining_balance: float
    cumulative_interest: float


class AmortizationEngine:
    """
    Parameters:
        principal: loan amount (> 0)
        annual_rate_pct: annual interest rate in percent (e.g., 7.25), may be 0
        term_months: number of monthly payments (>= 1)

    Example:
        engine = AmortizationEngine(520_000, 7.25, 360)
        engine.monthly_payment()      -> ~3547.32
        engine.schedule()[0]          -> interest ~3141.67, principal ~405.65
    """

    def __init__(self, principal: float, annual_rate_pct: float, term_months: int):
        _check_inputs(principal, annual_rate_pct, term_months)
        self.principal = principal
        self.annual_rate_pct = annual_rate_pct
        self.term_months = term_months
        self._payment = level_payment(principal, annual_rate_pct, term_months)

    @classmethod
    def for_loan(cls, terms: LoanTerms) -> "AmortizationEngine":
        return cls(terms.principal, terms.annual_rate_pct, terms.term_months)

    @classmethod
    def from_years(cls, principal: float, annual_rate_pct: float, term_years: int) -> "AmortizationEngine":
        return cls(principal, annual_rate_pct, term_years * 12)

    def monthly_payment(self) -> float:
        return self._payment

    def iter_schedule(self) -> Iterator[AmortizationEntry]:
        """
        Lazily yield one entry per month. Each call starts a fresh walk.
        """
        rate = monthly_rate(self.annual_rate_pct)
        balance = self.principal
        cumulative_interest = 0.0

        for index in range(1, self.term_months + 1):
            final = index == self.term_months
            interest, principal, balance = apply_payment(balance, rate, self._payment, final=final)
            cumulative_interest += interest

            yield AmortizationEntry(
                payment_index=index,
                payment=interest + principal,
                interest_portion=interest,
                principal_portion=principal,
                remaining_balance=balance,
                cumulative_interest=cumulative_interest,
            )

            if balance == 0.0:
                break

    def schedule(self) -> List[AmortizationEntry]:
        return list(self.iter_schedule())

    def total_interest(self) -> float:
        total = 0.0
        for entry in self.iter_schedule():
            total = entry.cumulative_interest
        return total

    def total_paid(self) -> float:
        return self.principal + self.total_interest()

    def balance_after(self, months: int) -> float:
        """
        Remaining balance after the given number of payments.
        """
        if months <= 0:
            return self.principal
        balance = self.principal
        for entry in self.iter_schedule():
            balance = entry.remaining_balance
            if entry.payment_index >= months:
                break
        return balance

    def yearly_totals(self) -> List[Dict]:
        """
        Schedule aggregated by loan year, for charting.
        """
        rows = []
        interest_ytd = 0.0
        principal_ytd = 0.0

        for entry in self.iter_schedule():
            interest_ytd += entry.interest_portion
            principal_ytd += entry.principal_portion

            if entry.payment_index % 12 == 0 or entry.remaining_balance == 0.0:
                rows.append({
                    "year": (entry.payment_index - 1) // 12 + 1,
                    "interest": round(interest_ytd, 2),
                    "principal": round(principal_ytd, 2),
                    "ending_balance": round(entry.remaining_balance, 2),
                })
                interest_ytd = 0.0
                principal_ytd = 0.0

        return rows

    def summary(self, include_schedule: bool = False) -> Dict:
        entries = self.schedule()
        total_interest = entries[-1].cumulative_interest if entries else 0.0

        result = {
            "loan_amount": round(self.principal, 2),
            "annual_rate_pct": self.annual_rate_pct,
            "term_months": self.term_months,
            "monthly_payment": round(self._payment, 2),
            "total_interest": round(total_interest, 2),
            "total_paid": round(self.principal + total_interest, 2),
            "number_of_payments": len(entries),
        }
        if include_schedule:
            result["schedule"] = [round_entry(e) for e in entries]
        return result


def round_entry(entry: AmortizationEntry) -> Dict:
    return {
        "payment_index": entry.payment_index,
        "payment": round(entry.payment, 2),
        "interest_portion": round(entry.interest_portion, 2),
        "principal_portion": round(entry.principal_portion, 2),
        "remaining_balance": round(entry.remaining_balance, 2),
        "cumulative_interest": round(entry.cumulative_interest, 2),
    }
