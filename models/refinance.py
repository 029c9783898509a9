"""
refinance.py

Refinance comparison: existing loan vs. a new loan on the current balance.

Outputs:
- new monthly payment (via the amortization engine)
- monthly savings (negative = the new loan costs more; not an error)
- break-even months = closing costs / monthly savings, only when savings > 0
- total interest remaining on the old loan vs. the new loan
- interest savings and net lifetime savings after closing costs
"""

from dataclasses import dataclass
from typing import Dict, Optional

from config.reference_data import get_reference_data
from models.amortization import level_payment
from models.errors import ValidationError
from models.types import ResultMixin, require_member, require_non_negative


EXCELLENT_BREAK_EVEN_MONTHS = 24
LONG_BREAK_EVEN_MONTHS = 60


@dataclass(frozen=True)
class RefinanceResult(ResultMixin):
    new_monthly_payment: float
    monthly_savings: float
    break_even_months: Optional[float]
    break_even_applicable: bool
    total_interest_old: float
    total_interest_new: float
    interest_savings: float
    total_savings: float
    recommendation: str


class RefinanceAnalyzer:
    """
    Parameters:
        current_balance: outstanding principal today
        current_rate_pct: rate on the existing loan (percent)
        current_monthly_payment: existing P&I payment
        remaining_term_years: years left on the existing loan
        new_rate_pct: rate offered on the new loan (percent)
        new_term_years: term of the new loan (one of the offered fixed terms)
        closing_costs: upfront cost of refinancing
    """

    def __init__(
        self,
        current_balance: float,
        current_rate_pct: float,
        current_monthly_payment: float,
        remaining_term_years: int,
        new_rate_pct: float,
        new_term_years: int,
        closing_costs: float = 0.0,
    ):
        if current_balance is None or current_balance <= 0:
            raise ValidationError("current_balance must be positive", field="current_balance")
        if remaining_term_years is None or remaining_term_years <= 0:
            raise ValidationError(
                "remaining_term_years must be positive", field="remaining_term_years"
            )
        require_non_negative({
            "current_rate_pct": current_rate_pct,
            "current_monthly_payment": current_monthly_payment,
            "new_rate_pct": new_rate_pct,
            "closing_costs": closing_costs,
        })
        require_member("new_term_years", new_term_years, get_reference_data().fixed_term_years)

        self.current_balance = current_balance
        self.current_rate_pct = current_rate_pct
        self.current_monthly_payment = current_monthly_payment
        self.remaining_term_years = remaining_term_years
        self.new_rate_pct = new_rate_pct
        self.new_term_years = new_term_years
        self.closing_costs = closing_costs

    # ----------------------------------------------------------
    # Core comparison
    # ----------------------------------------------------------

    def new_monthly_payment(self) -> float:
        return round(
            level_payment(self.current_balance, self.new_rate_pct, self.new_term_years * 12), 2
        )

    def monthly_savings(self) -> float:
        return round(round(self.current_monthly_payment, 2) - self.new_monthly_payment(), 2)

    def break_even_months(self) -> Optional[float]:
        """
        None when there are no monthly savings to recover closing costs with.
        """
        savings = self.monthly_savings()
        if savings <= 0:
            return None
        return self.closing_costs / savings

    def total_interest_old(self) -> float:
        months = self.remaining_term_years * 12
        return round(self.current_monthly_payment, 2) * months - self.current_balance

    def total_interest_new(self) -> float:
        months = self.new_term_years * 12
        return self.new_monthly_payment() * months - self.current_balance

    def analyze(self) -> RefinanceResult:
        savings = self.monthly_savings()
        break_even = self.break_even_months()
        interest_old = self.total_interest_old()
        interest_new = self.total_interest_new()
        interest_savings = interest_old - interest_new

        return RefinanceResult(
            new_monthly_payment=self.new_monthly_payment(),
            monthly_savings=savings,
            break_even_months=break_even,
            break_even_applicable=break_even is not None,
            total_interest_old=interest_old,
            total_interest_new=interest_new,
            interest_savings=interest_savings,
            total_savings=interest_savings - self.closing_costs,
            recommendation=self._recommend(savings, break_even),
        )

    def _recommend(self, savings: float, break_even: Optional[float]) -> str:
        if savings <= 0 or break_even is None:
            return "Refinancing may not provide savings at this time."
        if break_even > LONG_BREAK_EVEN_MONTHS:
            return "Consider if you plan to stay in the home long enough to break even."
        if break_even <= EXCELLENT_BREAK_EVEN_MONTHS:
            return "Excellent opportunity to save with refinancing."
        return "Good refinancing opportunity if you plan to stay in the home."

    def summary(self) -> Dict:
        r = self.analyze()
        return {
            "new_monthly_payment": r.new_monthly_payment,
            "monthly_savings": r.monthly_savings,
            "break_even_months": round(r.break_even_months, 1) if r.break_even_months is not None else None,
            "break_even_applicable": r.break_even_applicable,
            "total_interest_old": round(r.total_interest_old, 2),
            "total_interest_new": round(r.total_interest_new, 2),
            "interest_savings": round(r.interest_savings, 2),
            "total_savings": round(r.total_savings, 2),
            "recommendation": r.recommendation,
        }
