"""
extra_payments.py

Accelerated payoff with extra principal payments.

Plan kinds:
- "monthly": added to every payment (from start_year on)
- "yearly": added once a year, in month_of_year of each loan year
- "one_time": added once, in the first month of `year`

The level P&I payment stays the same; extras go straight to principal and
never overpay the remaining balance.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from models.amortization import AmortizationEngine, apply_payment, monthly_rate
from models.errors import ValidationError
from models.types import ResultMixin


PLAN_KINDS = ("monthly", "yearly", "one_time")


@dataclass(frozen=True)
class ExtraPaymentPlan:
    kind: str
    amount: float
    month_of_year: int = 1
    year: int = 1
    start_year: int = 1
    name: Optional[str] = None

    def __post_init__(self):
        if self.kind not in PLAN_KINDS:
            raise ValidationError(
                f"kind must be one of {list(PLAN_KINDS)} (got {self.kind})", field="kind"
            )
        if self.amount is None or self.amount < 0:
            raise ValidationError("amount must be >= 0", field="amount")
        if not 1 <= self.month_of_year <= 12:
            raise ValidationError("month_of_year must be between 1 and 12", field="month_of_year")
        if self.year < 1 or self.start_year < 1:
            raise ValidationError("year and start_year must be >= 1", field="year")

    def extra_for(self, month: int) -> float:
        year = (month - 1) // 12 + 1
        month_in_year = (month - 1) % 12 + 1

        if self.kind == "one_time":
            return self.amount if year == self.year and month_in_year == 1 else 0.0
        if year < self.start_year:
            return 0.0
        if self.kind == "monthly":
            return self.amount
        return self.amount if month_in_year == self.month_of_year else 0.0


@dataclass(frozen=True)
class PayoffResult(ResultMixin):
    monthly_payment: float
    total_interest: float
    total_paid: float
    payoff_months: int
    total_extra_paid: float


class ExtraPaymentsAnalyzer:
    """
    Parameters:
        principal: loan amount
        annual_rate_pct: annual rate in percent
        term_months: scheduled number of payments
        plans: extra payment plans applied together
    """

    def __init__(
        self,
        principal: float,
        annual_rate_pct: float,
        term_months: int,
        plans: Iterable[ExtraPaymentPlan] = (),
    ):
        self.engine = AmortizationEngine(principal, annual_rate_pct, term_months)
        self.plans = list(plans)

    def standard(self) -> PayoffResult:
        interest = self.engine.total_interest()
        return PayoffResult(
            monthly_payment=self.engine.monthly_payment(),
            total_interest=interest,
            total_paid=self.engine.principal + interest,
            payoff_months=self.engine.term_months,
            total_extra_paid=0.0,
        )

    def accelerated(self, plans: Optional[List[ExtraPaymentPlan]] = None) -> PayoffResult:
        plans = self.plans if plans is None else plans
        rate = monthly_rate(self.engine.annual_rate_pct)
        payment = self.engine.monthly_payment()
        term = self.engine.term_months

        balance = self.engine.principal
        total_interest = 0.0
        total_extra = 0.0
        month = 0

        while balance > 0 and month < term:
            month += 1
            final = month == term or (total_extra > 0 and payment >= balance * (1 + rate))
            interest, _, balance = apply_payment(balance, rate, payment, final=final)

            if balance > 0:
                extra = min(sum(plan.extra_for(month) for plan in plans), balance)
                balance -= extra
                total_extra += extra

            total_interest += interest

        return PayoffResult(
            monthly_payment=payment,
            total_interest=total_interest,
            total_paid=self.engine.principal + total_interest,
            payoff_months=month,
            total_extra_paid=total_extra,
        )

    def compare(self) -> Dict:
        standard = self.standard()
        accelerated = self.accelerated()
        interest_saved = standard.total_interest - accelerated.total_interest
        months_saved = standard.payoff_months - accelerated.payoff_months

        return {
            "standard_loan": {
                "monthly_payment": round(standard.monthly_payment, 2),
                "total_interest": round(standard.total_interest, 2),
                "total_paid": round(standard.total_paid, 2),
                "payoff_months": standard.payoff_months,
            },
            "with_extra_payments": {
                "total_interest": round(accelerated.total_interest, 2),
                "total_paid": round(accelerated.total_paid, 2),
                "payoff_months": accelerated.payoff_months,
                "total_extra_paid": round(accelerated.total_extra_paid, 2),
                "savings": {
                    "interest_saved": round(interest_saved, 2),
                    "months_saved": months_saved,
                    "total_saved": round(standard.total_paid - accelerated.total_paid, 2),
                },
            },
        }

    def compare_each(self) -> List[Dict]:
        """
        One comparison per plan, for side-by-side scenario cards.
        """
        standard = self.standard()
        rows = []
        for index, plan in enumerate(self.plans, start=1):
            result = self.accelerated([plan])
            rows.append({
                "name": plan.name or f"Scenario {index}",
                "kind": plan.kind,
                "amount": plan.amount,
                "payoff_months": result.payoff_months,
                "interest_saved": round(standard.total_interest - result.total_interest, 2),
                "months_saved": standard.payoff_months - result.payoff_months,
            })
        return rows
