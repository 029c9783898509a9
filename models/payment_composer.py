"""
payment_composer.py

Total monthly housing obligation:
- P&I from the amortization engine
- property tax, insurance, PMI, HOA, maintenance, utilities

PMI rule:
- PMI applies only when the down payment is below 20% of the home price
  (LTV above 80%). At or above 20% down, PMI is 0 regardless of any rate
  or monthly amount supplied.
- With a PMI rate: monthly PMI = principal * rate / 100 / 12.
- Without a rate: the monthly_pmi of RecurringCosts is passed through.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from config.reference_data import get_reference_data
from models.amortization import AmortizationEngine, level_payment
from models.types import LoanTerms, RecurringCosts, ResultMixin


def pmi_required(terms: LoanTerms) -> bool:
    threshold = get_reference_data().market.pmi_down_payment_threshold
    return terms.down_payment_ratio < threshold


def monthly_pmi(
    terms: LoanTerms,
    pmi_annual_rate_pct: Optional[float] = None,
    supplied_monthly_pmi: float = 0.0,
) -> float:
    if not pmi_required(terms):
        return 0.0
    if pmi_annual_rate_pct is not None:
        return terms.principal * pmi_annual_rate_pct / 100.0 / 12.0
    return supplied_monthly_pmi


@dataclass(frozen=True)
class MonthlyPayment(ResultMixin):
    principal_and_interest: float
    property_tax: float
    insurance: float
    pmi: float
    hoa: float
    maintenance: float
    utilities: float
    total: float
    pmi_required: bool

    def rounded(self) -> Dict:
        return {k: (round(v, 2) if isinstance(v, float) else v) for k, v in self.to_dict().items()}


class PaymentComposer:
    """
    Parameters:
        terms: LoanTerms for the purchase
        costs: RecurringCosts (monthly amounts, each default 0)
        pmi_annual_rate_pct: PMI rate as percent of the loan per year (e.g., 0.5)
    """

    def __init__(
        self,
        terms: LoanTerms,
        costs: Optional[RecurringCosts] = None,
        pmi_annual_rate_pct: Optional[float] = None,
    ):
        self.terms = terms
        self.costs = costs or RecurringCosts()
        self.pmi_annual_rate_pct = pmi_annual_rate_pct

    def principal_and_interest(self) -> float:
        return level_payment(
            self.terms.principal, self.terms.annual_rate_pct, self.terms.term_months
        )

    def compose(self) -> MonthlyPayment:
        pi = self.principal_and_interest()
        pmi = monthly_pmi(self.terms, self.pmi_annual_rate_pct, self.costs.monthly_pmi)
        c = self.costs

        total = (
            pi
            + c.monthly_property_tax
            + c.monthly_insurance
            + pmi
            + c.monthly_hoa
            + c.monthly_maintenance
            + c.monthly_utilities
        )

        return MonthlyPayment(
            principal_and_interest=pi,
            property_tax=c.monthly_property_tax,
            insurance=c.monthly_insurance,
            pmi=pmi,
            hoa=c.monthly_hoa,
            maintenance=c.monthly_maintenance,
            utilities=c.monthly_utilities,
            total=total,
            pmi_required=pmi_required(self.terms),
        )

    def total_monthly_payment(self) -> float:
        return self.compose().total

    # ----------------------------------------------------------
    # Full mortgage summary
    # ----------------------------------------------------------

    def summary(self, include_schedule: bool = True) -> Dict:
        """
        Loan amount, every monthly component, lifetime interest and cost,
        and (optionally) the amortization schedule.
        """
        payment = self.compose()
        amortization = AmortizationEngine.for_loan(self.terms).summary(
            include_schedule=include_schedule
        )
        total_interest = amortization["total_interest"]

        result = {
            "loan_amount": round(self.terms.principal, 2),
            "down_payment_pct": round(self.terms.down_payment_ratio * 100, 2),
            "ltv_pct": round(self.terms.ltv * 100, 2),
            "monthly_payment": payment.rounded(),
            "principal_and_interest": round(payment.principal_and_interest, 2),
            "total_monthly_payment": round(payment.total, 2),
            "total_interest": total_interest,
            "total_cost": round(self.terms.home_price + total_interest, 2),
            "number_of_payments": amortization["number_of_payments"],
        }
        if include_schedule:
            result["amortization_schedule"] = amortization["schedule"]
        return result
