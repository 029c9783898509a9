"""
affordability.py

Maximum home price a borrower qualifies for, solved by inverting the
annuity formula under a debt-to-income constraint.

Steps:
1) max housing payment H = income * DTI - debts (clamped to >= 0)
2) tax + insurance are proportional to the (unknown) price, PMI to the
   (unknown) loan. Everything is linear in the loan amount L:
       L / A + t * (D + L) + p * L = H
   so  L = A * (H - t * D) / (1 + A * (t + p))
   where A = principal per dollar of payment, t = monthly tax+insurance
   rate on price, p = monthly PMI rate on the loan (0 when down >= 20%).
   The result is exact to float precision; check_payment() confirms the
   composed payment stays within one cent of H.
3) max home price = L + D

Zero capacity (H <= 0, or nothing left for P&I after tax/insurance) is a
valid answer: max home price = down payment, max loan = 0.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import math

from config.reference_data import get_reference_data
from models.amortization import annuity_factor, level_payment
from models.errors import ValidationError
from models.types import AffordabilityProfile, ResultMixin, require_member, require_non_negative


PAYMENT_TOLERANCE = 0.01


@dataclass(frozen=True)
class AffordabilityResult(ResultMixin):
    max_monthly_housing_payment: float
    max_loan_amount: float
    max_home_price: float
    down_payment: float
    principal_and_interest: float
    monthly_tax_and_insurance: float
    monthly_pmi: float
    pmi_included: bool
    zero_capacity: bool
    front_end_ratio: float
    back_end_ratio: float
    required_income: float
    recommendation: str


class AffordabilityAnalyzer:
    """
    Parameters:
        profile: AffordabilityProfile (income, debts, max DTI)
        annual_rate_pct: loan rate in percent
        term_years: loan term (one of the offered fixed terms)
        down_payment: cash the borrower brings
        property_tax_rate_pct: annual tax as percent of price (default: market table)
        insurance_rate_pct: annual insurance as percent of price (default: market table)
        pmi_rate_pct: annual PMI as percent of the loan (default: market table)

    Example:
        profile = AffordabilityProfile(monthly_income=10_000, monthly_debts=800, max_dti_ratio=0.36)
        AffordabilityAnalyzer(profile, 7.25, 30, down_payment=0,
                              property_tax_rate_pct=0, insurance_rate_pct=0, pmi_rate_pct=0).analyze()
        -> max_monthly_housing_payment 2800, max_loan_amount ~410k
    """

    def __init__(
        self,
        profile: AffordabilityProfile,
        annual_rate_pct: float,
        term_years: int,
        down_payment: float = 0.0,
        property_tax_rate_pct: Optional[float] = None,
        insurance_rate_pct: Optional[float] = None,
        pmi_rate_pct: Optional[float] = None,
    ):
        market = get_reference_data().market
        require_member("term_years", term_years, get_reference_data().fixed_term_years)
        if annual_rate_pct is None or annual_rate_pct < 0:
            raise ValidationError("annual_rate_pct must be >= 0", field="annual_rate_pct")

        self.profile = profile
        self.annual_rate_pct = annual_rate_pct
        self.term_years = term_years
        self.down_payment = down_payment
        self.property_tax_rate_pct = (
            market.property_tax_rate_pct if property_tax_rate_pct is None else property_tax_rate_pct
        )
        self.insurance_rate_pct = (
            market.home_insurance_rate_pct if insurance_rate_pct is None else insurance_rate_pct
        )
        self.pmi_rate_pct = market.pmi_rate_pct if pmi_rate_pct is None else pmi_rate_pct
        self._pmi_threshold = market.pmi_down_payment_threshold
        self._front_end_dti = market.front_end_dti
        self._back_end_dti = market.back_end_dti

        require_non_negative({
            "down_payment": self.down_payment,
            "property_tax_rate_pct": self.property_tax_rate_pct,
            "insurance_rate_pct": self.insurance_rate_pct,
            "pmi_rate_pct": self.pmi_rate_pct,
        })

    # ----------------------------------------------------------
    # Rates
    # ----------------------------------------------------------

    def _term_months(self) -> int:
        return self.term_years * 12

    def _price_rate(self) -> float:
        """Monthly tax + insurance per dollar of home price."""
        return (self.property_tax_rate_pct + self.insurance_rate_pct) / 100.0 / 12.0

    def _pmi_rate(self) -> float:
        """Monthly PMI per dollar of loan."""
        return self.pmi_rate_pct / 100.0 / 12.0

    def _needs_pmi(self, home_price: float) -> bool:
        if home_price <= 0:
            return False
        return self.down_payment / home_price < self._pmi_threshold

    # ----------------------------------------------------------
    # Solver
    # ----------------------------------------------------------

    def _solve_loan(self, housing_payment: float, pmi_rate: float) -> float:
        a = annuity_factor(self.annual_rate_pct, self._term_months())
        t = self._price_rate()
        return a * (housing_payment - t * self.down_payment) / (1 + a * (t + pmi_rate))

    def max_loan_amount(self) -> Tuple[float, bool]:
        """
        Returns (loan, pmi_included). Loan is 0 when nothing is left for P&I.
        """
        h = self.profile.max_monthly_housing_payment
        if h <= 0:
            return 0.0, False

        loan = self._solve_loan(h, 0.0)
        if loan <= 0:
            return 0.0, False
        if not self._needs_pmi(self.down_payment + loan):
            return loan, False

        loan_with_pmi = self._solve_loan(h, self._pmi_rate())
        if loan_with_pmi <= 0:
            return 0.0, False
        if self._needs_pmi(self.down_payment + loan_with_pmi):
            return loan_with_pmi, True

        # Between the two solutions the binding point is exactly the PMI
        # threshold: the largest price that still avoids PMI.
        price_at_threshold = self.down_payment / self._pmi_threshold
        while self._needs_pmi(price_at_threshold):
            price_at_threshold = math.nextafter(price_at_threshold, 0.0)
        return price_at_threshold - self.down_payment, False

    def analyze(self) -> AffordabilityResult:
        h = self.profile.max_monthly_housing_payment
        loan, pmi_included = self.max_loan_amount()
        home_price = self.down_payment + loan

        if loan > 0:
            pi = level_payment(loan, self.annual_rate_pct, self._term_months())
        else:
            pi = 0.0
        tax_and_insurance = home_price * self._price_rate() if loan > 0 else 0.0
        pmi = loan * self._pmi_rate() if pmi_included else 0.0

        income = self.profile.monthly_income
        front_end = h / income
        back_end = (h + self.profile.monthly_debts) / income
        required_income = h / self._front_end_dti if h > 0 else 0.0

        return AffordabilityResult(
            max_monthly_housing_payment=h,
            max_loan_amount=loan,
            max_home_price=home_price,
            down_payment=self.down_payment,
            principal_and_interest=pi,
            monthly_tax_and_insurance=tax_and_insurance,
            monthly_pmi=pmi,
            pmi_included=pmi_included,
            zero_capacity=loan <= 0,
            front_end_ratio=front_end,
            back_end_ratio=back_end,
            required_income=required_income,
            recommendation=self._recommend(loan, front_end, back_end),
        )

    def check_payment(self, result: AffordabilityResult) -> bool:
        """
        True when the payment at the solved price fits the housing budget.
        """
        composed = result.principal_and_interest + result.monthly_tax_and_insurance + result.monthly_pmi
        return composed <= result.max_monthly_housing_payment + PAYMENT_TOLERANCE

    # ----------------------------------------------------------
    # Recommendation
    # ----------------------------------------------------------

    def _recommend(self, loan: float, front_end: float, back_end: float) -> str:
        if loan <= 0:
            return "Consider increasing income, reducing debts, or saving for a larger down payment."
        if back_end > self._back_end_dti:
            return "Consider reducing existing debts before purchasing to improve affordability."
        if front_end > self._front_end_dti:
            return "You may qualify but consider the higher payment carefully."
        return "You appear to be in a strong financial position for this purchase."

    def summary(self) -> Dict:
        r = self.analyze()
        return {
            "inputs": {
                "monthly_income": self.profile.monthly_income,
                "monthly_debts": self.profile.monthly_debts,
                "max_dti_ratio": self.profile.max_dti_ratio,
                "annual_rate_pct": self.annual_rate_pct,
                "term_years": self.term_years,
                "down_payment": self.down_payment,
                "property_tax_rate_pct": self.property_tax_rate_pct,
                "insurance_rate_pct": self.insurance_rate_pct,
                "pmi_rate_pct": self.pmi_rate_pct,
            },
            "max_monthly_housing_payment": round(r.max_monthly_housing_payment, 2),
            "max_loan_amount": round(r.max_loan_amount, 2),
            "max_home_price": round(r.max_home_price, 2),
            "principal_and_interest": round(r.principal_and_interest, 2),
            "monthly_tax_and_insurance": round(r.monthly_tax_and_insurance, 2),
            "monthly_pmi": round(r.monthly_pmi, 2),
            "pmi_included": r.pmi_included,
            "zero_capacity": r.zero_capacity,
            "front_end_ratio_pct": round(r.front_end_ratio * 100, 2),
            "back_end_ratio_pct": round(r.back_end_ratio * 100, 2),
            "required_income": round(r.required_income, 2),
            "recommendation": r.recommendation,
        }
