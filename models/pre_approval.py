"""
pre_approval.py

Rough pre-approval likelihood and rate estimate from a handful of borrower
inputs. This is a marketing-grade indicator, not an underwriting decision.

Scoring (tier tables in the reference data):
- start from a base likelihood and base rate
- credit score tier adjusts likelihood and rate
- DTI (monthly debts / monthly income) tier adjusts likelihood
- LTV ((price - down) / price) tier adjusts likelihood
- likelihood is clamped to 0..100
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config.reference_data import get_reference_data
from models.errors import ValidationError
from models.types import ResultMixin, require_non_negative


GOOD_CREDIT_SCORE = 700
DTI_WARNING_PCT = 36.0
LTV_WARNING_PCT = 80.0


@dataclass(frozen=True)
class PreApprovalResult(ResultMixin):
    approval_likelihood: int
    estimated_rate_pct: float
    dti_ratio_pct: float
    ltv_ratio_pct: float
    recommendations: List[str] = field(default_factory=list)


def _tier_for_max(tiers: List[Dict[str, Any]], value: float) -> Dict[str, Any]:
    """
    First tier whose max_pct covers the value; a null max_pct is open-ended.
    """
    for tier in tiers:
        if tier.get("max_pct") is None or value <= tier["max_pct"]:
            return tier
    return {}


def _tier_for_min(tiers: List[Dict[str, Any]], value: float) -> Dict[str, Any]:
    for tier in tiers:
        if value >= tier.get("min_score", 0):
            return tier
    return {}


class PreApprovalEstimator:
    """
    Parameters:
        annual_income: gross yearly income
        monthly_debts: existing monthly debt payments
        credit_score: FICO-style score (300..850)
        down_payment: cash down
        home_price: target purchase price
        tiers: tier tables override (default: reference data)
    """

    def __init__(
        self,
        annual_income: float,
        monthly_debts: float,
        credit_score: int,
        down_payment: float,
        home_price: float,
        tiers: Optional[Dict[str, Any]] = None,
    ):
        if annual_income is None or annual_income <= 0:
            raise ValidationError("annual_income must be positive", field="annual_income")
        if home_price is None or home_price <= 0:
            raise ValidationError("home_price must be positive", field="home_price")
        require_non_negative({"monthly_debts": monthly_debts, "down_payment": down_payment})
        if down_payment > home_price:
            raise ValidationError("Down payment cannot exceed home price", field="down_payment")

        self.annual_income = annual_income
        self.monthly_debts = monthly_debts
        self.credit_score = credit_score
        self.down_payment = down_payment
        self.home_price = home_price
        self.tiers = tiers or get_reference_data().pre_approval

    def dti_ratio_pct(self) -> float:
        return self.monthly_debts / (self.annual_income / 12.0) * 100.0

    def ltv_ratio_pct(self) -> float:
        return (self.home_price - self.down_payment) / self.home_price * 100.0

    def estimate(self) -> PreApprovalResult:
        likelihood = self.tiers.get("base_likelihood", 50)
        rate = self.tiers.get("base_rate_pct", get_reference_data().market.interest_rate_pct)

        credit = _tier_for_min(self.tiers.get("credit_tiers", []), self.credit_score)
        likelihood += credit.get("likelihood", 0)
        rate += credit.get("rate_adjustment_pct", 0.0)

        dti = self.dti_ratio_pct()
        likelihood += _tier_for_max(self.tiers.get("dti_tiers", []), dti).get("likelihood", 0)

        ltv = self.ltv_ratio_pct()
        likelihood += _tier_for_max(self.tiers.get("ltv_tiers", []), ltv).get("likelihood", 0)

        likelihood = min(max(likelihood, 0), 100)

        recommendations = []
        if self.credit_score < GOOD_CREDIT_SCORE:
            recommendations.append("Consider improving your credit score for better rates")
        if dti > DTI_WARNING_PCT:
            recommendations.append("Pay down existing debts to improve debt-to-income ratio")
        if ltv > LTV_WARNING_PCT:
            recommendations.append("Consider increasing down payment to avoid PMI")

        return PreApprovalResult(
            approval_likelihood=int(likelihood),
            estimated_rate_pct=round(rate, 4),
            dti_ratio_pct=round(dti, 1),
            ltv_ratio_pct=round(ltv, 1),
            recommendations=recommendations,
        )

    def summary(self) -> Dict:
        return self.estimate().to_dict()
