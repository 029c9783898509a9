"""
insurance_estimator.py

Homeowner's insurance estimate as a percentage of home value.
High-risk areas (wildfire, earthquake zones) carry a multiplier.
"""

from typing import Dict, Optional

from config.reference_data import get_reference_data
from models.errors import ValidationError


class HomeInsuranceEstimator:
    def __init__(self, rate_pct: Optional[float] = None, high_risk_area: bool = False):
        market = get_reference_data().market
        self.rate_pct = market.home_insurance_rate_pct if rate_pct is None else rate_pct
        self.high_risk_area = high_risk_area
        self.multiplier = market.high_risk_insurance_multiplier if high_risk_area else 1.0

    def estimate_annual(self, home_price: float) -> float:
        if home_price is None or home_price <= 0:
            raise ValidationError("home_price must be positive", field="home_price")
        return round(home_price * self.rate_pct / 100.0 * self.multiplier, 2)

    def estimate_monthly(self, home_price: float) -> float:
        return round(self.estimate_annual(home_price) / 12.0, 2)

    def summary(self, home_price: float) -> Dict:
        return {
            "home_price": home_price,
            "high_risk_area": self.high_risk_area,
            "rate_pct": round(self.rate_pct * self.multiplier, 4),
            "annual_insurance": self.estimate_annual(home_price),
            "monthly_insurance": self.estimate_monthly(home_price),
        }
