"""
property_tax_estimator.py

County property tax estimator for Southern California.

- Base levy: sum of the county, school, city and special district rates
  for the county (from the versioned reference table)
- Exemptions, applied in order homestead -> senior -> veteran, each
  subtracting min(price * pct, cap) from the annual tax; the senior
  exemption only applies below its price ceiling
- The annual tax never drops below 0

Unknown county codes raise ValidationError; there is no silent default.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from config.reference_data import EXEMPTION_ORDER, CountyTaxProfile, get_reference_data
from models.errors import ValidationError
from models.types import ResultMixin


@dataclass(frozen=True)
class PropertyTaxResult(ResultMixin):
    county_code: str
    home_price: float
    base_tax: float
    annual_tax: float
    monthly_tax: float
    effective_rate_pct: float
    exemptions_applied: float
    breakdown: Dict[str, float] = field(default_factory=dict)
    exemption_detail: List[Dict] = field(default_factory=list)


class PropertyTaxEstimator:
    """
    Parameters:
        county_code: reference table key, case-insensitive (e.g., "riverside")
        homestead / senior / veteran: exemption flags

    Example:
        PropertyTaxEstimator("riverside").estimate(650_000).monthly_tax -> 655.42
    """

    def __init__(
        self,
        county_code: str,
        homestead: bool = False,
        senior: bool = False,
        veteran: bool = False,
    ):
        self.county = self._lookup_county(county_code)
        self.flags = {
            "homestead": bool(homestead),
            "senior": bool(senior),
            "veteran": bool(veteran),
        }

    @staticmethod
    def _lookup_county(county_code: str) -> CountyTaxProfile:
        reference = get_reference_data()
        county = reference.county(county_code)
        if county is None:
            raise ValidationError(
                f"Unknown county code: {county_code!r}. "
                f"Known counties: {sorted(reference.counties)}",
                field="county_code",
            )
        return county

    # ----------------------------------------------------------
    # Estimates
    # ----------------------------------------------------------

    def estimate(self, home_price: float) -> PropertyTaxResult:
        if home_price is None or home_price <= 0:
            raise ValidationError("home_price must be positive", field="home_price")

        base_tax = home_price * self.county.base_rate_pct / 100.0
        annual_tax = base_tax
        detail = []

        for name in EXEMPTION_ORDER:
            if not self.flags.get(name):
                continue
            rule = self.county.exemption(name)
            if rule is None:
                continue

            amount = rule.amount_for(home_price)
            reduction = min(amount, annual_tax)
            annual_tax -= reduction
            detail.append({
                "exemption": name,
                "amount": round(amount, 2),
                "applied": round(reduction, 2),
            })

        annual_tax = max(0.0, annual_tax)
        exemptions_applied = base_tax - annual_tax

        return PropertyTaxResult(
            county_code=self.county.code,
            home_price=home_price,
            base_tax=round(base_tax, 2),
            annual_tax=round(annual_tax, 2),
            monthly_tax=round(annual_tax / 12.0, 2),
            effective_rate_pct=round(annual_tax / home_price * 100.0, 4),
            exemptions_applied=round(exemptions_applied, 2),
            breakdown={
                "county_rate_pct": self.county.county_rate_pct,
                "school_rate_pct": self.county.school_rate_pct,
                "city_rate_pct": self.county.city_rate_pct,
                "special_districts_pct": self.county.special_rate_pct,
                "base_rate_pct": round(self.county.base_rate_pct, 4),
            },
            exemption_detail=detail,
        )

    def estimate_monthly_tax(self, home_price: float) -> float:
        return self.estimate(home_price).monthly_tax


def county_catalog() -> List[Dict]:
    """
    County list for calculator option pickers.
    """
    reference = get_reference_data()
    catalog = []
    for county in reference.counties.values():
        catalog.append({
            "code": county.code,
            "name": county.name,
            "tax_rate_pct": round(county.base_rate_pct, 4),
            "average_insurance_rate_pct": county.average_insurance_rate_pct,
            "median_home_price": county.median_home_price,
            "high_risk_areas": list(county.high_risk_areas),
        })
    return catalog


def monthly_property_tax(home_price: float, county_code: Optional[str] = None) -> float:
    """
    Monthly tax for a county, or from the market default rate when no county is given.
    """
    if county_code:
        return PropertyTaxEstimator(county_code).estimate_monthly_tax(home_price)
    rate = get_reference_data().market.property_tax_rate_pct
    return round(home_price * rate / 100.0 / 12.0, 2)
