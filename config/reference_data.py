"""
reference_data.py

Loader for the versioned static reference table (reference_rates.json).

The table holds the only embedded market data the engine uses:
- county property tax rate components and exemption rules
- housing-market default assumptions (tax, insurance, PMI, DTI, ...)
- allowed loan term sets
- sample market rates and pre-approval tiers for the HTTP layer

Updating rates means editing the JSON file and bumping metadata.version;
no calculation code changes.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import json
import logging
import os


logger = logging.getLogger(__name__)

REFERENCE_DATA_PATH = Path(__file__).resolve().parent / "reference_rates.json"
REFERENCE_DATA_ENV = "MORTGAGE_REFERENCE_DATA"

EXEMPTION_ORDER = ("homestead", "senior", "veteran")


@dataclass(frozen=True)
class ExemptionRule:
    name: str
    percent_of_price: float
    max_amount: Optional[float] = None
    max_home_price: Optional[float] = None

    def amount_for(self, home_price: float) -> float:
        """
        Exemption amount for a given price, 0 when the price ceiling excludes it.
        """
        if self.max_home_price is not None and home_price >= self.max_home_price:
            return 0.0
        amount = home_price * self.percent_of_price / 100.0
        if self.max_amount is not None:
            amount = min(amount, self.max_amount)
        return amount


@dataclass(frozen=True)
class CountyTaxProfile:
    code: str
    name: str
    county_rate_pct: float
    school_rate_pct: float
    city_rate_pct: float
    special_rate_pct: float
    exemptions: Tuple[ExemptionRule, ...]
    average_insurance_rate_pct: float
    median_home_price: Optional[float] = None
    high_risk_areas: Tuple[str, ...] = ()

    @property
    def base_rate_pct(self) -> float:
        return (
            self.county_rate_pct
            + self.school_rate_pct
            + self.city_rate_pct
            + self.special_rate_pct
        )

    def exemption(self, name: str) -> Optional[ExemptionRule]:
        for rule in self.exemptions:
            if rule.name == name:
                return rule
        return None


@dataclass(frozen=True)
class MarketDefaults:
    property_tax_rate_pct: float
    home_insurance_rate_pct: float
    pmi_rate_pct: float
    pmi_down_payment_threshold: float
    front_end_dti: float
    back_end_dti: float
    maintenance_rate_pct: float
    fixed_rate_premium_pct: float
    high_risk_insurance_multiplier: float
    interest_rate_pct: float
    hoa_monthly: float


@dataclass(frozen=True)
class ReferenceData:
    version: str
    updated: str
    region: str
    market: MarketDefaults
    counties: Dict[str, CountyTaxProfile]
    fixed_term_years: Tuple[int, ...]
    arm_initial_period_years: Tuple[int, ...]
    arm_adjustment_period_years: Tuple[int, ...]
    rent_vs_buy_horizon_years: Tuple[int, ...]
    market_rates: Dict[str, Any] = field(default_factory=dict)
    pre_approval: Dict[str, Any] = field(default_factory=dict)
    loan_types: List[Dict[str, Any]] = field(default_factory=list)

    def county(self, code: str) -> Optional[CountyTaxProfile]:
        return self.counties.get((code or "").strip().lower())


# ----------------------------------------------------------
# Parsing helpers
# ----------------------------------------------------------

def _parse_exemptions(
    defaults: Dict[str, Dict[str, Any]],
    overrides: Optional[Dict[str, Dict[str, Any]]],
) -> Tuple[ExemptionRule, ...]:
    merged = dict(defaults)
    merged.update(overrides or {})

    rules = []
    for name in EXEMPTION_ORDER:
        entry = merged.get(name)
        if not entry:
            continue
        rules.append(
            ExemptionRule(
                name=name,
                percent_of_price=float(entry.get("percent_of_price", 0.0)),
                max_amount=entry.get("max_amount"),
                max_home_price=entry.get("max_home_price"),
            )
        )
    return tuple(rules)


def _parse_county(entry: Dict[str, Any], default_exemptions: Dict[str, Any]) -> CountyTaxProfile:
    rates = entry.get("rates_pct", {})
    return CountyTaxProfile(
        code=entry["code"].lower(),
        name=entry.get("name", entry["code"]),
        county_rate_pct=float(rates.get("county", 0.0)),
        school_rate_pct=float(rates.get("school", 0.0)),
        city_rate_pct=float(rates.get("city", 0.0)),
        special_rate_pct=float(rates.get("special", 0.0)),
        exemptions=_parse_exemptions(default_exemptions, entry.get("exemptions")),
        average_insurance_rate_pct=float(entry.get("average_insurance_rate_pct", 0.0)),
        median_home_price=entry.get("median_home_price"),
        high_risk_areas=tuple(entry.get("high_risk_areas", [])),
    )


def parse_reference_data(data: Dict[str, Any]) -> ReferenceData:
    metadata = data.get("metadata", {})
    terms = data.get("loan_terms", {})
    default_exemptions = data.get("default_exemptions", {})

    counties = {}
    for entry in data.get("counties", []):
        profile = _parse_county(entry, default_exemptions)
        counties[profile.code] = profile

    return ReferenceData(
        version=metadata.get("version", "unknown"),
        updated=metadata.get("updated", ""),
        region=metadata.get("region", ""),
        market=MarketDefaults(**data["market_defaults"]),
        counties=counties,
        fixed_term_years=tuple(terms.get("fixed_term_years", [])),
        arm_initial_period_years=tuple(terms.get("arm_initial_period_years", [])),
        arm_adjustment_period_years=tuple(terms.get("arm_adjustment_period_years", [])),
        rent_vs_buy_horizon_years=tuple(terms.get("rent_vs_buy_horizon_years", [])),
        market_rates=data.get("market_rates", {}),
        pre_approval=data.get("pre_approval", {}),
        loan_types=data.get("loan_types", []),
    )


def reference_data_path() -> Path:
    override = os.getenv(REFERENCE_DATA_ENV)
    return Path(override) if override else REFERENCE_DATA_PATH


@lru_cache(maxsize=None)
def _load_from(path: Path) -> ReferenceData:
    if not path.exists():
        raise FileNotFoundError(f"Reference rate table not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    reference = parse_reference_data(data)
    logger.info(
        "Loaded reference rates version=%s (%d counties) from %s",
        reference.version,
        len(reference.counties),
        path,
    )
    return reference


def get_reference_data() -> ReferenceData:
    return _load_from(reference_data_path())
