"""
types.py

Immutable input value types shared by the calculation models.

Each type validates the invariants the engine depends on when it is
constructed and raises ValidationError on a violation. Range checks on raw
request bodies (price ceilings, rate floors, ...) belong to the HTTP layer.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable

from config.reference_data import get_reference_data
from models.errors import ValidationError


MAX_ANNUAL_RATE_PCT = 20.0


class ResultMixin:
    """
    JSON-ready dict view for result dataclasses.
    """

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def require_non_negative(values: Dict[str, float]) -> None:
    for name, value in values.items():
        if value is None or value < 0:
            raise ValidationError(f"{name} must be >= 0 (got {value})", field=name)


def require_member(name: str, value: Any, allowed: Iterable[Any]) -> None:
    allowed = tuple(allowed)
    if value not in allowed:
        raise ValidationError(
            f"{name} must be one of {list(allowed)} (got {value})", field=name
        )


# ----------------------------------------------------------
# Loan terms
# ----------------------------------------------------------

@dataclass(frozen=True)
class LoanTerms:
    """
    Fixed-rate purchase loan: principal = home_price - down_payment.
    """

    home_price: float
    down_payment: float
    annual_rate_pct: float
    term_years: int

    def __post_init__(self):
        if self.home_price is None or self.home_price <= 0:
            raise ValidationError("home_price must be positive", field="home_price")
        require_non_negative({"down_payment": self.down_payment})
        if self.down_payment > self.home_price:
            raise ValidationError(
                "Down payment cannot exceed home price", field="down_payment"
            )
        if self.down_payment == self.home_price:
            raise ValidationError(
                "Down payment equals home price; there is no loan to finance",
                field="down_payment",
            )
        if not 0 < self.annual_rate_pct <= MAX_ANNUAL_RATE_PCT:
            raise ValidationError(
                f"annual_rate_pct must be in (0, {MAX_ANNUAL_RATE_PCT}]",
                field="annual_rate_pct",
            )
        require_member("term_years", self.term_years, get_reference_data().fixed_term_years)

    @property
    def principal(self) -> float:
        return self.home_price - self.down_payment

    @property
    def term_months(self) -> int:
        return self.term_years * 12

    @property
    def down_payment_ratio(self) -> float:
        return self.down_payment / self.home_price

    @property
    def ltv(self) -> float:
        return self.principal / self.home_price


# ----------------------------------------------------------
# Recurring non-loan costs
# ----------------------------------------------------------

@dataclass(frozen=True)
class RecurringCosts:
    monthly_property_tax: float = 0.0
    monthly_insurance: float = 0.0
    monthly_pmi: float = 0.0
    monthly_hoa: float = 0.0
    monthly_maintenance: float = 0.0
    monthly_utilities: float = 0.0

    def __post_init__(self):
        require_non_negative(asdict(self))

    def total(self) -> float:
        return sum(asdict(self).values())


# ----------------------------------------------------------
# Affordability
# ----------------------------------------------------------

MIN_DTI_RATIO = 0.1
MAX_DTI_RATIO = 0.5


@dataclass(frozen=True)
class AffordabilityProfile:
    monthly_income: float
    monthly_debts: float = 0.0
    max_dti_ratio: float = 0.36

    def __post_init__(self):
        if self.monthly_income is None or self.monthly_income <= 0:
            raise ValidationError("monthly_income must be positive", field="monthly_income")
        require_non_negative({"monthly_debts": self.monthly_debts})
        if not MIN_DTI_RATIO <= self.max_dti_ratio <= MAX_DTI_RATIO:
            raise ValidationError(
                f"max_dti_ratio must be between {MIN_DTI_RATIO} and {MAX_DTI_RATIO}",
                field="max_dti_ratio",
            )

    @property
    def max_monthly_housing_payment(self) -> float:
        return max(0.0, self.monthly_income * self.max_dti_ratio - self.monthly_debts)


# ----------------------------------------------------------
# Adjustable-rate schedule
# ----------------------------------------------------------

@dataclass(frozen=True)
class ARMSchedule:
    """
    Caps, margin and index are annual percentages.

    index_step_pct moves the index at every adjustment after the first
    (0 keeps the index flat at current_index_pct).
    """

    initial_rate_pct: float
    initial_period_years: int
    adjustment_period_years: int
    initial_cap_pct: float
    periodic_cap_pct: float
    lifetime_cap_pct: float
    margin_pct: float
    current_index_pct: float
    index_step_pct: float = 0.0

    def __post_init__(self):
        reference = get_reference_data()
        if not 0 < self.initial_rate_pct <= MAX_ANNUAL_RATE_PCT:
            raise ValidationError(
                f"initial_rate_pct must be in (0, {MAX_ANNUAL_RATE_PCT}]",
                field="initial_rate_pct",
            )
        require_member(
            "initial_period_years", self.initial_period_years, reference.arm_initial_period_years
        )
        require_member(
            "adjustment_period_years",
            self.adjustment_period_years,
            reference.arm_adjustment_period_years,
        )
        require_non_negative({
            "initial_cap_pct": self.initial_cap_pct,
            "periodic_cap_pct": self.periodic_cap_pct,
            "lifetime_cap_pct": self.lifetime_cap_pct,
            "margin_pct": self.margin_pct,
            "current_index_pct": self.current_index_pct,
        })

    @property
    def rate_floor_pct(self) -> float:
        return max(0.0, self.initial_rate_pct - self.lifetime_cap_pct)

    @property
    def rate_ceiling_pct(self) -> float:
        return self.initial_rate_pct + self.lifetime_cap_pct

    @property
    def first_adjustment_month(self) -> int:
        return self.initial_period_years * 12 + 1

    @property
    def adjustment_interval_months(self) -> int:
        return self.adjustment_period_years * 12
