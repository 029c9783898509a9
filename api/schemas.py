from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field


LoanTerm = Literal[10, 15, 20, 25, 30]
ARMLoanTerm = Literal[15, 20, 25, 30]
CountyCode = Literal[
    "riverside",
    "san-bernardino",
    "orange",
    "los-angeles",
    "ventura",
    "imperial",
    "kern",
    "santa-barbara",
]


class MortgageCalculationRequest(BaseModel):
    home_price: float = Field(..., ge=50_000, le=10_000_000)
    down_payment: float = Field(..., ge=0, le=2_000_000)
    interest_rate_pct: float = Field(..., ge=0.1, le=20)
    loan_term_years: LoanTerm

    # Annual amounts; estimated from county / market defaults when omitted
    annual_property_tax: Optional[float] = Field(None, ge=0)
    annual_insurance: Optional[float] = Field(None, ge=0)

    monthly_pmi: Optional[float] = Field(None, ge=0)
    monthly_hoa: Optional[float] = Field(None, ge=0)
    monthly_utilities: Optional[float] = Field(None, ge=0)
    monthly_maintenance: Optional[float] = Field(None, ge=0)

    county_code: Optional[CountyCode] = None
    high_risk_area: bool = False
    include_schedule: bool = True


class AmortizationRequest(BaseModel):
    loan_amount: float = Field(..., ge=10_000, le=5_000_000)
    interest_rate_pct: float = Field(..., ge=0.1, le=20)
    loan_term_years: LoanTerm
    include_schedule: bool = True


class AffordabilityRequest(BaseModel):
    monthly_income: float = Field(..., ge=1_000, le=100_000)
    monthly_debts: float = Field(0.0, ge=0, le=50_000)
    down_payment: float = Field(0.0, ge=0, le=2_000_000)
    interest_rate_pct: float = Field(..., ge=0.1, le=20)
    loan_term_years: LoanTerm
    property_tax_rate_pct: Optional[float] = Field(None, ge=0, le=5)
    insurance_rate_pct: Optional[float] = Field(None, ge=0, le=2)
    pmi_rate_pct: Optional[float] = Field(None, ge=0, le=2)
    debt_to_income_ratio: Optional[float] = Field(None, ge=0.1, le=0.5)


class RefinanceRequest(BaseModel):
    current_balance: float = Field(..., ge=10_000, le=5_000_000)
    current_rate_pct: float = Field(..., ge=0.1, le=20)
    current_monthly_payment: float = Field(..., ge=100, le=50_000)
    remaining_term_years: int = Field(..., ge=1, le=30)
    new_rate_pct: float = Field(..., ge=0.1, le=20)
    new_term_years: LoanTerm
    closing_costs: float = Field(0.0, ge=0, le=50_000)


class ARMRequest(BaseModel):
    home_price: float = Field(..., ge=50_000, le=10_000_000)
    down_payment: float = Field(..., ge=0, le=2_000_000)
    loan_term_years: ARMLoanTerm
    initial_rate_pct: float = Field(..., ge=0.1, le=20)
    initial_period_years: Literal[1, 3, 5, 7, 10]
    adjustment_period_years: Literal[1, 2, 3]
    initial_cap_pct: float = Field(..., ge=0.1, le=5)
    periodic_cap_pct: float = Field(..., ge=0.1, le=5)
    lifetime_cap_pct: float = Field(..., ge=1, le=10)
    margin_pct: float = Field(..., ge=1, le=5)
    current_index_pct: float = Field(..., ge=0.1, le=15)
    index_step_pct: float = Field(0.0, ge=-5, le=5)
    include_payments: bool = False


class PropertyTaxExemptions(BaseModel):
    homestead: bool = False
    senior: bool = False
    veteran: bool = False


class PropertyTaxRequest(BaseModel):
    home_price: float = Field(..., ge=50_000, le=10_000_000)
    county_code: CountyCode
    exemptions: Optional[PropertyTaxExemptions] = None


class InsuranceRequest(BaseModel):
    home_price: float = Field(..., ge=50_000, le=10_000_000)
    high_risk_area: bool = False


class RentVsBuyRequest(BaseModel):
    home_price: float = Field(..., ge=50_000, le=10_000_000)
    down_payment: float = Field(..., ge=0, le=2_000_000)
    interest_rate_pct: float = Field(..., ge=0.1, le=20)
    loan_term_years: ARMLoanTerm
    monthly_rent: float = Field(..., ge=500, le=20_000)
    property_tax_rate_pct: float = Field(..., ge=0, le=5)
    home_insurance_rate_pct: float = Field(..., ge=0, le=2)
    monthly_hoa: float = Field(0.0, ge=0, le=2_000)
    maintenance_rate_pct: float = Field(..., ge=0, le=3)
    closing_costs: float = Field(0.0, ge=0, le=100_000)
    rent_increase_pct: float = Field(..., ge=0, le=10)
    home_appreciation_pct: float = Field(..., ge=-5, le=15)
    investment_return_pct: float = Field(..., ge=0, le=20)
    marginal_tax_rate_pct: float = Field(..., ge=0, le=50)
    years: Literal[5, 10, 15, 20]
    county_code: Optional[CountyCode] = None


class ExtraPaymentPlanRequest(BaseModel):
    kind: Literal["monthly", "yearly", "one_time"]
    amount: float = Field(..., ge=0, le=1_000_000)
    month_of_year: int = Field(1, ge=1, le=12)
    year: int = Field(1, ge=1, le=30)
    start_year: int = Field(1, ge=1, le=30)
    name: Optional[str] = None


class ExtraPaymentsRequest(BaseModel):
    loan_amount: float = Field(..., ge=10_000, le=5_000_000)
    interest_rate_pct: float = Field(..., ge=0.1, le=20)
    loan_term_years: LoanTerm
    plans: List[ExtraPaymentPlanRequest] = Field(default_factory=list)


class PreApprovalRequest(BaseModel):
    annual_income: float = Field(..., gt=0, le=10_000_000)
    monthly_debts: float = Field(0.0, ge=0, le=50_000)
    credit_score: int = Field(..., ge=300, le=850)
    down_payment: float = Field(..., ge=0, le=2_000_000)
    home_price: float = Field(..., ge=50_000, le=10_000_000)


class CalculationResponse(BaseModel):
    """
    Loose envelope; the engine result goes in data as-is.
    """
    success: bool
    message: str
    data: Any

