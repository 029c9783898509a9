from typing import Any, Callable, Dict
import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from engine.mortgage_engine import MortgageEngine
from models.errors import MortgageEngineError
from api.schemas import (
    AffordabilityRequest,
    AmortizationRequest,
    ARMRequest,
    CalculationResponse,
    ExtraPaymentsRequest,
    InsuranceRequest,
    MortgageCalculationRequest,
    PreApprovalRequest,
    PropertyTaxRequest,
    RefinanceRequest,
    RentVsBuyRequest,
)


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Mortgage Calculation Engine API",
    description="HTTP API wrapper around the MortgageEngine for mortgage and housing cost calculators.",
    version="0.1.0",
)

# Calculators are called from the marketing site's browser UI.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Single engine instance for all requests
engine = MortgageEngine()


def _run(
    name: str,
    handler: Callable[[Dict[str, Any]], Any],
    config: Dict[str, Any],
    message: str,
) -> CalculationResponse:
    """
    Run one engine call and wrap it in the response envelope.

    Engine validation / computation errors become HTTP 400 with the error
    type, message and offending field; anything else is a 500.
    """
    logger.info("%s request", name)
    try:
        result = handler(config)
        return CalculationResponse(success=True, message=message, data=result)

    except MortgageEngineError as e:
        logger.info("%s rejected: %s", name, e.message)
        raise HTTPException(status_code=400, detail=e.to_dict())
    except HTTPException:
        # Re-raise explicit HTTP errors
        raise
    except Exception as e:
        logger.exception("%s failed", name)
        raise HTTPException(status_code=500, detail=f"Internal server error during {name}: {e}")


# ---------------------------------------------------------
# System
# ---------------------------------------------------------

@app.get("/health", tags=["system"])
def health_check() -> Dict[str, Any]:
    """
    Simple health check endpoint.
    """
    return {"status": "ok", "message": "Mortgage Engine API is running."}


# ---------------------------------------------------------
# Calculators
# ---------------------------------------------------------

@app.post("/mortgage/calculate", response_model=CalculationResponse, tags=["mortgage"])
def calculate_mortgage(payload: MortgageCalculationRequest) -> CalculationResponse:
    return _run(
        "mortgage calculation",
        engine.calculate,
        payload.model_dump(),
        "Mortgage calculation completed successfully",
    )


@app.post("/mortgage/amortization", response_model=CalculationResponse, tags=["mortgage"])
def amortization_schedule(payload: AmortizationRequest) -> CalculationResponse:
    return _run(
        "amortization schedule",
        engine.amortization,
        payload.model_dump(),
        "Amortization schedule generated successfully",
    )


@app.post("/mortgage/affordability", response_model=CalculationResponse, tags=["mortgage"])
def affordability(payload: AffordabilityRequest) -> CalculationResponse:
    return _run(
        "affordability calculation",
        engine.affordability,
        payload.model_dump(),
        "Affordability calculation completed successfully",
    )


@app.post("/mortgage/refinance", response_model=CalculationResponse, tags=["mortgage"])
def refinance(payload: RefinanceRequest) -> CalculationResponse:
    return _run(
        "refinance analysis",
        engine.refinance,
        payload.model_dump(),
        "Refinance analysis completed successfully",
    )


@app.post("/mortgage/arm", response_model=CalculationResponse, tags=["mortgage"])
def adjustable_rate(payload: ARMRequest) -> CalculationResponse:
    return _run(
        "ARM calculation",
        engine.arm,
        payload.model_dump(),
        "ARM calculation completed successfully",
    )


@app.post("/mortgage/arm/scenarios", response_model=CalculationResponse, tags=["mortgage"])
def adjustable_rate_scenarios(payload: ARMRequest) -> CalculationResponse:
    return _run(
        "ARM scenario comparison",
        engine.arm_scenarios,
        payload.model_dump(),
        "ARM scenario comparison completed successfully",
    )


@app.post("/mortgage/property-tax", response_model=CalculationResponse, tags=["costs"])
def property_tax(payload: PropertyTaxRequest) -> CalculationResponse:
    return _run(
        "property tax calculation",
        engine.property_tax,
        payload.model_dump(),
        "Property tax calculated successfully",
    )


@app.post("/mortgage/insurance", response_model=CalculationResponse, tags=["costs"])
def home_insurance(payload: InsuranceRequest) -> CalculationResponse:
    return _run(
        "insurance calculation",
        engine.insurance,
        payload.model_dump(),
        "Home insurance calculated successfully",
    )


@app.post("/mortgage/rent-vs-buy", response_model=CalculationResponse, tags=["mortgage"])
def rent_vs_buy(payload: RentVsBuyRequest) -> CalculationResponse:
    return _run(
        "rent vs buy analysis",
        engine.rent_vs_buy,
        payload.model_dump(),
        "Rent vs buy analysis completed successfully",
    )


@app.post("/mortgage/extra-payments", response_model=CalculationResponse, tags=["mortgage"])
def extra_payments(payload: ExtraPaymentsRequest) -> CalculationResponse:
    return _run(
        "extra payments calculation",
        engine.extra_payments,
        payload.model_dump(),
        "Extra payments calculation completed successfully",
    )


@app.post("/mortgage/pre-approval", response_model=CalculationResponse, tags=["mortgage"])
def pre_approval(payload: PreApprovalRequest) -> CalculationResponse:
    return _run(
        "pre-approval estimate",
        engine.pre_approval,
        payload.model_dump(),
        "Pre-approval estimate completed successfully",
    )


# ---------------------------------------------------------
# Reference data
# ---------------------------------------------------------

@app.get("/mortgage/counties", response_model=CalculationResponse, tags=["reference"])
def counties() -> CalculationResponse:
    return CalculationResponse(
        success=True,
        message="County data retrieved successfully",
        data=engine.counties(),
    )


@app.get("/mortgage/rates", response_model=CalculationResponse, tags=["reference"])
def market_rates() -> CalculationResponse:
    return CalculationResponse(
        success=True,
        message="Interest rates retrieved successfully",
        data=engine.market_rates(),
    )


@app.get("/mortgage/calculator-options", response_model=CalculationResponse, tags=["reference"])
def calculator_options() -> CalculationResponse:
    return CalculationResponse(
        success=True,
        message="Calculator options retrieved successfully",
        data=engine.calculator_options(),
    )
