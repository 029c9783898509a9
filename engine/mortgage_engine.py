"""
mortgage_engine.py

Top-level integration engine that maps plain request dicts onto the
calculation models:
- Mortgage calculation (PaymentComposer + AmortizationEngine)
- Amortization schedule
- Affordability
- Refinance comparison
- ARM simulation and scenario comparison
- County property tax and home insurance estimates
- Rent vs. buy projection
- Extra payment payoff comparison
- Pre-approval estimate
- Calculator options (counties, terms, loan types, market rates)

Every public method takes a dict with snake_case keys and returns a
JSON-ready dict. Validation failures surface as MortgageEngineError
subclasses and are left for the caller (the HTTP layer) to translate.
"""

from typing import Any, Dict, List, Optional
import logging

from config.reference_data import get_reference_data
from models.affordability import AffordabilityAnalyzer
from models.amortization import AmortizationEngine
from models.arm_simulator import ARMSimulator
from models.extra_payments import ExtraPaymentPlan, ExtraPaymentsAnalyzer
from models.payment_composer import PaymentComposer, monthly_pmi
from models.pre_approval import PreApprovalEstimator
from models.refinance import RefinanceAnalyzer
from models.rent_vs_buy import RentVsBuyAnalyzer
from models.types import AffordabilityProfile, ARMSchedule, LoanTerms, RecurringCosts
from services.insurance_estimator import HomeInsuranceEstimator
from services.property_tax_estimator import (
    PropertyTaxEstimator,
    county_catalog,
    monthly_property_tax,
)


logger = logging.getLogger(__name__)


def _value(config: Dict[str, Any], key: str, default: Any = None) -> Any:
    """
    config[key], falling back to default when the key is missing or None.
    """
    value = config.get(key)
    return default if value is None else value


class MortgageEngine:
    """
    Main orchestration class.
    """

    # ---------------------------------------------------------
    # Mortgage calculation
    # ---------------------------------------------------------

    def calculate(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Full monthly payment breakdown plus lifetime totals.

        Property tax and insurance are annual amounts when supplied; when
        omitted they are estimated from the county table (if county_code is
        given) or the market defaults. PMI uses the supplied monthly amount,
        or the market PMI rate, and only while down payment is below 20%.
        """
        terms = self._loan_terms(config)
        price = terms.home_price
        county_code = config.get("county_code")

        annual_tax = config.get("annual_property_tax")
        if annual_tax is None:
            tax = monthly_property_tax(price, county_code)
        else:
            tax = annual_tax / 12.0

        annual_insurance = config.get("annual_insurance")
        if annual_insurance is None:
            insurance = HomeInsuranceEstimator(
                high_risk_area=bool(config.get("high_risk_area"))
            ).estimate_monthly(price)
        else:
            insurance = annual_insurance / 12.0

        supplied_pmi = config.get("monthly_pmi")
        pmi_rate = None if supplied_pmi is not None else get_reference_data().market.pmi_rate_pct

        costs = RecurringCosts(
            monthly_property_tax=tax,
            monthly_insurance=insurance,
            monthly_pmi=supplied_pmi or 0.0,
            monthly_hoa=_value(config, "monthly_hoa", 0.0),
            monthly_maintenance=_value(config, "monthly_maintenance", 0.0),
            monthly_utilities=_value(config, "monthly_utilities", 0.0),
        )
        composer = PaymentComposer(terms, costs, pmi_annual_rate_pct=pmi_rate)
        results = composer.summary(include_schedule=bool(config.get("include_schedule", True)))

        logger.debug(
            "calculate: principal=%.2f rate=%.3f%% term=%dy total_monthly=%.2f",
            terms.principal, terms.annual_rate_pct, terms.term_years,
            results["total_monthly_payment"],
        )
        return {"inputs": config, "results": results}

    def amortization(self, config: Dict[str, Any]) -> Dict[str, Any]:
        engine = AmortizationEngine.from_years(
            config["loan_amount"], config["interest_rate_pct"], config["loan_term_years"]
        )
        results = engine.summary(include_schedule=bool(config.get("include_schedule", True)))
        results["yearly"] = engine.yearly_totals()
        return {"inputs": config, "results": results}

    # ---------------------------------------------------------
    # Affordability & refinance
    # ---------------------------------------------------------

    def affordability(self, config: Dict[str, Any]) -> Dict[str, Any]:
        market = get_reference_data().market
        profile = AffordabilityProfile(
            monthly_income=config["monthly_income"],
            monthly_debts=_value(config, "monthly_debts", 0.0),
            max_dti_ratio=_value(config, "debt_to_income_ratio", market.back_end_dti),
        )
        analyzer = AffordabilityAnalyzer(
            profile,
            annual_rate_pct=config["interest_rate_pct"],
            term_years=config["loan_term_years"],
            down_payment=_value(config, "down_payment", 0.0),
            property_tax_rate_pct=config.get("property_tax_rate_pct"),
            insurance_rate_pct=config.get("insurance_rate_pct"),
            pmi_rate_pct=config.get("pmi_rate_pct"),
        )
        results = analyzer.summary()
        logger.debug(
            "affordability: housing_budget=%.2f max_price=%.2f",
            results["max_monthly_housing_payment"], results["max_home_price"],
        )
        return {"inputs": config, "results": results}

    def refinance(self, config: Dict[str, Any]) -> Dict[str, Any]:
        analyzer = RefinanceAnalyzer(
            current_balance=config["current_balance"],
            current_rate_pct=config["current_rate_pct"],
            current_monthly_payment=config["current_monthly_payment"],
            remaining_term_years=config["remaining_term_years"],
            new_rate_pct=config["new_rate_pct"],
            new_term_years=config["new_term_years"],
            closing_costs=_value(config, "closing_costs", 0.0),
        )
        return {"inputs": config, "results": analyzer.summary()}

    # ---------------------------------------------------------
    # ARM
    # ---------------------------------------------------------

    def arm(self, config: Dict[str, Any]) -> Dict[str, Any]:
        simulator = self._arm_simulator(config)
        results = simulator.summary(include_payments=bool(config.get("include_payments", False)))
        return {"inputs": config, "results": results}

    def arm_scenarios(self, config: Dict[str, Any]) -> Dict[str, Any]:
        simulator = self._arm_simulator(config)
        return {"inputs": config, "results": simulator.compare_scenarios()}

    def _arm_simulator(self, config: Dict[str, Any]) -> ARMSimulator:
        schedule = ARMSchedule(
            initial_rate_pct=config["initial_rate_pct"],
            initial_period_years=config["initial_period_years"],
            adjustment_period_years=config["adjustment_period_years"],
            initial_cap_pct=config["initial_cap_pct"],
            periodic_cap_pct=config["periodic_cap_pct"],
            lifetime_cap_pct=config["lifetime_cap_pct"],
            margin_pct=config["margin_pct"],
            current_index_pct=config["current_index_pct"],
            index_step_pct=_value(config, "index_step_pct", 0.0),
        )
        return ARMSimulator(schedule, self._loan_terms(config, rate_key="initial_rate_pct"))

    # ---------------------------------------------------------
    # Property tax & insurance
    # ---------------------------------------------------------

    def property_tax(self, config: Dict[str, Any]) -> Dict[str, Any]:
        exemptions = config.get("exemptions") or {}
        estimator = PropertyTaxEstimator(
            config["county_code"],
            homestead=exemptions.get("homestead", False),
            senior=exemptions.get("senior", False),
            veteran=exemptions.get("veteran", False),
        )
        result = estimator.estimate(config["home_price"])
        return {"inputs": config, "results": result.to_dict()}

    def insurance(self, config: Dict[str, Any]) -> Dict[str, Any]:
        estimator = HomeInsuranceEstimator(
            rate_pct=config.get("rate_pct"),
            high_risk_area=bool(config.get("high_risk_area")),
        )
        return {"inputs": config, "results": estimator.summary(config["home_price"])}

    # ---------------------------------------------------------
    # Rent vs. buy
    # ---------------------------------------------------------

    def rent_vs_buy(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Tax and insurance come in as annual percentages of the home price,
        HOA as a monthly fee. PMI follows the market rate while down payment
        is below 20%.
        """
        terms = self._loan_terms(config)
        market = get_reference_data().market
        price = terms.home_price

        tax_rate = _value(config, "property_tax_rate_pct", market.property_tax_rate_pct)
        insurance_rate = _value(config, "home_insurance_rate_pct", market.home_insurance_rate_pct)
        costs = RecurringCosts(
            monthly_property_tax=price * tax_rate / 100.0 / 12.0,
            monthly_insurance=price * insurance_rate / 100.0 / 12.0,
            monthly_pmi=monthly_pmi(terms, market.pmi_rate_pct),
            monthly_hoa=_value(config, "monthly_hoa", 0.0),
        )

        analyzer = RentVsBuyAnalyzer(
            terms,
            costs,
            monthly_rent=config["monthly_rent"],
            rent_increase_pct=_value(config, "rent_increase_pct", 0.0),
            home_appreciation_pct=_value(config, "home_appreciation_pct", 0.0),
            investment_return_pct=_value(config, "investment_return_pct", 0.0),
            marginal_tax_rate_pct=_value(config, "marginal_tax_rate_pct", 0.0),
            closing_costs=_value(config, "closing_costs", 0.0),
            years=_value(config, "years", 10),
            maintenance_rate_pct=config.get("maintenance_rate_pct"),
            county_code=config.get("county_code"),
        )
        results = analyzer.summary()
        logger.debug(
            "rent_vs_buy: years=%d break_even=%s choice=%s",
            analyzer.years, results["break_even_year"], results["recommendation"]["choice"],
        )
        return {"inputs": config, "results": results}

    # ---------------------------------------------------------
    # Extra payments & pre-approval
    # ---------------------------------------------------------

    def extra_payments(self, config: Dict[str, Any]) -> Dict[str, Any]:
        plans = [self._extra_plan(entry) for entry in config.get("plans") or []]
        analyzer = ExtraPaymentsAnalyzer(
            principal=config["loan_amount"],
            annual_rate_pct=config["interest_rate_pct"],
            term_months=config["loan_term_years"] * 12,
            plans=plans,
        )
        results = analyzer.compare()
        if len(plans) > 1:
            results["scenarios"] = analyzer.compare_each()
        return {"inputs": config, "results": results}

    @staticmethod
    def _extra_plan(entry: Dict[str, Any]) -> ExtraPaymentPlan:
        return ExtraPaymentPlan(
            kind=entry["kind"],
            amount=entry["amount"],
            month_of_year=_value(entry, "month_of_year", 1),
            year=_value(entry, "year", 1),
            start_year=_value(entry, "start_year", 1),
            name=entry.get("name"),
        )

    def pre_approval(self, config: Dict[str, Any]) -> Dict[str, Any]:
        estimator = PreApprovalEstimator(
            annual_income=config["annual_income"],
            monthly_debts=_value(config, "monthly_debts", 0.0),
            credit_score=config["credit_score"],
            down_payment=config["down_payment"],
            home_price=config["home_price"],
        )
        return {"inputs": config, "results": estimator.summary()}

    # ---------------------------------------------------------
    # Reference data views
    # ---------------------------------------------------------

    def counties(self) -> List[Dict[str, Any]]:
        return county_catalog()

    def market_rates(self) -> Dict[str, Any]:
        reference = get_reference_data()
        rates = dict(reference.market_rates)
        rates["last_updated"] = reference.updated
        rates["table_version"] = reference.version
        return rates

    def calculator_options(self) -> Dict[str, Any]:
        reference = get_reference_data()
        market = reference.market
        return {
            "loan_terms": [
                {"value": years, "label": f"{years} years"} for years in reference.fixed_term_years
            ],
            "arm_initial_periods": list(reference.arm_initial_period_years),
            "arm_adjustment_periods": list(reference.arm_adjustment_period_years),
            "rent_vs_buy_horizons": list(reference.rent_vs_buy_horizon_years),
            "loan_types": list(reference.loan_types),
            "counties": [
                {"code": c["code"], "name": c["name"], "tax_rate_pct": c["tax_rate_pct"]}
                for c in county_catalog()
            ],
            "defaults": {
                "interest_rate_pct": market.interest_rate_pct,
                "property_tax_rate_pct": market.property_tax_rate_pct,
                "home_insurance_rate_pct": market.home_insurance_rate_pct,
                "pmi_rate_pct": market.pmi_rate_pct,
                "maintenance_rate_pct": market.maintenance_rate_pct,
                "monthly_hoa": market.hoa_monthly,
                "debt_to_income_ratio": market.back_end_dti,
            },
            "reference_version": reference.version,
        }

    # ---------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------

    @staticmethod
    def _loan_terms(config: Dict[str, Any], rate_key: Optional[str] = None) -> LoanTerms:
        return LoanTerms(
            home_price=config["home_price"],
            down_payment=config["down_payment"],
            annual_rate_pct=config[rate_key or "interest_rate_pct"],
            term_years=config["loan_term_years"],
        )
