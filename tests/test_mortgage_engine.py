import pytest

from engine.mortgage_engine import MortgageEngine
from models.errors import ValidationError


@pytest.fixture
def engine():
    return MortgageEngine()


class TestCalculate:
    def test_estimates_tax_and_insurance_when_omitted(self, engine):
        result = engine.calculate({
            "home_price": 650_000,
            "down_payment": 130_000,
            "interest_rate_pct": 7.25,
            "loan_term_years": 30,
            "county_code": "riverside",
            "include_schedule": False,
        })["results"]

        monthly = result["monthly_payment"]
        assert monthly["property_tax"] == 655.42
        # 0.45% of 650k / 12
        assert monthly["insurance"] == 243.75
        assert monthly["pmi"] == 0.0
        assert result["principal_and_interest"] == pytest.approx(3547.32, abs=0.01)
        assert "amortization_schedule" not in result

    def test_annual_amounts_are_split_monthly(self, engine):
        result = engine.calculate({
            "home_price": 650_000,
            "down_payment": 130_000,
            "interest_rate_pct": 7.25,
            "loan_term_years": 30,
            "annual_property_tax": 6_000,
            "annual_insurance": 1_200,
            "monthly_hoa": 150,
        })["results"]

        monthly = result["monthly_payment"]
        assert monthly["property_tax"] == 500.0
        assert monthly["insurance"] == 100.0
        assert monthly["hoa"] == 150.0
        assert len(result["amortization_schedule"]) == 360

    def test_market_pmi_below_twenty_percent(self, engine):
        result = engine.calculate({
            "home_price": 500_000,
            "down_payment": 50_000,
            "interest_rate_pct": 6.0,
            "loan_term_years": 30,
            "include_schedule": False,
        })["results"]
        assert result["monthly_payment"]["pmi"] == pytest.approx(187.5)
        assert result["monthly_payment"]["pmi_required"] is True

    def test_down_payment_above_price(self, engine):
        with pytest.raises(ValidationError):
            engine.calculate({
                "home_price": 100_000,
                "down_payment": 200_000,
                "interest_rate_pct": 6.0,
                "loan_term_years": 30,
            })


class TestOtherCalculators:
    def test_amortization_includes_yearly(self, engine):
        result = engine.amortization({
            "loan_amount": 300_000, "interest_rate_pct": 6.0, "loan_term_years": 15,
        })["results"]
        assert len(result["schedule"]) == 180
        assert len(result["yearly"]) == 15

    def test_affordability_defaults_to_back_end_dti(self, engine):
        result = engine.affordability({
            "monthly_income": 10_000,
            "monthly_debts": 800,
            "interest_rate_pct": 7.25,
            "loan_term_years": 30,
            "down_payment": 100_000,
        })["results"]
        assert result["max_monthly_housing_payment"] == 2800.0
        assert result["inputs"]["max_dti_ratio"] == 0.36

    def test_refinance(self, engine):
        result = engine.refinance({
            "current_balance": 400_000,
            "current_rate_pct": 7.5,
            "current_monthly_payment": 2_800,
            "remaining_term_years": 28,
            "new_rate_pct": 6.0,
            "new_term_years": 30,
            "closing_costs": 6_000,
        })["results"]
        assert result["break_even_applicable"] is True

    def test_arm_and_scenarios(self, engine):
        config = {
            "home_price": 650_000,
            "down_payment": 130_000,
            "loan_term_years": 30,
            "initial_rate_pct": 6.0,
            "initial_period_years": 5,
            "adjustment_period_years": 1,
            "initial_cap_pct": 2.0,
            "periodic_cap_pct": 1.0,
            "lifetime_cap_pct": 5.0,
            "margin_pct": 2.5,
            "current_index_pct": 5.3,
        }
        arm = engine.arm(config)["results"]
        assert arm["rate_path"][0]["effective_rate_pct"] == pytest.approx(7.8)

        scenarios = engine.arm_scenarios(config)["results"]
        assert set(scenarios["scenarios"]) == {"current", "rising", "worst_case"}

    def test_property_tax_with_exemptions(self, engine):
        result = engine.property_tax({
            "home_price": 650_000,
            "county_code": "riverside",
            "exemptions": {"homestead": True},
        })["results"]
        assert result["annual_tax"] == 865.0

    def test_rent_vs_buy_rates_to_monthly_costs(self, engine):
        result = engine.rent_vs_buy({
            "home_price": 600_000,
            "down_payment": 120_000,
            "interest_rate_pct": 6.5,
            "loan_term_years": 30,
            "monthly_rent": 3_000,
            "property_tax_rate_pct": 1.2,
            "home_insurance_rate_pct": 0.4,
            "monthly_hoa": 0,
            "maintenance_rate_pct": 1.0,
            "closing_costs": 15_000,
            "rent_increase_pct": 3.0,
            "home_appreciation_pct": 3.0,
            "investment_return_pct": 6.0,
            "marginal_tax_rate_pct": 24.0,
            "years": 10,
        })["results"]

        breakdown = result["monthly_comparison"]["buying"]["breakdown"]
        assert breakdown["property_tax"] == 600.0
        assert breakdown["insurance"] == 200.0
        assert breakdown["pmi"] == 0.0
        assert len(result["yearly"]) == 10

    def test_extra_payments_with_scenarios(self, engine):
        result = engine.extra_payments({
            "loan_amount": 300_000,
            "interest_rate_pct": 6.5,
            "loan_term_years": 30,
            "plans": [
                {"kind": "monthly", "amount": 100.0},
                {"kind": "one_time", "amount": 10_000.0, "year": 2},
            ],
        })["results"]
        assert result["with_extra_payments"]["payoff_months"] < 360
        assert len(result["scenarios"]) == 2

    def test_pre_approval(self, engine):
        result = engine.pre_approval({
            "annual_income": 120_000,
            "monthly_debts": 1_000,
            "credit_score": 780,
            "down_payment": 100_000,
            "home_price": 500_000,
        })["results"]
        assert result["approval_likelihood"] == 100


class TestReferenceViews:
    def test_calculator_options(self, engine):
        options = engine.calculator_options()
        assert [t["value"] for t in options["loan_terms"]] == [10, 15, 20, 25, 30]
        assert len(options["counties"]) == 8
        assert options["reference_version"] == "2024.1"

    def test_market_rates(self, engine):
        rates = engine.market_rates()
        assert rates["conventional"]["30-year"] == 7.25
        assert rates["table_version"] == "2024.1"
