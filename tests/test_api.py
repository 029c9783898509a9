import pytest
from fastapi.testclient import TestClient

from api.main import app


@pytest.fixture
def client():
    return TestClient(app)


MORTGAGE_PAYLOAD = {
    "home_price": 650_000,
    "down_payment": 130_000,
    "interest_rate_pct": 7.25,
    "loan_term_years": 30,
    "include_schedule": False,
}


class TestSystem:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestMortgageEndpoints:
    def test_calculate(self, client):
        response = client.post("/mortgage/calculate", json=MORTGAGE_PAYLOAD)
        assert response.status_code == 200

        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Mortgage calculation completed successfully"
        assert body["data"]["results"]["principal_and_interest"] == pytest.approx(3547.32, abs=0.01)

    def test_down_payment_above_price_is_400(self, client):
        payload = dict(MORTGAGE_PAYLOAD, home_price=100_000, down_payment=200_000)
        response = client.post("/mortgage/calculate", json=payload)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "ValidationError"
        assert detail["field"] == "down_payment"

    def test_term_outside_allowed_set_is_422(self, client):
        payload = dict(MORTGAGE_PAYLOAD, loan_term_years=12)
        assert client.post("/mortgage/calculate", json=payload).status_code == 422

    def test_rate_out_of_range_is_422(self, client):
        payload = dict(MORTGAGE_PAYLOAD, interest_rate_pct=25)
        assert client.post("/mortgage/calculate", json=payload).status_code == 422

    def test_affordability(self, client):
        response = client.post("/mortgage/affordability", json={
            "monthly_income": 10_000,
            "monthly_debts": 800,
            "interest_rate_pct": 7.25,
            "loan_term_years": 30,
            "down_payment": 100_000,
        })
        assert response.status_code == 200
        assert response.json()["data"]["results"]["max_monthly_housing_payment"] == 2800.0

    def test_refinance_negative_savings_is_not_an_error(self, client):
        response = client.post("/mortgage/refinance", json={
            "current_balance": 250_000,
            "current_rate_pct": 4.0,
            "current_monthly_payment": 1_200,
            "remaining_term_years": 25,
            "new_rate_pct": 7.0,
            "new_term_years": 30,
            "closing_costs": 3_000,
        })
        assert response.status_code == 200
        results = response.json()["data"]["results"]
        assert results["monthly_savings"] < 0
        assert results["break_even_months"] is None

    def test_arm(self, client):
        response = client.post("/mortgage/arm", json={
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
        })
        assert response.status_code == 200
        assert len(response.json()["data"]["results"]["rate_path"]) == 25

    def test_property_tax(self, client):
        response = client.post("/mortgage/property-tax", json={
            "home_price": 650_000, "county_code": "riverside",
        })
        assert response.status_code == 200
        assert response.json()["data"]["results"]["monthly_tax"] == 655.42

    def test_property_tax_unknown_county_is_422(self, client):
        response = client.post("/mortgage/property-tax", json={
            "home_price": 650_000, "county_code": "atlantis",
        })
        assert response.status_code == 422

    def test_rent_vs_buy(self, client):
        response = client.post("/mortgage/rent-vs-buy", json={
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
        })
        assert response.status_code == 200
        assert len(response.json()["data"]["results"]["yearly"]) == 10

    def test_pre_approval(self, client):
        response = client.post("/mortgage/pre-approval", json={
            "annual_income": 120_000,
            "monthly_debts": 1_000,
            "credit_score": 780,
            "down_payment": 100_000,
            "home_price": 500_000,
        })
        assert response.status_code == 200
        assert response.json()["data"]["results"]["approval_likelihood"] == 100


class TestReferenceEndpoints:
    def test_counties(self, client):
        response = client.get("/mortgage/counties")
        assert response.status_code == 200
        assert len(response.json()["data"]) == 8

    def test_rates(self, client):
        response = client.get("/mortgage/rates")
        assert response.status_code == 200
        assert response.json()["data"]["conventional"]["30-year"] == 7.25

    def test_calculator_options(self, client):
        response = client.get("/mortgage/calculator-options")
        assert response.status_code == 200
        assert response.json()["data"]["reference_version"] == "2024.1"
