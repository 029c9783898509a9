import pytest

from models.amortization import level_payment
from models.errors import ValidationError
from models.payment_composer import PaymentComposer, monthly_pmi, pmi_required
from models.types import LoanTerms, RecurringCosts


class TestPMIRule:
    def test_exactly_twenty_percent_down_has_no_pmi(self):
        terms = LoanTerms(650_000, 130_000, 7.25, 30)
        assert not pmi_required(terms)
        assert monthly_pmi(terms, 0.5) == 0.0
        assert monthly_pmi(terms, None, supplied_monthly_pmi=250.0) == 0.0

    def test_below_twenty_percent_down_uses_rate(self):
        terms = LoanTerms(650_000, 65_000, 7.25, 30)
        assert pmi_required(terms)
        # 585000 * 0.5% / 12
        assert monthly_pmi(terms, 0.5) == pytest.approx(243.75)

    def test_supplied_amount_passes_through(self):
        terms = LoanTerms(650_000, 65_000, 7.25, 30)
        assert monthly_pmi(terms, None, supplied_monthly_pmi=180.0) == 180.0


class TestCompose:
    def test_components_add_up(self):
        terms = LoanTerms(650_000, 130_000, 7.25, 30)
        costs = RecurringCosts(
            monthly_property_tax=655.42,
            monthly_insurance=243.75,
            monthly_pmi=99.0,
            monthly_hoa=150.0,
            monthly_maintenance=100.0,
            monthly_utilities=50.0,
        )
        payment = PaymentComposer(terms, costs).compose()

        pi = level_payment(520_000, 7.25, 360)
        assert payment.principal_and_interest == pytest.approx(pi)
        # 20% down: supplied PMI is ignored
        assert payment.pmi == 0.0
        assert payment.pmi_required is False
        assert payment.total == pytest.approx(pi + 655.42 + 243.75 + 150.0 + 100.0 + 50.0)

    def test_pmi_included_below_threshold(self):
        terms = LoanTerms(500_000, 50_000, 6.0, 30)
        composer = PaymentComposer(terms, RecurringCosts(), pmi_annual_rate_pct=0.5)
        payment = composer.compose()
        assert payment.pmi_required is True
        assert payment.pmi == pytest.approx(450_000 * 0.005 / 12)
        assert composer.total_monthly_payment() == pytest.approx(
            level_payment(450_000, 6.0, 360) + payment.pmi
        )

    def test_no_costs_is_principal_and_interest(self):
        terms = LoanTerms(400_000, 100_000, 6.5, 15)
        composer = PaymentComposer(terms)
        assert composer.total_monthly_payment() == pytest.approx(composer.principal_and_interest())

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError) as exc:
            RecurringCosts(monthly_hoa=-10.0)
        assert exc.value.field == "monthly_hoa"


class TestSummary:
    def test_summary_fields(self):
        terms = LoanTerms(650_000, 130_000, 7.25, 30)
        summary = PaymentComposer(terms, RecurringCosts(monthly_hoa=150.0)).summary()

        assert summary["loan_amount"] == 520_000
        assert summary["down_payment_pct"] == 20.0
        assert summary["ltv_pct"] == 80.0
        assert summary["principal_and_interest"] == pytest.approx(3547.32, abs=0.01)
        assert summary["number_of_payments"] == 360
        assert len(summary["amortization_schedule"]) == 360
        assert summary["total_cost"] == pytest.approx(650_000 + summary["total_interest"], abs=0.01)

    def test_summary_without_schedule(self):
        terms = LoanTerms(650_000, 130_000, 7.25, 30)
        summary = PaymentComposer(terms).summary(include_schedule=False)
        assert "amortization_schedule" not in summary
