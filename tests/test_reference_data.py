import json

import pytest

from config.reference_data import (
    REFERENCE_DATA_ENV,
    REFERENCE_DATA_PATH,
    ExemptionRule,
    get_reference_data,
    parse_reference_data,
)


class TestReferenceTable:
    def test_version_and_market_defaults(self):
        reference = get_reference_data()
        assert reference.version == "2024.1"
        assert reference.market.property_tax_rate_pct == 1.21
        assert reference.market.pmi_down_payment_threshold == 0.2
        assert reference.fixed_term_years == (10, 15, 20, 25, 30)

    def test_county_rates(self):
        riverside = get_reference_data().county("riverside")
        assert riverside.name == "Riverside County"
        assert riverside.base_rate_pct == pytest.approx(1.21)
        assert riverside.exemption("homestead").max_amount == 7000

    def test_unknown_county_is_none(self):
        assert get_reference_data().county("nowhere") is None

    def test_senior_rule_price_ceiling(self):
        rule = ExemptionRule("senior", 4.0, max_amount=5000, max_home_price=400_000)
        assert rule.amount_for(100_000) == 4000.0
        assert rule.amount_for(300_000) == 5000.0
        assert rule.amount_for(400_000) == 0.0

    def test_county_exemption_override(self):
        with REFERENCE_DATA_PATH.open() as handle:
            data = json.load(handle)
        data["counties"][0]["exemptions"] = {"homestead": {"percent_of_price": 1.0, "max_amount": 1000}}

        county = parse_reference_data(data).county(data["counties"][0]["code"])
        assert county.exemption("homestead").max_amount == 1000
        assert county.exemption("veteran").max_amount == 4000

    def test_environment_override(self, tmp_path, monkeypatch):
        with REFERENCE_DATA_PATH.open() as handle:
            data = json.load(handle)
        data["metadata"]["version"] = "test-9.9"
        path = tmp_path / "rates.json"
        path.write_text(json.dumps(data))

        monkeypatch.setenv(REFERENCE_DATA_ENV, str(path))
        assert get_reference_data().version == "test-9.9"

        monkeypatch.delenv(REFERENCE_DATA_ENV)
        assert get_reference_data().version == "2024.1"
