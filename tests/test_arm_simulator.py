from dataclasses import replace

import pytest

from models.amortization import level_payment
from models.arm_simulator import (
    ADJUSTING_PERIOD,
    FIXED_PERIOD,
    ARMSimulator,
    clamp_rate,
)
from models.errors import ValidationError
from models.types import ARMSchedule, LoanTerms


def _schedule(**overrides):
    values = dict(
        initial_rate_pct=6.0,
        initial_period_years=5,
        adjustment_period_years=1,
        initial_cap_pct=2.0,
        periodic_cap_pct=1.0,
        lifetime_cap_pct=5.0,
        margin_pct=2.5,
        current_index_pct=5.3,
    )
    values.update(overrides)
    return ARMSchedule(**values)


TERMS = LoanTerms(650_000, 130_000, 6.0, 30)


class TestClampRate:
    def test_initial_cap(self):
        rate, cap = clamp_rate(_schedule(), 6.0, 12.5, first_adjustment=True)
        assert rate == 8.0
        assert cap == "initial"

    def test_periodic_cap(self):
        rate, cap = clamp_rate(_schedule(), 8.0, 12.5, first_adjustment=False)
        assert rate == 9.0
        assert cap == "periodic"

    def test_lifetime_cap_wins(self):
        schedule = _schedule(initial_cap_pct=5.0, lifetime_cap_pct=2.0)
        rate, cap = clamp_rate(schedule, 6.0, 12.5, first_adjustment=True)
        assert rate == 8.0
        assert cap == "lifetime"

    def test_lifetime_floor(self):
        schedule = _schedule(initial_cap_pct=5.0, lifetime_cap_pct=2.0)
        rate, cap = clamp_rate(schedule, 6.0, 1.0, first_adjustment=True)
        assert rate == 4.0
        assert cap == "lifetime"

    def test_uncapped(self):
        rate, cap = clamp_rate(_schedule(), 6.0, 7.8, first_adjustment=True)
        assert rate == pytest.approx(7.8)
        assert cap is None


class TestSimulation:
    def test_fixed_period_payment(self):
        result = ARMSimulator(_schedule(), TERMS).simulate()
        expected = level_payment(520_000, 6.0, 360)

        fixed = [p for p in result.payments if p.phase == FIXED_PERIOD]
        assert len(fixed) == 60
        assert all(p.payment == pytest.approx(expected) for p in fixed)
        assert result.initial_payment == pytest.approx(expected)

    def test_first_adjustment(self):
        result = ARMSimulator(_schedule(), TERMS).simulate()
        first = result.rate_path[0]

        assert first.month == 61
        assert first.candidate_rate_pct == pytest.approx(7.8)
        assert first.effective_rate_pct == pytest.approx(7.8)
        assert result.payments[60].phase == ADJUSTING_PERIOD

    def test_adjusted_payment_reamortizes_remaining_balance(self):
        result = ARMSimulator(_schedule(), TERMS).simulate()
        balance_at_reset = result.payments[59].remaining_balance

        expected = level_payment(balance_at_reset, 7.8, 300)
        assert result.rate_path[0].new_payment == pytest.approx(expected)
        assert result.payments[60].payment == pytest.approx(expected)

    def test_adjustment_count_and_payoff(self):
        result = ARMSimulator(_schedule(), TERMS).simulate()
        # months 61, 73, ..., 349
        assert len(result.rate_path) == 25
        assert len(result.payments) == 360
        assert result.payments[-1].remaining_balance == 0.0
        assert sum(p.principal_portion for p in result.payments) == pytest.approx(520_000, abs=0.01)

    def test_rates_stay_in_lifetime_band(self):
        schedule = _schedule(index_step_pct=1.5)
        result = ARMSimulator(schedule, TERMS).simulate()

        for adj in result.rate_path:
            assert schedule.rate_floor_pct <= adj.effective_rate_pct <= schedule.rate_ceiling_pct + 1e-9

    def test_per_adjustment_caps(self):
        schedule = _schedule(index_step_pct=-2.0, current_index_pct=9.0)
        result = ARMSimulator(schedule, TERMS).simulate()

        first, *later = result.rate_path
        assert abs(first.effective_rate_pct - first.previous_rate_pct) <= schedule.initial_cap_pct + 1e-9
        for adj in later:
            assert abs(adj.effective_rate_pct - adj.previous_rate_pct) <= schedule.periodic_cap_pct + 1e-9

    def test_rising_index_hits_ceiling(self):
        schedule = _schedule(current_index_pct=20.0)
        result = ARMSimulator(schedule, TERMS).simulate()

        rates = [adj.effective_rate_pct for adj in result.rate_path]
        assert rates[:4] == pytest.approx([8.0, 9.0, 10.0, 11.0])
        assert max(rates) == pytest.approx(schedule.rate_ceiling_pct)
        assert result.max_payment > result.initial_payment

    def test_step_is_a_fold(self):
        simulator = ARMSimulator(_schedule(), TERMS)
        state = simulator.initial_state()

        state, entry, adjustment = simulator.step(state)
        assert state.month == 1
        assert adjustment is None
        assert entry.interest_portion == pytest.approx(520_000 * 0.06 / 12)
        assert state.balance == pytest.approx(520_000 - entry.principal_portion)

    def test_invalid_periods(self):
        with pytest.raises(ValidationError):
            _schedule(initial_period_years=2)
        with pytest.raises(ValidationError):
            _schedule(adjustment_period_years=5)
        with pytest.raises(ValidationError):
            _schedule(margin_pct=-1.0)


class TestScenarios:
    def test_summary_fields(self):
        summary = ARMSimulator(_schedule(), TERMS).summary()

        assert summary["rate_floor_pct"] == 1.0
        assert summary["rate_ceiling_pct"] == 11.0
        assert len(summary["yearly"]) == 30
        assert summary["yearly"][0]["scenario"] == "current"
        assert summary["worst_case"]["payment"] == max(row["payment"] for row in summary["yearly"])
        assert "payments" not in summary

    def test_compare_scenarios(self):
        comparison = ARMSimulator(_schedule(), TERMS).compare_scenarios()
        scenarios = comparison["scenarios"]

        assert set(scenarios) == {"current", "rising", "worst_case"}
        assert scenarios["worst_case"]["max_monthly_payment"] >= scenarios["rising"]["max_monthly_payment"]
        assert scenarios["rising"]["max_monthly_payment"] >= scenarios["current"]["max_monthly_payment"]
        assert comparison["fixed_rate_comparison"]["rate_pct"] == 6.75
        assert comparison["initial_savings_vs_fixed"] > 0

    def test_scenario_schedules_keep_caps(self):
        schedule = _schedule()
        schedules = ARMSimulator(schedule, TERMS).scenario_schedules()
        assert schedules["rising"] == replace(schedule, index_step_pct=1.0)
        assert schedules["worst_case"].current_index_pct == schedule.rate_ceiling_pct
