"""
arm_simulator.py

Adjustable-rate mortgage (ARM) payment path.

The loan walks month by month through two phases:
- fixed: months 1 .. initial_period * 12 at the initial rate, with the
  payment amortizing the full term
- adjusting: at month initial_period * 12 + 1 and then every
  adjustment_period * 12 months, the rate resets to index + margin,
  clamped to
    * +/- initial cap around the initial rate (first adjustment), or
      +/- periodic cap around the prior rate (later adjustments)
    * then the lifetime band [initial - lifetime cap, initial + lifetime cap]
      (never below 0). The lifetime band always wins.
  and the payment re-amortizes the current balance over the remaining months.

The walk is a fold over an immutable SimulationState: step() takes a state
and returns the next one plus that month's payment entry, so each month can
be tested on its own and scenarios can run independently.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple
import logging

import numpy as np

from config.reference_data import get_reference_data
from models.amortization import AmortizationEngine, apply_payment, level_payment, monthly_rate
from models.types import ARMSchedule, LoanTerms, ResultMixin


logger = logging.getLogger(__name__)

FIXED_PERIOD = "fixed"
ADJUSTING_PERIOD = "adjusting"


# ----------------------------------------------------------
# Value types
# ----------------------------------------------------------

@dataclass(frozen=True)
class SimulationState:
    month: int
    balance: float
    rate_pct: float
    payment: float
    phase: str
    adjustments: int
    index_pct: float
    cumulative_interest: float = 0.0


@dataclass(frozen=True)
class ARMPaymentEntry(ResultMixin):
    month: int
    phase: str
    rate_pct: float
    payment: float
    interest_portion: float
    principal_portion: float
    remaining_balance: float
    cumulative_interest: float


@dataclass(frozen=True)
class RateAdjustment(ResultMixin):
    adjustment_number: int
    month: int
    index_pct: float
    previous_rate_pct: float
    candidate_rate_pct: float
    effective_rate_pct: float
    cap_applied: Optional[str]
    new_payment: float


@dataclass(frozen=True)
class ARMSimulationResult(ResultMixin):
    payments: Tuple[ARMPaymentEntry, ...]
    rate_path: Tuple[RateAdjustment, ...]
    initial_payment: float
    max_payment: float
    total_interest: float
    total_paid: float


# ----------------------------------------------------------
# Rate clamping
# ----------------------------------------------------------

def clamp_rate(
    schedule: ARMSchedule,
    previous_rate_pct: float,
    candidate_rate_pct: float,
    first_adjustment: bool,
) -> Tuple[float, Optional[str]]:
    """
    Returns (effective_rate, cap_applied) where cap_applied is None,
    "initial", "periodic" or "lifetime".
    """
    cap = schedule.initial_cap_pct if first_adjustment else schedule.periodic_cap_pct
    rate = min(max(candidate_rate_pct, previous_rate_pct - cap), previous_rate_pct + cap)

    cap_applied = None
    if rate != candidate_rate_pct:
        cap_applied = "initial" if first_adjustment else "periodic"

    bounded = min(max(rate, schedule.rate_floor_pct), schedule.rate_ceiling_pct)
    if bounded != rate:
        cap_applied = "lifetime"

    return bounded, cap_applied


# ----------------------------------------------------------
# Simulator
# ----------------------------------------------------------

class ARMSimulator:
    """
    Parameters:
        schedule: ARMSchedule (initial rate, periods, caps, margin, index)
        terms: LoanTerms supplying the initial principal and full term;
               its annual rate is ignored in favor of the ARM initial rate

    Example:
        schedule = ARMSchedule(6.0, 5, 1, 2.0, 1.0, 5.0, 2.5, 5.3)
        terms = LoanTerms(650_000, 130_000, 6.0, 30)
        result = ARMSimulator(schedule, terms).simulate()
        result.rate_path[0].effective_rate_pct -> 7.8
    """

    def __init__(self, schedule: ARMSchedule, terms: LoanTerms):
        self.schedule = schedule
        self.terms = terms
        self.principal = terms.principal
        self.term_months = terms.term_months

    # ----------------------------------------------------------
    # State transitions
    # ----------------------------------------------------------

    def initial_state(self) -> SimulationState:
        s = self.schedule
        return SimulationState(
            month=0,
            balance=self.principal,
            rate_pct=s.initial_rate_pct,
            payment=level_payment(self.principal, s.initial_rate_pct, self.term_months),
            phase=FIXED_PERIOD,
            adjustments=0,
            index_pct=s.current_index_pct,
        )

    def is_adjustment_month(self, month: int) -> bool:
        first = self.schedule.first_adjustment_month
        if month < first or month > self.term_months:
            return False
        return (month - first) % self.schedule.adjustment_interval_months == 0

    def adjust(self, state: SimulationState, month: int) -> Tuple[SimulationState, RateAdjustment]:
        """
        Reset the rate at the start of `month` and re-amortize the balance.
        """
        s = self.schedule
        first = state.adjustments == 0
        index_pct = s.current_index_pct if first else state.index_pct + s.index_step_pct
        index_pct = max(0.0, index_pct)
        candidate = index_pct + s.margin_pct

        rate, cap_applied = clamp_rate(s, state.rate_pct, candidate, first)
        remaining = self.term_months - state.month
        payment = level_payment(state.balance, rate, remaining)

        adjustment = RateAdjustment(
            adjustment_number=state.adjustments + 1,
            month=month,
            index_pct=index_pct,
            previous_rate_pct=state.rate_pct,
            candidate_rate_pct=candidate,
            effective_rate_pct=rate,
            cap_applied=cap_applied,
            new_payment=payment,
        )
        logger.debug(
            "ARM adjustment %d at month %d: candidate=%.3f%% effective=%.3f%% cap=%s payment=%.2f",
            adjustment.adjustment_number, month, candidate, rate, cap_applied, payment,
        )

        new_state = replace(
            state,
            rate_pct=rate,
            payment=payment,
            phase=ADJUSTING_PERIOD,
            adjustments=state.adjustments + 1,
            index_pct=index_pct,
        )
        return new_state, adjustment

    def step(
        self, state: SimulationState
    ) -> Tuple[SimulationState, ARMPaymentEntry, Optional[RateAdjustment]]:
        """
        Advance one month: adjust the rate if due, then apply the payment.
        """
        month = state.month + 1
        adjustment = None
        if self.is_adjustment_month(month) and state.balance > 0:
            state, adjustment = self.adjust(state, month)

        final = month == self.term_months
        interest, principal, balance = apply_payment(
            state.balance, monthly_rate(state.rate_pct), state.payment, final=final
        )
        cumulative_interest = state.cumulative_interest + interest

        entry = ARMPaymentEntry(
            month=month,
            phase=state.phase,
            rate_pct=state.rate_pct,
            payment=interest + principal,
            interest_portion=interest,
            principal_portion=principal,
            remaining_balance=balance,
            cumulative_interest=cumulative_interest,
        )
        next_state = replace(
            state, month=month, balance=balance, cumulative_interest=cumulative_interest
        )
        return next_state, entry, adjustment

    # ----------------------------------------------------------
    # Full walk
    # ----------------------------------------------------------

    def simulate(self) -> ARMSimulationResult:
        state = self.initial_state()
        payments: List[ARMPaymentEntry] = []
        rate_path: List[RateAdjustment] = []

        while state.month < self.term_months:
            state, entry, adjustment = self.step(state)
            payments.append(entry)
            if adjustment is not None:
                rate_path.append(adjustment)

        amounts = np.array([p.payment for p in payments])
        return ARMSimulationResult(
            payments=tuple(payments),
            rate_path=tuple(rate_path),
            initial_payment=payments[0].payment,
            max_payment=float(amounts.max()),
            total_interest=state.cumulative_interest,
            total_paid=self.principal + state.cumulative_interest,
        )

    def yearly_view(self, result: Optional[ARMSimulationResult] = None) -> List[Dict]:
        """
        Rate and payment at the start of each loan year, labeled
        current / rising / falling / max for charting.
        """
        result = result or self.simulate()
        ceiling = self.schedule.rate_ceiling_pct
        initial = self.schedule.initial_rate_pct

        rows = []
        for entry in result.payments[::12]:
            year = (entry.month - 1) // 12 + 1
            if entry.phase == FIXED_PERIOD:
                label = "current"
            elif entry.rate_pct >= ceiling:
                label = "max"
            elif entry.rate_pct > initial:
                label = "rising"
            else:
                label = "falling"
            rows.append({
                "year": year,
                "rate_pct": round(entry.rate_pct, 4),
                "payment": round(entry.payment, 2),
                "scenario": label,
            })
        return rows

    def summary(self, include_payments: bool = False) -> Dict:
        result = self.simulate()
        yearly = self.yearly_view(result)

        worst_index = int(np.argmax([row["payment"] for row in yearly]))
        worst = yearly[worst_index]

        data = {
            "loan_amount": round(self.principal, 2),
            "term_months": self.term_months,
            "initial_monthly_payment": round(result.initial_payment, 2),
            "max_monthly_payment": round(result.max_payment, 2),
            "rate_floor_pct": round(self.schedule.rate_floor_pct, 4),
            "rate_ceiling_pct": round(self.schedule.rate_ceiling_pct, 4),
            "worst_case": {
                "year": worst["year"],
                "rate_pct": worst["rate_pct"],
                "payment": worst["payment"],
            },
            "total_interest": round(result.total_interest, 2),
            "total_paid": round(result.total_paid, 2),
            "rate_path": [
                {
                    "adjustment_number": a.adjustment_number,
                    "month": a.month,
                    "index_pct": round(a.index_pct, 4),
                    "previous_rate_pct": round(a.previous_rate_pct, 4),
                    "candidate_rate_pct": round(a.candidate_rate_pct, 4),
                    "effective_rate_pct": round(a.effective_rate_pct, 4),
                    "cap_applied": a.cap_applied,
                    "new_payment": round(a.new_payment, 2),
                }
                for a in result.rate_path
            ],
            "yearly": yearly,
        }
        if include_payments:
            data["payments"] = [
                {
                    "month": p.month,
                    "phase": p.phase,
                    "rate_pct": round(p.rate_pct, 4),
                    "payment": round(p.payment, 2),
                    "interest_portion": round(p.interest_portion, 2),
                    "principal_portion": round(p.principal_portion, 2),
                    "remaining_balance": round(p.remaining_balance, 2),
                }
                for p in result.payments
            ]
        return data

    # ----------------------------------------------------------
    # Scenario comparison
    # ----------------------------------------------------------

    def scenario_schedules(self) -> Dict[str, ARMSchedule]:
        """
        current: index stays flat
        rising: index climbs by the periodic cap at every adjustment
        worst_case: index jumps straight to the lifetime ceiling
        """
        s = self.schedule
        return {
            "current": replace(s, index_step_pct=0.0),
            "rising": replace(s, index_step_pct=s.periodic_cap_pct),
            "worst_case": replace(s, current_index_pct=s.rate_ceiling_pct, index_step_pct=0.0),
        }

    def fixed_rate_comparison(self) -> Dict:
        premium = get_reference_data().market.fixed_rate_premium_pct
        fixed_rate = self.schedule.initial_rate_pct + premium
        engine = AmortizationEngine(self.principal, fixed_rate, self.term_months)
        return {
            "rate_pct": round(fixed_rate, 4),
            "payment": round(engine.monthly_payment(), 2),
            "total_interest": round(engine.total_interest(), 2),
        }

    def compare_scenarios(self) -> Dict:
        scenarios = {}
        for name, schedule in self.scenario_schedules().items():
            summary = ARMSimulator(schedule, self.terms).summary()
            scenarios[name] = {
                "initial_monthly_payment": summary["initial_monthly_payment"],
                "max_monthly_payment": summary["max_monthly_payment"],
                "worst_case": summary["worst_case"],
                "total_interest": summary["total_interest"],
                "yearly": summary["yearly"],
            }

        fixed = self.fixed_rate_comparison()
        return {
            "scenarios": scenarios,
            "fixed_rate_comparison": fixed,
            "initial_savings_vs_fixed": round(
                fixed["payment"] - scenarios["current"]["initial_monthly_payment"], 2
            ),
        }
