"""
rent_vs_buy.py

Year-by-year rent vs. buy projection.

Ownership side (per year):
- mortgage interest and principal from the amortization schedule
- property tax, insurance, HOA (monthly amounts * 12)
- PMI only below 20% down and only while a balance is outstanding
- maintenance as a percentage of the home value at the start of the year
- tax savings: mortgage interest * marginal tax rate
- principal paid is equity, not cost; appreciation grows the home value

Renting side (per year):
- rent, escalating annually by the rent increase rate
- the renter keeps the buyer's upfront cash (down payment + closing costs)
  invested, and each year also invests whatever owning would have cost on
  top of rent
- symmetrically, when rent costs more than owning, the buyer invests the
  surplus

Net position at year end:
- buy  = home equity (value - balance) + buyer's investment account
- rent = renter's investment account
Break-even year = first year buy > rent (None if never within the horizon).
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from config.reference_data import get_reference_data
from models.amortization import AmortizationEngine
from models.payment_composer import pmi_required
from models.types import LoanTerms, RecurringCosts, ResultMixin, require_member, require_non_negative
from services.property_tax_estimator import PropertyTaxEstimator


NEUTRAL_MONTHLY_GAP = 500.0


@dataclass(frozen=True)
class RentVsBuyYearRecord(ResultMixin):
    year: int
    home_value: float
    remaining_balance: float
    ownership_equity: float
    annual_ownership_outflow: float
    cumulative_ownership_cost: float
    annual_rent: float
    cumulative_rent_paid: float
    buyer_investment_value: float
    renter_investment_value: float
    buy_net_position: float
    rent_net_position: float
    net_difference: float


@dataclass(frozen=True)
class RentVsBuyResult(ResultMixin):
    years: Tuple[RentVsBuyYearRecord, ...]
    break_even_year: Optional[int]
    break_even_reached: bool
    upfront_cash: float
    monthly_comparison: Dict
    recommendation: Dict


class RentVsBuyAnalyzer:
    """
    Parameters:
        terms: LoanTerms for the purchase
        costs: RecurringCosts (monthly tax, insurance, PMI, HOA; maintenance
               and utilities on RecurringCosts are not used here: maintenance
               follows the home value and utilities are paid either way)
        monthly_rent: starting rent
        rent_increase_pct: annual rent escalation (percent)
        home_appreciation_pct: annual appreciation (percent, may be negative)
        investment_return_pct: annual return on invested cash (percent)
        marginal_tax_rate_pct: income tax rate applied to mortgage interest
        closing_costs: upfront buying costs
        years: analysis horizon (5, 10, 15 or 20)
        maintenance_rate_pct: annual maintenance as percent of home value
        county_code: when given, property tax comes from the county table
    """

    def __init__(
        self,
        terms: LoanTerms,
        costs: Optional[RecurringCosts],
        monthly_rent: float,
        rent_increase_pct: float = 0.0,
        home_appreciation_pct: float = 0.0,
        investment_return_pct: float = 0.0,
        marginal_tax_rate_pct: float = 0.0,
        closing_costs: float = 0.0,
        years: int = 10,
        maintenance_rate_pct: Optional[float] = None,
        county_code: Optional[str] = None,
    ):
        reference = get_reference_data()
        require_member("years", years, reference.rent_vs_buy_horizon_years)
        require_non_negative({
            "monthly_rent": monthly_rent,
            "rent_increase_pct": rent_increase_pct,
            "investment_return_pct": investment_return_pct,
            "marginal_tax_rate_pct": marginal_tax_rate_pct,
            "closing_costs": closing_costs,
        })

        self.terms = terms
        self.costs = costs or RecurringCosts()
        self.monthly_rent = monthly_rent
        self.rent_increase = rent_increase_pct / 100.0
        self.appreciation = home_appreciation_pct / 100.0
        self.investment_return = investment_return_pct / 100.0
        self.marginal_tax_rate = marginal_tax_rate_pct / 100.0
        self.closing_costs = closing_costs
        self.years = years
        self.maintenance_rate = (
            reference.market.maintenance_rate_pct if maintenance_rate_pct is None else maintenance_rate_pct
        ) / 100.0
        require_non_negative({"maintenance_rate_pct": self.maintenance_rate})

        if county_code:
            self.monthly_property_tax = PropertyTaxEstimator(county_code).estimate_monthly_tax(
                terms.home_price
            )
        else:
            self.monthly_property_tax = self.costs.monthly_property_tax

        # PMI stops at 20% down, whatever was supplied
        self.monthly_pmi = self.costs.monthly_pmi if pmi_required(terms) else 0.0

    # ----------------------------------------------------------
    # Helpers
    # ----------------------------------------------------------

    def _yearly_mortgage(self) -> List[Tuple[float, float, float]]:
        """
        (interest, principal, ending balance) for each year of the horizon.
        Years after payoff carry zeros and a zero balance.
        """
        engine = AmortizationEngine.for_loan(self.terms)
        totals = {}
        for entry in engine.iter_schedule():
            year = (entry.payment_index - 1) // 12 + 1
            if year > self.years:
                break
            interest, principal, _ = totals.get(year, (0.0, 0.0, 0.0))
            totals[year] = (
                interest + entry.interest_portion,
                principal + entry.principal_portion,
                entry.remaining_balance,
            )
        return [totals.get(year, (0.0, 0.0, 0.0)) for year in range(1, self.years + 1)]

    def _fixed_annual_costs(self) -> float:
        c = self.costs
        return 12.0 * (self.monthly_property_tax + c.monthly_insurance + c.monthly_hoa)

    # ----------------------------------------------------------
    # Simulation
    # ----------------------------------------------------------

    def project(self) -> List[RentVsBuyYearRecord]:
        upfront = self.terms.down_payment + self.closing_costs
        fixed_costs = self._fixed_annual_costs()
        opening_balance = self.terms.principal

        home_value = self.terms.home_price
        renter_account = upfront
        buyer_account = 0.0
        cumulative_cost = self.closing_costs
        cumulative_rent = 0.0
        annual_rent = self.monthly_rent * 12.0

        records = []
        for year, (interest, principal, balance) in enumerate(self._yearly_mortgage(), start=1):
            maintenance = home_value * self.maintenance_rate
            tax_savings = interest * self.marginal_tax_rate
            pmi = 12.0 * self.monthly_pmi if opening_balance > 0 else 0.0
            outflow = interest + principal + fixed_costs + pmi + maintenance - tax_savings
            cumulative_cost += outflow - principal
            cumulative_rent += annual_rent

            gap = outflow - annual_rent
            renter_account = renter_account * (1 + self.investment_return) + max(0.0, gap)
            buyer_account = buyer_account * (1 + self.investment_return) + max(0.0, -gap)

            home_value = home_value * (1 + self.appreciation)
            equity = home_value - balance
            buy_net = equity + buyer_account

            records.append(
                RentVsBuyYearRecord(
                    year=year,
                    home_value=home_value,
                    remaining_balance=balance,
                    ownership_equity=equity,
                    annual_ownership_outflow=outflow,
                    cumulative_ownership_cost=cumulative_cost,
                    annual_rent=annual_rent,
                    cumulative_rent_paid=cumulative_rent,
                    buyer_investment_value=buyer_account,
                    renter_investment_value=renter_account,
                    buy_net_position=buy_net,
                    rent_net_position=renter_account,
                    net_difference=buy_net - renter_account,
                )
            )
            annual_rent = annual_rent * (1 + self.rent_increase)
            opening_balance = balance

        return records

    def monthly_comparison(self) -> Dict:
        """
        First-year monthly snapshot: ownership breakdown vs. rent.
        """
        engine = AmortizationEngine.for_loan(self.terms)
        first_year = engine.schedule()[:12]
        avg_interest = sum(e.interest_portion for e in first_year) / len(first_year)

        mortgage = engine.monthly_payment()
        maintenance = self.terms.home_price * self.maintenance_rate / 12.0
        c = self.costs
        total = (
            mortgage
            + self.monthly_property_tax
            + c.monthly_insurance
            + self.monthly_pmi
            + c.monthly_hoa
            + maintenance
        )
        after_tax = total - avg_interest * self.marginal_tax_rate

        return {
            "buying": {
                "total": round(total, 2),
                "after_tax": round(after_tax, 2),
                "breakdown": {
                    "mortgage": round(mortgage, 2),
                    "property_tax": round(self.monthly_property_tax, 2),
                    "insurance": round(c.monthly_insurance, 2),
                    "pmi": round(self.monthly_pmi, 2),
                    "hoa": round(c.monthly_hoa, 2),
                    "maintenance": round(maintenance, 2),
                },
            },
            "renting": {
                "rent": round(self.monthly_rent, 2),
                "total": round(self.monthly_rent, 2),
            },
            "difference": round(after_tax - self.monthly_rent, 2),
        }

    def analyze(self) -> RentVsBuyResult:
        records = self.project()
        differences = np.array([r.net_difference for r in records])
        ahead = differences > 0

        break_even = int(np.argmax(ahead)) + 1 if ahead.any() else None
        comparison = self.monthly_comparison()

        return RentVsBuyResult(
            years=tuple(records),
            break_even_year=break_even,
            break_even_reached=break_even is not None,
            upfront_cash=self.terms.down_payment + self.closing_costs,
            monthly_comparison=comparison,
            recommendation=self._recommend(break_even, comparison["difference"]),
        )

    def _recommend(self, break_even: Optional[int], monthly_difference: float) -> Dict:
        if break_even is not None and break_even <= 5 and monthly_difference < 0:
            return {
                "choice": "buy",
                "reasoning": [
                    f"Buying becomes financially advantageous after {break_even} years",
                    "Monthly costs favor buying with tax benefits",
                ],
            }
        if break_even is None or monthly_difference > NEUTRAL_MONTHLY_GAP:
            return {
                "choice": "rent",
                "reasoning": [
                    "Renting provides better short-term financial flexibility",
                    "High upfront costs make buying less attractive",
                ],
            }
        return {
            "choice": "neutral",
            "reasoning": [
                f"Buying overtakes renting in year {break_even} of {self.years}",
                "Financial benefits are relatively balanced",
                "Decision should prioritize lifestyle and long-term plans",
            ],
        }

    def summary(self) -> Dict:
        r = self.analyze()
        final = r.years[-1]
        return {
            "years_analyzed": self.years,
            "upfront_cash": round(r.upfront_cash, 2),
            "break_even_year": r.break_even_year,
            "break_even_reached": r.break_even_reached,
            "final_buy_net_position": round(final.buy_net_position, 2),
            "final_rent_net_position": round(final.rent_net_position, 2),
            "final_net_difference": round(final.net_difference, 2),
            "monthly_comparison": r.monthly_comparison,
            "recommendation": r.recommendation,
            "yearly": [
                {k: (round(v, 2) if isinstance(v, float) else v) for k, v in rec.to_dict().items()}
                for rec in r.years
            ],
        }
