from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from typing import Any

from brrrr.domain.finance import ACQUISITION_LOAN_MONTHS, ieee_div, monthly_payment

# acronyms keep their capitals on the wire: refinanceLTV, postRefinanceROI
_ACRONYMS = {"ltv": "LTV", "roi": "ROI"}


def wire_name(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(_ACRONYMS.get(p, p.capitalize()) for p in rest)


def _floor_zero(x: float) -> float:
    # max(0, x) that lets nan through instead of swallowing it
    if math.isnan(x):
        return x
    return max(0.0, x)


@dataclass(frozen=True)
class BRRRRInputs:
    # Buy
    purchase_price: float
    down_payment_percent: float   # 0-100
    closing_costs: float
    acquisition_fees: float
    holding_costs: float          # per month while rehabbing

    # Rehab
    renovation_budget: float
    contingency_percent: float    # 0-100
    rehab_duration: float         # months
    rehab_financing_rate: float   # annual %, applied to the acquisition loan

    # Rent
    monthly_rent: float
    vacancy_rate: float           # 0-100
    property_management: float
    insurance: float
    property_tax: float
    maintenance: float

    # Refinance
    arv: float
    refinance_ltv: float          # 0-100
    new_loan_rate: float          # annual %
    new_loan_term: float          # years
    refinance_costs: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BRRRRInputs":
        """
        Build from either snake_case or camelCase keys (purchasePrice, refinanceLTV, ...).
        Values must already be numbers; string coercion lives in services.validation.
        """
        kwargs: dict[str, float] = {}
        for f in fields(cls):
            if f.name in data:
                kwargs[f.name] = float(data[f.name])
            elif wire_name(f.name) in data:
                kwargs[f.name] = float(data[wire_name(f.name)])
            else:
                raise ValueError(f"Missing required field: {wire_name(f.name)}")
        return cls(**kwargs)

    def to_dict(self) -> dict[str, float]:
        return {wire_name(k): v for k, v in asdict(self).items()}

    @property
    def down_payment_amount(self) -> float:
        return (self.purchase_price * self.down_payment_percent) / 100

    @property
    def contingency_amount(self) -> float:
        return (self.renovation_budget * self.contingency_percent) / 100

    @property
    def loan_amount(self) -> float:
        """Acquisition loan carried until the refinance."""
        return self.purchase_price - self.down_payment_amount


@dataclass(frozen=True)
class BRRRRResults:
    # Buy
    total_acquisition_cost: float
    initial_cash_needed: float

    # Rehab
    total_rehab_cost: float
    total_holding_cost: float
    pre_stabilization_investment: float

    # Rent
    effective_monthly_rent: float
    monthly_operating_expenses: float
    net_operating_income: float   # monthly
    pre_refinance_cash_flow: float
    pre_refinance_roi: float

    # Refinance
    max_refinance_loan: float
    cash_out_amount: float
    new_monthly_payment: float
    post_refinance_cash_flow: float
    post_refinance_roi: float
    remaining_equity: float

    # Summary
    total_investment: float
    equity_created: float
    capital_recycled: float
    rent_to_value_ratio: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BRRRRResults":
        kwargs = {}
        for f in fields(cls):
            key = f.name if f.name in data else wire_name(f.name)
            kwargs[f.name] = float(data[key])
        return cls(**kwargs)

    def to_dict(self) -> dict[str, float]:
        return {wire_name(k): v for k, v in asdict(self).items()}


def calculate_brrrr(inputs: BRRRRInputs) -> BRRRRResults:
    """
    Buy -> Rehab -> Rent -> Refinance model for a single deal.

    Pure and deterministic: no rounding, no I/O, never raises for finite input.
    Ratios divide by caller-supplied values without a guard (nan/inf for a zero
    investment or zero ARV); only post-refinance ROI is pinned to 0 when no
    capital is left in the deal.

    Note: rehab_financing_rate is the rate of the *acquisition* loan
    (purchase price minus down payment, 30y amortization). It is not charged
    on the renovation budget.
    """
    # --- Buy ---
    down_payment = inputs.down_payment_amount
    total_acquisition_cost = inputs.purchase_price + inputs.closing_costs + inputs.acquisition_fees
    initial_cash_needed = down_payment + inputs.closing_costs + inputs.acquisition_fees

    # --- Rehab ---
    total_rehab_cost = inputs.renovation_budget + inputs.contingency_amount
    total_holding_cost = inputs.holding_costs * inputs.rehab_duration
    pre_stabilization_investment = initial_cash_needed + total_rehab_cost + total_holding_cost

    # --- Rent ---
    effective_monthly_rent = inputs.monthly_rent * (1 - inputs.vacancy_rate / 100)
    monthly_operating_expenses = (
        inputs.property_management
        + inputs.insurance
        + inputs.property_tax
        + inputs.maintenance
    )
    noi = effective_monthly_rent - monthly_operating_expenses

    loan_amount = inputs.loan_amount
    existing_payment = monthly_payment(loan_amount, inputs.rehab_financing_rate, ACQUISITION_LOAN_MONTHS)

    pre_refinance_cash_flow = noi - existing_payment
    pre_refinance_roi = ieee_div(pre_refinance_cash_flow * 12, pre_stabilization_investment) * 100

    # --- Refinance ---
    max_refinance_loan = (inputs.arv * inputs.refinance_ltv) / 100
    # the investor never brings cash to the refi table in this model
    cash_out_amount = _floor_zero(max_refinance_loan - loan_amount - inputs.refinance_costs)

    new_payment = monthly_payment(max_refinance_loan, inputs.new_loan_rate, inputs.new_loan_term * 12)
    post_refinance_cash_flow = noi - new_payment
    remaining_equity = inputs.arv - max_refinance_loan

    total_investment = _floor_zero(pre_stabilization_investment - cash_out_amount)
    if total_investment > 0:
        post_refinance_roi = (post_refinance_cash_flow * 12) / total_investment * 100
    else:
        post_refinance_roi = 0.0

    # --- Summary ---
    equity_created = inputs.arv - inputs.purchase_price
    capital_recycled = ieee_div(cash_out_amount, pre_stabilization_investment) * 100
    rent_to_value_ratio = ieee_div(inputs.monthly_rent * 12, inputs.arv) * 100

    return BRRRRResults(
        total_acquisition_cost=total_acquisition_cost,
        initial_cash_needed=initial_cash_needed,
        total_rehab_cost=total_rehab_cost,
        total_holding_cost=total_holding_cost,
        pre_stabilization_investment=pre_stabilization_investment,
        effective_monthly_rent=effective_monthly_rent,
        monthly_operating_expenses=monthly_operating_expenses,
        net_operating_income=noi,
        pre_refinance_cash_flow=pre_refinance_cash_flow,
        pre_refinance_roi=pre_refinance_roi,
        max_refinance_loan=max_refinance_loan,
        cash_out_amount=cash_out_amount,
        new_monthly_payment=new_payment,
        post_refinance_cash_flow=post_refinance_cash_flow,
        post_refinance_roi=post_refinance_roi,
        remaining_equity=remaining_equity,
        total_investment=total_investment,
        equity_created=equity_created,
        capital_recycled=capital_recycled,
        rent_to_value_ratio=rent_to_value_ratio,
    )
