# src/brrrr/services/validation.py

import math
from dataclasses import dataclass, fields
from typing import Any

from brrrr.domain.brrrr import BRRRRInputs, wire_name


@dataclass(frozen=True)
class FieldRule:
    label: str
    min: float | None = None
    max: float | None = None
    required: bool = False     # 0 counts as blank


# Form rules for the BRRRR calculator, keyed by BRRRRInputs attribute.
BRRRR_RULES: dict[str, FieldRule] = {
    # Buy
    "purchase_price": FieldRule("Purchase Price", min=1000, required=True),
    "down_payment_percent": FieldRule("Down Payment", min=0, max=100, required=True),
    "closing_costs": FieldRule("Closing Costs", min=0),
    "acquisition_fees": FieldRule("Acquisition Fees", min=0),
    "holding_costs": FieldRule("Monthly Holding Costs", min=0),
    # Rehab
    "renovation_budget": FieldRule("Renovation Budget", min=0, required=True),
    "contingency_percent": FieldRule("Contingency", min=0, max=50),
    "rehab_duration": FieldRule("Rehab Duration", min=1, max=24),
    "rehab_financing_rate": FieldRule("Financing Rate", min=0, max=30),
    # Rent
    "monthly_rent": FieldRule("Monthly Rent", min=100, required=True),
    "vacancy_rate": FieldRule("Vacancy Rate", min=0, max=50),
    "property_management": FieldRule("Property Management", min=0),
    "insurance": FieldRule("Insurance", min=0),
    "property_tax": FieldRule("Property Tax", min=0),
    "maintenance": FieldRule("Maintenance", min=0),
    # Refinance
    "arv": FieldRule("After Repair Value", min=1000, required=True),
    "refinance_ltv": FieldRule("Refinance LTV", min=50, max=90),
    "new_loan_rate": FieldRule("New Loan Rate", min=0, max=15),
    "new_loan_term": FieldRule("New Loan Term", min=10, max=40),
    "refinance_costs": FieldRule("Refinance Costs", min=0),
}


@dataclass(frozen=True)
class FieldError:
    field: str      # wire name, e.g. "purchasePrice"
    message: str


class InputValidationError(ValueError):
    """All rule violations for one set of inputs, joined into the message."""

    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors))


def _to_num(val: Any, field_name: str) -> float:
    """
    Coerce values like:
      - 250000
      - "250000"
      - "$250,000"
      - "6.5%"
    into float. Percent fields stay on the 0-100 scale (no /100 here).
    """
    if val is None:
        raise ValueError(f"Missing required numeric field: {field_name}")
    if isinstance(val, bool):
        raise ValueError(f"Invalid type for {field_name}: {type(val)}")
    if isinstance(val, (int, float)):
        f = float(val)
    elif isinstance(val, str):
        s = val.strip().replace("$", "").replace(",", "")
        if s.endswith("%"):
            s = s[:-1]
        if not s:
            raise ValueError(f"Missing required numeric field: {field_name}")
        try:
            f = float(s)
        except ValueError:
            raise ValueError(f"Invalid number for {field_name}: {val!r}") from None
    else:
        raise ValueError(f"Invalid type for {field_name}: {type(val)}")
    if not math.isfinite(f):
        raise ValueError(f"{field_name} must be a finite number")
    return f


def parse_inputs(raw: dict[str, Any]) -> BRRRRInputs:
    """
    Boundary parser: raw form/JSON payload -> BRRRRInputs.

    Accepts camelCase or snake_case keys. Every field is required; callers that
    want blanks treated as 0 must fill them in before calling.
    """
    values: dict[str, float] = {}
    for f in fields(BRRRRInputs):
        key = wire_name(f.name)
        if f.name in raw:
            val = raw[f.name]
        elif key in raw:
            val = raw[key]
        else:
            raise ValueError(f"Missing required field: {key}")
        values[f.name] = _to_num(val, key)
    return BRRRRInputs(**values)


def validate_inputs(inputs: BRRRRInputs) -> list[FieldError]:
    errors: list[FieldError] = []
    for name, rule in BRRRR_RULES.items():
        v = getattr(inputs, name)
        if rule.required and v == 0:
            errors.append(FieldError(wire_name(name), f"{rule.label} is required"))
        elif rule.min is not None and v < rule.min:
            errors.append(FieldError(wire_name(name), f"{rule.label} must be at least {rule.min:g}"))
        elif rule.max is not None and v > rule.max:
            errors.append(FieldError(wire_name(name), f"{rule.label} must be at most {rule.max:g}"))
    return errors


def ensure_valid(inputs: BRRRRInputs) -> BRRRRInputs:
    errors = validate_inputs(inputs)
    if errors:
        raise InputValidationError(errors)
    return inputs


def validate_deal_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Please enter a deal name before saving.")
    return cleaned


def validate_traditional(
    property_price: float,
    down_payment: float,
    monthly_rent: float,
    operating_expenses: float,
) -> list[FieldError]:
    """Rules for the quick buy-and-hold calculator."""
    errors: list[FieldError] = []
    if property_price <= 0:
        errors.append(FieldError("propertyPrice", "Property price must be greater than 0"))
    if down_payment <= 0:
        errors.append(FieldError("downPayment", "Down payment must be greater than 0"))
    elif down_payment >= property_price:
        errors.append(FieldError("downPayment", "Down payment must be less than property price"))
    if monthly_rent <= 0:
        errors.append(FieldError("monthlyRent", "Monthly rent must be greater than 0"))
    if operating_expenses < 0:
        errors.append(FieldError("operatingExpenses", "Operating expenses cannot be negative"))
    return errors
