# src/brrrr/api/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# --------------------------------------------
# BRRRR calculator
# --------------------------------------------

class BRRRRInputsPayload(BaseModel):
    """
    Wire shape of BRRRRInputs (camelCase). Values stay `Any` here so that
    "25%" / "$150,000" style form values reach services.validation, which
    owns the coercion and the error messages.
    """
    model_config = ConfigDict(extra="ignore")

    purchasePrice: Any = None
    downPaymentPercent: Any = None
    closingCosts: Any = None
    acquisitionFees: Any = None
    holdingCosts: Any = None

    renovationBudget: Any = None
    contingencyPercent: Any = None
    rehabDuration: Any = None
    rehabFinancingRate: Any = None

    monthlyRent: Any = None
    vacancyRate: Any = None
    propertyManagement: Any = None
    insurance: Any = None
    propertyTax: Any = None
    maintenance: Any = None

    arv: Any = None
    refinanceLTV: Any = None
    newLoanRate: Any = None
    newLoanTerm: Any = None
    refinanceCosts: Any = None

    def raw(self) -> dict[str, Any]:
        # only what the client actually sent, so missing fields are reported as missing
        return self.model_dump(exclude_unset=True)


class BRRRRResultsPayload(BaseModel):
    """inf/nan ratios (degenerate inputs) are sent as null."""
    totalAcquisitionCost: float | None
    initialCashNeeded: float | None

    totalRehabCost: float | None
    totalHoldingCost: float | None
    preStabilizationInvestment: float | None

    effectiveMonthlyRent: float | None
    monthlyOperatingExpenses: float | None
    netOperatingIncome: float | None
    preRefinanceCashFlow: float | None
    preRefinanceROI: float | None

    maxRefinanceLoan: float | None
    cashOutAmount: float | None
    newMonthlyPayment: float | None
    postRefinanceCashFlow: float | None
    postRefinanceROI: float | None
    remainingEquity: float | None

    totalInvestment: float | None
    equityCreated: float | None
    capitalRecycled: float | None
    rentToValueRatio: float | None


class CalculateRequest(BRRRRInputsPayload):
    # skip the form range rules and run the raw engine
    skipValidation: bool = False


# --------------------------------------------
# Traditional calculator
# --------------------------------------------

class TraditionalRequest(BaseModel):
    propertyPrice: float
    downPayment: float
    monthlyRent: float
    operatingExpenses: float


class TraditionalResponse(BaseModel):
    monthlyPayment: float | None
    netCashFlow: float | None
    cashOnCashReturn: float | None
    capRate: float | None
    profitable: bool


# --------------------------------------------
# Saved deals
# --------------------------------------------

class DealSaveRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    dealName: str
    inputs: dict[str, Any]
    notes: str | None = None


class DealNotesRequest(BaseModel):
    notes: str


class SavedDealItem(BaseModel):
    id: int
    deal_name: str
    inputs: dict[str, float | None]
    results: dict[str, float | None]
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class DealDeleted(BaseModel):
    deleted: bool
    id: int


class CompareRequest(BaseModel):
    ids: list[int] = Field(..., min_length=2)


class ComparedMetricItem(BaseModel):
    key: str
    label: str
    values: list[float | None]
    formatted: list[str]
    trends: list[Literal["high", "low", "flat"]]


class CompareResponse(BaseModel):
    deal_ids: list[int]
    deal_names: list[str]
    metrics: list[ComparedMetricItem]
    winner_id: int | None = None
    winner_name: str | None = None
    winner_roi: float | None = None
