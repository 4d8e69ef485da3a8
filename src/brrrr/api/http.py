# src/brrrr/api/http.py
from __future__ import annotations

import math
from dataclasses import asdict
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse

from brrrr.adapters.config import config
from brrrr.adapters.logging_utils import get_logger
from brrrr.adapters.sql_repo import SqlDealRepository
from brrrr.domain.finance import calculate_traditional
from brrrr.domain.ports import DealRepository, SavedDeal
from brrrr.services import deals as deal_service
from brrrr.services.deals import DealNotFoundError
from brrrr.services.validation import InputValidationError, validate_traditional
from .schemas import (
    BRRRRResultsPayload,
    CalculateRequest,
    CompareRequest,
    CompareResponse,
    DealDeleted,
    DealNotesRequest,
    DealSaveRequest,
    SavedDealItem,
    TraditionalRequest,
    TraditionalResponse,
)

logger = get_logger(__name__)

app = FastAPI(title="BRRRR deal calculator")


@lru_cache(maxsize=1)
def get_repo() -> DealRepository:
    # single SQL repo per process, created on first request
    return SqlDealRepository(config.DB_URI)


def _finite_or_none(v: Any) -> Any:
    # JSON has no inf/nan; degenerate ratios go out as null
    if isinstance(v, float) and not math.isfinite(v):
        return None
    return v


def _clean(d: dict[str, Any]) -> dict[str, Any]:
    return {k: _finite_or_none(v) for k, v in d.items()}


def _deal_item(deal: SavedDeal) -> SavedDealItem:
    return SavedDealItem(
        id=deal["id"],
        deal_name=deal["deal_name"],
        inputs=_clean(deal["inputs"]),
        results=_clean(deal["results"]),
        notes=deal.get("notes"),
        created_at=deal["created_at"],
        updated_at=deal["updated_at"],
    )


def _bad_request(e: ValueError) -> HTTPException:
    logger.info("rejected_request", extra={"context": {"error": str(e)}})
    if isinstance(e, InputValidationError):
        detail: Any = {
            "message": "Please check your inputs.",
            "errors": [{"field": err.field, "message": err.message} for err in e.errors],
        }
        return HTTPException(status_code=400, detail=detail)
    return HTTPException(status_code=400, detail=str(e))


# -----------------------------
# Calculators
# -----------------------------
@app.post("/brrrr/calculate", response_model=BRRRRResultsPayload)
def calculate_endpoint(payload: CalculateRequest) -> BRRRRResultsPayload:
    raw = payload.raw()
    raw.pop("skipValidation", None)
    try:
        _, results = deal_service.analyze(raw, validate=not payload.skipValidation)
    except ValueError as e:
        raise _bad_request(e) from e
    return BRRRRResultsPayload(**_clean(results.to_dict()))


@app.post("/traditional/calculate", response_model=TraditionalResponse)
def traditional_endpoint(payload: TraditionalRequest) -> TraditionalResponse:
    errors = validate_traditional(
        payload.propertyPrice, payload.downPayment, payload.monthlyRent, payload.operatingExpenses
    )
    if errors:
        raise _bad_request(InputValidationError(errors))

    res = calculate_traditional(
        property_price=payload.propertyPrice,
        down_payment=payload.downPayment,
        monthly_rent=payload.monthlyRent,
        operating_expenses=payload.operatingExpenses,
    )
    return TraditionalResponse(
        monthlyPayment=_finite_or_none(res.monthly_payment),
        netCashFlow=_finite_or_none(res.net_cash_flow),
        cashOnCashReturn=_finite_or_none(res.cash_on_cash_return),
        capRate=_finite_or_none(res.cap_rate),
        profitable=res.profitable,
    )


# -----------------------------
# Saved deals
# -----------------------------
@app.get("/deals", response_model=list[SavedDealItem])
def list_deals(
    limit: int = Query(config.DEALS_DEFAULT_LIMIT, ge=1, le=1000),
    repo: DealRepository = Depends(get_repo),
) -> list[SavedDealItem]:
    return [_deal_item(d) for d in deal_service.list_deals(repo, limit=limit)]


@app.post("/deals", response_model=SavedDealItem, status_code=201)
def create_deal(body: DealSaveRequest, repo: DealRepository = Depends(get_repo)) -> SavedDealItem:
    try:
        deal = deal_service.save_deal(repo, body.dealName, body.inputs, notes=body.notes)
    except ValueError as e:
        raise _bad_request(e) from e
    return _deal_item(deal)


# declared before /deals/{deal_id} routes so "compare" is not parsed as an id
@app.post("/deals/compare", response_model=CompareResponse)
def compare_endpoint(body: CompareRequest, repo: DealRepository = Depends(get_repo)) -> CompareResponse:
    try:
        cmp = deal_service.compare_saved_deals(repo, body.ids)
    except DealNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise _bad_request(e) from e

    data = asdict(cmp)
    for m in data["metrics"]:
        m["values"] = [_finite_or_none(v) for v in m["values"]]
    data["winner_roi"] = _finite_or_none(data["winner_roi"])
    return CompareResponse(**data)


@app.get("/deals/{deal_id}", response_model=SavedDealItem)
def get_deal(deal_id: int, repo: DealRepository = Depends(get_repo)) -> SavedDealItem:
    try:
        return _deal_item(deal_service.get_deal(repo, deal_id))
    except DealNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@app.put("/deals/{deal_id}", response_model=SavedDealItem)
def update_deal(
    deal_id: int,
    body: DealSaveRequest,
    repo: DealRepository = Depends(get_repo),
) -> SavedDealItem:
    try:
        deal = deal_service.save_deal(repo, body.dealName, body.inputs, notes=body.notes, deal_id=deal_id)
    except DealNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise _bad_request(e) from e
    return _deal_item(deal)


@app.patch("/deals/{deal_id}/notes", response_model=SavedDealItem)
def update_notes(
    deal_id: int,
    body: DealNotesRequest,
    repo: DealRepository = Depends(get_repo),
) -> SavedDealItem:
    try:
        return _deal_item(deal_service.update_deal_notes(repo, deal_id, body.notes))
    except DealNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@app.delete("/deals/{deal_id}", response_model=DealDeleted)
def delete_deal(deal_id: int, repo: DealRepository = Depends(get_repo)) -> DealDeleted:
    try:
        deal_service.delete_deal(repo, deal_id)
    except DealNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return DealDeleted(deleted=True, id=deal_id)


@app.get("/deals/{deal_id}/report", response_class=HTMLResponse)
def deal_report(deal_id: int, repo: DealRepository = Depends(get_repo)) -> HTMLResponse:
    try:
        html = deal_service.render_deal_report(repo, deal_id, fmt="html")
    except DealNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return HTMLResponse(content=html)
