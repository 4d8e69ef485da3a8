# src/brrrr/services/deals.py
from __future__ import annotations

from typing import Any, Literal

from brrrr.adapters.config import config
from brrrr.adapters.logging_utils import get_logger
from brrrr.domain.brrrr import BRRRRInputs, BRRRRResults, calculate_brrrr
from brrrr.domain.ports import DealRepository, SavedDeal
from brrrr.services.comparison import DealComparison, compare_deals
from brrrr.services.report import generate_brrrr_report, generate_text_report
from brrrr.services.validation import ensure_valid, parse_inputs, validate_deal_name

logger = get_logger(__name__)


class DealNotFoundError(LookupError):
    def __init__(self, deal_id: int):
        self.deal_id = deal_id
        super().__init__(f"Deal {deal_id} not found")


def analyze(raw_inputs: dict[str, Any], *, validate: bool = True) -> tuple[BRRRRInputs, BRRRRResults]:
    """
    Parse -> (optionally) apply form rules -> run the engine.

    With validate=False the engine sees whatever the caller sent, including
    degenerate values; it will not raise, but ratios may come back inf/nan.
    """
    inputs = parse_inputs(raw_inputs)
    if validate:
        ensure_valid(inputs)
    return inputs, calculate_brrrr(inputs)


def _require(repo: DealRepository, deal_id: int) -> SavedDeal:
    deal = repo.get(deal_id)
    if deal is None:
        raise DealNotFoundError(deal_id)
    return deal


def save_deal(
    repo: DealRepository,
    deal_name: str,
    raw_inputs: dict[str, Any],
    notes: str | None = None,
    deal_id: int | None = None,
) -> SavedDeal:
    """
    Create a new saved deal, or overwrite deal_id when given.
    Results are always recomputed from the inputs; callers never supply them.
    """
    name = validate_deal_name(deal_name)
    inputs, results = analyze(raw_inputs)

    try:
        if deal_id is None:
            deal_id = repo.create(name, inputs.to_dict(), results.to_dict(), notes)
            logger.info("deal_saved", extra={"context": {"deal_id": deal_id, "deal_name": name}})
        else:
            if not repo.update(deal_id, name, inputs.to_dict(), results.to_dict(), notes):
                raise DealNotFoundError(deal_id)
            logger.info("deal_updated", extra={"context": {"deal_id": deal_id, "deal_name": name}})
    except DealNotFoundError:
        raise
    except Exception as e:
        logger.warning("save_deal_failed", extra={"context": {"deal_name": name, "error": str(e)}})
        raise

    return _require(repo, deal_id)


def update_deal_notes(repo: DealRepository, deal_id: int, notes: str) -> SavedDeal:
    if not repo.update_notes(deal_id, notes):
        raise DealNotFoundError(deal_id)
    logger.info("deal_notes_updated", extra={"context": {"deal_id": deal_id}})
    return _require(repo, deal_id)


def delete_deal(repo: DealRepository, deal_id: int) -> None:
    if not repo.delete(deal_id):
        raise DealNotFoundError(deal_id)
    logger.info("deal_deleted", extra={"context": {"deal_id": deal_id}})


def get_deal(repo: DealRepository, deal_id: int) -> SavedDeal:
    return _require(repo, deal_id)


def list_deals(repo: DealRepository, limit: int | None = None) -> list[SavedDeal]:
    return repo.list_recent(limit=limit or config.DEALS_DEFAULT_LIMIT)


def render_deal_report(
    repo: DealRepository,
    deal_id: int,
    fmt: Literal["html", "text"] = "html",
) -> str:
    deal = _require(repo, deal_id)
    inputs = BRRRRInputs.from_dict(deal["inputs"])
    results = BRRRRResults.from_dict(deal["results"])
    render = generate_brrrr_report if fmt == "html" else generate_text_report
    return render(inputs, results, deal["deal_name"], deal.get("notes"))


def compare_saved_deals(repo: DealRepository, deal_ids: list[int]) -> DealComparison:
    # dedupe but keep the caller's order
    ordered = list(dict.fromkeys(deal_ids))
    return compare_deals([_require(repo, i) for i in ordered])
