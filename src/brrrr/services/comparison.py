# src/brrrr/services/comparison.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Literal, Sequence

from brrrr.adapters.config import config
from brrrr.domain.ports import SavedDeal
from brrrr.services.report import format_currency, format_percentage

Trend = Literal["high", "low", "flat"]


@dataclass(frozen=True)
class ComparedMetric:
    key: str
    label: str
    values: list[float]
    formatted: list[str]
    trends: list[Trend]


@dataclass
class DealComparison:
    deal_ids: list[int]
    deal_names: list[str]
    metrics: list[ComparedMetric] = field(default_factory=list)
    winner_id: int | None = None
    winner_name: str | None = None
    winner_roi: float | None = None


# (wire key, label, formatter, read from inputs?)
_METRICS: list[tuple[str, str, Callable[[float], str], bool]] = [
    ("purchasePrice", "Purchase Price", format_currency, True),
    ("totalInvestment", "Total Investment", format_currency, False),
    ("postRefinanceROI", "Post-Refi ROI", format_percentage, False),
    ("postRefinanceCashFlow", "Monthly Cash Flow", format_currency, False),
    ("cashOutAmount", "Cash Out", format_currency, False),
    ("equityCreated", "Equity Created", format_currency, False),
]


def _trends(values: list[float]) -> list[Trend]:
    # inf/nan never rank; they stay "flat"
    finite = [v for v in values if math.isfinite(v)]
    if not finite:
        return ["flat"] * len(values)
    hi, lo = max(finite), min(finite)
    if hi == lo:
        return ["flat"] * len(values)
    return ["high" if v == hi else "low" if v == lo else "flat" for v in values]


def compare_deals(deals: Sequence[SavedDeal], max_deals: int | None = None) -> DealComparison:
    """
    Side-by-side view of 2..max_deals saved deals.

    Each metric marks the highest value "high" and the lowest "low" (no marks
    when all values are equal). The winner is the deal with the highest
    post-refinance ROI; ties go to the first one passed in. Deals whose
    ROI is inf/nan are never ranked, and with no finite ROI there is no winner.
    """
    limit = max_deals or config.MAX_COMPARE_DEALS
    if len(deals) < 2:
        raise ValueError("Select at least 2 deals to compare.")
    if len(deals) > limit:
        raise ValueError(f"At most {limit} deals can be compared at once.")

    out = DealComparison(
        deal_ids=[d["id"] for d in deals],
        deal_names=[d["deal_name"] for d in deals],
    )
    for key, label, fmt, from_inputs in _METRICS:
        values = [float((d["inputs"] if from_inputs else d["results"])[key]) for d in deals]
        out.metrics.append(
            ComparedMetric(
                key=key,
                label=label,
                values=values,
                formatted=[fmt(v) for v in values],
                trends=_trends(values),
            )
        )

    ranked = [d for d in deals if math.isfinite(float(d["results"]["postRefinanceROI"]))]
    if not ranked:
        return out
    best = max(ranked, key=lambda d: float(d["results"]["postRefinanceROI"]))
    out.winner_id = best["id"]
    out.winner_name = best["deal_name"]
    out.winner_roi = float(best["results"]["postRefinanceROI"])
    return out
