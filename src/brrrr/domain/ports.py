# src/brrrr/domain/ports.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, TypedDict


# ----------------------------
# Saved deals
# ----------------------------

class SavedDeal(TypedDict):
    id: int
    deal_name: str
    inputs: dict[str, float]    # BRRRRInputs.to_dict()
    results: dict[str, float]   # BRRRRResults.to_dict()
    notes: str | None
    created_at: datetime
    updated_at: datetime


class DealRepository(Protocol):
    def create(
        self,
        deal_name: str,
        inputs: dict[str, Any],
        results: dict[str, Any],
        notes: str | None = None,
    ) -> int:
        ...

    def update(
        self,
        deal_id: int,
        deal_name: str,
        inputs: dict[str, Any],
        results: dict[str, Any],
        notes: str | None = None,
    ) -> bool:
        ...

    def update_notes(self, deal_id: int, notes: str) -> bool:
        ...

    def delete(self, deal_id: int) -> bool:
        ...

    def get(self, deal_id: int) -> SavedDeal | None:
        ...

    def list_recent(self, limit: int = 50) -> list[SavedDeal]:
        ...
