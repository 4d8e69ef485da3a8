from datetime import datetime, timezone
from typing import Any

from brrrr.domain.ports import DealRepository, SavedDeal


def _copy(rec: SavedDeal) -> SavedDeal:
    # payload dicts are copied too so callers cannot edit what is stored
    return SavedDeal(**{**rec, "inputs": dict(rec["inputs"]), "results": dict(rec["results"])})


class InMemoryDealRepository(DealRepository):
    def __init__(self) -> None:
        self._items: dict[int, SavedDeal] = {}
        self._next_id = 1

    def create(
        self,
        deal_name: str,
        inputs: dict[str, Any],
        results: dict[str, Any],
        notes: str | None = None,
    ) -> int:
        now = datetime.now(timezone.utc)
        deal_id = self._next_id
        self._next_id += 1
        self._items[deal_id] = SavedDeal(
            id=deal_id,
            deal_name=deal_name,
            inputs=dict(inputs),
            results=dict(results),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        return deal_id

    def update(
        self,
        deal_id: int,
        deal_name: str,
        inputs: dict[str, Any],
        results: dict[str, Any],
        notes: str | None = None,
    ) -> bool:
        rec = self._items.get(deal_id)
        if rec is None:
            return False
        rec.update(
            deal_name=deal_name,
            inputs=dict(inputs),
            results=dict(results),
            notes=notes,
            updated_at=datetime.now(timezone.utc),
        )
        return True

    def update_notes(self, deal_id: int, notes: str) -> bool:
        rec = self._items.get(deal_id)
        if rec is None:
            return False
        rec["notes"] = notes
        rec["updated_at"] = datetime.now(timezone.utc)
        return True

    def delete(self, deal_id: int) -> bool:
        return self._items.pop(deal_id, None) is not None

    def get(self, deal_id: int) -> SavedDeal | None:
        rec = self._items.get(deal_id)
        return _copy(rec) if rec else None

    def list_recent(self, limit: int = 50) -> list[SavedDeal]:
        # ids are monotonic, so id order == creation order
        ordered = sorted(self._items.values(), key=lambda d: d["id"], reverse=True)
        return [_copy(d) for d in ordered[:limit]]
