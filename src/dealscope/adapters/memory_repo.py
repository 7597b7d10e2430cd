from itertools import count
from typing import Any

from dealscope.domain.ports import DealRepository


class InMemoryDealRepository(DealRepository):
    def __init__(self) -> None:
        self._items: dict[int, dict[str, Any]] = {}
        self._ids = count(1)

    def save_analysis(
        self,
        analysis: dict[str, Any],
        request_payload: dict[str, Any] | None = None,
    ) -> int:
        deal_id = next(self._ids)
        rec = analysis.copy()
        rec["deal_id"] = deal_id
        if request_payload is not None:
            rec["request_payload"] = request_payload
        self._items[deal_id] = rec
        return deal_id

    def get(self, deal_id: int) -> dict[str, Any] | None:
        return self._items.get(deal_id)

    def list_recent(self, limit: int = 50) -> list[dict[str, Any]]:
        return list(reversed(self._items.values()))[:limit]

    def delete(self, deal_id: int) -> bool:
        return self._items.pop(deal_id, None) is not None

    def all(self) -> list[dict[str, Any]]:
        return list(self._items.values())
