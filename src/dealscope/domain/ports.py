# src/dealscope/domain/ports.py
from __future__ import annotations

from typing import Any, Iterable, Protocol, TypedDict


# ----------------------------
# Saved deal analyses
# ----------------------------

class DealRepository(Protocol):
    def save_analysis(self, analysis: dict[str, Any], request_payload: dict[str, Any]) -> int:
        ...

    def get(self, deal_id: int) -> Any:
        ...

    def list_recent(self, limit: int = 50) -> list[Any]:
        ...

    def delete(self, deal_id: int) -> bool:
        ...


# ----------------------------
# Portfolio properties
# ----------------------------

class PropertyRecord(TypedDict, total=False):
    property_id: str
    source: str
    deal_stage: str
    address: str
    city: str
    state: str
    zip_code: str
    county: str | None
    property_type: str | None
    occupancy_status: str | None
    num_units: int | None
    bpo: float | None
    upb: float | None
    strike_price: float | None
    estimated_roi: float | None
    estimated_irr: float | None
    foreclosure_flag: bool | None
    bankruptcy_flag: bool | None
    is_active: bool
    extra: dict[str, Any]


class PropertyRepository(Protocol):
    def upsert_many(self, items: Iterable[dict[str, Any]]) -> int:
        ...

    def list_active(self, limit: int | None = None) -> list[PropertyRecord]:
        ...


# ----------------------------
# Investor leads
# ----------------------------

class InvestorLeadRepository(Protocol):
    def add(self, lead: dict[str, Any]) -> int:
        ...

    def list_leads(self, *, qualified: bool | None = None, limit: int = 200) -> list[Any]:
        ...
