# src/dealscope/api/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# --------------------------------------------
# Analyze
# --------------------------------------------

Verdict = Literal["buy", "consider", "pass"]
RiskLevel = Literal["low", "medium", "high"]


class AnalyzeRequest(BaseModel):
    """
    Deal inputs as the underwriting form sends them.

    Kept permissive (extra fields, strings for numbers): normalization and
    range checks happen in the analyzer so every caller gets the same rules.
    """
    model_config = ConfigDict(extra="allow")

    address: str | None = None
    propertyType: str | None = None
    units: Any = None
    bpoValue: Any = None
    strikePrice: Any = None
    rehabCosts: Any = None
    holdPeriod: Any = None
    exitStrategy: str | None = None
    salePrice: Any = None
    latitude: Any = None
    longitude: Any = None

    save: bool = False
    ai_insights: str | None = None


class RiskFactorOut(BaseModel):
    name: str
    level: RiskLevel
    percentage: float
    description: str


class AnalyzeResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    deal: dict[str, Any]
    metrics: dict[str, float]
    verdict: Verdict
    verdict_text: str
    risk_factors: list[RiskFactorOut]
    guardrails: dict[str, Any] = Field(default_factory=dict)
    deal_id: int | None = None


# --------------------------------------------
# Saved deals
# --------------------------------------------

class SavedDealItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    address: str
    property_type: str
    units: int
    bpo_value: float
    strike_price: float
    rehab_costs: float
    hold_period: int
    exit_strategy: str
    sale_price: float
    latitude: float | None = None
    longitude: float | None = None
    roi: float | None = None
    irr: float | None = None
    profit: float | None = None
    verdict: str | None = None
    ai_insights: str | None = None


# --------------------------------------------
# Portfolio
# --------------------------------------------

class ImportResponse(BaseModel):
    success: int
    failed: int
    errors: list[str] = Field(default_factory=list)
    mappings: dict[str, str] = Field(default_factory=dict)


class PropertyListResponse(BaseModel):
    total: int
    count: int
    active_filters: int
    items: list[dict[str, Any]]


# --------------------------------------------
# Investors
# --------------------------------------------

class QualificationResponse(BaseModel):
    lead_id: int
    qualified: bool
    vip: bool
    investment_tier: str


class CalculatorRequest(BaseModel):
    amount: float = Field(..., gt=0)
    hold_months: int = Field(24, gt=0)
    tier: Literal["entry", "standard", "vip"] = "standard"
    expected_appreciation_pct: float = 15.0
