from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd
from pydantic import BaseModel, Field, model_validator

ALL = "all"

DEFAULT_PRICE_RANGE: tuple[float, float] = (0.0, 1_000_000.0)
DEFAULT_ROI_RANGE: tuple[float, float] = (0.0, 100.0)


class PropertyFilters(BaseModel):
    """
    Portfolio filter state. "all" disables a categorical filter.

    price_range applies to strike_price, roi_range to estimated_roi; both are
    inclusive, and records without the value are kept.
    """
    city: str = ALL
    property_type: str = ALL
    occupancy_status: str = ALL
    deal_stage: str = ALL
    price_range: tuple[float, float] = Field(default=DEFAULT_PRICE_RANGE)
    roi_range: tuple[float, float] = Field(default=DEFAULT_ROI_RANGE)
    search: str = ""

    @model_validator(mode="after")
    def _ordered_ranges(self) -> "PropertyFilters":
        for name in ("price_range", "roi_range"):
            lo, hi = getattr(self, name)
            if lo > hi:
                raise ValueError(f"{name} lower bound exceeds upper bound")
        return self


def active_filter_count(filters: PropertyFilters, max_price: float = DEFAULT_PRICE_RANGE[1]) -> int:
    return sum(
        [
            filters.city != ALL,
            filters.property_type != ALL,
            filters.occupancy_status != ALL,
            filters.deal_stage != ALL,
            filters.price_range[0] > 0 or filters.price_range[1] < max_price,
            filters.roi_range[0] > 0 or filters.roi_range[1] < DEFAULT_ROI_RANGE[1],
        ]
    )


def _in_range(value: Any, bounds: tuple[float, float]) -> bool:
    if value is None:
        return True
    return bounds[0] <= float(value) <= bounds[1]


def matches_search(rec: dict[str, Any], query: str) -> bool:
    """Case-insensitive substring match on address, city, county or ZIP."""
    q = query.strip().lower()
    if not q:
        return True
    return any(q in str(rec.get(k) or "").lower() for k in ("address", "city", "county", "zip_code"))


def apply_filters(records: Sequence[dict[str, Any]], filters: PropertyFilters) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for rec in records:
        if filters.city != ALL and rec.get("city") != filters.city:
            continue
        if filters.property_type != ALL and rec.get("property_type") != filters.property_type:
            continue
        if filters.occupancy_status != ALL and rec.get("occupancy_status") != filters.occupancy_status:
            continue
        if filters.deal_stage != ALL and rec.get("deal_stage") != filters.deal_stage:
            continue
        if not _in_range(rec.get("strike_price"), filters.price_range):
            continue
        if not _in_range(rec.get("estimated_roi"), filters.roi_range):
            continue
        if not matches_search(rec, filters.search):
            continue
        out.append(rec)
    return out


def filter_options(records: Sequence[dict[str, Any]]) -> dict[str, Any]:
    """Distinct cities / property types and the max strike price, for building filter UIs."""
    cities = sorted({r["city"] for r in records if r.get("city")})
    types = sorted({r["property_type"] for r in records if r.get("property_type")})
    prices = [float(r["strike_price"]) for r in records if r.get("strike_price") is not None]
    return {
        "cities": cities,
        "property_types": types,
        "max_price": max(prices) if prices else DEFAULT_PRICE_RANGE[1],
    }


# ---------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------

def _frame(records: Sequence[dict[str, Any]], columns: Sequence[str]) -> pd.DataFrame:
    df = pd.DataFrame.from_records(list(records))
    for c in columns:
        if c not in df.columns:
            df[c] = None
    return df


def _num(series: pd.Series) -> np.ndarray:
    return pd.to_numeric(series, errors="coerce").to_numpy(dtype=float)


def _nan_to_zero(x: float) -> float:
    return 0.0 if np.isnan(x) else float(x)


def county_distribution(records: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Property count and total BPO per county, largest count first."""
    df = _frame(records, ["county", "bpo"])
    df = df[df["county"].notna() & (df["county"] != "")]
    if df.empty:
        return []
    df = df.assign(bpo=pd.to_numeric(df["bpo"], errors="coerce").fillna(0.0))
    grouped = (
        df.groupby("county", sort=False)
        .agg(n=("county", "size"), total_value=("bpo", "sum"))
        .reset_index()
        .sort_values(["n", "county"], ascending=[False, True])
    )
    return [
        {"county": str(r["county"]), "count": int(r["n"]), "total_value": float(r["total_value"])}
        for r in grouped.to_dict(orient="records")
    ]


def portfolio_summary(records: Sequence[dict[str, Any]]) -> dict[str, Any]:
    cols = ["is_active", "foreclosure_flag", "bankruptcy_flag", "upb", "total_balance",
            "bpo", "strike_price", "current_interest_rate"]
    if not records:
        return {
            "total_properties": 0,
            "active_properties": 0,
            "foreclosures": 0,
            "bankruptcies": 0,
            "total_upb": 0.0,
            "total_balance": 0.0,
            "total_bpo": 0.0,
            "avg_interest_rate": 0.0,
            "total_strike_price": 0.0,
        }

    df = _frame(records, cols)
    rates = _num(df["current_interest_rate"])
    avg_rate = float(np.nanmean(rates)) if np.any(~np.isnan(rates)) else 0.0

    return {
        "total_properties": int(len(df)),
        "active_properties": int((df["is_active"] == True).sum()),  # noqa: E712
        "foreclosures": int((df["foreclosure_flag"] == True).sum()),  # noqa: E712
        "bankruptcies": int((df["bankruptcy_flag"] == True).sum()),  # noqa: E712
        "total_upb": _nan_to_zero(np.nansum(_num(df["upb"]))),
        "total_balance": _nan_to_zero(np.nansum(_num(df["total_balance"]))),
        "total_bpo": _nan_to_zero(np.nansum(_num(df["bpo"]))),
        "avg_interest_rate": avg_rate,
        "total_strike_price": _nan_to_zero(np.nansum(_num(df["strike_price"]))),
    }


def deal_pipeline(records: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Per deal_stage: count, capital committed (strike), mean estimated ROI / IRR."""
    if not records:
        return []
    df = _frame(records, ["deal_stage", "strike_price", "estimated_roi", "estimated_irr"])
    df = df.assign(
        deal_stage=df["deal_stage"].fillna("Unknown"),
        strike_price=pd.to_numeric(df["strike_price"], errors="coerce"),
        estimated_roi=pd.to_numeric(df["estimated_roi"], errors="coerce"),
        estimated_irr=pd.to_numeric(df["estimated_irr"], errors="coerce"),
    )
    grouped = df.groupby("deal_stage", sort=True).agg(
        deal_count=("deal_stage", "size"),
        total_capital=("strike_price", "sum"),
        avg_roi=("estimated_roi", "mean"),
        avg_irr=("estimated_irr", "mean"),
    )
    out: list[dict[str, Any]] = []
    for stage, r in grouped.iterrows():
        out.append(
            {
                "status": str(stage),
                "deal_count": int(r["deal_count"]),
                "total_capital": _nan_to_zero(r["total_capital"]),
                "avg_roi": None if pd.isna(r["avg_roi"]) else float(r["avg_roi"]),
                "avg_irr": None if pd.isna(r["avg_irr"]) else float(r["avg_irr"]),
            }
        )
    return out
