from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Literal, Sequence

import pandas as pd

from dealscope.adapters.logging_utils import get_logger
from dealscope.adapters.storage import write_table
from dealscope.services.formatting import format_currency

logger = get_logger(__name__)

ExportFormat = Literal["csv", "xlsx"]

# (record key, spreadsheet header), in output order
PROPERTY_EXPORT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("property_id", "Property ID"),
    ("address", "Address"),
    ("city", "City"),
    ("state", "State"),
    ("zip_code", "ZIP Code"),
    ("county", "County"),
    ("property_type", "Property Type"),
    ("deal_stage", "Deal Stage"),
    ("num_units", "Units"),
    ("bedrooms", "Bedrooms"),
    ("bathrooms", "Bathrooms"),
    ("square_feet", "Square Feet"),
    ("year_built", "Year Built"),
    ("occupancy_status", "Occupancy"),
    ("bpo", "BPO Value"),
    ("arv", "ARV"),
    ("upb", "UPB"),
    ("strike_price", "Strike Price"),
    ("ltv_ratio", "LTV Ratio"),
    ("current_interest_rate", "Interest Rate"),
    ("delinquent_status", "Delinquent Status"),
    ("foreclosure_flag", "Foreclosure"),
    ("bankruptcy_flag", "Bankruptcy"),
    ("estimated_roi", "Est. ROI"),
    ("estimated_irr", "Est. IRR"),
    ("risk_score", "Risk Score"),
    ("source", "Source"),
    ("notes", "Notes"),
)

CURRENCY_COLUMNS = frozenset({"bpo", "arv", "upb", "strike_price"})
# ltv_ratio is stored as a fraction; the rest are already percents
PERCENT_COLUMNS = {
    "ltv_ratio": 100.0,
    "current_interest_rate": 1.0,
    "estimated_roi": 1.0,
    "estimated_irr": 1.0,
}


def format_export_value(key: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float)):
        if key in CURRENCY_COLUMNS:
            return format_currency(value)
        if key in PERCENT_COLUMNS:
            return f"{value * PERCENT_COLUMNS[key]:.2f}%"
    return str(value)


def build_export_frame(records: Sequence[dict[str, Any]]) -> pd.DataFrame:
    headers = [header for _, header in PROPERTY_EXPORT_COLUMNS]
    rows = [
        [format_export_value(key, rec.get(key)) for key, _ in PROPERTY_EXPORT_COLUMNS]
        for rec in records
    ]
    return pd.DataFrame(rows, columns=headers)


def default_export_name(prefix: str = "properties") -> str:
    return f"{prefix}-{date.today().isoformat()}"


def export_properties(
    records: Sequence[dict[str, Any]],
    out_dir: str | Path = ".",
    *,
    filename: str | None = None,
    fmt: ExportFormat = "csv",
) -> Path | None:
    """Write records to <out_dir>/<filename>.<fmt>. Returns None when there is nothing to export."""
    if not records:
        logger.warning("export_no_data")
        return None

    df = build_export_frame(records)
    path = Path(out_dir) / f"{filename or default_export_name()}.{fmt}"
    write_table(df, path, sheet_name="Properties")

    logger.info("export_written", extra={"context": {"path": str(path), "rows": len(df)}})
    return path
