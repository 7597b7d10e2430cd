from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from dealscope.adapters.config import config
from dealscope.adapters.logging_utils import get_logger
from dealscope.adapters.storage import read_table
from dealscope.domain.ports import PropertyRepository

logger = get_logger(__name__)

# Every column a spreadsheet row can be mapped onto
PROPERTY_COLUMNS: tuple[str, ...] = (
    "property_id", "source", "source_loan_number", "deal_stage",
    "address", "city", "state", "zip_code", "county",
    "property_type", "zoning", "num_units", "bedrooms", "bathrooms",
    "square_feet", "lot_size", "year_built",
    "occupancy_status", "owner_occupied",
    "bpo", "arv", "latest_property_value", "zillow_value",
    "upb", "total_balance", "accrued_interest", "deferred_balance",
    "corporate_advances", "escrow_balance", "estimated_legal_balance",
    "estimated_full_payoff", "current_interest_rate", "original_interest_rate",
    "original_loan_amount", "original_term_months", "remaining_term_months",
    "lien_position", "last_payment_date", "days_since_last_payment",
    "delinquent_status", "foreclosure_flag", "foreclosure_status",
    "foreclosure_start_date", "bankruptcy_flag", "bankruptcy_status",
    "bankruptcy_case_number", "bankruptcy_filing_type", "bankruptcy_filing_date",
    "reo_flag", "strike_price", "discount_to_upb", "discount_to_bpo",
    "estimated_roi", "estimated_irr", "projected_hold_period_months",
    "risk_score", "original_lender", "current_servicer",
    "owner_first_name", "owner_last_name", "notes", "internal_notes",
)

INTEGER_COLUMNS = frozenset({
    "num_units", "bedrooms", "square_feet", "lot_size", "year_built",
    "original_term_months", "remaining_term_months", "lien_position",
    "days_since_last_payment", "projected_hold_period_months", "risk_score",
})

DECIMAL_COLUMNS = frozenset({
    "bathrooms", "bpo", "arv", "latest_property_value", "zillow_value",
    "upb", "total_balance", "accrued_interest", "deferred_balance",
    "corporate_advances", "escrow_balance", "estimated_legal_balance",
    "estimated_full_payoff", "current_interest_rate", "original_interest_rate",
    "original_loan_amount", "strike_price", "discount_to_upb", "discount_to_bpo",
    "estimated_roi", "estimated_irr",
})

BOOLEAN_COLUMNS = frozenset({"foreclosure_flag", "bankruptcy_flag", "owner_occupied", "reo_flag"})

DATE_COLUMNS = frozenset({
    "last_payment_date", "foreclosure_start_date", "bankruptcy_filing_date",
    "loan_origination_date", "maturity_date", "latest_value_date",
})

# normalized header -> target column, for names substring matching misses
COLUMN_ALIASES = {
    "sqft": "square_feet",
    "sq_ft": "square_feet",
    "sqft_gla": "square_feet",
    "units": "num_units",
    "beds": "bedrooms",
    "baths": "bathrooms",
    "loan_number": "source_loan_number",
}

REQUIRED_IMPORT_FIELDS = ("address", "city", "zip_code")
_TRUE_STRINGS = {"true", "yes", "y", "1"}


@dataclass
class ImportResult:
    success: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


def normalize_header(header: Any) -> str:
    h = re.sub(r"[^a-z0-9]", "_", str(header).strip().lower())
    return re.sub(r"_+", "_", h).strip("_")


def _header_matches(normalized: str, column: str) -> bool:
    return (
        column == normalized
        or normalized in column
        or column in normalized
        or COLUMN_ALIASES.get(normalized) == column
    )


def auto_map_columns(headers: Sequence[Any]) -> dict[str, str]:
    """
    Guess source header -> property column.

    The first column (in PROPERTY_COLUMNS order) whose name equals, contains or
    is contained in the normalized header wins; aliases cover sqft/beds/baths.
    A target column is claimed by the first header that matches it.
    """
    mappings: dict[str, str] = {}
    claimed: set[str] = set()
    for header in headers:
        normalized = normalize_header(header)
        if not normalized:
            continue
        target = next((c for c in PROPERTY_COLUMNS if _header_matches(normalized, c)), None)
        if target and target not in claimed:
            mappings[str(header)] = target
            claimed.add(target)
    return mappings


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in ("", "-")
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_value(value: Any, target_column: str) -> Any:
    """Coerce one spreadsheet cell for its target column; unparseable -> None."""
    if _is_blank(value):
        return None

    if target_column in INTEGER_COLUMNS:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return int(value)
        cleaned = re.sub(r"[^0-9.\-]", "", str(value))
        try:
            return int(float(cleaned))
        except ValueError:
            return None

    if target_column in DECIMAL_COLUMNS:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        cleaned = re.sub(r"[$,%]", "", str(value)).strip()
        try:
            return float(cleaned)
        except ValueError:
            return None

    if target_column in BOOLEAN_COLUMNS:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value == 1
        return str(value).strip().lower() in _TRUE_STRINGS

    if target_column in DATE_COLUMNS:
        if isinstance(value, (datetime, date)):
            return value.strftime("%Y-%m-%d")
        parsed = pd.to_datetime(str(value), errors="coerce")
        return None if pd.isna(parsed) else parsed.strftime("%Y-%m-%d")

    return str(value).strip()


def rows_from_frame(df: pd.DataFrame) -> tuple[list[str], list[dict[str, Any]]]:
    """Headers plus non-empty data rows of the first sheet."""
    headers = [str(c) for c in df.columns]
    rows: list[dict[str, Any]] = []
    for rec in df.to_dict(orient="records"):
        if all(_is_blank(v) or v == "-" for v in rec.values()):
            continue
        rows.append({str(k): v for k, v in rec.items()})
    if not rows:
        raise ValueError("File must have at least a header row and one data row")
    return headers, rows


def read_upload(path: str | Path) -> tuple[list[str], list[dict[str, Any]]]:
    headers, rows = rows_from_frame(read_table(path))
    logger.info("import_file_parsed", extra={"context": {"path": str(path), "rows": len(rows)}})
    return headers, rows


def map_row(
    row: dict[str, Any],
    mappings: dict[str, str],
    *,
    row_index: int,
    created_by: str | None = None,
    batch_ts: int | None = None,
) -> dict[str, Any]:
    mapped: dict[str, Any] = {"is_active": True, "deal_stage": "Active"}
    if created_by:
        mapped["created_by"] = created_by

    for source_column, target_column in mappings.items():
        mapped[target_column] = parse_value(row.get(source_column), target_column)

    if not mapped.get("property_id"):
        ts = batch_ts if batch_ts is not None else int(time.time() * 1000)
        mapped["property_id"] = f"IMPORT-{ts}-{row_index}"
    if not mapped.get("source"):
        mapped["source"] = "Data Import"
    if not mapped.get("state"):
        mapped["state"] = config.DEFAULT_STATE
    if not mapped.get("deal_stage"):
        mapped["deal_stage"] = "Active"
    return mapped


def import_rows(
    rows: Sequence[dict[str, Any]],
    mappings: dict[str, str],
    repo: PropertyRepository,
    *,
    batch_size: int | None = None,
    created_by: str | None = None,
) -> ImportResult:
    """
    Map, validate and upsert rows in batches.

    Rows missing address/city/zip_code fail individually; a batch the
    repository rejects fails as a whole and the import moves on.
    """
    batch_size = batch_size or config.IMPORT_BATCH_SIZE
    result = ImportResult()
    batch_ts = int(time.time() * 1000)

    for batch_start in range(0, len(rows), batch_size):
        batch = rows[batch_start:batch_start + batch_size]
        to_upsert: list[dict[str, Any]] = []

        for offset, row in enumerate(batch):
            row_index = batch_start + offset
            mapped = map_row(row, mappings, row_index=row_index, created_by=created_by, batch_ts=batch_ts)

            if any(not mapped.get(f) for f in REQUIRED_IMPORT_FIELDS):
                result.failed += 1
                result.errors.append(
                    f"Row {row_index + 1}: Missing required fields (address, city, or zip_code)"
                )
                continue
            to_upsert.append(mapped)

        if not to_upsert:
            continue

        try:
            result.success += repo.upsert_many(to_upsert)
        except Exception as e:
            result.failed += len(to_upsert)
            result.errors.append(f"Batch starting at row {batch_start + 1}: {e}")
            logger.warning(
                "import_batch_failed",
                extra={"context": {"batch_start": batch_start + 1, "error": str(e)}},
            )

    logger.info(
        "import_complete",
        extra={"context": {"success": result.success, "failed": result.failed}},
    )
    return result


def import_file(
    path: str | Path,
    repo: PropertyRepository,
    *,
    mappings: dict[str, str] | None = None,
    batch_size: int | None = None,
) -> ImportResult:
    headers, rows = read_upload(path)
    return import_rows(rows, mappings or auto_map_columns(headers), repo, batch_size=batch_size)
