# src/dealscope/services/validation.py

import math
from typing import Any

from dealscope.domain.deal import EXIT_STRATEGIES, PROPERTY_TYPES

# Form / spreadsheet names -> internal field names
FIELD_ALIASES = {
    "propertyType": "property_type",
    "bpoValue": "bpo_value",
    "bpo": "bpo_value",
    "strikePrice": "strike_price",
    "rehabCosts": "rehab_costs",
    "holdPeriod": "hold_period",
    "exitStrategy": "exit_strategy",
    "salePrice": "sale_price",
    "lat": "latitude",
    "lng": "longitude",
    "lon": "longitude",
}

# Inputs without which no metric can be computed
REQUIRED_CORE_FIELDS = [
    "bpo_value",
    "strike_price",
    "hold_period",
    "sale_price",
]

DEFAULT_PROPERTY_TYPE = "Single Family"
DEFAULT_EXIT_STRATEGY = "Retail Sale"
DEFAULT_UNITS = 1


def _parse_num(val: Any, field_name: str) -> float:
    """
    Coerce values like:
      - 250000
      - "250000"
      - "$250,000"
      - "18"
    into float.
    """
    if val is None or isinstance(val, bool):
        raise ValueError(f"Missing required numeric field: {field_name}")
    if isinstance(val, (int, float)):
        return float(val)
    if isinstance(val, str):
        s = val.strip().replace("$", "").replace(",", "")
        if s.endswith("%"):
            s = s[:-1]
        if not s:
            raise ValueError(f"Missing required numeric field: {field_name}")
        try:
            return float(s)
        except ValueError:
            raise ValueError(f"Invalid number for {field_name}: {val!r}")
    raise ValueError(f"Invalid type for {field_name}: {type(val)}")


def _require_finite(num: float, field_name: str) -> float:
    if not math.isfinite(num):
        raise ValueError(f"{field_name} must be a finite number")
    return num


def _to_num(val: Any, field_name: str) -> float:
    return _require_finite(_parse_num(val, field_name), field_name)


def _to_num_optional(val: Any, default: float = 0.0, field_name: str = "optional") -> float:
    """
    Lenient converter for optional numeric fields.
    Returns `default` when missing/blank/garbage; infinities still raise.
    """
    if val is None or (isinstance(val, str) and not val.strip()):
        return default
    try:
        num = _parse_num(val, field_name)
    except ValueError:
        return default
    return _require_finite(num, field_name)


def _to_whole(val: float, field_name: str) -> int:
    if not math.isfinite(val) or val != int(val):
        raise ValueError(f"{field_name} must be a whole number")
    return int(val)


def _match_choice(val: Any, choices: tuple[str, ...], default: str, field_name: str) -> str:
    s = str(val or "").strip()
    if not s:
        return default
    key = s.lower()
    for choice in choices:
        if choice.lower() == key:
            return choice
    raise ValueError(f"Invalid {field_name}: {s!r} (expected one of {', '.join(choices)})")


def validate_and_prepare_payload(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize an incoming deal payload before it becomes a Deal.

    Responsibilities:
      - Map camelCase form names onto snake_case fields.
      - Ensure the numeric inputs every metric depends on exist.
      - Coerce money strings ("$250,000") and numeric strings ("18").
      - Canonicalize property_type / exit_strategy case-insensitively.
      - Apply form defaults for the optional fields.

    Range checks (positive hold period, units >= 1, ...) stay on the Deal model.
    """
    cleaned: dict[str, Any] = {}
    for key, value in raw.items():
        cleaned[FIELD_ALIASES.get(key, key)] = value

    # 1. Check core required fields
    for field in REQUIRED_CORE_FIELDS:
        if field not in cleaned:
            raise ValueError(f"Missing required field: {field}")

    # 2. Money and period inputs
    cleaned["bpo_value"] = _to_num(cleaned["bpo_value"], "bpo_value")
    cleaned["strike_price"] = _to_num(cleaned["strike_price"], "strike_price")
    cleaned["sale_price"] = _to_num(cleaned["sale_price"], "sale_price")
    cleaned["hold_period"] = _to_whole(_to_num(cleaned["hold_period"], "hold_period"), "hold_period")
    cleaned["rehab_costs"] = _to_num_optional(cleaned.get("rehab_costs"), field_name="rehab_costs")

    # 3. Descriptive fields with form defaults
    cleaned["address"] = str(cleaned.get("address") or "").strip()
    cleaned["property_type"] = _match_choice(
        cleaned.get("property_type"), PROPERTY_TYPES, DEFAULT_PROPERTY_TYPE, "property_type"
    )
    cleaned["exit_strategy"] = _match_choice(
        cleaned.get("exit_strategy"), EXIT_STRATEGIES, DEFAULT_EXIT_STRATEGY, "exit_strategy"
    )
    cleaned["units"] = _to_whole(_to_num_optional(cleaned.get("units"), DEFAULT_UNITS, "units"), "units")

    # 4. Map position (display only)
    cleaned["latitude"] = _to_num_optional(cleaned.get("latitude"), field_name="latitude")
    cleaned["longitude"] = _to_num_optional(cleaned.get("longitude"), field_name="longitude")

    return cleaned
