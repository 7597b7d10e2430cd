# src/dealscope/services/guardrails.py
from __future__ import annotations

from typing import Any, Dict, List

from dealscope.adapters.logging_utils import get_logger
from dealscope.domain.deal import Deal
from dealscope.domain.underwriting import CalculatedMetrics

logger = get_logger(__name__)


def apply_guardrails(
    deal: Deal,
    metrics: CalculatedMetrics,
    result: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Attach sanity checks to a deal analysis result.

    Produces:
        result["guardrails"] = {
            "has_flags": bool,
            "flags": [
                {
                    "code": "STRIKE_ABOVE_BPO",
                    "severity": "warning" | "error",
                    "message": "...human readable...",
                    "context": {...raw numbers...},
                },
                ...
            ],
        }

    Flags never change the verdict; they only highlight inputs worth a second look.
    """
    flags: List[Dict[str, Any]] = []

    # ------------------------------------------------------------------
    # 1) Paying a premium over BPO
    # ------------------------------------------------------------------
    if metrics.discount < 0:
        flags.append(
            {
                "code": "STRIKE_ABOVE_BPO",
                "severity": "warning",
                "message": "Strike price is above the BPO value (premium, not a discount).",
                "context": {
                    "strike_price": deal.strike_price,
                    "bpo_value": deal.bpo_value,
                    "discount": metrics.discount,
                },
            }
        )

    # ------------------------------------------------------------------
    # 2) Exit does not cover the money in
    # ------------------------------------------------------------------
    if metrics.profit < 0:
        flags.append(
            {
                "code": "NEGATIVE_PROFIT",
                "severity": "error",
                "message": "Net sale proceeds do not cover total investment.",
                "context": {
                    "net_proceeds": metrics.net_proceeds,
                    "total_investment": metrics.total_investment,
                    "profit": metrics.profit,
                },
            }
        )

    if deal.sale_price < metrics.cost_basis:
        flags.append(
            {
                "code": "SALE_BELOW_COST_BASIS",
                "severity": "warning",
                "message": "Expected sale price is below strike plus rehab.",
                "context": {
                    "sale_price": deal.sale_price,
                    "cost_basis": metrics.cost_basis,
                },
            }
        )

    # ------------------------------------------------------------------
    # 3) Rehab scope larger than the purchase
    # ------------------------------------------------------------------
    if deal.rehab_costs > deal.strike_price:
        flags.append(
            {
                "code": "REHAB_EXCEEDS_STRIKE",
                "severity": "warning",
                "message": "Rehab budget exceeds the strike price.",
                "context": {
                    "rehab_costs": deal.rehab_costs,
                    "strike_price": deal.strike_price,
                },
            }
        )

    result.setdefault("guardrails", {})
    result["guardrails"]["flags"] = flags
    result["guardrails"]["has_flags"] = bool(flags)

    if flags:
        logger.info("deal_guardrails_flags", extra={"context": {"flags": [f["code"] for f in flags]}})

    return result
