from __future__ import annotations

from typing import Any

from dealscope.adapters.logging_utils import get_logger
from dealscope.domain.deal import Deal
from dealscope.domain.metrics import calculate_metrics
from dealscope.domain.ports import DealRepository
from dealscope.domain.rules import calculate_risk_factors, get_verdict, get_verdict_text
from dealscope.services.guardrails import apply_guardrails
from dealscope.services.validation import validate_and_prepare_payload

logger = get_logger(__name__)

# Reference deal shown on first load of the underwriting form
EXAMPLE_DEAL: dict[str, Any] = {
    "address": "106 S Cherry Street, Poughkeepsie, NY 12601",
    "propertyType": "2-Family",
    "units": 2,
    "bpoValue": 438220,
    "strikePrice": 250000,
    "rehabCosts": 75000,
    "holdPeriod": 18,
    "exitStrategy": "Retail Sale",
    "salePrice": 425000,
    "latitude": 41.7003,
    "longitude": -73.9230,
}


def example_deal() -> Deal:
    return Deal.model_validate(EXAMPLE_DEAL)


def evaluate_deal(deal: Deal) -> dict[str, Any]:
    """
    Run the three pure steps on an already-validated Deal:
    metrics -> verdict (from ROI) -> risk factors (from deal + metrics).
    """
    metrics = calculate_metrics(deal)
    verdict = get_verdict(metrics.roi)
    risks = calculate_risk_factors(deal, metrics)

    result: dict[str, Any] = {
        "deal": deal.to_dict(),
        "metrics": metrics.to_dict(),
        "verdict": verdict,
        "verdict_text": get_verdict_text(verdict),
        "risk_factors": [r.to_dict() for r in risks],
    }
    return apply_guardrails(deal=deal, metrics=metrics, result=result)


def analyze_deal(
    raw_payload: dict[str, Any],
    repo: DealRepository | None = None,
    *,
    save: bool = False,
) -> dict[str, Any]:
    """
    Main analysis entrypoint.

    - Normalizes the payload (camelCase or snake_case, money strings).
    - Builds a Deal; pydantic rejects non-positive divisors here.
    - save=True with a repo persists the analysis and adds `deal_id`.
    """
    payload = validate_and_prepare_payload(raw_payload)
    deal = Deal(**payload)

    result = evaluate_deal(deal)

    logger.info(
        "deal_analyzed",
        extra={
            "context": {
                "address": deal.address,
                "roi": result["metrics"]["roi"],
                "verdict": result["verdict"],
            }
        },
    )

    # Persistence: only if save=True AND repo provided
    deal_id: int | None = None
    if save and repo is not None:
        try:
            deal_id = repo.save_analysis(result, raw_payload)
        except Exception as e:
            # a failed save must not lose the analysis
            logger.warning("save_analysis_failed", extra={"context": {"error": str(e)}})
            deal_id = None

    if deal_id is not None:
        result["deal_id"] = deal_id

    return result
