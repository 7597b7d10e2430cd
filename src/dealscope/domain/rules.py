# src/dealscope/domain/rules.py
from __future__ import annotations

from dataclasses import dataclass

from dealscope.domain.deal import Deal
from dealscope.domain.errors import DomainError
from dealscope.domain.underwriting import CalculatedMetrics, RiskFactor, RiskLevel, Verdict

# ---------------------------------------------------------------------
# Verdict
# ---------------------------------------------------------------------

BUY_MIN_ROI: float = 25.0
CONSIDER_MIN_ROI: float = 10.0

VERDICT_TEXT: dict[str, str] = {
    "buy": "Strong Buy",
    "consider": "Consider",
    "pass": "Pass",
}


def get_verdict(roi: float) -> Verdict:
    # lower bound of each band is inclusive
    if roi >= BUY_MIN_ROI:
        return "buy"
    if roi >= CONSIDER_MIN_ROI:
        return "consider"
    return "pass"


def get_verdict_text(verdict: Verdict) -> str:
    return VERDICT_TEXT[verdict]


# ---------------------------------------------------------------------
# Risk factors
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class RiskBand:
    above: float | None    # driver must be strictly greater; None matches anything
    percentage: float
    level: RiskLevel
    description: str

    def matches(self, value: float) -> bool:
        return self.above is None or value > self.above


MARKET_RISK_BANDS: tuple[RiskBand, ...] = (
    RiskBand(70.0, 50.0, "high", "High LTV increases exposure to market corrections"),
    RiskBand(50.0, 30.0, "medium", "Discount provides buffer against market volatility"),
    RiskBand(None, 15.0, "low", "Discount provides buffer against market volatility"),
)

EXECUTION_RISK_BANDS: tuple[RiskBand, ...] = (
    RiskBand(0.4, 45.0, "high", "Significant rehab scope increases timeline and budget risk"),
    RiskBand(0.2, 25.0, "medium", "Manageable rehab scope with controlled execution risk"),
    RiskBand(None, 15.0, "low", "Manageable rehab scope with controlled execution risk"),
)

LIQUIDITY_RISK_BANDS: tuple[RiskBand, ...] = (
    RiskBand(24, 40.0, "high", "Extended hold period increases capital lock-up risk"),
    RiskBand(12, 30.0, "medium", "Reasonable timeline for exit execution"),
    RiskBand(None, 20.0, "low", "Reasonable timeline for exit execution"),
)


def classify_risk(name: str, value: float, bands: tuple[RiskBand, ...]) -> RiskFactor:
    """First band (top-down) whose threshold the driver exceeds wins."""
    for band in bands:
        if band.matches(value):
            return RiskFactor(
                name=name,
                level=band.level,
                percentage=band.percentage,
                description=band.description,
            )
    raise DomainError(name, f"has no band for value {value!r}")


def calculate_risk_factors(deal: Deal, metrics: CalculatedMetrics) -> list[RiskFactor]:
    """
    Market, Execution and Liquidity risk, always in that order.

    Drivers:
      - Market: metrics.ltv
      - Execution: rehab_costs / strike_price
      - Liquidity: hold_period (months)
    """
    if not deal.strike_price > 0:
        raise DomainError("strike_price", "must be greater than zero")

    rehab_ratio = deal.rehab_costs / deal.strike_price

    return [
        classify_risk("Market Risk", metrics.ltv, MARKET_RISK_BANDS),
        classify_risk("Execution Risk", rehab_ratio, EXECUTION_RISK_BANDS),
        classify_risk("Liquidity Risk", deal.hold_period, LIQUIDITY_RISK_BANDS),
    ]
