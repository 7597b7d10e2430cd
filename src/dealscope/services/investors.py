from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator

from dealscope.adapters.config import config
from dealscope.adapters.logging_utils import get_logger
from dealscope.domain.ports import InvestorLeadRepository

logger = get_logger(__name__)


# ---------------------------------------------------------------------
# Qualification funnel
# ---------------------------------------------------------------------

class QualificationForm(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str | None = None
    investment_tier: str | None = None
    accredited_status: str = Field(..., min_length=1, description='"yes" or "no"')
    experience: str | None = None
    investment_amount: float = Field(..., ge=0)
    timeline: str | None = None

    @field_validator("name", "email", "accredited_status", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def _email_shape(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v

    @field_validator("investment_amount", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().replace("$", "").replace(",", "")
            return float(v) if v else 0.0
        return v


@dataclass(frozen=True)
class QualificationResult:
    qualified: bool
    vip: bool
    investment_tier: str


def qualify_investor(
    form: QualificationForm,
    *,
    min_investment: float | None = None,
    vip_investment: float | None = None,
) -> QualificationResult:
    """Accredited AND at least the minimum commitment; VIP above the VIP floor."""
    min_investment = config.INVESTOR_MIN_INVESTMENT if min_investment is None else min_investment
    vip_investment = config.INVESTOR_VIP_INVESTMENT if vip_investment is None else vip_investment

    accredited = form.accredited_status.lower() == "yes"
    qualified = accredited and form.investment_amount >= min_investment
    vip = qualified and form.investment_amount >= vip_investment

    tier = "VIP LP" if vip else (form.investment_tier or "Standard")
    return QualificationResult(qualified=qualified, vip=vip, investment_tier=tier)


def submit_qualification(form: QualificationForm, repo: InvestorLeadRepository) -> dict[str, Any]:
    outcome = qualify_investor(form)
    lead_id = repo.add(
        {
            "name": form.name,
            "email": form.email,
            "phone": form.phone or None,
            "investment_tier": outcome.investment_tier,
            "accredited_status": form.accredited_status,
            "experience": form.experience or None,
            "investment_amount": form.investment_amount,
            "timeline": form.timeline or None,
            "qualified": outcome.qualified,
            "source": "portal",
        }
    )
    logger.info(
        "investor_lead_submitted",
        extra={"context": {"lead_id": lead_id, "qualified": outcome.qualified, "vip": outcome.vip}},
    )
    return {
        "lead_id": lead_id,
        "qualified": outcome.qualified,
        "vip": outcome.vip,
        "investment_tier": outcome.investment_tier,
    }


# ---------------------------------------------------------------------
# LP return calculator
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class InvestmentTier:
    name: str
    pref_return: float    # annual preferred return, fraction
    profit_share: float   # investor share of gains above pref, fraction
    min_investment: float


INVESTMENT_TIERS: dict[str, InvestmentTier] = {
    "entry": InvestmentTier("Entry LP", 0.06, 0.50, 50_000.0),
    "standard": InvestmentTier("Standard LP", 0.08, 0.60, 100_000.0),
    "vip": InvestmentTier("VIP LP", 0.10, 0.70, 250_000.0),
}


@dataclass(frozen=True)
class InvestmentProjection:
    tier: str
    annual_pref: float
    total_pref: float
    investor_profit_share: float
    total_return: float
    total_profit: float
    roi: float
    annualized_roi: float
    irr: float
    meets_minimum: bool


def project_investment(
    amount: float,
    hold_months: int,
    tier: str = "standard",
    expected_appreciation_pct: float = 15.0,
) -> InvestmentProjection:
    """
    Project LP returns: preferred return accrues simply over the hold, and the
    investor takes the tier's share of appreciation above that pref.
    """
    if tier not in INVESTMENT_TIERS:
        raise ValueError(f"Unknown tier: {tier}")
    if amount <= 0:
        raise ValueError("amount must be > 0")
    if hold_months <= 0:
        raise ValueError("hold_months must be > 0")

    t = INVESTMENT_TIERS[tier]
    years = hold_months / 12

    annual_pref = amount * t.pref_return
    total_pref = annual_pref * years

    appreciation_gain = amount * (expected_appreciation_pct / 100) * years
    profit_above_pref = max(0.0, appreciation_gain - total_pref)
    investor_profit_share = profit_above_pref * t.profit_share

    total_return = amount + total_pref + investor_profit_share
    total_profit = total_return - amount
    roi = (total_profit / amount) * 100

    return InvestmentProjection(
        tier=t.name,
        annual_pref=annual_pref,
        total_pref=total_pref,
        investor_profit_share=investor_profit_share,
        total_return=total_return,
        total_profit=total_profit,
        roi=roi,
        annualized_roi=roi / years,
        irr=((total_return / amount) ** (1 / years) - 1) * 100,
        meets_minimum=amount >= t.min_investment,
    )
