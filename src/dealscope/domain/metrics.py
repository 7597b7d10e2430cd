# src/dealscope/domain/metrics.py
from __future__ import annotations

from dealscope.domain.deal import Deal
from dealscope.domain.errors import DomainError
from dealscope.domain.underwriting import CalculatedMetrics

# Fixed underwriting rates (not caller inputs)
CLOSING_COST_RATE: float = 0.03         # of strike price
ANNUAL_HOLDING_COST_RATE: float = 0.08  # on strike + rehab, prorated by month
SELLING_COST_RATE: float = 0.06         # of sale price


def _require_positive(value: float, field: str) -> None:
    if not value > 0:
        raise DomainError(field, "must be greater than zero")


def annualized_return(net_proceeds: float, total_investment: float, hold_period: int) -> float:
    """
    Annualized holding-period return, in percent.

    Compounds the whole-period multiple (net_proceeds / total_investment) to a
    12-month basis. No interim cash flows are modeled, so this is not a
    cash-flow IRR even though the result is reported as `irr`.
    """
    _require_positive(total_investment, "total_investment")
    _require_positive(hold_period, "hold_period")

    multiple = net_proceeds / total_investment
    if multiple < 0:
        # fractional power of a negative base is undefined
        raise DomainError("irr", "is undefined for negative net proceeds")
    return (multiple ** (12 / hold_period) - 1) * 100


def calculate_metrics(deal: Deal) -> CalculatedMetrics:
    """
    Turn raw deal inputs into the standard underwriting metrics.

    Pure and deterministic. Values are not rounded; display formatting lives in
    dealscope.services.formatting.

    A Deal built through validation never trips the zero-denominator guards.
    They exist for objects assembled with Deal.model_construct or duck-typed
    stand-ins, which get a field-qualified DomainError instead of NaN/inf.
    """
    _require_positive(deal.bpo_value, "bpo_value")
    _require_positive(deal.strike_price, "strike_price")
    _require_positive(deal.hold_period, "hold_period")

    strike = float(deal.strike_price)
    rehab = float(deal.rehab_costs)
    bpo = float(deal.bpo_value)
    sale = float(deal.sale_price)

    # Acquisition + carry
    closing_costs = strike * CLOSING_COST_RATE
    holding_costs = (strike + rehab) * ANNUAL_HOLDING_COST_RATE * (deal.hold_period / 12)
    total_investment = strike + closing_costs + rehab + holding_costs
    _require_positive(total_investment, "total_investment")

    # Exit
    selling_costs = sale * SELLING_COST_RATE
    net_proceeds = sale - selling_costs
    profit = net_proceeds - total_investment

    roi = (profit / total_investment) * 100
    irr = annualized_return(net_proceeds, total_investment, deal.hold_period)

    # Price-to-value
    ltv = (strike / bpo) * 100
    discount = ((bpo - strike) / bpo) * 100

    return CalculatedMetrics(
        discount=discount,
        closing_costs=closing_costs,
        holding_costs=holding_costs,
        total_investment=total_investment,
        selling_costs=selling_costs,
        net_proceeds=net_proceeds,
        profit=profit,
        roi=roi,
        irr=irr,
        ltv=ltv,
        cost_basis=strike + rehab,
    )
