# tests/test_metrics.py
import math
from types import SimpleNamespace

import pytest

from dealscope.domain.deal import Deal
from dealscope.domain.errors import DomainError
from dealscope.domain.metrics import annualized_return, calculate_metrics
from dealscope.domain.rules import get_verdict
from fixtures.deals import cherry_street_example, deep_discount_flip, premium_loser


def test_cherry_street_metrics_match_worked_example():
    m = calculate_metrics(cherry_street_example())

    assert m.closing_costs == pytest.approx(7_500.0)
    assert m.holding_costs == pytest.approx(39_000.0)
    assert m.total_investment == pytest.approx(371_500.0)
    assert m.selling_costs == pytest.approx(25_500.0)
    assert m.net_proceeds == pytest.approx(399_500.0)
    assert m.profit == pytest.approx(28_000.0)
    assert m.cost_basis == pytest.approx(325_000.0)

    assert m.roi == pytest.approx(7.537, abs=1e-3)
    assert m.ltv == pytest.approx(57.05, abs=0.02)
    assert m.discount == pytest.approx(42.95, abs=0.02)
    assert m.irr == pytest.approx(((399_500 / 371_500) ** (12 / 18) - 1) * 100)
    assert get_verdict(m.roi) == "pass"


def test_metrics_are_not_rounded():
    m = calculate_metrics(cherry_street_example())
    assert m.roi != round(m.roi, 2)


def test_calculate_metrics_is_idempotent():
    deal = cherry_street_example()
    assert calculate_metrics(deal) == calculate_metrics(deal)


@pytest.mark.parametrize("deal", [cherry_street_example(), deep_discount_flip(), premium_loser()])
def test_ltv_and_discount_sum_to_100(deal):
    m = calculate_metrics(deal)
    assert m.ltv + m.discount == pytest.approx(100.0)


def test_discount_goes_negative_when_strike_above_bpo():
    m = calculate_metrics(premium_loser())
    assert m.discount < 0
    assert m.ltv > 100


def test_negative_profit_still_yields_finite_roi_and_pass():
    m = calculate_metrics(premium_loser())
    assert m.profit < 0
    assert m.roi < 0
    assert math.isfinite(m.roi)
    assert math.isfinite(m.irr)
    assert get_verdict(m.roi) == "pass"


def test_zero_sale_price_gives_total_loss():
    deal = Deal(bpo_value=100_000, strike_price=50_000, hold_period=12, sale_price=0)
    m = calculate_metrics(deal)
    assert m.net_proceeds == 0
    assert m.roi == pytest.approx(-100.0)
    assert m.irr == pytest.approx(-100.0)


def test_metrics_to_dict_uses_camel_case_keys():
    d = calculate_metrics(cherry_street_example()).to_dict()
    assert set(d) == {
        "discount", "closingCosts", "holdingCosts", "totalInvestment", "sellingCosts",
        "netProceeds", "profit", "roi", "irr", "ltv", "costBasis",
    }


@pytest.mark.parametrize("field", ["bpo_value", "strike_price", "hold_period"])
def test_zero_divisor_on_unvalidated_deal_raises_domain_error(field):
    values = dict(
        bpo_value=100_000.0,
        strike_price=60_000.0,
        rehab_costs=0.0,
        hold_period=12,
        sale_price=90_000.0,
    )
    values[field] = 0
    # bypasses pydantic validation, like a hand-built record would
    deal = SimpleNamespace(**values)

    with pytest.raises(DomainError) as exc:
        calculate_metrics(deal)

    assert exc.value.field == field
    assert exc.value.kind == "InvalidInput"
    assert isinstance(exc.value, ValueError)


def test_model_construct_bypass_is_caught():
    deal = Deal.model_construct(
        bpo_value=0.0, strike_price=60_000.0, rehab_costs=0.0, hold_period=12, sale_price=90_000.0
    )
    with pytest.raises(DomainError, match="bpo_value"):
        calculate_metrics(deal)


def test_annualized_return_compounds_to_twelve_months():
    # doubling over 24 months is ~41.42% a year
    assert annualized_return(200.0, 100.0, 24) == pytest.approx((2 ** 0.5 - 1) * 100)
    # a 12 month hold is just the simple return
    assert annualized_return(110.0, 100.0, 12) == pytest.approx(10.0)


def test_annualized_return_rejects_negative_multiple():
    with pytest.raises(DomainError, match="irr"):
        annualized_return(-1.0, 100.0, 12)
