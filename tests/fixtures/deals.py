# tests/fixtures/deals.py

from dealscope.domain.deal import Deal


def _base_deal_template() -> dict:
    return dict(
        address="123 Test St, Kingston, NY 12401",
        property_type="Single Family",
        units=1,
        bpo_value=300_000.0,
        strike_price=150_000.0,
        rehab_costs=20_000.0,
        hold_period=12,
        exit_strategy="Retail Sale",
        sale_price=300_000.0,
        latitude=41.93,
        longitude=-74.0,
    )


def cherry_street_example() -> Deal:
    """
    The reference 2-family deal.
    Expected: roi ~7.54% -> pass, medium risk on all three factors, no flags.
    """
    return Deal(
        address="106 S Cherry Street, Poughkeepsie, NY 12601",
        property_type="2-Family",
        units=2,
        bpo_value=438_220.0,
        strike_price=250_000.0,
        rehab_costs=75_000.0,
        hold_period=18,
        exit_strategy="Retail Sale",
        sale_price=425_000.0,
        latitude=41.7003,
        longitude=-73.9230,
    )


def deep_discount_flip() -> Deal:
    """
    Bought at half of BPO, light rehab, one year hold, sold at BPO.
    Expected: buy, low market / low execution / low liquidity risk.
    """
    return Deal(**_base_deal_template())


def heavy_rehab_long_hold() -> Deal:
    """
    Rehab above strike and a 30 month hold.
    Expected: consider, high execution + high liquidity risk, REHAB_EXCEEDS_STRIKE flag.
    """
    fields = _base_deal_template()
    fields.update(
        bpo_value=220_000.0,
        strike_price=100_000.0,
        rehab_costs=120_000.0,
        hold_period=30,
        sale_price=330_000.0,
    )
    return Deal(**fields)


def premium_loser() -> Deal:
    """
    Strike above BPO and an exit below cost.
    Expected: negative profit -> pass, high market risk, error flag.
    """
    fields = _base_deal_template()
    fields.update(
        bpo_value=200_000.0,
        strike_price=210_000.0,
        rehab_costs=10_000.0,
        hold_period=6,
        sale_price=190_000.0,
    )
    return Deal(**fields)
