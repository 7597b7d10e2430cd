import pytest
from pydantic import ValidationError

from dealscope.services.portfolio import (
    PropertyFilters,
    active_filter_count,
    apply_filters,
    county_distribution,
    deal_pipeline,
    filter_options,
    matches_search,
    portfolio_summary,
)


@pytest.fixture
def records():
    return [
        {
            "property_id": "P-1", "address": "1 Main St", "city": "Kingston", "county": "Ulster",
            "zip_code": "12401", "property_type": "Single Family", "occupancy_status": "Vacant",
            "deal_stage": "Active", "is_active": True, "foreclosure_flag": True, "bankruptcy_flag": False,
            "bpo": 200_000.0, "upb": 150_000.0, "total_balance": 160_000.0, "strike_price": 120_000.0,
            "current_interest_rate": 5.0, "estimated_roi": 20.0, "estimated_irr": 15.0,
        },
        {
            "property_id": "P-2", "address": "2 Oak Ave", "city": "Beacon", "county": "Dutchess",
            "zip_code": "12508", "property_type": "2-Family", "occupancy_status": "Occupied",
            "deal_stage": "Active", "is_active": True, "foreclosure_flag": False, "bankruptcy_flag": True,
            "bpo": 300_000.0, "upb": 250_000.0, "total_balance": None, "strike_price": 210_000.0,
            "current_interest_rate": 7.0, "estimated_roi": 10.0, "estimated_irr": None,
        },
        {
            "property_id": "P-3", "address": "3 Elm Rd", "city": "Poughkeepsie", "county": "Dutchess",
            "zip_code": "12601", "property_type": "Single Family", "occupancy_status": "Vacant",
            "deal_stage": "Closed", "is_active": True, "foreclosure_flag": None, "bankruptcy_flag": None,
            "bpo": 100_000.0, "upb": None, "total_balance": 90_000.0, "strike_price": None,
            "current_interest_rate": None, "estimated_roi": None, "estimated_irr": None,
        },
    ]


def test_default_filters_keep_everything(records):
    assert apply_filters(records, PropertyFilters()) == records
    assert active_filter_count(PropertyFilters()) == 0


def test_categorical_filters(records):
    out = apply_filters(records, PropertyFilters(property_type="Single Family", occupancy_status="Vacant"))
    assert [r["property_id"] for r in out] == ["P-1", "P-3"]

    out = apply_filters(records, PropertyFilters(city="Beacon"))
    assert [r["property_id"] for r in out] == ["P-2"]


def test_range_filters_keep_records_without_value(records):
    out = apply_filters(records, PropertyFilters(price_range=(0, 150_000)))
    assert [r["property_id"] for r in out] == ["P-1", "P-3"]

    out = apply_filters(records, PropertyFilters(roi_range=(15, 100)))
    assert [r["property_id"] for r in out] == ["P-1", "P-3"]


def test_range_bounds_are_inclusive(records):
    out = apply_filters(records, PropertyFilters(price_range=(120_000, 120_000)))
    assert "P-1" in [r["property_id"] for r in out]


def test_search(records):
    assert matches_search(records[0], "kings")
    assert matches_search(records[1], "DUTCH")
    assert matches_search(records[2], "12601")
    assert not matches_search(records[0], "beacon")
    assert [r["property_id"] for r in apply_filters(records, PropertyFilters(search="oak"))] == ["P-2"]


def test_inverted_range_rejected():
    with pytest.raises(ValidationError):
        PropertyFilters(price_range=(500, 100))


def test_active_filter_count_against_max_price():
    f = PropertyFilters(city="Kingston", price_range=(0, 210_000))
    assert active_filter_count(f, max_price=210_000) == 1
    assert active_filter_count(f, max_price=1_000_000) == 2


def test_filter_options(records):
    opts = filter_options(records)
    assert opts["cities"] == ["Beacon", "Kingston", "Poughkeepsie"]
    assert opts["property_types"] == ["2-Family", "Single Family"]
    assert opts["max_price"] == 210_000.0
    assert filter_options([])["max_price"] == 1_000_000.0


def test_county_distribution(records):
    assert county_distribution(records) == [
        {"county": "Dutchess", "count": 2, "total_value": 400_000.0},
        {"county": "Ulster", "count": 1, "total_value": 200_000.0},
    ]
    assert county_distribution([]) == []


def test_portfolio_summary(records):
    s = portfolio_summary(records)
    assert s["total_properties"] == 3
    assert s["active_properties"] == 3
    assert s["foreclosures"] == 1
    assert s["bankruptcies"] == 1
    assert s["total_upb"] == 400_000.0
    assert s["total_balance"] == 250_000.0
    assert s["total_bpo"] == 600_000.0
    assert s["total_strike_price"] == 330_000.0
    assert s["avg_interest_rate"] == pytest.approx(6.0)


def test_portfolio_summary_empty():
    s = portfolio_summary([])
    assert s["total_properties"] == 0
    assert s["avg_interest_rate"] == 0.0


def test_deal_pipeline(records):
    pipeline = deal_pipeline(records)
    assert [p["status"] for p in pipeline] == ["Active", "Closed"]

    active = pipeline[0]
    assert active["deal_count"] == 2
    assert active["total_capital"] == 330_000.0
    assert active["avg_roi"] == pytest.approx(15.0)
    assert active["avg_irr"] == pytest.approx(15.0)

    closed = pipeline[1]
    assert closed["total_capital"] == 0.0
    assert closed["avg_roi"] is None
    assert deal_pipeline([]) == []
