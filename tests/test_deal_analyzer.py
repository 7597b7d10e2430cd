# tests/test_deal_analyzer.py
import pytest
from pydantic import ValidationError

from dealscope.adapters.memory_repo import InMemoryDealRepository
from dealscope.services.deal_analyzer import EXAMPLE_DEAL, analyze_deal, evaluate_deal, example_deal
from fixtures.deals import cherry_street_example


def test_example_deal_matches_reference_fixture():
    assert example_deal() == cherry_street_example()


def test_analyze_example_payload_structure():
    result = analyze_deal(dict(EXAMPLE_DEAL))

    assert set(result) == {"deal", "metrics", "verdict", "verdict_text", "risk_factors", "guardrails"}
    assert result["verdict"] == "pass"
    assert result["verdict_text"] == "Pass"
    assert result["metrics"]["profit"] == pytest.approx(28_000.0)
    assert result["deal"]["propertyType"] == "2-Family"
    assert [r["name"] for r in result["risk_factors"]] == ["Market Risk", "Execution Risk", "Liquidity Risk"]
    assert "deal_id" not in result


def test_evaluate_deal_matches_analyze_deal():
    assert evaluate_deal(example_deal()) == analyze_deal(dict(EXAMPLE_DEAL))


def test_string_inputs_are_accepted():
    payload = dict(EXAMPLE_DEAL, bpoValue="$438,220", strikePrice="250,000", holdPeriod="18")
    result = analyze_deal(payload)
    assert result["metrics"]["totalInvestment"] == pytest.approx(371_500.0)


def test_zero_hold_period_is_rejected_before_calculation():
    with pytest.raises(ValidationError):
        analyze_deal(dict(EXAMPLE_DEAL, holdPeriod=0))


def test_save_persists_and_returns_deal_id():
    repo = InMemoryDealRepository()
    result = analyze_deal(dict(EXAMPLE_DEAL), repo=repo, save=True)

    assert result["deal_id"] == 1
    saved = repo.get(1)
    assert saved["verdict"] == "pass"
    assert saved["request_payload"]["address"] == EXAMPLE_DEAL["address"]


def test_no_save_without_flag():
    repo = InMemoryDealRepository()
    result = analyze_deal(dict(EXAMPLE_DEAL), repo=repo)
    assert "deal_id" not in result
    assert repo.all() == []


class _BrokenRepo(InMemoryDealRepository):
    def save_analysis(self, analysis, request_payload=None):
        raise RuntimeError("disk full")


def test_failed_save_still_returns_analysis():
    result = analyze_deal(dict(EXAMPLE_DEAL), repo=_BrokenRepo(), save=True)
    assert result["verdict"] == "pass"
    assert "deal_id" not in result


def test_memory_repo_lists_newest_first_and_deletes():
    repo = InMemoryDealRepository()
    first = analyze_deal(dict(EXAMPLE_DEAL), repo=repo, save=True)["deal_id"]
    second = analyze_deal(dict(EXAMPLE_DEAL, salePrice=600_000), repo=repo, save=True)["deal_id"]

    assert [d["deal_id"] for d in repo.list_recent()] == [second, first]
    assert repo.delete(first) is True
    assert repo.delete(first) is False
    assert [d["deal_id"] for d in repo.all()] == [second]
