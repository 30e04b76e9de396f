import pytest

from jointmarket.app.main import build_mock_environment
from jointmarket.core.config import EngineConfig
from jointmarket.core.types import (
    Cell,
    Condition,
    ConditionalRequest,
    DirectRequest,
    Event,
    MarginalRequest,
    Pool,
    PoolSet,
    CELLS,
)
from jointmarket.exec.reconcile import LegCheckStatus, compare_leg, reconcile_plan
from jointmarket.exec.router import plan_trade


def test_compare_leg_thresholds():
    ok = compare_leg(0, Cell.A_YES_B_YES, 10.0, 99.5, 100.0, tolerance_pct=1.0)
    assert ok.status is LegCheckStatus.MATCH
    assert ok.absolute_error == pytest.approx(0.5)
    assert ok.relative_error_pct == pytest.approx(0.5)

    bad = compare_leg(0, Cell.A_YES_B_YES, 10.0, 90.0, 100.0, tolerance_pct=1.0)
    assert bad.status is LegCheckStatus.MISMATCH
    assert bad.relative_error_pct == pytest.approx(10.0)


def test_zero_venue_shares_is_a_mismatch():
    check = compare_leg(0, Cell.A_YES_B_YES, 10.0, 15.0, 0.0, tolerance_pct=1.0)
    assert check.status is LegCheckStatus.MISMATCH
    assert check.absolute_error == pytest.approx(15.0)
    assert check.relative_error_pct == 100.0


def test_venue_quoting_nothing_fails_reconciliation():
    venue, market = build_mock_environment(bias=0.0)
    plan = plan_trade(DirectRequest(Cell.A_YES_B_YES, 10.0), market.pools())
    report = reconcile_plan(plan, venue, market.market_id, market.answer_ids)
    assert report.legs[0].external_shares == 0.0
    assert report.legs[0].status is LegCheckStatus.MISMATCH
    assert report.error_pct == pytest.approx(100.0)
    assert not report.passed


def test_single_leg_plan_matches_mock_venue():
    venue, market = build_mock_environment()
    plan = plan_trade(DirectRequest(Cell.A_YES_B_YES, 10.0), market.pools())
    report = reconcile_plan(plan, venue, market.market_id, market.answer_ids)
    assert report.tolerance_pct == 1.0
    assert report.passed
    assert report.error_pct == pytest.approx(0.0, abs=1e-9)
    assert [c.status for c in report.legs] == [LegCheckStatus.MATCH]
    assert venue.calls == 1


def test_biased_venue_fails_reconciliation():
    venue, market = build_mock_environment(bias=0.9)
    plan = plan_trade(DirectRequest(Cell.A_NO_B_NO, 10.0), market.pools())
    report = reconcile_plan(plan, venue, market.market_id, market.answer_ids)
    assert not report.passed
    assert report.error_pct > 5.0
    assert report.mismatches[0].outcome is Cell.A_NO_B_NO


def test_multi_leg_plan_uses_looser_tolerance():
    venue, market = build_mock_environment()
    plan = plan_trade(MarginalRequest(Event.A, 10.0), market.pools())
    report = reconcile_plan(plan, venue, market.market_id, market.answer_ids)
    assert report.tolerance_pct == 2.0
    assert len(report.legs) == 2
    # the first leg is priced against the same state the venue sees
    assert report.legs[0].status is LegCheckStatus.MATCH
    assert report.legs[0].relative_error_pct == pytest.approx(0.0, abs=1e-9)
    # later legs were priced after earlier ones moved the pools
    assert report.legs[1].relative_error_pct > 0


def test_tolerance_follows_config():
    venue, market = build_mock_environment(bias=0.99)
    plan = plan_trade(DirectRequest(Cell.A_YES_B_NO, 5.0), market.pools())
    strict = reconcile_plan(plan, venue, market.market_id, market.answer_ids)
    assert not strict.passed
    loose = reconcile_plan(
        plan, venue, market.market_id, market.answer_ids, EngineConfig(single_leg_tolerance_pct=2.0)
    )
    assert loose.passed


def test_failed_quote_aborts_remaining_legs():
    venue, market = build_mock_environment()
    venue.failing_answers.add(market.answer_ids[Cell.A_YES_B_YES])
    plan = plan_trade(MarginalRequest(Event.A, 10.0), market.pools())
    report = reconcile_plan(plan, venue, market.market_id, market.answer_ids)
    assert venue.calls == 1
    assert report.aborted
    assert not report.passed
    assert [c.status for c in report.legs] == [LegCheckStatus.UNAVAILABLE] * 2
    assert "503" in report.legs[0].detail
    assert len(report.unavailable) == 2


def test_zero_spend_leg_is_skipped():
    venue, market = build_mock_environment()
    plan = plan_trade(DirectRequest(Cell.A_YES_B_YES, 0.0), market.pools())
    report = reconcile_plan(plan, venue, market.market_id, market.answer_ids)
    assert report.legs[0].status is LegCheckStatus.SKIPPED
    assert venue.calls == 0
    assert not report.passed


def test_invalid_plan_is_rejected():
    venue, market = build_mock_environment()
    plan = plan_trade(
        ConditionalRequest(Condition.parse("a_given_b"), budget=1.0, hedge_shares=100.0), market.pools()
    )
    assert not plan.valid
    with pytest.raises(ValueError):
        reconcile_plan(plan, venue, market.market_id, market.answer_ids)


def test_missing_answer_id_is_rejected():
    venue, market = build_mock_environment()
    plan = plan_trade(DirectRequest(Cell.A_NO_B_YES, 5.0), market.pools())
    ids = {c: i for c, i in market.answer_ids.items() if c is not Cell.A_NO_B_YES}
    with pytest.raises(ValueError):
        reconcile_plan(plan, venue, market.market_id, ids)


def test_mock_quotes_do_not_move_the_market():
    venue, market = build_mock_environment()
    answer = market.answer_ids[Cell.A_YES_B_YES]
    first = venue.quote(market.market_id, answer, "YES", 10.0)
    second = venue.quote(market.market_id, answer, "YES", 10.0)
    assert first == second
    assert first.prob_after > first.prob_before


def test_mock_pools_round_trip_through_payload():
    pools = PoolSet({c: Pool(300.0 + i, 100.0) for i, c in enumerate(CELLS)})
    venue, _ = build_mock_environment()
    payload = venue.add_market("X", "x-market", pools, {c: c.value for c in CELLS})
    assert [a["pool"]["YES"] for a in payload["answers"]] == [300.0, 301.0, 302.0, 303.0]
