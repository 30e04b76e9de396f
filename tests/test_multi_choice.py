import math

import pytest

from jointmarket.core.config import EngineConfig
from jointmarket.core.types import CELLS, Cell, ConvergenceStatus, Pool, PoolSet, Side
from jointmarket.pricing.cpmm import BinarySimulator
from jointmarket.pricing.multi_choice import (
    MultiChoiceSimulator,
    multi_choice_cost_for_shares,
    simulate_multi_choice_trade,
)


def quarter_pools():
    return PoolSet({c: Pool(300.0, 100.0) for c in CELLS})


def skewed_pools():
    # 0.30 / 0.20 / 0.10 / 0.40
    return PoolSet(
        {
            Cell.A_YES_B_YES: Pool(700.0, 300.0),
            Cell.A_YES_B_NO: Pool(800.0, 200.0),
            Cell.A_NO_B_YES: Pool(900.0, 100.0),
            Cell.A_NO_B_NO: Pool(600.0, 400.0),
        }
    )


def test_yes_buy_reaches_equilibrium():
    pools = quarter_pools()
    assert pools.probability_sum() == pytest.approx(1.0)
    result = simulate_multi_choice_trade(pools, Cell.A_YES_B_YES, Side.YES, 10.0)
    after = result.pools
    assert result.status is ConvergenceStatus.CONVERGED
    assert after.probability(Cell.A_YES_B_YES) > 0.25
    for cell in CELLS[1:]:
        assert after.probability(cell) < 0.25
    assert abs(after.probability_sum() - 1.0) < 1e-3
    assert result.cost_paid == 10.0
    assert result.arbitrage_shares > 0


def test_input_pools_are_not_mutated():
    pools = quarter_pools()
    simulate_multi_choice_trade(pools, Cell.A_NO_B_NO, Side.YES, 25.0)
    assert all(pools[c] == Pool(300.0, 100.0) for c in CELLS)


@pytest.mark.parametrize("budget", [1.0, 10.0, 50.0])
@pytest.mark.parametrize("cell", CELLS)
def test_equilibrium_holds_for_every_outcome(cell, budget):
    result = simulate_multi_choice_trade(skewed_pools(), cell, Side.YES, budget)
    assert result.status is ConvergenceStatus.CONVERGED
    assert abs(result.pools.probability_sum() - 1.0) < 1e-3


def test_arbitrage_beats_single_pool_pricing():
    pools = quarter_pools()
    coupled = simulate_multi_choice_trade(pools, Cell.A_YES_B_YES, Side.YES, 10.0)
    single = BinarySimulator().buy(pools, Cell.A_YES_B_YES, Side.YES, 10.0)
    assert coupled.shares_acquired > single.shares_acquired


def test_shares_increase_with_budget():
    pools = skewed_pools()
    shares = [
        simulate_multi_choice_trade(pools, Cell.A_NO_B_YES, Side.YES, b).shares_acquired
        for b in (5.0, 10.0, 20.0, 40.0)
    ]
    assert shares == sorted(shares)


def test_zero_budget_is_a_no_op():
    pools = quarter_pools()
    result = simulate_multi_choice_trade(pools, Cell.A_YES_B_YES, Side.YES, 0.0)
    assert result.shares_acquired == 0.0
    assert result.cost_paid == 0.0
    assert result.pools == pools


def test_non_finite_budget_is_infeasible():
    result = simulate_multi_choice_trade(quarter_pools(), Cell.A_YES_B_YES, Side.YES, math.inf)
    assert result.status is ConvergenceStatus.INFEASIBLE
    assert not result.feasible


def test_no_side_degrades_to_single_pool():
    pools = quarter_pools()
    result = simulate_multi_choice_trade(pools, Cell.A_YES_B_NO, Side.NO, 10.0)
    single = BinarySimulator().buy(pools, Cell.A_YES_B_NO, Side.NO, 10.0)
    assert result.status is ConvergenceStatus.FELL_BACK
    assert result.shares_acquired == pytest.approx(single.shares_acquired)
    assert result.pools[Cell.A_YES_B_YES] == pools[Cell.A_YES_B_YES]


def test_inconsistent_prices_return_best_effort():
    # every answer quoted at 0.5: Σp = 2 cannot be brought to 1 with this budget
    pools = PoolSet({c: Pool(100.0, 100.0) for c in CELLS})
    result = simulate_multi_choice_trade(pools, Cell.A_YES_B_YES, Side.YES, 10.0)
    assert result.status is ConvergenceStatus.FELL_BACK
    assert result.feasible
    assert result.shares_acquired > 0


def test_cost_for_shares_inverts_simulation():
    pools = skewed_pools()
    result = multi_choice_cost_for_shares(pools, Cell.A_YES_B_NO, Side.YES, 20.0)
    assert result.feasible
    assert result.shares_acquired == pytest.approx(20.0, rel=1e-3)
    replay = simulate_multi_choice_trade(pools, Cell.A_YES_B_NO, Side.YES, result.cost_paid)
    assert replay.shares_acquired == pytest.approx(20.0, rel=1e-3)
    assert abs(result.pools.probability_sum() - 1.0) < 1e-3


def test_cost_for_shares_increases_with_shares():
    pools = quarter_pools()
    costs = [
        multi_choice_cost_for_shares(pools, Cell.A_NO_B_NO, Side.YES, s).cost_paid
        for s in (1.0, 10.0, 50.0)
    ]
    assert costs == sorted(costs)
    assert costs[0] > 0


def test_cost_for_zero_shares():
    result = multi_choice_cost_for_shares(quarter_pools(), Cell.A_NO_B_NO, Side.YES, 0.0)
    assert result.cost_paid == 0.0


def test_simulator_executes_intents():
    from jointmarket.core.types import TradeIntent

    sim = MultiChoiceSimulator()
    pools = quarter_pools()
    by_amount = sim.execute(pools, TradeIntent(Cell.A_YES_B_YES, amount=10.0))
    by_shares = sim.execute(pools, TradeIntent(Cell.A_YES_B_YES, shares=by_amount.shares_acquired))
    assert by_shares.cost_paid == pytest.approx(10.0, rel=1e-3)


def test_exhausted_cost_search_uses_single_pool_pricing():
    # one expansion step from shares * p never buys enough under arbitrage slippage
    config = EngineConfig(cost_search_expansions=1)
    pools = quarter_pools()
    result = multi_choice_cost_for_shares(pools, Cell.A_YES_B_YES, Side.YES, 10.0, config)
    expected = BinarySimulator().buy_shares(pools, Cell.A_YES_B_YES, Side.YES, 10.0)
    assert result.status is ConvergenceStatus.FELL_BACK
    assert result.feasible
    assert result.shares_acquired == pytest.approx(10.0)
    assert result.cost_paid == pytest.approx(expected.cost_paid)


def test_unaffordable_arbitrage_uses_single_pool_pricing(monkeypatch):
    monkeypatch.setattr("jointmarket.pricing.multi_choice._evaluate", lambda *args: None)
    pools = quarter_pools()
    result = simulate_multi_choice_trade(pools, Cell.A_NO_B_YES, Side.YES, 10.0)
    expected = BinarySimulator().buy(pools, Cell.A_NO_B_YES, Side.YES, 10.0)
    assert result.status is ConvergenceStatus.FELL_BACK
    assert result.shares_acquired == pytest.approx(expected.shares_acquired)
    assert result.cost_paid == 10.0
