import math

import pytest

from jointmarket.core.config import EngineConfig
from jointmarket.core.joint import JointDistribution
from jointmarket.core.types import CELLS, Cell, Event, Pool, PoolSet
from jointmarket.core.utils import is_finite, relative_error_pct, safe_div
from jointmarket.risk.limits import StakeLimits

DEMO = JointDistribution(0.3, 0.2, 0.1, 0.4)


def test_marginals_and_conditionals():
    assert DEMO.p_a == pytest.approx(0.5)
    assert DEMO.p_b == pytest.approx(0.4)
    assert DEMO.marginal(Event.B, False) == pytest.approx(0.6)
    assert DEMO.conditional(Event.A, Event.B) == pytest.approx(0.75)
    assert DEMO.conditional(Event.A, Event.B, False) == pytest.approx(1 / 3)
    assert DEMO.conditional(Event.B, Event.A) == pytest.approx(0.6)
    assert DEMO.conditional(Event.B, Event.A, False) == pytest.approx(0.2)


def test_dependence_statistics():
    assert DEMO.correlation() == pytest.approx(0.40825, abs=1e-5)
    assert DEMO.lift(Event.A) == pytest.approx(1.5)
    assert DEMO.odds_ratio() == pytest.approx(6.0)
    independent = JointDistribution(0.25, 0.25, 0.25, 0.25)
    assert independent.correlation() == pytest.approx(0.0)
    assert independent.lift() == pytest.approx(1.0)


def test_degenerate_statistics():
    sure = JointDistribution(1.0, 0.0, 0.0, 0.0)
    assert sure.correlation() == 0.0
    assert math.isinf(sure.odds_ratio())
    assert sure.conditional(Event.A, Event.B, False) == 0.0


def test_distribution_from_pools_is_normalized():
    pools = PoolSet({c: Pool(100.0, 100.0) for c in CELLS})
    assert pools.probability_sum() == pytest.approx(2.0)
    dist = JointDistribution.from_pools(pools)
    assert dist[Cell.A_NO_B_YES] == pytest.approx(0.25)
    assert sum(dist.as_dict().values()) == pytest.approx(1.0)


def test_utils():
    assert safe_div(1.0, 0.0, 7.0) == 7.0
    assert relative_error_pct(99.0, 100.0) == pytest.approx(1.0)
    assert relative_error_pct(5.0, 0.0) == 100.0
    assert relative_error_pct(0.0, 0.0) == 0.0
    assert is_finite(1.0, 2.0)
    assert not is_finite(1.0, math.inf)
    assert not is_finite(None)


def test_stake_limits():
    limits = StakeLimits(min_stake=1.0)
    assert limits.below_minimum(0.5)
    assert not limits.below_minimum(0.0)
    assert not limits.below_minimum(1.0)


def test_config_tolerance_by_leg_count():
    cfg = EngineConfig()
    assert cfg.tolerance_pct(1) == 1.0
    assert cfg.tolerance_pct(3) == 2.0


@pytest.mark.parametrize(
    "kwargs",
    [{"min_stake": -1.0}, {"equilibrium_iterations": 0}, {"multi_leg_tolerance_pct": 7.5}],
)
def test_config_validation(kwargs):
    with pytest.raises(ValueError):
        EngineConfig(**kwargs)


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("JOINTMARKET_MIN_STAKE", "0.5")
    monkeypatch.setenv("JOINTMARKET_EQUILIBRIUM_ITERATIONS", "80")
    cfg = EngineConfig.from_env(str(tmp_path / "missing.env"))
    assert cfg.min_stake == 0.5
    assert cfg.equilibrium_iterations == 80
    assert isinstance(cfg.equilibrium_iterations, int)
    assert cfg.multi_leg_tolerance_pct == 2.0


def test_config_from_env_rejects_garbage(monkeypatch, tmp_path):
    monkeypatch.setenv("JOINTMARKET_COST_SEARCH_ITERATIONS", "many")
    with pytest.raises(ValueError):
        EngineConfig.from_env(str(tmp_path / "missing.env"))
