"""Tests for offline module."""
import pytest

from idlecore.offline import (
    OfflineConfig,
    OfflineEarningsSimulator,
    ProductionContext,
    UnitYield,
)


def _context(**overrides) -> ProductionContext:
    values = dict(
        producers=2,
        unit_yields=[UnitYield(10.0)] * 3,
        speed_multiplier=2.0,
        bonus_units=0,
        efficiency=1.0,
        money_multiplier=1.0,
    )
    values.update(overrides)
    return ProductionContext(**values)


def test_reference_scenario():
    sim = OfflineEarningsSimulator(OfflineConfig(base_cycle_seconds=4.0))
    result = sim.simulate(400, _context())
    assert result.cycles == 200
    assert result.units_processed == 400
    assert result.money == 4000


def test_global_multiplier_scales_result():
    sim = OfflineEarningsSimulator()
    result = sim.simulate(400, _context(money_multiplier=1.5))
    assert result.money == 6000


def test_zero_elapsed_is_zero():
    sim = OfflineEarningsSimulator()
    result = sim.simulate(0, _context(dark_matter_enabled=True,
                                      unit_yields=[UnitYield(10.0, 1.0)]))
    assert result.money == 0
    assert result.dark_matter == 0
    assert result.is_empty


def test_negative_elapsed_is_zero():
    sim = OfflineEarningsSimulator()
    assert sim.simulate(-50, _context()).is_empty


def test_elapsed_clamped_at_cap():
    sim = OfflineEarningsSimulator()
    at_cap = sim.simulate(86400, _context())
    beyond = sim.simulate(86400 * 30, _context())
    assert beyond == at_cap
    assert beyond.elapsed_seconds == 86400


def test_units_per_cycle_capped_by_owned_count():
    sim = OfflineEarningsSimulator()
    one_unit = sim.simulate(400, _context(unit_yields=[UnitYield(10.0)], bonus_units=3))
    assert one_unit.units_processed == 400
    four_units = sim.simulate(400, _context(unit_yields=[UnitYield(10.0)] * 4, bonus_units=3))
    assert four_units.units_processed == 1600


def test_average_yield_across_owned_units():
    sim = OfflineEarningsSimulator()
    result = sim.simulate(400, _context(unit_yields=[UnitYield(1.0), UnitYield(19.0)]))
    assert result.money == 4000


def test_efficiency_clamped():
    sim = OfflineEarningsSimulator()
    assert sim.simulate(400, _context(efficiency=3.0)).money == 4000
    assert sim.simulate(400, _context(efficiency=-1.0)).money == 0
    assert sim.simulate(400, _context(efficiency=0.25)).money == 1000


def test_no_producers_or_units():
    sim = OfflineEarningsSimulator()
    assert sim.simulate(400, _context(producers=0)).is_empty
    assert sim.simulate(400, _context(unit_yields=[])).is_empty
    assert sim.simulate(400, _context(speed_multiplier=0)).is_empty


def test_dark_matter_only_when_enabled():
    sim = OfflineEarningsSimulator()
    yields = [UnitYield(10.0, 0.5)]
    off = sim.simulate(400, _context(unit_yields=yields))
    on = sim.simulate(400, _context(unit_yields=yields, dark_matter_enabled=True,
                                    dark_matter_multiplier=2.0))
    assert off.dark_matter == 0
    assert on.dark_matter == pytest.approx(400 * 0.5 * 2.0)
