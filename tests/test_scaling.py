"""Tests for scaling module."""
import pytest

from idlecore.scaling import Scaling


def test_fixed():
    s = Scaling.fixed()
    assert s.compute(100.0, 0) == 100.0
    assert s.compute(100.0, 10) == 100.0


def test_exponential():
    s = Scaling.exponential(3.0)
    assert s.compute(100000.0, 0) == 100000.0
    assert s.compute(100000.0, 1) == 300000.0
    assert s.compute(100000.0, 2) == 900000.0


def test_exponential_default_rate():
    s = Scaling.exponential()
    assert s.compute(10.0, 1) == pytest.approx(11.5)


def test_linear():
    s = Scaling.linear(0.5)
    assert s.compute(500.0, 0) == 500.0
    assert s.compute(500.0, 1) == 750.0
    assert s.compute(500.0, 4) == 1500.0


def test_custom():
    s = Scaling.custom(lambda base, level: base + level * 7)
    assert s.compute(3.0, 2) == 17.0
