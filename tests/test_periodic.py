from __future__ import annotations

import math

import erfa
import numpy as np
import pytest

from sampa.earth import (
    earth_heliocentric_latitude,
    earth_heliocentric_longitude,
    earth_radius_vector,
    nutation_longitude_and_obliquity,
)
from sampa.periodic import lunar_series, periodic_sum
from sampa.terms import MOON_LATITUDE_TERMS, NUTATION_MULTIPLIERS, term_counts
from sampa.timescale import J2000
from sampa.utils import limit_degrees, limit_degrees180pm, limit_zero2one, polynomial

ARCSEC = 1.0 / 3600.0


def test_term_counts():
    assert term_counts() == {"earth": 195, "nutation": 63, "moon": 120}


def test_tables_are_read_only():
    with pytest.raises(ValueError):
        NUTATION_MULTIPLIERS[0, 0] = 1


def test_periodic_sum_single_row():
    multipliers = np.array([[1.0, 2.0]])
    amplitudes = np.array([3.0])
    value = periodic_sum(multipliers, (30.0, 0.0), amplitudes, np.sin)
    assert value == pytest.approx(1.5)


def test_periodic_sum_damping():
    multipliers = np.array([[1.0], [1.0]])
    amplitudes = np.array([1.0, 1.0])
    value = periodic_sum(multipliers, (0.0,), amplitudes, np.cos, damping=np.array([0.5, 0.25]))
    assert value == pytest.approx(0.75)


def test_lunar_latitude_series_has_no_cosine_part():
    _, cos_sum = lunar_series(MOON_LATITUDE_TERMS, (10.0, 20.0, 30.0, 40.0), 0.05)
    assert cos_sum == 0.0


def test_earth_at_j2000():
    # Meeus, Astronomical Algorithms: Earth at J2000.0.
    assert earth_heliocentric_longitude(0.0) == pytest.approx(100.378, abs=0.01)
    assert earth_radius_vector(0.0) == pytest.approx(0.98333, abs=1e-4)
    assert abs(earth_heliocentric_latitude(0.0)) < 1e-3


@pytest.mark.parametrize("jce", np.linspace(-10.0, 10.0, 41))
def test_nutation_bounds(jce: float):
    delta_psi, delta_epsilon = nutation_longitude_and_obliquity(jce)
    assert abs(delta_psi) < 20.0 * ARCSEC
    assert abs(delta_epsilon) < 10.0 * ARCSEC


@pytest.mark.parametrize("jce", [-2.0, -0.5, 0.0375, 0.25, 1.0])
def test_nutation_matches_iau1980(jce: float):
    dpsi, deps = erfa.nut80(J2000, jce * 36525.0)
    delta_psi, delta_epsilon = nutation_longitude_and_obliquity(jce)
    assert delta_psi == pytest.approx(math.degrees(dpsi), abs=0.05 * ARCSEC)
    assert delta_epsilon == pytest.approx(math.degrees(deps), abs=0.05 * ARCSEC)


def test_limit_helpers():
    assert limit_degrees(-30.0) == pytest.approx(330.0)
    assert limit_degrees(720.5) == pytest.approx(0.5)
    assert 0.0 <= limit_degrees(-1e-15) < 360.0
    assert limit_degrees180pm(190.0) == pytest.approx(-170.0)
    assert limit_degrees180pm(-190.0) == pytest.approx(170.0)
    assert limit_zero2one(-0.25) == pytest.approx(0.75)


def test_polynomial_highest_order_first():
    assert polynomial((2.0, -3.0, 1.0), 4.0) == pytest.approx(2 * 16 - 12 + 1)
