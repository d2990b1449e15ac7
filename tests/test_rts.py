from __future__ import annotations

import math
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest

from sampa import ObservationInput, compute_solar_position
from sampa.rts import POLAR_DAY, POLAR_NIGHT, STATUS_OK, _altitude, interpolate_rts


def _svalbard(month: int, day: int) -> ObservationInput:
    return ObservationInput(
        instant=datetime(2025, month, day, 12, 0, tzinfo=timezone(timedelta(hours=1))),
        delta_ut1=0.0,
        delta_t=69.2,
        latitude=78.2232,
        longitude=15.6469,
    )


def test_golden_rise_transit_set(golden_observation: ObservationInput):
    result = compute_solar_position(golden_observation, rise_transit_set=True)
    assert result is not None
    rts = result.rise_transit_set
    assert rts.status == STATUS_OK
    assert rts.sunrise == pytest.approx(6.212067, abs=1e-6)
    assert rts.transit == pytest.approx(11.768045, abs=1e-6)
    assert rts.sunset == pytest.approx(17.338667, abs=1e-6)
    assert rts.equation_of_time == pytest.approx(14.641503, abs=1e-5)
    assert result.sunrise == rts.sunrise
    assert rts.sunrise_hour_angle < 0.0 < rts.sunset_hour_angle
    assert 0.0 < rts.transit_altitude < 90.0


def test_golden_datetimes(golden_observation: ObservationInput):
    rts = compute_solar_position(golden_observation, rise_transit_set=True).rise_transit_set
    sunrise, transit, sunset = rts.to_datetimes(golden_observation.instant)
    for moment in (sunrise, transit, sunset):
        assert moment.date() == date(2003, 10, 17)
        assert moment.utcoffset() == timedelta(hours=-7)
    assert (sunrise.hour, sunrise.minute) == (6, 12)
    assert (transit.hour, transit.minute) == (11, 46)
    assert (sunset.hour, sunset.minute) == (17, 20)


def test_rise_transit_set_ignores_delta_ut1(golden_observation: ObservationInput):
    base = compute_solar_position(golden_observation, rise_transit_set=True).rise_transit_set
    shifted = compute_solar_position(
        replace(golden_observation, delta_ut1=0.5), rise_transit_set=True
    ).rise_transit_set
    assert (shifted.sunrise, shifted.transit, shifted.sunset) == (
        base.sunrise,
        base.transit,
        base.sunset,
    )


def test_same_local_date_gives_same_times(golden_observation: ObservationInput):
    morning = replace(golden_observation, instant=golden_observation.instant.replace(hour=1))
    evening = replace(golden_observation, instant=golden_observation.instant.replace(hour=23))
    first = compute_solar_position(morning, rise_transit_set=True).rise_transit_set
    second = compute_solar_position(evening, rise_transit_set=True).rise_transit_set
    assert first.sunrise == second.sunrise
    assert first.sunset == second.sunset


@pytest.mark.parametrize("month, day, status", [(6, 21, POLAR_DAY), (12, 21, POLAR_NIGHT)])
def test_polar_states(month: int, day: int, status: str):
    result = compute_solar_position(_svalbard(month, day), rise_transit_set=True)
    assert result is not None
    rts = result.rise_transit_set
    assert rts.status == status
    for value in (
        rts.sunrise,
        rts.transit,
        rts.sunset,
        rts.sunrise_hour_angle,
        rts.sunset_hour_angle,
        rts.transit_altitude,
    ):
        assert math.isnan(value)
    assert math.isfinite(rts.equation_of_time)
    assert 0.0 <= result.zenith <= 180.0
    assert rts.to_datetimes(_svalbard(month, day).instant) == (None, None, None)


def test_polar_state_is_logged(caplog):
    caplog.set_level("DEBUG", logger="sampa.rts")
    compute_solar_position(_svalbard(6, 21), rise_transit_set=True)
    assert "polar_rise_set" in caplog.text


def test_interpolation_handles_wraparound():
    # Right ascension crossing 360 degrees between the second and third sample.
    value = interpolate_rts((358.95, 359.93, 0.91), 0.5)
    assert value == pytest.approx(360.42, abs=1e-9)


def test_interpolation_is_exact_for_quadratics():
    samples = [(n - 0.2) ** 2 for n in (-1.0, 0.0, 1.0)]
    assert interpolate_rts(samples, 0.3) == pytest.approx((0.3 - 0.2) ** 2)


@pytest.mark.parametrize("latitude", [i * 0.37 - 88.8 for i in range(481)])
def test_altitude_at_zenith_does_not_overflow_asin(latitude: float):
    assert _altitude(latitude, latitude, 0.0) == pytest.approx(90.0, abs=1e-5)
