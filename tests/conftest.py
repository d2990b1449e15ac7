from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from sampa import ObservationInput

GOLDEN = timezone(timedelta(hours=-7))


@pytest.fixture
def golden_observation() -> ObservationInput:
    """NREL SPA reference observation, Golden, Colorado."""

    return ObservationInput(
        instant=datetime(2003, 10, 17, 12, 30, 30, tzinfo=GOLDEN),
        delta_ut1=0.0,
        delta_t=67.0,
        latitude=39.742476,
        longitude=-105.1786,
        elevation=1830.14,
        pressure=820.0,
        temperature=11.0,
        slope=30.0,
        azimuth_rotation=-10.0,
        atmospheric_refraction=0.5667,
    )


@pytest.fixture
def pacific_observation() -> ObservationInput:
    return ObservationInput(
        instant=datetime(2009, 7, 22, 1, 33, 0, tzinfo=timezone.utc),
        delta_ut1=0.0,
        delta_t=66.4,
        latitude=24.61167,
        longitude=143.36167,
        elevation=0.0,
        pressure=1000.0,
        temperature=11.0,
        atmospheric_refraction=0.5667,
    )
