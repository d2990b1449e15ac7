from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from sampa import SampaError, SolarResult, SunMoonResult, evaluate_batch, load_observations
from sampa.batch import resolve_n_jobs

HEADER = (
    "Year,Month,Day,Hour,Minute,Second,Delta UT1,Delta T,Timezone,Longitude,Latitude,"
    "Elevation,Pressure,Temperature,Slope,Azm Rotation,Atmos Refract"
)
GOLDEN_ROW = "2003,10,17,12,30,30,0,67,-7,-105.1786,39.742476,1830.14,820,11,30,-10,0.5667"
REJECTED_ROW = "2003,10,17,12,30,30,0,67,-7,-105.1786,39.742476,1830.14,6000,11,30,-10,0.5667"
PACIFIC_ROW = "2009,7,22,1,33,0,0,66.4,0,143.36167,24.61167,0,1000,11,0,0,0.5667"


@pytest.fixture
def observation_csv(tmp_path: Path) -> Path:
    path = tmp_path / "observations.csv"
    path.write_text("\n".join([HEADER, GOLDEN_ROW, REJECTED_ROW, PACIFIC_ROW]) + "\n")
    return path


def test_load_observations(observation_csv: Path):
    observations = load_observations(observation_csv)
    assert len(observations) == 3
    golden = observations[0]
    assert golden.instant.utcoffset() == timedelta(hours=-7)
    assert (golden.instant.hour, golden.instant.minute, golden.instant.second) == (12, 30, 30)
    assert golden.latitude == pytest.approx(39.742476)
    assert golden.longitude == pytest.approx(-105.1786)
    assert golden.slope == pytest.approx(30.0)
    assert golden.atmospheric_refraction == pytest.approx(0.5667)


def test_load_single_row(tmp_path: Path):
    path = tmp_path / "single.csv"
    path.write_text(f"{HEADER}\n{GOLDEN_ROW}\n")
    assert len(load_observations(path)) == 1


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(SampaError):
        load_observations(tmp_path / "missing.csv")


def test_load_too_few_columns(tmp_path: Path):
    path = tmp_path / "short.csv"
    path.write_text("Year,Month,Day\n2003,10,17\n")
    with pytest.raises(SampaError):
        load_observations(path)


def test_load_non_numeric_field(tmp_path: Path):
    path = tmp_path / "bad.csv"
    path.write_text(f"{HEADER}\n{GOLDEN_ROW.replace('820', 'high')}\n")
    with pytest.raises(ValueError):
        load_observations(path)


def test_evaluate_batch_in_process(observation_csv: Path, caplog):
    caplog.set_level("INFO", logger="sampa.batch")
    results = evaluate_batch(load_observations(observation_csv), n_jobs=1)
    assert isinstance(results[0], SolarResult)
    assert results[0].zenith == pytest.approx(50.11162202, abs=1e-6)
    assert results[0].sunrise == pytest.approx(6.212067, abs=1e-6)
    assert results[1] is None
    assert results[2].azimuth == pytest.approx(104.387917, abs=1e-6)
    assert "batch_complete" in caplog.text
    assert '"rejected": 1' in caplog.text


def test_evaluate_batch_parallel_preserves_order(observation_csv: Path):
    observations = load_observations(observation_csv)
    serial = evaluate_batch(observations, n_jobs=1)
    parallel = evaluate_batch(observations, n_jobs=2, backend="threading")
    assert parallel == serial


def test_evaluate_batch_moon(observation_csv: Path):
    results = evaluate_batch(load_observations(observation_csv), n_jobs=1, moon=True)
    assert isinstance(results[0], SunMoonResult)
    assert results[0].angular_separation == pytest.approx(98.516815, abs=1e-6)
    assert results[1] is None


def test_n_jobs_from_environment(monkeypatch):
    monkeypatch.delenv("SAMPA_N_JOBS", raising=False)
    assert resolve_n_jobs() == 1
    monkeypatch.setenv("SAMPA_N_JOBS", "3")
    assert resolve_n_jobs() == 3
    assert resolve_n_jobs(2) == 2
    monkeypatch.setenv("SAMPA_N_JOBS", "many")
    with pytest.raises(SampaError):
        resolve_n_jobs()


def test_fractional_second_rolls_into_next_minute(tmp_path: Path):
    path = tmp_path / "rollover.csv"
    row = GOLDEN_ROW.replace("2003,10,17,12,30,30,", "2003,10,17,12,30,59.9999996,")
    path.write_text(f"{HEADER}\n{row}\n")
    (observation,) = load_observations(path)
    instant = observation.instant
    assert (instant.hour, instant.minute, instant.second, instant.microsecond) == (12, 31, 0, 0)
    assert instant.utcoffset() == timedelta(hours=-7)


def test_fractional_second_keeps_microseconds(tmp_path: Path):
    path = tmp_path / "fraction.csv"
    row = GOLDEN_ROW.replace("2003,10,17,12,30,30,", "2003,10,17,12,30,30.25,")
    path.write_text(f"{HEADER}\n{row}\n")
    (observation,) = load_observations(path)
    assert (observation.instant.second, observation.instant.microsecond) == (30, 250000)
