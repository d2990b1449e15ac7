"""FastAPI application exposing Sun and Moon position computations."""

from __future__ import annotations

import json
import logging
import os
import time
from datetime import UTC, datetime
from typing import Annotated, List, NoReturn, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models import (
    ErrorResponse,
    HealthResponse,
    MoonPosition,
    MoonResponse,
    ObservationQueryParams,
    SunMoonResponse,
    SunPosition,
    SunResponse,
)
from sampa import (
    LunarResult,
    ObservationInput,
    SolarResult,
    SolarState,
    compute_lunar_position,
    compute_sun_moon,
    delta_t_from_leap_seconds,
    trace_solar_position,
    validate_observation,
)
from sampa.terms import term_counts

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("sampa-api")

APP_DESCRIPTION = "Topocentric Sun and Moon positions based on the NREL SPA and MPA algorithms"

CORS_ORIGINS_ENV = "SAMPA_CORS_ORIGINS"


def _cors_origins() -> List[str]:
    raw = os.environ.get(CORS_ORIGINS_ENV, "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app = FastAPI(
    title="SAMPA API",
    description=APP_DESCRIPTION,
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _format_utc(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _format_local(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.isoformat()


def _finite(value: Optional[float]) -> Optional[float]:
    if value is None or value != value:
        return None
    return value


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    code = f"http_{exc.status_code}"
    if isinstance(detail, dict):
        code = detail.get("code", code)
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, code, message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


def _observation(params: ObservationQueryParams) -> ObservationInput:
    instant = params.resolved_instant()
    delta_t = params.delta_t
    if delta_t is None:
        delta_t = delta_t_from_leap_seconds(instant, params.delta_ut1)
    return ObservationInput(
        instant=instant,
        delta_ut1=params.delta_ut1,
        delta_t=delta_t,
        latitude=params.lat,
        longitude=params.lon,
        elevation=params.elev_m,
        pressure=params.pressure_mb,
        temperature=params.temperature_c,
        slope=params.slope,
        azimuth_rotation=params.azimuth_rotation,
        atmospheric_refraction=params.refraction,
    )


def _reject(obs: ObservationInput) -> NoReturn:
    reason = validate_observation(obs, incidence=True) or "observation out of range"
    raise HTTPException(status_code=400, detail={"code": "out_of_range", "error": reason})


def _solar_state(obs: ObservationInput) -> SolarState:
    state = trace_solar_position(obs, incidence=True, rise_transit_set=True)
    if state is None:
        _reject(obs)
    return state


def _sun_position(result: SolarResult, instant: datetime) -> SunPosition:
    rts = result.rise_transit_set
    if rts is None:
        return SunPosition(
            zenith=result.zenith,
            azimuth=result.azimuth,
            azimuth_astro=result.azimuth_astro,
            incidence=result.incidence,
        )
    sunrise, transit, sunset = rts.to_datetimes(instant)
    return SunPosition(
        zenith=result.zenith,
        azimuth=result.azimuth,
        azimuth_astro=result.azimuth_astro,
        incidence=result.incidence,
        status=rts.status,
        equation_of_time=rts.equation_of_time,
        sunrise_hours=_finite(rts.sunrise),
        transit_hours=_finite(rts.transit),
        sunset_hours=_finite(rts.sunset),
        sunrise_local=_format_local(sunrise),
        transit_local=_format_local(transit),
        sunset_local=_format_local(sunset),
        sunrise_utc=_format_utc(sunrise),
        transit_utc=_format_utc(transit),
        sunset_utc=_format_utc(sunset),
    )


def _moon_position(result: LunarResult) -> MoonPosition:
    return MoonPosition(
        zenith=result.zenith,
        azimuth=result.azimuth,
        azimuth_astro=result.azimuth_astro,
        distance_km=result.distance,
        parallax=result.parallax,
    )


def _echo(obs: ObservationInput) -> dict:
    return {
        "time": obs.instant.isoformat(),
        "latitude": obs.latitude,
        "longitude": obs.longitude,
        "elevation_m": obs.elevation,
        "delta_t": obs.delta_t,
    }


def _log_request(event: str, obs: ObservationInput, start_time: float, **extra) -> None:
    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps(
            {
                "event": event,
                "lat": obs.latitude,
                "lon": obs.longitude,
                "time": obs.instant.isoformat(),
                **extra,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, series=term_counts())


@app.get("/sun", response_model=SunResponse, responses=ERROR_RESPONSES)
def sun_endpoint(params: Annotated[ObservationQueryParams, Query()]) -> SunResponse:
    start_time = time.perf_counter()
    obs = _observation(params)
    state = _solar_state(obs)

    response = SunResponse(**_echo(obs), sun=_sun_position(state.result, obs.instant))
    _log_request("sun", obs, start_time, status=response.sun.status)
    return response


@app.get("/moon", response_model=MoonResponse, responses=ERROR_RESPONSES)
def moon_endpoint(params: Annotated[ObservationQueryParams, Query()]) -> MoonResponse:
    start_time = time.perf_counter()
    obs = _observation(params)
    state = _solar_state(obs)

    response = MoonResponse(**_echo(obs), moon=_moon_position(compute_lunar_position(state)))
    _log_request("moon", obs, start_time)
    return response


@app.get("/sun-moon", response_model=SunMoonResponse, responses=ERROR_RESPONSES)
def sun_moon_endpoint(params: Annotated[ObservationQueryParams, Query()]) -> SunMoonResponse:
    start_time = time.perf_counter()
    obs = _observation(params)
    result = compute_sun_moon(obs)
    if result is None:
        _reject(obs)

    response = SunMoonResponse(
        **_echo(obs),
        sun=_sun_position(result.sun, obs.instant),
        moon=_moon_position(result.moon),
        angular_separation=result.angular_separation,
        sun_radius=result.sun_radius,
        moon_radius=result.moon_radius,
    )
    _log_request("sun_moon", obs, start_time, separation=round(result.angular_separation, 6))
    return response
