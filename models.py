"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ObservationQueryParams(BaseModel):
    """Validated query parameters shared by the position endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    time: datetime = Field(..., description="Instant (ISO-8601); naive values use offset_hours")
    offset_hours: Optional[float] = Field(
        None,
        ge=-18.0,
        le=18.0,
        description="Observer UTC offset in hours, applied to the instant",
    )
    elev_m: float = Field(0.0, ge=-6500000.0, description="Observer elevation in meters")
    pressure_mb: float = Field(
        1000.0,
        ge=0.0,
        le=5000.0,
        description="Annual average local pressure in millibars",
    )
    temperature_c: float = Field(
        10.0,
        gt=-273.0,
        le=6000.0,
        description="Annual average local temperature in degrees Celsius",
    )
    delta_ut1: float = Field(0.0, gt=-1.0, lt=1.0, description="UT1-UTC in seconds")
    delta_t: Optional[float] = Field(
        None,
        ge=-8000.0,
        le=8000.0,
        description="TT-UT1 in seconds; derived from leap seconds when omitted",
    )
    slope: float = Field(0.0, ge=-360.0, le=360.0, description="Surface slope in degrees")
    azimuth_rotation: float = Field(
        0.0, ge=-360.0, le=360.0, description="Surface azimuth rotation from south in degrees"
    )
    refraction: float = Field(
        0.5667, ge=-5.0, le=5.0, description="Atmospheric refraction at sunrise/sunset in degrees"
    )

    def resolved_instant(self) -> datetime:
        """Attach or apply :attr:`offset_hours`; naive times without one are UTC."""

        offset = timezone(timedelta(hours=self.offset_hours or 0.0))
        if self.time.tzinfo is None:
            return self.time.replace(tzinfo=offset)
        if self.offset_hours is None:
            return self.time
        return self.time.astimezone(offset)


class SunPosition(BaseModel):
    zenith: float = Field(..., description="Topocentric zenith angle in degrees")
    azimuth: float = Field(..., description="Azimuth eastward from north in degrees")
    azimuth_astro: float = Field(..., description="Azimuth westward from south in degrees")
    incidence: Optional[float] = Field(None, description="Surface incidence angle in degrees")
    status: Optional[str] = Field(None, description="Rise/set status")
    equation_of_time: Optional[float] = Field(None, description="Equation of time in minutes")
    sunrise_hours: Optional[float] = Field(None, description="Local sunrise in fractional hours")
    transit_hours: Optional[float] = Field(None, description="Local sun transit in fractional hours")
    sunset_hours: Optional[float] = Field(None, description="Local sunset in fractional hours")
    sunrise_local: Optional[str] = Field(None, description="Sunrise in local time (ISO-8601)")
    transit_local: Optional[str] = Field(None, description="Sun transit in local time (ISO-8601)")
    sunset_local: Optional[str] = Field(None, description="Sunset in local time (ISO-8601)")
    sunrise_utc: Optional[str] = Field(None, description="Sunrise in UTC (ISO-8601)")
    transit_utc: Optional[str] = Field(None, description="Sun transit in UTC (ISO-8601)")
    sunset_utc: Optional[str] = Field(None, description="Sunset in UTC (ISO-8601)")


class MoonPosition(BaseModel):
    zenith: float = Field(..., description="Topocentric zenith angle in degrees")
    azimuth: float = Field(..., description="Azimuth eastward from north in degrees")
    azimuth_astro: float = Field(..., description="Azimuth westward from south in degrees")
    distance_km: float = Field(..., description="Earth-Moon centre distance in kilometers")
    parallax: float = Field(..., description="Equatorial horizontal parallax in degrees")


class ObservationEcho(BaseModel):
    ok: bool = True
    time: str = Field(..., description="Resolved instant (ISO-8601)")
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")
    elevation_m: float = Field(..., description="Elevation above mean sea level")
    delta_t: float = Field(..., description="Applied TT-UT1 in seconds")


class SunResponse(ObservationEcho):
    """Solar position response payload."""

    sun: SunPosition


class MoonResponse(ObservationEcho):
    """Lunar position response payload."""

    moon: MoonPosition


class SunMoonResponse(ObservationEcho):
    """Combined Sun and Moon response payload."""

    sun: SunPosition
    moon: MoonPosition
    angular_separation: float = Field(..., description="Sun-Moon centre separation in degrees")
    sun_radius: float = Field(..., description="Sun disk radius in degrees")
    moon_radius: float = Field(..., description="Moon disk radius in degrees")


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    series: Dict[str, int]


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
