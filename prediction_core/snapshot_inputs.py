"""Boundary models for rows read from the window / snapshot store.

Rows come from a relational store where JSON columns may arrive as text and
planet ids may be missing or out of range. Validation here is lenient:
malformed values become `None` rather than errors.
"""

from __future__ import annotations

import json
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from prediction_core.signal_aggregator import Planet, resolve_planet

DUSTHANA_HOUSES = {6, 8, 12}

_DATETIME_ADAPTER = TypeAdapter(datetime)


def _safe_parse_json(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return None
    return value


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _optional_datetime(value: Any) -> Any:
    if value in (None, "") or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            pass
    # Store drivers also hand back epoch numbers and other ISO spellings.
    try:
        return _DATETIME_ADAPTER.validate_python(value)
    except ValidationError:
        return None


class PredictionWindow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Window id")
    scope: Optional[str] = Field(None, description="daily | weekly | monthly | yearly")
    start_at: Optional[datetime] = Field(None, description="Window start timestamp")
    end_at: Optional[datetime] = Field(None, description="Window end timestamp")

    @field_validator("start_at", "end_at", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value: Any) -> Any:
        return _optional_datetime(value)


class AstroSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    window_id: Optional[int] = Field(None, description="Owning window id")
    mahadasha: Optional[Planet] = Field(
        None,
        description="Primary (long) period lord",
        validation_alias=AliasChoices("running_mahadasha_planet", "mahadasha"),
    )
    antardasha: Optional[Planet] = Field(
        None,
        description="Secondary period lord",
        validation_alias=AliasChoices("running_antardasha_planet", "antardasha"),
    )
    pratyantardasha: Optional[Planet] = Field(
        None,
        description="Tertiary period lord",
        validation_alias=AliasChoices("running_pratyantardasha_planet", "pratyantardasha"),
    )
    sookshma: Optional[Planet] = Field(
        None,
        description="Background sub-period lord",
        validation_alias=AliasChoices("running_sookshma_planet", "sookshma"),
    )
    sookshma_end: Optional[datetime] = Field(
        None,
        description="End of the background sub-period",
        validation_alias=AliasChoices("running_sookshma_end", "sookshma_end"),
    )
    planets_state: list[dict[str, Any]] = Field(default_factory=list, description="Natal placements")
    transits_state: list[dict[str, Any]] = Field(default_factory=list, description="Transit positions")
    moon_nakshatra: Optional[int] = Field(None, description="Stored Moon nakshatra (1..27)")

    @field_validator("window_id", mode="before")
    @classmethod
    def _lenient_window_id(cls, value: Any) -> Optional[int]:
        number = _optional_int(value)
        return number if number is not None and number > 0 else None

    @field_validator("mahadasha", "antardasha", "pratyantardasha", "sookshma", mode="before")
    @classmethod
    def _lenient_planet(cls, value: Any) -> Optional[Planet]:
        return resolve_planet(value)

    @field_validator("sookshma_end", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value: Any) -> Any:
        return _optional_datetime(value)

    @field_validator("planets_state", mode="before")
    @classmethod
    def _decode_placements(cls, value: Any) -> list[dict[str, Any]]:
        parsed = _safe_parse_json(value)
        if not isinstance(parsed, list):
            return []
        return [item for item in parsed if isinstance(item, dict)]

    @field_validator("transits_state", mode="before")
    @classmethod
    def _decode_transits(cls, value: Any) -> list[dict[str, Any]]:
        parsed = _safe_parse_json(value)
        if isinstance(parsed, dict):
            parsed = [
                {"planet": name, **(data if isinstance(data, dict) else {})}
                for name, data in parsed.items()
            ]
        if not isinstance(parsed, list):
            return []
        return [item for item in parsed if isinstance(item, dict)]

    @field_validator("moon_nakshatra", mode="before")
    @classmethod
    def _lenient_nakshatra(cls, value: Any) -> Optional[int]:
        number = _optional_int(value)
        return number if number is not None and 1 <= number <= 27 else None


def active_periods(snapshot: AstroSnapshot) -> list[Optional[Planet]]:
    """Primary, secondary, tertiary, background, in weight order."""
    return [snapshot.mahadasha, snapshot.antardasha, snapshot.pratyantardasha, snapshot.sookshma]


def _placement_planet(record: dict[str, Any]) -> Optional[Planet]:
    for key in ("planet", "name", "planet_id"):
        if record.get(key) is not None:
            return resolve_planet(record.get(key))
    return None


def _placement_house(record: dict[str, Any]) -> Optional[int]:
    house = _optional_int(record.get("house", record.get("h")))
    return house if house is not None and 1 <= house <= 12 else None


def count_afflicted_periods(snapshot: AstroSnapshot) -> int:
    """Count active period lords whose natal placement sits in 6/8/12."""
    count = 0
    for planet in active_periods(snapshot):
        if planet is None:
            continue
        record = next((p for p in snapshot.planets_state if _placement_planet(p) == planet), None)
        if record is not None and _placement_house(record) in DUSTHANA_HOUSES:
            count += 1
    return count


def transit_moon_longitude(snapshot: AstroSnapshot) -> Optional[float]:
    for transit in snapshot.transits_state:
        if _placement_planet(transit) != Planet.MOON:
            continue
        for key in ("longitude", "degree", "long"):
            try:
                lon = float(transit.get(key))
            except (TypeError, ValueError):
                continue
            if math.isfinite(lon):
                return lon
        return None
    return None


def utc_date(value: date | datetime) -> date:
    """Calendar date in UTC; naive timestamps are taken as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def sub_period_transition(snapshot: AstroSnapshot, first_day: date, last_day: date) -> Optional[date]:
    """Date the background sub-period ends, when it falls inside [first_day, last_day]."""
    if snapshot.sookshma_end is None:
        return None
    end_day = utc_date(snapshot.sookshma_end)
    if first_day <= end_day <= last_day:
        return end_day
    return None


def mid_week_transition(snapshot: AstroSnapshot, week_start: date) -> Optional[date]:
    return sub_period_transition(snapshot, week_start, week_start + timedelta(days=6))
