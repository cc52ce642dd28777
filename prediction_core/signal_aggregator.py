"""Signal vector aggregation for experience narratives.

Folds the active period lords, the daily Moon nakshatra and the count of
period lords sitting in dusthana houses into bounded 0..1 signals around a
neutral 0.5 baseline, then discretizes them into low / medium / high.
Pure arithmetic: no I/O and no wall-clock reads.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from enum import Enum
from typing import Any, Sequence

logger = logging.getLogger("signal_aggregator")

DIMENSIONS = ("pressure", "clarity", "noise", "action", "risk")
EXPOSED_DIMENSIONS = ("pressure", "clarity", "noise", "action")


class Planet(str, Enum):
    SUN = "SUN"
    MOON = "MOON"
    MARS = "MARS"
    MERCURY = "MERCURY"
    JUPITER = "JUPITER"
    VENUS = "VENUS"
    SATURN = "SATURN"
    RAHU = "RAHU"
    KETU = "KETU"

    @property
    def planet_id(self) -> int:
        return list(Planet).index(self) + 1


PLANET_BY_ID: dict[int, Planet] = {planet.planet_id: planet for planet in Planet}

PLANET_VECTORS: dict[Planet, dict[str, float]] = {
    Planet.SUN: {"pressure": 0.10, "clarity": 0.10, "noise": 0.05, "action": 0.15, "risk": 0.12},
    Planet.MOON: {"pressure": 0.10, "clarity": -0.05, "noise": 0.22, "action": -0.05, "risk": 0.18},
    Planet.MARS: {"pressure": 0.12, "clarity": 0.00, "noise": 0.10, "action": 0.22, "risk": 0.25},
    Planet.MERCURY: {"pressure": 0.05, "clarity": 0.18, "noise": 0.12, "action": 0.10, "risk": 0.12},
    Planet.JUPITER: {"pressure": -0.06, "clarity": 0.22, "noise": -0.06, "action": 0.12, "risk": -0.08},
    Planet.VENUS: {"pressure": -0.05, "clarity": 0.06, "noise": -0.02, "action": 0.08, "risk": -0.05},
    Planet.SATURN: {"pressure": 0.25, "clarity": 0.02, "noise": 0.10, "action": -0.02, "risk": 0.14},
    Planet.RAHU: {"pressure": 0.16, "clarity": -0.10, "noise": 0.28, "action": 0.08, "risk": 0.20},
    Planet.KETU: {"pressure": 0.08, "clarity": 0.06, "noise": 0.14, "action": -0.06, "risk": 0.10},
}

# primary (MD) / secondary (AD) / tertiary (PD) / background (sookshma)
PERIOD_WEIGHTS = (0.35, 0.25, 0.20, 0.20)

# Swati (15) restless, Ashlesha (9) looping, Mula (19) uprooting.
NAKSHATRA_BAND_VECTORS: dict[int, dict[str, float]] = {
    15: {"pressure": 0.05, "clarity": -0.04, "noise": 0.14, "action": 0.04, "risk": 0.10},
    9: {"pressure": 0.06, "clarity": -0.06, "noise": 0.18, "action": -0.02, "risk": 0.12},
    19: {"pressure": 0.10, "clarity": -0.02, "noise": 0.12, "action": 0.06, "risk": 0.14},
}
DEFAULT_NAKSHATRA_VECTOR = {"pressure": 0.03, "clarity": 0.00, "noise": 0.08, "action": 0.02, "risk": 0.06}
UNKNOWN_NAKSHATRA_VECTOR = {"pressure": 0.0, "clarity": 0.0, "noise": 0.05, "action": 0.0, "risk": 0.05}

AFFLICTION_PENALTY_VECTOR = {"pressure": 0.22, "clarity": -0.10, "noise": 0.18, "action": -0.04, "risk": 0.22}
AFFLICTION_STEP = 0.12

NAKSHATRA_COUNT = 27
NAKSHATRA_SPAN = 360.0 / NAKSHATRA_COUNT

# Mean daily lunar motion. Weekly drift is projected at this constant rate
# from a single transit longitude instead of fresh ephemeris state.
MOON_DEG_PER_DAY_APPROX = 13.176358

LEVEL_LOW_MAX = 0.33
LEVEL_MEDIUM_MAX = 0.66


def _zero_vector() -> dict[str, float]:
    return {dim: 0.0 for dim in DIMENSIONS}


def _add_vector(base: dict[str, float], add: dict[str, float], weight: float = 1.0) -> dict[str, float]:
    return {dim: base[dim] + add.get(dim, 0.0) * weight for dim in DIMENSIONS}


def _finite(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def clamp01(value: Any) -> float:
    number = _finite(value)
    if number is None:
        return 0.5
    return max(0.0, min(1.0, number))


def level3(value: Any) -> str:
    v = clamp01(value)
    if v <= LEVEL_LOW_MAX:
        return "low"
    if v <= LEVEL_MEDIUM_MAX:
        return "medium"
    return "high"


def resolve_planet(value: Any) -> Planet | None:
    """Accept a Planet, a 1..9 id or a planet name; anything else is None."""
    if isinstance(value, Planet):
        return value
    if isinstance(value, str):
        name = value.strip().upper()
        if name in Planet.__members__:
            return Planet[name]
        if not name.isdigit():
            return None
    number = _finite(value)
    if number is None or number != int(number):
        return None
    return PLANET_BY_ID.get(int(number))


def nakshatra_vector(nakshatra_id: Any) -> dict[str, float]:
    number = _finite(nakshatra_id)
    if number is None or number != int(number) or not 1 <= number <= NAKSHATRA_COUNT:
        return dict(UNKNOWN_NAKSHATRA_VECTOR)
    return dict(NAKSHATRA_BAND_VECTORS.get(int(number), DEFAULT_NAKSHATRA_VECTOR))


def affliction_penalty(affliction_count: Any) -> dict[str, float]:
    count = _finite(affliction_count)
    if count is None or count <= 0:
        return _zero_vector()
    weight = min(1.0, AFFLICTION_STEP * count)
    return {dim: AFFLICTION_PENALTY_VECTOR[dim] * weight for dim in DIMENSIONS}


def normalize_360(deg: float) -> float:
    return deg % 360.0


def nakshatra_from_longitude(longitude: Any) -> int | None:
    """Return the 1..27 nakshatra id for a sidereal longitude."""
    lon = _finite(longitude)
    if lon is None:
        return None
    idx = int(normalize_360(lon) / NAKSHATRA_SPAN)
    nak_id = idx + 1
    return nak_id if 1 <= nak_id <= NAKSHATRA_COUNT else None


def project_moon_longitudes(start_longitude: Any, days: int = 7) -> list[float | None]:
    lon = _finite(start_longitude)
    if lon is None:
        return [None] * days
    return [lon + MOON_DEG_PER_DAY_APPROX * i for i in range(days)]


def compute_signal_vector(
    primary: Any = None,
    secondary: Any = None,
    tertiary: Any = None,
    background: Any = None,
    *,
    nakshatra_id: Any = None,
    affliction_count: Any = 0,
) -> dict[str, float]:
    """Accumulate the raw five-dimensional vector (before the 0.5 baseline)."""
    vec = _zero_vector()
    for period, weight in zip((primary, secondary, tertiary, background), PERIOD_WEIGHTS):
        planet = resolve_planet(period)
        if planet is not None:
            vec = _add_vector(vec, PLANET_VECTORS[planet], weight)
    vec = _add_vector(vec, nakshatra_vector(nakshatra_id))
    vec = _add_vector(vec, affliction_penalty(affliction_count))
    return vec


def to_signal_levels(vec: dict[str, float]) -> dict[str, float]:
    return {dim: clamp01(0.5 + vec.get(dim, 0.0)) for dim in DIMENSIONS}


def compute_daily_signal(
    day: date | str | None,
    primary: Any = None,
    secondary: Any = None,
    tertiary: Any = None,
    background: Any = None,
    *,
    nakshatra_id: Any = None,
    affliction_count: Any = 0,
) -> dict[str, Any]:
    vec = compute_signal_vector(
        primary,
        secondary,
        tertiary,
        background,
        nakshatra_id=nakshatra_id,
        affliction_count=affliction_count,
    )
    levels = to_signal_levels(vec)
    signal: dict[str, Any] = {dim: levels[dim] for dim in EXPOSED_DIMENSIONS}
    signal["support"] = clamp01((signal["action"] + signal["clarity"]) / 2)
    signal["date"] = day.isoformat() if isinstance(day, date) else day
    return signal


def compute_week_daily_signals(
    week_start: date,
    primary: Any = None,
    secondary: Any = None,
    tertiary: Any = None,
    background: Any = None,
    *,
    moon_longitude: Any = None,
    fallback_nakshatra_id: Any = None,
    affliction_count: Any = 0,
) -> list[dict[str, Any]]:
    """Seven daily signals; only the nakshatra varies across the week."""
    return compute_range_daily_signals(
        week_start,
        7,
        primary,
        secondary,
        tertiary,
        background,
        moon_longitude=moon_longitude,
        fallback_nakshatra_id=fallback_nakshatra_id,
        affliction_count=affliction_count,
    )


def compute_range_daily_signals(
    first_day: date,
    days: int,
    primary: Any = None,
    secondary: Any = None,
    tertiary: Any = None,
    background: Any = None,
    *,
    moon_longitude: Any = None,
    fallback_nakshatra_id: Any = None,
    affliction_count: Any = 0,
) -> list[dict[str, Any]]:
    daily: list[dict[str, Any]] = []
    for i, lon in enumerate(project_moon_longitudes(moon_longitude, days)):
        nak_id = nakshatra_from_longitude(lon) if lon is not None else fallback_nakshatra_id
        signal = compute_daily_signal(
            first_day + timedelta(days=i),
            primary,
            secondary,
            tertiary,
            background,
            nakshatra_id=nak_id,
            affliction_count=affliction_count,
        )
        signal["day_index"] = i
        daily.append(signal)
    return daily


def _average(daily: Sequence[dict[str, Any]], key: str) -> float:
    if not daily:
        return 0.5
    values = []
    for day in daily:
        number = _finite(day.get(key))
        values.append(0.5 if number is None else number)
    return sum(values) / len(values)


def _aggregate_levels(daily: Sequence[dict[str, Any]], prefix: str) -> dict[str, str]:
    pressure = _average(daily, "pressure")
    clarity = _average(daily, "clarity")
    noise = _average(daily, "noise")
    action = _average(daily, "action")
    support = clamp01((action + clarity) / 2)

    levels = {
        f"{prefix}_pressure": level3(pressure),
        f"{prefix}_support": level3(support),
        f"{prefix}_clarity": level3(clarity),
        f"{prefix}_emotional_volatility": level3(noise),
        f"{prefix}_action_flow": level3(action),
    }
    logger.debug(
        "%s averages days=%d pressure=%.3f clarity=%.3f noise=%.3f action=%.3f support=%.3f",
        prefix,
        len(daily),
        pressure,
        clarity,
        noise,
        action,
        support,
    )
    return levels


def aggregate_weekly_signals(daily: Sequence[dict[str, Any]]) -> dict[str, str]:
    return _aggregate_levels(daily, "weekly")


def aggregate_monthly_signals(daily: Sequence[dict[str, Any]]) -> dict[str, str]:
    return _aggregate_levels(daily, "monthly")


def peak_pressure_day(daily: Sequence[dict[str, Any]]) -> dict[str, Any] | None:
    """First day with the highest pressure."""
    best: dict[str, Any] | None = None
    for day in daily:
        if best is None or day["pressure"] > best["pressure"]:
            best = day
    return best


def peak_support_day(daily: Sequence[dict[str, Any]]) -> dict[str, Any] | None:
    """First day with the highest action + clarity."""
    best: dict[str, Any] | None = None
    for day in daily:
        if best is None or (day["action"] + day["clarity"]) > (best["action"] + best["clarity"]):
            best = day
    return best
