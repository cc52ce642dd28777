"""Weekly, monthly and daily experience generation for a prediction window.

The store is an external collaborator exposing::

    get_window(window_id) -> dict | None
    get_snapshot(window_id) -> dict | None

Missing rows are the only hard failures here and surface as NotFoundError.
Output shape (every scope)::

    {"meta": {...}, "signals": {...}, "narrative": str, "remedies": [...]}
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytz

from prediction_core.daily_narrative import build_daily_narrative, daily_levels
from prediction_core.monthly_narrative import build_monthly_narrative, opening_seed
from prediction_core.settings import Settings, load_settings
from prediction_core.signal_aggregator import (
    aggregate_monthly_signals,
    aggregate_weekly_signals,
    compute_range_daily_signals,
    compute_signal_vector,
    compute_week_daily_signals,
    nakshatra_from_longitude,
    to_signal_levels,
)
from prediction_core.snapshot_inputs import (
    AstroSnapshot,
    PredictionWindow,
    active_periods,
    count_afflicted_periods,
    mid_week_transition,
    transit_moon_longitude,
    utc_date,
)
from prediction_core.text_sanitizer import scan_banned_language, scan_influence_labels
from prediction_core.weekly_narrative import build_weekly_narrative

logger = logging.getLogger("experience_service")
narrative_audit_logger = logging.getLogger("experience_service.narrative_audit")


class NotFoundError(LookupError):
    """An upstream window or snapshot row does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: id={entity_id}")


def _utc_iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_window_id(window_id: Any) -> int:
    if window_id is None or isinstance(window_id, bool):
        raise ValueError("WINDOW_ID missing or invalid")
    try:
        parsed = int(str(window_id).strip())
    except ValueError as exc:
        raise ValueError("WINDOW_ID missing or invalid") from exc
    if parsed <= 0:
        raise ValueError("WINDOW_ID missing or invalid")
    return parsed


def _load_inputs(store: Any, window_id: int) -> tuple[PredictionWindow, AstroSnapshot]:
    window_row = store.get_window(window_id)
    if window_row is None:
        raise NotFoundError("prediction_window", window_id)
    snapshot_row = store.get_snapshot(window_id)
    if snapshot_row is None:
        raise NotFoundError("astro_state_snapshot", window_id)
    window = PredictionWindow.model_validate({"id": window_id, **dict(window_row)})
    snapshot = AstroSnapshot.model_validate(dict(snapshot_row))
    return window, snapshot


def _window_start_day(window: PredictionWindow, settings: Settings) -> date:
    if window.start_at is not None:
        return utc_date(window.start_at)
    return datetime.now(pytz.timezone(settings.timezone)).date()


def _audit_narrative(window_id: int, scope: str, narrative: str, settings: Settings) -> None:
    if not settings.scan_narratives:
        return
    findings = scan_influence_labels(narrative) + scan_banned_language(narrative)
    if findings:
        narrative_audit_logger.warning(
            json.dumps(
                {"window_id": window_id, "scope": scope, "findings": findings},
                ensure_ascii=False,
                sort_keys=True,
            )
        )


def generate_weekly_experience(window_id: Any, store: Any, *, settings: Settings | None = None) -> dict[str, Any]:
    settings = settings or load_settings()
    window_id_num = _parse_window_id(window_id)
    window, snapshot = _load_inputs(store, window_id_num)

    week_start = _window_start_day(window, settings)
    primary, secondary, tertiary, background = active_periods(snapshot)
    affliction_count = count_afflicted_periods(snapshot)

    daily = compute_week_daily_signals(
        week_start,
        primary,
        secondary,
        tertiary,
        background,
        moon_longitude=transit_moon_longitude(snapshot),
        fallback_nakshatra_id=snapshot.moon_nakshatra,
        affliction_count=affliction_count,
    )
    signals = aggregate_weekly_signals(daily)
    transition = mid_week_transition(snapshot, week_start)

    assembled = build_weekly_narrative(daily, signals, mid_week_transition=transition)
    _audit_narrative(window_id_num, "weekly", assembled["narrative"], settings)

    logger.info(
        "weekly experience window_id=%s from=%s afflicted=%d pressure=%s volatility=%s remedies=%d",
        window_id_num,
        week_start.isoformat(),
        affliction_count,
        signals["weekly_pressure"],
        signals["weekly_emotional_volatility"],
        len(assembled["remedies"]),
    )

    return {
        "meta": {
            "window_id": str(window_id),
            "generated_at": _utc_iso_now(),
            "from": week_start.isoformat(),
            "to": (week_start + timedelta(days=6)).isoformat(),
        },
        "signals": signals,
        "narrative": assembled["narrative"],
        "remedies": assembled["remedies"],
    }


MAX_MONTH_DAYS = 31
DEFAULT_MONTH_SPAN = timedelta(days=30)


def _local_day(value: datetime, tz: Any) -> date:
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(tz).date()


def generate_monthly_experience(window_id: Any, store: Any, *, settings: Settings | None = None) -> dict[str, Any]:
    """Month-scale experience; dates are local days in the configured timezone."""
    settings = settings or load_settings()
    window_id_num = _parse_window_id(window_id)
    window, snapshot = _load_inputs(store, window_id_num)

    tz = pytz.timezone(settings.timezone)
    start_at = window.start_at or datetime.now(pytz.utc)
    end_at = window.end_at or start_at + DEFAULT_MONTH_SPAN
    first_day = _local_day(start_at, tz)
    last_day = _local_day(end_at, tz)
    total_days = max(1, min(MAX_MONTH_DAYS, (last_day - first_day).days + 1))
    last_day = first_day + timedelta(days=total_days - 1)

    periods = active_periods(snapshot)
    affliction_count = count_afflicted_periods(snapshot)
    daily = compute_range_daily_signals(
        first_day,
        total_days,
        *periods,
        moon_longitude=transit_moon_longitude(snapshot),
        fallback_nakshatra_id=snapshot.moon_nakshatra,
        affliction_count=affliction_count,
    )
    signals = aggregate_monthly_signals(daily)

    transition = None
    if snapshot.sookshma_end is not None:
        end_day = _local_day(snapshot.sookshma_end, tz)
        if first_day <= end_day <= last_day:
            transition = end_day

    assembled = build_monthly_narrative(
        daily,
        signals,
        first_day=first_day,
        seed=opening_seed(first_day, [p.value if p is not None else None for p in periods]),
        mid_month_transition=transition,
    )
    _audit_narrative(window_id_num, "monthly", assembled["narrative"], settings)

    logger.info(
        "monthly experience window_id=%s from=%s days=%d afflicted=%d pressure=%s remedies=%d",
        window_id_num,
        first_day.isoformat(),
        total_days,
        affliction_count,
        signals["monthly_pressure"],
        len(assembled["remedies"]),
    )

    return {
        "meta": {
            "window_id": str(window_id),
            "generated_at": _utc_iso_now(),
            "from": first_day.isoformat(),
            "to": last_day.isoformat(),
            "timezone": settings.timezone,
        },
        "signals": signals,
        "narrative": assembled["narrative"],
        "remedies": assembled["remedies"],
    }


def generate_daily_experience(
    window_id: Any,
    store: Any,
    target_date: str | date | None = None,
    *,
    settings: Settings | None = None,
) -> dict[str, Any]:
    settings = settings or load_settings()
    window_id_num = _parse_window_id(window_id)
    window, snapshot = _load_inputs(store, window_id_num)

    if isinstance(target_date, date):
        date_text = target_date.isoformat()
    elif target_date:
        date_text = str(target_date)
    else:
        date_text = _window_start_day(window, settings).isoformat()

    moon_longitude = transit_moon_longitude(snapshot)
    nakshatra_id = nakshatra_from_longitude(moon_longitude) if moon_longitude is not None else snapshot.moon_nakshatra
    affliction_count = count_afflicted_periods(snapshot)

    vector = compute_signal_vector(
        *active_periods(snapshot),
        nakshatra_id=nakshatra_id,
        affliction_count=affliction_count,
    )
    levels = daily_levels(to_signal_levels(vector))
    assembled = build_daily_narrative(levels, afflicted=affliction_count > 0)
    _audit_narrative(window_id_num, "daily", assembled["narrative"], settings)

    logger.info(
        "daily experience window_id=%s date=%s afflicted=%d pressure=%s remedies=%d",
        window_id_num,
        date_text,
        affliction_count,
        levels["pressure_level"],
        len(assembled["remedies"]),
    )

    return {
        "meta": {
            "window_id": str(window_id),
            "generated_at": _utc_iso_now(),
            "date": date_text,
        },
        "signals": levels,
        "narrative": assembled["narrative"],
        "remedies": assembled["remedies"],
    }
