from __future__ import annotations

import json
import unittest
from datetime import date, timedelta
from unittest.mock import patch

from prediction_core.experience_service import (
    NotFoundError,
    generate_daily_experience,
    generate_monthly_experience,
    generate_weekly_experience,
)
from prediction_core.monthly_narrative import DEFAULT_MID_MONTH_SHIFT, OPENING_VARIANTS
from prediction_core.settings import Settings
from prediction_core.text_sanitizer import scan_influence_labels

SETTINGS = Settings(log_level="INFO", timezone="Asia/Kolkata", scan_narratives=True)


class FakeStore:
    def __init__(self, windows=None, snapshots=None):
        self.windows = windows or {}
        self.snapshots = snapshots or {}
        self.calls: list[tuple[str, int]] = []

    def get_window(self, window_id):
        self.calls.append(("window", window_id))
        return self.windows.get(window_id)

    def get_snapshot(self, window_id):
        self.calls.append(("snapshot", window_id))
        return self.snapshots.get(window_id)


def _saturn_store(**window_overrides) -> FakeStore:
    window = {"scope": "weekly", "start_at": "2026-01-05T00:00:00Z", "end_at": "2026-01-11T23:59:59Z"}
    window.update(window_overrides)
    snapshot = {
        "window_id": 12,
        "running_mahadasha_planet": 7,
        "running_antardasha_planet": 7,
        "running_pratyantardasha_planet": 7,
        "running_sookshma_planet": 7,
        "running_sookshma_end": "2026-01-08T10:00:00Z",
        "planets_state": json.dumps([{"planet": "SATURN", "house": 8}]),
        "transits_state": "[]",
    }
    return FakeStore(windows={12: window}, snapshots={12: snapshot})


class TestWeeklyExperience(unittest.TestCase):
    def test_afflicted_saturn_week(self) -> None:
        out = generate_weekly_experience("12", _saturn_store(), settings=SETTINGS)

        self.assertEqual(out["meta"]["window_id"], "12")
        self.assertEqual(out["meta"]["from"], "2026-01-05")
        self.assertEqual(out["meta"]["to"], "2026-01-11")
        self.assertTrue(out["meta"]["generated_at"].endswith("Z"))
        self.assertEqual(
            out["signals"],
            {
                "weekly_pressure": "high",
                "weekly_support": "medium",
                "weekly_clarity": "medium",
                "weekly_emotional_volatility": "high",
                "weekly_action_flow": "medium",
            },
        )
        lines = out["narrative"].split("\n")
        self.assertEqual(lines[0], "This week tests patience and planning more than speed.")
        self.assertIn("Pressure pattern: heavier around 2026-01-05.", lines)
        self.assertTrue(any(line.startswith("Mid-week shift: after 2026-01-08") for line in lines))
        self.assertEqual(len(out["remedies"]), 1)
        self.assertEqual(scan_influence_labels(out["narrative"]), [])

    def test_missing_window_raises_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            generate_weekly_experience(99, FakeStore(), settings=SETTINGS)
        self.assertEqual(ctx.exception.entity, "prediction_window")
        self.assertEqual(ctx.exception.entity_id, 99)
        self.assertEqual(str(ctx.exception), "prediction_window not found: id=99")

    def test_missing_snapshot_raises_not_found(self) -> None:
        store = FakeStore(windows={5: {"start_at": "2026-01-05T00:00:00Z"}})
        with self.assertRaises(NotFoundError) as ctx:
            generate_weekly_experience(5, store, settings=SETTINGS)
        self.assertEqual(ctx.exception.entity, "astro_state_snapshot")

    def test_invalid_window_id(self) -> None:
        store = _saturn_store()
        for value in (None, "", "abc", True, 0, -4):
            with self.assertRaises(ValueError) as ctx:
                generate_weekly_experience(value, store, settings=SETTINGS)
            self.assertEqual(str(ctx.exception), "WINDOW_ID missing or invalid")
        self.assertEqual(store.calls, [])

    def test_missing_start_uses_today_in_configured_timezone(self) -> None:
        out = generate_weekly_experience(12, _saturn_store(start_at=None), settings=SETTINGS)
        start = date.fromisoformat(out["meta"]["from"])
        self.assertEqual(out["meta"]["to"], (start + timedelta(days=6)).isoformat())
        self.assertTrue(any(line.startswith("Mid-week shift: ") for line in out["narrative"].split("\n")))

    def test_influence_labels_in_narrative_are_audited(self) -> None:
        leaked = {"narrative": "Saturn weighs on the week.", "remedies": []}
        with patch("prediction_core.experience_service.build_weekly_narrative", return_value=leaked):
            with self.assertLogs("experience_service.narrative_audit", level="WARNING") as captured:
                generate_weekly_experience(12, _saturn_store(), settings=SETTINGS)

        payload = json.loads(captured.records[0].getMessage())
        self.assertEqual(payload["window_id"], 12)
        self.assertEqual(payload["scope"], "weekly")
        self.assertEqual(payload["findings"][0]["match"], "Saturn")

    def test_audit_disabled_by_settings(self) -> None:
        leaked = {"narrative": "Saturn weighs on the week.", "remedies": []}
        quiet = Settings(scan_narratives=False)
        with patch("prediction_core.experience_service.build_weekly_narrative", return_value=leaked):
            with patch("prediction_core.experience_service.narrative_audit_logger") as audit:
                generate_weekly_experience(12, _saturn_store(), settings=quiet)
        audit.warning.assert_not_called()


class TestWindowStartSpellings(unittest.TestCase):
    def test_hour_only_offset_start_anchors_the_week(self) -> None:
        store = _saturn_store(start_at="2026-01-05 00:00:00+00")
        out = generate_weekly_experience(12, store, settings=SETTINGS)
        self.assertEqual(out["meta"]["from"], "2026-01-05")
        self.assertTrue(any(line.startswith("Mid-week shift: after 2026-01-08") for line in out["narrative"].split("\n")))


class TestMonthlyExperience(unittest.TestCase):
    def _month_store(self, **snapshot_overrides) -> FakeStore:
        store = _saturn_store(start_at="2026-01-31T18:30:00Z", end_at="2026-02-28T18:29:59.999Z")
        store.snapshots[12].update(snapshot_overrides)
        return store

    def test_local_month_range(self) -> None:
        out = generate_monthly_experience(12, self._month_store(), settings=SETTINGS)

        self.assertEqual(out["meta"]["from"], "2026-02-01")
        self.assertEqual(out["meta"]["to"], "2026-02-28")
        self.assertEqual(out["meta"]["timezone"], "Asia/Kolkata")
        self.assertEqual(out["signals"]["monthly_pressure"], "high")
        self.assertEqual(out["signals"]["monthly_emotional_volatility"], "high")
        lines = out["narrative"].split("\n")
        self.assertIn(lines[0], [text.format(weekday="Sunday") for text in OPENING_VARIANTS[0][1]])
        self.assertIn(DEFAULT_MID_MONTH_SHIFT, lines)
        self.assertEqual(len(out["remedies"]), 1)
        self.assertEqual(scan_influence_labels(out["narrative"]), [])

    def test_sub_period_end_uses_local_day(self) -> None:
        store = self._month_store(running_sookshma_end="2026-02-10T20:00:00Z")
        out = generate_monthly_experience(12, store, settings=SETTINGS)
        self.assertTrue(
            any(line.startswith("Mid-month shift: after 2026-02-11") for line in out["narrative"].split("\n"))
        )

    def test_opening_is_deterministic(self) -> None:
        first = generate_monthly_experience(12, self._month_store(), settings=SETTINGS)
        second = generate_monthly_experience("12", self._month_store(), settings=SETTINGS)
        self.assertEqual(first["narrative"], second["narrative"])

    def test_missing_end_spans_thirty_one_days(self) -> None:
        store = self._month_store()
        store.windows[12]["end_at"] = None
        out = generate_monthly_experience(12, store, settings=SETTINGS)
        self.assertEqual(out["meta"]["to"], "2026-03-03")

    def test_missing_window(self) -> None:
        with self.assertRaises(NotFoundError):
            generate_monthly_experience(7, FakeStore(), settings=SETTINGS)


class TestDailyExperience(unittest.TestCase):
    def test_afflicted_saturn_day(self) -> None:
        out = generate_daily_experience(12, _saturn_store(), settings=SETTINGS)

        self.assertEqual(out["meta"]["date"], "2026-01-05")
        self.assertEqual(
            out["signals"],
            {
                "pressure_level": "high",
                "clarity_level": "medium",
                "emotional_noise": "high",
                "action_support": "medium",
                "reaction_risk": "high",
            },
        )
        self.assertIn("more friction than usual", out["narrative"])
        self.assertEqual(len(out["remedies"]), 1)

    def test_target_date_is_echoed(self) -> None:
        out = generate_daily_experience(12, _saturn_store(), date(2026, 1, 7), settings=SETTINGS)
        self.assertEqual(out["meta"]["date"], "2026-01-07")

    def test_missing_snapshot(self) -> None:
        with self.assertRaises(NotFoundError):
            generate_daily_experience(1, FakeStore(windows={1: {}}), settings=SETTINGS)


if __name__ == "__main__":
    unittest.main()
