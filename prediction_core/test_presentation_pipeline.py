from unittest.mock import Mock

from prediction_core.output_safety_guard import SAFE_NEUTRAL_TEXT
from prediction_core.presentation_pipeline import build_composer_output_for_delivery


def _variant(point, *, dominance="supporting", confidence="medium", tone="informational"):
    return {
        "point_code": point,
        "variant_code": "V1",
        "score": 0.5,
        "effect": {
            "theme": "health",
            "variant_meta": {"tone": tone, "dominance": dominance, "confidence_level": confidence},
        },
    }


def test_all_suppressed_input_is_rescued_by_guard() -> None:
    log = Mock()
    out = build_composer_output_for_delivery(
        [_variant("BG", dominance="background"), _variant("LOW", confidence="low")],
        domain="health",
        logger=log,
    )

    assert out["headlines"][0]["text"] == SAFE_NEUTRAL_TEXT
    assert out["headlines"][0]["domain"] == "health"
    assert len(out["suppressed_variants"]) == 2
    log.warning.assert_called_once()


def test_composer_options_are_forwarded() -> None:
    log = Mock()
    out = build_composer_output_for_delivery(
        [_variant("BG", dominance="background")],
        composer_options={"include_background": True},
        logger=log,
    )

    assert [n["point_code"] for n in out["supporting_notes"]] == ["BG"]
    log.warning.assert_not_called()


def test_empty_input_yields_neutral_headline() -> None:
    out = build_composer_output_for_delivery([], logger=None)
    assert out["applied_tone"] == "informational"
    assert len(out["headlines"]) == 1
