from __future__ import annotations

import unittest
from random import Random

from prediction_core.variant_ranker import rank_variants, variant_sort_key


def _variant(point, code, score, dominance="supporting", confidence="medium", tone="informational"):
    return {
        "point_code": point,
        "variant_code": code,
        "score": score,
        "effect": {
            "theme": "career",
            "area": "",
            "variant_meta": {"tone": tone, "dominance": dominance, "confidence_level": confidence},
        },
    }


class TestVariantRanker(unittest.TestCase):
    def test_dominance_outranks_confidence_and_score(self) -> None:
        background = _variant("P1", "V1", 0.99, dominance="background", confidence="high")
        dominant = _variant("P2", "V2", 0.10, dominance="dominant", confidence="low")
        supporting = _variant("P3", "V3", 0.50, dominance="supporting", confidence="high")

        ranked = rank_variants([background, supporting, dominant])

        self.assertEqual([v["point_code"] for v in ranked], ["P2", "P3", "P1"])

    def test_confidence_then_score(self) -> None:
        low = _variant("A", "A1", 0.9, confidence="low")
        high = _variant("B", "B1", 0.1, confidence="high")
        high_better_score = _variant("C", "C1", 0.2, confidence="high")

        ranked = rank_variants([low, high, high_better_score])

        self.assertEqual([v["point_code"] for v in ranked], ["C", "B", "A"])

    def test_lexical_tie_breaks_prefer_greater_codes(self) -> None:
        a = _variant("CAREER_A", "V1", 0.5)
        b = _variant("CAREER_B", "V1", 0.5)
        b2 = _variant("CAREER_B", "V2", 0.5)

        ranked = rank_variants([a, b, b2])

        self.assertEqual(
            [(v["point_code"], v["variant_code"]) for v in ranked],
            [("CAREER_B", "V2"), ("CAREER_B", "V1"), ("CAREER_A", "V1")],
        )

    def test_order_is_identical_under_permutation(self) -> None:
        variants = [
            _variant("P1", "V1", 0.4, dominance="dominant", confidence="medium"),
            _variant("P2", "V1", 0.4, dominance="dominant", confidence="medium"),
            _variant("P2", "V9", 0.4, dominance="dominant", confidence="medium"),
            _variant("P3", "V1", 0.7, dominance="supporting", confidence="high"),
            _variant("P4", "V1", 0.7, dominance="background", confidence="high"),
            _variant(None, None, 0.0, dominance="supporting", confidence="low"),
        ]
        expected = [variant_sort_key(v) for v in rank_variants(variants)]

        rng = Random(7)
        for _ in range(25):
            shuffled = list(variants)
            rng.shuffle(shuffled)
            self.assertEqual([variant_sort_key(v) for v in rank_variants(shuffled)], expected)

    def test_malformed_fields_use_lowest_defaults(self) -> None:
        odd = {"score": "high", "effect": {"variant_meta": {"dominance": "loud", "confidence_level": 7}}}
        key = variant_sort_key(odd)
        # invalid dominance/confidence normalize to supporting/medium; score to 0
        self.assertEqual(key, (2, 2, 0, "", ""))

    def test_camel_case_aliases_and_effect_json(self) -> None:
        variant = {
            "pointCode": "MONEY_FLOW",
            "code": "V7",
            "score": 1.5,
            "effect_json": {"variant_meta": {"dominance": "dominant", "confidence_level": "high"}},
        }
        self.assertEqual(variant_sort_key(variant), (3, 3, 1.5, "MONEY_FLOW", "V7"))

    def test_non_sequence_input_returns_empty(self) -> None:
        self.assertEqual(rank_variants(None), [])
        self.assertEqual(rank_variants({"score": 1}), [])

    def test_input_list_is_not_mutated(self) -> None:
        variants = [_variant("A", "1", 0.1), _variant("B", "1", 0.9)]
        snapshot = list(variants)
        rank_variants(variants)
        self.assertEqual(variants, snapshot)


if __name__ == "__main__":
    unittest.main()
