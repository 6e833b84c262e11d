#!/usr/bin/env python3
"""
Unit tests for autocomplete suggestions and the TTL cache
"""

import unittest
from unittest.mock import MagicMock, patch
from pathlib import Path
import sys

import requests

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

import cache
from suggestion_engine import fetch_remote_terms, score_match, suggest


def remote_response(names):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = [len(names), [str(i) for i in range(len(names))], None, [[n] for n in names]]
    return response


class TestScoreMatch(unittest.TestCase):

    def test_score_tiers(self):
        self.assertEqual(score_match("warfarin", "Warfarin"), 1.0)
        prefix = score_match("warf", "Warfarin")
        self.assertAlmostEqual(prefix, 0.95)
        self.assertEqual(score_match("bil", "Ginkgo Biloba"), 0.8)
        self.assertEqual(score_match("farin", "Warfarin"), 0.7)

    def test_typo_scores_below_substring(self):
        typo = score_match("warfrin", "Warfarin")
        self.assertGreater(typo, 0.35)
        self.assertLess(typo, 0.7)

    def test_empty_inputs(self):
        self.assertEqual(score_match("", "Warfarin"), 0.0)
        self.assertEqual(score_match("war", ""), 0.0)


class TestSuggest(unittest.TestCase):

    def setUp(self):
        cache.clear_suggestions()

    def tearDown(self):
        cache.clear_suggestions()

    def test_short_query_returns_nothing(self):
        with patch("suggestion_engine.requests.get") as get:
            self.assertEqual(suggest("medication", "w"), [])
            get.assert_not_called()

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            suggest("allergy", "pen")

    def test_local_medication_first(self):
        results = suggest("medication", "warf", include_remote=False)
        self.assertEqual(results[0].term, "Warfarin")
        self.assertEqual(results[0].source, "local")
        self.assertEqual(results[0].dosage, "5mg")

    def test_brand_entry_carries_generic(self):
        results = suggest("medication", "sintrom", include_remote=False)
        self.assertEqual(results[0].term, "Sintrom")
        self.assertEqual(results[0].generic, "warfarin")

    def test_remote_merge_and_tie_break(self):
        with patch("suggestion_engine.requests.get",
                   return_value=remote_response(["Warfarin", "Warfarin Sodium (Oral Pill)"])) as get:
            results = suggest("medication", "warf")

        get.assert_called_once()
        terms = [r.term for r in results]
        self.assertEqual(terms.count("Warfarin"), 1)
        self.assertEqual(results[0].term, "Warfarin")
        self.assertEqual(results[0].source, "local")
        self.assertIn("Warfarin Sodium (Oral Pill)", terms)

    def test_results_are_limited(self):
        names = [f"Metformin variant {i}" for i in range(20)]
        with patch("suggestion_engine.requests.get", return_value=remote_response(names)):
            results = suggest("medication", "met")
        self.assertLessEqual(len(results), 8)

    def test_remote_failure_falls_back_to_local(self):
        with patch("suggestion_engine.requests.get",
                   side_effect=requests.exceptions.ConnectionError("offline")) as get:
            results = suggest("medication", "warf")
            self.assertTrue(results)
            self.assertTrue(all(r.source == "local" for r in results))

            # failures are not cached
            suggest("medication", "warf")
            self.assertEqual(get.call_count, 2)

    def test_remote_terms_are_cached(self):
        with patch("suggestion_engine.requests.get", return_value=remote_response(["Hypertension"])) as get:
            first = fetch_remote_terms("condition", "Hyper")
            second = fetch_remote_terms("condition", "hyper ")
        self.assertEqual(first, ["Hypertension"])
        self.assertEqual(second, ["Hypertension"])
        get.assert_called_once()
        params = get.call_args.kwargs["params"]
        self.assertEqual(params["df"], "primary_name")

    def test_supplements_are_local_only(self):
        with patch("suggestion_engine.requests.get") as get:
            results = suggest("supplement", "ginkgo")
            get.assert_not_called()
        self.assertEqual(results[0].term, "Ginkgo Biloba")
        self.assertEqual(results[0].category, "Herbal")


class TestTTLCache(unittest.TestCase):

    def test_entries_expire(self):
        ttl = cache.TTLCache(ttl_seconds=10)
        with patch("cache.time.monotonic", return_value=100.0):
            ttl.set("k", "v")
        with patch("cache.time.monotonic", return_value=105.0):
            self.assertEqual(ttl.get("k"), "v")
        with patch("cache.time.monotonic", return_value=111.0):
            self.assertIsNone(ttl.get("k"))
        self.assertEqual(len(ttl), 0)

    def test_max_entries_evicts_soonest_expiry(self):
        ttl = cache.TTLCache(ttl_seconds=10, max_entries=2)
        with patch("cache.time.monotonic", side_effect=[1.0, 2.0, 3.0]):
            ttl.set("a", 1)
            ttl.set("b", 2)
            ttl.set("c", 3)
        self.assertEqual(len(ttl), 2)
        with patch("cache.time.monotonic", return_value=4.0):
            self.assertIsNone(ttl.get("a"))
            self.assertEqual(ttl.get("c"), 3)


if __name__ == '__main__':
    unittest.main()
