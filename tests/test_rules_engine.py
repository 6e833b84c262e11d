#!/usr/bin/env python3
"""
Unit tests for input normalization and proactive alerts
"""

import unittest
from pathlib import Path
import sys

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from normalizer import (
    add_pgx_factor,
    add_unique,
    format_medication_list,
    format_pgx_factor,
    parse_medication_list,
    resolve_to_generic,
    split_list,
)
from rules_engine import check_proactive_alerts
from schemas import Medication


def meds(*names):
    return [Medication(name=n) for n in names]


class TestNormalizer(unittest.TestCase):

    def test_split_list_trims_and_drops_empty(self):
        self.assertEqual(split_list(" a, ,b ,, c "), ["a", "b", "c"])
        self.assertEqual(split_list(""), [])

    def test_parse_medication_list(self):
        parsed = parse_medication_list("Lisinopril (10mg, 1/day); Metformin (500mg, 2/day); Aspirin")
        self.assertEqual(len(parsed), 3)
        self.assertEqual(parsed[0].name, "Lisinopril")
        self.assertEqual(parsed[0].dosage, "10mg")
        self.assertEqual(parsed[0].frequency, "1/day")
        self.assertEqual(parsed[2].name, "Aspirin")
        self.assertEqual(parsed[2].dosage, "")

    def test_format_medication_list_inverts_parse(self):
        text = "Lisinopril (10mg, 1/day); Aspirin"
        self.assertEqual(format_medication_list(parse_medication_list(text)), text)

    def test_resolve_to_generic(self):
        self.assertEqual(resolve_to_generic("Sintrom"), "warfarin")
        self.assertEqual(resolve_to_generic("Adiro 100"), "aspirin")
        self.assertEqual(resolve_to_generic("Metformin"), "metformin")
        self.assertEqual(resolve_to_generic("  "), "")

    def test_add_unique_is_case_insensitive(self):
        self.assertEqual(add_unique("Penicilina, AINEs", "penicilina"), "Penicilina, AINEs")
        self.assertEqual(add_unique("Penicilina", "Sulfa"), "Penicilina, Sulfa")
        self.assertEqual(add_unique("", "Sulfa"), "Sulfa")

    def test_pgx_factor_helpers(self):
        factor = format_pgx_factor("CYP2C19", "*2/*2", "Poor metabolizer")
        self.assertEqual(factor, "CYP2C19 (*2/*2): Poor metabolizer")
        self.assertEqual(format_pgx_factor("CYP2D6"), "CYP2D6")
        self.assertEqual(add_pgx_factor("CYP2D6", factor), f"CYP2D6; {factor}")
        self.assertEqual(add_pgx_factor(f"CYP2D6; {factor}", factor), f"CYP2D6; {factor}")


class TestProactiveAlerts(unittest.TestCase):

    def test_no_input_no_alerts(self):
        self.assertEqual(check_proactive_alerts([], "", ""), [])
        self.assertEqual(check_proactive_alerts(meds(""), "penicillin", "renal"), [])

    def test_brand_names_trigger_drug_pair(self):
        alerts = check_proactive_alerts(meds("Sintrom", "Trangorex"), "", "")
        self.assertEqual([a.id for a in alerts], ["ddi-amiodarone-warfarin"])
        self.assertEqual(alerts[0].type, "drug-drug")
        self.assertIn("Trangorex", alerts[0].message)
        self.assertIn("Sintrom", alerts[0].message)

    def test_pair_needs_two_different_medications(self):
        self.assertEqual(check_proactive_alerts(meds("Warfarin"), "", ""), [])

    def test_penicillin_allergy_matches_both_groups(self):
        alerts = check_proactive_alerts(meds("Amoxicillin"), "Penicillin", "")
        ids = [a.id for a in alerts]
        self.assertEqual(ids, ["allergy-Amoxicillin-penicil", "allergy-Amoxicillin-penicillin"])
        self.assertTrue(all(a.type == "allergy" for a in alerts))

    def test_spanish_allergy_token(self):
        alerts = check_proactive_alerts(meds("Ibuprofeno"), "AINEs", "")
        self.assertEqual([a.id for a in alerts], ["allergy-Ibuprofeno-aine"])

    def test_condition_contraindication(self):
        alerts = check_proactive_alerts(meds("Naproxen"), "", "Chronic kidney disease", lang="en")
        self.assertEqual(len(alerts), 1)
        self.assertEqual(alerts[0].id, "condition-Naproxen-kidney")
        self.assertIn("Kidney", alerts[0].message)
        self.assertIn("acute kidney injury", alerts[0].message)

    def test_short_tokens_do_not_match_in_reverse(self):
        # "su" is inside "sulfa" but too short to count
        self.assertEqual(check_proactive_alerts(meds("Bactrim"), "su", ""), [])
        alerts = check_proactive_alerts(meds("Bactrim"), "sulfa", "")
        self.assertEqual([a.id for a in alerts], ["allergy-Bactrim-sulfa"])

    def test_alert_order_and_uniqueness(self):
        alerts = check_proactive_alerts(
            meds("Ibuprofen", "Methotrexate", "Ibuprofen"), "NSAID", "renal failure", lang="en"
        )
        ids = [a.id for a in alerts]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertEqual(ids, [
            "allergy-Ibuprofen-nsaid",
            "condition-Ibuprofen-renal",
            "ddi-methotrexate-ibuprofen",
        ])

    def test_language_switch(self):
        es = check_proactive_alerts(meds("Sildenafil", "Nitroglycerin"), "", "", lang="es")
        en = check_proactive_alerts(meds("Sildenafil", "Nitroglycerin"), "", "", lang="en")
        self.assertEqual(es[0].id, en[0].id)
        self.assertNotEqual(es[0].title, en[0].title)


if __name__ == '__main__':
    unittest.main()
