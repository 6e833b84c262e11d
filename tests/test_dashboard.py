#!/usr/bin/env python3
"""
Unit tests for dashboard statistics
"""

import unittest
from pathlib import Path
import sys

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from dashboard import analysis_stats, latest_per_patient, patient_stats
from schemas import (
    AnalysisResult,
    DrugAllergyAlert,
    DrugConditionContraindication,
    DrugDrugInteraction,
    DrugPharmacogeneticContraindication,
    HistoryItem,
    Medication,
)


def item(record_id, patient_id=None, conditions="", meds=("Warfarin",), **findings):
    return HistoryItem(
        id=record_id,
        medications=[Medication(name=m) for m in meds],
        conditions=conditions,
        analysis_result=AnalysisResult(**findings),
        patient_id=patient_id,
    )


def history():
    return [
        item("2026-01-01T09:00:00.000Z_P1", "P1", "Hypertension, Diabetes", meds=("Warfarin", "Aspirin"),
             drug_drug_interactions=[DrugDrugInteraction(interaction="Warfarin + Aspirin", risk_level="Alto")]),
        item("2026-02-01T09:00:00.000Z_P1", "P1", "Hypertension", meds=("Warfarin",),
             drug_condition_contraindications=[
                 DrugConditionContraindication(medication="Warfarin", condition="Ulcer", risk_level="Moderado")]),
        item("2026-01-15T09:00:00.000Z_P2", "P2", "Hypertension, CKD", meds=("Ibuprofen", "Lisinopril", "Aspirin"),
             drug_allergy_alerts=[
                 DrugAllergyAlert(medication="Ibuprofen", allergen="AINEs", risk_level="Crítico")],
             drug_pharmacogenetic_contraindications=[
                 DrugPharmacogeneticContraindication(medication="Warfarin", genetic_factor="CYP2C9",
                                                     risk_level="High")]),
        item("2026-01-20T09:00:00.000Z", None,
             drug_drug_interactions=[
                 DrugDrugInteraction(interaction="Warfarin + Aspirin", risk_level="Alto"),
                 DrugDrugInteraction(interaction="Aspirin + Ibuprofen", risk_level="")]),
    ]


class TestAnalysisStats(unittest.TestCase):

    def test_empty_history(self):
        self.assertIsNone(analysis_stats([]))
        self.assertIsNone(patient_stats([]))

    def test_totals(self):
        stats = analysis_stats(history(), "en")
        self.assertEqual(stats["totalAnalyses"], 4)
        self.assertEqual(stats["totalFindings"], 6)
        self.assertEqual(stats["highRiskFindings"], 4)

    def test_risk_distribution_order(self):
        stats = analysis_stats(history(), "en")
        self.assertEqual([d["label"] for d in stats["riskDistribution"]],
                         ["Crítico", "Alto", "High", "Moderado", "Unknown"])
        self.assertEqual(stats["riskDistribution"][1]["value"], 2)

    def test_top_lists(self):
        stats = analysis_stats(history(), "en")
        self.assertEqual(stats["topMedications"][0], {"label": "Warfarin", "value": 4})
        self.assertLessEqual(len(stats["topMedications"]), 5)
        self.assertEqual(stats["topInteractionTypes"][0], {"label": "Drug-Drug", "value": 3})
        specific = {d["label"]: d["value"] for d in stats["topSpecificInteractions"]}
        self.assertEqual(specific["Warfarin + Aspirin"], 2)
        self.assertIn("Ibuprofen (allergy to AINEs)", specific)
        # pharmacogenetic findings are counted but not listed individually
        self.assertEqual(len(specific), 2)


class TestPatientStats(unittest.TestCase):

    def test_latest_item_per_patient(self):
        latest = latest_per_patient(history())
        self.assertEqual({i.id for i in latest},
                         {"2026-02-01T09:00:00.000Z_P1", "2026-01-15T09:00:00.000Z_P2"})

    def test_patient_stats(self):
        stats = patient_stats(history())
        self.assertEqual(stats["totalUniquePatients"], 2)
        # P1's latest analysis only has a moderate finding
        self.assertEqual(stats["patientsWithRisk"], 1)
        self.assertEqual(stats["avgMeds"], 2.0)
        self.assertEqual(stats["topConditions"][0], {"label": "Hypertension", "value": 2})
        self.assertNotIn("Diabetes", [c["label"] for c in stats["topConditions"]])


if __name__ == '__main__':
    unittest.main()
