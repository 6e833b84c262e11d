#!/usr/bin/env python3
"""
Integration tests for orchestration and the HTTP API (LLM and network mocked)
"""

import tempfile
import unittest
from unittest.mock import patch
from pathlib import Path
import sys

from fastapi.testclient import TestClient

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

import database
from API import app
from database import DEMO_USER_ID, LocalStore, StorageError
from exporters import batch_template_csv
from llm_client import ApiKeyError, LLMServiceError
from schemas import (
    AnalysisResult,
    CausalityMatch,
    DrugDrugInteraction,
    InvestigatorResult,
    Medication,
    PatientInput,
)
import UI_main

ANALYSIS = AnalysisResult(
    analysis_text="### Resumen crítico\nWarfarina + amiodarona\n### 1. Detalle\nTexto",
    drug_drug_interactions=[
        DrugDrugInteraction(interaction="Sintrom + Trangorex", risk_level="Alto", clinical_summary="INR"),
    ],
)

INVESTIGATION = InvestigatorResult(
    analysis_text="**Informe**",
    matches=[CausalityMatch(cause="Lisinopril", probability="Alta", mechanism="Hipotensión")],
)

PATIENT = {
    "medications": [{"name": "Sintrom", "dosage": "4mg"}, {"name": "Trangorex"}],
    "allergies": "Penicilina",
    "conditions": "Fibrilación auricular",
    "patient_id": "P1",
}


class ApiTestCase(unittest.TestCase):
    """Demo user storage in a temp dir, audit traces off, LLM mocked."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        for patcher in (
            patch.object(database, "_local", LocalStore(self.tmp.name)),
            patch("log.config.AUDIT_ENABLED", False),
            patch("UI_main.analyze_interactions", return_value=ANALYSIS),
            patch("UI_main.investigate_symptoms", return_value=INVESTIGATION),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)
        self.client = TestClient(app)


class TestOrchestration(ApiTestCase):

    def test_run_interaction_check(self):
        profile = PatientInput(medications=[Medication(name=" Sintrom "), Medication(name="")],
                               patient_id="P1")
        view = UI_main.run_interaction_check(profile, DEMO_USER_ID, "es")

        self.assertEqual(view["proactiveAlerts"], [])
        self.assertEqual(view["summaryCounts"], {"Alto": 1})
        self.assertEqual(view["sections"][0]["key"], "drugDrug")
        self.assertTrue(view["criticalSummary"].startswith("### Resumen crítico"))
        self.assertIn("<h3>", view["analysisHtml"])
        self.assertTrue(view["historyItem"]["id"].endswith("_P1"))

        saved = database.get_history(DEMO_USER_ID)
        self.assertEqual(len(saved), 1)
        self.assertEqual([m.name for m in saved[0].medications], ["Sintrom"])

    def test_no_medications_is_rejected(self):
        with self.assertRaises(ValueError):
            UI_main.analyze_patient(PatientInput(), DEMO_USER_ID, "es")

    def test_failed_call_is_audited_and_reraised(self):
        with patch("UI_main.analyze_interactions", side_effect=LLMServiceError("down")), \
                patch("UI_main.log_analysis") as audit:
            with self.assertRaises(LLMServiceError):
                UI_main.analyze_patient(PatientInput(medications=[Medication(name="Warfarin")]), DEMO_USER_ID)
        self.assertEqual(audit.call_args.kwargs["error"], "down")
        self.assertEqual(database.get_history(DEMO_USER_ID), [])

    def test_run_investigation(self):
        view = UI_main.run_investigation("Mareo", PatientInput(medications=[Medication(name="Lisinopril")]),
                                         DEMO_USER_ID, "es")
        self.assertEqual(view["matches"][0]["cause"], "Lisinopril")
        self.assertIn("<strong>Informe</strong>", view["analysisHtml"])
        self.assertEqual(len(database.get_investigations(DEMO_USER_ID)), 1)

    def test_critical_summary_is_rendered(self):
        view = UI_main.build_result_view(ANALYSIS, "es")
        self.assertEqual(view["criticalSummary"], "### Resumen crítico\nWarfarina + amiodarona")
        self.assertTrue(view["criticalSummaryHtml"].startswith("<h3>Resumen crítico</h3>"))
        self.assertNotIn("###", view["criticalSummaryHtml"])

    def test_add_form_entry_skips_duplicates(self):
        profile = PatientInput(allergies="Penicilina", other_substances="Alcohol")
        updated = UI_main.add_form_entry(profile, "allergies", "penicilina")
        self.assertEqual(updated.allergies, "Penicilina")
        updated = UI_main.add_form_entry(updated, "other_substances", "Tabaco")
        self.assertEqual(updated.other_substances, "Alcohol, Tabaco")
        with self.assertRaises(ValueError):
            UI_main.add_form_entry(profile, "patient_id", "P9")

    def test_add_pgx_entry(self):
        profile = UI_main.add_pgx_entry(PatientInput(pharmacogenetics="CYP2D6"), "CYP2C19", "*2/*2", "Poor metabolizer")
        self.assertEqual(profile.pharmacogenetics, "CYP2D6; CYP2C19 (*2/*2): Poor metabolizer")
        again = UI_main.add_pgx_entry(profile, "CYP2C19", "*2/*2", "Poor metabolizer")
        self.assertEqual(again.pharmacogenetics, profile.pharmacogenetics)
        with self.assertRaises(ValueError):
            UI_main.add_pgx_entry(profile, "NOTAGENE")

    def test_substance_options_follow_language(self):
        self.assertIn("Zumo de pomelo", UI_main.substance_options("es"))
        self.assertIn("Grapefruit juice", UI_main.substance_options("en"))

    def test_save_profile_requires_id(self):
        with self.assertRaises(ValueError):
            UI_main.save_profile_from_form(DEMO_USER_ID, PatientInput())
        saved = UI_main.save_profile_from_form(DEMO_USER_ID, PatientInput(patient_id="P7", allergies=" Sulfa "))
        self.assertEqual(saved.allergies, "Sulfa")
        self.assertTrue(saved.last_updated)


class TestEndpoints(ApiTestCase):

    def test_health(self):
        self.assertEqual(self.client.get("/health").json()["status"], "ok")

    def test_suggest(self):
        response = self.client.get("/suggest/medication", params={"q": "warf", "remote": "false"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["suggestions"][0]["term"], "Warfarin")
        self.assertEqual(self.client.get("/suggest/allergy", params={"q": "pen"}).status_code, 400)

    def test_alerts(self):
        response = self.client.post("/alerts", json=PATIENT)
        self.assertEqual([a["id"] for a in response.json()["alerts"]], ["ddi-amiodarone-warfarin"])

    def test_analyze_and_history(self):
        response = self.client.post("/analyze", json=PATIENT)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["proactiveAlerts"][0]["type"], "drug-drug")

        history = self.client.get(f"/history/{DEMO_USER_ID}").json()["history"]
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["patientId"], "P1")

        export = self.client.get(f"/history/{DEMO_USER_ID}/export.csv", params={"lang": "en"})
        self.assertEqual(export.status_code, 200)
        self.assertIn("text/csv", export.headers["content-type"])
        self.assertIn("Sintrom; Trangorex", export.text)

        self.assertEqual(self.client.delete(f"/history/{DEMO_USER_ID}").status_code, 200)
        self.assertEqual(self.client.get(f"/history/{DEMO_USER_ID}").json()["history"], [])

    def test_error_mapping(self):
        cases = (
            (ApiKeyError("missing"), 401),
            (LLMServiceError("down"), 502),
            (StorageError("disk full"), 503),
        )
        for exc, status in cases:
            with self.subTest(status=status):
                with patch("UI_main.analyze_interactions", side_effect=exc):
                    response = self.client.post("/analyze", json=PATIENT)
                self.assertEqual(response.status_code, status)
                self.assertEqual(response.json()["detail"], str(exc))

    def test_validation_error_is_400(self):
        response = self.client.post("/investigate", json=PATIENT)  # no symptoms
        self.assertEqual(response.status_code, 400)

    def test_investigate(self):
        response = self.client.post("/investigate", json={**PATIENT, "symptoms": "Mareo"})
        self.assertEqual(response.json()["matches"][0]["probability"], "Alta")

    def test_batch_analyze(self):
        body = {"csv": batch_template_csv("analysis", "es"), "user_id": DEMO_USER_ID, "concurrency": 2}
        response = self.client.post("/batch/analyze", json=body)
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["completed"], 2)
        self.assertEqual(len(database.get_history(DEMO_USER_ID)), 2)

    def test_batch_zero_concurrency_is_400(self):
        body = {"csv": batch_template_csv("analysis", "es"), "concurrency": 0}
        response = self.client.post("/batch/analyze", json=body)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(database.get_history(DEMO_USER_ID), [])

    def test_catalog(self):
        groups = self.client.get("/catalog/pgx-genes").json()["groups"]
        self.assertIn("CYP2C19", groups["CYP enzymes (drug metabolism)"])
        substances = self.client.get("/catalog/substances", params={"lang": "en"}).json()["substances"]
        self.assertIn("St. John's Wort", substances)

    def test_form_edits(self):
        response = self.client.post("/form/entry", json={**PATIENT, "field_name": "allergies", "value": "Sulfa"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["allergies"], "Penicilina, Sulfa")
        bad = self.client.post("/form/entry", json={**PATIENT, "field_name": "lang", "value": "en"})
        self.assertEqual(bad.status_code, 400)

        pgx = self.client.post("/form/pgx", json={**PATIENT, "gene": "CYP2C9", "variant": "*3"}).json()
        self.assertEqual(pgx["pharmacogenetics"], "CYP2C9 (*3)")
        self.assertEqual(self.client.post("/form/pgx", json={**PATIENT, "gene": "XYZ"}).status_code, 400)

    def test_dashboard_export(self):
        self.client.post("/analyze", json=PATIENT)
        response = self.client.get(f"/dashboard/{DEMO_USER_ID}/export.csv", params={"tab": "analysis", "lang": "en"})
        self.assertEqual(response.status_code, 200)
        self.assertIn("dashboard_analysis.csv", response.headers["content-disposition"])
        self.assertIn('"Total analyses","1"', response.text)
        self.assertIn('"Specific High Risk Interactions"', response.text)

        patients = self.client.get(f"/dashboard/{DEMO_USER_ID}/export.csv", params={"tab": "patients"})
        self.assertIn('"Pacientes únicos","1"', patients.text)
        self.assertEqual(self.client.get(f"/dashboard/{DEMO_USER_ID}/export.csv",
                                         params={"tab": "billing"}).status_code, 400)

    def test_batch_investigate(self):
        body = {"csv": batch_template_csv("investigator", "en")}
        data = self.client.post("/batch/investigate", json=body).json()
        self.assertEqual([i["status"] for i in data["items"]], ["completed", "completed"])

    def test_batch_missing_columns(self):
        response = self.client.post("/batch/analyze", json={"csv": "patient_id,medications\nP1,Warfarin\n"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("conditions", response.json()["missing"])

    def test_batch_template(self):
        response = self.client.get("/batch/template/investigator")
        self.assertEqual(response.status_code, 200)
        self.assertIn("symptoms", response.text)
        self.assertEqual(self.client.get("/batch/template/billing").status_code, 400)

    def test_patients(self):
        self.assertEqual(self.client.post(f"/patients/{DEMO_USER_ID}", json=PATIENT).status_code, 200)
        patients = self.client.get(f"/patients/{DEMO_USER_ID}").json()["patients"]
        self.assertEqual(patients[0]["id"], "P1")
        self.client.delete(f"/patients/{DEMO_USER_ID}/P1")
        self.assertEqual(self.client.get(f"/patients/{DEMO_USER_ID}").json()["patients"], [])

    def test_exports(self):
        payload = {"kind": "analysis", "result": ANALYSIS.to_dict(), "lang": "en", "patient_info": {"id": "P1"}}
        csv_response = self.client.post("/export/csv", json=payload)
        self.assertEqual(csv_response.status_code, 200)
        self.assertIn("Sintrom", csv_response.text)

        pdf_response = self.client.post("/export/pdf", json=payload)
        self.assertEqual(pdf_response.headers["content-type"], "application/pdf")
        self.assertIn("Report_P1.pdf", pdf_response.headers["content-disposition"])
        self.assertTrue(pdf_response.content.startswith(b"%PDF"))

        bad = self.client.post("/export/pdf", json={**payload, "kind": "billing"})
        self.assertEqual(bad.status_code, 400)

    def test_dashboard(self):
        self.assertEqual(self.client.get(f"/dashboard/{DEMO_USER_ID}").json(), {"analysis": None, "patients": None})
        self.client.post("/analyze", json=PATIENT)
        data = self.client.get(f"/dashboard/{DEMO_USER_ID}").json()
        self.assertEqual(data["analysis"]["highRiskFindings"], 1)
        self.assertEqual(data["patients"]["totalUniquePatients"], 1)

    def test_settings(self):
        response = self.client.put("/settings", json={"prioritySources": "FDA", "safetyStrictness": "strict"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get("/settings").json()["safetyStrictness"], "strict")


if __name__ == '__main__':
    unittest.main()
