#!/usr/bin/env python3
"""
Unit tests for CSV and PDF exports
"""

import csv
import io
import unittest
from unittest.mock import patch
from pathlib import Path
import sys

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

import exporters
from exporters import (
    batch_template_csv,
    dashboard_to_csv,
    generate_clinical_pdf,
    history_to_csv,
    pdf_filename,
    result_to_csv,
)
from schemas import (
    AnalysisResult,
    BeersCriteriaAlert,
    CausalityMatch,
    DrugDrugInteraction,
    DrugPharmacogeneticContraindication,
    DrugSubstanceInteraction,
    HistoryItem,
    InvestigatorResult,
    Medication,
)


def read_csv(text):
    assert text.startswith("\ufeff")
    return list(csv.reader(io.StringIO(text[1:])))


def sample_result():
    return AnalysisResult(
        analysis_text="### Resumen crítico\n**Warfarina** + amiodarona\n### 1. Detalle\nTexto <libre> & más",
        drug_drug_interactions=[
            DrugDrugInteraction(interaction="Warfarin + Amiodarone", risk_level="Crítico",
                                clinical_summary="INR alto", potential_effects="Hemorragia\r\nmayor",
                                recommendations="Monitorizar", references="Lexicomp",
                                dosage_adjustment="Reducir 30%"),
        ],
        drug_substance_interactions=[
            DrugSubstanceInteraction(medication="Warfarin", substance="Ginkgo Biloba", risk_level="Moderado",
                                     clinical_summary="Sangrado", potential_effects="Equimosis"),
        ],
        drug_pharmacogenetic_contraindications=[
            DrugPharmacogeneticContraindication(medication="Warfarin", genetic_factor="CYP2C9",
                                                variant_allele="*3", risk_level="Alto",
                                                implication="Menor aclaramiento"),
        ],
        beers_criteria_alerts=[
            BeersCriteriaAlert(medication="Diazepam", criteria="Benzodiacepinas", risk_level="Moderado",
                               therapeutic_alternative="Trazodona"),
        ],
    )


class TestResultCsv(unittest.TestCase):

    def test_header_and_rows(self):
        text = result_to_csv(sample_result(), "es")
        rows = read_csv(text)
        self.assertEqual(rows[0][0], "Tipo")
        self.assertEqual(len(rows[0]), 10)
        self.assertEqual(len(rows), 5)

        ddi = rows[1]
        self.assertEqual(ddi[1:4], ["Warfarin", "Amiodarone", "Crítico"])
        self.assertEqual(ddi[5], "Hemorragia\nmayor")
        self.assertEqual(ddi[7], "Reducir 30%")

        self.assertEqual(rows[2][1:3], ["Warfarin", "Ginkgo Biloba"])
        self.assertEqual(rows[3][2], "CYP2C9 (*3)")
        self.assertEqual(rows[4][5], "N/A")
        self.assertEqual(rows[4][8], "Trazodona")

    def test_every_field_is_quoted(self):
        first_line = result_to_csv(AnalysisResult(), "en")[1:].splitlines()[0]
        self.assertTrue(first_line.startswith('"Type","Primary item"'))
        self.assertNotIn("\r", result_to_csv(sample_result(), "en"))


class TestHistoryCsv(unittest.TestCase):

    def test_history_rows(self):
        history = [
            HistoryItem(id="2026-03-01T10:15:30.000Z_P1", timestamp="2026-03-01T10:15:30.000Z",
                        medications=[Medication(name="Warfarin"), Medication(name="Amiodarone")],
                        analysis_result=sample_result(), patient_id="P1"),
            HistoryItem(id="2026-02-01T08:00:00.000Z", timestamp="2026-02-01T08:00:00.000Z"),
        ]
        rows = read_csv(history_to_csv(history, "en"))
        self.assertEqual(rows[0], ["Date", "Time", "Patient ID", "Medications", "Findings summary"])
        self.assertEqual(rows[1][:4], ["2026-03-01", "10:15:30", "P1", "Warfarin; Amiodarone"])
        self.assertEqual(rows[1][4], "1 drug-drug, 1 drug-substance, 1 pharmacogenetic, 1 Beers")
        self.assertEqual(rows[2][2], "N/A")
        self.assertEqual(rows[2][4], "No findings")

    def test_summary_skips_empty_categories(self):
        empty = HistoryItem(id="2026-02-01T08:00:00.000Z", analysis_result=AnalysisResult())
        rows = read_csv(history_to_csv([empty], "es"))
        self.assertEqual(rows[1][4], "Sin hallazgos")
        self.assertNotIn("0 ", rows[1][4])


class TestDashboardCsv(unittest.TestCase):

    def test_analysis_tab_blocks(self):
        stats = {
            "totalAnalyses": 3, "totalFindings": 5, "highRiskFindings": 2,
            "riskDistribution": [{"label": "Alto", "value": 2}, {"label": "Moderado", "value": 3}],
            "topMedications": [{"label": "Warfarin", "value": 3}],
            "topInteractionTypes": [{"label": "Drug-Drug", "value": 4}],
            "topSpecificInteractions": [{"label": "Warfarin + Aspirin", "value": 2}],
        }
        rows = read_csv(dashboard_to_csv(stats, "analysis", "en"))
        self.assertEqual(rows[:4], [["Metric", "Value"], ["Total analyses", "3"], ["Total findings", "5"],
                                    ["High risk findings", "2"]])
        self.assertEqual(rows[4:8], [[], ["Risk Distribution"], ["Risk Level", "Count"], ["Alto", "2"]])
        self.assertEqual(rows[-3:], [["Specific High Risk Interactions"], ["Interaction", "Count"],
                                     ["Warfarin + Aspirin", "2"]])

    def test_patients_tab(self):
        stats = {"totalUniquePatients": 2, "patientsWithRisk": 1, "avgMeds": 2.5,
                 "topConditions": [{"label": "Hypertension", "value": 2}]}
        rows = read_csv(dashboard_to_csv(stats, "patients", "es"))
        self.assertEqual(rows[1], ["Pacientes únicos", "2"])
        self.assertEqual(rows[3], ["Media de medicamentos por paciente", "2.5"])
        self.assertEqual(rows[-1], ["Hypertension", "2"])

    def test_no_history_and_unknown_tab(self):
        self.assertEqual(read_csv(dashboard_to_csv(None, "patients", "en")), [["Metric", "Value"]])
        with self.assertRaises(ValueError):
            dashboard_to_csv(None, "billing")


class TestBatchTemplate(unittest.TestCase):

    def test_localized_example_rows(self):
        es = read_csv(batch_template_csv("analysis", "es"))
        en = read_csv(batch_template_csv("analysis", "en"))
        self.assertEqual(es[0][0], "patient_id")
        self.assertEqual(es[1][4], "Alcohol; Tabaco; Vitamin C")
        self.assertEqual(en[2][5], "CYP2C19 (Poor metabolizer)")

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            batch_template_csv("billing")


class TestPdf(unittest.TestCase):

    def test_analysis_pdf(self):
        info = {"id": "P1", "dob": "01-01-1950", "conditions": "AF", "allergies": "",
                "medications": [Medication(name="Warfarin", dosage="5mg")]}
        pdf = generate_clinical_pdf("analysis", sample_result(), "es", info)
        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertIn(b"%%EOF", pdf[-32:])

    def test_investigator_pdf(self):
        result = InvestigatorResult(
            analysis_text="## Informe\n*texto*",
            matches=[CausalityMatch(cause="Lisinopril", probability="Alta", mechanism="Vasodilatación")],
        )
        pdf = generate_clinical_pdf("investigator", result, "en", {"id": "P2", "symptoms": "Dizziness"})
        self.assertTrue(pdf.startswith(b"%PDF"))

    def test_every_page_gets_the_total(self):
        long_result = AnalysisResult(analysis_text="Línea de texto clínico.\n" * 400)
        with patch.object(exporters.NumberedCanvas, "draw_footer", autospec=True) as footer:
            generate_clinical_pdf("analysis", long_result, "es", {})
        totals = [call.args[1] for call in footer.call_args_list]
        self.assertGreater(len(totals), 1)
        self.assertEqual(set(totals), {len(totals)})

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            generate_clinical_pdf("billing", AnalysisResult(), "es", {})

    def test_filenames(self):
        self.assertEqual(pdf_filename("analysis", "PAT 001/ß", "es"), "Informe_PAT_001__.pdf")
        self.assertEqual(pdf_filename("analysis", None, "en"), "Report_Anon.pdf")
        self.assertEqual(pdf_filename("investigator", "X" * 30, "en"), "Causality_" + "X" * 20 + ".pdf")


if __name__ == '__main__':
    unittest.main()
