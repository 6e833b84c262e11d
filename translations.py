"""
Localized strings

Purpose: es/en tables for alert templates, section labels, CSV headers and PDF text.

Input: language code + key (+ format arguments).

Output: the localized string.

Example: t("en", "ddi_alert_text", med1="Warfarin", med2="Amiodarone", reason="...")
"""
from typing import Dict

import config

STRINGS: Dict[str, Dict[str, str]] = {
    "es": {
        # Proactive alerts
        "allergy_alert_title": "Alerta de alergia crítica",
        "allergy_alert_text": "{medication} puede provocar una reacción en un paciente con alergia a {allergy_group}.",
        "condition_alert_title": "Contraindicación crítica",
        "condition_alert_text": "{medication} está contraindicado en pacientes con {condition}: {reason}",
        "ddi_alert_title": "Interacción crítica entre fármacos",
        "ddi_alert_text": "{med1} + {med2}: {reason}",
        "reason_nsaids_renal": "los AINE pueden empeorar la función renal y precipitar un fallo renal agudo.",
        "reason_acei_angioedema": "los IECA aumentan el riesgo de angioedema recurrente potencialmente mortal.",
        "reason_sildenafil_nitrates": "riesgo de hipotensión grave y potencialmente mortal.",
        "reason_statins_itraconazole": "el itraconazol eleva los niveles de la estatina con riesgo de rabdomiólisis.",
        "reason_warfarin_bactrim": "el cotrimoxazol potencia el efecto anticoagulante con riesgo de hemorragia.",
        "reason_serotonin_syndrome": "riesgo de síndrome serotoninérgico potencialmente mortal.",
        "reason_bleeding_risk_amiodarone": "la amiodarona inhibe el metabolismo de la warfarina y aumenta el riesgo de hemorragia.",
        "reason_hyperkalemia_risk": "riesgo de hiperpotasemia grave.",
        "reason_digoxin_toxicity": "la amiodarona eleva los niveles de digoxina con riesgo de toxicidad.",
        "reason_methotrexate_toxicity": "los AINE reducen la eliminación del metotrexato con riesgo de toxicidad.",

        # Sections
        "section_drug_drug": "Interacciones fármaco-fármaco",
        "section_drug_substance": "Interacciones fármaco-sustancia",
        "section_drug_allergy": "Alertas de alergia",
        "section_drug_condition": "Contraindicaciones por condición",
        "section_pgx": "Contraindicaciones farmacogenéticas",
        "section_beers": "Criterios de Beers",

        # Finding type labels
        "alert_drug_drug": "Fármaco-Fármaco",
        "alert_drug_substance": "Fármaco-Sustancia",
        "alert_allergy": "Alergia",
        "alert_condition": "Condición",
        "alert_pgx": "Farmacogenética",
        "alert_beers": "Criterios de Beers",

        # Field labels
        "label_risk": "Nivel de riesgo",
        "label_summary": "Resumen clínico",
        "label_effects": "Efectos potenciales",
        "label_details": "Detalles",
        "label_implication": "Implicación",
        "label_criteria": "Criterio",
        "label_recommendations": "Recomendaciones",
        "label_dosage_adjustment": "Ajuste de dosis",
        "label_alternative": "Alternativa terapéutica",
        "label_references": "Referencias",
        "label_sources": "Fuentes",
        "label_interaction": "Interacción",
        "label_medication": "Medicamento",
        "label_substance": "Sustancia",
        "label_allergen": "Alérgeno",
        "label_condition": "Condición",
        "label_genetic_factor": "Factor genético",
        "label_variant": "Alelo variante",
        "high_risk_allergy": "{medication} (alergia a {allergen})",
        "high_risk_condition": "{medication} con {condition}",

        # Result CSV
        "csv_type": "Tipo",
        "csv_primary": "Elemento principal",
        "csv_secondary": "Elemento secundario",
        "csv_risk": "Nivel de riesgo",
        "csv_summary": "Resumen clínico",
        "csv_details": "Detalles",
        "csv_recommendations": "Recomendaciones",
        "csv_dosage": "Ajuste de dosis",
        "csv_alternative": "Alternativa terapéutica",
        "csv_references": "Referencias",

        # History CSV
        "csv_date": "Fecha",
        "csv_time": "Hora",
        "csv_patient_id": "ID paciente",
        "csv_medications": "Medicamentos",
        "csv_findings": "Resumen de hallazgos",
        "summary_ddi": "fármaco-fármaco",
        "summary_dsi": "fármaco-sustancia",
        "summary_allergy": "alergia",
        "summary_condition": "condición",
        "summary_pgx": "farmacogenética",
        "summary_beers": "Beers",

        # PDF
        "pdf_title_analysis": "Informe de interacciones farmacológicas",
        "pdf_title_investigator": "Informe de causalidad de síntomas",
        "pdf_generated": "Generado: {date}",
        "pdf_patient_context": "Contexto del paciente",
        "pdf_patient_id": "ID paciente",
        "pdf_dob": "Fecha de nacimiento",
        "pdf_medications": "Medicamentos",
        "pdf_allergies": "Alergias",
        "pdf_conditions": "Condiciones",
        "pdf_substances": "Otras sustancias",
        "pdf_pgx": "Farmacogenética",
        "pdf_symptoms": "Síntomas",
        "pdf_narrative": "Análisis detallado",
        "pdf_causality": "Posibles causas",
        "pdf_probability": "Probabilidad",
        "pdf_mechanism": "Mecanismo",
        "pdf_page": "Página {page} de {total}",
        "pdf_disclaimer": (
            "Este informe ha sido generado con ayuda de IA y no sustituye el juicio clínico profesional."
        ),
        "pdf_prefix_analysis": "Informe",
        "pdf_prefix_investigator": "Causalidad",
        "template_substances": "Alcohol; Tabaco; Vitamin C",
        "template_pgx_poor": "Metabolizador lento",
        "pdf_none": "Ninguna",
        "pdf_summary": "Resumen",
        "pdf_recommendations": "Rec",

        # Dashboard CSV
        "dash_metric": "Métrica",
        "dash_value": "Valor",
        "dash_count": "Cantidad",
        "dash_total_analyses": "Análisis totales",
        "dash_total_findings": "Hallazgos totales",
        "dash_high_risk_findings": "Hallazgos de alto riesgo",
        "dash_risk_distribution": "Distribución de riesgo",
        "dash_risk_level": "Nivel de riesgo",
        "dash_top_medications": "Medicamentos más frecuentes",
        "dash_medication": "Medicamento",
        "dash_finding_types": "Tipos de hallazgo",
        "dash_type": "Tipo",
        "dash_specific_interactions": "Interacciones de alto riesgo específicas",
        "dash_interaction": "Interacción",
        "dash_unique_patients": "Pacientes únicos",
        "dash_patients_with_risk": "Pacientes con riesgo alto",
        "dash_avg_meds": "Media de medicamentos por paciente",
        "dash_top_conditions": "Condiciones más frecuentes",
        "dash_condition": "Condición",

        # Misc
        "na": "N/A",
        "no_findings": "Sin hallazgos",
        "critical_summary_title": "Resumen crítico",
    },
    "en": {
        "allergy_alert_title": "Critical allergy alert",
        "allergy_alert_text": "{medication} may cause a reaction in a patient allergic to {allergy_group}.",
        "condition_alert_title": "Critical contraindication",
        "condition_alert_text": "{medication} is contraindicated in patients with {condition}: {reason}",
        "ddi_alert_title": "Critical drug-drug interaction",
        "ddi_alert_text": "{med1} + {med2}: {reason}",
        "reason_nsaids_renal": "NSAIDs can worsen renal function and precipitate acute kidney injury.",
        "reason_acei_angioedema": "ACE inhibitors raise the risk of recurrent, life-threatening angioedema.",
        "reason_sildenafil_nitrates": "risk of severe, life-threatening hypotension.",
        "reason_statins_itraconazole": "itraconazole raises statin levels with a risk of rhabdomyolysis.",
        "reason_warfarin_bactrim": "co-trimoxazole potentiates anticoagulation with a risk of bleeding.",
        "reason_serotonin_syndrome": "risk of life-threatening serotonin syndrome.",
        "reason_bleeding_risk_amiodarone": "amiodarone inhibits warfarin metabolism and increases bleeding risk.",
        "reason_hyperkalemia_risk": "risk of severe hyperkalemia.",
        "reason_digoxin_toxicity": "amiodarone raises digoxin levels with a risk of toxicity.",
        "reason_methotrexate_toxicity": "NSAIDs reduce methotrexate clearance with a risk of toxicity.",

        "section_drug_drug": "Drug-drug interactions",
        "section_drug_substance": "Drug-substance interactions",
        "section_drug_allergy": "Allergy alerts",
        "section_drug_condition": "Condition contraindications",
        "section_pgx": "Pharmacogenetic contraindications",
        "section_beers": "Beers criteria",

        "alert_drug_drug": "Drug-Drug",
        "alert_drug_substance": "Drug-Substance",
        "alert_allergy": "Allergy",
        "alert_condition": "Condition",
        "alert_pgx": "Pharmacogenetics",
        "alert_beers": "Beers Criteria",

        "label_risk": "Risk level",
        "label_summary": "Clinical summary",
        "label_effects": "Potential effects",
        "label_details": "Details",
        "label_implication": "Implication",
        "label_criteria": "Criteria",
        "label_recommendations": "Recommendations",
        "label_dosage_adjustment": "Dosage adjustment",
        "label_alternative": "Therapeutic alternative",
        "label_references": "References",
        "label_sources": "Sources",
        "label_interaction": "Interaction",
        "label_medication": "Medication",
        "label_substance": "Substance",
        "label_allergen": "Allergen",
        "label_condition": "Condition",
        "label_genetic_factor": "Genetic factor",
        "label_variant": "Variant allele",
        "high_risk_allergy": "{medication} (allergy to {allergen})",
        "high_risk_condition": "{medication} with {condition}",

        "csv_type": "Type",
        "csv_primary": "Primary item",
        "csv_secondary": "Secondary item",
        "csv_risk": "Risk level",
        "csv_summary": "Clinical summary",
        "csv_details": "Details",
        "csv_recommendations": "Recommendations",
        "csv_dosage": "Dosage adjustment",
        "csv_alternative": "Therapeutic alternative",
        "csv_references": "References",

        "csv_date": "Date",
        "csv_time": "Time",
        "csv_patient_id": "Patient ID",
        "csv_medications": "Medications",
        "csv_findings": "Findings summary",
        "summary_ddi": "drug-drug",
        "summary_dsi": "drug-substance",
        "summary_allergy": "allergy",
        "summary_condition": "condition",
        "summary_pgx": "pharmacogenetic",
        "summary_beers": "Beers",

        "pdf_title_analysis": "Drug Interaction Report",
        "pdf_title_investigator": "Symptom Causality Report",
        "pdf_generated": "Generated: {date}",
        "pdf_patient_context": "Patient context",
        "pdf_patient_id": "Patient ID",
        "pdf_dob": "Date of birth",
        "pdf_medications": "Medications",
        "pdf_allergies": "Allergies",
        "pdf_conditions": "Conditions",
        "pdf_substances": "Other substances",
        "pdf_pgx": "Pharmacogenetics",
        "pdf_symptoms": "Symptoms",
        "pdf_narrative": "Detailed analysis",
        "pdf_causality": "Possible causes",
        "pdf_probability": "Probability",
        "pdf_mechanism": "Mechanism",
        "pdf_page": "Page {page} of {total}",
        "pdf_disclaimer": (
            "This report was generated with AI assistance and does not replace professional clinical judgement."
        ),
        "pdf_prefix_analysis": "Report",
        "pdf_prefix_investigator": "Causality",
        "template_substances": "Alcohol; Tobacco; Vitamin C",
        "template_pgx_poor": "Poor metabolizer",
        "pdf_none": "None",
        "pdf_summary": "Summary",
        "pdf_recommendations": "Rec",

        "dash_metric": "Metric",
        "dash_value": "Value",
        "dash_count": "Count",
        "dash_total_analyses": "Total analyses",
        "dash_total_findings": "Total findings",
        "dash_high_risk_findings": "High risk findings",
        "dash_risk_distribution": "Risk Distribution",
        "dash_risk_level": "Risk Level",
        "dash_top_medications": "Top Medications",
        "dash_medication": "Medication",
        "dash_finding_types": "Finding Types",
        "dash_type": "Type",
        "dash_specific_interactions": "Specific High Risk Interactions",
        "dash_interaction": "Interaction",
        "dash_unique_patients": "Unique patients",
        "dash_patients_with_risk": "Patients with high risk",
        "dash_avg_meds": "Average medications per patient",
        "dash_top_conditions": "Top Conditions",
        "dash_condition": "Condition",

        "na": "N/A",
        "no_findings": "No findings",
        "critical_summary_title": "Critical summary",
    },
}


def normalize_lang(lang: str) -> str:
    lang = (lang or "").lower()[:2]
    return lang if lang in config.SUPPORTED_LANGS else config.DEFAULT_LANG


def t(lang: str, key: str, **kwargs) -> str:
    """Look up key in lang, falling back to English and then to the key itself."""
    table = STRINGS.get(lang) or {}
    text = table.get(key)
    if text is None:
        text = STRINGS["en"].get(key, key)
    if kwargs:
        text = text.format(**kwargs)
    return text
