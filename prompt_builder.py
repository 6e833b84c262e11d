"""
Create the structured task prompts

Purpose: format the patient profile and task instructions into a prompt that forces the LLM to return
a machine-readable JSON block between fixed markers, followed by a markdown report.

Input: patient profile (medications, allergies, substances, conditions, date of birth, pharmacogenetics),
language, system settings (priority/excluded sources, strictness).

Output: prompt_text: str ready to send to the LLM.

Example: returns a prompt beginning with "You are an expert in Clinical Pharmacology..." then the
PATIENT PROFILE block, then PART 1 (JSON between [INTERACTION_DATA_START] and [INTERACTION_DATA_END])
and PART 2 (markdown report).

Notes: risk levels are localized so the renderer can classify them in either language.
"""
from typing import List, Optional

from normalizer import split_list
from schemas import Medication, PatientInput, SystemSettings
from translations import t

INTERACTION_START = "[INTERACTION_DATA_START]"
INTERACTION_END = "[INTERACTION_DATA_END]"
CAUSALITY_START = "[CAUSALITY_DATA_START]"
CAUSALITY_END = "[CAUSALITY_DATA_END]"

RISK_LEVELS = {
    "es": ["Crítico", "Alto", "Moderado", "Bajo"],
    "en": ["Critical", "High", "Moderate", "Low"],
}

_LANGUAGE_NAMES = {"es": "SPANISH", "en": "ENGLISH"}

_STRICTNESS = {
    "strict": "Apply a conservative threshold: report theoretical and poorly documented interactions "
              "and, when in doubt, assign the higher risk level.",
    "loose": "Report only clinically relevant, well documented interactions; omit theoretical ones.",
}


def _language(lang: str) -> str:
    return _LANGUAGE_NAMES.get(lang, "SPANISH")


def _med_list(medications: List[Medication]) -> str:
    return "; ".join(m.display() for m in medications if m.name)


def _source_rules(settings: Optional[SystemSettings]) -> str:
    if settings is None:
        return ""
    lines = []
    priority = split_list(settings.priority_sources, ",")
    excluded = split_list(settings.excluded_sources, ",")
    if priority:
        lines.append(f"- Prioritize evidence from these sources: {', '.join(priority)}")
    if excluded:
        lines.append(f"- Do NOT cite or rely on these sources: {', '.join(excluded)}")
    strictness = _STRICTNESS.get(settings.safety_strictness)
    if strictness:
        lines.append(f"- {strictness}")
    if not lines:
        return ""
    return "\nSOURCE AND SAFETY POLICY:\n" + "\n".join(lines) + "\n"


def system_instruction(kind: str, lang: str) -> str:
    if kind == "investigator":
        return (
            f"You are a clinical expert who answers exclusively in {_language(lang).lower()}. "
            "Do not use terms in other languages except proper drug names."
        )
    return "Clinical Pharmacologist. Precision focus. Evidence-based results."


def build_interaction_prompt(
    profile: PatientInput,
    lang: str = "es",
    settings: Optional[SystemSettings] = None,
) -> str:
    levels = ", ".join(f'"{level}"' for level in RISK_LEVELS.get(lang, RISK_LEVELS["es"]))
    summary_title = t(lang, "critical_summary_title")
    language = _language(lang)

    return f"""You are an expert in Clinical Pharmacology and Patient Safety.

PATIENT PROFILE:
- Active medications: {_med_list(profile.medications)}
- Allergies: {profile.allergies or 'None'}
- Supplements / other substances: {profile.other_substances or 'None'}
- Pharmacogenetic profile: {profile.pharmacogenetics or 'Not provided'}
- Diagnoses / conditions: {profile.conditions or 'None'}
- Age data (age / date of birth): {profile.date_of_birth or 'Not provided'}
{_source_rules(settings)}
TASK: Perform an exhaustive drug safety analysis.

MANDATORY RESPONSE STRUCTURE:

PART 1: JSON BLOCK (between {INTERACTION_START} and {INTERACTION_END})
This block MUST be valid JSON. Use the risk levels: {levels}.
Required fields per category:
- drugDrugInteractions: {{ interaction ("Drug A + Drug B"), riskLevel, clinicalSummary, potentialEffects, recommendations, references, dosageAdjustment, therapeuticAlternative }}
- drugSubstanceInteractions: {{ medication, substance, riskLevel, clinicalSummary, potentialEffects, recommendations, references }}
- drugAllergyAlerts: {{ medication, allergen, riskLevel, clinicalSummary, alertDetails, recommendations, references }}
- drugConditionContraindications: {{ medication, condition, riskLevel, clinicalSummary, contraindicationDetails, recommendations, references, dosageAdjustment }}
- drugPharmacogeneticContraindications: {{ medication, geneticFactor, variantAllele, riskLevel, clinicalSummary, implication, recommendations, references, dosageAdjustment }}
- beersCriteriaAlerts: {{ medication, criteria, riskLevel, clinicalSummary, recommendations, references, therapeuticAlternative }}
Use an empty array for any category without findings.

PART 2: DETAILED CLINICAL REPORT (Markdown)
Start with a section titled "### {summary_title}" that lists the most critical findings, then number
the remaining sections "### 1.", "### 2.", ... A professional narrative analysis explaining the pathophysiology of
the findings. Do NOT repeat the JSON in this part.

LANGUAGE: Answer EVERYTHING in {language}."""


def build_investigator_prompt(
    symptoms: str,
    medications: List[Medication],
    conditions: str = "",
    date_of_birth: str = "",
    pharmacogenetics: str = "",
    allergies: str = "",
    lang: str = "es",
) -> str:
    language = _language(lang)
    med_names = ", ".join(m.name for m in medications if m.name)

    return f"""You are an expert in Clinical Pharmacology and diagnostic reasoning.
Analyze the probable cause of the symptom: "{symptoms}".

CLINICAL CONTEXT:
- Medications: {med_names}
- Allergies: {allergies or 'None'}
- Diagnoses: {conditions or 'None'}
- Genetics: {pharmacogenetics or 'Not provided'}
- Age / date of birth: {date_of_birth or 'Not provided'}

REQUIRED RESPONSE (MANDATORY):
1. JSON block (between {CAUSALITY_START} and {CAUSALITY_END}):
An object with a 'matches' array of {{ "cause": string, "probability": string, "mechanism": string }}.
All JSON text fields must be in {language}.

2. Technical Markdown report (after the closing marker):
Detailed analysis of the evidence, pharmacokinetics and pharmacodynamics involved.
THIS REPORT MUST BE ENTIRELY IN {language}."""
