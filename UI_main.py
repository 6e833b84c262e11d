"""
Orchestration for UI

Purpose: orchestrate modules to run an end-to-end request cycle for the interaction check and the
symptom investigator, to edit the form lists and to save patient profiles from the form.

Input: PatientInput (+ symptoms for the investigator), user id, language.

Output: structured view for the UI:

{
 "historyItem": {...},
 "proactiveAlerts": [{"id": "ddi-warfarin-amiodarone", "type": "drug-drug", ...}],
 "sections": [{"key": "drugDrug", "title": "...", "count": 1, "items": [...]}],
 "summaryCounts": {"Alto": 1},
 "highRiskItems": [{"type": "...", "description": "...", "riskLevel": "Alto"}],
 "criticalSummary": "### Resumen crítico ...",
 "criticalSummaryHtml": "<h3>Resumen crítico</h3>...",
 "analysisHtml": "<h3>...</h3>...",
 "sources": [{"uri": "...", "title": "..."}]
}

Example: run_interaction_check(profile, "demo-user", "es") -> view above, item saved to local history.

Notes: the audit trace is written for failed calls too; the error is then re-raised to the caller.
"""
import logging
from typing import Any, Dict, List, Optional

import database
from catalog import PREDEFINED_SUBSTANCES, all_pgx_genes
from llm_client import analyze_interactions, investigate_symptoms
from log import log_analysis
from normalizer import add_pgx_factor, add_unique, format_medication_list, format_pgx_factor
from prompt_builder import build_interaction_prompt, build_investigator_prompt
from result_renderer import (
    build_sections,
    extract_critical_summary,
    format_markdown,
    high_risk_items,
    summary_counts,
)
from rules_engine import check_proactive_alerts
from schemas import (
    AnalysisResult,
    HistoryItem,
    InvestigatorHistoryItem,
    Medication,
    PatientInput,
    PatientProfile,
    ProactiveAlert,
    SystemSettings,
    new_record_id,
    utc_now_iso,
)
from translations import normalize_lang, t

logger = logging.getLogger(__name__)


def normalize_input(profile: PatientInput) -> PatientInput:
    """Trim every field and drop medications without a name."""
    medications = [
        Medication(name=m.name.strip(), dosage=(m.dosage or "").strip(), frequency=(m.frequency or "").strip())
        for m in profile.medications
        if m.name and m.name.strip()
    ]
    return PatientInput(
        medications=medications,
        allergies=(profile.allergies or "").strip(),
        other_substances=(profile.other_substances or "").strip(),
        conditions=(profile.conditions or "").strip(),
        date_of_birth=(profile.date_of_birth or "").strip(),
        pharmacogenetics=(profile.pharmacogenetics or "").strip(),
        patient_id=(profile.patient_id or "").strip() or None,
    )


def _alerts_for(profile: PatientInput, lang: str) -> List[ProactiveAlert]:
    return check_proactive_alerts(profile.medications, profile.allergies, profile.conditions, lang)


# ═════════════════════════════════════════════════════════════
# SINGLE-PATIENT CALLS (also used by the batch workers)
# ═════════════════════════════════════════════════════════════

def analyze_patient(
    profile: PatientInput,
    user_id: str,
    lang: str = "es",
    settings: Optional[SystemSettings] = None,
) -> HistoryItem:
    """
    Interaction check for one patient, persisted to the user's history.

    Raises whatever the LLM call or the history write raises, after the audit trace is written.
    """
    lang = normalize_lang(lang)
    profile = normalize_input(profile)
    if not profile.medications:
        raise ValueError("At least one medication is required")
    if settings is None:
        settings = database.get_system_settings()

    alerts = _alerts_for(profile, lang)
    prompt_chars = len(build_interaction_prompt(profile, lang, settings))
    logger.info(f"Interaction check for patient {profile.patient_id or '-'} "
                f"({len(profile.medications)} meds, {len(alerts)} proactive alerts)")

    try:
        result = analyze_interactions(profile, lang, settings)
        item = HistoryItem(
            id=new_record_id(profile.patient_id),
            timestamp=utc_now_iso(),
            medications=profile.medications,
            allergies=profile.allergies,
            other_substances=profile.other_substances,
            conditions=profile.conditions,
            date_of_birth=profile.date_of_birth,
            pharmacogenetics=profile.pharmacogenetics,
            analysis_result=result,
            lang=lang,
            patient_id=profile.patient_id,
        )
        database.save_history_item(user_id, item)
    except Exception as e:
        log_analysis("analysis", user_id, profile.patient_id, profile.to_dict(),
                     [a.to_dict() for a in alerts], prompt_chars, {}, error=str(e))
        raise

    log_analysis("analysis", user_id, profile.patient_id, profile.to_dict(),
                 [a.to_dict() for a in alerts], prompt_chars, result.finding_counts())
    return item


def investigate_patient(
    symptoms: str,
    profile: PatientInput,
    user_id: str,
    lang: str = "es",
) -> InvestigatorHistoryItem:
    lang = normalize_lang(lang)
    profile = normalize_input(profile)
    symptoms = (symptoms or "").strip()
    if not symptoms:
        raise ValueError("Symptoms are required")

    prompt_chars = len(build_investigator_prompt(
        symptoms, profile.medications, profile.conditions, profile.date_of_birth,
        profile.pharmacogenetics, profile.allergies, lang,
    ))
    logger.info(f"Symptom investigation for patient {profile.patient_id or '-'}")

    try:
        result = investigate_symptoms(
            symptoms, profile.medications, profile.conditions, profile.date_of_birth,
            profile.pharmacogenetics, profile.allergies, lang,
        )
        item = InvestigatorHistoryItem(
            id=new_record_id(profile.patient_id),
            timestamp=utc_now_iso(),
            symptoms=symptoms,
            medications=profile.medications,
            allergies=profile.allergies,
            conditions=profile.conditions,
            date_of_birth=profile.date_of_birth,
            pharmacogenetics=profile.pharmacogenetics,
            result=result,
            patient_id=profile.patient_id,
        )
        database.save_investigation(user_id, item)
    except Exception as e:
        log_analysis("investigator", user_id, profile.patient_id, profile.to_dict(), [],
                     prompt_chars, {}, error=str(e))
        raise

    log_analysis("investigator", user_id, profile.patient_id, profile.to_dict(), [],
                 prompt_chars, {"matches": len(result.matches)})
    return item


# ═════════════════════════════════════════════════════════════
# FORM EDITS
# ═════════════════════════════════════════════════════════════

LIST_FIELDS = ("allergies", "other_substances", "conditions")


def add_form_entry(profile: PatientInput, field_name: str, value: str) -> PatientInput:
    """Append one allergy, substance or condition to the form, skipping duplicates."""
    if field_name not in LIST_FIELDS:
        raise ValueError(f"Cannot add entries to field {field_name!r}")
    profile = normalize_input(profile)
    setattr(profile, field_name, add_unique(getattr(profile, field_name), value))
    return profile


def add_pgx_entry(profile: PatientInput, gene: str, variant: str = "", status: str = "") -> PatientInput:
    """
    Append a pharmacogenetic factor built from the gene selector.

    Only genes from the curated list are accepted; the same factor is never added twice.
    """
    gene = (gene or "").strip()
    if gene not in all_pgx_genes():
        raise ValueError(f"Unknown pharmacogenetic gene: {gene!r}")
    profile = normalize_input(profile)
    profile.pharmacogenetics = add_pgx_factor(profile.pharmacogenetics, format_pgx_factor(gene, variant, status))
    return profile


def substance_options(lang: str = "es") -> List[str]:
    return list(PREDEFINED_SUBSTANCES[normalize_lang(lang)])


# ═════════════════════════════════════════════════════════════
# VIEWS
# ═════════════════════════════════════════════════════════════

def build_result_view(
    result: AnalysisResult,
    lang: str = "es",
    risk_filter: Optional[str] = None,
) -> Dict[str, Any]:
    """Rendered sections, counts, digest and narrative HTML for one result."""
    critical = extract_critical_summary(result.analysis_text, t(lang, "critical_summary_title"))
    return {
        "sections": [s.to_dict() for s in build_sections(result, lang, risk_filter)],
        "summaryCounts": summary_counts(result),
        "highRiskItems": [
            {"type": h.type, "description": h.description, "riskLevel": h.risk_level}
            for h in high_risk_items(result, lang)
        ],
        "criticalSummary": critical,
        "criticalSummaryHtml": format_markdown(critical),
        "analysisHtml": format_markdown(result.analysis_text),
        "sources": [s.to_dict() for s in result.sources],
    }


def run_interaction_check(
    profile: PatientInput,
    user_id: str,
    lang: str = "es",
    settings: Optional[SystemSettings] = None,
    risk_filter: Optional[str] = None,
) -> Dict[str, Any]:
    lang = normalize_lang(lang)
    item = analyze_patient(profile, user_id, lang, settings)
    view = build_result_view(item.analysis_result, lang, risk_filter)
    view["historyItem"] = item.to_dict()
    view["proactiveAlerts"] = [a.to_dict() for a in _alerts_for(normalize_input(profile), lang)]
    return view


def run_investigation(symptoms: str, profile: PatientInput, user_id: str, lang: str = "es") -> Dict[str, Any]:
    lang = normalize_lang(lang)
    item = investigate_patient(symptoms, profile, user_id, lang)
    return {
        "historyItem": item.to_dict(),
        "matches": [m.to_dict() for m in item.result.matches],
        "analysisHtml": format_markdown(item.result.analysis_text),
        "sources": [s.to_dict() for s in item.result.sources],
    }


def save_profile_from_form(user_id: str, profile: PatientInput) -> PatientProfile:
    """Store the current form as the patient's profile; the patient id is required."""
    profile = normalize_input(profile)
    if not profile.patient_id:
        raise ValueError("A patient id is required to save a profile")

    saved = PatientProfile(
        id=profile.patient_id,
        medications=profile.medications,
        allergies=profile.allergies,
        other_substances=profile.other_substances,
        conditions=profile.conditions,
        date_of_birth=profile.date_of_birth,
        pharmacogenetics=profile.pharmacogenetics,
        last_updated=utc_now_iso(),
    )
    database.save_patient_profile(user_id, saved)
    logger.info(f"Saved profile {saved.id} ({format_medication_list(saved.medications) or 'no medications'})")
    return saved
