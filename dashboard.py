"""
Dashboard statistics

Purpose: aggregate a user's analysis history into the numbers shown on the dashboard.

Input: List[HistoryItem] (any order).

Output: plain dicts of counts and {label, value} lists, ready for JSON.

Example: analysis_stats(history)["highRiskFindings"] -> 3
"""
from collections import Counter
from typing import Any, Dict, List, Optional

from normalizer import split_list
from result_renderer import is_high_risk, order_risk_counts
from schemas import (
    BeersCriteriaAlert,
    DrugAllergyAlert,
    DrugConditionContraindication,
    DrugDrugInteraction,
    DrugPharmacogeneticContraindication,
    DrugSubstanceInteraction,
    HistoryItem,
    timestamp_from_id,
)
from translations import t

TOP_MEDICATIONS = 5
TOP_SPECIFIC_INTERACTIONS = 8
TOP_CONDITIONS = 5


def _pairs(counter: Counter, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    return [{"label": label, "value": value} for label, value in counter.most_common(limit)]


def _type_label(finding, lang: str) -> str:
    if isinstance(finding, DrugDrugInteraction):
        return t(lang, "alert_drug_drug")
    if isinstance(finding, DrugSubstanceInteraction):
        return t(lang, "alert_drug_substance")
    if isinstance(finding, DrugAllergyAlert):
        return t(lang, "alert_allergy")
    if isinstance(finding, DrugConditionContraindication):
        return t(lang, "alert_condition")
    if isinstance(finding, DrugPharmacogeneticContraindication):
        return t(lang, "alert_pgx")
    if isinstance(finding, BeersCriteriaAlert):
        return t(lang, "alert_beers")
    return t(lang, "na")


def _specific_name(finding, lang: str) -> str:
    # pharmacogenetic and Beers findings are not tracked individually
    if isinstance(finding, DrugDrugInteraction):
        return finding.interaction
    if isinstance(finding, DrugSubstanceInteraction):
        return f"{finding.medication} + {finding.substance}"
    if isinstance(finding, DrugAllergyAlert):
        return t(lang, "high_risk_allergy", medication=finding.medication, allergen=finding.allergen)
    if isinstance(finding, DrugConditionContraindication):
        return f"{finding.medication} + {finding.condition}"
    return ""


def _medications_of(finding) -> List[str]:
    if isinstance(finding, DrugDrugInteraction):
        return [m.strip() for m in finding.interaction.split(" + ") if m.strip()]
    medication = getattr(finding, "medication", "")
    return [medication] if medication else []


def analysis_stats(history: List[HistoryItem], lang: str = "es") -> Optional[Dict[str, Any]]:
    """Totals and distributions over every analysis; None for an empty history."""
    if not history:
        return None

    total_findings = 0
    high_risk = 0
    risk_levels: Counter = Counter()
    medications: Counter = Counter()
    types: Counter = Counter()
    specific: Counter = Counter()

    for item in history:
        for _, finding in item.analysis_result.all_findings():
            total_findings += 1
            risk_levels[finding.risk_level or "Unknown"] += 1
            types[_type_label(finding, lang)] += 1
            medications.update(_medications_of(finding))
            if is_high_risk(finding.risk_level):
                high_risk += 1
                name = _specific_name(finding, lang)
                if name:
                    specific[name] += 1

    return {
        "totalAnalyses": len(history),
        "totalFindings": total_findings,
        "highRiskFindings": high_risk,
        "riskDistribution": [{"label": k, "value": v} for k, v in order_risk_counts(risk_levels).items()],
        "topMedications": _pairs(medications, TOP_MEDICATIONS),
        "topInteractionTypes": _pairs(types),
        "topSpecificInteractions": _pairs(specific, TOP_SPECIFIC_INTERACTIONS),
    }


def latest_per_patient(history: List[HistoryItem]) -> List[HistoryItem]:
    """Newest history item for every patient id; items without an id are ignored."""
    latest: Dict[str, HistoryItem] = {}
    for item in sorted(history, key=lambda h: timestamp_from_id(h.id), reverse=True):
        if item.patient_id and item.patient_id not in latest:
            latest[item.patient_id] = item
    return list(latest.values())


def patient_stats(history: List[HistoryItem]) -> Optional[Dict[str, Any]]:
    if not history:
        return None

    patients = latest_per_patient(history)
    conditions: Counter = Counter()
    with_risk = 0
    total_meds = 0

    for item in patients:
        total_meds += len(item.medications)
        conditions.update(split_list(item.conditions, ","))
        if any(is_high_risk(f.risk_level) for _, f in item.analysis_result.all_findings()):
            with_risk += 1

    avg_meds = round(total_meds / len(patients), 1) if patients else 0
    return {
        "totalUniquePatients": len(patients),
        "patientsWithRisk": with_risk,
        "avgMeds": avg_meds,
        "topConditions": _pairs(conditions, TOP_CONDITIONS),
    }
