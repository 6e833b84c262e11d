"""
Deterministic safety checks (proactive alerts)

Purpose: apply hard rules independent of the LLM: critical allergy groups, critical drug-condition
contraindications and critical drug-drug pairs.

Input: current medications, comma-separated allergies and conditions, UI language.

Output: alerts = [{"id": "ddi-warfarin-amiodarone", "type": "drug-drug", "title": ..., "message": ...}, ...]

Example: Sintrom + Trangorex -> one drug-drug alert (warfarin + amiodarone, bleeding risk).

Notes: always run and surface alerts even if the LLM does not mention them. Rule drug names are
lower-case generics; brands typed by the user are resolved before matching.
"""
import logging
from typing import Dict, List, Optional, Tuple

from normalizer import resolve_to_generic, split_list
from schemas import Medication, ProactiveAlert
from translations import t

logger = logging.getLogger(__name__)

_NSAIDS = [
    "ibuprofen", "naproxen", "diclofenac", "ketorolac", "aspirin",
    "meloxicam", "celecoxib", "dexketoprofen",
]
_PENICILLINS = ["amoxicillin", "ampicillin", "piperacillin", "dicloxacillin", "cephalexin"]
_SULFONAMIDES = ["sulfamethoxazole/trimethoprim", "sulfasalazine", "sulfadiazine"]
_SALICYLATES = ["aspirin"]

# allergy group key -> drugs that must not be given
CRITICAL_ALLERGY_RULES: Dict[str, List[str]] = {
    "penicil": _PENICILLINS,
    "penicillin": _PENICILLINS,
    "sulfa": _SULFONAMIDES,
    "nsaid": _NSAIDS,
    "aine": _NSAIDS,
    "aspirin": _SALICYLATES,
    "aspro": _SALICYLATES,
}

# condition key -> (drugs, reason key)
CRITICAL_CONDITION_RULES: Dict[str, Tuple[List[str], str]] = {
    "kidney": (
        ["ibuprofen", "naproxen", "diclofenac", "ketorolac", "meloxicam", "celecoxib"],
        "reason_nsaids_renal",
    ),
    "renal": (
        ["ibuprofen", "naproxen", "diclofenac", "ketorolac", "meloxicam", "celecoxib"],
        "reason_nsaids_renal",
    ),
    "angioedema": (
        ["lisinopril", "enalapril", "ramipril", "captopril", "perindopril"],
        "reason_acei_angioedema",
    ),
}

# ((drug a, drug b), reason key)
CRITICAL_DRUG_PAIRS: List[Tuple[Tuple[str, str], str]] = [
    (("sildenafil", "nitroglycerin"), "reason_sildenafil_nitrates"),
    (("vardenafil", "nitroglycerin"), "reason_sildenafil_nitrates"),
    (("tadalafil", "nitroglycerin"), "reason_sildenafil_nitrates"),
    (("simvastatin", "itraconazole"), "reason_statins_itraconazole"),
    (("atorvastatin", "itraconazole"), "reason_statins_itraconazole"),
    (("warfarin", "sulfamethoxazole/trimethoprim"), "reason_warfarin_bactrim"),
    (("fluoxetine", "phenelzine"), "reason_serotonin_syndrome"),
    (("sertraline", "phenelzine"), "reason_serotonin_syndrome"),
    (("amiodarone", "warfarin"), "reason_bleeding_risk_amiodarone"),
    (("spironolactone", "lisinopril"), "reason_hyperkalemia_risk"),
    (("spironolactone", "enalapril"), "reason_hyperkalemia_risk"),
    (("digoxin", "amiodarone"), "reason_digoxin_toxicity"),
    (("methotrexate", "ibuprofen"), "reason_methotrexate_toxicity"),
    (("methotrexate", "naproxen"), "reason_methotrexate_toxicity"),
]

# shorter user tokens only match by forward containment
MIN_REVERSE_MATCH = 3


def _contains_either_way(text: str, key: str) -> bool:
    if not text or not key:
        return False
    if key in text:
        return True
    return len(text) >= MIN_REVERSE_MATCH and text in key


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def _find_med(generics: List[str], drug: str, skip: Optional[int] = None) -> Optional[int]:
    for idx, generic in enumerate(generics):
        if idx != skip and _contains_either_way(generic, drug):
            return idx
    return None


def _find_pair(generics: List[str], drug1: str, drug2: str) -> Optional[Tuple[int, int]]:
    """Indices of two different medications matching drug1 and drug2."""
    for i, generic in enumerate(generics):
        if not _contains_either_way(generic, drug1):
            continue
        j = _find_med(generics, drug2, skip=i)
        if j is not None:
            return i, j
    return None


def check_proactive_alerts(
    medications: List[Medication],
    allergies: str,
    conditions: str,
    lang: str = "es",
) -> List[ProactiveAlert]:
    """
    Scan the current form state against the critical rule tables.

    Alerts are unique by id and keep first-seen order: allergy alerts,
    then condition alerts, then drug-drug alerts.
    """
    meds = [m for m in medications if m.name and m.name.strip()]
    generics = [resolve_to_generic(m.name) for m in meds]
    allergy_tokens = [a.lower() for a in split_list(allergies, ",")]
    condition_tokens = [c.lower() for c in split_list(conditions, ",")]

    alerts: List[ProactiveAlert] = []

    # 1. allergy groups
    for token in allergy_tokens:
        for group, drugs in CRITICAL_ALLERGY_RULES.items():
            if not _contains_either_way(token, group):
                continue
            for med, generic in zip(meds, generics):
                if any(_contains_either_way(generic, drug) for drug in drugs):
                    alerts.append(ProactiveAlert(
                        id=f"allergy-{med.name}-{group}",
                        type="allergy",
                        title=t(lang, "allergy_alert_title"),
                        message=t(lang, "allergy_alert_text",
                                  medication=med.name, allergy_group=_capitalize(group)),
                    ))

    # 2. condition contraindications
    for token in condition_tokens:
        for key, (drugs, reason_key) in CRITICAL_CONDITION_RULES.items():
            if not _contains_either_way(token, key):
                continue
            for med, generic in zip(meds, generics):
                if any(_contains_either_way(generic, drug) for drug in drugs):
                    alerts.append(ProactiveAlert(
                        id=f"condition-{med.name}-{key}",
                        type="condition",
                        title=t(lang, "condition_alert_title"),
                        message=t(lang, "condition_alert_text", medication=med.name,
                                  condition=_capitalize(key), reason=t(lang, reason_key)),
                    ))

    # 3. drug-drug pairs
    for (drug1, drug2), reason_key in CRITICAL_DRUG_PAIRS:
        pair = _find_pair(generics, drug1, drug2)
        if pair is None:
            continue
        i, j = pair
        alerts.append(ProactiveAlert(
            id=f"ddi-{drug1}-{drug2}",
            type="drug-drug",
            title=t(lang, "ddi_alert_title"),
            message=t(lang, "ddi_alert_text", med1=meds[i].name, med2=meds[j].name,
                      reason=t(lang, reason_key)),
        ))

    unique: Dict[str, ProactiveAlert] = {}
    for alert in alerts:
        unique.setdefault(alert.id, alert)

    if unique:
        logger.info(f"Proactive alerts: {', '.join(unique)}")
    return list(unique.values())
