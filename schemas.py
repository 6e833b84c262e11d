"""
Domain types

Purpose: typed records for patient input, model findings, analysis results, history, patient profiles,
system settings and proactive alerts.

Input: camelCase JSON documents (model output, stored history, API payloads).

Output: dataclass instances; to_dict() returns the same camelCase shape for storage and the wire.

Example: DrugDrugInteraction.from_dict({"interaction": "Warfarin + Amiodarone", "riskLevel": "Alto"})
"""
import re
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Tuple


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass
class _Record:
    """Base for records stored and exchanged as camelCase JSON."""

    # field name -> record class, for nested records and lists of records
    _nested: ClassVar[Dict[str, type]] = {}

    @classmethod
    def from_dict(cls, data: Any):
        if not isinstance(data, dict):
            data = {}
        kwargs = {}
        for f in fields(cls):
            camel = to_camel(f.name)
            if camel in data:
                value = data[camel]
            elif f.name in data:
                value = data[f.name]
            else:
                continue

            nested = cls._nested.get(f.name)
            if nested is not None:
                if isinstance(value, list):
                    value = [nested.from_dict(v) for v in value if isinstance(v, dict)]
                elif isinstance(value, dict):
                    value = nested.from_dict(value)
                else:
                    continue
            elif f.type is str:
                value = "" if value is None else str(value)
            elif f.type == Optional[str] and value is not None:
                value = str(value)
            kwargs[f.name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, list):
                value = [v.to_dict() if isinstance(v, _Record) else v for v in value]
            elif isinstance(value, _Record):
                value = value.to_dict()
            out[to_camel(f.name)] = value
        return out


# ═════════════════════════════════════════════════════════════
# PATIENT INPUT
# ═════════════════════════════════════════════════════════════

@dataclass
class Medication(_Record):
    name: str = ""
    dosage: str = ""
    frequency: str = ""

    def display(self) -> str:
        details = ", ".join(p for p in (self.dosage, self.frequency) if p)
        return f"{self.name} ({details})" if details else self.name


@dataclass
class PatientInput(_Record):
    """Form state for one check: what the clinician typed in."""
    medications: List[Medication] = field(default_factory=list)
    allergies: str = ""
    other_substances: str = ""
    conditions: str = ""
    date_of_birth: str = ""
    pharmacogenetics: str = ""
    patient_id: Optional[str] = None

    _nested: ClassVar[Dict[str, type]] = {"medications": Medication}


# ═════════════════════════════════════════════════════════════
# FINDINGS
# ═════════════════════════════════════════════════════════════

@dataclass
class Finding(_Record):
    risk_level: str = ""
    clinical_summary: str = ""
    recommendations: str = ""
    references: str = ""
    dosage_adjustment: Optional[str] = None
    therapeutic_alternative: Optional[str] = None


@dataclass
class DrugDrugInteraction(Finding):
    interaction: str = ""
    potential_effects: str = ""


@dataclass
class DrugSubstanceInteraction(Finding):
    medication: str = ""
    substance: str = ""
    potential_effects: str = ""


@dataclass
class DrugAllergyAlert(Finding):
    medication: str = ""
    allergen: str = ""
    alert_details: str = ""


@dataclass
class DrugConditionContraindication(Finding):
    medication: str = ""
    condition: str = ""
    contraindication_details: str = ""


@dataclass
class DrugPharmacogeneticContraindication(Finding):
    medication: str = ""
    genetic_factor: str = ""
    variant_allele: Optional[str] = None
    implication: str = ""


@dataclass
class BeersCriteriaAlert(Finding):
    medication: str = ""
    criteria: str = ""


@dataclass
class Source(_Record):
    uri: str = ""
    title: str = ""


# (result attribute, finding class), in display order
FINDING_CATEGORIES: Tuple[Tuple[str, type], ...] = (
    ("drug_drug_interactions", DrugDrugInteraction),
    ("drug_substance_interactions", DrugSubstanceInteraction),
    ("drug_allergy_alerts", DrugAllergyAlert),
    ("drug_condition_contraindications", DrugConditionContraindication),
    ("drug_pharmacogenetic_contraindications", DrugPharmacogeneticContraindication),
    ("beers_criteria_alerts", BeersCriteriaAlert),
)


@dataclass
class AnalysisResult(_Record):
    analysis_text: str = ""
    sources: List[Source] = field(default_factory=list)
    drug_drug_interactions: List[DrugDrugInteraction] = field(default_factory=list)
    drug_substance_interactions: List[DrugSubstanceInteraction] = field(default_factory=list)
    drug_allergy_alerts: List[DrugAllergyAlert] = field(default_factory=list)
    drug_condition_contraindications: List[DrugConditionContraindication] = field(default_factory=list)
    drug_pharmacogenetic_contraindications: List[DrugPharmacogeneticContraindication] = field(default_factory=list)
    beers_criteria_alerts: List[BeersCriteriaAlert] = field(default_factory=list)

    _nested: ClassVar[Dict[str, type]] = {
        "sources": Source,
        **{attr: cls for attr, cls in FINDING_CATEGORIES},
    }

    def all_findings(self) -> List[Tuple[str, Finding]]:
        """Every finding paired with its category attribute, in display order."""
        return [
            (attr, item)
            for attr, _ in FINDING_CATEGORIES
            for item in getattr(self, attr) or []
        ]

    def finding_counts(self) -> Dict[str, int]:
        return {attr: len(getattr(self, attr) or []) for attr, _ in FINDING_CATEGORIES}


@dataclass
class CausalityMatch(_Record):
    cause: str = ""
    probability: str = ""
    mechanism: str = ""


@dataclass
class InvestigatorResult(_Record):
    analysis_text: str = ""
    sources: List[Source] = field(default_factory=list)
    matches: List[CausalityMatch] = field(default_factory=list)

    _nested: ClassVar[Dict[str, type]] = {"sources": Source, "matches": CausalityMatch}


# ═════════════════════════════════════════════════════════════
# HISTORY & PROFILES
# ═════════════════════════════════════════════════════════════

_ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})?")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_record_id(patient_id: Optional[str] = None) -> str:
    """ISO timestamp id; batch items append the patient id."""
    stamp = utc_now_iso()
    return f"{stamp}_{patient_id}" if patient_id else stamp


def timestamp_from_id(record_id: str) -> datetime:
    """Leading ISO timestamp of a record id, or datetime.min (UTC) when absent."""
    match = _ISO_PREFIX.match(record_id or "")
    if match:
        try:
            parsed = datetime.fromisoformat(match.group(0).replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
        except ValueError:
            pass
    return datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class HistoryItem(_Record):
    id: str = ""
    timestamp: str = ""
    medications: List[Medication] = field(default_factory=list)
    allergies: str = ""
    other_substances: str = ""
    conditions: str = ""
    date_of_birth: str = ""
    pharmacogenetics: str = ""
    analysis_result: AnalysisResult = field(default_factory=AnalysisResult)
    lang: str = "es"
    patient_id: Optional[str] = None

    _nested: ClassVar[Dict[str, type]] = {
        "medications": Medication,
        "analysis_result": AnalysisResult,
    }


@dataclass
class InvestigatorHistoryItem(_Record):
    id: str = ""
    timestamp: str = ""
    symptoms: str = ""
    medications: List[Medication] = field(default_factory=list)
    allergies: str = ""
    conditions: str = ""
    date_of_birth: str = ""
    pharmacogenetics: str = ""
    result: InvestigatorResult = field(default_factory=InvestigatorResult)
    patient_id: Optional[str] = None

    _nested: ClassVar[Dict[str, type]] = {
        "medications": Medication,
        "result": InvestigatorResult,
    }


@dataclass
class PatientProfile(_Record):
    id: str = ""
    medications: List[Medication] = field(default_factory=list)
    allergies: str = ""
    other_substances: str = ""
    conditions: str = ""
    date_of_birth: str = ""
    pharmacogenetics: str = ""
    last_updated: str = ""

    _nested: ClassVar[Dict[str, type]] = {"medications": Medication}


# ═════════════════════════════════════════════════════════════
# SETTINGS & ALERTS
# ═════════════════════════════════════════════════════════════

@dataclass
class ExternalIntegration(_Record):
    """Descriptive only; no EHR traffic is performed."""
    id: str = ""
    name: str = ""
    type: str = "EHR"
    protocol: str = "FHIR"
    endpoint: str = ""
    status: str = "inactive"
    last_sync: Optional[str] = None


@dataclass
class SystemSettings(_Record):
    priority_sources: str = ""
    excluded_sources: str = ""
    safety_strictness: str = "standard"  # "standard" | "strict" | "loose"
    integrations: List[ExternalIntegration] = field(default_factory=list)

    _nested: ClassVar[Dict[str, type]] = {"integrations": ExternalIntegration}


@dataclass
class ProactiveAlert(_Record):
    id: str = ""
    type: str = ""  # "allergy" | "condition" | "drug-drug"
    title: str = ""
    message: str = ""
