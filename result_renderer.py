"""
Result rendering

Purpose: turn an AnalysisResult into display-ready sections: risk class and color per finding, labeled
content rows, copy text per item, per-risk summary counts, the high-risk digest and HTML for the narrative.

Input: AnalysisResult + language (+ optional exact risk-level filter).

Output: plain dataclasses with to_dict() for the API.

Example: classify_risk("Alto") -> "high" (color "#ef4444")
"""
import html
import re
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from schemas import (
    AnalysisResult,
    BeersCriteriaAlert,
    DrugAllergyAlert,
    DrugConditionContraindication,
    DrugDrugInteraction,
    DrugPharmacogeneticContraindication,
    DrugSubstanceInteraction,
    Finding,
)
from translations import t

# ═════════════════════════════════════════════════════════════
# RISK CLASSIFICATION
# ═════════════════════════════════════════════════════════════

# class -> substrings, checked in this order
_RISK_TERMS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("critical", ("crítico", "critico", "critical")),
    ("high", ("alto", "high")),
    ("moderate", ("moderado", "moderate")),
    ("low", ("bajo", "low")),
)

RISK_COLORS = {
    "critical": "#b91c1c",  # red-700
    "high": "#ef4444",      # red-500
    "moderate": "#f59e0b",  # amber-500
    "low": "#0ea5e9",       # sky-500
    "unknown": "#64748b",   # slate-500
}

RISK_ORDER = ["Crítico", "Critical", "Alto", "High", "Moderado", "Moderate", "Bajo", "Low"]

HIGH_RISK_CLASSES = ("critical", "high")


def classify_risk(level: Optional[str]) -> str:
    lower = (level or "").lower()
    for risk_class, terms in _RISK_TERMS:
        if any(term in lower for term in terms):
            return risk_class
    return "unknown"


def risk_color(level: Optional[str]) -> str:
    return RISK_COLORS[classify_risk(level)]


def is_high_risk(level: Optional[str]) -> bool:
    return classify_risk(level) in HIGH_RISK_CLASSES


# ═════════════════════════════════════════════════════════════
# SECTIONS
# ═════════════════════════════════════════════════════════════

@dataclass
class ContentRow:
    label: str
    value: str
    bold: bool = False


@dataclass
class RenderedItem:
    id: str
    title: str
    subtitle: str
    risk_level: str
    risk_class: str
    color: str
    content: List[ContentRow] = field(default_factory=list)
    dosage_adjustment: Optional[str] = None
    therapeutic_alternative: Optional[str] = None
    references: str = ""
    copy_text: str = ""


@dataclass
class Section:
    key: str
    title: str
    items: List[RenderedItem] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["count"] = self.count
        return data


# (section key, result attribute, title key)
SECTION_LAYOUT: Tuple[Tuple[str, str, str], ...] = (
    ("drugDrug", "drug_drug_interactions", "section_drug_drug"),
    ("drugSubstance", "drug_substance_interactions", "section_drug_substance"),
    ("drugAllergy", "drug_allergy_alerts", "section_drug_allergy"),
    ("drugCondition", "drug_condition_contraindications", "section_drug_condition"),
    ("drugPgx", "drug_pharmacogenetic_contraindications", "section_pgx"),
    ("beers", "beers_criteria_alerts", "section_beers"),
)


def _pgx_factor(item: DrugPharmacogeneticContraindication) -> str:
    if item.variant_allele:
        return f"{item.genetic_factor} ({item.variant_allele})"
    return item.genetic_factor


def _title_and_rows(item: Finding, lang: str) -> Tuple[str, str, List[Tuple[str, str]], List[ContentRow]]:
    """
    Returns (title, subtitle, copy header lines, content rows) for one finding.
    """
    summary = ContentRow(t(lang, "label_summary"), item.clinical_summary, bold=True)
    recommendations = ContentRow(t(lang, "label_recommendations"), item.recommendations)

    if isinstance(item, DrugDrugInteraction):
        return (item.interaction, "",
                [(t(lang, "label_interaction"), item.interaction)],
                [summary, ContentRow(t(lang, "label_effects"), item.potential_effects), recommendations])

    if isinstance(item, DrugSubstanceInteraction):
        title = f"{item.medication} + {item.substance}"
        return (title, "",
                [(t(lang, "label_interaction"), title)],
                [summary, ContentRow(t(lang, "label_effects"), item.potential_effects), recommendations])

    if isinstance(item, DrugAllergyAlert):
        return (item.medication, f"{t(lang, 'label_allergen')}: {item.allergen}",
                [(t(lang, "label_medication"), item.medication), (t(lang, "label_allergen"), item.allergen)],
                [summary, ContentRow(t(lang, "label_details"), item.alert_details), recommendations])

    if isinstance(item, DrugConditionContraindication):
        return (item.medication, f"{t(lang, 'label_condition')}: {item.condition}",
                [(t(lang, "label_medication"), item.medication), (t(lang, "label_condition"), item.condition)],
                [summary, ContentRow(t(lang, "label_details"), item.contraindication_details), recommendations])

    if isinstance(item, DrugPharmacogeneticContraindication):
        factor = _pgx_factor(item)
        return (item.medication, f"{t(lang, 'label_genetic_factor')}: {factor}",
                [(t(lang, "label_medication"), item.medication), (t(lang, "label_genetic_factor"), factor)],
                [summary, ContentRow(t(lang, "label_implication"), item.implication), recommendations])

    if isinstance(item, BeersCriteriaAlert):
        return (item.medication, f"{t(lang, 'label_criteria')}: {item.criteria}",
                [(t(lang, "label_medication"), item.medication), (t(lang, "label_criteria"), item.criteria)],
                [summary, recommendations])

    return ("", "", [], [summary, recommendations])


def build_copy_text(header: List[Tuple[str, str]], item: Finding, rows: List[ContentRow], lang: str) -> str:
    lines = [f"{label}: {value}" for label, value in header]
    lines.append(f"{t(lang, 'label_risk')}: {item.risk_level}")
    lines += [f"{row.label}: {row.value}" for row in rows if row.value]
    if item.dosage_adjustment:
        lines.append(f"{t(lang, 'label_dosage_adjustment')}: {item.dosage_adjustment}")
    if item.therapeutic_alternative:
        lines.append(f"{t(lang, 'label_alternative')}: {item.therapeutic_alternative}")
    if item.references:
        lines.append(f"{t(lang, 'label_references')}: {item.references}")
    return "\n".join(lines)


def render_item(section_key: str, index: int, item: Finding, lang: str) -> RenderedItem:
    title, subtitle, header, rows = _title_and_rows(item, lang)
    risk_class = classify_risk(item.risk_level)
    return RenderedItem(
        id=f"{section_key}-{index}",
        title=title,
        subtitle=subtitle,
        risk_level=item.risk_level,
        risk_class=risk_class,
        color=risk_color(item.risk_level),
        content=rows,
        dosage_adjustment=item.dosage_adjustment,
        therapeutic_alternative=item.therapeutic_alternative,
        references=item.references,
        copy_text=build_copy_text(header, item, rows, lang),
    )


def build_sections(result: AnalysisResult, lang: str = "es", risk_filter: Optional[str] = None) -> List[Section]:
    """
    Sections in fixed display order; empty ones are omitted.

    risk_filter keeps only findings whose risk level equals it exactly.
    Item ids keep the index within the unfiltered list.
    """
    sections = []
    for key, attr, title_key in SECTION_LAYOUT:
        items = [
            render_item(key, idx, finding, lang)
            for idx, finding in enumerate(getattr(result, attr) or [])
            if not risk_filter or finding.risk_level == risk_filter
        ]
        if items:
            sections.append(Section(key=key, title=t(lang, title_key), items=items))
    return sections


# ═════════════════════════════════════════════════════════════
# SUMMARIES
# ═════════════════════════════════════════════════════════════

def _risk_sort_key(level: str):
    if level in RISK_ORDER:
        return (0, RISK_ORDER.index(level), "")
    return (1, 0, level)


def order_risk_counts(counts: Dict[str, int]) -> Dict[str, int]:
    """Crítico, Critical, Alto, High, ... first, then any other level alphabetically."""
    return {level: counts[level] for level in sorted(counts, key=_risk_sort_key)}


def summary_counts(result: AnalysisResult) -> Dict[str, int]:
    """Findings per risk level, in display order."""
    return order_risk_counts(Counter(item.risk_level for _, item in result.all_findings() if item.risk_level))


@dataclass
class HighRiskItem:
    type: str
    description: str
    risk_level: str


def _describe(item: Finding, lang: str) -> Tuple[str, str]:
    if isinstance(item, DrugDrugInteraction):
        return t(lang, "alert_drug_drug"), item.interaction
    if isinstance(item, DrugSubstanceInteraction):
        return t(lang, "alert_drug_substance"), f"{item.medication} + {item.substance}"
    if isinstance(item, DrugAllergyAlert):
        return t(lang, "alert_allergy"), t(lang, "high_risk_allergy", medication=item.medication,
                                            allergen=item.allergen)
    if isinstance(item, DrugConditionContraindication):
        return t(lang, "alert_condition"), t(lang, "high_risk_condition", medication=item.medication,
                                              condition=item.condition)
    if isinstance(item, DrugPharmacogeneticContraindication):
        return t(lang, "alert_pgx"), f"{item.medication} ({item.genetic_factor})"
    if isinstance(item, BeersCriteriaAlert):
        return t(lang, "alert_beers"), f"{item.medication} ({item.criteria})"
    return "", ""


def high_risk_items(result: AnalysisResult, lang: str = "es") -> List[HighRiskItem]:
    items = []
    for _, finding in result.all_findings():
        if is_high_risk(finding.risk_level):
            kind, description = _describe(finding, lang)
            items.append(HighRiskItem(type=kind, description=description, risk_level=finding.risk_level))
    return items


# ═════════════════════════════════════════════════════════════
# NARRATIVE
# ═════════════════════════════════════════════════════════════

_NUMBERED_OR_RULE = re.compile(r"### \d\.|\n---")


def extract_critical_summary(text: str, title: str) -> str:
    """
    The "### <title>" section of the report, up to the first numbered heading or rule.

    Without that heading, everything before the first numbered heading or rule.
    """
    text = text or ""
    match = re.search(rf"### {re.escape(title)}([\s\S]*?)(?=### \d\.|\n---|\Z)", text)
    if match:
        return f"### {title}\n{match.group(1).strip()}"
    return _NUMBERED_OR_RULE.split(text)[0]


_LIST_BLOCK = re.compile(r"(\n\*   [^\n]+)+")
_LIST_MARKER = re.compile(r"^\*   ")


def _wrap_list(match: re.Match) -> str:
    lines = match.group(0).strip().split("\n")
    items = "".join("<li>" + _LIST_MARKER.sub("", line).strip() + "</li>" for line in lines)
    return f"<ul>{items}</ul>"


def format_markdown(text: str) -> str:
    """Small markdown subset to HTML: ### headings, **bold**, '*   ' lists, --- rules."""
    processed = html.escape(text or "", quote=False)
    processed = _LIST_BLOCK.sub(_wrap_list, processed)
    processed = re.sub(r"### (.*?)\n", r"<h3>\1</h3>", processed)
    processed = re.sub(r"\*\*([^*]+)\*\*", r"<strong>\1</strong>", processed)
    processed = processed.replace("\n---\n", "<hr />")
    processed = processed.replace("\n", "<br />")
    processed = re.sub(r"<br />(\s*<(?:h3|ul|hr)>)", r"\1", processed)
    processed = re.sub(r"(</(?:h3|ul|li)>)\s*<br />", r"\1", processed)
    processed = re.sub(r"<hr />\s*<br />", "<hr />", processed)
    return processed
