"""
Export formatters

Purpose: CSV exports of results, history, dashboard statistics and batch templates, and the clinical PDF report.

Input: AnalysisResult / InvestigatorResult / history items + language (+ patient context for the PDF).

Output: CSV text (UTF-8 BOM, every field quoted) or PDF bytes rendered with reportlab.

Example: pdf_filename("analysis", "PAT 001/ß", "es") -> "Informe_PAT_001__.pdf"
"""
import csv
import io
import logging
import re
from datetime import datetime
from functools import partial
from typing import Any, Dict, Iterable, List, Optional, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from batch_runner import REQUIRED_HEADERS
from schemas import (
    AnalysisResult,
    BeersCriteriaAlert,
    DrugAllergyAlert,
    DrugConditionContraindication,
    DrugDrugInteraction,
    DrugPharmacogeneticContraindication,
    DrugSubstanceInteraction,
    Finding,
    HistoryItem,
    InvestigatorResult,
    Medication,
    timestamp_from_id,
)
from translations import t

logger = logging.getLogger(__name__)

BOM = "\ufeff"


# ═════════════════════════════════════════════════════════════
# CSV
# ═════════════════════════════════════════════════════════════

def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).replace("\r\n", "\n").replace("\r", "\n")


def _write_csv(header: List[str], rows: Iterable[List[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([_clean(h) for h in header])
    for row in rows:
        writer.writerow([_clean(v) for v in row])
    return BOM + buffer.getvalue()


def _finding_row(item: Finding, lang: str) -> List[str]:
    """type, primary, secondary, details for one finding."""
    if isinstance(item, DrugDrugInteraction):
        primary, _, secondary = item.interaction.partition(" + ")
        return [t(lang, "alert_drug_drug"), primary.strip(), secondary.strip(), item.potential_effects]
    if isinstance(item, DrugSubstanceInteraction):
        return [t(lang, "alert_drug_substance"), item.medication, item.substance, item.potential_effects]
    if isinstance(item, DrugAllergyAlert):
        return [t(lang, "alert_allergy"), item.medication, item.allergen, item.alert_details]
    if isinstance(item, DrugConditionContraindication):
        return [t(lang, "alert_condition"), item.medication, item.condition, item.contraindication_details]
    if isinstance(item, DrugPharmacogeneticContraindication):
        factor = item.genetic_factor
        if item.variant_allele:
            factor = f"{factor} ({item.variant_allele})"
        return [t(lang, "alert_pgx"), item.medication, factor, item.implication]
    if isinstance(item, BeersCriteriaAlert):
        return [t(lang, "alert_beers"), item.medication, item.criteria, t(lang, "na")]
    return ["", "", "", ""]


def result_to_csv(result: AnalysisResult, lang: str = "es") -> str:
    header = [
        t(lang, "csv_type"), t(lang, "csv_primary"), t(lang, "csv_secondary"), t(lang, "csv_risk"),
        t(lang, "csv_summary"), t(lang, "csv_details"), t(lang, "csv_recommendations"),
        t(lang, "csv_dosage"), t(lang, "csv_alternative"), t(lang, "csv_references"),
    ]
    rows = []
    for _, item in result.all_findings():
        kind, primary, secondary, details = _finding_row(item, lang)
        rows.append([
            kind, primary, secondary, item.risk_level, item.clinical_summary, details,
            item.recommendations, item.dosage_adjustment, item.therapeutic_alternative, item.references,
        ])
    return _write_csv(header, rows)


SUMMARY_LABELS = (
    ("drug_drug_interactions", "summary_ddi"),
    ("drug_substance_interactions", "summary_dsi"),
    ("drug_allergy_alerts", "summary_allergy"),
    ("drug_condition_contraindications", "summary_condition"),
    ("drug_pharmacogenetic_contraindications", "summary_pgx"),
    ("beers_criteria_alerts", "summary_beers"),
)


def history_summary(item: HistoryItem, lang: str = "es") -> str:
    """Non-zero finding counts per category, e.g. "2 drug-drug, 1 Beers"."""
    counts = item.analysis_result.finding_counts()
    parts = [f"{counts[attr]} {t(lang, key)}" for attr, key in SUMMARY_LABELS if counts.get(attr)]
    return ", ".join(parts) if parts else t(lang, "no_findings")


def history_to_csv(history: List[HistoryItem], lang: str = "es") -> str:
    header = [
        t(lang, "csv_date"), t(lang, "csv_time"), t(lang, "csv_patient_id"),
        t(lang, "csv_medications"), t(lang, "csv_findings"),
    ]
    rows = []
    for item in history:
        stamp = timestamp_from_id(item.timestamp or item.id)
        rows.append([
            stamp.strftime("%Y-%m-%d"),
            stamp.strftime("%H:%M:%S"),
            item.patient_id or t(lang, "na"),
            "; ".join(m.name for m in item.medications if m.name),
            history_summary(item, lang),
        ])
    return _write_csv(header, rows)


DASHBOARD_TABS = ("analysis", "patients")


def _stat_block(title: str, column: str, lang: str, entries: List[Dict[str, Any]]) -> List[List[Any]]:
    rows: List[List[Any]] = [[], [title], [column, t(lang, "dash_count")]]
    rows.extend([e["label"], e["value"]] for e in entries)
    return rows


def dashboard_to_csv(stats: Optional[Dict[str, Any]], sub_tab: str, lang: str = "es") -> str:
    """
    Metric rows followed by one titled block per ranking, separated by empty lines.

    stats is the output of dashboard.analysis_stats or dashboard.patient_stats for
    the matching tab; None (no history) yields the header row only.
    """
    if sub_tab not in DASHBOARD_TABS:
        raise ValueError(f"Unknown dashboard tab: {sub_tab!r}")

    header = [t(lang, "dash_metric"), t(lang, "dash_value")]
    if not stats:
        return _write_csv(header, [])

    if sub_tab == "analysis":
        rows = [
            [t(lang, "dash_total_analyses"), stats["totalAnalyses"]],
            [t(lang, "dash_total_findings"), stats["totalFindings"]],
            [t(lang, "dash_high_risk_findings"), stats["highRiskFindings"]],
        ]
        rows += _stat_block(t(lang, "dash_risk_distribution"), t(lang, "dash_risk_level"), lang,
                            stats["riskDistribution"])
        rows += _stat_block(t(lang, "dash_top_medications"), t(lang, "dash_medication"), lang,
                            stats["topMedications"])
        rows += _stat_block(t(lang, "dash_finding_types"), t(lang, "dash_type"), lang,
                            stats["topInteractionTypes"])
        rows += _stat_block(t(lang, "dash_specific_interactions"), t(lang, "dash_interaction"), lang,
                            stats["topSpecificInteractions"])
    else:
        rows = [
            [t(lang, "dash_unique_patients"), stats["totalUniquePatients"]],
            [t(lang, "dash_patients_with_risk"), stats["patientsWithRisk"]],
            [t(lang, "dash_avg_meds"), stats["avgMeds"]],
        ]
        rows += _stat_block(t(lang, "dash_top_conditions"), t(lang, "dash_condition"), lang,
                            stats["topConditions"])
    return _write_csv(header, rows)


def batch_template_csv(kind: str, lang: str = "es") -> str:
    if kind == "analysis":
        rows = [
            ["PATIENT-001", "Lisinopril (10mg, 1/day); Metformin (500mg, 2/day)", "15-05-1965",
             "Penicilina;AINEs", t(lang, "template_substances"), "", "Hypertension, I10"],
            ["PATIENT-002", "Atorvastatin (20mg, 1/day)", "20-11-1958", "Sulfamidas", "Ginkgo Biloba",
             f"CYP2C19 ({t(lang, 'template_pgx_poor')})", "Hypercholesterolemia, History of MI"],
        ]
    elif kind == "investigator":
        rows = [
            ["PATIENT-001", "Frequent dizziness and hypotension",
             "Lisinopril (10mg, 1/day); Metformin (500mg, 2/day)", "15-05-1965", "Hypertension", "", ""],
            ["PATIENT-002", "Generalized skin rash", "Amoxicillin (500mg, 3/day)", "20-11-1980",
             "Dental infection", "", "Penicillin"],
        ]
    else:
        raise ValueError(f"Unknown batch kind: {kind!r}")
    return _write_csv(REQUIRED_HEADERS[kind], rows)


# ═════════════════════════════════════════════════════════════
# PDF
# ═════════════════════════════════════════════════════════════

HEADER_BLUE = colors.Color(30 / 255, 58 / 255, 138 / 255)
CONTEXT_GREY = colors.Color(248 / 255, 250 / 255, 252 / 255)
CRITICAL_RED = colors.Color(185 / 255, 28 / 255, 28 / 255)
WARNING_AMBER = colors.Color(217 / 255, 119 / 255, 6 / 255)
CAUSE_INDIGO = colors.Color(79 / 255, 70 / 255, 229 / 255)
FOOTER_GREY = colors.Color(150 / 255, 150 / 255, 150 / 255)

MARGIN = 20 * mm
HEADER_HEIGHT = 40 * mm

_PDF_SECTIONS = (
    ("drug_drug_interactions", "section_drug_drug"),
    ("drug_substance_interactions", "section_drug_substance"),
    ("drug_allergy_alerts", "section_drug_allergy"),
    ("drug_condition_contraindications", "section_drug_condition"),
    ("drug_pharmacogenetic_contraindications", "section_pgx"),
    ("beers_criteria_alerts", "section_beers"),
)


class NumberedCanvas(canvas.Canvas):
    """Defers page output so every footer can print "Page i of N"."""

    def __init__(self, *args, lang: str = "es", **kwargs):
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states = []
        self.lang = lang

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_footer(total)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def draw_footer(self, total: int):
        width, _ = self._pagesize
        self.saveState()
        self.setFillColor(FOOTER_GREY)
        self.setFont("Helvetica", 7)
        self.drawCentredString(width / 2, 15 * mm, t(self.lang, "pdf_disclaimer"))
        self.setFont("Helvetica", 8)
        self.drawCentredString(width / 2, 10 * mm, t(self.lang, "pdf_page", page=self._pageNumber, total=total))
        self.restoreState()


def _styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "section": ParagraphStyle("Section", parent=base["Heading3"], fontSize=11.5, leading=14,
                                  textColor=HEADER_BLUE, spaceBefore=6, spaceAfter=3),
        "item": ParagraphStyle("Item", parent=base["Normal"], fontName="Helvetica-Bold", fontSize=10, leading=12),
        "body": ParagraphStyle("Body", parent=base["Normal"], fontSize=9, leading=11,
                               textColor=colors.Color(50 / 255, 50 / 255, 50 / 255)),
        "context_title": ParagraphStyle("ContextTitle", parent=base["Normal"], fontName="Helvetica-Bold",
                                        fontSize=11, leading=13),
        "context": ParagraphStyle("Context", parent=base["Normal"], fontSize=9, leading=11),
        "narrative": ParagraphStyle("Narrative", parent=base["Normal"], fontSize=9.5, leading=12),
    }


def _para(text: str, style: ParagraphStyle, color=None) -> Paragraph:
    markup = escape(text or "").replace("\n", "<br/>")
    if color is not None:
        markup = f'<font color="#{color.hexval()[2:]}">{markup}</font>'
    return Paragraph(markup, style)


def _item_color(risk_level: str):
    lower = (risk_level or "").lower()
    return CRITICAL_RED if ("crít" in lower or "crit" in lower) else WARNING_AMBER


def _item_title(item: Finding) -> str:
    for attr in ("interaction", "medication", "allergen"):
        value = getattr(item, attr, "")
        if value:
            return value
    return ""


def _med_names(medications: Union[str, List[Medication], None]) -> str:
    if not medications:
        return ""
    if isinstance(medications, str):
        return medications
    return "; ".join(m.display() for m in medications if m.name)


def _context_box(patient_info: Dict[str, Any], lang: str, styles) -> Table:
    na = t(lang, "na")
    rows = [
        _para(f"{t(lang, 'pdf_patient_id')}: {patient_info.get('id') or na}", styles["context_title"]),
        _para(f"{t(lang, 'pdf_dob')}: {patient_info.get('dob') or na} | "
              f"{t(lang, 'pdf_conditions')}: {patient_info.get('conditions') or na}", styles["context"]),
        _para(f"{t(lang, 'pdf_allergies')}: {patient_info.get('allergies') or t(lang, 'pdf_none')}",
              styles["context"]),
    ]
    meds = _med_names(patient_info.get("medications"))
    if meds:
        rows.append(_para(f"{t(lang, 'pdf_medications')}: {meds}", styles["context"]))
    if patient_info.get("symptoms"):
        rows.append(_para(f"{t(lang, 'pdf_symptoms')}: {patient_info['symptoms']}", styles["context"]))

    table = Table([[row] for row in rows], colWidths=[A4[0] - 2 * MARGIN - 12])
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), CONTEXT_GREY),
        ("LEFTPADDING", (0, 0), (-1, -1), 5 * mm),
        ("TOPPADDING", (0, 0), (-1, -1), 1),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 1),
    ]))
    return table


def _strip_markdown(text: str) -> str:
    return re.sub(r"[#*]", "", text or "")


def _analysis_story(result: AnalysisResult, lang: str, styles) -> List[Any]:
    story = []
    for attr, title_key in _PDF_SECTIONS:
        items = getattr(result, attr) or []
        if not items:
            continue
        story.append(_para(t(lang, title_key), styles["section"]))
        for item in items:
            story.append(_para(f"> {_item_title(item)} [{item.risk_level}]", styles["item"],
                               _item_color(item.risk_level)))
            story.append(_para(f"{t(lang, 'pdf_summary')}: {item.clinical_summary}", styles["body"]))
            if item.recommendations:
                story.append(_para(f"{t(lang, 'pdf_recommendations')}: {item.recommendations}", styles["body"]))
            story.append(Spacer(1, 1.5 * mm))
    story.append(Spacer(1, 3 * mm))
    story.append(_para(t(lang, "pdf_narrative").upper(), styles["section"]))
    story.append(_para(_strip_markdown(result.analysis_text), styles["narrative"]))
    return story


def _investigator_story(result: InvestigatorResult, lang: str, styles) -> List[Any]:
    story = [_para(t(lang, "pdf_causality"), styles["section"])]
    for match in result.matches:
        story.append(_para(f"• {match.cause} ({match.probability})", styles["item"], CAUSE_INDIGO))
        story.append(_para(f"{t(lang, 'pdf_mechanism')}: {match.mechanism}", styles["body"]))
        story.append(Spacer(1, 1.5 * mm))
    story.append(Spacer(1, 3 * mm))
    story.append(_para(t(lang, "pdf_narrative"), styles["section"]))
    story.append(_para(_strip_markdown(result.analysis_text), styles["narrative"]))
    return story


def generate_clinical_pdf(
    kind: str,
    data: Union[AnalysisResult, InvestigatorResult],
    lang: str = "es",
    patient_info: Optional[Dict[str, Any]] = None,
) -> bytes:
    """
    Render the clinical report.

    kind: "analysis" (data is an AnalysisResult) or "investigator" (an InvestigatorResult).
    patient_info keys: id, dob, conditions, allergies, medications, symptoms (all optional).
    """
    if kind not in ("analysis", "investigator"):
        raise ValueError(f"Unknown report kind: {kind!r}")
    patient_info = patient_info or {}
    title = t(lang, "pdf_title_analysis" if kind == "analysis" else "pdf_title_investigator")
    generated = t(lang, "pdf_generated", date=datetime.now().strftime("%Y-%m-%d"))

    def draw_header(pdf, doc):
        width, height = A4
        pdf.saveState()
        pdf.setFillColor(HEADER_BLUE)
        pdf.rect(0, height - HEADER_HEIGHT, width, HEADER_HEIGHT, stroke=0, fill=1)
        pdf.setFillColor(colors.white)
        pdf.setFont("Helvetica-Bold", 20)
        pdf.drawString(MARGIN, height - 18 * mm, title)
        pdf.setFont("Helvetica", 10)
        pdf.drawRightString(width - MARGIN, height - 28 * mm, generated)
        pdf.restoreState()

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=25 * mm,
        title=title,
    )
    styles = _styles()

    story: List[Any] = [Spacer(1, HEADER_HEIGHT - MARGIN + 5 * mm), _context_box(patient_info, lang, styles),
                        Spacer(1, 4 * mm)]
    if kind == "analysis":
        story += _analysis_story(data, lang, styles)
    else:
        story += _investigator_story(data, lang, styles)

    doc.build(story, onFirstPage=draw_header, canvasmaker=partial(NumberedCanvas, lang=lang))
    logger.info(f"PDF report rendered ({kind}, {len(buffer.getvalue())} bytes)")
    return buffer.getvalue()


def pdf_filename(kind: str, patient_id: Optional[str], lang: str = "es") -> str:
    prefix = t(lang, "pdf_prefix_analysis" if kind == "analysis" else "pdf_prefix_investigator")
    safe_id = re.sub(r"[^A-Za-z0-9]", "_", patient_id or "Anon")[:20]
    return f"{prefix}_{safe_id}.pdf"
