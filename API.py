from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
import logging

import database
from batch_runner import BatchFileError, load_batch_csv, run_batch
from catalog import PGX_GENE_GROUPS
from dashboard import analysis_stats, patient_stats
from database import StorageError
from exporters import (
    batch_template_csv,
    dashboard_to_csv,
    generate_clinical_pdf,
    history_to_csv,
    pdf_filename,
    result_to_csv,
)
from llm_client import ApiKeyError, LLMServiceError
from log import setup_logging
from rules_engine import check_proactive_alerts
from schemas import AnalysisResult, InvestigatorResult, Medication, PatientInput, SystemSettings
from suggestion_engine import suggest
from translations import normalize_lang
from UI_main import (
    add_form_entry,
    add_pgx_entry,
    normalize_input,
    run_interaction_check,
    run_investigation,
    save_profile_from_form,
    substance_options,
)

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Drug Interaction Checker API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ═════════════════════════════════════════════════════════════
# REQUEST MODELS
# ═════════════════════════════════════════════════════════════

class MedicationIn(BaseModel):
    name: str
    dosage: str = ""
    frequency: str = ""


class PatientRequest(BaseModel):
    medications: List[MedicationIn] = []
    allergies: str = ""
    other_substances: str = ""
    conditions: str = ""
    date_of_birth: str = ""
    pharmacogenetics: str = ""
    patient_id: Optional[str] = None
    lang: str = "es"

    def to_patient(self) -> PatientInput:
        return PatientInput(
            medications=[Medication(name=m.name, dosage=m.dosage, frequency=m.frequency) for m in self.medications],
            allergies=self.allergies,
            other_substances=self.other_substances,
            conditions=self.conditions,
            date_of_birth=self.date_of_birth,
            pharmacogenetics=self.pharmacogenetics,
            patient_id=self.patient_id,
        )


class AnalyzeRequest(PatientRequest):
    user_id: str = database.DEMO_USER_ID
    risk_filter: Optional[str] = None


class InvestigateRequest(PatientRequest):
    user_id: str = database.DEMO_USER_ID
    symptoms: str


class FormEntryRequest(PatientRequest):
    field_name: str  # "allergies" | "other_substances" | "conditions"
    value: str


class PgxEntryRequest(PatientRequest):
    gene: str
    variant: str = ""
    status: str = ""


class BatchRequest(BaseModel):
    csv: str  # file contents
    user_id: str = database.DEMO_USER_ID
    lang: str = "es"
    concurrency: Optional[int] = None


class ExportRequest(BaseModel):
    kind: str = "analysis"  # "analysis" | "investigator"
    result: Dict[str, Any]
    lang: str = "es"
    patient_info: Dict[str, Any] = {}


# ═════════════════════════════════════════════════════════════
# ERROR MAPPING
# ═════════════════════════════════════════════════════════════

def _error(status: int, exc: Exception, **extra) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": exc.__class__.__name__, "detail": str(exc), **extra})


@app.exception_handler(ApiKeyError)
async def api_key_error(request: Request, exc: ApiKeyError):
    logger.error(f"❌ API key problem on {request.url.path}: {exc}", exc_info=exc)
    return _error(401, exc)


@app.exception_handler(BatchFileError)
async def batch_file_error(request: Request, exc: BatchFileError):
    logger.error(f"❌ Invalid batch file on {request.url.path}: {exc}", exc_info=exc)
    return _error(400, exc, missing=exc.missing)


@app.exception_handler(ValueError)
async def value_error(request: Request, exc: ValueError):
    logger.error(f"❌ Invalid request on {request.url.path}: {exc}", exc_info=exc)
    return _error(400, exc)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    logger.error(f"❌ Validation failed on {request.url.path}: {exc.errors()}", exc_info=exc)
    return JSONResponse(status_code=400, content={"error": "ValidationError", "detail": str(exc.errors())})


@app.exception_handler(LLMServiceError)
async def llm_service_error(request: Request, exc: LLMServiceError):
    logger.error(f"❌ LLM service failure on {request.url.path}: {exc}", exc_info=exc)
    return _error(502, exc)


@app.exception_handler(StorageError)
async def storage_error(request: Request, exc: StorageError):
    logger.error(f"❌ Storage failure on {request.url.path}: {exc}", exc_info=exc)
    return _error(503, exc)


def _csv_response(text: str, filename: str) -> Response:
    return Response(
        content=text.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ═════════════════════════════════════════════════════════════
# ENDPOINTS
# ═════════════════════════════════════════════════════════════

@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "Drug Interaction Checker API"}


@app.get("/suggest/{kind}")
def suggestions(kind: str, q: str = "", remote: bool = True):
    """Autocomplete for medication, supplement or condition fields."""
    results = suggest(kind, q, include_remote=remote)
    return {"kind": kind, "query": q, "suggestions": [s.to_dict() for s in results]}


@app.get("/catalog/pgx-genes")
def pgx_genes():
    return {"groups": PGX_GENE_GROUPS}


@app.get("/catalog/substances")
def substances(lang: str = "es"):
    return {"substances": substance_options(lang)}


@app.post("/form/entry")
def form_entry(request: FormEntryRequest):
    """Add an allergy, substance or condition to the form; returns the updated form."""
    return add_form_entry(request.to_patient(), request.field_name, request.value).to_dict()


@app.post("/form/pgx")
def form_pgx(request: PgxEntryRequest):
    return add_pgx_entry(request.to_patient(), request.gene, request.variant, request.status).to_dict()


@app.post("/alerts")
def alerts(request: PatientRequest):
    """Proactive alerts for the current form state; no LLM call."""
    profile = normalize_input(request.to_patient())
    found = check_proactive_alerts(profile.medications, profile.allergies, profile.conditions,
                                   normalize_lang(request.lang))
    return {"alerts": [a.to_dict() for a in found]}


@app.post("/analyze")
def analyze(request: AnalyzeRequest):
    """
    Full interaction check.

    Workflow:
    1. Proactive alerts from the local rule tables
    2. Grounded LLM analysis
    3. History item persisted for the user
    4. Rendered sections, risk counts and narrative returned to UI
    """
    logger.info(f"📝 Analysis request from {request.user_id} ({len(request.medications)} meds)")
    return run_interaction_check(request.to_patient(), request.user_id, request.lang,
                                 risk_filter=request.risk_filter)


@app.post("/investigate")
def investigate(request: InvestigateRequest):
    logger.info(f"📝 Investigation request from {request.user_id}")
    return run_investigation(request.symptoms, request.to_patient(), request.user_id, request.lang)


async def _run_batch(request: BatchRequest, kind: str):
    records = load_batch_csv(request.csv, kind)
    lang = normalize_lang(request.lang)
    settings = database.get_system_settings() if kind == "analysis" else None
    items = await run_batch(records, kind, request.user_id, lang, settings, request.concurrency)
    completed = sum(1 for i in items if i.status.value == "completed")
    return {"total": len(items), "completed": completed, "items": [i.to_dict() for i in items]}


@app.post("/batch/analyze")
async def batch_analyze(request: BatchRequest):
    """Interaction check for every valid row of a batch CSV."""
    return await _run_batch(request, "analysis")


@app.post("/batch/investigate")
async def batch_investigate(request: BatchRequest):
    return await _run_batch(request, "investigator")


@app.get("/batch/template/{kind}")
def batch_template(kind: str, lang: str = "es"):
    lang = normalize_lang(lang)
    return _csv_response(batch_template_csv(kind, lang), f"batch_template_{kind}.csv")


@app.get("/history/{user_id}")
def history(user_id: str):
    return {"history": [h.to_dict() for h in database.get_history(user_id)]}


@app.delete("/history/{user_id}")
def clear_history(user_id: str):
    database.clear_history(user_id)
    return {"status": "cleared"}


@app.get("/history/{user_id}/export.csv")
def export_history(user_id: str, lang: str = "es"):
    lang = normalize_lang(lang)
    return _csv_response(history_to_csv(database.get_history(user_id), lang), "history.csv")


@app.get("/investigations/{user_id}")
def investigations(user_id: str):
    return {"investigations": [i.to_dict() for i in database.get_investigations(user_id)]}


@app.get("/patients/{user_id}")
def patients(user_id: str):
    return {"patients": [p.to_dict() for p in database.get_patient_profiles(user_id)]}


@app.post("/patients/{user_id}")
def save_patient(user_id: str, request: PatientRequest):
    return save_profile_from_form(user_id, request.to_patient()).to_dict()


@app.delete("/patients/{user_id}/{patient_id}")
def delete_patient(user_id: str, patient_id: str):
    database.delete_patient_profile(user_id, patient_id)
    return {"status": "deleted", "id": patient_id}


@app.post("/export/csv")
def export_csv(request: ExportRequest):
    lang = normalize_lang(request.lang)
    result = AnalysisResult.from_dict(request.result)
    patient_id = request.patient_info.get("id") or "Anon"
    return _csv_response(result_to_csv(result, lang), f"analysis_{patient_id}.csv")


@app.post("/export/pdf")
def export_pdf(request: ExportRequest):
    lang = normalize_lang(request.lang)
    if request.kind == "analysis":
        data = AnalysisResult.from_dict(request.result)
    elif request.kind == "investigator":
        data = InvestigatorResult.from_dict(request.result)
    else:
        raise ValueError(f"Unknown report kind: {request.kind!r}")
    pdf = generate_clinical_pdf(request.kind, data, lang, request.patient_info)
    filename = pdf_filename(request.kind, request.patient_info.get("id"), lang)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/dashboard/{user_id}")
def dashboard(user_id: str, lang: str = "es"):
    history_items = database.get_history(user_id)
    lang = normalize_lang(lang)
    return {"analysis": analysis_stats(history_items, lang), "patients": patient_stats(history_items)}


@app.get("/dashboard/{user_id}/export.csv")
def export_dashboard(user_id: str, tab: str = "analysis", lang: str = "es"):
    lang = normalize_lang(lang)
    history_items = database.get_history(user_id)
    stats = analysis_stats(history_items, lang) if tab == "analysis" else patient_stats(history_items)
    return _csv_response(dashboard_to_csv(stats, tab, lang), f"dashboard_{tab}.csv")


@app.get("/settings")
def get_settings():
    return database.get_system_settings().to_dict()


@app.put("/settings")
def put_settings(settings: Dict[str, Any]):
    parsed = SystemSettings.from_dict(settings)
    database.save_system_settings(parsed)
    logger.info("⚙️  System settings updated")
    return parsed.to_dict()


if __name__ == "__main__":
    uvicorn.run(
        "API:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
