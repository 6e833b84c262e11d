"""
LLM CLIENT - GROUNDED INTERACTION ANALYSIS
Calls the Gemini generateContent REST endpoint with Google Search grounding
and turns the reply into typed results.

STEP 1: Prompt building (prompt_builder.py)
STEP 2: generateContent call with the google_search tool
STEP 3: Parsing of the marked JSON block + narrative (parser.py)

Purpose:
- Analyze a patient profile for interactions and contraindications
- Investigate the probable drug-related cause of a symptom
- Surface a missing/rejected key distinctly from other failures
"""
from typing import Any, Dict, List, Optional, Tuple
import logging

import requests

import config
from parser import parse_analysis_response, parse_investigator_response
from prompt_builder import build_interaction_prompt, build_investigator_prompt, system_instruction
from schemas import AnalysisResult, InvestigatorResult, Medication, PatientInput, SystemSettings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base class for generative-AI failures."""


class ApiKeyError(LLMError):
    """The API key is missing or was rejected by the provider."""


class LLMServiceError(LLMError):
    """Transport failure, non-2xx reply or empty reply."""


# ═════════════════════════════════════════════════════════════
# TRANSPORT
# ═════════════════════════════════════════════════════════════

def get_api_key() -> Optional[str]:
    key = config.API_KEY
    if not key or key.strip() in ("", "undefined", "null"):
        return None
    return key.strip()


def _is_key_rejection(response: requests.Response) -> bool:
    if response.status_code in (401, 403):
        return True
    return response.status_code == 400 and "api key" in response.text.lower()


def generate_content(prompt: str, system_text: str) -> Tuple[str, List[Dict[str, Any]]]:
    """
    POST one prompt to generateContent.

    Returns:
        (full response text, grounding chunks)
    """
    api_key = get_api_key()
    if api_key is None:
        raise ApiKeyError("API key is missing. Set API_KEY in the environment or .env file.")

    url = config.LLM_ENDPOINT.format(model=config.LLM_MODEL)
    headers = {
        "Content-Type": "application/json",
        "x-goog-api-key": api_key,
    }
    payload = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "systemInstruction": {"parts": [{"text": system_text}]},
        "tools": [{"google_search": {}}],
        "generationConfig": {"temperature": config.LLM_TEMPERATURE},
    }

    try:
        response = requests.post(url, json=payload, headers=headers, timeout=config.LLM_TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise LLMServiceError(f"LLM request failed: {e}") from e

    if _is_key_rejection(response):
        raise ApiKeyError(f"API key rejected by provider (HTTP {response.status_code}).")
    if not response.ok:
        raise LLMServiceError(f"LLM returned HTTP {response.status_code}: {response.text[:200]}")

    try:
        data = response.json()
    except ValueError as e:
        raise LLMServiceError(f"LLM returned a non-JSON body: {e}") from e

    candidates = data.get("candidates") or []
    if not candidates:
        raise LLMServiceError("LLM returned no candidates.")

    candidate = candidates[0]
    parts = (candidate.get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    if not text.strip():
        raise LLMServiceError("LLM returned an empty response.")

    grounding = (candidate.get("groundingMetadata") or {}).get("groundingChunks") or []
    logger.info(f"LLM reply: {len(text)} chars, {len(grounding)} grounding chunks")
    return text, grounding


# ═════════════════════════════════════════════════════════════
# PUBLIC CALLS
# ═════════════════════════════════════════════════════════════

def analyze_interactions(
    profile: PatientInput,
    lang: str = "es",
    settings: Optional[SystemSettings] = None,
) -> AnalysisResult:
    """
    Full interaction analysis: prompt -> generateContent -> parsed result.

    Raises:
        ApiKeyError: key missing or rejected
        LLMServiceError: any other failure of the call
    """
    prompt = build_interaction_prompt(profile, lang, settings)
    logger.info(f"Analyzing {len(profile.medications)} medications (prompt {len(prompt)} chars)")
    text, grounding = generate_content(prompt, system_instruction("analysis", lang))
    return parse_analysis_response(text, grounding)


def investigate_symptoms(
    symptoms: str,
    medications: List[Medication],
    conditions: str = "",
    date_of_birth: str = "",
    pharmacogenetics: str = "",
    allergies: str = "",
    lang: str = "es",
) -> InvestigatorResult:
    prompt = build_investigator_prompt(
        symptoms, medications, conditions, date_of_birth, pharmacogenetics, allergies, lang
    )
    logger.info(f"Investigating symptoms against {len(medications)} medications")
    text, grounding = generate_content(prompt, system_instruction("investigator", lang))
    return parse_investigator_response(text, grounding)
