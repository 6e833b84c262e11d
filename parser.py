"""
Parse raw LLM output into typed results

Purpose: extract the JSON block between the fixed markers, keep the markdown narrative that follows it,
and collect the grounding sources.

Input: full response text + grounding chunks from the generateContent response.

Output: AnalysisResult / InvestigatorResult.

Example: "[INTERACTION_DATA_START]```json {...}```[INTERACTION_DATA_END]\n### Report" ->
AnalysisResult(analysis_text="### Report", drug_drug_interactions=[...], ...)

Notes: a malformed JSON block never fails the call; the finding lists stay empty and the narrative is kept.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from prompt_builder import CAUSALITY_END, CAUSALITY_START, INTERACTION_END, INTERACTION_START
from schemas import FINDING_CATEGORIES, AnalysisResult, CausalityMatch, InvestigatorResult, Source, to_camel

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```json|```")
_BARE_CAUSES = re.compile(r"\[\s*\{\s*\"cause\"[\s\S]*\}\s*\]")


def extract_marked_block(text: str, start: str, end: str) -> Tuple[Optional[str], str]:
    """
    Returns (json_text, narrative).

    json_text is None when either marker is missing; the narrative is then the full text.
    """
    text = text or ""
    start_idx = text.find(start)
    end_idx = text.find(end)
    if start_idx == -1 or end_idx == -1 or end_idx < start_idx:
        return None, text

    json_text = _FENCE.sub("", text[start_idx + len(start):end_idx].strip()).strip()
    narrative = text[end_idx + len(end):].strip()
    return json_text, narrative


def _load_json(json_text: Optional[str]) -> Any:
    if not json_text:
        return None
    try:
        return json.loads(json_text)
    except json.JSONDecodeError as e:
        logger.warning(f"Model returned malformed JSON block: {e}")
        return None


def extract_sources(grounding_chunks: Optional[List[Dict[str, Any]]]) -> List[Source]:
    """Web grounding chunks that carry both a uri and a title."""
    sources = []
    for chunk in grounding_chunks or []:
        web = (chunk or {}).get("web") or {}
        if web.get("uri") and web.get("title"):
            sources.append(Source(uri=web["uri"], title=web["title"]))
    return sources


def parse_analysis_response(
    text: str,
    grounding_chunks: Optional[List[Dict[str, Any]]] = None,
) -> AnalysisResult:
    json_text, narrative = extract_marked_block(text, INTERACTION_START, INTERACTION_END)
    parsed = _load_json(json_text)
    if not isinstance(parsed, dict):
        parsed = {}

    result = AnalysisResult(analysis_text=narrative, sources=extract_sources(grounding_chunks))
    for attr, cls in FINDING_CATEGORIES:
        items = parsed.get(to_camel(attr)) or []
        if not isinstance(items, list):
            items = []
        setattr(result, attr, [cls.from_dict(item) for item in items if isinstance(item, dict)])
    return result


def parse_investigator_response(
    text: str,
    grounding_chunks: Optional[List[Dict[str, Any]]] = None,
) -> InvestigatorResult:
    json_text, narrative = extract_marked_block(text, CAUSALITY_START, CAUSALITY_END)

    raw_matches: Any = []
    if json_text is not None:
        parsed = _load_json(json_text)
        if isinstance(parsed, dict):
            raw_matches = parsed.get("matches") or []
        elif isinstance(parsed, list):
            raw_matches = parsed
    else:
        # older replies put a bare [{"cause": ...}] array in the text
        found = _BARE_CAUSES.search(text or "")
        if found:
            raw_matches = _load_json(found.group(0)) or []

    if not isinstance(raw_matches, list):
        raw_matches = []
    matches = [CausalityMatch.from_dict(m) for m in raw_matches if isinstance(m, dict)]

    return InvestigatorResult(
        analysis_text=narrative,
        sources=extract_sources(grounding_chunks),
        matches=matches,
    )
