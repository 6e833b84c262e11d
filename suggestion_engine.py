"""
Suggestion engine (autocomplete)

Purpose: score a typed query against the curated local catalog and the NLM Clinical Tables API, merge
both result sets and return the top matches ranked for an autocomplete dropdown.

Input: kind ("medication" | "supplement" | "condition") + the text typed so far.

Output: List[Suggestion], best score first.

Example: suggest("medication", "warf", include_remote=False) -> [Suggestion(term="Warfarin", ...)]
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any

import requests
from rapidfuzz import fuzz

import cache
import config
from catalog import COMMON_CONDITIONS, DRUG_DATABASE, DRUG_SYNONYMS, SUPPLEMENT_DATABASE, find_drug

logger = logging.getLogger(__name__)

KINDS = ("medication", "supplement", "condition")

# kind -> Clinical Tables search path (supplements have no remote table)
REMOTE_TABLES = {
    "medication": "/rxterms/v3/search",
    "condition": "/conditions/v3/search",
}

_WORD_SPLIT = re.compile(r"[\s/(),\-]+")


@dataclass
class Suggestion:
    term: str
    score: float
    source: str                      # "local" | "remote"
    kind: str
    generic: str | None = None       # set on brand entries
    dosage: str | None = None
    frequency: str | None = None
    category: str | None = None      # supplement type

    @property
    def rank_score(self) -> float:
        if self.source == "local":
            return self.score + config.SUGGEST_LOCAL_BONUS
        return self.score

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def _display(name: str) -> str:
    return name[:1].upper() + name[1:]


# ============================================
# LOCAL INDEX
# ============================================

def _local_entries(kind: str) -> list[dict[str, Any]]:
    """Catalog rows for one kind, as Suggestion keyword arguments (minus score)."""
    if kind == "medication":
        entries = [
            {
                "term": _display(drug["name"]),
                "dosage": drug.get("commonDosage"),
                "frequency": drug.get("commonFrequency"),
            }
            for drug in DRUG_DATABASE
        ]
        for brand, generic in DRUG_SYNONYMS.items():
            drug = find_drug(generic)
            entries.append({
                "term": _display(brand),
                "generic": generic,
                "dosage": drug.get("commonDosage"),
                "frequency": drug.get("commonFrequency"),
            })
        return entries

    if kind == "supplement":
        return [{"term": s["name"], "category": s["type"]} for s in SUPPLEMENT_DATABASE]

    return [{"term": c} for c in COMMON_CONDITIONS]


# ============================================
# SCORING
# ============================================

def score_match(query: str, term: str) -> float:
    """
    Score how well a term matches a typed query, in [0, 1].

    exact 1.0 > prefix 0.9..1.0 > word prefix 0.8 > substring 0.7,
    otherwise rapidfuzz similarity scaled into [0, 0.65].
    """
    q = query.strip().lower()
    t = term.strip().lower()
    if not q or not t:
        return 0.0
    if t == q:
        return 1.0
    if t.startswith(q):
        return 0.9 + 0.1 * (len(q) / len(t))

    words = [w for w in _WORD_SPLIT.split(t) if w]
    if any(w.startswith(q) for w in words):
        return 0.8
    if q in t:
        return 0.7

    # typo tolerance: best of whole-term and per-word similarity
    similarity = max([fuzz.ratio(q, t)] + [fuzz.ratio(q, w) for w in words])
    return (similarity / 100.0) * 0.65


# ============================================
# REMOTE LOOKUP
# ============================================

def fetch_remote_terms(kind: str, query: str) -> list[str]:
    """
    Display names from the Clinical Tables API for kinds that have a remote table.

    The response body is [total, codes, extra, display_rows]; each display row
    is a list whose first cell is the display name. Failures return [] and are
    not cached, so the next keystroke retries.
    """
    path = REMOTE_TABLES.get(kind)
    if path is None:
        return []

    cached = cache.get_cached_suggestions(kind, query)
    if cached is not None:
        return cached

    url = config.CLINICAL_TABLES_BASE + path
    params = {"terms": query, "maxList": config.SUGGEST_REMOTE_POOL}
    if kind == "condition":
        params["df"] = "primary_name"

    try:
        response = requests.get(url, params=params, timeout=config.SUGGEST_REMOTE_TIMEOUT)
        response.raise_for_status()
        body = response.json()
    except (requests.exceptions.RequestException, ValueError) as exc:
        logger.warning(f"Remote suggestions for {kind} {query!r} failed: {exc}")
        return []

    terms: list[str] = []
    rows = body[3] if isinstance(body, list) and len(body) > 3 and isinstance(body[3], list) else []
    for row in rows:
        if isinstance(row, list) and row:
            name = str(row[0]).strip()
        elif isinstance(row, str):
            name = row.strip()
        else:
            continue
        if name:
            terms.append(name)

    cache.save_cached_suggestions(kind, query, terms)
    logger.debug(f"Remote {kind} suggestions for {query!r}: {len(terms)}")
    return terms


# ============================================
# MERGE & RANK
# ============================================

def _merge(candidates: dict[str, Suggestion], suggestion: Suggestion) -> None:
    """Keep one suggestion per case-insensitive term: higher score wins, local wins ties."""
    key = suggestion.term.lower()
    existing = candidates.get(key)
    if existing is None:
        candidates[key] = suggestion
        return
    if suggestion.score > existing.score:
        candidates[key] = suggestion
    elif suggestion.score == existing.score and suggestion.source == "local" and existing.source != "local":
        candidates[key] = suggestion


def suggest(
    kind: str,
    query: str,
    include_remote: bool = True,
    limit: int | None = None,
) -> list[Suggestion]:
    """
    Ranked autocomplete suggestions.

    Steps
    -----
    1. Reject queries shorter than SUGGEST_MIN_QUERY.
    2. Score every local catalog entry for the kind.
    3. Score remote Clinical Tables terms (medication/condition only).
    4. Drop anything under SUGGEST_MIN_SCORE, dedupe by term.
    5. Sort by score (local tie-break bonus) then term, truncate.
    """
    if kind not in KINDS:
        raise ValueError(f"Unknown suggestion kind: {kind!r}")

    q = (query or "").strip()
    if len(q) < config.SUGGEST_MIN_QUERY:
        return []

    limit = limit or config.SUGGEST_MAX_RESULTS
    candidates: dict[str, Suggestion] = {}

    for entry in _local_entries(kind):
        score = score_match(q, entry["term"])
        if score >= config.SUGGEST_MIN_SCORE:
            _merge(candidates, Suggestion(score=score, source="local", kind=kind, **entry))

    if include_remote and config.SUGGEST_REMOTE_ENABLED:
        for term in fetch_remote_terms(kind, q):
            score = score_match(q, term)
            if score >= config.SUGGEST_MIN_SCORE:
                _merge(candidates, Suggestion(term=term, score=score, source="remote", kind=kind))

    ranked = sorted(candidates.values(), key=lambda s: (-s.rank_score, s.term.lower()))
    return ranked[:limit]
