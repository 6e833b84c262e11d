"""
Canonicalize form input

Purpose: turn the free-text fields a clinician types (or a batch CSV carries) into clean lists and
canonical generic drug names.

Input: raw strings such as "Sintrom (4mg, 1/day); Amiodarone", "penicillin, sulfa".

Output: Medication records, trimmed token lists, lower-case generics.

Example: resolve_to_generic("Adiro 100") -> "aspirin"

Notes: brand resolution is a pure lookup against catalog.DRUG_SYNONYMS; no network call.
"""
import re
from typing import List

from catalog import DRUG_SYNONYMS
from schemas import Medication

_MED_WITH_DETAILS = re.compile(r"([^()]+)\s*\(([^)]+)\)")


def split_list(text: str, sep: str = ",") -> List[str]:
    """Split, trim and drop empty entries."""
    if not text:
        return []
    return [part.strip() for part in text.split(sep) if part.strip()]


def parse_medication_list(raw: str) -> List[Medication]:
    """
    Parse "Name (dosage, frequency); Name" into Medication records.

    The first comma inside the parentheses separates dosage from frequency;
    anything after it stays in the frequency.
    """
    medications = []
    for entry in split_list(raw, ";"):
        match = _MED_WITH_DETAILS.match(entry)
        if match:
            name = match.group(1).strip()
            details = [d.strip() for d in match.group(2).split(",")]
            dosage = details[0] if details else ""
            frequency = ", ".join(details[1:]).strip()
            medications.append(Medication(name=name, dosage=dosage, frequency=frequency))
        else:
            medications.append(Medication(name=entry))
    return medications


def format_medication_list(medications: List[Medication]) -> str:
    """Inverse of parse_medication_list."""
    return "; ".join(m.display() for m in medications if m.name)


def resolve_to_generic(name: str) -> str:
    """
    Map a brand or local-language name to its lower-case generic.

    Exact synonym hit first, then the first brand contained in the name,
    otherwise the lower-cased name itself.
    """
    lower = (name or "").strip().lower()
    if not lower:
        return ""
    if lower in DRUG_SYNONYMS:
        return DRUG_SYNONYMS[lower]
    for brand, generic in DRUG_SYNONYMS.items():
        if brand in lower:
            return generic
    return lower


def add_unique(list_text: str, value: str, sep: str = ",") -> str:
    """Append value to a separated list unless it is already there (case-insensitive)."""
    value = (value or "").strip()
    items = split_list(list_text, sep)
    if not value or value.lower() in (item.lower() for item in items):
        return f"{sep} ".join(items)
    items.append(value)
    return f"{sep} ".join(items)


def format_pgx_factor(gene: str, variant: str = "", status: str = "") -> str:
    """GENE (variant): status, dropping the parts that are empty."""
    text = gene.strip()
    if variant and variant.strip():
        text += f" ({variant.strip()})"
    if status and status.strip():
        text += f": {status.strip()}"
    return text


def add_pgx_factor(list_text: str, factor: str) -> str:
    factor = (factor or "").strip()
    items = split_list(list_text, ";")
    if factor and factor not in items:
        items.append(factor)
    return "; ".join(items)
