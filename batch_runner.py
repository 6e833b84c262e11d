"""
Batch runner

Purpose: load a batch CSV, then drain the records through K asyncio workers that each call the
external analysis once per record, tracking a per-record status: pending -> analyzing -> completed | error.

Input: CSV text + batch kind ("analysis" | "investigator"), user id, language, optional concurrency.

Output: List[BatchItem] in input order, every item in a terminal status.

Example: await run_batch(load_batch_csv(text, "analysis"), "analysis", "demo-user") -> [BatchItem(status=COMPLETED, ...), ...]

Notes: records are never cancelled or retried; completion order across records is not fixed.
"""

from __future__ import annotations

import asyncio
import csv
import io
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import config
from normalizer import parse_medication_list, split_list
from schemas import PatientInput, SystemSettings

logger = logging.getLogger(__name__)

# ============================================
# CSV LAYOUT
# ============================================

BATCH_KINDS = ("analysis", "investigator")

REQUIRED_HEADERS: dict[str, list[str]] = {
    "analysis": [
        "patient_id", "medications", "date_of_birth", "allergies",
        "other_substances", "pharmacogenetics", "conditions",
    ],
    "investigator": [
        "patient_id", "symptoms", "medications", "date_of_birth",
        "conditions", "pharmacogenetics", "allergies",
    ],
}

# rows missing any of these are skipped
MANDATORY_FIELDS: dict[str, list[str]] = {
    "analysis": ["patient_id", "medications", "conditions"],
    "investigator": ["patient_id", "symptoms", "medications"],
}

DEFAULT_CONCURRENCY = {
    "analysis": config.BATCH_CONCURRENCY_ANALYSIS,
    "investigator": config.BATCH_CONCURRENCY_INVESTIGATOR,
}

_LIST_SEPARATORS = re.compile(r"[;,]")


class BatchFileError(ValueError):
    """The batch CSV cannot be parsed or lacks required columns."""

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        super().__init__(message)
        self.missing = missing or []


def load_batch_csv(text: str, kind: str) -> list[dict[str, str]]:
    """
    Parse a batch CSV and keep the rows that carry every mandatory field.

    Raises
    ------
    BatchFileError
        unknown kind, unparsable CSV, or missing required columns
        (the message lists them).
    """
    if kind not in BATCH_KINDS:
        raise BatchFileError(f"Unknown batch kind: {kind!r}")

    text = (text or "").lstrip("\ufeff")
    try:
        reader = csv.DictReader(io.StringIO(text))
        fieldnames = [(name or "").strip() for name in (reader.fieldnames or [])]
        rows = list(reader)
    except csv.Error as exc:
        raise BatchFileError(f"Could not parse CSV: {exc}") from exc

    missing = [h for h in REQUIRED_HEADERS[kind] if h not in fieldnames]
    if missing:
        raise BatchFileError(f"Missing required columns: {', '.join(missing)}", missing)

    records = []
    for raw in rows:
        record = {
            (key or "").strip(): (value or "").strip() if isinstance(value, str) else ""
            for key, value in raw.items()
            if key is not None
        }
        if all(record.get(f) for f in MANDATORY_FIELDS[kind]):
            records.append(record)

    skipped = len(rows) - len(records)
    if skipped:
        logger.info(f"Skipped {skipped} CSV row(s) without {'/'.join(MANDATORY_FIELDS[kind])}")
    return records


def _normalize_list(text: str) -> str:
    """Batch files separate allergies with ';' or ','; the form uses ', '."""
    return ", ".join(p.strip() for p in _LIST_SEPARATORS.split(text or "") if p.strip())


def record_to_patient(record: dict[str, str]) -> PatientInput:
    return PatientInput(
        medications=parse_medication_list(record.get("medications", "")),
        allergies=_normalize_list(record.get("allergies", "")),
        other_substances=", ".join(split_list(record.get("other_substances", ""), ";")),
        conditions=record.get("conditions", ""),
        date_of_birth=record.get("date_of_birth", ""),
        pharmacogenetics=record.get("pharmacogenetics", ""),
        patient_id=record.get("patient_id") or None,
    )


# ============================================
# RUNNER
# ============================================

class BatchStatus(str, Enum):
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (BatchStatus.COMPLETED, BatchStatus.ERROR)


@dataclass
class BatchItem:
    record: dict[str, str]
    status: BatchStatus = BatchStatus.PENDING
    result: Any = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result = self.result.to_dict() if hasattr(self.result, "to_dict") else self.result
        return {
            "patientId": self.record.get("patient_id"),
            "status": self.status.value,
            "result": result,
            "error": self.error,
        }


Worker = Callable[[dict[str, str]], Awaitable[Any]]
UpdateCallback = Callable[[int, BatchItem], None]


class BatchRunner:
    """
    Drains records through `concurrency` workers sharing one asyncio.Queue.

    Items are tracked by position, so duplicate patient ids never collide.
    on_update(index, item) fires on every status change.
    """

    def __init__(self, worker: Worker, concurrency: int, on_update: Optional[UpdateCallback] = None):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.worker = worker
        self.concurrency = concurrency
        self.on_update = on_update
        self.items: list[BatchItem] = []

    def _set(self, index: int, status: BatchStatus, result: Any = None, error: Optional[str] = None) -> None:
        item = self.items[index]
        item.status = status
        item.result = result
        item.error = error
        if self.on_update is not None:
            self.on_update(index, item)

    async def _process(self, index: int) -> None:
        item = self.items[index]
        self._set(index, BatchStatus.ANALYZING)
        try:
            result = await self.worker(item.record)
        except Exception as exc:
            logger.warning(f"❌ Batch record {index} ({item.record.get('patient_id')}) failed: {exc}")
            self._set(index, BatchStatus.ERROR, error=str(exc) or exc.__class__.__name__)
            return
        self._set(index, BatchStatus.COMPLETED, result=result)

    async def _drain(self, queue: asyncio.Queue) -> None:
        while True:
            try:
                index = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            await self._process(index)

    async def run(self, records: list[dict[str, str]]) -> list[BatchItem]:
        """Process every record once; returns when all items are terminal."""
        self.items = [BatchItem(record=record) for record in records]
        if not self.items:
            return self.items

        queue: asyncio.Queue = asyncio.Queue()
        for index in range(len(self.items)):
            queue.put_nowait(index)

        n_workers = min(self.concurrency, len(self.items))
        logger.info(f"Batch of {len(self.items)} record(s) with {n_workers} worker(s)")
        await asyncio.gather(*(self._drain(queue) for _ in range(n_workers)))

        done, total = self.progress()
        errors = sum(1 for i in self.items if i.status is BatchStatus.ERROR)
        logger.info(f"Batch finished: {done}/{total} done, {errors} error(s)")
        return self.items

    def progress(self) -> tuple[int, int]:
        done = sum(1 for item in self.items if item.status.is_terminal)
        return done, len(self.items)


# ============================================
# WORKER FACTORIES
# ============================================

def make_analysis_worker(
    user_id: str,
    lang: str = "es",
    settings: Optional[SystemSettings] = None,
    analyze: Optional[Callable[..., Any]] = None,
) -> Worker:
    """
    Worker that runs one interaction check per record and persists its history item.

    `analyze(profile, user_id, lang, settings)` defaults to UI_main.analyze_patient and
    runs in a thread so the blocking HTTP call does not stall the loop.
    """
    if analyze is None:
        from UI_main import analyze_patient as analyze

    async def worker(record: dict[str, str]) -> Any:
        profile = record_to_patient(record)
        return await asyncio.to_thread(analyze, profile, user_id, lang, settings)

    return worker


def make_investigator_worker(
    user_id: str,
    lang: str = "es",
    investigate: Optional[Callable[..., Any]] = None,
) -> Worker:
    if investigate is None:
        from UI_main import investigate_patient as investigate

    async def worker(record: dict[str, str]) -> Any:
        profile = record_to_patient(record)
        return await asyncio.to_thread(investigate, record.get("symptoms", ""), profile, user_id, lang)

    return worker


async def run_batch(
    records: list[dict[str, str]],
    kind: str,
    user_id: str,
    lang: str = "es",
    settings: Optional[SystemSettings] = None,
    concurrency: Optional[int] = None,
    on_update: Optional[UpdateCallback] = None,
) -> list[BatchItem]:
    """One entry point for both batch kinds."""
    if kind == "analysis":
        worker = make_analysis_worker(user_id, lang, settings)
    elif kind == "investigator":
        worker = make_investigator_worker(user_id, lang)
    else:
        raise BatchFileError(f"Unknown batch kind: {kind!r}")

    if concurrency is None:
        concurrency = DEFAULT_CONCURRENCY[kind]
    runner = BatchRunner(worker, concurrency, on_update)
    return await runner.run(records)
