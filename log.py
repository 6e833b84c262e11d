"""
Logging & audit utilities

Purpose: configure process-wide logging and persist one trace per analysis for clinician review.

Input: analysis artifacts (kind, user id, patient profile, proactive alerts, prompt size, finding counts, error)

Output: stored JSON traces under AUDIT_LOG_DIR.

Example: creates logs/analysis_20260206_101530_001.json.
"""
import itertools
import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import config

logger = logging.getLogger(__name__)

_counter = itertools.count(1)
_configured = False


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging once; later calls are no-ops."""
    global _configured
    if _configured:
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    _configured = True


def log_analysis(
    kind: str,
    user_id: str,
    patient_id: Optional[str],
    profile: Dict[str, Any],
    alerts: List[Dict[str, Any]],
    prompt_chars: int,
    finding_counts: Dict[str, int],
    error: Optional[str] = None,
    log_dir: Optional[str] = None,
) -> Optional[str]:
    """
    Write an audit trace for one analysis.

    Returns the path of the written file, or None when auditing is disabled
    or the write failed. A failed write never propagates.
    """
    if not config.AUDIT_ENABLED:
        return None

    log_dir = log_dir or config.AUDIT_LOG_DIR
    now = datetime.now()
    file_name = f"{kind}_{now.strftime('%Y%m%d_%H%M%S')}_{next(_counter):03d}.json"
    path = os.path.join(log_dir, file_name)

    trace = {
        "kind": kind,
        "timestamp": now.isoformat(),
        "user_id": user_id,
        "patient_id": patient_id,
        "profile": profile,
        "proactive_alerts": alerts,
        "prompt_chars": prompt_chars,
        "finding_counts": finding_counts,
        "error": error,
    }

    try:
        os.makedirs(log_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(trace, f, ensure_ascii=False, indent=2)
    except OSError as e:
        logger.warning(f"[Audit] Could not write trace {path}: {e}")
        return None

    logger.debug(f"[Audit] Trace written to {path}")
    return path
