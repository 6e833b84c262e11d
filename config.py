"""
Central configuration

Purpose: single source of truth for endpoints, API keys, storage locations, concurrency limits,
suggestion thresholds and default params.

Input: environment variables (optionally from a .env file next to this module).

Output: variables used by other modules (strings, numbers).

Example: LLM_MODEL -> "gemini-3-pro-preview", BATCH_CONCURRENCY_ANALYSIS -> 5
"""
import os

from dotenv import load_dotenv

env_path = os.path.join(os.path.dirname(__file__), '.env')
load_dotenv(dotenv_path=env_path)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Generative AI
API_KEY = os.getenv("API_KEY")
LLM_MODEL = os.getenv("LLM_MODEL", "gemini-3-pro-preview")
LLM_ENDPOINT = os.getenv(
    "LLM_ENDPOINT",
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
)
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "120"))
LLM_TEMPERATURE = 0.2

# Hosted document database (non-demo users)
DOCUMENT_DB_URL = os.getenv("DOCUMENT_DB_URL", "http://localhost:8080/v1")
DOCUMENT_DB_TOKEN = os.getenv("DOCUMENT_DB_TOKEN")
DOCUMENT_DB_TIMEOUT = 15

# Local storage fallback (demo user)
DEMO_USER_ID = "demo-user"
LOCAL_STORAGE_DIR = os.getenv("LOCAL_STORAGE_DIR", "storage/")
STORAGE_KEY_HISTORY = "demo_history"
STORAGE_KEY_INVESTIGATIONS = "demo_investigations"
STORAGE_KEY_PATIENTS = "demo_patients"
STORAGE_KEY_SETTINGS = "system_config"

# Audit traces
AUDIT_LOG_DIR = os.getenv("AUDIT_LOG_DIR", "logs/")
AUDIT_ENABLED = _env_bool("AUDIT_ENABLED", True)

# Batch runner
BATCH_CONCURRENCY_ANALYSIS = 5
BATCH_CONCURRENCY_INVESTIGATOR = 2

# Suggestions
CLINICAL_TABLES_BASE = "https://clinicaltables.nlm.nih.gov/api"
SUGGEST_REMOTE_ENABLED = _env_bool("SUGGEST_REMOTE_ENABLED", True)
SUGGEST_REMOTE_TIMEOUT = 4
SUGGEST_MIN_QUERY = 2
SUGGEST_MAX_RESULTS = 8
SUGGEST_REMOTE_POOL = 15
SUGGEST_MIN_SCORE = 0.35
SUGGEST_LOCAL_BONUS = 0.02
SUGGEST_CACHE_TTL = 600

# Locale
DEFAULT_LANG = "es"
SUPPORTED_LANGS = ("es", "en")
