"""
Persistence adapter

Purpose: store history, investigations, patient profiles and system settings. The demo user id routes to
JSON files on local disk; every other user routes to the hosted document database over REST.

Input: user id + typed records (HistoryItem, InvestigatorHistoryItem, PatientProfile, SystemSettings).

Output: typed records, newest first.

Example: save_history_item("demo-user", item) -> storage/demo_history.json gains the item at the front.

Notes: last write wins on both backends. Remote reads degrade to [] on failure; writes raise StorageError.
"""
import json
import logging
import os
import threading
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests

import config
from schemas import (
    HistoryItem,
    InvestigatorHistoryItem,
    PatientProfile,
    SystemSettings,
    timestamp_from_id,
)

logger = logging.getLogger(__name__)

DEMO_USER_ID = config.DEMO_USER_ID


class StorageError(Exception):
    """A write to local or remote storage failed."""


# ═════════════════════════════════════════════════════════════
# BACKENDS
# ═════════════════════════════════════════════════════════════

class LocalStore:
    """One JSON file per storage key under base_dir."""

    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        self._lock = threading.RLock()

    def _path(self, key: str) -> str:
        return os.path.join(self.base_dir, f"{key}.json")

    def read(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        with self._lock:
            if not os.path.exists(path):
                return default
            try:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Error reading local data {path}: {e}")
                return default

    def write(self, key: str, data: Any) -> None:
        path = self._path(key)
        tmp_path = path + ".tmp"
        with self._lock:
            try:
                os.makedirs(self.base_dir, exist_ok=True)
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, path)
            except OSError as e:
                raise StorageError(f"Could not write {path}: {e}") from e

    def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """Read-modify-write under the store lock."""
        with self._lock:
            data = fn(self.read(key, default))
            self.write(key, data)
            return data


class DocumentStore:
    """
    Thin REST client for the hosted document database.

    Layout: {base_url}/users/{uid}/{collection}/{doc_id}. A collection GET returns
    either a JSON list of documents or {"documents": [...]}.
    """

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 15):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, user_id: str, collection: str, doc_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/users/{quote(user_id, safe='')}/{collection}"
        if doc_id is not None:
            url += "/" + quote(doc_id, safe="")
        return url

    def list_documents(self, user_id: str, collection: str) -> List[Dict[str, Any]]:
        response = requests.get(
            self._url(user_id, collection), headers=self._headers(), timeout=self.timeout
        )
        response.raise_for_status()
        body = response.json()
        if isinstance(body, dict):
            body = body.get("documents") or []
        return [doc for doc in body if isinstance(doc, dict)]

    def put(self, user_id: str, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        try:
            response = requests.put(
                self._url(user_id, collection, doc_id),
                json=data, headers=self._headers(), timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise StorageError(f"Could not save {collection}/{doc_id}: {e}") from e

    def delete(self, user_id: str, collection: str, doc_id: str) -> None:
        try:
            response = requests.delete(
                self._url(user_id, collection, doc_id),
                headers=self._headers(), timeout=self.timeout,
            )
            if response.status_code != 404:
                response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise StorageError(f"Could not delete {collection}/{doc_id}: {e}") from e


_local: Optional[LocalStore] = None
_remote: Optional[DocumentStore] = None


def get_local_store() -> LocalStore:
    global _local
    if _local is None:
        _local = LocalStore(config.LOCAL_STORAGE_DIR)
    return _local


def get_document_store() -> DocumentStore:
    global _remote
    if _remote is None:
        logger.info(f"Using document database at {config.DOCUMENT_DB_URL}")
        _remote = DocumentStore(
            config.DOCUMENT_DB_URL, config.DOCUMENT_DB_TOKEN, config.DOCUMENT_DB_TIMEOUT
        )
    return _remote


def is_demo_user(user_id: str) -> bool:
    return user_id == DEMO_USER_ID


def _remote_list(user_id: str, collection: str) -> List[Dict[str, Any]]:
    try:
        return get_document_store().list_documents(user_id, collection)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Error getting {collection} for {user_id}: {e}")
        return []


def _upsert_front(key: str, doc: Dict[str, Any]) -> None:
    def apply(items):
        items = items if isinstance(items, list) else []
        return [doc] + [i for i in items if i.get("id") != doc.get("id")]
    get_local_store().update(key, apply, [])


def _newest_first(items: List[Any]) -> List[Any]:
    return sorted(items, key=lambda i: timestamp_from_id(i.id), reverse=True)


# ═════════════════════════════════════════════════════════════
# HISTORY
# ═════════════════════════════════════════════════════════════

def save_history_item(user_id: str, item: HistoryItem) -> None:
    if is_demo_user(user_id):
        _upsert_front(config.STORAGE_KEY_HISTORY, item.to_dict())
        return
    get_document_store().put(user_id, "history", item.id, item.to_dict())


def get_history(user_id: str) -> List[HistoryItem]:
    if is_demo_user(user_id):
        raw = get_local_store().read(config.STORAGE_KEY_HISTORY, []) or []
    else:
        raw = _remote_list(user_id, "history")
    return _newest_first([HistoryItem.from_dict(d) for d in raw if isinstance(d, dict)])


def clear_history(user_id: str) -> None:
    if is_demo_user(user_id):
        get_local_store().write(config.STORAGE_KEY_HISTORY, [])
        return
    store = get_document_store()
    try:
        docs = store.list_documents(user_id, "history")
    except (requests.exceptions.RequestException, ValueError) as e:
        raise StorageError(f"Could not list history for {user_id}: {e}") from e
    for doc in docs:
        if doc.get("id"):
            store.delete(user_id, "history", doc["id"])


def save_investigation(user_id: str, item: InvestigatorHistoryItem) -> None:
    if is_demo_user(user_id):
        _upsert_front(config.STORAGE_KEY_INVESTIGATIONS, item.to_dict())
        return
    get_document_store().put(user_id, "investigations", item.id, item.to_dict())


def get_investigations(user_id: str) -> List[InvestigatorHistoryItem]:
    if is_demo_user(user_id):
        raw = get_local_store().read(config.STORAGE_KEY_INVESTIGATIONS, []) or []
    else:
        raw = _remote_list(user_id, "investigations")
    return _newest_first([InvestigatorHistoryItem.from_dict(d) for d in raw if isinstance(d, dict)])


# ═════════════════════════════════════════════════════════════
# PATIENT PROFILES
# ═════════════════════════════════════════════════════════════

def save_patient_profile(user_id: str, profile: PatientProfile) -> None:
    if is_demo_user(user_id):
        doc = profile.to_dict()

        def apply(profiles):
            profiles = profiles if isinstance(profiles, list) else []
            for idx, existing in enumerate(profiles):
                if existing.get("id") == profile.id:
                    profiles[idx] = doc
                    return profiles
            profiles.append(doc)
            return profiles

        get_local_store().update(config.STORAGE_KEY_PATIENTS, apply, [])
        return
    get_document_store().put(user_id, "patients", profile.id, profile.to_dict())


def get_patient_profiles(user_id: str) -> List[PatientProfile]:
    if is_demo_user(user_id):
        raw = get_local_store().read(config.STORAGE_KEY_PATIENTS, []) or []
    else:
        raw = _remote_list(user_id, "patients")
    profiles = [PatientProfile.from_dict(d) for d in raw if isinstance(d, dict)]
    return sorted(profiles, key=lambda p: timestamp_from_id(p.last_updated), reverse=True)


def delete_patient_profile(user_id: str, patient_id: str) -> None:
    if is_demo_user(user_id):
        get_local_store().update(
            config.STORAGE_KEY_PATIENTS,
            lambda profiles: [p for p in (profiles or []) if p.get("id") != patient_id],
            [],
        )
        return
    get_document_store().delete(user_id, "patients", patient_id)


# ═════════════════════════════════════════════════════════════
# SYSTEM SETTINGS
# ═════════════════════════════════════════════════════════════

def get_system_settings() -> SystemSettings:
    """System-wide settings live in local storage for every user."""
    raw = get_local_store().read(config.STORAGE_KEY_SETTINGS, {})
    return SystemSettings.from_dict(raw or {})


def save_system_settings(settings: SystemSettings) -> None:
    get_local_store().write(config.STORAGE_KEY_SETTINGS, settings.to_dict())
