"""
MongoDB wiring

``db`` is a pymongo Database when DATABASE_URL is set, otherwise None and the
API falls back to the in-memory vote store.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database

from config import load_settings

_settings = load_settings()

client: Optional[MongoClient] = None
db: Optional[Database] = None

if _settings.database_url:
    client = MongoClient(_settings.database_url)
    db = client[_settings.database_name]


def _resolve(database: Optional[Database]) -> Database:
    target = database if database is not None else db
    if target is None:
        raise RuntimeError("Database not initialized, set DATABASE_URL")
    return target


def create_document(
    collection_name: str,
    data: Union[BaseModel, Dict[str, Any]],
    database: Optional[Database] = None,
) -> str:
    """Insert a document with created_at/updated_at stamps and return its id as a string."""
    payload = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    now = datetime.now(timezone.utc)
    payload["created_at"] = now
    payload["updated_at"] = now
    result = _resolve(database)[collection_name].insert_one(payload)
    return str(result.inserted_id)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
    sort: Optional[List[Tuple[str, int]]] = None,
    database: Optional[Database] = None,
) -> List[Dict[str, Any]]:
    cursor = _resolve(database)[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
