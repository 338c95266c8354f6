"""
MongoDB access layer.

Thin helpers over a pymongo database handle. Each helper touches exactly one
document (or one filtered query); no multi-document transactions are used.
Conditional updates express "only if the document still looks like this" by
merging extra filter conditions into the id lookup.
"""

import os
from datetime import datetime, timezone
from typing import Optional, Union, List, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from dotenv import load_dotenv
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from errors import StoreUnavailable

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

db = None

if DATABASE_URL and DATABASE_NAME:
    try:
        client = MongoClient(DATABASE_URL, serverSelectionTimeoutMS=5000)
        db = client[DATABASE_NAME]
    except PyMongoError:
        db = None


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _collection(collection_name: str):
    if db is None:
        raise StoreUnavailable("Database not configured")
    return db[collection_name]


def _object_id(doc_id) -> Optional[ObjectId]:
    if isinstance(doc_id, ObjectId):
        return doc_id
    try:
        return ObjectId(str(doc_id))
    except (InvalidId, TypeError):
        return None


def to_public(doc: dict):
    """Convert a Mongo document to a JSON-friendly dict with a string `id`."""
    if not doc:
        return doc
    d = {**doc}
    _id = d.pop("_id", None)
    if isinstance(_id, ObjectId):
        d["id"] = str(_id)
    elif _id is not None:
        d["id"] = _id
    return d


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document, stamping server-side created_at/updated_at."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = data.copy()
    stamp = now_utc()
    data_dict["created_at"] = stamp
    data_dict["updated_at"] = stamp
    try:
        result = _collection(collection_name).insert_one(data_dict)
    except PyMongoError as exc:
        raise StoreUnavailable() from exc
    return str(result.inserted_id)


def get_document(collection_name: str, doc_id) -> Optional[dict]:
    oid = _object_id(doc_id)
    if oid is None:
        return None
    try:
        return _collection(collection_name).find_one({"_id": oid})
    except PyMongoError as exc:
        raise StoreUnavailable() from exc


def get_documents(
    collection_name: str,
    filter_dict: Optional[dict] = None,
    limit: Optional[int] = None,
    sort: Optional[List[Tuple[str, int]]] = None,
) -> List[dict]:
    try:
        cursor = _collection(collection_name).find(filter_dict or {})
        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)
    except PyMongoError as exc:
        raise StoreUnavailable() from exc


def update_document(
    collection_name: str,
    doc_id,
    ops: dict,
    conditions: Optional[dict] = None,
) -> bool:
    """Apply atomic field operators to one document.

    Returns True when a document matched both the id and `conditions`.
    """
    oid = _object_id(doc_id)
    if oid is None:
        return False
    ops = {**ops}
    ops["$set"] = {**ops.get("$set", {}), "updated_at": now_utc()}
    try:
        result = _collection(collection_name).update_one({"_id": oid, **(conditions or {})}, ops)
    except PyMongoError as exc:
        raise StoreUnavailable() from exc
    return result.matched_count == 1


def update_documents(collection_name: str, filter_dict: dict, ops: dict) -> int:
    ops = {**ops}
    ops["$set"] = {**ops.get("$set", {}), "updated_at": now_utc()}
    try:
        result = _collection(collection_name).update_many(filter_dict, ops)
    except PyMongoError as exc:
        raise StoreUnavailable() from exc
    return result.modified_count


def delete_document(collection_name: str, doc_id) -> bool:
    oid = _object_id(doc_id)
    if oid is None:
        return False
    try:
        result = _collection(collection_name).delete_one({"_id": oid})
    except PyMongoError as exc:
        raise StoreUnavailable() from exc
    return result.deleted_count == 1
