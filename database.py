"""
MongoDB connection and document helpers.

`db` is only set when MONGO_URI is configured; helpers also accept an explicit
database handle so other stores (and tests) can be plugged in.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient

from catalog import collection_for
from config import DATABASE_NAME, MONGO_URI
from schemas import OrderCounter, User

logger = logging.getLogger(__name__)

client = None
db = None

if MONGO_URI:
    client = MongoClient(MONGO_URI)
    db = client.get_default_database(DATABASE_NAME)


def get_database(database=None):
    if database is not None:
        return database
    if db is None:
        raise RuntimeError("Database not configured: set MONGO_URI")
    return db


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]], database=None) -> str:
    """Insert one document, stamping created_at/updated_at, and return its id."""
    target = get_database(database)
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = dict(data)
    now = datetime.now(timezone.utc)
    data_dict["created_at"] = now
    data_dict["updated_at"] = now
    result = target[collection_name].insert_one(data_dict)
    logger.debug("inserted %s into %s", result.inserted_id, collection_name)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None, database=None) -> List[Dict[str, Any]]:
    cursor = get_database(database)[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def ensure_indexes(database=None):
    """Create the indexes the catalog relies on and seed the order counter.

    users.email must be unique. The single ordercounter record is created here,
    once, so that increments never race to insert it.
    """
    target = get_database(database)
    target[collection_for(User)].create_index([("email", ASCENDING)], unique=True)
    logger.info("ensured unique index on users.email")
    seeded = target[collection_for(OrderCounter)].update_one(
        {}, {"$setOnInsert": OrderCounter().model_dump()}, upsert=True
    )
    if seeded.upserted_id is not None:
        logger.info("seeded order counter %s", seeded.upserted_id)
