"""
Sequence numbers for new orders, kept on the single `ordercounter` document.

The document is seeded by database.ensure_indexes(); increments only ever
update it.
"""
import logging

from pymongo import ReturnDocument

from catalog import collection_for
from database import get_database
from errors import NotFoundError, ValidationError
from schemas import OrderCounter

logger = logging.getLogger(__name__)

COUNTERS = tuple(OrderCounter.model_fields)


def next_number(counter: str, database=None) -> int:
    """Atomically bump one counter and return its new value."""
    if counter not in COUNTERS:
        raise ValidationError(f"Unknown counter: {counter}")
    target = get_database(database)[collection_for(OrderCounter)]
    doc = target.find_one_and_update(
        {},
        {"$inc": {counter: 1}},
        sort=[("_id", 1)],
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise NotFoundError("Order counter not seeded: run ensure_indexes() first")
    logger.debug("%s counter now %s", counter, doc[counter])
    return doc[counter]


def current_numbers(database=None) -> OrderCounter:
    target = get_database(database)[collection_for(OrderCounter)]
    doc = target.find_one({}, sort=[("_id", 1)])
    return OrderCounter.model_validate(doc or {})
