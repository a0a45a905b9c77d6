"""
Collection access for catalogued record types.

A Repository validates writes against its pydantic schema and returns stored
records as plain dicts: every declared field, plus `_id` (as a string) and the
`created_at` / `updated_at` stamps added on write.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from catalog import collection_for
from database import create_document, get_database
from errors import NotFoundError, ValidationError
from schemas import HistoryEntry, MileageLog, User
from security import get_password_hash, is_password_hash, verify_password

logger = logging.getLogger(__name__)

# Format used for the free-text status timestamps on orders and inventory
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

STORE_FIELDS = ("created_at", "updated_at")


def validate(schema: Type[BaseModel], data) -> BaseModel:
    try:
        return schema.model_validate(data)
    except SchemaError as e:
        raise ValidationError(f"Invalid {schema.__name__}: {e}", errors=e.errors()) from e


def _plain(value):
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_unset=True)
    return value


class Repository:
    schema: Type[BaseModel] = None

    def __init__(self, schema: Optional[Type[BaseModel]] = None, database=None, collection: Optional[str] = None):
        self.schema = schema or self.schema
        self.collection_name = collection_for(self.schema, collection)
        self.database = get_database(database)

    @property
    def collection(self):
        return self.database[self.collection_name]

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _not_found(self, record_id):
        return NotFoundError(f"{self.schema.__name__} not found: {record_id}")

    def _object_id(self, record_id) -> ObjectId:
        if isinstance(record_id, ObjectId):
            return record_id
        try:
            return ObjectId(record_id)
        except (InvalidId, TypeError):
            raise self._not_found(record_id)

    def _load(self, record_id) -> Dict[str, Any]:
        doc = self.collection.find_one({"_id": self._object_id(record_id)})
        if not doc:
            raise self._not_found(record_id)
        return doc

    def _serialize(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        """Project the declared fields of a stored document; reads are not re-validated."""
        data = {}
        for name, field in self.schema.model_fields.items():
            if name in doc:
                value = doc[name]
            elif field.is_required():
                value = None
            else:
                value = field.get_default(call_default_factory=True)
            if isinstance(value, ObjectId):
                value = str(value)
            data[name] = value
        for key in STORE_FIELDS:
            if key in doc:
                data[key] = doc[key]
        data["_id"] = str(doc["_id"])
        return data

    def _prepare(self, values: Dict[str, Any], current: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Hook run on validated values before they are written."""
        return values

    def _duplicate(self, exc: DuplicateKeyError) -> ValidationError:
        keys = list((exc.details or {}).get("keyValue", {}) or {})
        return ValidationError(
            f"Duplicate {self.schema.__name__}: {exc}",
            errors=[{"type": "unique", "loc": tuple(keys), "msg": "value already exists"}],
        )

    # -----------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------

    def create(self, data) -> Dict[str, Any]:
        record = validate(self.schema, _plain(data))
        values = self._prepare(record.model_dump())
        try:
            new_id = create_document(self.collection_name, values, self.database)
        except DuplicateKeyError as e:
            raise self._duplicate(e) from e
        logger.info("created %s %s in %s", self.schema.__name__, new_id, self.collection_name)
        return self.get(new_id)

    def get(self, record_id) -> Dict[str, Any]:
        return self._serialize(self._load(record_id))

    def find(self, filter_dict: Optional[Dict[str, Any]] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        cursor = self.collection.find(filter_dict or {}).sort("_id", ASCENDING)
        if limit:
            cursor = cursor.limit(limit)
        return [self._serialize(doc) for doc in cursor]

    def count(self, filter_dict: Optional[Dict[str, Any]] = None) -> int:
        return self.collection.count_documents(filter_dict or {})

    def update(self, record_id, changes) -> Dict[str, Any]:
        """Apply a partial update; the merged record must still satisfy the schema."""
        doc = self._load(record_id)
        changes = dict(_plain(changes))
        record = validate(self.schema, {**doc, **changes}).model_dump()
        values = {name: record[name] for name in changes if name in self.schema.model_fields}
        if not values:
            return self._serialize(doc)
        values = self._prepare(values, current=doc)
        values["updated_at"] = datetime.now(timezone.utc)
        try:
            self.collection.update_one({"_id": doc["_id"]}, {"$set": values})
        except DuplicateKeyError as e:
            raise self._duplicate(e) from e
        logger.info("updated %s %s: %s", self.schema.__name__, doc["_id"], sorted(values))
        return self.get(doc["_id"])

    def append(self, record_id, field: str, entry) -> Dict[str, Any]:
        """Push one entry onto an embedded list, keeping insertion order."""
        info = self.schema.model_fields.get(field)
        if info is None or getattr(info.annotation, "__origin__", None) is not list:
            raise ValidationError(f"{self.schema.__name__}.{field} is not a list field")
        doc = self._load(record_id)
        existing = list(doc.get(field) or [])
        record = validate(self.schema, {**doc, field: existing + [_plain(entry)]})
        pushed = record.model_dump()[field][-1]
        self.collection.update_one(
            {"_id": doc["_id"]},
            {"$push": {field: pushed}, "$set": {"updated_at": datetime.now(timezone.utc)}},
        )
        return self.get(doc["_id"])


class UserRepository(Repository):
    schema = User

    def __init__(self, database=None):
        super().__init__(User, database)

    def _prepare(self, values, current=None):
        if "email" in values:
            query = {"email": values["email"]}
            if current is not None:
                query["_id"] = {"$ne": current["_id"]}
            if self.collection.find_one(query):
                raise ValidationError(
                    "Email already registered",
                    errors=[{"type": "unique", "loc": ("email",), "msg": "value already exists"}],
                )
        if "password" in values and not is_password_hash(values["password"]):
            values["password"] = get_password_hash(values["password"])
        return values

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        doc = self.collection.find_one({"email": email})
        return self._serialize(doc) if doc else None

    def authenticate(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        doc = self.collection.find_one({"email": email})
        if not doc or not is_password_hash(doc.get("password") or ""):
            return None
        if not verify_password(password, doc["password"]):
            return None
        return self._serialize(doc)


class TrackedRepository(Repository):
    """Order and Inventory records, whose status changes are journalled in `history`."""

    def __init__(self, schema: Optional[Type[BaseModel]] = None, database=None, collection: Optional[str] = None):
        super().__init__(schema, database, collection)
        if "history" not in self.schema.model_fields:
            raise ValueError(f"{self.schema.__name__} has no history to record status changes in")

    def record_status(self, record_id, status: str, updated_by: Optional[str] = None,
                      reason: Optional[str] = None, location: Optional[str] = None,
                      assigned_to: Optional[str] = None) -> Dict[str, Any]:
        doc = self._load(record_id)
        stamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        entry = HistoryEntry(
            statusHistory=status,
            dateUpdated=stamp,
            updatedBy=updated_by,
            lastAssignedTo=assigned_to,
            reason=reason,
            lastLocation=location,
        )
        changes = {"currentStatus": status, "lastUpdateDateTime": stamp}
        latest = {
            "lastUpdatedBy": updated_by,
            "latestReason": reason,
            "latestLocation": location,
            "assignedTo": assigned_to,
        }
        changes.update({k: v for k, v in latest.items() if v is not None})
        values = {k: v for k, v in changes.items() if k in self.schema.model_fields}
        values["updated_at"] = datetime.now(timezone.utc)
        self.collection.update_one(
            {"_id": doc["_id"]},
            {"$set": values, "$push": {"history": entry.model_dump()}},
        )
        logger.info("%s %s -> %s", self.schema.__name__, doc["_id"], status)
        return self.get(doc["_id"])


class MileageLogRepository(Repository):
    schema = MileageLog

    def __init__(self, database=None, collection: Optional[str] = None):
        super().__init__(MileageLog, database, collection)

    def _prepare(self, values, current=None):
        if "vehicleId" in values:
            values["vehicleId"] = ObjectId(values["vehicleId"])
        return values

    def create(self, data, vehicles: Optional[Repository] = None) -> Dict[str, Any]:
        """Store a reading; with `vehicles`, the referenced vehicle must exist."""
        record = validate(self.schema, _plain(data))
        if vehicles is not None:
            vehicles.get(record.vehicleId)
        return super().create(record)
