"""
Record type -> collection bindings, and the schema definitions exposed to tooling.
"""
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel

from schemas import (
    DispatchReport,
    Inventory,
    MileageLog,
    Order,
    OrderCounter,
    PharmacyForm,
    Pod,
    Report,
    User,
    Vehicle,
    WhatsAppOrder,
)

# None marks a schema-only record type: the caller decides where it is stored.
COLLECTIONS: Dict[Type[BaseModel], Optional[str]] = {
    Order: "orders",
    Inventory: "inventory",
    OrderCounter: "ordercounter",
    Report: "Reports",
    DispatchReport: "reports",
    WhatsAppOrder: "wargaemasorder",
    User: "users",
    Vehicle: None,
    MileageLog: None,
    PharmacyForm: None,
    Pod: None,
}


def collection_for(schema: Type[BaseModel], collection: Optional[str] = None) -> str:
    if collection:
        return collection
    if schema not in COLLECTIONS:
        raise ValueError(f"{schema.__name__} is not a catalogued record type")
    bound = COLLECTIONS[schema]
    if bound is None:
        raise ValueError(f"{schema.__name__} is schema-only; a collection name is required")
    return bound


def _sub_shape(annotation) -> Optional[Type[BaseModel]]:
    for arg in getattr(annotation, "__args__", ()):
        if isinstance(arg, type) and issubclass(arg, BaseModel):
            return arg
    return None


def model_to_dict(model_cls: Type[BaseModel]) -> Dict[str, Any]:
    fields = {}
    for name, field_info in model_cls.model_fields.items():
        entry = {
            "type": str(field_info.annotation),
            "required": field_info.is_required(),
            "default": None if field_info.is_required() else field_info.get_default(call_default_factory=False),
            "description": field_info.description,
        }
        if field_info.default_factory is not None:
            entry["default"] = field_info.default_factory.__name__
        sub = _sub_shape(field_info.annotation)
        if sub is not None:
            entry["items"] = model_to_dict(sub)["fields"]
        fields[name] = entry
    return {"fields": fields, "doc": (model_cls.__doc__ or "").strip()}


def schema_definitions() -> Dict[str, Dict[str, Any]]:
    """Field-level description of every record type, keyed by class name."""
    models = {}
    for model_cls, collection in COLLECTIONS.items():
        definition = model_to_dict(model_cls)
        definition["collection"] = collection
        models[model_cls.__name__] = definition
    return models
