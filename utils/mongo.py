# utils/mongo.py
from typing import Any, Optional

from bson import ObjectId

from exceptions import NotFoundError


def to_object_id(value: Any, resource: str = "Resource") -> ObjectId:
    """Parse an id from a path or body; an unparseable id can never exist."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise NotFoundError(f"{resource} not found")


def serialize_doc(doc: Optional[Any]) -> Optional[Any]:
    """Convert every ObjectId in a MongoDB document to its string form."""
    if doc is None:
        return None
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, dict):
        return {key: serialize_doc(value) for key, value in doc.items()}
    if isinstance(doc, list):
        return [serialize_doc(item) for item in doc]
    return doc
