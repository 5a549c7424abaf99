from bson import ObjectId
from datetime import datetime


def serialize_mongo(obj):
    """
    Recursively convert MongoDB objects to JSON-safe values
    """
    if isinstance(obj, ObjectId):
        return str(obj)

    if isinstance(obj, datetime):
        return obj.isoformat()

    if isinstance(obj, list):
        return [serialize_mongo(i) for i in obj]

    if isinstance(obj, dict):
        return {k: serialize_mongo(v) for k, v in obj.items()}

    return obj


def parse_oid(x: str | None) -> ObjectId | None:
    if not x:
        return None
    x = x.strip()
    if not ObjectId.is_valid(x):
        return None
    return ObjectId(x)
