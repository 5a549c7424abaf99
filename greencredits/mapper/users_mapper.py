from bson import ObjectId


def oid_str(x):
    return str(x) if isinstance(x, ObjectId) else x


def to_user_out(doc: dict) -> dict:
    """
    Citizen profile in one stable API shape; never exposes the password hash.
    """
    return {
        "id": oid_str(doc["_id"]),
        "name": doc.get("name", ""),
        "email": doc.get("email"),
        "current_streak": doc.get("current_streak") or 0,
        "longest_streak": doc.get("longest_streak") or 0,
        "last_report_at": doc.get("last_report_at"),
        "created_at": doc.get("created_at"),
    }


def to_worker_out(doc: dict) -> dict:
    return {
        "id": oid_str(doc["_id"]),
        "name": doc.get("name", ""),
        "mobile": doc.get("mobile"),
        "email": doc.get("email"),
        "address": doc.get("address"),
        "assigned_zone": doc.get("assigned_zone"),
        "status": doc.get("status", "pending"),
        "applied_at": doc.get("applied_at"),
        "approved_at": doc.get("approved_at"),
        "total_reports_completed": doc.get("total_reports_completed") or 0,
    }


def to_admin_out(doc: dict) -> dict:
    return {
        "id": oid_str(doc["_id"]),
        "name": doc.get("name", ""),
        "email": doc.get("email"),
        "phone": doc.get("phone"),
        "role": doc.get("role"),
        "department": doc.get("department"),
        "assigned_zones": doc.get("assigned_zones") or [],
        "is_active": doc.get("is_active", True),
    }


def to_report_out(doc: dict) -> dict:
    ts = doc.get("timestamps") or {}
    rewards = doc.get("rewards") or {}
    return {
        "report_id": doc.get("report_id"),
        "user_id": oid_str(doc.get("user_id")),
        "description": doc.get("description", ""),
        "photo_url": doc.get("photo_url"),
        "lat": doc.get("lat"),
        "lng": doc.get("lng"),
        "address": doc.get("address"),
        "assigned_zone": doc.get("assigned_zone"),
        "waste_category": doc.get("waste_category"),
        "disposal_method": doc.get("disposal_method"),
        "quality_score": doc.get("quality_score", 0),
        "status": doc.get("status", "pending"),
        "assigned_to": oid_str(doc.get("assigned_to")),
        "admin_notes": doc.get("admin_notes"),
        "rewards_state": rewards.get("state"),
        "created_at": ts.get("created_at"),
        "updated_at": ts.get("updated_at"),
        "resolved_at": ts.get("resolved_at"),
    }
