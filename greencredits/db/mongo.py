import logging

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING

from greencredits.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

client = AsyncIOMotorClient(settings.mongo_uri)
db = client[settings.mongo_db]
users_collection = db["users"]
credits_collection = db["credits"]
reports_collection = db["reports"]
workers_collection = db["workers"]
admins_collection = db["admins"]
counters_collection = db["counters"]
audit_collection = db["audit_logs"]


async def ensure_indexes() -> None:
    await reports_collection.create_index([("report_id", ASCENDING)], unique=True)
    await reports_collection.create_index([("user_id", ASCENDING), ("timestamps.created_at", DESCENDING)])
    await reports_collection.create_index([("assigned_zone", ASCENDING), ("status", ASCENDING)])
    await reports_collection.create_index([("rewards.state", ASCENDING)])
    await credits_collection.create_index([("user_id", ASCENDING)], unique=True)
    await credits_collection.create_index([("total_credits", DESCENDING)])
    await users_collection.create_index([("email", ASCENDING)], unique=True)
    await workers_collection.create_index([("mobile", ASCENDING)], unique=True)
    await admins_collection.create_index([("email", ASCENDING)], unique=True)
    logger.info("Mongo indexes ensured on %s", settings.mongo_db)
