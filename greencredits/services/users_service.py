from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError, PyMongoError

from greencredits.core.errors import AlreadyExists, AuthenticationError, NotFoundError, ValidationError
from greencredits.core.security import hash_password, verify_password
from greencredits.mapper.users_mapper import to_report_out, to_user_out
from greencredits.repositories.credit_repository import CreditRepository
from greencredits.repositories.report_repository import ReportRepository
from greencredits.repositories.user_repository import UserRepository
from greencredits.services.audit_service import AuditService
from greencredits.services.badges import BadgeEngine
from greencredits.services.ledger import CreditLedger

logger = logging.getLogger(__name__)

RECENT_TRANSACTIONS = 10


def _email_norm(email: str) -> str:
    return (email or "").lower().strip()


class UserService:
    def __init__(
        self,
        users: UserRepository,
        reports: ReportRepository,
        credits: CreditRepository,
        ledger: CreditLedger,
        audit: Optional[AuditService] = None,
        badges: Optional[BadgeEngine] = None,
    ):
        self.users = users
        self.reports = reports
        self.credits = credits
        self.ledger = ledger
        self.audit = audit
        self.badges = badges or BadgeEngine()

    # -------------------------
    # Auth
    # -------------------------
    async def signup(self, name: str, email: str, password: str) -> dict:
        """
        Create the user together with its credit account (welcome bonus
        included). A user never survives without its account.
        """
        email_norm = _email_norm(email)
        if not password:
            raise ValidationError("Password is required")
        if await self.users.find_by_email(email_norm):
            raise AlreadyExists("Email already registered")

        now = datetime.utcnow()
        doc = {
            "name": (name or "").strip(),
            "email": email_norm,
            "password_hash": hash_password(password),
            "current_streak": 0,
            "longest_streak": 0,
            "last_report_at": None,
            "last_report_id": None,
            "created_at": now,
        }
        try:
            doc = await self.users.insert(doc)
        except DuplicateKeyError:
            raise AlreadyExists("Email already registered")

        try:
            await self.ledger.open_account(doc["_id"], at=now)
        except PyMongoError:
            logger.exception("credit account creation failed, removing user_id=%s", doc["_id"])
            await self.users.delete(doc["_id"])
            raise

        if self.audit:
            await self.audit.record(
                "user.register",
                {"role": "citizen", "email": email_norm},
                {"type": "user", "id": str(doc["_id"])},
                f"New user registered ({email_norm})",
            )
        return to_user_out(doc)

    async def login(self, email: str, password: str) -> dict:
        doc = await self.users.find_by_email(_email_norm(email))
        if not doc or not verify_password(password, doc.get("password_hash", "")):
            raise AuthenticationError("Invalid credentials")
        return to_user_out(doc)

    # -------------------------
    # Citizen views
    # -------------------------
    async def profile(self, user_id: ObjectId) -> dict:
        doc = await self.users.find_by_id(user_id)
        if not doc:
            raise NotFoundError("user", user_id)
        return to_user_out(doc)

    async def list_reports(self, user_id: ObjectId) -> list[dict]:
        return [to_report_out(d) for d in await self.reports.list_for_user(user_id)]

    async def credits_summary(self, user_id: ObjectId) -> dict:
        account = await self.ledger.get_account(user_id)
        recent = account.transactions[-RECENT_TRANSACTIONS:]
        return {
            "credits": {
                "total": account.total_credits,
                "available": account.available_credits,
                "reports_submitted": account.report_count,
                "reports_verified": account.reports_verified,
            },
            "badges": [b.model_dump() for b in account.badges],
            "next_badges": [p.model_dump() for p in self.badges.progress(account)],
            "transactions": [t.model_dump() for t in reversed(recent)],
        }

    async def redeem(self, user_id: ObjectId, cost: int, reward_name: str) -> int:
        balance = await self.ledger.redeem(user_id, cost, reward_name)
        if self.audit:
            await self.audit.record(
                "credits.redeem",
                {"role": "citizen", "id": str(user_id)},
                {"type": "credit_account", "id": str(user_id)},
                f"Redeemed {cost} credits: {reward_name}",
                {"cost": cost, "balance": balance},
            )
        return balance

    async def leaderboard(self, limit: int = 10) -> list[dict]:
        rows = await self.credits.top_by_total(limit)
        names = await self.users.get_names(r["user_id"] for r in rows)
        return [
            {
                "rank": i + 1,
                "name": names.get(r["user_id"], "Anonymous"),
                "credits": r.get("total_credits", 0),
                "reports": r.get("report_count", 0),
                "badges": len(r.get("badges") or []),
            }
            for i, r in enumerate(rows)
        ]
