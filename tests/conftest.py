"""
In-memory stand-ins for the Mongo repositories. Each one reproduces the
filter semantics of the matching repository method (ref guards, the
available-credits compare-and-swap, the unique report_id index) so the
services can be exercised without a database.
"""
from __future__ import annotations

import copy
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, PyMongoError

from greencredits.api.deps import Repositories
from greencredits.core.config import get_settings
from greencredits.services.audit_service import AuditService
from greencredits.services.ledger import CreditLedger
from greencredits.services.staff_service import StaffService
from greencredits.services.submission import ReportSubmissionService
from greencredits.services.users_service import UserService
from greencredits.services.workflow import ReportWorkflowService


def _set_path(doc: Dict[str, Any], dotted: str, value: Any) -> None:
    *parents, leaf = dotted.split(".")
    for key in parents:
        doc = doc.setdefault(key, {})
    doc[leaf] = value


def _get_path(doc: Dict[str, Any], dotted: str) -> Any:
    for key in dotted.split("."):
        if not isinstance(doc, dict):
            return None
        doc = doc.get(key)
    return doc


class FakeUserRepo:
    def __init__(self):
        self.docs: Dict[ObjectId, dict] = {}

    async def find_by_id(self, user_id):
        d = self.docs.get(user_id)
        return copy.deepcopy(d) if d else None

    async def find_by_email(self, email):
        for d in self.docs.values():
            if d.get("email") == email:
                return copy.deepcopy(d)
        return None

    async def insert(self, doc):
        if any(d.get("email") == doc.get("email") for d in self.docs.values()):
            raise DuplicateKeyError("email")
        doc["_id"] = doc.get("_id") or ObjectId()
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return doc

    async def delete(self, user_id):
        self.docs.pop(user_id, None)

    async def apply_streak(self, user_id, report_id, submitted_at, current_streak, longest_streak):
        d = self.docs.get(user_id)
        if not d or d.get("last_report_id") == report_id:
            return False
        if d.get("last_report_at") is not None and d["last_report_at"] > submitted_at:
            return False
        d["current_streak"] = current_streak
        d["last_report_at"] = submitted_at
        d["last_report_id"] = report_id
        d["longest_streak"] = max(d.get("longest_streak") or 0, longest_streak)
        return True

    async def get_names(self, ids):
        return {i: self.docs[i].get("name") or "Anonymous" for i in ids if i in self.docs}

    async def count(self):
        return len(self.docs)


class FakeCreditRepo:
    def __init__(self):
        self.docs: Dict[ObjectId, dict] = {}
        self.fail_next_post = 0

    async def find_by_user(self, user_id):
        d = self.docs.get(user_id)
        return copy.deepcopy(d) if d else None

    async def insert(self, doc):
        if doc["user_id"] in self.docs:
            raise DuplicateKeyError("user_id")
        doc["_id"] = ObjectId()
        self.docs[doc["user_id"]] = copy.deepcopy(doc)
        return doc

    async def post(self, user_id, transactions, counters, ref=None):
        if self.fail_next_post:
            self.fail_next_post -= 1
            raise PyMongoError("connection reset")
        d = self.docs.get(user_id)
        if not d:
            return None
        if ref and any(t.get("ref") == ref for t in d["transactions"]):
            return None
        for key, value in counters.items():
            d[key] = d.get(key, 0) + value
        d["transactions"].extend(copy.deepcopy(transactions))
        return copy.deepcopy(d)

    async def spend(self, user_id, cost, transaction):
        d = self.docs.get(user_id)
        if not d or d["available_credits"] < cost:
            return None
        d["available_credits"] -= cost
        d["transactions"].append(copy.deepcopy(transaction))
        return copy.deepcopy(d)

    async def add_badge(self, user_id, badge):
        d = self.docs.get(user_id)
        if not d or any(b["key"] == badge["key"] for b in d["badges"]):
            return False
        d["badges"].append(copy.deepcopy(badge))
        return True

    async def top_by_total(self, limit):
        rows = sorted(self.docs.values(), key=lambda d: d["total_credits"], reverse=True)
        return copy.deepcopy(rows[:limit])


class FakeReportRepo:
    def __init__(self):
        self.docs: Dict[int, dict] = {}

    async def insert(self, doc):
        if doc["report_id"] in self.docs:
            raise DuplicateKeyError("report_id")
        doc["_id"] = ObjectId()
        self.docs[doc["report_id"]] = copy.deepcopy(doc)
        return doc

    async def find_by_report_id(self, report_id):
        d = self.docs.get(report_id)
        return copy.deepcopy(d) if d else None

    async def max_report_id(self):
        return max(self.docs) if self.docs else None

    async def list_for_user(self, user_id, limit=200):
        rows = [d for d in self.docs.values() if d["user_id"] == user_id]
        rows.sort(key=lambda d: d["timestamps"]["created_at"], reverse=True)
        return copy.deepcopy(rows[:limit])

    def _in_zones(self, zones):
        return [d for d in self.docs.values() if zones is None or d.get("assigned_zone") in zones]

    async def list_in_zones(self, zones, statuses=None, limit=500):
        rows = [d for d in self._in_zones(zones) if not statuses or d["status"] in statuses]
        rows.sort(key=lambda d: d["timestamps"]["created_at"], reverse=True)
        return copy.deepcopy(rows[:limit])

    async def count_in_zones(self, zones, status=None):
        return len([d for d in self._in_zones(zones) if not status or d["status"] == status])

    async def zone_breakdown(self, zones):
        out: Dict[str, dict] = {}
        for d in self._in_zones(zones):
            row = out.setdefault(
                d["assigned_zone"],
                {"zone": d["assigned_zone"], "total": 0, "pending": 0, "resolved": 0},
            )
            row["total"] += 1
            if d["status"] in ("pending", "resolved"):
                row[d["status"]] += 1
        return [out[k] for k in sorted(out)]

    async def update_if_status(self, report_id, expected_status, sets):
        d = self.docs.get(report_id)
        if not d or d["status"] != expected_status:
            return None
        for key, value in sets.items():
            _set_path(d, key, value)
        return copy.deepcopy(d)

    async def set_fields(self, report_id, sets):
        d = self.docs.get(report_id)
        if d:
            for key, value in sets.items():
                _set_path(d, key, value)

    async def record_reward_failure(self, report_id, error, at):
        d = self.docs[report_id]
        d["rewards"]["state"] = "failed"
        d["rewards"]["error"] = error
        d["rewards"]["attempts"] = d["rewards"].get("attempts", 0) + 1
        d["timestamps"]["updated_at"] = at

    async def find_reward_backlog(self, created_before, limit=100):
        rows = [
            d for d in self.docs.values()
            if _get_path(d, "rewards.state") in ("pending", "failed")
            and d["timestamps"]["created_at"] < created_before
        ]
        rows.sort(key=lambda d: d["report_id"])
        return copy.deepcopy(rows[:limit])

    async def find_missing_zone(self, limit=1000):
        return copy.deepcopy([d for d in self.docs.values() if not d.get("assigned_zone")][:limit])


class FakeCounterRepo:
    def __init__(self):
        self.seq: Dict[str, int] = {}

    async def next_value(self, key):
        self.seq[key] = self.seq.get(key, 0) + 1
        return self.seq[key]

    async def raise_to(self, key, value):
        self.seq[key] = max(self.seq.get(key, 0), value)


class FakeWorkerRepo:
    def __init__(self):
        self.docs: Dict[ObjectId, dict] = {}

    async def find_by_id(self, worker_id):
        d = self.docs.get(worker_id)
        return copy.deepcopy(d) if d else None

    async def find_by_mobile(self, mobile):
        for d in self.docs.values():
            if d.get("mobile") == mobile:
                return copy.deepcopy(d)
        return None

    async def insert(self, doc):
        doc["_id"] = ObjectId()
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return doc

    async def list_by_status(self, status, zones=None):
        return copy.deepcopy([
            d for d in self.docs.values()
            if d["status"] == status and (zones is None or d.get("assigned_zone") in zones)
        ])

    async def update(self, worker_id, sets):
        d = self.docs.get(worker_id)
        if not d:
            return None
        d.update(sets)
        return copy.deepcopy(d)

    async def increment_completed(self, worker_id):
        d = self.docs[worker_id]
        d["total_reports_completed"] = d.get("total_reports_completed", 0) + 1


class FakeAdminRepo:
    def __init__(self):
        self.docs: Dict[ObjectId, dict] = {}

    async def find_by_id(self, admin_id):
        d = self.docs.get(admin_id)
        return copy.deepcopy(d) if d else None

    async def find_by_email(self, email):
        for d in self.docs.values():
            if d.get("email") == email:
                return copy.deepcopy(d)
        return None

    async def insert(self, doc):
        doc["_id"] = ObjectId()
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return doc

    async def list_by_role(self, role):
        rows = [{k: v for k, v in d.items() if k != "password_hash"}
                for d in self.docs.values() if d["role"] == role]
        return copy.deepcopy(rows)

    async def delete(self, admin_id, role):
        d = self.docs.get(admin_id)
        if not d or d["role"] != role:
            return False
        del self.docs[admin_id]
        return True


class FakeAuditRepo:
    def __init__(self):
        self.events: List[dict] = []

    async def list(self, limit=500):
        return list(reversed(self.events))[:limit]

    async def create(self, data):
        self.events.append(copy.deepcopy(data))


# -------------------------
# Fixtures
# -------------------------

@pytest.fixture
def settings():
    return get_settings().model_copy(update={"streak_utc_offset_hours": 5.5})


@pytest.fixture
def repos():
    return Repositories(
        users=FakeUserRepo(),
        credits=FakeCreditRepo(),
        reports=FakeReportRepo(),
        workers=FakeWorkerRepo(),
        admins=FakeAdminRepo(),
        counters=FakeCounterRepo(),
        audit=FakeAuditRepo(),
    )


@pytest.fixture
def audit(repos):
    return AuditService(repos.audit)


@pytest.fixture
def ledger(repos):
    return CreditLedger(repos.credits)


@pytest.fixture
def submission(repos, ledger, audit, settings):
    return ReportSubmissionService(
        repos.reports, repos.users, repos.counters, ledger, audit=audit, settings=settings
    )


@pytest.fixture
def workflow(repos, ledger, audit):
    return ReportWorkflowService(repos.reports, repos.workers, ledger, audit=audit)


@pytest.fixture
def user_service(repos, ledger, audit):
    return UserService(repos.users, repos.reports, repos.credits, ledger, audit=audit)


@pytest.fixture
def staff(repos, audit):
    return StaffService(repos.admins, repos.workers, repos.reports, repos.users, audit=audit)


@pytest.fixture
def make_user(repos, ledger):
    async def _make(
        name: str = "Asha",
        current_streak: int = 0,
        longest_streak: int = 0,
        last_report_at: Optional[datetime] = None,
    ) -> ObjectId:
        doc = await repos.users.insert({
            "name": name,
            "email": f"{name.lower()}-{ObjectId()}@example.com",
            "password_hash": "",
            "current_streak": current_streak,
            "longest_streak": longest_streak,
            "last_report_at": last_report_at,
            "last_report_id": None,
            "created_at": datetime(2025, 1, 1),
        })
        await ledger.open_account(doc["_id"], at=datetime(2025, 1, 1))
        return doc["_id"]

    return _make
