from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from greencredits.core.enums import AdminRole, ReportStatus, WorkerStatus
from greencredits.core.errors import (
    AlreadyExists,
    AuthenticationError,
    NotFoundError,
    PermissionDenied,
    ValidationError,
)
from greencredits.core.security import hash_password, verify_password
from greencredits.core.zones import GONDA_ZONES
from greencredits.mapper.users_mapper import to_admin_out, to_report_out, to_worker_out
from greencredits.models.user import Admin, Worker
from greencredits.models.zone import ZoneConfig
from greencredits.repositories.admin_repository import AdminRepository
from greencredits.repositories.report_repository import ReportRepository
from greencredits.repositories.user_repository import UserRepository
from greencredits.repositories.worker_repository import WorkerRepository
from greencredits.services.audit_service import AuditService

logger = logging.getLogger(__name__)


SUPER_ADMIN_PERMISSIONS = {
    "can_approve_workers": True,
    "can_assign_work": True,
    "can_view_reports": True,
    "can_manage_officers": True,
}

OFFICER_PERMISSIONS = {
    "can_approve_workers": True,
    "can_assign_work": True,
    "can_view_reports": True,
    "can_manage_officers": False,
}


def _actor(admin: Admin) -> dict:
    return {"role": admin.role.value, "email": admin.email}


class StaffService:
    """Admins, zone officers and field workers, all scoped by zone."""

    def __init__(
        self,
        admins: AdminRepository,
        workers: WorkerRepository,
        reports: ReportRepository,
        users: UserRepository,
        audit: Optional[AuditService] = None,
        zones: ZoneConfig = GONDA_ZONES,
    ):
        self.admins = admins
        self.workers = workers
        self.reports = reports
        self.users = users
        self.audit = audit
        self.zones = zones

    # -------------------------
    # Admins
    # -------------------------
    async def admin_login(self, email: str, password: str) -> dict:
        doc = await self.admins.find_by_email((email or "").lower().strip())
        if not doc or not verify_password(password, doc.get("password_hash", "")):
            raise AuthenticationError("Invalid credentials")
        if not doc.get("is_active", True):
            raise PermissionDenied("Account disabled")
        return to_admin_out(doc)

    async def get_admin(self, admin_id: ObjectId) -> Admin:
        doc = await self.admins.find_by_id(admin_id)
        if not doc or not doc.get("is_active", True):
            raise NotFoundError("admin", admin_id)
        return Admin(**doc)

    async def create_admin(
        self,
        name: str,
        email: str,
        password: str,
        role: AdminRole,
        zones: Optional[List[str]] = None,
        phone: Optional[str] = None,
        department: Optional[str] = None,
        permissions: Optional[dict] = None,
    ) -> dict:
        self._check_zones(zones or [])
        email_norm = (email or "").lower().strip()
        if await self.admins.find_by_email(email_norm):
            raise AlreadyExists("Email already exists")
        doc = {
            "name": name,
            "email": email_norm,
            "password_hash": hash_password(password),
            "phone": phone or "",
            "role": role.value,
            "department": department,
            "assigned_zones": list(zones or []),
            "is_active": True,
            "permissions": permissions or {},
            "created_at": datetime.utcnow(),
        }
        try:
            doc = await self.admins.insert(doc)
        except DuplicateKeyError:
            raise AlreadyExists("Email already exists")
        return to_admin_out(doc)

    async def create_super_admin(
        self, name: str, email: str, password: str, phone: Optional[str] = None
    ) -> dict:
        admin = await self.create_admin(
            name, email, password, AdminRole.super_admin, phone=phone,
            department="Municipal Corporation", permissions=SUPER_ADMIN_PERMISSIONS,
        )
        logger.info("super admin created email=%s", admin["email"])
        return admin

    async def create_officer(
        self,
        actor: Admin,
        name: str,
        email: str,
        password: str,
        zones: List[str],
        phone: Optional[str] = None,
    ) -> dict:
        self._require_super_admin(actor)
        officer = await self.create_admin(
            name, email, password, AdminRole.zone_officer, zones, phone,
            department="Municipal Department", permissions=OFFICER_PERMISSIONS,
        )
        logger.info("zone officer created email=%s zones=%s", officer["email"], zones)
        if self.audit:
            await self.audit.record(
                "officer.create", _actor(actor), {"type": "admin", "id": officer["id"]},
                f"Officer created ({officer['email']})", {"zones": zones},
            )
        return officer

    async def list_officers(self, actor: Admin) -> List[dict]:
        self._require_super_admin(actor)
        return [to_admin_out(d) for d in await self.admins.list_by_role(AdminRole.zone_officer.value)]

    async def delete_officer(self, actor: Admin, officer_id: ObjectId) -> None:
        self._require_super_admin(actor)
        if not await self.admins.delete(officer_id, AdminRole.zone_officer.value):
            raise NotFoundError("officer", officer_id)
        if self.audit:
            await self.audit.record(
                "officer.delete", _actor(actor), {"type": "admin", "id": str(officer_id)},
                "Officer deleted",
            )

    # -------------------------
    # Reports and stats (zone scoped)
    # -------------------------
    async def list_reports(self, actor: Admin) -> List[dict]:
        rows = await self.reports.list_in_zones(actor.zone_scope)
        return [to_report_out(r) for r in rows]

    async def stats(self, actor: Admin) -> dict:
        scope = actor.zone_scope
        return {
            "total_reports": await self.reports.count_in_zones(scope),
            "pending_reports": await self.reports.count_in_zones(scope, ReportStatus.pending.value),
            "resolved_reports": await self.reports.count_in_zones(scope, ReportStatus.resolved.value),
            "total_users": await self.users.count(),
            "zone_stats": await self.reports.zone_breakdown(scope),
        }

    def assert_zone_in_scope(self, actor: Admin, zone: str) -> None:
        scope = actor.zone_scope
        if scope is not None and zone not in scope:
            raise PermissionDenied("Outside your assigned zones")

    # -------------------------
    # Workers
    # -------------------------
    async def register_worker(
        self,
        name: str,
        mobile: str,
        password: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        assigned_zone: Optional[str] = None,
        photo_url: Optional[str] = None,
        id_proof_url: Optional[str] = None,
    ) -> dict:
        mobile = (mobile or "").strip()
        if len(mobile) < 4:
            raise ValidationError("A valid mobile number is required")
        if assigned_zone:
            self._check_zones([assigned_zone])
        if await self.workers.find_by_mobile(mobile):
            raise AlreadyExists("Mobile already registered")

        doc = {
            "name": name,
            "mobile": mobile,
            "email": email or "",
            "address": address or "",
            "assigned_zone": assigned_zone or "",
            "password_hash": hash_password(password or f"Worker@{mobile[-4:]}"),
            "photo_url": photo_url,
            "id_proof_url": id_proof_url,
            "status": WorkerStatus.pending.value,
            "applied_at": datetime.utcnow(),
            "approved_at": None,
            "approved_by": None,
            "total_reports_completed": 0,
        }
        try:
            doc = await self.workers.insert(doc)
        except DuplicateKeyError:
            raise AlreadyExists("Mobile already registered")
        logger.info("worker application received worker_id=%s zone=%s", doc["_id"], assigned_zone)
        return to_worker_out(doc)

    async def worker_login(self, mobile: str, password: str) -> dict:
        doc = await self.workers.find_by_mobile((mobile or "").strip())
        if not doc or doc.get("status") != WorkerStatus.approved.value:
            raise AuthenticationError("Invalid credentials or not approved")
        if not verify_password(password, doc.get("password_hash", "")):
            raise AuthenticationError("Invalid credentials")
        return to_worker_out(doc)

    async def get_worker(self, worker_id: ObjectId) -> Worker:
        doc = await self.workers.find_by_id(worker_id)
        if not doc or doc.get("status") != WorkerStatus.approved.value:
            raise NotFoundError("worker", worker_id)
        return Worker(**doc)

    async def worker_applications(self, actor: Admin) -> List[dict]:
        rows = await self.workers.list_by_status(WorkerStatus.pending.value, actor.zone_scope)
        return [to_worker_out(d) for d in rows]

    async def list_workers(self, actor: Admin) -> List[dict]:
        rows = await self.workers.list_by_status(WorkerStatus.approved.value, actor.zone_scope)
        return [to_worker_out(d) for d in rows]

    async def approve_worker(
        self, actor: Admin, worker_id: ObjectId, assigned_zone: Optional[str] = None
    ) -> dict:
        doc = await self.workers.find_by_id(worker_id)
        if not doc:
            raise NotFoundError("worker", worker_id)
        zone = assigned_zone or doc.get("assigned_zone")
        if not zone:
            raise ValidationError("An approved worker needs a zone")
        self._check_zones([zone])
        self.assert_zone_in_scope(actor, zone)

        updated = await self.workers.update(worker_id, {
            "status": WorkerStatus.approved.value,
            "assigned_zone": zone,
            "approved_at": datetime.utcnow(),
            "approved_by": actor.id,
        })
        if self.audit:
            await self.audit.record(
                "worker.approve", _actor(actor), {"type": "worker", "id": str(worker_id)},
                f"Worker approved ({doc.get('name')})", {"zone": zone},
            )
        return to_worker_out(updated)

    async def reject_worker(self, actor: Admin, worker_id: ObjectId) -> dict:
        doc = await self.workers.find_by_id(worker_id)
        if not doc:
            raise NotFoundError("worker", worker_id)
        if doc.get("assigned_zone"):
            self.assert_zone_in_scope(actor, doc["assigned_zone"])
        updated = await self.workers.update(worker_id, {"status": WorkerStatus.rejected.value})
        if self.audit:
            await self.audit.record(
                "worker.reject", _actor(actor), {"type": "worker", "id": str(worker_id)},
                f"Worker rejected ({doc.get('name')})",
            )
        return to_worker_out(updated)

    # -------------------------
    # Helpers
    # -------------------------
    @staticmethod
    def _require_super_admin(actor: Admin) -> None:
        if actor.role != AdminRole.super_admin:
            raise PermissionDenied("Only Super Admin can manage officers")

    def _check_zones(self, zones: List[str]) -> None:
        unknown = [z for z in zones if self.zones.get(z) is None]
        if unknown:
            raise ValidationError(f"Unknown zone(s): {unknown}")
