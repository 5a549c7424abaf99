from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bson import ObjectId
from fastapi import Depends, Header, HTTPException

from greencredits.core.config import Settings, get_settings
from greencredits.core.errors import (
    AlreadyExists,
    AuthenticationError,
    GreenCreditsError,
    InsufficientCredits,
    InvalidTransition,
    NotFoundError,
    PermissionDenied,
    SubmissionFailed,
    ValidationError,
)
from greencredits.models.user import Admin, Worker
from greencredits.repositories.admin_repository import AdminRepository
from greencredits.repositories.audit_repository import AuditRepository
from greencredits.repositories.counter_repository import CounterRepository
from greencredits.repositories.credit_repository import CreditRepository
from greencredits.repositories.report_repository import ReportRepository
from greencredits.repositories.user_repository import UserRepository
from greencredits.repositories.worker_repository import WorkerRepository
from greencredits.services.audit_service import AuditService
from greencredits.services.ledger import CreditLedger
from greencredits.services.staff_service import StaffService
from greencredits.services.submission import ReportSubmissionService
from greencredits.services.users_service import UserService
from greencredits.services.workflow import ReportWorkflowService
from greencredits.utils.mongo import parse_oid


@dataclass
class Repositories:
    users: UserRepository
    credits: CreditRepository
    reports: ReportRepository
    workers: WorkerRepository
    admins: AdminRepository
    counters: CounterRepository
    audit: AuditRepository


def get_repositories() -> Repositories:
    from greencredits.db import mongo

    return Repositories(
        users=UserRepository(mongo.users_collection),
        credits=CreditRepository(mongo.credits_collection),
        reports=ReportRepository(mongo.reports_collection),
        workers=WorkerRepository(mongo.workers_collection),
        admins=AdminRepository(mongo.admins_collection),
        counters=CounterRepository(mongo.counters_collection),
        audit=AuditRepository(mongo.audit_collection),
    )


def get_audit_service(repos: Repositories = Depends(get_repositories)) -> AuditService:
    return AuditService(repos.audit)


def get_ledger(repos: Repositories = Depends(get_repositories)) -> CreditLedger:
    return CreditLedger(repos.credits)


def get_submission_service(
    repos: Repositories = Depends(get_repositories),
    ledger: CreditLedger = Depends(get_ledger),
    audit: AuditService = Depends(get_audit_service),
    settings: Settings = Depends(get_settings),
) -> ReportSubmissionService:
    return ReportSubmissionService(
        repos.reports, repos.users, repos.counters, ledger, audit=audit, settings=settings
    )


def get_workflow_service(
    repos: Repositories = Depends(get_repositories),
    ledger: CreditLedger = Depends(get_ledger),
    audit: AuditService = Depends(get_audit_service),
) -> ReportWorkflowService:
    return ReportWorkflowService(repos.reports, repos.workers, ledger, audit=audit)


def get_user_service(
    repos: Repositories = Depends(get_repositories),
    ledger: CreditLedger = Depends(get_ledger),
    audit: AuditService = Depends(get_audit_service),
) -> UserService:
    return UserService(repos.users, repos.reports, repos.credits, ledger, audit=audit)


def get_staff_service(
    repos: Repositories = Depends(get_repositories),
    audit: AuditService = Depends(get_audit_service),
) -> StaffService:
    return StaffService(repos.admins, repos.workers, repos.reports, repos.users, audit=audit)


# -------------------------
# Identity headers
# -------------------------

def _required_oid(value: Optional[str], header: str) -> ObjectId:
    oid = parse_oid(value)
    if not oid:
        raise HTTPException(401, f"Missing or invalid {header}")
    return oid


async def current_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> ObjectId:
    return _required_oid(x_user_id, "X-User-Id")


async def current_admin(
    x_admin_id: str | None = Header(default=None, alias="X-Admin-Id"),
    staff: StaffService = Depends(get_staff_service),
) -> Admin:
    admin_oid = _required_oid(x_admin_id, "X-Admin-Id")
    try:
        return await staff.get_admin(admin_oid)
    except NotFoundError:
        raise HTTPException(403, "Admin access required")


async def current_worker(
    x_worker_id: str | None = Header(default=None, alias="X-Worker-Id"),
    staff: StaffService = Depends(get_staff_service),
) -> Worker:
    worker_oid = _required_oid(x_worker_id, "X-Worker-Id")
    try:
        return await staff.get_worker(worker_oid)
    except NotFoundError:
        raise HTTPException(403, "Approved worker access required")


def parse_path_oid(value: str, what: str) -> ObjectId:
    oid = parse_oid(value)
    if not oid:
        raise HTTPException(400, f"Invalid {what}")
    return oid


# -------------------------
# Error mapping
# -------------------------

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (InvalidTransition, 400),
    (InsufficientCredits, 400),
    (NotFoundError, 404),
    (AlreadyExists, 409),
    (AuthenticationError, 401),
    (PermissionDenied, 403),
    (SubmissionFailed, 500),
)


def http_error(exc: GreenCreditsError) -> HTTPException:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status = 500
    if isinstance(exc, SubmissionFailed) and exc.partial:
        return HTTPException(status, {"message": str(exc), "report_id": exc.report_id})
    return HTTPException(status, str(exc))
