from typing import List

from fastapi import APIRouter, Depends, HTTPException

from greencredits.api.deps import (
    current_admin,
    get_audit_service,
    get_staff_service,
    get_workflow_service,
    parse_path_oid,
)
from greencredits.core.enums import AdminRole, ReportStatus
from greencredits.mapper.users_mapper import to_report_out
from greencredits.models.user import Admin
from greencredits.schemas.report import AssignBody, ReportOut, StatusUpdateBody
from greencredits.schemas.staff import AdminOut, OfficerCreate, WorkerApprove, WorkerOut
from greencredits.services.audit_service import AuditService
from greencredits.services.staff_service import StaffService
from greencredits.services.workflow import ReportWorkflowService, get_allowed_next

router = APIRouter(prefix="/admin", tags=["Admin"])


def _actor(admin: Admin) -> dict:
    return {"role": admin.role.value, "email": admin.email}


def _parse_status(value: str) -> ReportStatus:
    try:
        return ReportStatus((value or "").strip().lower())
    except ValueError:
        raise HTTPException(400, f"Invalid status: {value}")


# =========================
# Reports
# =========================
@router.get("/reports", response_model=List[ReportOut])
async def list_reports(
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
):
    return await staff.list_reports(admin)


@router.get("/stats")
async def stats(
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
):
    return await staff.stats(admin)


@router.get("/reports/{report_id}/allowed-next")
async def allowed_next(
    report_id: int,
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
    workflow: ReportWorkflowService = Depends(get_workflow_service),
):
    report = await workflow.get_report(report_id)
    staff.assert_zone_in_scope(admin, report.assigned_zone)
    return {
        "current": report.status.value,
        "allowed_next": [s.value for s in get_allowed_next(report.status)],
    }


@router.put("/reports/{report_id}/status", response_model=ReportOut)
async def update_status(
    report_id: int,
    body: StatusUpdateBody,
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
    workflow: ReportWorkflowService = Depends(get_workflow_service),
):
    target = _parse_status(body.status)
    report = await workflow.get_report(report_id)
    staff.assert_zone_in_scope(admin, report.assigned_zone)
    updated = await workflow.transition(report_id, target, _actor(admin), notes=body.admin_notes)
    return to_report_out(updated.model_dump(mode="json", by_alias=True))


@router.post("/reports/{report_id}/assign", response_model=ReportOut)
async def assign_report(
    report_id: int,
    body: AssignBody,
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
    workflow: ReportWorkflowService = Depends(get_workflow_service),
):
    worker_oid = parse_path_oid(body.worker_id, "worker_id")
    report = await workflow.get_report(report_id)
    staff.assert_zone_in_scope(admin, report.assigned_zone)
    updated = await workflow.assign(report_id, worker_oid, _actor(admin))
    return to_report_out(updated.model_dump(mode="json", by_alias=True))


# =========================
# Zone officers (super admin)
# =========================
@router.post("/officers", response_model=AdminOut, status_code=201)
async def create_officer(
    body: OfficerCreate,
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
):
    return await staff.create_officer(
        admin, body.name, body.email, body.password, body.assigned_zones, body.phone
    )


@router.get("/officers", response_model=List[AdminOut])
async def list_officers(
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
):
    return await staff.list_officers(admin)


@router.delete("/officers/{officer_id}")
async def delete_officer(
    officer_id: str,
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
):
    await staff.delete_officer(admin, parse_path_oid(officer_id, "officer_id"))
    return {"ok": True}


# =========================
# Workers
# =========================
@router.get("/workers/applications", response_model=List[WorkerOut])
async def worker_applications(
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
):
    return await staff.worker_applications(admin)


@router.get("/workers", response_model=List[WorkerOut])
async def list_workers(
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
):
    return await staff.list_workers(admin)


@router.post("/workers/{worker_id}/approve", response_model=WorkerOut)
async def approve_worker(
    worker_id: str,
    body: WorkerApprove,
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
):
    return await staff.approve_worker(admin, parse_path_oid(worker_id, "worker_id"), body.assigned_zone)


@router.post("/workers/{worker_id}/reject", response_model=WorkerOut)
async def reject_worker(
    worker_id: str,
    admin: Admin = Depends(current_admin),
    staff: StaffService = Depends(get_staff_service),
):
    return await staff.reject_worker(admin, parse_path_oid(worker_id, "worker_id"))


# =========================
# Audit
# =========================
@router.get("/audit")
async def list_audit_logs(
    admin: Admin = Depends(current_admin),
    audit: AuditService = Depends(get_audit_service),
):
    if admin.role != AdminRole.super_admin:
        raise HTTPException(403, "Only Super Admin can read the audit trail")
    return await audit.list_logs()
