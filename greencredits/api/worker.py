
from fastapi import APIRouter, Depends

from greencredits.api.deps import current_worker, get_workflow_service
from greencredits.core.enums import ReportStatus
from greencredits.mapper.users_mapper import to_report_out, to_worker_out
from greencredits.models.user import Worker
from greencredits.schemas.report import CompleteBody, ReportOut
from greencredits.services.workflow import ReportWorkflowService

router = APIRouter(prefix="/worker", tags=["Worker"])


def _out(report) -> dict:
    return to_report_out(report.model_dump(mode="json", by_alias=True))


@router.get("/dashboard")
async def dashboard(
    worker: Worker = Depends(current_worker),
    workflow: ReportWorkflowService = Depends(get_workflow_service),
):
    reports = await workflow.worker_queue(worker)
    counts = {s.value: 0 for s in (ReportStatus.pending, ReportStatus.verified, ReportStatus.in_progress)}
    for r in reports:
        counts[r.status.value] = counts.get(r.status.value, 0) + 1
    return {
        "worker": to_worker_out(worker.model_dump(mode="json", by_alias=True)),
        "counts": counts,
        "reports": [_out(r) for r in reports],
    }


@router.post("/reports/{report_id}/accept", response_model=ReportOut)
async def accept_report(
    report_id: int,
    worker: Worker = Depends(current_worker),
    workflow: ReportWorkflowService = Depends(get_workflow_service),
):
    return _out(await workflow.worker_accept(report_id, worker))


@router.post("/reports/{report_id}/complete", response_model=ReportOut)
async def complete_report(
    report_id: int,
    body: CompleteBody,
    worker: Worker = Depends(current_worker),
    workflow: ReportWorkflowService = Depends(get_workflow_service),
):
    return _out(await workflow.worker_complete(report_id, worker, body.notes))
