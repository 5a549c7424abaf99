from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from bson import ObjectId
from pymongo.errors import PyMongoError

from greencredits.core.enums import ReportStatus, TransactionType, WorkerStatus
from greencredits.core.errors import InvalidTransition, NotFoundError, SubmissionFailed
from greencredits.core.rewards import REWARD_CATALOG
from greencredits.models.credit import CreditActions
from greencredits.models.report import Report
from greencredits.models.user import Worker
from greencredits.repositories.report_repository import ReportRepository
from greencredits.repositories.worker_repository import WorkerRepository
from greencredits.services.audit_service import AuditService
from greencredits.services.badges import BadgeEngine
from greencredits.services.ledger import CreditLedger, make_transaction

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: Dict[ReportStatus, List[ReportStatus]] = {
    ReportStatus.pending: [ReportStatus.verified, ReportStatus.in_progress, ReportStatus.rejected],
    ReportStatus.verified: [ReportStatus.in_progress, ReportStatus.resolved, ReportStatus.rejected],
    ReportStatus.in_progress: [ReportStatus.resolved],
    ReportStatus.resolved: [],
    ReportStatus.rejected: [],
}

# statuses a zone worker still has something to do for
WORKER_QUEUE = [ReportStatus.pending, ReportStatus.verified, ReportStatus.in_progress]


def get_allowed_next(state: ReportStatus) -> List[ReportStatus]:
    return ALLOWED_TRANSITIONS.get(state, [])


def validate_transition(current: ReportStatus, target: ReportStatus) -> None:
    if target not in get_allowed_next(current):
        raise InvalidTransition(
            f"Invalid transition: {current.value} -> {target.value}. "
            f"Allowed next: {[s.value for s in get_allowed_next(current)]}"
        )


def apply_transition_updates(
    target: ReportStatus,
    now: datetime,
    notes: Optional[str] = None,
    assigned_to: Optional[ObjectId] = None,
) -> Dict[str, object]:
    sets: Dict[str, object] = {
        "status": target.value,
        "timestamps.updated_at": now,
    }
    if notes is not None:
        sets["admin_notes"] = notes
    if assigned_to is not None:
        sets["assigned_to"] = assigned_to
    if target == ReportStatus.resolved:
        sets["timestamps.resolved_at"] = now
    return sets


class ReportWorkflowService:
    def __init__(
        self,
        reports: ReportRepository,
        workers: WorkerRepository,
        ledger: CreditLedger,
        audit: Optional[AuditService] = None,
        badges: Optional[BadgeEngine] = None,
        actions: CreditActions = REWARD_CATALOG.actions,
    ):
        self.reports = reports
        self.workers = workers
        self.ledger = ledger
        self.audit = audit
        self.badges = badges or BadgeEngine()
        self.actions = actions

    async def get_report(self, report_id: int) -> Report:
        doc = await self.reports.find_by_report_id(report_id)
        if not doc:
            raise NotFoundError("report", report_id)
        return Report(**doc)

    async def get_worker(self, worker_id: ObjectId, approved_only: bool = True) -> Worker:
        doc = await self.workers.find_by_id(worker_id)
        if not doc or (approved_only and doc.get("status") != WorkerStatus.approved.value):
            raise NotFoundError("worker", worker_id)
        return Worker(**doc)

    async def transition(
        self,
        report_id: int,
        target: ReportStatus,
        actor: dict,
        notes: Optional[str] = None,
        assigned_to: Optional[ObjectId] = None,
    ) -> Report:
        report = await self.get_report(report_id)
        if report.status == target:
            # same status is a no-op unless it reassigns the report
            if assigned_to is None:
                if target == ReportStatus.verified:
                    # repeats a verification bonus that failed to post; ref-guarded
                    await self._reward(
                        report, self.actions.report_verified, "verified",
                        f"Report #{report_id} verified by admin",
                    )
                return report
        else:
            validate_transition(report.status, target)

        now = datetime.utcnow()
        updated = await self.reports.update_if_status(
            report_id,
            report.status.value,
            apply_transition_updates(target, now, notes, assigned_to),
        )
        if updated is None:
            raise InvalidTransition(f"Report #{report_id} changed status concurrently, reload and retry")

        logger.info("report %s status %s -> %s", report_id, report.status.value, target.value)
        if self.audit:
            await self.audit.record(
                "report.status_update",
                actor,
                {"type": "report", "id": report_id},
                f"Report #{report_id} status {report.status.value} → {target.value}",
                {"from": report.status.value, "to": target.value, "notes": notes},
            )

        if report.status == ReportStatus.pending and target == ReportStatus.verified:
            await self._reward(
                report, self.actions.report_verified, "verified",
                f"Report #{report_id} verified by admin",
            )
        return Report(**updated)

    async def assign(self, report_id: int, worker_id: ObjectId, actor: dict) -> Report:
        worker = await self.get_worker(worker_id)
        return await self.transition(
            report_id, ReportStatus.in_progress, actor, assigned_to=worker.id
        )

    async def worker_queue(self, worker: Worker) -> List[Report]:
        if not worker.assigned_zone:
            return []
        rows = await self.reports.list_in_zones(
            [worker.assigned_zone], [s.value for s in WORKER_QUEUE]
        )
        return [Report(**r) for r in rows]

    async def worker_accept(self, report_id: int, worker: Worker) -> Report:
        report = await self.get_report(report_id)
        self._assert_worker_zone(report, worker)
        return await self.transition(
            report_id,
            ReportStatus.in_progress,
            {"role": "worker", "id": str(worker.id)},
            assigned_to=worker.id,
        )

    async def worker_complete(self, report_id: int, worker: Worker, notes: Optional[str] = None) -> Report:
        report = await self.get_report(report_id)
        self._assert_worker_zone(report, worker)
        if report.status == ReportStatus.resolved:
            if report.assigned_to == worker.id:
                await self._reward(
                    report, self.actions.report_resolved, "resolved",
                    f"Report #{report_id} resolved by cleanup team",
                )
            return report
        updated = await self.transition(
            report_id,
            ReportStatus.resolved,
            {"role": "worker", "id": str(worker.id)},
            notes=notes or "Completed by worker",
            assigned_to=worker.id,
        )
        await self.workers.increment_completed(worker.id)
        await self._reward(
            report, self.actions.report_resolved, "resolved",
            f"Report #{report_id} resolved by cleanup team",
        )
        return updated

    @staticmethod
    def _assert_worker_zone(report: Report, worker: Worker) -> None:
        if report.assigned_zone != worker.assigned_zone:
            raise NotFoundError("report in worker zone", report.report_id)

    async def _reward(self, report: Report, amount: int, reason: str, description: str) -> None:
        """
        Post a workflow bonus once per report and reason. The status change is
        already stored when this runs, so a failed post is raised with the
        report id and the same call can be repeated.
        """
        tx = make_transaction(TransactionType.bonus, amount, description)
        try:
            account = await self.ledger.award(
                report.user_id,
                [tx],
                ref=f"report:{report.report_id}:{reason}",
                reports_verified=1,
            )
            await self.ledger.grant_badges(report.user_id, self.badges.evaluate(account))
        except PyMongoError as exc:
            logger.exception(
                "%s bonus failed user_id=%s report_id=%s", reason, report.user_id, report.report_id
            )
            raise SubmissionFailed(
                f"Report #{report.report_id} is {reason} but its credits could not be applied yet, retry",
                report_id=report.report_id,
            ) from exc
