from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from greencredits.core.enums import AdminRole, WorkerStatus
from greencredits.models.common import GCBaseModel, PyObjectId


class User(GCBaseModel):
    id: PyObjectId = Field(alias="_id")
    name: str = ""
    email: Optional[str] = None
    current_streak: int = 0
    longest_streak: int = 0
    last_report_at: Optional[datetime] = None
    last_report_id: Optional[int] = None
    created_at: Optional[datetime] = None


class Worker(GCBaseModel):
    id: PyObjectId = Field(alias="_id")
    name: str
    mobile: str
    email: Optional[str] = None
    address: Optional[str] = None
    assigned_zone: Optional[str] = None
    status: WorkerStatus = WorkerStatus.pending
    applied_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[PyObjectId] = None
    total_reports_completed: int = 0


class AdminPermissions(GCBaseModel):
    can_approve_workers: bool = False
    can_assign_work: bool = False
    can_view_reports: bool = True
    can_manage_officers: bool = False


class Admin(GCBaseModel):
    id: PyObjectId = Field(alias="_id")
    name: str
    email: str
    phone: Optional[str] = None
    role: AdminRole
    department: Optional[str] = None
    assigned_zones: List[str] = Field(default_factory=list)
    is_active: bool = True
    permissions: AdminPermissions = Field(default_factory=AdminPermissions)

    @property
    def zone_scope(self) -> Optional[List[str]]:
        """Zones this admin may see, or None for every zone."""
        if self.role == AdminRole.zone_officer and self.assigned_zones:
            return list(self.assigned_zones)
        return None
