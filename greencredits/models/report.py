from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field

from greencredits.core.enums import ReportStatus, RewardState
from greencredits.models.common import GCBaseModel, PyObjectId
from greencredits.models.credit import EarnedBadge


class ReportFields(GCBaseModel):
    """Submitted fields, as received. Coordinates may arrive as raw strings."""

    description: str = ""
    photo_url: Optional[str] = None
    lat: Any = None
    lng: Any = None
    address: Optional[str] = None
    waste_category: Optional[str] = None
    disposal_method: Optional[str] = None


class Timestamps(GCBaseModel):
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None


class RewardRecord(GCBaseModel):
    state: RewardState = RewardState.pending
    streak: Optional[int] = None
    longest_streak: Optional[int] = None
    multiplier: Optional[int] = None
    base_credits: Optional[int] = None
    streak_bonus: Optional[int] = None
    error: Optional[str] = None
    attempts: int = 0
    applied_at: Optional[datetime] = None


class Report(GCBaseModel):
    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    report_id: int
    user_id: PyObjectId
    description: str
    photo_url: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    address: Optional[str] = None
    assigned_zone: str
    waste_category: Optional[str] = None
    disposal_method: Optional[str] = None
    quality_score: int = 0
    status: ReportStatus = ReportStatus.pending
    assigned_to: Optional[PyObjectId] = None
    admin_notes: Optional[str] = None
    timestamps: Timestamps
    rewards: RewardRecord = Field(default_factory=RewardRecord)


class SubmissionResult(GCBaseModel):
    report_id: int
    assigned_zone: str
    credits_earned: int
    base_credits: int
    streak_bonus: int
    streak: int
    longest_streak: int
    streak_multiplier: int
    quality_score: int
    new_badges: List[EarnedBadge] = Field(default_factory=list)
    message: str
