from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

from greencredits.models.credit import EarnedBadge


class SubmitReportResponse(BaseModel):
    message: str
    report_id: int
    zone: str
    credits_earned: int
    base_credits: int
    streak_bonus: int
    streak: int
    longest_streak: int
    streak_multiplier: int
    quality_score: int
    new_badges: List[EarnedBadge] = Field(default_factory=list)


class ReportOut(BaseModel):
    report_id: int
    user_id: Optional[str] = None
    description: str
    photo_url: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    address: Optional[str] = None
    assigned_zone: Optional[str] = None
    waste_category: Optional[str] = None
    disposal_method: Optional[str] = None
    quality_score: int = 0
    status: str
    assigned_to: Optional[str] = None
    admin_notes: Optional[str] = None
    rewards_state: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None


class StatusUpdateBody(BaseModel):
    status: str
    admin_notes: Optional[str] = None


class AssignBody(BaseModel):
    worker_id: str


class CompleteBody(BaseModel):
    notes: Optional[str] = None
