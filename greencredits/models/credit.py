from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import Field

from greencredits.core.enums import BadgeCounter, TransactionType
from greencredits.models.common import FrozenModel, GCBaseModel, PyObjectId


class Transaction(GCBaseModel):
    type: TransactionType
    amount: int
    description: str
    ref: Optional[str] = None
    timestamp: datetime


class EarnedBadge(GCBaseModel):
    key: str
    name: str
    icon: str
    earned_at: datetime


class CreditAccount(GCBaseModel):
    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    user_id: PyObjectId
    total_credits: int = 0
    available_credits: int = 0
    report_count: int = 0
    reports_verified: int = 0
    badges: List[EarnedBadge] = Field(default_factory=list)
    transactions: List[Transaction] = Field(default_factory=list)

    def has_badge(self, key: str) -> bool:
        return any(b.key == key for b in self.badges)

    def counter(self, field: BadgeCounter) -> int:
        return int(getattr(self, field.value))


class CreditActions(FrozenModel):
    report_submitted: int = 10
    report_verified: int = 20
    high_quality_report: int = 30
    welcome_bonus: int = 50
    report_resolved: int = 20


class BadgeDefinition(FrozenModel):
    key: str
    name: str
    icon: str
    counter: BadgeCounter
    threshold: int


class QualityWeights(FrozenModel):
    photo: int = 30
    coordinates: int = 30
    detailed_description: int = 20
    category: int = 10
    disposal_method: int = 10
    # description must be strictly longer than this to count as detailed
    detailed_description_length: int = 20
    high_quality_threshold: int = 80


class RewardCatalog(FrozenModel):
    version: str
    actions: CreditActions
    badges: Tuple[BadgeDefinition, ...]
    quality: QualityWeights
