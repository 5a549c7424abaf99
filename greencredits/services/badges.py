from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from greencredits.core.rewards import REWARD_CATALOG
from greencredits.models.common import GCBaseModel
from greencredits.models.credit import BadgeDefinition, CreditAccount, EarnedBadge


class BadgeProgress(GCBaseModel):
    key: str
    name: str
    icon: str
    counter: str
    threshold: int
    progress: float


class BadgeEngine:
    def __init__(self, catalog: Sequence[BadgeDefinition] = REWARD_CATALOG.badges):
        self.catalog = tuple(catalog)

    def evaluate(
        self, account: CreditAccount, now: Optional[datetime] = None
    ) -> List[EarnedBadge]:
        """
        Append every badge whose threshold the account now meets and return
        only those added by this call.
        """
        now = now or datetime.utcnow()
        unlocked: List[EarnedBadge] = []
        for badge in self.catalog:
            if account.has_badge(badge.key):
                continue
            if account.counter(badge.counter) >= badge.threshold:
                earned = EarnedBadge(
                    key=badge.key, name=badge.name, icon=badge.icon, earned_at=now
                )
                account.badges.append(earned)
                unlocked.append(earned)
        return unlocked

    def progress(self, account: CreditAccount) -> List[BadgeProgress]:
        out: List[BadgeProgress] = []
        for badge in self.catalog:
            if account.has_badge(badge.key):
                continue
            value = account.counter(badge.counter)
            out.append(
                BadgeProgress(
                    key=badge.key,
                    name=badge.name,
                    icon=badge.icon,
                    counter=badge.counter.value,
                    threshold=badge.threshold,
                    progress=min(100.0, 100.0 * value / badge.threshold),
                )
            )
        return out
