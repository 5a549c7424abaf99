from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError, PyMongoError

from greencredits.core.config import Settings, get_settings
from greencredits.core.enums import ReportStatus, RewardState, TransactionType
from greencredits.core.errors import (
    GreenCreditsError,
    NotFoundError,
    SubmissionFailed,
    ValidationError,
)
from greencredits.core.rewards import REWARD_CATALOG
from greencredits.models.credit import QualityWeights, RewardCatalog
from greencredits.models.report import Report, ReportFields, SubmissionResult
from greencredits.models.user import User
from greencredits.models.zone import Coordinates
from greencredits.repositories.counter_repository import CounterRepository
from greencredits.repositories.report_repository import ReportRepository
from greencredits.repositories.user_repository import UserRepository
from greencredits.services.audit_service import AuditService
from greencredits.services.badges import BadgeEngine
from greencredits.services.ledger import CreditLedger, make_transaction
from greencredits.services.streaks import StreakTracker, StreakUpdate
from greencredits.services.zone_classifier import ZoneClassifier, parse_coordinates, zone_classifier

logger = logging.getLogger(__name__)

REPORT_COUNTER = "reports"


# -------------------------
# Steps
# -------------------------

def validate_description(description: Optional[str], min_length: int) -> str:
    text = (description or "").strip()
    if len(text) < min_length:
        raise ValidationError(f"Description must be at least {min_length} characters")
    return text


def score_report(
    fields: ReportFields,
    coordinates: Optional[Coordinates],
    weights: QualityWeights = REWARD_CATALOG.quality,
) -> int:
    score = 0
    if fields.photo_url:
        score += weights.photo
    if coordinates is not None:
        score += weights.coordinates
    if len((fields.description or "").strip()) > weights.detailed_description_length:
        score += weights.detailed_description
    if fields.waste_category:
        score += weights.category
    if fields.disposal_method:
        score += weights.disposal_method
    return score


def base_credits(quality_score: int, catalog: RewardCatalog = REWARD_CATALOG) -> int:
    credits = catalog.actions.report_submitted
    if quality_score >= catalog.quality.high_quality_threshold:
        credits += catalog.actions.high_quality_report
    return credits


def streak_bonus(base: int, multiplier: int) -> int:
    return math.floor(base * (multiplier - 1))


def summary_message(zone: str, total: int, bonus: int, multiplier: int) -> str:
    message = f"Report submitted! Assigned to {zone}\nEarned {total} credits"
    if bonus > 0:
        message += f" ({multiplier}X streak!)"
    return message


# -------------------------
# Orchestrator
# -------------------------

class ReportSubmissionService:
    def __init__(
        self,
        reports: ReportRepository,
        users: UserRepository,
        counters: CounterRepository,
        ledger: CreditLedger,
        audit: Optional[AuditService] = None,
        classifier: ZoneClassifier = zone_classifier,
        badges: Optional[BadgeEngine] = None,
        catalog: RewardCatalog = REWARD_CATALOG,
        settings: Optional[Settings] = None,
    ):
        self.reports = reports
        self.users = users
        self.counters = counters
        self.ledger = ledger
        self.audit = audit
        self.classifier = classifier
        self.catalog = catalog
        self.badges = badges or BadgeEngine(catalog.badges)
        self.settings = settings or get_settings()
        self.streaks = StreakTracker(self.settings.streak_timezone)

    async def submit(
        self, user_id: ObjectId, fields: ReportFields, now: Optional[datetime] = None
    ) -> SubmissionResult:
        description = validate_description(fields.description, self.settings.min_description_length)
        now = now or datetime.utcnow()

        try:
            user = await self._load_user(user_id)
            # fail before any write when the account is missing
            await self.ledger.get_account(user_id)

            coordinates = parse_coordinates(fields.lat, fields.lng)
            quality_score = score_report(fields, coordinates, self.catalog.quality)
            zone = self.classifier.classify(fields.address, coordinates)

            doc = {
                "user_id": user_id,
                "description": description,
                "photo_url": fields.photo_url or None,
                "lat": coordinates.lat if coordinates else None,
                "lng": coordinates.lng if coordinates else None,
                "address": fields.address or None,
                "assigned_zone": zone,
                "waste_category": fields.waste_category or None,
                "disposal_method": fields.disposal_method or None,
                "quality_score": quality_score,
                "status": ReportStatus.pending.value,
                "assigned_to": None,
                "admin_notes": None,
                "timestamps": {"created_at": now, "updated_at": now, "resolved_at": None},
                "rewards": {"state": RewardState.pending.value, "attempts": 0},
            }
            doc = await self._insert_with_report_id(doc)
        except GreenCreditsError:
            raise
        except PyMongoError as exc:
            logger.exception("report submission failed before save user_id=%s", user_id)
            raise SubmissionFailed("Failed to submit report") from exc

        report = Report(**doc)
        logger.info("report saved report_id=%s zone=%s", report.report_id, zone)

        try:
            result = await self.apply_rewards(report, user, now=now)
        except Exception as exc:
            logger.exception(
                "reward application failed user_id=%s report_id=%s", user_id, report.report_id
            )
            await self._mark_failed(report.report_id, exc)
            raise SubmissionFailed(
                f"Report #{report.report_id} was saved but credits could not be applied yet",
                report_id=report.report_id,
            ) from exc

        if self.audit:
            await self.audit.record(
                "report.create",
                {"role": "citizen", "id": str(user_id)},
                {"type": "report", "id": report.report_id},
                f"Report #{report.report_id} submitted",
                {"zone": zone, "quality_score": quality_score, "credits": result.credits_earned},
            )
        return result

    async def apply_rewards(
        self, report: Report, user: Optional[User] = None, now: Optional[datetime] = None
    ) -> SubmissionResult:
        """
        Streak, ledger posting and badges for one stored report.

        Safe to run again for the same report: the streak snapshot is reused,
        the ledger post is keyed by report and badges are unique per key.
        """
        now = now or datetime.utcnow()
        user = user or await self._load_user(report.user_id)
        submitted_at = report.timestamps.created_at
        rid = report.report_id

        update = self._snapshot(report)
        if update is None:
            update = self.streaks.update(user, submitted_at)
            await self.reports.set_fields(rid, {
                "rewards.streak": update.current_streak,
                "rewards.longest_streak": update.longest_streak,
                "rewards.multiplier": update.multiplier,
            })
        await self.users.apply_streak(
            user.id, rid, submitted_at, update.current_streak, update.longest_streak
        )

        base = base_credits(report.quality_score, self.catalog)
        bonus = streak_bonus(base, update.multiplier)
        transactions = [
            make_transaction(
                TransactionType.earned, base, f"Report #{rid} - {report.assigned_zone}", at=now
            )
        ]
        if bonus > 0:
            transactions.append(
                make_transaction(
                    TransactionType.bonus,
                    bonus,
                    f"🔥 {update.current_streak}-day streak! ({update.multiplier}X)",
                    at=now,
                )
            )
        account = await self.ledger.award(
            user.id, transactions, ref=f"report:{rid}:submitted", report_count=1
        )

        new_badges = await self.ledger.grant_badges(user.id, self.badges.evaluate(account, now))
        for badge in new_badges:
            logger.info("badge unlocked user_id=%s badge=%s", user.id, badge.key)

        await self.reports.set_fields(rid, {
            "rewards.state": RewardState.applied.value,
            "rewards.base_credits": base,
            "rewards.streak_bonus": bonus,
            "rewards.error": None,
            "rewards.applied_at": now,
        })

        total = base + bonus
        return SubmissionResult(
            report_id=rid,
            assigned_zone=report.assigned_zone,
            credits_earned=total,
            base_credits=base,
            streak_bonus=bonus,
            streak=update.current_streak,
            longest_streak=update.longest_streak,
            streak_multiplier=update.multiplier,
            quality_score=report.quality_score,
            new_badges=new_badges,
            message=summary_message(report.assigned_zone, total, bonus, update.multiplier),
        )

    async def reconcile(self, report_id: int) -> SubmissionResult:
        doc = await self.reports.find_by_report_id(report_id)
        if not doc:
            raise NotFoundError("report", report_id)
        return await self.apply_rewards(Report(**doc))

    async def reconcile_backlog(self, now: Optional[datetime] = None) -> List[int]:
        """Re-apply rewards for reports left pending/failed past the retry delay."""
        now = now or datetime.utcnow()
        cutoff = now - timedelta(seconds=self.settings.reward_retry_after_seconds)
        applied = []
        for doc in await self.reports.find_reward_backlog(cutoff):
            report = Report(**doc)
            try:
                await self.apply_rewards(report, now=now)
            except Exception as exc:
                logger.exception(
                    "reward retry failed user_id=%s report_id=%s", report.user_id, report.report_id
                )
                await self._mark_failed(report.report_id, exc)
                continue
            applied.append(report.report_id)
        if applied:
            logger.info("rewards reconciled for reports %s", applied)
        return applied

    # -------------------------
    # Helpers
    # -------------------------

    async def _load_user(self, user_id: ObjectId) -> User:
        doc = await self.users.find_by_id(user_id)
        if not doc:
            raise NotFoundError("user", user_id)
        return User(**doc)

    @staticmethod
    def _snapshot(report: Report) -> Optional[StreakUpdate]:
        r = report.rewards
        if r.streak is None or r.multiplier is None:
            return None
        return StreakUpdate(
            current_streak=r.streak,
            longest_streak=r.longest_streak or r.streak,
            multiplier=r.multiplier,
            last_report_at=report.timestamps.created_at,
        )

    async def _next_report_id(self) -> int:
        seq = await self.counters.next_value(REPORT_COUNTER)
        if seq < self.settings.report_id_start:
            await self._sync_counter_to_latest()
            seq = await self.counters.next_value(REPORT_COUNTER)
        return seq

    async def _sync_counter_to_latest(self) -> int:
        """
        Self-healing: if the counter is behind the stored reports, raise it to
        the latest report_id (or just below the first id on an empty store).
        """
        latest = await self.reports.max_report_id()
        floor = max(latest or 0, self.settings.report_id_start - 1)
        await self.counters.raise_to(REPORT_COUNTER, floor)
        return floor

    async def _insert_with_report_id(self, doc: dict) -> dict:
        for attempt in range(self.settings.report_id_attempts):
            doc["report_id"] = await self._next_report_id()
            try:
                return await self.reports.insert(dict(doc))
            except DuplicateKeyError:
                logger.warning("report_id %s already taken, retrying", doc["report_id"])
                if attempt == 0:
                    await self._sync_counter_to_latest()
        raise SubmissionFailed("Failed to generate unique report_id after retries")

    async def _mark_failed(self, report_id: int, exc: Exception) -> None:
        try:
            await self.reports.record_reward_failure(report_id, repr(exc), datetime.utcnow())
        except PyMongoError:
            logger.exception("could not record reward failure report_id=%s", report_id)
