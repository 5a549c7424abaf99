from enum import Enum


class ReportStatus(str, Enum):
    pending = "pending"
    verified = "verified"
    in_progress = "in-progress"
    resolved = "resolved"
    rejected = "rejected"


class TransactionType(str, Enum):
    earned = "earned"
    bonus = "bonus"
    redeemed = "redeemed"


class RewardState(str, Enum):
    pending = "pending"
    applied = "applied"
    failed = "failed"


class AdminRole(str, Enum):
    super_admin = "super_admin"
    zone_officer = "zone_officer"


class WorkerStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class BadgeCounter(str, Enum):
    report_count = "report_count"
    total_credits = "total_credits"
