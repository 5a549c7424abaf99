from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from greencredits.core.errors import NotFoundError, SubmissionFailed, ValidationError
from greencredits.core.zones import CENTRAL, NORTH
from greencredits.models.report import ReportFields
from greencredits.models.zone import Coordinates
from greencredits.services.submission import base_credits, score_report, streak_bonus

NOW = datetime(2025, 3, 1, 6, 0)


def _full_report(**overrides):
    fields = {
        "description": "Overflowing garbage bin near the station crossing",
        "photo_url": "/uploads/report-1.jpg",
        "lat": "27.20",
        "lng": "81.96",
        "address": "Station Road, Gonda",
        "waste_category": "plastic",
        "disposal_method": "recycle",
    }
    fields.update(overrides)
    return ReportFields(**fields)


# -------------------------
# Steps
# -------------------------

def test_quality_score_components():
    assert score_report(_full_report(), Coordinates(lat=27.2, lng=81.96)) == 100
    assert score_report(ReportFields(description="x" * 20), None) == 0
    assert score_report(ReportFields(description="x" * 21), None) == 20
    assert score_report(ReportFields(description="short one", waste_category="glass"), None) == 10


def test_base_credits_threshold():
    assert base_credits(80) == 40
    assert base_credits(79) == 10
    assert base_credits(0) == 10


def test_streak_bonus_is_extra_over_base():
    assert streak_bonus(40, 1) == 0
    assert streak_bonus(10, 2) == 10
    assert streak_bonus(40, 3) == 80


# -------------------------
# Orchestrator
# -------------------------

async def test_first_report_full_flow(submission, repos, make_user):
    user_id = await make_user()
    result = await submission.submit(user_id, _full_report(), now=NOW)

    assert result.report_id == 1001
    assert result.assigned_zone == NORTH
    assert result.quality_score == 100
    assert (result.base_credits, result.streak_bonus, result.credits_earned) == (40, 0, 40)
    assert (result.streak, result.longest_streak, result.streak_multiplier) == (1, 1, 1)
    assert [b.key for b in result.new_badges] == ["first_report"]
    assert result.message == f"Report submitted! Assigned to {NORTH}\nEarned 40 credits"

    account = repos.credits.docs[user_id]
    assert account["total_credits"] == 90
    assert account["available_credits"] == 90
    assert account["report_count"] == 1
    assert [t["type"] for t in account["transactions"]] == ["bonus", "earned"]
    assert account["transactions"][1]["description"] == f"Report #1001 - {NORTH}"

    stored = repos.reports.docs[1001]
    assert stored["status"] == "pending"
    assert stored["lat"] == 27.2
    assert stored["rewards"]["state"] == "applied"

    user = repos.users.docs[user_id]
    assert (user["current_streak"], user["last_report_id"]) == (1, 1001)
    assert [e["type"] for e in repos.audit.events] == ["report.create"]


async def test_seventh_day_triples_credits(submission, repos, make_user):
    user_id = await make_user(
        current_streak=6, longest_streak=6, last_report_at=NOW - timedelta(days=1)
    )
    result = await submission.submit(user_id, _full_report(), now=NOW)

    assert (result.streak, result.streak_multiplier) == (7, 3)
    assert (result.base_credits, result.streak_bonus, result.credits_earned) == (40, 80, 120)
    assert result.message.endswith("Earned 120 credits (3X streak!)")

    txs = repos.credits.docs[user_id]["transactions"][1:]
    assert [(t["type"], t["amount"]) for t in txs] == [("earned", 40), ("bonus", 80)]
    assert txs[1]["description"] == "🔥 7-day streak! (3X)"
    assert repos.credits.docs[user_id]["total_credits"] == 170


async def test_broken_streak_resets_and_keeps_longest(submission, repos, make_user):
    user_id = await make_user(
        current_streak=5, longest_streak=9, last_report_at=NOW - timedelta(days=3)
    )
    result = await submission.submit(user_id, _full_report(), now=NOW)

    assert (result.streak, result.longest_streak, result.streak_bonus) == (1, 9, 0)
    assert repos.users.docs[user_id]["longest_streak"] == 9


async def test_low_quality_report_in_default_zone(submission, repos, make_user):
    user_id = await make_user()
    result = await submission.submit(user_id, ReportFields(description="Garbage pile here"), now=NOW)

    assert result.assigned_zone == CENTRAL
    assert result.quality_score == 0
    assert result.credits_earned == 10


async def test_same_day_reports_share_a_streak_day(submission, repos, make_user):
    user_id = await make_user()
    await submission.submit(user_id, _full_report(), now=NOW)
    second = await submission.submit(user_id, _full_report(), now=NOW + timedelta(hours=2))

    assert second.report_id == 1002
    assert second.streak == 1
    assert repos.credits.docs[user_id]["report_count"] == 2
    assert second.new_badges == []


async def test_malformed_coordinates_do_not_count(submission, repos, make_user):
    user_id = await make_user()
    result = await submission.submit(
        user_id, _full_report(lat="abc", lng="81.9", address=None), now=NOW
    )

    assert result.quality_score == 70
    assert result.credits_earned == 10
    assert result.assigned_zone == CENTRAL
    assert repos.reports.docs[1001]["lat"] is None


@pytest.mark.parametrize("description", ["short", "   abc      ", "", None])
async def test_short_description_rejected_before_any_write(submission, repos, make_user, description):
    user_id = await make_user()
    with pytest.raises(ValidationError):
        await submission.submit(user_id, ReportFields(description=description or ""), now=NOW)

    assert repos.reports.docs == {}
    assert repos.counters.seq == {}
    assert repos.credits.docs[user_id]["total_credits"] == 50


async def test_unknown_user_rejected_before_any_write(submission, repos):
    with pytest.raises(NotFoundError):
        await submission.submit(ObjectId(), _full_report(), now=NOW)
    assert repos.reports.docs == {}


async def test_user_without_account_rejected_before_any_write(submission, repos):
    user = await repos.users.insert({"name": "Ravi", "email": "ravi@example.com",
                                     "current_streak": 0, "longest_streak": 0})
    with pytest.raises(NotFoundError):
        await submission.submit(user["_id"], _full_report(), now=NOW)
    assert repos.reports.docs == {}


async def test_report_id_counter_heals_after_collision(submission, repos, make_user):
    user_id = await make_user()
    repos.counters.seq["reports"] = 1000
    repos.reports.docs[1001] = {"report_id": 1001, "user_id": ObjectId(), "assigned_zone": CENTRAL,
                                "status": "pending", "timestamps": {"created_at": NOW}}

    result = await submission.submit(user_id, _full_report(), now=NOW)
    assert result.report_id == 1002


async def test_reward_failure_is_reported_and_reconciled_once(submission, repos, make_user):
    user_id = await make_user()
    repos.credits.fail_next_post = 1

    with pytest.raises(SubmissionFailed) as exc:
        await submission.submit(user_id, _full_report(), now=NOW)

    assert exc.value.partial
    assert exc.value.report_id == 1001
    stored = repos.reports.docs[1001]
    assert stored["rewards"]["state"] == "failed"
    assert stored["rewards"]["attempts"] == 1
    assert repos.credits.docs[user_id]["total_credits"] == 50

    result = await submission.reconcile(1001)
    assert result.credits_earned == 40
    assert result.streak == 1
    assert repos.reports.docs[1001]["rewards"]["state"] == "applied"

    await submission.reconcile(1001)
    account = repos.credits.docs[user_id]
    assert account["total_credits"] == 90
    assert account["report_count"] == 1
    assert len([t for t in account["transactions"] if t["type"] == "earned"]) == 1
    assert [b["key"] for b in account["badges"]] == ["first_report"]
    assert repos.users.docs[user_id]["current_streak"] == 1


async def test_backlog_waits_for_retry_delay(submission, repos, make_user, settings):
    user_id = await make_user()
    repos.credits.fail_next_post = 1
    with pytest.raises(SubmissionFailed):
        await submission.submit(user_id, _full_report(), now=NOW)

    assert await submission.reconcile_backlog(NOW + timedelta(seconds=5)) == []
    later = NOW + timedelta(seconds=settings.reward_retry_after_seconds + 1)
    assert await submission.reconcile_backlog(later) == [1001]
    assert await submission.reconcile_backlog(later) == []
    assert repos.credits.docs[user_id]["total_credits"] == 90


async def test_reconcile_unknown_report(submission):
    with pytest.raises(NotFoundError):
        await submission.reconcile(4242)


async def test_own_reports_listed_newest_first(submission, user_service, make_user):
    user_id = await make_user()
    await submission.submit(user_id, _full_report(), now=NOW)
    await submission.submit(user_id, _full_report(), now=NOW + timedelta(days=1))

    rows = await user_service.list_reports(user_id)
    assert [r["report_id"] for r in rows] == [1002, 1001]
    assert rows[0]["rewards_state"] == "applied"


async def test_rewards_are_stamped_with_submission_time(submission, repos, make_user):
    user_id = await make_user()
    await submission.submit(user_id, _full_report(), now=NOW)

    account = repos.credits.docs[user_id]
    assert account["transactions"][-1]["timestamp"] == NOW
    assert account["badges"][0]["earned_at"] == NOW
    assert repos.reports.docs[1001]["rewards"]["applied_at"] == NOW
