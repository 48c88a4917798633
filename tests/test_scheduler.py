from datetime import date, datetime, timedelta

import pytest

from study_planner.errors import InvalidInput
from study_planner.models import Syllabus, Topic
from study_planner.scheduler import MAX_SESSION_MINUTES, generate_plan, generate_sessions

MONDAY = date(2026, 10, 19)


def _topic(id, weight=50, difficulty="medium", hours=5):
    return Topic(id=id, name=f"Topic {id}", subject=f"Subject {id}", weight=weight,
                 estimated_hours=hours, difficulty=difficulty)


def test_single_topic_fills_first_weekday():
    """4h/day, one topic: 90 + 90 + 60 minutes on the first day, then done."""
    exam = MONDAY + timedelta(days=12)
    sessions = generate_sessions([_topic("a", hours=1)], MONDAY, exam, daily_hours=4)
    assert [s.duration for s in sessions] == [90, 90, 60]
    assert all(s.scheduled_date == MONDAY for s in sessions)
    assert all(s.topic_id == "a" for s in sessions)


def test_one_topic_per_weekday_when_budget_fits_one_chunk():
    friday = MONDAY + timedelta(days=4)
    topics = [_topic("a"), _topic("b"), _topic("c")]
    sessions = generate_sessions(topics, friday, friday + timedelta(days=10), daily_hours=1)
    assert [(s.topic_id, s.scheduled_date) for s in sessions] == [
        ("a", friday),
        ("b", friday + timedelta(days=3)),
        ("c", friday + timedelta(days=4)),
    ]
    assert all(s.duration == 60 for s in sessions)


def test_daily_budget_split_into_capped_chunks():
    sessions = generate_sessions([_topic("a"), _topic("b")], MONDAY, MONDAY + timedelta(days=5), daily_hours=2)
    assert [(s.topic_id, s.duration) for s in sessions] == [("a", 90), ("a", 30), ("b", 90), ("b", 30)]
    assert sessions[2].scheduled_date == MONDAY + timedelta(days=1)


def test_no_sessions_on_weekends():
    topics = [_topic(str(i)) for i in range(20)]
    sessions = generate_sessions(topics, MONDAY, MONDAY + timedelta(days=30), daily_hours=3)
    assert sessions
    assert all(s.scheduled_date.weekday() < 5 for s in sessions)


def test_every_session_within_cap():
    topics = [_topic(str(i)) for i in range(10)]
    sessions = generate_sessions(topics, MONDAY, MONDAY + timedelta(days=14), daily_hours=7.5)
    assert all(0 < s.duration <= MAX_SESSION_MINUTES for s in sessions)


def test_days_run_out_before_topics():
    topics = [_topic(str(i)) for i in range(10)]
    sessions = generate_sessions(topics, MONDAY, MONDAY + timedelta(days=3), daily_hours=1)
    assert [s.topic_id for s in sessions] == ["0", "1", "2"]


def test_sessions_stop_before_exam_date():
    exam = MONDAY + timedelta(days=2)
    topics = [_topic(str(i)) for i in range(5)]
    sessions = generate_sessions(topics, MONDAY, exam, daily_hours=1)
    assert all(s.scheduled_date < exam for s in sessions)
    assert len(sessions) == 2


def test_weekend_only_window_is_empty():
    saturday = MONDAY - timedelta(days=2)
    assert generate_sessions([_topic("a")], saturday, MONDAY, daily_hours=4) == []


@pytest.mark.parametrize("offset", [0, -1, -10])
def test_exam_not_after_start_gives_no_sessions(offset):
    assert generate_sessions([_topic("a")], MONDAY, MONDAY + timedelta(days=offset), daily_hours=4) == []


def test_zero_topics_gives_no_sessions():
    assert generate_sessions([], MONDAY, MONDAY + timedelta(days=10), daily_hours=4) == []


@pytest.mark.parametrize("hours", [0, -2])
def test_non_positive_daily_hours_rejected(hours):
    with pytest.raises(InvalidInput):
        generate_sessions([_topic("a")], MONDAY, MONDAY + timedelta(days=10), daily_hours=hours)


def test_session_priority_from_score():
    topics = [_topic("h", 100, "hard"), _topic("m", 50, "medium"), _topic("l", 50, "easy")]
    sessions = generate_sessions(topics, MONDAY, MONDAY + timedelta(days=5), daily_hours=1)
    assert {s.topic_id: s.priority for s in sessions} == {"h": "high", "m": "medium", "l": "low"}


def test_missing_topic_id_gets_positional_id():
    sessions = generate_sessions([_topic("")], MONDAY, MONDAY + timedelta(days=3), daily_hours=1)
    assert sessions[0].topic_id == "topic_0"


def test_sessions_start_pending_with_unique_ids():
    topics = [_topic(str(i)) for i in range(4)]
    sessions = generate_sessions(topics, MONDAY, MONDAY + timedelta(days=10), daily_hours=3)
    assert all(s.status == "pending" for s in sessions)
    assert len({s.id for s in sessions}) == len(sessions)


def test_generate_plan_orders_by_priority(topics):
    syllabus = Syllabus(id="syl", user_id="u1", title="Tax Auditor", exam_date=MONDAY + timedelta(days=14),
                        topics=tuple(topics))
    now = datetime(2026, 10, 19, 8, 0)
    plan = generate_plan(syllabus, daily_hours=1, start_date=MONDAY, now=now)
    assert [s.topic_id for s in plan.sessions] == ["math", "port", "law"]
    assert plan.total_hours == 38
    assert plan.daily_hours == 1
    assert plan.progress == 0
    assert plan.is_active is True
    assert plan.start_date == MONDAY
    assert plan.end_date == syllabus.exam_date
    assert plan.syllabus_id == "syl"
    assert plan.user_id == "u1"
    assert plan.title == "Study plan - Tax Auditor"
    assert plan.last_updated == now


def test_generate_plan_empty_syllabus_is_valid_shell():
    syllabus = Syllabus(id="syl", user_id="u1", title="Empty", exam_date=MONDAY + timedelta(days=7))
    plan = generate_plan(syllabus, daily_hours=2, start_date=MONDAY)
    assert plan.sessions == ()
    assert plan.total_hours == 0
    assert plan.is_active


def test_generate_plan_past_exam_date(topics):
    syllabus = Syllabus(id="syl", user_id="u1", title="Late", exam_date=MONDAY - timedelta(days=3),
                        topics=tuple(topics))
    plan = generate_plan(syllabus, daily_hours=2, start_date=MONDAY)
    assert plan.sessions == ()
    assert plan.total_hours == 38


def test_generate_plan_defaults_start_to_today(topics):
    syllabus = Syllabus(id="syl", user_id="u1", title="T", exam_date=date.today() + timedelta(days=30),
                        topics=tuple(topics))
    plan = generate_plan(syllabus, daily_hours=2)
    assert plan.start_date == date.today()
    assert all(s.scheduled_date >= date.today() for s in plan.sessions)
