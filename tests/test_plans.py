from datetime import date, timedelta

import pytest

from study_planner.errors import InvalidInput, NotFound
from study_planner.models import StudyPlan, StudySession
from study_planner.plans import (
    calculate_progress, overdue_sessions, sessions_by_priority, sessions_on,
    study_streak, update_session, upcoming_sessions,
)

TODAY = date(2026, 10, 21)


def _session(id, offset=0, status="pending", priority="medium"):
    return StudySession(id=id, topic_id="t", topic_name="T", subject="S",
                        scheduled_date=TODAY + timedelta(days=offset), duration=60,
                        status=status, priority=priority)


def _plan(*sessions):
    return StudyPlan(id="p1", syllabus_id="s1", user_id="u1", start_date=TODAY, end_date=TODAY,
                     total_hours=1, daily_hours=1, sessions=tuple(sessions))


def test_progress_empty_plan():
    assert calculate_progress([]) == 0


def test_progress_rounds():
    assert calculate_progress([_session("1", status="completed"), _session("2"), _session("3")]) == 33
    assert calculate_progress([_session("1", status="completed"), _session("2", status="completed"),
                               _session("3")]) == 67


def test_postponed_does_not_count_as_completed():
    assert calculate_progress([_session("1", status="postponed"), _session("2")]) == 0


def test_update_session_recomputes_progress():
    plan = _plan(_session("1"), _session("2"), _session("3"), _session("4"))
    updated = update_session(plan, "2", status="completed", actual_duration=55, performance=80)
    assert updated.progress == 25
    s = updated.sessions[1]
    assert (s.status, s.actual_duration, s.performance) == ("completed", 55, 80)
    assert plan.sessions[1].status == "pending"


def test_update_session_keeps_unspecified_fields():
    plan = _plan(StudySession(id="1", topic_id="t", topic_name="T", subject="S", scheduled_date=TODAY,
                              duration=60, notes="read ch.3", actual_duration=40))
    updated = update_session(plan, "1", status="postponed")
    assert updated.sessions[0].notes == "read ch.3"
    assert updated.sessions[0].actual_duration == 40


def test_update_session_can_clear_notes():
    plan = _plan(_session("1"))
    plan = update_session(plan, "1", notes="x")
    assert update_session(plan, "1", notes=None).sessions[0].notes is None


def test_update_unknown_session():
    with pytest.raises(NotFound):
        update_session(_plan(_session("1")), "nope", status="completed")


def test_update_rejects_bad_status_and_performance():
    plan = _plan(_session("1"))
    with pytest.raises(InvalidInput):
        update_session(plan, "1", status="done")
    with pytest.raises(InvalidInput):
        update_session(plan, "1", performance=120)


def test_sessions_on_and_by_priority():
    sessions = [_session("1", 0, priority="high"), _session("2", 1), _session("3", 0)]
    assert [s.id for s in sessions_on(sessions, TODAY)] == ["1", "3"]
    assert [s.id for s in sessions_by_priority(sessions, "high")] == ["1"]
    with pytest.raises(InvalidInput):
        sessions_by_priority(sessions, "urgent")


def test_overdue_sessions():
    sessions = [_session("1", -2), _session("2", -1, status="completed"), _session("3", 0)]
    assert [s.id for s in overdue_sessions(sessions, TODAY)] == ["1"]


def test_upcoming_sessions_window_and_order():
    sessions = [_session("far", 10), _session("b", 3), _session("a", 0), _session("past", -1),
                _session("done", 1, status="completed")]
    assert [s.id for s in upcoming_sessions(sessions, TODAY, days=7)] == ["a", "b"]


def test_study_streak():
    sessions = [_session("1", 0, "completed"), _session("2", -1, "completed"),
                _session("3", -2, "completed"), _session("4", -4, "completed")]
    assert study_streak(sessions, TODAY) == 3


def test_study_streak_needs_today():
    assert study_streak([_session("1", -1, "completed")], TODAY) == 0
