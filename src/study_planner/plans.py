"""Session bookkeeping on StudyPlan records."""
from dataclasses import replace
from datetime import date, datetime, timedelta

from study_planner.errors import InvalidInput, NotFound
from study_planner.models import PRIORITIES, SESSION_STATUSES
from study_planner.performance import round_half_up

UNSET = object()


def calculate_progress(sessions) -> int:
    if not sessions:
        return 0
    completed = sum(1 for s in sessions if s.status == "completed")
    return round_half_up(completed / len(sessions) * 100)


def update_session(plan, session_id: str, status: str | None = None, actual_duration=UNSET,
                   notes=UNSET, performance=UNSET, now: datetime | None = None):
    """Return a new plan with one session's fields updated and progress recomputed.

    Fields left out keep their current value.
    """
    if status is not None and status not in SESSION_STATUSES:
        raise InvalidInput(f"unknown session status {status!r}")
    if performance is not UNSET and performance is not None and not 0 <= performance <= 100:
        raise InvalidInput(f"performance must be 0-100, got {performance}")

    found = False
    sessions = []
    for s in plan.sessions:
        if s.id == session_id:
            found = True
            changes = {}
            if status is not None:
                changes["status"] = status
            if actual_duration is not UNSET:
                changes["actual_duration"] = actual_duration
            if notes is not UNSET:
                changes["notes"] = notes
            if performance is not UNSET:
                changes["performance"] = performance
            s = replace(s, **changes)
        sessions.append(s)
    if not found:
        raise NotFound(f"session {session_id} not found in plan {plan.id}")

    return replace(
        plan,
        sessions=tuple(sessions),
        progress=calculate_progress(sessions),
        last_updated=now or datetime.now(),
    )


def sessions_on(sessions, day: date) -> list:
    return [s for s in sessions if s.scheduled_date == day]


def sessions_by_priority(sessions, priority: str) -> list:
    if priority not in PRIORITIES:
        raise InvalidInput(f"unknown priority {priority!r}")
    return [s for s in sessions if s.priority == priority]


def overdue_sessions(sessions, today: date | None = None) -> list:
    """Pending sessions scheduled before today."""
    today = today or date.today()
    return [s for s in sessions if s.scheduled_date < today and s.status == "pending"]


def upcoming_sessions(sessions, today: date | None = None, days: int = 7) -> list:
    """Pending sessions from today through today + days, earliest first."""
    today = today or date.today()
    end = today + timedelta(days=days)
    upcoming = [
        s for s in sessions
        if today <= s.scheduled_date <= end and s.status == "pending"
    ]
    return sorted(upcoming, key=lambda s: s.scheduled_date)


def study_streak(sessions, today: date | None = None) -> int:
    """Consecutive days, ending today, that have a completed session."""
    today = today or date.today()
    studied = {s.scheduled_date for s in sessions if s.status == "completed"}
    streak = 0
    day = today
    while day in studied:
        streak += 1
        day -= timedelta(days=1)
    return streak
