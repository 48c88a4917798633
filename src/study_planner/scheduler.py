"""Greedy day-by-day session scheduling for a syllabus."""
import logging
import math
import uuid
from datetime import date, datetime, timedelta

from study_planner.errors import InvalidInput
from study_planner.models import StudyPlan, StudySession
from study_planner.prioritizer import prioritize_topics, priority_label, priority_score

logger = logging.getLogger(__name__)

MAX_SESSION_MINUTES = 90
SATURDAY = 5


def _new_id() -> str:
    return uuid.uuid4().hex


def _days_between(start: date, end: date) -> int:
    return math.ceil((end - start).total_seconds() / 86400)


def generate_sessions(topics, start_date: date, exam_date: date, daily_hours: float) -> list[StudySession]:
    """Pack topics into weekday sessions between start_date and exam_date.

    Topics are taken in the given order. Each weekday's budget is split into
    chunks of at most MAX_SESSION_MINUTES for the current topic; the next topic
    starts on the following weekday once a day's budget is used up. Weekends
    get no sessions. Scheduling stops when topics or days run out.
    """
    if daily_hours <= 0:
        raise InvalidInput(f"daily hours must be positive, got {daily_hours}")
    topics = list(topics)
    daily_minutes = round(daily_hours * 60)
    total_days = _days_between(start_date, exam_date)

    sessions = []
    current = start_date
    topic_index = 0
    for _ in range(max(total_days, 0)):
        if topic_index >= len(topics):
            break
        if current.weekday() >= SATURDAY:
            current += timedelta(days=1)
            continue

        remaining = daily_minutes
        while remaining > 0 and topic_index < len(topics):
            topic = topics[topic_index]
            duration = min(remaining, MAX_SESSION_MINUTES)
            sessions.append(StudySession(
                id=_new_id(),
                topic_id=topic.id or f"topic_{topic_index}",
                topic_name=topic.name,
                subject=topic.subject,
                scheduled_date=current.date() if isinstance(current, datetime) else current,
                duration=duration,
                priority=priority_label(priority_score(topic)),
            ))
            remaining -= duration
            if remaining <= 0:
                topic_index += 1

        current += timedelta(days=1)
    return sessions


def generate_plan(syllabus, daily_hours: float, start_date: date | None = None,
                  plan_id: str | None = None, now: datetime | None = None) -> StudyPlan:
    """Build a fresh active StudyPlan for a syllabus."""
    start_date = start_date or date.today()
    topics = prioritize_topics(syllabus.topics)
    sessions = generate_sessions(topics, start_date, syllabus.exam_date, daily_hours)
    total_hours = sum(t.estimated_hours for t in syllabus.topics)
    logger.debug(
        "Generated %d sessions for %d topics (syllabus %s)",
        len(sessions), len(topics), syllabus.id,
    )
    return StudyPlan(
        id=plan_id or _new_id(),
        syllabus_id=syllabus.id,
        user_id=syllabus.user_id,
        title=f"Study plan - {syllabus.title}",
        start_date=start_date,
        end_date=syllabus.exam_date,
        total_hours=total_hours,
        daily_hours=daily_hours,
        sessions=tuple(sessions),
        is_active=True,
        progress=0,
        last_updated=now or datetime.now(),
    )
