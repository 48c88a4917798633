"""Syllabus and study plan persistence around the scheduling core."""
import json
import logging
import sqlite3
import uuid
from dataclasses import asdict, replace
from datetime import date, datetime

from study_planner.adapter import adapt_plan
from study_planner.config import DEFAULT_DAILY_HOURS
from study_planner.db import get_connection
from study_planner.errors import InvalidInput, NotFound, PreconditionViolation
from study_planner.exams import load_exam_results
from study_planner.models import DIFFICULTIES, StudyPlan, StudySession, Syllabus, Topic
from study_planner.performance import aggregate_performance
from study_planner.plans import UNSET, update_session, upcoming_sessions
from study_planner.scheduler import generate_plan

logger = logging.getLogger(__name__)


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _validate_topic(topic: Topic) -> None:
    if not topic.name or not topic.subject:
        raise InvalidInput("topic name and subject are required")
    if not 0 <= topic.weight <= 100:
        raise InvalidInput(f"topic weight must be 0-100, got {topic.weight} for {topic.name!r}")
    if topic.estimated_hours < 0:
        raise InvalidInput(f"estimated hours cannot be negative for {topic.name!r}")


def _normalise_difficulty(topic: Topic) -> Topic:
    # Unrecognised values are stored as given and weigh like easy topics.
    difficulty = str(topic.difficulty or "").strip().lower()
    if difficulty in DIFFICULTIES and difficulty != topic.difficulty:
        return replace(topic, difficulty=difficulty)
    return topic


# --- Syllabi ---


def create_syllabus(db_path: str, user_id: str, title: str, exam_date: date, topics,
                    exam_type: str = "", organization: str = "", description: str = "") -> Syllabus:
    if not title:
        raise InvalidInput("syllabus title is required")
    topics = list(topics)
    if not topics:
        raise InvalidInput("a syllabus needs at least one topic")
    for t in topics:
        _validate_topic(t)
    topics = [_normalise_difficulty(t if t.id else replace(t, id=uuid.uuid4().hex)) for t in topics]
    ids = [t.id for t in topics]
    if len(set(ids)) != len(ids):
        raise InvalidInput("topic ids must be unique within a syllabus")
    syllabus = Syllabus(
        id=uuid.uuid4().hex, user_id=user_id, title=title, exam_date=exam_date,
        topics=tuple(topics), exam_type=exam_type, organization=organization,
        description=description,
    )
    conn = get_connection(db_path)
    try:
        conn.execute(
            """INSERT INTO syllabi (id, user_id, title, exam_type, organization, description, exam_date, is_active, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, 1, ?)""",
            (syllabus.id, user_id, title, exam_type, organization, description,
             exam_date.isoformat(), datetime.now().isoformat()),
        )
        conn.executemany(
            """INSERT INTO topics (id, syllabus_id, position, name, subject, weight, estimated_hours,
                difficulty, prerequisites, subtopics, description)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            [
                (t.id, syllabus.id, position, t.name, t.subject, t.weight, t.estimated_hours,
                 t.difficulty, json.dumps(list(t.prerequisites)), json.dumps(list(t.subtopics)), t.description)
                for position, t in enumerate(topics)
            ],
        )
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
    logger.info("Created syllabus %s with %d topics", syllabus.id, len(topics))
    return syllabus


def _row_to_topic(row) -> Topic:
    return Topic(
        id=row["id"],
        name=row["name"],
        subject=row["subject"],
        weight=row["weight"],
        estimated_hours=row["estimated_hours"],
        difficulty=row["difficulty"],
        prerequisites=tuple(json.loads(row["prerequisites"] or "[]")),
        subtopics=tuple(json.loads(row["subtopics"] or "[]")),
        description=row["description"] or "",
    )


def _load_syllabus(conn, syllabus_id: str) -> Syllabus | None:
    row = conn.execute("SELECT * FROM syllabi WHERE id = ?", (syllabus_id,)).fetchone()
    if not row:
        return None
    topics = conn.execute(
        "SELECT * FROM topics WHERE syllabus_id = ? ORDER BY position", (syllabus_id,)
    ).fetchall()
    return Syllabus(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        exam_date=_parse_date(row["exam_date"]),
        topics=tuple(_row_to_topic(t) for t in topics),
        exam_type=row["exam_type"] or "",
        organization=row["organization"] or "",
        description=row["description"] or "",
        is_active=bool(row["is_active"]),
    )


def get_syllabus(db_path: str, syllabus_id: str, user_id: str | None = None) -> Syllabus:
    conn = get_connection(db_path)
    syllabus = _load_syllabus(conn, syllabus_id)
    conn.close()
    if syllabus is None or (user_id is not None and syllabus.user_id != user_id):
        raise NotFound(f"syllabus {syllabus_id} not found")
    return syllabus


def list_syllabi(db_path: str, user_id: str) -> list[Syllabus]:
    """Active syllabi for a user, nearest exam first."""
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT id FROM syllabi WHERE user_id = ? AND is_active = 1 ORDER BY exam_date ASC",
        (user_id,),
    ).fetchall()
    syllabi = [_load_syllabus(conn, r["id"]) for r in rows]
    conn.close()
    return syllabi


# --- Plans ---


def _row_to_session(row) -> StudySession:
    return StudySession(
        id=row["id"],
        topic_id=row["topic_id"],
        topic_name=row["topic_name"],
        subject=row["subject"] or "",
        scheduled_date=_parse_date(row["scheduled_date"]),
        duration=row["duration"],
        priority=row["priority"],
        status=row["status"],
        actual_duration=row["actual_duration"],
        notes=row["notes"],
        performance=row["performance"],
    )


def _load_plan(conn, plan_id: str) -> StudyPlan | None:
    row = conn.execute("SELECT * FROM study_plans WHERE id = ?", (plan_id,)).fetchone()
    if not row:
        return None
    sessions = conn.execute(
        "SELECT * FROM study_sessions WHERE plan_id = ? ORDER BY position", (plan_id,)
    ).fetchall()
    return StudyPlan(
        id=row["id"],
        syllabus_id=row["syllabus_id"],
        user_id=row["user_id"],
        title=row["title"] or "",
        start_date=_parse_date(row["start_date"]),
        end_date=_parse_date(row["end_date"]),
        total_hours=row["total_hours"],
        daily_hours=row["daily_hours"],
        sessions=tuple(_row_to_session(s) for s in sessions),
        is_active=bool(row["is_active"]),
        progress=row["progress"],
        last_updated=_parse_datetime(row["last_updated"]),
    )


def _write_plan(conn, plan: StudyPlan) -> None:
    """Upsert the plan row and replace its whole session list. Caller commits."""
    conn.execute(
        """INSERT INTO study_plans (id, syllabus_id, user_id, title, start_date, end_date,
            total_hours, daily_hours, is_active, progress, last_updated)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            title=excluded.title, total_hours=excluded.total_hours,
            daily_hours=excluded.daily_hours, is_active=excluded.is_active,
            progress=excluded.progress, last_updated=excluded.last_updated""",
        (plan.id, plan.syllabus_id, plan.user_id, plan.title, plan.start_date.isoformat(),
         plan.end_date.isoformat(), plan.total_hours, plan.daily_hours, int(plan.is_active),
         plan.progress, plan.last_updated.isoformat() if plan.last_updated else None),
    )
    conn.execute("DELETE FROM study_sessions WHERE plan_id = ?", (plan.id,))
    conn.executemany(
        """INSERT INTO study_sessions (id, plan_id, position, topic_id, topic_name, subject,
            scheduled_date, duration, priority, status, actual_duration, notes, performance)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        [
            (s.id, plan.id, position, s.topic_id, s.topic_name, s.subject,
             s.scheduled_date.isoformat(), s.duration, s.priority, s.status,
             s.actual_duration, s.notes, s.performance)
            for position, s in enumerate(plan.sessions)
        ],
    )


def _find_active_plan_id(conn, user_id: str, syllabus_id: str) -> str | None:
    row = conn.execute(
        "SELECT id FROM study_plans WHERE user_id = ? AND syllabus_id = ? AND is_active = 1",
        (user_id, syllabus_id),
    ).fetchone()
    return row["id"] if row else None


def generate_study_plan(db_path: str, syllabus_id: str, user_id: str,
                        daily_hours: float = DEFAULT_DAILY_HOURS,
                        start_date: date | None = None) -> StudyPlan:
    """Generate and store a plan for a syllabus.

    Raises NotFound if the syllabus does not belong to the user and
    PreconditionViolation if the user already has an active plan for it.
    """
    syllabus = get_syllabus(db_path, syllabus_id, user_id=user_id)
    conn = get_connection(db_path)
    existing = _find_active_plan_id(conn, user_id, syllabus_id)
    if existing:
        conn.close()
        logger.warning("Rejected plan generation: plan %s already active for syllabus %s", existing, syllabus_id)
        raise PreconditionViolation(f"an active plan already exists for syllabus {syllabus_id}")

    try:
        plan = generate_plan(syllabus, daily_hours, start_date=start_date)
        _write_plan(conn, plan)
        conn.commit()
    except sqlite3.IntegrityError:
        conn.rollback()
        raise PreconditionViolation(f"an active plan already exists for syllabus {syllabus_id}")
    finally:
        conn.close()
    logger.info("Generated plan %s with %d sessions", plan.id, len(plan.sessions))
    return plan


def get_plan(db_path: str, plan_id: str, user_id: str | None = None) -> StudyPlan:
    conn = get_connection(db_path)
    plan = _load_plan(conn, plan_id)
    conn.close()
    if plan is None or (user_id is not None and plan.user_id != user_id):
        raise NotFound(f"study plan {plan_id} not found")
    return plan


def list_plans(db_path: str, user_id: str) -> list[StudyPlan]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT id FROM study_plans WHERE user_id = ? ORDER BY start_date DESC, rowid DESC",
        (user_id,),
    ).fetchall()
    plans = [_load_plan(conn, r["id"]) for r in rows]
    conn.close()
    return plans


def get_active_plan(db_path: str, user_id: str, syllabus_id: str) -> StudyPlan | None:
    conn = get_connection(db_path)
    plan_id = _find_active_plan_id(conn, user_id, syllabus_id)
    plan = _load_plan(conn, plan_id) if plan_id else None
    conn.close()
    return plan


def _modify_plan(db_path: str, plan_id: str, user_id: str | None, change) -> StudyPlan:
    """Read a plan, apply change(conn, plan) and write the result in one transaction."""
    conn = get_connection(db_path)
    try:
        conn.execute("BEGIN IMMEDIATE")
        plan = _load_plan(conn, plan_id)
        if plan is None or (user_id is not None and plan.user_id != user_id):
            raise NotFound(f"study plan {plan_id} not found")
        updated = change(conn, plan)
        _write_plan(conn, updated)
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    return updated


def update_session_status(db_path: str, plan_id: str, session_id: str, status: str | None = None,
                          actual_duration=UNSET, notes=UNSET, performance=UNSET,
                          user_id: str | None = None) -> StudyPlan:
    return _modify_plan(
        db_path, plan_id, user_id,
        lambda conn, plan: update_session(
            plan, session_id, status=status, actual_duration=actual_duration,
            notes=notes, performance=performance,
        ),
    )


def adapt_study_plan(db_path: str, plan_id: str, user_id: str | None = None,
                     now: datetime | None = None) -> StudyPlan:
    """Re-weight a stored plan using the owner's exam history."""
    def change(conn, plan):
        metrics = aggregate_performance(load_exam_results(conn, plan.user_id))
        return adapt_plan(plan, metrics, now=now)

    plan = _modify_plan(db_path, plan_id, user_id, change)
    logger.info("Adapted plan %s", plan_id)
    return plan


def deactivate_plan(db_path: str, plan_id: str, user_id: str | None = None) -> StudyPlan:
    return _modify_plan(
        db_path, plan_id, user_id,
        lambda conn, plan: replace(plan, is_active=False, last_updated=datetime.now()),
    )


def get_upcoming_sessions(db_path: str, user_id: str, days: int = 7, limit: int = 20,
                          today: date | None = None) -> list[dict]:
    """Pending sessions across the user's active plans, earliest first."""
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT id FROM study_plans WHERE user_id = ? AND is_active = 1", (user_id,)
    ).fetchall()
    plans = [_load_plan(conn, r["id"]) for r in rows]
    conn.close()
    upcoming = []
    for plan in plans:
        for s in upcoming_sessions(plan.sessions, today=today, days=days):
            upcoming.append({**asdict(s), "plan_id": plan.id, "plan_title": plan.title})
    upcoming.sort(key=lambda s: s["scheduled_date"])
    return upcoming[:limit]
