"""Simulated exam results and the performance metrics derived from them."""
import logging
import uuid
from datetime import datetime

from study_planner.db import get_connection
from study_planner.errors import InvalidInput
from study_planner.models import ExamQuestion, ExamResult
from study_planner.performance import aggregate_performance, exam_stats

logger = logging.getLogger(__name__)


def record_exam_result(db_path: str, user_id: str, title: str, questions, answers: dict,
                       time_spent: float = 0, completed_at: datetime | None = None,
                       subject: str = "") -> ExamResult:
    """Store a finished exam. answers maps question id to the given answer."""
    questions = tuple(questions)
    if not questions:
        raise InvalidInput("an exam needs at least one question")
    if time_spent < 0:
        raise InvalidInput("time spent cannot be negative")
    ids = [q.id for q in questions]
    if len(set(ids)) != len(ids):
        raise InvalidInput("question ids must be unique within an exam")

    result = ExamResult(
        id=uuid.uuid4().hex, user_id=user_id, title=title, questions=questions,
        answers=dict(answers), time_spent=time_spent,
        completed_at=completed_at or datetime.now(),
        subject=subject or questions[0].subject,
    )
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO exam_results (id, user_id, title, subject, time_spent, completed_at) VALUES (?, ?, ?, ?, ?, ?)",
        (result.id, user_id, title, result.subject, time_spent, result.completed_at.isoformat()),
    )
    conn.executemany(
        """INSERT INTO exam_questions (exam_id, id, position, subject, correct_answer, statement, user_answer)
        VALUES (?, ?, ?, ?, ?, ?, ?)""",
        [
            (result.id, q.id, position, q.subject, q.correct_answer, q.statement,
             None if result.answers.get(q.id) is None else str(result.answers[q.id]))
            for position, q in enumerate(questions)
        ],
    )
    conn.commit()
    conn.close()
    logger.info("Recorded exam %s: %d/%d correct", result.id, result.correct_answers, result.total_questions)
    return result


def load_exam_results(conn, user_id: str) -> list[ExamResult]:
    """All exam results for a user, oldest first, read on an open connection."""
    rows = conn.execute(
        "SELECT * FROM exam_results WHERE user_id = ? ORDER BY completed_at ASC", (user_id,)
    ).fetchall()
    results = []
    for row in rows:
        q_rows = conn.execute(
            "SELECT * FROM exam_questions WHERE exam_id = ? ORDER BY position", (row["id"],)
        ).fetchall()
        results.append(ExamResult(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            subject=row["subject"] or "",
            questions=tuple(
                ExamQuestion(id=q["id"], subject=q["subject"], correct_answer=q["correct_answer"],
                             statement=q["statement"] or "")
                for q in q_rows
            ),
            answers={q["id"]: q["user_answer"] for q in q_rows if q["user_answer"] is not None},
            time_spent=row["time_spent"],
            completed_at=datetime.fromisoformat(row["completed_at"]) if row["completed_at"] else None,
        ))
    return results


def get_exam_results(db_path: str, user_id: str) -> list[ExamResult]:
    conn = get_connection(db_path)
    results = load_exam_results(conn, user_id)
    conn.close()
    return results


def get_exam_stats(db_path: str, user_id: str) -> dict:
    return exam_stats(get_exam_results(db_path, user_id))


def get_performance(db_path: str, user_id: str) -> dict:
    """Per-subject mastery metrics for a user."""
    return aggregate_performance(get_exam_results(db_path, user_id))
