"""Flashcards and their SM-2 review state."""
import json
import logging
from datetime import date, datetime

from study_planner.db import get_connection
from study_planner.errors import InvalidInput, NotFound
from study_planner.models import DIFFICULTIES, Flashcard, FlashcardReviewState
from study_planner.sm2 import compute_next_review, initial_review_state, next_review_date

logger = logging.getLogger(__name__)


def _row_to_flashcard(row) -> Flashcard:
    return Flashcard(
        id=row["id"],
        user_id=row["user_id"],
        question=row["question"],
        answer=row["answer"],
        subject=row["subject"],
        difficulty=row["difficulty"],
        tags=tuple(json.loads(row["tags"] or "[]")),
    )


def _row_to_state(row) -> FlashcardReviewState:
    return FlashcardReviewState(
        flashcard_id=row["flashcard_id"],
        interval=row["interval"],
        repetitions=row["repetitions"],
        ease_factor=row["ease_factor"],
        next_review_date=date.fromisoformat(row["next_review"]) if row["next_review"] else None,
        last_reviewed_at=datetime.fromisoformat(row["last_reviewed_at"]) if row["last_reviewed_at"] else None,
    )


def create_flashcard(db_path: str, user_id: str, question: str, answer: str, subject: str,
                     difficulty: str = "medium", tags=()) -> Flashcard:
    """Create a card together with its default review state (due today)."""
    if not question or not answer or not subject:
        raise InvalidInput("question, answer and subject are required")
    if difficulty not in DIFFICULTIES:
        raise InvalidInput(f"unknown difficulty {difficulty!r}")
    conn = get_connection(db_path)
    cursor = conn.execute(
        "INSERT INTO flashcards (user_id, question, answer, subject, difficulty, tags, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
        (user_id, question, answer, subject, difficulty, json.dumps(list(tags)), datetime.now().isoformat()),
    )
    card_id = cursor.lastrowid
    state = initial_review_state(card_id)
    conn.execute(
        "INSERT INTO flashcard_reviews (flashcard_id, interval, repetitions, ease_factor, next_review) VALUES (?, ?, ?, ?, ?)",
        (card_id, state.interval, state.repetitions, state.ease_factor, state.next_review_date.isoformat()),
    )
    conn.commit()
    conn.close()
    return Flashcard(id=card_id, user_id=user_id, question=question, answer=answer,
                     subject=subject, difficulty=difficulty, tags=tuple(tags))


def get_flashcard(db_path: str, card_id: int) -> Flashcard:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM flashcards WHERE id = ?", (card_id,)).fetchone()
    conn.close()
    if not row:
        raise NotFound(f"flashcard {card_id} not found")
    return _row_to_flashcard(row)


def get_review_state(db_path: str, card_id: int) -> FlashcardReviewState:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM flashcard_reviews WHERE flashcard_id = ?", (card_id,)).fetchone()
    conn.close()
    if not row:
        raise NotFound(f"review state for flashcard {card_id} not found")
    return _row_to_state(row)


def get_due_cards(db_path: str, user_id: str, limit: int = 20, subject: str | None = None) -> list:
    """Cards whose next review is today or earlier, most overdue first."""
    conn = get_connection(db_path)
    today = date.today().isoformat()
    query = """SELECT f.*, r.next_review FROM flashcards f
        JOIN flashcard_reviews r ON r.flashcard_id = f.id
        WHERE f.user_id = ? AND (r.next_review IS NULL OR r.next_review <= ?)"""
    params = [user_id, today]
    if subject:
        query += " AND f.subject = ?"
        params.append(subject)
    query += " ORDER BY r.next_review ASC NULLS FIRST, f.id ASC LIMIT ?"
    params.append(limit)
    rows = conn.execute(query, params).fetchall()
    conn.close()
    return [_row_to_flashcard(r) for r in rows]


def record_flashcard_result(db_path: str, card_id: int, quality: int, time_spent: float = 0) -> FlashcardReviewState:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM flashcard_reviews WHERE flashcard_id = ?", (card_id,)).fetchone()
    if not row:
        conn.close()
        raise NotFound(f"review state for flashcard {card_id} not found")
    try:
        updated = compute_next_review(
            quality=quality,
            previous_interval=row["interval"],
            repetitions=row["repetitions"],
            ease_factor=row["ease_factor"],
        )
    except InvalidInput:
        conn.close()
        raise
    now = datetime.now()
    state = FlashcardReviewState(
        flashcard_id=card_id,
        interval=updated["interval"],
        repetitions=updated["repetitions"],
        ease_factor=updated["ease_factor"],
        next_review_date=next_review_date(updated["interval"]),
        last_reviewed_at=now,
    )
    conn.execute(
        """UPDATE flashcard_reviews SET interval=?, repetitions=?, ease_factor=?, next_review=?, last_reviewed_at=?
        WHERE flashcard_id=?""",
        (state.interval, state.repetitions, state.ease_factor,
         state.next_review_date.isoformat(), now.isoformat(), card_id),
    )
    conn.execute(
        "INSERT INTO flashcard_results (flashcard_id, quality, time_spent, reviewed_at) VALUES (?, ?, ?, ?)",
        (card_id, quality, time_spent, now.isoformat()),
    )
    conn.commit()
    conn.close()
    logger.debug("Card %s reviewed with quality %s, next in %s days", card_id, quality, state.interval)
    return state


def delete_flashcard(db_path: str, card_id: int) -> None:
    """Delete a card; its review state and history go with it."""
    conn = get_connection(db_path)
    cursor = conn.execute("DELETE FROM flashcards WHERE id = ?", (card_id,))
    conn.commit()
    conn.close()
    if cursor.rowcount == 0:
        raise NotFound(f"flashcard {card_id} not found")


def get_review_stats(db_path: str, user_id: str) -> dict:
    conn = get_connection(db_path)
    today = date.today().isoformat()
    total = conn.execute("SELECT COUNT(*) FROM flashcards WHERE user_id = ?", (user_id,)).fetchone()[0]
    due = conn.execute(
        """SELECT COUNT(*) FROM flashcard_reviews r JOIN flashcards f ON r.flashcard_id = f.id
        WHERE f.user_id = ? AND (r.next_review IS NULL OR r.next_review <= ?)""",
        (user_id, today),
    ).fetchone()[0]
    reviewed = conn.execute(
        """SELECT COUNT(*) FROM flashcard_results fr JOIN flashcards f ON fr.flashcard_id = f.id
        WHERE f.user_id = ? AND fr.reviewed_at >= ?""",
        (user_id, today),
    ).fetchone()[0]
    avg_row = conn.execute(
        """SELECT AVG(r.ease_factor) AS avg FROM flashcard_reviews r JOIN flashcards f ON r.flashcard_id = f.id
        WHERE f.user_id = ?""",
        (user_id,),
    ).fetchone()
    conn.close()
    return {
        "total_cards": total,
        "due_today": due,
        "reviewed_today": reviewed,
        "average_ease_factor": round(avg_row["avg"], 2) if avg_row["avg"] is not None else 2.5,
    }
