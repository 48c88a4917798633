"""End-to-end: import a syllabus, plan, sit an exam, adapt, drill cards."""
import json
from datetime import date

from study_planner.adapter import MAX_ADAPTED_MINUTES, MIN_ADAPTED_MINUTES
from study_planner.flashcards import create_flashcard, get_due_cards, get_review_stats, record_flashcard_result
from study_planner.importer import import_exam_result, import_syllabus
from study_planner.performance import round_half_up
from study_planner.study import adapt_study_plan, generate_study_plan, get_plan, update_session_status

MONDAY = date(2026, 10, 19)


def test_full_study_cycle(db, tmp_path):
    syllabus_file = tmp_path / "auditor.json"
    syllabus_file.write_text(json.dumps({
        "title": "Tax Auditor",
        "examDate": "2026-11-16",
        "topics": [
            {"id": "acc", "name": "Accounting", "subject": "Accounting", "weight": 90,
             "estimatedHours": 6, "difficulty": "hard"},
            {"id": "law", "name": "Tax Law", "subject": "Law", "weight": 60,
             "estimatedHours": 4, "difficulty": "medium"},
        ],
    }))
    syllabus = import_syllabus(db, str(syllabus_file), "u1")
    plan = generate_study_plan(db, syllabus.id, "u1", daily_hours=2, start_date=MONDAY)
    assert plan.sessions
    assert all(s.scheduled_date.weekday() < 5 for s in plan.sessions)
    assert all(s.duration <= 90 for s in plan.sessions)

    first = plan.sessions[0]
    plan = update_session_status(db, plan.id, first.id, status="completed", actual_duration=first.duration)
    assert plan.progress == round_half_up(100 / len(plan.sessions))

    exam_file = tmp_path / "mock.json"
    exam_file.write_text(json.dumps({
        "title": "Mock 1",
        "questions": [
            {"id": "1", "subject": "Accounting", "correctAnswer": "a"},
            {"id": "2", "subject": "Accounting", "correctAnswer": "b"},
            {"id": "3", "subject": "Law", "correctAnswer": "c"},
        ],
        "answers": {"1": "x", "2": "y", "3": "c"},
    }))
    import_exam_result(db, str(exam_file), "u1")

    adapted = adapt_study_plan(db, plan.id)
    assert adapted == get_plan(db, plan.id)
    for before, after in zip(plan.sessions, adapted.sessions):
        assert after.id == before.id
        assert after.status == before.status
        if before.subject == "Accounting":
            assert after.priority == "high"
            assert after.duration == min(MAX_ADAPTED_MINUTES, round_half_up(before.duration * 1.5))
        else:
            assert after.duration == max(round_half_up(before.duration * 0.8), MIN_ADAPTED_MINUTES)

    card = create_flashcard(db, "u1", "What is depreciation?", "Loss of asset value", "Accounting")
    assert [c.id for c in get_due_cards(db, "u1")] == [card.id]
    state = record_flashcard_result(db, card.id, 5)
    assert state.interval == 1
    assert get_due_cards(db, "u1") == []
    assert get_review_stats(db, "u1")["reviewed_today"] == 1
