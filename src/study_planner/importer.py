"""Load syllabi and exam results from JSON or YAML files."""
import json
from datetime import date, datetime
from pathlib import Path

from study_planner.errors import InvalidInput
from study_planner.exams import record_exam_result
from study_planner.models import ExamQuestion, Topic
from study_planner.study import create_syllabus


def read_file_data(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = json.loads(path.read_text())
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text())
    else:
        raise InvalidInput(f"unsupported file type {suffix or '(none)'}: use .json, .yaml or .yml")
    if not isinstance(data, dict):
        raise InvalidInput(f"{path.name} must contain a mapping at the top level")
    return data


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise InvalidInput(f"invalid date {value!r}, expected YYYY-MM-DD")


def _as_datetime(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise InvalidInput(f"invalid timestamp {value!r}")


def _pick(data: dict, *keys, default=None):
    # Files written by the web client use camelCase.
    for key in keys:
        if key in data:
            return data[key]
    return default


def _topic_from(data: dict) -> Topic:
    try:
        return Topic(
            id=str(data.get("id") or ""),
            name=data["name"],
            subject=data["subject"],
            weight=float(data["weight"]),
            estimated_hours=float(_pick(data, "estimated_hours", "estimatedHours")),
            difficulty=data.get("difficulty", "medium"),
            prerequisites=tuple(str(p) for p in data.get("prerequisites") or ()),
            subtopics=tuple(data.get("subtopics") or ()),
            description=data.get("description") or "",
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidInput(f"invalid topic {data.get('name', '?')!r}: {e}")


def load_syllabus(file_path: str) -> dict:
    """Parse a syllabus file into create_syllabus keyword arguments."""
    data = read_file_data(file_path)
    if not data.get("title") or not _pick(data, "exam_date", "examDate"):
        raise InvalidInput("syllabus file needs a title and an exam_date")
    return {
        "title": data["title"],
        "exam_date": _as_date(_pick(data, "exam_date", "examDate")),
        "topics": [_topic_from(t) for t in data.get("topics") or []],
        "exam_type": _pick(data, "exam_type", "examType", default="") or "",
        "organization": data.get("organization") or "",
        "description": data.get("description") or "",
    }


def load_exam_result(file_path: str) -> dict:
    """Parse an exam result file into record_exam_result keyword arguments."""
    data = read_file_data(file_path)
    try:
        questions = [
            ExamQuestion(
                id=str(q["id"]),
                subject=q["subject"],
                correct_answer=str(_pick(q, "correct_answer", "correctAnswer")),
                statement=q.get("statement") or "",
            )
            for q in data.get("questions") or []
        ]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise InvalidInput(f"invalid exam question: {e}")
    try:
        answers = {str(k): v for k, v in (data.get("answers") or {}).items()}
        time_spent = float(_pick(data, "time_spent", "timeSpent", default=0) or 0)
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidInput(f"invalid exam result: {e}")
    return {
        "title": data.get("title") or Path(file_path).stem,
        "questions": questions,
        "answers": answers,
        "time_spent": time_spent,
        "completed_at": _as_datetime(_pick(data, "completed_at", "completedAt")),
        "subject": data.get("subject") or "",
    }


def import_syllabus(db_path: str, file_path: str, user_id: str):
    return create_syllabus(db_path, user_id, **load_syllabus(file_path))


def import_exam_result(db_path: str, file_path: str, user_id: str):
    return record_exam_result(db_path, user_id, **load_exam_result(file_path))
