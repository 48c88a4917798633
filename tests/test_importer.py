import json
from datetime import date, datetime

import pytest

from study_planner.errors import InvalidInput
from study_planner.exams import get_exam_results
from study_planner.importer import (
    import_exam_result, import_syllabus, load_exam_result, load_syllabus, read_file_data,
)
from study_planner.study import generate_study_plan, get_syllabus, list_syllabi

SYLLABUS_YAML = """\
title: Federal Tax Auditor
exam_date: 2026-12-13
exam_type: federal
organization: Revenue Service
topics:
  - id: acc
    name: Accounting
    subject: Accounting
    weight: 90
    estimated_hours: 30
    difficulty: hard
    subtopics: [Balance sheet, Cash flow]
  - name: Ethics
    subject: Law
    weight: 20
    estimated_hours: 4
    difficulty: easy
"""


def test_read_file_data_rejects_unknown_type(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(InvalidInput):
        read_file_data(str(path))


def test_read_file_data_requires_mapping(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]")
    with pytest.raises(InvalidInput):
        read_file_data(str(path))


def test_load_syllabus_yaml(tmp_path):
    path = tmp_path / "syllabus.yaml"
    path.write_text(SYLLABUS_YAML)
    data = load_syllabus(str(path))
    assert data["title"] == "Federal Tax Auditor"
    assert data["exam_date"] == date(2026, 12, 13)
    acc, ethics = data["topics"]
    assert acc.id == "acc"
    assert acc.difficulty == "hard"
    assert acc.subtopics == ("Balance sheet", "Cash flow")
    assert ethics.id == ""
    assert ethics.estimated_hours == 4


def test_load_syllabus_json_camel_case(tmp_path):
    path = tmp_path / "syllabus.json"
    path.write_text(json.dumps({
        "title": "Court Clerk",
        "examDate": "2027-03-01",
        "examType": "state",
        "topics": [{"name": "Civil Procedure", "subject": "Law", "weight": 70, "estimatedHours": 12}],
    }))
    data = load_syllabus(str(path))
    assert data["exam_date"] == date(2027, 3, 1)
    assert data["exam_type"] == "state"
    assert data["topics"][0].estimated_hours == 12
    assert data["topics"][0].difficulty == "medium"


def test_load_syllabus_missing_fields(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"title": "No date", "topics": []}))
    with pytest.raises(InvalidInput):
        load_syllabus(str(path))
    path.write_text(json.dumps({"title": "T", "exam_date": "2027-01-01", "topics": [{"name": "X"}]}))
    with pytest.raises(InvalidInput):
        load_syllabus(str(path))
    path.write_text(json.dumps({"title": "T", "exam_date": "soon", "topics": []}))
    with pytest.raises(InvalidInput):
        load_syllabus(str(path))


def test_import_syllabus_stores_it(db, tmp_path):
    path = tmp_path / "syllabus.yml"
    path.write_text(SYLLABUS_YAML)
    syllabus = import_syllabus(db, str(path), "u1")
    assert [s.id for s in list_syllabi(db, "u1")] == [syllabus.id]
    assert len(syllabus.topics) == 2
    assert all(t.id for t in syllabus.topics)


def test_load_and_import_exam_result(db, tmp_path):
    path = tmp_path / "mock1.json"
    path.write_text(json.dumps({
        "timeSpent": 45,
        "completedAt": "2026-10-10T09:00:00",
        "questions": [
            {"id": 1, "subject": "Math", "correctAnswer": "a"},
            {"id": 2, "subject": "Law", "correct_answer": "b"},
        ],
        "answers": {"1": "a", "2": "c"},
    }))
    data = load_exam_result(str(path))
    assert data["title"] == "mock1"
    assert data["questions"][0].id == "1"
    assert data["completed_at"] == datetime(2026, 10, 10, 9, 0)

    result = import_exam_result(db, str(path), "u1")
    assert result.correct_answers == 1
    assert get_exam_results(db, "u1")[0].time_spent == 45


def test_import_syllabus_with_free_form_difficulty(db, tmp_path):
    path = tmp_path / "syllabus.json"
    path.write_text(json.dumps({
        "title": "Court Clerk",
        "examDate": "2026-11-16",
        "topics": [
            {"id": "a", "name": "Procedure", "subject": "Law", "weight": 50, "estimatedHours": 2, "difficulty": "Hard"},
            {"id": "b", "name": "Filing", "subject": "Law", "weight": 50, "estimatedHours": 2, "difficulty": "brutal"},
        ],
    }))
    syllabus = import_syllabus(db, str(path), "u1")
    assert [t.difficulty for t in get_syllabus(db, syllabus.id).topics] == ["hard", "brutal"]
    plan = generate_study_plan(db, syllabus.id, "u1", daily_hours=2, start_date=date(2026, 10, 19))
    assert {s.topic_id for s in plan.sessions} == {"a", "b"}


@pytest.mark.parametrize("payload", [
    {"time_spent": "abc", "questions": [{"id": 1, "subject": "Math", "correct_answer": "a"}]},
    {"questions": [{"id": 1, "subject": "Math", "correct_answer": "a"}], "answers": ["a"]},
    {"questions": ["not a question"]},
])
def test_load_exam_result_rejects_malformed_values(tmp_path, payload):
    path = tmp_path / "exam.json"
    path.write_text(json.dumps(payload))
    with pytest.raises(InvalidInput):
        load_exam_result(str(path))
