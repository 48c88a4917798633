"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

from study_planner.config import DEFAULT_DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS syllabi (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    exam_type TEXT,
    organization TEXT,
    description TEXT,
    exam_date TEXT NOT NULL,
    is_active INTEGER DEFAULT 1,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS topics (
    id TEXT NOT NULL,
    syllabus_id TEXT NOT NULL REFERENCES syllabi(id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    name TEXT NOT NULL,
    subject TEXT NOT NULL,
    weight REAL NOT NULL,
    estimated_hours REAL NOT NULL,
    difficulty TEXT DEFAULT 'medium',
    prerequisites TEXT DEFAULT '[]',
    subtopics TEXT DEFAULT '[]',
    description TEXT,
    PRIMARY KEY (syllabus_id, id)
);

CREATE TABLE IF NOT EXISTS study_plans (
    id TEXT PRIMARY KEY,
    syllabus_id TEXT NOT NULL REFERENCES syllabi(id),
    user_id TEXT NOT NULL,
    title TEXT,
    start_date TEXT NOT NULL,
    end_date TEXT NOT NULL,
    total_hours REAL NOT NULL,
    daily_hours REAL NOT NULL,
    is_active INTEGER DEFAULT 1,
    progress INTEGER DEFAULT 0,
    last_updated TEXT
);

CREATE UNIQUE INDEX IF NOT EXISTS one_active_plan_per_syllabus
    ON study_plans (user_id, syllabus_id) WHERE is_active = 1;

CREATE TABLE IF NOT EXISTS study_sessions (
    id TEXT PRIMARY KEY,
    plan_id TEXT NOT NULL REFERENCES study_plans(id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    topic_id TEXT NOT NULL,
    topic_name TEXT NOT NULL,
    subject TEXT,
    scheduled_date TEXT NOT NULL,
    duration INTEGER NOT NULL,
    priority TEXT DEFAULT 'medium',
    status TEXT DEFAULT 'pending',
    actual_duration INTEGER,
    notes TEXT,
    performance REAL
);

CREATE TABLE IF NOT EXISTS flashcards (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    question TEXT NOT NULL,
    answer TEXT NOT NULL,
    subject TEXT NOT NULL,
    difficulty TEXT DEFAULT 'medium',
    tags TEXT DEFAULT '[]',
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS flashcard_reviews (
    flashcard_id INTEGER PRIMARY KEY REFERENCES flashcards(id) ON DELETE CASCADE,
    interval INTEGER DEFAULT 1,
    repetitions INTEGER DEFAULT 0,
    ease_factor REAL DEFAULT 2.5,
    next_review TEXT,
    last_reviewed_at TEXT
);

CREATE TABLE IF NOT EXISTS flashcard_results (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    flashcard_id INTEGER NOT NULL REFERENCES flashcards(id) ON DELETE CASCADE,
    quality INTEGER NOT NULL,
    time_spent REAL DEFAULT 0,
    reviewed_at TEXT
);

CREATE TABLE IF NOT EXISTS exam_results (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    subject TEXT,
    time_spent REAL DEFAULT 0,
    completed_at TEXT
);

CREATE TABLE IF NOT EXISTS exam_questions (
    exam_id TEXT NOT NULL REFERENCES exam_results(id) ON DELETE CASCADE,
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    subject TEXT NOT NULL,
    correct_answer TEXT NOT NULL,
    statement TEXT,
    user_answer TEXT,
    PRIMARY KEY (exam_id, id)
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
