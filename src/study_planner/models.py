"""Data classes for the planner domain model."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

DIFFICULTIES = ("easy", "medium", "hard")
PRIORITIES = ("low", "medium", "high")
SESSION_STATUSES = ("pending", "completed", "postponed")
MASTERY_TIERS = ("low", "medium", "high")

DEFAULT_EASE_FACTOR = 2.5
DEFAULT_INTERVAL = 1


@dataclass(frozen=True)
class Topic:
    id: str
    name: str
    subject: str
    weight: float
    estimated_hours: float
    difficulty: str = "medium"
    prerequisites: tuple = ()
    subtopics: tuple = ()
    description: str = ""


@dataclass(frozen=True)
class Syllabus:
    id: str
    user_id: str
    title: str
    exam_date: date
    topics: tuple = ()
    exam_type: str = ""
    organization: str = ""
    description: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class StudySession:
    id: str
    topic_id: str
    topic_name: str
    subject: str
    scheduled_date: date
    duration: int
    priority: str = "medium"
    status: str = "pending"
    actual_duration: Optional[int] = None
    notes: Optional[str] = None
    performance: Optional[float] = None


@dataclass(frozen=True)
class StudyPlan:
    id: str
    syllabus_id: str
    user_id: str
    start_date: date
    end_date: date
    total_hours: float
    daily_hours: float
    sessions: tuple = ()
    title: str = ""
    is_active: bool = True
    progress: int = 0
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class PerformanceMetric:
    topic_id: str
    average_score: int
    total_attempts: int
    time_spent: float
    last_studied: Optional[datetime]
    mastery: str


@dataclass(frozen=True)
class FlashcardReviewState:
    flashcard_id: int
    interval: int = DEFAULT_INTERVAL
    repetitions: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    next_review_date: Optional[date] = None
    last_reviewed_at: Optional[datetime] = None


@dataclass(frozen=True)
class Flashcard:
    id: int
    user_id: str
    question: str
    answer: str
    subject: str
    difficulty: str = "medium"
    tags: tuple = ()


@dataclass(frozen=True)
class ExamQuestion:
    id: str
    subject: str
    correct_answer: str
    statement: str = ""


@dataclass(frozen=True)
class ExamResult:
    """A finished simulated exam with the user's answers keyed by question id."""
    id: str
    user_id: str
    title: str
    questions: tuple = ()
    answers: dict = field(default_factory=dict)
    time_spent: float = 0
    completed_at: Optional[datetime] = None
    subject: str = ""

    def is_correct(self, question: ExamQuestion) -> bool:
        given = self.answers.get(question.id)
        if given is None:
            return False
        return str(given).lower().strip() == str(question.correct_answer).lower().strip()

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def correct_answers(self) -> int:
        return sum(1 for q in self.questions if self.is_correct(q))

    @property
    def score(self) -> float:
        if not self.questions:
            return 0.0
        return self.correct_answers / self.total_questions * 100
