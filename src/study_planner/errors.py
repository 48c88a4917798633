"""Error taxonomy for the planner."""


class StudyPlannerError(Exception):
    """Base class for all planner errors."""


class InvalidInput(StudyPlannerError):
    """A parameter is outside its valid range."""


class PreconditionViolation(StudyPlannerError):
    """The operation is not allowed in the current state."""


class NotFound(StudyPlannerError):
    """A referenced syllabus, plan, session or flashcard does not exist."""
