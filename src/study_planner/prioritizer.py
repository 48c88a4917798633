"""Topic ranking by exam weight and difficulty."""

DIFFICULTY_MULTIPLIERS = {"easy": 1.0, "medium": 1.5, "hard": 2.0}

HIGH_PRIORITY_SCORE = 150
MEDIUM_PRIORITY_SCORE = 75


def difficulty_multiplier(difficulty: str) -> float:
    # Unknown difficulty counts as easy.
    return DIFFICULTY_MULTIPLIERS.get(difficulty, 1.0)


def priority_score(topic) -> float:
    return topic.weight * difficulty_multiplier(topic.difficulty)


def priority_label(score: float) -> str:
    if score >= HIGH_PRIORITY_SCORE:
        return "high"
    elif score >= MEDIUM_PRIORITY_SCORE:
        return "medium"
    return "low"


def prioritize_topics(topics) -> list:
    """Return topics sorted by priority score, highest first.

    The sort is stable, so topics with equal scores keep their syllabus order.
    """
    return sorted(topics, key=priority_score, reverse=True)
