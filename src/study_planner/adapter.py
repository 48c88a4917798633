"""Rebalance an existing plan toward weak topics."""
import logging
from dataclasses import replace
from datetime import datetime

from study_planner.performance import round_half_up

logger = logging.getLogger(__name__)

LOW_MASTERY_MULTIPLIER = 1.5
HIGH_MASTERY_MULTIPLIER = 0.8
MAX_ADAPTED_MINUTES = 120
MIN_ADAPTED_MINUTES = 30


def _metric_for(session, metrics):
    # Exam questions are tagged by subject, not by syllabus topic id.
    metric = metrics.get(session.topic_id)
    if metric is None:
        metric = metrics.get(session.subject)
    return metric


def adapt_session(session, metric):
    if metric is None or metric.mastery == "medium":
        return session
    if metric.mastery == "low":
        duration = min(round_half_up(session.duration * LOW_MASTERY_MULTIPLIER), MAX_ADAPTED_MINUTES)
        return replace(session, duration=duration, priority="high")
    if metric.mastery == "high":
        duration = max(round_half_up(session.duration * HIGH_MASTERY_MULTIPLIER), MIN_ADAPTED_MINUTES)
        return replace(session, duration=duration)
    return session


def adapt_plan(plan, metrics, now: datetime | None = None):
    """Return a copy of plan with durations and priorities adjusted by mastery.

    Low-mastery topics get 1.5x time (capped at 120 minutes) and high
    priority; high-mastery topics get 0.8x time (floored at 30 minutes).
    Sessions without a metric are left as they are. Each call applies the
    multipliers again, so repeated runs compound.
    """
    sessions = tuple(adapt_session(s, _metric_for(s, metrics)) for s in plan.sessions)
    changed = sum(1 for old, new in zip(plan.sessions, sessions) if old is not new)
    logger.debug("Adapted %d of %d sessions in plan %s", changed, len(sessions), plan.id)
    return replace(plan, sessions=sessions, last_updated=now or datetime.now())
