"""Per-subject mastery metrics from exam history."""
import math

from study_planner.models import PerformanceMetric

HIGH_MASTERY_SCORE = 80
MEDIUM_MASTERY_SCORE = 60


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def mastery_tier(average_score: float) -> str:
    if average_score >= HIGH_MASTERY_SCORE:
        return "high"
    elif average_score >= MEDIUM_MASTERY_SCORE:
        return "medium"
    return "low"


def aggregate_performance(exam_results) -> dict[str, PerformanceMetric]:
    """Fold exam results into one PerformanceMetric per question subject.

    Every question counts as one attempt scoring 100 or 0, and an exam's time
    is split evenly across its questions. Subjects with no attempts are absent.
    Keys keep the order in which subjects were first seen.
    """
    totals = {}
    for result in exam_results:
        if not result.questions:
            continue
        share = result.time_spent / len(result.questions)
        for question in result.questions:
            acc = totals.setdefault(question.subject, {
                "score": 0, "attempts": 0, "time": 0.0, "last": None,
            })
            acc["attempts"] += 1
            acc["score"] += 100 if result.is_correct(question) else 0
            acc["time"] += share
            if result.completed_at is not None and (acc["last"] is None or result.completed_at > acc["last"]):
                acc["last"] = result.completed_at

    metrics = {}
    for subject, acc in totals.items():
        average = round_half_up(acc["score"] / acc["attempts"])
        metrics[subject] = PerformanceMetric(
            topic_id=subject,
            average_score=average,
            total_attempts=acc["attempts"],
            time_spent=acc["time"],
            last_studied=acc["last"],
            mastery=mastery_tier(average),
        )
    return metrics


def exam_stats(exam_results) -> dict:
    """Overall and per-exam-subject score summary."""
    results = [r for r in exam_results if r.questions]
    if not results:
        return {"total_exams": 0, "average_score": 0, "best_score": 0, "subjects": []}

    scores = [r.score for r in results]
    by_subject = {}
    for r in results:
        stats = by_subject.setdefault(r.subject, {"count": 0, "total": 0.0})
        stats["count"] += 1
        stats["total"] += r.score
    return {
        "total_exams": len(results),
        "average_score": round_half_up(sum(scores) / len(scores)),
        "best_score": max(round_half_up(s) for s in scores),
        "subjects": [
            {"name": name, "count": s["count"], "average_score": round_half_up(s["total"] / s["count"])}
            for name, s in by_subject.items()
        ],
    }


def topic_session_stats(sessions) -> list[dict]:
    """Completion and recorded performance per topic across plan sessions."""
    grouped = {}
    for s in sessions:
        grouped.setdefault(s.topic_id, []).append(s)
    stats = []
    for topic_id, topic_sessions in grouped.items():
        completed = [s for s in topic_sessions if s.status == "completed"]
        total_perf = sum(s.performance or 0 for s in completed)
        stats.append({
            "topic_id": topic_id,
            "total_sessions": len(topic_sessions),
            "completed_sessions": len(completed),
            "average_performance": round_half_up(total_perf / len(completed)) if completed else 0,
            "completion_rate": round_half_up(len(completed) / len(topic_sessions) * 100),
        })
    return stats
