"""Adaptive study-plan generation and SM-2 spaced repetition."""
from study_planner.adapter import adapt_plan
from study_planner.performance import aggregate_performance
from study_planner.scheduler import generate_plan
from study_planner.sm2 import compute_next_review

__all__ = ["adapt_plan", "aggregate_performance", "compute_next_review", "generate_plan"]
