# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixed-threshold learning heuristics.

Everything in this module is a simple rule or linear formula over a small
sample of scores. None of it is a fitted model, and the names say so:
"estimate", "heuristic" and "benchmark" values are illustrative anchors,
not statistics about a real cohort.

Thresholds:
    Trend: change > +5 points is improving, < -5 declining, else stable.
        Compares the mean of the 3 most recent scores with the mean of the
        (up to) 3 before them. Fewer than 3 scores: no trend.
    Prediction: average nudged 70% toward the mean of the last 3 scores,
        only when more than 3 attempts exist. Band is +/-15 points.
    Difficulty: hard above 85, medium above 70, easy otherwise.
    Percentile: 50 + (average - 75) * 0.8 + (minutes - 120) * 0.1,
        clamped to 1..99.
    Relative performance: above_average above 80, average above 60.

Functions return None (or an empty list) when the data is insufficient;
callers omit the feature.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Any, Iterable, Sequence

from src.domains.analytics.aggregator import DifficultyStats, SubjectStats
from src.utils.datetime import ensure_utc, format_iso
from src.utils.formatting import round_to

TREND_THRESHOLD = 5.0
RECENT_WINDOW = 3
SMOOTHING_FACTOR = 0.7
PREDICTION_BAND = 15.0

BENCHMARK_AVERAGE_SCORE = 75.0
BENCHMARK_STUDY_MINUTES = 180.0
BENCHMARK_QUIZZES_COMPLETED = 8
BENCHMARK_IMPROVEMENT = 12.0

DEFAULT_SESSION_MINUTES = 45


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# =============================================================================
# Trends
# =============================================================================


@dataclass
class TrendResult:
    """Trend label for one question type."""

    question_type: str
    trend: str
    change: float
    recent_average: float
    earlier_average: float
    data_points: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_type": self.question_type,
            "trend": self.trend,
            "change": self.change,
            "recent_average": round_to(self.recent_average, 2),
            "earlier_average": round_to(self.earlier_average, 2),
            "data_points": self.data_points,
        }


def classify_trend(change: float, threshold: float = TREND_THRESHOLD) -> str:
    """Label a score change as improving, declining or stable."""
    if change > threshold:
        return "improving"
    if change < -threshold:
        return "declining"
    return "stable"


def score_trend(
    scores_newest_first: Sequence[float],
    window: int = RECENT_WINDOW,
    threshold: float = TREND_THRESHOLD,
) -> tuple[str, float, float, float] | None:
    """Compare the most recent window of scores with the window before it.

    Args:
        scores_newest_first: Scores ordered from newest to oldest.
        window: Number of scores in each window.
        threshold: Points of change needed to call a trend.

    Returns:
        (label, change, recent mean, earlier mean), or None with fewer than
        `window` scores. Exactly `window` scores compare the recent window
        with itself: change 0, stable.
    """
    if len(scores_newest_first) < window:
        return None

    recent = list(scores_newest_first[:window])
    earlier = list(scores_newest_first[window : window * 2])
    recent_average = _mean(recent)
    earlier_average = _mean(earlier) if earlier else recent_average
    change = round_to(recent_average - earlier_average, 2)
    return classify_trend(change, threshold), change, recent_average, earlier_average


def improvement_trends(
    performances: Iterable[Any],
    window: int = RECENT_WINDOW,
    threshold: float = TREND_THRESHOLD,
) -> list[TrendResult]:
    """Trend per question type from per-quiz performance rows.

    Args:
        performances: Rows with question_type, percentage and quiz_date.
        window: Number of scores per comparison window.
        threshold: Points of change needed to call a trend.

    Returns:
        One TrendResult per question type with at least `window` rows.
    """
    grouped: dict[str, list[Any]] = defaultdict(list)
    for row in performances:
        grouped[row.question_type].append(row)

    results = []
    for question_type, rows in grouped.items():
        rows.sort(key=lambda r: ensure_utc(r.quiz_date), reverse=True)
        outcome = score_trend([row.percentage for row in rows], window, threshold)
        if outcome is None:
            continue
        label, change, recent_average, earlier_average = outcome
        results.append(
            TrendResult(
                question_type=question_type,
                trend=label,
                change=change,
                recent_average=recent_average,
                earlier_average=earlier_average,
                data_points=len(rows),
            )
        )
    return results


# =============================================================================
# Predictions
# =============================================================================


@dataclass
class PerformanceEstimate:
    """Heuristic next-score estimate."""

    next_score_estimate: float
    band_min: float
    band_max: float
    estimate_confidence: float
    trajectory: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "next_score_estimate": round_to(self.next_score_estimate, 1),
            "band": {"min": round_to(self.band_min, 1), "max": round_to(self.band_max, 1)},
            "estimate_confidence": self.estimate_confidence,
            "trajectory": self.trajectory,
        }


def predict_next_score(
    average: float,
    chronological_scores: Sequence[float],
    window: int = RECENT_WINDOW,
    smoothing: float = SMOOTHING_FACTOR,
) -> PerformanceEstimate | None:
    """Nudge the average toward recent scores to estimate the next one.

    Returns None without attempts.
    """
    count = len(chronological_scores)
    if count == 0:
        return None

    estimate = average
    trajectory = "stable"
    if count > window:
        recent_average = _mean(chronological_scores[-window:])
        estimate = average + (recent_average - average) * smoothing
        if recent_average > average:
            trajectory = "ascending"
        elif abs(recent_average - average) >= TREND_THRESHOLD:
            trajectory = "declining"

    confidence = min(95, 60 + count * 2) if count > 5 else 60
    return PerformanceEstimate(
        next_score_estimate=_clamp(estimate, 0, 100),
        band_min=max(0.0, average - PREDICTION_BAND),
        band_max=min(100.0, average + PREDICTION_BAND),
        estimate_confidence=confidence,
        trajectory=trajectory,
    )


def recommend_difficulty(average: float) -> tuple[str, str]:
    """Difficulty to practise next and the reason for it."""
    if average > 85:
        return "hard", "Consistently high performance indicates readiness for advanced challenges"
    if average > 70:
        return (
            "medium",
            "Moderate performance suggests maintaining current difficulty with gradual increases",
        )
    return "easy", "Focus on building confidence with easier questions before advancing"


def learning_path(subjects: Sequence[SubjectStats], limit: int = 5) -> list[dict[str, Any]]:
    """Weakest subjects first, with a suggested session length."""
    ordered = sorted(subjects, key=lambda s: s.average_score)[:limit]
    return [
        {
            "step": index + 1,
            "topic": subject.subject,
            "estimated_minutes": round_to(max(30.0, 60 - subject.average_score * 0.5), 1),
            "priority": round_to(100 - subject.average_score * 0.8, 1),
        }
        for index, subject in enumerate(ordered)
    ]


def improvement_rate(chronological_scores: Sequence[float]) -> float:
    """Last score minus first score, spread over the number of attempts."""
    if len(chronological_scores) < 2:
        return 0.0
    return (chronological_scores[-1] - chronological_scores[0]) / len(chronological_scores)


# =============================================================================
# Retention and velocity
# =============================================================================


def retention_estimates(average: float) -> dict[str, Any]:
    """Fixed offsets from the average score, not a memory model."""

    def offset(points: float) -> float:
        return round_to(_clamp(average + points, 0, 100), 1)

    return {
        "short_term": offset(5),
        "medium_term": offset(-5),
        "long_term": offset(-15),
        "forgetting_curve": [
            {"days": 1, "retention": offset(0)},
            {"days": 7, "retention": offset(-10)},
            {"days": 30, "retention": offset(-20)},
            {"days": 90, "retention": offset(-30)},
        ],
    }


def learning_velocity(
    quizzes_taken: int,
    total_minutes: int,
    chronological_scores: Sequence[float],
    average: float,
) -> dict[str, Any]:
    """Quizzes per study hour, improvement rate and a plateau flag.

    The plateau flag is set when each of the last 5 scores is within 10
    points of the average.
    """
    recent = chronological_scores[-5:]
    return {
        "concepts_per_hour": round_to(quizzes_taken / (total_minutes / 60), 2) if total_minutes > 0 else 0.0,
        "improvement_rate": round_to(improvement_rate(chronological_scores), 2),
        "plateau_indicator": bool(recent) and all(abs(s - average) < 10 for s in recent),
    }


# =============================================================================
# Study habits
# =============================================================================


def session_analytics(
    session_minutes: Sequence[int],
    total_minutes: int,
    attempt_count: int,
) -> dict[str, Any]:
    """Typical session length, break cadence and a focus score.

    With no sessions the duration is a 45-minute placeholder.
    """
    count = len(session_minutes)
    return {
        "optimal_duration": round_to(_mean(session_minutes), 1) if count else DEFAULT_SESSION_MINUTES,
        "break_frequency": count // 7 if count else 1,
        "focus_score": round_to(min(100.0, total_minutes / max(attempt_count, 1) * 2), 1),
    }


def learning_patterns(
    difficulties: Sequence[DifficultyStats],
    subjects: Sequence[SubjectStats],
    average: float,
) -> dict[str, Any]:
    """Most practised difficulty plus subjects above and below average."""
    preferred = max(difficulties, key=lambda d: d.quiz_count).difficulty if difficulties else "medium"
    return {
        "preferred_difficulty": preferred,
        "strengths": [s.subject for s in subjects if s.average_score > average][:3],
        "improvement_areas": [s.subject for s in subjects if s.average_score < average][:3],
    }


def learning_pattern(
    total_minutes: int,
    quizzes_taken: int,
    average: float,
    attempt_count: int,
    quiz_count: int,
    session_count: int,
    file_count: int,
) -> dict[str, Any]:
    """Label study intensity and list notable habits."""
    if total_minutes > 300:
        pattern = "Intensive Learner"
    elif total_minutes > 150:
        pattern = "Consistent Learner"
    else:
        pattern = "Casual Learner"

    habits = []
    if average > 85:
        habits.append("High Achievement Orientation")
    if total_minutes > 200:
        habits.append("High Engagement")
    if attempt_count > quiz_count * 1.5:
        habits.append("Repetitive Practice")
    if session_count > file_count * 2:
        habits.append("Thorough Review Habits")

    return {
        "dominant_pattern": pattern,
        "pattern_strength": round_to(min(100.0, total_minutes / 5 + quizzes_taken * 10), 1),
        "behavioral_trends": habits,
    }


def study_recommendations(
    average: float,
    total_minutes: int,
    chronological_scores: Sequence[float],
    file_count: int,
) -> list[dict[str, Any]]:
    """Rule-based study recommendations, highest priority rules first."""
    recommendations = []
    if average < 70:
        recommendations.append(
            {
                "type": "difficulty",
                "message": "Consider starting with easier questions to build confidence",
                "priority": "high",
            }
        )
    if total_minutes < 60:
        recommendations.append(
            {
                "type": "timing",
                "message": "Increase study time to at least 1 hour per week",
                "priority": "medium",
            }
        )
    recent = chronological_scores[-RECENT_WINDOW:]
    if recent and all(score < average for score in recent):
        recommendations.append(
            {
                "type": "review",
                "message": "Review previous topics before attempting new quizzes",
                "priority": "high",
            }
        )
    recommendations.append(
        {
            "type": "content",
            "message": "Upload more study materials to improve AI question generation",
            "priority": "high" if file_count < 5 else "low",
        }
    )
    return recommendations


# =============================================================================
# Anomalies and alerts
# =============================================================================


def detect_anomalies(
    chronological_scores: Sequence[float],
    average: float,
    session_minutes: Sequence[int],
    attempt_times: Sequence[datetime],
    tz: tzinfo,
) -> list[dict[str, Any]]:
    """Flag a sharp score drop, very long sessions and pre-dawn attempts.

    Attempt hours are read in the reporting timezone.
    """
    anomalies = []
    recent = chronological_scores[-RECENT_WINDOW:]
    if recent and all(score < average - 20 for score in recent):
        anomalies.append(
            {
                "type": "performance_drop",
                "description": "Recent scores significantly below average",
                "severity": "high",
                "recommendation": "Consider reviewing foundational concepts and taking breaks",
            }
        )
    if any(minutes > 180 for minutes in session_minutes):
        anomalies.append(
            {
                "type": "unusual_timing",
                "description": "Extended study sessions detected",
                "severity": "medium",
                "recommendation": "Break long sessions into shorter, more focused periods",
            }
        )
    if any(ensure_utc(stamp).astimezone(tz).hour < 6 for stamp in attempt_times if stamp):
        anomalies.append(
            {
                "type": "unusual_timing",
                "description": "Late night or early morning quiz attempts",
                "severity": "low",
                "recommendation": "Consider studying during peak alertness hours",
            }
        )
    return anomalies


def predictive_alerts(
    total_minutes: int,
    average: float,
    chronological_scores: Sequence[float],
    difficulties: Sequence[DifficultyStats],
    quizzes_taken: int,
    now: datetime,
) -> list[dict[str, Any]]:
    """Burnout, plateau and under-challenge alerts."""
    alerts = []
    if total_minutes > 400 and average < 70:
        alerts.append(
            {
                "alert_type": "burnout_risk",
                "message": "High study time with declining performance may indicate burnout",
                "trigger_date": format_iso(now + timedelta(days=7)),
                "preventive_action": "Schedule regular breaks and vary study methods",
            }
        )
    recent = chronological_scores[-5:]
    if len(chronological_scores) > 10 and all(abs(score - average) < 5 for score in recent):
        alerts.append(
            {
                "alert_type": "plateau_warning",
                "message": "Performance plateau detected - consider increasing challenge",
                "trigger_date": format_iso(now),
                "preventive_action": "Try harder difficulty levels or new question types",
            }
        )
    easy = next((d for d in difficulties if d.difficulty == "easy"), None)
    if average > 90 and easy is not None and easy.quiz_count == quizzes_taken:
        alerts.append(
            {
                "alert_type": "optimal_challenge",
                "message": "Ready for more challenging content",
                "trigger_date": format_iso(now),
                "preventive_action": "Increase difficulty to Medium or Hard level",
            }
        )
    return alerts


# =============================================================================
# Benchmarks
# =============================================================================


def percentile_ranking(average: float, study_minutes: float) -> float:
    """Illustrative percentile from fixed anchors, clamped to 1..99."""
    return round_to(_clamp(50 + (average - 75) * 0.8 + (study_minutes - 120) * 0.1, 1, 99), 1)


def relative_performance(average: float) -> str:
    if average > 80:
        return "above_average"
    if average > 60:
        return "average"
    return "below_average"


def benchmark_metrics(
    average: float,
    study_minutes: float,
    quizzes_taken: int,
    benchmark_score: float = BENCHMARK_AVERAGE_SCORE,
    benchmark_minutes: float = BENCHMARK_STUDY_MINUTES,
    benchmark_quizzes: int = BENCHMARK_QUIZZES_COMPLETED,
) -> list[dict[str, Any]]:
    """Compare the learner's values with fixed benchmark values."""

    def row(metric: str, value: float, benchmark: float) -> dict[str, Any]:
        return {
            "metric": metric,
            "your_value": round_to(value, 1),
            "benchmark_value": benchmark,
            "percent_difference": round_to((value - benchmark) / benchmark * 100, 1),
        }

    return [
        row("Average Score", average, benchmark_score),
        row("Study Time (minutes)", study_minutes, benchmark_minutes),
        row("Quizzes Completed", quizzes_taken, benchmark_quizzes),
    ]


def comparative_analytics(
    average: float,
    study_minutes: float,
    quizzes_taken: int,
    chronological_scores: Sequence[float],
    benchmark_score: float = BENCHMARK_AVERAGE_SCORE,
    benchmark_minutes: float = BENCHMARK_STUDY_MINUTES,
    benchmark_quizzes: int = BENCHMARK_QUIZZES_COMPLETED,
    benchmark_improvement: float = BENCHMARK_IMPROVEMENT,
) -> dict[str, Any]:
    """Percentile, benchmark comparison and similar-learner anchor."""
    your_improvement = improvement_rate(chronological_scores) if len(chronological_scores) > 5 else 0.0
    return {
        "percentile_ranking": percentile_ranking(average, study_minutes),
        "similar_learner_comparison": {
            "benchmark_improvement": benchmark_improvement,
            "your_improvement": round_to(your_improvement, 2),
            "relative_performance": relative_performance(average),
        },
        "benchmark_metrics": benchmark_metrics(
            average,
            study_minutes,
            quizzes_taken,
            benchmark_score,
            benchmark_minutes,
            benchmark_quizzes,
        ),
    }
