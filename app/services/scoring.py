"""Scenario scoring: per-step correctness, percentage score and feedback."""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Sequence

from app.core.errors import NoStepsError
from app.schemas.submission import StepFeedbackSchema

MIN_SCORE = 0
MAX_SCORE = 100
PERFECT_SCORE = MAX_SCORE

# (minimum score, summary); first match wins
SCORE_SUMMARIES = [
    (100, "Perfect score! You mastered this scenario."),
    (75, "Great effort! You got most of them right."),
    (50, "You're getting there, keep practicing!"),
    (0, "You need more review. Try the scenario again."),
]


@dataclass(frozen=True)
class ScoreResult:
    score: int
    all_correct: bool
    correct_count: int
    total: int


def normalize_label(value: Any) -> str:
    """Uppercased, stripped option label; "" for None."""
    if value is None:
        return ""
    return str(value).strip().upper()


def _answer_at(answers: Sequence[Any], index: int) -> str:
    if index >= len(answers):
        return ""
    return normalize_label(answers[index])


def _ordered(steps: Sequence) -> list:
    return sorted(steps, key=lambda s: int(s.step_order))


def percentage(correct: int, total: int) -> int:
    """round(100 * correct / total), halves rounded up."""
    value = Decimal(100 * correct) / Decimal(total)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def is_step_correct(answer: str, step) -> bool:
    return bool(answer) and answer == normalize_label(step.correct_action)


def compute_score(answers: Sequence[Any], steps: Sequence) -> ScoreResult:
    """Score answers against steps; answers[i] belongs to the i-th step by step_order.

    Missing, empty or out-of-range answers count as incorrect.
    """
    if not steps:
        raise NoStepsError()
    ordered = _ordered(steps)
    total = len(ordered)
    correct_count = sum(
        1 for i, step in enumerate(ordered) if is_step_correct(_answer_at(answers, i), step)
    )
    score = max(MIN_SCORE, min(MAX_SCORE, percentage(correct_count, total)))
    return ScoreResult(
        score=score,
        all_correct=correct_count == total,
        correct_count=correct_count,
        total=total,
    )


def build_step_feedback(answers: Sequence[Any], steps: Sequence) -> list[StepFeedbackSchema]:
    """Per-step feedback for a submission, in step order."""
    feedback = []
    for i, step in enumerate(_ordered(steps)):
        picked = _answer_at(answers, i)
        correct = normalize_label(step.correct_action)
        ok = is_step_correct(picked, step)
        message = step.feedback_message or (
            "Correct!" if ok else f'The correct answer was "{correct}".'
        )
        feedback.append(StepFeedbackSchema(
            step_order=step.step_order,
            question=step.question_text,
            selected_option=picked or "No answer",
            correct_option=correct,
            is_correct=ok,
            feedback_message=message,
        ))
    return feedback


def summarize_score(score: int) -> str:
    for threshold, summary in SCORE_SUMMARIES:
        if score >= threshold:
            return summary
    return SCORE_SUMMARIES[-1][1]
