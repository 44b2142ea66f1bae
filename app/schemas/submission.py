"""Pydantic schemas for the scenario submission result."""
from typing import Literal, Union

from pydantic import BaseModel

from app.schemas.scenario import ScenarioOutSchema


class StepFeedbackSchema(BaseModel):
    step_order: int
    question: str
    selected_option: str
    correct_option: str
    is_correct: bool
    feedback_message: str


class FeedbackSchema(BaseModel):
    total_questions: int
    correct_answers: int
    summary: str
    steps: list[StepFeedbackSchema]


class LevelNotCompletedSchema(BaseModel):
    level_id: int
    completed: Literal[False] = False
    perfect_in_level: int
    total_in_level: int


class LevelCompletedSchema(BaseModel):
    level_id: int
    completed: Literal[True] = True
    next_level_unlocked: int | None = None


LevelProgressSchema = Union[LevelCompletedSchema, LevelNotCompletedSchema]


class AwardedBadgeSchema(BaseModel):
    badge_id: int
    name: str
    description: str
    icon_url: str | None = None


class SubmissionResultSchema(BaseModel):
    """Submission outcome; progression fields are omitted for anonymous or partially persisted submissions."""

    score: int
    all_correct: bool
    level_id: int
    scenario_id: int
    feedback: FeedbackSchema | None = None
    level_progress: LevelProgressSchema | None = None
    awarded_badge: AwardedBadgeSchema | None = None
    updated_scenario: ScenarioOutSchema | None = None
