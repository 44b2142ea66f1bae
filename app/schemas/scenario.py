"""Pydantic schemas for levels, scenarios and steps (catalog views)."""
from typing import Any

from pydantic import BaseModel, Field


class LevelOutSchema(BaseModel):
    id: int
    title: str
    description: str | None = None
    difficulty_order: int

    class Config:
        from_attributes = True


class ScenarioOutSchema(BaseModel):
    id: int
    level_id: int
    title: str
    description: str | None = None
    image_url: str | None = None

    class Config:
        from_attributes = True


class StepOutSchema(BaseModel):
    """A step as shown to players: options without the correct answer."""

    id: int
    step_order: int
    question_text: str
    options: dict[str, str]

    class Config:
        from_attributes = True


class ScenarioDetailSchema(ScenarioOutSchema):
    steps: list[StepOutSchema]


class ScenarioSubmitSchema(BaseModel):
    # Checked by the submission pipeline so a non-list answers value is a 400, not a 422
    user_answers: Any = Field(default=None, alias="userAnswers")

    class Config:
        populate_by_name = True
