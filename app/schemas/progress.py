"""Pydantic schemas for a user's level states, attempts and badges."""
from datetime import datetime

from pydantic import BaseModel


class LevelStateSchema(BaseModel):
    level_id: int
    title: str
    difficulty_order: int
    unlocked: bool
    completed: bool


class AttemptOutSchema(BaseModel):
    scenario_id: int
    score: int
    completed_at: datetime

    class Config:
        from_attributes = True


class UserBadgeOutSchema(BaseModel):
    badge_id: int
    level_id: int
    name: str
    description: str
    icon_url: str | None = None
    earned_at: datetime
