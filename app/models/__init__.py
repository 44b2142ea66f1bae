from app.models.user import User
from app.models.level import Level
from app.models.scenario import Scenario, ScenarioStep
from app.models.badge import Badge, UserBadge
from app.models.attempt import Attempt, StepAttempt
from app.models.progress import UserLevelProgress

__all__ = [
    "User",
    "Level",
    "Scenario",
    "ScenarioStep",
    "Badge",
    "UserBadge",
    "Attempt",
    "StepAttempt",
    "UserLevelProgress",
]
