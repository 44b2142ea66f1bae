"""SQLAlchemy declarative base and model imports for Alembic."""
from app.db.session import Base

# Import all models so Alembic can see them
from app.models.attempt import Attempt, StepAttempt  # noqa: F401
from app.models.badge import Badge, UserBadge  # noqa: F401
from app.models.level import Level  # noqa: F401
from app.models.progress import UserLevelProgress  # noqa: F401
from app.models.scenario import Scenario, ScenarioStep  # noqa: F401
from app.models.user import User  # noqa: F401

__all__ = [
    "Base",
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
