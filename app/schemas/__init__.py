from app.schemas.scenario import (
    LevelOutSchema,
    ScenarioDetailSchema,
    ScenarioOutSchema,
    ScenarioSubmitSchema,
    StepOutSchema,
)
from app.schemas.submission import (
    AwardedBadgeSchema,
    FeedbackSchema,
    LevelCompletedSchema,
    LevelNotCompletedSchema,
    StepFeedbackSchema,
    SubmissionResultSchema,
)

__all__ = [
    "LevelOutSchema",
    "ScenarioDetailSchema",
    "ScenarioOutSchema",
    "ScenarioSubmitSchema",
    "StepOutSchema",
    "AwardedBadgeSchema",
    "FeedbackSchema",
    "LevelCompletedSchema",
    "LevelNotCompletedSchema",
    "StepFeedbackSchema",
    "SubmissionResultSchema",
]
