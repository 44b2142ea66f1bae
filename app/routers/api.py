"""API routes: JSON for levels, scenarios, submissions and the caller's progress."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.db.session import get_db
from app.routers.deps import get_current_user_id, get_current_user_id_optional
from app.schemas.progress import AttemptOutSchema, LevelStateSchema, UserBadgeOutSchema
from app.schemas.scenario import (
    LevelOutSchema,
    ScenarioDetailSchema,
    ScenarioOutSchema,
    ScenarioSubmitSchema,
    StepOutSchema,
)
from app.schemas.submission import SubmissionResultSchema
from app.services import badges, catalog, ledger, progression
from app.services.engine import submit_scenario

router = APIRouter(prefix="/api", tags=["api"])


@router.get("/levels", response_model=list[LevelOutSchema])
async def list_levels(db: Annotated[AsyncSession, Depends(get_db)]):
    """All levels in catalog order."""
    return await catalog.list_levels(db)


@router.get("/levels/{level_id}", response_model=LevelOutSchema)
async def get_level(level_id: int, db: Annotated[AsyncSession, Depends(get_db)]):
    level = await catalog.get_level(db, level_id)
    if not level:
        raise NotFoundError("Level not found")
    return level


@router.get("/levels/{level_id}/scenarios", response_model=list[ScenarioOutSchema])
async def list_level_scenarios(level_id: int, db: Annotated[AsyncSession, Depends(get_db)]):
    if not await catalog.get_level(db, level_id):
        raise NotFoundError("Level not found")
    return await catalog.list_scenarios_by_level(db, level_id)


@router.get("/scenarios/{scenario_id}", response_model=ScenarioDetailSchema)
async def get_scenario(scenario_id: int, db: Annotated[AsyncSession, Depends(get_db)]):
    """Get one scenario with its steps (correct answers are not exposed)."""
    scenario = await catalog.get_scenario(db, scenario_id)
    if not scenario:
        raise NotFoundError("Scenario not found")

    steps = await catalog.get_steps_by_scenario(db, scenario_id)
    return ScenarioDetailSchema(
        id=scenario.id,
        level_id=scenario.level_id,
        title=scenario.title,
        description=scenario.description,
        image_url=scenario.image_url,
        steps=[StepOutSchema.model_validate(s) for s in steps],
    )


@router.post(
    "/scenarios/{scenario_id}/submit",
    response_model=SubmissionResultSchema,
    response_model_exclude_none=True,
)
async def submit(
    scenario_id: int,
    body: ScenarioSubmitSchema,
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[int | None, Depends(get_current_user_id_optional)],
):
    """Score answers; with a bearer token also record best score, level progress and badges."""
    return await submit_scenario(db, scenario_id, body.user_answers, user_id)


@router.get("/me/levels", response_model=list[LevelStateSchema])
async def my_levels(
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[int, Depends(get_current_user_id)],
):
    return await progression.get_level_states(db, user_id)


@router.get("/me/attempts", response_model=list[AttemptOutSchema])
async def my_attempts(
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[int, Depends(get_current_user_id)],
    level_id: int | None = None,
):
    """Best scores per scenario, optionally limited to one level."""
    if level_id is not None:
        return await ledger.list_user_attempts_by_level(db, user_id, level_id)
    return await ledger.list_user_attempts(db, user_id)


@router.get("/me/badges", response_model=list[UserBadgeOutSchema])
async def my_badges(
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[int, Depends(get_current_user_id)],
):
    rows = await badges.list_user_badges(db, user_id)
    return [
        UserBadgeOutSchema(
            badge_id=badge.id,
            level_id=badge.level_id,
            name=badge.name,
            description=badge.description,
            icon_url=badge.icon_url,
            earned_at=user_badge.earned_at,
        )
        for user_badge, badge in rows
    ]
