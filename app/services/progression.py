"""Level completion and unlocking.

A user's level moves Locked -> Unlocked -> Completed and never back. The
first level in catalog order is unlocked by default; every other level is
unlocked when the level before it is completed. Completion is recomputed
from attempts on every submission instead of being cached.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attempt import Attempt
from app.models.progress import UserLevelProgress
from app.models.scenario import Scenario
from app.services import catalog
from app.services.ledger import upsert_insert
from app.services.scoring import PERFECT_SCORE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelEvaluation:
    perfect_count: int
    total_scenarios: int
    completed: bool


@dataclass(frozen=True)
class ProgressUpdate:
    progress: UserLevelProgress
    next_level_unlocked: int | None = None


async def count_perfect_in_level(db: AsyncSession, user_id: int, level_id: int) -> int:
    result = await db.execute(
        select(func.count(Attempt.id))
        .join(Scenario, Scenario.id == Attempt.scenario_id)
        .where(
            Attempt.user_id == user_id,
            Scenario.level_id == level_id,
            Attempt.score == PERFECT_SCORE,
        )
    )
    return int(result.scalar_one())


async def evaluate_level(db: AsyncSession, user_id: int, level_id: int) -> LevelEvaluation:
    perfect = await count_perfect_in_level(db, user_id, level_id)
    total = await catalog.count_scenarios_in_level(db, level_id)
    return LevelEvaluation(
        perfect_count=perfect,
        total_scenarios=total,
        completed=total > 0 and perfect == total,
    )


async def get_user_level(db: AsyncSession, user_id: int, level_id: int) -> UserLevelProgress | None:
    result = await db.execute(
        select(UserLevelProgress)
        .where(UserLevelProgress.user_id == user_id, UserLevelProgress.level_id == level_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def upsert_level_progress(
    db: AsyncSession,
    user_id: int,
    level_id: int,
    completed: bool,
) -> UserLevelProgress:
    """Mark (user, level) unlocked; `completed` is OR-ed with the stored flag so it never regresses."""
    stmt = upsert_insert(db, UserLevelProgress).values(
        user_id=user_id,
        level_id=level_id,
        unlocked=True,
        completed=completed,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[UserLevelProgress.user_id, UserLevelProgress.level_id],
        set_={
            "unlocked": True,
            "completed": or_(UserLevelProgress.completed, stmt.excluded.completed),
        },
    )
    await db.execute(stmt)
    await db.commit()
    return await get_user_level(db, user_id, level_id)


async def apply_progress(db: AsyncSession, user_id: int, level_id: int, completed: bool) -> ProgressUpdate:
    progress = await upsert_level_progress(db, user_id, level_id, completed)
    if not completed:
        return ProgressUpdate(progress=progress)

    next_level_id = await catalog.get_next_level_id(db, level_id)
    if next_level_id is None:
        return ProgressUpdate(progress=progress)

    await upsert_level_progress(db, user_id, next_level_id, completed=False)
    logger.info("user=%s unlocked level=%s after completing level=%s", user_id, next_level_id, level_id)
    return ProgressUpdate(progress=progress, next_level_unlocked=next_level_id)


async def get_level_states(db: AsyncSession, user_id: int) -> list[dict]:
    """Every catalog level with this user's unlocked/completed flags."""
    levels = await catalog.list_levels(db)
    result = await db.execute(select(UserLevelProgress).where(UserLevelProgress.user_id == user_id))
    by_level = {p.level_id: p for p in result.scalars().all()}

    states = []
    for index, level in enumerate(levels):
        progress = by_level.get(level.id)
        completed = bool(progress and progress.completed)
        unlocked = index == 0 or completed or bool(progress and progress.unlocked)
        states.append({
            "level_id": level.id,
            "title": level.title,
            "difficulty_order": level.difficulty_order,
            "unlocked": unlocked,
            "completed": completed,
        })
    return states
