"""Read-only catalog lookups: levels, scenarios, steps and badges."""
from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.badge import Badge
from app.models.level import Level
from app.models.scenario import Scenario, ScenarioStep

CATALOG_ORDER = (Level.difficulty_order.asc(), Level.id.asc())


async def list_levels(db: AsyncSession) -> list[Level]:
    """All levels in catalog order."""
    result = await db.execute(select(Level).order_by(*CATALOG_ORDER))
    return list(result.scalars().all())


async def get_level(db: AsyncSession, level_id: int) -> Level | None:
    result = await db.execute(select(Level).where(Level.id == level_id))
    return result.scalar_one_or_none()


async def get_first_level_id(db: AsyncSession) -> int | None:
    result = await db.execute(select(Level.id).order_by(*CATALOG_ORDER).limit(1))
    return result.scalar_one_or_none()


async def get_next_level_id(db: AsyncSession, level_id: int) -> int | None:
    """Return the level right after `level_id` in catalog order.

    None when `level_id` is the last level or is unknown. Ids are never
    assumed to be contiguous.
    """
    current = await get_level(db, level_id)
    if current is None:
        return None
    result = await db.execute(
        select(Level.id)
        .where(
            or_(
                Level.difficulty_order > current.difficulty_order,
                and_(Level.difficulty_order == current.difficulty_order, Level.id > current.id),
            )
        )
        .order_by(*CATALOG_ORDER)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_scenario(db: AsyncSession, scenario_id: int) -> Scenario | None:
    result = await db.execute(select(Scenario).where(Scenario.id == scenario_id))
    return result.scalar_one_or_none()


async def list_scenarios_by_level(db: AsyncSession, level_id: int) -> list[Scenario]:
    result = await db.execute(
        select(Scenario).where(Scenario.level_id == level_id).order_by(Scenario.id.asc())
    )
    return list(result.scalars().all())


async def count_scenarios_in_level(db: AsyncSession, level_id: int) -> int:
    result = await db.execute(
        select(func.count(Scenario.id)).where(Scenario.level_id == level_id)
    )
    return int(result.scalar_one())


async def get_steps_by_scenario(db: AsyncSession, scenario_id: int) -> list[ScenarioStep]:
    """Steps of a scenario, ascending by step_order."""
    result = await db.execute(
        select(ScenarioStep)
        .where(ScenarioStep.scenario_id == scenario_id)
        .order_by(ScenarioStep.step_order.asc())
    )
    return list(result.scalars().all())


async def get_badge_by_level(db: AsyncSession, level_id: int) -> Badge | None:
    result = await db.execute(select(Badge).where(Badge.level_id == level_id))
    return result.scalar_one_or_none()
