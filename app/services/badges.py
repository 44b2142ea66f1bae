"""Level badge awards: at most one UserBadge per (user, badge)."""
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError
from app.models.badge import Badge, UserBadge
from app.services import catalog
from app.services.ledger import upsert_insert

logger = logging.getLogger(__name__)


async def find_user_badge(db: AsyncSession, user_id: int, badge_id: int) -> UserBadge | None:
    result = await db.execute(
        select(UserBadge).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
    )
    return result.scalar_one_or_none()


async def create_user_badge(db: AsyncSession, user_id: int, badge_id: int) -> UserBadge:
    """Insert a grant; raises ConflictError when the (user, badge) pair already exists."""
    stmt = (
        upsert_insert(db, UserBadge)
        .values(user_id=user_id, badge_id=badge_id, earned_at=datetime.now(timezone.utc))
        .on_conflict_do_nothing(index_elements=[UserBadge.user_id, UserBadge.badge_id])
    )
    try:
        result = await db.execute(stmt)
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError(f"Badge {badge_id} already awarded to user {user_id}") from exc
    if result.rowcount == 0:
        raise ConflictError(f"Badge {badge_id} already awarded to user {user_id}")
    return await find_user_badge(db, user_id, badge_id)


async def award_level_badge(db: AsyncSession, user_id: int, level_id: int) -> Badge | None:
    """Grant the level's badge the first time; None when none is configured or already granted."""
    badge = await catalog.get_badge_by_level(db, level_id)
    if badge is None:
        return None

    if await find_user_badge(db, user_id, badge.id) is not None:
        return None

    # a concurrent submission may have inserted between the check and here
    try:
        await create_user_badge(db, user_id, badge.id)
    except ConflictError as exc:
        logger.warning("badge award skipped: %s", exc.message)
        return None

    logger.info("user=%s earned badge=%s for level=%s", user_id, badge.id, level_id)
    return badge


async def list_user_badges(db: AsyncSession, user_id: int) -> list[tuple[UserBadge, Badge]]:
    result = await db.execute(
        select(UserBadge, Badge)
        .join(Badge, Badge.id == UserBadge.badge_id)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at.asc(), UserBadge.id.asc())
    )
    return [(ub, b) for ub, b in result.all()]
