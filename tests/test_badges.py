from sqlalchemy import func, select

from app.models import UserBadge
from app.services import badges


async def user_badge_count(db, user_id):
    result = await db.execute(select(func.count(UserBadge.id)).where(UserBadge.user_id == user_id))
    return result.scalar_one()


async def test_first_completion_awards_badge(db, catalog, user):
    badge = await badges.award_level_badge(db, user.id, catalog.level1)
    assert badge is not None
    assert badge.id == catalog.badge1
    assert await user_badge_count(db, user.id) == 1


async def test_badge_is_awarded_once(db, catalog, user):
    assert await badges.award_level_badge(db, user.id, catalog.level1) is not None
    assert await badges.award_level_badge(db, user.id, catalog.level1) is None
    assert await user_badge_count(db, user.id) == 1


async def test_level_without_badge_awards_nothing(db, catalog, user):
    assert await badges.award_level_badge(db, user.id, catalog.level2) is None
    assert await user_badge_count(db, user.id) == 0


async def test_conflict_after_stale_check_is_treated_as_awarded(db, catalog, user, monkeypatch):
    db.add(UserBadge(user_id=user.id, badge_id=catalog.badge1))
    await db.commit()

    async def stale_lookup(db, user_id, badge_id):
        # another submission inserted after this one checked
        return None

    monkeypatch.setattr(badges, "find_user_badge", stale_lookup)

    assert await badges.award_level_badge(db, user.id, catalog.level1) is None
    assert await user_badge_count(db, user.id) == 1


async def test_repeated_awards_leave_exactly_one_grant(session_factory, catalog, user):
    results = []
    for _ in range(5):
        async with session_factory() as session:
            results.append(await badges.award_level_badge(session, user.id, catalog.level1))

    assert sum(1 for r in results if r is not None) == 1
    async with session_factory() as session:
        assert await user_badge_count(session, user.id) == 1


async def test_list_user_badges(db, catalog, user):
    await badges.award_level_badge(db, user.id, catalog.level1)
    rows = await badges.list_user_badges(db, user.id)
    assert [(ub.badge_id, b.name) for ub, b in rows] == [(catalog.badge1, "First Responder")]
