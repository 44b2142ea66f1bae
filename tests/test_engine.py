import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.core.errors import InvalidInputError, NoStepsError, NotFoundError
from app.models import Attempt, UserBadge, UserLevelProgress
from app.schemas.submission import LevelCompletedSchema, LevelNotCompletedSchema
from app.services import badges, progression
from app.services.engine import submit_scenario
from app.services.ledger import get_user_attempt, record_best_score


async def count(db, model, **filters):
    stmt = select(func.count(model.id))
    for column, value in filters.items():
        stmt = stmt.where(getattr(model, column) == value)
    return (await db.execute(stmt)).scalar_one()


async def test_perfect_submission(db, catalog, user):
    result = await submit_scenario(db, catalog.four_step, ["A", "B", "C", "D"], user.id)
    assert result.score == 100
    assert result.all_correct is True
    assert result.level_id == catalog.level1
    assert result.scenario_id == catalog.four_step
    assert result.feedback.correct_answers == 4


async def test_one_wrong_answer(db, catalog, user):
    result = await submit_scenario(db, catalog.four_step, ["A", "X", "C", "D"], user.id)
    assert result.score == 75
    assert result.all_correct is False
    assert isinstance(result.level_progress, LevelNotCompletedSchema)
    assert result.level_progress.perfect_in_level == 0
    assert result.level_progress.total_in_level == 3
    assert result.awarded_badge is None


async def test_last_perfect_scenario_completes_level(db, catalog, user):
    await record_best_score(db, user.id, catalog.four_step, 100)
    await record_best_score(db, user.id, catalog.single_a, 100)

    result = await submit_scenario(db, catalog.single_b, ["b"], user.id)

    assert isinstance(result.level_progress, LevelCompletedSchema)
    assert result.level_progress.level_id == catalog.level1
    assert result.level_progress.next_level_unlocked == catalog.level2
    assert result.awarded_badge.badge_id == catalog.badge1
    assert result.awarded_badge.name == "First Responder"
    assert result.updated_scenario.id == catalog.single_b

    nxt = await progression.get_user_level(db, user.id, catalog.level2)
    assert nxt.unlocked is True and nxt.completed is False
    assert await count(db, UserBadge, user_id=user.id) == 1


async def test_resubmitting_perfect_scenario_refreshes_timestamp_only(db, catalog, user):
    await record_best_score(db, user.id, catalog.four_step, 100)
    await record_best_score(db, user.id, catalog.single_a, 100)
    await submit_scenario(db, catalog.single_b, ["B"], user.id)

    old = datetime(2020, 1, 1)
    await record_best_score(db, user.id, catalog.single_b, 100, now=old)

    result = await submit_scenario(db, catalog.single_b, ["B"], user.id)

    attempt = await get_user_attempt(db, user.id, catalog.single_b)
    assert attempt.score == 100
    assert attempt.completed_at.replace(tzinfo=None) > old + timedelta(days=1)
    assert result.level_progress.completed is True
    assert result.awarded_badge is None
    assert await count(db, UserBadge, user_id=user.id) == 1


async def test_lower_resubmission_does_not_lose_best_score(db, catalog, user):
    await submit_scenario(db, catalog.four_step, ["A", "B", "C", "D"], user.id)
    result = await submit_scenario(db, catalog.four_step, ["A"], user.id)
    assert result.score == 25
    assert (await get_user_attempt(db, user.id, catalog.four_step)).score == 100
    assert result.level_progress.perfect_in_level == 1


async def test_anonymous_submission_is_scored_but_not_persisted(db, catalog):
    result = await submit_scenario(db, catalog.four_step, ["A", "B", "C", "D"], None)
    assert result.score == 100
    assert result.level_progress is None
    assert result.awarded_badge is None
    assert result.updated_scenario is None
    assert await count(db, Attempt) == 0
    assert await count(db, UserLevelProgress) == 0


async def test_answers_must_be_a_list(db, catalog, user):
    with pytest.raises(InvalidInputError):
        await submit_scenario(db, catalog.four_step, "ABCD", user.id)
    assert await count(db, Attempt) == 0


async def test_unknown_scenario(db, catalog, user):
    with pytest.raises(NotFoundError):
        await submit_scenario(db, 9999, ["A"], user.id)


async def test_scenario_without_steps(db, catalog, user):
    with pytest.raises(NoStepsError):
        await submit_scenario(db, catalog.empty_scenario, ["A"], user.id)
    assert await count(db, Attempt) == 0


async def test_progression_failure_keeps_recorded_score(db, catalog, user, monkeypatch):
    async def broken(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(progression, "evaluate_level", broken)

    result = await submit_scenario(db, catalog.four_step, ["A", "B", "C", "D"], user.id)

    assert result.score == 100
    assert result.level_progress is None
    assert (await get_user_attempt(db, user.id, catalog.four_step)).score == 100


async def test_badge_failure_keeps_level_progress(db, catalog, user, monkeypatch):
    async def broken(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(badges, "award_level_badge", broken)
    await record_best_score(db, user.id, catalog.four_step, 100)
    await record_best_score(db, user.id, catalog.single_a, 100)

    result = await submit_scenario(db, catalog.single_b, ["B"], user.id)

    assert result.level_progress.completed is True
    assert result.awarded_badge is None


async def test_concurrent_completions_grant_the_badge_once(session_factory, catalog, user):
    async with session_factory() as session:
        await record_best_score(session, user.id, catalog.four_step, 100)
        await record_best_score(session, user.id, catalog.single_a, 100)

    async def submit():
        async with session_factory() as session:
            return await submit_scenario(session, catalog.single_b, ["B"], user.id)

    results = await asyncio.gather(*(submit() for _ in range(4)))

    assert all(r.score == 100 for r in results)
    assert sum(r.awarded_badge is not None for r in results) == 1
    async with session_factory() as session:
        assert await count(session, UserBadge, user_id=user.id, badge_id=catalog.badge1) == 1
