import asyncio
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select

from app.models import Attempt, StepAttempt
from app.services import catalog as catalog_service
from app.services.ledger import (
    get_user_attempt,
    list_user_attempts_by_level,
    record_best_score,
    record_step_results,
    upsert_insert,
)

T0 = datetime(2026, 1, 1, 12, 0, 0)


async def test_first_submission_creates_attempt(db, catalog, user):
    attempt = await record_best_score(db, user.id, catalog.four_step, 50, now=T0)
    assert attempt.score == 50
    assert attempt.completed_at.replace(tzinfo=None) == T0


async def test_higher_score_replaces_stored_score(db, catalog, user):
    await record_best_score(db, user.id, catalog.four_step, 50, now=T0)
    attempt = await record_best_score(db, user.id, catalog.four_step, 75, now=T0 + timedelta(minutes=1))
    assert attempt.score == 75


async def test_lower_score_keeps_best_but_refreshes_timestamp(db, catalog, user):
    await record_best_score(db, user.id, catalog.four_step, 100, now=T0)
    later = T0 + timedelta(hours=1)
    attempt = await record_best_score(db, user.id, catalog.four_step, 25, now=later)
    assert attempt.score == 100
    assert attempt.completed_at.replace(tzinfo=None) == later


async def test_one_row_per_user_and_scenario(db, catalog, user):
    for score in (10, 90, 40, 90):
        await record_best_score(db, user.id, catalog.four_step, score)
    count = await db.execute(select(func.count(Attempt.id)))
    assert count.scalar_one() == 1
    assert (await get_user_attempt(db, user.id, catalog.four_step)).score == 90


async def test_final_score_is_max_whatever_the_write_order(session_factory, catalog, user):
    for scenario_id, order in ((catalog.single_a, (60, 90)), (catalog.single_b, (90, 60))):
        for score in order:
            async with session_factory() as session:
                await record_best_score(session, user.id, scenario_id, score)
        async with session_factory() as session:
            assert (await get_user_attempt(session, user.id, scenario_id)).score == 90


async def test_concurrent_writes_keep_the_max(session_factory, catalog, user):
    async def submit(score):
        async with session_factory() as session:
            await record_best_score(session, user.id, catalog.four_step, score)

    await asyncio.gather(submit(40), submit(80), submit(60))

    async with session_factory() as session:
        assert (await get_user_attempt(session, user.id, catalog.four_step)).score == 80


async def test_step_results_replace_previous_submission(db, catalog, user):
    steps = await catalog_service.get_steps_by_scenario(db, catalog.four_step)
    attempt = await record_best_score(db, user.id, catalog.four_step, 50)
    await record_step_results(db, attempt, steps, ["a", "X"])
    await record_step_results(db, attempt, steps, ["A", "B", "C", "d"])

    result = await db.execute(
        select(StepAttempt).where(StepAttempt.attempt_id == attempt.id).order_by(StepAttempt.step_id)
    )
    rows = result.scalars().all()
    assert [r.user_action for r in rows] == ["A", "B", "C", "D"]
    assert all(r.is_correct for r in rows)


async def test_attempts_by_level(db, catalog, user):
    await record_best_score(db, user.id, catalog.single_a, 100)
    await record_best_score(db, user.id, catalog.level2_scenario, 100)
    attempts = await list_user_attempts_by_level(db, user.id, catalog.level1)
    assert [a.scenario_id for a in attempts] == [catalog.single_a]


async def test_step_results_keep_the_full_label(db, catalog, user):
    steps = await catalog_service.get_steps_by_scenario(db, catalog.single_a)
    attempt = await record_best_score(db, user.id, catalog.single_a, 0)
    [row] = await record_step_results(db, attempt, steps, ["  option-a-with-a-long-label "])

    stored = (await db.execute(select(StepAttempt).where(StepAttempt.id == row.id))).scalar_one()
    assert stored.user_action == "OPTION-A-WITH-A-LONG-LABEL"
    assert stored.is_correct is False


def test_upsert_rejects_unsupported_dialect():
    db = SimpleNamespace(get_bind=lambda: SimpleNamespace(dialect=SimpleNamespace(name="mysql")))
    with pytest.raises(RuntimeError, match="mysql"):
        upsert_insert(db, Attempt)
