"""Attempt ledger: best score per (user, scenario) and the latest step answers."""
import logging
from datetime import datetime, timezone
from typing import Any, Sequence

from sqlalchemy import case, delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attempt import Attempt, StepAttempt
from app.models.scenario import Scenario
from app.services.scoring import is_step_correct, normalize_label

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def upsert_insert(db: AsyncSession, table):
    """INSERT .. ON CONFLICT builder for the session's dialect."""
    dialect = db.get_bind().dialect.name
    try:
        return _DIALECT_INSERTS[dialect](table)
    except KeyError:
        raise RuntimeError(f"Upserts are not supported on {dialect!r}") from None


async def get_user_attempt(db: AsyncSession, user_id: int, scenario_id: int) -> Attempt | None:
    result = await db.execute(
        select(Attempt).where(Attempt.user_id == user_id, Attempt.scenario_id == scenario_id)
    )
    return result.scalar_one_or_none()


async def record_best_score(
    db: AsyncSession,
    user_id: int,
    scenario_id: int,
    score: int,
    now: datetime | None = None,
) -> Attempt:
    """Upsert the user's attempt keeping max(stored, score); completed_at always refreshed.

    The conflict clause is the concurrency boundary: two concurrent writes end
    with the higher score whatever their order.
    """
    completed_at = now or datetime.now(timezone.utc)
    stmt = upsert_insert(db, Attempt).values(
        user_id=user_id,
        scenario_id=scenario_id,
        score=score,
        completed_at=completed_at,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Attempt.user_id, Attempt.scenario_id],
        set_={
            "score": case(
                (stmt.excluded.score > Attempt.score, stmt.excluded.score),
                else_=Attempt.score,
            ),
            "completed_at": stmt.excluded.completed_at,
        },
    )
    await db.execute(stmt)
    await db.commit()

    # re-read: the upsert does not hand back the merged row on every backend
    result = await db.execute(
        select(Attempt)
        .where(Attempt.user_id == user_id, Attempt.scenario_id == scenario_id)
        .execution_options(populate_existing=True)
    )
    attempt = result.scalar_one()
    logger.debug(
        "attempt user=%s scenario=%s submitted=%s best=%s",
        user_id, scenario_id, score, attempt.score,
    )
    return attempt


async def record_step_results(
    db: AsyncSession,
    attempt: Attempt,
    steps: Sequence,
    answers: Sequence[Any],
) -> list[StepAttempt]:
    """Replace the step answers stored for `attempt` with this submission's."""
    ordered = sorted(steps, key=lambda s: int(s.step_order))
    await db.execute(delete(StepAttempt).where(StepAttempt.attempt_id == attempt.id))
    rows = []
    for i, step in enumerate(ordered):
        picked = normalize_label(answers[i]) if i < len(answers) else ""
        rows.append(StepAttempt(
            attempt_id=attempt.id,
            step_id=step.id,
            user_action=picked,
            is_correct=is_step_correct(picked, step),
        ))
    db.add_all(rows)
    await db.commit()
    return rows


async def list_user_attempts(db: AsyncSession, user_id: int) -> list[Attempt]:
    result = await db.execute(
        select(Attempt).where(Attempt.user_id == user_id).order_by(Attempt.scenario_id.asc())
    )
    return list(result.scalars().all())


async def list_user_attempts_by_level(db: AsyncSession, user_id: int, level_id: int) -> list[Attempt]:
    result = await db.execute(
        select(Attempt)
        .join(Scenario, Scenario.id == Attempt.scenario_id)
        .where(Attempt.user_id == user_id, Scenario.level_id == level_id)
        .order_by(Attempt.scenario_id.asc())
    )
    return list(result.scalars().all())
