"""Scenario submission pipeline.

score -> ledger -> level evaluation -> unlock -> badge -> assemble, strictly
in that order within one request. Validation and not-found errors abort
before any write. Once the best score is recorded it is the durable fact:
later stages are best effort, and their store failures are logged and
leave the corresponding response fields out instead of failing the
submission.
"""
import logging
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidInputError, NoStepsError, NotFoundError, StoreError
from app.models.badge import Badge
from app.schemas.scenario import ScenarioOutSchema
from app.schemas.submission import (
    AwardedBadgeSchema,
    FeedbackSchema,
    LevelCompletedSchema,
    LevelNotCompletedSchema,
    SubmissionResultSchema,
)
from app.services import badges, catalog, ledger, progression
from app.services.progression import LevelEvaluation, ProgressUpdate
from app.services.scoring import ScoreResult, build_step_feedback, compute_score, summarize_score

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _store(db: AsyncSession, stage: str, op: Callable[[], Awaitable[T]]) -> T:
    """Run a store operation; SQLAlchemy failures become StoreError after a rollback."""
    try:
        return await op()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StoreError(f"{stage} failed: {exc}") from exc


def badge_view(badge: Badge) -> AwardedBadgeSchema:
    return AwardedBadgeSchema(
        badge_id=badge.id,
        name=badge.name,
        description=badge.description,
        icon_url=badge.icon_url,
    )


def assemble_result(
    scored: ScoreResult,
    level_id: int,
    scenario_id: int,
    feedback: FeedbackSchema | None = None,
    evaluation: LevelEvaluation | None = None,
    update: ProgressUpdate | None = None,
    awarded_badge: AwardedBadgeSchema | None = None,
    updated_scenario: ScenarioOutSchema | None = None,
) -> SubmissionResultSchema:
    """Shape the submission response; optional parts are left out when not supplied."""
    level_progress = None
    if evaluation is not None and update is not None:
        if evaluation.completed:
            level_progress = LevelCompletedSchema(
                level_id=level_id,
                next_level_unlocked=update.next_level_unlocked,
            )
        else:
            level_progress = LevelNotCompletedSchema(
                level_id=level_id,
                perfect_in_level=evaluation.perfect_count,
                total_in_level=evaluation.total_scenarios,
            )

    return SubmissionResultSchema(
        score=scored.score,
        all_correct=scored.all_correct,
        level_id=level_id,
        scenario_id=scenario_id,
        feedback=feedback,
        level_progress=level_progress,
        awarded_badge=awarded_badge,
        updated_scenario=updated_scenario,
    )


async def submit_scenario(
    db: AsyncSession,
    scenario_id: int,
    user_answers: Any,
    user_id: int | None = None,
) -> SubmissionResultSchema:
    """Score a submission and, for an identified user, persist progress and awards."""
    if not isinstance(user_answers, list):
        raise InvalidInputError("userAnswers must be an array.")

    scenario = await catalog.get_scenario(db, scenario_id)
    if scenario is None:
        raise NotFoundError("Scenario not found")
    steps = await catalog.get_steps_by_scenario(db, scenario_id)
    if not steps:
        raise NoStepsError()

    # plain values only from here: a rollback expires ORM instances
    level_id = scenario.level_id
    scored = compute_score(user_answers, steps)
    feedback = FeedbackSchema(
        total_questions=scored.total,
        correct_answers=scored.correct_count,
        summary=summarize_score(scored.score),
        steps=build_step_feedback(user_answers, steps),
    )

    if user_id is None:
        # anonymous: scored only, nothing persisted
        logger.debug("anonymous submission scenario=%s score=%s", scenario_id, scored.score)
        return assemble_result(scored, level_id, scenario_id, feedback)

    try:
        attempt = await _store(
            db, "record best score",
            lambda: ledger.record_best_score(db, user_id, scenario_id, scored.score),
        )
    except StoreError:
        logger.exception("score not recorded user=%s scenario=%s", user_id, scenario_id)
        return assemble_result(scored, level_id, scenario_id, feedback)

    try:
        await _store(
            db, "record step results",
            lambda: ledger.record_step_results(db, attempt, steps, user_answers),
        )
    except StoreError:
        logger.exception("step results not recorded user=%s scenario=%s", user_id, scenario_id)

    try:
        evaluation = await _store(
            db, "evaluate level", lambda: progression.evaluate_level(db, user_id, level_id)
        )
        update = await _store(
            db, "apply progress",
            lambda: progression.apply_progress(db, user_id, level_id, evaluation.completed),
        )
    except StoreError:
        logger.exception("level progress not updated user=%s level=%s", user_id, level_id)
        return assemble_result(scored, level_id, scenario_id, feedback)

    awarded_badge = None
    if evaluation.completed:
        logger.info("user=%s completed level=%s", user_id, level_id)
        try:
            badge = await _store(
                db, "award badge", lambda: badges.award_level_badge(db, user_id, level_id)
            )
        except StoreError:
            logger.exception("badge not awarded user=%s level=%s", user_id, level_id)
        else:
            awarded_badge = badge_view(badge) if badge is not None else None

    updated_scenario = None
    try:
        refreshed = await _store(
            db, "refresh scenario", lambda: catalog.get_scenario(db, scenario_id)
        )
    except StoreError:
        logger.exception("scenario view not refreshed scenario=%s", scenario_id)
    else:
        if refreshed is not None:
            updated_scenario = ScenarioOutSchema.model_validate(refreshed)

    return assemble_result(
        scored,
        level_id,
        scenario_id,
        feedback,
        evaluation=evaluation,
        update=update,
        awarded_badge=awarded_badge,
        updated_scenario=updated_scenario,
    )
