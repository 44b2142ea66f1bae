"""Attempt: best score of one user on one scenario. StepAttempt: answers of the latest submission."""
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.sql import func

from app.db.session import Base


class Attempt(Base):
    __tablename__ = "attempts"
    __table_args__ = (
        UniqueConstraint("user_id", "scenario_id", name="uq_attempts_user_scenario"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    scenario_id = Column(Integer, ForeignKey("scenarios.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer, nullable=False, default=0)  # 0-100, never decreases
    completed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class StepAttempt(Base):
    __tablename__ = "step_attempts"
    __table_args__ = (
        UniqueConstraint("attempt_id", "step_id", name="uq_step_attempts_attempt_step"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    attempt_id = Column(Integer, ForeignKey("attempts.id", ondelete="CASCADE"), nullable=False, index=True)
    step_id = Column(Integer, ForeignKey("scenario_steps.id", ondelete="CASCADE"), nullable=False)
    user_action = Column(Text, nullable=False)  # normalized label as submitted; "" when unanswered
    is_correct = Column(Boolean, nullable=False, default=False)
