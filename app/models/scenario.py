"""Scenario and ScenarioStep models: a themed quiz and its ordered questions."""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.session import Base

STEP_OPTION_LABELS = ("A", "B", "C", "D")


class Scenario(Base):
    __tablename__ = "scenarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    level_id = Column(Integer, ForeignKey("levels.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(255), nullable=True)

    level = relationship("Level", back_populates="scenarios")
    steps = relationship("ScenarioStep", back_populates="scenario", order_by="ScenarioStep.step_order")


class ScenarioStep(Base):
    __tablename__ = "scenario_steps"
    __table_args__ = (
        UniqueConstraint("scenario_id", "step_order", name="uq_scenario_steps_scenario_order"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    scenario_id = Column(Integer, ForeignKey("scenarios.id", ondelete="CASCADE"), nullable=False, index=True)
    step_order = Column(Integer, nullable=False)
    question_text = Column(Text, nullable=False)
    option_a = Column(Text, nullable=False)
    option_b = Column(Text, nullable=False)
    option_c = Column(Text, nullable=False)
    option_d = Column(Text, nullable=False)
    correct_action = Column(String(1), nullable=False)  # one of STEP_OPTION_LABELS
    feedback_message = Column(Text, nullable=True)

    scenario = relationship("Scenario", back_populates="steps")

    @property
    def options(self) -> dict[str, str]:
        return {
            "A": self.option_a,
            "B": self.option_b,
            "C": self.option_c,
            "D": self.option_d,
        }
