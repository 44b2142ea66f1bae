"""Level model: ordered grouping of scenarios."""
from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.session import Base


class Level(Base):
    __tablename__ = "levels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    # catalog order; ties broken by id
    difficulty_order = Column(Integer, nullable=False, index=True)

    scenarios = relationship("Scenario", back_populates="level", order_by="Scenario.id")
