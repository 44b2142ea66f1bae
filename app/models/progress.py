"""UserLevelProgress: unlocked/completed flags of one user on one level."""
from sqlalchemy import Column, Integer, Boolean, ForeignKey, UniqueConstraint

from app.db.session import Base


class UserLevelProgress(Base):
    __tablename__ = "user_levels"
    __table_args__ = (
        UniqueConstraint("user_id", "level_id", name="uq_user_levels_user_level"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    level_id = Column(Integer, ForeignKey("levels.id", ondelete="CASCADE"), nullable=False)
    unlocked = Column(Boolean, nullable=False, default=False)
    completed = Column(Boolean, nullable=False, default=False)  # implies unlocked
