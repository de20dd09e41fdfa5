"""Hub daily streak ORM model."""

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from xpot_draw.db.base import Base


class HubStreak(Base):
    __tablename__ = "hub_streaks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_done_day: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<HubStreak user={self.user_id} days={self.days}>"
