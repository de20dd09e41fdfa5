"""Scheduled bonus drop ORM model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from xpot_draw.db.base import Base
from xpot_draw.services.calendar import utcnow

BONUS_SCHEDULED = "SCHEDULED"
BONUS_FIRED = "FIRED"
BONUS_CANCELLED = "CANCELLED"


class BonusDrop(Base):
    """Intra-day bonus prize, fired by the bonus job once due."""

    __tablename__ = "bonus_drops"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    draw_id: Mapped[int] = mapped_column(ForeignKey("draws.id", ondelete="CASCADE"), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(64), nullable=False)
    amount_xpot: Mapped[int] = mapped_column(Integer, nullable=False)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=BONUS_SCHEDULED)
    fired_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    winner_id: Mapped[int | None] = mapped_column(ForeignKey("winners.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<BonusDrop id={self.id} status={self.status} at={self.scheduled_at}>"
