"""Daily draw ORM model."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from xpot_draw.db.base import Base
from xpot_draw.services.calendar import utcnow

DRAW_OPEN = "open"
DRAW_DRAWING = "drawing"
DRAW_CLOSED = "closed"
DRAW_COMPLETED = "completed"


class Draw(Base):
    """One day's prize round."""

    __tablename__ = "draws"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # UTC start of the calendar day this draw belongs to
    draw_date: Mapped[datetime] = mapped_column(DateTime, unique=True, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=DRAW_OPEN)
    jackpot_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    rollover_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    closes_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    payout_tx: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # No FK: tickets already reference draws
    winner_ticket_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<Draw id={self.id} date={self.draw_date} status={self.status}>"
