"""Winner ORM model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from xpot_draw.db.base import Base
from xpot_draw.services.calendar import utcnow

WINNER_MAIN = "MAIN"
WINNER_BONUS = "BONUS"


class Winner(Base):
    """A prize payout event tied to one ticket of one draw."""

    __tablename__ = "winners"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    draw_id: Mapped[int] = mapped_column(ForeignKey("draws.id", ondelete="CASCADE"), nullable=False, index=True)
    ticket_id: Mapped[int] = mapped_column(ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False)
    kind: Mapped[str] = mapped_column(String(10), nullable=False, default=WINNER_MAIN)
    label: Mapped[str | None] = mapped_column(String(64), nullable=True)
    ticket_code: Mapped[str] = mapped_column(String(32), nullable=False)
    wallet_address: Mapped[str] = mapped_column(String(64), nullable=False)
    jackpot_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    payout_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    is_paid_out: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tx_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    # Set when the draw is reopened; the row stays for audit
    is_voided: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    voided_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    draw = relationship("Draw")
    ticket = relationship("Ticket")

    def __repr__(self) -> str:
        return f"<Winner id={self.id} kind={self.kind} ticket={self.ticket_code}>"
