"""Ticket ORM model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from xpot_draw.db.base import Base
from xpot_draw.services.calendar import utcnow

TICKET_IN_DRAW = "IN_DRAW"
TICKET_WON = "WON"
TICKET_CLAIMED = "CLAIMED"
TICKET_NOT_PICKED = "NOT_PICKED"
TICKET_EXPIRED = "EXPIRED"


class Ticket(Base):
    """One wallet's entry into a draw."""

    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=TICKET_IN_DRAW, index=True)
    draw_id: Mapped[int] = mapped_column(ForeignKey("draws.id", ondelete="CASCADE"), nullable=False, index=True)
    wallet_id: Mapped[int | None] = mapped_column(ForeignKey("wallets.id"), nullable=True)
    wallet_address: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    draw = relationship("Draw")
    wallet = relationship("Wallet")

    def __repr__(self) -> str:
        return f"<Ticket code={self.code} status={self.status}>"
