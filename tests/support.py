"""Shared fixtures: an in-memory store and seeding helpers."""

import unittest
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from xpot_draw.db.base import Base
from xpot_draw.db.models import Draw, Ticket, User, Wallet
from xpot_draw.db.models.draw import DRAW_OPEN
from xpot_draw.db.models.ticket import TICKET_IN_DRAW

# 2025-03-14 12:00 UTC
NOON = datetime(2025, 3, 14, 12, 0, 0)
TODAY = datetime(2025, 3, 14)
YESTERDAY = TODAY - timedelta(days=1)


class StoreTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:", poolclass=StaticPool,
        )
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.Session = async_sessionmaker(self.engine, expire_on_commit=False)

    async def asyncTearDown(self) -> None:
        await self.engine.dispose()

    async def seed_draw(
        self,
        *,
        draw_date: datetime = TODAY,
        status: str = DRAW_OPEN,
        closes_at: datetime | None = None,
        jackpot_usd: float = 0,
        rollover_usd: float = 0,
        tickets: int = 0,
    ) -> tuple[int, list[int]]:
        """Insert a draw with ``tickets`` IN_DRAW tickets; returns their ids."""
        async with self.Session.begin() as session:
            draw = Draw(
                draw_date=draw_date,
                status=status,
                closes_at=closes_at or draw_date + timedelta(hours=21),
                jackpot_usd=jackpot_usd,
                rollover_usd=rollover_usd,
            )
            session.add(draw)
            await session.flush()

            ticket_ids = []
            for i in range(tickets):
                user = User(external_id=f"user-{draw.id}-{i}", x_handle=f"holder{i}")
                session.add(user)
                await session.flush()
                wallet = Wallet(address=f"Wallet{draw.id:03d}{i:03d}ABCDEFGH", user_id=user.id)
                session.add(wallet)
                await session.flush()
                ticket = Ticket(
                    code=f"XPOT-T{draw.id:03d}-{i:04d}",
                    status=TICKET_IN_DRAW,
                    draw_id=draw.id,
                    wallet_id=wallet.id,
                    wallet_address=wallet.address,
                    user_id=user.id,
                )
                session.add(ticket)
                await session.flush()
                ticket_ids.append(ticket.id)
            return draw.id, ticket_ids
