"""Development database reset and demo seed."""

from datetime import datetime

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.db.crud import draw as draw_crud
from xpot_draw.db.models import BonusDrop, Draw, HubStreak, Ticket, User, Wallet, Winner
from xpot_draw.db.models.draw import DRAW_OPEN
from xpot_draw.db.models.ticket import TICKET_IN_DRAW
from xpot_draw.services.calendar import as_utc, compute_closes_at, today_range
from xpot_draw.services.ticket_service import make_ticket_code

DEMO_HANDLES = ("dev_whale", "lucky_gamma", "airdrop_bandit")
DEMO_JACKPOT_USD = 1_000_000

# Children before parents
_RESET_ORDER = (BonusDrop, Winner, Ticket, HubStreak, Wallet, User, Draw)


async def reset_and_seed(session: AsyncSession, now: datetime | None = None) -> dict:
    now = as_utc(now)
    for model in _RESET_ORDER:
        await session.execute(delete(model))

    start, _ = today_range(now)
    draw = await draw_crud.create(
        session,
        draw_date=start,
        status=DRAW_OPEN,
        jackpot_usd=DEMO_JACKPOT_USD,
        closes_at=compute_closes_at(start, now),
    )

    tickets = []
    for i, handle in enumerate(DEMO_HANDLES):
        user = User(external_id=f"dev-{handle}", x_handle=handle, x_name=handle.replace("_", " ").title())
        session.add(user)
        await session.flush()

        wallet = Wallet(address=f"DEV{i}{handle.upper()}WALLET", user_id=user.id)
        session.add(wallet)
        await session.flush()

        ticket = Ticket(
            code=make_ticket_code(),
            status=TICKET_IN_DRAW,
            draw_id=draw.id,
            wallet_id=wallet.id,
            wallet_address=wallet.address,
            user_id=user.id,
        )
        session.add(ticket)
        tickets.append(ticket)
    await session.flush()

    logger.warning("Development database reset: draw {} seeded with {} tickets", draw.id, len(tickets))
    return {
        "drawId": draw.id,
        "users": len(DEMO_HANDLES),
        "wallets": len(DEMO_HANDLES),
        "tickets": len(tickets),
    }
