"""CRUD operations for users and wallets."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.db.models.user import User, Wallet


async def get_user_by_external_id(session: AsyncSession, external_id: str) -> User | None:
    result = await session.execute(
        select(User).where(User.external_id == external_id)
    )
    return result.scalar_one_or_none()


async def get_wallet(session: AsyncSession, address: str) -> Wallet | None:
    result = await session.execute(select(Wallet).where(Wallet.address == address))
    return result.scalar_one_or_none()


async def get_or_create_wallet(session: AsyncSession, address: str) -> Wallet:
    wallet = await get_wallet(session, address)
    if wallet is None:
        wallet = Wallet(address=address)
        session.add(wallet)
        await session.flush()
    return wallet
