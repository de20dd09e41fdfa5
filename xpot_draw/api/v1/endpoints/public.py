"""Public winner feeds."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.api.deps import get_db
from xpot_draw.db.crud import winner as winner_crud
from xpot_draw.services.projections import clamp_limit, public_winner_payload

router = APIRouter()

DEFAULT_LIMIT = 20
MAX_LIMIT = 50


@router.get("/winners")
async def recent_winners(
    limit: str | None = Query(None),
    kind: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Recent winners, newest first. ``limit`` is clamped to ``[1, 50]``."""
    take = clamp_limit(limit, DEFAULT_LIMIT, MAX_LIMIT)
    winners = await winner_crud.list_recent(
        db, limit=take, kind=kind.upper() if kind else None,
    )
    return {
        "ok": True,
        "limit": take,
        "winners": [public_winner_payload(w) for w in winners],
    }


@router.get("/winners/latest")
async def latest_winner(db: AsyncSession = Depends(get_db)):
    winners = await winner_crud.list_recent(db, limit=1, kind="MAIN")
    return {
        "ok": True,
        "winner": public_winner_payload(winners[0]) if winners else None,
    }
