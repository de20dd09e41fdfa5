"""Public draw endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.api.deps import get_db
from xpot_draw.db.crud import ticket as ticket_crud
from xpot_draw.services import draw_service
from xpot_draw.services.projections import draw_payload

router = APIRouter()


@router.get("/today")
async def get_today(db: AsyncSession = Depends(get_db)):
    """Today's draw, created on first read when the previous round is done."""
    draw = await draw_service.ensure_today_draw(db)
    if draw is None:
        return {"ok": False, "error": "NO_DRAW"}
    count = await ticket_crud.count_for_draw(db, draw.id)
    return {"ok": True, "draw": draw_payload(draw, tickets_count=count)}
