"""Public bonus strip."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.api.deps import get_db
from xpot_draw.services import bonus_service
from xpot_draw.services.projections import live_bonus_payload

router = APIRouter()


@router.get("/live")
async def live(db: AsyncSession = Depends(get_db)):
    drops = await bonus_service.list_live(db)
    return JSONResponse(
        {"ok": True, "bonus": [live_bonus_payload(d) for d in drops]},
        headers={"Cache-Control": "no-store, max-age=0"},
    )
