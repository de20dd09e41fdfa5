"""Aggregate API router."""

from fastapi import APIRouter

from xpot_draw.api.v1.endpoints import (
    draw,
    tickets,
    public,
    bonus,
    hub,
    ops,
    admin,
    internal,
    dev,
)

api_router = APIRouter()

api_router.include_router(draw.router, prefix="/draw", tags=["draw"])
api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
api_router.include_router(public.router, prefix="/public", tags=["public"])
api_router.include_router(bonus.router, prefix="/bonus", tags=["bonus"])
api_router.include_router(hub.router, prefix="/hub", tags=["hub"])
api_router.include_router(ops.router, prefix="/ops", tags=["ops"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(internal.router, prefix="/internal", tags=["internal"])
api_router.include_router(dev.router, prefix="/dev", tags=["dev"])
