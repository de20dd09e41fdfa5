"""ORM models package."""

from xpot_draw.db.models.draw import Draw
from xpot_draw.db.models.ticket import Ticket
from xpot_draw.db.models.winner import Winner
from xpot_draw.db.models.user import User, Wallet
from xpot_draw.db.models.bonus_drop import BonusDrop
from xpot_draw.db.models.hub_streak import HubStreak

__all__ = [
    "Draw",
    "Ticket",
    "Winner",
    "User",
    "Wallet",
    "BonusDrop",
    "HubStreak",
]
