"""Request bodies for draw, winner and bonus operations."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PickWinnerRequest(CamelModel):
    draw_id: int | None = None


class PickBonusWinnerRequest(CamelModel):
    draw_id: int | None = None
    label: str | None = Field(None, max_length=256)
    amount_xpot: float | None = None


class ReopenDrawRequest(CamelModel):
    draw_id: int | None = None


class MarkPaidRequest(CamelModel):
    winner_id: int | None = None
    ticket_id: int | None = None
    tx_url: str | None = Field(None, max_length=255)


class BonusScheduleRequest(CamelModel):
    amount_xpot: float | None = None
    label: str | None = Field(None, max_length=256)
    delay_minutes: float | None = None
    minutes_from_now: float | None = None  # legacy name of delay_minutes
    scheduled_at: str | None = None
