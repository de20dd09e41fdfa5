"""Request bodies for ticket operations."""

from pydantic import AliasChoices, BaseModel, Field


class ClaimTicketRequest(BaseModel):
    wallet_address: str | None = Field(
        None,
        validation_alias=AliasChoices("walletAddress", "wallet", "address", "wallet_address"),
    )
