"""Request and response schemas for ledger endpoints.

Request bodies keep the ledger's PascalCase keys; snake_case names are
accepted as well.
"""

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

# -- Requests --


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TransferRequest(_Request):
    sender: str = Field(default="", alias="From")
    recipient: str = Field(default="", alias="To")
    amount: int = Field(default=0, alias="Amount", ge=0)
    note: str = Field(default="", alias="Note")
    link: str = Field(default="", alias="Link")
    asset_refs: list[NonNegativeInt] | None = Field(default=None, alias="Returns")


class MintRequest(_Request):
    recipient: str = Field(default="", alias="To")
    amount: int = Field(default=0, alias="Amount", ge=0)
    note: str = Field(default="", alias="Note")


class BurnRequest(_Request):
    sender: str = Field(default="", alias="From")
    amount: int = Field(default=0, alias="Amount", ge=0)
    note: str = Field(default="", alias="Note")
    link: str = Field(default="", alias="Link")
    asset_refs: list[NonNegativeInt] | None = Field(default=None, alias="Returns")


# -- Responses --


class EconomySummary(BaseModel):
    user_count: int
    economy_size: int
    ccu: float
    tcu: int
    fee_rate: float
    stipend: int
