"""Account schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from finledger.schemas.common import LookupRef


class AccountCreate(BaseModel):
    name: str
    account_type_id: int | None = None
    balance: Decimal = Decimal("0.00")
    currency_id: int | None = None


class AccountUpdate(BaseModel):
    name: str | None = None
    account_type_id: int | None = None
    balance: Decimal | None = None
    currency_id: int | None = None


class AmountRequest(BaseModel):
    """Body of deposit / withdraw."""

    amount: Decimal = Field(decimal_places=2)


class TransferRequest(BaseModel):
    from_account_id: int
    to_account_id: int
    amount: Decimal = Field(decimal_places=2)


class AccountResponse(BaseModel):
    id: int
    name: str
    account_type_id: int | None = None
    balance: Decimal
    currency_id: int | None = None
    user_id: int | None = None
    created_at: datetime
    account_type: LookupRef | None = None
    currency: LookupRef | None = None

    model_config = {"from_attributes": True}


class TransferResponse(BaseModel):
    from_account: AccountResponse
    to_account: AccountResponse


class TotalBalanceResponse(BaseModel):
    total_balance: Decimal
