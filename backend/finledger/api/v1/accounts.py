"""Account ledger API routes."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from finledger.api.deps import get_current_user, get_db
from finledger.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    AmountRequest,
    TotalBalanceResponse,
    TransferRequest,
    TransferResponse,
)
from finledger.schemas.common import Envelope
from finledger.schemas.user import AuthenticatedUser
from finledger.services.account_service import AccountService

router = APIRouter()


@router.post("", response_model=Envelope[AccountResponse], status_code=201)
async def create_account(
    data: AccountCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create an account for the current user."""
    account = await AccountService(db).create_account(data, current_user.id)
    return Envelope(
        message="Account created successfully",
        status=201,
        data=AccountResponse.model_validate(account),
    )


@router.get("", response_model=Envelope[list[AccountResponse]])
async def list_accounts(
    account_type_id: int | None = None,
    currency_id: int | None = None,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the current user's accounts, newest first."""
    accounts = await AccountService(db).list_accounts(current_user.id, account_type_id, currency_id)
    return Envelope(
        message="Accounts retrieved successfully",
        status=200,
        data=[AccountResponse.model_validate(a) for a in accounts],
    )


@router.get("/total-balance", response_model=Envelope[TotalBalanceResponse])
async def get_total_balance(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    total = await AccountService(db).get_total_balance(current_user.id)
    return Envelope(
        message="Total balance retrieved successfully",
        status=200,
        data=TotalBalanceResponse(total_balance=total),
    )


@router.get("/low-balance", response_model=Envelope[list[AccountResponse]])
async def list_low_balance(
    threshold: Decimal | None = Query(None),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Accounts below the threshold (default from settings), lowest first."""
    accounts = await AccountService(db).list_low_balance(current_user.id, threshold)
    return Envelope(
        message="Low balance accounts retrieved successfully",
        status=200,
        data=[AccountResponse.model_validate(a) for a in accounts],
    )


@router.post("/transfer", response_model=Envelope[TransferResponse])
async def transfer(
    data: TransferRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Move money between two of the current user's accounts."""
    result = await AccountService(db).transfer(
        data.from_account_id, data.to_account_id, data.amount, current_user.id
    )
    return Envelope(
        message="Transfer completed successfully",
        status=200,
        data=TransferResponse(
            from_account=AccountResponse.model_validate(result["from_account"]),
            to_account=AccountResponse.model_validate(result["to_account"]),
        ),
    )


@router.get("/{account_id}", response_model=Envelope[AccountResponse])
async def get_account(
    account_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    account = await AccountService(db).get_account(account_id, current_user.id)
    return Envelope(
        message="Account retrieved successfully",
        status=200,
        data=AccountResponse.model_validate(account),
    )


@router.put("/{account_id}", response_model=Envelope[AccountResponse])
async def update_account(
    account_id: int,
    data: AccountUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    account = await AccountService(db).update_account(account_id, data, current_user.id)
    return Envelope(
        message="Account updated successfully",
        status=200,
        data=AccountResponse.model_validate(account),
    )


@router.delete("/{account_id}", response_model=Envelope)
async def delete_account(
    account_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await AccountService(db).delete_account(account_id, current_user.id)
    return Envelope(message="Account deleted successfully", status=200)


@router.post("/{account_id}/deposit", response_model=Envelope[AccountResponse])
async def deposit(
    account_id: int,
    data: AmountRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    account = await AccountService(db).deposit(account_id, data.amount, current_user.id)
    return Envelope(
        message="Deposit completed successfully",
        status=200,
        data=AccountResponse.model_validate(account),
    )


@router.post("/{account_id}/withdraw", response_model=Envelope[AccountResponse])
async def withdraw(
    account_id: int,
    data: AmountRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    account = await AccountService(db).withdraw(account_id, data.amount, current_user.id)
    return Envelope(
        message="Withdrawal completed successfully",
        status=200,
        data=AccountResponse.model_validate(account),
    )
