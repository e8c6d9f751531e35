"""Account API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.accounts.models import AccountResponse, CreateAccountRequest
from app.accounts.service import AccountService, get_account_service

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("", response_model=List[AccountResponse])
async def list_accounts(
    currency: Optional[str] = Query(default=None, pattern=r"^[A-Z]{3}$"),
    service: AccountService = Depends(get_account_service),
):
    return await service.list_accounts(currency_code=currency)


@router.post(
    "", response_model=AccountResponse, status_code=status.HTTP_201_CREATED
)
async def create_account(
    request: CreateAccountRequest,
    service: AccountService = Depends(get_account_service),
):
    return await service.create_account(
        name=request.name,
        currency_code=request.currency_code,
        initial_balance=request.initial_balance,
    )
