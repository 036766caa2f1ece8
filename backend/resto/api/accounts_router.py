"""Account registration and identity endpoints."""

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from resto.db.dependencies import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    create_access_token,
    get_current_account,
    get_order_service,
)
from resto.domain.models import Account
from resto.domain.service import OrderService


router = APIRouter(prefix="/api/accounts", tags=["accounts"])


class RegisterRequest(BaseModel):
    display_name: str
    email: str
    phone: Optional[str] = None


class AccountResponse(BaseModel):
    id: int
    display_name: str
    email: str
    phone: Optional[str]
    role: str


class RegisterResponse(BaseModel):
    account: AccountResponse
    access_token: str
    token_type: str


def _account_response(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        display_name=account.display_name,
        email=account.email,
        phone=account.phone,
        role=account.role.value,
    )


@router.post("/register", response_model=RegisterResponse, summary="Register an account")
async def register(request: RegisterRequest, service: OrderService = Depends(get_order_service)):
    """
    Create an account and return a bearer token for it.

    The first account ever registered becomes Admin; later ones are Customers.
    """
    account = service.register_account(request.display_name, request.email, request.phone)
    access_token = create_access_token(
        data={"sub": str(account.id), "role": account.role.value},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return RegisterResponse(account=_account_response(account), access_token=access_token, token_type="bearer")


@router.get("/me", response_model=AccountResponse, summary="Current account")
async def me(account: Account = Depends(get_current_account)):
    return _account_response(account)
