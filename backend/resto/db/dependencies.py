"""FastAPI dependencies for service injection and bearer-token auth."""

import os
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from resto.domain.models import Account
from resto.domain.service import OrderService


def get_order_service(request: Request) -> OrderService:
    """The service instance wired into app state at startup."""
    return request.app.state.order_service


# ---------- Auth helpers ----------

SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/accounts/register")


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def get_current_account(
    token: str = Depends(oauth2_scheme),
    service: OrderService = Depends(get_order_service),
) -> Account:
    """Resolve the account named by the bearer token."""
    credentials_exception = HTTPException(
        status_code=401,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        account_id = int(subject)
    except (JWTError, TypeError, ValueError):
        raise credentials_exception

    account = service.storage.get_account(account_id)
    if account is None:
        raise credentials_exception
    return account


def require_admin(current_account: Account = Depends(get_current_account)) -> Account:
    """Require an admin account."""
    if not current_account.is_admin:
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return current_account
