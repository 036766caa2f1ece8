"""Account registration with the first-account-is-admin bootstrap rule."""

import logging
from datetime import datetime
from typing import Optional

from resto.domain.errors import Forbidden, ValidationError
from resto.domain.models import Account, Order, Role

logger = logging.getLogger(__name__)


def role_for_new_account(existing_accounts: int) -> Role:
    """The very first account becomes Admin; everyone after is a Customer."""
    return Role.ADMIN if existing_accounts == 0 else Role.CUSTOMER


def register_account(
    storage,
    display_name: str,
    email: str,
    now: datetime,
    phone: Optional[str] = None,
) -> Account:
    display_name = (display_name or "").strip()
    email = (email or "").strip()
    submitted = {"display_name": display_name, "email": email, "phone": phone}
    if not display_name:
        raise ValidationError("Display name is required.", submitted)
    if not email or "@" not in email:
        raise ValidationError("A valid email address is required.", submitted)
    if storage.get_account_by_email(email) is not None:
        raise ValidationError("Email is already registered.", submitted)

    account = Account(
        id=None,
        display_name=display_name,
        email=email,
        phone=phone,
        role=role_for_new_account(storage.count_accounts()),
        created_at=now,
    )
    account = storage.add_account(account)
    logger.info("Registered account %s as %s", account.id, account.role.value)
    return account


def can_manage(order: Order, account: Account) -> bool:
    return account.is_admin or (order.account_id is not None and order.account_id == account.id)


def ensure_can_manage(order: Order, account: Account) -> None:
    """Single authorization check: owner or admin."""
    if not can_manage(order, account):
        raise Forbidden(f"Account {account.id} may not access order {order.order_no}.")
