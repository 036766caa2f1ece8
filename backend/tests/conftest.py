import pytest
import pytest_asyncio
import sys
import os
from datetime import datetime, timedelta

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import httpx
from httpx import ASGITransport

from resto.domain.builder import LineRequest, OrderRequest, ReservationRequest
from resto.domain.catalog import InMemoryCatalog
from resto.domain.service import OrderService
from resto.storage import InMemoryStorage


class FrozenClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 6, 1, 12, 0, 0))


@pytest.fixture
def storage():
    """Fresh in-memory storage for each test."""
    return InMemoryStorage()


@pytest.fixture
def catalog():
    return InMemoryCatalog()


@pytest.fixture
def service(storage, catalog, clock):
    return OrderService(storage, catalog=catalog, clock=clock, tables=["T1", "T2", "T3"])


@pytest.fixture
def admin(service):
    """First registered account, therefore Admin."""
    return service.register_account("Ana Admin", "ana@example.com", "0917-000-0001")


@pytest.fixture
def customer(service, admin):
    return service.register_account("Carlo Customer", "carlo@example.com", "0917-000-0002")


@pytest.fixture
def other_customer(service, admin):
    return service.register_account("Dina Diner", "dina@example.com")


@pytest.fixture
def make_request():
    """Factory for OrderRequest objects with sensible defaults."""

    def _make(
        customer_name="Carlo Customer",
        payment_method="Cash",
        lines=None,
        table_id=None,
        **reservation_fields,
    ):
        if lines is None:
            lines = [("Adobo", 2), ("Halo-Halo", 1)]
        line_requests = [
            LineRequest(item_name=line[0], quantity=line[1], unit_price=line[2] if len(line) > 2 else None)
            for line in lines
        ]
        reservation = None
        if table_id is not None or reservation_fields:
            reservation = ReservationRequest(table_id=table_id, **reservation_fields)
        return OrderRequest(
            customer_name=customer_name,
            payment_method=payment_method,
            lines=line_requests,
            reservation=reservation,
        )

    return _make


@pytest.fixture
def api_service(clock):
    return OrderService(InMemoryStorage(), clock=clock, tables=["T1", "T2"])


@pytest_asyncio.fixture
async def async_client(api_service):
    """Async HTTP client against the app, with an isolated order service."""
    from resto.main import app

    original_service = app.state.order_service
    app.state.order_service = api_service
    try:
        async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.state.order_service = original_service


async def register(client, name, email):
    """Register an account over HTTP and return (account, auth headers)."""
    response = await client.post("/api/accounts/register", json={"display_name": name, "email": email})
    assert response.status_code == 200, response.text
    data = response.json()
    return data["account"], {"Authorization": f"Bearer {data['access_token']}"}
