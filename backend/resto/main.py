# backend/resto/main.py
import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resto.api import accounts_router, orders_router, tables_router
from resto.domain.errors import (
    AlreadyConfirmed,
    Forbidden,
    InvalidTimeFormat,
    InvalidTransition,
    MissingProof,
    NotFound,
    ValidationError,
)
from resto.domain.service import DEFAULT_TABLES, OrderService
from resto.storage import InMemoryStorage, SQLAlchemyStorage, Storage

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_storage() -> Storage:
    """Pick the storage backend from STORAGE_BACKEND (inmemory | sqlalchemy)."""
    backend = os.getenv("STORAGE_BACKEND", "inmemory").lower()
    if backend == "sqlalchemy":
        return SQLAlchemyStorage(os.getenv("APP_DATABASE_URL", "sqlite:///restaurant.db"))
    if backend != "inmemory":
        logger.warning("Unknown STORAGE_BACKEND %r, using in-memory storage", backend)
    return InMemoryStorage()


def configured_tables():
    raw = os.getenv("RESTAURANT_TABLES")
    if not raw:
        return DEFAULT_TABLES
    return [label.strip() for label in raw.split(",") if label.strip()]


app = FastAPI(title="Restaurant Ordering Backend")

# Allow CORS for local dev (adjust in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.storage = create_storage()
app.state.order_service = OrderService(app.state.storage, tables=configured_tables())
logger.info("Using %s", type(app.state.storage).__name__)


# ---------- Domain error -> HTTP ----------

def _error(status_code: int, exc, **extra) -> JSONResponse:
    body = {"detail": exc.message, "error": type(exc).__name__}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return _error(409, exc)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return _error(422, exc, submitted=exc.submitted)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return _error(404, exc)


@app.exception_handler(Forbidden)
async def forbidden_handler(request: Request, exc: Forbidden):
    logger.warning("Forbidden %s %s: %s", request.method, request.url.path, exc.message)
    return _error(403, exc)


@app.exception_handler(AlreadyConfirmed)
async def already_confirmed_handler(request: Request, exc: AlreadyConfirmed):
    return _error(409, exc)


@app.exception_handler(MissingProof)
async def missing_proof_handler(request: Request, exc: MissingProof):
    return _error(422, exc)


@app.exception_handler(InvalidTimeFormat)
async def invalid_time_handler(request: Request, exc: InvalidTimeFormat):
    return _error(422, exc)


app.include_router(accounts_router.router)
app.include_router(orders_router.router)
app.include_router(tables_router.router)


@app.get("/health", summary="Liveness probe")
async def health():
    return {"status": "ok", "storage": type(app.state.storage).__name__}


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "resto.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "dev").lower() == "dev",
    )


if __name__ == "__main__":
    run()
