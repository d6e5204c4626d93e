"""FastAPI application exposing the expense tracking endpoints."""
from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import __version__, crud, schemas
from .config import Settings, load_settings
from .database import Database
from .errors import ExpenseTrackerError, NotFoundError, ValidationError

LOG = logging.getLogger(__name__)

API_PREFIX = "/api"


def get_db(request: Request) -> Iterator[Session]:
    """FastAPI dependency that provides a database session."""

    database: Database = request.app.state.database
    with database.session_scope() as session:
        yield session


def parse_expense_id(raw: str) -> int:
    """Map the path segment onto an expense id; anything non-numeric names no expense."""

    try:
        return int(raw.strip())
    except ValueError:
        raise NotFoundError("Expense not found") from None


def validation_error_from_request(exc: RequestValidationError) -> ValidationError:
    """Collapse FastAPI's validation report into a single :class:`ValidationError`."""

    missing: list[str] = []
    invalid: list[str] = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        name = ".".join(location) or "body"
        value = error.get("input")
        if error.get("type") == "missing" or value is None or (isinstance(value, str) and not value.strip()):
            if name not in missing:
                missing.append(name)
        elif name not in invalid and name not in missing:
            invalid.append(name)
    parts = []
    if missing:
        parts.append(f"All fields are required (missing: {', '.join(missing)})")
    if invalid:
        parts.append(f"Invalid value for: {', '.join(invalid)}")
    return ValidationError("; ".join(parts) or "Invalid request", fields=missing + invalid)


def _error_response(exc: ExpenseTrackerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


def create_app(database: Optional[Database] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around an explicitly provided :class:`Database`.

    The database is opened on startup and closed on shutdown. When omitted it
    is constructed from ``settings`` (or from :func:`load_settings`).
    """

    if database is None:
        database = Database.from_settings(settings or load_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.database.open()
        try:
            yield
        finally:
            app.state.database.close()

    app = FastAPI(title="Expense Tracker API", version=__version__, lifespan=lifespan)
    app.state.database = database

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        LOG.info(
            "%s %s -> %d",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        return response

    @app.exception_handler(ExpenseTrackerError)
    async def handle_tracker_error(request: Request, exc: ExpenseTrackerError) -> JSONResponse:
        if exc.status_code >= 500:
            LOG.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            LOG.warning("%s %s rejected: %s", request.method, request.url.path, exc)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = validation_error_from_request(exc)
        LOG.warning("%s %s rejected: %s", request.method, request.url.path, error)
        return _error_response(error)

    @app.get(f"{API_PREFIX}/expenses", response_model=List[schemas.ExpenseRead])
    def list_expenses(
        category: Optional[str] = Query(None),
        date: Optional[str] = Query(None, description="YYYY-MM-DD"),
        db: Session = Depends(get_db, scope="function"),
    ) -> List[schemas.ExpenseRead]:
        filters = schemas.ExpenseFilter.from_query(category=category, date=date)
        return crud.list_expenses(db, filters)

    @app.post(
        f"{API_PREFIX}/expenses",
        response_model=schemas.ExpenseId,
        status_code=status.HTTP_201_CREATED,
    )
    def create_expense(
        expense_in: schemas.ExpenseIn,
        db: Session = Depends(get_db, scope="function"),
    ) -> schemas.ExpenseId:
        expense = crud.create_expense(db, expense_in)
        LOG.info("Created expense %d", expense.id)
        return schemas.ExpenseId(id=expense.id)

    @app.put(f"{API_PREFIX}/expenses/{{expense_id}}", response_model=schemas.ExpenseId)
    def update_expense(
        expense_id: str,
        expense_in: schemas.ExpenseIn,
        db: Session = Depends(get_db, scope="function"),
    ) -> schemas.ExpenseId:
        expense = crud.update_expense(db, parse_expense_id(expense_id), expense_in)
        return schemas.ExpenseId(id=expense.id)

    @app.delete(f"{API_PREFIX}/expenses/{{expense_id}}", response_model=schemas.Message)
    def delete_expense(expense_id: str, db: Session = Depends(get_db, scope="function")) -> schemas.Message:
        crud.delete_expense(db, parse_expense_id(expense_id))
        return schemas.Message(message="Expense deleted successfully")

    @app.get(f"{API_PREFIX}/categories", response_model=List[str])
    def list_categories(db: Session = Depends(get_db, scope="function")) -> List[str]:
        return crud.list_category_names(db)

    @app.get(f"{API_PREFIX}/summary", response_model=List[schemas.SummaryRow])
    def get_summary(db: Session = Depends(get_db, scope="function")) -> List[schemas.SummaryRow]:
        return crud.summarize_by_category(db)

    @app.get(f"{API_PREFIX}/health", tags=["system"])
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return app
