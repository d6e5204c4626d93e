"""HTTP client for talking with the expense tracker API."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, List, Mapping, Optional, TypeVar

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import ServiceUnavailableError, error_for_status
from .schemas import ExpenseRead, SummaryRow

LOG = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0

T = TypeVar("T")
RowT = TypeVar("RowT", bound=BaseModel)


class ExpenseClient:
    """Thin wrapper around the REST endpoints.

    Error responses are turned back into the exceptions of
    :mod:`expense_tracker.errors` carrying the server's message verbatim.
    ``session`` accepts anything with a ``requests``-style ``request`` method.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[Any] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}/api{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            LOG.warning("%s %s failed: %s", method, url, exc)
            raise ServiceUnavailableError(str(exc)) from exc
        if response.status_code >= 400:
            raise error_for_status(response.status_code, _error_message(response))
        try:
            return response.json()
        except ValueError as exc:
            LOG.warning("%s %s returned a non-JSON body", method, url)
            raise ServiceUnavailableError(f"Malformed response from {url}") from exc

    def list_expenses(self, category: Optional[str] = None, on: Optional[date | str] = None) -> List[ExpenseRead]:
        params: dict[str, str] = {}
        if category:
            params["category"] = category
        if on:
            params["date"] = on.isoformat() if isinstance(on, date) else on
        payload = self._request("GET", "/expenses", params=params)
        return _parse_rows(ExpenseRead, payload, "/expenses")

    def create_expense(self, expense: Mapping[str, Any]) -> int:
        return _field(self._request("POST", "/expenses", json=_jsonable(expense)), "id", int)

    def update_expense(self, expense_id: int, expense: Mapping[str, Any]) -> int:
        return _field(self._request("PUT", f"/expenses/{expense_id}", json=_jsonable(expense)), "id", int)

    def delete_expense(self, expense_id: int) -> str:
        return _field(self._request("DELETE", f"/expenses/{expense_id}"), "message", str)

    def list_categories(self) -> List[str]:
        payload = self._request("GET", "/categories")
        if not isinstance(payload, list):
            raise ServiceUnavailableError("Malformed response from /categories")
        return [str(name) for name in payload]

    def summary(self) -> List[SummaryRow]:
        return _parse_rows(SummaryRow, self._request("GET", "/summary"), "/summary")


def _parse_rows(model: type[RowT], payload: Any, path: str) -> List[RowT]:
    if not isinstance(payload, list):
        raise ServiceUnavailableError(f"Malformed response from {path}")
    try:
        return [model.model_validate(item) for item in payload]
    except PydanticValidationError as exc:
        raise ServiceUnavailableError(f"Malformed response from {path}") from exc


def _field(payload: Any, key: str, cast: Callable[[Any], T]) -> T:
    try:
        return cast(payload[key])
    except (KeyError, TypeError, ValueError) as exc:
        raise ServiceUnavailableError(f"Malformed response: missing {key!r}") from exc


def _jsonable(expense: Mapping[str, Any]) -> dict[str, Any]:
    """Render dates and decimals the way the API expects them."""

    body: dict[str, Any] = {}
    for key, value in expense.items():
        if isinstance(value, date):
            body[key] = value.isoformat()
        elif value is not None and not isinstance(value, (str, int, float, bool)):
            body[key] = str(value)
        else:
            body[key] = value
    return body


def _error_message(response: Any) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return response.text or f"HTTP {response.status_code}"
