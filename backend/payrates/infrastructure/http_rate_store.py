"""HTTP Rate Store — RateStore implementation that talks to the PayRates API via httpx.

Invariants:
    - Paths mirror api/routes/rates.py and api/routes/users.py
    - 404 -> UserNotFoundError / RateRecordNotFoundError (by error code)
    - 409 DUPLICATE_DATE -> DuplicateDateError
    - 400 -> InvalidInputError (server-side validation)
    - Any other non-2xx, and any httpx.HTTPError -> StoreUnavailableError
      carrying the server's message verbatim
    - A 2xx body that is not a valid record -> StoreUnavailableError
    - Rates travel as JSON numbers and come back as 2-place Decimals

Design Decisions:
    - AsyncClient injected: tests pass ASGITransport(app) and hit the real routes
    - from_settings builds the production client from store_base_url / store_timeout_seconds
"""

import logging
from datetime import date
from decimal import Decimal

import httpx

from payrates.config import Settings, get_settings
from payrates.core.domain_types import CurrentRate, RateRecord, UserId, UserRef
from payrates.core.errors import (
    DuplicateDateError, InvalidInputError, PayRatesError, RateRecordNotFoundError,
    StoreUnavailableError, UserNotFoundError,
)
from payrates.core.rate_parsing import parse_effective_from, parse_hourly_rate

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _user_from_json(data: dict) -> UserRef:
    return UserRef(
        user_id=UserId(data.get("user_id", data.get("id"))),
        username=data["username"],
        avatar=data.get("avatar"),
    )


def _record_from_json(data: dict) -> RateRecord:
    return RateRecord(
        user_id=UserId(data["user_id"]),
        effective_from=parse_effective_from(str(data["effective_from"])[:10]),
        hourly_rate=parse_hourly_rate(str(data["hourly_rate"])),
    )


def _current_from_json(data: dict) -> CurrentRate:
    rate = data.get("hourly_rate")
    effective = data.get("effective_from")
    return CurrentRate(
        user=_user_from_json(data),
        hourly_rate=Decimal(str(rate)).quantize(Decimal("0.01")) if rate is not None else None,
        effective_from=date.fromisoformat(str(effective)[:10]) if effective else None,
    )


def _error_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return {}


class HttpRateStore:
    """Remote rate store reached over HTTP."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "HttpRateStore":
        settings = settings or get_settings()
        return cls(httpx.AsyncClient(
            base_url=settings.store_base_url,
            timeout=settings.store_timeout_seconds,
        ))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, f"{API_PREFIX}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Rate store request {method} {path} failed: {e}")
            raise StoreUnavailableError(f"Rate store unreachable: {e}") from e
        return response

    def _raise_for_error(
        self,
        response: httpx.Response,
        user_id: UserId | None = None,
        effective_from: date | None = None,
    ) -> None:
        if response.is_success:
            return
        error = _error_body(response)
        code = error.get("code")
        message = error.get("message") or response.reason_phrase
        status = response.status_code

        if status == 404 and code == "RATE_NOT_FOUND" and effective_from is not None:
            raise RateRecordNotFoundError(user_id, effective_from)
        if status == 404 and code == "USER_NOT_FOUND" and user_id is not None:
            raise UserNotFoundError(user_id)
        if status == 409 and code == "DUPLICATE_DATE" and effective_from is not None:
            raise DuplicateDateError(user_id, effective_from)
        if status == 400:
            details = error.get("details") or []
            field = details[0]["field"].rsplit(".", 1)[-1] if details else "request"
            raise InvalidInputError(message, field)
        raise StoreUnavailableError(message, status_code=status)

    def _json(self, response: httpx.Response):
        try:
            return response.json()
        except ValueError as e:
            raise StoreUnavailableError("Rate store returned malformed JSON") from e

    async def get_user(self, user_id: UserId) -> UserRef | None:
        response = await self._request("GET", f"/users/{user_id}")
        if response.status_code == 404:
            return None
        self._raise_for_error(response, user_id)
        return _user_from_json(self._json(response))

    async def list_users(self) -> list[UserRef]:
        response = await self._request("GET", "/users")
        self._raise_for_error(response)
        return [_user_from_json(item) for item in self._json(response)]

    def _records(self, response: httpx.Response) -> list[RateRecord]:
        try:
            return [_record_from_json(item) for item in self._json(response) or []]
        except (KeyError, TypeError, PayRatesError) as e:
            raise StoreUnavailableError(f"Rate store returned an invalid record: {e}") from e

    def _record(self, response: httpx.Response) -> RateRecord:
        try:
            return _record_from_json(self._json(response))
        except (KeyError, TypeError, PayRatesError) as e:
            raise StoreUnavailableError(f"Rate store returned an invalid record: {e}") from e

    async def list_rates(self, user_id: UserId) -> list[RateRecord]:
        response = await self._request("GET", f"/rates/{user_id}")
        self._raise_for_error(response, user_id)
        return self._records(response)

    async def create_rate(
        self, user_id: UserId, effective_from: date, hourly_rate: Decimal,
    ) -> RateRecord:
        response = await self._request("POST", "/rates", json={
            "userId": user_id,
            "effective_from": effective_from.isoformat(),
            "hourly_rate": float(hourly_rate),
        })
        self._raise_for_error(response, user_id, effective_from)
        return self._record(response)

    async def update_rate(
        self, user_id: UserId, effective_from: date, hourly_rate: Decimal,
    ) -> RateRecord:
        response = await self._request("PATCH", "/rates", json={
            "userId": user_id,
            "effective_from": effective_from.isoformat(),
            "hourly_rate": float(hourly_rate),
        })
        self._raise_for_error(response, user_id, effective_from)
        return self._record(response)

    async def list_current_rates(self) -> list[CurrentRate]:
        response = await self._request("GET", "/current-rates")
        self._raise_for_error(response)
        return [_current_from_json(item) for item in self._json(response) or []]
