"""
Async HTTP client for the remote prediction backend.

Wraps ``httpx.AsyncClient`` and turns every outcome of a call into either a
validated pydantic model or an ``ApiError`` subclass:

- transport failures (refused connection, timeout) -> ApiConnectionError
- non-2xx responses                                -> ApiStatusError (``detail`` or fallback)
- 2xx bodies that are not JSON                     -> ApiDecodeError
- JSON bodies that do not match the schema         -> ResponseValidationError

No retries are attempted.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from src.api.errors import (
    ApiConnectionError,
    ApiDecodeError,
    ApiStatusError,
    ResponseValidationError,
)
from src.config.api_models import (
    ErrorBody,
    MarketMovers,
    NewsResponse,
    PredictionRequest,
    PredictionResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

FALLBACK_MESSAGES = {
    "prediction": "Failed to fetch prediction",
    "market_movers": "Failed to fetch market movers",
    "news": "Failed to fetch news",
}


def extract_error_message(response: httpx.Response, fallback: str) -> str:
    """
    Pull a display message out of an error response.

    Uses ``detail`` when the body is JSON carrying one; otherwise ``fallback``.
    """
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return fallback

    if not isinstance(body, dict):
        return fallback

    try:
        message = ErrorBody.model_validate(body).message()
    except ValidationError:
        return fallback
    return message or fallback


class PredictionClient:
    """
    Client for the prediction, market-movers and news endpoints.

    Attributes:
        base_url (str): Backend origin, e.g. ``https://portal2.incoe.astra.co.id``.
        timeout (Optional[float]): Request timeout in seconds; None waits indefinitely.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @asynccontextmanager
    async def session(self) -> AsyncIterator[httpx.AsyncClient]:
        """Open one pooled ``AsyncClient`` shared by the requests of a submission."""
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=DEFAULT_HEADERS,
            timeout=self.timeout,
            transport=self.transport,
        ) as session:
            yield session

    async def _request(
        self,
        session: httpx.AsyncClient,
        method: str,
        path: str,
        kind: str,
        model: Type[ModelT],
        json_body: Optional[dict] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> ModelT:
        fallback = FALLBACK_MESSAGES.get(kind, "An error occurred")
        logger.info(f"{method} {path} ({kind}) params={_redact(params)}")

        try:
            response = await session.request(method, path, json=json_body, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"{kind} request to {path} timed out: {e}")
            raise ApiConnectionError(fallback, kind) from e
        except httpx.RequestError as e:
            logger.error(f"{kind} request to {path} failed: {e}")
            raise ApiConnectionError(fallback, kind) from e

        if not response.is_success:
            message = extract_error_message(response, fallback)
            logger.warning(f"{kind} request to {path} returned HTTP {response.status_code}: {message}")
            raise ApiStatusError(message, kind, status_code=response.status_code)

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"{kind} response from {path} is not valid JSON: {e}")
            raise ApiDecodeError(fallback, kind) from e

        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.error(f"{kind} response from {path} failed validation: {e.error_count()} error(s)")
            raise ResponseValidationError(
                f"Invalid {kind.replace('_', ' ')} response from server",
                kind,
                errors=e.errors(include_url=False),
            ) from e

    async def predict(
        self, session: httpx.AsyncClient, path: str, request: PredictionRequest
    ) -> PredictionResponse:
        """POST the request body to a ``/predict`` endpoint."""
        return await self._request(
            session, "POST", path, "prediction", PredictionResponse, json_body=request.to_payload()
        )

    async def fetch_market_movers(
        self, session: httpx.AsyncClient, path: str, params: Optional[Dict[str, str]] = None
    ) -> MarketMovers:
        """GET a ``/market-movers`` endpoint."""
        return await self._request(
            session, "GET", path, "market_movers", MarketMovers, params=params or None
        )

    async def fetch_news(
        self, session: httpx.AsyncClient, path: str, params: Optional[Dict[str, str]] = None
    ) -> NewsResponse:
        """GET a ``/news`` endpoint."""
        return await self._request(session, "GET", path, "news", NewsResponse, params=params or None)


def _redact(params: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
    """Mask API keys before they reach the log."""
    if not params:
        return params
    return {k: ("***" if "key" in k.lower() and v else v) for k, v in params.items()}
