# src/dashboard/dispatcher.py
"""
Request dispatcher for the dashboard form.

A submission freezes the form values, posts them to the variant's prediction
endpoint and, when that succeeds, runs the variant's secondary requests
(market movers, news) concurrently. Each request kind reports into its own
slot of a ``RequestStateStore``, so a failing secondary request never touches
the prediction result.

Responses are not sequenced: if the same store receives two overlapping
submissions, whichever response resolves last is what the store ends up with.
"""

import asyncio
import logging
from typing import Dict, Mapping, Optional

import httpx
from pydantic import ValidationError

from src.api.errors import ApiError
from src.api.prediction_client import PredictionClient
from src.config.dashboard_variants import DashboardVariant
from src.dashboard.request_state import RequestKind, RequestStateStore
from src.monitoring.error_logging import ErrorComponent, ErrorLogger

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """
    Runs form submissions for one dashboard variant.

    Attributes:
        client (PredictionClient): HTTP client for the backend.
        variant (DashboardVariant): Field schema and endpoints in use.
        store (RequestStateStore): Per-kind request states updated by submissions.
    """

    def __init__(
        self,
        client: PredictionClient,
        variant: DashboardVariant,
        store: Optional[RequestStateStore] = None,
        error_logger: Optional[ErrorLogger] = None,
    ):
        self.client = client
        self.variant = variant
        self.store = store if store is not None else RequestStateStore()
        self.error_logger = error_logger or ErrorLogger(component=ErrorComponent.DISPATCHER)

    async def submit(self, form_values: Mapping[str, str]) -> RequestStateStore:
        """
        Submit a frozen set of form values.

        Returns the store for convenience; all outcomes are recorded in it and
        no ``ApiError`` escapes.
        """
        values = dict(form_values)
        self.store.start(RequestKind.PREDICTION)

        try:
            request = self.variant.build_request(values)
        except ValidationError as exc:
            message = "; ".join(err["msg"] for err in exc.errors())
            self._record_failure(RequestKind.PREDICTION, message, exc)
            return self.store

        async with self.client.session() as session:
            try:
                prediction = await self.client.predict(session, self.variant.predict_path, request)
            except ApiError as exc:
                self._record_failure(RequestKind.PREDICTION, exc.message, exc)
                return self.store

            self.store.succeed(RequestKind.PREDICTION, prediction)
            logger.info(
                f"Prediction for {self.variant.name}: {prediction.prediction} "
                f"(p_up={prediction.probability_up:.3f})"
            )

            # Secondary queries use the normalized tickers sent to /predict
            query_values = {**values, **request.model_dump(exclude_none=True)}
            secondaries = [
                (kind, endpoint.path, endpoint.resolve_query(query_values))
                for kind, endpoint in self._enabled_secondaries(query_values)
            ]
            if secondaries:
                await asyncio.gather(
                    *(self._fetch_secondary(session, kind, path, params) for kind, path, params in secondaries)
                )

        return self.store

    def submit_sync(self, form_values: Mapping[str, str]) -> RequestStateStore:
        """Blocking wrapper used from the Streamlit script thread."""
        return asyncio.run(self.submit(form_values))

    def _enabled_secondaries(self, values: Mapping[str, str]):
        endpoints = self.variant.secondary_endpoints()
        for name, endpoint in endpoints.items():
            kind = RequestKind(name)
            if endpoint.is_enabled(values):
                yield kind, endpoint
            else:
                logger.info(
                    f"Skipping {kind.value} request: missing {', '.join(endpoint.required_fields)}"
                )

    async def _fetch_secondary(
        self,
        session: httpx.AsyncClient,
        kind: RequestKind,
        path: str,
        params: Dict[str, str],
    ) -> None:
        self.store.start(kind)
        try:
            if kind is RequestKind.MARKET_MOVERS:
                data = await self.client.fetch_market_movers(session, path, params)
            else:
                data = await self.client.fetch_news(session, path, params)
        except ApiError as exc:
            self._record_failure(kind, exc.message, exc)
            return
        self.store.succeed(kind, data)

    def _record_failure(self, kind: RequestKind, message: str, exc: Exception) -> None:
        self.store.fail(kind, message)
        self.error_logger.log_error(
            f"{kind.value} request failed",
            exception=exc,
            context={"variant": self.variant.name, "kind": kind.value},
        )
