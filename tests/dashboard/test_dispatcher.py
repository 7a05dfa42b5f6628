import asyncio
import json

import httpx
import pytest

from src.api.prediction_client import PredictionClient
from src.config.dashboard_variants import BUILTIN_VARIANTS
from src.dashboard.dispatcher import RequestDispatcher
from src.dashboard.request_state import RequestKind, RequestStateStore, RequestStatus
from src.monitoring.error_logging import ErrorComponent, ErrorLogger
from tests.mocks.async_api_mocks import (
    BASE_URL,
    RecordingTransport,
    failing_route,
    get_market_movers_payload,
    get_news_payload,
    get_prediction_payload,
    json_route,
)

YAHOO_ROUTES = {
    "/api-analysis-yahoo/predict": json_route(get_prediction_payload()),
    "/api-analysis-yahoo/market-movers": json_route(get_market_movers_payload()),
    "/api-analysis-yahoo/news": json_route(get_news_payload()),
}

COMBINED_ROUTES = {
    "/api-analysis/predict": json_route(get_prediction_payload()),
    "/api-analysis/market-movers": json_route(get_market_movers_payload()),
    "/api-analysis-yahoo/news": json_route(get_news_payload()),
}


def make_dispatcher(variant_name, routes, store=None):
    transport = RecordingTransport(routes)
    client = PredictionClient(BASE_URL, transport=transport)
    dispatcher = RequestDispatcher(
        client,
        BUILTIN_VARIANTS[variant_name],
        store=store,
        error_logger=ErrorLogger(ErrorComponent.DISPATCHER),
    )
    return dispatcher, transport


# === Test Case: TC20250302_dispatch_001 ===
# Description : Successful prediction triggers both secondary requests into their own slots.
# Component   : src/dashboard/dispatcher.py
# Category    : Integration
@pytest.mark.asyncio
async def test_yahoo_submit_fills_all_slots():
    dispatcher, transport = make_dispatcher("yahoo", YAHOO_ROUTES)

    store = await dispatcher.submit({"symbol": "ETH-USD", "timeframe": "1wk", "period": "1y"})

    for kind in RequestKind:
        assert store[kind].status is RequestStatus.SUCCESS
    assert store[RequestKind.PREDICTION].data.prediction == "UP"
    assert store[RequestKind.NEWS].data.total_count == 2

    assert transport.paths()[0] == "/api-analysis-yahoo/predict"
    assert set(transport.paths()[1:]) == {"/api-analysis-yahoo/market-movers", "/api-analysis-yahoo/news"}
    assert transport.body_of(0) == {"symbol": "ETH-USD", "timeframe": "1wk", "period": "1y"}

    news_request = next(r for r in transport.requests if r.url.path.endswith("/news"))
    assert news_request.url.params["symbol"] == "ETH-USD"


@pytest.mark.asyncio
async def test_prediction_error_detail_and_no_secondary_requests():
    routes = dict(YAHOO_ROUTES)
    routes["/api-analysis-yahoo/predict"] = json_route({"detail": "Invalid symbol"}, status_code=400)
    dispatcher, transport = make_dispatcher("yahoo", routes)

    store = await dispatcher.submit(BUILTIN_VARIANTS["yahoo"].default_values())

    assert store[RequestKind.PREDICTION].status is RequestStatus.FAILED
    assert store[RequestKind.PREDICTION].error == "Invalid symbol"
    assert store[RequestKind.MARKET_MOVERS].status is RequestStatus.IDLE
    assert store[RequestKind.NEWS].status is RequestStatus.IDLE
    assert transport.paths() == ["/api-analysis-yahoo/predict"]


@pytest.mark.asyncio
async def test_prediction_error_without_detail_uses_fallback():
    routes = dict(YAHOO_ROUTES)
    routes["/api-analysis-yahoo/predict"] = json_route({}, status_code=500)
    dispatcher, _ = make_dispatcher("yahoo", routes)

    store = await dispatcher.submit(BUILTIN_VARIANTS["yahoo"].default_values())

    assert store[RequestKind.PREDICTION].error == "Failed to fetch prediction"


# === Test Case: TC20250302_dispatch_004 ===
# Description : A failing secondary request does not clobber the successful prediction.
# Component   : src/dashboard/dispatcher.py
# Category    : Integration
@pytest.mark.asyncio
async def test_secondary_failure_is_isolated():
    routes = dict(YAHOO_ROUTES)
    routes["/api-analysis-yahoo/market-movers"] = failing_route()
    dispatcher, _ = make_dispatcher("yahoo", routes)

    store = await dispatcher.submit(BUILTIN_VARIANTS["yahoo"].default_values())

    assert store[RequestKind.PREDICTION].status is RequestStatus.SUCCESS
    assert store[RequestKind.PREDICTION].error is None
    assert store[RequestKind.MARKET_MOVERS].status is RequestStatus.FAILED
    assert store[RequestKind.MARKET_MOVERS].error == "Failed to fetch market movers"
    assert store[RequestKind.NEWS].status is RequestStatus.SUCCESS
    assert store.errors() == {RequestKind.MARKET_MOVERS: "Failed to fetch market movers"}
    assert dispatcher.error_logger.error_count == 1


@pytest.mark.asyncio
async def test_combined_market_movers_skipped_without_api_key():
    dispatcher, transport = make_dispatcher("combined", COMBINED_ROUTES)
    values = BUILTIN_VARIANTS["combined"].default_values()

    store = await dispatcher.submit(values)

    assert store[RequestKind.PREDICTION].status is RequestStatus.SUCCESS
    assert store[RequestKind.MARKET_MOVERS].status is RequestStatus.IDLE
    assert store[RequestKind.NEWS].status is RequestStatus.SUCCESS
    assert "/api-analysis/market-movers" not in transport.paths()
    news_request = next(r for r in transport.requests if r.url.path.endswith("/news"))
    assert news_request.url.params["symbol"] == "BTC-USD"


@pytest.mark.asyncio
async def test_combined_market_movers_sends_api_key():
    dispatcher, transport = make_dispatcher("combined", COMBINED_ROUTES)
    values = dict(BUILTIN_VARIANTS["combined"].default_values(), api_key="demo")

    store = await dispatcher.submit(values)

    assert store[RequestKind.MARKET_MOVERS].status is RequestStatus.SUCCESS
    movers_request = next(r for r in transport.requests if r.url.path.endswith("/market-movers"))
    assert movers_request.url.params["api_key"] == "demo"
    assert transport.body_of(0)["api_key"] == "demo"


@pytest.mark.asyncio
async def test_invalid_form_fails_without_http_call():
    dispatcher, transport = make_dispatcher("yahoo", YAHOO_ROUTES)

    store = await dispatcher.submit({"symbol": "BTC-USD", "timeframe": "hourly", "period": "30d"})

    assert store[RequestKind.PREDICTION].status is RequestStatus.FAILED
    assert "Invalid timeframe" in store[RequestKind.PREDICTION].error
    assert transport.requests == []


@pytest.mark.asyncio
async def test_malformed_prediction_fails_with_typed_message():
    payload = get_prediction_payload()
    payload["forecast"] = [{"date": "2025-02-25"}]
    dispatcher, _ = make_dispatcher("alpha_vantage", {"/api-analysis/predict": json_route(payload)})

    store = await dispatcher.submit(BUILTIN_VARIANTS["alpha_vantage"].default_values())

    assert store[RequestKind.PREDICTION].status is RequestStatus.FAILED
    assert store[RequestKind.PREDICTION].error == "Invalid prediction response from server"


# === Test Case: TC20250302_dispatch_009 ===
# Description : Overlapping submissions are not sequenced; the response that arrives last wins.
# Component   : src/dashboard/dispatcher.py
# Category    : Regression
@pytest.mark.asyncio
async def test_last_arriving_response_wins():
    async def predict(request):
        body = json.loads(request.content)
        if body["base_currency"] == "BTC":
            await asyncio.sleep(0.05)
            return httpx.Response(200, json=get_prediction_payload(current_price=1.0))
        return httpx.Response(200, json=get_prediction_payload(current_price=2.0))

    store = RequestStateStore()
    dispatcher, _ = make_dispatcher("alpha_vantage", {"/api-analysis/predict": predict}, store=store)
    defaults = BUILTIN_VARIANTS["alpha_vantage"].default_values()

    # BTC submitted first but answered last
    await asyncio.gather(
        dispatcher.submit(dict(defaults, base_currency="BTC")),
        dispatcher.submit(dict(defaults, base_currency="ETH")),
    )

    assert store[RequestKind.PREDICTION].status is RequestStatus.SUCCESS
    assert store[RequestKind.PREDICTION].data.current_price == 1.0
    assert store[RequestKind.PREDICTION].attempts == 2


def test_submit_sync_runs_event_loop():
    dispatcher, _ = make_dispatcher("alpha_vantage", {"/api-analysis/predict": json_route(get_prediction_payload())})

    store = dispatcher.submit_sync(BUILTIN_VARIANTS["alpha_vantage"].default_values())

    assert store[RequestKind.PREDICTION].status is RequestStatus.SUCCESS


@pytest.mark.asyncio
async def test_combined_news_symbol_uses_normalized_pair():
    dispatcher, transport = make_dispatcher("combined", COMBINED_ROUTES)
    values = dict(BUILTIN_VARIANTS["combined"].default_values(), base_currency="eth ", quote_currency="usd")

    store = await dispatcher.submit(values)

    assert store[RequestKind.NEWS].status is RequestStatus.SUCCESS
    body = transport.body_of(0)
    assert (body["base_currency"], body["quote_currency"]) == ("ETH", "USD")
    news_request = next(r for r in transport.requests if r.url.path.endswith("/news"))
    assert news_request.url.params["symbol"] == "ETH-USD"
