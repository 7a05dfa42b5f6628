"""Tests for dashboard variant definitions."""

import pytest
from pydantic import ValidationError

from src.config.dashboard_variants import (
    BUILTIN_VARIANTS,
    DashboardVariant,
    EndpointSpec,
    FieldSpec,
)


class TestBuiltinVariants:

    def test_expected_variants(self):
        assert set(BUILTIN_VARIANTS) == {"alpha_vantage", "yahoo", "combined"}

    def test_endpoint_paths(self):
        assert BUILTIN_VARIANTS["alpha_vantage"].predict_path == "/api-analysis/predict"
        assert BUILTIN_VARIANTS["yahoo"].predict_path == "/api-analysis-yahoo/predict"
        assert BUILTIN_VARIANTS["yahoo"].market_movers.path == "/api-analysis-yahoo/market-movers"
        assert BUILTIN_VARIANTS["yahoo"].news.path == "/api-analysis-yahoo/news"
        assert BUILTIN_VARIANTS["combined"].market_movers.path == "/api-analysis/market-movers"

    def test_alpha_vantage_has_no_secondary_requests(self):
        assert BUILTIN_VARIANTS["alpha_vantage"].secondary_endpoints() == {}

    @pytest.mark.parametrize("name", ["alpha_vantage", "yahoo", "combined"])
    def test_defaults_build_a_valid_request(self, name):
        variant = BUILTIN_VARIANTS[name]
        request = variant.build_request(variant.default_values())
        assert request.timeframe == variant.get_field("timeframe").default

    def test_yahoo_request_has_no_currency_pair(self):
        variant = BUILTIN_VARIANTS["yahoo"]
        payload = variant.build_request(variant.default_values()).to_payload()
        assert payload == {"symbol": "BTC-USD", "timeframe": "1d", "period": "30d"}

    def test_get_field_unknown(self):
        with pytest.raises(KeyError):
            BUILTIN_VARIANTS["yahoo"].get_field("api_key")

    def test_option_labels(self):
        field = BUILTIN_VARIANTS["yahoo"].get_field("period")
        assert field.label_for("1y") == "1 Year"
        assert field.label_for("2y") == "2y"


class TestEndpointSpec:

    def test_combined_market_movers_gated_on_api_key(self):
        endpoint = BUILTIN_VARIANTS["combined"].market_movers
        assert not endpoint.is_enabled({"api_key": ""})
        assert not endpoint.is_enabled({"api_key": "   "})
        assert endpoint.is_enabled({"api_key": "demo"})
        assert endpoint.resolve_query({"api_key": "demo"}) == {"api_key": "demo"}

    def test_combined_news_symbol_from_pair(self):
        endpoint = BUILTIN_VARIANTS["combined"].news
        values = {"base_currency": "ETH", "quote_currency": "EUR", "api_key": ""}
        assert endpoint.is_enabled(values)
        assert endpoint.resolve_query(values) == {"symbol": "ETH-EUR"}

    def test_no_query_no_requirements(self):
        endpoint = EndpointSpec(path="/x")
        assert endpoint.is_enabled({})
        assert endpoint.resolve_query({"a": "b"}) == {}


def test_duplicate_field_names_rejected():
    with pytest.raises(ValidationError):
        DashboardVariant(
            name="broken",
            title="Broken",
            predict_path="/predict",
            fields=[FieldSpec(name="symbol", label="A"), FieldSpec(name="symbol", label="B")],
        )


def test_referenced_fields():
    endpoint = BUILTIN_VARIANTS["combined"].market_movers
    assert endpoint.referenced_fields() == {"api_key"}
    news = BUILTIN_VARIANTS["combined"].news
    assert news.referenced_fields() == {"base_currency", "quote_currency"}
