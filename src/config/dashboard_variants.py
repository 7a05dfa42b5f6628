# src/config/dashboard_variants.py
"""
Dashboard variant definitions.

A variant describes everything that differs between the dashboards served by
the prediction backend: the form fields shown to the user, the prediction
endpoint, and the optional secondary endpoints (market movers, news) together
with the form fields each one needs before it may be called.
"""

from string import Formatter
from typing import Dict, List, Literal, Mapping, Optional, Set

from pydantic import BaseModel, Field, field_validator, model_validator

from src.config.api_models import PredictionRequest


class FieldOption(BaseModel):
    value: str
    label: str


class FieldSpec(BaseModel):
    """One form field."""

    name: str
    label: str
    kind: Literal["select", "text", "password"] = "select"
    default: str = ""
    options: List[FieldOption] = Field(default_factory=list)
    placeholder: Optional[str] = None

    @field_validator("default")
    @classmethod
    def strip_default(cls, v):
        return v.strip()

    def option_values(self) -> List[str]:
        return [o.value for o in self.options]

    def label_for(self, value: str) -> str:
        for option in self.options:
            if option.value == value:
                return option.label
        return value


class EndpointSpec(BaseModel):
    """
    A secondary GET endpoint.

    ``query`` maps query parameter names to ``str.format`` templates filled
    from the frozen form values, e.g. ``{"symbol": "{base_currency}-{quote_currency}"}``.
    The endpoint is only called when every field in ``required_fields`` is non-empty.
    """

    path: str
    query: Dict[str, str] = Field(default_factory=dict)
    required_fields: List[str] = Field(default_factory=list)

    def referenced_fields(self) -> Set[str]:
        """Form fields named by the query templates and the required fields."""
        names = set(self.required_fields)
        for template in self.query.values():
            names.update(field for _, field, _, _ in Formatter().parse(template) if field)
        return names

    def is_enabled(self, values: Mapping[str, str]) -> bool:
        return all(str(values.get(name) or "").strip() for name in self.required_fields)

    def resolve_query(self, values: Mapping[str, str]) -> Dict[str, str]:
        return {key: template.format(**values) for key, template in self.query.items()}


class DashboardVariant(BaseModel):
    """Configuration of one dashboard flavour."""

    name: str
    title: str
    submit_label: str = "Get Prediction"
    predict_path: str
    fields: List[FieldSpec]
    market_movers: Optional[EndpointSpec] = None
    news: Optional[EndpointSpec] = None

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v):
        names = [f.name for f in v]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate field names: {names}")
        return v

    @model_validator(mode="after")
    def validate_endpoint_fields(self):
        known = set(self.field_names())
        for label, endpoint in self.secondary_endpoints().items():
            unknown = endpoint.referenced_fields() - known
            if unknown:
                raise ValueError(f"{label} endpoint refers to unknown fields: {sorted(unknown)}")
        return self

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"Variant '{self.name}' has no field '{name}'")

    def default_values(self) -> Dict[str, str]:
        return {f.name: f.default for f in self.fields}

    def build_request(self, values: Mapping[str, str]) -> PredictionRequest:
        """Validate the frozen form values into a request body."""
        payload = {name: values.get(name, "") for name in self.field_names()}
        return PredictionRequest(**payload)

    def secondary_endpoints(self) -> Dict[str, EndpointSpec]:
        endpoints = {}
        if self.market_movers is not None:
            endpoints["market_movers"] = self.market_movers
        if self.news is not None:
            endpoints["news"] = self.news
        return endpoints


# -------------------------------
# Shared option lists
# -------------------------------
ALPHA_TIMEFRAMES = [
    FieldOption(value="daily", label="Daily"),
    FieldOption(value="weekly", label="Weekly"),
    FieldOption(value="monthly", label="Monthly"),
]

ALPHA_PERIODS = [
    FieldOption(value=str(days), label=f"{days} Days") for days in (30, 60, 90, 120, 180, 360)
]

ALPHA_CRYPTOS = [
    FieldOption(value="BTC", label="Bitcoin"),
    FieldOption(value="ETH", label="Ethereum"),
    FieldOption(value="SOL", label="Solana"),
    FieldOption(value="BNB", label="Binance Coin"),
    FieldOption(value="XRP", label="Ripple"),
    FieldOption(value="ADA", label="Cardano"),
    FieldOption(value="DOT", label="Polkadot"),
    FieldOption(value="DOGE", label="Dogecoin"),
]

YAHOO_TIMEFRAMES = [
    FieldOption(value="1d", label="Daily"),
    FieldOption(value="1wk", label="Weekly"),
    FieldOption(value="1mo", label="Monthly"),
]

YAHOO_PERIODS = [
    FieldOption(value="7d", label="7 Days"),
    FieldOption(value="30d", label="30 Days"),
    FieldOption(value="90d", label="90 Days"),
    FieldOption(value="1y", label="1 Year"),
    FieldOption(value="max", label="Maximum"),
]

YAHOO_CRYPTOS = [FieldOption(value=f"{o.value}-USD", label=o.label) for o in ALPHA_CRYPTOS]


def _alpha_fields() -> List[FieldSpec]:
    return [
        FieldSpec(name="base_currency", label="Cryptocurrency", default="BTC", options=ALPHA_CRYPTOS),
        FieldSpec(name="quote_currency", label="Quote Currency", kind="text", default="USD"),
        FieldSpec(name="timeframe", label="Timeframe", default="daily", options=ALPHA_TIMEFRAMES),
        FieldSpec(name="period", label="Analysis Period", default="30", options=ALPHA_PERIODS),
        FieldSpec(
            name="api_key",
            label="Alpha Vantage API Key",
            kind="password",
            placeholder="Enter your API key",
        ),
    ]


BUILTIN_VARIANTS: Dict[str, DashboardVariant] = {
    "alpha_vantage": DashboardVariant(
        name="alpha_vantage",
        title="Cryptocurrency Price Prediction",
        submit_label="Get Prediction",
        predict_path="/api-analysis/predict",
        fields=_alpha_fields(),
    ),
    "yahoo": DashboardVariant(
        name="yahoo",
        title="Cryptocurrency Analysis Dashboard",
        submit_label="Analyze Market",
        predict_path="/api-analysis-yahoo/predict",
        fields=[
            FieldSpec(name="symbol", label="Cryptocurrency", default="BTC-USD", options=YAHOO_CRYPTOS),
            FieldSpec(name="timeframe", label="Timeframe", default="1d", options=YAHOO_TIMEFRAMES),
            FieldSpec(name="period", label="Analysis Period", default="30d", options=YAHOO_PERIODS),
        ],
        market_movers=EndpointSpec(path="/api-analysis-yahoo/market-movers"),
        news=EndpointSpec(
            path="/api-analysis-yahoo/news",
            query={"symbol": "{symbol}"},
            required_fields=["symbol"],
        ),
    ),
    "combined": DashboardVariant(
        name="combined",
        title="Cryptocurrency Market Dashboard",
        submit_label="Analyze Market",
        predict_path="/api-analysis/predict",
        fields=_alpha_fields(),
        market_movers=EndpointSpec(
            path="/api-analysis/market-movers",
            query={"api_key": "{api_key}"},
            required_fields=["api_key"],
        ),
        news=EndpointSpec(
            path="/api-analysis-yahoo/news",
            query={"symbol": "{base_currency}-{quote_currency}"},
            required_fields=["base_currency", "quote_currency"],
        ),
    ),
}
