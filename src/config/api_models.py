"""Pydantic models for the prediction backend request and response payloads."""

import re
from typing import List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

VALID_TIMEFRAMES = {"daily", "weekly", "monthly", "1d", "1wk", "1mo"}

# "30" (days), "30d", "1wk", "3mo", "1y", "ytd", "max"
PERIOD_PATTERN = re.compile(r"^(\d+|\d+(d|wk|mo|y)|ytd|max)$")

Direction = Literal["UP", "DOWN"]


class PredictionRequest(BaseModel):
    """Request body for the ``/predict`` endpoints.

    Either ``symbol`` (Yahoo style, e.g. ``BTC-USD``) or the pair
    ``base_currency``/``quote_currency`` (Alpha Vantage style) must be given.
    """

    symbol: Optional[str] = Field(default=None, description="Ticker symbol, e.g. BTC-USD")
    base_currency: Optional[str] = Field(default=None, description="Base currency, e.g. BTC")
    quote_currency: Optional[str] = Field(default=None, description="Quote currency, e.g. USD")
    timeframe: str = Field(..., description="daily/weekly/monthly or 1d/1wk/1mo")
    period: str = Field(..., description="Numeric days or tagged duration (30d, 1y, max)")
    api_key: Optional[str] = Field(default=None, description="Alpha Vantage API key")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "base_currency": "BTC",
                "quote_currency": "USD",
                "timeframe": "daily",
                "period": "30",
                "api_key": "",
            }
        }
    )

    @field_validator("symbol", "base_currency", "quote_currency")
    @classmethod
    def validate_ticker(cls, v):
        """Strip and upper-case ticker-like fields."""
        if v is None:
            return None

        v = v.strip().upper()
        if not v:
            raise ValueError("Ticker fields must be non-empty strings")

        allowed_chars = set("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.-_")
        if not all(c in allowed_chars for c in v):
            raise ValueError(f"Ticker contains invalid characters: {v}")

        return v

    @field_validator("timeframe")
    @classmethod
    def validate_timeframe(cls, v):
        if v not in VALID_TIMEFRAMES:
            raise ValueError(f"Invalid timeframe: {v}. Valid: {sorted(VALID_TIMEFRAMES)}")
        return v

    @field_validator("period")
    @classmethod
    def validate_period(cls, v):
        v = v.strip()
        if not PERIOD_PATTERN.match(v):
            raise ValueError(f"Invalid period: {v}. Use days ('30') or a tagged duration ('30d', '1y', 'max')")
        return v

    @model_validator(mode="after")
    def check_instrument(self):
        """Require a symbol or a complete currency pair."""
        has_pair = self.base_currency is not None and self.quote_currency is not None
        if self.symbol is None and not has_pair:
            raise ValueError("Provide either 'symbol' or both 'base_currency' and 'quote_currency'")
        return self

    def to_payload(self) -> dict:
        """JSON body as sent to the backend; unset optional fields are omitted."""
        return self.model_dump(exclude_none=True)


class TechnicalIndicators(BaseModel):
    """Indicator values and their categorical signals."""

    rsi: float
    rsi_signal: Optional[str] = None
    macd: float
    macd_signal: Optional[str] = None
    stochastic: float
    stochastic_signal: Optional[str] = None
    adx: float
    trend_strength: Optional[str] = None
    atr: Optional[float] = None
    mfi: Optional[float] = None


class ForecastPoint(BaseModel):
    """One forecast step. ``low <= predicted <= high`` is expected, not checked."""

    date: str
    predicted_price: float
    prediction_interval_low: float
    prediction_interval_high: float
    direction: Direction
    probability: float = Field(..., ge=0.0, le=1.0)


class PredictionResponse(BaseModel):
    """Response body of the ``/predict`` endpoints."""

    prediction: Direction
    probability_up: float = Field(..., ge=0.0, le=1.0)
    probability_down: float = Field(..., ge=0.0, le=1.0)
    current_price: float
    technical_indicators: TechnicalIndicators
    accuracy: float = Field(..., ge=0.0, le=1.0)
    plot_base64: str = ""
    forecast: List[ForecastPoint] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "prediction": "UP",
                "probability_up": 0.62,
                "probability_down": 0.38,
                "current_price": 96250.12,
                "technical_indicators": {
                    "rsi": 58.3,
                    "rsi_signal": "Neutral",
                    "macd": 120.5,
                    "macd_signal": "Bullish",
                    "stochastic": 71.2,
                    "stochastic_signal": "Neutral",
                    "adx": 27.9,
                    "trend_strength": "Strong",
                },
                "accuracy": 0.71,
                "plot_base64": "",
                "forecast": [],
            }
        }
    )


class TickerInfo(BaseModel):
    """A single market-mover row."""

    ticker: str
    price: float
    change_amount: float
    change_percentage: float
    volume: float

    @field_validator("price", "change_amount", "change_percentage", "volume", mode="before")
    @classmethod
    def coerce_numeric_string(cls, v):
        """Accept Alpha Vantage style strings such as ``"12.5%"``."""
        if isinstance(v, str):
            return v.strip().rstrip("%").replace(",", "")
        return v


class MarketMovers(BaseModel):
    """Response body of the ``/market-movers`` endpoints."""

    top_gainers: List[TickerInfo] = Field(default_factory=list)
    top_losers: List[TickerInfo] = Field(default_factory=list)
    most_actively_traded: List[TickerInfo] = Field(default_factory=list)
    last_updated: Optional[str] = None


class NewsArticle(BaseModel):
    """A news item, optionally carrying a sentiment classification."""

    title: str
    url: str
    summary: str = ""
    publisher: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("publisher", "source")
    )
    published_date: Optional[str] = None
    time_published: Optional[str] = None
    sentiment_label: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("sentiment_label", "overall_sentiment_label")
    )
    sentiment_score: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("sentiment_score", "overall_sentiment_score")
    )

    @property
    def published(self) -> Optional[str]:
        """Compact timestamp if present, else the ISO publication date."""
        return self.time_published or self.published_date


class SentimentSummary(BaseModel):
    """Aggregate sentiment across a news response."""

    positive: int = 0
    neutral: int = 0
    negative: int = 0
    average_score: float = 0.0

    @property
    def total(self) -> int:
        return self.positive + self.neutral + self.negative


class NewsResponse(BaseModel):
    """Response body of the ``/news`` endpoint."""

    items: List[NewsArticle] = Field(
        default_factory=list, validation_alias=AliasChoices("items", "feed")
    )
    total_count: Optional[int] = None
    sentiment_summary: Optional[SentimentSummary] = None

    @model_validator(mode="after")
    def default_total_count(self):
        if self.total_count is None:
            self.total_count = len(self.items)
        return self


class ErrorBody(BaseModel):
    """Error body returned with non-2xx responses."""

    detail: Optional[Union[str, List[dict]]] = None

    def message(self) -> Optional[str]:
        """Human readable message, or None when the body carries nothing usable."""
        if isinstance(self.detail, str):
            return self.detail or None
        if isinstance(self.detail, list):
            parts = [str(item.get("msg")) for item in self.detail if item.get("msg")]
            return "; ".join(parts) or None
        return None
