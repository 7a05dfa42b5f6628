# src/dashboard/formatting.py
"""
Display formatting for values received from the prediction backend.

Everything here is a pure function of its input so the panels stay thin and
the rules can be tested without Streamlit.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from src.dashboard.utils import STYLE_COLORS

NOT_AVAILABLE = "N/A"


class Style(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"

    @property
    def color(self) -> str:
        return STYLE_COLORS[self.value]


@dataclass(frozen=True)
class DirectionStyle:
    glyph: str
    style: Style
    label: str

    @property
    def color(self) -> str:
        return self.style.color


# -------------------------------
# Numbers
# -------------------------------
def format_currency(value: float) -> str:
    """Two decimals with thousands separators: 1234.5 -> "$1,234.50"."""
    return f"${value:,.2f}"


def format_percentage(value: float) -> str:
    """Probability in [0, 1] as a percentage: 0.8234 -> "82.3%"."""
    return f"{value * 100:.1f}%"


def format_change_percentage(value: float) -> str:
    """Unsigned change already expressed in percent: -3.456 -> "3.46%"."""
    return f"{abs(value):.2f}%"


def format_volume(value: float) -> str:
    """Volume in millions: 12_345_678 -> "12.3M"."""
    return f"{value / 1_000_000:.1f}M"


def format_indicator_value(value: Optional[Union[float, str]]) -> str:
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:.2f}"
    return str(value)


# -------------------------------
# Categorical styles
# -------------------------------
def direction_style(direction: Optional[str]) -> DirectionStyle:
    """UP renders green with an up arrow, DOWN red with a down arrow, anything else gray."""
    if direction == "UP":
        return DirectionStyle(glyph="↑", style=Style.POSITIVE, label="UP")
    if direction == "DOWN":
        return DirectionStyle(glyph="↓", style=Style.NEGATIVE, label="DOWN")
    return DirectionStyle(glyph="→", style=Style.NEUTRAL, label=str(direction or NOT_AVAILABLE))


def signal_style(signal: Optional[str]) -> Style:
    """
    Classify an indicator signal.

    Keyword checks are case-insensitive substring matches; "Overbought" and
    "Oversold" must match exactly. The positive branch wins, so
    "Strong Bearish" is positive.
    """
    if not signal:
        return Style.NEUTRAL

    lowered = signal.lower()
    if "bull" in lowered or "strong" in lowered or signal == "Overbought":
        return Style.POSITIVE
    if "bear" in lowered or "weak" in lowered or signal == "Oversold":
        return Style.NEGATIVE
    return Style.NEUTRAL


SENTIMENT_STYLES = {
    "Bullish": Style.POSITIVE,
    "Somewhat-Bullish": Style.POSITIVE,
    "Bearish": Style.NEGATIVE,
    "Somewhat-Bearish": Style.NEGATIVE,
    "Neutral": Style.NEUTRAL,
}


def sentiment_style(label: Optional[str]) -> Style:
    return SENTIMENT_STYLES.get(label or "", Style.NEUTRAL)


def change_style(change_percentage: float) -> DirectionStyle:
    """Up for zero or positive change, down otherwise."""
    return direction_style("UP" if change_percentage >= 0 else "DOWN")


# -------------------------------
# Dates
# -------------------------------
def format_locale_date(value: date) -> str:
    """US locale short date without zero padding: 2025-02-04 -> "2/4/2025"."""
    return f"{value.month}/{value.day}/{value.year}"


def format_news_date(value: Optional[str]) -> str:
    """
    Render a news publication timestamp.

    Accepts compact timestamps ("20250224T231000") and ISO timestamps
    ("2025-02-24T23:10:00Z"). Input shorter than 8 characters renders "N/A";
    input that cannot be turned into a date is returned unchanged.
    """
    if not value or len(value) < 8:
        return NOT_AVAILABLE

    prefix = value[:8]
    try:
        if prefix.isdigit():
            parsed = date(int(prefix[:4]), int(prefix[4:6]), int(prefix[6:8]))
        else:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return value
    return format_locale_date(parsed)
