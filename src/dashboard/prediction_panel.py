# src/dashboard/prediction_panel.py

import streamlit as st
import pandas as pd
import plotly.graph_objects as go
from dataclasses import dataclass
from typing import List, Optional

from src.config.api_models import PredictionResponse
from src.dashboard.formatting import (
    Style,
    direction_style,
    format_currency,
    format_indicator_value,
    format_percentage,
    signal_style,
)
from src.dashboard.utils import DEFAULT_CHART_HEIGHT, decode_plot, get_ui_logger

# -------------------------------
# Logging configuration
# -------------------------------
logger = get_ui_logger(__name__)


@dataclass(frozen=True)
class IndicatorCard:
    label: str
    value_text: str
    signal: Optional[str]
    style: Style
    description: str


# (label, value field, signal field, description)
INDICATOR_LAYOUT = [
    ("RSI", "rsi", "rsi_signal", "Relative Strength Index"),
    ("MACD", "macd", "macd_signal", "Moving Average Convergence Divergence"),
    ("Stochastic", "stochastic", "stochastic_signal", "Stochastic Oscillator"),
    ("ADX", "adx", "trend_strength", "Average Directional Index"),
    ("ATR", "atr", None, "Average True Range"),
    ("MFI", "mfi", None, "Money Flow Index"),
]

FORECAST_COLUMNS = ["Date", "Predicted Price", "Direction", "Confidence", "Range"]


# -------------------------------
# Prediction Panel Class
# -------------------------------
class PredictionPanel:
    """
    Displays the prediction result, technical indicators, the backend chart
    and the forecast table for one prediction response.
    """

    def __init__(self, prediction: PredictionResponse, symbol: str = ""):
        self.prediction = prediction
        self.symbol = symbol

    # -------------------------------
    # View models
    # -------------------------------
    def build_indicator_cards(self) -> List[IndicatorCard]:
        """Indicator cards in display order; optional indicators the backend omitted are skipped."""
        indicators = self.prediction.technical_indicators
        cards = []
        for label, value_field, signal_field, description in INDICATOR_LAYOUT:
            value = getattr(indicators, value_field)
            if value is None and value_field in ("atr", "mfi"):
                continue
            signal = getattr(indicators, signal_field) if signal_field else None
            cards.append(
                IndicatorCard(
                    label=label,
                    value_text=format_indicator_value(value),
                    signal=signal,
                    style=signal_style(signal),
                    description=description,
                )
            )
        return cards

    def build_forecast_table(self) -> pd.DataFrame:
        rows = []
        for point in self.prediction.forecast:
            arrow = direction_style(point.direction)
            rows.append({
                "Date": point.date,
                "Predicted Price": format_currency(point.predicted_price),
                "Direction": f"{arrow.glyph} {arrow.label}",
                "Confidence": format_percentage(point.probability),
                "Range": (
                    f"{format_currency(point.prediction_interval_low)} - "
                    f"{format_currency(point.prediction_interval_high)}"
                ),
            })
        return pd.DataFrame(rows, columns=FORECAST_COLUMNS)

    def build_forecast_chart(self) -> Optional[go.Figure]:
        """Predicted price line with the prediction interval as a shaded band."""
        forecast = self.prediction.forecast
        if not forecast:
            return None

        dates = [p.date for p in forecast]
        fig = go.Figure()

        fig.add_trace(go.Scatter(
            x=dates,
            y=[p.prediction_interval_high for p in forecast],
            mode="lines",
            line=dict(width=0),
            name="Upper bound",
            showlegend=False,
        ))
        fig.add_trace(go.Scatter(
            x=dates,
            y=[p.prediction_interval_low for p in forecast],
            mode="lines",
            line=dict(width=0),
            fill="tonexty",
            fillcolor="rgba(128, 128, 128, 0.2)",
            name="Prediction interval",
        ))
        fig.add_trace(go.Scatter(
            x=dates,
            y=[p.predicted_price for p in forecast],
            mode="lines+markers",
            name="Forecast",
            line=dict(color="blue"),
            marker=dict(color=[direction_style(p.direction).color for p in forecast], size=9),
        ))

        title = f"{self.symbol} - Price Forecast" if self.symbol else "Price Forecast"
        fig.update_layout(
            title=title,
            xaxis_title="Date",
            yaxis_title="Price",
            template="plotly_white",
            height=DEFAULT_CHART_HEIGHT,
        )
        return fig

    # -------------------------------
    # Renderers
    # -------------------------------
    def render_summary(self) -> None:
        p = self.prediction
        arrow = direction_style(p.prediction)

        col_a, col_b = st.columns(2)
        with col_a:
            st.caption("Direction")
            st.markdown(f"## :{arrow.color}[{arrow.glyph} {arrow.label}]")
        with col_b:
            st.metric("Current Price", format_currency(p.current_price))

        st.markdown("**Prediction Confidence**")
        st.text(f"Upward   {format_percentage(p.probability_up)}")
        st.progress(min(max(p.probability_up, 0.0), 1.0))
        st.text(f"Downward {format_percentage(p.probability_down)}")
        st.progress(min(max(p.probability_down, 0.0), 1.0))

        st.markdown("**Model Performance**")
        st.progress(min(max(p.accuracy, 0.0), 1.0))
        st.caption(f"{format_percentage(p.accuracy)} accuracy on historical predictions")

    def render_indicators(self) -> None:
        cards = self.build_indicator_cards()
        columns = st.columns(2)
        for index, card in enumerate(cards):
            with columns[index % 2]:
                with st.container(border=True):
                    st.caption(card.label)
                    signal = f"  :{card.style.color}[{card.signal}]" if card.signal else ""
                    st.markdown(f"**{card.value_text}**{signal}")
                    st.caption(card.description)

    def render_plot(self) -> None:
        image = decode_plot(self.prediction.plot_base64)
        if image is None:
            st.info("No analysis chart available.")
            return
        st.image(image, caption="Price Analysis Charts", use_container_width=True)

    def render_forecast(self) -> None:
        if not self.prediction.forecast:
            st.warning("Forecast data not available.")
            return

        st.caption(f"Next {len(self.prediction.forecast)} periods prediction with confidence intervals")
        fig = self.build_forecast_chart()
        if fig is not None:
            st.plotly_chart(fig, use_container_width=True)
        st.dataframe(self.build_forecast_table(), hide_index=True, use_container_width=True)

    def render(self) -> None:
        col_a, col_b = st.columns(2)
        with col_a:
            st.subheader("Prediction Results")
            self.render_summary()
        with col_b:
            st.subheader("Technical Analysis")
            self.render_indicators()

        st.subheader("Price Charts and Analysis")
        self.render_plot()

        st.subheader("Price Forecast")
        self.render_forecast()

        logger.info(f"Rendered prediction panel for {self.symbol or 'selection'}")
