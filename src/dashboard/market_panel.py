# src/dashboard/market_panel.py

import streamlit as st
import pandas as pd
from typing import List, Optional

from src.config.api_models import MarketMovers, TickerInfo
from src.dashboard.formatting import (
    DirectionStyle,
    change_style,
    direction_style,
    format_change_percentage,
    format_currency,
    format_volume,
)
from src.dashboard.utils import get_ui_logger

logger = get_ui_logger(__name__)

MOVER_COLUMNS = ["Ticker", "Price", "Change", "Volume"]

# (attribute, heading, forced direction; None means by sign)
MOVER_SECTIONS = [
    ("top_gainers", "Top Gainers", "UP"),
    ("top_losers", "Top Losers", "DOWN"),
    ("most_actively_traded", "Most Active", None),
]


class MarketMoversPanel:
    """Top gainers, top losers and most actively traded tickers."""

    def __init__(self, market_movers: MarketMovers):
        self.market_movers = market_movers

    @staticmethod
    def row_style(item: TickerInfo, forced_direction: Optional[str]) -> DirectionStyle:
        if forced_direction is not None:
            return direction_style(forced_direction)
        return change_style(item.change_percentage)

    def build_table(self, items: List[TickerInfo], forced_direction: Optional[str] = None) -> pd.DataFrame:
        rows = []
        for item in items:
            arrow = self.row_style(item, forced_direction)
            rows.append({
                "Ticker": item.ticker,
                "Price": format_currency(item.price),
                "Change": f"{arrow.glyph} {format_change_percentage(item.change_percentage)}",
                "Volume": format_volume(item.volume),
            })
        return pd.DataFrame(rows, columns=MOVER_COLUMNS)

    def render_section(self, heading: str, items: List[TickerInfo], forced_direction: Optional[str]) -> None:
        color = direction_style(forced_direction).color if forced_direction else None
        st.markdown(f"#### :{color}[{heading}]" if color else f"#### {heading}")

        if not items:
            st.caption("No data")
            return

        st.dataframe(self.build_table(items, forced_direction), hide_index=True, use_container_width=True)

    def render(self) -> None:
        columns = st.columns(len(MOVER_SECTIONS))
        for column, (attribute, heading, forced_direction) in zip(columns, MOVER_SECTIONS):
            with column:
                self.render_section(heading, getattr(self.market_movers, attribute), forced_direction)

        if self.market_movers.last_updated:
            st.caption(f"Last updated: {self.market_movers.last_updated}")

        logger.info(
            "Rendered market movers: "
            f"{len(self.market_movers.top_gainers)} gainers, "
            f"{len(self.market_movers.top_losers)} losers, "
            f"{len(self.market_movers.most_actively_traded)} active"
        )
