# src/dashboard/news_panel.py

import streamlit as st
import plotly.graph_objects as go
from dataclasses import dataclass
from typing import List, Optional

from src.config.api_models import NewsResponse, SentimentSummary
from src.dashboard.formatting import Style, format_news_date, sentiment_style
from src.dashboard.utils import DEFAULT_GAUGE_HEIGHT, STYLE_COLORS, get_ui_logger, normalize_score

# -------------------------------
# Logging configuration
# -------------------------------
logger = get_ui_logger(__name__)


@dataclass(frozen=True)
class NewsCard:
    title: str
    url: str
    summary: str
    date_text: str
    publisher: str
    sentiment_label: Optional[str]
    sentiment_score: Optional[float]
    style: Style


# -------------------------------
# News Panel Class
# -------------------------------
class NewsPanel:
    """
    Displays news articles with their sentiment and, when the backend sends
    one, the aggregate sentiment summary.

    Features:
    - Bar chart of positive/neutral/negative article counts
    - Gauge for the average sentiment score in [-1, 1]
    - One card per article
    """

    def __init__(self, news: NewsResponse, symbol: str = ""):
        self.news = news
        self.symbol = symbol

    def build_cards(self) -> List[NewsCard]:
        return [
            NewsCard(
                title=article.title,
                url=article.url,
                summary=article.summary,
                date_text=format_news_date(article.published),
                publisher=article.publisher or "",
                sentiment_label=article.sentiment_label,
                sentiment_score=article.sentiment_score,
                style=sentiment_style(article.sentiment_label),
            )
            for article in self.news.items
        ]

    # -------------------------------
    # Charts
    # -------------------------------
    def build_counts_chart(self, summary: SentimentSummary) -> go.Figure:
        labels = ["Positive", "Neutral", "Negative"]
        counts = [summary.positive, summary.neutral, summary.negative]
        fig = go.Figure(
            go.Bar(
                x=counts,
                y=labels,
                orientation="h",
                marker=dict(color=[STYLE_COLORS[s.value] for s in (Style.POSITIVE, Style.NEUTRAL, Style.NEGATIVE)]),
                text=[str(c) for c in counts],
                textposition="outside",
            )
        )
        fig.update_layout(
            title=f"{self.symbol} - Article Sentiment" if self.symbol else "Article Sentiment",
            xaxis=dict(title="Articles"),
            template="plotly_white",
            height=DEFAULT_GAUGE_HEIGHT,
            margin=dict(l=40, r=40, t=40, b=40),
        )
        return fig

    def build_score_gauge(self, summary: SentimentSummary) -> go.Figure:
        # [-1, 1] mapped onto a [0, 1] gauge
        gauge_value = (normalize_score(summary.average_score) + 1) / 2

        fig = go.Figure(go.Indicator(
            mode="gauge+number",
            value=gauge_value,
            number={"valueformat": ".2f"},
            title={"text": "Average Sentiment"},
            gauge={
                "axis": {"range": [0, 1], "tickvals": [0, 0.25, 0.5, 0.75, 1],
                         "ticktext": ["-1", "-0.5", "0", "0.5", "1"]},
                "bar": {"color": "black", "thickness": 0.05},
                "steps": [
                    {"range": [0, 0.35], "color": STYLE_COLORS["negative"]},
                    {"range": [0.35, 0.65], "color": STYLE_COLORS["neutral"]},
                    {"range": [0.65, 1], "color": STYLE_COLORS["positive"]},
                ],
            },
        ))
        fig.update_layout(height=DEFAULT_GAUGE_HEIGHT, margin=dict(l=40, r=40, t=50, b=40))
        return fig

    # -------------------------------
    # Layout Renderer
    # -------------------------------
    def render_summary(self) -> None:
        summary = self.news.sentiment_summary
        if summary is None or summary.total == 0:
            return

        col_a, col_b = st.columns([6, 4])
        with col_a:
            st.plotly_chart(self.build_counts_chart(summary), use_container_width=True)
        with col_b:
            st.plotly_chart(self.build_score_gauge(summary), use_container_width=True)

    def render(self) -> None:
        st.subheader("Latest News")
        self.render_summary()

        cards = self.build_cards()
        if not cards:
            st.info("No news articles found.")
            return

        for card in cards:
            with st.container(border=True):
                st.markdown(f"**[{card.title}]({card.url})**")
                if card.summary:
                    st.caption(card.summary)
                meta = [card.date_text]
                if card.publisher:
                    meta.append(card.publisher)
                if card.sentiment_label:
                    score = f" ({card.sentiment_score:+.2f})" if card.sentiment_score is not None else ""
                    meta.append(f":{card.style.color}[{card.sentiment_label}{score}]")
                st.markdown(" · ".join(meta))

        logger.info(f"Rendered {len(cards)} news articles for {self.symbol or 'selection'}")
