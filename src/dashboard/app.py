# src/dashboard/app.py

import os
import sys
from pathlib import Path

import streamlit as st

# `streamlit run src/dashboard/app.py` puts only the script directory on sys.path
PROJECT_ROOT = str(Path(__file__).resolve().parents[2])
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from src.api.prediction_client import PredictionClient
from src.config.dashboard_variants import DashboardVariant
from src.dashboard.dispatcher import RequestDispatcher
from src.dashboard.form_state import FormState
from src.dashboard.market_panel import MarketMoversPanel
from src.dashboard.news_panel import NewsPanel
from src.dashboard.prediction_panel import PredictionPanel
from src.dashboard.request_state import RequestKind, RequestStateStore, RequestStatus
from src.dashboard.ui_components import SidebarUI
from src.dashboard.utils import get_ui_logger
from src.monitoring.error_logging import ErrorComponent, ErrorLogger, create_component_logger
from src.utils.config import CONFIG_ENV_VAR
from src.utils.config_loader import FullConfig, load_typed_config
from src.utils.logger import configure_logging

logger = get_ui_logger("src.dashboard.app")

TAB_LABELS = {
    RequestKind.PREDICTION: "Price Prediction",
    RequestKind.MARKET_MOVERS: "Market Overview",
    RequestKind.NEWS: "News",
}


@st.cache_resource(show_spinner=False)
def get_config(config_path: str = "") -> FullConfig:
    config = load_typed_config(config_path or None)
    configure_logging(config.logging.level, config.logging.file)
    return config


def page_settings(config: FullConfig) -> dict:
    """Keyword arguments for ``st.set_page_config``."""
    return {"page_title": config.dashboard.title, "layout": "wide"}


def get_session_store(variant: DashboardVariant) -> RequestStateStore:
    """One request-state store per variant, kept across Streamlit reruns."""
    key = f"store_{variant.name}"
    if key not in st.session_state:
        st.session_state[key] = RequestStateStore()
    return st.session_state[key]


def get_form_state(variant: DashboardVariant) -> FormState:
    key = f"form_state_{variant.name}"
    if key not in st.session_state:
        st.session_state[key] = FormState(variant)
    return st.session_state[key]


def get_error_logger(config: FullConfig) -> ErrorLogger:
    """Session-wide error history, shared by all variants."""
    if "error_logger" not in st.session_state:
        st.session_state["error_logger"] = create_component_logger(
            ErrorComponent.DISPATCHER, config.logging.error_log
        )
    return st.session_state["error_logger"]


def display_symbol(values) -> str:
    if "symbol" in values:
        return values["symbol"]
    if "base_currency" in values:
        return f"{values['base_currency']}/{values.get('quote_currency', '')}"
    return ""


def render_error(store: RequestStateStore, kind: RequestKind) -> None:
    state = store[kind]
    if state.status is RequestStatus.FAILED and state.error:
        st.error(f"**Error** {state.error}")


def render_results(variant: DashboardVariant, store: RequestStateStore, symbol: str) -> None:
    kinds = [RequestKind.PREDICTION] + [RequestKind(name) for name in variant.secondary_endpoints()]

    render_error(store, RequestKind.PREDICTION)

    if len(kinds) == 1:
        if store[RequestKind.PREDICTION].has_data:
            PredictionPanel(store[RequestKind.PREDICTION].data, symbol=symbol).render()
        return

    tabs = st.tabs([TAB_LABELS[kind] for kind in kinds])
    for tab, kind in zip(tabs, kinds):
        with tab:
            if kind is not RequestKind.PREDICTION:
                render_error(store, kind)
            state = store[kind]
            if not state.has_data:
                continue
            if kind is RequestKind.PREDICTION:
                PredictionPanel(state.data, symbol=symbol).render()
            elif kind is RequestKind.MARKET_MOVERS:
                MarketMoversPanel(state.data).render()
            else:
                NewsPanel(state.data, symbol=symbol).render()


def main():
    config = get_config(os.environ.get(CONFIG_ENV_VAR, ""))
    st.set_page_config(**page_settings(config))

    # ==========================================================
    # Step 1 - Sidebar: variant, form and error history
    # ==========================================================
    sidebar = SidebarUI(config.variants, config.dashboard.default_variant)
    variant = sidebar.render_variant_picker()
    store = get_session_store(variant)
    form_state = get_form_state(variant)
    error_logger = get_error_logger(config)
    form_state, submitted = sidebar.render_form(form_state)

    st.markdown(
        f"<h2 style='text-align:center; margin-bottom:20px;'>{variant.title}</h2>",
        unsafe_allow_html=True,
    )

    # ==========================================================
    # Step 2 - Dispatch on submit
    # ==========================================================
    values = form_state.freeze()
    if submitted:
        client = PredictionClient(config.api.base_url, timeout=config.api.timeout_seconds)
        dispatcher = RequestDispatcher(client, variant, store=store, error_logger=error_logger)
        with st.spinner("Processing"):
            dispatcher.submit_sync(values)

    if sidebar.render_error_history(error_logger, variant.name):
        store.reset()
        error_logger.clear_history()
        st.rerun()

    # ==========================================================
    # Step 3 - Panels
    # ==========================================================
    render_results(variant, store, display_symbol(values))

    logger.info("Dashboard render complete.")


if __name__ == "__main__":
    main()
