"""
Central CLI entrypoint for the Crypto Analysis Dashboard.

Usage:
    python main.py <command> [options]

Supported commands:
    dashboard       Launch the Streamlit dashboard
    predict         Run one prediction against the backend and print a summary
    variants        List the configured dashboard variants

Examples:
    python main.py dashboard --port 8501
    python main.py predict --variant yahoo --set symbol=ETH-USD --set period=90d
    python main.py predict --variant combined --set api_key=demo
    python main.py variants --config configs/dashboard_config.yaml
"""

import argparse
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional

from src.api.prediction_client import PredictionClient
from src.config.dashboard_variants import DashboardVariant
from src.dashboard.dispatcher import RequestDispatcher
from src.dashboard.form_state import FormState
from src.dashboard.formatting import (
    direction_style,
    format_change_percentage,
    format_currency,
    format_indicator_value,
    format_news_date,
    format_percentage,
)
from src.dashboard.request_state import RequestKind, RequestStateStore, RequestStatus
from src.monitoring.error_logging import ErrorComponent, create_component_logger
from src.utils.config import CONFIG_ENV_VAR, resolve_config_path
from src.utils.config_loader import FullConfig, load_typed_config
from src.utils.logger import configure_logging

logger = logging.getLogger("src.cli")

APP_PATH = Path(__file__).resolve().parent / "src" / "dashboard" / "app.py"


def validate_config_path(config_path: str) -> None:
    """
    Validates whether the given config path exists and is a file.

    Args:
        config_path (str): Path to the config file.

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    if not os.path.isfile(config_path):
        logger.error(f"Config file not found: {config_path}")
        raise FileNotFoundError(f"Config file not found: {config_path}")


def parse_overrides(pairs: Optional[List[str]]) -> Dict[str, str]:
    """
    Turn ``FIELD=VALUE`` arguments into a dict.

    Raises:
        ValueError: If an argument has no '='.
    """
    overrides = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise ValueError(f"Expected FIELD=VALUE, got '{pair}'")
        name, value = pair.split("=", 1)
        overrides[name.strip()] = value.strip()
    return overrides


def start_dashboard(config_path: str, port: int) -> int:
    """Run ``streamlit run`` on the dashboard app and return its exit code."""
    env = dict(os.environ, **{CONFIG_ENV_VAR: os.path.abspath(config_path)})
    cmd = [sys.executable, "-m", "streamlit", "run", str(APP_PATH), "--server.port", str(port)]
    logger.info(f"Launching dashboard on port {port}")
    return subprocess.run(cmd, env=env).returncode


def run_prediction(config: FullConfig, variant: DashboardVariant, overrides: Dict[str, str]) -> RequestStateStore:
    """Submit one form through the dispatcher, exactly as the dashboard does."""
    form_state = FormState(variant, overrides)
    client = PredictionClient(config.api.base_url, timeout=config.api.timeout_seconds)
    dispatcher = RequestDispatcher(
        client,
        variant,
        error_logger=create_component_logger(ErrorComponent.CLI, config.logging.error_log),
    )
    return dispatcher.submit_sync(form_state.freeze())


def format_summary(store: RequestStateStore) -> List[str]:
    """Plain-text rendering of a finished submission."""
    lines = []

    prediction_state = store[RequestKind.PREDICTION]
    if prediction_state.status is RequestStatus.FAILED:
        lines.append(f"Error: {prediction_state.error}")
    prediction = prediction_state.data
    if prediction is not None:
        arrow = direction_style(prediction.prediction)
        lines.append(f"Direction:     {arrow.glyph} {arrow.label}")
        lines.append(f"Current price: {format_currency(prediction.current_price)}")
        lines.append(f"Upward:        {format_percentage(prediction.probability_up)}")
        lines.append(f"Downward:      {format_percentage(prediction.probability_down)}")
        lines.append(f"Accuracy:      {format_percentage(prediction.accuracy)}")

        indicators = prediction.technical_indicators
        lines.append(
            "Indicators:    "
            f"RSI {format_indicator_value(indicators.rsi)} ({indicators.rsi_signal or '-'}), "
            f"MACD {format_indicator_value(indicators.macd)} ({indicators.macd_signal or '-'}), "
            f"ADX {format_indicator_value(indicators.adx)} ({indicators.trend_strength or '-'})"
        )
        for point in prediction.forecast:
            point_arrow = direction_style(point.direction)
            lines.append(
                f"  {point.date}  {format_currency(point.predicted_price)}  {point_arrow.glyph}  "
                f"{format_percentage(point.probability)}  "
                f"[{format_currency(point.prediction_interval_low)} - "
                f"{format_currency(point.prediction_interval_high)}]"
            )

    movers_state = store[RequestKind.MARKET_MOVERS]
    if movers_state.status is RequestStatus.FAILED:
        lines.append(f"Market movers error: {movers_state.error}")
    elif movers_state.data is not None:
        for title, items in (("Top gainers", movers_state.data.top_gainers),
                             ("Top losers", movers_state.data.top_losers)):
            tickers = ", ".join(
                f"{item.ticker} {format_change_percentage(item.change_percentage)}" for item in items[:5]
            )
            lines.append(f"{title}: {tickers or '-'}")

    news_state = store[RequestKind.NEWS]
    if news_state.status is RequestStatus.FAILED:
        lines.append(f"News error: {news_state.error}")
    elif news_state.data is not None:
        lines.append(f"News ({news_state.data.total_count}):")
        for article in news_state.data.items[:5]:
            label = f" [{article.sentiment_label}]" if article.sentiment_label else ""
            lines.append(f"  {format_news_date(article.published)}  {article.title}{label}")

    return lines


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse CLI arguments and dispatch commands.
    """
    parser = argparse.ArgumentParser(description="Crypto Analysis Dashboard CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- Dashboard ---
    dashboard_parser = subparsers.add_parser("dashboard", help="Launch the Streamlit dashboard")
    dashboard_parser.add_argument("--config", "-c", default=None, help="Path to dashboard config YAML")
    dashboard_parser.add_argument("--port", type=int, default=8501, help="Port for the dashboard")

    # --- Predict ---
    predict_parser = subparsers.add_parser("predict", help="Run one prediction and print a summary")
    predict_parser.add_argument("--config", "-c", default=None, help="Path to dashboard config YAML")
    predict_parser.add_argument("--variant", "-v", default=None, help="Dashboard variant name")
    predict_parser.add_argument(
        "--set", dest="overrides", action="append", metavar="FIELD=VALUE",
        help="Form field value (repeatable)"
    )

    # --- Variants ---
    variants_parser = subparsers.add_parser("variants", help="List dashboard variants")
    variants_parser.add_argument("--config", "-c", default=None, help="Path to dashboard config YAML")

    args = parser.parse_args(argv)

    try:
        config_path = resolve_config_path(args.config)
        validate_config_path(config_path)

        if args.command == "dashboard":
            return start_dashboard(config_path, args.port)

        config = load_typed_config(config_path)
        configure_logging(config.logging.level, config.logging.file)

        if args.command == "variants":
            for name, variant in config.variants.items():
                marker = "*" if name == config.dashboard.default_variant else " "
                print(f"{marker} {name:<15} {variant.title}  fields: {', '.join(variant.field_names())}")
            return 0

        if args.command == "predict":
            variant = config.get_variant(args.variant)
            store = run_prediction(config, variant, parse_overrides(args.overrides))
            for line in format_summary(store):
                print(line)
            return 0 if store[RequestKind.PREDICTION].status is RequestStatus.SUCCESS else 1

    except Exception as e:
        logger.exception(f"Fatal error during execution: {e}")
        raise

    return 0


if __name__ == "__main__":
    sys.exit(main())
