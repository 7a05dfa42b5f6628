# src/dashboard/utils.py

import base64
import binascii
import logging
from typing import Optional


# -------------------------------
# Logger Function
# -------------------------------
def get_ui_logger(name: Optional[str] = "src.dashboard") -> logging.Logger:
    """
    Returns the logger for a dashboard module.

    No handlers are attached here; records propagate to the ``src`` logger set
    up by ``configure_logging``, which also decides the level.

    Args:
        name (str): Logger name. Defaults to 'src.dashboard'.

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(name or "src.dashboard")

# -------------------------------
# Helper Functions
# -------------------------------
def decode_plot(plot_base64: str) -> Optional[bytes]:
    """
    Decode the chart image sent by the backend.

    Args:
        plot_base64 (str): Base64 PNG payload, optionally as a data URI.

    Returns:
        bytes: Image bytes, or None when the payload is empty or not valid base64.
    """
    if not plot_base64:
        return None

    payload = plot_base64.split(",", 1)[1] if plot_base64.startswith("data:") else plot_base64
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        logging.getLogger(__name__).warning("Discarding plot payload that is not valid base64")
        return None

def normalize_score(score: float, min_val: float = -1.0, max_val: float = 1.0) -> float:
    """
    Clip a sentiment score to be within bounds.

    Args:
        score (float): Input sentiment score
        min_val (float): Minimum allowed value
        max_val (float): Maximum allowed value

    Returns:
        float: Clipped score
    """
    return max(min(score, max_val), min_val)

# -------------------------------
# Dashboard Constants
# -------------------------------
DEFAULT_CHART_HEIGHT = 420
DEFAULT_GAUGE_HEIGHT = 300
STYLE_COLORS = {"positive": "green", "negative": "red", "neutral": "gray"}
