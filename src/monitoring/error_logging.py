# src/monitoring/error_logging.py
"""
Error logging for failed backend requests.

Each ``ErrorLogger`` tags its records with the component that submitted the
request (the dashboard dispatcher or the CLI). Records go to the standard
logger, into a bounded in-memory history shown in the dashboard sidebar, and
optionally onto a JSONL file named by ``logging.error_log`` in the config.
"""

import json
import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class ErrorComponent(Enum):
    """Where a failed request was submitted from."""
    DISPATCHER = "dispatcher"
    CLI = "cli"


class ErrorLogger:
    """
    Records failed requests for one component.

    Usage:
        error_logger = create_component_logger(ErrorComponent.DISPATCHER, "logs/error_log.jsonl")
        error_logger.log_error(
            "news request failed",
            exception=exc,
            context={"variant": "combined", "kind": "news"},
        )
        error_logger.get_error_summary()["recent_errors"]
    """

    MAX_HISTORY = 100

    def __init__(
        self,
        component: ErrorComponent,
        base_logger: Optional[logging.Logger] = None,
        error_log_path: Optional[str] = None,
    ):
        self.component = component
        self.logger = base_logger or logging.getLogger(f"src.error.{component.value}")

        self.error_count = 0
        self.error_history: List[Dict[str, Any]] = []

        self.error_log_path = Path(error_log_path) if error_log_path else None
        if self.error_log_path is not None:
            self.error_log_path.parent.mkdir(parents=True, exist_ok=True)

    def log_error(
        self,
        error_msg: str,
        exception: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
        severity: str = "warning",
    ) -> Dict[str, Any]:
        """
        Record one failure and return the record.

        ``status_code`` is copied from the exception when it carries one
        (``ApiStatusError``). ``severity`` names the logger method used.
        """
        self.error_count += 1
        context = context or {}

        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "component": self.component.value,
            "message": error_msg,
            "exception_type": type(exception).__name__ if exception else None,
            "exception_message": str(exception) if exception else None,
            "status_code": getattr(exception, "status_code", None),
            "traceback": traceback.format_exc() if exception and exception.__traceback__ else None,
            "context": context,
            "severity": severity,
        }

        self.error_history.append(record)
        del self.error_history[:-self.MAX_HISTORY]

        emit = getattr(self.logger, severity, self.logger.warning)
        details = ", ".join(f"{k}={v}" for k, v in context.items())
        suffix = f": {exception}" if exception else ""
        emit(f"[{self.component.value.upper()}] {error_msg}{suffix} | Context: {details}")

        self._append_jsonl(record)
        return record

    def _append_jsonl(self, record: Dict[str, Any]) -> None:
        if self.error_log_path is None:
            return
        try:
            with open(self.error_log_path, "a") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            self.logger.error(f"Failed to write error log: {e}")

    def get_error_summary(self) -> Dict[str, Any]:
        """Error count since the last clear plus the ten most recent records."""
        return {
            "component": self.component.value,
            "total_errors": self.error_count,
            "recent_errors": self.error_history[-10:],
        }

    def clear_history(self) -> None:
        """Forget recorded errors; the JSONL file is left alone."""
        self.error_history.clear()
        self.error_count = 0


def create_component_logger(component: ErrorComponent, error_log_path: Optional[str] = None) -> ErrorLogger:
    return ErrorLogger(component=component, error_log_path=error_log_path)
