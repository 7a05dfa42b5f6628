# src/dashboard/ui_components.py

from typing import Any, Dict, List, Tuple
import streamlit as st

from src.config.dashboard_variants import DashboardVariant, FieldSpec
from src.dashboard.form_state import FormState
from src.dashboard.utils import get_ui_logger
from src.monitoring.error_logging import ErrorLogger

# ==========================================================
# Logging configuration
# ==========================================================
logger = get_ui_logger(__name__)

# ==========================================================
# Sidebar UI Components Class
# ==========================================================
class SidebarUI:
    """
    Handles the Streamlit sidebar for the crypto dashboard.

    Features:
    - Dashboard variant picker
    - One form input per variant field (select, text or password)
    - Error history expander with a button to clear results
    """

    def __init__(self, variants: Dict[str, DashboardVariant], default_variant: str):
        self.variants = variants
        self.default_variant = default_variant

    # ==========================================================
    # Variant selection
    # ==========================================================
    def render_variant_picker(self) -> DashboardVariant:
        names: List[str] = list(self.variants)
        index = names.index(self.default_variant) if self.default_variant in names else 0
        name = st.sidebar.selectbox(
            "Dashboard",
            options=names,
            index=index,
            format_func=lambda n: self.variants[n].title,
            key="variant_name",
        )
        return self.variants[name]

    # ==========================================================
    # Form fields
    # ==========================================================
    @staticmethod
    def render_field(spec: FieldSpec, current: str, key_prefix: str = "field") -> str:
        key = f"{key_prefix}_{spec.name}"
        if spec.kind == "select" and spec.options:
            values = spec.option_values()
            index = values.index(current) if current in values else 0
            return st.selectbox(
                spec.label,
                options=values,
                index=index,
                format_func=spec.label_for,
                key=key,
            )
        return st.text_input(
            spec.label,
            value=current,
            type="password" if spec.kind == "password" else "default",
            placeholder=spec.placeholder,
            key=key,
        )

    def render_form(self, form_state: FormState) -> Tuple[FormState, bool]:
        """
        Render the variant's form and return the updated state and whether it was submitted.

        The submission itself runs under ``st.spinner`` in the same script run,
        so the button needs no loading state of its own.
        """
        variant = form_state.variant
        with st.sidebar.form(key=f"form_{variant.name}"):
            st.markdown(f"**{variant.title}**")
            values = {
                spec.name: self.render_field(spec, form_state.get(spec.name), f"field_{variant.name}")
                for spec in variant.fields
            }
            submitted = st.form_submit_button(variant.submit_label, use_container_width=True)

        form_state.update(values)
        if submitted:
            logger.info(f"Form submitted for variant {variant.name}: {form_state!r}")
        return form_state, submitted

    # ==========================================================
    # Error history
    # ==========================================================
    @staticmethod
    def error_history_lines(summary: Dict[str, Any]) -> List[str]:
        """Most recent first, e.g. ``14:02:11 [news] HTTP 502: Failed to fetch news``."""
        lines = []
        for record in reversed(summary["recent_errors"]):
            clock = record["timestamp"][11:19]
            lines.append(f"{clock} {record['exception_message'] or record['message']}")
        return lines

    def render_error_history(self, error_logger: ErrorLogger, variant_name: str) -> bool:
        """
        Show the session's failed requests in an expander.

        Returns True when the user asked to clear results and errors.
        """
        summary = error_logger.get_error_summary()
        with st.sidebar.expander(f"Request errors ({summary['total_errors']})"):
            lines = self.error_history_lines(summary)
            if not lines:
                st.caption("No failed requests in this session.")
            for line in lines:
                st.text(line)
        return st.sidebar.button("Clear results", key=f"clear_{variant_name}", use_container_width=True)
