# src/dashboard/form_state.py

import logging
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from src.config.dashboard_variants import DashboardVariant

logger = logging.getLogger(__name__)


class FormState:
    """
    Current value of every form field of a dashboard variant.

    Values start from the variant's defaults. ``freeze`` returns a read-only
    snapshot, which is what a submission works from so later edits cannot
    leak into an in-flight request.
    """

    def __init__(self, variant: DashboardVariant, values: Optional[Mapping[str, str]] = None):
        self.variant = variant
        self._values: Dict[str, str] = variant.default_values()
        if values:
            for name, value in values.items():
                self.set(name, value)

    def set(self, name: str, value: Optional[str]) -> None:
        """Set one field. Unknown field names raise ``KeyError``."""
        if name not in self._values:
            raise KeyError(f"Variant '{self.variant.name}' has no field '{name}'")
        self._values[name] = "" if value is None else str(value)

    def update(self, values: Mapping[str, Optional[str]]) -> None:
        for name, value in values.items():
            self.set(name, value)

    def get(self, name: str) -> str:
        return self._values[name]

    def freeze(self) -> Mapping[str, str]:
        snapshot = MappingProxyType(dict(self._values))
        logger.debug(f"Form snapshot for {self.variant.name}: {_masked(snapshot)}")
        return snapshot

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def __repr__(self) -> str:
        return f"FormState(variant={self.variant.name!r}, values={_masked(self._values)})"


def _masked(values: Mapping[str, str]) -> Dict[str, str]:
    return {k: ("***" if "key" in k and v else v) for k, v in values.items()}
