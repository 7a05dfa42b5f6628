# src/utils/config_loader.py

from pydantic import BaseModel, Field, field_validator
from typing import Dict, Optional
from src.config.dashboard_variants import BUILTIN_VARIANTS, DashboardVariant
from src.utils.config import load_config, resolve_config_path


# -------------------
# Pydantic Configs
# -------------------
class ApiConfig(BaseModel):
    base_url: str = "https://portal2.incoe.astra.co.id"
    # None means no timeout, matching the browser client
    timeout_seconds: Optional[float] = None

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def positive_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("timeout_seconds must be positive or null")
        return v


class DashboardSettings(BaseModel):
    default_variant: str = "combined"
    title: str = "Crypto Analysis Dashboard"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None
    error_log: Optional[str] = None


class FullConfig(BaseModel):
    api: ApiConfig = Field(default_factory=ApiConfig)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    variants: Dict[str, DashboardVariant] = Field(default_factory=dict)

    def get_variant(self, name: Optional[str] = None) -> DashboardVariant:
        """
        Return a variant by name (default variant when name is None).

        Raises:
            KeyError: If no such variant is configured.
        """
        name = name or self.dashboard.default_variant
        if name not in self.variants:
            raise KeyError(f"Unknown dashboard variant '{name}'. Available: {sorted(self.variants)}")
        return self.variants[name]


# -------------------
# Functions
# -------------------
def build_config(raw_config: Optional[dict] = None) -> FullConfig:
    """
    Validate a raw config dict, merging YAML variants over the built-in ones.

    Variants defined in YAML may omit ``name``; the mapping key is used.
    """
    raw_config = dict(raw_config or {})
    variants = {name: variant.model_copy(deep=True) for name, variant in BUILTIN_VARIANTS.items()}

    for name, spec in (raw_config.pop("variants", None) or {}).items():
        spec = dict(spec)
        spec.setdefault("name", name)
        variants[name] = DashboardVariant(**spec)

    config = FullConfig(**raw_config, variants=variants)
    # Fail early on a default that does not exist
    config.get_variant()
    return config


def load_typed_config(config_path: Optional[str] = None) -> FullConfig:
    """
    Load and validate the full config as a typed Pydantic model.

    Args:
        config_path (str, optional): Path to the YAML config file. Resolved with
            ``resolve_config_path`` when omitted.

    Returns:
        FullConfig: Typed configuration object.
    """
    return build_config(load_config(resolve_config_path(config_path)))
