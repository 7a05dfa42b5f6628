import pytest

from src.config.dashboard_variants import BUILTIN_VARIANTS
from src.dashboard.form_state import FormState


@pytest.fixture
def yahoo_form():
    return FormState(BUILTIN_VARIANTS["yahoo"])


def test_defaults_come_from_variant(yahoo_form):
    assert yahoo_form.as_dict() == {"symbol": "BTC-USD", "timeframe": "1d", "period": "30d"}


def test_initial_values_override_defaults():
    form = FormState(BUILTIN_VARIANTS["alpha_vantage"], {"base_currency": "ETH", "api_key": "demo"})
    assert form.get("base_currency") == "ETH"
    assert form.get("api_key") == "demo"
    assert form.get("timeframe") == "daily"


def test_unknown_field_raises(yahoo_form):
    with pytest.raises(KeyError):
        yahoo_form.set("api_key", "demo")


def test_none_becomes_empty_string(yahoo_form):
    yahoo_form.set("period", None)
    assert yahoo_form.get("period") == ""


def test_freeze_is_an_isolated_read_only_snapshot(yahoo_form):
    snapshot = yahoo_form.freeze()
    yahoo_form.set("symbol", "ETH-USD")

    assert snapshot["symbol"] == "BTC-USD"
    with pytest.raises(TypeError):
        snapshot["symbol"] = "SOL-USD"


def test_repr_masks_api_key():
    form = FormState(BUILTIN_VARIANTS["combined"], {"api_key": "secret"})
    assert "secret" not in repr(form)
