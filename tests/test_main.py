import pytest
from unittest.mock import patch, MagicMock

import main
from src.config.api_models import PredictionResponse
from src.dashboard.request_state import RequestKind, RequestStateStore
from tests.mocks.async_api_mocks import get_prediction_payload


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep the CLI from attaching handlers to the package logger during tests."""
    with patch("main.configure_logging"):
        yield


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "dashboard.yaml"
    path.write_text("api:\n  base_url: https://backend.test\ndashboard:\n  default_variant: yahoo\n")
    return path


def make_store(prediction_ok=True):
    store = RequestStateStore()
    store.start(RequestKind.PREDICTION)
    if prediction_ok:
        store.succeed(RequestKind.PREDICTION, PredictionResponse.model_validate(get_prediction_payload()))
    else:
        store.fail(RequestKind.PREDICTION, "Invalid symbol")
    return store


def test_validate_config_path_file_not_found(tmp_path):
    """Ensure FileNotFoundError is raised when config file does not exist."""
    non_existent = tmp_path / "missing.yaml"
    with pytest.raises(FileNotFoundError):
        main.validate_config_path(str(non_existent))


def test_parse_overrides():
    assert main.parse_overrides(["symbol=ETH-USD", " period = 90d "]) == {"symbol": "ETH-USD", "period": "90d"}
    assert main.parse_overrides(["api_key=a=b"]) == {"api_key": "a=b"}
    assert main.parse_overrides(None) == {}


def test_parse_overrides_rejects_missing_equals():
    with pytest.raises(ValueError):
        main.parse_overrides(["symbol"])


@patch("main.subprocess.run")
def test_main_dashboard_command(mock_run, config_file):
    """Test that 'dashboard' launches streamlit with the config in the environment."""
    mock_run.return_value = MagicMock(returncode=0)

    assert main.main(["dashboard", "--config", str(config_file), "--port", "9000"]) == 0

    cmd = mock_run.call_args.args[0]
    assert cmd[1:4] == ["-m", "streamlit", "run"]
    assert cmd[-2:] == ["--server.port", "9000"]
    env = mock_run.call_args.kwargs["env"]
    assert env[main.CONFIG_ENV_VAR] == str(config_file)


def test_main_variants_command(config_file, capsys):
    assert main.main(["variants", "--config", str(config_file)]) == 0

    out = capsys.readouterr().out
    assert "* yahoo" in out
    assert "alpha_vantage" in out
    assert "combined" in out


@patch("main.run_prediction")
def test_main_predict_command(mock_run_prediction, config_file, capsys):
    """Test 'predict' passes the chosen variant and field overrides through."""
    mock_run_prediction.return_value = make_store()

    code = main.main(["predict", "--config", str(config_file), "--set", "symbol=ETH-USD"])

    assert code == 0
    _, variant, overrides = mock_run_prediction.call_args.args
    assert variant.name == "yahoo"
    assert overrides == {"symbol": "ETH-USD"}
    out = capsys.readouterr().out
    assert "Direction:     ↑ UP" in out
    assert "$96,250.12" in out


@patch("main.run_prediction")
def test_main_predict_failure_exit_code(mock_run_prediction, config_file, capsys):
    mock_run_prediction.return_value = make_store(prediction_ok=False)

    code = main.main(["predict", "--config", str(config_file), "--variant", "alpha_vantage"])

    assert code == 1
    assert "Error: Invalid symbol" in capsys.readouterr().out
    assert mock_run_prediction.call_args.args[1].name == "alpha_vantage"


def test_main_predict_unknown_variant(config_file):
    with pytest.raises(KeyError):
        main.main(["predict", "--config", str(config_file), "--variant", "binance"])


def test_main_missing_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        main.main(["variants", "--config", str(tmp_path / "missing.yaml")])


def test_format_summary_reports_secondary_errors():
    store = make_store()
    store.start(RequestKind.NEWS)
    store.fail(RequestKind.NEWS, "Failed to fetch news")

    lines = main.format_summary(store)

    assert "News error: Failed to fetch news" in lines
    assert any(line.startswith("  2025-02-25") for line in lines)


def test_main_invalid_command():
    """Test that argparse exits on invalid command."""
    with pytest.raises(SystemExit):
        main.main(["invalid"])
