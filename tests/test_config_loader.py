from pathlib import Path

import pytest

from transnet.config.loader import ConfigLoadError, ConfigLoader, load_config
from transnet.config.models import LogFormat, LogLevel

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config"

EXCHANGES_YAML = """
exchanges:
  Binance:
    display_name: Binance
    rest:
      base: https://api.binance.com
advertised:
  - name: binance
    display_name: Binance
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "JWT_SECRET",
        "PORTAL_HOST",
        "PORTAL_PORT",
        "LOG_LEVEL",
        "DATABASE_URL",
        "CONFIG_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "exchanges.yaml").write_text(EXCHANGES_YAML)
    return tmp_path


def test_repository_config_loads():
    config = load_config(REPO_CONFIG)

    assert config.get_enabled_exchanges() == ["binance", "mexc"]
    assert config.get_exchange("BINANCE").get_rest_url(testnet=True) == (
        "https://testnet.binance.vision"
    )
    assert config.get_exchange("mexc").get_rest_url(testnet=True) == "https://api.mexc.com"
    assert config.display_name("gateio") == "Gate.io"
    assert config.portal.balances_page_size == 50


def test_portal_yaml_is_optional(config_dir):
    config = ConfigLoader(config_dir).load()

    assert list(config.exchanges) == ["binance"]
    assert config.server.port == 3000
    assert config.logging.format == LogFormat.JSON
    assert config.cleanup.enabled is True


def test_environment_overrides(config_dir, monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "from-env")
    monkeypatch.setenv("PORTAL_PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/x")

    config = ConfigLoader(config_dir).load()

    assert config.security.jwt_secret == "from-env"
    assert config.server.port == 8080
    assert config.logging.level == LogLevel.DEBUG
    assert config.postgres.url == "postgresql://u:p@db:5432/x"


def test_config_path_env(config_dir, monkeypatch):
    monkeypatch.setenv("CONFIG_PATH", str(config_dir))
    assert list(load_config().exchanges) == ["binance"]


def test_missing_directory(tmp_path):
    with pytest.raises(ConfigLoadError, match="not found"):
        ConfigLoader(tmp_path / "missing")


def test_missing_exchanges_file(tmp_path):
    with pytest.raises(ConfigLoadError, match="exchanges.yaml"):
        ConfigLoader(tmp_path).load()


def test_no_exchanges(tmp_path):
    (tmp_path / "exchanges.yaml").write_text("exchanges: {}\nadvertised: []\n")
    with pytest.raises(ConfigLoadError, match="No exchanges configured"):
        ConfigLoader(tmp_path).load()


def test_invalid_yaml(tmp_path):
    (tmp_path / "exchanges.yaml").write_text("exchanges: [unclosed\n")
    with pytest.raises(ConfigLoadError, match="Invalid YAML"):
        ConfigLoader(tmp_path).load()


def test_invalid_portal_section(config_dir):
    (config_dir / "portal.yaml").write_text("server:\n  port: 0\n")
    with pytest.raises(ConfigLoadError, match="Invalid portal configuration"):
        ConfigLoader(config_dir).load()
