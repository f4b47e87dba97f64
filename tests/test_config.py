import pytest

from config import DEFAULT_LIST_FIELDS, ConfigError, load_config

_VARS = (
  "TR_HOST",
  "TR_PORT",
  "TR_BASE_PATH",
  "TR_SCHEME",
  "TR_USER",
  "TR_PASS",
  "TR_TIMEOUT",
  "TR_LIST_FIELDS",
  "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
  for name in _VARS:
    monkeypatch.delenv(name, raising=False)


def test_load_config_defaults():
  config = load_config()

  assert config.transmission.host == "localhost"
  assert config.transmission.port == 9091
  assert config.transmission.base_path == "/transmission/"
  assert config.transmission.scheme == "http"
  assert config.transmission.timeout is None
  assert config.list_fields == DEFAULT_LIST_FIELDS
  assert config.secret_key


def test_load_config_normalizes_base_path(monkeypatch):
  monkeypatch.setenv("TR_BASE_PATH", "custom")

  assert load_config().transmission.base_path == "/custom/"


def test_load_config_rejects_bad_port(monkeypatch):
  monkeypatch.setenv("TR_PORT", "not-a-port")

  with pytest.raises(ConfigError) as excinfo:
    load_config()

  assert "TR_PORT" in str(excinfo.value)


def test_load_config_rejects_bad_timeout(monkeypatch):
  monkeypatch.setenv("TR_TIMEOUT", "soon")

  with pytest.raises(ConfigError):
    load_config()


def test_load_config_rejects_unknown_scheme(monkeypatch):
  monkeypatch.setenv("TR_SCHEME", "ftp")

  with pytest.raises(ConfigError):
    load_config()


def test_load_config_requires_both_credentials(monkeypatch):
  monkeypatch.setenv("TR_USER", "admin")

  with pytest.raises(ConfigError) as excinfo:
    load_config()

  assert "TR_PASS" in str(excinfo.value)


def test_load_config_reads_list_fields(monkeypatch):
  monkeypatch.setenv("TR_LIST_FIELDS", "id, name ,labels")
  monkeypatch.setenv("TR_TIMEOUT", "2.5")

  config = load_config()

  assert config.list_fields == ("id", "name", "labels")
  assert config.transmission.timeout == 2.5
