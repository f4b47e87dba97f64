"""Application configuration helpers for Torrent Drop."""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_LIST_FIELDS = ("id", "name", "percentDone", "eta", "totalSize", "status")


class ConfigError(RuntimeError):
  """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class TransmissionConfig:
  """Configuration required to talk to the Transmission daemon."""

  host: str = "localhost"
  port: int = 9091
  base_path: str = "/transmission/"
  scheme: str = "http"
  username: Optional[str] = None
  password: Optional[str] = None
  timeout: Optional[float] = None


@dataclass(frozen=True)
class AppConfig:
  """Top-level configuration for the Flask application."""

  transmission: TransmissionConfig
  secret_key: str
  list_fields: Tuple[str, ...] = DEFAULT_LIST_FIELDS
  log_level: str = "INFO"


def _env_str(name: str, default: str) -> str:
  return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
  raw = os.environ.get(name, "").strip()
  if not raw:
    return default
  try:
    return int(raw)
  except ValueError as exc:
    raise ConfigError(f"{name} must be an integer, got {raw!r}.") from exc


def _env_float(name: str) -> Optional[float]:
  raw = os.environ.get(name, "").strip()
  if not raw:
    return None
  try:
    value = float(raw)
  except ValueError as exc:
    raise ConfigError(f"{name} must be a number, got {raw!r}.") from exc
  if value <= 0:
    raise ConfigError(f"{name} must be positive, got {raw!r}.")
  return value


def _normalize_base_path(path: str) -> str:
  if not path.startswith("/"):
    path = "/" + path
  if not path.endswith("/"):
    path += "/"
  return path


def load_config() -> AppConfig:
  """Load configuration from environment variables."""

  scheme = _env_str("TR_SCHEME", "http").lower()
  if scheme not in {"http", "https"}:
    raise ConfigError(f"TR_SCHEME must be 'http' or 'https', got {scheme!r}.")

  username = os.environ.get("TR_USER", "").strip() or None
  password = os.environ.get("TR_PASS", "").strip() or None
  if bool(username) != bool(password):
    missing = "TR_PASS" if username else "TR_USER"
    raise ConfigError(f"Transmission authentication requested but {missing} is not set.")

  transmission = TransmissionConfig(
    host=_env_str("TR_HOST", "localhost"),
    port=_env_int("TR_PORT", 9091),
    base_path=_normalize_base_path(_env_str("TR_BASE_PATH", "/transmission/")),
    scheme=scheme,
    username=username,
    password=password,
    timeout=_env_float("TR_TIMEOUT"),
  )

  raw_fields = os.environ.get("TR_LIST_FIELDS", "")
  list_fields = tuple(name.strip() for name in raw_fields.split(",") if name.strip())

  return AppConfig(
    transmission=transmission,
    secret_key=os.environ.get("SECRET_KEY") or secrets.token_hex(16),
    list_fields=list_fields or DEFAULT_LIST_FIELDS,
    log_level=_env_str("LOG_LEVEL", "INFO").upper(),
  )


__all__ = ["AppConfig", "ConfigError", "DEFAULT_LIST_FIELDS", "TransmissionConfig", "load_config"]
