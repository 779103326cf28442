from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from .errors import ConfigError
from .logstore import LEVELS

DEFAULT_VERSION = "2018-05-01"
DEFAULT_CONFIG_PATH = Path.home() / ".document-translator-cli.json"
ENV_PREFIX = "DOCTRANS_"


@dataclass(frozen=True)
class ServiceConfig:
    version: str = DEFAULT_VERSION
    api_key: str = ""
    url: str = ""
    retries: int = 0
    retry_backoff: float = 1.0
    log_dir: Path | None = None
    log_level: str = "info"

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not self.version:
            errors.append("Service version is required.")
        if not self.api_key:
            errors.append(f"API key is required (set {ENV_PREFIX}API_KEY or run 'configure').")
        if not self.url:
            errors.append(f"Service URL is required (set {ENV_PREFIX}URL or run 'configure').")
        elif not self.url.startswith(("http://", "https://")):
            errors.append("Service URL must start with http:// or https://.")
        if self.retries < 0:
            errors.append("Retries must be zero or more.")
        if self.retry_backoff < 0:
            errors.append("Retry backoff must be zero or more seconds.")
        if self.log_level not in LEVELS:
            errors.append(f"Log level must be one of: {', '.join(LEVELS)}.")
        return errors

    def require_service(self) -> "ServiceConfig":
        errors = self.validate()
        if errors:
            raise ConfigError(errors[0])
        return self

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "version": self.version,
            "api_key": self.api_key,
            "url": self.url,
            "retries": self.retries,
            "retry_backoff": self.retry_backoff,
            "log_level": self.log_level,
        }
        if self.log_dir is not None:
            out["log_dir"] = str(self.log_dir)
        return out


def _read_file(path: Path) -> dict[str, object]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"cannot parse config file {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")
    return raw


def _as_int(name: str, value: object) -> int:
    try:
        return int(str(value))
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc


def _as_float(name: str, value: object) -> float:
    try:
        return float(str(value))
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}") from exc


def load_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> ServiceConfig:
    """Build the process-wide configuration.

    Values come from the JSON config file first, then ``DOCTRANS_*``
    environment variables override them. A missing file is not an error;
    whether the result is usable is decided later by ``require_service``.
    """
    env = os.environ if env is None else env
    raw = _read_file(path or DEFAULT_CONFIG_PATH)

    overrides = {
        "version": env.get(f"{ENV_PREFIX}VERSION"),
        "api_key": env.get(f"{ENV_PREFIX}API_KEY"),
        "url": env.get(f"{ENV_PREFIX}URL"),
        "retries": env.get(f"{ENV_PREFIX}RETRIES"),
        "retry_backoff": env.get(f"{ENV_PREFIX}RETRY_BACKOFF"),
        "log_dir": env.get(f"{ENV_PREFIX}LOG_DIR"),
        "log_level": env.get(f"{ENV_PREFIX}LOG_LEVEL"),
    }
    for key, value in overrides.items():
        if value:
            raw[key] = value

    log_dir = raw.get("log_dir")
    return ServiceConfig(
        version=str(raw.get("version") or DEFAULT_VERSION),
        api_key=str(raw.get("api_key") or ""),
        url=str(raw.get("url") or "").rstrip("/"),
        retries=_as_int("retries", raw.get("retries", 0)),
        retry_backoff=_as_float("retry_backoff", raw.get("retry_backoff", 1.0)),
        log_dir=Path(str(log_dir)).expanduser() if log_dir else None,
        log_level=str(raw.get("log_level") or "info").lower(),
    )


def save_config(config: ServiceConfig, path: Path | None = None) -> Path:
    target = path or DEFAULT_CONFIG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    # Holds the API key: created owner-only, pre-existing files are tightened too.
    fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    os.fchmod(fd, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        json.dump(config.to_json(), fh, indent=2, sort_keys=True)
        fh.write("\n")
    return target


def with_credentials(config: ServiceConfig, version: str, api_key: str, url: str) -> ServiceConfig:
    return replace(config, version=version, api_key=api_key, url=url.rstrip("/"))
