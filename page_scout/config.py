# === FILE: page_scout/config.py ===
"""
Loading and validation of the PageScout crawler configuration.

Values are layered once at start-up: model defaults, then an optional
YAML/JSON file, then environment variables, then explicit overrides (CLI).
Pydantic describes the schema and performs the checks.
"""
from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)

from page_scout.errors import ConfigurationError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

#: environment variable -> config field
ENV_VARS: Dict[str, str] = {
    "BASE_URL": "base_url",
    "MAX_PAGES": "max_pages",
    "OUTPUT_DIR": "output_dir",
    "DELAY_MS": "delay_ms",
    "HTTP_TIMEOUT": "http_timeout_ms",
    "RETRIES": "retries",
}
#: checked in order, the first non-empty one wins
PROXY_ENV_VARS: Tuple[str, ...] = ("PROXY_URL", "HTTP_PROXY", "HTTPS_PROXY")

_PROXY_CREDENTIALS_RE = re.compile(r"//.*@")


class CrawlerConfig(BaseModel):
    """Configuration for one crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    base_url: HttpUrl = Field("https://www.carzone.ie", description="Root URL of the target site.")
    max_pages: int = Field(200, ge=1, description="Page budget for one run.")
    output_dir: Path = Field(Path("/data"), description="Directory receiving page-NNN.html files.")
    delay_ms: int = Field(1000, ge=0, description="Pause between successful fetches (ms).")
    http_timeout_ms: int = Field(15000, ge=1000, description="Timeout of one HTTP request (ms).")
    retries: int = Field(3, ge=0, description="Retries after the first attempt on network errors and 5xx.")
    backoff_ms: int = Field(100, ge=0, description="Base delay of the exponential retry backoff (ms).")
    proxy_url: Optional[str] = Field(None, description="HTTP proxy, credentials may be embedded.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="User-Agent header.")

    listing_path: str = Field("/cars", min_length=1, description="Path of the seed listing page.")
    page_params: Tuple[str, ...] = Field(("page", "p"), min_length=1, description="Page-number query parameters.")
    category_markers: Tuple[str, ...] = Field(
        ("search", "/used-cars", "/new-cars"), description="Href fragments of category and search links."
    )
    next_synonyms: Tuple[str, ...] = Field(("suivant",), description="Extra words marking a 'next page' control.")
    follow_links: bool = Field(False, description="Also enqueue links found on crawled pages.")

    @field_validator("proxy_url", mode="before")
    def _blank_proxy_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("proxy_url")
    def _check_proxy_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            parts = urlsplit(v)
            host, _ = parts.hostname, parts.port
        except ValueError as exc:
            raise ValueError(f"Invalid proxy URL: {mask_proxy(v)}") from exc
        if parts.scheme not in ("http", "https") or not host:
            raise ValueError(f"Invalid proxy URL: {mask_proxy(v)}")
        return v

    @field_validator("listing_path")
    def _leading_slash(cls, v: str) -> str:
        return v if v.startswith("/") else "/" + v

    # Convenience accessors -------------------------------------------------
    @property
    def site_root(self) -> str:
        """Base URL without the trailing slash pydantic appends to bare hosts."""
        return str(self.base_url).rstrip("/")

    @property
    def listing_url(self) -> str:
        return self.site_root + self.listing_path

    @property
    def timeout_seconds(self) -> float:
        return self.http_timeout_ms / 1000

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000

    @property
    def masked_proxy(self) -> Optional[str]:
        return mask_proxy(self.proxy_url) if self.proxy_url else None


def mask_proxy(url: str) -> str:
    """Hide the credentials of a proxy URL for display."""
    return _PROXY_CREDENTIALS_RE.sub("//***:***@", url)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def read_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Read a YAML or JSON config file into a plain mapping."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise ConfigurationError(f"Config file not found: {path_obj}")

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ConfigurationError(f"Unsupported config format: {suffix}")


def env_values(env: Mapping[str, str]) -> dict[str, Any]:
    """Pick the recognised, non-empty variables out of *env*."""
    values: dict[str, Any] = {}
    for var, field in ENV_VARS.items():
        raw = env.get(var, "").strip()
        if raw:
            values[field] = raw
    for var in PROXY_ENV_VARS:
        raw = env.get(var, "").strip()
        if raw:
            values["proxy_url"] = raw
            break
    return values


def load_config(
    path: Union[str, Path, None] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> CrawlerConfig:
    """
    Build and validate a :class:`CrawlerConfig`.

    *env* defaults to :data:`os.environ`. ``None`` values in *overrides* are
    ignored. Any problem is reported as :class:`ConfigurationError`.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data.update(read_config_file(path))
    data.update(env_values(os.environ if env is None else env))
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return CrawlerConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


__all__ = ["CrawlerConfig", "ConfigurationError", "load_config", "mask_proxy", "read_config_file", "env_values"]
