"""Configuration loading: TOML file, environment and provider presets."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, TypedDict

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dns_guard.core.base import DesiredDnsConfig
from dns_guard.core.errors import ConfigError
from dns_guard.core.paths import DATA_DIR

DEFAULT_CONFIG_PATHS = [
    Path.home() / ".config" / "dns-guard" / "config.toml",
    Path("dnsguard.toml"),
]

DEFAULT_SETTLE_DELAY = 5.0


class Provider(TypedDict):
    name: str
    primary: str
    secondary: str


def _load_providers() -> tuple[dict[str, Provider], str]:
    path = DATA_DIR / "providers.yaml"
    with open(path) as f:
        data = yaml.safe_load(f)
    return data["providers"], data["default"]


PROVIDERS, DEFAULT_PROVIDER = _load_providers()


class Settings(BaseModel):
    """Resolved, immutable run configuration."""

    model_config = ConfigDict(frozen=True)

    desired: DesiredDnsConfig
    provider: str | None = None
    settle_delay: float = Field(default=DEFAULT_SETTLE_DELAY, ge=0)
    log_dir: Path | None = None

    @field_validator("log_dir")
    @classmethod
    def _expand_home(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Searches default paths if no explicit path is given.
    Returns an empty dict if no config file is found.
    """
    paths = [path] if path is not None else DEFAULT_CONFIG_PATHS

    for p in paths:
        if p.exists():
            try:
                with open(p, "rb") as f:
                    return tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"{p}: {e}") from e

    return {}


def provider_config(name: str) -> DesiredDnsConfig:
    """Look up a named preset such as 'quad9'."""
    preset = PROVIDERS.get(name.lower())
    if preset is None:
        known = ", ".join(sorted(PROVIDERS))
        raise ConfigError(f"unknown provider {name!r} (known: {known})")
    return DesiredDnsConfig(primary=preset["primary"], secondary=preset["secondary"])


def _desired_from(
    source: str,
    provider: str | None,
    primary: str | None,
    secondary: str | None,
) -> tuple[DesiredDnsConfig, str | None] | None:
    """Resolve one precedence level. An explicit pair beats a provider name."""
    for field, value in (("provider", provider), ("primary", primary), ("secondary", secondary)):
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"{source}: {field} must be a string, got {value!r}")

    if primary or secondary:
        if not (primary and secondary):
            raise ConfigError(f"{source}: primary and secondary must be given together")
        try:
            return DesiredDnsConfig(primary=primary, secondary=secondary), None
        except ValidationError as e:
            raise ConfigError(f"{source}: {e.errors()[0]['msg']}") from e
    if provider:
        return provider_config(provider), provider.lower()
    return None


def resolve_settings(
    provider: str | None = None,
    primary: str | None = None,
    secondary: str | None = None,
    settle_delay: float | None = None,
    log_dir: Path | None = None,
    config_path: Path | None = None,
) -> Settings:
    """Build Settings: explicit arguments → DNSGUARD_* env vars → config.toml → default preset."""
    config = load_config(config_path)

    levels = [
        ("command line", provider, primary, secondary),
        (
            "environment",
            os.environ.get("DNSGUARD_PROVIDER"),
            os.environ.get("DNSGUARD_PRIMARY"),
            os.environ.get("DNSGUARD_SECONDARY"),
        ),
        ("config file", config.get("provider"), config.get("primary"), config.get("secondary")),
        ("default", DEFAULT_PROVIDER, None, None),
    ]
    for source, prov, prim, sec in levels:
        resolved = _desired_from(source, prov, prim, sec)
        if resolved is not None:
            desired, provider_name = resolved
            break

    # Raw env/TOML values; Settings validates their types.
    raw_log_dir: Any = log_dir
    if raw_log_dir is None:
        raw_log_dir = os.environ.get("DNSGUARD_LOG_DIR") or config.get("log_dir")

    raw_delay: Any = settle_delay
    if raw_delay is None:
        raw_delay = config.get("settle_delay", DEFAULT_SETTLE_DELAY)

    try:
        return Settings(
            desired=desired,
            provider=provider_name,
            settle_delay=raw_delay,
            log_dir=raw_log_dir or None,
        )
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(loc) for loc in error["loc"])
        raise ConfigError(f"{field}: {error['msg']}") from e
