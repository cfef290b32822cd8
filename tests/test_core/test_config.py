"""Tests for settings resolution and provider presets."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from dns_guard.core.base import DesiredDnsConfig
from dns_guard.core.config import (
    DEFAULT_PROVIDER,
    DEFAULT_SETTLE_DELAY,
    PROVIDERS,
    load_config,
    provider_config,
    resolve_settings,
)
from dns_guard.core.errors import ConfigError


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(body)
    return path


def test_presets_loaded():
    assert DEFAULT_PROVIDER == "quad9"
    assert {"quad9", "cloudflare", "mullvad"} <= set(PROVIDERS)


def test_provider_config():
    desired = provider_config("Cloudflare")
    assert desired.servers == ["1.1.1.1", "1.0.0.1"]


def test_unknown_provider():
    with pytest.raises(ConfigError, match="unknown provider"):
        provider_config("nope")


def test_defaults():
    settings = resolve_settings()
    assert settings.desired.servers == ["9.9.9.9", "149.112.112.112"]
    assert settings.provider == "quad9"
    assert settings.settle_delay == DEFAULT_SETTLE_DELAY
    assert settings.log_dir is None


def test_explicit_pair_beats_provider():
    settings = resolve_settings(provider="cloudflare", primary="10.0.0.1", secondary="10.0.0.2")
    assert settings.desired.servers == ["10.0.0.1", "10.0.0.2"]
    assert settings.provider is None


def test_half_pair_rejected():
    with pytest.raises(ConfigError, match="together"):
        resolve_settings(primary="10.0.0.1")


def test_invalid_address_rejected():
    with pytest.raises(ConfigError):
        resolve_settings(primary="10.0.0.1", secondary="dns.example")


def test_env_overrides_config_file(tmp_path, monkeypatch):
    path = _write_config(tmp_path, 'provider = "mullvad"\n')
    monkeypatch.setenv("DNSGUARD_PROVIDER", "cloudflare")

    settings = resolve_settings(config_path=path)

    assert settings.provider == "cloudflare"


def test_config_file_values(tmp_path):
    path = _write_config(
        tmp_path,
        'primary = "10.1.1.1"\nsecondary = "10.1.1.2"\nsettle_delay = 0.5\nlog_dir = "/var/log/dnsguard"\n',
    )

    settings = resolve_settings(config_path=path)

    assert settings.desired.primary == "10.1.1.1"
    assert settings.settle_delay == 0.5
    assert settings.log_dir == Path("/var/log/dnsguard")


def test_cli_overrides_everything(tmp_path, monkeypatch):
    path = _write_config(tmp_path, 'provider = "mullvad"\nsettle_delay = 9\n')
    monkeypatch.setenv("DNSGUARD_PROVIDER", "cloudflare")

    settings = resolve_settings(provider="quad9", settle_delay=1, config_path=path)

    assert settings.provider == "quad9"
    assert settings.settle_delay == 1


def test_negative_delay_rejected():
    with pytest.raises(ConfigError):
        resolve_settings(settle_delay=-1)


def test_load_config_missing_file(tmp_path):
    assert load_config(tmp_path / "missing.toml") == {}


def test_load_config_invalid_toml(tmp_path):
    path = _write_config(tmp_path, "provider = \n")
    with pytest.raises(ConfigError):
        load_config(path)


def test_desired_config_is_frozen():
    desired = DesiredDnsConfig(primary="9.9.9.9", secondary="149.112.112.112")
    with pytest.raises(ValidationError):
        desired.primary = "8.8.8.8"


@pytest.mark.parametrize(
    "body",
    [
        'settle_delay = "fast"\n',
        "provider = 5\n",
        "log_dir = 3\n",
        'primary = 1\nsecondary = "9.9.9.9"\n',
    ],
)
def test_badly_typed_config_values(tmp_path, body):
    path = _write_config(tmp_path, body)
    with pytest.raises(ConfigError):
        resolve_settings(config_path=path)


def test_numeric_string_delay_accepted(tmp_path):
    path = _write_config(tmp_path, 'settle_delay = "2.5"\n')
    assert resolve_settings(config_path=path).settle_delay == 2.5


def test_log_dir_home_expanded(monkeypatch):
    monkeypatch.setenv("DNSGUARD_LOG_DIR", "~/dnsguard-logs")
    settings = resolve_settings()
    assert settings.log_dir == Path.home() / "dnsguard-logs"
