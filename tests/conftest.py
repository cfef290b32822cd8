"""Shared test fixtures."""

from __future__ import annotations

import logging

import pytest

from dns_guard.core.base import (
    AddressingMode,
    DesiredDnsConfig,
    InterfaceSnapshot,
    SetResult,
    Strategy,
)
from dns_guard.core.config import Settings
from dns_guard.core.strategies import DnsSetter

QUAD9 = ["9.9.9.9", "149.112.112.112"]


class FakeSetter(DnsSetter):
    """A setter that records calls and succeeds, fails or raises on demand."""

    display_name = "fake"

    def __init__(self, strategy: Strategy, succeed: bool = True, raises: Exception | None = None,
                 fail_for: set[int] | None = None) -> None:
        self.strategy = strategy
        self.succeed = succeed
        self.raises = raises
        self.fail_for = fail_for or set()
        self.calls: list[int] = []

    def set_dns(self, interface, desired):
        self.calls.append(interface.index)
        if self.raises is not None:
            raise self.raises
        ok = self.succeed and interface.index not in self.fail_for
        return SetResult(strategy=self.strategy, success=ok, message="ok" if ok else "nope")


def make_interface(index: int, dns: list[str], name: str | None = None,
                   mode: AddressingMode = AddressingMode.STATIC) -> InterfaceSnapshot:
    return InterfaceSnapshot(
        index=index,
        name=name or f"Ethernet {index}",
        addressing_mode=mode,
        dns_servers=tuple(dns),
    )


@pytest.fixture
def desired() -> DesiredDnsConfig:
    return DesiredDnsConfig(primary=QUAD9[0], secondary=QUAD9[1])


@pytest.fixture
def settings(desired) -> Settings:
    return Settings(desired=desired, settle_delay=3)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep real config files and DNSGUARD_* variables out of tests."""
    for var in ("DNSGUARD_PROVIDER", "DNSGUARD_PRIMARY", "DNSGUARD_SECONDARY", "DNSGUARD_LOG_DIR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("dns_guard.core.config.DEFAULT_CONFIG_PATHS", [tmp_path / "absent.toml"])


@pytest.fixture
def iface():
    """Factory for InterfaceSnapshot objects."""
    return make_interface


@pytest.fixture
def fake_setter():
    """Factory for FakeSetter objects."""
    return FakeSetter


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo setup_logging between tests so caplog keeps seeing records."""
    yield
    logger = logging.getLogger("dns_guard")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
