"""Core data model: snapshots, classifications and apply outcomes."""

from __future__ import annotations

import ipaddress
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

STATUS_UP = "Up"


class AddressingMode(StrEnum):
    DYNAMIC = "dynamic"
    STATIC = "static"
    UNKNOWN = "unknown"


class Classification(StrEnum):
    SKIP_NO_DNS = "skip_no_dns"
    SKIP_ALREADY_MATCHING = "skip_already_matching"
    NEEDS_UPDATE = "needs_update"


class Strategy(StrEnum):
    NATIVE = "native"
    SHELL_UTILITY = "shell_utility"
    LEGACY_MANAGEMENT = "legacy_management"


class DesiredDnsConfig(BaseModel):
    """The DNS server pair to enforce. Primary is always listed first."""

    model_config = ConfigDict(frozen=True)

    primary: str
    secondary: str

    @field_validator("primary", "secondary")
    @classmethod
    def _ipv4_literal(cls, value: str) -> str:
        value = value.strip()
        try:
            ipaddress.IPv4Address(value)
        except ValueError as e:
            raise ValueError(f"not an IPv4 address: {value!r}") from e
        return value

    @property
    def servers(self) -> list[str]:
        return [self.primary, self.secondary]

    def __str__(self) -> str:
        return f"{self.primary}, {self.secondary}"


class InterfaceSnapshot(BaseModel):
    """A point-in-time read of one adapter. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    index: int
    name: str
    status: str = STATUS_UP
    addressing_mode: AddressingMode = AddressingMode.UNKNOWN
    dns_servers: tuple[str, ...] = ()


class SetResult(BaseModel):
    """What a single DnsSetter reported for one attempt."""

    strategy: Strategy
    success: bool
    message: str = ""


class ApplyOutcome(BaseModel):
    """Result of running the fallback chain against one interface."""

    interface_index: int
    interface_name: str
    strategy: Strategy | None = None  # last strategy attempted
    success: bool
    message: str = ""
    attempts: list[SetResult] = Field(default_factory=list)


class InterfaceResult(BaseModel):
    snapshot: InterfaceSnapshot
    classification: Classification
    outcome: ApplyOutcome | None = None


class RunReport(BaseModel):
    """Everything one run observed and did, assembled at the end."""

    hostname: str
    started_at: datetime
    finished_at: datetime | None = None
    elevated: bool
    dry_run: bool = False
    desired: DesiredDnsConfig
    results: list[InterfaceResult] = Field(default_factory=list)
    final_state: list[InterfaceSnapshot] = Field(default_factory=list)
    verification_error: str | None = None

    @property
    def updated(self) -> list[InterfaceResult]:
        return [r for r in self.results if r.outcome is not None and r.outcome.success]

    @property
    def failed(self) -> list[InterfaceResult]:
        return [r for r in self.results if r.outcome is not None and not r.outcome.success]
