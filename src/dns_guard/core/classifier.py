"""Eligibility classifier: decides whether an interface should be rewritten."""

from __future__ import annotations

from collections.abc import Sequence

from dns_guard.core.base import Classification


def classify(current: Sequence[str], desired: Sequence[str]) -> Classification:
    """Classify an interface from its current and desired DNS server lists.

    An interface without any DNS server is left alone: the tool only ever
    replaces existing servers, it never adds them where none are configured.
    Lists are compared as sets, so order and duplicates do not count as drift.

    Addressing mode is deliberately not an input. DHCP detection is logged by
    the caller but does not gate the decision.
    """
    if not current:
        return Classification.SKIP_NO_DNS
    if set(current) == set(desired):
        return Classification.SKIP_ALREADY_MATCHING
    return Classification.NEEDS_UPDATE
