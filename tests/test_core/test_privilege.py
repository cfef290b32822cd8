"""Tests for the elevation check."""

from unittest.mock import patch

from dns_guard.core.privilege import is_elevated


def test_root_is_elevated():
    with (
        patch("dns_guard.core.privilege.platform.system", return_value="Linux"),
        patch("dns_guard.core.privilege.os.geteuid", return_value=0, create=True),
    ):
        assert is_elevated() is True


def test_regular_user_is_not_elevated():
    with (
        patch("dns_guard.core.privilege.platform.system", return_value="Linux"),
        patch("dns_guard.core.privilege.os.geteuid", return_value=1000, create=True),
    ):
        assert is_elevated() is False


def test_windows_without_shell32_is_not_elevated():
    with (
        patch("dns_guard.core.privilege.platform.system", return_value="Windows"),
        patch("dns_guard.core.privilege.ctypes", spec=[]),
    ):
        assert is_elevated() is False
