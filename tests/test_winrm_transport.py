"""Tests for WinRmTransport (infra/winrm_transport.py).

pywinrm is replaced by fake ``winrm`` modules in ``sys.modules`` — no
network access.  Coverage:

* Shell lifecycle (connect / run / disconnect, context manager).
* Protocol construction from :class:`ConnectionSettings`.
* Exception mapping (auth → SecurityError, others via classify_fault).
* Missing pywinrm → EnvironmentError.
"""

from __future__ import annotations

import sys
import types
from unittest.mock import MagicMock

import pytest

from psinvoke.core.models import ConnectionSettings
from psinvoke.exceptions import CommunicationError, EnvironmentError, SecurityError
from psinvoke.infra.winrm_transport import WinRmTransport


# ---------------------------------------------------------------------------
# Fake pywinrm
# ---------------------------------------------------------------------------

class WinRMError(Exception):
    pass


class WinRMTransportError(WinRMError):
    pass


class AuthenticationError(WinRMError):
    pass


class InvalidCredentialsError(AuthenticationError):
    pass


@pytest.fixture
def protocol(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Install fake ``winrm`` modules and return the Protocol instance mock."""
    instance = MagicMock(name="Protocol()")
    instance.open_shell.return_value = "shell-1"
    instance.run_command.return_value = "cmd-1"
    instance.get_command_output.return_value = (b"out\r\n", b"", 0)

    exceptions_mod = types.ModuleType("winrm.exceptions")
    setattr(exceptions_mod, "WinRMError", WinRMError)
    setattr(exceptions_mod, "WinRMTransportError", WinRMTransportError)
    setattr(exceptions_mod, "AuthenticationError", AuthenticationError)
    setattr(exceptions_mod, "InvalidCredentialsError", InvalidCredentialsError)

    protocol_mod = types.ModuleType("winrm.protocol")
    protocol_mod.Protocol = MagicMock(return_value=instance)  # type: ignore[attr-defined]

    winrm_mod = types.ModuleType("winrm")
    winrm_mod.exceptions = exceptions_mod  # type: ignore[attr-defined]
    winrm_mod.protocol = protocol_mod  # type: ignore[attr-defined]

    monkeypatch.setitem(sys.modules, "winrm", winrm_mod)
    monkeypatch.setitem(sys.modules, "winrm.exceptions", exceptions_mod)
    monkeypatch.setitem(sys.modules, "winrm.protocol", protocol_mod)
    return instance


def _settings(**overrides: object) -> ConnectionSettings:
    defaults: dict[str, object] = {
        "endpoint": "https://win01:5986/wsman",
        "username": "admin",
        "password": "s3cret",
    }
    defaults.update(overrides)
    return ConnectionSettings(**defaults)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_connect_builds_protocol_from_settings(self, protocol: MagicMock) -> None:
        settings = _settings(transport="kerberos", server_cert_validation="ignore")
        transport = WinRmTransport(settings)
        transport.connect()

        protocol_cls = sys.modules["winrm.protocol"].Protocol  # type: ignore[attr-defined]
        protocol_cls.assert_called_once_with(
            endpoint="https://win01:5986/wsman",
            transport="kerberos",
            username="admin",
            password="s3cret",
            server_cert_validation="ignore",
            operation_timeout_sec=20,
            read_timeout_sec=30,
        )
        protocol.open_shell.assert_called_once_with()
        assert transport.connected

    def test_connect_is_idempotent(self, protocol: MagicMock) -> None:
        transport = WinRmTransport(_settings())
        transport.connect()
        transport.connect()
        protocol.open_shell.assert_called_once()

    def test_context_manager_closes_shell(self, protocol: MagicMock) -> None:
        with WinRmTransport(_settings()) as transport:
            assert transport.connected
        protocol.close_shell.assert_called_once_with("shell-1")
        assert not transport.connected

    def test_disconnect_without_connect_is_noop(self, protocol: MagicMock) -> None:
        WinRmTransport(_settings()).disconnect()
        protocol.close_shell.assert_not_called()


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

class TestRun:
    def test_runs_and_decodes_output(self, protocol: MagicMock) -> None:
        protocol.get_command_output.return_value = (b"caf\xc3\xa9", b"warn", 3)
        transport = WinRmTransport(_settings())

        result = transport.run("powershell", ["-EncodedCommand", "ZABpAHIA"])

        protocol.run_command.assert_called_once_with(
            "shell-1", "powershell", ["-EncodedCommand", "ZABpAHIA"],
        )
        protocol.cleanup_command.assert_called_once_with("shell-1", "cmd-1")
        assert result.status_code == 3
        assert result.std_out == "café"
        assert result.std_err == "warn"

    def test_connects_lazily(self, protocol: MagicMock) -> None:
        transport = WinRmTransport(_settings())
        transport.run("hostname", [])
        protocol.open_shell.assert_called_once()

    def test_invalid_bytes_are_replaced(self, protocol: MagicMock) -> None:
        protocol.get_command_output.return_value = (b"\xff", b"", 0)
        result = WinRmTransport(_settings()).run("hostname", [])
        assert result.std_out == "�"

    def test_cleanup_runs_when_output_fails(self, protocol: MagicMock) -> None:
        protocol.get_command_output.side_effect = WinRMTransportError("bad HTTP response")
        with pytest.raises(CommunicationError):
            WinRmTransport(_settings()).run("hostname", [])
        protocol.cleanup_command.assert_called_once_with("shell-1", "cmd-1")


# ---------------------------------------------------------------------------
# Exception mapping
# ---------------------------------------------------------------------------

class TestExceptionMapping:
    def test_invalid_credentials_is_security_error(self, protocol: MagicMock) -> None:
        protocol.open_shell.side_effect = InvalidCredentialsError(
            "the specified credentials were rejected",
        )

        with pytest.raises(SecurityError) as exc_info:
            WinRmTransport(_settings()).connect()

        assert "credentials were rejected" in str(exc_info.value)
        assert isinstance(exc_info.value.fault, InvalidCredentialsError)

    def test_transport_error_is_communication_error(self, protocol: MagicMock) -> None:
        protocol.run_command.side_effect = WinRMTransportError(
            "Bad HTTP response returned from server. Code 500",
        )

        with pytest.raises(CommunicationError) as exc_info:
            WinRmTransport(_settings()).run("hostname", [])

        assert str(exc_info.value).startswith("Error executing command hostname: ")

    def test_connection_failure_mentions_endpoint(self, protocol: MagicMock) -> None:
        protocol.open_shell.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(CommunicationError, match="win01:5986"):
            WinRmTransport(_settings()).connect()

    def test_authorization_loop_cause_is_security_error(self, protocol: MagicMock) -> None:
        fault = WinRMError("Fault occurred")
        fault.__cause__ = OSError("Authorization loop detected")
        protocol.run_command.side_effect = fault

        with pytest.raises(SecurityError):
            WinRmTransport(_settings()).run("hostname", [])

    def test_failed_connect_leaves_transport_disconnected(self, protocol: MagicMock) -> None:
        protocol.open_shell.side_effect = WinRMTransportError("down")
        transport = WinRmTransport(_settings())
        with pytest.raises(CommunicationError):
            transport.connect()
        assert not transport.connected

    def test_cleanup_failure_does_not_mask_output_error(self, protocol: MagicMock) -> None:
        protocol.get_command_output.side_effect = WinRMTransportError("read timed out")
        protocol.cleanup_command.side_effect = WinRMTransportError("cleanup failed")

        with pytest.raises(CommunicationError, match="read timed out"):
            WinRmTransport(_settings()).run("hostname", [])

    def test_cleanup_failure_after_success_is_reported(self, protocol: MagicMock) -> None:
        protocol.cleanup_command.side_effect = WinRMTransportError("cleanup failed")

        with pytest.raises(CommunicationError, match="cleanup failed"):
            WinRmTransport(_settings()).run("hostname", [])

    def test_close_failure_does_not_mask_error_in_block(self, protocol: MagicMock) -> None:
        protocol.close_shell.side_effect = WinRMTransportError("close failed")

        with pytest.raises(ValueError, match="in block"):
            with WinRmTransport(_settings()):
                raise ValueError("in block")
        protocol.close_shell.assert_called_once_with("shell-1")

    def test_close_failure_on_clean_exit_is_reported(self, protocol: MagicMock) -> None:
        protocol.close_shell.side_effect = WinRMTransportError("close failed")

        with pytest.raises(CommunicationError, match="close failed"):
            with WinRmTransport(_settings()):
                pass


# ---------------------------------------------------------------------------
# Optional dependency
# ---------------------------------------------------------------------------

class TestMissingPywinrm:
    @pytest.fixture(autouse=True)
    def _hide_winrm(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "winrm", None)
        monkeypatch.setitem(sys.modules, "winrm.exceptions", None)
        monkeypatch.setitem(sys.modules, "winrm.protocol", None)

    def test_connect_raises_environment_error(self) -> None:
        with pytest.raises(EnvironmentError, match="pywinrm is not installed"):
            WinRmTransport(_settings()).connect()

    def test_run_raises_environment_error(self) -> None:
        with pytest.raises(EnvironmentError, match="pywinrm is not installed"):
            WinRmTransport(_settings()).run("hostname", [])
