"""Shared pytest fixtures and configuration for the psinvoke test suite.

Guidelines
----------
* No network access and no real WinRM endpoint in any test.
* pywinrm and subprocess must be mocked at the infra boundary.
* Core tests must be pure — no side effects.
"""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from psinvoke.core.models import CommandResult


@pytest.fixture
def make_transport() -> Callable[..., MagicMock]:
    """Factory for a mock :class:`RemoteShellTransport`.

    ``make_transport(result)`` returns *result* from ``run``;
    ``make_transport(exc)`` makes ``run`` raise *exc*.
    """

    def _factory(outcome: CommandResult | BaseException | None = None) -> MagicMock:
        transport = MagicMock()
        if isinstance(outcome, BaseException):
            transport.run.side_effect = outcome
        else:
            transport.run.return_value = outcome or CommandResult(0, "", "")
        return transport

    return _factory
