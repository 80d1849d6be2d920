"""
Fixtures for CLI tests.

Commands run in tmp_path with an API key and specs directory in the
environment; every ClickUpClient they build talks to the fake server.
"""

from pathlib import Path
from typing import Any

import httpx
import pytest

from spectrack.core.clickup import ClickUpClient


@pytest.fixture
def cli_env(tmp_path: Path, specs_root: Path, clickup_server, monkeypatch: pytest.MonkeyPatch):
    """Wire the CLI to the fake ClickUp server and return the server."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CLICKUP_API_KEY", "pk_test")
    monkeypatch.setenv("SPECTRACK_SPECS_DIR", str(specs_root))

    def factory(api_key: str, **kwargs: Any) -> ClickUpClient:
        kwargs["min_interval"] = 0.0
        return ClickUpClient(
            api_key,
            transport=httpx.MockTransport(clickup_server),
            sleep=lambda seconds: None,
            **kwargs,
        )

    monkeypatch.setattr("spectrack.cli.common.ClickUpClient", factory)
    return clickup_server
