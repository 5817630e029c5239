"""Shared test fixtures for diffcache."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest

from diffcache.cache import codec


@pytest.fixture
def keypair() -> tuple[str, str]:
    """A fresh (public, private) sealing keypair."""
    return codec.generate_keypair()


@pytest.fixture
def public_key_file(tmp_path: Path, keypair: tuple[str, str]) -> Path:
    """The public half of ``keypair`` written where keygen would put it."""
    path = tmp_path / "diffcache.pub"
    path.write_text(keypair[0] + "\n")
    return path


@pytest.fixture
def output_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point GITHUB_OUTPUT at a temp file."""
    path = tmp_path / "github_output"
    path.write_text("")
    monkeypatch.setenv("GITHUB_OUTPUT", str(path))
    return path


def make_response(status: int, data: Optional[Any] = None) -> MagicMock:
    """Build a requests.Response stand-in."""
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = data
    resp.text = json.dumps(data) if data is not None else ""
    return resp


def make_session(routes: dict[tuple[str, str], MagicMock]) -> MagicMock:
    """Session whose request() answers by (method, url suffix)."""
    session = MagicMock()
    session.headers = {}

    def _request(method: str, url: str, **kwargs: Any) -> MagicMock:
        for (m, suffix), resp in routes.items():
            if m == method and url.endswith(suffix):
                return resp
        return make_response(404, {"message": "Not Found"})

    session.request.side_effect = _request
    return session


def read_outputs(path: Path) -> dict[str, str]:
    """Parse a GITHUB_OUTPUT file written in delimiter form."""
    outputs: dict[str, str] = {}
    lines = path.read_text().splitlines()
    i = 0
    while i < len(lines):
        name, delimiter = lines[i].split("<<", 1)
        value_lines = []
        i += 1
        while lines[i] != delimiter:
            value_lines.append(lines[i])
            i += 1
        outputs[name] = "\n".join(value_lines)
        i += 1
    return outputs
