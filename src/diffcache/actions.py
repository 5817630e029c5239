"""
CI host surface -- event context in, step outputs and annotations out.

Follows the GitHub Actions runner contract: the event payload is a JSON
file named by ``GITHUB_EVENT_PATH`` and outputs are appended to the file
named by ``GITHUB_OUTPUT``.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field

from .errors import ConfigurationError

logger = logging.getLogger("diffcache.actions")


class EventContext(BaseModel):
    """The triggering event as seen by this run."""

    event_name: str
    repository: str
    payload: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> EventContext:
        """Read the event from runner environment variables.

        Raises:
            ConfigurationError: If a required variable is missing or the
                payload file cannot be read.
        """
        env = os.environ if env is None else env
        missing = [
            name
            for name in ("GITHUB_EVENT_NAME", "GITHUB_REPOSITORY")
            if not env.get(name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing CI environment: {', '.join(missing)}"
            )

        payload: dict[str, Any] = {}
        event_path = env.get("GITHUB_EVENT_PATH")
        if event_path:
            try:
                payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise ConfigurationError(
                    f"Unable to read event payload {event_path}: {exc}"
                ) from exc

        return cls(
            event_name=env["GITHUB_EVENT_NAME"],
            repository=env["GITHUB_REPOSITORY"],
            payload=payload,
        )


def set_output(name: str, value: str, env: Optional[Mapping[str, str]] = None) -> None:
    """Publish a step output.

    Uses the delimiter form so values may span lines. Outside a runner
    the value is only logged.
    """
    env = os.environ if env is None else env
    output_file = env.get("GITHUB_OUTPUT")
    if not output_file:
        logger.info("Output %s=%s", name, value)
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(output_file, "a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def error_annotation(message: str) -> str:
    """Format a workflow ``error`` command for ``message``."""
    escaped = (
        message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    )
    return f"::error::{escaped}"
