"""GitHub Actions runner integration.

Reads the workflow environment into an explicit :class:`ActionContext`
and writes step outputs and log groups. Nothing else in release-boss
touches ``GITHUB_*`` variables.
"""

from __future__ import annotations

import json
import os
import sys
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

from release_boss.exceptions import ReleaseError


@dataclass(frozen=True)
class ActionContext:
    """The parts of the workflow environment release-boss uses."""

    owner: str
    repo: str
    event_name: str
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ActionContext:
        """Build the context from ``GITHUB_*`` environment variables.

        Raises:
            ReleaseError: If ``GITHUB_REPOSITORY`` is missing or malformed
        """
        env = os.environ if env is None else env
        repository = env.get("GITHUB_REPOSITORY", "")
        if "/" not in repository:
            raise ReleaseError("GITHUB_REPOSITORY must be set to 'owner/repo'")
        owner, repo = repository.split("/", 1)

        payload: dict[str, Any] = {}
        event_path = env.get("GITHUB_EVENT_PATH")
        if event_path and Path(event_path).is_file():
            payload = json.loads(Path(event_path).read_text(encoding="utf-8"))

        return cls(
            owner=owner,
            repo=repo,
            event_name=env.get("GITHUB_EVENT_NAME", ""),
            payload=payload,
        )

    @property
    def pull_request(self) -> dict[str, Any] | None:
        return self.payload.get("pull_request")

    @property
    def is_pr_merge(self) -> bool:
        pr = self.pull_request
        return bool(pr) and self.payload.get("action") == "closed" and bool(pr.get("merged"))


class ActionOutputs:
    """Collects step outputs and writes them to ``$GITHUB_OUTPUT``."""

    def __init__(self, output_file: Path | None = None) -> None:
        if output_file is None and os.environ.get("GITHUB_OUTPUT"):
            output_file = Path(os.environ["GITHUB_OUTPUT"])
        self.output_file = output_file
        self.values: dict[str, str] = {}

    def set(self, name: str, value: object) -> None:
        self.values[name] = "" if value is None else str(value)

    def update(self, values: Mapping[str, object]) -> None:
        for name, value in values.items():
            self.set(name, value)

    def flush(self) -> None:
        if self.output_file is None:
            return
        with self.output_file.open("a", encoding="utf-8") as fh:
            for name, value in self.values.items():
                if "\n" in value:
                    delimiter = f"ghadelimiter_{uuid.uuid4()}"
                    fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
                else:
                    fh.write(f"{name}={value}\n")


@contextmanager
def log_group(title: str, stream: TextIO | None = None) -> Iterator[None]:
    """Fold the enclosed log output into a collapsible group."""
    out = stream or sys.stdout
    out.write(f"::group::{title}\n")
    out.flush()
    try:
        yield
    finally:
        out.write("::endgroup::\n")
        out.flush()
