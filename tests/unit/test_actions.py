"""Tests for GitHub Actions runner integration."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from release_boss.exceptions import ReleaseError
from release_boss.github.actions import ActionContext, ActionOutputs, log_group


class TestActionContext:
    """Tests for ActionContext.from_env()."""

    def test_from_env(self, tmp_path: Path):
        event = tmp_path / "event.json"
        event.write_text(
            json.dumps(
                {
                    "action": "closed",
                    "pull_request": {
                        "number": 4,
                        "merged": True,
                        "head": {"ref": "staging-v1.0.0"},
                    },
                }
            )
        )

        ctx = ActionContext.from_env(
            {
                "GITHUB_REPOSITORY": "acme/widget",
                "GITHUB_EVENT_NAME": "pull_request",
                "GITHUB_EVENT_PATH": str(event),
            }
        )

        assert (ctx.owner, ctx.repo) == ("acme", "widget")
        assert ctx.pull_request["number"] == 4
        assert ctx.is_pr_merge

    def test_push_event_not_pr_merge(self):
        ctx = ActionContext.from_env({"GITHUB_REPOSITORY": "acme/widget"})

        assert ctx.pull_request is None
        assert not ctx.is_pr_merge

    def test_closed_unmerged_not_pr_merge(self):
        ctx = ActionContext(
            owner="a",
            repo="b",
            event_name="pull_request",
            payload={"action": "closed", "pull_request": {"merged": False}},
        )
        assert not ctx.is_pr_merge

    def test_missing_repository(self):
        with pytest.raises(ReleaseError, match="GITHUB_REPOSITORY"):
            ActionContext.from_env({})


class TestActionOutputs:
    """Tests for ActionOutputs."""

    def test_flush(self, tmp_path: Path):
        out = tmp_path / "output"
        outputs = ActionOutputs(out)
        outputs.set("new_version", "1.2.3")
        outputs.update({"is_pr_run": "true", "pr_number": None})

        outputs.flush()

        assert out.read_text() == "new_version=1.2.3\nis_pr_run=true\npr_number=\n"

    def test_multiline_value(self, tmp_path: Path):
        out = tmp_path / "output"
        outputs = ActionOutputs(out)
        outputs.set("changelog", "line 1\nline 2")

        outputs.flush()

        lines = out.read_text().splitlines()
        delimiter = lines[0].split("<<", 1)[1]
        assert lines[0].startswith("changelog<<")
        assert lines[1:] == ["line 1", "line 2", delimiter]

    def test_no_output_file(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
        outputs = ActionOutputs()
        outputs.set("x", 1)
        outputs.flush()
        assert outputs.values == {"x": "1"}


class TestLogGroup:
    """Tests for log_group()."""

    def test_group_markers(self):
        stream = io.StringIO()

        with log_group("Commit analysis", stream):
            stream.write("inside\n")

        assert stream.getvalue() == "::group::Commit analysis\ninside\n::endgroup::\n"

    def test_closed_on_error(self):
        stream = io.StringIO()

        with pytest.raises(RuntimeError), log_group("x", stream):
            raise RuntimeError("fail")

        assert stream.getvalue().endswith("::endgroup::\n")
