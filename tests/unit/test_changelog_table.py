"""Tests for the PR description changelog table."""

from __future__ import annotations

from release_boss.config.models import ChangelogTableConfig
from release_boss.core.changelog_table import (
    UNPARSED_TYPE,
    ChangelogEntry,
    commits_to_entries,
    extract_table,
    filter_entries,
    merge_entries,
    parse_table,
    render_table,
    update_description,
)
from release_boss.core.commits import CommitRecord

CFG = ChangelogTableConfig()
START = CFG.start_marker
END = CFG.end_marker


def _entry(type_: str, commit: str, description: str = "x", scope: str = "") -> ChangelogEntry:
    return ChangelogEntry(type_, scope, description, "", commit, "")


class TestCommitsToEntries:
    """Tests for commits_to_entries()."""

    def test_fields(self):
        c = CommitRecord.from_message("abcdef1234", "feat(ui): button (#7)", author="octo")

        (entry,) = commits_to_entries([c])

        assert entry == ChangelogEntry("feat", "ui", "button (#7)", "#7", "abcdef1", "@octo")

    def test_filter_excluded_types(self):
        entries = [_entry("feat", "a"), _entry("chore", "b")]
        assert [e.commit for e in filter_entries(entries, CFG)] == ["a"]

    def test_filter_require_scope(self):
        cfg = ChangelogTableConfig(require_scope=True)
        entries = [_entry("feat", "a", scope="ui"), _entry("fix", "b")]
        assert [e.commit for e in filter_entries(entries, cfg)] == ["a"]


class TestTableRoundTrip:
    """Tests for render_table() / parse_table()."""

    def test_render_and_parse(self):
        entries = [_entry("feat", "abc1234", "uses a | pipe", scope="core")]

        table = render_table(entries, CFG)

        assert table.startswith(START)
        assert table.endswith(END)
        assert parse_table(extract_table(table, CFG)) == entries

    def test_bad_row_becomes_placeholder(self):
        """Rows with the wrong cell count degrade to placeholders."""
        table = "| Type | Scope |\n|---|---|\n| hand written note |"

        (entry,) = parse_table(table)

        assert entry.type == UNPARSED_TYPE
        assert entry.description == "| hand written note |"
        assert entry.commit == ""

    def test_extract_missing(self):
        assert extract_table("no table here", CFG) is None
        assert extract_table(None, CFG) is None
        assert parse_table(None) == []


class TestMergeEntries:
    """Tests for merge_entries()."""

    def test_new_entries_win(self):
        existing = [_entry("fix", "aaa", "old text")]
        new = [_entry("fix", "aaa", "new text"), _entry("feat", "bbb")]

        merged = merge_entries(existing, new, CFG.order)

        assert [(e.commit, e.description) for e in merged] == [("bbb", "x"), ("aaa", "new text")]

    def test_placeholders_kept_and_unknown_last(self):
        placeholder = _entry(UNPARSED_TYPE, "", "note")
        merged = merge_entries([placeholder, _entry("fix", "a")], [], CFG.order)

        assert merged == [_entry("fix", "a"), placeholder]


class TestUpdateDescription:
    """Tests for update_description()."""

    def test_inserted_after_header(self, make_commit):
        result = update_description("Release PR\n\n## 1.0.0", [make_commit("feat: a")], CFG)

        assert result.startswith(f"Release PR\n\n{START}\n")
        assert result.endswith(f"{END}\n\n## 1.0.0")

    def test_replaced_in_place_and_merged(self):
        first = CommitRecord.from_message("1111111aaa", "fix: one")
        second = CommitRecord.from_message("2222222bbb", "feat: two")
        body = update_description("Header\n\nbody", [first], CFG)

        result = update_description(body, [second], CFG)

        assert result.count(START) == 1
        rows = parse_table(extract_table(result, CFG))
        assert [r.commit for r in rows] == ["2222222", "1111111"]
        assert result.endswith("body")

    def test_empty_description(self, make_commit):
        result = update_description(None, [make_commit("fix: a")], CFG)
        assert result.startswith(START)
