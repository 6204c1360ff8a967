"""Per-path source policy for rebuilding a conflicted staging branch.

When merging the merge branch into a staging branch conflicts, the
staging branch is rebuilt file by file. Files owned by the release
process (changelog, version files) come from the release branch; every
other file comes from the merge branch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import PurePath


class FileSource(StrEnum):
    RELEASE = "release"
    MAIN = "main"


def _key(path: PurePath | str) -> str:
    # PurePosixPath drops "./" segments, so "./CHANGELOG.md" == "CHANGELOG.md".
    return PurePosixPath(str(path).replace("\\", "/")).as_posix()


@dataclass(frozen=True)
class ReconcilePolicy:
    overrides: dict[str, FileSource] = field(default_factory=dict)
    default: FileSource = FileSource.MAIN

    @classmethod
    def from_preserved(cls, preserved: Iterable[PurePath | str]) -> ReconcilePolicy:
        return cls(overrides={_key(p): FileSource.RELEASE for p in preserved})

    def source_for(self, path: PurePath | str) -> FileSource:
        return self.overrides.get(_key(path), self.default)

    def release_owned(self) -> list[str]:
        return sorted(p for p, s in self.overrides.items() if s == FileSource.RELEASE)
