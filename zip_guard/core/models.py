# Copyright 2026 Cisco Systems, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""
Data models for inspected archives and process results.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from pathlib import Path

from .exceptions import ArchiveTrustError

_HTML_SUFFIXES = (".htm", ".html")
_ZIP_SUFFIXES = (".zip",)


class EntryType(str, Enum):
    """Kind of archive member."""

    FILE = "file"
    DIRECTORY = "directory"


class InspectionState(str, Enum):
    """Progress of an archive through inspection.

    ``TRUSTED`` and ``CORRUPT`` are terminal; only they are ever stored on a
    handle.
    """

    UNINSPECTED = "uninspected"
    VERSION_CHECKED = "version_checked"
    INTEGRITY_CHECKED = "integrity_checked"
    LISTED = "listed"
    TRUSTED = "trusted"
    CORRUPT = "corrupt"


@dataclass(frozen=True, order=True)
class Entry:
    """One file or directory record from an archive listing.

    Entries order by name first, so ``sorted(entries)`` is a name sort.
    """

    name: str
    type: EntryType
    size: int = 0

    def __post_init__(self):
        if self.size < 0:
            raise ValueError(f"Entry size must be non-negative, got {self.size} for {self.name!r}")
        if self.type == EntryType.DIRECTORY and self.size != 0:
            raise ValueError(f"Directory entry {self.name!r} must have size 0, got {self.size}")

    @property
    def is_file(self) -> bool:
        return self.type == EntryType.FILE

    @property
    def is_directory(self) -> bool:
        return self.type == EntryType.DIRECTORY

    @property
    def components(self) -> list[str]:
        """Non-empty ``/``-separated path components."""
        return [part for part in self.name.split("/") if part]

    @property
    def is_html(self) -> bool:
        return self.name.lower().endswith(_HTML_SUFFIXES)

    @property
    def is_zip(self) -> bool:
        return self.name.lower().endswith(_ZIP_SUFFIXES)


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one completed external command."""

    args: tuple[str, ...]
    exit_code: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class ArchiveHandle:
    """Immutable record of an inspected archive.

    Built by ``ArchiveInspector.open()``. A trusted handle carries the parsed
    entries and the packed size; a corrupt handle carries only the reason it
    was rejected. Aggregates are computed on first access and cached, which
    is safe because nothing on the handle ever changes.
    """

    path: Path
    state: InspectionState
    entries: tuple[Entry, ...] = ()
    packed_size: int = 0
    reason: ArchiveTrustError | None = field(default=None, compare=False)

    def __post_init__(self):
        if self.state not in (InspectionState.TRUSTED, InspectionState.CORRUPT):
            raise ValueError(f"Handle state must be terminal, got {self.state.value}")
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "entries", tuple(self.entries))
        if self.state == InspectionState.CORRUPT and (self.entries or self.packed_size):
            raise ValueError("A corrupt handle carries no entries and no packed size")

    @classmethod
    def trusted(cls, path: str | Path, entries: Iterable[Entry], packed_size: int) -> ArchiveHandle:
        return cls(path=Path(path), state=InspectionState.TRUSTED, entries=tuple(entries), packed_size=packed_size)

    @classmethod
    def corrupt(cls, path: str | Path, reason: ArchiveTrustError | None = None) -> ArchiveHandle:
        return cls(path=Path(path), state=InspectionState.CORRUPT, reason=reason)

    # -- Context manager for scoped use ---------------------------------------

    def __enter__(self) -> ArchiveHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None

    # -- State -----------------------------------------------------------------

    @property
    def is_trusted(self) -> bool:
        return self.state == InspectionState.TRUSTED

    @property
    def is_corrupt(self) -> bool:
        return self.state == InspectionState.CORRUPT

    # -- Entry views -----------------------------------------------------------

    @cached_property
    def file_entries(self) -> tuple[Entry, ...]:
        return tuple(e for e in self.entries if e.is_file)

    @cached_property
    def directory_entries(self) -> tuple[Entry, ...]:
        return tuple(e for e in self.entries if e.is_directory)

    @cached_property
    def html_file_entries(self) -> tuple[Entry, ...]:
        """File entries ending in ``.htm``/``.html`` (any case)."""
        return tuple(e for e in self.file_entries if e.is_html)

    @cached_property
    def zip_file_entries(self) -> tuple[Entry, ...]:
        """File entries that are themselves ZIP archives by name."""
        return tuple(e for e in self.file_entries if e.is_zip)

    # -- Aggregates ------------------------------------------------------------

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    @property
    def file_count(self) -> int:
        return len(self.file_entries)

    @property
    def directory_count(self) -> int:
        return len(self.directory_entries)

    @cached_property
    def size_unpacked(self) -> int:
        """Sum of the uncompressed sizes of all file entries."""
        return sum(e.size for e in self.file_entries)

    @property
    def size_packed(self) -> int:
        return self.packed_size

    @cached_property
    def max_path_length(self) -> int:
        return max((len(e.name) for e in self.entries), default=0)

    @cached_property
    def max_path_components(self) -> int:
        return max((len(e.components) for e in self.entries), default=0)

    @cached_property
    def contains_html_file(self) -> bool:
        return bool(self.html_file_entries)

    @cached_property
    def contains_zip_file(self) -> bool:
        return bool(self.zip_file_entries)
