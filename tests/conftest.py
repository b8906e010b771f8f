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
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest before running tests.
All fixtures defined here are available to every test module without
explicit imports.
"""

from __future__ import annotations

import shutil
import textwrap
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from zip_guard.core.inspector import ArchiveInspector
from zip_guard.core.models import ArchiveHandle, Entry, EntryType, ProcessResult
from zip_guard.core.process_runner import ProcessRunner

# ---------------------------------------------------------------------------
# Canned unzip output
# ---------------------------------------------------------------------------

UNZIP_552_BANNER = (
    "UnZip 5.52 of 28 February 2005, by Info-ZIP.  Maintained by C. Spieler.  Send\n"
    "bug reports using http://www.info-zip.org/zip-bug.html; see README for details.\n"
)
UNZIP_600_BANNER = (
    "UnZip 6.00 of 20 April 2009, by Debian. Original by Info-ZIP.\n"
    "\n"
    "Latest sources and executables are at ftp://ftp.info-zip.org/pub/infozip/ ;\n"
)
UNZIP_300_BANNER = "UnZip 3.00 of 20 April 1945, by StrangeDistro. Original by Info-ZIP.\n\nLatest sources and.\n"

# $ unzip -l test-ad.zip
TEST_AD_LISTING = textwrap.dedent(
    """\
    Archive:  test-ad.zip
      Length      Date    Time    Name
    ---------  ---------- -----   ----
          112  2015-10-06 10:37   index.html
            0  2015-10-06 10:36   images/
       732059  2015-10-03 21:58   images/test.png
            0  2015-10-08 13:46   foo/
           62  2015-10-08 13:46   foo/index.html
           41  2015-10-08 13:46   foo/index2.html
    ---------                     -------
       732274                     6 files
    """
)

# Name, size; a trailing "/" marks a directory.
TEST_AD_MEMBERS: list[tuple[str, int]] = [
    ("index.html", 112),
    ("images/", 0),
    ("images/test.png", 732059),
    ("foo/", 0),
    ("foo/index.html", 62),
    ("foo/index2.html", 41),
]

NESTED_MEMBERS: list[tuple[str, int]] = [
    ("index.html", 112),
    ("images/", 0),
    ("images/test.png", 2048),
    ("foo/", 0),
    ("foo/bar/index.html", 62),
    ("foo/bar/index2.html", 41),
]


def _entry(name: str, size: int) -> Entry:
    if name.endswith("/"):
        return Entry(name=name, type=EntryType.DIRECTORY, size=0)
    return Entry(name=name, type=EntryType.FILE, size=size)


# ---------------------------------------------------------------------------
# Handles without any subprocess
# ---------------------------------------------------------------------------


@pytest.fixture
def make_handle() -> Callable[..., ArchiveHandle]:
    """Factory fixture for trusted handles built from ``(name, size)`` pairs."""

    def _make(members: list[tuple[str, int]], packed_size: int = 729_889, path: str = "test-ad.zip"):
        return ArchiveHandle.trusted(path, [_entry(n, s) for n, s in members], packed_size)

    return _make


@pytest.fixture
def test_ad_handle(make_handle) -> ArchiveHandle:
    """Trusted handle with the test-ad.zip entries (4 files, 2 directories)."""
    return make_handle(TEST_AD_MEMBERS)


@pytest.fixture
def nested_handle(make_handle) -> ArchiveHandle:
    """Trusted handle whose deepest entry has three path components."""
    return make_handle(NESTED_MEMBERS)


# ---------------------------------------------------------------------------
# Fake process runner
# ---------------------------------------------------------------------------


class FakeRunner:
    """Stands in for ``ProcessRunner``; answers by the unzip flag in ``argv[1]``.

    A response is a ``ProcessResult`` (``args`` is filled in) or an exception
    instance to raise.
    """

    def __init__(self, responses: dict[str, ProcessResult | Exception]):
        self.responses = responses
        self.calls: list[tuple[str, ...]] = []
        self.envs: list[dict[str, str] | None] = []

    def execute(self, argv, env=None):
        args = tuple(str(a) for a in argv)
        self.calls.append(args)
        self.envs.append(dict(env) if env is not None else None)
        response = self.responses[args[1]]
        if isinstance(response, Exception):
            raise response
        return ProcessResult(args=args, exit_code=response.exit_code, stdout=response.stdout, stderr=response.stderr)

    @property
    def flags(self) -> list[str]:
        return [call[1] for call in self.calls]


def ok(stdout: str = "", exit_code: int = 0, stderr: str = "") -> ProcessResult:
    return ProcessResult(args=(), exit_code=exit_code, stdout=stdout.encode(), stderr=stderr.encode())


@pytest.fixture
def make_fake_runner() -> Callable[..., FakeRunner]:
    """Factory for a runner that behaves like a healthy UnZip 6.00 by default."""

    def _make(**overrides: ProcessResult | Exception) -> FakeRunner:
        responses: dict[str, ProcessResult | Exception] = {
            "-v": ok(UNZIP_600_BANNER),
            "-t": ok("No errors detected in compressed data of test-ad.zip.\n"),
            "-l": ok(TEST_AD_LISTING),
            "-qq": ok(),
        }
        for flag, response in overrides.items():
            responses["-" + flag] = response
        return FakeRunner(responses)

    return _make


# ---------------------------------------------------------------------------
# Real archives and the real unzip binary
# ---------------------------------------------------------------------------


@pytest.fixture
def unzip_binary() -> str:
    """Path of the Info-ZIP unzip binary; skips the test when it is missing."""
    path = shutil.which("unzip")
    if path is None:
        pytest.skip("Info-ZIP unzip is not installed")
    return path


@pytest.fixture
def real_inspector(unzip_binary) -> ArchiveInspector:
    """Inspector driving the installed unzip, whatever its release."""
    return ArchiveInspector(
        runner=ProcessRunner(timeout=10.0),
        unzip_binary=unzip_binary,
        version_whitelist=("UnZip",),
    )


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture writing a real ZIP archive under *tmp_path*.

    Usage::

        path = make_zip([("index.html", 112), ("images/", 0)])
    """
    _counter = [0]

    def _make(members: list[tuple[str, int]], name: str | None = None) -> Path:
        _counter[0] += 1
        path = tmp_path / (name or f"archive-{_counter[0]}.zip")
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as zf:
            for member, size in members:
                if member.endswith("/"):
                    zf.writestr(member, b"")
                else:
                    zf.writestr(member, (member.encode() * (size // max(len(member), 1) + 1))[:size])
        return path

    return _make


@pytest.fixture
def test_ad_zip(make_zip) -> Path:
    """Real archive with the test-ad.zip layout: 4 files, 2 directories, 732274 bytes."""
    return make_zip(TEST_AD_MEMBERS, name="test-ad.zip")


@pytest.fixture
def invalid_zip(tmp_path: Path) -> Path:
    """ZIP whose only member fails its CRC check."""
    path = tmp_path / "invalid.zip"
    payload = b"<html><body>corrupt me</body></html>" * 20
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as zf:
        zf.writestr("index.html", payload)
    data = bytearray(path.read_bytes())
    offset = data.find(payload)
    data[offset : offset + 6] = b"XXXXXX"
    path.write_bytes(bytes(data))
    return path


@pytest.fixture
def not_a_zip(tmp_path: Path) -> Path:
    path = tmp_path / "not-a-zip.zip"
    path.write_bytes(b"This is plain text, not a zip archive.\n" * 10)
    return path


@pytest.fixture
def make_result() -> Callable[..., ProcessResult]:
    """Factory for canned ``ProcessResult`` objects from text."""
    return ok


@pytest.fixture
def test_ad_listing() -> str:
    return TEST_AD_LISTING


@pytest.fixture
def unzip_banners() -> dict[str, str]:
    """``unzip -v`` banners keyed by release."""
    return {"5.52": UNZIP_552_BANNER, "6.00": UNZIP_600_BANNER, "3.00": UNZIP_300_BANNER}
