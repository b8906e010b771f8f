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
Archive inspection: toolchain version, integrity, listing.

``ArchiveInspector.open()`` moves an archive through::

    uninspected -> version_checked -> integrity_checked -> listed -> trusted

and any failing step lands it in ``corrupt``. Each step is gated on the
previous one; a corrupt archive never gets listed. Trust failures are
recorded on the returned handle. Transport failures (tool missing, timeout,
output cap) propagate to the caller and no handle is produced.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from ..config.config import Config
from ..config.constants import ZipGuardConstants
from .exceptions import ArchiveTrustError, CorruptArchiveError, UnsafeArchivePathError, UntrustedToolVersionError
from .listing_parser import parse_listing
from .models import ArchiveHandle, Entry, InspectionState, ProcessResult
from .process_runner import ProcessRunner, environment_without

logger = logging.getLogger(__name__)


def unzip_environment() -> dict[str, str]:
    """Current environment without the variables unzip reads options from."""
    return environment_without(ZipGuardConstants.UNZIP_OPTION_ENV_VARS)


def check_archive_path(path: Path) -> None:
    """
    Refuse archive paths unzip would expand as a wildcard pattern.

    Raises:
        UnsafeArchivePathError: *path* contains ``*``, ``?``, ``[`` or ``\\``.
    """
    text = str(path)
    found = sorted({c for c in text if c in ZipGuardConstants.UNZIP_WILDCARD_CHARACTERS})
    if found:
        raise UnsafeArchivePathError(f"Archive path contains wildcard characters {found}: {text}", path=text)


class ArchiveInspector:
    """Establishes trust in an archive using the Info-ZIP ``unzip`` utility."""

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        unzip_binary: str = ZipGuardConstants.DEFAULT_UNZIP_BINARY,
        version_whitelist: Sequence[str] | None = None,
        log: logging.Logger | None = None,
    ):
        """
        Args:
            runner: Process runner used for every ``unzip`` call.
            unzip_binary: Name or path of the ``unzip`` executable.
            version_whitelist: Accepted prefixes of the ``unzip -v`` banner.
                First match wins. Defaults to the known Info-ZIP releases.
            log: Logger to use instead of the module logger.
        """
        self.runner = runner or ProcessRunner()
        self.unzip_binary = unzip_binary
        if version_whitelist is None:
            version_whitelist = ZipGuardConstants.DEFAULT_VERSION_WHITELIST
        self.version_whitelist: tuple[str, ...] = tuple(version_whitelist)
        self.log = log or logger

    @classmethod
    def from_config(cls, config: Config, log: logging.Logger | None = None) -> ArchiveInspector:
        runner = ProcessRunner(
            timeout=config.subprocess_timeout,
            max_output_bytes=config.max_output_bytes,
            read_chunk_size=config.read_chunk_size,
            log=log,
        )
        return cls(
            runner=runner,
            unzip_binary=config.unzip_binary,
            version_whitelist=config.version_whitelist,
            log=log,
        )

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def open(self, path: str | os.PathLike) -> ArchiveHandle:
        """
        Inspect an archive and return a trusted or corrupt handle.

        Args:
            path: Path of the archive on local disk

        Returns:
            ArchiveHandle in state ``trusted`` or ``corrupt``

        Raises:
            CommandNotFoundError: ``unzip`` is not installed.
            SubprocessTimeoutError: ``unzip`` stalled.
            OutputLimitExceededError: ``unzip`` produced too much output.
        """
        # Absolute, so an archive named "-x.zip" cannot be read as an option.
        archive = Path(path).absolute()
        state = InspectionState.UNINSPECTED

        try:
            check_archive_path(archive)

            self.check_toolchain()
            state = InspectionState.VERSION_CHECKED

            self._check_integrity(archive)
            state = InspectionState.INTEGRITY_CHECKED

            entries = self._list_entries(archive)
            state = InspectionState.LISTED

            try:
                packed_size = archive.stat().st_size
            except OSError as e:
                raise CorruptArchiveError(f"Cannot stat {archive}: {e}") from e
        except ArchiveTrustError as e:
            self.log.warning("Info-ZIP: %s is corrupt (failed after %s): %s", archive, state.value, e)
            return ArchiveHandle.corrupt(archive, e)

        self.log.info("Info-ZIP: %s trusted (%d entries, %d bytes packed)", archive, len(entries), packed_size)
        return ArchiveHandle.trusted(archive, entries, packed_size)

    def check_toolchain(self) -> str:
        """
        Verify the ``unzip`` binary is present and whitelisted.

        Suitable for calling once at application startup.

        Returns:
            The whitelist entry that matched

        Raises:
            CommandNotFoundError: ``unzip`` is not installed.
            UntrustedToolVersionError: The version is not whitelisted.
        """
        result = self.runner.execute([self.unzip_binary, "-v"], env=unzip_environment())
        version = self.parse_tool_version(result.stdout_text) if result.ok else None
        if version is None:
            self._log_process_failure(logging.CRITICAL, result)
            banner = result.stdout_text.split("\n", 1)[0].strip()
            raise UntrustedToolVersionError(
                f"Version does not match whitelist {list(self.version_whitelist)}", reported_version=banner
            )
        self.log.info("Info-ZIP: found version %s", version)
        return version

    def parse_tool_version(self, version_output: str) -> str | None:
        """Return the first whitelisted prefix of *version_output*, or None."""
        for accepted in self.version_whitelist:
            if version_output.startswith(accepted):
                return accepted
        return None

    # -----------------------------------------------------------------------
    # Steps
    # -----------------------------------------------------------------------

    def _check_integrity(self, archive: Path) -> None:
        """Decompress every member in memory and compare it with its stored CRC."""
        result = self.runner.execute([self.unzip_binary, "-t", str(archive)], env=unzip_environment())
        if not result.ok:
            self._log_process_failure(logging.ERROR, result)
            raise CorruptArchiveError(f"CRC check failed on {archive}", exit_code=result.exit_code)
        self.log.info("Info-ZIP: CRC check passed (%s)", archive)

    def _list_entries(self, archive: Path) -> list[Entry]:
        result = self.runner.execute([self.unzip_binary, "-l", str(archive)], env=unzip_environment())
        if not result.ok:
            self._log_process_failure(logging.ERROR, result)
            raise CorruptArchiveError(f"Failed to get entries ({archive})", exit_code=result.exit_code)
        entries = parse_listing(result.stdout_text)
        self.log.info("Info-ZIP: entries parsed (%s)", archive)
        return entries

    def _log_process_failure(self, level: int, result: ProcessResult) -> None:
        self.log.log(level, "Info-ZIP: %s exited with %d", " ".join(result.args), result.exit_code)
        self.log.debug("Info-ZIP: stdout:\n%s", result.stdout_text)
        self.log.debug("Info-ZIP: stderr:\n%s", result.stderr_text)
