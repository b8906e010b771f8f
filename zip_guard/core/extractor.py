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
Guarded extraction of trusted archives.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..config.config import Config
from ..config.constants import ZipGuardConstants
from .exceptions import CorruptArchiveError, DestinationMissingError, DestinationNotEmptyError
from .inspector import check_archive_path, unzip_environment
from .models import ArchiveHandle
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)


class Extractor:
    """
    Unpacks a trusted archive into an empty directory with ``unzip -d``.

    User-provided archives should still be unpacked inside a sandbox; this
    class only guarantees the destination preconditions and the exit status.
    """

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        unzip_binary: str = ZipGuardConstants.DEFAULT_UNZIP_BINARY,
        log: logging.Logger | None = None,
    ):
        self.runner = runner or ProcessRunner()
        self.unzip_binary = unzip_binary
        self.log = log or logger

    @classmethod
    def from_config(cls, config: Config, log: logging.Logger | None = None) -> Extractor:
        runner = ProcessRunner(
            timeout=config.subprocess_timeout,
            max_output_bytes=config.max_output_bytes,
            read_chunk_size=config.read_chunk_size,
            log=log,
        )
        return cls(runner=runner, unzip_binary=config.unzip_binary, log=log)

    def unpack(self, handle: ArchiveHandle, destination: str | os.PathLike) -> list[Path]:
        """
        Extract *handle*'s archive into *destination*.

        Args:
            handle: Trusted handle from ``ArchiveInspector.open()``
            destination: Existing, empty directory

        Returns:
            Paths of the extracted entries under *destination*, in listing order

        Raises:
            CorruptArchiveError: The handle is corrupt, or ``unzip`` failed. For a
                corrupt handle the recorded reason is the ``__cause__``.
            UnsafeArchivePathError: The archive path contains wildcard characters.
            DestinationMissingError: *destination* is not a directory.
            DestinationNotEmptyError: *destination* has content.
        """
        if handle.is_corrupt:
            # The handle is shared; its reason is chained, never raised again.
            reason = handle.reason
            detail = str(reason) if reason is not None else "no reason recorded"
            raise CorruptArchiveError(
                f"{handle.path} is corrupt: {detail}", exit_code=getattr(reason, "exit_code", None)
            ) from reason
        check_archive_path(handle.path)

        dest = Path(destination).absolute()
        self._check_destination(dest)

        self.log.info("Info-ZIP: unpacking %s to %s", handle.path, dest)
        result = self.runner.execute(
            [self.unzip_binary, "-qq", "-d", str(dest), str(handle.path)], env=unzip_environment()
        )
        if not result.ok:
            self.log.error("Info-ZIP: unpack of %s exited with %d", handle.path, result.exit_code)
            self.log.debug("Info-ZIP: stdout:\n%s", result.stdout_text)
            self.log.debug("Info-ZIP: stderr:\n%s", result.stderr_text)
            raise CorruptArchiveError(
                f"Unzip failed (unpack {handle.path} to {dest})", exit_code=result.exit_code
            )

        self.log.info("Info-ZIP: unpack succeeded (%s)", handle.path)
        return [dest / entry.name for entry in handle.entries]

    @staticmethod
    def _check_destination(dest: Path) -> None:
        if not dest.is_dir():
            raise DestinationMissingError(f"Destination directory does not exist: {dest}", str(dest))
        with os.scandir(dest) as it:
            if next(it, None) is not None:
                raise DestinationNotEmptyError(f"Destination directory is not empty: {dest}", str(dest))
