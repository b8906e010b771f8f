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

"""zip-guard exceptions.

This module defines custom exceptions for zip-guard operations.
All exceptions inherit from ZipGuardError for easy catching.

Three families matter to callers:

- transport errors (``SubprocessError`` subclasses) come from running the
  archive utility and are never worth retrying;
- trust errors (``ArchiveTrustError`` subclasses) mark an archive, or the
  toolchain inspecting it, as untrustworthy;
- destination errors (``DestinationError`` subclasses) are raised by the
  extractor before anything is written.

Example:
    >>> from zip_guard.core.inspector import ArchiveInspector
    >>> from zip_guard.core.exceptions import CommandNotFoundError, SubprocessError
    >>>
    >>> inspector = ArchiveInspector()
    >>>
    >>> try:
    ...     handle = inspector.open("creative.zip")
    ... except CommandNotFoundError as e:
    ...     print(f"unzip is not installed: {e}")
    ... except SubprocessError as e:
    ...     print(f"Inspection aborted: {e}")
"""

from collections.abc import Sequence


class ZipGuardError(Exception):
    """Base exception for all zip-guard errors."""

    pass


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------


class SubprocessError(ZipGuardError):
    """Raised when an external command could not be run to completion."""

    def __init__(self, message: str, argv: Sequence[str] = ()):
        super().__init__(message)
        self.argv = tuple(argv)


class CommandNotFoundError(SubprocessError):
    """Raised when the executable could not be found or started.

    This is reported by the spawn itself, never inferred from an exit status.
    """

    pass


class SubprocessTimeoutError(SubprocessError):
    """Raised when a child produced no output for longer than the timeout.

    The child has been killed and reaped by the time this is raised.
    """

    def __init__(self, message: str, argv: Sequence[str] = (), timeout: float | None = None):
        super().__init__(message, argv)
        self.timeout = timeout


class OutputLimitExceededError(SubprocessError):
    """Raised when a child wrote more than the configured number of bytes.

    The child has been killed and reaped by the time this is raised.
    """

    def __init__(self, message: str, argv: Sequence[str] = (), limit: int | None = None):
        super().__init__(message, argv)
        self.limit = limit


# ---------------------------------------------------------------------------
# Trust errors
# ---------------------------------------------------------------------------


class ArchiveTrustError(ZipGuardError):
    """Raised when an archive cannot be trusted."""

    pass


class UntrustedToolVersionError(ArchiveTrustError):
    """Raised when the archive utility's version is not whitelisted.

    Listing output is only parsed for known toolchain versions.
    """

    def __init__(self, message: str, reported_version: str = ""):
        super().__init__(message)
        self.reported_version = reported_version


class CorruptArchiveError(ArchiveTrustError):
    """Raised when an archive failed an integrity, listing or extraction step.

    This can indicate:
    - CRC mismatch on one or more members
    - A listing the tool refused to produce
    - A listing that does not follow the expected grammar
    - Failure discovered only while extracting
    """

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.exit_code = exit_code


class UnsafeArchivePathError(ArchiveTrustError):
    """Raised when an archive path contains characters unzip treats as wildcards.

    unzip would match such a path against sibling files instead of opening
    it literally, so it is never handed to the tool.
    """

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class ListingParseError(CorruptArchiveError):
    """Raised when ``unzip -l`` output does not match the listing grammar.

    The whole listing is rejected; no partial entry list is ever returned.
    """

    def __init__(self, message: str, line: str | None = None):
        super().__init__(message)
        self.line = line


# ---------------------------------------------------------------------------
# Destination errors
# ---------------------------------------------------------------------------


class DestinationError(ZipGuardError):
    """Raised when an extraction destination is unusable."""

    def __init__(self, message: str, destination: str = ""):
        super().__init__(message)
        self.destination = destination


class DestinationMissingError(DestinationError):
    """Raised when the extraction destination is not an existing directory."""

    pass


class DestinationNotEmptyError(DestinationError):
    """Raised when the extraction destination already has content."""

    pass


# ---------------------------------------------------------------------------
# Validation configuration
# ---------------------------------------------------------------------------


class ValidationConfigError(ZipGuardError):
    """Raised when a validation config names an unknown check or has a bad value.

    Rule violations are never raised; they are reported in ``ValidationResult``.
    """

    pass
