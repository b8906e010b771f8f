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
Validation of inspected archives against a set of named checks.

A validation config maps check names to thresholds or flags::

    {
        "contents_size": 10_000_000,     # unpacked bytes
        "file_count": 200,
        "contains_html_file": True,
        "contains_zip_file": False,
        "forbidden_characters": r"[\\:*?\"<>|]",
    }

Checks absent from the config are skipped. Every configured check is
evaluated, so one call reports everything that is wrong. Violations are
returned as data; only a malformed config raises.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .exceptions import ValidationConfigError
from .models import ArchiveHandle

logger = logging.getLogger(__name__)


class CheckName(str, Enum):
    """Closed set of validation checks."""

    CONTENTS_SIZE = "contents_size"
    PACKED_SIZE = "packed_size"
    ENTRY_COUNT = "entry_count"
    FILE_COUNT = "file_count"
    DIRECTORY_COUNT = "directory_count"
    PATH_LENGTH = "path_length"
    PATH_COMPONENTS = "path_components"
    CONTAINS_HTML_FILE = "contains_html_file"
    CONTAINS_ZIP_FILE = "contains_zip_file"
    FORBIDDEN_CHARACTERS = "forbidden_characters"
    # Reported alone for corrupt archives; never configurable.
    ZIP_CORRUPT = "zip_corrupt"


THRESHOLD_CHECKS = frozenset(
    {
        CheckName.CONTENTS_SIZE,
        CheckName.PACKED_SIZE,
        CheckName.ENTRY_COUNT,
        CheckName.FILE_COUNT,
        CheckName.DIRECTORY_COUNT,
        CheckName.PATH_LENGTH,
        CheckName.PATH_COMPONENTS,
    }
)
FLAG_CHECKS = frozenset({CheckName.CONTAINS_HTML_FILE, CheckName.CONTAINS_ZIP_FILE})
PATTERN_CHECKS = frozenset({CheckName.FORBIDDEN_CHARACTERS})
CONFIGURABLE_CHECKS = THRESHOLD_CHECKS | FLAG_CHECKS | PATTERN_CHECKS

FAILURE_MESSAGES: dict[CheckName, str] = {
    CheckName.CONTENTS_SIZE: "The unpacked content of the zip archive is too big.",
    CheckName.PACKED_SIZE: "The zip archive is too big.",
    CheckName.ENTRY_COUNT: "There are too many entries in the zip archive.",
    CheckName.FILE_COUNT: "There are too many files in the zip archive.",
    CheckName.DIRECTORY_COUNT: "There are too many directories in the zip archive.",
    CheckName.PATH_LENGTH: "An entry path in the zip archive is too long.",
    CheckName.PATH_COMPONENTS: "An entry path in the zip archive is nested too deeply.",
    CheckName.CONTAINS_HTML_FILE: "The zip archive does not have the required HTML file presence.",
    CheckName.CONTAINS_ZIP_FILE: "The zip archive does not have the required nested zip file presence.",
    CheckName.FORBIDDEN_CHARACTERS: "An entry path in the zip archive contains forbidden characters.",
    CheckName.ZIP_CORRUPT: "The zip archive is corrupt or could not be inspected.",
}

ValidationConfig = Mapping[Union[str, CheckName], Any]


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one handle against one config."""

    passed: bool
    failures: frozenset[CheckName] = field(default_factory=frozenset)

    def __bool__(self) -> bool:
        return self.passed

    def messages(self) -> list[str]:
        """Human-readable messages for the failed checks, sorted by check name."""
        return [FAILURE_MESSAGES[name] for name in sorted(self.failures, key=lambda n: n.value)]


def normalize_config(config: ValidationConfig) -> dict[CheckName, Any]:
    """
    Check a validation config and key it by ``CheckName``.

    Args:
        config: Mapping of check names (strings or ``CheckName``) to values

    Returns:
        Dict keyed by ``CheckName``; patterns are compiled

    Raises:
        ValidationConfigError: Unknown check, duplicate key or ill-typed value.
    """
    if not isinstance(config, Mapping):
        raise ValidationConfigError(f"Validation config must be a mapping, got {type(config).__name__}")

    normalized: dict[CheckName, Any] = {}
    for key, value in config.items():
        try:
            name = CheckName(key)
        except ValueError:
            raise ValidationConfigError(f"Unknown validation check {key!r}") from None
        if name not in CONFIGURABLE_CHECKS:
            raise ValidationConfigError(f"Check {name.value!r} cannot be configured")
        if name in normalized:
            raise ValidationConfigError(f"Check {name.value!r} is configured twice")

        if name in THRESHOLD_CHECKS:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationConfigError(f"{name.value} needs a non-negative integer, got {value!r}")
        elif name in FLAG_CHECKS:
            if not isinstance(value, bool):
                raise ValidationConfigError(f"{name.value} needs a boolean, got {value!r}")
        else:
            value = _compile_pattern(name, value)

        normalized[name] = value
    return normalized


def _compile_pattern(name: CheckName, value: Any) -> re.Pattern:
    if isinstance(value, re.Pattern):
        return value
    if not isinstance(value, str):
        raise ValidationConfigError(f"{name.value} needs a regular expression, got {value!r}")
    try:
        return re.compile(value)
    except re.error as e:
        raise ValidationConfigError(f"{name.value} is not a valid regular expression: {e}") from e


def _check_passes(handle: ArchiveHandle, name: CheckName, value: Any) -> bool:
    if name == CheckName.CONTENTS_SIZE:
        return handle.size_unpacked <= value
    if name == CheckName.PACKED_SIZE:
        return handle.packed_size <= value
    if name == CheckName.ENTRY_COUNT:
        return handle.entry_count <= value
    if name == CheckName.FILE_COUNT:
        return handle.file_count <= value
    if name == CheckName.DIRECTORY_COUNT:
        return handle.directory_count <= value
    if name == CheckName.PATH_LENGTH:
        return handle.max_path_length <= value
    if name == CheckName.PATH_COMPONENTS:
        return handle.max_path_components <= value
    if name == CheckName.CONTAINS_HTML_FILE:
        return handle.contains_html_file == value
    if name == CheckName.CONTAINS_ZIP_FILE:
        return handle.contains_zip_file == value
    if name == CheckName.FORBIDDEN_CHARACTERS:
        return not any(value.search(part) for entry in handle.entries for part in entry.components)
    raise ValidationConfigError(f"No rule for check {name.value!r}")


class Validator:
    """Evaluates validation configs against archive handles."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def validate(self, handle: ArchiveHandle, config: ValidationConfig) -> ValidationResult:
        """
        Run every configured check against *handle*.

        A corrupt handle fails with ``{zip_corrupt}`` alone, whatever the
        config holds.

        Args:
            handle: Handle from ``ArchiveInspector.open()``
            config: Check name to threshold/flag/pattern mapping

        Returns:
            ValidationResult listing every failed check

        Raises:
            ValidationConfigError: The config is malformed.
        """
        if handle.is_corrupt:
            self.log.info("Validation of %s: archive is corrupt", handle.path)
            return ValidationResult(passed=False, failures=frozenset({CheckName.ZIP_CORRUPT}))

        checks = normalize_config(config)
        failures = frozenset(name for name, value in checks.items() if not _check_passes(handle, name, value))

        if failures:
            self.log.info(
                "Validation of %s failed: %s", handle.path, ", ".join(sorted(f.value for f in failures))
            )
        return ValidationResult(passed=not failures, failures=failures)


def validate(handle: ArchiveHandle, config: ValidationConfig) -> ValidationResult:
    """Convenience wrapper around ``Validator().validate()``."""
    return Validator().validate(handle, config)
