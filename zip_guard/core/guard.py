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
High-level entry point wiring inspection, validation and extraction.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..config.config import Config
from .extractor import Extractor
from .inspector import ArchiveInspector
from .models import ArchiveHandle
from .process_runner import ProcessRunner
from .validation_policy import ValidationPolicy
from .validator import ValidationConfig, ValidationResult, Validator

logger = logging.getLogger(__name__)


class ZipGuard:
    """Inspects, validates and unpacks untrusted ZIP archives."""

    def __init__(
        self,
        config: Config | None = None,
        policy: ValidationPolicy | None = None,
        log: logging.Logger | None = None,
    ):
        """
        Initialize the guard.

        Args:
            config: Toolchain and subprocess settings. If None, loads from
                the environment.
            policy: Validation policy used when ``validate()`` gets no config.
                If None, loads ``config.policy_path`` or the built-in default.
            log: Logger handed to every component.
        """
        self.config = config or Config.from_env()
        if policy is None:
            if self.config.policy_path is not None:
                policy = ValidationPolicy.from_yaml(self.config.policy_path)
            else:
                policy = ValidationPolicy.default()
        self.policy = policy

        runner = ProcessRunner(
            timeout=self.config.subprocess_timeout,
            max_output_bytes=self.config.max_output_bytes,
            read_chunk_size=self.config.read_chunk_size,
            log=log,
        )
        self.inspector = ArchiveInspector(
            runner=runner,
            unzip_binary=self.config.unzip_binary,
            version_whitelist=self.config.version_whitelist,
            log=log,
        )
        self.validator = Validator(log=log)
        self.extractor = Extractor(runner=runner, unzip_binary=self.config.unzip_binary, log=log)

    def open(self, path: str | os.PathLike) -> ArchiveHandle:
        """Inspect *path*; see ``ArchiveInspector.open()``."""
        return self.inspector.open(path)

    def validate(self, handle: ArchiveHandle, config: ValidationConfig | None = None) -> ValidationResult:
        """Validate *handle* against *config*, or against the policy when None."""
        if config is None:
            config = self.policy.to_config()
        return self.validator.validate(handle, config)

    def unpack(self, handle: ArchiveHandle, destination: str | os.PathLike) -> list[Path]:
        """Extract *handle* into an empty directory; see ``Extractor.unpack()``."""
        return self.extractor.unpack(handle, destination)


def inspect_archive(
    path: str | os.PathLike,
    validation: ValidationConfig | None = None,
    config: Config | None = None,
) -> tuple[ArchiveHandle, ValidationResult]:
    """
    Convenience function to inspect and validate one archive.

    Args:
        path: Path to the archive
        validation: Validation config; the default policy when None
        config: Optional toolchain configuration

    Returns:
        The handle and its validation result
    """
    guard = ZipGuard(config=config)
    handle = guard.open(path)
    return handle, guard.validate(handle, validation)
