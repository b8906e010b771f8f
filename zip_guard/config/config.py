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
Configuration class for zip-guard.

Every knob that used to be a process-wide global (log level, version
whitelist, subprocess limits) lives here and is handed to the components at
construction time.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .constants import ZipGuardConstants

logger = logging.getLogger(__name__)


def _env_float(name: str) -> float | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, value)
        return None


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, value)
        return None


@dataclass
class Config:
    """
    Configuration for zip-guard.

    Values passed explicitly win; values left at their defaults are
    overridden from ``ZIP_GUARD_*`` environment variables.
    """

    # Archive utility
    unzip_binary: str = ZipGuardConstants.DEFAULT_UNZIP_BINARY
    version_whitelist: tuple[str, ...] = field(
        default_factory=lambda: tuple(ZipGuardConstants.DEFAULT_VERSION_WHITELIST)
    )

    # Subprocess limits
    subprocess_timeout: float = ZipGuardConstants.DEFAULT_SUBPROCESS_TIMEOUT
    max_output_bytes: int = ZipGuardConstants.DEFAULT_MAX_OUTPUT_BYTES
    read_chunk_size: int = ZipGuardConstants.DEFAULT_READ_CHUNK_SIZE

    # Validation policy (YAML); None means the built-in default policy
    policy_path: Path | None = None

    def __post_init__(self):
        """Load configuration from environment variables if not provided."""

        if self.unzip_binary == ZipGuardConstants.DEFAULT_UNZIP_BINARY:
            if env_binary := os.getenv("ZIP_GUARD_UNZIP_BINARY"):
                self.unzip_binary = env_binary

        if self.version_whitelist == tuple(ZipGuardConstants.DEFAULT_VERSION_WHITELIST):
            if env_whitelist := os.getenv("ZIP_GUARD_VERSION_WHITELIST"):
                parts = [p.strip() for p in env_whitelist.split(",")]
                self.version_whitelist = tuple(p for p in parts if p)
        else:
            self.version_whitelist = tuple(self.version_whitelist)

        if self.subprocess_timeout == ZipGuardConstants.DEFAULT_SUBPROCESS_TIMEOUT:
            if (env_timeout := _env_float("ZIP_GUARD_SUBPROCESS_TIMEOUT")) is not None:
                self.subprocess_timeout = env_timeout

        if self.max_output_bytes == ZipGuardConstants.DEFAULT_MAX_OUTPUT_BYTES:
            if (env_max := _env_int("ZIP_GUARD_MAX_OUTPUT_BYTES")) is not None:
                self.max_output_bytes = env_max

        if self.policy_path is None:
            if env_policy := os.getenv("ZIP_GUARD_POLICY"):
                self.policy_path = Path(env_policy)
        else:
            self.policy_path = Path(self.policy_path)

        if self.subprocess_timeout <= 0:
            raise ValueError(f"subprocess_timeout must be positive, got {self.subprocess_timeout}")
        if self.max_output_bytes <= 0:
            raise ValueError(f"max_output_bytes must be positive, got {self.max_output_bytes}")
        if self.read_chunk_size <= 0:
            raise ValueError(f"read_chunk_size must be positive, got {self.read_chunk_size}")

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from environment variables.

        Returns:
            Config instance with values from environment
        """
        return cls()

    @classmethod
    def from_file(cls, config_file: Path) -> "Config":
        """
        Load configuration from .env file.

        Keys already present in the process environment are not overwritten.

        Args:
            config_file: Path to .env file

        Returns:
            Config instance
        """
        config_file = Path(config_file)
        if config_file.exists():
            load_dotenv(config_file, override=False)

        return cls.from_env()
