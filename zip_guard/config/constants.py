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
Constants for zip-guard.
"""

from pathlib import Path

try:
    from .._version import __version__ as PACKAGE_VERSION
except Exception:  # pragma: no cover
    PACKAGE_VERSION = "0.0.0-dev"


class ZipGuardConstants:
    """Constants used throughout the inspection pipeline."""

    VERSION = PACKAGE_VERSION

    # Project paths
    PACKAGE_ROOT = Path(__file__).parent.parent
    DATA_DIR = PACKAGE_ROOT / "data"
    DEFAULT_POLICY_PATH = DATA_DIR / "default_policy.yaml"

    # External archive utility
    DEFAULT_UNZIP_BINARY = "unzip"

    # Info-ZIP releases whose `unzip -l` output grammar is known.
    # Matched as prefixes of the first line of `unzip -v`.
    DEFAULT_VERSION_WHITELIST = ("UnZip 6.0", "UnZip 5.52")

    # Subprocess limits
    DEFAULT_SUBPROCESS_TIMEOUT = 20.0  # seconds without any output
    DEFAULT_READ_CHUNK_SIZE = 4096  # bytes per read
    DEFAULT_MAX_OUTPUT_BYTES = 1024 * 1024  # stdout + stderr, per call

    # Listing grammar
    LISTING_HEADER_LINES = 3
    LISTING_FOOTER_LINES = 2

    # Environment variables Info-ZIP reads extra command-line options from
    UNZIP_OPTION_ENV_VARS = ("UNZIP", "UNZIPOPT", "ZIPINFO", "ZIPINFOOPT")

    # unzip expands these as wildcards in the archive argument
    UNZIP_WILDCARD_CHARACTERS = "*?[\\"

    @classmethod
    def get_data_path(cls) -> Path:
        """Get path to data directory."""
        return cls.DATA_DIR

    @classmethod
    def get_default_policy_path(cls) -> Path:
        """Get path to the built-in validation policy."""
        return cls.DEFAULT_POLICY_PATH
