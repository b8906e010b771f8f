#!/usr/bin/env python3
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
Programmatic usage example - using zip-guard as a Python library.

This example demonstrates:
1. Inspecting an uploaded archive
2. Validating it against a preset policy and a hand-written config
3. Unpacking it only when every check passes

Usage:
    python programmatic_usage.py <archive.zip> <empty_directory> [--preset strict|balanced|permissive]
"""

import argparse
import logging
import sys
from pathlib import Path

from zip_guard import Config, ValidationPolicy, ZipGuard
from zip_guard.core.exceptions import SubprocessError


def describe(handle):
    print(f"{'=' * 60}")
    print(f"Archive: {handle.path}")
    print(f"{'=' * 60}")
    print(f"State: {handle.state.value}")
    if handle.is_corrupt:
        print(f"Reason: {handle.reason}")
        return
    print(f"Entries: {handle.entry_count} ({handle.file_count} files, {handle.directory_count} directories)")
    print(f"Unpacked size: {handle.size_unpacked} bytes")
    print(f"Packed size: {handle.size_packed} bytes")
    print(f"Longest path: {handle.max_path_length} characters, {handle.max_path_components} components")


def main():
    parser = argparse.ArgumentParser(description="Inspect, validate and unpack a ZIP archive")
    parser.add_argument("archive", type=Path)
    parser.add_argument("destination", type=Path)
    parser.add_argument("--preset", default="balanced", choices=ValidationPolicy.preset_names())
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    guard = ZipGuard(Config.from_env(), policy=ValidationPolicy.from_preset(args.preset))

    try:
        handle = guard.open(args.archive)
    except SubprocessError as e:
        print(f"Error: could not run unzip: {e}")
        return 2

    describe(handle)

    result = guard.validate(handle)
    # A site-specific rule layered on top of the preset
    site_rules = guard.validate(handle, {"contains_zip_file": False, "path_components": 4})

    failures = result.failures | site_rules.failures
    if failures:
        print("\nRejected:")
        for name in sorted(f.value for f in failures):
            print(f"  - {name}")
        for message in sorted(set(result.messages() + site_rules.messages())):
            print(f"    {message}")
        return 1

    args.destination.mkdir(parents=True, exist_ok=True)
    paths = guard.unpack(handle, args.destination)
    print(f"\nUnpacked {len(paths)} entries to {args.destination}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
