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
zip-guard - inspection, validation and extraction of untrusted ZIP archives.
"""

try:
    from ._version import __version__
except ImportError:
    __version__ = "0.0.0+unknown"


def __getattr__(name: str):
    """Lazy-load public API symbols on first access."""
    _lazy_map = {
        "Config": (".config.config", "Config"),
        "ZipGuardConstants": (".config.constants", "ZipGuardConstants"),
        "ArchiveHandle": (".core.models", "ArchiveHandle"),
        "Entry": (".core.models", "Entry"),
        "EntryType": (".core.models", "EntryType"),
        "InspectionState": (".core.models", "InspectionState"),
        "ProcessResult": (".core.models", "ProcessResult"),
        "ProcessRunner": (".core.process_runner", "ProcessRunner"),
        "parse_listing": (".core.listing_parser", "parse_listing"),
        "ArchiveInspector": (".core.inspector", "ArchiveInspector"),
        "CheckName": (".core.validator", "CheckName"),
        "ValidationResult": (".core.validator", "ValidationResult"),
        "Validator": (".core.validator", "Validator"),
        "validate": (".core.validator", "validate"),
        "ValidationPolicy": (".core.validation_policy", "ValidationPolicy"),
        "Extractor": (".core.extractor", "Extractor"),
        "ZipGuard": (".core.guard", "ZipGuard"),
        "inspect_archive": (".core.guard", "inspect_archive"),
    }
    if name in _lazy_map:
        module_path, attr = _lazy_map[name]
        import importlib

        mod = importlib.import_module(module_path, __package__)
        val = getattr(mod, attr)
        # Cache on the module so __getattr__ is only called once per symbol
        globals()[name] = val
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ZipGuard",
    "inspect_archive",
    "ArchiveInspector",
    "ArchiveHandle",
    "Entry",
    "EntryType",
    "InspectionState",
    "ProcessResult",
    "ProcessRunner",
    "parse_listing",
    "CheckName",
    "ValidationResult",
    "Validator",
    "validate",
    "ValidationPolicy",
    "Extractor",
    "Config",
    "ZipGuardConstants",
]
