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
Validation policy: organisation-level thresholds for archive validation.

A ``ValidationPolicy`` is the YAML-backed form of a validation config. Each
threshold left as ``null`` means "skip this check".

Usage
-----
    from zip_guard.core.validation_policy import ValidationPolicy

    # Load built-in defaults
    policy = ValidationPolicy.default()

    # Load an org policy (merges on top of defaults)
    policy = ValidationPolicy.from_yaml("my_policy.yaml")

    # Dump the current (including default) policy for editing
    policy.to_yaml("generated_policy.yaml")

    result = Validator().validate(handle, policy.to_config())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..data import DEFAULT_POLICY_PATH, PERMISSIVE_POLICY_PATH, STRICT_POLICY_PATH
from .exceptions import ValidationConfigError
from .validator import normalize_config

logger = logging.getLogger(__name__)

# Named preset policies
_PRESET_POLICIES: dict[str, Path] = {
    "strict": STRICT_POLICY_PATH,
    "balanced": DEFAULT_POLICY_PATH,
    "permissive": PERMISSIVE_POLICY_PATH,
}


# ---------------------------------------------------------------------------
# Data classes for each policy section
# ---------------------------------------------------------------------------


@dataclass
class SizeLimitsPolicy:
    """Byte limits."""

    # Sum of the unpacked sizes of all files
    contents_size: int | None = None
    # Size of the archive on disk
    packed_size: int | None = None


@dataclass
class EntryLimitsPolicy:
    """Entry count limits."""

    entry_count: int | None = None
    file_count: int | None = None
    directory_count: int | None = None


@dataclass
class PathPolicy:
    """Limits on entry names."""

    path_length: int | None = None
    path_components: int | None = None
    # Regex searched in every path component
    forbidden_characters: str | None = None


@dataclass
class ContentPolicy:
    """Required presence or absence of kinds of entries."""

    contains_html_file: bool | None = None
    # Nested archives escape every other check
    contains_zip_file: bool | None = None


_SECTIONS: dict[str, type] = {
    "sizes": SizeLimitsPolicy,
    "entries": EntryLimitsPolicy,
    "paths": PathPolicy,
    "content": ContentPolicy,
}
_METADATA_KEYS = {"policy_name", "policy_version", "preset_base"}


# ---------------------------------------------------------------------------
# The top-level policy object
# ---------------------------------------------------------------------------


@dataclass
class ValidationPolicy:
    """Organisational validation policy."""

    # Metadata
    policy_name: str = "default"
    policy_version: str = "1.0"
    preset_base: str = "balanced"

    # Sections
    sizes: SizeLimitsPolicy = field(default_factory=SizeLimitsPolicy)
    entries: EntryLimitsPolicy = field(default_factory=EntryLimitsPolicy)
    paths: PathPolicy = field(default_factory=PathPolicy)
    content: ContentPolicy = field(default_factory=ContentPolicy)

    def to_config(self) -> dict[str, Any]:
        """
        Flatten into a validation config for ``Validator.validate()``.

        Raises:
            ValidationConfigError: A value has the wrong type.
        """
        config: dict[str, Any] = {}
        for section_name in _SECTIONS:
            section = getattr(self, section_name)
            for key, value in vars(section).items():
                if value is not None:
                    config[key] = value
        normalize_config(config)
        return config

    # -----------------------------------------------------------------------
    # Construction helpers
    # -----------------------------------------------------------------------

    @classmethod
    def default(cls) -> ValidationPolicy:
        """Load the built-in default policy that ships with the package."""
        return cls.from_yaml(DEFAULT_POLICY_PATH)

    @classmethod
    def from_preset(cls, name: str) -> ValidationPolicy:
        """Load a named preset policy: ``strict``, ``balanced``, or ``permissive``."""
        name_lower = name.lower()
        if name_lower not in _PRESET_POLICIES:
            raise ValueError(f"Unknown preset '{name}'. Available: {', '.join(sorted(_PRESET_POLICIES))}")
        return cls.from_yaml(_PRESET_POLICIES[name_lower])

    @classmethod
    def preset_names(cls) -> list[str]:
        """Return available preset policy names."""
        return sorted(_PRESET_POLICIES.keys())

    @classmethod
    def from_yaml(cls, path: str | Path) -> ValidationPolicy:
        """
        Load a policy from a YAML file.

        The YAML is merged on top of the built-in defaults so that users only
        need to specify the sections they want to override.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Policy file not found: {path}")

        with open(path) as fh:
            raw = yaml.safe_load(fh) or {}
        if not isinstance(raw, dict):
            raise ValidationConfigError(f"Policy file {path} must contain a mapping")

        is_default = path.resolve() == DEFAULT_POLICY_PATH.resolve()
        if is_default:
            policy = cls._from_dict(raw)
        else:
            merged = cls._deep_merge(cls._load_default_raw(), raw)
            policy = cls._from_dict(merged)

        logger.debug("Loaded validation policy %s from %s", policy.policy_name, path)
        return policy

    def to_yaml(self, path: str | Path) -> None:
        """Dump the full policy to a YAML file for editing."""
        data = self._to_dict()
        with open(path, "w") as fh:
            fh.write("# zip-guard - Validation Policy\n")
            fh.write("# Set a value to null to skip that check.\n")
            fh.write("# Only include sections you want to override; omitted sections\n")
            fh.write("# will use the built-in defaults.\n\n")
            yaml.dump(data, fh, default_flow_style=False, sort_keys=False, width=120)

    # -----------------------------------------------------------------------
    # Internal parsing
    # -----------------------------------------------------------------------

    @classmethod
    def _load_default_raw(cls) -> dict[str, Any]:
        if DEFAULT_POLICY_PATH.exists():
            with open(DEFAULT_POLICY_PATH) as fh:
                return yaml.safe_load(fh) or {}
        return {}

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Recursively merge *override* into *base*."""
        result = dict(base)
        for key, val in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(val, dict):
                result[key] = ValidationPolicy._deep_merge(result[key], val)
            else:
                result[key] = val
        return result

    @classmethod
    def _from_dict(cls, d: dict[str, Any]) -> ValidationPolicy:
        unknown = set(d) - _METADATA_KEYS - set(_SECTIONS)
        if unknown:
            raise ValidationConfigError(f"Unknown policy sections: {', '.join(sorted(unknown))}")

        sections: dict[str, Any] = {}
        for section_name, section_cls in _SECTIONS.items():
            raw = d.get(section_name) or {}
            if not isinstance(raw, dict):
                raise ValidationConfigError(f"Policy section {section_name!r} must be a mapping")
            allowed = set(section_cls.__dataclass_fields__)
            bad = set(raw) - allowed
            if bad:
                raise ValidationConfigError(
                    f"Unknown keys in policy section {section_name!r}: {', '.join(sorted(bad))}"
                )
            sections[section_name] = section_cls(**raw)

        policy = cls(
            policy_name=d.get("policy_name", "default"),
            policy_version=str(d.get("policy_version", "1.0")),
            preset_base=d.get("preset_base", "balanced"),
            **sections,
        )
        # Fail on ill-typed values at load time, not at first validation.
        policy.to_config()
        return policy

    def _to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "policy_name": self.policy_name,
            "policy_version": self.policy_version,
            "preset_base": self.preset_base,
        }
        for section_name in _SECTIONS:
            data[section_name] = dict(vars(getattr(self, section_name)))
        return data
