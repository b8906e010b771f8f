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

"""Tests for archive validation."""

import logging
import re
from collections.abc import Mapping

import pytest

from zip_guard.core.exceptions import CorruptArchiveError, ValidationConfigError
from zip_guard.core.models import ArchiveHandle
from zip_guard.core.validator import (
    CONFIGURABLE_CHECKS,
    FAILURE_MESSAGES,
    CheckName,
    ValidationResult,
    Validator,
    normalize_config,
    validate,
)


class PairsMapping(Mapping):
    """Mapping whose items() yields its pairs as given, repeated keys included."""

    def __init__(self, pairs):
        self._pairs = list(pairs)

    def __getitem__(self, key):
        for k, v in self._pairs:
            if k == key:
                return v
        raise KeyError(key)

    def __iter__(self):
        return (k for k, _v in self._pairs)

    def __len__(self):
        return len(self._pairs)

    def items(self):
        return list(self._pairs)


@pytest.fixture
def corrupt_handle() -> ArchiveHandle:
    return ArchiveHandle.corrupt("invalid.zip", CorruptArchiveError("bad CRC", exit_code=2))


class TestThresholds:
    """Each threshold passes at the measured value and fails one below it."""

    @pytest.mark.parametrize(
        "check,passing,failing",
        [
            ("contents_size", 732274, 732273),
            ("packed_size", 729889, 729888),
            ("entry_count", 6, 5),
            ("file_count", 4, 3),
            ("directory_count", 2, 1),
            ("path_length", 15, 14),
            ("path_components", 2, 1),
        ],
    )
    def test_boundary(self, test_ad_handle, check, passing, failing):
        assert validate(test_ad_handle, {check: passing}).passed
        result = validate(test_ad_handle, {check: failing})
        assert not result.passed
        assert result.failures == {CheckName(check)}

    def test_generous_limits(self, test_ad_handle):
        assert validate(test_ad_handle, {"contents_size": 732275, "packed_size": 729890}).passed

    def test_nested_path_components(self, nested_handle):
        assert validate(nested_handle, {"path_components": 3}).passed
        assert validate(nested_handle, {"path_components": 2}).failures == {CheckName.PATH_COMPONENTS}

    def test_zero_threshold(self, make_handle):
        empty = make_handle([], packed_size=22)
        assert validate(empty, {"entry_count": 0, "file_count": 0, "path_length": 0, "contents_size": 0}).passed

    @pytest.mark.parametrize("limit", [0, 1, 5, 6, 7, 100])
    def test_monotone(self, test_ad_handle, limit):
        """Raising a threshold never turns a pass into a failure."""
        if validate(test_ad_handle, {"entry_count": limit}).passed:
            assert validate(test_ad_handle, {"entry_count": limit + 1}).passed


class TestFlags:
    """Required presence or absence of HTML and nested ZIP files."""

    def test_html_present(self, test_ad_handle):
        assert validate(test_ad_handle, {"contains_html_file": True}).passed
        assert validate(test_ad_handle, {"contains_html_file": False}).failures == {CheckName.CONTAINS_HTML_FILE}

    def test_zip_absent(self, test_ad_handle):
        assert validate(test_ad_handle, {"contains_zip_file": False}).passed
        assert validate(test_ad_handle, {"contains_zip_file": True}).failures == {CheckName.CONTAINS_ZIP_FILE}

    def test_nested_zip(self, make_handle):
        handle = make_handle([("index.html", 10), ("payload.ZIP", 200)])
        assert validate(handle, {"contains_zip_file": True}).passed

    def test_htm_extension(self, make_handle):
        assert validate(make_handle([("page.HTM", 10)]), {"contains_html_file": True}).passed

    def test_directory_named_like_html(self, make_handle):
        handle = make_handle([("site.html/", 0), ("site.html/readme.txt", 5)])
        assert validate(handle, {"contains_html_file": False}).passed


class TestForbiddenCharacters:
    """Pattern searched in every path component."""

    def test_clean_names(self, test_ad_handle):
        assert validate(test_ad_handle, {"forbidden_characters": r"[\\:*?\"<>|]"}).passed

    def test_character_in_file_name(self, make_handle):
        handle = make_handle([("index.html", 10), ("images/what?.png", 10)])
        result = validate(handle, {"forbidden_characters": r"[?]"})
        assert result.failures == {CheckName.FORBIDDEN_CHARACTERS}

    def test_character_in_directory_name(self, make_handle):
        handle = make_handle([("a:b/", 0), ("a:b/index.html", 10)])
        assert not validate(handle, {"forbidden_characters": ":"}).passed

    def test_parent_directory_component(self, make_handle):
        handle = make_handle([("../../etc/passwd", 10)])
        assert not validate(handle, {"forbidden_characters": r"^\.\.$"}).passed

    def test_dots_inside_a_name_are_fine(self, make_handle):
        handle = make_handle([("archive..v2.html", 10)])
        assert validate(handle, {"forbidden_characters": r"^\.\.$"}).passed

    def test_precompiled_pattern(self, make_handle):
        handle = make_handle([("index.html", 10)])
        assert not validate(handle, {"forbidden_characters": re.compile("index")}).passed


class TestCombined:
    """Several checks in one config."""

    def test_reports_every_failure(self, test_ad_handle):
        result = validate(
            test_ad_handle,
            {
                "contents_size": 1_000_000,
                "file_count": 3,
                "path_length": 10,
                "contains_html_file": True,
                "contains_zip_file": False,
            },
        )
        assert not result.passed
        assert result.failures == {CheckName.FILE_COUNT, CheckName.PATH_LENGTH}

    def test_every_check_at_once(self, test_ad_handle):
        config = {
            "contents_size": 732274,
            "packed_size": 729889,
            "entry_count": 6,
            "file_count": 4,
            "directory_count": 2,
            "path_length": 15,
            "path_components": 2,
            "contains_html_file": True,
            "contains_zip_file": False,
            "forbidden_characters": r"[\\:]",
        }
        assert set(normalize_config(config)) == CONFIGURABLE_CHECKS
        assert validate(test_ad_handle, config).passed

    def test_empty_config_passes(self, test_ad_handle):
        assert validate(test_ad_handle, {}) == ValidationResult(passed=True)

    def test_enum_keys(self, test_ad_handle):
        assert validate(test_ad_handle, {CheckName.FILE_COUNT: 3}).failures == {CheckName.FILE_COUNT}

    def test_repeatable(self, test_ad_handle):
        config = {"file_count": 3, "directory_count": 5}
        assert validate(test_ad_handle, config) == validate(test_ad_handle, config)

    def test_logs_failures(self, test_ad_handle, caplog):
        with caplog.at_level(logging.INFO, logger="zip_guard"):
            Validator().validate(test_ad_handle, {"file_count": 3})
        assert "file_count" in caplog.text


class TestCorruptHandle:
    """Corrupt archives short-circuit every check."""

    def test_corrupt_only(self, corrupt_handle):
        result = validate(corrupt_handle, {"file_count": 1000})
        assert not result.passed
        assert result.failures == {CheckName.ZIP_CORRUPT}

    def test_empty_config(self, corrupt_handle):
        assert validate(corrupt_handle, {}).failures == {CheckName.ZIP_CORRUPT}

    def test_malformed_config_is_not_examined(self, corrupt_handle):
        assert validate(corrupt_handle, {"no_such_check": "x"}).failures == {CheckName.ZIP_CORRUPT}


class TestConfigErrors:
    """Malformed configs raise instead of silently skipping checks."""

    @pytest.mark.parametrize(
        "config",
        [
            {"no_such_check": 1},
            {"zip_corrupt": True},
            {"file_count": -1},
            {"file_count": 1.5},
            {"file_count": "10"},
            {"file_count": True},
            {"contains_html_file": 1},
            {"contains_zip_file": "false"},
            {"forbidden_characters": 7},
            {"forbidden_characters": "[unclosed"},
        ],
    )
    def test_rejected(self, test_ad_handle, config):
        with pytest.raises(ValidationConfigError):
            validate(test_ad_handle, config)

    def test_not_a_mapping(self, test_ad_handle):
        with pytest.raises(ValidationConfigError):
            validate(test_ad_handle, [("file_count", 3)])

    def test_string_and_enum_key_are_one_key(self):
        """A plain dict cannot hold both spellings of a check name."""
        config = {"file_count": 3, CheckName.FILE_COUNT: 4}
        assert normalize_config(config) == {CheckName.FILE_COUNT: 4}

    def test_duplicate_key(self):
        config = PairsMapping([("file_count", 3), (CheckName.FILE_COUNT, 4)])
        with pytest.raises(ValidationConfigError, match="twice"):
            normalize_config(config)


class TestMessages:
    """Human-readable failure messages."""

    def test_every_check_has_a_message(self):
        assert set(FAILURE_MESSAGES) == set(CheckName)

    def test_sorted_by_check_name(self, test_ad_handle):
        result = validate(test_ad_handle, {"path_length": 1, "file_count": 1, "contents_size": 1})
        assert result.messages() == [
            FAILURE_MESSAGES[CheckName.CONTENTS_SIZE],
            FAILURE_MESSAGES[CheckName.FILE_COUNT],
            FAILURE_MESSAGES[CheckName.PATH_LENGTH],
        ]

    def test_truthiness(self, test_ad_handle):
        assert validate(test_ad_handle, {})
        assert not validate(test_ad_handle, {"file_count": 0})
