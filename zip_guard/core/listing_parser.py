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
Parser for Info-ZIP ``unzip -l`` listings.

The listing is the wire format between the archive utility and this
package, so it is parsed strictly: anything unexpected rejects the whole
listing. Example input::

    Archive:  test-ad.zip
      Length      Date    Time    Name
    ---------  ---------- -----   ----
          112  2015-10-06 10:37   index.html
            0  2015-10-06 10:36   images/
       732059  2015-10-03 21:58   images/test.png
    ---------                     -------
       732171                     3 files

Three header lines (banner, column titles, separator) and two footer lines
(separator, totals) frame the data rows. UnZip 5.52 prints dates as
``MM-DD-YY``; Debian's UnZip 6.0 prints ``YYYY-MM-DD``; both are accepted.
"""

from __future__ import annotations

import logging
import re

from ..config.constants import ZipGuardConstants
from .exceptions import ListingParseError
from .models import Entry, EntryType

logger = logging.getLogger(__name__)

HEADER_LINES = ZipGuardConstants.LISTING_HEADER_LINES
FOOTER_LINES = ZipGuardConstants.LISTING_FOOTER_LINES
MIN_LINES = HEADER_LINES + FOOTER_LINES

_DATE = r"(?:\d{4}-\d{2}-\d{2}|\d{2}-\d{2}-\d{2}(?:\d{2})?)"
_TIME = r"\d{2}:\d{2}"

_ENTRY_RE = re.compile(rf"^\s*(?P<size>\d+)\s+{_DATE}\s+{_TIME}\s+(?P<name>.+)$")
_BANNER_RE = re.compile(r"^\s*Archive:\s+\S")
_SEPARATOR_RE = re.compile(r"^\s*-+(?:\s+-+)*\s*$")
_TOTALS_RE = re.compile(r"^\s*\d+\s+\d+\s+files?\s*$")


def _split_lines(text: str) -> list[str]:
    # Only "\n" ends a row; str.splitlines() would also split on characters
    # that are legal inside entry names.
    lines = text.split("\n")
    while lines and lines[-1].strip() == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _parse_row(line: str) -> Entry:
    match = _ENTRY_RE.match(line)
    if match is None:
        logger.error("Bad listing row: %r", line)
        raise ListingParseError("Bad entry line in listing", line)

    size = int(match.group("size"))
    name = match.group("name")

    if name.endswith("/"):
        if size != 0:
            logger.error("Directory entry with non-zero size: %r", line)
            raise ListingParseError("Directory entry with non-zero size", line)
        return Entry(name=name, type=EntryType.DIRECTORY, size=0)

    return Entry(name=name, type=EntryType.FILE, size=size)


def parse_listing(text: str) -> list[Entry]:
    """
    Parse ``unzip -l`` output into entries.

    Args:
        text: Decoded stdout of ``unzip -l``

    Returns:
        Entries in the order the tool listed them

    Raises:
        ListingParseError: The text does not follow the listing grammar, names
            a directory with a non-zero size, or lists a name twice.
    """
    lines = _split_lines(text)
    if len(lines) < MIN_LINES:
        raise ListingParseError(f"Listing has too few lines ({len(lines)} < {MIN_LINES})")

    header = lines[:HEADER_LINES]
    footer = lines[len(lines) - FOOTER_LINES :]
    rows = lines[HEADER_LINES : len(lines) - FOOTER_LINES]

    if not _BANNER_RE.match(header[0]):
        raise ListingParseError("Listing does not start with an 'Archive:' banner", header[0])
    if not _SEPARATOR_RE.match(header[-1]):
        raise ListingParseError("Listing header separator is missing", header[-1])
    if not _SEPARATOR_RE.match(footer[0]):
        raise ListingParseError("Listing footer separator is missing", footer[0])
    if not _TOTALS_RE.match(footer[1]):
        raise ListingParseError("Listing totals line is malformed", footer[1])

    entries: list[Entry] = []
    seen: set[str] = set()
    for line in rows:
        entry = _parse_row(line)
        if entry.name in seen:
            logger.error("Duplicate entry name in listing: %r", entry.name)
            raise ListingParseError(f"Duplicate entry name {entry.name!r}", line)
        seen.add(entry.name)
        entries.append(entry)

    return entries

