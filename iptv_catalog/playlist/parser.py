"""
Parses extended M3U playlist text into raw entries.

An entry is an `#EXTINF` line followed by the first non-directive line, which
holds the media location:

    #EXTM3U
    #EXTINF:-1 tvg-name="BBC One" tvg-logo="http://..." group-title="UK",BBC One
    http://server/live/user/pass/1.ts
"""

import logging
import re

from iptv_catalog.exceptions import ParseError
from iptv_catalog.models.catalog import RawEntry

log = logging.getLogger(__name__)

HEADER = "#EXTM3U"
EXTINF = "#EXTINF:"
EXTGRP = "#EXTGRP:"

# key="value", key=value; keys may contain dashes (tvg-name, group-title)
_ATTR_RE = re.compile(r'([A-Za-z0-9_.:-]+)\s*=\s*(?:"([^"]*)"|(\S+))')
_DURATION_RE = re.compile(r"^-?\d+(?:\.\d+)?")


def _split_info(body: str) -> tuple[str, str]:
    """Splits an EXTINF body at the first comma outside double quotes."""
    in_quote = False
    for i, ch in enumerate(body):
        if ch == '"':
            in_quote = not in_quote
        elif ch == "," and not in_quote:
            return body[:i], body[i + 1 :]
    # Unbalanced quotes: fall back to the last comma
    head, sep, title = body.rpartition(",")
    if sep:
        return head, title
    return body, ""


def parse_attributes(text: str) -> dict[str, str]:
    """
    Extracts key/value attributes from an EXTINF head.

    Keys are lower-cased and the first occurrence of a key wins. Values with a
    missing closing quote are kept without the quote.
    """
    attributes: dict[str, str] = {}
    for match in _ATTR_RE.finditer(text):
        key = match.group(1).lower()
        value = match.group(2)
        if value is None:
            value = match.group(3).strip('"')
        attributes.setdefault(key, value.strip())
    return attributes


def _parse_extinf(line: str) -> tuple[str, dict[str, str], str]:
    body = line[len(EXTINF) :].strip()
    head, title = _split_info(body)
    duration_match = _DURATION_RE.match(head)
    duration = duration_match.group(0) if duration_match else "-1"
    return duration, parse_attributes(head), title.strip()


def parse_playlist(text: str) -> list[RawEntry]:
    """
    Parses playlist text into entries in file order.

    Entries whose location cannot be determined (an `#EXTINF` followed by
    another `#EXTINF` or the end of the file) are dropped. Bare location lines
    without an `#EXTINF` become entries without attributes.

    Raises:
        ParseError: If the text is empty, or has neither an `#EXTM3U` header
        nor any `#EXTINF` line.
    """
    text = (text or "").lstrip("\ufeff")
    if not text.strip():
        raise ParseError("Playlist is empty.")

    lines = text.splitlines()
    first_line = next(line.strip() for line in lines if line.strip())
    has_header = first_line.upper().startswith(HEADER)
    if not has_header and not any(
        line.lstrip().upper().startswith(EXTINF) for line in lines
    ):
        raise ParseError(
            "Not an extended playlist: no #EXTM3U header or #EXTINF entries found."
        )

    entries: list[RawEntry] = []
    pending: tuple[str, dict[str, str], str] | None = None
    pending_group: str | None = None
    dropped = 0

    for lineno, raw_line in enumerate(lines, 1):
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith(EXTINF):
            if pending is not None:
                dropped += 1
                log.debug(f"Line {lineno}: previous #EXTINF has no location, dropped.")
            pending = _parse_extinf(line)
            pending_group = None
            continue
        if upper.startswith(EXTGRP):
            pending_group = line[len(EXTGRP) :].strip() or None
            continue
        if line.startswith("#"):
            continue

        if pending is None:
            entries.append(RawEntry(location=line))
            continue

        duration, attributes, title = pending
        if pending_group and not attributes.get("group-title"):
            attributes["group-title"] = pending_group
        entries.append(
            RawEntry(
                location=line, attributes=attributes, title=title, duration=duration
            )
        )
        pending = None
        pending_group = None

    if pending is not None:
        dropped += 1
        log.debug("Last #EXTINF has no location, dropped.")

    log.debug(f"Parsed {len(entries)} playlist entries ({dropped} dropped).")
    return entries
