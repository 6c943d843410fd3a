"""Parsing of FTP LIST replies.

LIST output is not standardized; servers in practice emit either Unix
``ls -l`` lines or the MS-DOS/IIS layout. Both are handled here.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime

from .entry import EntryKind, RemoteEntry

log = logging.getLogger(__name__)

_MONTHS = {
    name: i
    for i, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}

_UNIX_RE = re.compile(
    r"^(?P<type>[-dlcbps])[-rwxsStT]{9}\S*\s+"
    r"\d+\s+\S+\s+(?:\S+\s+)?"  # links, owner, optional group
    r"(?P<size>\d+)\s+"
    r"(?P<month>[A-Za-z]{3})\s+(?P<day>\d{1,2})\s+(?P<when>\d{1,2}:\d{2}|\d{4})\s+"
    r"(?P<name>.+)$"
)

_DOS_RE = re.compile(
    r"^(?P<month>\d{2})-(?P<day>\d{2})-(?P<year>\d{2}|\d{4})\s+"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2})(?P<ampm>[AaPp][Mm])\s+"
    r"(?P<size><DIR>|\d+)\s+(?P<name>.+)$"
)


def _unix_mtime(month: str, day: str, when: str, now: datetime) -> datetime | None:
    mon = _MONTHS.get(month.lower())
    if mon is None:
        return None
    try:
        if ":" in when:
            hour, minute = (int(x) for x in when.split(":"))
            # ls drops the year for dates within the last six months
            ts = datetime(now.year, mon, int(day), hour, minute)
            if ts > now:
                ts = ts.replace(year=now.year - 1)
            return ts
        return datetime(int(when), mon, int(day))
    except ValueError:
        return None


def _dos_mtime(m: re.Match[str]) -> datetime | None:
    year = int(m["year"])
    if year < 100:
        year += 1900 if year >= 70 else 2000
    hour = int(m["hour"]) % 12
    if m["ampm"].lower() == "pm":
        hour += 12
    try:
        return datetime(year, int(m["month"]), int(m["day"]), hour, int(m["minute"]))
    except ValueError:
        return None


def parse_list_line(line: str, now: datetime | None = None) -> RemoteEntry | None:
    """Parse one LIST line; return None for lines that name no entry."""
    line = line.rstrip("\r\n")
    if not line.strip() or line.lower().startswith("total "):
        return None

    m = _UNIX_RE.match(line)
    if m:
        name = m["name"]
        if m["type"] == "l" and " -> " in name:
            name = name.split(" -> ", 1)[0]
        if name in (".", ".."):
            return None
        kind = EntryKind.DIRECTORY if m["type"] == "d" else EntryKind.FILE
        mtime = _unix_mtime(m["month"], m["day"], m["when"], now or datetime.now())
        return RemoteEntry(name=name, size=int(m["size"]), mtime=mtime, kind=kind)

    m = _DOS_RE.match(line)
    if m:
        name = m["name"]
        if name in (".", ".."):
            return None
        if m["size"] == "<DIR>":
            return RemoteEntry(name=name, size=0, mtime=_dos_mtime(m), kind=EntryKind.DIRECTORY)
        return RemoteEntry(name=name, size=int(m["size"]), mtime=_dos_mtime(m), kind=EntryKind.FILE)

    raise ValueError(f"unrecognized LIST line: {line!r}")


def parse_listing(lines: list[str], now: datetime | None = None) -> list[RemoteEntry]:
    """Parse a LIST reply, skipping lines in no known format."""
    entries = []
    for line in lines:
        try:
            entry = parse_list_line(line, now)
        except ValueError as e:
            log.debug("skipping LIST line: %s", e)
            continue
        if entry is not None:
            entries.append(entry)
    return entries
