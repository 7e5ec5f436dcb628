"""Race-clock timestamps and durations.

Instants are time-of-day values with no date component. They are carried as
naive ``datetime`` objects pinned to ``CLOCK_DATE`` so that subtracting two
instants yields a ``timedelta``.

Text forms:
- instant in the log: ``[HH:MM:SS.mmm]`` (brackets required)
- instant elsewhere: ``HH:MM:SS.mmm``
- duration: ``HH:MM:SS.mmm`` with an unbounded hour field (``25:12:37.128``)
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta

CLOCK_DATE = datetime(1900, 1, 1)

_CLOCK_RE = re.compile(r"^\d{2}:\d{2}:\d{2}\.\d{3}$")
_LOOSE_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})(?:\.(\d{1,3}))?$")


class FormatError(ValueError):
    """Raised for malformed timestamps and event lines."""


def parse_clock(text: str) -> datetime:
    """Parse an unbracketed ``HH:MM:SS.mmm`` clock string into an instant."""
    if not isinstance(text, str) or not _CLOCK_RE.match(text):
        raise FormatError(f"clock string must match HH:MM:SS.mmm: {text!r}")
    try:
        # strptime without a date field lands on CLOCK_DATE
        return datetime.strptime(text, "%H:%M:%S.%f")
    except ValueError as exc:
        raise FormatError(f"invalid clock value {text!r}: {exc}") from exc


def parse_instant(text: str) -> datetime:
    """Parse a bracketed log timestamp.

    Examples:
        - "[10:00:00.000]" → 10:00:00.000
        - "10:00:00.000" → FormatError (no brackets)
        - "[10:00:00]" → FormatError (no milliseconds)
    """
    if not isinstance(text, str) or not (text.startswith("[") and text.endswith("]")):
        raise FormatError(f"time string must be enclosed in square brackets: {text!r}")
    return parse_clock(text[1:-1])


def parse_duration(text: str) -> timedelta:
    """Parse ``HH:MM:SS`` or ``HH:MM:SS.mmm`` into a duration.

    Used for configuration values, where the millisecond part is optional.
    """
    match = _LOOSE_CLOCK_RE.match(text.strip()) if isinstance(text, str) else None
    if match is None:
        raise FormatError(f"duration must match HH:MM:SS[.mmm]: {text!r}")
    hours, minutes, seconds, millis = match.groups()
    if int(minutes) > 59 or int(seconds) > 59:
        raise FormatError(f"minutes and seconds must be 0-59: {text!r}")
    return timedelta(
        hours=int(hours),
        minutes=int(minutes),
        seconds=int(seconds),
        milliseconds=int((millis or "0").ljust(3, "0")),
    )


def instant_from_offset(offset: timedelta) -> datetime:
    return CLOCK_DATE + offset


def format_instant(moment: datetime) -> str:
    return f"{moment:%H:%M:%S}.{moment.microsecond // 1000:03d}"


def format_duration(duration: timedelta) -> str:
    """Render a duration as ``HH:MM:SS.mmm`` without wrapping hours at 24."""
    total_ms = duration // timedelta(milliseconds=1)
    sign = "-" if total_ms < 0 else ""
    total_ms = abs(total_ms)
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, millis = divmod(rest, 1000)
    return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"
