"""Race log line parsing.

Line format::

    [HH:MM:SS.mmm] <kind> <competitorId> [payload...]

The payload is whatever follows the competitor id, re-joined with single
spaces. Blank lines are skipped by ``parse_event_lines``; any other malformed
line is reported and skipped without stopping the run.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from .clock import FormatError, parse_instant
from .types import EventRecord

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass
class ParsedLog:
    """Events accepted from a log plus the lines that were rejected."""

    events: List[EventRecord] = field(default_factory=list)
    # (1-based line number, error message)
    errors: List[Tuple[int, str]] = field(default_factory=list)


def parse_int_field(value: str, name: str) -> int:
    """Parse an optionally signed run of ASCII digits, nothing else."""
    if not _INT_RE.fullmatch(value):
        raise FormatError(f"invalid {name}: {value!r}")
    return int(value, 10)


def parse_event_line(line: str) -> EventRecord:
    """Parse a single non-blank log line.

    Raises:
        FormatError: if the timestamp, kind or competitor id is malformed, or
            fewer than two fields follow the timestamp.
    """
    head, sep, body = line.partition("] ")
    if not sep:
        raise FormatError(f"invalid event log format: {line!r}")

    try:
        event_time = parse_instant(head + "]")
    except FormatError as exc:
        raise FormatError(f"invalid time format: {exc}") from exc

    fields = body.split()
    if len(fields) < 2:
        raise FormatError(f"invalid event format: {body!r}")

    kind = parse_int_field(fields[0], "event ID")
    competitor_id = parse_int_field(fields[1], "competitor ID")
    payload = " ".join(fields[2:])

    return EventRecord(
        time=event_time,
        kind=kind,
        competitor_id=competitor_id,
        payload=payload,
    )


def parse_event_lines(lines: Iterable[str]) -> ParsedLog:
    """Parse every line of a log, skipping blanks and collecting errors."""
    parsed = ParsedLog()
    for line_no, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        try:
            parsed.events.append(parse_event_line(line))
        except FormatError as exc:
            logger.warning(f"Skipping log line {line_no}: {exc}")
            parsed.errors.append((line_no, str(exc)))
    return parsed
