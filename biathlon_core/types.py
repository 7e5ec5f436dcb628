"""Type definitions for race events, competitor state and narration."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, IntEnum
from typing import List, Optional

from .clock import format_instant


class EventKind(IntEnum):
    """Event identifiers used in the race log."""

    # Inbound
    REGISTERED = 1
    START_TIME_DRAWN = 2
    ON_START_LINE = 3
    STARTED = 4
    ON_FIRING_RANGE = 5
    TARGET_HIT = 6
    LEFT_FIRING_RANGE = 7
    ENTERED_PENALTY = 8
    LEFT_PENALTY = 9
    LAP_ENDED = 10
    CANNOT_CONTINUE = 11

    # Outgoing (generated while processing, never parsed)
    DISQUALIFIED = 32
    FINISHED = 33

    @property
    def is_outgoing(self) -> bool:
        return self >= EventKind.DISQUALIFIED


class CompetitorStatus(Enum):
    NOT_STARTED = "NotStarted"
    STARTED = "Started"
    FINISHED = "Finished"
    NOT_FINISHED = "NotFinished"
    DISQUALIFIED = "Disqualified"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {
        CompetitorStatus.FINISHED,
        CompetitorStatus.NOT_FINISHED,
        CompetitorStatus.DISQUALIFIED,
    }
)


@dataclass(frozen=True)
class EventRecord:
    """One parsed line of the race log."""

    time: datetime
    kind: int
    competitor_id: int
    payload: str = ""


@dataclass
class CompetitorRecord:
    """
    Mutable race state for a single competitor.

    Instants left as None are not known yet. ``lap_durations`` trails
    ``lap_start_times`` by one while a lap is open; the penalty lists always
    have equal length.
    """

    competitor_id: int
    status: CompetitorStatus = CompetitorStatus.NOT_STARTED

    registered_at: Optional[datetime] = None
    planned_start_at: Optional[datetime] = None
    actual_start_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    current_lap: int = 0
    lap_start_times: List[datetime] = field(default_factory=list)
    lap_durations: List[timedelta] = field(default_factory=list)

    penalty_start_times: List[datetime] = field(default_factory=list)
    penalty_end_times: List[datetime] = field(default_factory=list)
    penalty_durations: List[timedelta] = field(default_factory=list)
    total_penalty_duration: timedelta = field(default_factory=timedelta)

    hits: int = 0
    shots_fired: int = 0
    current_firing_range: Optional[int] = None
    dnf_reason: str = ""

    @property
    def has_open_lap(self) -> bool:
        return len(self.lap_start_times) > len(self.lap_durations)

    @property
    def has_open_penalty(self) -> bool:
        return len(self.penalty_start_times) > len(self.penalty_end_times)


@dataclass(frozen=True)
class Narration:
    """A commentary line produced while interpreting the log."""

    time: datetime
    competitor_id: int
    kind: EventKind
    message: str

    def render(self) -> str:
        return f"[{format_instant(self.time)}] {self.message}"
