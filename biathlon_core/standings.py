"""Final standings for a race (lap statistics, totals and ranking).

Single source of truth for the results table:
- Comparator: status priority first (Finished < NotFinished < Disqualified < NotStarted).
- Finished competitors are ordered by total time, including any late-start correction.
- Remaining ties keep competitor id order so the output is stable.

The competitor map is only read here, never modified.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Sequence

from .clock import format_duration
from .types import CompetitorRecord, CompetitorStatus
from .validation import RaceConfig


STATUS_PRIORITY: dict[CompetitorStatus, int] = {
    CompetitorStatus.FINISHED: 0,
    # Started without finishing or withdrawing: grouped with non-finishers.
    CompetitorStatus.STARTED: 1,
    CompetitorStatus.NOT_FINISHED: 1,
    CompetitorStatus.DISQUALIFIED: 2,
    CompetitorStatus.NOT_STARTED: 3,
}

EMPTY_CELL = "{,}"


@dataclass(frozen=True)
class LapStat:
    duration: timedelta
    speed: float

    def render(self) -> str:
        return f"{{{format_duration(self.duration)}, {self.speed:.3f}}}"


@dataclass(frozen=True)
class StandingRow:
    competitor_id: int
    position: int
    status: CompetitorStatus
    total_time: timedelta | None
    laps: tuple[LapStat, ...]
    penalty: LapStat | None
    hits: int
    shots_fired: int


def _speed(distance: int, duration: timedelta) -> float:
    seconds = duration.total_seconds()
    if seconds <= 0:
        return 0.0
    return float(distance) / seconds


def lap_stats(record: CompetitorRecord, config: RaceConfig) -> tuple[LapStat, ...]:
    return tuple(
        LapStat(duration=lap_time, speed=_speed(config.lapLen, lap_time))
        for lap_time in record.lap_durations
    )


def penalty_stats(record: CompetitorRecord, config: RaceConfig) -> LapStat | None:
    """Aggregate penalty loop time and average speed, or None without penalty time."""
    total = record.total_penalty_duration
    if total <= timedelta(0):
        return None
    return LapStat(duration=total, speed=_speed(config.penaltyLen, total))


def total_time(record: CompetitorRecord) -> timedelta | None:
    """Race time from actual start to finish, plus any lateness against the planned start.

    Returns None for competitors that did not finish.
    """
    if (
        record.status != CompetitorStatus.FINISHED
        or record.finished_at is None
        or record.actual_start_at is None
    ):
        return None
    elapsed = record.finished_at - record.actual_start_at
    planned = record.planned_start_at
    if planned is not None and record.actual_start_at > planned:
        elapsed += record.actual_start_at - planned
    return elapsed


def _sort_key(record: CompetitorRecord) -> tuple[int, timedelta, int]:
    total = total_time(record)
    return (
        STATUS_PRIORITY[record.status],
        total if total is not None else timedelta(0),
        record.competitor_id,
    )


def compute_standings(
    competitors: Mapping[int, CompetitorRecord],
    config: RaceConfig,
) -> tuple[StandingRow, ...]:
    """Rank every competitor and derive the statistics shown in the report."""
    ordered: Sequence[CompetitorRecord] = sorted(competitors.values(), key=_sort_key)
    return tuple(
        StandingRow(
            competitor_id=record.competitor_id,
            position=position,
            status=record.status,
            total_time=total_time(record),
            laps=lap_stats(record, config),
            penalty=penalty_stats(record, config),
            hits=record.hits,
            shots_fired=record.shots_fired,
        )
        for position, record in enumerate(ordered, start=1)
    )


def format_standing(row: StandingRow, config: RaceConfig) -> str:
    """Render one results line.

    Example: ``[02:15:43.127] 1 [{01:07:12.003, 0.905}, {,}] {00:01:44.296, 0.479} 4/5``
    """
    if row.total_time is not None:
        status_text = format_duration(row.total_time)
    else:
        status_text = row.status.value
    cells = [lap.render() for lap in row.laps]
    cells.extend(EMPTY_CELL for _ in range(len(row.laps), config.laps))
    penalty_text = row.penalty.render() if row.penalty is not None else EMPTY_CELL
    return (
        f"[{status_text}] {row.competitor_id} [{', '.join(cells)}] "
        f"{penalty_text} {row.hits}/{row.shots_fired}"
    )


def render_report(
    competitors: Mapping[int, CompetitorRecord],
    config: RaceConfig,
) -> list[str]:
    """Ranked results lines, one per competitor."""
    return [format_standing(row, config) for row in compute_standings(competitors, config)]
