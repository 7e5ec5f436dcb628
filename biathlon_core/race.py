"""Core race event interpretation (pure, no file or console I/O).

This module folds an ordered stream of race log events into per-competitor
race state. All functions are deterministic: the same events and configuration
always produce the same competitor map and the same narration.

Architecture:
- Events are EventRecord values, already sorted by time (never re-sorted here)
- process_events() owns a dict of competitor id -> CompetitorRecord and is the
  only code that mutates it
- Every processed event yields Narration records (commentary); synthetic
  outgoing notifications (32 disqualified, 33 finished) are Narration records too
- Callers decide where narration goes; nothing is printed from here

Key concepts:
- A competitor exists only after a registration event (kind 1); events for
  unknown ids are dropped
- Terminal statuses (Finished, NotFinished, Disqualified) are never changed by
  later events
- Start tolerance: starting more than START_TOLERANCE after the planned start
  disqualifies the competitor
- evaluated_at: the instant used by the missed-start post-pass; defaults to the
  time of the last processed event

State transitions (by event kind):
- 1 REGISTERED: create record (status NotStarted)
- 2 START_TIME_DRAWN: planned start from payload
- 4 STARTED: actual start, lap 1 opens, status Started (or Disqualified if late)
- 5 ON_FIRING_RANGE / 6 TARGET_HIT: firing range and shooting tallies
- 8/9 ENTERED_PENALTY/LEFT_PENALTY: penalty loop timing
- 10 LAP_ENDED: close lap, open the next one or finish
- 11 CANNOT_CONTINUE: status NotFinished with reason
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Tuple

from .clock import FormatError, format_instant, parse_clock
from .events import parse_int_field
from .types import CompetitorRecord, CompetitorStatus, EventKind, EventRecord, Narration
from .validation import RaceConfig

logger = logging.getLogger(__name__)

START_TOLERANCE = timedelta(seconds=1)


@dataclass
class RaceOutcome:
    """Result of interpreting a complete race log."""

    competitors: Dict[int, CompetitorRecord]
    narration: Tuple[Narration, ...]


def _set_status(record: CompetitorRecord, status: CompetitorStatus) -> bool:
    """Move a competitor to ``status`` unless it already reached a terminal one."""
    if record.status.is_terminal:
        logger.debug(
            f"Competitor {record.competitor_id} stays {record.status.value} "
            f"(ignored transition to {status.value})"
        )
        return False
    record.status = status
    return True


def _disqualify(
    record: CompetitorRecord, at: datetime, narration: List[Narration]
) -> None:
    narration.append(
        Narration(
            time=at,
            competitor_id=record.competitor_id,
            kind=EventKind.DISQUALIFIED,
            message=f"The competitor({record.competitor_id}) is disqualified",
        )
    )
    narration.append(
        Narration(
            time=at,
            competitor_id=record.competitor_id,
            kind=EventKind.DISQUALIFIED,
            message=f"{int(EventKind.DISQUALIFIED)} {record.competitor_id}",
        )
    )


def _is_late_start(record: CompetitorRecord, started_at: datetime, tolerance: timedelta) -> bool:
    # Without a drawn start time every start counts as late.
    if record.planned_start_at is None:
        return True
    return started_at > record.planned_start_at + tolerance


def _apply_event(
    competitors: Dict[int, CompetitorRecord],
    event: EventRecord,
    config: RaceConfig,
    tolerance: timedelta,
) -> List[Narration]:
    """Apply one event to the competitor map and return its narration.

    Args:
        competitors: Map owned by process_events() (mutated in place)
        event: Next event in log order
        config: Race configuration (lap count)
        tolerance: Allowed start delay before disqualification

    Returns:
        Narration records for this event, in emission order. Empty when the
        event is dropped (unregistered competitor or unknown kind).
    """
    cid = event.competitor_id
    record = competitors.get(cid)
    if record is None:
        if event.kind != EventKind.REGISTERED:
            logger.debug(f"Dropping event {event.kind} for unregistered competitor {cid}")
            return []
        record = CompetitorRecord(competitor_id=cid, registered_at=event.time)
        competitors[cid] = record

    try:
        kind = EventKind(event.kind)
    except ValueError:
        logger.debug(f"Ignoring unknown event kind {event.kind} for competitor {cid}")
        return []
    if kind.is_outgoing:
        # Outgoing kinds are produced here, never consumed.
        logger.debug(f"Ignoring outgoing event kind {int(kind)} in input for competitor {cid}")
        return []

    out: List[Narration] = []

    def say(message: str, as_kind: EventKind = kind) -> None:
        out.append(Narration(time=event.time, competitor_id=cid, kind=as_kind, message=message))

    if kind == EventKind.REGISTERED:
        say(f"The competitor({cid}) registered")

    elif kind == EventKind.START_TIME_DRAWN:
        try:
            record.planned_start_at = parse_clock(event.payload)
        except FormatError as exc:
            logger.warning(f"Competitor {cid}: bad drawn start time: {exc}")
            record.planned_start_at = None
        say(f"The start time for the competitor({cid}) was set by a draw to {event.payload}")

    elif kind == EventKind.ON_START_LINE:
        say(f"The competitor({cid}) is on the start line")

    elif kind == EventKind.STARTED:
        record.actual_start_at = event.time
        record.current_lap = 1
        record.lap_start_times.append(event.time)
        _set_status(record, CompetitorStatus.STARTED)
        say(f"The competitor({cid}) has started")
        if record.status == CompetitorStatus.STARTED and _is_late_start(
            record, event.time, tolerance
        ):
            record.status = CompetitorStatus.DISQUALIFIED
            _disqualify(record, event.time, out)

    elif kind == EventKind.ON_FIRING_RANGE:
        try:
            record.current_firing_range = parse_int_field(event.payload, "firing range")
        except FormatError as exc:
            logger.debug(f"Competitor {cid}: {exc}")
            record.current_firing_range = None
        say(f"The competitor({cid}) is on the firing range({event.payload})")

    elif kind == EventKind.TARGET_HIT:
        record.hits += 1
        record.shots_fired += 1
        say(f"The target({event.payload}) has been hit by competitor({cid})")

    elif kind == EventKind.LEFT_FIRING_RANGE:
        say(f"The competitor({cid}) left the firing range")

    elif kind == EventKind.ENTERED_PENALTY:
        record.penalty_start_times.append(event.time)
        say(f"The competitor({cid}) entered the penalty laps")

    elif kind == EventKind.LEFT_PENALTY:
        if record.has_open_penalty:
            penalty_time = event.time - record.penalty_start_times[-1]
            record.penalty_durations.append(penalty_time)
            record.penalty_end_times.append(event.time)
            record.total_penalty_duration += penalty_time
        else:
            logger.debug(f"Competitor {cid} left a penalty loop it never entered")
        say(f"The competitor({cid}) left the penalty laps")

    elif kind == EventKind.LAP_ENDED:
        if record.has_open_lap:
            record.lap_durations.append(event.time - record.lap_start_times[-1])
            record.current_lap += 1
            if record.current_lap <= config.laps:
                # The next lap begins as soon as the previous one ends.
                record.lap_start_times.append(event.time)
            else:
                record.finished_at = event.time
                if _set_status(record, CompetitorStatus.FINISHED):
                    say(f"{int(EventKind.FINISHED)} {cid}", as_kind=EventKind.FINISHED)
                    say(f"The competitor({cid}) has finished", as_kind=EventKind.FINISHED)
        else:
            logger.debug(f"Competitor {cid} ended a lap with no lap open")
        say(f"The competitor({cid}) ended the main lap")

    elif kind == EventKind.CANNOT_CONTINUE:
        if _set_status(record, CompetitorStatus.NOT_FINISHED):
            record.dnf_reason = event.payload
        say(f"The competitor({cid}) can`t continue: {event.payload}")

    return out


def disqualify_missed_starts(
    competitors: Dict[int, CompetitorRecord],
    evaluated_at: datetime,
    tolerance: timedelta = START_TOLERANCE,
) -> List[Narration]:
    """Disqualify competitors whose start window closed before ``evaluated_at``.

    Only competitors still NotStarted with a drawn start time are affected.
    The notification is stamped at the end of the start window, not at
    ``evaluated_at``. Competitors are visited in id order.
    """
    narration: List[Narration] = []
    for cid in sorted(competitors):
        record = competitors[cid]
        if record.status != CompetitorStatus.NOT_STARTED or record.planned_start_at is None:
            continue
        window_end = record.planned_start_at + tolerance
        if evaluated_at > window_end:
            record.status = CompetitorStatus.DISQUALIFIED
            _disqualify(record, window_end, narration)
    return narration


def process_events(
    events: Iterable[EventRecord],
    config: RaceConfig,
    *,
    evaluated_at: datetime | None = None,
    tolerance: timedelta = START_TOLERANCE,
) -> RaceOutcome:
    """Interpret a complete, time-ordered race log.

    Args:
        events: Parsed log events in arrival order
        config: Race configuration
        evaluated_at: Instant for the missed-start post-pass; defaults to the
            time of the last event (no post-pass disqualification if there are
            no events)
        tolerance: Allowed start delay before disqualification

    Returns:
        RaceOutcome with the competitor map and the ordered narration
    """
    competitors: Dict[int, CompetitorRecord] = {}
    narration: List[Narration] = []
    last_time: datetime | None = None

    for event in events:
        narration.extend(_apply_event(competitors, event, config, tolerance))
        last_time = event.time

    if evaluated_at is None:
        evaluated_at = last_time
    if evaluated_at is not None:
        narration.extend(disqualify_missed_starts(competitors, evaluated_at, tolerance))
    else:
        logger.debug("No events processed; skipping missed-start check")

    evaluated_text = format_instant(evaluated_at) if evaluated_at is not None else "-"
    logger.debug(
        f"Processed log: {len(competitors)} competitors, "
        f"{len(narration)} narration lines, evaluated at {evaluated_text}"
    )
    return RaceOutcome(competitors=competitors, narration=tuple(narration))
