from .clock import (
    FormatError,
    format_duration,
    format_instant,
    parse_clock,
    parse_duration,
    parse_instant,
)
from .events import ParsedLog, parse_event_line, parse_event_lines
from .race import (
    START_TOLERANCE,
    RaceOutcome,
    disqualify_missed_starts,
    process_events,
)
from .standings import (
    LapStat,
    StandingRow,
    compute_standings,
    format_standing,
    lap_stats,
    penalty_stats,
    render_report,
    total_time,
)
from .types import CompetitorRecord, CompetitorStatus, EventKind, EventRecord, Narration
from .validation import ConfigError, RaceConfig, load_config, parse_config

__all__ = [
    "FormatError",
    "format_duration",
    "format_instant",
    "parse_clock",
    "parse_duration",
    "parse_instant",
    "ParsedLog",
    "parse_event_line",
    "parse_event_lines",
    "START_TOLERANCE",
    "RaceOutcome",
    "disqualify_missed_starts",
    "process_events",
    "LapStat",
    "StandingRow",
    "compute_standings",
    "format_standing",
    "lap_stats",
    "penalty_stats",
    "render_report",
    "total_time",
    "CompetitorRecord",
    "CompetitorStatus",
    "EventKind",
    "EventRecord",
    "Narration",
    "ConfigError",
    "RaceConfig",
    "load_config",
    "parse_config",
]
