import json
from datetime import timedelta

import pytest

from biathlon_core import ConfigError, RaceConfig, format_instant, load_config, parse_config

SAMPLE = {
    "laps": 2,
    "lapLen": 3651,
    "penaltyLen": 50,
    "firingLines": 1,
    "start": "09:30:00",
    "startDelta": "00:00:30",
}


def test_parse_config_normalizes_clock_fields():
    config = parse_config(json.dumps(SAMPLE))
    assert config.laps == 2
    assert config.lapLen == 3651
    assert config.penaltyLen == 50
    assert config.firingLines == 1
    assert format_instant(config.start) == "09:30:00.000"
    assert config.startDelta == timedelta(seconds=30)


def test_parse_config_accepts_millisecond_clock_strings():
    doc = dict(SAMPLE, start="10:00:00.500", startDelta="00:01:30.000")
    config = parse_config(json.dumps(doc))
    assert format_instant(config.start) == "10:00:00.500"
    assert config.startDelta == timedelta(seconds=90)


@pytest.mark.parametrize(
    "overrides",
    [
        {"laps": 0},
        {"lapLen": -5},
        {"start": "25:00:00"},
        {"start": "noon"},
        {"startDelta": 30},
    ],
)
def test_parse_config_rejects_invalid_values(overrides):
    with pytest.raises(ConfigError):
        parse_config(json.dumps(dict(SAMPLE, **overrides)))


def test_parse_config_rejects_missing_fields_and_bad_json():
    doc = dict(SAMPLE)
    del doc["penaltyLen"]
    with pytest.raises(ConfigError):
        parse_config(json.dumps(doc))
    with pytest.raises(ConfigError):
        parse_config("{not json")


def test_config_is_immutable():
    config = RaceConfig(**SAMPLE)
    with pytest.raises(Exception):
        config.laps = 3


def test_load_config_reads_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(SAMPLE), encoding="utf-8")
    assert load_config(path).lapLen == 3651


def test_load_config_missing_file_raises_os_error(tmp_path):
    with pytest.raises(OSError):
        load_config(tmp_path / "missing.json")
