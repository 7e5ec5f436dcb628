from biathlon_core import EventKind, FormatError, format_instant, parse_event_line, parse_event_lines

import pytest


def test_parse_registration_without_payload():
    event = parse_event_line("[09:05:59.867] 1 1")
    assert format_instant(event.time) == "09:05:59.867"
    assert event.kind == EventKind.REGISTERED
    assert event.competitor_id == 1
    assert event.payload == ""


def test_parse_draw_keeps_clock_payload():
    event = parse_event_line("[09:15:00.841] 2 1 09:30:00.000")
    assert format_instant(event.time) == "09:15:00.841"
    assert event.kind == 2
    assert event.payload == "09:30:00.000"


def test_parse_multi_word_payload_is_rejoined_with_single_spaces():
    event = parse_event_line("[09:59:03.872] 11 1 Lost   in the\tforest")
    assert event.kind == EventKind.CANNOT_CONTINUE
    assert event.payload == "Lost in the forest"


@pytest.mark.parametrize(
    "line",
    [
        "Invalid event",
        "[09:05:59.867] 1",
        "[09:05:59.867]  ",
        "[09:05:59] 1 1",
        "09:05:59.867] 1 1",
        "[09:05:59.867] x 1",
        "[09:05:59.867] 1 one",
        "[09:05:59.867] 1 1_0",
        "[09:05:59.867] 1_1 1",
        "[09:05:59.867] 1 \u0661",
    ],
)
def test_parse_event_line_rejects_malformed_lines(line):
    with pytest.raises(FormatError):
        parse_event_line(line)


def test_parse_event_lines_skips_blanks_and_reports_bad_lines():
    lines = [
        "[09:05:59.867] 1 1\n",
        "\n",
        "   \n",
        "garbage\n",
        "[09:15:00.841] 2 1 09:30:00.000\n",
        "[09:16:00.000] 4 abc\n",
    ]
    parsed = parse_event_lines(lines)
    assert [e.kind for e in parsed.events] == [1, 2]
    assert [line_no for line_no, _ in parsed.errors] == [4, 6]
    assert "competitor ID" in parsed.errors[1][1]


def test_parse_event_line_accepts_signed_ascii_ids():
    assert parse_event_line("[09:05:59.867] 1 +12").competitor_id == 12
    assert parse_event_line("[09:05:59.867] 1 -3").competitor_id == -3
