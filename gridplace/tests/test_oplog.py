"""Tests for PlacementLog and its line format."""

import logging

import pytest

from ..oplog import (
    PlacementEvent,
    PlacementLog,
    format_line,
    format_value,
    parse_line,
    parse_value,
)
from ..resolver import resolve_all
from ..types import Vector2, Widget


class TestValues:
    def test_plain_string(self):
        assert format_value("clock") == "clock"

    def test_string_with_space_is_quoted(self):
        assert format_value("rss feed") == '"rss feed"'
        assert parse_value('"rss feed"') == "rss feed"

    def test_empty_string_is_quoted(self):
        assert format_value("") == '""'
        assert parse_value('""') == ""

    def test_escaped_quote(self):
        formatted = format_value('say "hi"')
        assert formatted == '"say \\"hi\\""'
        assert parse_value(formatted) == 'say "hi"'

    def test_bool_before_int(self):
        assert format_value(True) == "true"
        assert parse_value("false") is False

    def test_int(self):
        assert format_value(-3) == "-3"
        assert parse_value("-3") == -3

    @pytest.mark.parametrize("text", ["42", "-3", "042", "true", "false", "1_000", "a\\b"])
    def test_lookalike_strings_are_quoted(self, text):
        formatted = format_value(text)
        assert formatted.startswith('"')
        assert parse_value(formatted) == text

    def test_unknown_type_formatted_as_string(self):
        assert format_value(Vector2(1, 2)) == '"(1, 2)"'


class TestLines:
    def test_format_line(self):
        assert format_line("PLACE", {"id": "a", "x": 1}) == "PLACE id=a x=1"

    def test_parse_line_with_quoted_spaces(self):
        kind, fields = parse_line('CONFIRM id="my widget" x=0 y=0')
        assert kind == "CONFIRM"
        assert fields == {"id": "my widget", "x": 0, "y": 0}

    def test_parse_rejects_comment(self):
        with pytest.raises(ValueError):
            parse_line("# comment")

    def test_parse_rejects_bare_token(self):
        with pytest.raises(ValueError):
            parse_line("PLACE id")

    def test_event_rejects_unknown_kind(self):
        with pytest.raises(ValueError):
            PlacementEvent.from_line("EVICT id=a")

    @pytest.mark.parametrize(
        "line",
        [
            "PLACE id=a x=0 y=0 w=1",
            "PLACE id=a x=0 y=0 w=1 h=1 from_x=2",
            "CONFIRM id=a x=0 y=0 w=1 h=1 z=3",
            "PLACE id=a x=left y=0 w=1 h=1",
            "PLACE id=a x=true y=0 w=1 h=1",
            "PLACE id=a x=0 x=1 y=0 w=1 h=1",
        ],
    )
    def test_event_rejects_bad_fields(self, line):
        with pytest.raises(ValueError):
            PlacementEvent.from_line(line)

    def test_event_accepts_reposition_origin(self):
        event = PlacementEvent.from_line("REPOSITION id=a x=0 y=0 w=1 h=1 from_x=2 from_y=3")
        assert event.fields["from_y"] == 3


class TestPlacementLog:
    def make_log(self) -> PlacementLog:
        oplog = PlacementLog()
        oplog.confirm("b", Vector2(0, 0), Vector2(15, 2))
        oplog.reposition("c", Vector2(0, 2), Vector2(3, 3), Vector2(3, 0))
        oplog.place("a", Vector2(3, 2), Vector2(3, 3))
        return oplog

    def test_kinds(self):
        assert self.make_log().kinds() == ["CONFIRM", "REPOSITION", "PLACE"]

    def test_plaintext_roundtrip(self):
        oplog = self.make_log()
        parsed = PlacementLog.from_plaintext(oplog.to_plaintext())
        assert parsed.events == oplog.events

    def test_from_plaintext_skips_comments_and_blanks(self):
        text = "# pass 1\n\nPLACE id=a x=0 y=0 w=1 h=1\n"
        parsed = PlacementLog.from_plaintext(text)
        assert parsed.kinds() == ["PLACE"]

    def test_empty_log(self):
        assert PlacementLog().to_plaintext() == ""

    def test_reposition_without_previous(self):
        oplog = PlacementLog()
        oplog.reposition("a", Vector2(0, 0), Vector2(1, 1), None)
        assert oplog.events[0].to_line() == "REPOSITION id=a x=0 y=0 w=1 h=1"

    def test_log_to(self, caplog):
        logger = logging.getLogger("gridplace.test")
        with caplog.at_level(logging.INFO, logger="gridplace.test"):
            self.make_log().log_to(logger)

        assert "OPLOG PLACE id=a x=3 y=2 w=3 h=3" in caplog.text
        assert len(caplog.records) == 3

    @pytest.mark.parametrize("widget_id", [1, "42", "true", "rss feed", ""])
    def test_roundtrip_keeps_ids_as_text(self, widget_id):
        oplog = PlacementLog()
        resolve_all(
            Vector2(15, 15), [Widget(widget_id=widget_id, size=Vector2(3, 3))], oplog=oplog
        )

        parsed = PlacementLog.from_plaintext(oplog.to_plaintext())

        assert parsed.events == oplog.events
        assert parsed.events[0].fields["id"] == str(widget_id)
