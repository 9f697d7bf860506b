"""
Tests for the ADCP response framer.
"""

import pytest

from sony_adcp.protocol import ResponseFramer, encode_command_line, format_command, response_contains_on


class TestResponseFramer:
    """Unit tests for ResponseFramer."""

    @pytest.fixture
    def framer(self):
        return ResponseFramer()

    def test_complete_line_is_emitted(self, framer):
        assert framer.feed(b"ok\r\n") == "ok"
        assert framer.pending == ""

    def test_partial_line_is_held(self, framer):
        assert framer.feed(b"power_st") is None
        assert framer.feed(b"atus on") is None
        assert framer.pending == "power_status on"
        assert framer.feed(b"\r\n") == "power_status on"
        assert framer.pending == ""

    def test_prompt_terminates_frame(self, framer):
        assert framer.feed(b"login ok> ") == "login ok>"

    def test_bare_carriage_return_is_not_a_terminator(self, framer):
        assert framer.feed(b"ok\r") is None
        assert framer.feed(b"\n") == "ok"

    def test_greater_than_without_space_is_not_a_terminator(self, framer):
        assert framer.feed(b"a>") is None

    def test_accepts_str(self, framer):
        assert framer.feed("err_cmd\r\n") == "err_cmd"

    def test_reset_discards_partial_frame(self, framer):
        framer.feed(b"garbage")
        framer.reset()
        assert framer.pending == ""
        assert framer.feed(b"ok\r\n") == "ok"

    def test_buffer_cleared_only_on_frame(self, framer):
        framer.feed(b"one")
        framer.feed(b" two")
        assert framer.pending == "one two"

    def test_custom_terminators(self):
        framer = ResponseFramer(terminators=["\n"])
        assert framer.feed(b"ok\n") == "ok"


class TestPowerResponseParsing:
    """Power status responses are matched on a case-insensitive "on"."""

    def test_power_status_on(self):
        framer = ResponseFramer()
        frame = framer.feed(b"power_status on\r\n")
        assert response_contains_on(frame) is True

    def test_quoted_on(self):
        assert response_contains_on('"ON"') is True

    def test_standby(self):
        assert response_contains_on('"standby"') is False

    def test_empty(self):
        assert response_contains_on("") is False


class TestCommandEncoding:

    def test_encodes_terminated_line(self):
        assert encode_command_line(format_command("volume", 25)) == b"volume 25\r\n"

    def test_rejects_multiline_text(self):
        with pytest.raises(ValueError):
            encode_command_line("power on\r\npower off")

    def test_rejects_non_ascii_text(self):
        with pytest.raises(ValueError):
            encode_command_line(format_command("input", "hdmi¹"))
