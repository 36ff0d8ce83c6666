"""Tests for cfncli.output.console module."""

from __future__ import annotations

import pytest

from cfncli.output.console import (
    ConsoleProtocol,
    LogLevel,
    MockConsole,
    RichConsole,
    Style,
)


class TestLogLevel:
    def test_numbering_matches_option(self) -> None:
        assert [int(level) for level in LogLevel] == [0, 1, 2, 3]
        assert LogLevel(2) is LogLevel.ERROR


class TestMockConsole:
    def test_captures_everything(self) -> None:
        console = MockConsole()
        console.debug("event")
        console.info("creating")
        console.success("done")
        console.error("broken")

        assert console.messages == ["event", "info: creating", "OK done", "error: broken"]
        assert console.outputs[0].style == Style.DIM
        assert console.has_error()
        assert console.has_success()
        assert console.count(Style.INFO) == 1

    def test_find_and_clear(self) -> None:
        console = MockConsole()
        console.print("CREATE_COMPLETE AWS::S3::Bucket Bucket")
        assert len(console.find("Bucket")) == 1
        console.clear()
        assert console.text == ""

    def test_implements_protocol(self) -> None:
        mock = MockConsole()
        console: ConsoleProtocol = mock
        console.warning("slow")
        assert mock.messages == ["warning: slow"]


class TestRichConsoleLevels:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            (LogLevel.DEBUG, ["trace", "progress", "broken"]),
            (LogLevel.INFO, ["progress", "broken"]),
            (LogLevel.ERROR, ["broken"]),
            (LogLevel.CRITICAL, []),
        ],
    )
    def test_filtering(
        self, level: LogLevel, expected: list[str], capsys: pytest.CaptureFixture[str]
    ) -> None:
        console = RichConsole(level=level)
        console.debug("trace")
        console.info("progress")
        console.error("broken")

        out = capsys.readouterr().out
        for word in ("trace", "progress", "broken"):
            assert (word in out) == (word in expected)

    def test_markup_in_messages_is_not_interpreted(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.error("failed to create: [Bucket].")

        assert "[Bucket]" in capsys.readouterr().out
