"""Tests for logging configuration."""

import io
import logging

import pytest
from rich.logging import RichHandler

from wiggum.logging import LogLevel, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.parametrize(
        ("verbosity", "quiet", "level"),
        [
            (0, False, LogLevel.NORMAL),
            (1, False, LogLevel.VERBOSE),
            (2, False, LogLevel.VERBOSE),
            (2, True, LogLevel.QUIET),
        ],
    )
    def test_levels(self, verbosity: int, quiet: bool, level: LogLevel) -> None:
        """-v enables debug, -q wins over -v."""
        configure_logging(verbosity=verbosity, quiet=quiet, stream=io.StringIO())
        assert logging.getLogger().level == level

    def test_logs_go_to_stream_not_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Records are written to the log stream, keeping stdout for results."""
        stream = io.StringIO()
        configure_logging(quiet=True, stream=stream)
        logging.getLogger("wiggum.core.enforcement").warning("Stop condition triggered")
        logging.getLogger("wiggum.core.mutators").debug("Phase plan -> implement")
        assert "Stop condition triggered" in stream.getvalue()
        assert "Phase plan" not in stream.getvalue()
        assert capsys.readouterr().out == ""

    def test_single_handler(self) -> None:
        """Reconfiguring replaces the handler instead of stacking another."""
        configure_logging(stream=io.StringIO())
        configure_logging(stream=io.StringIO())
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)

    def test_returns_plain_console(self) -> None:
        """The returned console honours --no-color."""
        console = configure_logging(no_color=True, stream=io.StringIO())
        assert console.no_color is True
