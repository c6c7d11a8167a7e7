"""Tests for logging setup and console helpers."""

import json
import logging

from rich.logging import RichHandler

from microplatform.utils import StructuredFormatter, print_error, print_success, print_warning, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="microplatform.server",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Registering %s",
        args=("registry",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_formats_json(self):
        data = json.loads(StructuredFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "microplatform.server"
        assert data["message"] == "Registering registry"
        assert data["timestamp"].endswith("Z")

    def test_includes_extra_fields(self):
        record = _record(service="registry", event="unit_registering", metadata={"pid": 7})

        data = json.loads(StructuredFormatter().format(record))

        assert data["service"] == "registry"
        assert data["event"] == "unit_registering"
        assert data["metadata"] == {"pid": 7}

    def test_omits_missing_extra_fields(self):
        data = json.loads(StructuredFormatter().format(_record()))

        assert "service" not in data
        assert "event" not in data


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_pretty_console(self):
        logger = setup_logging("debug")

        assert logger.name == "microplatform"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)

    def test_structured_console(self):
        logger = setup_logging("WARNING", log_format="structured")

        assert logger.level == logging.WARNING
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "micro.log"

        logger = setup_logging("INFO", log_format="structured", log_file=log_file)
        logger.info("hello", extra={"event": "test"})
        for handler in logger.handlers:
            handler.flush()

        line = log_file.read_text().strip().splitlines()[-1]
        assert json.loads(line)["event"] == "test"

        for handler in logger.handlers:
            handler.close()
        logger.handlers = []

    def test_replaces_existing_handlers(self):
        setup_logging("INFO")
        logger = setup_logging("INFO")

        assert len(logger.handlers) == 1


def test_print_error_escapes_markup(capsys):
    print_error("bad value [red]x[/red]")

    assert "[red]x[/red]" in capsys.readouterr().out


def test_print_success_and_warning(capsys):
    print_success("config written")
    print_warning("web not installed")

    out = capsys.readouterr().out
    assert "✓ config written" in out
    assert "⚠ web not installed" in out
