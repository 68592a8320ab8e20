#!/usr/bin/env python3
"""Tests for the structured Logger."""

import io
import logging
import threading

import pytest

from srcpack.core.logging import LogLevel, Logger, get_logger


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def logger(stream):
    """Logger writing bare messages to an in-memory stream."""
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    return Logger("srcpack.test", level=LogLevel.DEBUG, handlers=[handler])


class TestLogLevel:
    """Tests for LogLevel enum."""

    def test_log_levels(self):
        """Test log level values match Python logging."""
        assert LogLevel.DEBUG == logging.DEBUG
        assert LogLevel.INFO == logging.INFO
        assert LogLevel.WARNING == logging.WARNING
        assert LogLevel.ERROR == logging.ERROR
        assert LogLevel.CRITICAL == logging.CRITICAL

    def test_log_level_ordering(self):
        assert LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARNING < LogLevel.ERROR


class TestLogger:
    """Tests for Logger."""

    def test_default_handler(self):
        logger = Logger("srcpack.default")

        assert len(logger.logger.handlers) == 1
        assert isinstance(logger.logger.handlers[0], logging.StreamHandler)
        assert logger.logger.propagate is False
        assert logger.get_level() == LogLevel.INFO

    def test_handlers_replaced_on_reinit(self, stream):
        Logger("srcpack.reinit")
        handler = logging.StreamHandler(stream)

        logger = Logger("srcpack.reinit", handlers=[handler])

        assert logger.logger.handlers == [handler]

    def test_plain_message(self, logger, stream):
        logger.info("Archive written")

        assert stream.getvalue() == "INFO Archive written\n"

    def test_keyword_context(self, logger, stream):
        logger.debug("Added file", path="dir/a.txt")

        assert stream.getvalue() == "DEBUG Added file | path=dir/a.txt\n"

    def test_add_context(self, logger, stream):
        with logger.add_context(archive="a.tar.gz"):
            logger.info("Archive written", entries=3)
        logger.info("Done")

        lines = stream.getvalue().splitlines()
        assert lines[0] == "INFO Archive written | archive=a.tar.gz entries=3"
        assert lines[1] == "INFO Done"

    def test_nested_context(self, logger, stream):
        with logger.add_context(archive="a.tar.gz"):
            with logger.add_context(source="/src"):
                logger.warning("Source is not a directory")

        assert stream.getvalue() == (
            "WARNING Source is not a directory | archive=a.tar.gz source=/src\n"
        )

    def test_context_popped_on_error(self, logger, stream):
        with pytest.raises(ValueError):
            with logger.add_context(archive="a.tar.gz"):
                raise ValueError("boom")

        logger.error("After")
        assert stream.getvalue() == "ERROR After\n"

    def test_context_is_thread_local(self, logger, stream):
        seen = []

        def worker():
            logger.info("From thread")
            seen.append(True)

        with logger.add_context(archive="a.tar.gz"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen == [True]
        assert "INFO From thread\n" in stream.getvalue()

    def test_context_attached_to_record(self, stream):
        records = []

        class Capture(logging.Handler):
            def emit(self, record):
                records.append(record)

        logger = Logger("srcpack.capture", level="debug", handlers=[Capture()])
        logger.info("Packing source", rules=2)

        assert records[0].context == {"rules": 2}

    def test_level_filtering(self, logger, stream):
        logger.set_level("warning")

        logger.info("Hidden")
        logger.warning("Shown")

        assert stream.getvalue() == "WARNING Shown\n"
        assert logger.get_level() == LogLevel.WARNING

    def test_invalid_level_name(self, logger):
        with pytest.raises(KeyError):
            logger.set_level("verbose")

    def test_exception(self, logger, stream):
        try:
            raise OSError("disk full")
        except OSError as e:
            logger.exception("Archive aborted", e)

        output = stream.getvalue()
        assert "Archive aborted" in output
        assert "exception_type=OSError" in output
        assert "exception_message=disk full" in output
        assert "Traceback" in output

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "srcpack.log"
        logger = Logger("srcpack.file", handlers=[])
        handler = logger.create_file_handler(log_file)
        logger.add_handler(handler)

        logger.info("Archive written", entries=6)
        handler.flush()
        logger.remove_handler(handler)
        handler.close()

        content = log_file.read_text()
        assert "Archive written | entries=6" in content
        assert "{'entries': 6}" in content
        assert handler not in logger.logger.handlers


class TestGetLogger:
    """Tests for the per-name logger cache."""

    def test_same_instance(self):
        assert get_logger("srcpack.archive") is get_logger("srcpack.archive")

    def test_distinct_names(self):
        assert get_logger("srcpack.a") is not get_logger("srcpack.b")

    def test_default_name(self):
        assert get_logger().name == "srcpack"
