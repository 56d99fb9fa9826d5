"""Tests for guardstats.core.logging."""

import json

import structlog

from guardstats.core.logging import LogContext, configure_logging, get_logger


class TestConfigureLogging:
    def test_json_output(self, capsys):
        """JSON lines carry ECS-style field names and the service name."""
        configure_logging(level="INFO", json_format=True, service="test-service")
        get_logger("tests.logging").info("guard.created", running=3)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        data = json.loads(line)
        assert data["event"] == "guard.created"
        assert data["running"] == 3
        assert data["logger_name"] == "tests.logging"
        assert data["log.level"] == "info"
        assert data["service.name"] == "test-service"
        assert "@timestamp" in data

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        log = get_logger("tests.logging")
        log.info("hidden")
        log.warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_configured_flag(self):
        configure_logging(level="DEBUG", json_format=False)
        assert structlog.is_configured()


class TestLogContext:
    def test_context_is_bound_and_removed(self, capsys):
        configure_logging(level="INFO", json_format=True)
        log = get_logger("tests.logging")

        with LogContext(tracker="api"):
            log.info("inside")
        log.info("outside")

        inside, outside = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines()[-2:]]
        assert inside["tracker"] == "api"
        assert "tracker" not in outside


class TestGetLogger:
    def test_module_logger_created_before_configuration(self, capsys):
        """Loggers made at import time pick up a later configure_logging()."""
        log = get_logger("tests.early")
        configure_logging(level="INFO", json_format=True)
        log.info("late")

        data = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert data["event"] == "late"
        assert data["logger_name"] == "tests.early"

    def test_package_modules_import(self):
        """Every module binds its logger at import without error."""
        import guardstats
        from guardstats.cli import app, demo
        from guardstats.guards import callbacks, guard, tracker

        assert guardstats.GuardTracker is tracker.GuardTracker
        assert app.app is not None
        for module in (demo, callbacks, guard, tracker):
            module.logger.debug("import.check")
