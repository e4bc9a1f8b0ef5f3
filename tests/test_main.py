"""Tests for the ReporterApp entry point."""

import pytest
from unittest.mock import patch

from collectd_reporter.main import ReporterApp
from collectd_reporter.utils.metrics import CycleResult
from collectd_reporter.utils.status import CycleStatus


@pytest.fixture
def config_file(tmp_path):
    """Minimal configuration file."""
    path = tmp_path / "config.yaml"
    path.write_text("""
collectd:
  host: 127.0.0.1
  port: 25826
  hostname: test-host
reporting:
  prefix: test
  period: 5
logging:
  level: WARNING
""")
    return str(path)


class TestReporterApp:
    """Test suite for ReporterApp."""

    def test_initialization(self, config_file):
        """Test that the app wires config, collectors and reporter."""
        app = ReporterApp(config_path=config_file)

        assert app.client.hostname == "test-host"
        assert app.reporter.config.prefix == "test"
        assert "process.threads" in app.registry.names()

    def test_missing_config_exits(self, tmp_path):
        """Test that a missing config file exits with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            ReporterApp(config_path=str(tmp_path / "absent.yaml"))
        assert exc_info.value.code == 1

    def test_invalid_config_exits(self, tmp_path):
        """Test that an invalid config file exits with status 1."""
        path = tmp_path / "config.yaml"
        path.write_text("reporting:\n  period: 0\n")

        with pytest.raises(SystemExit) as exc_info:
            ReporterApp(config_path=str(path))
        assert exc_info.value.code == 1

    @pytest.mark.parametrize("status, exit_code", [
        (CycleStatus.SUCCESS, 0),
        (CycleStatus.PARTIAL, 1),
        (CycleStatus.ABORTED, 1),
    ])
    def test_run_once_exit_code(self, config_file, status, exit_code):
        """Test that run_once maps the cycle outcome to an exit code."""
        app = ReporterApp(config_path=config_file)

        with patch.object(app.reporter, "report", return_value=CycleResult(status=status, timestamp=0)):
            assert app.run_once() == exit_code

    def test_run_forever_stops_on_shutdown(self, config_file):
        """Test that the schedule is started and stopped around the wait."""
        app = ReporterApp(config_path=config_file)
        app._shutdown.set()

        with patch.object(app.reporter, "start") as mock_start, \
                patch.object(app.reporter, "stop") as mock_stop, \
                patch("collectd_reporter.main.signal.signal"):
            app.run_forever()

        mock_start.assert_called_once_with(5, app.config.reporting.period_unit)
        mock_stop.assert_called_once_with(report_on_stop=True)
