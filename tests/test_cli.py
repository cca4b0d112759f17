"""Tests for CLI interface"""

from __future__ import annotations

import logging
import sys
from unittest.mock import patch

import click
import pytest
import yaml
from click.testing import CliRunner

from resilience.cli import _die, _exit_code_for, cli, setup_logging
from resilience.domain.models.outcome import RetryOutcome
from resilience.infrastructure.command import CommandFailedError


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RESILIENCE_ATTEMPTS", raising=False)
    monkeypatch.delenv("RESILIENCE_LOG_LEVEL", raising=False)


def _counting_command(counter_file, succeed_at: int, fail_code: int = 1) -> list:
    script = (
        "import pathlib, sys\n"
        f"p = pathlib.Path({str(counter_file)!r})\n"
        "n = int(p.read_text()) + 1 if p.exists() else 1\n"
        "p.write_text(str(n))\n"
        f"sys.exit(0 if n >= {succeed_at} else {fail_code})\n"
    )
    return [sys.executable, "-c", script]


class TestSetupLogging:
    """Tests for setup_logging function"""

    def test_setup_logging_info_level(self):
        """Test that logging is set to INFO level by default"""
        setup_logging(verbose=False)
        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_debug_level(self):
        """Test that logging is set to DEBUG level when verbose"""
        setup_logging(verbose=True, level="ERROR")
        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_configured_level(self):
        """Test that the configured level is used when not verbose"""
        setup_logging(verbose=False, level="warning")
        assert logging.getLogger().level == logging.WARNING


class TestDie:
    """Tests for _die function"""

    def test_die_without_exception(self):
        """Test _die without exception"""
        with pytest.raises(click.ClickException, match="Test error"):
            _die("Test error", verbose=False)

    def test_die_with_exception_verbose(self):
        """Test _die with exception in verbose mode"""
        exc = ValueError("Test exception")
        with pytest.raises(click.ClickException, match="Test error"):
            _die("Test error", verbose=True, exc=exc)


class TestExitCode:
    """Tests for _exit_code_for"""

    def test_success(self):
        assert _exit_code_for(RetryOutcome(value=object(), attempts=1)) == 0

    def test_command_failure_keeps_return_code(self):
        error = CommandFailedError(["false"], 7)
        assert _exit_code_for(RetryOutcome(error=error, attempts=2)) == 7

    def test_other_failure(self):
        assert _exit_code_for(RetryOutcome(error=OSError("missing"), attempts=2)) == 1


class TestRunCommand:
    """Tests for run command"""

    def test_run_succeeds_after_retries(self, tmp_path):
        """Test that a flaky command eventually succeeds"""
        counter = tmp_path / "count"
        runner = CliRunner()

        result = runner.invoke(
            cli, ["run", "--attempts", "5", "--", *_counting_command(counter, 3)], obj={}
        )

        assert result.exit_code == 0
        assert counter.read_text() == "3"

    def test_run_exhausts_budget(self, tmp_path):
        """Test that the last command's exit status is propagated"""
        counter = tmp_path / "count"
        runner = CliRunner()

        result = runner.invoke(
            cli,
            ["run", "-n", "2", "--", *_counting_command(counter, 100, fail_code=4)],
            obj={},
        )

        assert result.exit_code == 4
        assert counter.read_text() == "3"
        assert "ERROR:" in result.output

    def test_run_zero_attempts(self, tmp_path):
        """Test that a budget of 0 runs the command once"""
        counter = tmp_path / "count"
        runner = CliRunner()

        result = runner.invoke(
            cli, ["run", "--attempts", "0", "--", *_counting_command(counter, 100)], obj={}
        )

        assert result.exit_code == 1
        assert counter.read_text() == "1"

    def test_run_uses_config_file(self, tmp_path):
        """Test that the budget comes from .resilience.yml"""
        counter = tmp_path / "count"
        config_file = tmp_path / ".resilience.yml"
        config_file.write_text(yaml.safe_dump({"retry": {"attempts": 1}}), encoding="utf-8")
        runner = CliRunner()

        result = runner.invoke(
            cli,
            ["--config", str(config_file), "run", "--", *_counting_command(counter, 100)],
            obj={},
        )

        assert result.exit_code == 1
        assert counter.read_text() == "2"

    def test_run_missing_executable(self):
        """Test that a missing executable is retried and reported"""
        runner = CliRunner()

        result = runner.invoke(
            cli, ["run", "-n", "1", "--", "definitely-not-a-real-command-xyz"], obj={}
        )

        assert result.exit_code == 1
        assert "ERROR:" in result.output

    def test_run_requires_command(self):
        """Test that a command is required"""
        runner = CliRunner()
        result = runner.invoke(cli, ["run"], obj={})
        assert result.exit_code == 2

    @patch("resilience.cli.CommandRetryService")
    def test_run_rejects_attempts_above_maximum(self, mock_service):
        """Test that --attempts is held to the same bound as the config file"""
        runner = CliRunner()

        result = runner.invoke(cli, ["run", "-n", "101", "--", "true"], obj={})

        assert result.exit_code == 1
        assert "Invalid option" in result.output
        assert "attempts" in result.output
        mock_service.assert_not_called()

    def test_run_rejects_negative_attempts(self):
        """Test that the attempts option is range checked"""
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--attempts", "-1", "--", "true"], obj={})
        assert result.exit_code == 2

    @patch("resilience.cli.CommandRetryService")
    def test_run_quiet_disables_reports(self, mock_service):
        """Test that --quiet overrides report_failures"""
        mock_service.return_value.run.return_value = RetryOutcome(value=None, attempts=1)
        runner = CliRunner()

        result = runner.invoke(cli, ["run", "-q", "-n", "4", "--", "true"], obj={})

        assert result.exit_code == 0
        retry_config = mock_service.call_args[0][0]
        assert retry_config.attempts == 4
        assert retry_config.report_failures is False
        mock_service.return_value.run.assert_called_once_with(("true",))

    @patch("resilience.cli.CommandRetryService")
    def test_run_unexpected_error(self, mock_service):
        """Test that unexpected errors become a ClickException"""
        mock_service.return_value.run.side_effect = RuntimeError("boom")
        runner = CliRunner()

        result = runner.invoke(cli, ["run", "--", "true"], obj={})

        assert result.exit_code == 1
        assert "Fatal error: boom" in result.output

    def test_run_invalid_config(self, tmp_path):
        """Test that configuration errors are reported"""
        config_file = tmp_path / ".resilience.yml"
        config_file.write_text(yaml.safe_dump({"retry": {"attempts": -1}}), encoding="utf-8")
        runner = CliRunner()

        result = runner.invoke(cli, ["--config", str(config_file), "run", "--", "true"], obj={})

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output


class TestConfigCommand:
    """Tests for config command"""

    def test_prints_effective_config(self, tmp_path, monkeypatch):
        """Test that file and env values are merged"""
        config_file = tmp_path / ".resilience.yml"
        config_file.write_text(yaml.safe_dump({"retry": {"attempts": 6}}), encoding="utf-8")
        monkeypatch.setenv("RESILIENCE_LOG_LEVEL", "ERROR")
        runner = CliRunner()

        result = runner.invoke(cli, ["config"], obj={})

        assert result.exit_code == 0
        # Log lines may be mixed into the output, so check the YAML lines directly
        assert "retry:\n  attempts: 6\n  report_failures: true\n" in result.output
        assert "logging:\n  level: ERROR\n" in result.output
