"""CLI interface for resilience"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
import yaml
from pydantic import ValidationError

from resilience.application.command_service import CommandRetryService
from resilience.domain.config.retry import RetryConfig
from resilience.domain.models.outcome import RetryOutcome
from resilience.infrastructure.command import CommandFailedError
from resilience.infrastructure.config.config_manager import ConfigManager, ConfigurationError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, level: str = "INFO") -> None:
    """Setup logging configuration"""
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(log_level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _load_config(ctx: click.Context) -> ConfigManager:
    verbose = ctx.obj.get("verbose", False)
    try:
        config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
    except ConfigurationError as e:
        _die(str(e), verbose=verbose, exc=e)
    setup_logging(verbose, config_manager.get_logging_config().level)
    return config_manager


def _exit_code_for(outcome: RetryOutcome) -> int:
    """Map a finished run to the process exit code"""
    if outcome.succeeded:
        return 0
    if isinstance(outcome.error, CommandFailedError):
        return outcome.error.returncode
    return 1


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .resilience.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """resilience - run a command until it succeeds"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.option(
    "--attempts",
    "-n",
    type=click.IntRange(min=0),
    help="Attempt budget. One extra attempt follows when all of them fail. Overrides config.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Per-attempt timeout in seconds",
)
@click.option("--quiet", "-q", is_flag=True, help="Don't report failed attempts")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def run(ctx, attempts: Optional[int], timeout: Optional[float], quiet: bool, command: Tuple[str, ...]):
    """Run COMMAND, retrying it until it exits with status 0.

    COMMAND: Command and its arguments (use -- to separate them from options)
    """
    verbose = ctx.obj.get("verbose", False)
    config_manager = _load_config(ctx)

    retry_config = config_manager.get_retry_config()
    overrides = {}
    if attempts is not None:
        overrides["attempts"] = attempts
    if quiet:
        overrides["report_failures"] = False
    if overrides:
        try:
            retry_config = RetryConfig.model_validate({**retry_config.model_dump(), **overrides})
        except ValidationError as e:
            _die(f"Invalid option: {e}", verbose=verbose, exc=e)

    try:
        outcome = CommandRetryService(retry_config, timeout=timeout).run(command)
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)

    if not outcome.succeeded:
        click.echo(f"ERROR: {outcome.error}", err=True)
    sys.exit(_exit_code_for(outcome))


@cli.command(name="config")
@click.pass_context
def show_config(ctx):
    """Print the effective configuration as YAML."""
    config_manager = _load_config(ctx)
    click.echo(yaml.safe_dump(config_manager.config.model_dump(), sort_keys=False), nl=False)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
