"""CLI entry point -- ``exorcism`` / ``python -m exorcism``.

Validates the ladder in the current working directory:

    exorcism [--yes] [--no-cleanup] [--output-dir DIR] [--format txt|json|pdf]...
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from exorcism import __version__
from exorcism.config import REPORT_FORMATS, ExorcismConfig
from exorcism.lifecycle import LifecycleController, WorkspaceError


class FatalHostError(click.ClickException):
    """Host-level failure: no reports are written."""

    exit_code = 2


def apply_cli_overrides(config: ExorcismConfig, **opts) -> ExorcismConfig:
    """Apply CLI options to the config, overriding defaults."""
    if opts.get("assume_yes"):
        config.assume_yes = True
    if opts.get("no_cleanup"):
        config.skip_cleanup = True
    if opts.get("output_dir"):
        config.output_dir = opts["output_dir"]
    if opts.get("formats"):
        config.formats = tuple(dict.fromkeys(opts["formats"]))
    if opts.get("log_file"):
        config.log_file = opts["log_file"]
    if opts.get("log_format"):
        config.log_format = opts["log_format"]
    if opts.get("verbose"):
        config.log_level = "DEBUG"
    return config


def setup_logging(config: ExorcismConfig) -> None:
    """Configure Python logging."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))

    if config.log_format == "json":
        fmt = "%(message)s"
    else:
        fmt = "%(asctime)s %(name)-24s %(levelname)-7s %(message)s"

    logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)


@click.command(name="exorcism")
@click.version_option(__version__, prog_name="exorcism")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to every cleanup prompt.")
@click.option("--no-cleanup", is_flag=True, help="Skip the interactive cleanup step.")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Where to write reports (default: the ladder directory).",
)
@click.option(
    "--format",
    "formats",
    type=click.Choice(REPORT_FORMATS),
    multiple=True,
    help="Report format; repeat for several (default: all).",
)
@click.option("--log-file", default=None, help="Log to file in addition to stdout.")
@click.option("--log-format", type=click.Choice(["text", "json"]), default=None, help="Log format (default: text).")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(**opts) -> None:
    """Validate every module directory of the ladder in the current directory."""
    config = apply_cli_overrides(ExorcismConfig(), **opts)
    setup_logging(config)

    logger = logging.getLogger("exorcism")
    try:
        root = Path.cwd()
    except OSError as exc:
        raise FatalHostError(f"Cannot resolve working directory: {exc}")
    logger.info("Ladder root: %s", root)

    try:
        controller = LifecycleController(config, root)
        code = controller.run()
    except WorkspaceError as exc:
        raise FatalHostError(str(exc))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)

    sys.exit(code)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
