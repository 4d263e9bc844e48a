"""ntfsmft CLI entry point and global options."""

import sys
from pathlib import Path

import click

from ntfsmft import __version__
from ntfsmft.cli.dump import dump, entry
from ntfsmft.core.config import ParserConfig, load_config
from ntfsmft.core.errors import ConfigError, handle_error
from ntfsmft.core.logging import LogFormat, configure_logging

EXIT_FAILURE = 1
EXIT_USAGE = 2


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Also log per-entry debug details to stderr")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors; no progress or metrics")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="How log lines on stderr are rendered",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(path_type=Path),
    help="YAML file with parser settings",
)
@click.version_option(version=__version__, prog_name="ntfsmft")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, log_format: LogFormat, config_path: Path | None) -> None:
    """ntfsmft: parse NTFS $MFT snapshots without mounting the volume.

    Decodes entries, their attributes and data runs, and rebuilds each
    entry's full path. Results go to stdout, diagnostics to stderr.
    """
    configure_logging(log_format=log_format, quiet=quiet, verbose=verbose)

    config = ParserConfig()
    if config_path is not None:
        try:
            config = load_config(config_path)
        except ConfigError as e:
            handle_error(e, exit_code=EXIT_USAGE)

    ctx.obj = {"config": config}


cli.add_command(dump)
cli.add_command(entry)


def main() -> None:
    try:
        cli()
    except Exception as e:
        click.echo(f"ntfsmft: unexpected failure: {e}", err=True)
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
