"""Dump and entry commands for the ntfsmft CLI."""

import os
import secrets
import time
from collections.abc import Iterator
from pathlib import Path
from typing import IO
from uuid import uuid4

import click

from ntfsmft.cli.output import OutputFormat, OutputFormatter, output_json
from ntfsmft.core import logging
from ntfsmft.core.config import ParserConfig
from ntfsmft.core.errors import MftError
from ntfsmft.mft.attribute import DataAttr, MftAttributeType
from ntfsmft.mft.entry import MftEntry
from ntfsmft.mft.export import collect_attributes, entry_to_dict, flatten_entry
from ntfsmft.mft.parser import MftParser
from ntfsmft.models.metrics import StepMetrics

MAX_STREAM_PATH_LENGTH = 150


def parse_ranges(value: str) -> list[int]:
    """Parse an entry selection like ``0-10,15`` (inclusive ranges).

    Raises:
        ValueError: On empty parts, non-numbers or reversed ranges
    """
    numbers: list[int] = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            raise ValueError(f"Empty range in '{value}'")
        if "-" in part:
            start_text, _, end_text = part.partition("-")
            start, end = int(start_text), int(end_text)
            if start > end:
                raise ValueError(f"Range start is after its end: '{part}'")
            numbers.extend(range(start, end + 1))
        else:
            numbers.append(int(part))
    return numbers


def sanitized(component: str) -> str:
    """Replace path separators so a full path can be used as one file name."""
    for separator in {"/", "\\", os.sep}:
        component = component.replace(separator, "_")
    return component


def _open_output(path: Path, confirm_overwrite: bool) -> IO[str]:
    if path.is_dir():
        raise click.ClickException(f"There is a directory at {path}, refusing to overwrite")
    if path.exists() and confirm_overwrite:
        if not click.confirm(f"Are you sure you want to override output file at {path}", default=False):
            raise click.ClickException("Cancelled")
    path.parent.mkdir(parents=True, exist_ok=True)
    return open(path, "w", encoding="utf-8", newline="")


def _prepare_streams_dir(path: Path) -> None:
    if path.exists() and not path.is_dir():
        raise click.ClickException(f"There is a file at {path}, refusing to overwrite")
    path.mkdir(parents=True, exist_ok=True)


def extract_resident_streams(entry: MftEntry, full_path: str, streams_dir: Path) -> int:
    """Write the entry's resident $DATA streams to ``streams_dir``.

    Files are named ``{path}__{random}_{n}_{stream name}.dontrun``; the random
    part keeps hard links and reused names from colliding.

    Returns:
        Number of streams written
    """
    prefix = sanitized(full_path)[:MAX_STREAM_PATH_LENGTH]
    attributes, _ = collect_attributes(entry, [MftAttributeType.DATA])
    streams = [a for a in attributes if isinstance(a.data, DataAttr)]

    for stream_number, attribute in enumerate(streams):
        random_part = secrets.token_hex(6).upper()
        target = streams_dir / f"{prefix}__{random_part}_{stream_number}_{attribute.header.name}.dontrun"
        if target.exists():
            raise click.ClickException(f"Refusing to overwrite existing stream file {target}")
        target.write_bytes(attribute.data.data)
        logging.debug(f"Extracted resident stream to {target}", entry=entry.entry_number)

    return len(streams)


def _selected_entries(parser: MftParser, ranges: str | None) -> Iterator[int] | None:
    if ranges is None:
        return None
    try:
        numbers = parse_ranges(ranges)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--range") from e

    count = parser.get_entry_count()
    out_of_bounds = [n for n in numbers if n >= count]
    if out_of_bounds:
        logging.warning(
            f"Ignoring {len(out_of_bounds)} entries past the end of the MFT", entry_count=count
        )
    return iter([n for n in numbers if n < count])


@click.command()
@click.argument("input_path", metavar="INPUT", type=click.Path(path_type=Path))
@click.option(
    "--output-format",
    "-o",
    type=click.Choice(["json", "jsonl", "csv"]),
    default=None,
    help="Output format (default: jsonl, or output_format from --config)",
)
@click.option(
    "--output",
    "-f",
    "output_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Write output to this file instead of stdout; errors still go to stderr",
)
@click.option(
    "--range",
    "ranges",
    default=None,
    help="Dump only these entries, e.g. '0-10,15'",
)
@click.option(
    "--extract-resident-streams",
    "-e",
    "streams_dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Write resident data streams to this directory",
)
@click.option(
    "--no-confirm-overwrite",
    is_flag=True,
    default=False,
    help="Overwrite the output file without asking",
)
@click.option("--entry-size", type=int, default=None, help="MFT entry size in bytes (probed by default)")
@click.pass_context
def dump(
    ctx: click.Context,
    input_path: Path,
    output_format: OutputFormat | None,
    output_path: Path | None,
    ranges: str | None,
    streams_dir: Path | None,
    no_confirm_overwrite: bool,
    entry_size: int | None,
) -> None:
    """Dump the entries of a raw $MFT file.

    \b
    Examples:
      ntfsmft dump /evidence/MFT
      ntfsmft dump /evidence/MFT -o csv -f mft.csv
      ntfsmft dump /evidence/MFT --range 0-15 -e streams/

    Entries are streamed to stdout (or --output). Entries that fail to
    decode are reported on stderr and skipped. Metrics go to stderr.
    """
    base_config: ParserConfig = ctx.obj["config"]
    try:
        config = base_config.merged(entry_size=entry_size, output_format=output_format)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--entry-size") from e

    if streams_dir is not None:
        _prepare_streams_dir(streams_dir)

    start_time = time.perf_counter()
    entries_processed = 0
    streams_extracted = 0

    try:
        with MftParser.from_config(input_path, config) as parser:
            selection = _selected_entries(parser, ranges)
            total = parser.get_entry_count() if ranges is None else None

            out_file = _open_output(output_path, not no_confirm_overwrite) if output_path else None
            try:
                formatter = OutputFormatter(format=config.output_format, file=out_file)
                progress = logging.ScanProgress(total=total if out_file else None)

                for entry in parser.iter_entries(
                    skip_errors=config.skip_entry_errors, entry_numbers=selection
                ):
                    entries_processed += 1

                    if streams_dir is not None:
                        full_path = parser.get_full_path_for_entry(entry)
                        if full_path is not None:
                            streams_extracted += extract_resident_streams(entry, full_path, streams_dir)

                    if formatter.needs_flat_rows:
                        formatter.output(flatten_entry(entry, parser))
                    else:
                        formatter.output(entry_to_dict(entry))

                    if out_file is not None:
                        progress.advance()

                if out_file is not None:
                    progress.finish(skipped=parser.skipped_entries)
            finally:
                if out_file is not None:
                    out_file.close()

            stats = parser.cache_stats()
            metrics = StepMetrics(
                run_id=uuid4(),
                step_name="dump",
                duration_ms=int((time.perf_counter() - start_time) * 1000),
                entries_processed=entries_processed + parser.skipped_entries,
                entries_output=formatter.records_written,
                bytes_read=parser.bytes_read,
                streams_extracted=streams_extracted,
                errors=parser.skipped_entries,
                cache_hits=stats.hit_count,
                cache_misses=stats.miss_count,
            )
    except MftError as e:
        output_json(e.to_structured_error(), file=click.get_text_stream("stderr"))
        ctx.exit(1)
        return

    if streams_dir is not None:
        logging.info(f"Extracted {streams_extracted} resident streams", directory=str(streams_dir))

    if not logging.is_quiet():
        click.echo(metrics.model_dump_json(), err=True)


@click.command()
@click.argument("input_path", metavar="INPUT", type=click.Path(path_type=Path))
@click.argument("entry_number", metavar="NUMBER", type=int)
@click.option("--entry-size", type=int, default=None, help="MFT entry size in bytes (probed by default)")
@click.pass_context
def entry(ctx: click.Context, input_path: Path, entry_number: int, entry_size: int | None) -> None:
    """Print one entry as JSON, including its full path."""
    base_config: ParserConfig = ctx.obj["config"]
    try:
        config = base_config.merged(entry_size=entry_size)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--entry-size") from e

    try:
        with MftParser.from_config(input_path, config) as parser:
            mft_entry = parser.get_entry(entry_number)
            document = entry_to_dict(mft_entry, full_path=parser.get_full_path_for_entry(mft_entry))
    except MftError as e:
        output_json(e.to_structured_error())
        ctx.exit(1)
        return

    output_json(document)
