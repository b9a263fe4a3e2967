"""cpg-reducer command line entry point.

Usage errors exit with status 1 (not click's 2) and print the classic
one-line usage string. A structural error in an input graph aborts the
run with status 70.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any

import click

from cpg_reducer import __version__
from cpg_reducer.config.models import NodeGranularity, OutputFormat
from cpg_reducer.config.settings import ReducerSettings
from cpg_reducer.errors import DotParseError, StructuralError
from cpg_reducer.services.pipeline import PipelineOptions, run_pipeline

logger = logging.getLogger(__name__)

USAGE = "usage: cpg-reducer -n function|compartment -f d3-arc input-dot-file"

EXIT_USAGE = 1
EXIT_STRUCTURAL = 70


class ReducerUsageError(click.UsageError):
    """A usage error reported the way cpg-reducer always has."""

    exit_code = EXIT_USAGE

    def show(self, file: IO[Any] | None = None) -> None:
        click.echo(f"cpg-reducer: {self.format_message()}", file=file, err=file is None)
        click.echo(USAGE, file=file, err=file is None)


class ReducerCommand(click.Command):
    """Click Command that turns every parse failure into a ReducerUsageError."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            raise ReducerUsageError(exc.format_message(), ctx=exc.ctx or ctx) from exc


def _pipeline_options(settings: ReducerSettings) -> PipelineOptions:
    return PipelineOptions(
        node_type=settings.node_type,
        output_format=settings.output_format,
        weight_policy=settings.merge.weight_policy,
        raw_labels=settings.emit.raw_labels,
    )


@click.command(cls=ReducerCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="cpg-reducer")
@click.option(
    "-n",
    "node_type",
    type=click.Choice([g.value for g in NodeGranularity]),
    default=None,
    help="Node granularity (default: compartment).",
)
@click.option(
    "-f",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=None,
    help="Output format (default: d3-arc).",
)
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file (omit to print to stdout).",
)
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging to stderr.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
def cli(
    node_type: str | None,
    output_format: str | None,
    output_file: Path | None,
    config_path: str | None,
    verbose: bool,
    log_json: bool,
    input_file: Path,
) -> None:
    """Reduce a code property graph and emit it for an arc diagram.

    Edges between functions of the same file are removed, then (in
    compartment mode) functions are merged into one node per file.
    One JSON document is written per graph in INPUT_FILE.
    """
    settings = ReducerSettings.from_cli(
        config_path=config_path,
        node_type=node_type,
        output_format=output_format,
        verbose=verbose or None,
        log_json=log_json or None,
    )

    from cpg_reducer.config.logging import configure_logging

    configure_logging(verbose=settings.verbose, log_json=settings.log_json)
    logger.debug(
        "Processing %s: node_type=%s format=%s",
        input_file,
        settings.node_type,
        settings.output_format,
    )

    documents = run_pipeline(input_file, _pipeline_options(settings))
    try:
        if output_file is None:
            # Pipe-friendly: raw documents to stdout
            for document in documents:
                click.echo(document, nl=False)
        else:
            with output_file.open("w", encoding="utf-8") as out:
                for document in documents:
                    out.write(document)
    except DotParseError as exc:
        logger.error("Input rejected: %s", exc)
        click.echo(f"cpg-reducer: {exc}", err=True)
        raise SystemExit(EXIT_USAGE) from exc
    except StructuralError as exc:
        logger.critical("Aborting on malformed graph: %s", exc)
        click.echo(f"cpg-reducer: {exc}", err=True)
        raise SystemExit(EXIT_STRUCTURAL) from exc


def main() -> None:
    cli()
