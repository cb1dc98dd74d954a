"""proxy-printer command line interface."""

from pathlib import Path
from typing import Optional

import click

from proxy_printer import __version__
from proxy_printer.cli.common import ProgressPrinter, exit_with_message, write_json_summary
from proxy_printer.cli.handlers import handle_materialize
from proxy_printer.config.schema import available_languages
from proxy_printer.constants import MAX_TOKEN_COPIES
from proxy_printer.core.logging import setup_logging
from proxy_printer.progress import ProgressReporter

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--deck-file",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    help="Deck-list text file (e.g. '4 Lightning Bolt (M10) 146').",
)
@click.option("--deck-url", help="Archidekt deck URL.")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Folder for the PDF (defaults to PP_OUTPUT_DIR).",
)
@click.option("--output-name", help="PDF file name without extension.")
@click.option(
    "--language",
    "language_code",
    help=f"Preferred print language: {available_languages()}.",
)
@click.option(
    "--token-copies",
    type=click.IntRange(0, MAX_TOKEN_COPIES),
    default=None,
    help="Copies of each related token to add (0 disables tokens).",
)
@click.option(
    "--print-all-tokens",
    is_flag=True,
    help="Print every token variant instead of one per token name.",
)
@click.option("--save-images", is_flag=True, help="Also save the card images.")
@click.option(
    "--workers",
    type=click.IntRange(1, 8),
    default=None,
    help="Concurrent card lookups (defaults to PP_MAX_LOOKUP_WORKERS).",
)
@click.option(
    "--summary",
    "summary_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a JSON summary of the run to this file.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Console log level (defaults to PP_LOG_LEVEL).",
)
@click.version_option(__version__, prog_name="proxy-printer")
def cli(
    deck_file: Optional[Path],
    deck_url: Optional[str],
    output_dir: Optional[Path],
    output_name: Optional[str],
    language_code: Optional[str],
    token_copies: Optional[int],
    print_all_tokens: bool,
    save_images: bool,
    workers: Optional[int],
    summary_path: Optional[Path],
    log_level: Optional[str],
) -> None:
    """Turn a Magic: The Gathering deck into a printable PDF of proxies."""
    if bool(deck_file) == bool(deck_url):
        raise click.UsageError("Give exactly one of --deck-file or --deck-url.")

    setup_logging(log_level.upper() if log_level else None)

    reporter = ProgressReporter()
    reporter.subscribe(ProgressPrinter())

    result = handle_materialize(
        deck_file=deck_file,
        deck_url=deck_url,
        language_code=language_code,
        token_copies=token_copies,
        print_all_tokens=print_all_tokens,
        save_images=save_images,
        output_dir=output_dir,
        output_name=output_name,
        workers=workers,
        reporter=reporter,
    )

    if not result["ok"]:
        exit_with_message(result["error"], code=1)

    summary = result["value"]
    if summary_path is not None:
        write_json_summary(summary, summary_path)

    for name in summary["unresolved"]:
        click.secho(f"Not printed: {name}", fg="yellow")
    click.echo(
        f"Saved {summary['cards']} cards of '{summary['deck']}' to {summary['document']}"
    )


if __name__ == "__main__":
    cli()
