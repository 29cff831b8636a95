"""Command line entry point: ``yolo-upload CLUSTER_URL PATTERN...``."""

import logging
import signal
import sys
import threading

import click

from .config import UploaderConfig
from .encoding import DECODING_POLICIES
from .errors import ConfigurationError, UploaderError
from .inputs import estimate_batches, open_inputs, preview, resolve_inputs
from .models import BatchResult, ErrorKind, UploadSummary
from .pipeline import run_pipeline
from .uploader import BulkUploader

RULE = "=" * 33
THIN_RULE = "-" * 33


def _report_batch(result: BatchResult) -> None:
    if result.success:
        click.secho(f"Batch {result.batch_number} completed successfully", fg="green")
        return
    if result.error_kind is ErrorKind.PROTOCOL:
        click.secho(f"Batch {result.batch_number} had some errors", fg="yellow")
    else:
        click.secho(f"Batch {result.batch_number} failed!", fg="red")
    click.echo(result.error_detail or "")


def _report_summary(summary: UploadSummary) -> None:
    click.secho(
        f"Processed {summary.total_batches} batches, "
        f"{summary.total_documents} documents ({summary.total_lines} lines read)",
        fg="cyan",
    )
    if summary.cancelled:
        click.secho("Upload cancelled before all batches were sent", fg="yellow")
    if summary.overall_success and not summary.cancelled:
        click.secho("All uploads completed successfully!", fg="green")
    elif not summary.overall_success:
        failed = ", ".join(str(r.batch_number) for r in summary.failed_batches)
        click.secho(f"Upload completed with errors in batches: {failed}", fg="yellow")
        click.secho("Check the batch messages above for details", fg="yellow")


@click.command()
@click.argument("cluster_url")
@click.argument("patterns", nargs=-1, required=True)
@click.option("--index", help="Target index (default: logs).")
@click.option("--batch-size", type=int, help="Documents per bulk request (default: 1000).")
@click.option("--field", "field_name", help="Document field holding the line (default: message).")
@click.option("--timeout", type=float, help="Per-request timeout in seconds (default: 30).")
@click.option(
    "--encoding-errors",
    type=click.Choice(DECODING_POLICIES),
    help="How to handle lines that are not valid UTF-8 (default: replace).",
)
@click.option("--insecure", is_flag=True, help="Do not verify TLS certificates.")
@click.option("--preview", "preview_lines", type=int, default=3, show_default=True,
              help="Number of input lines to show as a request preview.")
@click.option("--no-ping", is_flag=True, help="Skip the connection check before uploading.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(cluster_url, patterns, index, batch_size, field_name, timeout,
         encoding_errors, insecure, preview_lines, no_ping, verbose):
    """Upload every line of the files matching PATTERNS to CLUSTER_URL."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        config = UploaderConfig.from_env().with_overrides(
            cluster_url=cluster_url,
            index=index,
            batch_size=batch_size,
            field_name=field_name,
            timeout=timeout,
            encoding_errors=encoding_errors,
            verify_certs=False if insecure else None,
        ).validate()
    except ConfigurationError as e:
        _fail(e)

    click.secho("YOLO Log Uploader", fg="magenta", bold=True)
    click.secho(RULE, fg="cyan")
    click.echo(click.style("Target: ", fg="blue") + config.bulk_url)

    sources = resolve_inputs(patterns)
    if not sources:
        click.secho(f"No files found matching: {' '.join(patterns)}", fg="red", err=True)
        sys.exit(1)

    click.secho("Files to upload:", fg="yellow")
    total_lines = 0
    for source in sources:
        count = source.count_lines()
        total_lines += count
        click.echo(f"  {click.style('✓', fg='green')} {source.label} ({count} lines)")
    click.secho(f"Total lines to upload: {total_lines}", fg="yellow")
    estimated = estimate_batches(total_lines, config.batch_size)
    if estimated > 1:
        click.secho(
            f"Batching enabled: {estimated} batches of {config.batch_size} lines each",
            fg="blue",
        )

    if preview_lines > 0:
        click.secho(THIN_RULE, fg="cyan")
        click.secho(f"Request preview (first {preview_lines} lines):", fg="blue")
        click.secho(f"POST /{config.index}/_bulk", fg="magenta")
        for line in preview(sources, preview_lines, config.field_name, config.encoding_errors):
            click.echo(line)
        click.secho("Each line becomes 2 JSON lines: a 'create' action + the "
                    f"'{config.field_name}' field", fg="blue")
    click.secho(THIN_RULE, fg="cyan")

    uploader = BulkUploader.from_config(config)
    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda *_: cancel.set())
    try:
        if not no_ping:
            uploader.check_connection()
        with open_inputs(sources) as inputs:
            summary = run_pipeline(
                inputs, config, cancel=cancel, on_result=_report_batch, uploader=uploader
            )
    except UploaderError as e:
        _fail(e)
    finally:
        signal.signal(signal.SIGINT, previous)
        uploader.close()

    click.secho(RULE, fg="cyan")
    _report_summary(summary)
    sys.exit(0 if summary.overall_success and not summary.cancelled else 1)


def _fail(error: UploaderError) -> None:
    click.secho(f"Error: {error}", fg="red", err=True)
    if error.hint:
        click.echo(error.hint, err=True)
    sys.exit(1)


if __name__ == "__main__":
    main()
