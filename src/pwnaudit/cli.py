"""
pwnaudit CLI - check a password store, or one piped password, against
Pwned Passwords.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import json
import logging
import sys
from enum import Enum
from typing import IO

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from pwnaudit import __version__
from pwnaudit.config import AuditConfig
from pwnaudit.exceptions import BreachCheckError, StoreError
from pwnaudit.scan.decrypt import first_line
from pwnaudit.scan.models import ScanReport
from pwnaudit.scan.pipeline import check_single, run_scan
from pwnaudit.store.paths import resolve_store_path

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SAFE = 0
EXIT_PWNED = 1
EXIT_ERROR = 2


class RunMode(str, Enum):
    """How the process was invoked."""

    PIPE = "pipe"
    SCAN = "scan"


def detect_mode(stream: IO) -> RunMode:
    """Piped stdin means one ad-hoc password, a terminal means a full scan."""
    try:
        return RunMode.SCAN if stream.isatty() else RunMode.PIPE
    except (AttributeError, ValueError):
        return RunMode.SCAN


def configure_logging(verbose: bool) -> None:
    """Route log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@click.command()
@click.version_option(version=__version__, prog_name="pwnaudit")
@click.option("--pass-dir", "pass_dir", type=click.Path(), help="Path to password store directory (default: ~/.password-store)")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output for debugging")
@click.option("--json", "json_output", is_flag=True, help="Output scan report as JSON")
@click.option("--api-url", envvar="PWNAUDIT_API_URL", help="Pwned Passwords range endpoint")
@click.option("--gpg", "gpg_binary", envvar="PWNAUDIT_GPG", help="gpg binary used for decryption")
@click.option(
    "--mode",
    type=click.Choice(["auto", "pipe", "scan"]),
    default="auto",
    show_default=True,
    help="Force piped or full-scan mode instead of detecting it from stdin",
)
def main(
    pass_dir: str | None,
    verbose: bool,
    json_output: bool,
    api_url: str | None,
    gpg_binary: str | None,
    mode: str,
) -> None:
    """Check passwords against Pwned Passwords using k-anonymity.

    With input piped on stdin, the first line is checked as a single
    password (exit 0 safe, 1 pwned, 2 error). Otherwise every entry of
    the password store is decrypted with gpg and checked (exit 1 if any
    password is pwned).

    Only the first 5 characters of each SHA-1 hash are sent to the API.

    Example:
        pwnaudit --pass-dir ~/.password-store
        echo 'hunter2' | pwnaudit
    """
    configure_logging(verbose)

    config = AuditConfig.from_env()
    config.verbose = verbose
    if pass_dir:
        config.store_dir = pass_dir
    if api_url:
        config.api_url = api_url
    if gpg_binary:
        config.gpg_binary = gpg_binary

    errors = config.validate()
    if errors:
        for error in errors:
            err_console.print(f"[red]Configuration error: {error}[/red]")
        raise SystemExit(EXIT_ERROR)

    stdin = sys.stdin
    run_mode = detect_mode(stdin) if mode == "auto" else RunMode(mode)
    logger.debug(f"Running in {run_mode.value} mode")

    if run_mode is RunMode.PIPE:
        raise SystemExit(handle_pipe_mode(config, stdin))
    raise SystemExit(handle_scan_mode(config, json_output))


# =============================================================================
# Piped mode
# =============================================================================

def read_line(stream: IO) -> str:
    """Read one raw line, keeping non UTF-8 bytes as surrogates."""
    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        return stream.readline()
    return buffer.readline().decode("utf-8", errors="surrogateescape")


def handle_pipe_mode(config: AuditConfig, stream: IO) -> int:
    """Check the first line of ``stream`` as a password. Returns exit code."""
    try:
        line = read_line(stream)
    except OSError as e:
        err_console.print(f"[red]Error reading from stdin: {e}[/red]")
        return EXIT_ERROR

    if not line:
        err_console.print("[yellow]No input received from stdin.[/yellow]")
        return EXIT_SAFE

    password = first_line(line)
    if not password:
        err_console.print("[yellow]Received empty password from stdin.[/yellow]")
        return EXIT_SAFE

    try:
        result = check_single(password, config)
    except BreachCheckError as e:
        err_console.print(f"[red]Error checking password: {escape(str(e))}[/red]")
        return EXIT_ERROR

    if result.is_pwned:
        console.print("[red]PWNED![/red]")
        logger.debug(result.risk_description)
        return EXIT_PWNED

    console.print("[green]SAFE.[/green]")
    return EXIT_SAFE


# =============================================================================
# Full scan mode
# =============================================================================

def handle_scan_mode(config: AuditConfig, json_output: bool = False) -> int:
    """Scan the whole store. Returns exit code."""
    try:
        store_path = resolve_store_path(config.store_dir)
    except StoreError as e:
        err_console.print(f"[red]Error determining password store path: {escape(str(e))}[/red]")
        return EXIT_ERROR

    if not json_output:
        console.print(f"[blue]Using password store: {escape(str(store_path))}[/blue]")
        console.print(f"[blue]Scanning for {config.entry_suffix} files...[/blue]")
        console.print(
            "[yellow]Note: This relies on gpg-agent caching. "
            "You may be prompted for your passphrase.[/yellow]"
        )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=err_console,
        transient=True,
        disable=json_output,
    ) as progress:
        task_ids = []

        def on_progress(processed: int, total: int) -> None:
            if not task_ids:
                task_ids.append(progress.add_task("Decrypting...", total=total))
            progress.update(task_ids[0], completed=processed)

        try:
            report = run_scan(config, progress=on_progress)
        except StoreError as e:
            err_console.print(f"[red]Error finding password files: {escape(str(e))}[/red]")
            return EXIT_ERROR

    if json_output:
        click.echo(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        print_report(report)

    return EXIT_PWNED if report.summary.has_breaches else EXIT_SAFE


def print_report(report: ScanReport) -> None:
    """Render per-entry findings and the final summary."""
    summary = report.summary

    if summary.passwords_checked == 0 and summary.skipped == 0:
        console.print(
            f"[yellow]No non-empty passwords found after decryption phase "
            f"(skipped: {summary.empty_entries}, errors: {summary.decryption_errors}).[/yellow]"
        )
    else:
        console.print("\n[bold]--- Pwned Passwords Check Results ---[/bold]")
        for result in report.errored:
            console.print(f"[yellow]Error checking '{escape(result.entry)}': {escape(str(result.error))}[/yellow]")
        for result in report.skipped:
            console.print(f"[magenta]Internal error: '{escape(result.entry)}' was queued without a decrypted password[/magenta]")
        for result in report.breached:
            seen = f" (seen {result.occurrences:,} times)" if result.occurrences else ""
            console.print(f"[red]PWNED: '{escape(result.entry)}'{seen}[/red]")

    table = Table(title="\nFinal Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")

    table.add_row("Password Files Found", str(summary.files_found))
    table.add_row("Decryption Errors", f"[yellow]{summary.decryption_errors}[/yellow]")
    table.add_row("Empty/Skipped Files", f"[yellow]{summary.empty_entries}[/yellow]")
    table.add_row("Passwords Checked", str(summary.passwords_checked))
    table.add_row("Pwned Found", f"[red]{summary.breaches_found}[/red]")
    if summary.check_errors:
        table.add_row("Check Errors", f"[yellow]{summary.check_errors}[/yellow]")
    if summary.skipped:
        table.add_row("Internal Skips", f"[magenta]{summary.skipped}[/magenta]")

    console.print(table)

    if summary.has_breaches:
        console.print(Panel(
            f"[red]{summary.breaches_found} password(s) found in known data breaches.[/red] "
            "Change them as soon as possible.",
            title="Scan complete",
        ))
    else:
        console.print("[green]Scan complete.[/green]")


if __name__ == "__main__":
    main()
