"""rangescan CLI - resumable TCP-connect scanning of IPv4 ranges."""

import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from rangescan.config import (
    get_checkpoint_backend,
    get_health_port,
    get_update_interval,
    is_verbose,
    load_notifier_settings,
)
from rangescan.errors import ScanError
from rangescan.modules.checkpoint import create_checkpoint_store
from rangescan.modules.health import HealthServer
from rangescan.modules.monitor import ElapsedTicker, LivenessNotifier
from rangescan.modules.notify import BrevoNotifier, LogNotifier, Notifier
from rangescan.modules.ports import format_ports, parse_ports
from rangescan.modules.scanner import ProgressUpdate, RangeScanner, ScanConfig, ScanReport
from rangescan.utils.async_utils import safe_async_run

app = typer.Typer(
    name="rangescan",
    help="Resumable TCP-connect port scanner for IPv4 ranges",
    no_args_is_help=True,
)
console = Console()


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_notifier() -> Notifier:
    """Brevo notifier when configured, otherwise notifications only go to the log."""
    settings = load_notifier_settings()
    if settings is None:
        console.print(
            "[yellow]BREVO_URL/BREVO_APIKEY not set; notifications will only be logged.[/yellow]"
        )
        return LogNotifier()
    return BrevoNotifier(settings)


def print_progress(update: ProgressUpdate) -> None:
    console.print(
        f"[cyan]●[/] Chunk [bold]{update.chunk}[/] done "
        f"[dim]({update.completed}/{update.total} IPs, {update.percent:.2f}%)[/]"
    )


def print_summary(report: ScanReport, elapsed: float, output: Path | None) -> None:
    if not report.ports:
        console.print("[yellow]No ports to scan.[/yellow]")
        return
    if report.complete_without_work:
        console.print("[green]Nothing left to scan: range already covered by checkpoint.[/green]")
        return
    open_lines = "\n".join(f"  {result.line()}" for result in report.open_results[:20])
    if report.open_count > 20:
        open_lines += f"\n  [dim]... {report.open_count - 20} more[/dim]"
    saved = f"\n[bold]Results:[/bold] {output}" if output else ""
    console.print(
        Panel(
            f"[bold]Range:[/bold] {report.start_ip} - {report.end_ip}\n"
            f"[bold]Ports:[/bold] {format_ports(report.ports)}\n"
            f"[bold]Probes:[/bold] {report.probes}\n"
            f"[bold]Open ports:[/bold] {report.open_count}\n"
            f"{open_lines}\n"
            f"[bold]Elapsed:[/bold] {elapsed / 60:.2f} minutes"
            f"{saved}",
            title="Scan complete",
            border_style="green" if report.open_count else "blue",
        )
    )


async def run_scan(
    scanner: RangeScanner,
    *,
    notifier: Notifier,
    repeat: bool,
    interval: float,
    health_port: int | None,
    update_interval: float,
    passes: int = 0,
    stop: asyncio.Event | None = None,
) -> ScanReport | None:
    """
    Run the scanner alongside the liveness notifier, ticker and health endpoint.

    Setting stop ends a repeating scan after the current pass and shuts the
    background tasks down. passes > 0 bounds the number of repeated passes.
    """
    stop = stop if stop is not None else asyncio.Event()
    health: HealthServer | None = None
    if health_port is not None:
        health = HealthServer(port=health_port)
        try:
            await health.start()
        except OSError as exc:
            console.print(f"[yellow]Health endpoint disabled: {exc}[/yellow]")
            health = None

    liveness = LivenessNotifier(notifier, update_interval)
    ticker = ElapsedTicker(report=lambda message: console.print(f"[dim]{message}[/dim]"))
    background = [
        asyncio.ensure_future(liveness.run(stop)),
        asyncio.ensure_future(ticker.run(stop)),
    ]
    try:
        if repeat:
            return await scanner.run_forever(
                stop, interval=interval, max_passes=passes if passes > 0 else None
            )
        return await scanner.run_once()
    finally:
        stop.set()
        await asyncio.gather(*background, return_exceptions=True)
        if health is not None:
            await health.stop()


@app.command()
def version() -> None:
    """Show the installed rangescan version."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version

    try:
        current_version = pkg_version("rangescan")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"rangescan {current_version}")


@app.command()
def scan(
    start: str = typer.Option("192.168.1.1", "--start", help="Starting IP address"),
    end: str = typer.Option("192.168.1.10", "--end", help="Ending IP address"),
    ports: str = typer.Option("25", "--ports", help="Comma-separated list of ports"),
    timeout: float = typer.Option(2.0, "--timeout", help="Connection timeout in seconds"),
    concurrent: int = typer.Option(
        1000, "--concurrent", help="Maximum concurrent probes per chunk"
    ),
    chunk: int = typer.Option(1_000_000, "--chunk", help="Number of IPs per chunk"),
    parallel: bool = typer.Option(
        False, "--parallel", help="Run chunks in parallel (concurrency bound is per chunk)"
    ),
    output: Path = typer.Option(
        Path("scan_results.txt"), "--output", help="Output file for open-port lines"
    ),
    checkpoint: Path = typer.Option(
        Path("checkpoint.txt"), "--checkpoint", help="Checkpoint file for resuming"
    ),
    checkpoint_backend: Optional[str] = typer.Option(
        None,
        "--checkpoint-backend",
        help="Checkpoint storage: file or memory (default from RANGESCAN_CHECKPOINT_BACKEND)",
    ),
    compress: bool = typer.Option(False, "--compress", help="Compress output file with gzip"),
    repeat: bool = typer.Option(False, "--repeat", help="Rescan the range until interrupted"),
    interval: float = typer.Option(
        0.0, "--interval", help="Seconds to wait between passes with --repeat"
    ),
    passes: int = typer.Option(
        0, "--passes", help="Stop --repeat after this many passes (0 = until interrupted)"
    ),
    health: bool = typer.Option(
        True, "--health/--no-health", help="Serve GET /health on PORT while scanning"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Scan an IPv4 range for open TCP ports, resuming from the last checkpoint."""
    configure_logging(verbose or is_verbose())

    port_list = parse_ports(ports)

    backend = checkpoint_backend or get_checkpoint_backend()
    try:
        store = create_checkpoint_store(backend, checkpoint)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    notifier = build_notifier()
    config = ScanConfig(
        start_ip=start,
        end_ip=end,
        ports=port_list,
        timeout=timeout,
        max_concurrent=concurrent,
        chunk_size=chunk,
        parallel=parallel,
        output_path=output,
        compress=compress,
        record_results=False,
    )
    scanner = RangeScanner(
        config,
        checkpoints=store,
        notifier=notifier,
        on_progress=print_progress,
    )

    console.print(
        f"[bold cyan]Scanning[/] [bold]{start}[/] - [bold]{end}[/] "
        f"[dim]ports {format_ports(port_list) or '-'}, chunk {chunk}, "
        f"{'parallel' if parallel else 'sequential'}[/]"
    )
    started = time.perf_counter()
    try:
        report = safe_async_run(
            run_scan(
                scanner,
                notifier=notifier,
                repeat=repeat,
                interval=interval,
                passes=passes,
                health_port=get_health_port() if health else None,
                update_interval=get_update_interval(),
            )
        )
    except (ScanError, ValueError) as exc:
        console.print(f"[red]Error during scan: {exc}[/red]")
        raise typer.Exit(1) from exc
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted. Progress is kept up to the last checkpoint.[/yellow]")
        raise typer.Exit(130) from None

    if report is not None:
        print_summary(report, time.perf_counter() - started, output)


@app.command()
def health(
    port: Optional[int] = typer.Option(None, "--port", help="Listen port (default from PORT)"),
    host: str = typer.Option("0.0.0.0", "--host", help="Listen address"),
) -> None:
    """Serve only the health endpoint until interrupted."""
    listen_port = port if port is not None else get_health_port()
    server = HealthServer(host=host, port=listen_port)
    console.print(f"[green]Serving GET /health on {host}:{listen_port}[/green]")
    try:
        safe_async_run(server.serve(asyncio.Event()))
    except KeyboardInterrupt:
        console.print("[dim]Health endpoint stopped.[/dim]")
    except OSError as exc:
        console.print(f"[red]Cannot serve health endpoint: {exc}[/red]")
        raise typer.Exit(1) from exc


def main():
    """Entry point for the CLI."""
    app()
