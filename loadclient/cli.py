"""Command line interface for the load client."""

import asyncio
import sys
from typing import Any, Dict, List
import click
from rich.console import Console
from rich.table import Table

from .core.config import ClientConfig, ConfigLoader, RunCommand
from .core.results import TxStats
from .utils.logging import setup_logging
from .worker.channel import QueueChannel
from .worker.handler import ClientHandler
from .worker.process import spawn_client


console = Console()


@click.group()
@click.option('--log-level', default='INFO', help='Logging level')
@click.option('--log-file', help='Log file path')
@click.option('--update-interval', default=1.0, type=float, help='Progress report interval in seconds')
@click.pass_context
def cli(ctx, log_level, log_file, update_interval):
    """Load client CLI."""
    ctx.ensure_object(dict)
    ctx.obj['client_config'] = ClientConfig(
        update_interval=update_interval,
        log_level=log_level,
        log_file=log_file,
    )

    setup_logging(level=log_level, log_file=log_file, component="cli")


@cli.command()
@click.option('--config', '-c', 'config_file', required=True, help='Test command YAML file')
@click.pass_context
def run(ctx, config_file):
    """Run a test in this process."""
    command = _load_command(config_file)
    events = asyncio.run(_run_in_process(command, ctx.obj['client_config']))
    _report(events)


@cli.command()
@click.option('--config', '-c', 'config_file', required=True, help='Test command YAML file')
@click.pass_context
def spawn(ctx, config_file):
    """Run a test in a separate client process."""
    command = _load_command(config_file)
    process, conn = spawn_client(ctx.obj['client_config'])
    events = []
    try:
        conn.send(_message(command))
        conn.send({'type': 'stop'})
        while True:
            try:
                event = conn.recv()
            except EOFError:
                break
            _print_event(event)
            events.append(event)
            if event['type'] in ('result', 'error'):
                break
    finally:
        conn.close()
        process.join(timeout=10)
    _report(events)


@cli.command()
@click.option('--config', '-c', 'config_file', required=True, help='Test command YAML file to validate')
def validate(config_file):
    """Validate a test command file."""
    console.print(f"[blue]Validating test command: {config_file}[/blue]")
    command = _load_command(config_file)
    target = ConfigLoader.resolve_target(command.target_config)
    console.print(f"[green]✓ Valid test command: {command.label}[/green]")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Workload", command.workload_module)
    table.add_row("Target", f"{target.name} ({target.target_class})")
    if command.is_duration:
        table.add_row("Duration", f"{command.duration_seconds}s")
    else:
        table.add_row("Count", str(command.count))
    table.add_row("Rate Control", command.rate_control.type)
    trim = command.trim_config()
    table.add_row("Trim", f"{trim.mode.value} {trim.threshold}")

    console.print(table)


def _load_command(config_file: str) -> RunCommand:
    try:
        return ConfigLoader.load_command(config_file)
    except Exception as e:
        console.print(f"[red]✗ Invalid test command: {e}[/red]")
        sys.exit(1)


def _message(command: RunCommand) -> Dict[str, Any]:
    message = command.model_dump(by_alias=True, exclude_none=True)
    message['type'] = 'test'
    return message


async def _run_in_process(command: RunCommand, client_config: ClientConfig) -> List[Dict[str, Any]]:
    worker_side, controller_side = QueueChannel.pair()
    handler = ClientHandler(worker_side, client_config)
    serving = asyncio.create_task(handler.serve())

    controller_side.send(_message(command))
    controller_side.send({'type': 'stop'})

    events = []
    while True:
        event = await controller_side.receive()
        if event is None:
            break
        _print_event(event)
        events.append(event)
        if event['type'] in ('result', 'error'):
            break
    await serving
    return events


def _print_event(event: Dict[str, Any]):
    if event['type'] == 'progress':
        committed = event['data']['committed']
        if isinstance(committed, TxStats):
            console.print(
                f"submitted +{event['data']['submittedDelta']}, "
                f"succ {committed.succ}, fail {committed.fail}, "
                f"avg delay {committed.avg_delay * 1000:.2f}ms"
            )
        else:
            console.print(f"submitted +{event['data']['submittedDelta']}")


def _report(events: List[Dict[str, Any]]):
    final = events[-1] if events else None
    if final is None or final['type'] == 'error':
        reason = final['data'] if final else 'no response from client'
        console.print(f"[red]✗ Test failed: {reason}[/red]")
        sys.exit(1)

    _display_results_summary(final['data'])
    console.print(f"\n[green]✓ Test completed successfully![/green]")


def _display_results_summary(stats):
    """Display final statistics."""
    console.print(f"\n[bold]Test Results Summary[/bold]")

    if not isinstance(stats, TxStats):
        console.print(str(stats))
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Succeeded", f"{stats.succ:,}")
    table.add_row("Failed", f"{stats.fail:,}")
    table.add_row("Throughput", f"{stats.throughput:.1f} tps")
    table.add_row("Avg Delay", f"{stats.avg_delay * 1000:.2f}ms")
    table.add_row("Min Delay", f"{stats.delay_min * 1000:.2f}ms")
    table.add_row("Max Delay", f"{stats.delay_max * 1000:.2f}ms")
    table.add_row("P95 Delay", f"{stats.delay_percentile(95.0) * 1000:.2f}ms")
    table.add_row("P99 Delay", f"{stats.delay_percentile(99.0) * 1000:.2f}ms")

    console.print(table)


def main():
    """Entry point for the load client CLI."""
    cli()


if __name__ == '__main__':
    main()
