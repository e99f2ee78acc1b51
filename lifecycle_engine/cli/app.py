"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.config_schedule_store import ConfigScheduleStore
from ..config import AppConfig, get_default_config_path
from ..domain.cancellation import CancellationPolicy
from ..domain.models import OperatingMode, OrderStatus
from ..domain.status_display import status_display
from ..domain.transitions import OrderStatusMachine, StatusTransitionPolicy
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="lifecycle-engine",
    help="Inspect order status transitions and business opening hours",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _load_machine(config_file: Optional[Path]) -> OrderStatusMachine:
    """Build the state machine, honouring the config's order policy when a file exists."""
    config_path = config_file or get_default_config_path()
    if config_path.exists():
        config = AppConfig.load_from_yaml(config_path)
        policy = StatusTransitionPolicy(allow_reactivation=config.orders.allow_reactivation)
    else:
        policy = StatusTransitionPolicy()
    return OrderStatusMachine(policy)


def _parse_at(at: Optional[str], tz: str) -> Optional[pendulum.DateTime]:
    """Parse an --at value in the business timezone; None means now."""
    if not at:
        return None

    try:
        instant = pendulum.parse(at, tz=tz)
    except Exception as e:
        console.print(f"[red]Could not parse --at value: {e}[/red]")
        raise typer.Exit(1)

    # A bare time or a date alone parses to Time/Date
    if not isinstance(instant, pendulum.DateTime):
        console.print(f"[red]Invalid --at value '{at}'. Expected YYYY-MM-DD HH:mm[/red]")
        raise typer.Exit(1)

    return instant


def _styled(status: OrderStatus) -> str:
    display = status_display(status)
    return f"[{display.color}]{display.label}[/{display.color}]"


@app.command()
def status(
    config_file: ConfigOption = None,
    at: Annotated[Optional[str], typer.Option("--at", help="Evaluate at this local time (YYYY-MM-DD HH:mm) instead of now")] = None,
):
    """
    Show whether the business is open and when that changes.

    Examples:

        lifecycle-engine status

        lifecycle-engine status --at "2026-12-24 19:30"
    """
    try:
        config = _load_config(config_file)

        instant = _parse_at(at, config.timezone)

        service = AvailabilityService(
            ConfigScheduleStore(config),
            timezone=config.timezone,
            labels=config.locale_labels(),
        )
        snapshot = asyncio.run(service.snapshot(at=instant))

        headline = "[bold green]● Open[/bold green]" if snapshot.is_open else "[bold red]● Closed[/bold red]"
        lines = [
            headline,
            "",
            f"[bold]{snapshot.next_change_description}[/bold]",
            f"[dim]Evaluated at {snapshot.evaluated_at.format('YYYY-MM-DD HH:mm')} ({config.timezone})[/dim]",
        ]
        if config.mode == OperatingMode.MANUAL_CLOSED:
            lines.append("[yellow]Manual mode: closed until switched back to automatic[/yellow]")
        if snapshot.active_exception:
            lines.append(f"[cyan]Special day: {snapshot.active_exception}[/cyan]")

        console.print()
        console.print(Panel.fit("\n".join(lines), title="Availability"))

        for warning in snapshot.warnings:
            console.print(f"[yellow]⚠ {warning}[/yellow]")
        console.print()

    except typer.Exit:
        raise

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def slots(
    day: Annotated[Optional[str], typer.Argument(help="Date to schedule on (YYYY-MM-DD). Defaults to today")] = None,
    config_file: ConfigOption = None,
    at: Annotated[Optional[str], typer.Option("--at", help="Pretend the current local time is this (YYYY-MM-DD HH:mm)")] = None,
):
    """
    List bookable delivery times and the delivery estimate for an order placed now.

    Examples:

        lifecycle-engine slots

        lifecycle-engine slots 2026-12-31
    """
    try:
        config = _load_config(config_file)
        instant = _parse_at(at, config.timezone)

        service = AvailabilityService(
            ConfigScheduleStore(config),
            timezone=config.timezone,
            labels=config.locale_labels(),
        )
        reference = instant or service.now()

        if day:
            try:
                target = pendulum.from_format(day, "YYYY-MM-DD", tz=config.timezone).date()
            except ValueError:
                console.print(f"[red]Invalid date format: {day}. Use YYYY-MM-DD[/red]")
                raise typer.Exit(1)
        else:
            target = reference.date()

        delivery = config.delivery
        found = asyncio.run(
            service.delivery_slots(
                target,
                at=reference,
                min_delivery_minutes=delivery.min_minutes,
                max_delivery_minutes=delivery.max_minutes,
            )
        )
        estimate = asyncio.run(
            service.delivery_estimate(
                at=reference,
                min_delivery_minutes=delivery.min_minutes,
                max_delivery_minutes=delivery.max_minutes,
            )
        )

        console.print()
        if estimate.is_available:
            console.print(f"[bold]Order now, delivered:[/bold] {estimate}")
        else:
            console.print("[yellow]No delivery possible within the next week[/yellow]")

        if not found:
            console.print(f"\n[yellow]No delivery slots on {target.isoformat()}[/yellow]\n")
            return

        table = Table(
            title=f"Delivery slots on {target.isoformat()}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Time", style="bold yellow")
        table.add_column("In", style="dim")

        for slot in found:
            waiting = "-" if slot.minutes_until is None else f"{slot.minutes_until} min"
            label = f"{slot.label} [green](next)[/green]" if slot.is_next_available else slot.label
            table.add_row(label, waiting)

        console.print()
        console.print(table)
        console.print(f"\n[bold green]✓ {len(found)} slot(s)[/bold green]\n")

    except typer.Exit:
        raise

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def week(config_file: ConfigOption = None):
    """
    List the configured weekly schedule and exceptions.
    """
    try:
        config = _load_config(config_file)
        labels = config.locale_labels()

        table = Table(
            title="Weekly schedule",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Day", style="bold yellow")
        table.add_column("Open")
        table.add_column("Windows", style="dim")

        for index, day in enumerate(config.week_schedule()):
            windows = ", ".join(str(window) for window in day.windows) or "-"
            table.add_row(
                labels.weekday_name(index),
                "[green]yes[/green]" if day.is_open else "[red]no[/red]",
                windows
            )

        console.print()
        console.print(table)

        if config.exceptions:
            exceptions_table = Table(
                title="Exceptions",
                show_header=True,
                header_style="bold cyan"
            )
            exceptions_table.add_column("Date", style="bold yellow")
            exceptions_table.add_column("Name")
            exceptions_table.add_column("Open")
            exceptions_table.add_column("Windows", style="dim")

            for exception in sorted(config.schedule_exceptions(), key=lambda e: e.date):
                exceptions_table.add_row(
                    exception.date.isoformat(),
                    exception.name,
                    "[green]yes[/green]" if exception.is_open else "[red]no[/red]",
                    ", ".join(str(window) for window in exception.windows) or "-"
                )

            console.print()
            console.print(exceptions_table)
        console.print()

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def transitions(
    current: Annotated[OrderStatus, typer.Argument(help="Current order status")],
    config_file: ConfigOption = None,
):
    """
    List the statuses an operator can move an order to.
    """
    try:
        machine = _load_machine(config_file)
        actions = machine.available_actions(current)

        console.print()
        if not actions:
            console.print(f"{_styled(current)} is final: no further transitions.\n")
            return

        table = Table(
            title=f"From {status_display(current).label}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Next status")
        table.add_column("Value", style="dim")
        table.add_column("Reason required")

        for target, needs_reason in actions:
            table.add_row(
                _styled(target),
                target.value,
                "[yellow]yes[/yellow]" if needs_reason else "no"
            )

        console.print(table)
        console.print()

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def transition(
    current: Annotated[OrderStatus, typer.Argument(help="Current order status")],
    target: Annotated[OrderStatus, typer.Argument(help="Requested status")],
    reason: Annotated[Optional[str], typer.Option("--reason", "-r", help="Justification, required when moving back")] = None,
    config_file: ConfigOption = None,
):
    """
    Check whether a status change is allowed.

    Examples:

        lifecycle-engine transition preparing ready

        lifecycle-engine transition preparing accepted --reason "wrong order entered"
    """
    try:
        machine = _load_machine(config_file)
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    result = machine.attempt_transition(current, target, reason)

    if not result.ok:
        console.print(f"\n[bold red]✗ {result.error.message}[/bold red]\n")
        raise typer.Exit(1)

    console.print(f"\n[green]✓[/green] {_styled(current)} → {_styled(result.status)}")
    if result.justification:
        console.print(f"  [dim]Reason: {result.justification}[/dim]")
    console.print()


@app.command()
def can_cancel(
    current: Annotated[OrderStatus, typer.Argument(help="Current order status")],
):
    """
    Show whether a customer may still cancel an order in this status.
    """
    policy = CancellationPolicy()
    allowed = policy.customer_can_cancel(current)
    warning = policy.cancellation_warning(current)

    console.print()
    if allowed:
        console.print(f"[green]✓ Customer can cancel[/green] ({_styled(current)})")
    else:
        console.print(f"[red]✗ Customer cannot cancel[/red] ({_styled(current)})")
    if warning:
        console.print(f"  {warning}")
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]lifecycle-engine[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
