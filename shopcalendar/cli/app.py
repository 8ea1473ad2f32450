"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional, Annotated, Tuple

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..adapters.memory_store import InMemoryShopStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import ShopCalendarError
from ..domain.models import AppointmentWindow
from ..domain.status import TemporalStatus, classify
from ..domain.timeutils import Now, format_date, format_duration, format_time_12h, parse_date
from ..services.scheduler import SchedulingService, summary_to_dict

app = typer.Typer(
    name="shopcalendar",
    help="Check appointments, offer slots and reconcile order payments",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
DataOption = Annotated[Optional[Path], typer.Option("--data", help="YAML file with appointments and payments. Defaults to ./shop_data.yaml")]

_STATUS_STYLES = {
    TemporalStatus.PAST: "dim",
    TemporalStatus.HAPPENING_NOW: "bold green",
    TemporalStatus.FUTURE: "cyan",
}


def _load(config_file: Optional[Path], data_file: Optional[Path]) -> Tuple[AppConfig, SchedulingService]:
    """
    Load configuration and shop data and wire up the service.

    A missing data file means an empty calendar; a missing config file is
    an error.
    """
    config = AppConfig.load_from_yaml(config_file or get_default_config_path())
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

    working_hours = config.to_working_hours()
    data_path = data_file or Path.cwd() / "shop_data.yaml"

    if data_path.exists():
        store = InMemoryShopStore.load_from_yaml(
            data_path, default_working_hours=working_hours, shop_id=config.shop_id
        )
    elif data_file is not None:
        raise FileNotFoundError(f"Data file not found: {data_file}")
    else:
        store = InMemoryShopStore(working_hours={config.shop_id: working_hours})

    return config, SchedulingService(store=store, settings=config.calendar)


def _resolve_now(config: AppConfig, now_option: Optional[str]) -> Now:
    if now_option:
        return Now.parse(now_option, timezone=config.timezone)
    return config.now()


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def slots(
    date: Annotated[str, typer.Argument(help="Day to list slots for (YYYY-MM-DD)")],
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Appointment duration in minutes")] = None,
    include_past: Annotated[bool, typer.Option("--include-past", help="Also list slots that already started")] = False,
    now: Annotated[Optional[str], typer.Option("--now", help="Override current time (YYYY-MM-DD HH:MM)")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List the bookable slots of a day.

    Examples:

        shopcalendar slots 2024-01-09
        shopcalendar slots 2024-01-09 --duration 45
    """
    try:
        config, service = _load(config_file, data_file)
        day = parse_date(date)
        duration_minutes = duration or config.calendar.default_appointment_duration
        current = None if include_past else _resolve_now(config, now)

        offered = asyncio.run(
            service.available_slots(
                config.shop_id, day, duration_minutes=duration_minutes, now=current
            )
        )
    except (FileNotFoundError, ShopCalendarError, ValueError) as e:
        _fail(e)

    console.print()
    if not offered:
        console.print(
            f"[yellow]⚠ No available slots on {format_date(day)}.[/yellow]\n"
            "Try another day or a shorter duration."
        )
        console.print()
        return

    table = Table(
        title=f"Available slots {format_date(day)} ({format_duration(duration_minutes)})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Start", style="bold yellow")
    table.add_column("12h", style="dim")

    for slot in offered:
        table.add_row(str(slot), format_time_12h(slot))

    console.print(table)
    console.print()


@app.command()
def check(
    date: Annotated[str, typer.Argument(help="Appointment date (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    end: Annotated[str, typer.Argument(help="End time (HH:MM)")],
    exclude: Annotated[Optional[str], typer.Option("--exclude", help="Id of the appointment being rescheduled")] = None,
    now: Annotated[Optional[str], typer.Option("--now", help="Override current time (YYYY-MM-DD HH:MM)")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Check whether an appointment can be booked.
    """
    try:
        config, service = _load(config_file, data_file)
        window = AppointmentWindow.create(date, start, end, exclude_id=exclude)
        result = asyncio.run(
            service.check_booking(config.shop_id, window, now=_resolve_now(config, now))
        )
    except (FileNotFoundError, ShopCalendarError, ValueError) as e:
        _fail(e)

    if result.ok:
        console.print(Panel.fit(f"[bold green]✓ {result.message}[/bold green]\n{window}", title="Booking check"))
        return

    console.print(Panel.fit(f"[bold red]✗ {result.message}[/bold red]\n{window}", title="Booking check"))
    raise typer.Exit(2)


@app.command()
def status(
    date: Annotated[str, typer.Argument(help="Appointment date (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    end: Annotated[Optional[str], typer.Argument(help="End time (HH:MM)")] = None,
    now: Annotated[Optional[str], typer.Option("--now", help="Override current time (YYYY-MM-DD HH:MM)")] = None,
    config_file: ConfigOption = None,
):
    """
    Show whether an appointment is past, happening now or in the future.
    """
    try:
        config = AppConfig.load_from_yaml(config_file or get_default_config_path())
        result = classify(date, start, end, _resolve_now(config, now))
    except (FileNotFoundError, ShopCalendarError, ValueError) as e:
        _fail(e)

    console.print(f"[{_STATUS_STYLES[result]}]{result.value}[/{_STATUS_STYLES[result]}]")


@app.command()
def balance(
    order_id: Annotated[str, typer.Argument(help="Order id in the data file")],
    total_cents: Annotated[int, typer.Argument(help="Active order total in cents")],
    as_json: Annotated[bool, typer.Option("--json", help="Print the summary as JSON")] = False,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Reconcile an order's payments and refunds into its balance.
    """
    try:
        _, service = _load(config_file, data_file)
        summary = asyncio.run(service.order_balance(order_id, total_cents))
    except (FileNotFoundError, ShopCalendarError, ValueError) as e:
        _fail(e)

    if as_json:
        console.print_json(json.dumps(summary_to_dict(summary)))
        return

    table = Table(title=f"Order {order_id}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total paid", _money(summary.total_paid))
    table.add_row("Total refunded", _money(summary.total_refunded))
    table.add_row("Net paid", _money(summary.net_paid))
    table.add_row("Amount due", _money(summary.amount_due))
    table.add_row("Paid", f"{summary.percentage}%")
    table.add_row("Status", summary.status.value)

    console.print()
    console.print(table)
    console.print()


def _money(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents) / 100:,.2f}"


@app.command()
def hours(
    config_file: ConfigOption = None,
):
    """
    List the configured working hours.
    """
    try:
        config = AppConfig.load_from_yaml(config_file or get_default_config_path())
    except (FileNotFoundError, ShopCalendarError) as e:
        _fail(e)

    table = Table(
        title=f"Working hours {config.shop_name or config.shop_id}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Hours")

    for rule in config.to_working_hours().weekly_rules():
        hours_text = "closed" if rule.is_closed else f"{rule.open_time} - {rule.close_time}"
        table.add_row(rule.day_name, hours_text)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]shopcalendar[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
