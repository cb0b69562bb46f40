import asyncio
import functools
import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config.settings import settings
from ..core.catalogue_config import CatalogueLoader
from ..core.exceptions.routing_exceptions import CatalogueValidationError, RoutingException
from ..core.models import Channel, InboundEvent, SkillCatalogue
from ..core.orchestrator import RoutingOrchestrator
from ..core.schedule_evaluator import ScheduleEvaluator
from ..services import HttpHolidayCalendar, StaticHolidayCalendar
from ..utils.helpers import format_datetime, parse_key_values, parse_timestamp, truncate_string

app = typer.Typer(help="Front-desk skill routing and escalation engine")
console = Console()


def handle_error(func):
    """Decorator to run async commands and report routing errors."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(func(*args, **kwargs))
        except CatalogueValidationError as e:
            console.print(f"[red]Invalid catalogue: {e}[/red]")
            for error in e.errors:
                console.print(f"  [red]- {error}[/red]")
            raise typer.Exit(1)
        except RoutingException as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        except ValueError as e:
            console.print(f"[red]Invalid argument: {e}[/red]")
            raise typer.Exit(1)
    return wrapper


def setup_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level")
):
    setup_logging(log_level)


def load_catalogue(path: Optional[str], environment: str) -> SkillCatalogue:
    loader = CatalogueLoader()
    path = path or settings.catalogue_path
    if path:
        return loader.load(path, environment)
    console.print("[dim]No catalogue given; using the bundled clinic catalogue[/dim]")
    return loader.load_default(environment)


def build_schedule_evaluator(catalogue: SkillCatalogue) -> ScheduleEvaluator:
    # Without a holiday service the catalogue's own holiday list is consulted
    calendar = HttpHolidayCalendar() if settings.holiday_api_url else None
    return ScheduleEvaluator(holiday_calendar=calendar, region=catalogue.holiday_region)


@app.command("validate")
@handle_error
async def validate_catalogue(
    path: Optional[str] = typer.Argument(None, help="Catalogue YAML/JSON file"),
    env: str = typer.Option(settings.environment, "--env", help="Environment overrides to apply")
):
    """Validate a skill catalogue and list its skills."""
    catalogue = load_catalogue(path, env)

    table = Table(title=f"Skill Catalogue: {catalogue.name}")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="magenta")
    table.add_column("Category", style="green")
    table.add_column("Channels", style="blue")
    table.add_column("Inputs", justify="right")
    table.add_column("DTMF", justify="center")
    table.add_column("Enabled")

    for skill in catalogue.ordered_skills():
        channels = [c.value for c in Channel if skill.channels.supports(c)]
        ivr = skill.tools.ivr
        table.add_row(
            skill.id,
            skill.name,
            skill.category.value,
            ", ".join(channels) or "none",
            str(len(skill.inputs)),
            ivr.trigger_digit if ivr.enabled and ivr.trigger_digit else "-",
            "[green]yes[/green]" if skill.enabled else "[dim]no[/dim]"
        )

    console.print(table)
    console.print(f"[green]+ Catalogue '{catalogue.name}' is valid[/green]")


@app.command("skills")
@handle_error
async def show_skills(
    path: Optional[str] = typer.Argument(None, help="Catalogue YAML/JSON file"),
    at: Optional[str] = typer.Option(None, "--at", help="ISO-8601 instant (default: now)"),
    env: str = typer.Option(settings.environment, "--env", help="Environment overrides to apply")
):
    """Show each skill's schedule window and whether it is open."""
    catalogue = load_catalogue(path, env)
    at_utc = parse_timestamp(at)
    evaluator = build_schedule_evaluator(catalogue)
    catalogue_calendar = StaticHolidayCalendar(catalogue.holidays)

    table = Table(title=f"Schedules at {format_datetime(at_utc)}")
    table.add_column("ID", style="cyan")
    table.add_column("Timezone", style="blue")
    table.add_column("Days")
    table.add_column("Window")
    table.add_column("Hours/week", justify="right")
    table.add_column("Local time", style="dim")
    table.add_column("Status")

    for skill in catalogue.ordered_skills():
        schedule = skill.schedule
        check = await evaluator.evaluate(
            schedule, at_utc, catalogue.holiday_region, catalogue_calendar
        )
        match = evaluator.match_window(schedule, at_utc)
        if check.active:
            status = "[green]open[/green]"
        else:
            status = f"[yellow]{check.reason}[/yellow]"
        table.add_row(
            skill.id,
            schedule.timezone,
            ",".join(day.value for day in schedule.days),
            f"{schedule.start_time}-{schedule.end_time}",
            f"{ScheduleEvaluator.weekly_active_minutes(schedule) / 60:.1f}",
            match.local_time.strftime("%a %H:%M"),
            status
        )

    console.print(table)


@app.command("route")
@handle_error
async def route_event(
    path: Optional[str] = typer.Argument(None, help="Catalogue YAML/JSON file"),
    channel: Channel = typer.Option(Channel.VOICE, "--channel", help="Contact channel"),
    intent: Optional[str] = typer.Option(None, "--intent", help="Classified intent"),
    confidence: float = typer.Option(1.0, "--confidence", min=0.0, max=1.0, help="Classifier confidence"),
    text: str = typer.Option("", "--text", help="Free text of the contact"),
    caller: str = typer.Option("", "--caller", help="Caller id"),
    at: Optional[str] = typer.Option(None, "--at", help="ISO-8601 instant (default: now)"),
    inputs: Optional[List[str]] = typer.Option(None, "--input", help="Captured input as key=value"),
    consent: bool = typer.Option(False, "--consent", help="Caller has given consent"),
    signals: Optional[List[str]] = typer.Option(None, "--signal", help="Conversation signal, e.g. sentiment_negative"),
    env: str = typer.Option(settings.environment, "--env", help="Environment overrides to apply")
):
    """Evaluate one inbound event and print the routing outcome."""
    catalogue = load_catalogue(path, env)
    event = InboundEvent(
        channel=channel,
        timestamp_utc=parse_timestamp(at),
        caller_id=caller,
        classified_intent=intent,
        confidence=confidence,
        free_text=text,
        captured_inputs=parse_key_values(inputs or []),
        consent_given=consent,
        signals=signals or []
    )

    orchestrator = RoutingOrchestrator(schedule_evaluator=build_schedule_evaluator(catalogue))
    decision = await orchestrator.evaluate(catalogue, event)
    outcome = decision.outcome

    colors = {"resolved": "green", "escalated": "red", "action_required": "yellow"}
    color = colors.get(outcome.status.value, "white")

    console.print(f"[cyan]Status:[/cyan] [{color}]{outcome.status.value}[/{color}]")
    console.print(f"[cyan]Skill:[/cyan] {outcome.selected_skill_id or 'N/A'}")
    console.print(f"[cyan]Invoked tool:[/cyan] {outcome.invoked_tool or 'N/A'}")
    if outcome.escalation_reason:
        console.print(f"[cyan]Escalation reason:[/cyan] {outcome.escalation_reason}")
    if outcome.action_reason:
        console.print(f"[cyan]Action reason:[/cyan] {outcome.action_reason}")
    if outcome.missing_required_inputs:
        console.print(f"[cyan]Missing inputs:[/cyan] {', '.join(outcome.missing_required_inputs)}")
    if outcome.retryable:
        console.print("[cyan]Retryable:[/cyan] yes")
    for disclosure in outcome.disclosures:
        console.print(f"[cyan]Disclosure:[/cyan] {disclosure}")
    if outcome.extracted_data:
        console.print("[cyan]Extracted data:[/cyan]")
        for key, value in outcome.extracted_data.items():
            console.print(f"  • {key}: {truncate_string(str(value))}")
    if decision.selection and decision.selection.ties:
        console.print(f"[dim]Also eligible: {', '.join(decision.selection.ties)}[/dim]")
    console.print(f"[dim]Stages: {' -> '.join(s.value for s in decision.state.history)}[/dim]")
    for warning in decision.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")


def main():
    app()


if __name__ == "__main__":
    main()
