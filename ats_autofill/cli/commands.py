"""CLI commands using Typer."""

import asyncio
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ats_autofill.automation.adapters import AdapterRegistry
from ats_autofill.automation.events import EventLogger, configure_logging
from ats_autofill.automation.human import Human
from ats_autofill.automation.models import ApplicationResult
from ats_autofill.automation.orchestrator import ApplicationOrchestrator
from ats_autofill.config import PacingProfile, Settings, get_settings
from ats_autofill.profile import sample_profile

app = typer.Typer(
    name="ats-autofill",
    help="Fill job application forms across ATS platforms",
    add_completion=False,
)

console = Console()

MOCK_PAGES = ("acme.html", "globex.html", "ycombinator.html", "dropr.html")


def build_orchestrator(settings: Settings) -> ApplicationOrchestrator:
    """Wire primitives, adapters and orchestrator from settings."""
    events = EventLogger()
    human = Human(settings.pacing())
    registry = AdapterRegistry.from_registered(human=human, events=events, settings=settings)
    return ApplicationOrchestrator(registry, settings=settings, events=events)


def _settings_for(fast: bool, headed: bool) -> Settings:
    updates: dict = {}
    if fast:
        updates["pacing_profile"] = PacingProfile.FAST
    if headed:
        updates["playwright_headless"] = False
    return get_settings().model_copy(update=updates)


def _render_results(targets: list[str], results: list[ApplicationResult]) -> None:
    table = Table(title="Application results")
    table.add_column("Target")
    table.add_column("Platform")
    table.add_column("Status")
    table.add_column("Confirmation / Error")
    table.add_column("Duration", justify="right")

    for target, result in zip(targets, results):
        if result.success:
            status = "[green]submitted[/green]"
            detail = result.confirmation_id or ""
        else:
            status = f"[red]{result.failure_reason.value}[/red]"
            detail = result.error or ""
        table.add_row(
            target,
            result.platform or "-",
            status,
            Text(detail),
            f"{result.duration_ms} ms",
        )

    console.print(table)


def _run(targets: list[str], settings: Settings) -> None:
    configure_logging(settings.log_level)
    orchestrator = build_orchestrator(settings)
    results = asyncio.run(orchestrator.apply_to_targets(targets, sample_profile))
    _render_results(targets, results)

    if not all(r.success for r in results):
        raise typer.Exit(1)


@app.command()
def apply(
    urls: Annotated[list[str], typer.Argument(help="Application form URLs")],
    fast: Annotated[bool, typer.Option("--fast", help="Use near-zero pacing")] = False,
    headed: Annotated[bool, typer.Option("--headed", help="Show the browser window")] = False,
) -> None:
    """Submit the sample profile to each URL in turn."""
    _run(urls, _settings_for(fast, headed))


@app.command()
def demo(
    base_url: Annotated[
        str | None, typer.Option("--base-url", help="Where the mock ATS pages are served")
    ] = None,
    fast: Annotated[bool, typer.Option("--fast", help="Use near-zero pacing")] = False,
    headed: Annotated[bool, typer.Option("--headed", help="Show the browser window")] = False,
) -> None:
    """Submit the sample profile to the four mock ATS pages."""
    settings = _settings_for(fast, headed)
    root = (base_url or settings.base_url).rstrip("/")

    _run([f"{root}/{page}" for page in MOCK_PAGES], settings)


@app.command()
def platforms() -> None:
    """List registered ATS adapters in detection order."""
    for index, adapter_class in enumerate(AdapterRegistry.registered_classes(), start=1):
        console.print(f"{index}. [bold]{adapter_class.platform_id}[/bold] ({adapter_class.company_name})")


if __name__ == "__main__":
    app()
