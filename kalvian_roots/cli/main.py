"""Kalvian Roots CLI - Main entry point.

This module provides the command-line interface for resolving family
networks, generating citations and browsing the family catalog.
"""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from kalvian_roots.citations import EventType, HiskiQuery
from kalvian_roots.config import settings
from kalvian_roots.context import RootsContext, build_context
from kalvian_roots.errors import HiskiRecordNotFound, RootsError
from kalvian_roots.logging_config import setup_logging
from kalvian_roots.names import NameEquivalenceMatcher
from kalvian_roots.registry import FamilyIDRegistry, default_registry
from kalvian_roots.schemas import FamilyNetwork

app = typer.Typer(
    name="roots",
    help="Kalvian Roots - Resolve Juuret Kälviällä families and generate citations",
    add_completion=False,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    setup_logging(settings.log_level, log_file=settings.log_file, verbose=verbose)


def _context(corpus: Path | None) -> RootsContext:
    config = settings.model_copy(update={"corpus_path": corpus}) if corpus else settings
    try:
        return build_context(config)
    except (OSError, ValueError, NotImplementedError) as e:
        console.print(f"[red]Could not start: {e!s}[/red]")
        raise typer.Exit(1) from e


def _resolve(context: RootsContext, family_id: str, cross_references: bool = True) -> FamilyNetwork:
    try:
        return asyncio.run(
            context.cache.get_or_resolve(family_id, resolve_cross_references=cross_references)
        )
    except RootsError as e:
        console.print(f"[red]Could not load {family_id}: {e!s}[/red]")
        raise typer.Exit(1) from e


CORPUS_OPTION = typer.Option(
    None, "--corpus", "-c", help="Corpus text file (default: CORPUS_PATH setting)"
)


@app.command()
def resolve(
    family_id: str = typer.Argument(..., help="Family ID, e.g. 'KORPI 6'"),
    cross_references: bool = typer.Option(
        True, "--cross-references/--no-cross-references", help="Resolve linked families"
    ),
    corpus: Path | None = CORPUS_OPTION,
) -> None:
    """Resolve a family and the families its members are linked to."""
    context = _context(corpus)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Resolving {family_id}...", total=None)
        network = _resolve(context, family_id, cross_references)

    family = network.main_family
    console.print(f"\n[bold cyan]{family.family_id}[/bold cyan] ({family.page_reference_string})\n")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Relation", style="dim")
    table.add_column("Person")
    table.add_column("Family", justify="right")

    for name, linked in network.as_child_families.items():
        table.add_row("Parent's birth family", name, linked.family_id)
    for name, linked in network.as_parent_families.items():
        table.add_row("Child's own family", name, linked.family_id)
    for name, linked in network.spouse_as_child_families.items():
        table.add_row("Spouse's birth family", name, linked.family_id)

    console.print(table)
    for warning in family.validate_structure():
        console.print(f"[yellow]Warning: {warning}[/yellow]")
    console.print(f"\n[dim]{network.total_resolved_families} linked families resolved[/dim]\n")


@app.command()
def cite(
    family_id: str = typer.Argument(..., help="Family ID, e.g. 'KORPI 6'"),
    person: str | None = typer.Option(
        None, "--person", "-p", help="Person to cite (default: the whole family)"
    ),
    corpus: Path | None = CORPUS_OPTION,
) -> None:
    """Print a citation for a family or for one person in it."""
    context = _context(corpus)
    network = _resolve(context, family_id)

    if person is None:
        text = context.citations.generate_main_family_citation(network.main_family, network=network)
    elif person in network.spouse_as_child_families:
        text = context.citations.generate_spouse_citation(
            person, network.spouse_as_child_families[person]
        )
    else:
        target = network.main_family.find_person(person)
        if target is None:
            console.print(f"[red]{person} not found in {network.family_id}[/red]")
            raise typer.Exit(1)
        text = context.citations.generate_citation(target, network)

    console.print(text, markup=False, highlight=False)


@app.command()
def hiski(
    family_id: str = typer.Argument(..., help="Family ID, e.g. 'KORPI 6'"),
    person: str = typer.Option(..., "--person", "-p", help="Person whose record to find"),
    event: EventType = typer.Option(EventType.BIRTH, "--event", "-e", help="Church record event"),
    lookup: bool = typer.Option(
        False, "--lookup", help="Fetch the record's citation link from HisKi"
    ),
    corpus: Path | None = CORPUS_OPTION,
) -> None:
    """Show the HisKi search for a person's church record, or look up its citation link."""
    context = _context(corpus)
    family = _resolve(context, family_id, cross_references=False).main_family

    target = family.find_person(person)
    if target is None:
        console.print(f"[red]{person} not found in {family.family_id}[/red]")
        raise typer.Exit(1)

    query = HiskiQuery.from_person(target, event)
    if query is None:
        console.print(f"[red]{person} has no {event.value} date to search[/red]")
        raise typer.Exit(1)

    couple = family.find_couple_for_child(target)
    parent_birth_year = couple.older_parent_birth_year if couple else None
    search_url = context.hiski.search_url(query, parent_birth_year)

    console.print(f"[bold]{query.description}[/bold]")
    console.print(search_url, markup=False, highlight=False, soft_wrap=True)
    if not lookup:
        return

    try:
        citation = asyncio.run(context.hiski.query(query, parent_birth_year))
    except HiskiRecordNotFound as e:
        console.print(f"[yellow]{e!s}; check the search page above[/yellow]")
        raise typer.Exit(1) from e
    except RootsError as e:
        console.print(f"[red]HisKi lookup failed: {e!s}[/red]")
        raise typer.Exit(1) from e

    console.print(f"[green]Record {citation.record_id}:[/green] {citation.url}", soft_wrap=True)


@app.command()
def prefetch(
    family_id: str = typer.Argument(..., help="Family to start after"),
    limit: int = typer.Option(10, "--limit", "-n", help="Maximum families to resolve"),
    corpus: Path | None = CORPUS_OPTION,
) -> None:
    """Resolve and cache the families following a family in corpus order."""
    context = _context(corpus)
    cache = context.cache
    cache.prefetch_limit = limit

    async def run() -> None:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Starting...", total=None)
            worker = cache.start_background_processing(family_id)
            while not worker.done():
                progress.update(task, description=cache.status_message or "Working...")
                await asyncio.sleep(0.2)
            await worker

    asyncio.run(run())

    status = cache.status()
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    table.add_row("Families Resolved", str(status.processed_in_session))
    table.add_row("Last Family", status.family_id or "-")
    table.add_row("Cached Families", str(status.cached_count))
    table.add_row("Status", status.message)
    console.print(table)
    if status.error:
        console.print(f"[yellow]Last error: {status.error}[/yellow]")


@app.command()
def clans(
    clan: str | None = typer.Option(None, "--clan", help="Show only this clan"),
    family_ids: Path | None = typer.Option(
        None, "--family-ids", help="Catalog file with one family ID per line"
    ),
) -> None:
    """List family IDs grouped by clan."""
    catalog_path = family_ids or settings.family_ids_path
    registry = FamilyIDRegistry.from_file(catalog_path) if catalog_path else default_registry()

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Clan")
    table.add_column("Families", justify="right")
    table.add_column("Suffixes")

    for group in registry.grouped_by_clan():
        if clan and group.clan != FamilyIDRegistry.normalize(clan):
            continue
        table.add_row(group.clan, str(len(group.suffixes)), ", ".join(group.suffixes))

    console.print(table)


@app.command()
def names(
    first: str = typer.Argument(..., help="First name"),
    second: str = typer.Argument(..., help="Second name"),
) -> None:
    """Check whether two names are treated as the same name."""
    matcher = NameEquivalenceMatcher()
    equivalent = matcher.are_names_equivalent(first, second)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Check", style="dim")
    table.add_column("Result")
    table.add_row("Equivalent", "[green]yes[/green]" if equivalent else "[red]no[/red]")
    table.add_row(f"Gender of {first}", matcher.determine_gender(first).value)
    table.add_row(f"Gender of {second}", matcher.determine_gender(second).value)
    table.add_row("Spelling similarity", f"{matcher.similarity(first, second):.0f}%")
    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind"),
    port: int = typer.Option(5001, "--port", help="Port to bind"),
    corpus: Path | None = CORPUS_OPTION,
) -> None:
    """Run the HTTP API."""
    from kalvian_roots.api import create_app

    create_app(_context(corpus)).run(host=host, port=port)


@app.command()
def version() -> None:
    """Display version information."""
    from kalvian_roots import __version__

    console.print(f"\n[bold cyan]Kalvian Roots[/bold cyan] version {__version__}\n")


if __name__ == "__main__":
    app()
