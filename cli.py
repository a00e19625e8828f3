import typer
from rich.console import Console
from rich.table import Table
from typing import Optional
from datetime import datetime, timezone

from srs_engine.database import init_db
from srs_engine.store import ScheduleRecordStore
from srs_engine.catalog import CatalogParser
from srs_engine.sync import sync as sync_catalog
from srs_engine.review import submit_review
from srs_engine.categorizer import categorize, interval_label, repetitions_label
from srs_engine.errors import SchedulerError
from srs_engine.log_config import configure_logging
from srs_engine.sm2 import SM2Algorithm

app = typer.Typer(help="Spaced repetition scheduler CLI - SM-2 review scheduling per learner")
console = Console()

UPCOMING_LIMIT = 10


def get_store() -> ScheduleRecordStore:
    return ScheduleRecordStore()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs")):
    configure_logging("DEBUG" if verbose else None)


@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")


@app.command()
def reset_db():
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL review history. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    from srs_engine.database import engine, Base
    import srs_engine.models  # noqa: F401
    console.print("[yellow]Dropping all tables...[/yellow]")
    Base.metadata.drop_all(bind=engine)
    console.print("[yellow]Recreating tables...[/yellow]")
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓[/green] Database reset complete! All data deleted.")


@app.command()
def sync(
    learner_id: str = typer.Argument(..., help="Learner ID"),
    catalog: str = typer.Option(..., "--catalog", "-c", help="Catalog file (.csv or .xlsx)")
):
    """Create schedule records for concepts new to the learner's catalog"""
    try:
        concepts = CatalogParser.auto_parse(catalog)
    except (OSError, ValueError) as e:
        console.print(f"[red]✗[/red] Could not read catalog: {e}")
        raise typer.Exit(code=1)

    console.print(f"[green]✓[/green] Loaded {len(concepts)} catalog concepts")
    try:
        created = sync_catalog(get_store(), learner_id, concepts)
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if created:
        console.print(f"[green]✓[/green] Added {created} new concepts to the review schedule")
    else:
        console.print("[yellow]All concepts are already synced.[/yellow]")


@app.command()
def review(
    learner_id: str = typer.Argument(..., help="Learner ID"),
    concept_id: str = typer.Argument(..., help="Concept ID"),
    score: int = typer.Argument(..., help="Review score 0-100")
):
    """Record a graded review and reschedule the concept"""
    try:
        record = submit_review(get_store(), learner_id, concept_id, score)
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    plural = "s" if record.interval_days > 1 else ""
    console.print(f"[green]✓[/green] Review recorded! Next review in {record.interval_days} day{plural}")
    console.print(f"  Concept: {record.concept_label}")
    console.print(f"  Quality: {SM2Algorithm.score_to_quality(score)}/5 (score {score})")
    console.print(f"  Next review: {record.next_review_at.strftime('%Y-%m-%d %H:%M')} UTC")
    console.print(f"  Easiness: {record.easiness_factor:.2f}")
    console.print(f"  Streak: {repetitions_label(record.repetitions)}")


@app.command()
def schedule(learner_id: str = typer.Argument(..., help="Learner ID")):
    """View due, upcoming and mastered concepts"""
    try:
        records = get_store().get(learner_id)
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if not records:
        console.print(f"[yellow]No concepts scheduled for learner {learner_id} yet. Run sync first.[/yellow]")
        return

    now = datetime.now(timezone.utc)
    due, upcoming, mastered = categorize(records, now)

    console.print(f"\n[bold]Review Schedule - {learner_id}[/bold]\n")
    console.print(f"  Due: {len(due)}  Upcoming: {len(upcoming)}  Mastered: {len(mastered)}")

    if due:
        console.print("\n[yellow]Due for Review:[/yellow]")
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Concept", style="cyan")
        table.add_column("Cadence", style="green")
        table.add_column("Last Score", style="yellow", justify="right")
        table.add_column("Days Overdue", style="red", justify="right")

        for record in due:
            days_overdue = SM2Algorithm.days_overdue(record.next_review_at, now)
            table.add_row(
                record.concept_label[:50],
                interval_label(record.interval_days),
                f"{record.last_score}%" if record.last_score is not None else "-",
                str(days_overdue) if days_overdue > 0 else "Today"
            )
        console.print(table)

    if upcoming:
        console.print("\n[cyan]Upcoming Reviews:[/cyan]")
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Concept", style="cyan")
        table.add_column("Next Review", style="green")
        table.add_column("Reviews", style="blue", justify="right")

        for record in upcoming[:UPCOMING_LIMIT]:
            table.add_row(
                record.concept_label[:50],
                record.next_review_at.strftime("%b %d"),
                repetitions_label(record.repetitions)
            )
        console.print(table)
        if len(upcoming) > UPCOMING_LIMIT:
            console.print(f"[dim]... and {len(upcoming) - UPCOMING_LIMIT} more concepts[/dim]")

    if mastered:
        console.print(f"\n[green]Mastered Concepts ({len(mastered)}):[/green]")
        for record in mastered[:UPCOMING_LIMIT]:
            console.print(f"  ✓ {record.concept_label}")
        if len(mastered) > UPCOMING_LIMIT:
            console.print(f"[dim]  +{len(mastered) - UPCOMING_LIMIT} more[/dim]")


@app.command()
def history(
    learner_id: str = typer.Argument(..., help="Learner ID"),
    concept: Optional[str] = typer.Option(None, "--concept", help="Only this concept"),
    limit: int = typer.Option(20, help="Number of reviews to show")
):
    """View recent reviews"""
    try:
        entries = get_store().review_history(learner_id, concept, limit)
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if not entries:
        console.print(f"[yellow]No reviews found for learner {learner_id}[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Reviewed", style="cyan")
    table.add_column("Concept", style="green")
    table.add_column("Score", justify="right")
    table.add_column("Quality", justify="right")
    table.add_column("Interval", style="blue", justify="right")

    for entry in entries:
        table.add_row(
            entry.reviewed_at.strftime("%Y-%m-%d %H:%M"),
            entry.concept_id,
            str(entry.score),
            f"{entry.quality}/5",
            interval_label(entry.interval_days)
        )
    console.print(table)


if __name__ == "__main__":
    app()
