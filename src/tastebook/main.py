"""
Tastebook - CLI Entry Point.

Usage:
    tastebook serve           Start the API server
    tastebook health          Check configuration
    tastebook db              Check database tables
    tastebook categorize X    Show the shopping category of an ingredient
    tastebook week [DATE]     Show the planner week containing DATE
    tastebook --help          Show help
"""

import logging
import os
from datetime import date

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="tastebook",
    help="Tastebook - recipes, meal plans and shopping lists.",
    add_completion=False,
)
console = Console()

TABLES = [
    "users",
    "recipes",
    "favorites",
    "reviews",
    "meal_plans",
    "shopping_lists",
    "user_activity",
    "achievements",
    "user_achievements",
]


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    import uvicorn

    from tastebook.config import settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Hosting platforms set PORT
    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]Tastebook API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "tastebook.web.app:app",
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
    )


@app.command()
def health() -> None:
    """Check configuration."""
    from tastebook.config import get_settings

    console.print("\n[bold]Tastebook Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("[green]OK[/green] Configuration loaded")
        console.print(f"   Environment: {settings.tastebook_env}")
        console.print(f"   Log level: {settings.log_level}")

        if settings.supabase_url.startswith("https://"):
            console.print("[green]OK[/green] Supabase URL configured")
        else:
            console.print("[red]FAIL[/red] Supabase URL missing or invalid")

        if settings.supabase_service_role_key:
            console.print("[green]OK[/green] Service role key configured")
        else:
            console.print("[yellow]WARN[/yellow] No service role key, token checks use the anon key")

        console.print("\n[green]All checks passed![/green]")

    except Exception as e:
        console.print(f"\n[red]Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with SUPABASE_URL and SUPABASE_ANON_KEY.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from tastebook import __version__

    console.print(f"Tastebook version {__version__}")


@app.command()
def db() -> None:
    """Check database connection and tables."""
    from tastebook.db.client import get_service_client

    console.print("\n[bold]Database Connection Check[/bold]\n")

    try:
        client = get_service_client()
        console.print("[green]OK[/green] Connected to Supabase")

        console.print("\n[bold]Table Status:[/bold]")
        for table in TABLES:
            try:
                result = client.table(table).select("*", count="exact").limit(0).execute()
                count = result.count if result.count is not None else "?"
                console.print(f"  [green]OK[/green] {table}: {count} rows")
            except Exception as e:
                console.print(f"  [red]FAIL[/red] {table}: {e}")

        console.print("\n[green]Database check complete![/green]")

    except Exception as e:
        console.print(f"\n[red]Database connection failed: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def categorize(
    names: list[str] = typer.Argument(..., help="Ingredient names"),
) -> None:
    """Show the shopping category of each ingredient."""
    from tastebook.domain.ingredients import categorize_ingredient, category_info

    table = Table(title="Ingredient categories")
    table.add_column("Ingredient")
    table.add_column("Category")
    table.add_column("Label")

    for name in names:
        category = categorize_ingredient(name)
        info = category_info(category)
        table.add_row(name, category, f"{info['icon']} {info['label']}")

    console.print(table)


@app.command()
def week(
    day: str = typer.Argument(None, help="Any date in the week (YYYY-MM-DD), default today"),
) -> None:
    """Show the planner week containing a date."""
    from tastebook.domain.weeks import DAY_LABELS, format_date_range, get_monday, get_week_range, week_dates

    try:
        target = date.fromisoformat(day) if day else date.today()
    except ValueError:
        console.print(f"[red]Invalid date: {day}[/red]")
        raise typer.Exit(1)

    monday = get_monday(target)
    start, end = get_week_range(monday)
    console.print(f"\n[bold]Week of {monday.isoformat()}[/bold]  ({format_date_range(start, end)})\n")

    for label, (_key, d) in zip(DAY_LABELS, week_dates(monday).items()):
        marker = " [green]<- today[/green]" if d == date.today() else ""
        console.print(f"  {label:<10} {d.isoformat()}{marker}")


if __name__ == "__main__":
    app()
