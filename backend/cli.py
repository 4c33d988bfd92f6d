"""
TIPSY CLI.

Command-line interface for common development operations:
creating tables, seeding demo data, inspecting feature flags, minting
identity tokens and checking a running server.

    python cli.py db-init
    python cli.py db-seed
    python cli.py token owner_auth_1 --name "Rajesh Kumar"
"""

import sys
import time

import httpx
import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from tipsy_shared.config.settings import settings

app = typer.Typer(
    name="tipsy",
    help="TIPSY tipping platform CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def db_init():
    """Create all database tables."""
    from tipsy_shared.infrastructure.db import engine
    from tipsy_api.models import Base

    console.print(f"[blue]Creating tables ({settings.environment})[/blue]")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        console.print(f"[red]✗ Table creation failed: {e}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Tables created[/green]")


@app.command()
def db_seed(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding production"),
):
    """Seed the demo admin, owner, worker, restaurant and feature flags."""
    from tipsy_shared.infrastructure.db import get_db_context
    from tipsy_api.seed import ADMIN_CREDENTIAL, OWNER_CREDENTIAL, WORKER_CREDENTIAL, seed

    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    try:
        with get_db_context() as db:
            seed(db)
    except SQLAlchemyError as e:
        console.print(f"[red]✗ Seeding failed: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Seeded accounts")
    table.add_column("Role", style="cyan")
    table.add_column("Bearer credential", style="green")
    table.add_row("admin", ADMIN_CREDENTIAL)
    table.add_row("owner", OWNER_CREDENTIAL)
    table.add_row("worker", WORKER_CREDENTIAL)
    console.print(table)


# =============================================================================
# Feature Flag Commands
# =============================================================================

@app.command()
def features():
    """List feature flags."""
    from tipsy_shared.infrastructure.db import get_db_context
    from tipsy_api.models import Feature

    with get_db_context() as db:
        rows = list(db.scalars(select(Feature).order_by(Feature.key)))

    if not rows:
        console.print("[yellow]No feature flags defined[/yellow]")
        return

    table = Table(title="Feature flags")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Enabled", style="green")
    for feature in rows:
        table.add_row(feature.key, feature.name, "✓" if feature.enabled else "✗")
    console.print(table)


# =============================================================================
# Identity Commands
# =============================================================================

@app.command()
def token(
    subject: str = typer.Argument(..., help="External identity (JWT 'sub' claim)"),
    name: str = typer.Option(None, help="Display name claim"),
    email: str = typer.Option(None, help="Email claim"),
    ttl: int = typer.Option(3600, help="Lifetime in seconds"),
):
    """Mint a development identity token for IDENTITY_MODE=jwt."""
    from tipsy_shared.security.auth import sign_jwt

    if settings.identity_mode != "jwt":
        console.print("[yellow]IDENTITY_MODE is 'opaque': the subject itself is the bearer credential[/yellow]")
    console.print(sign_jwt(subject, name=name, email=email, ttl_seconds=ttl))


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def serve(
    host: str = typer.Option(settings.api_host, help="Bind address"),
    port: int = typer.Option(settings.api_port, help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("tipsy_api.main:app", host=host, port=port, reload=reload)


@app.command()
def health(
    base_url: str = typer.Option(f"http://localhost:{settings.api_port}", help="API base URL"),
):
    """Check a running API and its database."""
    table = Table(title="Service Health")
    table.add_column("Check", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Response Time", style="yellow")

    healthy = True
    with httpx.Client(timeout=5.0) as client:
        for name, path in (("API", "/api/health"), ("Database", "/api/health/detailed")):
            start = time.time()
            try:
                response = client.get(f"{base_url}{path}")
            except httpx.HTTPError as e:
                table.add_row(name, f"✗ {type(e).__name__}", "-")
                healthy = False
                continue
            elapsed = (time.time() - start) * 1000
            if response.status_code == 200:
                table.add_row(name, "✓ Healthy", f"{elapsed:.0f}ms")
            else:
                table.add_row(name, f"✗ Status {response.status_code}", f"{elapsed:.0f}ms")
                healthy = False

    console.print(table)
    if not healthy:
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    table = Table(title="TIPSY Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
