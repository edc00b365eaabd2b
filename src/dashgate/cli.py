"""Typer CLI for dashgate."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="dashgate", help="dashgate: tenant API-key gate for hosted dashboards")
console = Console()


def _run_with_session(operation):
    """Run ``operation(session)`` against the configured database."""
    from dashgate.deps import get_db

    async def _main():
        db = get_db()
        await db.init()
        try:
            await db.create_all()
            async with db.get_session() as session:
                return await operation(session)
        finally:
            await db.close()

    return asyncio.run(_main())


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the dashgate API server."""
    import uvicorn
    from dashgate.app import create_app

    console.print(f"[bold green]Starting dashgate on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command("init-db")
def init_db():
    """Create the database tables."""
    from dashgate.deps import get_db

    async def _main():
        db = get_db()
        await db.init()
        await db.create_all()
        await db.close()

    asyncio.run(_main())
    console.print("[bold green]Database initialized[/bold green]")


@app.command("create-tenant")
def create_tenant(
    name: str = typer.Argument(..., help="Tenant display name"),
    short_code: str = typer.Argument(..., help="Short code used in routing"),
):
    """Create a tenant and print its two API keys (shown only once)."""
    from dashgate.common.exceptions import DashgateError
    from dashgate.deps import get_tenant_service

    svc = get_tenant_service()
    try:
        tenant, raw_keys = _run_with_session(
            lambda session: svc.create_tenant(session, name, short_code)
        )
    except DashgateError as e:
        _fail(e.message)

    console.print(f"[bold green]Created tenant {tenant.name}[/bold green] (ID {tenant.id})")
    table = Table("Index", "API key")
    for i, raw_key in enumerate(raw_keys):
        table.add_row(str(i), raw_key)
    console.print(table)
    console.print("[yellow]Store these keys now; they cannot be retrieved again.[/yellow]")


@app.command("regenerate-key")
def regenerate_key(
    tenant_id: int = typer.Argument(..., help="Tenant ID"),
    key_index: int = typer.Argument(..., help="Key index (0 or 1)"),
):
    """Rotate one of a tenant's API keys and print the new key."""
    from dashgate.common.exceptions import DashgateError
    from dashgate.deps import get_tenant_service

    svc = get_tenant_service()
    try:
        _, raw_key = _run_with_session(
            lambda session: svc.regenerate_key(session, tenant_id, key_index)
        )
    except DashgateError as e:
        _fail(e.message)

    console.print(f"[bold green]New key at index {key_index}:[/bold green] {raw_key}")


@app.command()
def grant(
    tenant_id: int = typer.Argument(..., help="Tenant ID"),
    dashboard_uid: str = typer.Argument(..., help="Dashboard UID"),
):
    """Grant a tenant access to a dashboard."""
    from dashgate.common.exceptions import DashgateError
    from dashgate.deps import get_tenant_service

    svc = get_tenant_service()
    try:
        permission = _run_with_session(
            lambda session: svc.grant_permission(session, tenant_id, dashboard_uid)
        )
    except DashgateError as e:
        _fail(e.message)

    console.print(
        f"[bold green]Granted[/bold green] tenant {tenant_id} access to '{permission.dashboard_uid}'"
    )


@app.command("hash-key")
def hash_key():
    """Hash an API key read from a hidden prompt (for manual seeding)."""
    from dashgate.deps import get_hasher

    secret = typer.prompt("API key", hide_input=True)
    console.print(get_hasher().hash(secret))


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check dashgate server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] v{data['version']}")
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
