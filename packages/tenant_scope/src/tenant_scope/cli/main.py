"""
Tenant Scope CLI

Command-line interface for inspecting tenant scope and permissions.

Commands:
- sites: Hydrate a tenant and list its sites
- path: Resolve the storage path of a scope
- check: Resolve one permission against a permission table
- grants: Show the merged grants of a role/department
- invalidate: Drop a tenant's cached sites
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from basecore.logging import setup_logging
from tenant_scope.contracts.models import Identity
from tenant_scope.contracts.permissions import PermissionTable
from tenant_scope.errors import FetchFailed, InvalidInput
from tenant_scope.paths import read_paths, resolve_path
from tenant_scope.permissions import default_permission_table, merged_grants, resolve
from tenant_scope.scope.state import ScopeState

app = typer.Typer(
    name="tenant-scope",
    help="Tenant scope and permission tooling",
)

console = Console()

DEFAULT_TABLE = "default"


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Log level (defaults to LOG_LEVEL)"),
    log_json: Optional[bool] = typer.Option(None, "--log-json/--no-log-json", help="JSON log lines"),
):
    """Tenant scope and permission tooling."""
    setup_logging(level=log_level, json_output=log_json)


def load_table(source: str) -> PermissionTable:
    """Load a permission table from a JSON file, or the built-in defaults."""
    if source == DEFAULT_TABLE:
        return default_permission_table()

    path = Path(source)
    try:
        raw = json.loads(path.read_text())
    except FileNotFoundError:
        rprint(f"[red]Permission table not found: {source}[/red]")
        raise typer.Exit(2)
    except json.JSONDecodeError as e:
        rprint(f"[red]Invalid permission table JSON: {e}[/red]")
        raise typer.Exit(2)

    # Accept a bare table or one wrapped as {"permissions": {...}}
    if isinstance(raw, dict) and isinstance(raw.get("permissions"), dict):
        raw = raw["permissions"]
    return PermissionTable.from_raw(raw)


@app.command()
def sites(
    company_id: str = typer.Argument(..., help="Tenant id"),
    refresh: bool = typer.Option(False, "--refresh", help="Force a fetch from the store"),
):
    """
    Hydrate a tenant and list its sites.

    Shows cached sites when the cache is usable, after waiting for the
    background fetch to settle.
    """
    from tenant_scope.service.access import site_hierarchy
    from tenant_scope.service.context import CompanyContext
    from tenant_scope.service.factory import get_site_cache, get_site_store
    from tenant_scope.session.memory import MemorySessionStore

    context = CompanyContext(
        store=get_site_store(),
        cache=get_site_cache(),
        session_store=MemorySessionStore(),
    )

    async def run():
        try:
            result = await context.set_tenant(company_id)
            if refresh:
                await context.refresh(force=True)
            await context.wait_idle()
            return result
        finally:
            await context.close()

    try:
        result = asyncio.run(run())
    except (FetchFailed, InvalidInput) as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    state = context.state
    if not state.sites:
        rprint(f"[yellow]No sites found for tenant: {company_id}[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Sites for {company_id}")
    table.add_column("Site ID")
    table.add_column("Name")
    table.add_column("Main")
    table.add_column("Subsites", justify="right")

    for site, subsites in site_hierarchy(state.sites):
        table.add_row(
            site.site_id,
            site.name or "-",
            "yes" if site.is_main_site else "",
            str(len(subsites)),
        )

    console.print(table)
    if result is not None:
        rprint(f"[dim]First shown from {result.source.value}[/dim]")


@app.command()
def path(
    company_id: str = typer.Argument(..., help="Tenant id"),
    site: Optional[str] = typer.Option(None, help="Site id"),
    subsite: Optional[str] = typer.Option(None, help="Subsite id (requires --site)"),
    module: Optional[str] = typer.Option(None, help="Module key"),
    all_levels: bool = typer.Option(False, "--all", help="List every read path, most specific first"),
):
    """Resolve the storage path of a scope."""
    if subsite and not site:
        rprint("[red]--subsite requires --site[/red]")
        raise typer.Exit(1)

    scope = ScopeState(company_id=company_id, site_id=site, subsite_id=subsite)
    if all_levels:
        for item in read_paths(scope):
            rprint(item)
        return
    rprint(resolve_path(scope, module))


@app.command()
def check(
    table_json: str = typer.Argument(..., help="Permission table JSON file, or 'default'"),
    module: str = typer.Argument(..., help="Module key (e.g., pos)"),
    page: str = typer.Argument(..., help="Page key (e.g., sales)"),
    action: str = typer.Argument(..., help="view, edit or delete"),
    role: str = typer.Option("", help="User role"),
    department: str = typer.Option("", help="User department"),
    role_override: Optional[str] = typer.Option(None, help="Role to check first"),
    department_override: Optional[str] = typer.Option(None, help="Department to check first"),
):
    """
    Resolve one permission.

    Exit code 0 when granted, 1 otherwise.
    """
    table = load_table(table_json)
    identity = Identity(uid="cli", role=role, department=department)

    allowed = resolve(
        identity,
        table,
        module,
        page,
        action,
        role_override=role_override,
        department_override=department_override,
    )

    if allowed:
        rprint(f"[green]ALLOW[/green] {module}.{page}.{action}")
        raise typer.Exit(0)
    rprint(f"[red]DENY[/red] {module}.{page}.{action}")
    raise typer.Exit(1)


@app.command()
def grants(
    table_json: str = typer.Argument(..., help="Permission table JSON file, or 'default'"),
    role: str = typer.Option("", help="User role"),
    department: str = typer.Option("", help="User department"),
):
    """Show the merged grants of a role and department."""
    table = load_table(table_json)
    identity = Identity(uid="cli", role=role, department=department)

    merged = merged_grants(identity, table)
    if merged is None or not merged.modules:
        rprint("[yellow]No grants for this role/department[/yellow]")
        raise typer.Exit(0)

    role_name = role or table.default_role
    department_name = department or table.default_department
    output = Table(title=f"Grants for role={role_name} dept={department_name}")
    output.add_column("Module")
    output.add_column("Page")
    output.add_column("View")
    output.add_column("Edit")
    output.add_column("Delete")

    def mark(value: bool) -> str:
        return "[green]✓[/green]" if value else "[dim]-[/dim]"

    for module_name in sorted(merged.modules):
        for page_name, cell in sorted(merged.modules[module_name].items()):
            output.add_row(module_name, page_name, mark(cell.view), mark(cell.edit), mark(cell.delete))

    console.print(output)


@app.command()
def invalidate(
    company_id: str = typer.Argument(..., help="Tenant id"),
):
    """Drop a tenant's cached sites."""
    from tenant_scope.service.factory import get_site_cache

    get_site_cache().invalidate(company_id)
    rprint(f"[green]Invalidated cached sites for {company_id}[/green]")


if __name__ == "__main__":
    app()
