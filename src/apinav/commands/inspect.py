"""Inspect commands -- examine a parsed specification document.

Provides the read-only ``apinav`` sub-commands.  Each takes a SOURCE (file
path, URL or ``-`` for stdin), parses it with the configuration resolved
from the root options, and presents one view of the result:

* ``info`` -- API metadata and counts.
* ``endpoints`` -- every endpoint with its navigable path.
* ``nav`` -- the navigation tree.
* ``show`` -- one endpoint, found by navigable path or operation id.
* ``auth`` -- the document-level security schemes.
"""

from __future__ import annotations

from typing import Optional

import typer

from apinav.catalog import SpecCatalog
from apinav.config import resolve_config
from apinav.exceptions import ApinavError, NotFoundError
from apinav.generator.navigation import assign_navigation_paths
from apinav.models import ParsedSpec
from apinav.output import error, get_output, info, suggest
from apinav.parser.spec_parser import SpecParser


def _load(ctx: typer.Context, source: str) -> tuple[SpecCatalog, ParsedSpec]:
    """Resolve the configuration, then load and parse *source*.

    Raises:
        typer.Exit: With the error's exit code when configuration,
            loading or parsing fails.
    """
    overrides = (ctx.obj or {}).get("config_overrides")
    try:
        config = resolve_config(overrides)
        catalog = SpecCatalog(SpecParser(config))
        return catalog, catalog.load(source)
    except ApinavError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def inspect_info(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Spec file path, http(s) URL, or '-' for stdin."),
) -> None:
    """Show API info (title, version, dialect, counts).

    Example::

        apinav info petstore.yaml
    """
    _, spec = _load(ctx, source)

    data: dict = {
        "title": spec.info.title,
        "version": spec.info.version,
        "dialect": spec.dialect.value,
        "spec_version": spec.spec_version,
        "description": spec.info.description or "-",
        "base_url": spec.base_url or "-",
        "endpoints": len(spec.endpoints),
        "groups": len(spec.navigation),
        "tags": [t.name for t in spec.tags],
        "security_schemas": list(spec.security_schemas),
    }
    if spec.info.contact_email:
        data["contact"] = spec.info.contact_email
    if spec.info.license_name:
        data["license"] = spec.info.license_name

    get_output().print_json(data)


def inspect_endpoints(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Spec file path, http(s) URL, or '-' for stdin."),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only endpoints grouped under TAG."),
) -> None:
    """List every endpoint with its navigable path.

    Example::

        apinav endpoints petstore.yaml --tag pet
    """
    catalog, spec = _load(ctx, source)
    paths = assign_navigation_paths(spec.endpoints, catalog.parser.config)

    rows: list[list[str]] = []
    for endpoint, nav_path in zip(spec.endpoints, paths):
        if tag is not None and endpoint.tags[0] != tag:
            continue
        rows.append([
            endpoint.method.value,
            endpoint.path,
            endpoint.title,
            endpoint.tags[0],
            nav_path,
            "Yes" if endpoint.deprecated else "",
        ])

    if not rows:
        info("No endpoints found.")
        return

    get_output().print_table(
        ["Method", "Path", "Title", "Tag", "Page", "Deprecated"],
        rows,
        title=f"{spec.info.title} -- Endpoints ({len(rows)})",
    )


def inspect_nav(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Spec file path, http(s) URL, or '-' for stdin."),
) -> None:
    """Print the navigation tree.

    Example::

        apinav nav petstore.yaml
        apinav --json nav petstore.yaml
    """
    _, spec = _load(ctx, source)
    get_output().print_navigation(spec.navigation, title=spec.info.title)


def inspect_show(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Spec file path, http(s) URL, or '-' for stdin."),
    target: str = typer.Argument(..., help="Navigable page path, or an operation id with --operation-id."),
    by_operation_id: bool = typer.Option(
        False, "--operation-id", "-O", help="Treat TARGET as an operationId."
    ),
) -> None:
    """Show one endpoint as JSON.

    Example::

        apinav show petstore.yaml /api_reference/pet/addpet
        apinav show petstore.yaml addPet --operation-id
    """
    catalog, _ = _load(ctx, source)

    if by_operation_id:
        endpoint = catalog.endpoint_by_operation_id(source, target)
    else:
        endpoint = catalog.endpoint(source, target)

    if endpoint is None:
        exc = NotFoundError(f"No endpoint matches '{target}'")
        error(str(exc))
        suggest(f"List pages with: apinav endpoints {source}")
        raise typer.Exit(code=exc.exit_code)

    get_output().print_json(endpoint.model_dump(mode="json", by_alias=True, exclude_none=True))


def inspect_auth(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Spec file path, http(s) URL, or '-' for stdin."),
) -> None:
    """Show security schemes defined in the document.

    Example::

        apinav auth petstore.yaml
    """
    _, spec = _load(ctx, source)

    if not spec.security_schemas:
        info("No security schemes defined.")
        return

    rows: list[list[str]] = []
    for name, scheme in spec.security_schemas.items():
        rows.append([
            name,
            scheme.type or "-",
            scheme.scheme or "-",
            scheme.location or "-",
            (scheme.description or "-")[:60],
        ])

    get_output().print_table(
        ["Name", "Type", "Scheme", "Location", "Description"], rows, title="Security Schemes"
    )
