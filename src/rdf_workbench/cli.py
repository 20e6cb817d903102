from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from rdf_workbench.closure import OWL_EQUIVALENT_CLASS, OWL_SAME_AS
from rdf_workbench.config import load_settings
from rdf_workbench.errors import RDFError
from rdf_workbench.formats import SUPPORTED_NAMES
from rdf_workbench.service import RDFService
from rdf_workbench.store import Store

PREDICATES = {
    "sameAs": OWL_SAME_AS,
    "equivalentClass": OWL_EQUIVALENT_CLASS,
}


def _load_store(service: RDFService, data: Path, fmt: Optional[str]) -> Store:
    store = service.create_in_memory()
    service.import_file(store, data, fmt)
    return store


@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose logging.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="YAML configuration file (defaults to $RDF_WORKBENCH_CONFIG).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Optional[Path]) -> None:
    """Load, query and link RDF data from the command line."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)
    try:
        settings = load_settings(config_path)
    except RDFError as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.obj = ctx.with_resource(RDFService(settings))


format_option = click.option(
    "--format",
    "fmt",
    default=None,
    help=f"RDF format of the input ({', '.join(SUPPORTED_NAMES)}); defaults to RDF/XML.",
)


@cli.command("query")
@click.argument("data", type=click.Path(path_type=Path))
@click.argument("query_file", type=click.File("r", encoding="utf-8"))
@format_option
@click.pass_obj
def query_command(service: RDFService, data: Path, query_file, fmt: Optional[str]) -> None:
    """Run a SPARQL SELECT query from QUERY_FILE against the RDF file DATA."""
    try:
        store = _load_store(service, data, fmt)
        table = service.query_local(store, query_file.read())
    except RDFError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(table.render())
    click.echo(f"{table.row_count} rows.")


@cli.command("remote")
@click.argument("endpoint")
@click.argument("query_file", type=click.File("r", encoding="utf-8"))
@click.option("--timeout-ms", type=click.IntRange(1), default=None, help="Query timeout in milliseconds.")
@click.pass_obj
def remote_command(service: RDFService, endpoint: str, query_file, timeout_ms: Optional[int]) -> None:
    """Run a SPARQL SELECT query on ENDPOINT (configured id or URL)."""
    try:
        table = service.query_remote(endpoint, query_file.read(), timeout_ms=timeout_ms)
    except RDFError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(table.render())
    click.echo(f"{table.row_count} rows.")


@cli.command("closure")
@click.argument("data", type=click.Path(path_type=Path))
@click.argument("seed")
@click.option(
    "--predicate",
    type=click.Choice(sorted(PREDICATES)),
    default="sameAs",
    show_default=True,
    help="Equivalence predicate to follow in both directions.",
)
@format_option
@click.pass_obj
def closure_command(service: RDFService, data: Path, seed: str, predicate: str, fmt: Optional[str]) -> None:
    """List every resource linked to SEED in the RDF file DATA."""
    try:
        store = _load_store(service, data, fmt)
        resources = service.closure(store, seed, PREDICATES[predicate])
    except RDFError as exc:
        raise click.ClickException(str(exc)) from exc
    for resource in sorted(resources):
        click.echo(resource)


@cli.command("import-url")
@click.argument("url")
@click.option(
    "--output-format",
    default="TURTLE",
    show_default=True,
    help=f"Serialization format for the output ({', '.join(SUPPORTED_NAMES)}).",
)
@click.option(
    "--header",
    "headers",
    multiple=True,
    help="Extra request header as NAME:VALUE (repeatable).",
)
@click.pass_obj
def import_url_command(service: RDFService, url: str, output_format: str, headers) -> None:
    """Fetch RDF/XML from URL and print it in another serialization."""
    extra = {}
    for header in headers:
        name, sep, value = header.partition(":")
        if not sep:
            raise click.BadParameter(f"Expected NAME:VALUE, got {header!r}.", param_hint="--header")
        extra[name.strip()] = value.strip()
    try:
        store = service.create_in_memory()
        service.import_url(store, url, extra)
        output = service.serialize(store, output_format)
    except RDFError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(output.decode("utf-8"))


@cli.command("size")
@click.argument("data", type=click.Path(path_type=Path))
@format_option
@click.option(
    "--dataset",
    is_flag=True,
    help="Treat DATA as a disk dataset directory instead of an RDF file.",
)
@click.pass_obj
def size_command(service: RDFService, data: Path, fmt: Optional[str], dataset: bool) -> None:
    """Print the number of triples in DATA."""
    try:
        store = service.create_on_disk(data) if dataset else _load_store(service, data, fmt)
        count = service.size(store)
    except RDFError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{count} triples.")


def main() -> None:  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
