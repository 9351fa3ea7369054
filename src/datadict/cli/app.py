"""Typer CLI application."""

import json
import typer
from pathlib import Path
from typing import List, Optional

from datadict.config import get_settings, setup_logging
from datadict.erd.generator import generate_mermaid_erd, serialize_erd_data
from datadict.models.erd import ERDFilterOptions
from datadict.service import DesignRelationService
from datadict.storage.store import DocumentStore, DocumentStoreError

app = typer.Typer(help="datadict: relation validation, sync and ERD for data dictionaries")

DataDirOption = typer.Option(None, "--data-dir", help="Root of the document store")
DatabaseFileOption = typer.Option(None, "--database-file", help="Database document filename")
EntityFileOption = typer.Option(None, "--entity-file", help="Entity document filename")
AttributeFileOption = typer.Option(None, "--attribute-file", help="Attribute document filename")
TableFileOption = typer.Option(None, "--table-file", help="Table document filename")
ColumnFileOption = typer.Option(None, "--column-file", help="Column document filename")


def _service(data_dir: Optional[Path]) -> DesignRelationService:
    settings = get_settings()
    return DesignRelationService(
        store=DocumentStore(data_dir or settings.data_path), settings=settings
    )


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL (default: LOG_LEVEL)"
    ),
):
    """Shared options applied before every command."""
    try:
        setup_logging(level=log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from e


def _fail(error: Exception) -> None:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1)


@app.command()
def validate(
    data_dir: Optional[Path] = DataDirOption,
    database_file: Optional[str] = DatabaseFileOption,
    entity_file: Optional[str] = EntityFileOption,
    attribute_file: Optional[str] = AttributeFileOption,
    table_file: Optional[str] = TableFileOption,
    column_file: Optional[str] = ColumnFileOption,
):
    """
    Validate the six relations between the design documents.

    Prints the validation report as JSON.
    """
    selection = {
        "database": database_file,
        "entity": entity_file,
        "attribute": attribute_file,
        "table": table_file,
        "column": column_file,
    }
    try:
        report = _service(data_dir).validate_relations(selection)
    except DocumentStoreError as e:
        _fail(e)

    typer.echo(report.model_dump_json(by_alias=True, indent=2))


@app.command()
def sync(
    apply: bool = typer.Option(False, "--apply", help="Persist the corrections"),
    data_dir: Optional[Path] = DataDirOption,
    database_file: Optional[str] = DatabaseFileOption,
    entity_file: Optional[str] = EntityFileOption,
    attribute_file: Optional[str] = AttributeFileOption,
    table_file: Optional[str] = TableFileOption,
    column_file: Optional[str] = ColumnFileOption,
):
    """
    Preview (default) or apply table/column reference corrections.

    Prints the sync result as JSON.
    """
    selection = {
        "database": database_file,
        "entity": entity_file,
        "attribute": attribute_file,
        "table": table_file,
        "column": column_file,
    }
    try:
        result = _service(data_dir).sync_relations(selection, apply=apply)
    except DocumentStoreError as e:
        _fail(e)

    typer.echo(result.model_dump_json(by_alias=True, indent=2))


@app.command()
def erd(
    table_ids: Optional[List[str]] = typer.Option(
        None, "--table-ids", help="Restrict the graph to these table ids (repeatable or comma-separated)"
    ),
    include_related: bool = typer.Option(
        True, "--include-related/--no-include-related", help="Include related entities, attributes and domains"
    ),
    output_format: str = typer.Option("json", "--format", help="json or mermaid"),
    out: Optional[Path] = typer.Option(None, "--out", help="Write output to a file instead of stdout"),
    data_dir: Optional[Path] = DataDirOption,
    database_file: Optional[str] = DatabaseFileOption,
    entity_file: Optional[str] = EntityFileOption,
    attribute_file: Optional[str] = AttributeFileOption,
    table_file: Optional[str] = TableFileOption,
    column_file: Optional[str] = ColumnFileOption,
    domain_file: Optional[str] = typer.Option(None, "--domain-file", help="Domain document filename"),
    vocabulary_file: Optional[str] = typer.Option(
        None, "--vocabulary-file", help="Vocabulary document filename"
    ),
):
    """
    Generate the layered ERD graph as JSON or a Mermaid erDiagram.
    """
    if output_format not in ("json", "mermaid"):
        typer.echo(f"Error: unsupported format '{output_format}' (use json or mermaid)", err=True)
        raise typer.Exit(2)

    ids = [part.strip() for value in table_ids or [] for part in value.split(",") if part.strip()]
    selection = {
        "database": database_file,
        "entity": entity_file,
        "attribute": attribute_file,
        "table": table_file,
        "column": column_file,
        "domain": domain_file,
        "vocabulary": vocabulary_file,
    }
    filter_options = ERDFilterOptions(table_ids=ids, include_related=include_related)

    try:
        erd_data, _ = _service(data_dir).build_erd(selection, filter_options)
    except DocumentStoreError as e:
        _fail(e)

    text = generate_mermaid_erd(erd_data) if output_format == "mermaid" else serialize_erd_data(erd_data)

    if out is None:
        typer.echo(text)
        return

    out = Path(out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    typer.echo(
        f"✓ ERD written to {out} ({erd_data.metadata.total_nodes} nodes, "
        f"{erd_data.metadata.total_edges} edges)",
        err=True,
    )


@app.command()
def tables(
    filename: Optional[str] = typer.Option(
        None, "--filename", help="Table document filename; an unknown file is an error (default: first file)"
    ),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Search English/Korean name or schema"),
    data_dir: Optional[Path] = DataDirOption,
):
    """
    List tables available for ERD filtering, sorted by English name.

    Without --filename the first table document is used. A --filename that
    does not exist exits with code 1 instead of falling back.
    """
    try:
        selected, rows = _service(data_dir).list_erd_tables(filename, query)
    except DocumentStoreError as e:
        _fail(e)

    payload = {
        "filename": selected,
        "tables": [row.model_dump(by_alias=True) for row in rows],
    }
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
