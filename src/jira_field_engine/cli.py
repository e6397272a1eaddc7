"""CLI entry point for the field extraction engine."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

app = typer.Typer(
    name="field-engine",
    help="Jira field extraction engine: discover fields, extract and classify values.",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    log_level: str | None = typer.Option(None, help="Override FIELD_ENGINE_LOG_LEVEL"),
) -> None:
    from jira_field_engine.config import EngineSettings

    level = (log_level or EngineSettings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _read_text(text: str | None, text_file: Path | None) -> str:
    if text_file is not None:
        return text_file.read_text()
    if text:
        return text
    console.print("[red]Provide --text or --text-file[/red]")
    raise typer.Exit(1)


@app.command()
def normalize(
    metadata: Path = typer.Argument(help="Field metadata file (createmeta, /field, or descriptors)"),
) -> None:
    """Normalize raw field metadata and print the resulting descriptors."""
    from jira_field_engine.loaders import load_field_metadata

    fields = load_field_metadata(metadata)
    table = Table(title=f"{len(fields)} fields")
    table.add_column("id")
    table.add_column("name")
    table.add_column("type")
    table.add_column("required")
    table.add_column("allowed values")
    for field in fields:
        labels = field.option_labels()
        table.add_row(
            field.id,
            field.name,
            field.type.value,
            "yes" if field.required else "",
            ", ".join(labels[:5]) + (" …" if len(labels) > 5 else ""),
        )
    console.print(table)


@app.command()
def infer(
    error_file: Path = typer.Argument(help="Error body from a failed issue creation"),
) -> None:
    """Infer required fields from a failed creation response."""
    from jira_field_engine.catalog.normalizer import infer_from_error

    raw = error_file.read_text()
    try:
        payload = json.loads(raw)
    except ValueError:
        payload = raw
    if not isinstance(payload, dict | list):
        payload = raw

    for field in infer_from_error(payload):
        allowed = field.option_labels()
        suffix = f" [dim]({', '.join(allowed)})[/dim]" if allowed else ""
        console.print(f"  [bold]{field.id}[/bold] {field.name} <{field.type.value}>{suffix}")


@app.command()
def categorize(
    metadata: Path = typer.Argument(help="Field metadata file"),
) -> None:
    """Show fields grouped by usage category."""
    from jira_field_engine.catalog.categories import categorize_fields, field_usage_stats
    from jira_field_engine.loaders import load_field_metadata

    groups = categorize_fields(load_field_metadata(metadata))
    for title, fields in (
        ("Commonly used", groups.commonly_used),
        ("Project specific", groups.project_specific),
        ("Optional standard", groups.optional_standard),
        ("System", groups.system_fields),
    ):
        console.print(f"\n[bold]{title}[/bold]")
        if not fields:
            console.print("  [dim]none[/dim]")
        for field in fields:
            stats = field_usage_stats(field)
            console.print(f"  {field.id} {field.name} [dim]{stats.usage_percentage}%[/dim]")


@app.command()
def suggest(
    metadata: Path = typer.Argument(help="Field metadata file"),
    text: str | None = typer.Option(None, help="Description text"),
    text_file: Path | None = typer.Option(None, help="File containing the description"),
) -> None:
    """Rank allowed values of every enumerated field against the description."""
    from jira_field_engine.loaders import load_field_metadata
    from jira_field_engine.suggestions import SuggestionRanker

    description = _read_text(text, text_file)
    ranker = SuggestionRanker()
    for field in load_field_metadata(metadata):
        if not field.allowed_values:
            continue
        ranked = ranker.rank(field, description)[:5]
        shown = ", ".join(f"{r.value} ({r.score})" for r in ranked) or "[dim]none[/dim]"
        console.print(f"  [bold]{field.name}[/bold]: {shown}")


@app.command()
def extract(
    metadata: Path = typer.Argument(help="Field metadata file"),
    config: Path | None = typer.Option(None, help="Extraction config (YAML or JSON)"),
    text: str | None = typer.Option(None, help="Description text"),
    text_file: Path | None = typer.Option(None, help="File containing the description"),
    work_item_type: str = typer.Option("story", help="epic, story, task, initiative or bug"),
    use_ai: bool = typer.Option(True, help="Use the configured AI provider if any"),
    output: Path | None = typer.Option(None, help="Write the result as JSON"),
) -> None:
    """Extract field values from a description and classify them into buckets."""
    from jira_field_engine.config import EngineSettings
    from jira_field_engine.extractors.ai import AIExtractor
    from jira_field_engine.extractors.providers import provider_from_settings
    from jira_field_engine.loaders import ExtractionConfigDocument, load_extraction_config
    from jira_field_engine.loaders import load_field_metadata
    from jira_field_engine.policy.engine import ExtractionPolicyEngine

    description = _read_text(text, text_file)
    fields = load_field_metadata(metadata)
    document = load_extraction_config(config) if config else ExtractionConfigDocument()

    settings = EngineSettings()
    provider = provider_from_settings(settings) if use_ai else None
    engine = ExtractionPolicyEngine(ai=AIExtractor(timeout=settings.ai_timeout_seconds))

    result = asyncio.run(
        engine.run_extraction(
            description,
            fields,
            work_item_type,
            document.field_configs,
            document.preferences,
            ai_provider=provider,
        )
    )

    if output:
        output.write_text(result.model_dump_json(indent=2))
        console.print(f"[green]Result written to {output}[/green]")

    names = {f.id: f.name for f in fields}
    table = Table(title="Extraction result")
    table.add_column("field")
    table.add_column("bucket")
    table.add_column("value")
    table.add_column("confidence")
    for field_id, value in result.auto_applied.items():
        table.add_row(names.get(field_id, field_id), "[green]auto-applied[/green]", json.dumps(value), "")
    for field_id, candidate in result.requires_confirmation.items():
        table.add_row(
            names.get(field_id, field_id),
            "[yellow]confirm[/yellow]",
            json.dumps(candidate.value),
            f"{candidate.confidence:.2f} {candidate.suggestion or ''}",
        )
    for field_id in result.manual_fields:
        table.add_row(names.get(field_id, field_id), "[red]manual[/red]", "", "")
    for field_id in result.skipped_fields:
        table.add_row(names.get(field_id, field_id), "[dim]skipped[/dim]", "", "")
    console.print(table)

    summary = result.extraction_summary
    console.print(
        f"{summary.total_fields} fields: {summary.auto_applied_count} auto-applied, "
        f"{summary.confirmation_count} to confirm, {summary.manual_count} manual, "
        f"{summary.skipped_count} skipped"
    )


if __name__ == "__main__":
    app()
