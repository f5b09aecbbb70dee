"""CLI for rulegate: run / logic / checks commands."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from rulegate.actions import default_action_registry
from rulegate.backends.file_backend import FileRulesBackend
from rulegate.checks import default_check_registry
from rulegate.core.config import EngineConfig, ObservabilityConfig
from rulegate.core.logging_config import setup_logging
from rulegate.engine.engine import RuleEngine
from rulegate.engine.evaluator import rule_logic
from rulegate.engine.renderer import MessageRenderer
from rulegate.exceptions import RuleDefinitionError
from rulegate.models import OutputType

app = typer.Typer(name="rulegate", help="Evaluate declarative business rules against records")
console = Console()


def _configure_logging(verbose: bool) -> None:
    config = ObservabilityConfig()
    if verbose:
        config = config.model_copy(update={"log_level": "DEBUG"})
    setup_logging(config)


def _load_records(data_path: Path) -> list[dict[str, Any]]:
    """Load records from a JSON file holding one object or an array of objects."""
    raw = json.loads(data_path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        return [raw]
    if isinstance(raw, list) and all(isinstance(item, dict) for item in raw):
        return raw
    raise typer.BadParameter(f"Expected a JSON object or array of objects in {data_path}")


def _parse_today(today: Optional[str]) -> Optional[date]:
    if today is None:
        return None
    try:
        return date.fromisoformat(today)
    except ValueError as exc:
        raise typer.BadParameter(f"--today must be yyyy-MM-dd, got {today!r}") from exc


@app.command()
def run(
    rules: Path = typer.Argument(..., exists=True, help="Rules file or directory (YAML/JSON)"),
    data: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="JSON file with one record or an array of records"
    ),
    label_field: str = typer.Option("", "--label-field", help="Record field used as its label"),
    output: Optional[OutputType] = typer.Option(
        None, "--output", help="Results to show (default: RULEGATE_ENGINE_OUTPUT_TYPE)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print reports as JSON"),
    today: Optional[str] = typer.Option(None, "--today", help="Evaluation date (yyyy-MM-dd)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Evaluate every active rule group against each record."""
    _configure_logging(verbose)

    overrides: dict[str, Any] = {}
    if output is not None:
        overrides["output_type"] = output.value
    if label_field:
        overrides["object_label_field"] = label_field
    engine = RuleEngine(FileRulesBackend(rules), config=EngineConfig(**overrides))
    renderer = MessageRenderer()
    evaluation_date = _parse_today(today)
    records = _load_records(data)

    try:
        reports = engine.run_many(records, today=evaluation_date)
    except RuleDefinitionError as exc:
        console.print(f"[red]Invalid rules: {exc}[/red]")
        raise typer.Exit(code=2) from exc

    if as_json:
        typer.echo(json.dumps([r.to_dict(renderer=renderer) for r in reports], indent=2))
    else:
        for index, report in enumerate(reports):
            label = report.object_label or f"record {index + 1}"
            table = Table(title=f"{label}: {'passed' if report.passed else 'failed'}")
            table.add_column("Group", style="cyan")
            table.add_column("Verdict")
            table.add_column("Rules (run/failed)")
            table.add_column("Actions (ok/failed)")
            table.add_column("Logic", max_width=60)
            for outcome in report.outcomes:
                if outcome.skipped:
                    verdict = "[yellow]skipped[/yellow]"
                elif outcome.passed:
                    verdict = "[green]passed[/green]"
                else:
                    verdict = "[red]failed[/red]"
                table.add_row(
                    outcome.group_id,
                    verdict,
                    f"{outcome.rules_run}/{outcome.rules_failed}",
                    f"{outcome.actions_executed}/{outcome.actions_failed}",
                    outcome.rule_logic,
                )
            console.print(table)
            for message in report.messages(renderer=renderer):
                console.print(f"  {message}", markup=False, highlight=False)

    failed = sum(1 for r in reports if not r.passed)
    if not as_json:
        console.print(f"\n[bold]{len(reports) - failed}/{len(reports)} record(s) passed[/bold]")
    if failed:
        raise typer.Exit(code=1)


@app.command()
def logic(
    rules: Path = typer.Argument(..., exists=True, help="Rules file or directory (YAML/JSON)"),
    today: Optional[str] = typer.Option(None, "--today", help="Evaluation date (yyyy-MM-dd)"),
) -> None:
    """Print the rule-logic expression of each active group."""
    backend = FileRulesBackend(rules)
    try:
        groups = backend.list_groups(today=_parse_today(today))
    except RuleDefinitionError as exc:
        console.print(f"[red]Invalid rules: {exc}[/red]")
        raise typer.Exit(code=2) from exc

    table = Table(title="Rule Logic")
    table.add_column("Group", style="cyan")
    table.add_column("Expression", style="green")
    for group in groups:
        table.add_row(group.id, rule_logic(group) or "(no rules)")
    console.print(table)


@app.command()
def checks() -> None:
    """List the builtin check and action names."""
    table = Table(title="Registered functions")
    table.add_column("Kind", style="cyan")
    table.add_column("Name", style="green")
    for name in default_check_registry().names():
        table.add_row("check", name)
    for name in default_action_registry().names():
        table.add_row("action", name)
    console.print(table)


if __name__ == "__main__":
    app()
