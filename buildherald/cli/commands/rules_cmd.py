"""``buildherald rules`` — show the loaded rules and pipeline variants."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from buildherald.config import settings
from buildherald.models.rules import ALL_STATUSES
from buildherald.rules_loader import RuleConfigError, load_rule_set

console = Console()


def rules_cmd(
    rules_path: Path = typer.Option(
        None,
        "--rules",
        "-r",
        help="Rules file (defaults to BUILDHERALD_RULES_PATH).",
    ),
) -> None:
    """Print the rules in match order, then the pipeline variants."""
    try:
        rule_set = load_rule_set(rules_path or settings.rules_path, settings)
    except RuleConfigError as exc:
        console.print(f"[bold red]Rules error:[/bold red] {exc}")
        raise typer.Exit(code=2)

    notifier = rule_set.notifier
    console.print(
        f"[bold]Default channel:[/bold] {notifier.channel or '(webhook default)'}  "
        f"[bold]Console links:[/bold] {notifier.console_links.value}  "
        f"[bold]Triggered by:[/bold] {notifier.triggered_by.value}"
    )

    table = Table(title="Rules (first match wins)")
    table.add_column("#", justify="right")
    table.add_column("Pipeline", style="cyan")
    table.add_column("Stage")
    table.add_column("Group")
    table.add_column("Statuses")
    table.add_column("Channel", style="green")
    table.add_column("Webhook", justify="center")

    for index, rule in enumerate(rule_set.pipelines, start=1):
        statuses = (
            "all"
            if rule.statuses == ALL_STATUSES
            else ", ".join(sorted(s.value for s in rule.statuses))
        )
        webhook = "[yellow]override[/yellow]" if rule.webhook_url else "[dim]default[/dim]"
        table.add_row(
            str(index), rule.name, rule.stage, rule.group, statuses, rule.channel or "-", webhook
        )
    console.print(table)

    if not rule_set.variants:
        return

    variants = Table(title="Pipeline variants")
    variants.add_column("Variant", style="cyan")
    variants.add_column("Pipelines")
    variants.add_column("Phrase pools")
    variants.add_column("Footer")
    for variant in rule_set.variants:
        variants.add_row(
            variant.name,
            ", ".join(variant.pipelines),
            ", ".join(sorted(s.value for s in variant.phrases)) or "[dim]standard[/dim]",
            variant.footer or "-",
        )
    console.print(variants)
