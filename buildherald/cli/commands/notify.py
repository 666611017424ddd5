"""``buildherald notify`` — dispatch one stage notification from a JSON file.

The file holds a Go server stage-status notification.  With ``--dry-run``
the Slack payload is printed instead of posted.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from buildherald.config import settings
from buildherald.core.composer import MessageComposer
from buildherald.core.stage_resolver import StageNotFoundError
from buildherald.gocd.client import GoServerClient
from buildherald.models.events import PipelineEvent
from buildherald.routing.dispatcher import NotificationDispatcher
from buildherald.routing.transports import DeliveryError, Transport
from buildherald.routing.transports.buffer import BufferTransport
from buildherald.routing.transports.slack import SlackWebhookTransport, build_payload
from buildherald.rules_loader import RuleConfigError, load_rule_set

console = Console()


def notify_cmd(
    event_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="JSON file with the stage-status notification.",
    ),
    rules_path: Path = typer.Option(
        None,
        "--rules",
        "-r",
        help="Rules file (defaults to BUILDHERALD_RULES_PATH).",
    ),
    previous_result: str = typer.Option(
        None,
        "--previous-result",
        help="Result of the previous run of this stage, to tell broken/fixed apart.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the webhook payload instead of posting it.",
    ),
) -> None:
    """Compose and deliver the notification for one pipeline event."""
    try:
        payload = json.loads(event_file.read_text(encoding="utf-8"))
        event = PipelineEvent.from_notification(payload, previous_result=previous_result)
    except ValueError as exc:
        console.print(f"[bold red]Invalid event file:[/bold red] {exc}")
        raise typer.Exit(code=2)

    try:
        rule_set = load_rule_set(
            rules_path or settings.rules_path,
            settings,
            missing_ok=rules_path is None,
        )
    except RuleConfigError as exc:
        console.print(f"[bold red]Rules error:[/bold red] {exc}")
        raise typer.Exit(code=2)

    client = GoServerClient(
        rule_set.notifier.server_host,
        username=settings.api_username,
        password=settings.api_password,
        token=settings.api_token,
        timeout=settings.http_timeout_seconds,
        proxy=settings.proxy,
    )
    transport: Transport
    if dry_run:
        transport = BufferTransport()
    else:
        transport = SlackWebhookTransport(
            display_name=rule_set.notifier.display_name,
            icon_url=rule_set.notifier.icon_url,
            timeout=settings.http_timeout_seconds,
            proxy=settings.proxy,
        )

    dispatcher = NotificationDispatcher(rule_set, MessageComposer(rule_set, client, client), transport)
    try:
        message = dispatcher.dispatch(event)
    except StageNotFoundError as exc:
        console.print(f"[bold red]Inconsistent event:[/bold red] {exc}")
        raise typer.Exit(code=1)
    except DeliveryError as exc:
        console.print(f"[bold red]Delivery failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    if message is None:
        console.print(f"[dim]No rule notifies for {event.pipeline_path}; nothing sent.[/dim]")
        return

    if isinstance(transport, BufferTransport):
        for pending, target in transport.flush():
            console.print_json(
                data=build_payload(
                    pending,
                    target,
                    rule_set.notifier.display_name,
                    rule_set.notifier.icon_url,
                )
            )
        return

    console.print(
        f"[bold green]Sent[/bold green] {message.title!r} for [cyan]{event.pipeline_path}[/cyan]"
    )
