"""List registered rules and their messages."""

import click
from rich.markup import escape
from rich.table import Table

from trxlint.pipeline.ui import console, print_header
from trxlint.utils.error_handler import handle_exceptions


@click.command("rules")
@click.option("--messages/--no-messages", default=True, help="Show message ids and texts")
@handle_exceptions
def rules_command(messages):
    """List registered rules.

    Shows each rule's category, whether it has an autofix and the level it
    gets in the `recommended` preset, followed by the message ids it reports.
    """
    from trxlint.rules.orchestrator import RulesOrchestrator, discover_rules

    rules = discover_rules()

    print_header("TRXLINT RULES")
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2, 0, 0))
    table.add_column("Rule", style="rule", no_wrap=True)
    table.add_column("Category")
    table.add_column("Fixable")
    table.add_column("Recommended")
    table.add_column("Description")

    for info in rules:
        meta = info.metadata
        table.add_row(
            meta.name,
            info.category,
            "yes" if meta.fixable else "no",
            meta.recommended or "-",
            escape(meta.description),
        )
    console.print(table, highlight=False)

    stats = RulesOrchestrator().get_rule_stats()
    console.print(
        f"\n[dim]{stats['total_rules']} rules, {stats['enabled_rules']} in recommended, "
        f"{stats['fixable_rules']} fixable[/dim]",
        highlight=False,
    )

    if not messages:
        return

    for info in rules:
        console.print(f"\n[rule]{info.metadata.name}[/rule]", highlight=False)
        for message_id, text in info.metadata.messages.items():
            console.print(f"  [info]{message_id}[/info]: {escape(text)}", highlight=False)
