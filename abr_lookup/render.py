"""Rendering utilities for terminal output."""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich import box

from abr_lookup.lookup import LookupResult
from abr_lookup.lookup_name import NameLookupResult


# Global console instance
console = Console()


# History sections: (Entity.to_dict key, title, payload columns)
HISTORY_SECTIONS: List[Tuple[str, str, List[Tuple[str, str]]]] = [
    ("statuses", "Status History", [("status_code", "Status")]),
    ("main_names", "Main Names", [("organisation_name", "Name")]),
    ("legal_names", "Legal Names", [
        ("given_name", "Given Name"),
        ("other_given_name", "Other Given Name"),
        ("family_name", "Family Name"),
    ]),
    ("trading_names", "Trading Names", [("organisation_name", "Name")]),
    ("addresses", "Business Addresses", [("state_code", "State"), ("postcode", "Postcode")]),
    ("gsts", "GST Registration", []),
]


def print_error(message: str):
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_info(message: str):
    """Print an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


def print_section_header(title: str):
    """Print a section header."""
    console.print()
    console.print(f"[bold cyan]═══ {title} ═══[/bold cyan]")
    console.print()


def _format_value(value: Any) -> str:
    if value is None or value == "":
        return "—"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, date):
        return value.isoformat()
    return escape(str(value))


def _render_key_value_pairs(pairs: List[Tuple[str, Any]]):
    """Render key-value pairs with aligned formatting."""
    max_key_len = max(len(k) for k, _ in pairs) if pairs else 0
    for key, value in pairs:
        console.print(f"  [cyan]{key:>{max_key_len}}:[/cyan] {_format_value(value)}")


def render_table(
    columns: List[Tuple[str, str]],
    rows: List[Dict[str, Any]],
    title: Optional[str] = None,
    show_row_numbers: bool = False,
):
    """Render a formatted table.

    Args:
        columns: List of (key, header_label) tuples.
        rows: List of row dictionaries.
        title: Optional table title.
        show_row_numbers: If True, show row numbers.
    """
    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold magenta",
        row_styles=["", "dim"],
    )

    if show_row_numbers:
        table.add_column("#", justify="right", style="dim")

    for key, header in columns:
        table.add_column(header, overflow="fold")

    for i, row in enumerate(rows, 1):
        values = []
        if show_row_numbers:
            values.append(str(i))
        for key, _ in columns:
            values.append(_format_value(row.get(key)))
        table.add_row(*values)

    console.print(table)


def render_lookup_errors(lookup_key: str, messages: List[str]):
    """Render registry-reported exceptions for a lookup."""
    console.print()
    console.print(f"[bold red]Registry returned errors for {lookup_key}:[/bold red]")
    for message in messages:
        console.print(f"  [red]• {escape(message)}[/red]")


def render_lookup_result(result: LookupResult):
    """Render the current snapshot of a looked-up entity.

    Args:
        result: LookupResult without registry errors.
    """
    title = escape(result.registered_name or result.abn or result.lookup_number)
    description = escape(result.entity_type_description or "Unknown entity type")
    console.print(Panel(
        f"[bold]{title}[/bold]\n[dim]{description}[/dim]",
        title=f"ABN {result.abn or result.lookup_number}",
        border_style="cyan",
    ))

    print_section_header(f"Current Details (as of {result.as_of.isoformat()})")
    _render_key_value_pairs([
        ("ABN", result.abn),
        ("ABN Current", result.current),
        ("Status", result.entity_status),
        ("Status From", result.effective_from),
        ("Status To", result.effective_to),
        ("Entity Type", result.entity_type),
        ("Registered Name", result.registered_name),
        ("Trading Name", result.trading_name),
        ("State", result.state_code),
        ("Postcode", result.postcode),
        ("GST Registered", result.entity.current_gst_status(result.as_of)),
    ])


def render_history(result: LookupResult):
    """Render every effective-dated record of the entity, per category."""
    history = result.history()
    period_columns = [("effective_from", "From"), ("effective_to", "To")]

    for key, title, columns in HISTORY_SECTIONS:
        records = history.get(key, [])
        print_section_header(title)
        if not records:
            console.print("  [dim]No records.[/dim]")
            continue
        render_table(columns + period_columns, records)


def render_search_results(result: NameLookupResult):
    """Render name search matches."""
    if not result.search_results:
        console.print()
        console.print(f"[dim]No matches for '{escape(result.lookup_name)}'.[/dim]")
        return

    rows = [r.to_dict() for r in result.search_results]
    render_table(
        [
            ("abn", "ABN"),
            ("status", "Status"),
            ("name", "Name"),
            ("name_type", "Name Type"),
            ("location", "Location"),
            ("score", "Score"),
        ],
        rows,
        title=f"Search results for '{escape(result.lookup_name)}'",
        show_row_numbers=True,
    )
