"""CLI commands using Click framework."""

import json
import logging
import os

import click
from rich.logging import RichHandler

from abr_lookup import __version__
from abr_lookup.lookup import lookup_abn, lookup_asic
from abr_lookup.lookup_name import lookup_name
from abr_lookup.registry.abr_client import (
    DEFAULT_ABR_API_BASE_URL,
    STATE_CODES,
    ABRClientError,
    ABRConnectionError,
    ABRNotConfiguredError,
    is_abr_configured,
)
from abr_lookup.registry.parsing import ABRParseError
from abr_lookup.render import (
    console,
    print_error,
    print_info,
    render_history,
    render_lookup_errors,
    render_lookup_result,
    render_search_results,
)


def _configure_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _print_json(data):
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _run_identifier_lookup(lookup, number, as_of, history, as_json):
    """Shared body of the abn and asic commands."""
    try:
        if not as_json:
            print_info(f"Looking up {number}...")
        result = lookup(number, as_of=as_of.date() if as_of else None)
    except ABRNotConfiguredError as e:
        print_error(str(e))
        return
    except ABRConnectionError as e:
        print_error(f"Connection error: {e}")
        return
    except (ABRClientError, ABRParseError) as e:
        print_error(f"ABR API error: {e}")
        return

    if as_json:
        data = result.as_json()
        if history and not result.has_errors:
            data["history"] = result.history_json()
        _print_json(data)
        return

    if result.has_errors:
        render_lookup_errors(result.lookup_number, result.error_messages())
        return

    render_lookup_result(result)
    if history:
        render_history(result)


@click.group()
@click.version_option(version=__version__, prog_name="abr-lookup")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """ABR Lookup - Australian Business Register search tool.

    Looks up ABNs, ACNs and business names against the ABR XML search
    web service and shows the current details plus full history.
    """
    _configure_logging(verbose)


_lookup_options = [
    click.option("--as-of", "as_of", type=click.DateTime(formats=["%Y-%m-%d"]),
                 help="Resolve current values as of this date (default: today)"),
    click.option("--history", "-H", is_flag=True, help="Show full effective-dated history"),
    click.option("--json", "as_json", is_flag=True, help="Output JSON"),
]


def lookup_options(func):
    for option in reversed(_lookup_options):
        func = option(func)
    return func


@cli.command("abn")
@click.argument("number")
@lookup_options
def abn_command(number, as_of, history, as_json):
    """Look up an Australian Business Number."""
    _run_identifier_lookup(lookup_abn, number, as_of, history, as_json)


@cli.command("asic")
@click.argument("number")
@lookup_options
def asic_command(number, as_of, history, as_json):
    """Look up an Australian Company Number (ACN/ARBN)."""
    _run_identifier_lookup(lookup_asic, number, as_of, history, as_json)


@cli.command("name")
@click.argument("name")
@click.option("--postcode", "-p", help="Restrict to a postcode")
@click.option("--state", "-s", "states", multiple=True,
              type=click.Choice(STATE_CODES, case_sensitive=False),
              help="Restrict to a state (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
def name_command(name, postcode, states, as_json):
    """Search the register by business name."""
    try:
        result = lookup_name(name, postcode=postcode, states=states)
    except ABRNotConfiguredError as e:
        print_error(str(e))
        return
    except ABRConnectionError as e:
        print_error(f"Connection error: {e}")
        return
    except (ABRClientError, ABRParseError) as e:
        print_error(f"ABR API error: {e}")
        return

    if as_json:
        _print_json(result.attributes())
        return

    if result.has_errors:
        render_lookup_errors(result.lookup_name, result.error_messages())
        return

    render_search_results(result)


@cli.command("status")
def status():
    """Show ABR integration configuration."""
    console.print()
    console.print("[bold cyan]═══ ABR Integration Status ═══[/bold cyan]")
    console.print()

    console.print("[bold]Configuration:[/bold]")
    base_url = os.environ.get("ABR_API_BASE_URL", f"(default) {DEFAULT_ABR_API_BASE_URL}")
    console.print(f"  ABR_API_BASE_URL: {base_url}")
    timeout = os.environ.get("ABR_REQUEST_TIMEOUT", "(default) 30")
    console.print(f"  ABR_REQUEST_TIMEOUT: {timeout}")

    configured = is_abr_configured()
    icon = "[green]✓[/green]" if configured else "[yellow]○[/yellow]"
    console.print(f"  {icon} ABR_GUID: {'configured' if configured else 'not set'}")

    if not configured:
        console.print()
        console.print("[dim]Set ABR_GUID to enable ABR lookups[/dim]")
