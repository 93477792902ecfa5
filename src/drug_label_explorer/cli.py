"""
Command Line Interface for Drug Label Explorer
"""

import asyncio
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import configure_logging, get_config, load_config, print_config_validation
from .label_service import DrugLabelService
from .labels import OpenFDALabelFetcher
from .openfda_client import OpenFDAClient
from .pipeline import AEPipeline, PipelineError

console = Console()
stderr_console = Console(stderr=True)


def get_console(ctx):
    """Get appropriate console - stderr if JSON mode, stdout otherwise."""
    if ctx.obj.get('json_mode'):
        return stderr_console
    return console


def _client(ctx) -> OpenFDAClient:
    config = ctx.obj['config']
    return OpenFDAClient(api_key=config.openfda.api_key)


def _fail(ctx, action: str, error: Exception) -> None:
    get_console(ctx).print(f"[red]{action} failed:[/red] {escape(str(error))}")
    sys.exit(1)


def _clip(text: str, width: int) -> str:
    text = " ".join(text.split())
    if len(text) > width:
        text = text[: width - 3] + "..."
    return escape(text)


@click.group()
@click.option('--config', '-c', help='Configuration file path')
@click.option('--debug', '-d', is_flag=True, help='Enable debug mode')
@click.option('--api-key', help='FDA API key')
@click.option('--validate-config', is_flag=True, help='Validate configuration and exit')
@click.option('--skip-validation', is_flag=True, help='Skip startup validation')
@click.pass_context
def cli(ctx, config, debug, api_key, validate_config, skip_validation):
    """Drug Label Explorer CLI - FDA drug label search and safety summaries"""
    ctx.ensure_object(dict)
    ctx.obj['json_mode'] = '--json' in sys.argv

    try:
        validate_startup = not skip_validation
        out = get_console(ctx)

        if config:
            ctx.obj['config'] = load_config(config, validate_startup=validate_startup)
        else:
            ctx.obj['config'] = get_config(validate_startup=validate_startup)

        if api_key:
            ctx.obj['config'].openfda.api_key = api_key

        if debug:
            ctx.obj['config'].debug = True
            ctx.obj['config'].logging.level = "DEBUG"

        configure_logging(ctx.obj['config'].logging)
        if not debug:
            logging.getLogger("drug_label_explorer").setLevel(logging.WARNING)

        if validate_config:
            out.print("\n[bold blue]Configuration Validation Report[/bold blue]\n")
            print_config_validation()
            sys.exit(0)

        if not skip_validation:
            summary = ctx.obj['config'].get_validation_summary()
            if summary["warnings"]:
                out.print("\n[yellow]Configuration Validation Warnings:[/yellow]")
                for warning in summary["warnings"]:
                    out.print(f"  [yellow]Warning:[/yellow] {warning}")
                out.print()

    except ValueError as e:
        console.print(f"\n[red]Configuration Error:[/red] {e}")
        console.print("\nUse --validate-config to see detailed validation report.")
        console.print("Use --skip-validation to bypass validation (not recommended).")
        sys.exit(1)
    except FileNotFoundError as e:
        console.print(f"\n[red]Configuration Error:[/red] {e}")
        sys.exit(1)


@cli.command()
@click.argument('search', required=False)
@click.option('--count', help='Field to count results by, e.g. openfda.manufacturer_name.exact')
@click.option('--skip', default=0, type=click.IntRange(min=0), help='Records to skip')
@click.option('--limit', '-l', default=10, type=click.IntRange(1, 200), help='Maximum records to return')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def search(ctx, search, count, skip, limit, as_json):
    """Search FDA drug labels.

    Examples:
        drug-label-explorer search aspirin
        drug-label-explorer search 'openfda.brand_name:tylenol' --limit 3
        drug-label-explorer search --count openfda.manufacturer_name.exact --json
    """
    service = DrugLabelService(_client(ctx))
    out = get_console(ctx)

    with out.status("[bold green]Searching drug labels...[/bold green]"):
        try:
            result = asyncio.run(service.search_labels(search=search, count=count, skip=skip, limit=limit))
        except Exception as e:
            _fail(ctx, "Drug label search", e)

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return

    if not result.results:
        console.print(f"[yellow]No drug labels found for '{search or '*'}'[/yellow]")
        return

    if count:
        table = Table(title=f"Counts by {count}")
        table.add_column("Term", style="cyan")
        table.add_column("Count", style="magenta", justify="right")
        for row in result.results:
            table.add_row(escape(str(row.get("term", ""))), str(row.get("count", "")))
        console.print(table)
        return

    table = Table(title=f"Drug Labels: '{search or '*'}'")
    table.add_column("Drug", style="cyan", max_width=30)
    table.add_column("Manufacturer", style="green", max_width=30)
    table.add_column("Indications", max_width=70)
    for label in result.results:
        openfda = label.get("openfda") or {}
        brand = (openfda.get("brand_name") or openfda.get("generic_name") or ["N/A"])[0]
        manufacturer = (openfda.get("manufacturer_name") or ["N/A"])[0]
        indications = " ".join(label.get("indications_and_usage") or [])
        table.add_row(_clip(brand, 30), _clip(manufacturer, 30), _clip(indications, 70) or "[dim]None[/dim]")
    console.print(table)

    total = result.meta.get("results", {}).get("total", result.results_count)
    console.print(f"[dim]Showing {result.results_count} of {total} labels[/dim]")


def _section_command(ctx, drug_name: str, limit: int, as_json: bool, lookup: str, title: str, sections: dict):
    service = DrugLabelService(_client(ctx))
    out = get_console(ctx)

    with out.status(f"[bold green]Looking up {title.lower()} for '{drug_name}'...[/bold green]"):
        try:
            result = asyncio.run(getattr(service, lookup)(drug_name, limit))
        except Exception as e:
            _fail(ctx, f"{title} lookup", e)

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return

    records = next(value for key, value in result if key.endswith("_data"))
    if not records:
        console.print(f"[yellow]No FDA labels found for '{drug_name}'[/yellow]")
        return

    for record in records:
        body = []
        for field_name, heading in sections.items():
            entries = getattr(record, field_name)
            if entries:
                body.append(f"[bold]{heading}[/bold]\n{_clip(' '.join(entries), 800)}")
        console.print(Panel(
            "\n\n".join(body) or "[dim]No content in these sections[/dim]",
            title=escape(f"{record.drug_name} ({record.manufacturer})"),
            border_style="cyan",
        ))
    console.print(f"[dim]{len(records)} of {result.total_results} matching labels[/dim]")


@cli.command('adverse-reactions')
@click.argument('drug_name')
@click.option('--limit', '-l', default=3, type=click.IntRange(1, 10), help='Maximum labels to show')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def adverse_reactions(ctx, drug_name, limit, as_json):
    """Show adverse reactions and contraindications for a drug"""
    _section_command(ctx, drug_name, limit, as_json, "get_adverse_reactions", "Adverse reactions", {
        "adverse_reactions": "Adverse Reactions",
        "contraindications": "Contraindications",
    })


@cli.command()
@click.argument('drug_name')
@click.option('--limit', '-l', default=3, type=click.IntRange(1, 10), help='Maximum labels to show')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def warnings(ctx, drug_name, limit, as_json):
    """Show warnings, precautions and boxed warnings for a drug"""
    _section_command(ctx, drug_name, limit, as_json, "get_warnings", "Warnings", {
        "boxed_warning": "Boxed Warning",
        "warnings": "Warnings",
        "warnings_and_cautions": "Warnings and Cautions",
        "precautions": "Precautions",
    })


@cli.command()
@click.argument('drug_name')
@click.option('--limit', '-l', default=3, type=click.IntRange(1, 10), help='Maximum labels to show')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def indications(ctx, drug_name, limit, as_json):
    """Show indications and dosage for a drug"""
    _section_command(ctx, drug_name, limit, as_json, "get_indications", "Indications", {
        "indications_and_usage": "Indications and Usage",
        "dosage_and_administration": "Dosage and Administration",
    })


@cli.command()
@click.argument('query', required=False)
@click.option('--drug', help='Drug name to focus on')
@click.option('--condition', help='Medical condition context')
@click.option('--top-k', '-k', default=None, type=click.IntRange(1, 10), help='Number of excerpts to return')
@click.option('--limit', '-l', default=None, type=click.IntRange(1, 100), help='Maximum labels to fetch')
@click.option('--json', 'as_json', is_flag=True, help='Output the full result as JSON')
@click.pass_context
def rag(ctx, query, drug, condition, top_k, limit, as_json):
    """Summarize drug label safety information for a query.

    Examples:
        drug-label-explorer rag "bleeding risk" --drug warfarin
        drug-label-explorer rag --condition hypertension -k 3 --json
    """
    config = ctx.obj['config']
    pipeline = AEPipeline(OpenFDALabelFetcher(_client(ctx)), config.rag)
    out = get_console(ctx)

    with out.status("[bold green]Running label RAG pipeline...[/bold green]"):
        try:
            result = asyncio.run(pipeline.run(query=query, drug=drug, condition=condition, top_k=top_k, limit=limit))
        except PipelineError as e:
            _fail(ctx, "RAG pipeline", e)

    if as_json:
        click.echo(result.to_payload())
        return

    console.print(Markdown(result.summary))

    if result.top_chunks:
        table = Table(title="Top Excerpts")
        table.add_column("#", style="dim")
        table.add_column("Source", style="cyan", max_width=24)
        table.add_column("Drug", style="green", max_width=20)
        table.add_column("Score", style="magenta")
        table.add_column("Excerpt", max_width=70)
        for idx, chunk in enumerate(result.top_chunks, 1):
            table.add_row(
                str(idx),
                escape(chunk.source),
                escape(str(chunk.metadata.get("drug_name", ""))),
                f"{chunk.score:.3f}" if chunk.score is not None else "-",
                _clip(chunk.text, 70),
            )
        console.print(table)

    if result.citations:
        console.print("\n[bold]Citations[/bold]")
        for citation in result.citations:
            title = f" - {citation.title}" if citation.title else ""
            console.print(escape(f"  [{citation.type or 'document'}] {citation.id}{title}"))


@cli.command()
@click.option('--host', default=None, help='Server host (default from config)')
@click.option('--port', default=None, type=int, help='Server port (default from config)')
@click.option('--reload', is_flag=True, help='Enable auto-reload')
@click.pass_context
def serve(ctx, host, port, reload):
    """Start the REST API server"""
    from .api import run_api_server

    config = ctx.obj['config']
    host = host or config.api.host
    port = port or config.api.port

    console.print(f"[green]Starting Drug Label Explorer API on {host}:{port}[/green]")
    console.print(f"[dim]API docs: http://{host}:{port}{config.api.docs_url}[/dim]")
    run_api_server(host=host, port=port, reload=reload)


@cli.command()
@click.pass_context
def mcp(ctx):
    """Run the MCP server on stdio"""
    from .mcp_server import create_server

    stderr_console.print("[green]OpenFDA drug label MCP server running on stdio[/green]")
    client = _client(ctx)
    create_server(
        service=DrugLabelService(client),
        pipeline=AEPipeline(OpenFDALabelFetcher(client), ctx.obj['config'].rag),
    ).run()


@cli.command('validate-config')
@click.option('--config', '-c', help='Configuration file path to validate')
@click.option('--strict', is_flag=True, help='Treat warnings as errors')
@click.pass_context
def validate_config_cmd(ctx, config, strict):
    """Validate configuration and display comprehensive report"""
    try:
        if config:
            cfg = load_config(config, validate_startup=False)
        else:
            cfg = ctx.obj['config']

        console.print("\n[bold blue]Configuration Validation Report[/bold blue]\n")

        summary = cfg.get_validation_summary()

        for key, heading, style in (
            ("critical", "CRITICAL ISSUES", "red"),
            ("errors", "ERRORS", "red"),
            ("warnings", "WARNINGS", "yellow"),
            ("info", "INFO", "cyan"),
        ):
            if summary[key]:
                console.print(f"[{style}]{heading}:[/{style}]")
                for issue in summary[key]:
                    console.print(f"  {issue}")
                console.print()

        if not any(summary.values()):
            console.print("[green]Configuration validation passed with no issues![/green]")

    except Exception as e:
        console.print(f"\n[red]Configuration validation failed:[/red] {e}")
        sys.exit(1)

    failures = len(summary["critical"]) + len(summary["errors"])
    if failures:
        console.print(f"\n[red]Validation failed with {failures} critical issues.[/red]")
        sys.exit(1)
    if strict and summary["warnings"]:
        console.print(f"\n[yellow]Validation failed in strict mode with {len(summary['warnings'])} warnings.[/yellow]")
        sys.exit(1)
    console.print("\n[green]Validation passed.[/green]")


def main(argv: Optional[list] = None):
    """Main entry point"""
    cli(argv)


if __name__ == "__main__":
    main()
