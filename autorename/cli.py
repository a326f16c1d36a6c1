"""CLI entrypoints."""

import logging
from pathlib import Path

import click
from langsmith import traceable
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from autorename.config import EnvironmentCredentialStore, MappingCredentialStore
from autorename.errors import NoCredentialError
from autorename.models.file_item import FileItem, StatusKind
from autorename.models.provider import ProviderKind, ProviderSettings
from autorename.models.template import DEFAULT_TEMPLATE, RenameTemplate
from autorename.processors.analysis_provider import build_provider
from autorename.processors.rename_pipeline import RenamePipeline


console = Console()

STATUS_STYLES = {
    StatusKind.PENDING: "dim",
    StatusKind.PROCESSING: "cyan",
    StatusKind.READY: "green",
    StatusKind.RENAMED: "bold green",
    StatusKind.ERROR: "red",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _status_cell(item: FileItem) -> str:
    style = STATUS_STYLES[item.status.kind]
    return f"[{style}]{item.status}[/{style}]"


def _proposals_table(items: tuple[FileItem, ...]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Original", style="cyan")
    table.add_column("New Name", style="green")
    table.add_column("Status")
    table.add_column("Tokens", justify="right")

    for item in items:
        tokens = f"{item.token_usage.total_tokens:,}" if item.token_usage else ""
        table.add_row(item.original_name, item.proposed_name or "", _status_cell(item), tokens)

    return table


@click.group(context_settings=dict(show_default=True))
def cli() -> None:
    """autorename - Rename files from their content with the help of LLMs."""
    pass


@cli.command("rename")
@click.argument("input_files", type=click.Path(exists=True, dir_okay=False), nargs=-1, required=True)
@click.option("-t", "--template", type=str, default=DEFAULT_TEMPLATE, help="Naming template with {variable} slots.")
@click.option(
    "--provider",
    type=click.Choice([kind.value for kind in ProviderKind]),
    default=ProviderKind.OPENAI.value,
    help="LLM provider to use.",
)
@click.option("--model-identifier", type=str, default=None, help="Model to use. Defaults to the provider's model.")
@click.option(
    "--api-key",
    type=str,
    default=None,
    help="API key for the provider. Read from OPENAI_API_KEY / ANTHROPIC_API_KEY when omitted.",
)
@click.option(
    "-y",
    "--yes",
    is_flag=True,
    default=False,
    help="Automatically apply renames without asking for confirmation.",
)
@click.option("--show-token-usage", is_flag=True, default=True, help="Display token usage statistics.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@traceable
def rename(
    input_files: tuple[str, ...],
    template: str,
    provider: str,
    model_identifier: str | None,
    api_key: str | None,
    yes: bool,
    show_token_usage: bool,
    verbose: bool,
) -> None:
    """Rename files by extracting template values from their content.

    Each file is sent to the LLM one at a time. The model fills the template's
    variables and {ext} is always taken from the original file.

    Examples:

        autorename rename *.pdf

        autorename rename -t "{author}_{title}_{year}.{ext}" --provider anthropic paper1.pdf paper2.pdf
    """
    _configure_logging(verbose)

    kind = ProviderKind(provider)
    settings = ProviderSettings(kind=kind, model=model_identifier)
    credentials = MappingCredentialStore({kind.credential_key: api_key}, fallback=EnvironmentCredentialStore())
    pipeline = RenamePipeline(
        credentials=credentials,
        settings=settings,
        template=template,
        provider_factory=build_provider,
    )

    pipeline.add_files(Path(f) for f in input_files)
    console.print(
        f"Renaming [bold cyan]{len(pipeline)}[/bold cyan] file(s) "
        f"using [bold magenta]{kind.display_name}[/bold magenta]..."
    )
    console.print(f"Template: [italic]{pipeline.template}[/italic]")
    console.print()

    try:
        usage = pipeline.analyze_batch(show_progress=True)
    except NoCredentialError as e:
        console.print(f"[bold red]Error:[/bold red] {e} Pass --api-key or set {kind.credential_key.upper()}.")
        raise SystemExit(1) from e

    console.print()
    console.print("[bold]Proposed renames:[/bold]")
    console.print(_proposals_table(pipeline.items))
    console.print()

    if pipeline.error_message:
        console.print(f"[yellow]Some files could not be analyzed:[/yellow]\n{pipeline.error_message}")
        console.print()

    if show_token_usage:
        console.print("[bold]Token Usage:[/bold]")
        console.print(f"  Input tokens: [cyan]{usage.input_tokens:,}[/cyan]")
        console.print(f"  Output tokens: [cyan]{usage.output_tokens:,}[/cyan]")
        console.print(f"  Total tokens: [cyan]{usage.total_tokens:,}[/cyan]")
        console.print()

    if not pipeline.has_ready_items:
        console.print("[yellow]No rename operations to apply.[/yellow]")
        return

    # Ask for confirmation unless --yes is provided
    if not yes and not click.confirm("Apply these renames?", default=False):
        console.print("[yellow]Aborted. No files were renamed.[/yellow]")
        return

    console.print("[cyan]Applying renames...[/cyan]")
    renamed = pipeline.confirm_renames()

    if pipeline.error_message:
        console.print(f"[bold red]Error:[/bold red] Some files could not be renamed:\n{pipeline.error_message}")

    console.print(f"[bold green]Successfully renamed {len(renamed)} file(s).[/bold green]")
    if pipeline.error_message:
        raise SystemExit(1)


@cli.command("variables")
@click.argument("template", type=str)
def variables(template: str) -> None:
    """List the variables in a naming template."""
    names = RenameTemplate(template_string=template).unique_variable_names
    if not names:
        console.print("[yellow]No variables found in template.[/yellow]")
        return

    for name in names:
        note = " [dim](taken from the original file)[/dim]" if name == "ext" else ""
        console.print(f"  [cyan]{name}[/cyan]{note}")
