"""CLI interface for draftline."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from draftline.config import load_config
from draftline.editor.stats import content_stats
from draftline.render.email import BUILTIN_TEMPLATES, build_email_html, get_template
from draftline.render.markdown import RenderEngine, to_html
from draftline.render.sanitizer import (
    EMAIL_POLICY,
    EMBED_PREVIEW_POLICY,
    PREVIEW_POLICY,
    sanitize,
)
from draftline.render.templates import missing_placeholders, render, render_subject

app = typer.Typer(
    name="draftline",
    help="Preview, sanitize and render blog articles and newsletters.",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from draftline import __version__

        console.print(f"draftline {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """Draftline - dual-representation content editing pipeline."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _read_source(file: Path) -> str:
    if not file.exists():
        console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)
    return file.read_text(encoding="utf-8")


def _parse_vars(pairs: list[str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            console.print(f"[red]Error:[/red] Invalid --var (expected key=value): {pair}")
            raise typer.Exit(1)
        values[key.strip()] = value
    return values


@app.command()
def preview(
    file: Annotated[Path, typer.Argument(help="Markdown file to convert.")],
    engine: Annotated[
        Optional[RenderEngine],
        typer.Option("--engine", "-e", help="Converter engine (defaults to config)."),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .draftline.toml file."),
    ] = None,
) -> None:
    """Convert markdown to sanitized preview HTML."""
    config = load_config(config_path)
    source = _read_source(file)
    html = to_html(source, engine or config.render.engine)
    policy = EMBED_PREVIEW_POLICY if config.render.allow_iframes else PREVIEW_POLICY
    typer.echo(sanitize(html, policy))


@app.command(name="sanitize")
def sanitize_cmd(
    file: Annotated[Path, typer.Argument(help="HTML file to sanitize.")],
    email: Annotated[
        bool,
        typer.Option("--email", help="Use the email policy (keeps inline styles)."),
    ] = False,
) -> None:
    """Strip unsafe markup from an HTML file."""
    source = _read_source(file)
    typer.echo(sanitize(source, EMAIL_POLICY if email else PREVIEW_POLICY))


@app.command()
def templates() -> None:
    """List the built-in newsletter templates."""
    table = Table(title="Newsletter templates")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Subject")
    table.add_column("Description", style="dim")
    for template in BUILTIN_TEMPLATES:
        table.add_row(template.id, template.name, template.subject, template.description)
    console.print(table)


@app.command(name="render")
def render_cmd(
    template_id: Annotated[str, typer.Argument(help="Built-in template id.")],
    var: Annotated[
        Optional[list[str]],
        typer.Option("--var", help="Placeholder value as key=value (repeatable)."),
    ] = None,
    email: Annotated[
        bool,
        typer.Option("--email", help="Wrap the result in the email shell."),
    ] = False,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .draftline.toml file."),
    ] = None,
) -> None:
    """Fill a template's {{placeholders}} and print the HTML."""
    try:
        template = get_template(template_id)
    except KeyError:
        console.print(f"[red]Error:[/red] Unknown template: {template_id}")
        console.print(f"Available: {', '.join(t.id for t in BUILTIN_TEMPLATES)}")
        raise typer.Exit(1)

    values = _parse_vars(var or [])
    missing = missing_placeholders(template, values)
    if missing:
        console.print(
            f"[yellow]Unfilled placeholders:[/yellow] {', '.join(missing)}",
            highlight=False,
        )

    body = render(template, values)
    if email:
        config = load_config(config_path)
        body = build_email_html(
            render_subject(template, values),
            body,
            footer_text=config.email.footer_text,
            unsubscribe_url=config.email.unsubscribe_url,
            unsubscribe_text=config.email.unsubscribe_text,
        )
    typer.echo(body)


@app.command()
def stats(
    file: Annotated[Path, typer.Argument(help="Markdown file to measure.")],
) -> None:
    """Show word count and reading time for a document."""
    result = content_stats(_read_source(file))
    table = Table(title=file.name)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Words", str(result.words))
    table.add_row("Characters", str(result.characters))
    table.add_row("Sentences", str(result.sentences))
    table.add_row("Paragraphs", str(result.paragraphs))
    table.add_row("Reading time", f"{result.reading_time} min")
    console.print(table)


if __name__ == "__main__":
    app()
