"""CLI entry point for mdmermaid."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from mdmermaid.backends import create_backend
from mdmermaid.bootstrap import BootstrapScriptGenerator
from mdmermaid.config import MdMermaidConfig, load_config
from mdmermaid.config.loader import DEFAULT_CONFIG_TEMPLATE
from mdmermaid.document import render_document
from mdmermaid.interfaces.backend import RenderBackend
from mdmermaid.normalizer import normalize_html
from mdmermaid.renderer import ContainerRenderer
from mdmermaid.scanner import scan_document
from mdmermaid.validator import validate_mermaid_source

app = typer.Typer(
    name="mdmermaid",
    help="Turn ```mermaid fences and rendered code blocks into diagram containers.",
)

config_app = typer.Typer(help="Manage mdmermaid configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: MdMermaidConfig | None = None

_LOG_LEVELS = {"debug": logging.DEBUG, "info": logging.INFO, "warn": logging.WARNING, "error": logging.ERROR}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(
            {
                "level": record.levelname.lower(),
                "logger": record.name,
                "message": record.getMessage(),
            }
        )


def _configure_logging(cfg: MdMermaidConfig) -> None:
    if cfg.log_format == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(level=_LOG_LEVELS[cfg.log_level], handlers=[handler], force=True)


def _get_config() -> MdMermaidConfig:
    if _config is None:
        return load_config()
    return _config


def _get_backend(cfg: MdMermaidConfig) -> RenderBackend | None:
    """Resolve the server-side backend once per command."""
    if not cfg.mermaid.server_side:
        return None
    return create_backend(cfg.backend)


def _write_output(html: str, output: str | None) -> None:
    if output:
        Path(output).write_text(html, encoding="utf-8")
        rprint(f"[green]Wrote[/green] {output}")
    else:
        typer.echo(html, nl=False)


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to mdmermaid.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    _configure_logging(_config)


@app.command()
def render(
    source: Annotated[Path, typer.Argument(help="Markdown file to render")],
    output: Annotated[str | None, typer.Option("--output", "-o", help="Write HTML here")] = None,
    title: Annotated[str, typer.Option("--title", help="Page title (defaults to file name)")] = "",
) -> None:
    """Render a Markdown file to an HTML page with diagram containers."""
    if not source.is_file():
        rprint(f"[red]Not a file:[/red] {source}")
        raise typer.Exit(1)
    cfg = _get_config()
    html = render_document(
        source.read_text(encoding="utf-8"),
        title=title or source.stem,
        config=cfg.mermaid,
        backend=_get_backend(cfg),
    )
    _write_output(html, output)


@app.command()
def normalize(
    source: Annotated[Path, typer.Argument(help="Rendered HTML file")],
    output: Annotated[str | None, typer.Option("--output", "-o", help="Write HTML here")] = None,
    in_place: Annotated[bool, typer.Option("--in-place", "-i", help="Overwrite the input file")] = False,
) -> None:
    """Rewrite <pre><code> diagram blocks in rendered HTML into containers."""
    if not source.is_file():
        rprint(f"[red]Not a file:[/red] {source}")
        raise typer.Exit(1)
    cfg = _get_config()
    renderer = ContainerRenderer(cfg.mermaid, _get_backend(cfg))
    html = normalize_html(source.read_text(encoding="utf-8"), renderer=renderer)
    _write_output(html, str(source) if in_place else output)


@app.command()
def scan(
    source: Annotated[Path, typer.Argument(help="Markdown file to scan")],
) -> None:
    """List diagram blocks found in a Markdown file."""
    if not source.is_file():
        rprint(f"[red]Not a file:[/red] {source}")
        raise typer.Exit(1)
    cfg = _get_config()
    blocks = scan_document(source.read_text(encoding="utf-8"), cfg.mermaid)

    table = Table(title=f"Diagrams in {source.name} ({len(blocks)})")
    table.add_column("Lines", justify="right")
    table.add_column("Type")
    table.add_column("Issues")
    for block in blocks:
        start, end = block.source_span
        result = validate_mermaid_source(block.raw_content)
        table.add_row(
            f"{start + 1}-{end}",
            result.diagram_type or "-",
            "; ".join(result.errors) if result.errors else "[green]ok[/green]",
        )
    rprint(table)


@app.command()
def script() -> None:
    """Print the client-side bootstrap script for the current config."""
    cfg = _get_config()
    typer.echo(BootstrapScriptGenerator(cfg.mermaid).generate())


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(mode="json"), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default mdmermaid.yaml in current directory."""
    target = Path("mdmermaid.yaml")
    if target.exists() and not force:
        rprint("[yellow]mdmermaid.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
