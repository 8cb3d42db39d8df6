"""Whole-document rendering: Markdown in, standalone HTML page out."""

from __future__ import annotations

import logging

from mdmermaid.bootstrap import BootstrapInjector
from mdmermaid.config.models import MermaidConfig
from mdmermaid.escape import escape_html
from mdmermaid.interfaces.backend import RenderBackend
from mdmermaid.scanner import create_markdown

logger = logging.getLogger(__name__)

_PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
  .{base_class} {{ text-align: center; margin: 1.5em 0; }}
  .mermaid-error {{ color: #b00020; text-align: left; white-space: pre-wrap; }}
</style>
</head>
<body>
{body}</body>
</html>
"""


def render_markdown(
    markdown_text: str,
    config: MermaidConfig | None = None,
    backend: RenderBackend | None = None,
) -> tuple[str, int]:
    """Render a Markdown fragment. Returns (html, number of diagram containers)."""
    md = create_markdown(config, backend)
    # `env` is passed through markdown-it so the diagram render rule can count.
    env: dict = {"mermaid_count": 0}
    html = md.render(markdown_text, env)
    return html, env["mermaid_count"]


def render_document(
    markdown_text: str,
    title: str = "",
    config: MermaidConfig | None = None,
    backend: RenderBackend | None = None,
) -> str:
    """Render a full HTML page with the bootstrap script appended once."""
    config = config or MermaidConfig()
    body, count = render_markdown(markdown_text, config, backend)
    logger.info("Rendered %d diagram(s)", count)
    page = _PAGE_TEMPLATE.format(
        title=escape_html(title),
        base_class=config.base_class,
        body=body,
    )
    return BootstrapInjector(config).apply(page, {"mermaid_count": count})
