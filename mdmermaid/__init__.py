"""mdmermaid - Mermaid diagram containers for Markdown and rendered HTML."""

from mdmermaid.bootstrap import BootstrapInjector, BootstrapScriptGenerator
from mdmermaid.config import MdMermaidConfig, MermaidConfig, load_config
from mdmermaid.document import render_document, render_markdown
from mdmermaid.escape import escape_html, strip_highlight_markup, unescape_html
from mdmermaid.interfaces import BackendError, RenderBackend, RenderContext
from mdmermaid.models import ContainerState, DiagramBlock, DiagramContainer
from mdmermaid.normalizer import HtmlNormalizer, normalize_html
from mdmermaid.pipeline import Transform, TransformPipeline
from mdmermaid.renderer import ContainerRenderer, apply_styling
from mdmermaid.scanner import create_markdown, mermaid_fence_rule, mermaid_plugin, scan_document
from mdmermaid.validator import DIAGRAM_TYPES, sniff_diagram_type, validate_mermaid_source

__version__ = "0.1.0"

__all__ = [
    "BackendError",
    "BootstrapInjector",
    "BootstrapScriptGenerator",
    "ContainerRenderer",
    "ContainerState",
    "DIAGRAM_TYPES",
    "DiagramBlock",
    "DiagramContainer",
    "HtmlNormalizer",
    "MdMermaidConfig",
    "MermaidConfig",
    "RenderBackend",
    "RenderContext",
    "Transform",
    "TransformPipeline",
    "apply_styling",
    "create_markdown",
    "escape_html",
    "load_config",
    "mermaid_fence_rule",
    "mermaid_plugin",
    "normalize_html",
    "render_document",
    "render_markdown",
    "scan_document",
    "sniff_diagram_type",
    "strip_highlight_markup",
    "unescape_html",
    "validate_mermaid_source",
]
