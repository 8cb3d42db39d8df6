"""Container renderer: diagram source in, uniquely identified HTML fragment out."""

from __future__ import annotations

import inspect
import logging
import re

from mdmermaid.bootstrap import block_init_script
from mdmermaid.config.models import MermaidConfig
from mdmermaid.escape import escape_html
from mdmermaid.interfaces.backend import (
    BackendError,
    RenderBackend,
    RenderContext,
    is_synchronous,
)
from mdmermaid.models import ContainerState, DiagramContainer, new_diagram_id

logger = logging.getLogger(__name__)

ERROR_CLASS = "mermaid-error"
INVALID_SOURCE_MESSAGE = "Invalid Mermaid source"

_DIV_OPEN_RE = re.compile(r"<div\b[^>]*>", re.IGNORECASE)
_CLASS_ATTR_RE = re.compile(r'\sclass="([^"]*)"', re.IGNORECASE)
_STYLE_ATTR_RE = re.compile(r'\sstyle="[^"]*"', re.IGNORECASE)


def _custom_classes(config: MermaidConfig) -> list[str]:
    return config.custom_class.split()


class ContainerRenderer:
    """Builds diagram containers, optionally rendering them through a backend.

    The backend is injected once; a missing or asynchronous backend means
    every container stays in the pending (client-rendered) form.
    """

    def __init__(
        self, config: MermaidConfig | None = None, backend: RenderBackend | None = None
    ) -> None:
        self.config = config or MermaidConfig()
        self.backend = backend
        if backend is not None and not is_synchronous(backend):
            logger.warning(
                "Backend %s is asynchronous; diagrams will render client side",
                getattr(backend, "name", type(backend).__name__),
            )
            self.backend = None

    def render(self, source: object, *, standalone: bool = True) -> str:
        """Return the container fragment for ``source``.

        ``standalone`` marks a per-block render (Markdown path), where the
        per-container init script may be appended. Never raises for
        diagram-level failures.
        """
        container = self.build(source)
        html = container.to_html()
        if standalone and self.config.include_script and container.state is ContainerState.pending:
            html += block_init_script(container.id)
        return html

    def build(self, source: object) -> DiagramContainer:
        diagram_id = new_diagram_id(self.config.base_class)

        if not isinstance(source, str):
            logger.error("Expected diagram source as str, got %s", type(source).__name__)
            return self._container(
                diagram_id, escape_html(INVALID_SOURCE_MESSAGE), ContainerState.error
            )

        if self.config.server_side:
            try:
                artifact = self._render_with_backend(diagram_id, source)
            except BackendError as e:
                if not self.config.fallback_to_client_side:
                    logger.error("%s", e)
                    return self._error_container(diagram_id, source, str(e))
                logger.warning("%s; falling back to client-side rendering", e)
            else:
                return self._container(diagram_id, artifact, ContainerState.rendered)

        return self._container(diagram_id, escape_html(source), ContainerState.pending)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _render_with_backend(self, diagram_id: str, source: str) -> str:
        if self.backend is None:
            raise BackendError("backend", diagram_id, "no rendering backend configured")

        with RenderContext(diagram_id) as context:
            try:
                artifact = self.backend.render(diagram_id, source, self.config, context)
            except BackendError:
                raise
            except Exception as e:
                raise BackendError(self.backend.name, diagram_id, e) from e

        if inspect.isawaitable(artifact):
            # Coroutines are closed here, never awaited.
            close = getattr(artifact, "close", None)
            if callable(close):
                close()
            raise BackendError(self.backend.name, diagram_id, "backend returned an awaitable")
        if not isinstance(artifact, str):
            raise BackendError(
                self.backend.name,
                diagram_id,
                f"backend returned {type(artifact).__name__}, expected str",
            )
        return artifact

    def _error_container(self, diagram_id: str, source: str, message: str) -> DiagramContainer:
        content = (
            f'<pre class="{ERROR_CLASS}-message">{escape_html(message)}</pre>'
            f'<pre class="{ERROR_CLASS}-source">{escape_html(source)}</pre>'
        )
        return self._container(diagram_id, content, ContainerState.error)

    def _container(self, diagram_id: str, content: str, state: ContainerState) -> DiagramContainer:
        classes = [self.config.base_class, *_custom_classes(self.config)]
        if state is ContainerState.error:
            classes.append(ERROR_CLASS)
        return DiagramContainer(
            id=diagram_id,
            content=content,
            css_classes=classes,
            inline_style=self.config.custom_style or None,
            state=state,
        )


def apply_styling(html: str, config: MermaidConfig) -> str:
    """Add configured classes and style to every container opening tag.

    Containers are ``<div>`` elements whose class list includes the base
    class. Classes already present are not repeated and an existing style
    attribute is left alone, so applying twice equals applying once.
    """
    extra_classes = _custom_classes(config)
    if not extra_classes and not config.custom_style:
        return html

    def _restyle(m: re.Match) -> str:
        tag = m.group(0)
        class_match = _CLASS_ATTR_RE.search(tag)
        if class_match is None:
            return tag
        classes = class_match.group(1).split()
        if config.base_class not in classes:
            return tag

        missing = [c for c in extra_classes if c not in classes]
        if missing:
            merged = " ".join([*classes, *(escape_html(c) for c in missing)])
            tag = tag[: class_match.start(1)] + merged + tag[class_match.end(1):]
        if config.custom_style and not _STYLE_ATTR_RE.search(tag):
            tag = f'{tag[:-1]} style="{escape_html(config.custom_style)}">'
        return tag

    return _DIV_OPEN_RE.sub(_restyle, html)
