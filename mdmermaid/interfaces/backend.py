"""Rendering backend interface, its scoped context, and errors."""

from __future__ import annotations

import inspect
import shutil
import tempfile
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mdmermaid.config.models import MermaidConfig


class BackendError(Exception):
    """Wraps backend failures (missing tool, bad exit, timeout) with context."""

    def __init__(self, backend: str, diagram_id: str, cause: Exception | str) -> None:
        self.backend = backend
        self.diagram_id = diagram_id
        super().__init__(f"{backend} failed to render {diagram_id}: {cause}")
        if isinstance(cause, Exception):
            self.__cause__ = cause


class RenderContext:
    """Scratch space for a single backend call.

    Owns a temporary directory that exists only between ``__enter__`` and
    ``__exit__``; nothing survives into the next render.
    """

    def __init__(self, diagram_id: str) -> None:
        self.diagram_id = diagram_id
        self._workdir: Path | None = None

    @property
    def workdir(self) -> Path:
        if self._workdir is None:
            raise RuntimeError("RenderContext used outside of a with block")
        return self._workdir

    @property
    def active(self) -> bool:
        return self._workdir is not None

    def path_for(self, suffix: str) -> Path:
        return self.workdir / f"{self.diagram_id}{suffix}"

    def __enter__(self) -> RenderContext:
        self._workdir = Path(tempfile.mkdtemp(prefix=f"{self.diagram_id}-"))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._workdir is not None:
            shutil.rmtree(self._workdir, ignore_errors=True)
            self._workdir = None


@runtime_checkable
class RenderBackend(Protocol):
    """Turns diagram source into trusted artifact markup (e.g. inline SVG)."""

    name: str

    def available(self) -> bool: ...

    def render(
        self, diagram_id: str, source: str, config: MermaidConfig, context: RenderContext
    ) -> str: ...


def is_synchronous(backend: RenderBackend) -> bool:
    """True unless the backend's render is a coroutine function."""
    return not inspect.iscoroutinefunction(backend.render)
