"""Interfaces for pluggable diagram rendering backends."""

from mdmermaid.interfaces.backend import (
    BackendError,
    RenderBackend,
    RenderContext,
    is_synchronous,
)

__all__ = [
    "BackendError",
    "RenderBackend",
    "RenderContext",
    "is_synchronous",
]
