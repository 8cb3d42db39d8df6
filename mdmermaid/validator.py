"""Coarse classification of diagram source by its leading type keyword.

This is a content sniff only; Mermaid grammar is never parsed here.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DIAGRAM_TYPES: tuple[str, ...] = (
    "graph",
    "flowchart",
    "sequenceDiagram",
    "classDiagram",
    "stateDiagram",
    "erDiagram",
    "journey",
    "gantt",
    "pie",
    "gitgraph",
    "mindmap",
    "timeline",
    "requirement",
)


class ValidationResult(BaseModel):
    """Result of sniffing one diagram's source."""

    valid: bool = True
    diagram_type: str | None = None
    errors: list[str] = Field(default_factory=list)


def _first_statement(source: str) -> str:
    """First line that is neither blank nor a ``%%`` comment/directive."""
    for line in source.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("%%"):
            return stripped
    return ""


def sniff_diagram_type(source: str) -> str | None:
    """Return the catalog keyword the source starts with, if any."""
    head = _first_statement(source).lower()
    for diagram_type in DIAGRAM_TYPES:
        if head.startswith(diagram_type.lower()):
            return diagram_type
    return None


def mentions_diagram_type(source: str) -> bool:
    """Case-insensitive substring check, the same test the bootstrap script runs."""
    lowered = source.lower()
    return any(t.lower() in lowered for t in DIAGRAM_TYPES)


def validate_mermaid_source(source: object) -> ValidationResult:
    """Report empty content or a missing/unknown diagram type."""
    result = ValidationResult()

    if not isinstance(source, str) or not source:
        result.valid = False
        result.errors.append("Empty or invalid source")
        return result

    if not source.strip():
        result.errors.append("Empty diagram content")

    result.diagram_type = sniff_diagram_type(source)
    if result.diagram_type is None:
        result.errors.append("Unknown or missing diagram type")

    result.valid = not result.errors
    if not result.valid:
        logger.debug("Diagram source failed validation: %s", "; ".join(result.errors))
    return result
