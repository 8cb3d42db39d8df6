"""Pydantic models for diagram blocks and the containers rendered from them."""

from __future__ import annotations

import re
import uuid
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mdmermaid.escape import escape_html

if TYPE_CHECKING:
    from markdown_it.token import Token

DIAGRAM_ID_RE = re.compile(r"^[A-Za-z][\w-]*-[0-9a-f]{8}-[0-9a-f]{12}$")


def new_diagram_id(prefix: str = "mermaid") -> str:
    """Return a fresh container id, e.g. ``mermaid-1f0c9a2b-6d1e4c3b9a7f``.

    Built from uuid4 so concurrent renders share no counter.
    """
    hex_id = uuid.uuid4().hex
    return f"{prefix}-{hex_id[:8]}-{hex_id[8:20]}"


class ContainerState(str, Enum):
    """Whether a container holds escaped source, backend output, or an error."""

    pending = "pending"
    rendered = "rendered"
    error = "error"


class DiagramBlock(BaseModel):
    """A fenced diagram recognized by the scanner."""

    model_config = ConfigDict(frozen=True)

    raw_content: str
    source_span: tuple[int, int]
    nesting_level: int = 0
    info: str = ""

    @field_validator("source_span")
    @classmethod
    def _ordered_span(cls, value: tuple[int, int]) -> tuple[int, int]:
        start, end = value
        if start < 0 or end <= start:
            raise ValueError(f"source_span must be a non-empty range, got {value}")
        return value

    @classmethod
    def from_token(cls, token: Token) -> DiagramBlock:
        start, end = token.map or (0, 1)
        return cls(
            raw_content=token.content,
            source_span=(start, end),
            nesting_level=token.level,
            info=token.info,
        )


class DiagramContainer(BaseModel):
    """The canonical ``<div>`` wrapper for one diagram."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: str = ""
    css_classes: list[str] = Field(default_factory=lambda: ["mermaid"])
    inline_style: str | None = None
    state: ContainerState = ContainerState.pending

    @field_validator("css_classes")
    @classmethod
    def _dedupe_classes(cls, value: list[str]) -> list[str]:
        seen: list[str] = []
        for name in value:
            if name and name not in seen:
                seen.append(name)
        if not seen:
            raise ValueError("css_classes must contain the base marker class")
        return seen

    @model_validator(mode="after")
    def _pending_content_is_escaped(self) -> DiagramContainer:
        if self.state is ContainerState.pending and ("<" in self.content or ">" in self.content):
            raise ValueError("pending container content must be HTML-escaped")
        return self

    def to_html(self) -> str:
        attrs = f' class="{escape_html(" ".join(self.css_classes))}" id="{escape_html(self.id)}"'
        if self.inline_style:
            attrs += f' style="{escape_html(self.inline_style)}"'
        if self.state is not ContainerState.pending:
            # Keeps the bootstrap script away from finished containers.
            attrs += ' data-processed="true"'
        return f"<div{attrs}>{self.content}</div>"
