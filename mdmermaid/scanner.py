"""markdown-it-py block rule that turns ```mermaid fences into diagram tokens.

The rule is registered before the stock ``fence`` rule so it gets first
refusal on every fenced block. Anything it declines, including a fence that
never closes, falls through to ``fence`` and renders as a plain code block.
"""

from __future__ import annotations

import logging
from typing import Any

from markdown_it import MarkdownIt
from markdown_it.rules_block import StateBlock
from markdown_it.token import Token

from mdmermaid.config.models import MermaidConfig
from mdmermaid.interfaces.backend import RenderBackend
from mdmermaid.models import DiagramBlock
from mdmermaid.renderer import ContainerRenderer

logger = logging.getLogger(__name__)

FENCE_MARKER = "```"
TOKEN_TYPE = "mermaid"

# Block rules a fence may interrupt, same as markdown-it's own fence rule.
_ALT_RULES = ["paragraph", "reference", "blockquote", "list"]


def _is_marker_line(state: StateBlock, line: int) -> bool:
    pos = state.bMarks[line] + state.tShift[line]
    return pos + len(FENCE_MARKER) <= state.eMarks[line] and state.src.startswith(FENCE_MARKER, pos)


def _read_info(state: StateBlock, line: int) -> str:
    """Language tag after the opening marker, up to the next whitespace."""
    pos = state.bMarks[line] + state.tShift[line] + len(FENCE_MARKER)
    maximum = state.eMarks[line]
    src = state.src

    while pos < maximum and src[pos] in " \t":
        pos += 1
    start = pos
    while pos < maximum and not src[pos].isspace():
        pos += 1
    return src[start:pos]


def _find_closing_line(state: StateBlock, start_line: int, end_line: int) -> int | None:
    next_line = start_line
    while True:
        next_line += 1
        if next_line >= end_line:
            return None

        is_marker = _is_marker_line(state, next_line)
        pos = state.bMarks[next_line] + state.tShift[next_line]
        dedented = pos < state.eMarks[next_line] and state.sCount[next_line] < state.blkIndent
        if dedented and not is_marker:
            # The enclosing block (list item, blockquote...) ended first.
            return None
        if is_marker:
            return next_line


def mermaid_fence_rule(
    state: StateBlock, start_line: int, end_line: int, silent: bool, keyword: str = "mermaid"
) -> bool:
    if state.sCount[start_line] - state.blkIndent >= 4:
        return False
    if not _is_marker_line(state, start_line):
        return False

    info = _read_info(state, start_line)
    if info.lower() != keyword.lower():
        return False

    close_line = _find_closing_line(state, start_line, end_line)
    if close_line is None:
        logger.debug("Unterminated %s fence at line %d, leaving it to 'fence'", keyword, start_line)
        return False

    if silent:
        return True

    content = state.getLines(start_line + 1, close_line, state.sCount[start_line], True).strip()
    state.line = close_line + 1

    token = state.push(TOKEN_TYPE, "div", 0)
    token.info = info
    token.content = content
    token.markup = FENCE_MARKER
    token.map = [start_line, state.line]
    return True


def mermaid_plugin(
    md: MarkdownIt,
    config: MermaidConfig | None = None,
    renderer: ContainerRenderer | None = None,
) -> None:
    """Register the diagram fence rule and its renderer on ``md``.

    Usage: ``MarkdownIt().use(mermaid_plugin, config=MermaidConfig(theme="dark"))``
    """
    if renderer is None:
        renderer = ContainerRenderer(config)
    keyword = renderer.config.keyword

    def _rule(state: StateBlock, start_line: int, end_line: int, silent: bool) -> bool:
        return mermaid_fence_rule(state, start_line, end_line, silent, keyword=keyword)

    def _render(tokens: list[Token], idx: int, options: Any, env: Any) -> str:
        # `env` lets callers count diagrams, e.g. to append one bootstrap script.
        if isinstance(env, dict):
            env["mermaid_count"] = int(env.get("mermaid_count", 0)) + 1
        return renderer.render(tokens[idx].content) + "\n"

    md.block.ruler.before("fence", TOKEN_TYPE, _rule, {"alt": _ALT_RULES})
    md.renderer.rules[TOKEN_TYPE] = _render


def create_markdown(
    config: MermaidConfig | None = None,
    backend: RenderBackend | None = None,
) -> MarkdownIt:
    """A CommonMark parser (tables enabled) with the diagram plugin applied."""
    md = MarkdownIt("commonmark").enable("table")
    md.use(mermaid_plugin, renderer=ContainerRenderer(config, backend))
    return md


def scan_document(text: str, config: MermaidConfig | None = None) -> list[DiagramBlock]:
    """Return every diagram block in ``text``, in document order."""
    md = create_markdown(config)
    return [DiagramBlock.from_token(t) for t in md.parse(text) if t.type == TOKEN_TYPE]
