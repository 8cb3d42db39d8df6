"""HTML entity codec and highlighting-markup stripper for diagram source."""

from __future__ import annotations

import re

_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}

_ESCAPE_RE = re.compile(r"[&<>\"']")

# &amp; must come last, otherwise "&amp;lt;" would decode twice.
_UNESCAPES: tuple[tuple[str, str], ...] = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&#x27;", "'"),
    ("&amp;", "&"),
)


def escape_html(text: str) -> str:
    """Escape the five HTML-significant characters."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(0)], text)


def unescape_html(text: str) -> str:
    """Reverse escape_html (also accepts the &#x27; form for apostrophes)."""
    for entity, char in _UNESCAPES:
        text = text.replace(entity, char)
    return text


_SPAN_TAG_RE = re.compile(r"<span\b[^>]*>|</span\s*>", re.IGNORECASE)
_CLASS_VALUE_RE = re.compile(r"""\bclass\s*=\s*(?:"([^"]*)"|'([^']*)')""", re.IGNORECASE)


def _is_highlight_span(tag: str, prefix: str) -> bool:
    m = _CLASS_VALUE_RE.search(tag)
    if m is None:
        return False
    classes = (m.group(1) if m.group(1) is not None else m.group(2)).split()
    return any(name.startswith(prefix) for name in classes)


def strip_highlight_markup(html: str, prefix: str = "hljs") -> str:
    """Remove highlighting <span> wrappers whose class starts with ``prefix``.

    Span open and close tags are paired by depth, so a highlighting span is
    unwrapped at any nesting level, including around spans it keeps. Other
    spans and all text (still entity-encoded) are left as they are.
    """
    out: list[str] = []
    open_spans: list[bool] = []
    pos = 0
    for m in _SPAN_TAG_RE.finditer(html):
        out.append(html[pos:m.start()])
        pos = m.end()
        tag = m.group(0)
        if tag[1] != "/":
            highlight = _is_highlight_span(tag, prefix)
            open_spans.append(highlight)
            if not highlight:
                out.append(tag)
        elif not open_spans or not open_spans.pop():
            # Closes a kept span, or a stray close tag.
            out.append(tag)
    out.append(html[pos:])
    return "".join(out)
