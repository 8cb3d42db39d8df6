"""Rewrites rendered ``<pre><code>`` diagram blocks into diagram containers.

Input is HTML produced by a known upstream renderer, so the wrapper is
located with fixed regular expressions rather than an HTML parser. Two
shapes are recognized, both matched non-greedily so adjacent blocks never
merge::

    <pre><code class="language-mermaid">...</code></pre>   (markdown-it, highlight.js)
    <pre class="mermaid"><code>...</code></pre>           (pandoc)

The class attribute may be single- or double-quoted and may carry other
tokens (``hljs language-mermaid``); the keyword
comparison is case-insensitive.
"""

from __future__ import annotations

import logging
import re

from mdmermaid.bootstrap import BootstrapInjector
from mdmermaid.config.models import MermaidConfig
from mdmermaid.escape import strip_highlight_markup, unescape_html
from mdmermaid.pipeline import Transform, TransformPipeline
from mdmermaid.renderer import ContainerRenderer, apply_styling

logger = logging.getLogger(__name__)


def _class_with(keyword: str) -> str:
    """A class attribute holding ``keyword`` or ``language-keyword`` as a token."""
    token = r"(?:language-|lang-)?" + re.escape(keyword)
    return (
        r"\bclass=(?:"
        + r"\"(?:[^\"]*\s)?" + token + r"(?:\s[^\"]*)?\""
        + r"|'(?:[^']*\s)?" + token + r"(?:\s[^']*)?'"
        + r")"
    )


def wrapper_pattern(keyword: str) -> re.Pattern[str]:
    class_attr = _class_with(keyword)
    code_classed = (
        r"<pre\b[^>]*>\s*<code\b[^>]*" + class_attr + r"[^>]*>(.*?)</code>\s*</pre>"
    )
    pre_classed = (
        r"<pre\b[^>]*" + class_attr + r"[^>]*>\s*<code\b[^>]*>(.*?)</code>\s*</pre>"
    )
    return re.compile(f"{code_classed}|{pre_classed}", re.DOTALL | re.IGNORECASE)


def recover_source(inner_html: str, highlight_prefix: str = "hljs") -> str:
    """Turn the inner HTML of a code element back into diagram source.

    Highlighting spans go first, since their text is still entity-encoded.
    """
    return unescape_html(strip_highlight_markup(inner_html, highlight_prefix)).strip()


class HtmlNormalizer(Transform):
    """Replaces every diagram code block with a container fragment.

    Sets ``metadata["mermaid_count"]`` to the number of blocks replaced.
    """

    def __init__(
        self, config: MermaidConfig | None = None, renderer: ContainerRenderer | None = None
    ) -> None:
        self.renderer = renderer or ContainerRenderer(config)
        self.config = self.renderer.config
        self._pattern = wrapper_pattern(self.config.keyword)

    def apply(self, content: str, metadata: dict) -> str:
        count = 0

        def _replace(m: re.Match) -> str:
            nonlocal count
            count += 1
            inner = m.group(1) if m.group(1) is not None else m.group(2)
            source = recover_source(inner, self.config.highlight_class_prefix)
            return self.renderer.render(source, standalone=False)

        result = self._pattern.sub(_replace, content)
        # Containers that were already in the document get the same styling.
        result = apply_styling(result, self.config)

        logger.debug("Normalized %d %s block(s)", count, self.config.keyword)
        metadata["mermaid_count"] = metadata.get("mermaid_count", 0) + count
        return result


def normalize_html(
    html: str,
    config: MermaidConfig | None = None,
    renderer: ContainerRenderer | None = None,
) -> str:
    """Normalize diagram blocks in ``html`` and append the bootstrap script once."""
    normalizer = HtmlNormalizer(config, renderer)
    pipeline = TransformPipeline([normalizer, BootstrapInjector(normalizer.config)])
    return pipeline.apply(html, {})
