"""Client-side bootstrap script that renders pending diagram containers.

The script is emitted as text and never executed here. It waits for the
Mermaid library and the DOM, then renders every container that is not yet
marked ``data-processed``, one at a time.
"""

from __future__ import annotations

import json
import logging
import re

from mdmermaid.config.models import MermaidConfig
from mdmermaid.escape import escape_html
from mdmermaid.pipeline import Transform
from mdmermaid.validator import DIAGRAM_TYPES

logger = logging.getLogger(__name__)

_BODY_CLOSE_RE = re.compile(r"</body\s*>", re.IGNORECASE)

# Polling budget while waiting for window.mermaid (about 10 seconds).
_POLL_ATTEMPTS = 100
_POLL_INTERVAL_MS = 100


def _js_literal(value: object) -> str:
    """JSON-encode for embedding inside a <script> element."""
    return json.dumps(value).replace("</", "<\\/")


class BootstrapScriptGenerator:
    def __init__(self, config: MermaidConfig | None = None) -> None:
        self.config = config or MermaidConfig()

    def generate(self) -> str:
        """Library loader tag plus the inline bootstrap routine."""
        parts = []
        if self.config.script_src:
            parts.append(f'<script src="{escape_html(self.config.script_src)}"></script>')
        parts.append(f"<script>\n{self.generate_source()}\n</script>")
        return "\n".join(parts)

    def generate_source(self) -> str:
        options = _js_literal(self.config.mermaid_options())
        diagram_types = _js_literal(list(DIAGRAM_TYPES))
        selector = _js_literal(f".{self.config.base_class}:not([data-processed])")
        return f"""\
(function () {{
  "use strict";
  var OPTIONS = {options};
  var DIAGRAM_TYPES = {diagram_types};
  var SELECTOR = {selector};
  var POLL_ATTEMPTS = {_POLL_ATTEMPTS};
  var POLL_INTERVAL_MS = {_POLL_INTERVAL_MS};
  var queue = Promise.resolve();
  var counter = 0;

  function escapeHtml(text) {{
    return String(text)
      .replace(/&/g, "&amp;")
      .replace(/</g, "&lt;")
      .replace(/>/g, "&gt;")
      .replace(/"/g, "&quot;")
      .replace(/'/g, "&#39;");
  }}

  function looksLikeDiagram(text) {{
    var lowered = text.toLowerCase();
    return DIAGRAM_TYPES.some(function (type) {{
      return lowered.indexOf(type.toLowerCase()) !== -1;
    }});
  }}

  function waitForMermaid() {{
    return new Promise(function (resolve, reject) {{
      var attempts = 0;
      (function poll() {{
        if (window.mermaid && typeof window.mermaid.render === "function") {{
          resolve(window.mermaid);
        }} else if (++attempts >= POLL_ATTEMPTS) {{
          reject(new Error("Mermaid library did not load"));
        }} else {{
          setTimeout(poll, POLL_INTERVAL_MS);
        }}
      }})();
    }});
  }}

  function waitForDocument() {{
    if (document.readyState !== "loading") {{
      return Promise.resolve();
    }}
    return new Promise(function (resolve) {{
      document.addEventListener("DOMContentLoaded", resolve, {{ once: true }});
    }});
  }}

  async function renderContainer(mermaid, el) {{
    if (!el.dataset.mermaidSource) {{
      el.dataset.mermaidSource = el.textContent.trim();
    }}
    var source = el.dataset.mermaidSource;
    if (!looksLikeDiagram(source)) {{
      return;
    }}
    if (!el.id) {{
      el.id = "mermaid-client-" + (++counter);
    }}
    var renderId = el.id + "-svg";
    try {{
      var result = await mermaid.render(renderId, source);
      el.innerHTML = result.svg;
      if (typeof result.bindFunctions === "function") {{
        result.bindFunctions(el);
      }}
      el.setAttribute("data-processed", "true");
    }} catch (err) {{
      var stray = document.getElementById("d" + renderId);
      if (stray) {{
        stray.remove();
      }}
      el.innerHTML = '<pre class="mermaid-error">Mermaid render failed: ' +
        escapeHtml(err && err.message ? err.message : err) + "</pre>";
      if (window.console) {{
        console.error("mermaid render failed for #" + el.id, err);
      }}
    }}
  }}

  async function renderPending() {{
    var mermaid = await waitForMermaid();
    await waitForDocument();
    if (!window.__mdmermaidInitialized) {{
      mermaid.initialize(OPTIONS);
      window.__mdmermaidInitialized = true;
    }}
    var nodes = Array.prototype.slice.call(document.querySelectorAll(SELECTOR));
    for (var i = 0; i < nodes.length; i++) {{
      await renderContainer(mermaid, nodes[i]);
    }}
  }}

  function run() {{
    queue = queue.then(renderPending).catch(function (err) {{
      if (window.console) {{
        console.error(err);
      }}
    }});
    return queue;
  }}

  window.mdmermaidRun = run;
  run();
}})();"""


def block_init_script(diagram_id: str) -> str:
    """Per-container snippet appended after a standalone render."""
    target = _js_literal(diagram_id)
    return f"""
<script>
if (typeof mermaid !== 'undefined') {{
  (function (el) {{
    if (!el || el.getAttribute('data-processed')) {{ return; }}
    if (typeof mermaid.run === 'function') {{
      mermaid.run({{ nodes: [el] }});
    }} else {{
      mermaid.init(undefined, el);
    }}
  }})(document.getElementById({target}));
}}
</script>"""


class BootstrapInjector(Transform):
    """Appends the bootstrap script once per document.

    Runs after the transforms that produce containers and only fires when
    ``metadata["mermaid_count"]`` says at least one was produced. The script
    goes before ``</body>`` when the document has one, else at the end.
    """

    def __init__(self, config: MermaidConfig | None = None) -> None:
        self.generator = BootstrapScriptGenerator(config)

    def apply(self, content: str, metadata: dict) -> str:
        if not self.generator.config.append_bootstrap or not metadata.get("mermaid_count"):
            return content

        script = self.generator.generate()
        matches = list(_BODY_CLOSE_RE.finditer(content))
        if not matches:
            return f"{content.rstrip()}\n{script}\n"
        pos = matches[-1].start()
        logger.debug("Injecting bootstrap script before </body>")
        return f"{content[:pos]}{script}\n{content[pos:]}"
