"""Server-side rendering by shelling out to mermaid-cli (``mmdc``)."""

from __future__ import annotations

import json
import logging
import re
import shutil
import subprocess
from typing import TYPE_CHECKING

from mdmermaid.config.models import BackendConfig
from mdmermaid.interfaces.backend import BackendError, RenderContext

if TYPE_CHECKING:
    from mdmermaid.config.models import MermaidConfig

logger = logging.getLogger(__name__)

_XML_PROLOG_RE = re.compile(r"^\s*<\?xml[^>]*\?>\s*", re.IGNORECASE)


class MmdcBackend:
    """Renders one diagram per ``mmdc`` invocation into inline SVG markup."""

    name = "mmdc"

    def __init__(self, config: BackendConfig | None = None) -> None:
        self.config = config or BackendConfig()
        self._executable: str | None = None
        self._searched = False

    def available(self) -> bool:
        """Whether the configured command resolves on PATH (looked up once)."""
        if not self._searched:
            self._searched = True
            self._executable = shutil.which(self.config.command)
            if self._executable is None:
                logger.debug("%s not found on PATH", self.config.command)
        return self._executable is not None

    def render(
        self, diagram_id: str, source: str, config: MermaidConfig, context: RenderContext
    ) -> str:
        if not self.available():
            raise BackendError(self.name, diagram_id, f"{self.config.command} not found")

        input_path = context.path_for(".mmd")
        output_path = context.path_for(f".{self.config.output_format}")
        config_path = context.path_for(".json")
        input_path.write_text(source, encoding="utf-8")
        config_path.write_text(json.dumps(config.mermaid_options()), encoding="utf-8")

        cmd = [
            self._executable,
            "-i", str(input_path),
            "-o", str(output_path),
            "-t", config.theme,
            "-c", str(config_path),
            "-b", "transparent",
            "-I", f"{diagram_id}-svg",
            *self.config.extra_args,
        ]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
            )
        except FileNotFoundError as e:
            raise BackendError(self.name, diagram_id, e) from e
        except subprocess.TimeoutExpired as e:
            raise BackendError(self.name, diagram_id, e) from e

        if result.returncode != 0:
            raise BackendError(
                self.name,
                diagram_id,
                f"exited {result.returncode}: {result.stderr.strip()[:200]}",
            )
        if not output_path.exists():
            raise BackendError(self.name, diagram_id, "no output file produced")

        svg = output_path.read_text(encoding="utf-8")
        return _XML_PROLOG_RE.sub("", svg, count=1)
