"""YAML config loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import MdMermaidConfig

logger = logging.getLogger(__name__)

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")


def config_search_path(cli_path: str | None = None) -> list[Path]:
    """Candidate config files, highest precedence first."""
    paths = [Path("./mdmermaid.yaml"), Path.home() / ".mdmermaid" / "config.yaml"]
    if cli_path:
        paths.insert(0, Path(cli_path))
    return paths


def load_config(cli_path: str | None = None) -> MdMermaidConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults.

    An explicit ``cli_path`` that does not exist is skipped like the others.
    Empty files are skipped too.
    """
    for path in config_search_path(cli_path):
        if not path.exists():
            continue
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if raw is None:
            logger.debug("Skipping empty config file %s", path)
            continue
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid config in {path}: expected a mapping, got {type(raw).__name__}")
        try:
            config = MdMermaidConfig(**_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
        logger.debug("Loaded config from %s", path)
        return config

    logger.debug("No config file found, using defaults")
    return MdMermaidConfig()


def _expand_env_vars(obj: object) -> object:
    """Expand ${VAR} references in strings, recursively; unset variables become ''."""
    if isinstance(obj, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `mdmermaid config init`
DEFAULT_CONFIG_TEMPLATE = """\
# mdmermaid.yaml

# Diagram containers
mermaid:
  keyword: "mermaid"             # fence language tag / code class to match
  base_class: "mermaid"
  # customClass: "diagram wide"
  # customStyle: "text-align: center;"
  theme: "default"               # default | neutral | dark | forest | base
  securityLevel: "strict"
  # fontFamily: "Inter, sans-serif"
  # fontSize: 16
  includeScript: false           # per-block init script (Markdown path)
  appendBootstrap: true          # document-level script (HTML path)
  serverSide: false              # render with the backend below
  fallbackToClientSide: true
  highlight_class_prefix: "hljs"
  # flowchart:
  #   curve: "basis"
  # sequence:
  #   mirrorActors: false

# Server-side rendering
backend:
  provider: "mmdc"               # mmdc | none
  command: "mmdc"
  timeout: 30
  # extra_args: ["--puppeteerConfigFile", "puppeteer.json"]

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
