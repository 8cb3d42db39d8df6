from .loader import load_config
from .models import (
    DEFAULT_SCRIPT_SRC,
    THEMES,
    BackendConfig,
    MdMermaidConfig,
    MermaidConfig,
)

__all__ = [
    "BackendConfig",
    "DEFAULT_SCRIPT_SRC",
    "MdMermaidConfig",
    "MermaidConfig",
    "THEMES",
    "load_config",
]
