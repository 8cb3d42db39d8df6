"""Server-side rendering backends."""

import logging

from mdmermaid.backends.mmdc import MmdcBackend
from mdmermaid.config.models import BackendConfig
from mdmermaid.interfaces.backend import RenderBackend

logger = logging.getLogger(__name__)

_BACKEND_MAP: dict[str, type] = {
    "mmdc": MmdcBackend,
}


def create_backend(config: BackendConfig) -> RenderBackend | None:
    """Build the configured backend, or None when it is disabled or missing.

    Availability is probed here, once, so the render path never has to.
    """
    if config.provider == "none":
        return None

    cls = _BACKEND_MAP.get(config.provider)
    if cls is None:
        raise ValueError(
            f"Unsupported backend: {config.provider!r}. "
            f"Supported: {', '.join(_BACKEND_MAP)}"
        )

    backend = cls(config)
    if not backend.available():
        logger.warning("Backend %s unavailable, diagrams will render client side", config.provider)
        return None
    return backend


__all__ = ["MmdcBackend", "create_backend"]
