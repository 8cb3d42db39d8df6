"""TransformPipeline: runs ordered string transforms over a rendered document."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Transform(ABC):
    """One rewrite step. Steps talk to later steps only through ``metadata``."""

    @abstractmethod
    def apply(self, content: str, metadata: dict) -> str:
        ...


class TransformPipeline:
    def __init__(self, transforms: list[Transform]):
        self.transforms = list(transforms)

    def apply(self, content: str, metadata: dict | None = None) -> str:
        """Run each transform in order; ``metadata`` is shared and mutated in place."""
        metadata = {} if metadata is None else metadata
        for transform in self.transforms:
            content = transform.apply(content, metadata)
            logger.debug("%s done, metadata=%r", type(transform).__name__, metadata)
        return content
