"""Shared test fixtures for mdmermaid."""

import pytest
from unittest.mock import MagicMock

from mdmermaid.config.models import MdMermaidConfig, MermaidConfig
from mdmermaid.interfaces.backend import BackendError, RenderBackend
from mdmermaid.scanner import create_markdown


SAMPLE_ARTIFACT = '<svg id="diagram-svg"><g><text>A</text></g></svg>'


@pytest.fixture
def sample_config():
    return MdMermaidConfig()


@pytest.fixture
def mermaid_config():
    return MermaidConfig()


@pytest.fixture
def md():
    return create_markdown()


@pytest.fixture
def mock_backend():
    """A synchronous backend that always succeeds."""
    backend = MagicMock(spec=RenderBackend)
    backend.name = "mock"
    backend.available.return_value = True
    backend.render.return_value = SAMPLE_ARTIFACT
    return backend


@pytest.fixture
def failing_backend():
    backend = MagicMock(spec=RenderBackend)
    backend.name = "mock"
    backend.available.return_value = True
    backend.render.side_effect = RuntimeError("parse error on line 2")
    return backend


@pytest.fixture
def backend_error_backend():
    backend = MagicMock(spec=RenderBackend)
    backend.name = "mock"
    backend.available.return_value = True
    backend.render.side_effect = BackendError("mock", "mermaid-x", "exited 1: bad syntax")
    return backend
