"""Unit test specific configuration."""

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(clean_env):
    """Unit tests never see the developer's OLLAMA_* variables."""
    yield
