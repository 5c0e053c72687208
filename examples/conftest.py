"""Shared pytest configuration for ron examples.

``example_engine`` loads a fresh Engine from the ``app.py`` next to the
test file, so every test starts from clean module state.
"""

import importlib.util
from pathlib import Path

import pytest


@pytest.fixture
def example_engine(request: pytest.FixtureRequest):
    app_path = Path(request.path).parent / "app.py"
    spec = importlib.util.spec_from_file_location(f"example_{app_path.parent.name}", app_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.engine
