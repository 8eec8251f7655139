"""Shared pytest configuration for stencil examples.

``example_app`` executes the ``app.py`` next to the requesting test in a
fresh module namespace, so every test starts with a new Environment.
``example_stdout`` runs that module's ``main()`` and returns what it printed.
"""

import importlib.util
from collections.abc import Callable
from pathlib import Path
from types import ModuleType

import pytest


def _load_app(test_path: Path) -> ModuleType:
    app_path = test_path.parent / "app.py"
    spec = importlib.util.spec_from_file_location(f"example_{app_path.parent.name}", app_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> ModuleType:
    """A freshly executed copy of the sibling app.py."""
    return _load_app(Path(request.path))


@pytest.fixture
def example_stdout(
    example_app: ModuleType,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., str]:
    """Call ``main()`` with the given argv tail and return its stdout."""

    def run(*argv: str) -> str:
        monkeypatch.setattr("sys.argv", ["app.py", *argv])
        capsys.readouterr()
        example_app.main()
        return capsys.readouterr().out

    return run
