"""Shared fixtures: fake clock, resource file writer, environment isolation."""

import os
from pathlib import Path
from typing import Any, Callable, Dict, Generator

import pytest
import yaml

from layered_config import config as config_facade


class FakeClock:
    """Manually advanced wall clock returning seconds."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, milliseconds: float) -> None:
        self.now += milliseconds / 1000.0


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock for touchfile timing."""
    return FakeClock()


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, Dict[str, Any]], Path]:
    """Write a YAML resource into the temporary directory."""

    def _write(name: str, data: Dict[str, Any]) -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def touch() -> Callable[[Path, float], None]:
    """Create a file (if needed) and set its modification time."""

    def _touch(path: Path, mtime: float) -> None:
        path.touch(exist_ok=True)
        os.utime(path, (mtime, mtime))

    return _touch


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Remove bootstrap environment overrides and drop the process-wide holder."""
    for name in list(os.environ):
        if name.startswith("LAYERED_CONFIG_"):
            monkeypatch.delenv(name, raising=False)
    yield
    config_facade.install_holder(None)
