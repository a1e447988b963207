"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from dropctl.core.dispatcher import Dispatcher
from dropctl.store.holding import HoldingStore

# Fixed drop time used by the dispatcher fixture (2023-11-14 22:13:20 UTC)
FIXED_NOW = 1_700_000_000


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from the real config directory and environment overrides."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.delenv("DROPCTL_HOLDING_DIR", raising=False)


@pytest.fixture
def holding_dir(tmp_path: Path) -> Path:
    """Path of a holding directory that does not exist yet."""
    return tmp_path / "holding"


@pytest.fixture
def store(holding_dir: Path) -> HoldingStore:
    """A created, empty holding store."""
    holding = HoldingStore(holding_dir)
    holding.ensure_exists()
    return holding


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Directory holding the files that tests drop."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def dispatcher(store: HoldingStore, workdir: Path) -> Dispatcher:
    """Dispatcher with a frozen clock, resolving relative paths against workdir."""
    return Dispatcher(store, clock=lambda: FIXED_NOW, cwd=workdir)
