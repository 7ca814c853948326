"""Shared pytest fixtures for LinkTree tests."""
import io
import os
import logging
from pathlib import Path
from typing import Dict, Optional

import pytest
import yaml

from linktree.infrastructure.logger import Logger, set_global_logger

HOLIDAYS: Dict[str, Dict[str, Optional[str]]] = {
    "christmas.txt": {"religion": "Christian", "date": "Dec25", "tradition": None},
    "hanukkah.txt": {"religion": "Jewish", "date": "Kislev25", "tradition": "Menorah"},
    "easter.txt": {"religion": "Christian", "date": "Spring", "tradition": "Eggs"},
}


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Create a storage root holding the holiday files."""
    root = tmp_path / "files"
    root.mkdir()
    for name in HOLIDAYS:
        (root / name).write_text(f"All about {name}")
    return root


@pytest.fixture
def link_root(tmp_path: Path) -> Path:
    """Directory under which link trees are built (not created up front)."""
    return tmp_path / "links"


@pytest.fixture
def holiday_metadata():
    """Metadata getter keyed by file base name."""

    def getter(path: str):
        return dict(HOLIDAYS.get(Path(path).name, {}))

    return getter


@pytest.fixture
def sidecar_root(tmp_path: Path) -> Path:
    """Storage root where each holiday file has a YAML sidecar."""
    root = tmp_path / "sidecars"
    root.mkdir()
    for name, metadata in HOLIDAYS.items():
        (root / name).write_text(f"All about {name}")
        with open(root / f"{name}.yaml", "w") as f:
            yaml.safe_dump({k: v for k, v in metadata.items() if v is not None}, f)
    return root


@pytest.fixture
def log_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(log_stream: io.StringIO) -> Logger:
    """Debug-level logger writing to an in-memory stream."""
    handler = logging.StreamHandler(log_stream)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    return Logger("linktree.test", level="DEBUG", handlers=[handler])


@pytest.fixture(autouse=True)
def reset_global_logger():
    """Keep a logger installed by one test from leaking into the next."""
    yield
    set_global_logger(None)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop LINKTREE_* variables so the host environment cannot leak in."""
    for key in list(os.environ):
        if key.startswith("LINKTREE_"):
            monkeypatch.delenv(key)
