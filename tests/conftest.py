from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


TreeWriter = Callable[[Path, Dict[str, str]], Path]


def _write_tree(base: Path, files: Dict[str, str]) -> Path:
    for relative, content in files.items():
        target = base / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content.encode("utf-8"))
    return base


@pytest.fixture()
def write_tree() -> TreeWriter:
    return _write_tree


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DOCBLOCKS_JOBS", raising=False)
    monkeypatch.delenv("DOCBLOCKS_LOG_LEVEL", raising=False)
