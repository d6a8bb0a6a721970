from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))


@pytest.fixture(autouse=True)
def _no_env_leaks(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep KARAMBA_* settings from the developer's shell out of the tests."""
    monkeypatch.delenv("KARAMBA_DEBUG_PY_TRACE", raising=False)
    monkeypatch.delenv("KARAMBA_LOG_LEVEL", raising=False)
