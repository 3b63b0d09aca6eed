"""Every source module under ``rec_trends/`` must compile."""

from __future__ import annotations

from pathlib import Path

import pytest

_PACKAGE_DIR = Path(__file__).resolve().parents[2] / "rec_trends"
_MODULES = sorted(_PACKAGE_DIR.rglob("*.py"))


def test_modules_found():
    assert len(_MODULES) > 10


@pytest.mark.parametrize("path", _MODULES, ids=lambda p: str(p.relative_to(_PACKAGE_DIR)))
def test_module_compiles(path):
    compile(path.read_text(encoding="utf-8"), str(path), "exec")
