"""Pytest configuration for moonbundle tests."""

import logging
from pathlib import Path

import pytest

from moonbundle.logging_setup import JsonlHandler


class LuaProject:
    """A throwaway project directory that tests populate with Lua files."""

    def __init__(self, root: Path):
        self.root = root

    def write(self, relative: str, content: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path


@pytest.fixture
def lua_project(tmp_path, monkeypatch) -> LuaProject:
    """Empty project root, also made the working directory."""
    monkeypatch.chdir(tmp_path)
    return LuaProject(tmp_path)


@pytest.fixture(autouse=True)
def _drop_jsonl_handlers():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if isinstance(handler, JsonlHandler):
            root.removeHandler(handler)
            handler.close()
