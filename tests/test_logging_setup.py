"""Tests for the JSONL logging sink."""

import json
import logging

from moonbundle.logging_setup import LOG_LEVEL_ENV
from moonbundle.logging_setup import LOG_PATH_ENV
from moonbundle.logging_setup import JsonlHandler
from moonbundle.logging_setup import init_json_logging


def _make_record(msg, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="moonbundle.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonlHandler:
    def test_writes_one_object_per_line(self, tmp_path):
        handler = JsonlHandler(tmp_path / "nested" / "log.jsonl")
        handler.emit(_make_record("first"))
        handler.emit(_make_record("second", module_name="menu"))

        lines = (tmp_path / "nested" / "log.jsonl").read_text(encoding="utf-8").splitlines()
        records = [json.loads(line) for line in lines]

        assert [r["message"] for r in records] == ["first", "second"]
        assert records[1]["module_name"] == "menu"
        assert records[0]["lvl"] == "INFO"
        assert records[0]["logger"] == "moonbundle.test"
        assert "lineno" not in records[0]

    def test_dict_messages_are_merged(self, tmp_path):
        handler = JsonlHandler(tmp_path / "log.jsonl")
        handler.emit(_make_record({"event": "bundle", "modules": 3}))

        record = json.loads((tmp_path / "log.jsonl").read_text(encoding="utf-8"))
        assert record["event"] == "bundle"
        assert record["modules"] == 3


class TestInitJsonLogging:
    def test_disabled_without_path(self, monkeypatch):
        monkeypatch.delenv(LOG_PATH_ENV, raising=False)
        assert init_json_logging() is None

    def test_path_from_environment(self, tmp_path, monkeypatch):
        log_path = tmp_path / "env.jsonl"
        monkeypatch.setenv(LOG_PATH_ENV, str(log_path))
        monkeypatch.setenv(LOG_LEVEL_ENV, "debug")

        handler = init_json_logging()

        assert handler is not None
        assert handler.path == log_path
        assert logging.getLogger().level == logging.DEBUG

    def test_reinit_replaces_handler(self, tmp_path):
        first = init_json_logging(tmp_path / "a.jsonl")
        second = init_json_logging(tmp_path / "b.jsonl")

        handlers = [h for h in logging.getLogger().handlers if isinstance(h, JsonlHandler)]
        assert handlers == [second]
        assert first is not second
