import json
import logging
from enum import Enum, StrEnum
from pathlib import Path

import pytest
import structlog

from shared.logging import LOG_FILE_NAME, enum_values, log_level_from_env, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Close the handlers a test installed and put the root level back."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture(autouse=True)
def _default_env(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_FORMAT", raising=False)


def _json_lines(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestSetupLogging:
    def test_console_only_without_log_dir(self):
        assert setup_logging() is None
        root = logging.getLogger()

        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)

    def test_log_dir_gets_fixed_file_name(self, tmp_path):
        log_path = setup_logging(log_dir=tmp_path / "nested" / "abacus")

        assert log_path == tmp_path / "nested" / "abacus" / LOG_FILE_NAME
        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        assert [Path(h.baseFilename) for h in file_handlers] == [log_path]

    def test_runs_append_to_the_same_file(self, tmp_path):
        first = setup_logging(log_dir=tmp_path)
        structlog.get_logger("test.append").info("first run")
        second = setup_logging(log_dir=tmp_path)
        structlog.get_logger("test.append").info("second run")

        assert first == second
        assert [line["event"] for line in _json_lines(second)] == ["first run", "second run"]

    def test_file_is_json_even_with_console_format(self, tmp_path, monkeypatch):
        class _Mode(StrEnum):
            PAIRS = "pairs2"

        monkeypatch.setenv("LOG_FORMAT", "console")
        log_path = setup_logging(log_dir=tmp_path)

        structlog.contextvars.bind_contextvars(match_mode=_Mode.PAIRS)
        structlog.get_logger("test.json").info("match configured", entrants=2, modes=[_Mode.PAIRS])
        structlog.contextvars.clear_contextvars()

        [parsed] = _json_lines(log_path)
        assert parsed["event"] == "match configured"
        assert parsed["match_mode"] == "pairs2"
        assert parsed["modes"] == ["pairs2"]
        assert parsed["entrants"] == 2
        assert parsed["level"] == "info"

    def test_repeated_calls_replace_handlers(self, tmp_path):
        setup_logging(log_dir=tmp_path)
        setup_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_silences_asyncio_debug_output(self):
        setup_logging(level=logging.DEBUG)

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("asyncio").level == logging.WARNING

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        setup_logging()

        assert logging.getLogger().level == logging.WARNING

    @pytest.mark.parametrize("value", ["chatty", "notset"])
    def test_invalid_log_level_raises(self, monkeypatch, value):
        monkeypatch.setenv("LOG_LEVEL", value)
        with pytest.raises(ValueError, match="Invalid LOG_LEVEL"):
            log_level_from_env()

    def test_invalid_log_format_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "xml")
        with pytest.raises(ValueError, match="Invalid LOG_FORMAT"):
            setup_logging()


class TestEnumValues:
    class _Color(Enum):
        RED = "red"
        BLUE = "blue"

    def test_replaces_enum_with_value(self):
        result = enum_values(None, "", {"color": self._Color.RED, "msg": "hello"})
        assert result == {"color": "red", "msg": "hello"}

    def test_replaces_enums_inside_sequences(self):
        result = enum_values(None, "", {"colors": (self._Color.RED, self._Color.BLUE, 3)})
        assert result["colors"] == ["red", "blue", 3]

    def test_replaces_enums_inside_mappings(self):
        result = enum_values(None, "", {"by_team": {"a": [self._Color.BLUE]}})
        assert result["by_team"] == {"a": ["blue"]}

    def test_leaves_non_enum_values_unchanged(self):
        result = enum_values(None, "", {"count": 42, "name": "test"})
        assert result == {"count": 42, "name": "test"}
