import os
import re
import time
from unittest import mock

import pytest

from handykit.logger import (
    FatalError,
    Logger,
    LogLevel,
    error,
    exitif,
    fatal,
    fatalif,
    info,
    setlogfile,
    setloglevel,
)

HERE = os.path.basename(__file__)


@pytest.fixture
def file_logger(tmp_path):
    logger = Logger()
    path = tmp_path / "app.log"
    logger.set_file_name(str(path))
    yield logger, path
    logger.close()


@pytest.fixture
def root_logger():
    logger = Logger.get_logger()
    saved = logger.level
    yield logger
    logger.close()
    logger.set_log_level(saved)


def test_level_by_name():
    logger = Logger()
    logger.set_log_level("debug")
    assert logger.level == LogLevel.DEBUG
    assert logger.level_str() == "DEBUG"
    logger.set_log_level("TRACE")
    assert logger.level == LogLevel.TRACE


def test_unknown_level_name_falls_back_to_info():
    logger = Logger()
    logger.set_log_level("ERROR")
    logger.set_log_level("nonsense")
    assert logger.level == LogLevel.INFO


def test_level_clamped():
    logger = Logger()
    logger.set_log_level(100)
    assert logger.level == LogLevel.ALL
    logger.set_log_level(-5)
    assert logger.level == LogLevel.FATAL


def test_adjust_level():
    logger = Logger()
    logger.adjust_log_level(1)
    assert logger.level == LogLevel.DEBUG
    logger.adjust_log_level(-10)
    assert logger.level == LogLevel.FATAL


def test_record_format(file_logger):
    logger, path = file_logger
    assert logger.filename == str(path)
    assert logger.level_str() == "INFO"
    logger.log(LogLevel.INFO, "hello %d", 42)
    text = path.read_text()
    pattern = (
        r"\d{4}/\d{2}/\d{2}-\d{2}:\d{2}:\d{2}\.\d{6} [0-9a-f]+ INFO "
        + re.escape(HERE)
        + r":\d+ hello 42\n"
    )
    match = re.fullmatch(pattern, text)
    assert match is not None
    assert match.group(0) == text


def test_trailing_newlines_trimmed(file_logger):
    logger, path = file_logger
    logger.log(LogLevel.WARN, "line\n\n\n")
    text = path.read_text()
    assert text.endswith("line\n")
    assert text.count("\n") == 1


def test_level_filter(file_logger):
    logger, path = file_logger
    logger.log(LogLevel.DEBUG, "hidden")
    logger.log(LogLevel.INFO, "shown")
    text = path.read_text()
    assert "hidden" not in text
    assert "shown" in text


def test_long_record_truncated(file_logger):
    logger, path = file_logger
    logger.log(LogLevel.INFO, "%s", "x" * 5000)
    data = path.read_bytes()
    assert len(data) == 4095
    assert data.endswith(b"x\n")


def test_fatal_raises(file_logger):
    logger, path = file_logger
    with pytest.raises(FatalError):
        logger.log(LogLevel.FATAL, "dead %s", "end")
    assert "FATAL" in path.read_text()


def test_bad_file_is_ignored(tmp_path, capsys):
    logger = Logger()
    logger.set_file_name(str(tmp_path / "missing" / "x.log"))
    assert logger.filename == ""
    assert "ignored" in capsys.readouterr().err
    logger.log(LogLevel.INFO, "to stdout")
    assert "to stdout" in capsys.readouterr().out


def test_rotation(file_logger, tmp_path):
    logger, path = file_logger
    logger.log(LogLevel.INFO, "first")
    later = time.time() + 2 * 86400
    with mock.patch("time.time", return_value=later):
        logger.log(LogLevel.INFO, "second")
    rotated = [p for p in tmp_path.iterdir() if p.name.startswith("app.log.")]
    assert len(rotated) == 1
    suffix = rotated[0].name[len("app.log."):]
    assert suffix.isdigit() and len(suffix) == 12
    assert "first" in rotated[0].read_text()
    current = path.read_text()
    assert "second" in current and "first" not in current


def test_get_logger_is_singleton(root_logger):
    first = Logger.get_logger()
    second = Logger.get_logger()
    assert first is second
    first.set_log_level("DEBUG")
    assert second.level == LogLevel.DEBUG
    assert second.level_str() == "DEBUG"


def test_module_helpers_write_stdout(root_logger, capsys):
    setloglevel("INFO")
    info("hello %s", "world")
    out = capsys.readouterr().out
    assert " INFO " in out
    assert out.endswith("hello world\n")


def test_setloglevel_filters_helpers(root_logger, capsys):
    setloglevel(LogLevel.ERROR)
    info("quiet")
    assert capsys.readouterr().out == ""
    assert root_logger.level == LogLevel.ERROR


def test_setlogfile(root_logger, tmp_path):
    path = tmp_path / "root.log"
    setloglevel("INFO")
    setlogfile(str(path))
    error("broken %d", 7)
    assert "ERROR" in path.read_text()
    assert "broken 7" in path.read_text()


def test_fatal_helpers(root_logger):
    fatalif(False, "never")
    with pytest.raises(FatalError):
        fatalif(True, "cond %d", 1)
    with pytest.raises(FatalError):
        fatal("always")


def test_exitif(root_logger, capsys):
    exitif(False, "fine")
    with pytest.raises(SystemExit) as excinfo:
        exitif(True, "exiting %s", "now")
    assert excinfo.value.code == 1
    assert "exiting now" in capsys.readouterr().out