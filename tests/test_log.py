import logging

import pytest

from relplz.log import init


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch):
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    monkeypatch.delenv("RUST_LOG", raising=False)
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("relplz_test_target").setLevel(logging.NOTSET)
    logging.captureWarnings(False)


def _output(capsys):
    captured = capsys.readouterr()
    return captured.out + captured.err


def test_default_level_is_info(capsys):
    init(False)
    logger = logging.getLogger("relplz_test_default")
    logger.info("info-message-shown")
    logger.debug("debug-message-hidden")
    output = _output(capsys)
    assert "info-message-shown" in output
    assert "debug-message-hidden" not in output


def test_env_level_is_used(monkeypatch, capsys):
    monkeypatch.setenv("RUST_LOG", "debug")
    init(False)
    logging.getLogger("relplz_test_env").debug("debug-message-shown")
    assert "debug-message-shown" in _output(capsys)


def test_invalid_env_falls_back_to_info(monkeypatch, capsys):
    monkeypatch.setenv("RUST_LOG", "mod=loud")
    init(False)
    logger = logging.getLogger("relplz_test_invalid")
    logger.info("info-message-shown")
    logger.debug("debug-message-hidden")
    output = _output(capsys)
    assert "info-message-shown" in output
    assert "debug-message-hidden" not in output


def test_target_directive(monkeypatch, capsys):
    monkeypatch.setenv("RUST_LOG", "warn,relplz_test_target=debug")
    init(False)
    other = logging.getLogger("relplz_test_other")
    other.info("other-info-hidden")
    other.warning("other-warning-shown")
    logging.getLogger("relplz_test_target").debug("target-debug-shown")
    output = _output(capsys)
    assert "other-info-hidden" not in output
    assert "other-warning-shown" in output
    assert "target-debug-shown" in output


def test_verbose_shows_source_location(capsys):
    init(True)
    logging.getLogger("relplz_test_verbose").info("verbose-message")
    output = _output(capsys)
    assert "verbose-message" in output
    assert "test_log.py" in output
    assert "relplz_test_verbose" in output


def test_plain_hides_source_location(capsys):
    init(False)
    logging.getLogger("relplz_test_plain").info("plain-message")
    output = _output(capsys)
    assert "plain-message" in output
    assert "test_log.py" not in output


def test_repeated_init_keeps_one_handler(capsys):
    init(False)
    init(True)
    logging.getLogger("relplz_test_repeat").info("repeat-message")
    assert _output(capsys).count("repeat-message") == 1