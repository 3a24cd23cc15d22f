import pytest

import utils


def test_color_text_wraps_ansi() -> None:
    text = utils.color_text("hello", "32")
    assert text.startswith("\033[32m")
    assert text.endswith("\033[0m")


def test_labels_prefix_message() -> None:
    assert utils.debug_text("x").endswith(" x")
    assert "DEBUG" in utils.debug_text("x")
    assert "SENDING" in utils.sending_text("go depth 1")
    assert "RECEIVED" in utils.received_text("readyok")


def test_emit_writes_to_stderr_only_when_enabled(capsys: pytest.CaptureFixture[str]) -> None:
    utils.emit("visible")
    utils.emit("hidden", enabled=False)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == "visible\n"
