import re

import pytest

from rustlings.ui import no_emoji, success, warn

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


def _plain(text):
    return _ANSI.sub("", text)


def test_no_emoji_follows_environment(monkeypatch):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    assert no_emoji() is False
    monkeypatch.setenv("NO_EMOJI", "1")
    assert no_emoji() is True


def test_no_emoji_accepts_empty_value(monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "")
    assert no_emoji() is True


def test_warn_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    warn("Compilation of exercises/a.rs failed!")
    out = _plain(capsys.readouterr().out)
    assert out == "! Compilation of exercises/a.rs failed!\n"


def test_warn_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    warn("Ran x with errors")
    out = _plain(capsys.readouterr().out)
    assert out.startswith("⚠️")
    assert out.rstrip("\n").endswith("Ran x with errors")


def test_success_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    success("Successfully ran exercises/a.rs")
    out = _plain(capsys.readouterr().out)
    assert out == "✓ Successfully ran exercises/a.rs\n"


def test_success_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    success("done")
    out = _plain(capsys.readouterr().out)
    assert out.startswith("✅")
    assert "done" in out


@pytest.mark.parametrize("func", [warn, success])
def test_markup_is_not_interpreted(monkeypatch, capsys, func):
    monkeypatch.setenv("NO_EMOJI", "1")
    func("[bold]literal[/bold] :smile:")
    out = _plain(capsys.readouterr().out)
    assert "[bold]literal[/bold] :smile:" in out


@pytest.mark.parametrize("func", [warn, success])
def test_long_message_is_not_wrapped(monkeypatch, capsys, func):
    monkeypatch.setenv("NO_EMOJI", "1")
    message = "word " * 60
    func(message)
    out = _plain(capsys.readouterr().out)
    assert out.count("\n") == 1