"""Tests for the terminal prompt adapter."""

from __future__ import annotations

import click
import pytest
import typer

from sifsign.app.adapters.terminal_prompt import RETYPE_PROMPT, TerminalPromptAdapter
from sifsign.errors import InputError


class FakeTerminal:
    """Replacement for ``typer.prompt`` feeding scripted lines."""

    def __init__(self, *lines: str) -> None:
        self.lines = list(lines)
        self.prompts: list[tuple[str, bool]] = []

    def __call__(self, text: str, **kwargs) -> str:
        self.prompts.append((text, kwargs.get("hide_input", False)))
        if not self.lines:
            raise click.Abort()
        return self.lines.pop(0)


@pytest.fixture
def terminal(monkeypatch: pytest.MonkeyPatch):
    def install(*lines: str) -> FakeTerminal:
        fake = FakeTerminal(*lines)
        monkeypatch.setattr(typer, "prompt", fake)
        return fake

    return install


def test_question_returns_answer_verbatim(terminal) -> None:
    terminal("  spaced answer ")

    assert TerminalPromptAdapter().ask_question("Name : ") == "  spaced answer "


def test_closed_input_raises_input_error(terminal) -> None:
    terminal()

    with pytest.raises(InputError):
        TerminalPromptAdapter().ask_question("Name : ")


def test_passphrase_requires_matching_confirmation(terminal) -> None:
    fake = terminal("one", "two", "secret", "secret")

    assert TerminalPromptAdapter().ask_passphrase("Enter a passphrase : ", 3) == "secret"
    assert fake.prompts[1] == (RETYPE_PROMPT, True)
    assert all(hidden for _, hidden in fake.prompts)


def test_passphrase_gives_up_after_retry_budget(terminal) -> None:
    terminal("a", "b", "c", "d", "e", "f")

    with pytest.raises(InputError, match="do not match"):
        TerminalPromptAdapter().ask_passphrase("Enter a passphrase : ", 3)


def test_empty_passphrase_is_returned(terminal) -> None:
    terminal("", "")

    assert TerminalPromptAdapter().ask_passphrase("Enter a passphrase : ", 3) == ""


@pytest.mark.parametrize(
    "default,answer,expected",
    [
        ("y", "", "y"),
        ("n", "", "n"),
        ("n", "YES", "y"),
        ("y", "no", "n"),
        ("y", " N ", "n"),
    ],
)
def test_yes_no_answers(terminal, default: str, answer: str, expected: str) -> None:
    terminal(answer)

    assert TerminalPromptAdapter().ask_yes_no(default, "Continue? ") == expected


def test_yes_no_reasks_on_unrecognized_answer(terminal) -> None:
    fake = terminal("maybe", "y")

    assert TerminalPromptAdapter().ask_yes_no("n", "Continue? ") == "y"
    assert len(fake.prompts) == 2
