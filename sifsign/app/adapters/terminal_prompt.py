"""Terminal-backed prompt port implementation."""

from __future__ import annotations

import click
import typer

from sifsign.app.ports import PromptPort, YesNo
from sifsign.errors import InputError

RETYPE_PROMPT = "Retype your passphrase : "


class TerminalPromptAdapter(PromptPort):
    """Adapter that reads answers from the controlling terminal via click."""

    def _read(self, prompt: str, *, hide_input: bool = False) -> str:
        try:
            return typer.prompt(
                prompt,
                default="",
                show_default=False,
                prompt_suffix="",
                hide_input=hide_input,
            )
        except (click.Abort, EOFError) as exc:
            raise InputError("input aborted") from exc

    def ask_question(self, prompt: str) -> str:
        return self._read(prompt)

    def ask_passphrase(self, prompt: str, max_retries: int) -> str:
        for attempt in range(1, max_retries + 1):
            first = self._read(prompt, hide_input=True)
            second = self._read(RETYPE_PROMPT, hide_input=True)
            if first == second:
                return first
            if attempt < max_retries:
                typer.echo("Passphrases do not match. Please try again.")

        raise InputError(f"passphrases do not match after {max_retries} attempts")

    def ask_yes_no(self, default: YesNo, prompt: str) -> YesNo:
        while True:
            answer = self._read(prompt).strip().lower()
            if answer == "":
                return default
            if answer in ("y", "yes"):
                return "y"
            if answer in ("n", "no"):
                return "n"
            typer.echo('Please answer "y" or "n".')
