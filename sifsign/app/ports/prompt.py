"""Prompt port interface for interactive user input."""

from typing import Literal, Protocol

YesNo = Literal["y", "n"]


class PromptPort(Protocol):
    """Port interface for interactive questions on the controlling terminal.

    Adapters: terminal (typer/click), scripted answers in tests.

    All methods block until input arrives and raise ``InputError`` when the
    input stream is closed or the user aborts.
    """

    def ask_question(self, prompt: str) -> str:
        """Ask a free-form question and return the answer verbatim."""
        ...

    def ask_passphrase(self, prompt: str, max_retries: int) -> str:
        """Ask for a passphrase with confirmation.

        Args:
            prompt: Text shown before hidden input
            max_retries: Number of attempts before giving up on mismatches

        Returns:
            The confirmed passphrase (may be empty)
        """
        ...

    def ask_yes_no(self, default: YesNo, prompt: str) -> YesNo:
        """Ask a yes/no question, returning ``default`` on an empty answer."""
        ...
