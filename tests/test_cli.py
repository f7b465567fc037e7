"""CLI integration tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import ScriptedPrompt, StubKeyGen, StubKeystore, StubVerifier, build_container
from typer.testing import CliRunner

import sifsign.cli as cli_module
from sifsign import __version__
from sifsign.app.adapters import TerminalPromptAdapter
from sifsign.app.ports import ObjectResult, VerificationReport
from sifsign.cli import FATAL_EXIT_CODE, app
from sifsign.errors import VerificationError

runner = CliRunner()

FULL_FLAGS = [
    "key",
    "newpair",
    "--name",
    "Alice",
    "--email",
    "a@x.com",
    "--comment",
    "",
    "--password",
    "secret",
]


@pytest.fixture
def install_container(monkeypatch: pytest.MonkeyPatch, override_settings):
    def install(**ports):
        container = build_container(override_settings, **ports)
        monkeypatch.setattr(cli_module, "bootstrap_application", lambda: container)
        return container

    return install


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_newpair_with_all_flags_pushes_without_prompting(install_container) -> None:
    prompt = ScriptedPrompt()
    keygen = StubKeyGen()
    keystore = StubKeystore()
    install_container(prompt=prompt, keygen=keygen, keystore=keystore)

    result = runner.invoke(app, [*FULL_FLAGS, "--push"])

    assert result.exit_code == 0, result.output
    assert prompt.calls == []
    assert keygen.calls == [("Alice", "a@x.com", "", "secret", 2048)]
    assert "Generating Entity and OpenPGP Key Pair... done" in result.output
    assert "Key owner: Alice <a@x.com>" in result.output
    assert "Key successfully pushed to: https://keys.example.test" in result.output
    assert len(keystore.pushed) == 1


def test_newpair_no_push_names_keyserver(install_container) -> None:
    keystore = StubKeystore()
    install_container(keystore=keystore)

    result = runner.invoke(app, [*FULL_FLAGS, "--no-push"])

    assert result.exit_code == 0, result.output
    assert "NOT pushing newly created key to: https://keys.example.test" in result.output
    assert keystore.options_calls == []


def test_newpair_publish_failure_still_succeeds(install_container) -> None:
    install_container(keystore=StubKeystore(push_error=True))

    result = runner.invoke(app, [*FULL_FLAGS, "--push"])

    assert result.exit_code == 0, result.output
    assert "Failed to push newly created key to keystore: connection refused" in result.output
    assert "creating newpair failed" not in result.output


def test_newpair_generation_failure_exits_2(install_container) -> None:
    keystore = StubKeystore()
    install_container(keygen=StubKeyGen(fail=True), keystore=keystore)

    result = runner.invoke(app, [*FULL_FLAGS, "--push"])

    assert result.exit_code == 2
    assert "creating newpair failed" in result.output
    assert keystore.options_calls == []


def test_newpair_keystore_config_failure_is_fatal(install_container) -> None:
    install_container(keystore=StubKeystore(config_error=True))

    result = runner.invoke(app, [*FULL_FLAGS, "--push"])

    assert result.exit_code == FATAL_EXIT_CODE
    assert "Generating Entity and OpenPGP Key Pair... done" in result.output
    assert "Key fingerprint: 0123456789ABCDEF0123456789ABCDEF01234567" in result.output
    assert "Keyserver client failed" in result.output
    assert result.output.index("Key fingerprint") < result.output.index("Keyserver client failed")


def test_newpair_declined_empty_passphrase_exits_2(install_container) -> None:
    keygen = StubKeyGen()
    install_container(prompt=ScriptedPrompt("", "n"), keygen=keygen)

    result = runner.invoke(
        app, ["key", "newpair", "-N", "A", "-E", "e", "-C", "c", "--no-push"]
    )

    assert result.exit_code == 2
    assert "could not collect user input: empty passphrase" in result.output
    assert keygen.calls == []


def test_newpair_interactive_on_terminal(install_container) -> None:
    keygen = StubKeyGen()
    keystore = StubKeystore()
    install_container(prompt=TerminalPromptAdapter(), keygen=keygen, keystore=keystore)

    result = runner.invoke(
        app,
        ["key", "newpair"],
        input="Alice\na@x.com\n\nsecret\nsecret\ny\n",
    )

    assert result.exit_code == 0, result.output
    assert keygen.calls == [("Alice", "a@x.com", "", "secret", 2048)]
    assert len(keystore.pushed) == 1


def test_newpair_closed_input_exits_2(install_container) -> None:
    keygen = StubKeyGen()
    install_container(prompt=TerminalPromptAdapter(), keygen=keygen)

    result = runner.invoke(app, ["key", "newpair", "--name", "Alice"], input="")

    assert result.exit_code == 2
    assert "could not collect user input" in result.output
    assert keygen.calls == []


def test_newpair_generates_real_key(override_settings, temp_dir: Path) -> None:
    result = runner.invoke(app, [*FULL_FLAGS, "--no-push"])

    assert result.exit_code == 0, result.output
    assert list((temp_dir / "keys").glob("*.key"))


def test_verify_group_selector(install_container) -> None:
    verifier = StubVerifier()
    install_container(verifier=verifier)

    result = runner.invoke(app, ["verify", "img.sif", "--groupid", "7"])

    assert result.exit_code == 0, result.output
    assert "Verifying image: img.sif" in result.output
    assert verifier.calls == [("img.sif", "https://keys.example.test", 7, True, "test-token")]


def test_verify_defaults_to_primary_descriptor(install_container) -> None:
    verifier = StubVerifier()
    install_container(verifier=verifier)

    result = runner.invoke(app, ["verify", "img.sif", "-u", "https://other.example.test"])

    assert result.exit_code == 0, result.output
    assert verifier.calls == [("img.sif", "https://other.example.test", 0, False, "test-token")]


def test_verify_empty_url_is_passed_through(install_container) -> None:
    verifier = StubVerifier()
    install_container(verifier=verifier)

    result = runner.invoke(app, ["verify", "img.sif", "--url", ""])

    assert result.exit_code == 0, result.output
    assert verifier.calls == [("img.sif", "", 0, False, "test-token")]


def test_verify_conflicting_selectors_exit_2(install_container) -> None:
    verifier = StubVerifier()
    install_container(verifier=verifier)

    result = runner.invoke(app, ["verify", "img.sif", "--groupid", "5", "--id", "3"])

    assert result.exit_code == 2
    assert "only one of -i or -g may be set" in result.output
    assert verifier.calls == []


def test_verify_failure_exit_2(install_container) -> None:
    class FailingVerifier(StubVerifier):
        def verify(self, *args, **kwargs):
            report = VerificationReport(
                image_path="img.sif",
                verified=False,
                objects=[
                    ObjectResult(
                        object_id=1, fingerprint="ABCD", verified=False, detail="signature mismatch"
                    )
                ],
            )
            raise VerificationError("signature verification failed for object(s) 1", report=report)

    install_container(verifier=FailingVerifier())

    result = runner.invoke(app, ["verify", "img.sif"])

    assert result.exit_code == 2
    assert "signature mismatch" in result.output
    assert "verification failed" in result.output
