"""Pytest configuration and fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest

from sifsign.app import KeyPairService, ParameterCollector, VerifyService
from sifsign.app.ports import (
    ClientOptions,
    KeyHandle,
    KeyserverOp,
    ObjectResult,
    VerificationReport,
)
from sifsign.bootstrap import ApplicationContainer
from sifsign.config import Settings
from sifsign.errors import GenerationError, InputError, KeystoreConfigError, PublishError

TEST_KEY_LENGTH = 2048


class ScriptedPrompt:
    """Prompt stub that replays canned answers and records every question."""

    def __init__(self, *answers: str) -> None:
        self.answers = list(answers)
        self.calls: list[tuple[str, str]] = []

    def _next(self, kind: str, prompt: str) -> str:
        self.calls.append((kind, prompt))
        if not self.answers:
            raise InputError("input stream closed")
        return self.answers.pop(0)

    def ask_question(self, prompt: str) -> str:
        return self._next("question", prompt)

    def ask_passphrase(self, prompt: str, max_retries: int) -> str:
        return self._next("passphrase", prompt)

    def ask_yes_no(self, default: str, prompt: str) -> str:
        return self._next(f"yes_no:{default}", prompt)


class StubKeyGen:
    """Key generation stub that hands out fixed handles."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, str, str, str, int]] = []

    def generate_key_pair(
        self, name: str, email: str, comment: str, passphrase: str, key_length_bits: int
    ) -> KeyHandle:
        self.calls.append((name, email, comment, passphrase, key_length_bits))
        if self.fail:
            raise GenerationError("entropy source unavailable")
        return KeyHandle(
            fingerprint="0123456789ABCDEF0123456789ABCDEF01234567",
            name=name,
            email=email,
            comment=comment,
            key_length_bits=key_length_bits,
            public_key_pem=b"-----BEGIN PUBLIC KEY-----\n-----END PUBLIC KEY-----\n",
            created_at="2026-01-01T00:00:00+00:00",
        )

    def load_public_key(self, fingerprint: str) -> bytes | None:
        return None


class StubKeystore:
    """Keystore stub recording pushes, optionally failing at either step."""

    def __init__(self, *, config_error: bool = False, push_error: bool = False) -> None:
        self.config_error = config_error
        self.push_error = push_error
        self.options_calls: list[tuple[str, KeyserverOp]] = []
        self.pushed: list[KeyHandle] = []

    def build_client_options(self, keyserver_url: str, operation: KeyserverOp) -> ClientOptions:
        self.options_calls.append((keyserver_url, operation))
        if self.config_error:
            raise KeystoreConfigError(f"no endpoint for {keyserver_url}")
        return ClientOptions(base_url=keyserver_url, operation=operation, user_agent="test")

    def push_public_key(self, key: KeyHandle, options: ClientOptions) -> str:
        if self.push_error:
            raise PublishError("connection refused")
        self.pushed.append(key)
        return "Key added"

    def fetch_public_key(self, fingerprint: str, options: ClientOptions) -> bytes:
        raise NotImplementedError


class StubVerifier:
    """Verifier stub that records calls and returns a passing report."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, int, bool, str]] = []

    def verify(
        self,
        image_path: str,
        keyserver_url: str,
        object_id: int,
        is_group: bool,
        auth_token: str,
    ) -> VerificationReport:
        self.calls.append((image_path, keyserver_url, object_id, is_group, auth_token))
        return VerificationReport(
            image_path=image_path,
            verified=True,
            objects=[
                ObjectResult(
                    object_id=object_id or 1,
                    group_id=object_id if is_group else 0,
                    fingerprint="0123456789ABCDEF0123456789ABCDEF01234567",
                    signer="Alice <a@x.com>",
                    verified=True,
                )
            ],
        )


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Temporary directory for tests."""
    return tmp_path


@pytest.fixture
def override_settings(temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide isolated SifSign settings scoped to tests."""

    import sifsign.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    settings = config_module.Settings(
        keyring_dir=temp_dir / "keys",
        config_dir=temp_dir / "appconfig",
        key_length_bits=TEST_KEY_LENGTH,
        keyserver_url="https://keys.example.test",
    )

    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings


def build_container(
    settings: Settings,
    *,
    prompt=None,
    keygen=None,
    keystore=None,
    verifier=None,
) -> ApplicationContainer:
    """Wire a container around stub (or supplied) ports."""

    prompt = prompt if prompt is not None else ScriptedPrompt()
    keygen = keygen if keygen is not None else StubKeyGen()
    keystore = keystore if keystore is not None else StubKeystore()
    verifier = verifier if verifier is not None else StubVerifier()

    return ApplicationContainer(
        settings=settings,
        prompt_port=prompt,
        keygen_port=keygen,
        keystore_port=keystore,
        verifier_port=verifier,
        collector=ParameterCollector(
            prompt_port=prompt, key_length_bits=settings.key_length_bits
        ),
        keypair_service=KeyPairService(
            keygen_port=keygen,
            keystore_port=keystore,
            keyserver_url=settings.keyserver_url,
        ),
        verify_service=VerifyService(verifier_port=verifier, auth_token="test-token"),
    )
