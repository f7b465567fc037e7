"""Application bootstrap wiring ports, adapters, and services."""

from __future__ import annotations

from dataclasses import dataclass

from sifsign.app import KeyPairService, ParameterCollector, VerifyService
from sifsign.app.adapters import (
    HTTPKeystoreAdapter,
    LocalKeyringAdapter,
    SignatureManifestVerifier,
    TerminalPromptAdapter,
)
from sifsign.app.ports import KeyGenPort, KeystorePort, PromptPort, VerifierPort
from sifsign.config import Settings, get_settings


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services and adapters for the CLI layer."""

    settings: Settings
    prompt_port: PromptPort
    keygen_port: KeyGenPort
    keystore_port: KeystorePort
    verifier_port: VerifierPort
    collector: ParameterCollector
    keypair_service: KeyPairService
    verify_service: VerifyService


def bootstrap_application(settings: Settings | None = None) -> ApplicationContainer:
    """Instantiate adapters and services for CLI consumption."""

    active_settings = settings or get_settings()
    auth_token = active_settings.get_auth_token()

    prompt = TerminalPromptAdapter()
    keyring = LocalKeyringAdapter(active_settings.get_keyring_dir())
    keystore = HTTPKeystoreAdapter(
        auth_token=auth_token,
        timeout_seconds=active_settings.http_timeout_seconds,
    )
    verifier = SignatureManifestVerifier(keyring=keyring, keystore=keystore)

    collector = ParameterCollector(
        prompt_port=prompt,
        key_length_bits=active_settings.key_length_bits,
    )
    keypair_service = KeyPairService(
        keygen_port=keyring,
        keystore_port=keystore,
        keyserver_url=active_settings.keyserver_url,
    )
    verify_service = VerifyService(verifier_port=verifier, auth_token=auth_token)

    return ApplicationContainer(
        settings=active_settings,
        prompt_port=prompt,
        keygen_port=keyring,
        keystore_port=keystore,
        verifier_port=verifier,
        collector=collector,
        keypair_service=keypair_service,
        verify_service=verify_service,
    )
