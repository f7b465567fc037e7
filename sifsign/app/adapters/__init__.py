"""Concrete adapters wiring application ports to built-in implementations."""

from __future__ import annotations

from .http_keystore import HTTPKeystoreAdapter
from .local_keyring import LocalKeyringAdapter
from .signature_manifest import SignatureManifestVerifier
from .terminal_prompt import TerminalPromptAdapter

__all__ = [
    "HTTPKeystoreAdapter",
    "LocalKeyringAdapter",
    "SignatureManifestVerifier",
    "TerminalPromptAdapter",
]
