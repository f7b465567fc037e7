"""Error taxonomy shared by services, adapters and the CLI."""

from __future__ import annotations

from typing import Any


class SifSignError(Exception):
    """Base class for all SifSign errors."""


class InputError(SifSignError):
    """Raised when interactive input could not be collected."""


class ConfigurationError(SifSignError):
    """Raised when the user declines an insecure default (e.g. empty passphrase)."""


class ValidationError(SifSignError):
    """Raised for conflicting or malformed selector input."""


class GenerationError(SifSignError):
    """Raised when key pair generation fails."""


class KeystoreConfigError(SifSignError):
    """Raised when keystore client options cannot be built.

    This indicates an endpoint or configuration problem and is treated as
    unrecoverable by the CLI. ``key`` carries the key pair that was already
    generated when the failure happened during provisioning.
    """

    def __init__(self, message: str, *, key: Any = None) -> None:
        super().__init__(message)
        self.key = key


class KeystoreError(SifSignError):
    """Raised when a keystore request fails."""


class PublishError(KeystoreError):
    """Raised when pushing a public key to the keystore fails."""


class VerificationError(SifSignError):
    """Raised when a signature check fails or cannot be performed.

    ``report`` carries the per-object results when the check got far enough
    to produce them.
    """

    def __init__(self, message: str, *, report: Any = None) -> None:
        super().__init__(message)
        self.report = report


__all__ = [
    "SifSignError",
    "InputError",
    "ConfigurationError",
    "ValidationError",
    "GenerationError",
    "KeystoreConfigError",
    "KeystoreError",
    "PublishError",
    "VerificationError",
]
