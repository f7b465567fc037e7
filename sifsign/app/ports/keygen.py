"""Key generation port interface."""

from typing import Protocol

from pydantic import BaseModel, Field


def format_user_id(name: str, comment: str, email: str) -> str:
    """Return the conventional ``Name (comment) <email>`` identity string."""
    parts = [name]
    if comment:
        parts.append(f"({comment})")
    if email:
        parts.append(f"<{email}>")
    return " ".join(part for part in parts if part)


class KeyHandle(BaseModel):
    """Newly generated key pair as seen by the orchestration layer."""

    fingerprint: str = Field(..., description="Hex fingerprint of the public key")
    name: str
    email: str
    comment: str = ""
    key_length_bits: int
    public_key_pem: bytes = Field(..., description="PEM-encoded public key")
    created_at: str = Field(..., description="ISO-8601 creation timestamp")

    @property
    def user_id(self) -> str:
        return format_user_id(self.name, self.comment, self.email)


class KeyGenPort(Protocol):
    """Port interface for key pair generation.

    Side effects: Writes the generated key pair to the local keyring.
    Generation is compute-bound and may take several seconds for large keys.
    """

    def generate_key_pair(
        self,
        name: str,
        email: str,
        comment: str,
        passphrase: str,
        key_length_bits: int,
    ) -> KeyHandle:
        """Generate and store a key pair.

        Raises:
            GenerationError: If the key pair cannot be created or stored
        """
        ...

    def load_public_key(self, fingerprint: str) -> bytes | None:
        """Return the PEM public key for ``fingerprint`` if present locally."""
        ...
