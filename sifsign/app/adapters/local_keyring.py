"""Filesystem keyring that generates and stores RSA key pairs."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from sifsign.app.ports import KeyGenPort, KeyHandle
from sifsign.app.ports.keygen import format_user_id
from sifsign.errors import GenerationError
from sifsign.utils.crypto import (
    is_valid_fingerprint,
    normalize_fingerprint,
    public_key_fingerprint,
    write_secure_file,
)

logger = logging.getLogger(__name__)

PUBLIC_EXPONENT = 65537


class LocalKeyringAdapter(KeyGenPort):
    """Keyring stored as ``<fingerprint>.{key,pub,json}`` files in one directory.

    Private keys are PKCS#8 PEM, encrypted with the passphrase unless it is empty.
    """

    def __init__(self, keyring_dir: Path) -> None:
        self.keyring_dir = Path(keyring_dir)

    def _path(self, fingerprint: str, suffix: str) -> Path:
        if not is_valid_fingerprint(fingerprint):
            raise ValueError(f"malformed key fingerprint: {fingerprint!r}")
        return self.keyring_dir / f"{normalize_fingerprint(fingerprint)}{suffix}"

    def generate_key_pair(
        self,
        name: str,
        email: str,
        comment: str,
        passphrase: str,
        key_length_bits: int,
    ) -> KeyHandle:
        try:
            private_key = rsa.generate_private_key(
                public_exponent=PUBLIC_EXPONENT,
                key_size=key_length_bits,
            )
        except (ValueError, TypeError) as exc:
            raise GenerationError(f"unable to generate {key_length_bits}-bit key: {exc}") from exc

        encryption: serialization.KeySerializationEncryption
        if passphrase:
            encryption = serialization.BestAvailableEncryption(passphrase.encode("utf-8"))
        else:
            encryption = serialization.NoEncryption()

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=encryption,
        )
        public_key = private_key.public_key()
        public_pem = public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

        handle = KeyHandle(
            fingerprint=public_key_fingerprint(public_key),
            name=name,
            email=email,
            comment=comment,
            key_length_bits=key_length_bits,
            public_key_pem=public_pem,
            created_at=datetime.now(UTC).isoformat(),
        )

        metadata = handle.model_dump(mode="json", exclude={"public_key_pem"})
        metadata["encrypted"] = bool(passphrase)

        try:
            write_secure_file(self._path(handle.fingerprint, ".key"), private_pem)
            write_secure_file(self._path(handle.fingerprint, ".pub"), public_pem, mode=0o644)
            write_secure_file(
                self._path(handle.fingerprint, ".json"),
                json.dumps(metadata, indent=2, sort_keys=True).encode("utf-8"),
                mode=0o644,
            )
        except OSError as exc:
            raise GenerationError(f"unable to store key pair in {self.keyring_dir}: {exc}") from exc

        logger.debug("Stored key pair %s in %s", handle.fingerprint, self.keyring_dir)
        return handle

    def load_public_key(self, fingerprint: str) -> bytes | None:
        if not is_valid_fingerprint(fingerprint):
            return None
        path = self._path(fingerprint, ".pub")
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def load_identity(self, fingerprint: str) -> str | None:
        """Return the ``Name (comment) <email>`` identity recorded for ``fingerprint``."""
        if not is_valid_fingerprint(fingerprint):
            return None
        path = self._path(fingerprint, ".json")
        try:
            metadata = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable key metadata %s", path)
            return None

        return format_user_id(
            str(metadata.get("name", "")),
            str(metadata.get("comment", "")),
            str(metadata.get("email", "")),
        )
