"""Key material helpers: fingerprints, digests and secure file writes."""

from __future__ import annotations

import base64
import hashlib
import os
import re
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

FINGERPRINT_LENGTH = 40

_FINGERPRINT_RE = re.compile(f"[0-9A-F]{{{FINGERPRINT_LENGTH}}}")


def write_secure_file(path: Path, data: bytes, *, mode: int = 0o600) -> None:
    """Write ``data`` to ``path`` and restrict permissions.

    Args:
        path: Target file path
        data: Bytes to persist
        mode: File mode to apply (POSIX style)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    try:
        os.write(fd, data)
    finally:
        os.close(fd)

    try:
        os.chmod(path, mode)
    except PermissionError:
        # Windows may not support POSIX-style chmod; best effort only.
        pass


def public_key_fingerprint(public_key: rsa.RSAPublicKey) -> str:
    """Return the upper-case hex fingerprint of ``public_key``.

    The fingerprint is the leading 160 bits of the SHA-256 digest of the
    DER-encoded SubjectPublicKeyInfo.
    """
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return hashlib.sha256(der).hexdigest()[:FINGERPRINT_LENGTH].upper()


def load_public_key_pem(data: bytes) -> rsa.RSAPublicKey:
    """Parse a PEM public key, rejecting anything that is not RSA."""
    key = serialization.load_pem_public_key(data)
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError(f"Unsupported public key type: {type(key).__name__}")
    return key


def normalize_fingerprint(fingerprint: str) -> str:
    """Strip ``0x`` prefixes and whitespace and upper-case ``fingerprint``."""
    value = fingerprint.strip().replace(" ", "")
    if value.lower().startswith("0x"):
        value = value[2:]
    return value.upper()


def is_valid_fingerprint(fingerprint: str) -> bool:
    """Return True when ``fingerprint`` normalizes to exactly 40 hex digits."""
    return _FINGERPRINT_RE.fullmatch(normalize_fingerprint(fingerprint)) is not None


def compute_sha256_file(file_path: Path, chunk_size: int = 65536) -> str:
    """Compute SHA-256 hash of a file.

    Raises:
        FileNotFoundError: If file does not exist
        PermissionError: If file cannot be read
    """
    sha256 = hashlib.sha256()

    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            sha256.update(chunk)

    return sha256.hexdigest()


def encode_bytes(data: bytes) -> str:
    """Encode binary data for JSON persistence."""
    return base64.b64encode(data).decode("utf-8")


def decode_bytes(encoded: str) -> bytes:
    """Decode data produced by :func:`encode_bytes`."""
    return base64.b64decode(encoded.encode("utf-8"), validate=True)
