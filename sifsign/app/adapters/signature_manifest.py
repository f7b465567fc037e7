"""Verifier for detached signature manifests stored beside an image.

A manifest lives at ``<image>.sig.json``::

    {
      "image_sha256": "<hex digest of the image file>",
      "signatures": [
        {"id": 1, "group": 1, "fingerprint": "<hex>", "signature": "<base64>"}
      ]
    }

Each signature is RSA-PSS (MGF1/SHA-256, digest-length salt) over the UTF-8
message ``"<image_sha256>:<id>"``. The public key used to check an entry must
itself hash to the entry's fingerprint, wherever it was loaded from.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from sifsign.app.adapters.local_keyring import LocalKeyringAdapter
from sifsign.app.ports import (
    KeyserverOp,
    KeystorePort,
    ObjectResult,
    VerificationReport,
    VerifierPort,
)
from sifsign.errors import KeystoreConfigError, KeystoreError, VerificationError
from sifsign.utils.crypto import (
    compute_sha256_file,
    decode_bytes,
    is_valid_fingerprint,
    load_public_key_pem,
    normalize_fingerprint,
    public_key_fingerprint,
)

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".sig.json"

PSS_PADDING = padding.PSS(
    mgf=padding.MGF1(hashes.SHA256()),
    salt_length=padding.PSS.DIGEST_LENGTH,
)


class SignatureEntry(BaseModel):
    """One signed object recorded in a manifest."""

    id: int = Field(..., ge=1)
    group: int = Field(default=0, ge=0)
    fingerprint: str
    signature: str


class SignatureManifest(BaseModel):
    """Detached signatures for a single image."""

    image_sha256: str
    signatures: list[SignatureEntry] = Field(default_factory=list)


def manifest_path_for(image_path: Path) -> Path:
    """Return the manifest location for ``image_path``."""
    return image_path.with_name(image_path.name + MANIFEST_SUFFIX)


def signed_message(image_sha256: str, object_id: int) -> bytes:
    """Return the bytes covered by the signature of ``object_id``."""
    return f"{image_sha256}:{object_id}".encode("utf-8")


def select_entries(
    manifest: SignatureManifest, object_id: int, is_group: bool
) -> list[SignatureEntry]:
    """Pick the manifest entries addressed by the selector.

    Descriptor 0 selects the primary object, i.e. the entry with the lowest id.
    """
    if is_group:
        return [entry for entry in manifest.signatures if entry.group == object_id]
    if object_id == 0:
        if not manifest.signatures:
            return []
        return [min(manifest.signatures, key=lambda entry: entry.id)]
    return [entry for entry in manifest.signatures if entry.id == object_id]


class SignatureManifestVerifier(VerifierPort):
    """Verify manifest signatures using local keys, falling back to the keystore."""

    def __init__(self, *, keyring: LocalKeyringAdapter, keystore: KeystorePort) -> None:
        self.keyring = keyring
        self.keystore = keystore

    def verify(
        self,
        image_path: str,
        keyserver_url: str,
        object_id: int,
        is_group: bool,
        auth_token: str,
    ) -> VerificationReport:
        image = Path(image_path)
        if not image.is_file():
            raise VerificationError(f"image not found: {image_path}")

        manifest = self._load_manifest(manifest_path_for(image))

        try:
            digest = compute_sha256_file(image)
        except OSError as exc:
            raise VerificationError(f"unable to read image {image_path}: {exc}") from exc
        if digest != manifest.image_sha256.lower():
            raise VerificationError("image digest does not match signature manifest")

        entries = select_entries(manifest, object_id, is_group)
        if not entries:
            if is_group:
                raise VerificationError(f"no signatures found for group {object_id}")
            if object_id == 0:
                raise VerificationError("image has no signatures")
            raise VerificationError(f"no signature found for descriptor {object_id}")

        key_cache: dict[str, bytes] = {}
        results = [
            self._check_entry(entry, digest, keyserver_url, auth_token, key_cache)
            for entry in entries
        ]
        report = VerificationReport(
            image_path=image_path,
            verified=all(result.verified for result in results),
            objects=results,
        )

        if not report.verified:
            failed = [str(result.object_id) for result in results if not result.verified]
            raise VerificationError(
                f"signature verification failed for object(s) {', '.join(failed)}",
                report=report,
            )

        return report

    def _load_manifest(self, path: Path) -> SignatureManifest:
        try:
            raw: Any = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise VerificationError(f"no signature manifest found at {path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise VerificationError(f"unreadable signature manifest {path}: {exc}") from exc

        try:
            return SignatureManifest.model_validate(raw)
        except PydanticValidationError as exc:
            raise VerificationError(f"malformed signature manifest {path}: {exc}") from exc

    def _resolve_key(
        self,
        fingerprint: str,
        keyserver_url: str,
        auth_token: str,
        cache: dict[str, bytes],
    ) -> bytes:
        if fingerprint in cache:
            return cache[fingerprint]

        pem = self.keyring.load_public_key(fingerprint)
        if pem is None:
            options = self.keystore.build_client_options(keyserver_url, KeyserverOp.PULL)
            if auth_token:
                options = options.model_copy(update={"auth_token": auth_token})
            pem = self.keystore.fetch_public_key(fingerprint, options)

        cache[fingerprint] = pem
        return pem

    def _check_entry(
        self,
        entry: SignatureEntry,
        digest: str,
        keyserver_url: str,
        auth_token: str,
        cache: dict[str, bytes],
    ) -> ObjectResult:
        def failed(detail: str) -> ObjectResult:
            logger.info("Object %d: %s", entry.id, detail)
            return ObjectResult(
                object_id=entry.id,
                group_id=entry.group,
                fingerprint=entry.fingerprint,
                verified=False,
                detail=detail,
            )

        if not is_valid_fingerprint(entry.fingerprint):
            return failed(f"malformed key fingerprint {entry.fingerprint!r}")
        fingerprint = normalize_fingerprint(entry.fingerprint)

        try:
            pem = self._resolve_key(fingerprint, keyserver_url, auth_token, cache)
        except (KeystoreConfigError, KeystoreError) as exc:
            return failed(f"public key unavailable: {exc}")

        try:
            public_key = load_public_key_pem(pem)
            signature = decode_bytes(entry.signature)
        except ValueError as exc:
            return failed(f"unusable key or signature: {exc}")

        if public_key_fingerprint(public_key) != fingerprint:
            return failed(f"public key does not match fingerprint {fingerprint}")

        try:
            public_key.verify(
                signature,
                signed_message(digest, entry.id),
                PSS_PADDING,
                hashes.SHA256(),
            )
        except InvalidSignature:
            return failed("signature mismatch")

        return ObjectResult(
            object_id=entry.id,
            group_id=entry.group,
            fingerprint=entry.fingerprint,
            signer=self.keyring.load_identity(fingerprint),
            verified=True,
        )
