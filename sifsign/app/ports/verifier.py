"""Signature verification port interface."""

from typing import Protocol

from pydantic import BaseModel, Field


class ObjectResult(BaseModel):
    """Verification outcome for one signed object inside an image."""

    object_id: int
    group_id: int = 0
    fingerprint: str
    signer: str | None = None
    verified: bool
    detail: str | None = None


class VerificationReport(BaseModel):
    """Aggregate verification outcome for an image."""

    image_path: str
    verified: bool
    objects: list[ObjectResult] = Field(default_factory=list)


class VerifierPort(Protocol):
    """Port interface for checking image signatures.

    Side effects: Reads the image; may fetch public keys from the keystore.
    """

    def verify(
        self,
        image_path: str,
        keyserver_url: str,
        object_id: int,
        is_group: bool,
        auth_token: str,
    ) -> VerificationReport:
        """Verify the selected object (or group of objects) in ``image_path``.

        Raises:
            VerificationError: If any selected signature is invalid or cannot be checked
        """
        ...
