"""Verification target resolution and delegation to the signature verifier."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sifsign.app.ports import VerificationReport, VerifierPort
from sifsign.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_OBJECT_ID = 2**32 - 1
SELECTOR_CONFLICT = "only one of -i or -g may be set"


@dataclass(frozen=True, slots=True)
class VerificationTarget:
    """Unambiguous object selection within an image.

    ``object_id`` 0 with ``is_group`` False selects the primary object. Group 0
    cannot be expressed because 0 also means "unset".
    """

    image_path: str
    is_group: bool
    object_id: int
    keyserver_url: str


def _check_selector(label: str, value: int) -> None:
    if not 0 <= value <= MAX_OBJECT_ID:
        raise ValidationError(f"{label} must be between 0 and {MAX_OBJECT_ID}, got {value}")


def resolve_target(
    image_path: str,
    keyserver_url: str,
    *,
    group_id: int = 0,
    descriptor_id: int = 0,
) -> VerificationTarget:
    """Collapse the group/descriptor selectors into a single target.

    Raises:
        ValidationError: If both selectors are set or either is out of range
    """
    _check_selector("group ID", group_id)
    _check_selector("descriptor ID", descriptor_id)

    if group_id != 0 and descriptor_id != 0:
        raise ValidationError(SELECTOR_CONFLICT)

    if group_id != 0:
        return VerificationTarget(
            image_path=image_path,
            is_group=True,
            object_id=group_id,
            keyserver_url=keyserver_url,
        )

    return VerificationTarget(
        image_path=image_path,
        is_group=False,
        object_id=descriptor_id,
        keyserver_url=keyserver_url,
    )


class VerifyService:
    """Resolve the requested target and hand it to the verifier port."""

    def __init__(self, *, verifier_port: VerifierPort, auth_token: str = "") -> None:
        self.verifier = verifier_port
        self.auth_token = auth_token

    def verify(
        self,
        image_path: str,
        keyserver_url: str,
        *,
        group_id: int = 0,
        descriptor_id: int = 0,
        progress: Callable[[str], None] | None = None,
    ) -> VerificationReport:
        """Verify ``image_path`` and return the verifier's report unchanged.

        Raises:
            ValidationError: If the selectors conflict (no verification is attempted)
            VerificationError: If the verifier rejects the image
        """
        if progress is not None:
            progress(f"Verifying image: {image_path}")

        target = resolve_target(
            image_path,
            keyserver_url,
            group_id=group_id,
            descriptor_id=descriptor_id,
        )
        logger.debug(
            "Verifying %s (%s %d) against %s",
            target.image_path,
            "group" if target.is_group else "descriptor",
            target.object_id,
            target.keyserver_url,
        )

        return self.verifier.verify(
            target.image_path,
            target.keyserver_url,
            target.object_id,
            target.is_group,
            self.auth_token,
        )
