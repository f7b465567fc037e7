"""Key pair provisioning: parameter collection, generation and optional publication."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sifsign.app.ports import KeyGenPort, KeyHandle, KeyserverOp, KeystorePort, PromptPort
from sifsign.errors import ConfigurationError, KeystoreConfigError, PublishError

logger = logging.getLogger(__name__)

NAME_PROMPT = "Enter your name (e.g., John Doe) : "
EMAIL_PROMPT = "Enter your email address (e.g., john.doe@example.com) : "
COMMENT_PROMPT = "Enter optional comment (e.g., development keys) : "
PASSPHRASE_PROMPT = "Enter a passphrase : "
EMPTY_PASSPHRASE_PROMPT = (
    "WARNING: if there is no password set, your key is not secure. "
    "Do you want to continue? [y/n] "
)
PUSH_PROMPT = "Would you like to push it to the keystore? [Y,n] "
PASSPHRASE_RETRIES = 3


@dataclass(frozen=True, slots=True)
class NewPairFlags:
    """Flags supplied on the command line for ``key newpair``.

    ``None`` means the flag was omitted; an empty string is an explicit value.
    """

    name: str | None = None
    email: str | None = None
    comment: str | None = None
    password: str | None = None
    push: bool | None = None


@dataclass(frozen=True, slots=True)
class KeyPairRequest:
    """Fully resolved key generation request."""

    name: str
    email: str
    comment: str
    passphrase: str
    key_length_bits: int
    push_to_keystore: bool


class ParameterCollector:
    """Fill a ``KeyPairRequest`` from flags, prompting for anything omitted."""

    def __init__(self, *, prompt_port: PromptPort, key_length_bits: int) -> None:
        self.prompt = prompt_port
        self.key_length_bits = key_length_bits

    def collect(self, flags: NewPairFlags) -> KeyPairRequest:
        """Resolve every request field.

        Raises:
            InputError: If any prompt fails
            ConfigurationError: If the user rejects an empty passphrase
        """
        name = self._text_field(flags.name, NAME_PROMPT)
        email = self._text_field(flags.email, EMAIL_PROMPT)
        comment = self._text_field(flags.comment, COMMENT_PROMPT)
        passphrase = self._passphrase(flags.password)

        if flags.push is not None:
            push = flags.push
        else:
            push = self.prompt.ask_yes_no("y", PUSH_PROMPT) == "y"

        return KeyPairRequest(
            name=name,
            email=email,
            comment=comment,
            passphrase=passphrase,
            key_length_bits=self.key_length_bits,
            push_to_keystore=push,
        )

    def _text_field(self, value: str | None, prompt: str) -> str:
        if value is not None:
            return value
        return self.prompt.ask_question(prompt)

    def _passphrase(self, value: str | None) -> str:
        if value is not None:
            return value

        passphrase = self.prompt.ask_passphrase(PASSPHRASE_PROMPT, PASSPHRASE_RETRIES)
        if passphrase == "":
            answer = self.prompt.ask_yes_no("n", EMPTY_PASSPHRASE_PROMPT)
            if answer == "n":
                raise ConfigurationError("empty passphrase")
            logger.warning("Proceeding with an unprotected private key")
        return passphrase


class ProvisionOutcome(str, Enum):
    """Terminal state of a provisioning run."""

    SKIPPED = "skipped"
    PUBLISHED = "published"
    PUBLISH_FAILED = "publish_failed"


@dataclass(frozen=True, slots=True)
class ProvisionResult:
    """Generated key plus what happened to its publication."""

    key: KeyHandle
    outcome: ProvisionOutcome
    keyserver_url: str
    detail: str | None = None

    @property
    def published(self) -> bool:
        return self.outcome is ProvisionOutcome.PUBLISHED


class KeyPairService:
    """Sequence key generation and best-effort publication.

    Generation failures and keystore configuration failures propagate.
    A failed push is reported in the result because the local key pair is
    already valid at that point.
    """

    def __init__(
        self,
        *,
        keygen_port: KeyGenPort,
        keystore_port: KeystorePort,
        keyserver_url: str,
    ) -> None:
        self.keygen = keygen_port
        self.keystore = keystore_port
        self.keyserver_url = keyserver_url

    def provision(self, request: KeyPairRequest) -> ProvisionResult:
        """Generate the key pair and push it when requested.

        Raises:
            GenerationError: If key generation fails (nothing is published)
            KeystoreConfigError: If keystore client options cannot be built; the
                generated key is attached as ``exc.key``
        """
        key = self.keygen.generate_key_pair(
            request.name,
            request.email,
            request.comment,
            request.passphrase,
            request.key_length_bits,
        )
        logger.info("Generated %d-bit key pair %s", request.key_length_bits, key.fingerprint)

        if not request.push_to_keystore:
            return ProvisionResult(
                key=key,
                outcome=ProvisionOutcome.SKIPPED,
                keyserver_url=self.keyserver_url,
            )

        # Only resolve the endpoint when pushing.
        try:
            options = self.keystore.build_client_options(self.keyserver_url, KeyserverOp.PUSH)
        except KeystoreConfigError as exc:
            exc.key = key
            raise

        try:
            ack = self.keystore.push_public_key(key, options)
        except PublishError as exc:
            logger.warning("Push of %s to %s failed: %s", key.fingerprint, self.keyserver_url, exc)
            return ProvisionResult(
                key=key,
                outcome=ProvisionOutcome.PUBLISH_FAILED,
                keyserver_url=self.keyserver_url,
                detail=str(exc),
            )

        return ProvisionResult(
            key=key,
            outcome=ProvisionOutcome.PUBLISHED,
            keyserver_url=self.keyserver_url,
            detail=ack or None,
        )
