"""Keystore port interface for publishing and fetching public keys."""

from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field

from sifsign.app.ports.keygen import KeyHandle


class KeyserverOp(str, Enum):
    """Keystore operation a client is built for."""

    PUSH = "push"
    PULL = "pull"


class ClientOptions(BaseModel):
    """Resolved connection options for a single keystore operation."""

    base_url: str
    operation: KeyserverOp
    auth_token: str = Field(default="", repr=False)
    user_agent: str
    timeout_seconds: float = 30.0


class KeystorePort(Protocol):
    """Port interface for the remote keystore.

    Side effects: Network requests (publish, lookup).
    """

    def build_client_options(self, keyserver_url: str, operation: KeyserverOp) -> ClientOptions:
        """Resolve client options for ``operation`` against ``keyserver_url``.

        Raises:
            KeystoreConfigError: If the endpoint cannot be resolved
        """
        ...

    def push_public_key(self, key: KeyHandle, options: ClientOptions) -> str:
        """Publish the public half of ``key``.

        Returns:
            Acknowledgement text from the keystore

        Raises:
            PublishError: If the keystore rejects or cannot receive the key
        """
        ...

    def fetch_public_key(self, fingerprint: str, options: ClientOptions) -> bytes:
        """Download the public key for ``fingerprint``.

        Raises:
            KeystoreError: If the key cannot be retrieved
        """
        ...
