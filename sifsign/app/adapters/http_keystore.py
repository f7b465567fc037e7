"""HKP-style keystore client built on httpx."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

import httpx

from sifsign import __version__
from sifsign.app.ports import ClientOptions, KeyHandle, KeyserverOp, KeystorePort
from sifsign.errors import KeystoreConfigError, KeystoreError, PublishError
from sifsign.utils.crypto import normalize_fingerprint

logger = logging.getLogger(__name__)

ADD_PATH = "/pks/add"
LOOKUP_PATH = "/pks/lookup"
USER_AGENT = f"sifsign/{__version__}"


def build_client(
    options: ClientOptions,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an ``httpx.Client`` bound to the keystore described by ``options``."""
    headers = {"User-Agent": options.user_agent}
    if options.auth_token:
        headers["Authorization"] = f"Bearer {options.auth_token}"
    return httpx.Client(
        base_url=options.base_url,
        headers=headers,
        timeout=httpx.Timeout(options.timeout_seconds),
        follow_redirects=True,
        transport=transport,
    )


class HTTPKeystoreAdapter(KeystorePort):
    """Publish and fetch public keys over the HKP endpoints of a keystore."""

    def __init__(
        self,
        *,
        auth_token: str = "",
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._auth_token = auth_token
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    def build_client_options(self, keyserver_url: str, operation: KeyserverOp) -> ClientOptions:
        url = (keyserver_url or "").strip()
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https"):
            raise KeystoreConfigError(
                f"invalid keyserver URL {keyserver_url!r}: scheme must be http or https"
            )
        if not parts.netloc:
            raise KeystoreConfigError(f"invalid keyserver URL {keyserver_url!r}: missing host")

        return ClientOptions(
            base_url=url.rstrip("/"),
            operation=operation,
            auth_token=self._auth_token,
            user_agent=USER_AGENT,
            timeout_seconds=self._timeout_seconds,
        )

    def push_public_key(self, key: KeyHandle, options: ClientOptions) -> str:
        logger.debug("Pushing %s to %s", key.fingerprint, options.base_url)
        try:
            with build_client(options, transport=self._transport) as client:
                response = client.post(
                    ADD_PATH,
                    data={"keytext": key.public_key_pem.decode("ascii")},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise PublishError(
                f"keystore returned {exc.response.status_code} for {ADD_PATH}"
            ) from exc
        except httpx.HTTPError as exc:
            raise PublishError(f"could not reach {options.base_url}: {exc}") from exc

        return response.text.strip()

    def fetch_public_key(self, fingerprint: str, options: ClientOptions) -> bytes:
        search = f"0x{normalize_fingerprint(fingerprint)}"
        logger.debug("Fetching %s from %s", search, options.base_url)
        try:
            with build_client(options, transport=self._transport) as client:
                response = client.get(
                    LOOKUP_PATH,
                    params={"op": "get", "options": "mr", "search": search},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise KeystoreError(f"key {search} not found on {options.base_url}") from exc
            raise KeystoreError(
                f"keystore returned {exc.response.status_code} for {LOOKUP_PATH}"
            ) from exc
        except httpx.HTTPError as exc:
            raise KeystoreError(f"could not reach {options.base_url}: {exc}") from exc

        return response.content
