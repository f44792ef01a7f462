"""
Client for the auth service's token verification endpoint.

One request per call, bounded by a single deadline and never retried: the
auth service sits one hop away on the same trusted network, so retrying is
left to whoever calls the tasks service.
"""
from enum import Enum
from typing import Optional
from urllib.parse import quote
import json
import logging
import time

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class VerificationStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    UNREACHABLE = "unreachable"


class VerificationResult(BaseModel):
    """
    Outcome of a single verification round-trip.

    `principal` is only set when the status is `valid`.
    """
    status: VerificationStatus = Field(..., description="valid, invalid or unreachable")
    principal: Optional[str] = Field(None, description="uid returned by the auth service")
    reason: Optional[str] = Field(None, description="Why verification did not succeed")

    @classmethod
    def valid(cls, principal: str) -> "VerificationResult":
        return cls(status=VerificationStatus.VALID, principal=principal)

    @classmethod
    def invalid(cls, reason: str = "credential rejected") -> "VerificationResult":
        return cls(status=VerificationStatus.INVALID, reason=reason)

    @classmethod
    def unreachable(cls, reason: str) -> "VerificationResult":
        return cls(status=VerificationStatus.UNREACHABLE, reason=reason)

    @property
    def is_valid(self) -> bool:
        return self.status == VerificationStatus.VALID


class CredentialVerifier:
    """
    Verifies bearer credentials against the auth service.

    Any transport failure (timeout, refused connection, DNS error), an
    unexpected status code or a malformed body is reported as `unreachable`;
    only 401/403 count as an explicit rejection.
    """

    VERIFY_PATH = "/verify-token/{token}"

    # The auth service answers with a tiny JSON object.
    MAX_RESPONSE_BYTES = 64 * 1024

    def __init__(
        self,
        base_url: str,
        timeout: float = 3.0,
        client: Optional[httpx.Client] = None
    ):
        """
        Args:
            base_url: Auth service root, e.g. ``http://auth-service.default``
            timeout: Deadline in seconds for one verification, from sending the
                request to the last byte of the body. httpx also applies it to
                each connect/read/write on its own.
            client: Pre-built client (tests pass a TestClient or a MockTransport client)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def verify(self, credential: str) -> VerificationResult:
        """
        Verify one credential.

        The body is streamed and checked against a single deadline, so a
        server that trickles its answer cannot hold the caller past
        `timeout`. Until the response headers arrive, only httpx's per-read
        timeout applies.
        """
        path = self.VERIFY_PATH.format(token=quote(credential, safe=""))
        deadline = time.monotonic() + self.timeout

        try:
            with self._client.stream("GET", path) as response:
                if time.monotonic() > deadline:
                    return self._deadline_exceeded()

                if response.status_code in (401, 403):
                    return VerificationResult.invalid(f"auth service answered {response.status_code}")

                if response.status_code != 200:
                    logger.warning("Unexpected status %s from auth service", response.status_code)
                    return VerificationResult.unreachable(f"unexpected status {response.status_code}")

                body = bytearray()
                for chunk in response.iter_bytes():
                    body.extend(chunk)
                    if time.monotonic() > deadline:
                        return self._deadline_exceeded()
                    if len(body) > self.MAX_RESPONSE_BYTES:
                        logger.warning("Auth service response exceeded %d bytes", self.MAX_RESPONSE_BYTES)
                        return VerificationResult.unreachable("response too large")
        except httpx.TimeoutException as e:
            logger.warning("Auth service timed out after %ss at %s", self.timeout, self.base_url)
            return VerificationResult.unreachable(f"timeout: {e.__class__.__name__}")
        except httpx.HTTPError as e:
            logger.warning("Auth service unreachable at %s: %s", self.base_url, e)
            return VerificationResult.unreachable(f"transport error: {e.__class__.__name__}")

        try:
            payload = json.loads(bytes(body))
        except ValueError:
            return VerificationResult.unreachable("malformed response body")

        uid = payload.get("uid") if isinstance(payload, dict) else None
        if not isinstance(uid, str) or not uid:
            return VerificationResult.unreachable("response carries no uid")

        return VerificationResult.valid(uid)

    def _deadline_exceeded(self) -> VerificationResult:
        logger.warning("Auth service missed the %ss deadline at %s", self.timeout, self.base_url)
        return VerificationResult.unreachable("timeout: deadline exceeded")

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
