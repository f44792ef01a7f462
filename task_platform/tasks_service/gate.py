"""
Authentication gate in front of the task log.

`require_principal` runs before any route that touches the record store;
if it raises, the store is never reached.
"""
from functools import lru_cache
from typing import Optional
from fastapi import Depends, Header, HTTPException, Request, status

from .config import settings
from .errors import AuthError, AuthInvalid, AuthMissing, AuthUnreachable
from .record_store import RecordStore
from .utils.event_logger import log_gate_event
from .verifier import CredentialVerifier, VerificationStatus

NOT_AUTHENTICATED = "Not authenticated."


def extract_credential(authorization: Optional[str]) -> str:
    """
    Pull the credential out of an ``Authorization: Bearer <token>`` header.

    Raises:
        AuthMissing: Header absent, not a bearer header, empty or dot-only token
    """
    if not authorization:
        raise AuthMissing("No token provided.")
    if not authorization.lower().startswith("bearer "):
        raise AuthMissing("Authorization header is not a bearer credential.")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise AuthMissing("Bearer credential is empty.")
    if not token.strip("."):
        # "." and ".." would be collapsed out of the verification URL path.
        raise AuthMissing("Bearer credential is malformed.")
    return token


def authenticate(authorization: Optional[str], verifier: CredentialVerifier) -> str:
    """
    Resolve the caller's principal or raise the matching AuthError.

    Returns:
        uid reported by the auth service
    """
    credential = extract_credential(authorization)
    result = verifier.verify(credential)

    if result.status == VerificationStatus.VALID:
        return result.principal
    if result.status == VerificationStatus.INVALID:
        raise AuthInvalid(result.reason or "Token invalid.")
    raise AuthUnreachable(result.reason or "Auth service unreachable.")


@lru_cache
def get_verifier() -> CredentialVerifier:
    return CredentialVerifier(settings.auth_base_url, timeout=settings.AUTH_TIMEOUT_SECONDS)


@lru_cache
def get_record_store() -> RecordStore:
    return RecordStore(settings.tasks_file_path)


def require_principal(
    request: Request,
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    verifier: CredentialVerifier = Depends(get_verifier),
) -> str:
    """
    FastAPI dependency: the caller's uid, or a uniform 401.

    Which of missing/invalid/unreachable occurred is logged, not returned,
    so the response cannot be used to guess credentials.
    """
    try:
        principal = authenticate(authorization, verifier)
    except AuthError as exc:
        log_gate_event(exc.event_type, request, detail=str(exc))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=NOT_AUTHENTICATED,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    log_gate_event("auth_success", request, principal=principal)
    return principal
