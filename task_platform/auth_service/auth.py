from passlib.context import CryptContext
from typing import Dict, Optional
import secrets
import threading
import logging

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Not a hash passlib recognizes
        return False


class TokenRegistry:
    """
    In-memory map of opaque bearer tokens to principal ids.

    Tokens are compared by equality only; they carry no structure, expiry or
    signature and are lost on restart.
    """

    def __init__(self, static_tokens: Optional[Dict[str, str]] = None, token_bytes: int = 32):
        self._tokens: Dict[str, str] = dict(static_tokens or {})
        self._token_bytes = token_bytes
        self._lock = threading.Lock()

    def issue(self, uid: str) -> str:
        token = secrets.token_urlsafe(self._token_bytes)
        with self._lock:
            self._tokens[token] = uid
        logger.info("Issued token for uid=%s", uid)
        return token

    def lookup(self, token: str) -> Optional[str]:
        with self._lock:
            return self._tokens.get(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
