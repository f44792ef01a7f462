"""
Auth Service - internal token verification, issuance and password hashing

Called by the other services on the cluster network; not meant to be
exposed publicly.
"""
from fastapi import FastAPI, Depends, HTTPException, status
import logging

from .config import settings
from .auth import TokenRegistry, hash_password, verify_password
from .schemas import (
    VerifyTokenResponse,
    PasswordHashRequest,
    HashedPasswordResponse,
    TokenRequest,
    TokenResponse,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Auth Service",
    description="Internal authentication service",
    version="1.0.0"
)

token_registry = TokenRegistry(settings.STATIC_TOKENS, token_bytes=settings.TOKEN_BYTES)


def get_token_registry() -> TokenRegistry:
    return token_registry


@app.get("/verify-token/{token:path}", response_model=VerifyTokenResponse)
def verify_token(token: str, registry: TokenRegistry = Depends(get_token_registry)):
    uid = registry.lookup(token)
    if uid is None:
        logger.info("Token verification rejected")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token invalid.")
    logger.debug("Token verified for uid=%s", uid)
    return VerifyTokenResponse(message="Valid token.", uid=uid)


@app.post("/hashed-password", response_model=HashedPasswordResponse)
def hashed_password(payload: PasswordHashRequest):
    return HashedPasswordResponse(hashed_password=hash_password(payload.password))


@app.post("/token", response_model=TokenResponse)
def issue_token(payload: TokenRequest, registry: TokenRegistry = Depends(get_token_registry)):
    if not verify_password(payload.password, payload.hashed_password):
        logger.info("Token request rejected for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Passwords do not match.")
    token = registry.issue(payload.email)
    return TokenResponse(message="Token created.", token=token)
