"""
backend/auth_context.py

Shared authentication context primitives for FastAPI dependency injection.

Contains:
- AuthContext: Immutable identity of the requester
- require_auth_context: FastAPI dependency for auth enforcement
- get_db: Per-request database connection dependency
- hash_password / verify_password: Salted PBKDF2 credential hashing
- create_access_token / verify_token: JWT issue and verification

This module MUST NOT import backend.main to avoid circular dependencies.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Generator, Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict

try:
    from backend.config import (
        SECRET_KEY,
        ALGORITHM,
        ACCESS_TOKEN_MINUTES,
        PASSWORD_HASH_ITERATIONS,
        IS_DEV,
    )
    from backend import db
    from backend import repositories as repo
except ModuleNotFoundError:
    from config import (
        SECRET_KEY,
        ALGORITHM,
        ACCESS_TOKEN_MINUTES,
        PASSWORD_HASH_ITERATIONS,
        IS_DEV,
    )
    import db
    import repositories as repo

# Missing header is reported as 401 by require_auth_context, not 403 by HTTPBearer
security = HTTPBearer(auto_error=False)


# ---------------------------------------------------------
# DB Helper
# ---------------------------------------------------------
def get_db() -> Generator[db.DbConnection, None, None]:
    """
    Yield a connection for the lifetime of one request, then close it.
    Used by auth dependencies and endpoints.
    """
    conn = db.connect()
    try:
        yield conn
    finally:
        conn.close()


# ---------------------------------------------------------
# Password hashing
# ---------------------------------------------------------
def hash_password(password: str) -> str:
    """Return 'pbkdf2_sha256$<iterations>$<salt>$<hash>' for storage."""
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, PASSWORD_HASH_ITERATIONS)
    return "pbkdf2_sha256${}${}${}".format(
        PASSWORD_HASH_ITERATIONS,
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    )


def verify_password(password: str, password_hash: str) -> bool:
    try:
        algorithm, iterations, salt_b64, digest_b64 = password_hash.split("$")
    except (AttributeError, ValueError):
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    # A corrupted stored hash is a failed login, not a server error
    try:
        salt = base64.b64decode(salt_b64, validate=True)
        expected = base64.b64decode(digest_b64, validate=True)
        digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, int(iterations))
    except (binascii.Error, ValueError, OverflowError):
        return False
    return hmac.compare_digest(digest, expected)


# ---------------------------------------------------------
# JWT Tokens
# ---------------------------------------------------------
def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    minutes = ACCESS_TOKEN_MINUTES if expires_minutes is None else expires_minutes
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Verify JWT access token and return decoded payload.

    Raises:
        HTTPException(401): If token is expired or invalid
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token is not valid")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Token is not valid")


# ---------------------------------------------------------
# AuthContext
# ---------------------------------------------------------
class AuthContext(BaseModel):
    """
    Immutable identity derived from server-side JWT verification.
    This is the ONLY source of truth for the requester ID in protected endpoints.
    Never trust owner/createdBy/user IDs from request bodies.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    name: str


def require_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    conn: db.DbConnection = Depends(get_db),
) -> AuthContext:
    """
    Auth context dependency for FastAPI routes.

    Process:
    1. Require a Bearer token
    2. Verify JWT signature and expiration
    3. Fetch user record from database (source of truth)

    Raises:
        HTTPException(401): If token is missing, invalid, expired, or user not found
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="No token, authorization denied")

    payload = verify_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        print("[AUTH] Missing user_id in token payload")
        raise HTTPException(status_code=401, detail="Token is not valid")

    user = repo.get_user_by_id(conn, str(user_id))
    if not user:
        print(f"[AUTH] User not found: user_id={user_id}")
        raise HTTPException(status_code=401, detail="User not found")

    ctx = AuthContext(user_id=user["id"], email=user["email"], name=user["name"])

    if IS_DEV:
        print(f"[AUTH] Authenticated: user_id={ctx.user_id}")

    return ctx
