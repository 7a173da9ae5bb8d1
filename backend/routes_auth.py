"""
backend/routes_auth.py

Identity endpoints: registration, login, current profile, and user lookup
by email (used by project owners to invite members).

[PUBLIC]    /api/auth/register, /api/auth/login
[AUTH_ONLY] /api/auth/me, /api/users/lookup
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query

try:
    from backend.auth_context import (
        AuthContext,
        create_access_token,
        get_db,
        hash_password,
        require_auth_context,
        verify_password,
    )
    from backend.db import DB_ERRORS, DbConnection, commit, rollback
    from backend.dependencies import database_errors
    from backend.models import now_iso
    from backend.schemas import LoginRequest, RegisterRequest
    from backend import repositories as repo
except ModuleNotFoundError:
    from auth_context import (
        AuthContext,
        create_access_token,
        get_db,
        hash_password,
        require_auth_context,
        verify_password,
    )
    from db import DB_ERRORS, DbConnection, commit, rollback
    from dependencies import database_errors
    from models import now_iso
    from schemas import LoginRequest, RegisterRequest
    import repositories as repo


router = APIRouter(tags=["auth"])


def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": user["id"], "name": user["name"], "email": user["email"]}


@router.post("/api/auth/register", status_code=201)
def register(req: RegisterRequest, conn: DbConnection = Depends(get_db)) -> Dict[str, Any]:
    """
    Register a new user and return a bearer token.

    Raises:
        HTTPException(400): Email already registered
    """
    with database_errors("register"):
        if repo.get_user_by_email(conn, req.email):
            print("[REGISTER] Email already registered")
            raise HTTPException(status_code=400, detail="User already exists")

        user = {
            "id": repo.new_id(),
            "name": req.name,
            "email": req.email,
            "password_hash": hash_password(req.password),
            "created_at": now_iso(),
        }
        try:
            repo.insert_user(conn, user)
            commit(conn)
        except DB_ERRORS as e:
            rollback(conn)
            # Lost a race on the UNIQUE(email) constraint
            if "unique" in str(e).lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise

    print(f"[REGISTER] User created with id={user['id']}")
    return {"token": create_access_token(user["id"]), "user": _public_user(user)}


@router.post("/api/auth/login")
def login(req: LoginRequest, conn: DbConnection = Depends(get_db)) -> Dict[str, Any]:
    """
    Exchange email + password for a bearer token.

    Unknown email and wrong password produce the same response.
    """
    with database_errors("login"):
        user = repo.get_user_by_email(conn, req.email)

    if not user or not verify_password(req.password, user["password_hash"]):
        print("[LOGIN] Invalid credentials")
        raise HTTPException(status_code=400, detail="Invalid credentials")

    print(f"[LOGIN] Login succeeded: user_id={user['id']}")
    return {"token": create_access_token(user["id"]), "user": _public_user(user)}


@router.get("/api/auth/me")
def get_profile(ctx: AuthContext = Depends(require_auth_context)) -> Dict[str, Any]:
    return {"id": ctx.user_id, "name": ctx.name, "email": ctx.email}


@router.get("/api/users/lookup")
def lookup_user(
    email: str = Query(..., min_length=3, max_length=254),
    ctx: AuthContext = Depends(require_auth_context),
    conn: DbConnection = Depends(get_db),
) -> Dict[str, Any]:
    """Resolve an email to a user summary so it can be added to members."""
    with database_errors("lookup_user"):
        user = repo.get_user_by_email(conn, email.strip().lower())
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _public_user(user)
