"""
backend/dependencies.py

Reusable FastAPI dependencies and helpers shared by the route modules.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fastapi import Depends, HTTPException

try:
    from backend.auth_context import AuthContext, require_auth_context
    from backend.db import DB_ERRORS
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from db import DB_ERRORS


def get_requester_id(ctx: AuthContext = Depends(require_auth_context)) -> str:
    """
    Trusted requester ID for the resource services.

    Usage in routes:
        @router.get("")
        def list_things(requester_id: str = Depends(get_requester_id), ...):
            ...
    """
    return ctx.user_id


@contextmanager
def database_errors(label: str) -> Iterator[None]:
    """
    Collapse driver errors into a generic 500.

    Domain errors (NotFound/Unauthorized/ValidationFailure) pass through
    untouched and are mapped by the handlers in main.py.

    Raises:
        HTTPException(500): On sqlite3 / SQLAlchemy errors (details logged, never returned)
    """
    try:
        yield
    except DB_ERRORS as e:
        print(f"[DB] Error in {label}: {type(e).__name__}: {e}")
        raise HTTPException(status_code=500, detail="Server error")
