"""
frontend/session.py
Client-side authentication session for the Project Manager frontend.

The session is an immutable value. Every change goes through reduce(), a pure
function from (session, action) to a new session; nothing here touches
st.session_state or the network. app.py keeps exactly one Session in
st.session_state and hands it explicitly to each page and API call.

Transitions:
- LOGIN_SUCCESS / REGISTER_SUCCESS: payload {"token", "user"} -> authenticated
- LOAD_USER: payload is the user profile; token is kept
- AUTH_ERROR / LOGOUT: back to anonymous
Unknown action types return the session unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional


class ActionType(str, Enum):
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    REGISTER_SUCCESS = "REGISTER_SUCCESS"
    LOAD_USER = "LOAD_USER"
    AUTH_ERROR = "AUTH_ERROR"
    LOGOUT = "LOGOUT"


@dataclass(frozen=True)
class Session:
    user: Optional[Dict[str, Any]] = None
    token: Optional[str] = None
    is_authenticated: bool = False
    loading: bool = True


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: Optional[Dict[str, Any]] = None


def initial_session(token: Optional[str] = None) -> Session:
    """Session for a fresh client. loading stays True until the token is resolved."""
    return Session(token=token or None)


def reduce(session: Session, action: Action) -> Session:
    """Return the session that results from applying action. Never mutates session."""
    payload = action.payload or {}

    if action.type in (ActionType.LOGIN_SUCCESS, ActionType.REGISTER_SUCCESS):
        user = payload.get("user")
        return replace(
            session,
            user=dict(user) if user else None,
            token=payload.get("token"),
            is_authenticated=True,
            loading=False,
        )

    if action.type == ActionType.LOAD_USER:
        return replace(
            session,
            user=dict(payload),
            is_authenticated=True,
            loading=False,
        )

    if action.type in (ActionType.AUTH_ERROR, ActionType.LOGOUT):
        return replace(
            session,
            user=None,
            token=None,
            is_authenticated=False,
            loading=False,
        )

    return session


def auth_header(session: Optional[Session]) -> Dict[str, str]:
    """{"Authorization": "Bearer <token>"} when the session holds a token, else {}."""
    if session is not None and session.token:
        return {"Authorization": f"Bearer {session.token}"}
    return {}


def display_name(session: Session) -> str:
    if session.user:
        return session.user.get("name") or session.user.get("email") or ""
    return ""
