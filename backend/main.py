# ---------------------------------------------------------
# backend/main.py
# Project Manager - REST API
#
# Run: uvicorn backend.main:app --reload (from repo root)
#
# - FastAPI + SQLite (PostgreSQL when DATABASE_URL is set)
# - /api/auth/*          : register, login, profile
# - /api/users/lookup    : resolve email -> user (member invites)
# - /api/projects        : project CRUD (owner/member authorization)
# - /api/tasks           : task CRUD (authorized via parent project)
# ---------------------------------------------------------

from __future__ import annotations

import traceback
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

try:
    from backend.config import CORS_ORIGINS, IS_DEV, IS_PROD
    from backend.db import init_db
    from backend.errors import ServiceError
    from backend import routes_auth, routes_projects, routes_tasks
except ModuleNotFoundError:
    from config import CORS_ORIGINS, IS_DEV, IS_PROD
    from db import init_db
    from errors import ServiceError
    import routes_auth, routes_projects, routes_tasks


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    print("[APP] Database initialized")
    yield


app = FastAPI(title="Project Manager API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if IS_PROD else ["*"],  # Restrict origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routes_auth.router)
app.include_router(routes_projects.router)
app.include_router(routes_tasks.router)


# ============================================================================
# ERROR HANDLING
# ============================================================================
#
# Every failure is returned as {"message": "<human readable>"}.
#
#   NotFoundError       -> 404
#   UnauthorizedError   -> 401
#   ValidationFailure   -> 500, message forwarded
#   RequestValidation   -> 500, message forwarded (same class of failure)
#   DB / unexpected     -> 500 "Server error", details only in the log
#
# ============================================================================

def format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc)
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "Validation failed: " + "; ".join(parts)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if IS_DEV:
        print(f"[API] {type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = format_validation_errors(exc)
    if IS_DEV:
        print(f"[API] Validation failure on {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=500, content={"message": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    print(f"[API] Unexpected error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    if IS_DEV:
        traceback.print_exc()
    return JSONResponse(status_code=500, content={"message": "Server error"})


# ---------------------------------------------------------
# Routes
# ---------------------------------------------------------
@app.get("/")
def root() -> Dict[str, str]:
    return {"message": "Project Manager API is running"}


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}
