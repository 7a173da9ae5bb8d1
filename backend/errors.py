"""
backend/errors.py

Domain errors raised by the resource access layer.

The service and authorization modules never import FastAPI; main.py maps
these exceptions onto HTTP responses:

- NotFoundError      -> 404
- UnauthorizedError  -> 401
- ValidationFailure  -> 500 (message forwarded to the client)
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for errors with a client-facing message."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    status_code = 404


class UnauthorizedError(ServiceError):
    status_code = 401

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class ValidationFailure(ServiceError):
    status_code = 500
