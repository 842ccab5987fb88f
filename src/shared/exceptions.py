"""Error taxonomy shared by the Quality and Notifications domains.

Built on top of Protean's exception hierarchy so that domain code can keep
raising ``ValidationError`` / ``ObjectNotFoundError`` the Protean way, while
workflow-specific failures get their own types. All messages use Protean's
``{field: [messages]}`` shape.

HTTP mapping (see ``register_error_handlers``):
    ValidationError         → 400
    AuthorizationError      → 403 (401 when no caller identity was supplied)
    NotFoundError           → 404
    InvalidStateTransition  → 409
    ConcurrencyConflict     → 409

``DeliveryError`` is internal to the delivery pipeline and never reaches
an HTTP caller.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import (
    InvalidStateError,
    ObjectNotFoundError,
    ProteanExceptionWithMessage,
    ValidationError,
)
from protean.integrations.fastapi import register_exception_handlers

NotFoundError = ObjectNotFoundError


class InvalidStateTransition(InvalidStateError):
    """An operation was attempted from an incompatible status."""

    def __init__(self, messages, **kwargs):
        super().__init__(messages, **kwargs)
        self.messages = messages


class ConcurrencyConflict(ProteanExceptionWithMessage):
    """A concurrent writer won the race on the same aggregate."""


class AuthorizationError(ProteanExceptionWithMessage):
    """The acting user lacks the required role or ownership."""

    def __init__(self, messages, authenticated=True, **kwargs):
        super().__init__(messages, **kwargs)
        self.authenticated = authenticated


class DeliveryError(ProteanExceptionWithMessage):
    """Transient failure reaching a live connection or an external channel."""


__all__ = [
    "AuthorizationError",
    "ConcurrencyConflict",
    "DeliveryError",
    "InvalidStateTransition",
    "NotFoundError",
    "ValidationError",
    "register_error_handlers",
]


def _messages(exc):
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return messages
    return {"_entity": [str(messages or exc)]}


def register_error_handlers(app: FastAPI) -> None:
    """Register Protean's default handlers plus the workflow error types."""
    register_exception_handlers(app)

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": _messages(exc)})

    @app.exception_handler(ObjectNotFoundError)
    async def _not_found(request: Request, exc: ObjectNotFoundError):
        return JSONResponse(status_code=404, content={"error": _messages(exc)})

    @app.exception_handler(InvalidStateTransition)
    async def _invalid_transition(request: Request, exc: InvalidStateTransition):
        return JSONResponse(status_code=409, content={"error": _messages(exc)})

    @app.exception_handler(ConcurrencyConflict)
    async def _conflict(request: Request, exc: ConcurrencyConflict):
        return JSONResponse(status_code=409, content={"error": _messages(exc)})

    @app.exception_handler(AuthorizationError)
    async def _forbidden(request: Request, exc: AuthorizationError):
        status_code = 403 if exc.authenticated else 401
        return JSONResponse(status_code=status_code, content={"error": _messages(exc)})
