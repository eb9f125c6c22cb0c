"""Request ID generation and management."""

import uuid
from contextvars import ContextVar, Token

# Context variable holding the id of the request being served
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def generate_request_id() -> str:
    return uuid.uuid4().hex


def get_request_id() -> str:
    """Get current request ID from context ("" outside a request)."""
    return request_id_var.get()


def set_request_id(request_id: str) -> Token:
    return request_id_var.set(request_id)


def reset_request_id(token: Token) -> None:
    request_id_var.reset(token)
