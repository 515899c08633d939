"""
Name: Request Scope

Responsibilities:
  - Carry the correlation id of the HTTP request being served
  - Expose it to the JSON log formatter without threading it through calls

Collaborators:
  - middleware.py: binds the scope per request
  - logger.py: merges get_context_dict() into every record

Notes:
  - Each asyncio task sees its own value, so pipeline runs for different
    requests log under their own request_id
"""

from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestScope:
    request_id: str
    method: str = ""
    path: str = ""


_scope: ContextVar[Optional[RequestScope]] = ContextVar("ragline_request", default=None)


def bind_request(request_id: str, method: str = "", path: str = "") -> Token:
    """R: Enter a request scope; pass the token to release_request()."""
    return _scope.set(RequestScope(request_id=request_id, method=method, path=path))


def release_request(token: Token) -> None:
    _scope.reset(token)


def current_request_id() -> Optional[str]:
    scope = _scope.get()
    return scope.request_id if scope else None


def get_context_dict() -> dict:
    """R: Log fields for the active request (empty outside a request)."""
    scope = _scope.get()
    if scope is None:
        return {}
    fields = {"request_id": scope.request_id}
    if scope.method:
        fields["method"] = scope.method
    if scope.path:
        fields["path"] = scope.path
    return fields
