"""Per-request session context shared by every page: who is signed in, how
many items sit in their cart, and the channel that announces sign-in/out."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse

from .dataservice import DataService, DataServiceError

log = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class Identity:
    id: str
    email: str


@dataclass(frozen=True)
class Notice:
    kind: str  # ok | error
    message: str

    @classmethod
    def ok(cls, message: str) -> "Notice":
        return cls("ok", message)

    @classmethod
    def error(cls, message: str) -> "Notice":
        return cls("error", message)


class SignInRequired(Exception):
    def __init__(self, message: str = "Please sign in"):
        super().__init__(message)
        self.message = message


Listener = Callable[[str, Optional[Identity]], None]


class SessionEvents:
    """Publish/subscribe channel for session changes."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: str, identity: Identity | None) -> None:
        for listener in list(self._listeners):
            listener(event, identity)

    def __len__(self) -> int:
        return len(self._listeners)


class NavShell:
    def __init__(self, data: DataService, identity: Identity | None, events: SessionEvents):
        self.data = data
        self.events = events
        self.identity: Identity | None = None
        self.cart_count = 0
        self._unsubscribe = events.subscribe(self._on_session_change)
        self._on_session_change(SIGNED_IN if identity else SIGNED_OUT, identity)

    @property
    def signed_in(self) -> bool:
        return self.identity is not None

    def _on_session_change(self, event: str, identity: Identity | None) -> None:
        self.identity = identity
        if identity:
            self.refresh_cart_count()
        else:
            self.cart_count = 0

    def refresh_cart_count(self) -> None:
        if not self.identity:
            self.cart_count = 0
            return
        try:
            self.cart_count = sum(self.data.cart_quantities(self.identity.id))
        except DataServiceError:
            log.debug("cart count unavailable for %s", self.identity.id)

    def require_identity(self, message: str = "Please sign in") -> Identity:
        if not self.identity:
            raise SignInRequired(message)
        return self.identity

    def close(self) -> None:
        self._unsubscribe()


def flash(request: Request) -> dict | None:
    # transient notification via query params ?ok=... or ?err=...
    if request.query_params.get("ok"):
        return {"kind": "ok", "message": request.query_params["ok"]}
    if request.query_params.get("err"):
        return {"kind": "error", "message": request.query_params["err"]}
    return None


def redirect(url: str, notice: Notice | None = None, **params: str) -> RedirectResponse:
    query = {k: v for k, v in params.items() if v}
    if notice:
        query["ok" if notice.kind == "ok" else "err"] = notice.message
    if query:
        url = f"{url}{'&' if '?' in url else '?'}{urlencode(query)}"
    return RedirectResponse(url, status_code=302)
