"""
Authentication state capability for the web layer.

PURPOSE: Expose "is the operator signed in" without tying the dashboard to
an auth provider.
AI CONTEXT: Injected into web routes only; the aggregation core never reads it.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from typing import Protocol

from .config import Config
from .errors import DashboardError

__all__ = ["AuthState", "StaticAuthState", "load_auth_state", "default_auth_state"]

logger = logging.getLogger(__name__)


class AuthState(Protocol):
    """Capability answering whether the current operator is authenticated."""

    def is_authenticated(self) -> bool:
        """Return True if the operator is signed in."""
        ...

    def on_change(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """
        Register a listener for sign-in / sign-out.

        Returns:
            Function that unregisters the listener.
        """
        ...


class StaticAuthState:
    """
    In-process AuthState whose flag is set explicitly.

    Used as the default for local dashboards and in tests; a deployment
    wires a provider-backed implementation instead.
    """

    def __init__(self, authenticated: bool = False) -> None:
        self._authenticated = authenticated
        self._listeners: list[Callable[[bool], None]] = []

    def is_authenticated(self) -> bool:
        return self._authenticated

    def set_authenticated(self, authenticated: bool) -> None:
        """Change the flag and notify listeners when it actually changes."""
        if authenticated == self._authenticated:
            return
        self._authenticated = authenticated
        logger.info("Auth state changed: authenticated=%s", authenticated)
        for listener in list(self._listeners):
            listener(authenticated)

    def on_change(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe


def load_auth_state(path: str) -> AuthState:
    """
    Import a deployment's AuthState from a "module:attribute" path.

    The attribute may be an AuthState instance, an AuthState class, or a
    zero-argument factory returning one.

    Raises:
        DashboardError: If the path is malformed, cannot be imported, or
            does not resolve to an object with is_authenticated().
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise DashboardError(f"DMA_AUTH_STATE must look like 'module:attribute', got {path!r}")
    try:
        target = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise DashboardError(f"Cannot load auth state {path!r}: {e}") from e
    state = target
    if isinstance(target, type) or (callable(target) and not hasattr(target, "is_authenticated")):
        state = target()
    if not callable(getattr(state, "is_authenticated", None)):
        raise DashboardError(f"{path!r} is not an AuthState")
    logger.info("Using auth state from %s", path)
    return state


def default_auth_state() -> AuthState:
    """
    AuthState for an app created without an explicit one.

    DMA_AUTH_STATE wins when set. Otherwise a StaticAuthState that is
    signed in unless DMA_REQUIRE_AUTH is enabled.
    """
    path = Config.get_auth_state_path()
    if path:
        return load_auth_state(path)
    return StaticAuthState(authenticated=not Config.is_auth_required())
