"""
Auth session: who is signed in, plus a feed of auth-state changes.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from firebase_admin import auth as firebase_auth

from backend.errors import UnauthenticatedError
from shared.subscriptions import Subscription
from shared.types import User

logger = logging.getLogger(__name__)

AuthStateCallback = Callable[[Optional[User]], None]


class AuthSession:
    """
    Holds the current user for one client.

    `on_auth_state_changed` behaves like the Firebase client SDK listener: the
    callback is invoked right away with the current state, then again after
    every sign-in or sign-out.
    """

    def __init__(self, app: Any = None, user: Optional[User] = None):
        self._app = app
        self._current_user = user
        self._listeners: List[AuthStateCallback] = []

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    def require_user(self, action: str) -> User:
        user = self._current_user
        if user is None:
            raise UnauthenticatedError(f"Cannot {action} without logged in user.")
        return user

    def on_auth_state_changed(self, callback: AuthStateCallback) -> Subscription:
        self._listeners.append(callback)
        callback(self._current_user)
        return Subscription(lambda: self._remove_listener(callback))

    def sign_in(self, user: User) -> None:
        logger.info("Signed in as %s", user.uid)
        self._set_user(user)

    def sign_in_with_id_token(self, id_token: str) -> User:
        """Verifies a Firebase ID token and signs in as its subject."""
        try:
            claims = firebase_auth.verify_id_token(id_token, app=self._app)
        except (ValueError, firebase_auth.InvalidIdTokenError) as e:
            raise UnauthenticatedError(f"Invalid ID token: {e}") from e
        user = User(
            uid=claims["uid"],
            email=claims.get("email"),
            display_name=claims.get("name"),
        )
        self.sign_in(user)
        return user

    def sign_out(self) -> None:
        if self._current_user is not None:
            logger.info("Signed out %s", self._current_user.uid)
        self._set_user(None)

    def _set_user(self, user: Optional[User]) -> None:
        self._current_user = user
        for callback in list(self._listeners):
            callback(user)

    def _remove_listener(self, callback: AuthStateCallback) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)
