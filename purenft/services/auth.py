"""auth.py

Client for the hosted authentication provider plus the ``Viewer`` context.

The provider is consumed as an opaque capability: sign in, ask who the
current user is, sign out, change the password. Everything that needs the
viewer identifier receives a ``Viewer`` explicitly – there is no ambient
"current user" global.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .api import RestTransport
from .errors import AuthError, NotSignedIn, PasswordMismatch
from .model import AuthUser

logger = logging.getLogger(__name__)


class Viewer(BaseModel):
    """Who is looking at the page – anonymous when ``user`` is ``None``."""

    model_config = ConfigDict(frozen=True)

    user: Optional[AuthUser] = None
    access_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None


ANONYMOUS = Viewer()


class AuthClient(RestTransport):
    """GoTrue-style ``/auth/v1`` endpoints."""

    error_cls = AuthError

    def _as(self, viewer: Viewer) -> dict[str, str]:
        if not viewer.access_token:
            raise NotSignedIn()
        return {"Authorization": f"Bearer {viewer.access_token}"}

    def sign_in(self, email: str, password: str) -> Viewer:
        """Exchange email + password for a signed-in ``Viewer``."""
        data = self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if not data or "access_token" not in data:
            raise AuthError("Sign-in response carries no access token")
        user = AuthUser.model_validate(data["user"])
        logger.info("signed in user %s", user.id)
        return Viewer(user=user, access_token=data["access_token"])

    def get_current_user(self, viewer: Viewer) -> AuthUser | None:
        """Return the user behind *viewer*'s token, ``None`` when anonymous."""
        if not viewer.access_token:
            return None
        data = self._request("GET", "/auth/v1/user", headers=self._as(viewer))
        return AuthUser.model_validate(data) if data else None

    def sign_out(self, viewer: Viewer) -> Viewer:
        if viewer.access_token:
            self._request("POST", "/auth/v1/logout", headers=self._as(viewer))
            logger.info("signed out user %s", viewer.user_id)
        return ANONYMOUS

    def update_password(self, viewer: Viewer, new_password: str, confirm_password: str) -> None:
        """Set a new password; mismatching inputs never reach the provider."""
        if new_password != confirm_password:
            raise PasswordMismatch()
        self._request(
            "PUT",
            "/auth/v1/user",
            json={"password": new_password},
            headers=self._as(viewer),
        )
