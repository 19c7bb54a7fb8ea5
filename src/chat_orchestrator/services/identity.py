"""Identity provider interface."""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from ..domain.models import User

logger = structlog.get_logger()


class IdentityProvider(ABC):
    @abstractmethod
    def current_user(self) -> Optional[User]:
        """Signed-in user, or ``None``. Must not block."""
        pass


class StaticIdentityProvider(IdentityProvider):
    """Holds whichever user was last signed in."""

    def __init__(self, user: Optional[User] = None) -> None:
        self._user = user

    def current_user(self) -> Optional[User]:
        return self._user

    def sign_in(self, user: User) -> None:
        self._user = user
        logger.info("user_signed_in", user_id=user.uid)

    def sign_out(self) -> None:
        if self._user is not None:
            logger.info("user_signed_out", user_id=self._user.uid)
        self._user = None
