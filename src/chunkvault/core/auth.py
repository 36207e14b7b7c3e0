"""
Authorization strategies.

The vault does not verify identities itself. It hands the stored
administrator principal and the calling principal to an Authorizer, which
either returns or raises Unauthorized.
"""

from abc import ABC, abstractmethod
from typing import Optional

from chunkvault.core.errors import Unauthorized


class Authorizer(ABC):
    """Decides whether a caller may perform mutating operations."""

    @abstractmethod
    def require_auth(self, admin: str, caller: Optional[str]) -> None:
        """Raise Unauthorized unless caller acts as admin."""


class CallerAuthorizer(Authorizer):
    """Accepts only a caller equal to the stored administrator."""

    def require_auth(self, admin: str, caller: Optional[str]) -> None:
        if caller is None or caller != admin:
            raise Unauthorized(caller)


class TrustAllAuthorizer(Authorizer):
    """Accepts every caller (single-user embedding and tests)."""

    def require_auth(self, admin: str, caller: Optional[str]) -> None:
        return None
