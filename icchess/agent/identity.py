"""
Caller identity of the page.

An identity is resolved once per page session: the authenticated principal stored by an earlier
login if there is one, the anonymous principal otherwise.
"""

import logging
import re
from dataclasses import dataclass
from typing import Self

from icchess.core.exceptions import IdentityError, StorageError
from icchess.db.repository import LocalStorage

logger = logging.getLogger(__name__)

ANONYMOUS_PRINCIPAL = "2vxsx-fae"
IDENTITY_STORAGE_KEY = "icchess_identity"
PRINCIPAL_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


@dataclass(frozen=True)
class Identity:
    principal: str

    @classmethod
    def anonymous(cls) -> Self:
        return cls(ANONYMOUS_PRINCIPAL)

    @property
    def is_anonymous(self) -> bool:
        return self.principal == ANONYMOUS_PRINCIPAL

    def get_principal(self) -> str:
        """Textual principal. Raises IdentityError for a malformed principal."""
        if not PRINCIPAL_PATTERN.match(self.principal):
            raise IdentityError(f"Malformed principal: {self.principal!r}")
        return self.principal


class AuthClient:
    """Restores, stores and forgets the authenticated identity in local storage."""

    def __init__(self, storage: LocalStorage, identity: Identity) -> None:
        self.storage = storage
        self._identity = identity

    @classmethod
    async def create(cls, storage: LocalStorage) -> Self:
        return cls(storage, _restore_identity(storage))

    def get_identity(self) -> Identity:
        return self._identity

    def is_authenticated(self) -> bool:
        return not self._identity.is_anonymous

    def login(self, principal: str) -> None:
        """
        Persist an authenticated principal.

        ---
        NOTE connections already built keep the identity they were built with; the new identity is used from the next page load on.
        """
        identity = Identity(principal)
        identity.get_principal()
        self.storage.set_item(IDENTITY_STORAGE_KEY, {"principal": principal})
        logger.info("Stored identity %s for the next page load", principal)

    def logout(self) -> None:
        self.storage.remove_item(IDENTITY_STORAGE_KEY)


def _restore_identity(storage: LocalStorage) -> Identity:
    try:
        stored = storage.get_item(IDENTITY_STORAGE_KEY)
    except StorageError as e:
        logger.warning("Could not read stored identity, continuing anonymously: %s", e)
        return Identity.anonymous()

    if not isinstance(stored, dict) or not isinstance(stored.get("principal"), str):
        return Identity.anonymous()
    identity = Identity(stored["principal"])
    try:
        identity.get_principal()
    except IdentityError as e:
        logger.warning("Ignoring stored identity, continuing anonymously: %s", e)
        return Identity.anonymous()
    return identity
