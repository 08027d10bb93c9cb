"""Protocols defining the collaborators of the admin diagnostic controller.

Session-bound authentication sources, the source registry and the exception
state store implement these protocols; tests substitute their own objects
without subclassing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, MutableMapping, Optional, Protocol

if TYPE_CHECKING:
    from saml_test_util.auth.state import ExceptionState
    from saml_test_util.models.instructions import RedirectInstruction


class AuthSourceProtocol(Protocol):
    """One authentication source bound to the current session."""

    source_id: str

    def is_authenticated(self) -> bool:
        """Return True if the session holds a valid login for this source."""
        ...

    def login(self, return_url: str, error_url: str) -> RedirectInstruction:
        """Start a login.

        Args:
            return_url: Where the user lands after a successful login.
            error_url: Where the user lands after a failed login; the failure
                is stored in the exception state store first.

        Returns:
            RedirectInstruction handing control to the login flow.
        """
        ...

    def logout(self) -> None:
        """Forget the login for this source. Safe to call repeatedly."""
        ...

    def get_attributes(self) -> Dict[str, List[Any]]:
        """Return the released attributes in release order."""
        ...

    def get_auth_data_array(self) -> Optional[Dict[str, Any]]:
        """Return all authentication data, or None without a login."""
        ...

    def get_auth_data(self, name: str) -> Any:
        """Return one authentication data value, or None."""
        ...


class AuthSourceProviderProtocol(Protocol):
    """Lists configured sources and binds them to a session."""

    def available(self) -> List[Dict[str, str]]:
        """Describe the configured sources, in configuration order."""
        ...

    def bind(self, source_id: str, session: MutableMapping[str, Any]) -> AuthSourceProtocol:
        """Return source ``source_id`` bound to ``session``.

        Raises:
            UnknownAuthSourceError: If the source is not configured.
        """
        ...


class ExceptionStateStoreProtocol(Protocol):
    """Stores exception states under opaque, unguessable reference ids."""

    def save(self, state: ExceptionState) -> str:
        """Store ``state`` and return its new reference id."""
        ...

    def load(self, reference_id: str) -> Optional[ExceptionState]:
        """Return and consume the state, or None if unknown, expired or consumed."""
        ...

    def attach_failure(self, reference_id: str, failure: BaseException) -> bool:
        """Record ``failure`` on an existing state. Returns False if unknown."""
        ...

    def __contains__(self, reference_id: object) -> bool:
        ...


SessionMapping = MutableMapping[str, Any]
AttributeSet = Mapping[str, List[Any]]
