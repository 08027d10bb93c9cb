"""Admin diagnostic controller for authentication sources.

Given an optional authentication source identifier, shows the configured
sources, starts a login, re-raises a failure captured during an earlier login,
logs the user out, or shows the attributes released for the current session.

The controller keeps no state between calls. Sources and the exception state
store are supplied by the caller.
"""

import logging
import time
from typing import Any, Callable, Dict, MutableMapping, Optional, Union

from ..auth.protocol import AuthSourceProviderProtocol, ExceptionStateStoreProtocol
from ..auth.sources import NAMEID_AUTH_DATA
from ..auth.state import ExceptionState, resume_or_fail
from ..logging_audit import log_audit_event
from ..models.instructions import RedirectInstruction, RenderInstruction
from ..models.requests import (
    EXCEPTION_PARAM,
    LOGOUT_PARAM,
    DiagnosticRequest,
    add_query_params,
)
from .display import normalize_attributes, serialize_for_display

logger = logging.getLogger(__name__)

Instruction = Union[RenderInstruction, RedirectInstruction]


class AdminTestController:
    """Controller behind the admin "test authentication sources" pages.

    Attributes:
        session: Session mapping of the current user
        sources: Provider listing sources and binding them to the session
        state_store: Store for failures captured across the login redirect

    Example:
        >>> controller = AdminTestController(session, registry, store)
        >>> instruction = controller.main(DiagnosticRequest.create("/admin/test"))
        >>> instruction.view
        'authsource_list'
    """

    def __init__(
        self,
        session: MutableMapping[str, Any],
        sources: AuthSourceProviderProtocol,
        state_store: ExceptionStateStoreProtocol,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.session = session
        self.sources = sources
        self.state_store = state_store
        self._clock = clock

    def main(
        self,
        request: DiagnosticRequest,
        auth_source_id: Optional[str] = None,
    ) -> Instruction:
        """Handle a request for the source list or one source's test page.

        Args:
            request: Inbound request
            auth_source_id: Source from the URL path; falls back to the ``as``
                query parameter

        Returns:
            RenderInstruction or RedirectInstruction

        Raises:
            NoStateError: If the request names an exception state that does not
                resolve
            UnknownAuthSourceError: If the source is not configured
        """
        if auth_source_id is None:
            auth_source_id = request.auth_source_id

        if auth_source_id is None:
            return RenderInstruction("authsource_list", {"sources": self.sources.available()})

        if request.exception_reference_id is not None:
            log_audit_event("AUTH_TEST_EXCEPTION_RESUMED", {
                "auth_source": auth_source_id,
                "reference_id": request.exception_reference_id,
            })
            resume_or_fail(self.state_store, request.exception_reference_id)

        source = self.sources.bind(auth_source_id, self.session)
        page_url = request.url(without=(EXCEPTION_PARAM, LOGOUT_PARAM))

        if request.logout:
            source.logout()
            log_audit_event("AUTH_TEST_LOGOUT", {"status": "success", "auth_source": auth_source_id})
            return RedirectInstruction(page_url)

        if not source.is_authenticated():
            reference_id = self.state_store.save(ExceptionState(return_to=page_url))
            error_url = add_query_params(page_url, {EXCEPTION_PARAM: reference_id})
            log_audit_event("AUTH_TEST_LOGIN_STARTED", {
                "status": "pending",
                "auth_source": auth_source_id,
                "reference_id": reference_id,
            })
            return source.login(page_url, error_url)

        return self._status(source, auth_source_id, page_url)

    def logout(self, request: DiagnosticRequest) -> RenderInstruction:
        """Show the logged-out confirmation page."""
        logger.debug(f"Rendering logout confirmation for {request.path}")
        return RenderInstruction("logout", {})

    def _status(self, source: Any, auth_source_id: str, page_url: str) -> RenderInstruction:
        attributes = normalize_attributes(source.get_attributes())
        auth_data = source.get_auth_data_array() or {}
        name_id = source.get_auth_data(NAMEID_AUTH_DATA)

        expire = auth_data.get("Expire")
        remaining = int(expire - self._clock()) if isinstance(expire, (int, float)) else None

        data: Dict[str, Any] = {
            "source_id": auth_source_id,
            "attributes": attributes,
            "auth_data": {
                key: serialize_for_display(value)
                for key, value in auth_data.items()
                if key != "Attributes"
            },
            "nameid": serialize_for_display(name_id) if name_id is not None else None,
            "logout_url": add_query_params(page_url, {LOGOUT_PARAM: ""}),
            "remaining": remaining,
        }

        log_audit_event("AUTH_TEST_ATTRIBUTES_SHOWN", {
            "status": "success",
            "auth_source": auth_source_id,
            "attribute_count": len(attributes),
        })
        return RenderInstruction("status", data)
