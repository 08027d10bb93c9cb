"""Unit tests for the admin diagnostic controller.

Sources and the exception state store are replaced with in-memory doubles passed
to the controller constructor.
"""

from typing import Any, Dict, List, Optional
from unittest.mock import patch

import pytest
from lxml import etree

from saml_test_util.admin.controller import AdminTestController
from saml_test_util.auth.state import ExceptionState, ExceptionStateStore
from saml_test_util.models.instructions import RedirectInstruction, RenderInstruction
from saml_test_util.models.requests import (
    EXCEPTION_PARAM,
    DiagnosticRequest,
    get_query_param,
)
from saml_test_util.models.saml import NAMEID_FORMAT_TRANSIENT, NameID
from saml_test_util.utils.exceptions import (
    NoStateError,
    UnknownAuthSourceError,
    WrongUserPassError,
)


class FakeSource:
    """Authentication source double with fixed attributes."""

    def __init__(
        self,
        source_id: str = "admin",
        authenticated: bool = False,
        attributes: Optional[Dict[str, List[Any]]] = None,
        auth_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.source_id = source_id
        self.authenticated = authenticated
        self.attributes = attributes or {}
        self.auth_data = auth_data
        self.login_calls: List[tuple] = []
        self.logout_calls = 0

    def is_authenticated(self) -> bool:
        return self.authenticated

    def login(self, return_url: str, error_url: str) -> RedirectInstruction:
        self.login_calls.append((return_url, error_url))
        return RedirectInstruction(f"https://idp.example.org/sso?return={return_url}")

    def logout(self) -> None:
        self.logout_calls += 1
        self.authenticated = False

    def get_attributes(self) -> Dict[str, List[Any]]:
        return self.attributes

    def get_auth_data_array(self) -> Optional[Dict[str, Any]]:
        return self.auth_data

    def get_auth_data(self, name: str) -> Any:
        return (self.auth_data or {}).get(name)


class FakeProvider:
    """Source provider double returning one preconfigured source."""

    def __init__(self, source: FakeSource) -> None:
        self.source = source
        self.bound: List[str] = []

    def available(self) -> List[Dict[str, str]]:
        return [{"id": self.source.source_id, "type": "fake"}]

    def bind(self, source_id: str, session: Dict[str, Any]) -> FakeSource:
        if source_id != self.source.source_id:
            raise UnknownAuthSourceError(source_id)
        self.bound.append(source_id)
        return self.source


class FailingStore:
    """State store double in which no reference ever resolves."""

    def save(self, state: ExceptionState) -> str:
        return "_never"

    def load(self, reference_id: str) -> Optional[ExceptionState]:
        return None

    def attach_failure(self, reference_id: str, failure: BaseException) -> bool:
        return False

    def __contains__(self, reference_id: object) -> bool:
        return False


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def store(clock) -> ExceptionStateStore:
    return ExceptionStateStore(lifetime_seconds=3600, clock=clock)


@pytest.fixture
def controller(session, source, store, clock) -> AdminTestController:
    return AdminTestController(session, FakeProvider(source), store, clock=clock)


class TestMainWithoutAuthSource:
    """Requests that do not name an authentication source."""

    def test_renders_source_list(self, controller):
        """Test main renders the list of configured sources."""
        # Arrange
        request = DiagnosticRequest.create("/admin/test")

        # Act
        result = controller.main(request)

        # Assert
        assert isinstance(result, RenderInstruction)
        assert result.view == "authsource_list"
        assert result.data["sources"] == [{"id": "admin", "type": "fake"}]

    @pytest.mark.parametrize("authenticated", [True, False])
    def test_independent_of_authentication_state(self, session, store, authenticated):
        """Test source list is shown whatever the session state."""
        # Arrange
        provider = FakeProvider(FakeSource(authenticated=authenticated))
        controller = AdminTestController(session, provider, store)

        # Act
        result = controller.main(DiagnosticRequest.create("/admin/test"))

        # Assert
        assert isinstance(result, RenderInstruction)
        assert provider.bound == []

    def test_empty_as_parameter_shows_list(self, controller):
        """Test an empty 'as' query value is treated as absent."""
        # Act
        result = controller.main(DiagnosticRequest.create("/admin/test", {"as": ""}))

        # Assert
        assert result.view == "authsource_list"

    def test_as_query_parameter_selects_source(self, controller, source):
        """Test the 'as' query parameter is used when no path segment is given."""
        # Act
        result = controller.main(DiagnosticRequest.create("/admin/test", {"as": "admin"}))

        # Assert
        assert isinstance(result, RedirectInstruction)
        assert len(source.login_calls) == 1


class TestMainLogout:
    """Requests carrying the logout marker."""

    def test_logout_redirects_without_marker(self, controller, source):
        """Test logout redirects to the page URL without the logout marker."""
        # Arrange
        source.authenticated = True
        request = DiagnosticRequest.create("/admin/test/admin", {"logout": ""})

        # Act
        result = controller.main(request, "admin")

        # Assert
        assert isinstance(result, RedirectInstruction)
        assert result.url == "/admin/test/admin"
        assert "logout" not in result.url
        assert source.logout_calls == 1

    def test_logout_keeps_other_query_parameters(self, controller):
        """Test unrelated query parameters survive the logout redirect."""
        # Arrange
        request = DiagnosticRequest.create("/admin/test", [("as", "admin"), ("logout", "")])

        # Act
        result = controller.main(request)

        # Assert
        assert result.url == "/admin/test?as=admin"

    def test_logout_is_idempotent(self, controller, source):
        """Test repeated logout requests each produce a redirect."""
        # Arrange
        request = DiagnosticRequest.create("/admin/test/admin?logout")

        # Act
        first = controller.main(request, "admin")
        second = controller.main(request, "admin")

        # Assert
        assert isinstance(first, RedirectInstruction)
        assert isinstance(second, RedirectInstruction)
        assert first.url == second.url
        assert source.logout_calls == 2


class TestMainWithException:
    """Requests returning from a failed login."""

    def test_unresolved_reference_raises_nostate(self, session, source):
        """Test a reference that does not resolve fails with NOSTATE."""
        # Arrange
        controller = AdminTestController(session, FakeProvider(source), FailingStore())
        request = DiagnosticRequest.create(
            "/admin/test/admin", {EXCEPTION_PARAM: "SomeInvalidId"}
        )

        # Act & Assert
        with pytest.raises(NoStateError, match="^NOSTATE$") as exc_info:
            controller.main(request, "admin")

        assert str(exc_info.value) == "NOSTATE"
        assert exc_info.value.reference_id == "SomeInvalidId"

    def test_stored_failure_is_reraised_unmodified(self, controller, store):
        """Test the exact stored failure object is propagated."""
        # Arrange
        failure = WrongUserPassError("admin")
        reference_id = store.save(ExceptionState(return_to="/admin/test/admin", failure=failure))
        request = DiagnosticRequest.create("/admin/test/admin", {EXCEPTION_PARAM: reference_id})

        # Act & Assert
        with pytest.raises(WrongUserPassError) as exc_info:
            controller.main(request, "admin")

        assert exc_info.value is failure

    def test_arbitrary_failure_type_is_not_wrapped(self, controller, store):
        """Test failures outside the package hierarchy pass through too."""
        # Arrange
        failure = RuntimeError("IdP returned an error")
        reference_id = store.save(ExceptionState(failure=failure))
        request = DiagnosticRequest.create("/admin/test/admin", {EXCEPTION_PARAM: reference_id})

        # Act & Assert
        with pytest.raises(RuntimeError) as exc_info:
            controller.main(request, "admin")

        assert exc_info.value is failure

    def test_reference_is_single_use(self, controller, store):
        """Test a consumed reference no longer resolves."""
        # Arrange
        reference_id = store.save(ExceptionState(failure=WrongUserPassError("admin")))
        request = DiagnosticRequest.create("/admin/test/admin", {EXCEPTION_PARAM: reference_id})
        with pytest.raises(WrongUserPassError):
            controller.main(request, "admin")

        # Act & Assert
        with pytest.raises(NoStateError):
            controller.main(request, "admin")

    def test_pending_state_without_failure_raises_nostate(self, controller, store):
        """Test a state that never captured a failure is treated as missing."""
        # Arrange
        reference_id = store.save(ExceptionState(return_to="/admin/test/admin"))
        request = DiagnosticRequest.create("/admin/test/admin", {EXCEPTION_PARAM: reference_id})

        # Act & Assert
        with pytest.raises(NoStateError):
            controller.main(request, "admin")

    def test_exception_checked_before_source_is_bound(self, session, store):
        """Test the reference is resolved even for an unknown source."""
        # Arrange
        provider = FakeProvider(FakeSource())
        controller = AdminTestController(session, provider, store)
        request = DiagnosticRequest.create("/admin/test/other", {EXCEPTION_PARAM: "_missing"})

        # Act & Assert
        with pytest.raises(NoStateError):
            controller.main(request, "other")

        assert provider.bound == []


class TestMainNotAuthenticated:
    """Requests for a source the session has not logged in to."""

    def test_redirects_to_login(self, controller, source):
        """Test main hands off to the source login."""
        # Arrange
        request = DiagnosticRequest.create("/admin/test/admin")

        # Act
        result = controller.main(request, "admin")

        # Assert
        assert isinstance(result, RedirectInstruction)
        assert result.url.startswith("https://idp.example.org/sso")
        return_url, error_url = source.login_calls[0]
        assert return_url == "/admin/test/admin"
        assert error_url.startswith("/admin/test/admin?")

    def test_error_url_reference_resolves(self, controller, source, store):
        """Test the reference embedded in the error URL is stored."""
        # Act
        controller.main(DiagnosticRequest.create("/admin/test/admin"), "admin")

        # Assert
        _, error_url = source.login_calls[0]
        reference_id = get_query_param(error_url, EXCEPTION_PARAM)
        assert reference_id is not None
        assert reference_id in store
        state = store.load(reference_id)
        assert state.return_to == "/admin/test/admin"
        assert state.failure is None

    def test_unknown_source_raises(self, controller):
        """Test an unconfigured source identifier is rejected."""
        # Act & Assert
        with pytest.raises(UnknownAuthSourceError) as exc_info:
            controller.main(DiagnosticRequest.create("/admin/test/nope"), "nope")

        assert exc_info.value.source_id == "nope"
        assert exc_info.value.error_code == "NOAUTHSOURCE"


class TestMainAuthenticated:
    """Requests for a source the session is logged in to."""

    def test_renders_attributes_in_order(self, session, store):
        """Test attribute names and values are kept as released."""
        # Arrange
        attributes = {"mail": ["a@x.com", "b@x.com"], "cn": ["Name"]}
        source = FakeSource(authenticated=True, attributes=attributes)
        controller = AdminTestController(session, FakeProvider(source), store)

        # Act
        result = controller.main(DiagnosticRequest.create("/admin/test/admin"), "admin")

        # Assert
        assert isinstance(result, RenderInstruction)
        assert result.view == "status"
        assert list(result.data["attributes"]) == ["mail", "cn"]
        assert result.data["attributes"]["mail"] == ["a@x.com", "b@x.com"]
        assert result.data["attributes"]["cn"] == ["Name"]

    def test_structured_values_are_serialized(self, session, store):
        """Test NameID and XML attribute values render as text."""
        # Arrange
        name_id = NameID(value="_b806c4f9", format=NAMEID_FORMAT_TRANSIENT)
        element = etree.fromstring("<AttributeValue>42</AttributeValue>")
        source = FakeSource(
            authenticated=True,
            attributes={
                "uid": ["tim"],
                "eduPersonTargetedID": [name_id],
                "xml": [element],
            },
        )
        controller = AdminTestController(session, FakeProvider(source), store)

        # Act
        result = controller.main(DiagnosticRequest.create("/admin/test/admin"), "admin")

        # Assert
        attributes = result.data["attributes"]
        assert attributes["uid"] == ["tim"]
        assert attributes["eduPersonTargetedID"][0].startswith("<saml:NameID")
        assert "_b806c4f9" in attributes["eduPersonTargetedID"][0]
        assert attributes["xml"] == ["<AttributeValue>42</AttributeValue>"]

    def test_source_values_are_not_mutated(self, session, store):
        """Test normalization leaves the source attributes untouched."""
        # Arrange
        name_id = NameID(value="abc")
        attributes = {"eduPersonTargetedID": [name_id]}
        source = FakeSource(authenticated=True, attributes=attributes)
        controller = AdminTestController(session, FakeProvider(source), store)

        # Act
        controller.main(DiagnosticRequest.create("/admin/test/admin"), "admin")

        # Assert
        assert attributes["eduPersonTargetedID"][0] is name_id

    def test_status_includes_nameid_and_remaining(self, session, store, clock):
        """Test status data carries the NameID, auth data and session lifetime."""
        # Arrange
        name_id = NameID(value="_b806c4f9", format=NAMEID_FORMAT_TRANSIENT)
        auth_data = {
            "Attributes": {"uid": ["tim"]},
            "AuthnInstant": clock.now,
            "Expire": clock.now + 120,
            "saml:sp:NameID": name_id,
        }
        source = FakeSource(authenticated=True, attributes={"uid": ["tim"]}, auth_data=auth_data)
        controller = AdminTestController(session, FakeProvider(source), store, clock=clock)

        # Act
        result = controller.main(DiagnosticRequest.create("/admin/test/admin"), "admin")

        # Assert
        assert result.data["nameid"] == name_id.to_display()
        assert result.data["remaining"] == 120
        assert "Attributes" not in result.data["auth_data"]
        assert result.data["auth_data"]["saml:sp:NameID"] == name_id.to_display()
        assert result.data["logout_url"] == "/admin/test/admin?logout="
        assert result.data["source_id"] == "admin"

    def test_status_without_auth_data(self, session, store):
        """Test status renders when the source returns no auth data."""
        # Arrange
        source = FakeSource(authenticated=True, attributes={"uid": ["tim"]}, auth_data=None)
        controller = AdminTestController(session, FakeProvider(source), store)

        # Act
        result = controller.main(DiagnosticRequest.create("/admin/test/admin"), "admin")

        # Assert
        assert result.data["nameid"] is None
        assert result.data["remaining"] is None
        assert result.data["auth_data"] == {}

    def test_no_login_when_authenticated(self, session, store):
        """Test an authenticated session is never sent to the login."""
        # Arrange
        source = FakeSource(authenticated=True)
        controller = AdminTestController(session, FakeProvider(source), store)

        # Act
        controller.main(DiagnosticRequest.create("/admin/test/admin"), "admin")

        # Assert
        assert source.login_calls == []
        assert len(store) == 0

    def test_attributes_shown_is_audited(self, session, store):
        """Test an audit event is logged when attributes are shown."""
        # Arrange
        source = FakeSource(authenticated=True, attributes={"uid": ["tim"], "cn": ["Tim"]})
        controller = AdminTestController(session, FakeProvider(source), store)

        # Act
        with patch("saml_test_util.admin.controller.log_audit_event") as mock_audit:
            controller.main(DiagnosticRequest.create("/admin/test/admin"), "admin")

        # Assert
        mock_audit.assert_called_once()
        event_type, details = mock_audit.call_args[0]
        assert event_type == "AUTH_TEST_ATTRIBUTES_SHOWN"
        assert details["attribute_count"] == 2


class TestLogoutView:
    """The logged-out confirmation page."""

    @pytest.mark.parametrize(
        "path",
        ["/admin/logout", "/admin/logout?SimpleSAML_Auth_State_exceptionId=_x", "/admin/logout?as=admin"],
    )
    def test_logout_always_renders(self, controller, path):
        """Test logout renders the logged-out view for any request."""
        # Act
        result = controller.logout(DiagnosticRequest.create(path))

        # Assert
        assert isinstance(result, RenderInstruction)
        assert result.view == "logout"
