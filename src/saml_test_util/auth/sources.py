"""Session-bound authentication sources.

Each configured source is bound to the caller's session. A successful login
writes a record under ``SESSION_KEY``; the record holds attributes as ordered
pairs so their release order survives JSON session serialization.
"""

import hmac
import logging
import os
import time
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional

from ..config.manager import get_auth_source_config
from ..config.schema import AuthSourceConfig, Config
from ..logging_audit import log_audit_event
from ..models.instructions import RedirectInstruction
from ..models.requests import add_query_params
from ..models.saml import NameID
from ..utils.exceptions import ConfigurationError, WrongUserPassError

logger = logging.getLogger(__name__)

SESSION_KEY = "saml_test_util.auth"

# Auth data key of the NameID released with a login
NAMEID_AUTH_DATA = "saml:sp:NameID"


class SessionAuthSource:
    """Base class for sources keeping their login in a session mapping.

    Attributes:
        source_id: Configured source identifier
        config: Source configuration
        session: Session mapping of the current user
    """

    source_type = ""

    def __init__(
        self,
        source_id: str,
        config: AuthSourceConfig,
        session: MutableMapping[str, Any],
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.source_id = source_id
        self.config = config
        self.session = session
        self._clock = clock

    def _record(self) -> Optional[Dict[str, Any]]:
        record = self.session.get(SESSION_KEY, {}).get(self.source_id)
        if record is None or record["Expire"] <= self._clock():
            return None
        return record

    def is_authenticated(self) -> bool:
        return self._record() is not None

    def login(self, return_url: str, error_url: str) -> RedirectInstruction:
        raise NotImplementedError

    def logout(self) -> None:
        records = dict(self.session.get(SESSION_KEY, {}))
        if records.pop(self.source_id, None) is not None:
            logger.info(f"Logged out of auth source '{self.source_id}'")
        # Reassign so cookie-backed sessions notice the change
        self.session[SESSION_KEY] = records

    def get_attributes(self) -> Dict[str, List[Any]]:
        record = self._record()
        if record is None:
            return {}
        return {name: list(values) for name, values in record["Attributes"]}

    def get_auth_data_array(self) -> Optional[Dict[str, Any]]:
        record = self._record()
        if record is None:
            return None
        data: Dict[str, Any] = {
            "Attributes": self.get_attributes(),
            "AuthnInstant": record["AuthnInstant"],
            "Expire": record["Expire"],
        }
        if record.get("NameID"):
            data[NAMEID_AUTH_DATA] = NameID.from_dict(record["NameID"])
        return data

    def get_auth_data(self, name: str) -> Any:
        data = self.get_auth_data_array()
        if data is None:
            return None
        return data.get(name)

    def complete_login(
        self,
        attributes: Mapping[str, List[Any]],
        name_id: Optional[NameID] = None,
    ) -> None:
        """Store a successful login in the session."""
        now = self._clock()
        records = dict(self.session.get(SESSION_KEY, {}))
        records[self.source_id] = {
            "Attributes": [[name, list(values)] for name, values in attributes.items()],
            "NameID": name_id.to_dict() if name_id is not None else None,
            "AuthnInstant": now,
            "Expire": now + self.config.session_duration,
        }
        self.session[SESSION_KEY] = records
        log_audit_event("AUTH_SOURCE_LOGIN", {
            "status": "success",
            "auth_source": self.source_id,
            "attribute_count": len(attributes),
        })

    def _configured_name_id(self) -> Optional[NameID]:
        if self.config.name_id is None:
            return None
        return NameID(**self.config.name_id.model_dump())


class StaticAuthSource(SessionAuthSource):
    """Source that logs in immediately with the configured attributes."""

    source_type = "static"

    def login(self, return_url: str, error_url: str) -> RedirectInstruction:
        self.complete_login(self.config.attributes, self._configured_name_id())
        return RedirectInstruction(return_url)


class PasswordAuthSource(SessionAuthSource):
    """Source that asks for a username and password on a login form.

    The accepted password is read from the environment variable named by
    ``config.password_env_var`` at each attempt.
    """

    source_type = "password"

    def __init__(
        self,
        source_id: str,
        config: AuthSourceConfig,
        session: MutableMapping[str, Any],
        login_url: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(source_id, config, session, clock)
        self.login_url = login_url

    def login(self, return_url: str, error_url: str) -> RedirectInstruction:
        return RedirectInstruction(
            add_query_params(self.login_url, {"ReturnTo": return_url, "ErrorURL": error_url})
        )

    def authenticate(self, username: str, password: str) -> None:
        """Check the credentials and store the login.

        Raises:
            ConfigurationError: If the password environment variable is unset
            WrongUserPassError: If the credentials are not accepted
        """
        expected_password = os.environ.get(self.config.password_env_var)
        if not expected_password:
            raise ConfigurationError(
                f"No password configured for auth source '{self.source_id}'. "
                f"Set the {self.config.password_env_var} environment variable."
            )

        username_ok = hmac.compare_digest(
            username.encode("utf-8"), (self.config.username or "").encode("utf-8")
        )
        password_ok = hmac.compare_digest(
            password.encode("utf-8"), expected_password.encode("utf-8")
        )
        if not (username_ok and password_ok):
            log_audit_event("AUTH_SOURCE_LOGIN_FAILED", {
                "status": "failure",
                "auth_source": self.source_id,
                "error_code": WrongUserPassError.error_code,
            })
            raise WrongUserPassError(self.source_id)

        self.complete_login(self.config.attributes, self._configured_name_id())


class AuthSourceRegistry:
    """Builds session-bound sources from configuration.

    Attributes:
        config: Application configuration
        login_path: URL prefix of the password login form
    """

    def __init__(
        self,
        config: Config,
        login_path: str = "/login",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.login_path = login_path.rstrip("/")
        self._clock = clock

    def available(self) -> List[Dict[str, str]]:
        return [
            {"id": source_id, "type": source.type}
            for source_id, source in self.config.auth_sources.items()
        ]

    def bind(self, source_id: str, session: MutableMapping[str, Any]) -> SessionAuthSource:
        source_config = get_auth_source_config(self.config, source_id)
        if source_config.type == "password":
            return PasswordAuthSource(
                source_id,
                source_config,
                session,
                login_url=f"{self.login_path}/{source_id}",
                clock=self._clock,
            )
        return StaticAuthSource(source_id, source_config, session, clock=self._clock)
