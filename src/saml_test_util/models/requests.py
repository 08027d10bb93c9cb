"""Inbound request model for the admin diagnostic pages."""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlencode, urlsplit

# Reserved query parameter carrying the exception reference on re-entry
EXCEPTION_PARAM = "SimpleSAML_Auth_State_exceptionId"
LOGOUT_PARAM = "logout"
AUTH_SOURCE_PARAM = "as"

QueryPairs = Tuple[Tuple[str, str], ...]


def _to_pairs(query: Union[Mapping[str, str], Iterable[Tuple[str, str]], None]) -> QueryPairs:
    if query is None:
        return ()
    if isinstance(query, Mapping):
        return tuple((str(k), str(v)) for k, v in query.items())
    return tuple((str(k), str(v)) for k, v in query)


@dataclass(frozen=True)
class DiagnosticRequest:
    """Immutable view of an admin diagnostic request.

    Attributes:
        path: Request path without query string (e.g. "/admin/test/admin")
        query: Raw query parameters in their original order
    """

    path: str
    query: QueryPairs = ()

    @classmethod
    def create(
        cls,
        path: str,
        query: Union[Mapping[str, str], Iterable[Tuple[str, str]], None] = None,
    ) -> "DiagnosticRequest":
        """Build a request from a path and an optional mapping or pair list.

        A query string embedded in ``path`` is parsed and placed before ``query``.

        Example:
            >>> req = DiagnosticRequest.create("/admin/test", {"logout": ""})
            >>> req.logout
            True
        """
        parts = urlsplit(path)
        embedded = tuple(parse_qsl(parts.query, keep_blank_values=True))
        return cls(path=parts.path or "/", query=embedded + _to_pairs(query))

    def get(self, name: str) -> Optional[str]:
        """Return the first value of query parameter ``name`` or None."""
        for key, value in self.query:
            if key == name:
                return value
        return None

    def has(self, name: str) -> bool:
        return any(key == name for key, _ in self.query)

    @property
    def auth_source_id(self) -> Optional[str]:
        return self.get(AUTH_SOURCE_PARAM) or None

    @property
    def exception_reference_id(self) -> Optional[str]:
        return self.get(EXCEPTION_PARAM)

    @property
    def logout(self) -> bool:
        return self.has(LOGOUT_PARAM)

    def url(self, without: Iterable[str] = ()) -> str:
        """Rebuild the request URL, dropping the named query parameters."""
        dropped = set(without)
        kept = [(k, v) for k, v in self.query if k not in dropped]
        if not kept:
            return self.path
        return f"{self.path}?{urlencode(kept)}"


def add_query_params(url: str, params: Mapping[str, str]) -> str:
    """Append ``params`` to ``url``, replacing parameters with the same name."""
    parts = urlsplit(url)
    existing = [
        (k, v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if k not in params
    ]
    query = urlencode(existing + list(params.items()))
    base = parts._replace(query="", fragment="").geturl()
    return f"{base}?{query}" if query else base


def get_query_param(url: str, name: str) -> Optional[str]:
    """Return the first value of ``name`` in the query string of ``url``."""
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key == name:
            return value
    return None


def is_local_url(url: Optional[str]) -> bool:
    """Return True if ``url`` is a path on this server (no scheme or host)."""
    if not url or not url.startswith("/") or url.startswith(("//", "/\\")):
        return False
    parts = urlsplit(url)
    return not parts.scheme and not parts.netloc
