"""Admin diagnostic pages for authentication sources."""

from saml_test_util.admin.controller import AdminTestController
from saml_test_util.admin.display import normalize_attributes, serialize_for_display

__all__ = [
    "AdminTestController",
    "normalize_attributes",
    "serialize_for_display",
]
