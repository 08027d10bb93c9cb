"""Models module.

This module provides data models and dataclasses for the application.
"""

from saml_test_util.models.instructions import RedirectInstruction, RenderInstruction
from saml_test_util.models.requests import DiagnosticRequest
from saml_test_util.models.saml import NameID

__all__ = [
    "DiagnosticRequest",
    "NameID",
    "RedirectInstruction",
    "RenderInstruction",
]
