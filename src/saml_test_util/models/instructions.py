"""Terminal outputs of the admin diagnostic controller.

Exactly one instruction is produced per controller call. The web layer turns a
RenderInstruction into a rendered template and a RedirectInstruction into an
HTTP redirect.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class RenderInstruction:
    """Render a named view with the given data.

    Attributes:
        view: Template name without extension (e.g. "status")
        data: Template context
    """

    view: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RedirectInstruction:
    """Redirect the user agent to ``url``."""

    url: str
