"""Conversion between Flask requests/responses and controller models."""

from flask import Request, redirect, render_template
from werkzeug.wrappers import Response as WerkzeugResponse

from ..models.instructions import RedirectInstruction, RenderInstruction
from ..models.requests import DiagnosticRequest


def to_diagnostic_request(request: Request) -> DiagnosticRequest:
    """Build a DiagnosticRequest from the current Flask request."""
    return DiagnosticRequest(
        path=request.path,
        query=tuple(request.args.items(multi=True)),
    )


def current_url(request: Request) -> str:
    """Path and query string of the current request."""
    query = request.query_string.decode("utf-8")
    return f"{request.path}?{query}" if query else request.path


def to_response(instruction: RenderInstruction | RedirectInstruction) -> str | WerkzeugResponse:
    """Render a template or build a redirect for a controller instruction."""
    if isinstance(instruction, RedirectInstruction):
        return redirect(instruction.url)
    return render_template(f"{instruction.view}.html", **instruction.data)
