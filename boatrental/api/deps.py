"""Shared route dependencies: session guards, templates and form parsing."""

import logging
from pathlib import Path
from typing import Any, TypeVar

from fastapi import Request
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ValidationError

from boatrental.core import settings
from boatrental.middleware.session_guard import SessionGuard

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Browser pages bounce to the login form; JSON endpoints answer 401
page_guard = SessionGuard.from_settings(on_reject="redirect")
api_guard = SessionGuard.from_settings(on_reject="unauthorized")

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.globals["app_name"] = settings.app_name


class FormError(Exception):
    """Submitted form failed validation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def render(
    request: Request,
    name: str,
    context: dict[str, Any] | None = None,
    status_code: int = 200,
) -> Response:
    """Render a Jinja2 page template."""
    return templates.TemplateResponse(request, name, context or {}, status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    """Post/Redirect/Get redirect."""
    return RedirectResponse(url, status_code=303)


def format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ()) if part != "__root__")
        message = item.get("msg", "invalid value")
        parts.append(f"{field}: {message}" if field else message)
    return "; ".join(parts)


async def parse_form(request: Request, schema: type[ModelT]) -> ModelT:
    """Validate the submitted form (or JSON body) against a schema.

    Raises FormError with a readable message when validation fails.
    """
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            data = await request.json()
        except ValueError as e:
            raise FormError("Malformed JSON body") from e
        if not isinstance(data, dict):
            raise FormError("Expected a JSON object")
    else:
        form = await request.form()
        data = {key: value for key, value in form.items() if isinstance(value, str)}

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        message = format_validation_error(e)
        logger.debug(f"Form validation failed on {request.url.path}: {message}")
        raise FormError(message) from e
