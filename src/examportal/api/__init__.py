"""REST API for the exam portal."""

from examportal.api.app import app, create_app, main
from examportal.api.models import (
    APIResponse,
    RegistrationRequest,
    RegistrationResponse,
)

__all__ = [
    "APIResponse",
    "RegistrationRequest",
    "RegistrationResponse",
    "app",
    "create_app",
    "main",
]
