"""
identity_admin.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and the service graph.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from fastapi import Request

from identity_admin.container import Services
from identity_admin.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The app factory stores the exact Settings instance it was built with.
    return request.app.state.settings  # type: ignore[attr-defined]


def services_dep(request: Request) -> Services:
    # Built on startup in `identity_admin.api.app.create_app`.
    return request.app.state.services  # type: ignore[attr-defined]
