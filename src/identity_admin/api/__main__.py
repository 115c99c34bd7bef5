"""
identity_admin.api.__main__

`python -m identity_admin.api` / `identity-admin` entrypoint.
"""

from __future__ import annotations

import uvicorn

from identity_admin.api.app import create_app
from identity_admin.settings import Settings, get_settings

_DEV_SECRET = Settings.model_fields["jwt_secret"].default


def check_startup(settings: Settings) -> None:
    """Refuse to serve prod with an empty admin list or the dev signing secret."""

    if settings.env != "prod":
        return
    if not settings.admin_emails:
        raise SystemExit("IDENTITY_ADMIN_ADMIN_EMAILS must list at least one admin in prod")
    if settings.jwt_secret == _DEV_SECRET:
        raise SystemExit("IDENTITY_ADMIN_JWT_SECRET must be set in prod")


def main() -> None:
    settings = get_settings()
    check_startup(settings)
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog owns log output
    )


if __name__ == "__main__":
    main()
