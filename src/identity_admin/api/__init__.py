"""
identity_admin.api

HTTP API package (FastAPI).

Responsibilities:
- App factory, dependencies, exception handlers and routers.
"""

# Package marker.
