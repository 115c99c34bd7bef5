"""
identity_admin.auth

Authentication/authorization package.

Responsibilities:
- Bearer token helpers and verification.
- Admin allow-list policy and the admission gate.
- FastAPI auth dependencies.
"""

# Package marker.
