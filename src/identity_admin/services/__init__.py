"""
identity_admin.services

Service layer.

Responsibilities:
- Identity lifecycle orchestration (single + bulk).
- Tombstone store and session revocation probe.
- Audit trail and directory read views.
"""

# Package marker.
