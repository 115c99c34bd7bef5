"""
identity_admin.providers

External collaborator boundary.

Responsibilities:
- Declare the identity provider and document store contracts.
- Ship SQL-backed reference implementations of both.
"""

# Package marker.
