"""
identity_admin.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for the persistence layer.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories take a session and never commit; transaction ownership sits with the
# store classes in `services` and `providers`.
