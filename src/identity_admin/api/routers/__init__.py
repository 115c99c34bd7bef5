"""
identity_admin.api.routers

Routers: health, admin, session probe, dev auth.
"""

# Package marker.
