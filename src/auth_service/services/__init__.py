"""
auth_service.services

Service-layer package.

Responsibilities:
- Own transaction boundaries for login, refresh, logout and registration.
- Compose the token codec, refresh token store, credential store and audit sink.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services should be pure Python and easily testable with fake collaborators.
