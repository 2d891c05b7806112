"""
auth_service.auth

Authentication primitives.

Responsibilities:
- Signed access token codec (JWT).
- Password hashing.
- FastAPI bearer dependencies (caller identity + role checks).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing here touches the database; persistence lives in `auth_service.db`.
