"""
auth_service.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories for principals,
  refresh tokens and audit events.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services own transaction boundaries; repositories only flush.
