"""
auth_service.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for principals, refresh tokens and audit events.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories are intentionally thin; business logic belongs in services.
