"""
auth_service.observability

Observability package.

Responsibilities:
- Structured logging configuration (with secret redaction).
- Request context propagation for consistent log enrichment.
"""

# Package marker.
