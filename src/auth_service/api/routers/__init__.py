"""
auth_service.api.routers

HTTP routers: public auth endpoints, admin endpoints and health probes.
"""

# Package marker.
