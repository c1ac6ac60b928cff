"""
basecore - shared infrastructure for tenant_scope.

Settings, logging, Redis and SQLAlchemy helpers. Nothing here knows about
tenants, sites or permissions.
"""
