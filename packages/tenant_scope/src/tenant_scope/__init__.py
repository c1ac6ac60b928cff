"""
Tenant Scope Engine

Maintains the selected tenant scope (company, site, subsite, team), hydrates
it cache-first from a remote site store, and resolves per-module access
rights by merging role and department grants.
"""

__version__ = "0.1.0"
