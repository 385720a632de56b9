"""
Authentication package.

Exports the AdminAuth dependency class and the token check used by the
admin routes.

CHANGELOG:
- 2026-10-08: Initial creation
"""

from solar_datagen.auth.bearer import AdminAuth, verify_bearer_token

__all__ = ["AdminAuth", "verify_bearer_token"]
