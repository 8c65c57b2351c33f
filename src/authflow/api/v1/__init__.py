"""
API v1 package.

Contains versioned routes for account registration, verification and login.
"""

from authflow.api.v1.routes import router

__all__ = ["router"]
