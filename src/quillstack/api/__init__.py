"""API route modules."""

from quillstack.api.admin import router as admin_router
from quillstack.api.classify import router as classify_router
from quillstack.api.settings import router as settings_router

__all__ = ["admin_router", "classify_router", "settings_router"]
