"""API routers for Bizdir."""

from bizdir.routers import auth, businesses, export, import_router

__all__ = ["auth", "businesses", "export", "import_router"]
