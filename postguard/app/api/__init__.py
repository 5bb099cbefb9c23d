"""API routers for PostGuard."""

from postguard.app.api.generate import router as generate_router

__all__ = ["generate_router"]
