from __future__ import annotations

from activity_connector.api.routes.activity import router as activity_router
from activity_connector.api.routes.health import router as health_router

__all__ = ["activity_router", "health_router"]
