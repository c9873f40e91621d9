"""API route modules."""
from api.routes.system import router as system_router
from api.routes.lists import router as lists_router
from api.routes.records import router as records_router
from api.routes.review import router as review_router
from api.routes.analytics import router as analytics_router
from api.routes.settings import router as settings_router

__all__ = [
    "system_router",
    "lists_router",
    "records_router",
    "review_router",
    "analytics_router",
    "settings_router",
]
