"""FastAPI routers and dependencies."""

from app.api.deps import get_current_user, get_db, get_whatsapp_provider
from app.api.labels import router as labels_router
from app.api.message_templates import router as message_templates_router
from app.api.profile import router as profile_router
from app.api.whatsapp import router as whatsapp_router

__all__ = [
    "get_current_user",
    "get_db",
    "get_whatsapp_provider",
    "labels_router",
    "message_templates_router",
    "profile_router",
    "whatsapp_router",
]
