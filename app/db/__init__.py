"""Database models and session management."""

from app.db.models import (
    Label,
    MessageTemplate,
    TemplateCategory,
    User,
    UserProfile,
    UserStatus,
    WhatsAppNumber,
)
from app.db.session import (
    AsyncSession,
    close_db,
    create_all_tables,
    get_async_session,
    init_db,
)

__all__ = [
    # Models
    "User",
    "UserStatus",
    "UserProfile",
    "WhatsAppNumber",
    "Label",
    "MessageTemplate",
    "TemplateCategory",
    # Session
    "AsyncSession",
    "get_async_session",
    "create_all_tables",
    "close_db",
    "init_db",
]
