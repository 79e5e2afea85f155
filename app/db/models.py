"""Database models using SQLModel.

Maps the existing Laravel tables. Table structure must stay compatible with
the legacy application:
- User: account owning every other record
- WhatsAppNumber: WhatsApp instance connected by a user ("numbers")
- Label: contact label bound to a WhatsApp number
- MessageTemplate: reusable message text with {{variable}} placeholders

Rows are soft-deleted through ``deleted_at``.
"""

import datetime
import enum

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text, text
from sqlmodel import Field, SQLModel

# BIGINT on MySQL/PostgreSQL, INTEGER on SQLite so autoincrement keeps working
IdType = BigInteger().with_variant(Integer(), "sqlite")


class UserStatus(str, enum.Enum):
    ACTIVED = "actived"
    INACTIVED = "inactived"


class UserProfile(str, enum.Enum):
    ADMINISTRATOR = "administrator"
    USER = "user"


class TemplateCategory(str, enum.Enum):
    """Known template categories. Stored as free text, never enforced."""

    MARKETING = "marketing"
    SUPPORT = "support"
    NOTIFICATION = "notification"
    SALES = "sales"
    OTHER = "other"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _primary_key() -> Column:
    return Column(IdType, primary_key=True, autoincrement=True)


def _foreign_id(nullable: bool = False) -> Column:
    return Column(IdType, nullable=nullable, index=True)


def _created_at() -> Column:
    return Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


def _updated_at() -> Column:
    return Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=_utcnow,
    )


def _deleted_at() -> Column:
    return Column(DateTime(timezone=True), nullable=True, index=True)


# =============================================================================
# Database Models
# =============================================================================


class User(SQLModel, table=True):
    """Laravel ``users`` table."""

    __tablename__ = "users"

    id: int | None = Field(default=None, sa_column=_primary_key())
    name: str = Field(sa_column=Column(String(255), nullable=False))
    last_name: str | None = Field(default=None, sa_column=Column(String(255)))
    email: str = Field(sa_column=Column(String(255), nullable=False, unique=True))
    cel: str | None = Field(default=None, sa_column=Column(String(255)))
    cpfCnpj: str | None = Field(default=None, sa_column=Column("cpfCnpj", String(100)))
    password: str = Field(sa_column=Column(String(255), nullable=False))
    status: str = Field(
        default=UserStatus.ACTIVED.value,
        sa_column=Column(String(20), nullable=False, server_default=UserStatus.ACTIVED.value),
    )
    profile: str = Field(
        default=UserProfile.USER.value,
        sa_column=Column(String(20), nullable=False, server_default=UserProfile.USER.value),
    )
    photo: str | None = Field(default=None, sa_column=Column(String(255)))
    confirmed_mail: int | None = Field(default=0, sa_column=Column(Integer, default=0))
    active: int | None = Field(default=1, sa_column=Column(Integer, default=1))
    created_at: datetime.datetime | None = Field(default_factory=_utcnow, sa_column=_created_at())
    updated_at: datetime.datetime | None = Field(default_factory=_utcnow, sa_column=_updated_at())
    deleted_at: datetime.datetime | None = Field(default=None, sa_column=_deleted_at())


class WhatsAppNumber(SQLModel, table=True):
    """Laravel ``numbers`` table: one row per WhatsApp instance.

    ``status`` is 1 for the user's active number; ``status_connection`` is 1
    while the instance is connected.
    """

    __tablename__ = "numbers"

    id: int | None = Field(default=None, sa_column=_primary_key())
    user_id: int = Field(sa_column=_foreign_id())
    name: str = Field(sa_column=Column(String(255), nullable=False))
    instance: str = Field(sa_column=Column(String(255), nullable=False))
    status: int | None = Field(default=0, sa_column=Column(Integer, default=0))
    status_connection: int | None = Field(default=0, sa_column=Column(Integer, default=0))
    cel: str | None = Field(default=None, sa_column=Column(String(255)))
    qrcode: str | None = Field(default=None, sa_column=Column(Text))
    created_at: datetime.datetime | None = Field(default_factory=_utcnow, sa_column=_created_at())
    updated_at: datetime.datetime | None = Field(default_factory=_utcnow, sa_column=_updated_at())
    deleted_at: datetime.datetime | None = Field(default=None, sa_column=_deleted_at())


class Label(SQLModel, table=True):
    """Laravel ``labels`` table."""

    __tablename__ = "labels"

    id: int | None = Field(default=None, sa_column=_primary_key())
    user_id: int = Field(sa_column=_foreign_id())
    number_id: int = Field(sa_column=_foreign_id())
    name: str | None = Field(default=None, sa_column=Column(String(150)))
    created_at: datetime.datetime | None = Field(default_factory=_utcnow, sa_column=_created_at())
    updated_at: datetime.datetime | None = Field(default_factory=_utcnow, sa_column=_updated_at())
    deleted_at: datetime.datetime | None = Field(default=None, sa_column=_deleted_at())


class MessageTemplate(SQLModel, table=True):
    """Laravel ``message_templates`` table.

    ``variables`` holds the JSON-encoded list of placeholder names, kept in
    sync with ``content`` unless the client sends an explicit list.
    """

    __tablename__ = "message_templates"

    id: int | None = Field(default=None, sa_column=_primary_key())
    user_id: int = Field(sa_column=_foreign_id())
    name: str = Field(sa_column=Column(String(255), nullable=False))
    content: str = Field(sa_column=Column(Text, nullable=False))
    category: str | None = Field(default=None, sa_column=Column(String(50)))
    variables: str | None = Field(default=None, sa_column=Column(Text))
    active: int = Field(default=1, sa_column=Column(Integer, nullable=False, default=1))
    created_at: datetime.datetime | None = Field(default_factory=_utcnow, sa_column=_created_at())
    updated_at: datetime.datetime | None = Field(default_factory=_utcnow, sa_column=_updated_at())
    deleted_at: datetime.datetime | None = Field(default=None, sa_column=_deleted_at())
