"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization. Field names and
envelopes follow the legacy Laravel responses; validation messages are
produced in Portuguese by ``app.api.validation``.
"""

import json
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.db.models import TemplateCategory

T = TypeVar("T")


# =============================================================================
# Envelopes
# =============================================================================


class PaginationMeta(BaseModel):
    """Laravel paginator ``meta`` block."""

    model_config = ConfigDict(populate_by_name=True)

    current_page: int
    from_: int = Field(alias="from")
    to: int
    per_page: int
    total: int
    last_page: int

    @classmethod
    def for_page(cls, page: int, per_page: int, count: int, total: int) -> "PaginationMeta":
        """Build meta for ``count`` items shown on ``page`` out of ``total``."""
        skip = (page - 1) * per_page
        return cls(
            current_page=page,
            from_=skip + 1,
            to=skip + count,
            per_page=per_page,
            total=total,
            last_page=-(-total // per_page) if per_page > 0 else 1,
        )


class DataResponse(BaseModel, Generic[T]):
    """``{"data": ...}`` wrapper."""

    data: T


class PaginatedResponse(BaseModel, Generic[T]):
    """``{"data": [...], "meta": {...}}`` wrapper."""

    data: list[T]
    meta: PaginationMeta


class SuccessResponse(BaseModel):
    success: bool = True
    message: str


# =============================================================================
# Label Schemas
# =============================================================================


class LabelCreate(BaseModel):
    """Request schema for creating a label."""

    name: str = Field(min_length=1, max_length=150, description="Nome da label/etiqueta")
    number_id: int = Field(gt=0, description="ID do número WhatsApp associado")

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Clientes VIP", "number_id": 1}}
    )


class LabelRead(BaseModel):
    """Response schema for a label."""

    id: int
    user_id: int
    number_id: int
    name: str | None
    created_at: datetime | None
    updated_at: datetime | None
    deleted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Message Template Schemas
# =============================================================================


class MessageTemplateCreate(BaseModel):
    """Request schema for creating a message template.

    ``variables`` is extracted from ``content`` when omitted.
    """

    name: str = Field(min_length=1, max_length=255, description="Nome do template")
    content: str = Field(min_length=1, description="Conteúdo com variáveis, ex: Olá {{nome}}")
    category: str | None = Field(
        default=None,
        max_length=50,
        description=f"Categoria: {', '.join(c.value for c in TemplateCategory)}",
    )
    variables: list[str] | None = Field(default=None, description="Variáveis disponíveis")
    active: int | None = Field(default=None, description="1 = ativo, 0 = inativo")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Boas-vindas Cliente",
                "content": "Olá {{nome}}, bem-vindo à {{empresa}}! Como podemos ajudar?",
                "category": "marketing",
            }
        }
    )


class MessageTemplateUpdate(BaseModel):
    """Request schema for updating a message template. All fields optional."""

    name: str | None = Field(default=None, max_length=255)
    content: str | None = None
    category: str | None = Field(default=None, max_length=50)
    variables: list[str] | None = None
    active: int | None = None


class MessageTemplateRead(BaseModel):
    """Response schema for a message template, with ``variables`` decoded."""

    id: int
    user_id: int
    name: str
    content: str
    category: str | None
    variables: list[str]
    active: int
    created_at: datetime | None
    updated_at: datetime | None
    deleted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("variables", mode="before")
    @classmethod
    def decode_variables(cls, v: Any) -> list[str]:
        """Stored as a JSON-encoded array; NULL reads as an empty list."""
        if v is None or v == "":
            return []
        if isinstance(v, str):
            decoded = json.loads(v)
            return decoded if isinstance(decoded, list) else []
        return v


class TemplateRenderRequest(BaseModel):
    """Request to render a template with contact data."""

    data: dict[str, str | None] = Field(default_factory=dict)


class TemplateRenderResponse(BaseModel):
    content: str


# =============================================================================
# User Profile Schemas
# =============================================================================


class UserProfileRead(BaseModel):
    """Profile fields exposed to the client. The password hash is never included."""

    id: int
    name: str
    last_name: str | None
    email: str
    cel: str | None
    cpfCnpj: str | None
    status: str
    profile: str
    confirmed_mail: int | None
    active: int | None
    photo: str | None
    created_at: datetime | None
    updated_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class UserProfileUpdate(BaseModel):
    """Request schema for profile updates. All fields optional."""

    name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    cel: str | None = None
    password: str | None = None
    password_confirmation: str | None = None


# =============================================================================
# WhatsApp Schemas
# =============================================================================


class WhatsAppSetupRequest(BaseModel):
    """Request schema for creating a WhatsApp instance."""

    instanceName: str = Field(min_length=1, description="Nome da instância (identificador único)")
    name: str | None = Field(default=None, description="Nome para identificar esta conexão")
    webhookUrl: str | None = Field(default=None, description="URL do webhook para eventos")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "instanceName": "user_123_whatsapp",
                "name": "Meu WhatsApp Principal",
            }
        }
    )


class WhatsAppNumberSummary(BaseModel):
    id: int
    name: str
    instance_name: str
    qr_code: str | None = None
    pairing_code: str | None = None
    status: str


class WhatsAppSetupResponse(BaseModel):
    success: bool = True
    message: str
    number: WhatsAppNumberSummary


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    message: str = Field(description="Error message")
    statusCode: int = Field(description="HTTP status code")
    error_code: str | None = Field(default=None, description="Application-specific error code")


class ValidationErrorResponse(BaseModel):
    """Laravel-style validation error response."""

    success: bool = False
    message: str = "Erro de validação"
    errors: list[str]
    statusCode: int
