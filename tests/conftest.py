"""Shared fixtures: temporary SQLite database, API client and fake WhatsApp gateway."""

import asyncio
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_whatsapp_provider
from app.core import config
from app.core.config import Settings, get_settings
from app.core.security import create_access_token, hash_password
from app.db import session as db_session
from app.db.models import Label, MessageTemplate, User, WhatsAppNumber
from app.db.session import close_db, create_all_tables, get_session_maker
from app.interfaces.whatsapp_provider import (
    BaseWhatsAppProvider,
    InstanceInfo,
    SendResult,
    WhatsAppProviderError,
)
from app.main import create_app


@dataclass
class FakeWhatsAppProvider(BaseWhatsAppProvider):
    """In-memory gateway recording every call."""

    status: str = "qr"
    qr_code: str | None = "data:image/png;base64,AAAA"
    pairing_code: str | None = "ABCD1234"
    error: str | None = None
    created: list[dict[str, Any]] = field(default_factory=list)
    sent: list[dict[str, Any]] = field(default_factory=list)

    @property
    def provider_name(self) -> str:
        return "fake"

    async def create_instance(self, instance_name, webhook_url=None, qrcode=True):
        self.created.append(
            {"instance_name": instance_name, "webhook_url": webhook_url, "qrcode": qrcode}
        )
        if self.error:
            raise WhatsAppProviderError(self.error)
        return InstanceInfo(
            instance_name=instance_name,
            status=self.status,
            qr_code=self.qr_code,
            pairing_code=self.pairing_code,
        )

    async def send_text(self, instance_name, to, text):
        self.sent.append({"instance_name": instance_name, "to": to, "text": text})
        if self.error:
            raise WhatsAppProviderError(self.error)
        return SendResult(success=True, message_id=f"MSG{len(self.sent)}", timestamp=1700000000)


class Database:
    """Seeding helpers running on their own event loop."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def add(self, *rows):
        async def save():
            async with get_session_maker(self.settings)() as session:
                for row in rows:
                    session.add(row)
                await session.commit()
                for row in rows:
                    await session.refresh(row)

        asyncio.run(save())
        return rows[0] if len(rows) == 1 else rows

    def get(self, model, row_id):
        async def load():
            async with get_session_maker(self.settings)() as session:
                return await session.get(model, row_id)

        return asyncio.run(load())

    def user(self, email: str = "maria@example.com", **values) -> User:
        values.setdefault("name", "Maria")
        values.setdefault("password", hash_password("secret123"))
        return self.add(User(email=email, **values))

    def number(self, user: User, **values) -> WhatsAppNumber:
        values.setdefault("name", "WhatsApp Principal")
        values.setdefault("instance", f"user_{user.id}_whatsapp")
        values.setdefault("status", 1)
        return self.add(WhatsAppNumber(user_id=user.id, **values))

    def label(self, user: User, number: WhatsAppNumber, name: str, **values) -> Label:
        return self.add(Label(user_id=user.id, number_id=number.id, name=name, **values))

    def template(self, user: User, name: str, content: str, **values) -> MessageTemplate:
        return self.add(MessageTemplate(user_id=user.id, name=name, content=content, **values))


@pytest.fixture
def settings(tmp_path) -> Iterator[Settings]:
    """Settings pointing at a fresh SQLite file, installed as the global settings."""
    test_settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret",
        app_url="http://testserver",
        retry_base_delay=0.01,
        retry_max_delay=0.05,
    )
    config._settings = test_settings
    db_session._engine = None
    db_session._async_session_maker = None

    asyncio.run(create_all_tables(test_settings))

    yield test_settings

    asyncio.run(close_db(test_settings))
    config._settings = None


@pytest.fixture
def db(settings) -> Database:
    return Database(settings)


@pytest.fixture
def provider() -> FakeWhatsAppProvider:
    return FakeWhatsAppProvider()


@pytest.fixture
def client(settings, provider) -> TestClient:
    """API client without lifespan, so no logging or seeding side effects."""
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_whatsapp_provider] = lambda: provider
    return TestClient(app)


@pytest.fixture
def user(db) -> User:
    return db.user()


@pytest.fixture
def auth_headers(user, settings) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, settings)}"}
