"""Bearer token guard and error envelope tests."""

from datetime import timedelta

from app.core.security import create_access_token
from app.db.models import UserStatus


def test_missing_token(client):
    response = client.get("/api/v1/profile")

    assert response.status_code == 401
    assert response.json() == {"message": "Não autenticado", "statusCode": 401}
    assert response.headers["www-authenticate"] == "Bearer"


def test_malformed_header(client):
    response = client.get("/api/v1/profile", headers={"Authorization": "Token abc"})

    assert response.status_code == 401
    assert response.json()["message"] == "Token inválido"


def test_token_signed_with_other_secret(client, user, settings):
    other = settings.model_copy(update={"jwt_secret": "another-secret"})
    token = create_access_token(user.id, other)

    response = client.get("/api/v1/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "Token inválido"


def test_expired_token(client, user, settings):
    token = create_access_token(user.id, settings, expires_delta=timedelta(seconds=-10))

    response = client.get("/api/v1/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "Token inválido"


def test_unknown_user(client, settings):
    token = create_access_token(999, settings)

    response = client.get("/api/v1/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "Token inválido"


def test_inactive_user(client, db, settings):
    inactive = db.user("inativo@example.com", status=UserStatus.INACTIVED.value)
    token = create_access_token(inactive.id, settings)

    response = client.get("/api/v1/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == (
        "A sua conta foi inativa, entre em contato com nosso suporte por favor."
    )


def test_valid_token(client, auth_headers, user):
    response = client.get("/api/v1/profile", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["id"] == user.id


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/v1/nao-existe")

    assert response.status_code == 404
    assert response.json() == {"message": "Not Found", "statusCode": 404}
