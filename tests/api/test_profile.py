"""User profile endpoint tests."""

from datetime import datetime, timezone

import bcrypt

from app.db.models import User


def test_read_own_profile(client, user, auth_headers):
    response = client.get("/api/v1/profile", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "maria@example.com"
    assert body["name"] == "Maria"
    assert body["status"] == "actived"
    assert "password" not in body


def test_update_basic_fields(client, db, user, auth_headers):
    response = client.put(
        "/api/v1/profile",
        json={"name": "Maria Clara", "last_name": "Souza", "cel": "11987654321"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Maria Clara"
    assert body["last_name"] == "Souza"
    assert body["cel"] == "11987654321"
    assert db.get(User, user.id).name == "Maria Clara"


def test_update_email(client, db, user, auth_headers):
    response = client.put(
        "/api/v1/profile", json={"email": "nova@example.com"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert db.get(User, user.id).email == "nova@example.com"


def test_email_taken_by_other_user(client, db, auth_headers):
    db.user("joao@example.com", name="João")

    response = client.put(
        "/api/v1/profile", json={"email": "joao@example.com"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Este email já está em uso."


def test_email_taken_by_soft_deleted_user(client, db, auth_headers):
    db.user("antigo@example.com", deleted_at=datetime.now(timezone.utc))

    response = client.put(
        "/api/v1/profile", json={"email": "antigo@example.com"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["errors"] == ["Este email já está em uso."]


def test_invalid_email(client, auth_headers):
    response = client.put("/api/v1/profile", json={"email": "not-an-email"}, headers=auth_headers)

    assert response.status_code == 422
    assert response.json()["errors"] == ["O campo email deve ser um endereço de e-mail válido."]


def test_password_requires_confirmation(client, auth_headers):
    response = client.put("/api/v1/profile", json={"password": "novaSenha123"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "As senhas devem ser iguais para confirmação."


def test_password_mismatch(client, auth_headers):
    response = client.put(
        "/api/v1/profile",
        json={"password": "novaSenha123", "password_confirmation": "outraSenha"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "As senhas não coincidem."


def test_password_is_hashed(client, db, user, auth_headers):
    response = client.put(
        "/api/v1/profile",
        json={"password": "novaSenha123", "password_confirmation": "novaSenha123"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    stored = db.get(User, user.id).password
    assert stored != "novaSenha123"
    assert bcrypt.checkpw(b"novaSenha123", stored.encode("utf-8"))


def test_legacy_routes(client, db, auth_headers):
    other = db.user("joao@example.com", name="João")

    read = client.get(f"/api/v1/user/{other.id}", headers=auth_headers)
    assert read.status_code == 200
    assert read.json()["email"] == "joao@example.com"

    updated = client.post(f"/api/v1/user/{other.id}", json={"cel": "11999999999"}, headers=auth_headers)
    assert updated.status_code == 200
    assert updated.json()["cel"] == "11999999999"


def test_legacy_route_unknown_user(client, auth_headers):
    response = client.get("/api/v1/user/4040", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"message": "Usuário não encontrado.", "statusCode": 404}
