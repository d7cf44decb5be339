import uuid
from app.core.security import create_refresh_token, decode_token


def signup(client, password="password123"):
    unique_id = str(uuid.uuid4())[:8]
    email = f"creator_{unique_id}@example.com"
    response = client.post("/auth/signup", json={
        "email": email,
        "username": f"creator_{unique_id}",
        "password": password
    })
    return email, response

def test_signup_success(client):
    """Test : créer un compte créateur"""
    email, response = signup(client)
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == email
    assert data["stripe_connected"] is False
    assert "password_hash" not in data  # Le password ne doit pas être retourné

def test_signup_duplicate_email(client):
    email, _ = signup(client)
    response = client.post("/auth/signup", json={
        "email": email,
        "username": "someone_else",
        "password": "password123"
    })
    assert response.status_code == 400
    assert "Email already registered" in response.json()["detail"]

def test_signup_short_password(client):
    _, response = signup(client, password="123")
    assert response.status_code == 422

def test_login_success(client):
    email, _ = signup(client)
    response = client.post("/auth/login", json={"email": email, "password": "password123"})

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert decode_token(data["access_token"]) is not None

def test_login_wrong_password(client):
    email, _ = signup(client)
    response = client.post("/auth/login", json={"email": email, "password": "wrong"})
    assert response.status_code == 401

def test_refresh(client):
    email, _ = signup(client)
    tokens = client.post("/auth/login", json={"email": email, "password": "password123"}).json()

    response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    assert decode_token(response.json()["access_token"]) is not None

def test_refresh_rejects_access_token(client):
    email, _ = signup(client)
    tokens = client.post("/auth/login", json={"email": email, "password": "password123"}).json()

    response = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401

def test_refresh_token_not_accepted_as_access(client, user):
    """Un refresh token ne donne pas accès aux endpoints"""
    token = create_refresh_token(user.id, user.email)
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

def test_me(client, user, auth_headers):
    response = client.get("/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["id"] == user.id

def test_invalid_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"

def test_health(client):
    assert client.get("/health/z").json() == {"status": "ok"}
    assert client.get("/health/db").json()["database"] == "ok"
