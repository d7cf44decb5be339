import os
import sys
import tempfile
import uuid
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# Config de test AVANT d'importer app (SQLite + dossier d'uploads jetable)
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="launchpad-uploads-"))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"
test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# PATCH: remplacer le engine et SessionLocal du core.database AVANT d'importer app
import app.core.database
app.core.database.engine = test_engine
app.core.database.SessionLocal = TestingSessionLocal

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.main import app
from app.models.user import User
from app.services import content_service
from app.services.blob_store import BlobStore, get_blob_store

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB (et les sessions d'édition) avant/après chaque test"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    content_service.clear_sessions()
    yield
    content_service.clear_sessions()
    Base.metadata.drop_all(bind=test_engine)

# Override la dépendance
app.dependency_overrides[get_db] = override_get_db


def create_test_user(email=None, username=None):
    unique_id = str(uuid.uuid4())[:8]
    db = TestingSessionLocal()
    user = User(
        email=email or f"user{unique_id}@test.com",
        username=username or f"user{unique_id}"
    )
    user.set_password("password123")
    db.add(user)
    db.commit()
    db.refresh(user)
    db.close()
    return user


@pytest.fixture
def client():
    """Client de test FastAPI"""
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def db():
    """Session DB pour les tests"""
    db = TestingSessionLocal()
    yield db
    db.close()


@pytest.fixture
def user():
    return create_test_user()


@pytest.fixture
def auth_token(user):
    """JWT d'accès pour l'utilisateur de test"""
    return create_access_token(user.id, user.email)


@pytest.fixture
def auth_headers(auth_token):
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def blob_store(tmp_path):
    """Blob store dans un dossier temporaire, branché sur l'app"""
    store = BlobStore(root=str(tmp_path / "uploads"), base_url="http://testserver")
    app.dependency_overrides[get_blob_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_blob_store, None)


@pytest.fixture
def product(client, auth_headers):
    """Produit de test (document users/{uid}/products/{pid})"""
    response = client.post(
        "/products",
        headers=auth_headers,
        json={"title": "My Course", "description": "Learn things", "price": 4999}
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def other_auth_headers():
    """Un second créateur, sans accès aux produits du premier"""
    other = create_test_user()
    return {"Authorization": f"Bearer {create_access_token(other.id, other.email)}"}
