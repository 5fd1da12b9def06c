"""
Tests for Wishes API endpoints
"""
import pytest
from fastapi.testclient import TestClient

from wishshare.main import app
from wishshare.api.deps import get_db, get_current_user
from wishshare.infrastructure.db import session as session_module


WISH_JSON = {
    "title": "Наушники",
    "description": "Беспроводные наушники",
    "link": "https://shop.example.com/headphones",
    "image": "https://shop.example.com/headphones.jpg",
    "price": 250,
}


@pytest.fixture
def current_user(owner):
    """Пользователь, от имени которого идут запросы (можно подменить в тесте)"""
    return {"user": owner}


@pytest.fixture
def client(db_session, current_user):
    """Test client с тестовой БД и подменённой аутентификацией"""
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_user] = lambda: current_user["user"]
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _create(client) -> dict:
    response = client.post("/api/v1/wishes/", json=WISH_JSON)
    assert response.status_code == 200
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.text == "ok"


def test_ready_uses_configured_engine(client, db_engine, monkeypatch):
    """Readiness check идёт через engine приложения (любой драйвер из DATABASE_URL)"""
    monkeypatch.setattr(session_module, "_engine", db_engine)

    response = client.get("/ready")

    assert response.status_code == 200
    assert response.text == "ok"


def test_create_wish_api(client, owner):
    """API создания подарка"""
    data = _create(client)

    assert data["title"] == "Наушники"
    assert data["price"] == "250.00"
    assert data["raised"] == "0.00"
    assert data["copied"] == 0
    assert data["owner"]["id"] == owner.id
    assert "email" not in data["owner"]


def test_create_wish_api_validation(client):
    """Невалидный payload - 422 от pydantic"""
    response = client.post("/api/v1/wishes/", json={**WISH_JSON, "link": "not-a-url", "title": ""})
    assert response.status_code == 422


def test_get_wish_api(client):
    created = _create(client)

    response = client.get(f"/api/v1/wishes/{created['id']}")

    assert response.status_code == 200
    assert response.json()["offers"] == []


def test_get_wish_not_found_api(client):
    response = client.get("/api/v1/wishes/999")

    assert response.status_code == 404
    assert response.json()["detail"] == "Подарок не найден"


def test_latest_and_top_api(client):
    _create(client)
    _create(client)

    latest = client.get("/api/v1/wishes/last")
    top = client.get("/api/v1/wishes/top")

    assert latest.status_code == 200
    assert len(latest.json()) == 2
    assert top.status_code == 200
    assert len(top.json()) == 2


def test_update_wish_api(client):
    created = _create(client)

    response = client.patch(f"/api/v1/wishes/{created['id']}", json={"title": "Колонка"})

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Колонка"
    assert data["price"] == "250.00"


def test_update_wish_explicit_null_rejected_api(client):
    created = _create(client)

    response = client.patch(f"/api/v1/wishes/{created['id']}", json={"price": None})

    assert response.status_code == 422


def test_update_foreign_wish_api(client, current_user, other_user):
    """Чужой подарок менять нельзя - 403"""
    created = _create(client)
    current_user["user"] = other_user

    response = client.patch(f"/api/v1/wishes/{created['id']}", json={"title": "Моё"})

    assert response.status_code == 403
    assert response.json()["detail"] == "Можно изменять только свои подарки"


def test_update_price_locked_api(client, db_session):
    """Смена цены при собранных деньгах - 400"""
    from wishshare.application.wishes import WishesService

    created = _create(client)
    WishesService(db_session).update_raised(created["id"], 10)

    response = client.patch(f"/api/v1/wishes/{created['id']}", json={"price": 300})

    assert response.status_code == 400
    assert "стоимость" in response.json()["detail"]


def test_delete_wish_api(client):
    created = _create(client)

    response = client.delete(f"/api/v1/wishes/{created['id']}")

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    assert client.get(f"/api/v1/wishes/{created['id']}").status_code == 404


def test_copy_wish_api(client, current_user, other_user):
    created = _create(client)
    current_user["user"] = other_user

    response = client.post(f"/api/v1/wishes/{created['id']}/copy")

    assert response.status_code == 200
    data = response.json()
    assert data["owner"]["id"] == other_user.id
    assert data["copied"] == 0
    assert client.get(f"/api/v1/wishes/{created['id']}").json()["copied"] == 1


def test_unauthenticated_request(db_session):
    """Без сессии - 401"""
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    try:
        response = TestClient(app).post("/api/v1/wishes/", json=WISH_JSON)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 401
