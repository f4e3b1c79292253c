from fastapi.testclient import TestClient

from clevertap_sync import __version__


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == __version__


def test_root(client: TestClient):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "CleverTap Record Sync API"


def test_login(client: TestClient):
    form_data = {
        "username": "admin",
        "password": "changeme"
    }
    response = client.post("/token", data=form_data)
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"


def test_login_wrong_password(client: TestClient):
    response = client.post("/token", data={"username": "admin", "password": "wrong"})
    assert response.status_code == 401


def test_api_requires_token():
    from clevertap_sync.main import app

    response = TestClient(app).get("/api/v1/connections/")
    assert response.status_code == 401


def test_versioned_login_and_me():
    from clevertap_sync.main import app

    client = TestClient(app)
    token = client.post("/api/v1/token", data={"username": "admin", "password": "changeme"}).json()["access_token"]

    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["username"] == "admin"
