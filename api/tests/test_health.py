"""Health check tests."""


def test_healthz_endpoint(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_health_endpoint(client, storage):
    storage.base_path.mkdir(parents=True)

    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["metadata"] == "connected"
    assert data["storage"] == "connected"


def test_health_degraded_without_storage_dir(client):
    data = client.get("/health").json()
    assert data["status"] == "degraded"
    assert data["storage"] == "disconnected"


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "running" in response.text
