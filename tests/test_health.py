# tests/test_health.py
from fastapi import status
from fastapi.testclient import TestClient


def test_health(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"status": "ok"}


def test_root_responds(client: TestClient) -> None:
    """Verify that the root endpoint reports the app name and version."""
    r = client.get("/")
    assert r.status_code == status.HTTP_200_OK
    assert {"name", "version", "docs"} <= set(r.json())
