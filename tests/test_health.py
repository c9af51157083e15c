# tests/test_health.py
from fastapi import status


def test_health_check(client) -> None:
    r = client.get("/health")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"status": "ok"}


def test_root_describes_the_api(client) -> None:
    r = client.get("/")
    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert body["name"] == "ByteVerse API"
    assert body["docs"] == "/docs"


def test_unknown_route_uses_error_envelope(client) -> None:
    r = client.get("/api/v1/nothing-here")
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json()["success"] is False
