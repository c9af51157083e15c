"""Tests for administrator login and the security console."""

import httpx
import pytest
from fastapi import status

from byteverse.api.v1.endpoints.admin import get_image_client
from byteverse.services.abuse import ActivityState
from byteverse.services.images import PLACEHOLDER_IMG

LOGIN = "/api/v1/admin/login"
BLOCKLIST = "/api/v1/admin/security/blocklist"
CONTENT_REVIEW = "/api/v1/admin/content/validate"


class TestAdminLogin:
    def test_login_by_username(self, client, test_admin, test_password) -> None:
        r = client.post(LOGIN, json={"username": test_admin.username, "password": test_password})

        assert r.status_code == status.HTTP_200_OK
        body = r.json()
        assert body["admin"]["id"] == test_admin.id
        assert r.cookies.get("admin_token") == body["token"]

        me = client.get("/api/v1/admin/me", headers={"admin-token": body["token"]})
        assert me.status_code == status.HTTP_200_OK

    def test_login_by_email(self, client, test_admin, test_password) -> None:
        r = client.post(LOGIN, json={"email": test_admin.email, "password": test_password})
        assert r.status_code == status.HTTP_200_OK

    def test_login_with_wrong_password(self, client, test_admin) -> None:
        r = client.post(LOGIN, json={"username": test_admin.username, "password": "nope"})

        assert r.status_code == status.HTTP_401_UNAUTHORIZED
        assert r.json()["message"] == "Invalid credentials"

    def test_login_requires_identifier(self, client) -> None:
        r = client.post(LOGIN, json={"password": "whatever"})
        assert r.status_code == status.HTTP_400_BAD_REQUEST

    def test_member_credentials_do_not_log_into_admin(self, client, test_user, test_password):
        r = client.post(LOGIN, json={"email": test_user.email, "password": test_password})
        assert r.status_code == status.HTTP_401_UNAUTHORIZED


class TestBlocklistConsole:
    def test_block_list_and_unblock(self, client, admin_token, app) -> None:
        r = client.post(
            BLOCKLIST, json={"address": "203.0.113.7", "ttl_seconds": 120}, headers=admin_token
        )

        assert r.status_code == status.HTTP_201_CREATED
        assert r.json()["reason"] == "manual"
        assert 0 < r.json()["expires_in_seconds"] <= 120
        assert app.state.abuse_monitor.is_blocked("203.0.113.7")

        listing = client.get(BLOCKLIST, headers=admin_token).json()
        assert listing["count"] == 1
        assert listing["entries"][0]["address"] == "203.0.113.7"

        r = client.delete(f"{BLOCKLIST}/203.0.113.7", headers=admin_token)
        assert r.status_code == status.HTTP_200_OK
        assert r.json()["message"] == "203.0.113.7 unblocked"
        assert not app.state.abuse_monitor.is_blocked("203.0.113.7")

    def test_permanent_block(self, client, admin_token) -> None:
        r = client.post(
            BLOCKLIST, json={"address": "203.0.113.8", "ttl_seconds": 0}, headers=admin_token
        )

        assert r.status_code == status.HTTP_201_CREATED
        assert r.json()["expires_in_seconds"] is None

    def test_exempt_address_cannot_be_blocked(self, client, admin_token) -> None:
        r = client.post(BLOCKLIST, json={"address": "127.0.0.1"}, headers=admin_token)

        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert r.json()["message"] == "Address is exempt from blocking"

    def test_unblock_unknown_address(self, client, admin_token) -> None:
        r = client.delete(f"{BLOCKLIST}/203.0.113.99", headers=admin_token)

        assert r.status_code == status.HTTP_404_NOT_FOUND
        assert r.json()["message"] == "Address is not blocked"

    def test_unblock_leaves_tracked_address_alone(self, client, admin_token, app) -> None:
        client.get("/health")

        r = client.delete(f"{BLOCKLIST}/testclient", headers=admin_token)

        assert r.status_code == status.HTTP_404_NOT_FOUND
        records = app.state.abuse_monitor.snapshot()
        assert [rec.address for rec in records] == ["testclient"]
        assert records[0].count == 2

    def test_console_requires_admin_domain(self, client, staff_token) -> None:
        r = client.get(BLOCKLIST, headers=staff_token)
        assert r.status_code == status.HTTP_401_UNAUTHORIZED


class TestActivityConsole:
    def test_activity_lists_tracked_sources(self, client, admin_token) -> None:
        client.get("/health")

        r = client.get("/api/v1/admin/security/activity", headers=admin_token)

        assert r.status_code == status.HTTP_200_OK
        records = r.json()["records"]
        assert [rec["address"] for rec in records] == ["testclient"]
        assert records[0]["state"] == ActivityState.TRACKED.value
        assert records[0]["count"] == 2
        assert records[0]["distinct_endpoints"] == 2

    def test_sweep_reports_counts(self, client, admin_token, app) -> None:
        app.state.abuse_monitor.observe("198.51.100.20", "/old")

        r = client.post("/api/v1/admin/security/sweep", headers=admin_token)

        assert r.status_code == status.HTTP_200_OK
        assert r.json() == {"success": True, "evicted_records": 0, "expired_blocks": 0}


def _image_host(request: httpx.Request) -> httpx.Response:
    if request.url.host == "img.example.com":
        return httpx.Response(200, headers={"content-type": "image/png"})
    return httpx.Response(404)


@pytest.fixture
def image_client(app):
    async def _override():
        async with httpx.AsyncClient(transport=httpx.MockTransport(_image_host)) as http:
            yield http

    app.dependency_overrides[get_image_client] = _override
    yield
    app.dependency_overrides.pop(get_image_client, None)


class TestContentReview:
    def test_broken_images_are_replaced(self, client, admin_token, image_client) -> None:
        content = (
            "<p>Hello   world</p><!-- draft -->"
            '<img src="https://img.example.com/ok.png">'
            '<img src="https://gone.example.com/missing.png">'
        )

        r = client.post(
            CONTENT_REVIEW,
            json={
                "title": "Launch",
                "content": content,
                "cover_image": "https://gone.example.com/cover.jpg",
            },
            headers=admin_token,
        )

        assert r.status_code == status.HTTP_200_OK
        body = r.json()
        assert body["cover_image_valid"] is False
        assert body["invalid_images"] == ["https://gone.example.com/missing.png"]

        blog = body["blog"]
        assert blog["cover_image"] is None
        assert blog["author_name"] == "Anonymous"
        assert PLACEHOLDER_IMG in blog["content"]
        assert "https://img.example.com/ok.png" in blog["content"]
        assert "draft" not in blog["content"]
        assert blog["excerpt"] == "Hello world"

    def test_valid_draft_is_kept(self, client, admin_token, image_client) -> None:
        r = client.post(
            CONTENT_REVIEW,
            json={
                "content": '<img src="https://img.example.com/a.png">',
                "cover_image": "https://img.example.com/cover.png",
                "author_name": "Ada",
            },
            headers=admin_token,
        )

        body = r.json()
        assert body["cover_image_valid"] is True
        assert body["invalid_images"] == []
        assert body["blog"]["cover_image"] == "https://img.example.com/cover.png"
        assert body["blog"]["author_name"] == "Ada"

    def test_requires_admin_token(self, client, staff_token, image_client) -> None:
        r = client.post(CONTENT_REVIEW, json={"content": "<p>x</p>"}, headers=staff_token)
        assert r.status_code == status.HTTP_401_UNAUTHORIZED
