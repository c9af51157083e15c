"""Tests for blog image validation against a mocked HTTP transport."""

import httpx
import pytest
import pytest_asyncio

from byteverse.services.images import (
    MAX_CONTENT_IMAGES,
    PLACEHOLDER_BACKGROUND,
    PLACEHOLDER_IMG,
    ImageCheck,
    ImageReport,
    extract_image_urls,
    sanitize_blog_content,
    validate_blog_images,
    validate_image_url,
)

BASE = "https://cdn.byteverse.tech"


def _handler(request: httpx.Request) -> httpx.Response:
    assert request.method == "HEAD"
    path = request.url.path
    if path.startswith("/ok"):
        return httpx.Response(200, headers={"content-type": "image/png"})
    if path == "/page.html":
        return httpx.Response(200, headers={"content-type": "text/html"})
    if path == "/down.png":
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(404)


@pytest_asyncio.fixture
async def http_client():
    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
        yield client


class TestValidateImageUrl:
    @pytest.mark.asyncio
    async def test_data_url_is_valid_without_a_request(self):
        assert await validate_image_url("data:image/png;base64,AAAA")

    @pytest.mark.asyncio
    async def test_non_http_scheme_is_invalid(self):
        assert not await validate_image_url("ftp://cdn.byteverse.tech/a.png")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/ok.png", True),
            ("/page.html", False),
            ("/missing.png", False),
            ("/down.png", False),
        ],
    )
    async def test_remote_images(self, http_client, path, expected):
        assert await validate_image_url(f"{BASE}{path}", http_client) is expected


def test_extract_image_urls_finds_tags_and_backgrounds():
    content = (
        '<p>Hi</p><img class="x" src="https://a.example/1.png" alt="">'
        "<div style=\"background-image: url('https://a.example/2.jpg')\"></div>"
    )

    assert extract_image_urls(content) == [
        "https://a.example/1.png",
        "https://a.example/2.jpg",
    ]


def test_extract_image_urls_handles_empty_content():
    assert extract_image_urls(None) == []
    assert extract_image_urls("<p>no images</p>") == []


@pytest.mark.asyncio
async def test_validate_blog_images_reports_cover_and_content(http_client):
    blog = {
        "cover_image": f"{BASE}/ok-cover.png",
        "content": f'<img src="{BASE}/ok-1.png"><img src="{BASE}/missing.png">',
    }

    report = await validate_blog_images(blog, http_client)

    assert report.cover_image is True
    assert report.content == [
        ImageCheck(url=f"{BASE}/ok-1.png", valid=True),
        ImageCheck(url=f"{BASE}/missing.png", valid=False),
    ]
    assert report.invalid_urls == [f"{BASE}/missing.png"]


@pytest.mark.asyncio
async def test_validate_blog_images_skips_inline_cover(http_client):
    report = await validate_blog_images(
        {"cover_image": "data:image/png;base64,AAAA", "content": ""}, http_client
    )

    assert report.cover_image is None
    assert report.content == []


@pytest.mark.asyncio
async def test_validate_blog_images_caps_content_images(http_client):
    content = "".join(f'<img src="{BASE}/ok-{i}.png">' for i in range(MAX_CONTENT_IMAGES + 5))

    report = await validate_blog_images({"content": content}, http_client)

    assert len(report.content) == MAX_CONTENT_IMAGES


def test_sanitize_replaces_invalid_images():
    bad = "https://a.example/gone.png"
    content = (
        f'<img src="{bad}" alt="x"><img src="https://a.example/fine.png">'
        f'<div style="background-image: url({bad})"></div>'
    )
    report = ImageReport(content=[ImageCheck(url=bad, valid=False)])

    sanitized = sanitize_blog_content(content, report)

    assert PLACEHOLDER_IMG in sanitized
    assert PLACEHOLDER_BACKGROUND in sanitized
    assert bad not in sanitized
    assert "https://a.example/fine.png" in sanitized


def test_sanitize_without_report_returns_content():
    assert sanitize_blog_content("<p>x</p>", None) == "<p>x</p>"
