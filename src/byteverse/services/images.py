"""Validation of image references in blog content.

Remote images are probed with a ``HEAD`` request; inline ``data:image/``
URLs are accepted as-is. Invalid images can then be swapped for a
placeholder so that broken links never reach readers.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

HEAD_TIMEOUT_SECONDS = 5.0
MAX_CONTENT_IMAGES = 20
PLACEHOLDER_IMG = (
    '<img src="/images/placeholder.jpg" alt="Image not available" class="placeholder-image">'
)
PLACEHOLDER_BACKGROUND = "background-color: #f0f0f0"

_IMG_SRC = re.compile(r"""<img[^>]+src=["']([^"']+)["'][^>]*>""", re.IGNORECASE)
_BACKGROUND_URL = re.compile(
    r"""background-image:\s*url\(['"]?([^'")]+)['"]?\)""", re.IGNORECASE
)


@dataclass
class ImageCheck:
    url: str
    valid: bool


@dataclass
class ImageReport:
    """Validation outcome for one blog's cover and content images."""

    cover_image: bool | None = None
    content: list[ImageCheck] = field(default_factory=list)

    @property
    def invalid_urls(self) -> list[str]:
        return [check.url for check in self.content if not check.valid]


async def validate_image_url(url: str, client: httpx.AsyncClient | None = None) -> bool:
    """Return True if ``url`` is an inline image or a reachable remote image."""
    if url.startswith("data:image/"):
        return True
    if not url.startswith(("http://", "https://")):
        return False

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=HEAD_TIMEOUT_SECONDS, follow_redirects=True)
    try:
        response = await http.head(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("Image validation failed for %s: %s", url, e)
        return False
    finally:
        if owns_client:
            await http.aclose()

    if response.status_code >= 400:
        return False
    return response.headers.get("content-type", "").startswith("image/")


def extract_image_urls(content: str | None) -> list[str]:
    """Return image URLs from ``<img src>`` tags and CSS ``background-image``."""
    if not content:
        return []
    urls = [m.group(1) for m in _IMG_SRC.finditer(content) if m.group(1)]
    urls.extend(m.group(1) for m in _BACKGROUND_URL.finditer(content) if m.group(1))
    return urls


async def validate_blog_images(
    blog: Mapping[str, Any], client: httpx.AsyncClient | None = None
) -> ImageReport:
    """Probe the cover image and up to 20 content images concurrently."""
    report = ImageReport()
    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=HEAD_TIMEOUT_SECONDS, follow_redirects=True)
    try:
        cover = blog.get("cover_image")
        content_urls = extract_image_urls(blog.get("content"))[:MAX_CONTENT_IMAGES]

        checks = [validate_image_url(url, http) for url in content_urls]
        check_cover = bool(cover) and not str(cover).startswith("data:image/")
        if check_cover:
            checks.append(validate_image_url(str(cover), http))

        results = await asyncio.gather(*checks)
    finally:
        if owns_client:
            await http.aclose()

    if check_cover:
        report.cover_image = results[-1]
        results = results[:-1]
    report.content = [ImageCheck(url=url, valid=ok) for url, ok in zip(content_urls, results)]
    return report


def sanitize_blog_content(content: str | None, report: ImageReport | None) -> str | None:
    """Replace invalid content images with a placeholder."""
    if not content or report is None:
        return content

    sanitized = content
    for url in report.invalid_urls:
        escaped = re.escape(url)
        img_tag = re.compile(rf"""<img[^>]+src=["']{escaped}["'][^>]*>""", re.IGNORECASE)
        sanitized = img_tag.sub(PLACEHOLDER_IMG, sanitized)
        background = re.compile(
            rf"""background-image:\s*url\(['"]?{escaped}['"]?\)""", re.IGNORECASE
        )
        sanitized = background.sub(PLACEHOLDER_BACKGROUND, sanitized)
    return sanitized
