"""Helpers that shrink blog payloads before storage and listing."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

LARGE_IMAGE_BYTES = 500_000
DEFAULT_EXCERPT_LENGTH = 150

_HTML_COMMENT = re.compile(r"<!--[\s\S]*?-->")
_WHITESPACE_RUN = re.compile(r"\s{2,}")
_ANY_WHITESPACE = re.compile(r"\s+")
_TAG = re.compile(r"<[^>]*>")
_DATA_URL_IMAGE = re.compile(r"data:image/[^;]+;base64,([^\"')\s]+)", re.IGNORECASE)

_LIST_FIELDS = ("id", "title", "categories", "tags", "featured", "created_at", "updated_at")


def optimize_html(html: str | None) -> str:
    """Strip HTML comments and collapse runs of whitespace."""
    if not html:
        return ""
    html = _HTML_COMMENT.sub("", html)
    html = _WHITESPACE_RUN.sub(" ", html)
    return html.strip()


def process_image_urls(content: str) -> int:
    """Warn about inline base64 images over ~500 KB; return how many were found."""
    large = 0
    for match in _DATA_URL_IMAGE.finditer(content):
        approximate_bytes = len(match.group(1)) * 0.75
        if approximate_bytes > LARGE_IMAGE_BYTES:
            large += 1
            logger.warning(
                "Large image detected in content (approx %dKB)", round(approximate_bytes / 1024)
            )
    if large:
        logger.warning("Content contains %d large images. Consider external storage.", large)
    return large


def create_excerpt(html_content: str | None, max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Plain-text excerpt cut at a word boundary with a trailing ellipsis."""
    if not html_content:
        return ""
    text = _ANY_WHITESPACE.sub(" ", _TAG.sub(" ", html_content)).strip()
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        return truncated[:last_space] + "..."
    return truncated + "..."


def optimize_blog_list(blogs: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Lightweight listing entries: no body, excerpt filled in, author defaulted."""
    optimized = []
    for blog in blogs:
        item: dict[str, Any] = {key: blog.get(key) for key in _LIST_FIELDS}
        item["excerpt"] = blog.get("excerpt") or create_excerpt(blog.get("content"))
        item["author_name"] = blog.get("author_name") or "Anonymous"
        if blog.get("cover_image"):
            item["cover_image"] = blog["cover_image"]
        optimized.append(item)
    return optimized


def optimize_blog_content(blog: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``blog`` with compacted HTML and a default author."""
    optimized = dict(blog)
    if not optimized.get("author_name"):
        optimized["author_name"] = "Anonymous"

    if optimized.get("content"):
        optimized["content"] = optimize_html(optimized["content"])
        process_image_urls(optimized["content"])

    cover = optimized.get("cover_image")
    if isinstance(cover, str) and cover.startswith("data:image"):
        process_image_urls(cover)
        if len(cover) > LARGE_IMAGE_BYTES:
            logger.warning("Large cover image detected. Consider using external image hosting.")

    return optimized
