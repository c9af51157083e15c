"""Schemas for reviewing blog content before it is published."""

from pydantic import BaseModel, Field


class BlogContentRequest(BaseModel):
    title: str | None = Field(None, max_length=200)
    content: str = ""
    cover_image: str | None = None
    author_name: str | None = None


class ReviewedBlog(BaseModel):
    """Blog payload after image sanitising and HTML compaction."""

    title: str | None
    content: str
    excerpt: str
    cover_image: str | None
    author_name: str


class ContentReviewResponse(BaseModel):
    success: bool = True
    cover_image_valid: bool | None = Field(
        None, description="Null when there is no remote cover image to check"
    )
    invalid_images: list[str]
    blog: ReviewedBlog
