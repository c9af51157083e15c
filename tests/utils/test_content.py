from byteverse.utils.content import (
    create_excerpt,
    optimize_blog_content,
    optimize_blog_list,
    optimize_html,
    process_image_urls,
)


def test_optimize_html_strips_comments_and_whitespace():
    html = "  <p>Hello</p>\n\n   <!-- draft note -->\t<p>World</p>  "
    assert optimize_html(html) == "<p>Hello</p> <p>World</p>"


def test_optimize_html_handles_empty_input():
    assert optimize_html(None) == ""
    assert optimize_html("") == ""


def test_create_excerpt_returns_short_text_unchanged():
    assert create_excerpt("<p>Short   <b>post</b></p>") == "Short post"


def test_create_excerpt_truncates_at_word_boundary():
    text = "<p>" + " ".join(["word"] * 60) + "</p>"

    excerpt = create_excerpt(text, max_length=22)

    assert excerpt == "word word word word..."


def test_create_excerpt_without_spaces_cuts_hard():
    assert create_excerpt("a" * 20, max_length=10) == "a" * 10 + "..."


def test_process_image_urls_counts_large_inline_images():
    large = "data:image/png;base64," + "A" * 700_000
    small = "data:image/png;base64," + "A" * 100
    content = f'<img src="{large}"><img src="{small}">'

    assert process_image_urls(content) == 1


def test_optimize_blog_list_builds_light_entries():
    blogs = [
        {
            "id": 1,
            "title": "First",
            "content": "<p>Body text</p>",
            "tags": ["python"],
            "cover_image": "https://cdn.byteverse.tech/c.png",
        },
        {"id": 2, "title": "Second", "excerpt": "Given", "author_name": "Ada"},
    ]

    first, second = optimize_blog_list(blogs)

    assert "content" not in first
    assert first["excerpt"] == "Body text"
    assert first["author_name"] == "Anonymous"
    assert first["cover_image"] == "https://cdn.byteverse.tech/c.png"
    assert second["excerpt"] == "Given"
    assert second["author_name"] == "Ada"
    assert "cover_image" not in second


def test_optimize_blog_content_does_not_mutate_input():
    blog = {"title": "T", "content": "<p>a</p>   <!-- x -->"}

    optimized = optimize_blog_content(blog)

    assert optimized["content"] == "<p>a</p>"
    assert optimized["author_name"] == "Anonymous"
    assert blog["content"] == "<p>a</p>   <!-- x -->"
