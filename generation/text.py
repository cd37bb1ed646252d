"""
Text helpers applied before generated data is persisted.
"""

import re
from typing import Any

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def generate_slug(title: str, blog_id: str) -> str:
    """
    URL-safe slug for a generated title.

    The first 8 characters of the blog id are appended so that two posts
    with the same title still get distinct slugs.
    """
    base = _NON_ALNUM_RE.sub("-", title.lower()).strip("-")
    return f"{base}-{blog_id[:8]}"


def draft_slug(topic: str, blog_id: str) -> str:
    """Placeholder slug for a blog shell whose content is still generating."""
    base = re.sub(r"[^a-z0-9\s-]", "", topic.lower())
    base = re.sub(r"\s+", "-", base)[:50]
    return f"draft-{base}-{blog_id[:8]}"


def strip_nulls_deep(value: Any) -> Any:
    """Recursively remove NUL characters from every string in a nested structure."""
    if isinstance(value, str):
        return value.replace("\x00", "") if "\x00" in value else value
    if isinstance(value, list):
        return [strip_nulls_deep(item) for item in value]
    if isinstance(value, tuple):
        return tuple(strip_nulls_deep(item) for item in value)
    if isinstance(value, dict):
        return {key: strip_nulls_deep(val) for key, val in value.items()}
    return value
