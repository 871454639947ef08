import re

EXCERPT_LENGTH = 150

_non_slug_chars = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase a title and collapse everything but letters and digits to hyphens"""
    slug = _non_slug_chars.sub("-", value.strip().lower())
    return slug.strip("-")


def make_excerpt(content: str, length: int = EXCERPT_LENGTH) -> str:
    """First `length` characters of the content followed by an ellipsis"""
    return content[:length] + "..."
