"""
Derived post fields: slug, read time and excerpt.

The Post Store calls these explicitly on create/update; nothing recomputes
them implicitly when a model attribute changes.
"""

import math
import re
import threading
import time

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 200
BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

_TAG_RE = re.compile(r"<[^>]*>")

_token_lock = threading.Lock()
_last_token_ms = 0


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("number must be non-negative")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def generate_slug_base(title: str) -> str:
    """Generate URL-friendly slug from a title."""
    # Convert to lowercase
    slug = title.lower()
    # Replace special characters with hyphens
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    # Remove leading/trailing hyphens
    return slug.strip("-")


def next_slug_token() -> str:
    """
    Base-36 millisecond timestamp, strictly increasing within the process
    so posts created in the same millisecond still get distinct slugs.
    """
    global _last_token_ms
    with _token_lock:
        now_ms = int(time.time() * 1000)
        if now_ms <= _last_token_ms:
            now_ms = _last_token_ms + 1
        _last_token_ms = now_ms
    return to_base36(now_ms)


def generate_slug(title: str) -> str:
    base = generate_slug_base(title) or "post"
    return f"{base}-{next_slug_token()}"


def count_words(content: str) -> int:
    return len(content.split())


def calculate_read_time(content: str) -> int:
    """Minutes at 200 words per minute, never less than 1."""
    return max(1, math.ceil(count_words(content) / WORDS_PER_MINUTE))


def strip_html(content: str) -> str:
    return _TAG_RE.sub("", content)


def derive_excerpt(content: str) -> str:
    """First 200 characters of tag-stripped content, followed by an ellipsis."""
    return strip_html(content)[:EXCERPT_LENGTH].strip() + "..."
