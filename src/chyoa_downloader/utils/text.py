"""String, URL and filename helpers."""

import re
from pathlib import PurePosixPath
from urllib.parse import urlparse


BASE_URL = "https://chyoa.com"

# Substrings identifying avatars and the "log in to view" stub image
PLACEHOLDER_PATTERNS = ("/data/avatars/", "avatar-male.jpg", "default.jpg")
PROTECTED_IMAGE_PATTERN = "default.jpg"

MIME_TYPES = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

_HTML_ENTITIES = (
    ("&quot;", '"'),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
)


def sanitize_title(title: str) -> str:
    """Drop everything but word characters, whitespace and dashes."""
    return re.sub(r"[^\w\s-]", "", title).strip()


def sanitize_filename(filename: str) -> str:
    """Turn a title into a lowercase, underscore-separated filename stem."""
    cleaned = re.sub(r"[^\w\s-]", "", filename)
    cleaned = re.sub(r"\s+", "_", cleaned)
    return cleaned.lower().strip()


def unescape_basic_entities(text: str) -> str:
    """Decode the four standard HTML entities, in the order the site emits them."""
    for entity, char in _HTML_ENTITIES:
        text = text.replace(entity, char)
    return text


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def make_absolute_url(url: str, base_url: str = BASE_URL) -> str:
    """Resolve a site-relative or protocol-relative URL against the site root."""
    if url.startswith("http"):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith("/"):
        return f"{base_url}{url}"
    return f"{base_url}/{url}"


def chapter_id(url: str) -> str | None:
    """Extract the numeric chapter id from ``.../chapter/Some-Title.12345``.

    Returns None when the last path segment carries no dotted id.
    """
    last_segment = url.rstrip("/").split("/")[-1]
    parts = last_segment.split(".")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def filename_from_url(url: str, fallback: str = "image.jpg") -> str:
    """Basename of the URL path, or ``fallback`` when there is none."""
    try:
        path = urlparse(url).path
    except ValueError:
        return fallback
    name = PurePosixPath(path).name
    return name or fallback


def swap_extension(filename: str, extension: str) -> str:
    """Replace (or add) the extension of ``filename``; ``extension`` has no dot."""
    return f"{PurePosixPath(filename).stem}.{extension}"


def is_placeholder_image(url: str) -> bool:
    """True for the stub image served to viewers without permission."""
    return PROTECTED_IMAGE_PATTERN in url


def is_valid_story_image(src: str) -> bool:
    """True unless ``src`` is an avatar or a placeholder."""
    if src == "/assets/img/avatar-male.jpg":
        return False
    return not any(pattern in src for pattern in PLACEHOLDER_PATTERNS)


def mime_type_for(filename: str) -> str:
    """Guess an image MIME type from a filename, defaulting to JPEG."""
    suffix = PurePosixPath(filename).suffix.lower()
    return MIME_TYPES.get(suffix, "image/jpeg")
