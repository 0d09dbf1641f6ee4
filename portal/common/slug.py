from __future__ import annotations

import logging
import re
import unicodedata
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)

# Bengali, Arabic and Hebrew blocks, ZWJ, ASCII letters/digits, space, hyphen, underscore.
SLUG_DISALLOWED_RE = re.compile(
    r"[^\u0980-\u09FF\u200D\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\u0590-\u05FF \-_A-Za-z0-9]"
)
TOPIC_DISALLOWED_RE = re.compile(r"[^\w\s\u0980-\u09FF]")
WHITESPACE_RE = re.compile(r"\s+")
HYPHEN_RUN_RE = re.compile(r"-+")


def generate_bengali_slug(title: str) -> str:
    slug = SLUG_DISALLOWED_RE.sub("", (title or "").strip().lower())
    slug = WHITESPACE_RE.sub("-", slug)
    slug = HYPHEN_RUN_RE.sub("-", slug)
    return slug.strip("-")


def topic_slug(name: str) -> str:
    slug = TOPIC_DISALLOWED_RE.sub("", (name or "").lower())
    return WHITESPACE_RE.sub("-", slug).strip()


def encode_slug(slug: str) -> str:
    return quote(slug, safe="")


def decode_slug(encoded: str) -> str:
    """Decode a URL slug, undoing one extra level of percent-encoding if present."""
    try:
        decoded = unquote(encoded, errors="strict")
        if "%" in decoded:
            decoded = unquote(decoded, errors="strict")
    except UnicodeDecodeError:
        logger.warning("malformed slug encoding slug=%r", encoded)
        return encoded
    return decoded


def friendly_article_url(title: str, base_url: str = "") -> str:
    return f"{base_url.rstrip('/')}/article/{generate_bengali_slug(title)}"


def normalize_bengali_text(text: str) -> str:
    return unicodedata.normalize("NFC", (text or "").strip()).lower()
