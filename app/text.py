"""Pure text helpers: slug normalisation and plain-text summaries."""
import re
import unicodedata

from app.config import settings

_SLUG_STRIP_RE = re.compile(r"[^\w\s-]")
_SLUG_SPACE_RE = re.compile(r"[\s_]+")
_SLUG_DASH_RE = re.compile(r"-+")

_TAG_RE = re.compile(r"<[^>]*>")
_HEADER_RE = re.compile(r"#+\s")
_EMPHASIS_RE = re.compile(r"[*_~`]")
_WHITESPACE_RE = re.compile(r"\s+")

ELLIPSIS = "..."
EMPTY_SLUG = "untitled"


def slugify(text: str) -> str:
    """Return a URL-safe, lowercase, ASCII slug derived from *text*."""
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = _SLUG_STRIP_RE.sub("", text.lower().strip())
    text = _SLUG_SPACE_RE.sub("-", text)
    return _SLUG_DASH_RE.sub("-", text).strip("-") or EMPTY_SLUG


def plain_text(content: str) -> str:
    """Strip HTML tags and markdown punctuation, collapsing whitespace."""
    text = _TAG_RE.sub("", content)
    text = _HEADER_RE.sub("", text)
    text = _EMPHASIS_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def summarize(content: str | None, max_length: int = settings.SUMMARY_MAX_LENGTH) -> str:
    """
    Return a plain-text excerpt of *content* no longer than *max_length*.

    Truncated summaries end in ``"..."`` and are cut at the last space in
    the window so a word is never split; when the window holds no space
    the hard cut is used instead.
    """
    if not content:
        return ""

    text = plain_text(content)
    if len(text) <= max_length:
        return text

    window = text[: max(max_length - len(ELLIPSIS), 0)]
    last_space = window.rfind(" ")
    if last_space > 0:
        window = window[:last_space]
    return window + ELLIPSIS
