"""
Free-Text Filter

Cleans text children type into session logs (wins, focus areas) before it is
stored or shown to a parent:
- phone numbers, e-mail addresses and URLs are replaced with [removed]
- profanity is masked with asterisks (better-profanity word list)
- text is trimmed and truncated

Tags are short and capped in number; anything over the cap is rejected,
not silently dropped.
"""

from typing import Iterable, List, Optional
import re

from better_profanity import profanity

from services.training_engine.constants import MAX_FREE_TEXT_LENGTH, MAX_TAG_LENGTH
from services.training_engine.errors import InvalidInputError

REMOVED = "[removed]"

PHONE_PATTERN = re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b")
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
URL_PATTERN = re.compile(r"(https?://|www\.)\S+", re.IGNORECASE)

BLOCKED_PATTERNS = (PHONE_PATTERN, EMAIL_PATTERN, URL_PATTERN)

profanity.load_censor_words()


def filter_text(text: Optional[str], max_length: int = MAX_FREE_TEXT_LENGTH) -> Optional[str]:
    """
    Scrub contact info and links, mask profanity, trim, truncate.

    Returns None for empty or whitespace-only input.
    """
    if text is None or not text.strip():
        return None

    cleaned = text.strip()
    for pattern in BLOCKED_PATTERNS:
        cleaned = pattern.sub(REMOVED, cleaned)
    cleaned = profanity.censor(cleaned)

    return cleaned[:max_length]


def is_text_safe(text: Optional[str]) -> bool:
    """True when the text contains no phone number, e-mail, URL or profanity."""
    if not text:
        return True
    if any(pattern.search(text) for pattern in BLOCKED_PATTERNS):
        return False
    return not profanity.contains_profanity(text)


def filter_tags(tags: Iterable[str], max_count: int, field: str) -> List[str]:
    """
    Filter a list of short tags (wins / focus areas).

    Empty tags are dropped; each remaining tag is cut to MAX_TAG_LENGTH.

    Raises:
        InvalidInputError: more than max_count non-empty tags.
    """
    cleaned = [t for t in (filter_text(tag, MAX_TAG_LENGTH) for tag in tags) if t]
    if len(cleaned) > max_count:
        raise InvalidInputError(f"Pick at most {max_count} {field.replace('_', ' ')}", field=field)
    return cleaned
