"""
Sanitization of free-text and email input.

Sanitization is lossy: unwanted content is deleted rather than rejected.
Rejection of unsafe content is the validator's job.
"""
import logging
import re
from typing import Any, Dict, Optional

from nps_survey.interfaces.guardrails.guardrails import InputGuardrail

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_ENTITY_RE = re.compile(r"&[^;]+;")
# C0 and C1 control ranges, DEL included
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")

_UNSAFE_PATTERNS = [
    re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<[^>]+>", re.IGNORECASE | re.DOTALL),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
]
_PUNCTUATION_RE = re.compile(r"[&\"']")


def sanitize_text(text: Optional[str]) -> str:
    """Remove tags, entities and control characters, then trim.

    Never raises; empty or missing input gives an empty string.
    """
    if not text:
        return ""

    sanitized = _TAG_RE.sub("", text)
    sanitized = _ENTITY_RE.sub("", sanitized)
    sanitized = _CONTROL_RE.sub("", sanitized)
    return sanitized.strip()


def sanitize_email(email: Optional[str]) -> Optional[str]:
    """Trim and lower-case an email. Performs no validation."""
    if not email:
        return None
    return email.strip().lower()


def is_safe_text(text: Optional[str], strict: bool = True) -> bool:
    """Check text for markup, script URLs and inline event handlers.

    Args:
        text: Text to check
        strict: Also reject ampersands and quote characters

    Returns:
        True when none of the unsafe patterns match
    """
    if not text:
        return True

    if any(pattern.search(text) for pattern in _UNSAFE_PATTERNS):
        return False

    if strict and _PUNCTUATION_RE.search(text):
        return False

    return True


class MarkupSanitizer(InputGuardrail):
    """Guardrail that strips markup and control characters from comments."""

    def __init__(self, config: Dict[str, Any] = None):
        super().__init__(config)

    async def process(self, text: str) -> str:
        cleaned = sanitize_text(text)
        if cleaned != (text or ""):
            logger.debug(
                f"MarkupSanitizer removed {len(text or '') - len(cleaned)} characters."
            )
        return cleaned
