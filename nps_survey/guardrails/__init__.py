"""
Input guardrails: sanitization and validation of survey submissions.
"""

from nps_survey.guardrails.sanitizer import (
    MarkupSanitizer,
    is_safe_text,
    sanitize_email,
    sanitize_text,
)
from nps_survey.guardrails.validation import SurveyValidator

__all__ = [
    "MarkupSanitizer",
    "SurveyValidator",
    "is_safe_text",
    "sanitize_email",
    "sanitize_text",
]
