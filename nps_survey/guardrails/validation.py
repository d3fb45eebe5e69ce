"""
Structural validation of survey submissions.

All rules are evaluated so that every violation is reported together,
keyed by the wire field name.
"""
import re
from typing import Optional

from nps_survey.domains import (
    MAX_COMMENT_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_RATING,
    MIN_RATING,
    SurveyRequest,
    ValidationResult,
)
from nps_survey.guardrails.sanitizer import is_safe_text, sanitize_email

RATING_FIELD = "likelihoodToRecommend"
COMMENTS_FIELD = "comments"
EMAIL_FIELD = "email"

RATING_MESSAGE = "Likelihood to recommend must be between 0 and 10."
COMMENT_LENGTH_MESSAGE = "Comments must not exceed 1000 characters."
COMMENT_UNSAFE_MESSAGE = "Comments contain invalid characters."
EMAIL_LENGTH_MESSAGE = "Email must not exceed 255 characters."
EMAIL_SHAPE_MESSAGE = "Email must be a valid email address."
EMAIL_FORMAT_MESSAGE = "Email format is invalid."

_EMAIL_RE = re.compile(r"^([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})$")


def has_email_shape(email: str) -> bool:
    """Loose check: a single '@' that is neither first nor last."""
    at = email.find("@")
    return at > 0 and at == email.rfind("@") and at != len(email) - 1


def matches_email_format(email: str) -> bool:
    """Strict check on the allowed characters, dots and top-level label."""
    match = _EMAIL_RE.match(email)
    if not match:
        return False
    local, domain = match.groups()
    return ".." not in local and ".." not in domain


class SurveyValidator:
    """Validator for survey submissions.

    Comments are checked in their raw form; the email is checked after
    trimming and lower-casing.
    """

    def __init__(self, strict_comment_characters: bool = True):
        """Initialize the validator.

        Args:
            strict_comment_characters: Reject ampersands and quote characters
                in comments in addition to markup
        """
        self.strict_comment_characters = strict_comment_characters

    def validate(self, request: SurveyRequest) -> ValidationResult:
        result = ValidationResult()

        rating = request.likelihood_to_recommend
        if isinstance(rating, bool) or not isinstance(rating, int) \
                or not MIN_RATING <= rating <= MAX_RATING:
            result.add_error(RATING_FIELD, RATING_MESSAGE)

        self._validate_comments(request.comments, result)
        self._validate_email(request.email, result)

        return result

    def _validate_comments(self, comments: Optional[str], result: ValidationResult) -> None:
        if comments is None:
            return
        if len(comments) > MAX_COMMENT_LENGTH:
            result.add_error(COMMENTS_FIELD, COMMENT_LENGTH_MESSAGE)
        if not is_safe_text(comments, strict=self.strict_comment_characters):
            result.add_error(COMMENTS_FIELD, COMMENT_UNSAFE_MESSAGE)

    def _validate_email(self, email: Optional[str], result: ValidationResult) -> None:
        normalized = sanitize_email(email)
        if not normalized:
            return

        failed = False
        if len(normalized) > MAX_EMAIL_LENGTH:
            result.add_error(EMAIL_FIELD, EMAIL_LENGTH_MESSAGE)
            failed = True
        if not has_email_shape(normalized):
            result.add_error(EMAIL_FIELD, EMAIL_SHAPE_MESSAGE)
            failed = True
        if failed or not matches_email_format(normalized):
            result.add_error(EMAIL_FIELD, EMAIL_FORMAT_MESSAGE)
