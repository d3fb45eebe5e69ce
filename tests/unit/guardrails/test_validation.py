"""
Tests for SurveyValidator.

Every rule is evaluated, so a single submission can carry errors for
several fields and several messages for one field.
"""
import pytest

from nps_survey.domains import SurveyRequest
from nps_survey.guardrails.validation import (
    COMMENT_LENGTH_MESSAGE,
    COMMENT_UNSAFE_MESSAGE,
    EMAIL_FORMAT_MESSAGE,
    EMAIL_LENGTH_MESSAGE,
    EMAIL_SHAPE_MESSAGE,
    RATING_MESSAGE,
    SurveyValidator,
    has_email_shape,
    matches_email_format,
)


@pytest.fixture
def validator():
    """Return a validator with strict comment rules."""
    return SurveyValidator()


@pytest.fixture
def lenient_validator():
    """Return a validator that admits quotes and ampersands."""
    return SurveyValidator(strict_comment_characters=False)


def make_request(rating=5, comments=None, email=None):
    return SurveyRequest(likelihood_to_recommend=rating, comments=comments, email=email)


# ---------------------
# Rating
# ---------------------

@pytest.mark.parametrize("rating", [0, 5, 10])
def test_valid_ratings(validator, rating):
    """Boundaries are inclusive."""
    result = validator.validate(make_request(rating=rating))
    assert result.valid is True
    assert result.field_errors == {}


@pytest.mark.parametrize("rating", [-1, 11, 15, True, False])
def test_invalid_ratings(validator, rating):
    """Out-of-range ratings are rejected with the rating message."""
    result = validator.validate(make_request(rating=rating))
    assert result.valid is False
    assert result.field_errors["likelihoodToRecommend"] == [RATING_MESSAGE]


# ---------------------
# Comments
# ---------------------

@pytest.mark.parametrize("comments", [None, "", "Valid comment", "x" * 1000])
def test_valid_comments(validator, comments):
    """Test comments that pass."""
    assert validator.validate(make_request(comments=comments)).valid is True


def test_comment_too_long(validator):
    """A 1001-character comment is rejected."""
    result = validator.validate(make_request(comments="x" * 1001))
    assert result.field_errors["comments"] == [COMMENT_LENGTH_MESSAGE]


@pytest.mark.parametrize("comments", [
    "<script>alert('xss')</script>",
    "Comment with <b>html</b> tags",
    "javascript:alert(1)",
    "onload=alert(1)",
])
def test_unsafe_comments(validator, comments):
    """Markup-like content is rejected."""
    result = validator.validate(make_request(comments=comments))
    assert result.valid is False
    assert COMMENT_UNSAFE_MESSAGE in result.field_errors["comments"]


def test_punctuation_rejected_when_strict(validator):
    """Quotes and ampersands are invalid characters in strict mode."""
    result = validator.validate(make_request(comments='Quote friendly "text" & partners'))
    assert result.field_errors["comments"] == [COMMENT_UNSAFE_MESSAGE]


def test_punctuation_allowed_when_lenient(lenient_validator):
    """Lenient mode admits quotes and ampersands but still rejects markup."""
    assert lenient_validator.validate(
        make_request(comments='Quote friendly "text" & partners')).valid is True
    assert lenient_validator.validate(
        make_request(comments="<b>bold</b>")).valid is False


def test_long_unsafe_comment_reports_both(validator):
    """Length and safety errors are reported together."""
    result = validator.validate(make_request(comments="<b>" + "x" * 1000))
    assert result.field_errors["comments"] == [COMMENT_LENGTH_MESSAGE, COMMENT_UNSAFE_MESSAGE]


# ---------------------
# Email
# ---------------------

@pytest.mark.parametrize("email", [
    None,
    "",
    "test@example.com",
    "user.name+tag@example.co.uk",
    "test.email@subdomain.example.com",
    " User@Example.COM ",
])
def test_valid_emails(validator, email):
    """Test addresses that pass."""
    assert validator.validate(make_request(email=email)).valid is True


@pytest.mark.parametrize("email", [
    "invalid-email",
    "test@",
    "@example.com",
    "a@b@example.com",
])
def test_emails_without_basic_shape(validator, email):
    """Addresses without a usable '@' get both the shape and format messages."""
    result = validator.validate(make_request(email=email))
    assert result.field_errors["email"] == [EMAIL_SHAPE_MESSAGE, EMAIL_FORMAT_MESSAGE]


@pytest.mark.parametrize("email", [
    "test..email@example.com",
    "test@example..com",
    "test@example",
    "test@example.c",
    "te st@example.com",
    "test!@example.com",
])
def test_emails_failing_strict_format(validator, email):
    """Addresses with the right shape but bad characters or dots."""
    result = validator.validate(make_request(email=email))
    assert result.field_errors["email"] == [EMAIL_FORMAT_MESSAGE]


def test_email_too_long(validator):
    """A well-formed but overlong address reports length and format."""
    email = "a" * 250 + "@example.com"
    result = validator.validate(make_request(email=email))
    assert result.field_errors["email"] == [EMAIL_LENGTH_MESSAGE, EMAIL_FORMAT_MESSAGE]


def test_email_helpers():
    """Test the shape and format helpers directly."""
    assert has_email_shape("a@b") is True
    assert has_email_shape("ab@") is False
    assert matches_email_format("a@b.io") is True
    assert matches_email_format("a@b") is False


# ---------------------
# Cumulative errors
# ---------------------

def test_all_fields_reported_together(validator):
    """No rule short-circuits the others."""
    result = validator.validate(make_request(
        rating=11,
        comments="<script>x</script>",
        email="invalid-email",
    ))

    assert result.valid is False
    assert set(result.field_errors) == {"likelihoodToRecommend", "comments", "email"}
