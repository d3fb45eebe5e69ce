"""
NPS Survey - customer satisfaction survey collection and analytics.

This package validates and stores "likelihood to recommend" survey
responses and serves Net Promoter Score, average rating and rating
distribution over HTTP, together with a retrying async client.
"""

# HTTP application
from nps_survey.api import create_app

# Factory for wiring storage and services
from nps_survey.factories.survey_factory import SurveyFactory, SurveyServices

# Client data layer
from nps_survey.client.survey_client import SurveyClient
from nps_survey.client.retry import RetryPolicy

# Pure helpers
from nps_survey.services.nps import calculate_nps, nps_breakdown
from nps_survey.guardrails.sanitizer import sanitize_email, sanitize_text
from nps_survey.guardrails.validation import SurveyValidator

# Package metadata
__all__ = [
    # Application
    "create_app",
    # Factories
    "SurveyFactory",
    "SurveyServices",
    # Client
    "SurveyClient",
    "RetryPolicy",
    # Helpers
    "calculate_nps",
    "nps_breakdown",
    "sanitize_email",
    "sanitize_text",
    "SurveyValidator",
]
