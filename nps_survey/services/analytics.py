"""
Survey analytics service implementation.

Every read is computed from the live record set; nothing is cached.
"""
from typing import Dict

from nps_survey.domains import NpsBreakdown
from nps_survey.interfaces.repositories import SurveyRepository
from nps_survey.interfaces.services import AnalyticsService as AnalyticsServiceInterface
from nps_survey.services.nps import calculate_nps, nps_breakdown

__all__ = ["AnalyticsService"]


class AnalyticsService(AnalyticsServiceInterface):
    """Service for NPS, average and distribution reads."""

    def __init__(self, survey_repository: SurveyRepository):
        """Initialize the analytics service.

        Args:
            survey_repository: Repository the aggregates are read from
        """
        self.survey_repository = survey_repository

    def get_nps(self) -> float:
        return calculate_nps(self.survey_repository.all_ratings())

    def get_average(self) -> float:
        return round(self.survey_repository.average_rating(), 2)

    def get_distribution(self) -> Dict[int, int]:
        return self.survey_repository.rating_distribution()

    def get_nps_breakdown(self) -> NpsBreakdown:
        return nps_breakdown(self.survey_repository.all_ratings())
