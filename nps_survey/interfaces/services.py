"""
Service interfaces for business logic components.

These interfaces define the contracts for the submission and analytics
services consumed by the HTTP API.
"""
from abc import ABC, abstractmethod
from typing import Dict, List

from nps_survey.domains import NpsBreakdown, SurveyCreated, SurveyRequest


class SubmissionService(ABC):
    """Interface for accepting survey submissions."""

    @abstractmethod
    async def submit(self, request: SurveyRequest) -> SurveyCreated:
        """Validate, sanitize and store a submission.

        Args:
            request: Raw submission payload

        Returns:
            Identifier of the stored record

        Raises:
            SurveyValidationError: If any field is invalid
            PersistenceError: If the record could not be stored
        """
        pass

    @abstractmethod
    async def seed(self, requests: List[SurveyRequest]) -> int:
        """Store a batch of submissions, all or nothing on validation."""
        pass

    @abstractmethod
    def reset(self) -> int:
        """Delete every stored record."""
        pass


class AnalyticsService(ABC):
    """Interface for on-demand survey analytics."""

    @abstractmethod
    def get_nps(self) -> float:
        """Get the Net Promoter Score over all records."""
        pass

    @abstractmethod
    def get_average(self) -> float:
        """Get the average rating rounded to 2 decimal places."""
        pass

    @abstractmethod
    def get_distribution(self) -> Dict[int, int]:
        """Get counts per rating."""
        pass

    @abstractmethod
    def get_nps_breakdown(self) -> NpsBreakdown:
        """Get promoter/passive/detractor counts with the score."""
        pass
