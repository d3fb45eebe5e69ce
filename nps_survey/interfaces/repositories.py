"""
Repository interfaces for data access.

These interfaces define the contracts for data access components,
allowing for different storage implementations without changing the
business logic.
"""
from abc import ABC, abstractmethod
from typing import Dict, List

from nps_survey.domains import SurveyRecord


class SurveyRepository(ABC):
    """Interface for survey record storage.

    Records are append-only: they are never updated, only added or
    bulk-cleared for test isolation.
    """

    @abstractmethod
    def append(self, record: SurveyRecord) -> SurveyRecord:
        """Persist a record, assigning its id and creation time.

        Raises:
            PersistenceError: If the underlying write fails
        """
        pass

    @abstractmethod
    def append_many(self, records: List[SurveyRecord]) -> List[SurveyRecord]:
        """Persist a batch of records; on failure none of them remain stored.

        Raises:
            PersistenceError: If the underlying write fails
        """
        pass

    @abstractmethod
    def all_ratings(self) -> List[int]:
        """Get one rating per stored record, in no guaranteed order."""
        pass

    @abstractmethod
    def average_rating(self) -> float:
        """Get the mean rating, 0 when there are no records."""
        pass

    @abstractmethod
    def rating_distribution(self) -> Dict[int, int]:
        """Get counts per rating, omitting ratings that never occur."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Get the number of stored records."""
        pass

    @abstractmethod
    def reset_all(self) -> int:
        """Delete every record and return how many were removed."""
        pass
