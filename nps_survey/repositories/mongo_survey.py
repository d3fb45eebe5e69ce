"""
MongoDB implementation of the survey repository.

This repository appends survey records and computes the raw aggregates
(ratings, average, distribution) that analytics are derived from.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List

from pymongo.errors import PyMongoError

from nps_survey.domains import PersistenceError, SurveyRecord
from nps_survey.interfaces.providers import DataStorageProvider
from nps_survey.interfaces.repositories import SurveyRepository

__all__ = ["MongoSurveyRepository"]

logger = logging.getLogger(__name__)


class MongoSurveyRepository(SurveyRepository):
    """MongoDB implementation of SurveyRepository."""

    def __init__(self, db_adapter: DataStorageProvider, collection: str = "surveys"):
        """Initialize the survey repository.

        Args:
            db_adapter: MongoDB adapter
            collection: Collection holding survey records
        """
        self.db = db_adapter
        self.collection = collection

        # Ensure collections exist
        self.db.create_collection(self.collection)

        # Create indexes
        self.db.create_index(self.collection, [("created_at", -1)])
        self.db.create_index(self.collection, [("rating", 1)])

    def append(self, record: SurveyRecord) -> SurveyRecord:
        """Store a survey record.

        A fresh id and creation time are always assigned here; values set
        by the caller are ignored.

        Args:
            record: Record to store

        Returns:
            The stored record
        """
        stored = record.model_copy(update={
            "id": str(uuid.uuid4()),
            "created_at": datetime.now(timezone.utc),
        })

        document = stored.model_dump(exclude={"id"})
        document["_id"] = stored.id

        try:
            self.db.insert_one(self.collection, document)
        except PyMongoError as e:
            logger.error(f"Failed to store survey record {stored.id}: {e}")
            raise PersistenceError("Unable to store survey response.") from e

        logger.info(f"Stored survey record {stored.id} with rating {stored.rating}")
        return stored

    def append_many(self, records: List[SurveyRecord]) -> List[SurveyRecord]:
        """Store a batch of survey records in one write.

        If the write fails, any records of the batch that did land are
        deleted again before the error is raised.

        Args:
            records: Records to store

        Returns:
            The stored records, in input order
        """
        now = datetime.now(timezone.utc)
        stored = [
            record.model_copy(update={"id": str(uuid.uuid4()), "created_at": now})
            for record in records
        ]
        if not stored:
            return stored

        documents = []
        for record in stored:
            document = record.model_dump(exclude={"id"})
            document["_id"] = record.id
            documents.append(document)

        try:
            self.db.insert_many(self.collection, documents)
        except PyMongoError as e:
            logger.error(f"Failed to store batch of {len(stored)} survey records: {e}")
            self._discard([record.id for record in stored])
            raise PersistenceError("Unable to store survey responses.") from e

        logger.info(f"Stored batch of {len(stored)} survey records")
        return stored

    def _discard(self, ids: List[str]) -> None:
        try:
            removed = self.db.delete_all(self.collection, {"_id": {"$in": ids}})
        except PyMongoError as e:
            logger.error(f"Failed to remove partially stored batch: {e}")
            return
        if removed:
            logger.warning(f"Removed {removed} records of a failed batch")

    def all_ratings(self) -> List[int]:
        """Get every stored rating.

        Returns:
            One rating per record
        """
        try:
            docs = self.db.find(self.collection, {})
        except PyMongoError as e:
            logger.error(f"Failed to read survey ratings: {e}")
            raise PersistenceError("Unable to read survey responses.") from e

        return [int(doc["rating"]) for doc in docs if doc.get("rating") is not None]

    def average_rating(self) -> float:
        """Calculate the average rating.

        Returns:
            Mean rating, 0.0 when there are no records
        """
        pipeline = [
            {
                "$group": {
                    "_id": None,
                    "avg_rating": {"$avg": "$rating"},
                    "count": {"$sum": 1}
                }
            }
        ]

        result = self._aggregate(pipeline)

        if result and result[0].get("avg_rating") is not None:
            return float(result[0]["avg_rating"])

        return 0.0

    def rating_distribution(self) -> Dict[int, int]:
        """Get the distribution of ratings.

        Returns:
            Dictionary mapping ratings to counts; ratings with no records
            are omitted
        """
        pipeline = [
            {
                "$group": {
                    "_id": "$rating",
                    "count": {"$sum": 1}
                }
            }
        ]

        result = self._aggregate(pipeline)

        distribution = {}
        for item in result:
            rating = item.get("_id")
            count = item.get("count", 0)
            if rating is not None and count > 0:
                distribution[int(rating)] = count

        return dict(sorted(distribution.items()))

    def count(self) -> int:
        try:
            return self.db.count_documents(self.collection, {})
        except PyMongoError as e:
            logger.error(f"Failed to count survey records: {e}")
            raise PersistenceError("Unable to read survey responses.") from e

    def reset_all(self) -> int:
        """Delete every survey record.

        Returns:
            Number of records removed
        """
        try:
            deleted = self.db.delete_all(self.collection, {})
        except PyMongoError as e:
            logger.error(f"Failed to reset survey records: {e}")
            raise PersistenceError("Unable to reset survey responses.") from e

        logger.warning(f"Reset removed {deleted} survey records")
        return deleted

    def _aggregate(self, pipeline: List[Dict]) -> List[Dict]:
        try:
            return self.db.aggregate(self.collection, pipeline)
        except PyMongoError as e:
            logger.error(f"Survey aggregation failed: {e}")
            raise PersistenceError("Unable to read survey responses.") from e
