"""
Tests for the MongoDB survey repository.

Storage-level behavior runs against mongomock; failure handling uses a
mocked adapter.
"""
import pytest
import mongomock
from unittest.mock import Mock
from pymongo.errors import PyMongoError

from nps_survey.adapters.mongodb_adapter import MongoDBAdapter
from nps_survey.domains import PersistenceError, SurveyRecord
from nps_survey.repositories.mongo_survey import MongoSurveyRepository


@pytest.fixture
def mongo_adapter():
    """Create an adapter backed by mongomock."""
    adapter = MongoDBAdapter(connection_string="mongodb://localhost:27017", database_name="test_db")
    adapter.client = mongomock.MongoClient()
    adapter.db = adapter.client["test_db"]
    return adapter


@pytest.fixture
def repository(mongo_adapter):
    """Create a repository over the mongomock adapter."""
    return MongoSurveyRepository(mongo_adapter)


class PartialBatchAdapter(MongoDBAdapter):
    """Adapter whose batch write fails after storing the first two documents."""

    def insert_many(self, collection, documents):
        for document in documents[:2]:
            self.db[collection].insert_one(document)
        raise PyMongoError("connection lost mid-batch")


@pytest.fixture
def partial_batch_adapter():
    """Create a failing batch adapter backed by mongomock."""
    adapter = PartialBatchAdapter(connection_string="mongodb://localhost:27017", database_name="test_db")
    adapter.client = mongomock.MongoClient()
    adapter.db = adapter.client["test_db"]
    return adapter


@pytest.fixture
def mock_db_adapter():
    """Create a mock database adapter."""
    adapter = Mock()
    adapter.create_collection = Mock()
    adapter.create_index = Mock()
    adapter.insert_one = Mock()
    adapter.insert_many = Mock()
    adapter.find = Mock()
    adapter.aggregate = Mock()
    adapter.delete_all = Mock()
    adapter.count_documents = Mock()
    return adapter


def store_ratings(repository, ratings):
    return [repository.append(SurveyRecord(rating=r)) for r in ratings]


class TestMongoSurveyRepository:
    """Tests for the MongoSurveyRepository implementation."""

    def test_init(self, mock_db_adapter):
        """Test repository initialization."""
        MongoSurveyRepository(mock_db_adapter)

        mock_db_adapter.create_collection.assert_called_once_with("surveys")
        assert mock_db_adapter.create_index.call_count == 2
        mock_db_adapter.create_index.assert_any_call("surveys", [("created_at", -1)])
        mock_db_adapter.create_index.assert_any_call("surveys", [("rating", 1)])

    def test_append_assigns_id_and_timestamp(self, repository, mongo_adapter):
        """Test that append assigns a fresh id and creation time."""
        record = SurveyRecord(id="caller-id", rating=8, comment="ok", email="a@b.co")

        stored = repository.append(record)

        assert stored.id and stored.id != "caller-id"
        assert stored.created_at.tzinfo is not None
        assert stored.rating == 8
        doc = mongo_adapter.db["surveys"].find_one({"_id": stored.id})
        assert doc["rating"] == 8
        assert doc["comment"] == "ok"
        assert doc["email"] == "a@b.co"
        assert "id" not in doc

    def test_append_does_not_mutate_input(self, repository):
        """The caller's record is left unchanged."""
        record = SurveyRecord(rating=3)
        repository.append(record)
        assert record.id == ""

    def test_submitted_rating_appears_once(self, repository):
        """A stored rating is included exactly once."""
        store_ratings(repository, [4, 10])
        repository.append(SurveyRecord(rating=7))

        assert sorted(repository.all_ratings()) == [4, 7, 10]
        assert repository.all_ratings().count(7) == 1

    def test_empty_store(self, repository):
        """Aggregates over no records."""
        assert repository.all_ratings() == []
        assert repository.average_rating() == 0.0
        assert repository.rating_distribution() == {}
        assert repository.count() == 0

    def test_average_rating(self, repository):
        """Test the average over stored ratings."""
        store_ratings(repository, [10, 9, 8, 7, 6, 5])
        assert repository.average_rating() == pytest.approx(7.5)

    def test_rating_distribution_omits_zero_counts(self, repository):
        """Only ratings that occur appear in the distribution."""
        store_ratings(repository, [10, 10, 3])
        assert repository.rating_distribution() == {3: 1, 10: 2}

    def test_distribution_read_is_repeatable(self, repository):
        """Two reads without writes in between agree."""
        store_ratings(repository, [1, 2, 2])
        assert repository.rating_distribution() == repository.rating_distribution()

    def test_reset_all(self, repository):
        """Test bulk deletion."""
        store_ratings(repository, [1, 2, 3])

        assert repository.reset_all() == 3
        assert repository.count() == 0
        assert repository.all_ratings() == []

    def test_append_many(self, repository):
        """A batch is stored with fresh ids, in input order."""
        stored = repository.append_many([SurveyRecord(rating=r) for r in (10, 0, 7)])

        assert [record.rating for record in stored] == [10, 0, 7]
        assert len({record.id for record in stored}) == 3
        assert all(record.id for record in stored)
        assert sorted(repository.all_ratings()) == [0, 7, 10]

    def test_append_many_empty(self, repository):
        """An empty batch writes nothing."""
        assert repository.append_many([]) == []
        assert repository.count() == 0

    def test_append_many_failure_leaves_nothing(self, partial_batch_adapter):
        """Records of a failed batch are not left behind."""
        repository = MongoSurveyRepository(partial_batch_adapter)
        repository.append(SurveyRecord(rating=9))

        with pytest.raises(PersistenceError) as excinfo:
            repository.append_many([SurveyRecord(rating=r) for r in range(5)])

        assert "mid-batch" not in str(excinfo.value)
        assert repository.count() == 1
        assert repository.all_ratings() == [9]

    def test_append_many_cleanup_failure(self, mock_db_adapter):
        """A failing cleanup still surfaces the write error."""
        mock_db_adapter.insert_many.side_effect = PyMongoError("boom")
        mock_db_adapter.delete_all.side_effect = PyMongoError("still down")
        repository = MongoSurveyRepository(mock_db_adapter)

        with pytest.raises(PersistenceError):
            repository.append_many([SurveyRecord(rating=5)])

        ids = mock_db_adapter.delete_all.call_args[0][1]["_id"]["$in"]
        assert len(ids) == 1

    def test_append_failure_raises_persistence_error(self, mock_db_adapter):
        """Storage exceptions are translated and nothing leaks."""
        mock_db_adapter.insert_one.side_effect = PyMongoError("disk full on shard-7")
        repository = MongoSurveyRepository(mock_db_adapter)

        with pytest.raises(PersistenceError) as excinfo:
            repository.append(SurveyRecord(rating=5))

        assert "shard-7" not in str(excinfo.value)

    @pytest.mark.parametrize("method,adapter_call", [
        ("all_ratings", "find"),
        ("average_rating", "aggregate"),
        ("rating_distribution", "aggregate"),
        ("count", "count_documents"),
        ("reset_all", "delete_all"),
    ])
    def test_read_failures_raise_persistence_error(self, mock_db_adapter, method, adapter_call):
        """Every storage call translates driver errors."""
        getattr(mock_db_adapter, adapter_call).side_effect = PyMongoError("boom")
        repository = MongoSurveyRepository(mock_db_adapter)

        with pytest.raises(PersistenceError):
            getattr(repository, method)()

    def test_distribution_ignores_null_groups(self, mock_db_adapter):
        """Groups without a rating are skipped."""
        mock_db_adapter.aggregate.return_value = [
            {"_id": None, "count": 2},
            {"_id": 9, "count": 1},
        ]
        repository = MongoSurveyRepository(mock_db_adapter)

        assert repository.rating_distribution() == {9: 1}
