import mongomock
import pytest

from database import ensure_indexes


@pytest.fixture
def mongo():
    database = mongomock.MongoClient()["delivery_test"]
    ensure_indexes(database)
    return database
